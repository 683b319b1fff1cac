"""Clipboard access through pyperclip (xclip/xsel, pbcopy, ...)."""

from jjdash.gateway.clipboard.abc import Clipboard


class RealClipboard(Clipboard):
    def copy(self, text: str) -> bool:
        # Inline import: only the real clipboard needs pyperclip
        import pyperclip

        if not pyperclip.is_available():
            return False
        pyperclip.copy(text)
        return True
