"""Fake clipboard for testing."""

from jjdash.gateway.clipboard.abc import Clipboard


class FakeClipboard(Clipboard):
    """Records copied text; ``available=False`` simulates a headless session."""

    def __init__(self, *, available: bool = True) -> None:
        self._available = available
        self._copied: list[str] = []

    def copy(self, text: str) -> bool:
        if not self._available:
            return False
        self._copied.append(text)
        return True

    @property
    def copied(self) -> list[str]:
        return list(self._copied)
