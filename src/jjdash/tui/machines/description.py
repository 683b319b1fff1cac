"""Description editor buffer."""

from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(frozen=True)
class DescriptionEditor:
    """Editor open on one change.

    ``loaded`` flips once the full description has arrived; until then the
    buffer is empty and saving is refused.
    """

    change_id: str
    short_id: str
    text: str
    loaded: bool

    @staticmethod
    def opening(change_id: str, short_id: str) -> DescriptionEditor:
        return DescriptionEditor(change_id=change_id, short_id=short_id, text="", loaded=False)

    def with_loaded_text(self, text: str) -> DescriptionEditor:
        return replace(self, text=text, loaded=True)

    def type_text(self, text: str) -> DescriptionEditor:
        return replace(self, text=self.text + text)

    def backspace(self) -> DescriptionEditor:
        return replace(self, text=self.text[:-1])
