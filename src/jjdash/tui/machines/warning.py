"""Warning shown before creating a pull request from undescribed changes."""

from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(frozen=True)
class UndescribedChange:
    change_id: str
    short_id: str


@dataclass(frozen=True)
class DescriptionWarning:
    """Changes without a description, with one of them selected."""

    changes: tuple[UndescribedChange, ...]
    selected: int = 0

    @property
    def current(self) -> UndescribedChange | None:
        if 0 <= self.selected < len(self.changes):
            return self.changes[self.selected]
        return None

    def move(self, delta: int) -> DescriptionWarning:
        if not self.changes:
            return self
        return replace(self, selected=max(0, min(len(self.changes) - 1, self.selected + delta)))
