"""Create-or-move bookmark form.

The form has two exclusive sub-modes. In typing mode (``selected == -1``) the
name buffer takes text input; in browsing mode (``selected >= 0``) the cursor
walks the existing bookmarks and text input is ignored.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum, auto


class BookmarkAction(Enum):
    CREATE = auto()
    MOVE = auto()
    CREATE_FROM_MAIN = auto()


@dataclass(frozen=True)
class BookmarkSubmission:
    """What submitting the form would do.

    Attributes:
        action: Create on the target, move an existing bookmark, or branch from main
        name: Bookmark name, already sanitized when requested
        change_id: Target change, empty for CREATE_FROM_MAIN
    """

    action: BookmarkAction
    name: str
    change_id: str


@dataclass(frozen=True)
class BookmarkForm:
    """State of the bookmark view.

    Attributes:
        target_change_id: Change the bookmark goes on; None when started from a ticket
        target_short_id: Display id of the target change
        name: Text typed for a new bookmark
        existing: Sorted bookmarks that could be moved onto the target
        selected: Index into ``existing`` in browsing mode, -1 while typing
        ticket_key: Provider key of the ticket the form was opened from
        ticket_display_key: Display key of that ticket
        ticket_title: Summary of that ticket
    """

    target_change_id: str | None
    target_short_id: str
    name: str
    existing: tuple[str, ...]
    selected: int
    ticket_key: str = ""
    ticket_display_key: str = ""
    ticket_title: str = ""

    @staticmethod
    def for_change(
        change_id: str, short_id: str, all_bookmarks: list[str], on_target: tuple[str, ...]
    ) -> BookmarkForm:
        existing = tuple(sorted(set(all_bookmarks) - set(on_target)))
        return BookmarkForm(
            target_change_id=change_id,
            target_short_id=short_id,
            name="",
            existing=existing,
            selected=-1,
        )

    @staticmethod
    def for_ticket(ticket_key: str, display_key: str, title: str, name: str) -> BookmarkForm:
        return BookmarkForm(
            target_change_id=None,
            target_short_id="",
            name=name,
            existing=(),
            selected=-1,
            ticket_key=ticket_key,
            ticket_display_key=display_key,
            ticket_title=title,
        )

    @property
    def browsing(self) -> bool:
        return self.selected >= 0

    @property
    def from_ticket(self) -> bool:
        return self.target_change_id is None

    def toggle_mode(self) -> BookmarkForm:
        if self.browsing:
            return replace(self, selected=-1)
        if not self.existing:
            return self
        return replace(self, selected=0)

    def move(self, delta: int) -> BookmarkForm:
        """Move the browsing cursor; moving up past the first entry returns to typing."""
        if not self.browsing:
            if delta > 0 and self.existing:
                return replace(self, selected=0)
            return self
        selected = self.selected + delta
        if selected < 0:
            return replace(self, selected=-1)
        return replace(self, selected=min(selected, len(self.existing) - 1))

    def type_text(self, text: str) -> BookmarkForm:
        if self.browsing:
            return self
        return replace(self, name=self.name + text)

    def backspace(self) -> BookmarkForm:
        if self.browsing or not self.name:
            return self
        return replace(self, name=self.name[:-1])

    def resolve(self, name: str) -> BookmarkSubmission:
        """Describe the submission, using ``name`` for the typed bookmark."""
        if self.browsing:
            return BookmarkSubmission(
                action=BookmarkAction.MOVE,
                name=self.existing[self.selected],
                change_id=self.target_change_id or "",
            )
        if self.target_change_id is None:
            return BookmarkSubmission(action=BookmarkAction.CREATE_FROM_MAIN, name=name, change_id="")
        return BookmarkSubmission(action=BookmarkAction.CREATE, name=name, change_id=self.target_change_id)
