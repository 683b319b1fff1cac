"""Create pull request form."""

from __future__ import annotations

from dataclasses import dataclass, replace

TITLE = 0
BODY = 1


@dataclass(frozen=True)
class PullRequestForm:
    """Inputs for a new pull request.

    Attributes:
        change_id: Change the pull request is opened from
        head_branch: Bookmark pushed as the head branch
        base_branch: Target branch
        title: Title buffer
        body: Body buffer
        focus: TITLE or BODY
        needs_move: True when the bookmark sits on an ancestor and must be moved first
    """

    change_id: str
    head_branch: str
    base_branch: str
    title: str
    body: str
    focus: int
    needs_move: bool

    def toggle_focus(self) -> PullRequestForm:
        return replace(self, focus=BODY if self.focus == TITLE else TITLE)

    def type_text(self, text: str) -> PullRequestForm:
        if self.focus == TITLE:
            return replace(self, title=self.title + text)
        return replace(self, body=self.body + text)

    def newline(self) -> PullRequestForm:
        """Enter inserts a line break in the body; the title stays single-line."""
        if self.focus == BODY:
            return replace(self, body=self.body + "\n")
        return self

    def backspace(self) -> PullRequestForm:
        if self.focus == TITLE:
            return replace(self, title=self.title[:-1])
        return replace(self, body=self.body[:-1])
