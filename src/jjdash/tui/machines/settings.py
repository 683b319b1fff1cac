"""Multi-tab settings form."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from enum import Enum, auto

from jjdash.config import TICKET_PROVIDERS, DashConfig


class SettingsTab(Enum):
    GITHUB = auto()
    JIRA = auto()
    CODECKS = auto()
    ADVANCED = auto()


class FieldKind(Enum):
    TEXT = auto()
    SECRET = auto()
    NUMBER = auto()
    TOGGLE = auto()


@dataclass(frozen=True)
class SettingsField:
    """One input. ``key`` is the DashConfig attribute it edits."""

    key: str
    label: str
    kind: FieldKind


TAB_TITLES: dict[SettingsTab, str] = {
    SettingsTab.GITHUB: "GitHub",
    SettingsTab.JIRA: "Jira",
    SettingsTab.CODECKS: "Codecks",
    SettingsTab.ADVANCED: "Advanced",
}

TAB_FIELDS: dict[SettingsTab, tuple[SettingsField, ...]] = {
    SettingsTab.GITHUB: (
        SettingsField("github_token", "Token", FieldKind.SECRET),
        SettingsField("pr_limit", "PR limit", FieldKind.NUMBER),
        SettingsField("pr_refresh_interval", "PR refresh (seconds, 0 = off)", FieldKind.NUMBER),
    ),
    SettingsTab.JIRA: (
        SettingsField("jira_url", "URL", FieldKind.TEXT),
        SettingsField("jira_user", "User", FieldKind.TEXT),
        SettingsField("jira_token", "API token", FieldKind.SECRET),
        SettingsField("jira_excluded_statuses", "Hidden statuses", FieldKind.TEXT),
    ),
    SettingsTab.CODECKS: (
        SettingsField("codecks_subdomain", "Subdomain", FieldKind.TEXT),
        SettingsField("codecks_token", "Token", FieldKind.SECRET),
        SettingsField("codecks_project", "Project", FieldKind.TEXT),
        SettingsField("codecks_excluded_statuses", "Hidden statuses", FieldKind.TEXT),
    ),
    SettingsTab.ADVANCED: (
        SettingsField("ticket_provider", "Ticket provider (jira, codecks, github_issues)", FieldKind.TEXT),
        SettingsField("only_mine", "Only my PRs", FieldKind.TOGGLE),
        SettingsField("show_merged", "Show merged PRs", FieldKind.TOGGLE),
        SettingsField("show_closed", "Show closed PRs", FieldKind.TOGGLE),
        SettingsField("ticket_auto_in_progress", "Move tickets to In Progress", FieldKind.TOGGLE),
        SettingsField("sanitize_bookmarks", "Sanitize bookmark names", FieldKind.TOGGLE),
        SettingsField("github_issues_excluded_statuses", "Hidden GitHub issue statuses", FieldKind.TEXT),
    ),
}

_TABS = tuple(SettingsTab)


def _format(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


@dataclass(frozen=True)
class SettingsForm:
    """Field values as text, plus the focused tab and field."""

    values: Mapping[str, str]
    tab: SettingsTab
    focus: int

    @staticmethod
    def from_config(config: DashConfig) -> SettingsForm:
        values = {
            field.key: _format(getattr(config, field.key))
            for fields in TAB_FIELDS.values()
            for field in fields
        }
        return SettingsForm(values=values, tab=SettingsTab.GITHUB, focus=0)

    @property
    def fields(self) -> tuple[SettingsField, ...]:
        return TAB_FIELDS[self.tab]

    @property
    def focused_field(self) -> SettingsField:
        return self.fields[self.focus]

    @property
    def on_last_field(self) -> bool:
        return self.focus == len(self.fields) - 1

    def _switch_tab(self, delta: int) -> SettingsForm:
        position = (_TABS.index(self.tab) + delta) % len(_TABS)
        return replace(self, tab=_TABS[position], focus=0)

    def next_tab(self) -> SettingsForm:
        return self._switch_tab(1)

    def previous_tab(self) -> SettingsForm:
        return self._switch_tab(-1)

    def next_field(self) -> SettingsForm:
        return replace(self, focus=(self.focus + 1) % len(self.fields))

    def previous_field(self) -> SettingsForm:
        return replace(self, focus=(self.focus - 1) % len(self.fields))

    def submit(self) -> tuple[SettingsForm, bool]:
        """Advance focus, or report that the form should be persisted.

        Returns:
            (form, persist) where persist is True only on the last field of the tab
        """
        if self.on_last_field:
            return self, True
        return self.next_field(), False

    def _set(self, key: str, value: str) -> SettingsForm:
        values = dict(self.values)
        values[key] = value
        return replace(self, values=values)

    def type_text(self, text: str) -> SettingsForm:
        field = self.focused_field
        if field.kind == FieldKind.TOGGLE:
            return self
        if field.kind == FieldKind.NUMBER and not text.isdigit():
            return self
        return self._set(field.key, self.values.get(field.key, "") + text)

    def backspace(self) -> SettingsForm:
        field = self.focused_field
        current = self.values.get(field.key, "")
        if field.kind == FieldKind.TOGGLE or not current:
            return self
        return self._set(field.key, current[:-1])

    def toggle(self) -> SettingsForm:
        field = self.focused_field
        if field.kind != FieldKind.TOGGLE:
            return self
        flipped = "false" if self.values.get(field.key) == "true" else "true"
        return self._set(field.key, flipped)

    def to_config(self, base: DashConfig) -> DashConfig:
        """Apply the form to ``base``.

        Numbers that do not parse and unknown ticket providers keep the value
        from ``base``.
        """
        updates: dict[str, object] = {}
        for fields in TAB_FIELDS.values():
            for field in fields:
                raw = self.values.get(field.key, "").strip()
                if field.kind == FieldKind.TOGGLE:
                    updates[field.key] = raw == "true"
                elif field.kind == FieldKind.NUMBER:
                    if raw.isdigit():
                        updates[field.key] = int(raw)
                elif field.key == "ticket_provider":
                    if raw.lower() in TICKET_PROVIDERS:
                        updates[field.key] = raw.lower()
                else:
                    updates[field.key] = raw
        return replace(base, **updates)
