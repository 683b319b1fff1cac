"""Rebase destination picker."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RebaseState:
    """Either Normal (``source == -1``) or picking a destination for a change.

    ``source_change_id`` identifies the change being rebased; ``source`` is its
    row in the current graph and follows it across reloads. While picking, list
    navigation moves ``destination`` and leaves the graph selection alone.
    """

    source_change_id: str
    source: int
    destination: int

    @staticmethod
    def initial() -> RebaseState:
        return RebaseState(source_change_id="", source=-1, destination=-1)

    @property
    def active(self) -> bool:
        return self.source >= 0

    def start(self, source: int, change_id: str) -> RebaseState:
        return RebaseState(source_change_id=change_id, source=source, destination=source)

    def move(self, delta: int, count: int) -> RebaseState:
        """Move the destination cursor, clamped to ``[0, count)``."""
        if not self.active or count == 0:
            return self
        destination = max(0, min(count - 1, self.destination + delta))
        return RebaseState(source_change_id=self.source_change_id, source=self.source, destination=destination)

    def reanchor(self, source: int, count: int) -> RebaseState:
        """Follow the source change into a reloaded graph.

        Args:
            source: Row of ``source_change_id`` in the new graph, -1 if it is gone
            count: Number of rows in the new graph

        Returns:
            The picker with both rows valid for the new graph, or Normal when the
            source change disappeared
        """
        if not self.active:
            return self
        if source < 0 or count == 0:
            return self.cancel()
        destination = max(0, min(count - 1, self.destination))
        return RebaseState(source_change_id=self.source_change_id, source=source, destination=destination)

    def cancel(self) -> RebaseState:
        return RebaseState.initial()
