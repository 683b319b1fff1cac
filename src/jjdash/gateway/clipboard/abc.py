"""Abstract base class for clipboard access."""

from abc import ABC, abstractmethod


class Clipboard(ABC):
    @abstractmethod
    def copy(self, text: str) -> bool:
        """Copy text to the clipboard.

        Returns:
            True if the copy succeeded, False if no clipboard is available
        """
        ...
