"""
UI-agnostic prompt interface for user confirmations.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List


class UserPrompt(ABC):
    """Abstract interface for asking the user before destructive steps."""

    @abstractmethod
    def confirm_purge(self, branches: List[str], remote_name: str = "origin") -> bool:
        """
        Ask whether the listed local branches may be deleted.

        Args:
            branches: Local branch names whose remote counterpart is gone
            remote_name: Name of the remote that was pruned

        Returns:
            True if the branches should be deleted, False otherwise
        """
        pass


class NoOpPrompt(UserPrompt):
    """No-operation prompt that always declines."""

    def confirm_purge(self, branches: List[str], remote_name: str = "origin") -> bool:
        return False


class AssumeYesPrompt(UserPrompt):
    """Prompt that approves everything, for `-y` style flags."""

    def confirm_purge(self, branches: List[str], remote_name: str = "origin") -> bool:
        return True
