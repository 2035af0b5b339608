"""Time operations abstraction for testing.

This module provides an ABC for the asynchronous sleep used by debounce and
polling timers, enabling fast tests that don't actually wait.
"""

from abc import ABC, abstractmethod


class Time(ABC):
    """Abstract time operations for dependency injection."""

    @abstractmethod
    async def sleep(self, seconds: float) -> None:
        """Suspend the current task for the specified number of seconds.

        Args:
            seconds: Number of seconds to sleep
        """
        ...
