"""Real time implementation using asyncio.sleep()."""

import asyncio

from workview.core.time.abc import Time


class RealTime(Time):
    """Production implementation using actual asyncio.sleep()."""

    async def sleep(self, seconds: float) -> None:
        """Sleep for specified number of seconds using asyncio.sleep().

        Args:
            seconds: Number of seconds to sleep
        """
        await asyncio.sleep(seconds)
