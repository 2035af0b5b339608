from workview.core.time.abc import Time
from workview.core.time.real import RealTime

__all__ = ["RealTime", "Time"]
