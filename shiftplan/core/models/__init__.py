from shiftplan.core.models.user import User
from shiftplan.core.models.schedule import Schedule
from shiftplan.core.models.leave import Leave

__all__ = [
    "Leave",
    "Schedule",
    "User",
]
