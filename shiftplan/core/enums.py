from enum import Enum


class UserRole(str, Enum):
    MANAGER = "manager"
    ASSOCIATE = "associate"


class LeaveStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class LeaveType(str, Enum):
    CASUAL = "Casual Leave"
    SICK = "Sick Leave"
    ANNUAL = "Annual Leave"
    OPTIONAL_OFF = "Optional Off"
    HALF_DAY_CASUAL = "HD CL"
    HALF_DAY_SICK = "HD SL"
    SHIFT_OVERTIME = "Pre/Post Shift OT"
    SIXTH_DAY_OVERTIME = "6th Day OT"


class DayStatusType(str, Enum):
    UNRESOLVED = "unresolved"
    WEEK_OFF = "week-off"
    LEAVE_APPROVED = "leave-approved"
    LEAVE_PENDING = "leave-pending"
    WORKING = "working"


# Index matches the weekday numbering stored on schedules: 0=Sunday .. 6=Saturday
WEEKDAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]
