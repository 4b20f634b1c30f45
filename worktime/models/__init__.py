from worktime.models.company import Company
from worktime.models.edits import TimeEntryEdit, WorkSessionEdit
from worktime.models.invite import Invite
from worktime.models.legacy_migration import LegacyMigration
from worktime.models.time_entry import TimeEntry
from worktime.models.user import User
from worktime.models.work_break import Break
from worktime.models.work_session import WorkSession

__all__ = [
    "Break",
    "Company",
    "Invite",
    "LegacyMigration",
    "TimeEntry",
    "TimeEntryEdit",
    "User",
    "WorkSession",
    "WorkSessionEdit",
]
