"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

MAX_ADMINS = 2

DEFAULT_SESSION_DAYS = 7
DASHBOARD_WINDOW_DAYS = 7
UPCOMING_TASKS_LIMIT = 5
DUE_SOON_DAYS = 3

NOTIFICATION_LIMIT = 20
ATTENDANCE_PAGE_SIZE = 10
USERS_PAGE_SIZE = 6
TASK_STATS_TOP = 10

NPM_MIN_DIGITS = 8
NPM_MAX_DIGITS = 15
NAME_MIN_LENGTH = 3
PASSWORD_MIN_LENGTH = 8
PASSWORD_MIN_SCORE = 3
GENERATED_PASSWORD_LENGTH = 12
