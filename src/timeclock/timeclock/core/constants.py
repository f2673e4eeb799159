"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

REPORT_PAGE_SIZE = 10
REPORT_MONTH_OPTIONS = 12

RESYNC_INTERVAL_SECONDS = 60
TICK_INTERVAL_SECONDS = 1

OVERTIME_THRESHOLD_SECONDS = 8 * 3600

EMPTY_PLACEHOLDER = "—"

TIME_ENTRIES = "timeEntries"
LEAVE_REQUESTS = "leaveRequests"
