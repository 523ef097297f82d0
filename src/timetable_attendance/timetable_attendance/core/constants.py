"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

MIN_YEAR = 1
MAX_YEAR = 4
# Year marker given to students once they graduate.
GRADUATED_YEAR = 5

LAB_BATCHES = (1, 2)
NO_ROOM = "N/A"
LEISURE_SUBJECT = "Leisure"

# Percentage reported for a subject (or summary) with no classes held yet.
EMPTY_PERCENTAGE = 100.0
DEFAULT_ATTENDANCE_THRESHOLD = 75.0

DEFAULT_MARK_RETRIES = 3
