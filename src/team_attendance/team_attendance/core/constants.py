"""Constants and defaults.

Note: These are defaults only; the container passes the configured values into
the services so tests can override them.
"""

DEFAULT_SESSION_DAYS = 7
DEFAULT_HISTORY_LIMIT = 30
DEFAULT_CHECKIN_WINDOW_MINUTES = 30
DEFAULT_MAX_OCCURRENCES = 365

# Calendar dates are serialized at this hour so that a timezone shift of a few
# hours can never move them to a neighbouring day.
REFERENCE_HOUR = 12

ADHOC_OCCURRENCE_TITLE = "Ad-Hoc Check-In"
HOURS_PRECISION = 2
