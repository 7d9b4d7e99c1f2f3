"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

# Permissions that grant administrator access to every student.
ADMIN_PERMISSIONS = frozenset({"admin:*", "*:*"})

# Elevated read permission: full visibility of location data, no mutations.
LOCATION_READ_PERMISSION = "location:read"

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 50

RFID_TAG_MIN_LENGTH = 8
RFID_TAG_MAX_LENGTH = 64
