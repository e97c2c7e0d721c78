"""Internal constants shared across the library."""

REVOKE_URL_TEMPLATE = "https://api.home.nest.com/oauth2/access_tokens/{token}"
DEFAULT_REVOKE_TIMEOUT = 10.0

# ------------------------------------------------------------------
# Realtime store paths
# ------------------------------------------------------------------

STRUCTURES_PATH = "structures"
DEVICES_PATH = "devices"

# ------------------------------------------------------------------
# Lifecycle event names
# ------------------------------------------------------------------

EVENT_INITIALIZED = "initialized"
EVENT_AUTHENTICATED = "authenticated"
EVENT_UNAUTHENTICATED = "unauthenticated"


def device_collection_path(category: str) -> str:
    """Path of a device category collection, e.g. ``devices/thermostats``."""
    return f"{DEVICES_PATH}/{category}"


def device_record_path(category: str, device_id: str) -> str:
    """Path of a single device record."""
    return f"{DEVICES_PATH}/{category}/{device_id}"
