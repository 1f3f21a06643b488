"""Internal constants shared across the library."""

USER_AGENT = "co2tracker/1"

# ------------------------------------------------------------------
# Scheduling (seconds)
# ------------------------------------------------------------------

UPDATE_INTERVAL = 5.0
SERVER_POLL_INTERVAL = 10.0
PERSIST_INTERVAL = 30.0
FETCH_TIMEOUT = 5.0

# ------------------------------------------------------------------
# Position filtering
# ------------------------------------------------------------------

STALE_POSITION_SECONDS = 120.0
MAX_JUMP_KM = 50.0
MIN_MOVE_KM = 0.01
CLEANUP_MAX_AGE_SECONDS = 3600.0

#: Mean Earth radius used by the haversine distance.
EARTH_RADIUS_KM = 6371.0

# ------------------------------------------------------------------
# Persisted fallback aggregate
# ------------------------------------------------------------------

STORAGE_KEY = "gaia_co2_tracker"
STORAGE_VERSION = 2
DEFAULT_STORAGE_FILENAME = "co2tracker.json"

DEFAULT_AUTHORITATIVE_URL = "http://localhost/co2data.json"
