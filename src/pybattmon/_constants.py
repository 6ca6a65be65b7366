"""Internal constants shared across the library."""

# ------------------------------------------------------------------
# Persisted-state keys
# ------------------------------------------------------------------

LAST_CHARGING_STATE_KEY = "LAST_CHARGING_STATE"
DAILY_UPTIME_KEY = "DAILY_UPTIME"
HISTORY_KEY = "BATTERY_STATS_HISTORY"
NOTIFIED_KEY_SUFFIX = "_NOTIFIED"

HIGH_TEMP_ALERT = "high_temp"

# ------------------------------------------------------------------
# Thresholds
# ------------------------------------------------------------------

HISTORY_CAPACITY = 200
HIGH_TEMP_THRESHOLD_C = 45.0
MS_PER_HOUR = 3_600_000

# ------------------------------------------------------------------
# Temperature model (°C)
# ------------------------------------------------------------------

BASELINE_TEMP_C = 25.0
CPU_LOAD_SPAN_C = 20.0
DEPLETION_SPAN_C = 10.0
UPTIME_C_PER_HOUR = 0.5

# ------------------------------------------------------------------
# Network
# ------------------------------------------------------------------

IP_LOOKUP_URL = "https://api.ipify.org?format=json"
IP_PLACEHOLDER = "DEVICE_IP"
USER_AGENT = "pybattmon"


def notified_key(alert_key: str) -> str:
    """Store key holding the last fired date for *alert_key* (``high_temp`` -> ``HIGH_TEMP_NOTIFIED``)."""
    return f"{alert_key.strip().upper()}{NOTIFIED_KEY_SUFFIX}"
