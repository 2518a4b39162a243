# app/constants.py
# Fixed value domains shared by models, services and schemas

DAYS_OF_WEEK = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")

# Ordinal severity, lowest first
CRITICALITY_LEVELS = ("low", "medium", "high", "critical")

RULE_STATUSES = ("active", "inactive")

CAMERA_STATUSES = ("online", "offline")

ALERT_STATUSES = ("open", "acknowledged", "resolved")

# Allowed alert status transitions; resolved is terminal
ALERT_TRANSITIONS = {
    "open": {"acknowledged", "resolved"},
    "acknowledged": {"resolved"},
    "resolved": set(),
}

STATS_BUCKETS = ("hour", "day")
