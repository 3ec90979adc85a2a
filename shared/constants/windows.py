class Windows:
    """Retention buckets the Storm control plane aggregates counters over."""

    ALL_TIME = ":all-time"
    LAST_TEN_MINS = "600"
    LAST_THREE_HOURS = "10800"
    LAST_DAY = "86400"
