class Streams:
    """Storm stream and component naming conventions."""

    DEFAULT = "default"
    # Trident spouts emit on a dedicated batch stream
    BATCH = "batch"

    SYSTEM_PREFIX = "__"

    @classmethod
    def is_source_stream(cls, stream: str) -> bool:
        """Streams whose spout counters and latencies are tracked."""
        return stream in (cls.DEFAULT, cls.BATCH)

    @classmethod
    def is_system_component(cls, component_id: str) -> bool:
        """Check if component is internal (acker, system, metrics consumers)."""
        return component_id.startswith(cls.SYSTEM_PREFIX)
