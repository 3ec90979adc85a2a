from typing import Any, Optional

from pydantic_settings import SettingsConfigDict

from shared.config import BaseServiceConfig
from shared.logging.json import SensitiveDataFilter


class Settings(BaseServiceConfig):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Target topology
    topology_name: str = "benchmark"

    # Storm UI REST endpoint (control plane)
    storm_ui_url: str = "http://nimbus:8080"
    storm_ui_timeout_seconds: float = 10.0

    # Collection cadence
    metrics_poll_interval_ms: int = 30 * 1000  # 30 secs
    metrics_total_time_ms: int = 5 * 60 * 1000  # 5 mins

    # Output
    metrics_path: str = "/root/"
    metrics_message_size: int = 100  # bytes

    # Collector self-metrics endpoint; disabled unless set
    collector_metrics_port: Optional[int] = None

    otel_service_name: str = "collector"

    def storm_config(self) -> dict[str, Any]:
        """Effective configuration as written to the run's .conf snapshot."""
        redactor = SensitiveDataFilter(self.app_log_redaction_patterns)
        return dict(sorted(redactor.filter(self.model_dump()).items()))


settings = Settings()
