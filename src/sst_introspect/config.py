from pathlib import Path

import pydantic_settings
from pydantic import Field


class IntrospectConfig(pydantic_settings.BaseSettings):
    """Process-wide settings, fixed once at startup.

    Every field can be overridden with an ``SST_INTROSPECT_`` prefixed
    environment variable, e.g. ``SST_INTROSPECT_HEALTH_TIMEOUT=2``.
    """

    model_config = pydantic_settings.SettingsConfigDict(
        env_prefix="SST_INTROSPECT_",
        frozen=True,
    )

    working_dir: Path = Field(default_factory=Path.cwd)

    # seconds
    health_timeout: float = 1.0
    snapshot_timeout: float = 5.0

    default_collect_ms: int = 1000
    default_log_lines: int = 50
    resource_tail_lines: int = 500

    max_invocation_logs: int = 10
    recent_events_per_type: int = 5
    max_status_resources: int = 20

    log_level: str = "INFO"

    def with_working_dir(self, working_dir: Path | str | None) -> "IntrospectConfig":
        if working_dir is None:
            return self
        return self.model_copy(update={"working_dir": Path(working_dir)})
