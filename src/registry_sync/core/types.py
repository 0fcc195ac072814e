"""Core configuration and transport types."""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path


def default_concurrency() -> int:
    """Logical CPU count minus one, never below one."""
    return max(1, (os.cpu_count() or 1) - 1)


def default_docker_config() -> Path:
    """Location of the docker client configuration holding registry credentials."""
    config_dir = os.environ.get("DOCKER_CONFIG")
    if config_dir:
        return Path(config_dir) / "config.json"
    return Path.home() / ".docker" / "config.json"


@dataclass
class SyncConfig:
    """Settings for one synchronization run."""

    concurrency: int = field(default_factory=default_concurrency)
    dry_run: bool = False
    report_only: bool = False
    timeout: int = 30
    retries: int = 3
    retry_delay: float = 1.0
    docker_config: Path = field(default_factory=default_docker_config)
    docker_binary: str = "docker"

    def __post_init__(self) -> None:
        if self.concurrency < 1:
            raise ValueError(f"Concurrency must be at least 1, got {self.concurrency}")
        if self.retries < 0:
            raise ValueError(f"Retries must not be negative, got {self.retries}")


@dataclass
class RequestResult:
    """Response of a registry request, read fully before the connection is released."""

    status_code: int
    headers: Mapping[str, str]
    data: bytes
