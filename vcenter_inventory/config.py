import os
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from dotenv import dotenv_values

from vcenter_inventory.errors import ConfigurationError

DEFAULT_BATCH_SIZE = 200
DEFAULT_RETRY_COUNT = 3
DEFAULT_RETRY_DELAY = 5.0
TIMESTAMP_FORMAT = "%Y-%m-%dT%H-%M-%S"


def env_port(default=443):
    return int(os.getenv("VCENTER_PORT", default))


def env_disable_ssl(default="True"):
    return os.getenv("VMWARE_DISABLE_SSL_VERIFICATION", default).lower() == "true"


@dataclass
class RunConfig:
    endpoint: str
    output_dir: Path
    credential_path: Path
    batch_size: int = DEFAULT_BATCH_SIZE
    retry_count: int = DEFAULT_RETRY_COUNT
    retry_delay: float = DEFAULT_RETRY_DELAY
    port: int = 443
    disable_ssl: bool = True
    workers: int = 1

    def validate(self):
        if not self.endpoint:
            raise ConfigurationError("An endpoint is required")
        if self.batch_size <= 0:
            raise ConfigurationError(f"Batch size must be greater than 0, got {self.batch_size}")
        if self.retry_count < 0:
            raise ConfigurationError(f"Retry count must not be negative, got {self.retry_count}")
        if self.retry_delay < 0:
            raise ConfigurationError(f"Retry delay must not be negative, got {self.retry_delay}")
        if self.workers <= 0:
            raise ConfigurationError(f"Worker count must be greater than 0, got {self.workers}")
        if not Path(self.credential_path).is_file():
            raise ConfigurationError(f"Credential file not found: {self.credential_path}")
        return self


@dataclass(frozen=True)
class Credentials:
    user: str
    password: str = field(repr=False)


def load_credentials(path):
    """Read VCENTER_USER / VCENTER_PASSWORD from a dotenv-format credential file."""
    path = Path(path)
    if not path.is_file():
        raise ConfigurationError(f"Credential file not found: {path}")
    try:
        values = dotenv_values(path)
    except OSError as e:
        raise ConfigurationError(f"Could not read credential file {path}: {e}") from e
    user = values.get("VCENTER_USER")
    password = values.get("VCENTER_PASSWORD")
    if not user or not password:
        raise ConfigurationError(f"Credential file {path} must define VCENTER_USER and VCENTER_PASSWORD")
    return Credentials(user=user, password=password)


@dataclass
class RunContext:
    """Per-run state shared by every stage of one pipeline invocation."""

    endpoint: str
    started_at: datetime
    timestamp: str
    run_dir: Path
    log_path: Path

    @classmethod
    def create(cls, output_dir, endpoint, now=None):
        started_at = now or datetime.now()
        timestamp = started_at.strftime(TIMESTAMP_FORMAT)
        run_dir = Path(output_dir) / timestamp
        try:
            run_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConfigurationError(f"Could not create run directory {run_dir}: {e}") from e
        return cls(
            endpoint=endpoint,
            started_at=started_at,
            timestamp=timestamp,
            run_dir=run_dir,
            log_path=run_dir / f"inventory_{timestamp}.log",
        )

    def artifact(self, name):
        return self.run_dir / name
