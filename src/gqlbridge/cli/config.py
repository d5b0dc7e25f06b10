"""
Configuration loading for the gqlbridge language server.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from ..core.types import ENVIRONMENTS

CONFIG_FILE_NAME = "gqlbridge.yaml"
ENV_PREFIX = "GQLBRIDGE_"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class ServiceConfig:
    """Language server configuration."""
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "INFO"
    project_dir: Optional[str] = None
    default_env: str = "plain"
    cors_origins: list[str] = field(default_factory=list)
    schema_timeout: float = 30.0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ServiceConfig":
        """Create config from dictionary."""
        server = data.get("server", {}) or {}
        schema = data.get("schema", {}) or {}
        return cls(
            host=server.get("host", "127.0.0.1"),
            port=int(server.get("port", 8000)),
            log_level=str(data.get("log_level", "INFO")).upper(),
            project_dir=schema.get("project_dir"),
            default_env=data.get("default_env", "plain"),
            cors_origins=list(server.get("cors_origins", []) or []),
            schema_timeout=float(schema.get("timeout", 30.0)),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary for YAML serialization."""
        return {
            "server": {
                "host": self.host,
                "port": self.port,
                "cors_origins": self.cors_origins,
            },
            "schema": {
                "project_dir": self.project_dir,
                "timeout": self.schema_timeout,
            },
            "default_env": self.default_env,
            "log_level": self.log_level,
        }

    def save(self, path: Path | str = CONFIG_FILE_NAME) -> None:
        """Save configuration to YAML file."""
        path = Path(path)
        content = yaml.dump(self.to_dict(), default_flow_style=False, sort_keys=False)
        path.write_text(content)

    def apply_env(self, environ: Optional[dict[str, str]] = None) -> "ServiceConfig":
        """
        Override values from GQLBRIDGE_* environment variables.

        Supported: GQLBRIDGE_HOST, GQLBRIDGE_PORT, GQLBRIDGE_LOG_LEVEL,
        GQLBRIDGE_PROJECT_DIR, GQLBRIDGE_DEFAULT_ENV, GQLBRIDGE_CORS_ORIGINS
        (comma-separated).
        """
        environ = os.environ if environ is None else environ
        if f"{ENV_PREFIX}HOST" in environ:
            self.host = environ[f"{ENV_PREFIX}HOST"]
        if f"{ENV_PREFIX}PORT" in environ:
            self.port = int(environ[f"{ENV_PREFIX}PORT"])
        if f"{ENV_PREFIX}LOG_LEVEL" in environ:
            self.log_level = environ[f"{ENV_PREFIX}LOG_LEVEL"].upper()
        if f"{ENV_PREFIX}PROJECT_DIR" in environ:
            self.project_dir = environ[f"{ENV_PREFIX}PROJECT_DIR"] or None
        if f"{ENV_PREFIX}DEFAULT_ENV" in environ:
            self.default_env = environ[f"{ENV_PREFIX}DEFAULT_ENV"]
        if f"{ENV_PREFIX}CORS_ORIGINS" in environ:
            origins = environ[f"{ENV_PREFIX}CORS_ORIGINS"].split(",")
            self.cors_origins = [origin.strip() for origin in origins if origin.strip()]
        return self

    def validate(self) -> list[str]:
        """Return a list of configuration problems (empty if valid)."""
        errors = []
        if self.default_env not in ENVIRONMENTS:
            errors.append(f"default_env must be one of {', '.join(ENVIRONMENTS)}, got '{self.default_env}'")
        if self.log_level not in LOG_LEVELS:
            errors.append(f"log_level must be one of {', '.join(LOG_LEVELS)}, got '{self.log_level}'")
        if not 0 < self.port < 65536:
            errors.append(f"port must be between 1 and 65535, got {self.port}")
        return errors


def load_config(path: Path | str = CONFIG_FILE_NAME) -> ServiceConfig | None:
    """Load configuration from YAML file."""
    path = Path(path)
    if not path.exists():
        return None

    data = yaml.safe_load(path.read_text()) or {}
    return ServiceConfig.from_dict(data)
