"""Configuration loading for shiorictl."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import tomli

logger = logging.getLogger("shiorictl.config")


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"           # INFO or DEBUG
    output: str = "console"       # console, file, or both
    file: str = ""                # log file path
    rotate: bool = True           # enable rotation
    max_size_mb: int = 10         # max file size before rotation
    backup_count: int = 5         # rotated files to keep


@dataclass
class ServerConfig:
    url: str = ""
    username: str = ""
    password: str = ""


@dataclass
class HttpConfig:
    timeout: float = 30.0  # seconds per request
    verify: bool = True    # verify TLS certificates


@dataclass
class Config:
    server: ServerConfig = field(default_factory=ServerConfig)
    http: HttpConfig = field(default_factory=HttpConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(config_path: Path | None = None) -> Config:
    """Load configuration from TOML file, then apply environment overrides."""
    if config_path is None:
        # Look for config in standard locations
        candidates = [
            Path("config/config.toml"),
            Path.home() / ".config/shiorictl/config.toml",
        ]
        for candidate in candidates:
            if candidate.exists():
                config_path = candidate
                break

    config = Config()

    if config_path is not None and config_path.exists():
        with open(config_path, "rb") as f:
            data = tomli.load(f)
        logger.debug("Loaded config from %s", config_path)

        if "server" in data:
            srv = data["server"]
            config.server = ServerConfig(
                url=srv.get("url", ""),
                username=srv.get("username", ""),
                password=srv.get("password", ""),
            )

        if "http" in data:
            http = data["http"]
            config.http = HttpConfig(
                timeout=float(http.get("timeout", 30.0)),
                verify=http.get("verify", True),
            )

        if "logging" in data:
            log = data["logging"]
            config.logging = LoggingConfig(
                level=log.get("level", "INFO"),
                output=log.get("output", "console"),
                file=log.get("file", ""),
                rotate=log.get("rotate", True),
                max_size_mb=log.get("max_size_mb", 10),
                backup_count=log.get("backup_count", 5),
            )

    # Environment variable overrides (allows EnvironmentFile= usage)
    _env_overrides = [
        ("SHIORI_URL", "server", "url"),
        ("SHIORI_USERNAME", "server", "username"),
        ("SHIORI_PASSWORD", "server", "password"),
    ]
    for env_var, section, field_name in _env_overrides:
        val = os.environ.get(env_var)
        if val:
            setattr(getattr(config, section), field_name, val)

    timeout = os.environ.get("SHIORI_TIMEOUT")
    if timeout:
        try:
            config.http.timeout = float(timeout)
        except ValueError:
            logger.warning("Ignoring invalid SHIORI_TIMEOUT value: %r", timeout)

    return config
