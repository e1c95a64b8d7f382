"""
Process configuration loaded once from the environment.
CLI flags may override individual values (see cli.py); the resulting Config is immutable and passed explicitly.
"""
import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional

DEFAULT_BASE_URL = "https://gitlab.com"
DEFAULT_TIMEOUT_MS = 20000
DEFAULT_MAX_RETRIES = 3
LOG_LEVELS = ("DEBUG", "INFO", "WARN", "WARNING", "ERROR")


class ConfigError(ValueError):
    """Raised when the environment does not describe a usable configuration."""


@dataclass(frozen=True)
class Config:
    gitlab_base_url: str
    gitlab_token: str
    request_timeout: float = DEFAULT_TIMEOUT_MS / 1000.0  # seconds
    max_retries: int = DEFAULT_MAX_RETRIES
    log_level: str = "INFO"
    log_payloads: bool = False

    def __repr__(self):
        return (
            f"Config(gitlab_base_url={self.gitlab_base_url!r}, gitlab_token='[REDACTED]', "
            f"request_timeout={self.request_timeout}, max_retries={self.max_retries}, "
            f"log_level={self.log_level!r}, log_payloads={self.log_payloads})"
        )

    def with_overrides(self, **changes) -> "Config":
        """Return a copy with the non-None overrides applied (CLI flags take precedence over env)."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


def _int_from_env(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"Invalid {key}: {raw!r}. Must be an integer.") from None


def load_config(environ: Optional[Mapping[str, str]] = None) -> Config:
    """
    Read and validate configuration from environment variables.

    GITLAB_TOKEN is required. REQUEST_TIMEOUT is given in milliseconds.
    """
    env = os.environ if environ is None else environ

    token = env.get("GITLAB_TOKEN")
    if not token:
        raise ConfigError(
            "GITLAB_TOKEN environment variable is required. "
            "Create a Personal Access Token with 'read_api' scope from GitLab."
        )

    log_level = (env.get("LOG_LEVEL") or "INFO").upper()
    if log_level not in LOG_LEVELS:
        raise ConfigError(f"Invalid LOG_LEVEL: {log_level}. Must be DEBUG, INFO, WARN, or ERROR.")

    timeout_ms = _int_from_env(env, "REQUEST_TIMEOUT", DEFAULT_TIMEOUT_MS)
    if timeout_ms <= 0:
        raise ConfigError(f"Invalid REQUEST_TIMEOUT: {timeout_ms}. Must be positive.")

    max_retries = _int_from_env(env, "MAX_RETRIES", DEFAULT_MAX_RETRIES)
    if max_retries < 1:
        raise ConfigError(f"Invalid MAX_RETRIES: {max_retries}. Must be at least 1.")

    return Config(
        gitlab_base_url=(env.get("GITLAB_BASE_URL") or DEFAULT_BASE_URL).rstrip("/"),
        gitlab_token=token,
        request_timeout=timeout_ms / 1000.0,
        max_retries=max_retries,
        log_level="WARNING" if log_level == "WARN" else log_level,
        log_payloads=env.get("LOG_PAYLOADS", "").lower() == "true",
    )


__all__ = ["Config", "ConfigError", "load_config"]
