import os
import shlex
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional
from pydantic import ValidationError
from dotenv import dotenv_values

from .schemas import RestartSettings, RestartStrategy
from .errors import ConfigError

log = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path.home() / ".stack-restart"
DEFAULT_ENV_FILE = DEFAULT_CONFIG_DIR / ".env"

# Environment variable -> RestartSettings field
ENV_VARS = {
    "COMPOSE_FILE": "compose_file",
    "COMPOSE_COMMAND": "compose_command",
    "REQUIRE_MOUNT": "require_mount",
    "ROLLING": "strategy",
    "ONLY": "only",
    "EXCEPT": "exclude",
    "RUNNING_ONLY": "running_only",
    "FORCE_RECREATE": "force_recreate",
    "PULL": "refresh_images",
    "SCOPED_START": "scoped_start",
    "PRUNE": "prune",
    "WAIT_HEALTH": "wait_health",
    "WAIT_SECS": "wait_secs",
    "POLL_INTERVAL": "poll_interval",
    "DRY_RUN": "dry_run",
}

_BOOL_FIELDS = {"running_only", "force_recreate", "refresh_images", "scoped_start", "prune", "wait_health", "dry_run"}
_LIST_FIELDS = {"only", "exclude"}

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def split_csv(values) -> List[str]:
    """Flattens comma-separated tokens (a string or a list of strings), dropping blanks."""
    if values is None:
        return []
    if isinstance(values, str):
        values = [values]
    tokens = []
    for value in values:
        tokens.extend(token.strip() for token in value.split(","))
    return [token for token in tokens if token]


def parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ConfigError(f"{name} must be a boolean (true/false), got '{value}'")


def _coerce(name: str, field: str, value: str) -> Any:
    """Turns a raw environment string into the value RestartSettings expects."""
    if field == "strategy":
        return RestartStrategy.ROLLING if parse_bool(name, value) else RestartStrategy.FULL
    if field in _BOOL_FIELDS:
        return parse_bool(name, value)
    if field in _LIST_FIELDS:
        return split_csv(value)
    if field == "compose_command":
        return shlex.split(value)
    # Strings and numbers are validated by pydantic
    return value


def settings_from_mapping(values: Mapping[str, Optional[str]]) -> Dict[str, Any]:
    """Extracts the known settings from an env-style mapping."""
    resolved = {}
    for name, field in ENV_VARS.items():
        raw = values.get(name)
        if raw is None:
            continue
        resolved[field] = _coerce(name, field, raw)
    return resolved


def load_settings(
    env_path: Optional[Path] = DEFAULT_ENV_FILE,
    environ: Optional[Mapping[str, str]] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> RestartSettings:
    """
    Builds the settings for one invocation.

    Sources, lowest precedence first: model defaults, the env file,
    the process environment, then explicit command-line overrides.
    Overrides whose value is None were not passed and are ignored.
    """
    layered: Dict[str, Any] = {}

    if env_path is not None and env_path.exists():
        log.debug(f"Reading settings from {env_path}")
        layered.update(settings_from_mapping(dotenv_values(env_path)))

    layered.update(settings_from_mapping(os.environ if environ is None else environ))

    if overrides:
        layered.update({key: value for key, value in overrides.items() if value is not None})

    try:
        return RestartSettings(**layered)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings: {e}") from e


class Config:
    """Resolves RestartSettings for a command from the env file and environment it was created with."""

    def __init__(self, env_path: Optional[Path] = DEFAULT_ENV_FILE, environ: Optional[Mapping[str, str]] = None):
        self._env_path = env_path
        self._environ = dict(os.environ if environ is None else environ)

    @property
    def env_path(self) -> Optional[Path]:
        return self._env_path

    def resolve(self, **overrides) -> RestartSettings:
        """Layers command-line overrides on top of the env file and environment."""
        return load_settings(self._env_path, self._environ, overrides)
