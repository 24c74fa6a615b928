"""
Notification handler settings.

Read-only settings loaded from environment variables with the
NOTIFICATIONS_ prefix:
- NOTIFICATIONS_MONITOR_AUTHORIZATION (default: true)
- NOTIFICATIONS_AUTHORIZATION_OPTIONS (default: alert,badge,sound)
- NOTIFICATIONS_LOG_LEVEL (default: INFO)

IMPORTANT:
- Settings are immutable once loaded
- Invalid booleans fall back to the default
- Invalid option names raise ValueError at load time
"""

import logging
import os
from dataclasses import dataclass
from typing import FrozenSet, Mapping, Optional

from notification_handler.store.base import AuthorizationOption

logger = logging.getLogger(__name__)

ENV_PREFIX = "NOTIFICATIONS_"

DEFAULT_AUTHORIZATION_OPTIONS: FrozenSet[AuthorizationOption] = frozenset({
    AuthorizationOption.ALERT,
    AuthorizationOption.BADGE,
    AuthorizationOption.SOUND,
})


@dataclass(frozen=True)
class NotificationSettings:
    """
    Immutable notification handler settings.

    Attributes:
        monitor_authorization: Start the authorization watcher on startup
        authorization_options: Capabilities requested from the permission prompt
        log_level: Root level used by setup_logging() when none is passed
    """
    monitor_authorization: bool = True
    authorization_options: FrozenSet[AuthorizationOption] = DEFAULT_AUTHORIZATION_OPTIONS
    log_level: str = "INFO"

    def __post_init__(self):
        """Validate settings types."""
        if not isinstance(self.monitor_authorization, bool):
            raise ValueError(
                f"monitor_authorization must be boolean, got {type(self.monitor_authorization)}"
            )
        if not self.authorization_options:
            raise ValueError("authorization_options cannot be empty")


def env(key: str, default: str = "", environ: Optional[Mapping[str, str]] = None) -> str:
    """
    Get an environment variable with the NOTIFICATIONS_ prefix.

    Args:
        key: Variable name without prefix (e.g. "LOG_LEVEL")
        default: Value if the variable is not set
        environ: Mapping to read from (defaults to os.environ)

    Returns:
        Value of NOTIFICATIONS_<key>
    """
    source = os.environ if environ is None else environ
    return source.get(f"{ENV_PREFIX}{key}", default)


def _parse_bool(value: str, default: bool) -> bool:
    value = value.lower().strip()
    if value in ("true", "1", "yes", "on"):
        return True
    elif value in ("false", "0", "no", "off"):
        return False
    else:
        return default


def _parse_options(value: str) -> FrozenSet[AuthorizationOption]:
    names = [name.strip().lower() for name in value.split(",") if name.strip()]
    if not names:
        return DEFAULT_AUTHORIZATION_OPTIONS
    try:
        return frozenset(AuthorizationOption(name) for name in names)
    except ValueError:
        raise ValueError(
            f"Invalid {ENV_PREFIX}AUTHORIZATION_OPTIONS={value!r}. "
            f"Allowed: {', '.join(option.value for option in AuthorizationOption)}"
        )


def load_settings(environ: Optional[Mapping[str, str]] = None) -> NotificationSettings:
    """
    Build settings from environment variables.

    Args:
        environ: Mapping to read from (defaults to os.environ)

    Returns:
        NotificationSettings instance
    """
    settings = NotificationSettings(
        monitor_authorization=_parse_bool(
            env("MONITOR_AUTHORIZATION", environ=environ), default=True
        ),
        authorization_options=_parse_options(env("AUTHORIZATION_OPTIONS", environ=environ)),
        log_level=env("LOG_LEVEL", "INFO", environ=environ).upper(),
    )
    logger.debug(
        f"[SETTINGS] Loaded: monitor_authorization={settings.monitor_authorization}, "
        f"authorization_options={sorted(option.value for option in settings.authorization_options)}, "
        f"log_level={settings.log_level}"
    )
    return settings


_settings: Optional[NotificationSettings] = None


def get_settings() -> NotificationSettings:
    """
    Get settings loaded from os.environ (cached after the first call).

    Returns:
        NotificationSettings instance
    """
    global _settings

    if _settings is None:
        _settings = load_settings()

    return _settings
