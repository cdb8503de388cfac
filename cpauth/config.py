"""Runtime configuration for the authentication service.

Defaults live in module constants; :meth:`Settings.from_env` overrides them
from ``CPAUTH_*`` environment variables.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Callable, Mapping, Optional

from .coordinator import AuthCoordinator
from .groups import GroupParameters, get_group
from .registry import UserRegistry
from .sessions import SessionStore

DEFAULT_GROUP_NAME = "i1024"
DEFAULT_SESSION_MAX_AGE: Optional[float] = None
DEFAULT_MAX_PENDING_SESSIONS: Optional[int] = None
DEFAULT_LOG_LEVEL = "INFO"

LOG_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s] %(message)s"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def _optional_number(
    raw: Optional[str], kind: Callable[[str], float], label: str
) -> Optional[float]:
    if raw is None or raw.strip() == "":
        return None
    try:
        value = kind(raw)
    except ValueError as exc:
        raise ValueError(f"{label} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ValueError(f"{label} must be positive")
    return value


def _flag(raw: Optional[str], label: str) -> bool:
    if raw is None:
        return False
    lowered = raw.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"{label} must be a boolean flag, got {raw!r}")


def _log_level(raw: str, label: str) -> str:
    level = raw.strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ValueError(f"{label} must be a logging level name, got {raw!r}")
    return level


@dataclass(frozen=True)
class Settings:
    group_name: str = DEFAULT_GROUP_NAME
    session_max_age: Optional[float] = DEFAULT_SESSION_MAX_AGE
    max_pending_sessions: Optional[int] = DEFAULT_MAX_PENDING_SESSIONS
    expose_error_codes: bool = False
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        settings = cls(
            group_name=env.get("CPAUTH_GROUP", DEFAULT_GROUP_NAME),
            session_max_age=_optional_number(
                env.get("CPAUTH_SESSION_MAX_AGE"), float, "CPAUTH_SESSION_MAX_AGE"
            ),
            max_pending_sessions=_optional_number(
                env.get("CPAUTH_MAX_PENDING_SESSIONS"), int, "CPAUTH_MAX_PENDING_SESSIONS"
            ),
            expose_error_codes=_flag(
                env.get("CPAUTH_EXPOSE_ERROR_CODES"), "CPAUTH_EXPOSE_ERROR_CODES"
            ),
            log_level=_log_level(
                env.get("CPAUTH_LOG_LEVEL", DEFAULT_LOG_LEVEL), "CPAUTH_LOG_LEVEL"
            ),
        )
        # fail at startup, not on the first request
        get_group(settings.group_name)
        if settings.max_pending_sessions is not None and settings.session_max_age is None:
            raise ValueError("CPAUTH_MAX_PENDING_SESSIONS requires CPAUTH_SESSION_MAX_AGE")
        return settings

    @property
    def params(self) -> GroupParameters:
        return get_group(self.group_name)

    def build_coordinator(self, registry: Optional[UserRegistry] = None) -> AuthCoordinator:
        params = self.params
        sessions = SessionStore(
            params,
            max_age=self.session_max_age,
            max_pending=self.max_pending_sessions,
        )
        return AuthCoordinator(params, registry=registry, sessions=sessions)


def configure_logging(level: str = DEFAULT_LOG_LEVEL) -> None:
    logging.basicConfig(format=LOG_FORMAT)
    # basicConfig leaves an already configured root logger alone
    logging.getLogger().setLevel(level.upper())


__all__ = [
    "DEFAULT_GROUP_NAME",
    "DEFAULT_LOG_LEVEL",
    "LOG_FORMAT",
    "Settings",
    "configure_logging",
]
