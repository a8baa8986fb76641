from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from smbpath.core.errors import ConfigurationError

CIPHER_BACKENDS = ("fernet", "dpapi")
DEFAULT_KEYRING_SERVICE = "smbpath"
DEFAULT_KEYRING_ENTRY = "fernet-key"


@dataclass(frozen=True, slots=True)
class CipherSettings:
    backend: str = "fernet"  # 'fernet' | 'dpapi'
    keyring_service: str = DEFAULT_KEYRING_SERVICE
    keyring_entry: str = DEFAULT_KEYRING_ENTRY
    # Explicit key override; bypasses the keyring when set
    fernet_key: Optional[str] = None

    def __repr__(self) -> str:
        key = "***" if self.fernet_key else None
        return (
            f"CipherSettings(backend={self.backend!r}, keyring_service={self.keyring_service!r}, "
            f"keyring_entry={self.keyring_entry!r}, fernet_key={key!r})"
        )


def load_settings(environ: Mapping[str, str] | None = None) -> CipherSettings:
    """Build settings from SMBPATH_* environment variables.

    Unset variables fall back to defaults; invalid values raise ConfigurationError.
    """
    env = os.environ if environ is None else environ

    backend = (env.get("SMBPATH_CIPHER_BACKEND") or "fernet").strip().lower()
    if backend not in CIPHER_BACKENDS:
        raise ConfigurationError(
            f"Unknown cipher backend: {backend}",
            title="Invalid configuration",
            remediation=f"Set SMBPATH_CIPHER_BACKEND to one of: {', '.join(CIPHER_BACKENDS)}.",
        )

    return CipherSettings(
        backend=backend,
        keyring_service=env.get("SMBPATH_KEYRING_SERVICE") or DEFAULT_KEYRING_SERVICE,
        keyring_entry=env.get("SMBPATH_KEYRING_ENTRY") or DEFAULT_KEYRING_ENTRY,
        fernet_key=env.get("SMBPATH_FERNET_KEY") or None,
    )


def load_log_level(environ: Mapping[str, str] | None = None) -> int:
    """Return the level named by SMBPATH_LOG_LEVEL, INFO when unset."""
    env = os.environ if environ is None else environ

    level_name = (env.get("SMBPATH_LOG_LEVEL") or "INFO").strip().upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        raise ConfigurationError(
            f"Unknown log level: {level_name}",
            title="Invalid configuration",
            remediation="Use DEBUG, INFO, WARNING, ERROR or CRITICAL.",
        )
    return level


__all__ = ["CipherSettings", "load_settings", "load_log_level", "CIPHER_BACKENDS"]
