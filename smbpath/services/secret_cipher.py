"""
Secret ciphers for share passwords stored inside connection paths.

Ciphertext is always plain ASCII text without ':' or '@', so it can sit in the
credential zone of a path without changing how the path parses.

Backends:
- Fernet (cryptography) with key material kept in the OS keyring
- Windows DPAPI via pywin32
"""

from __future__ import annotations

import base64
import binascii
import logging
import threading
from typing import Optional

import keyring
from cryptography.fernet import Fernet, InvalidToken
from keyring.errors import KeyringError

from smbpath.core.errors import ConfigurationError, CryptFailure
from smbpath.lib.codec import SecretCipher
from smbpath.services.settings import CipherSettings, load_settings

logger = logging.getLogger(__name__)


class FernetCipher:
    """Symmetric encryption using the cryptography library."""

    def __init__(self, key: bytes | str) -> None:
        try:
            self._fernet = Fernet(key)
        except (ValueError, TypeError, binascii.Error) as exc:
            raise ConfigurationError(
                "Fernet key is malformed",
                title="Invalid configuration",
                remediation="Provide a 32-byte url-safe base64 key (Fernet.generate_key()).",
            ) from exc

    def encrypt(self, plaintext: str) -> str:
        try:
            data = plaintext.encode("utf-8")
        except UnicodeError as exc:
            raise CryptFailure("Failed to encrypt password: not valid UTF-8 text") from exc
        return self._fernet.encrypt(data).decode("ascii")

    def decrypt(self, ciphertext: str) -> str:
        try:
            return self._fernet.decrypt(ciphertext.encode("ascii")).decode("utf-8")
        except (InvalidToken, UnicodeError) as exc:
            raise CryptFailure("Failed to decrypt password: invalid or foreign token") from exc


class DpapiCipher:
    """Encrypt using Windows DPAPI, bound to the current user account."""

    def __init__(self) -> None:
        try:
            import win32crypt
        except ImportError as exc:
            raise ConfigurationError(
                "DPAPI backend is unavailable",
                title="Invalid configuration",
                remediation="Install pywin32 on Windows or use the 'fernet' backend.",
            ) from exc
        self._win32crypt = win32crypt

    def encrypt(self, plaintext: str) -> str:
        try:
            blob = self._win32crypt.CryptProtectData(
                plaintext.encode("utf-8"), None, None, None, None, 0
            )
        except Exception as exc:
            raise CryptFailure(f"Failed to encrypt password: {exc}") from exc
        return base64.urlsafe_b64encode(blob).decode("ascii")

    def decrypt(self, ciphertext: str) -> str:
        try:
            blob = base64.urlsafe_b64decode(ciphertext.encode("ascii"))
            return self._win32crypt.CryptUnprotectData(blob, None, None, None, 0)[1].decode("utf-8")
        except Exception as exc:
            raise CryptFailure(f"Failed to decrypt password: {exc}") from exc


def load_fernet_key(settings: CipherSettings) -> str:
    """Return the Fernet key, creating and storing one in the keyring on first use."""
    if settings.fernet_key:
        return settings.fernet_key

    try:
        key = keyring.get_password(settings.keyring_service, settings.keyring_entry)
        if key is None:
            key = Fernet.generate_key().decode("ascii")
            keyring.set_password(settings.keyring_service, settings.keyring_entry, key)
            logger.info(
                "Generated new password key in keyring service %s", settings.keyring_service
            )
    except KeyringError as exc:
        raise CryptFailure(
            f"Key material unavailable: {exc}",
            remediation="Unlock the system keyring or set SMBPATH_FERNET_KEY.",
        ) from exc
    return key


def build_cipher(settings: CipherSettings) -> SecretCipher:
    if settings.backend == "fernet":
        return FernetCipher(load_fernet_key(settings))
    if settings.backend == "dpapi":
        return DpapiCipher()
    raise ConfigurationError(
        f"Unknown cipher backend: {settings.backend}",
        title="Invalid configuration",
    )


# Global instance
_cipher: Optional[SecretCipher] = None
_cipher_lock = threading.Lock()


def get_cipher() -> SecretCipher:
    """Get the process-wide cipher, building it from the environment on first use"""
    global _cipher
    with _cipher_lock:
        if _cipher is None:
            settings = load_settings()
            _cipher = build_cipher(settings)
            logger.debug("Initialized %s password cipher", settings.backend)
        return _cipher


def reset_cipher() -> None:
    """Drop the cached cipher so the next call rebuilds it"""
    global _cipher
    with _cipher_lock:
        _cipher = None


__all__ = [
    "SecretCipher",
    "FernetCipher",
    "DpapiCipher",
    "load_fernet_key",
    "build_cipher",
    "get_cipher",
    "reset_cipher",
]
