from __future__ import annotations

class UserFacingError(Exception):
    """Base exception carrying user-presentable context."""

    def __init__(self, message: str, *, title: str, remediation: str | None = None) -> None:
        super().__init__(message)
        self.title = title
        self.remediation = remediation or ""


class CryptFailure(UserFacingError):
    """Password encryption or decryption failed inside a secret cipher."""

    def __init__(self, message: str, *, remediation: str | None = None) -> None:
        super().__init__(
            message,
            title="Password encryption error",
            remediation=remediation
            or "Re-enter the share password; stored key material may have changed.",
        )


class MissingCredentialsError(UserFacingError, ValueError):
    """Raised when a credential is requested from a path that carries none."""

    def __init__(self, message: str = "Connection path has no credentials") -> None:
        super().__init__(
            message,
            title="Missing credentials",
            remediation="Check has_credentials() before extracting the password.",
        )


class ConfigurationError(UserFacingError):
    pass


__all__ = [
    "UserFacingError",
    "CryptFailure",
    "MissingCredentialsError",
    "ConfigurationError",
]
