from __future__ import annotations

import base64
from typing import Iterator

import pytest

from smbpath.core.errors import CryptFailure
from smbpath.services import secret_cipher


class FakeCipher:
    """Reversible in-memory cipher that records every call."""

    def __init__(self, known: dict[str, str] | None = None, *, fail: bool = False) -> None:
        self.known = dict(known or {})
        self.fail = fail
        self.calls: list[tuple[str, str]] = []

    def encrypt(self, plaintext: str) -> str:
        self.calls.append(("encrypt", plaintext))
        if self.fail:
            raise CryptFailure("encrypt unavailable")
        return "ENC" + base64.urlsafe_b64encode(plaintext.encode("utf-8")).decode("ascii")

    def decrypt(self, ciphertext: str) -> str:
        self.calls.append(("decrypt", ciphertext))
        if self.fail:
            raise CryptFailure("decrypt unavailable")
        if ciphertext in self.known:
            return self.known[ciphertext]
        if not ciphertext.startswith("ENC"):
            raise CryptFailure("not a token")
        return base64.urlsafe_b64decode(ciphertext[3:].encode("ascii")).decode("utf-8")


@pytest.fixture()
def fake_cipher() -> FakeCipher:
    return FakeCipher()


@pytest.fixture(autouse=True)
def _reset_global_cipher() -> Iterator[None]:
    secret_cipher.reset_cipher()
    yield
    secret_cipher.reset_cipher()


@pytest.fixture()
def cipher_factory() -> type[FakeCipher]:
    return FakeCipher
