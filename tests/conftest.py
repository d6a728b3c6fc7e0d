"""
Pytest configuration for Crypt Field tests.
"""

import os
from typing import Generator

import pytest

from indaleko_cryptfield.config import CryptFieldConfig
from indaleko_cryptfield.encryption import CryptoHooks
from indaleko_cryptfield.plugin import ShapeDispatcher


class ReversingCipher:
    """
    Test cipher producing readable ciphertext.

    ``secret`` encrypts to ``enc|terces``; decrypting anything else raises.
    """

    prefix = "enc|"

    def __init__(self) -> None:
        self.encrypted: list[str] = []
        self.decrypted: list[str] = []

    def encrypt(self, plaintext: str) -> str:
        self.encrypted.append(plaintext)
        return self.prefix + plaintext[::-1]

    def decrypt(self, ciphertext: str) -> str:
        if not ciphertext.startswith(self.prefix):
            raise ValueError(f"not produced by this cipher: {ciphertext}")
        self.decrypted.append(ciphertext)
        return ciphertext[len(self.prefix):][::-1]


def enc(value: str) -> str:
    """What ReversingCipher makes of a value."""
    return ReversingCipher.prefix + value[::-1]


@pytest.fixture
def cipher() -> ReversingCipher:
    """A fresh reversing cipher."""
    return ReversingCipher()


@pytest.fixture
def dispatcher(cipher: ReversingCipher) -> ShapeDispatcher:
    """A shape dispatcher over the reversing cipher."""
    return ShapeDispatcher(CryptoHooks(cipher, "|"))


@pytest.fixture
def dev_mode_env() -> Generator[None, None, None]:
    """
    Set up environment for development mode testing.

    This fixture ensures that the INDALEKO_MODE environment variable
    is set to 'DEV' during the test, and then restores the original
    value afterward.
    """
    original_mode = os.environ.get("INDALEKO_MODE")
    os.environ["INDALEKO_MODE"] = "DEV"
    CryptFieldConfig.initialize()

    yield

    if original_mode is not None:
        os.environ["INDALEKO_MODE"] = original_mode
    else:
        del os.environ["INDALEKO_MODE"]
    CryptFieldConfig.initialize()

