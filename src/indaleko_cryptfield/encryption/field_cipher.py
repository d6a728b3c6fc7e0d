"""
Field cipher implementation.

This module provides the default cipher provider used by the crypt
interceptor to encrypt and decrypt sensitive string fields.

Encrypted values are self-describing strings of three segments::

    <algorithm tag>|<base64 nonce>|<base64 ciphertext and tag>

The separator is configurable; the crypto hooks use it as the marker
telling ciphertext apart from plaintext.
"""

import base64
import binascii
import os
import sys
from enum import Enum
from typing import Protocol, runtime_checkable

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM, ChaCha20Poly1305
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from ..config import CryptFieldConfig


class CipherError(ValueError):
    """Raised for unsupported algorithms and unparseable ciphertext envelopes."""


@runtime_checkable
class CipherProvider(Protocol):
    """The encrypt/decrypt capability the crypto hooks delegate to."""

    def encrypt(self, plaintext: str) -> str:
        ...

    def decrypt(self, ciphertext: str) -> str:
        ...


class EncryptionAlgorithm(str, Enum):
    """Supported encryption algorithms."""

    AES_GCM = "AES-GCM"
    CHACHA20_POLY1305 = "ChaCha20-Poly1305"

    @property
    def tag(self) -> str:
        """Short tag written as the first ciphertext segment."""
        return _ALGORITHM_TAGS[self]


_ALGORITHM_TAGS = {
    EncryptionAlgorithm.AES_GCM: "A1",
    EncryptionAlgorithm.CHACHA20_POLY1305: "C1",
}

_TAG_ALGORITHMS = {tag: algorithm for algorithm, tag in _ALGORITHM_TAGS.items()}


class PassthroughCipher:
    """
    Cipher that leaves values unchanged.

    Used in development mode when encryption is disabled, so mappers keep
    working against plaintext data.
    """

    def encrypt(self, plaintext: str) -> str:
        return plaintext

    def decrypt(self, ciphertext: str) -> str:
        return ciphertext


class FieldCipher:
    """
    Handles string encryption and decryption with an AEAD cipher.

    The key is derived once from the master key with PBKDF2, so every
    value encrypted by the same deployment can be decrypted by it. Each
    value gets a fresh random nonce.
    """

    def __init__(
        self,
        master_key: str | None = None,
        algorithm: EncryptionAlgorithm | str | None = None,
        salt: str | None = None,
        separator: str | None = None,
    ) -> None:
        """
        Initialize the field cipher.

        Args:
            master_key: Optional master encryption key
            algorithm: Optional algorithm, defaults to the configured one
            salt: Optional key derivation salt, defaults to the configured one
            separator: Optional segment separator, defaults to the configured one
        """
        self.master_key = master_key or self._get_master_key()

        if not self.master_key:
            print("ERROR: No master encryption key provided or found in environment", file=sys.stderr)
            sys.exit(1)

        try:
            self.algorithm = EncryptionAlgorithm(
                algorithm or CryptFieldConfig.get("encryption.algorithm", EncryptionAlgorithm.AES_GCM.value)
            )
        except ValueError:
            raise CipherError(f"Unsupported encryption algorithm: {algorithm}") from None

        self.separator = separator or CryptFieldConfig.get_separator()
        self.key_iterations = CryptFieldConfig.get("encryption.key_iterations", 100000)

        salt_value = salt or CryptFieldConfig.get("encryption.salt", "indaleko-cryptfield")
        self._key = self.derive_key(str(salt_value).encode("utf-8"))

    def _get_master_key(self) -> str:
        """
        Get the master encryption key from configuration or environment.

        Returns:
            The master key as a string
        """
        key = os.environ.get("INDALEKO_ENCRYPTION_KEY")
        if key:
            return key

        key = CryptFieldConfig.get("encryption.key")
        if key:
            return key

        # Development mode may use a fixed key
        if CryptFieldConfig.is_dev_mode():
            return "dev-only-encryption-key-do-not-use-in-production"

        return ""

    def derive_key(self, salt: bytes) -> bytes:
        """
        Derive the 256-bit encryption key from the master key.

        Args:
            salt: Salt for key derivation

        Returns:
            The derived key
        """
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=32,
            salt=salt,
            iterations=self.key_iterations,
        )
        return kdf.derive(self.master_key.encode("utf-8"))

    def _aead(self, algorithm: EncryptionAlgorithm) -> AESGCM | ChaCha20Poly1305:
        if algorithm == EncryptionAlgorithm.AES_GCM:
            return AESGCM(self._key)
        if algorithm == EncryptionAlgorithm.CHACHA20_POLY1305:
            return ChaCha20Poly1305(self._key)
        raise CipherError(f"Unsupported encryption algorithm: {algorithm}")

    def encrypt(self, plaintext: str) -> str:
        """
        Encrypt a string.

        Args:
            plaintext: The value to encrypt

        Returns:
            The encrypted envelope
        """
        # 96-bit nonce for both GCM and ChaCha20-Poly1305
        nonce = os.urandom(12)
        ciphertext = self._aead(self.algorithm).encrypt(nonce, plaintext.encode("utf-8"), None)

        return self.separator.join(
            (
                self.algorithm.tag,
                base64.b64encode(nonce).decode("ascii"),
                base64.b64encode(ciphertext).decode("ascii"),
            )
        )

    def decrypt(self, ciphertext: str) -> str:
        """
        Decrypt an envelope produced by encrypt.

        The algorithm is read from the envelope, so values written before
        an algorithm change stay readable.

        Args:
            ciphertext: The encrypted envelope

        Returns:
            The decrypted string

        Raises:
            CipherError: If the envelope cannot be parsed
            cryptography.exceptions.InvalidTag: If authentication fails
        """
        parts = ciphertext.split(self.separator)
        if len(parts) != 3:
            raise CipherError("Invalid encrypted data format")

        tag, nonce_b64, data_b64 = parts
        algorithm = _TAG_ALGORITHMS.get(tag)
        if algorithm is None:
            raise CipherError(f"Unknown algorithm tag: {tag}")

        try:
            nonce = base64.b64decode(nonce_b64, validate=True)
            data = base64.b64decode(data_b64, validate=True)
        except binascii.Error as e:
            raise CipherError(f"Invalid encrypted data encoding: {e}") from e

        plaintext = self._aead(algorithm).decrypt(nonce, data, None)
        return plaintext.decode("utf-8")


def create_cipher() -> CipherProvider:
    """
    Create the cipher provider for the current configuration.

    Returns:
        A FieldCipher, or a PassthroughCipher when encryption is disabled
        in development mode
    """
    if not CryptFieldConfig.is_encryption_enabled():
        if CryptFieldConfig.is_dev_mode():
            return PassthroughCipher()
        print("ERROR: Encryption cannot be disabled in PROD mode", file=sys.stderr)
        sys.exit(1)

    return FieldCipher()
