"""
Crypto hooks applied to string leaves.

The hooks decide whether a string is touched at all; the cipher
provider decides how it is transformed.
"""

from .field_cipher import CipherProvider


def is_blank(value: str | None) -> bool:
    """True for None, empty and whitespace-only strings."""
    return value is None or not value.strip()


class CryptoHooks:
    """
    Encrypt/decrypt hooks bound to a cipher provider.

    Blank strings are never handed to the cipher. On decrypt, strings that
    do not carry the ciphertext marker (at least one separator, so at
    least two segments) are returned unchanged: legacy rows and values
    whose encryption was a no-op are plaintext already.

    Cipher errors propagate to the caller.
    """

    def __init__(self, cipher: CipherProvider, separator: str = "|") -> None:
        self.cipher = cipher
        self.separator = separator

    def encrypt_string(self, plaintext: str | None) -> str | None:
        if is_blank(plaintext):
            return plaintext
        return self.cipher.encrypt(plaintext)

    def decrypt_string(self, ciphertext: str | None) -> str | None:
        if is_blank(ciphertext):
            return ciphertext
        if len(ciphertext.split(self.separator)) < 2:
            return ciphertext
        return self.cipher.decrypt(ciphertext)
