"""
Encryption utilities for Crypt Field.

This module provides the crypto hooks applied to string leaves and the
default cipher provider behind them.
"""

from .field_cipher import (
    CipherError,
    CipherProvider,
    EncryptionAlgorithm,
    FieldCipher,
    PassthroughCipher,
    create_cipher,
)
from .hooks import CryptoHooks, is_blank

__all__ = [
    "CipherError",
    "CipherProvider",
    "EncryptionAlgorithm",
    "FieldCipher",
    "PassthroughCipher",
    "create_cipher",
    "CryptoHooks",
    "is_blank",
]
