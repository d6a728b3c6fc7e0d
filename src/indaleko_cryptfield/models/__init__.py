"""
Declaration and metadata types for Crypt Field.

This module provides the CryptField declaration attached to model fields,
mapper parameters and mapper methods, and the cached per-statement metadata.
"""

from .crypt_field import CryptField, DeclaredField, crypt_field, declared_fields
from .crypt_metadata import CryptMetadata, NO_CRYPT

__all__ = [
    "CryptField",
    "DeclaredField",
    "crypt_field",
    "declared_fields",
    "CryptMetadata",
    "NO_CRYPT",
]
