"""
Crypt Field - transparent field-level encryption for mapped statements.

This package intercepts statement execution, encrypting declared string
parameters and fields on their way into storage and decrypting declared
results on their way out.
"""

from .config import CryptFieldConfig
from .models import CryptField, CryptMetadata, crypt_field
from .encryption import CipherError, CipherProvider, CryptoHooks, EncryptionAlgorithm, FieldCipher
from .registry import MapperRegistry, MetadataStore, mapper
from .binding import ParamMap, StrictMap
from .plugin import CryptInterceptor, MappedStatement, RowBounds, ShapeDispatcher, StatementKind
from .session import MapperSession, delete, insert, select, update

__version__ = "0.1.0"

__all__ = [
    "CryptFieldConfig",
    "CryptField",
    "CryptMetadata",
    "crypt_field",
    "CipherError",
    "CipherProvider",
    "CryptoHooks",
    "EncryptionAlgorithm",
    "FieldCipher",
    "MapperRegistry",
    "MetadataStore",
    "mapper",
    "ParamMap",
    "StrictMap",
    "CryptInterceptor",
    "MappedStatement",
    "RowBounds",
    "ShapeDispatcher",
    "StatementKind",
    "MapperSession",
    "delete",
    "insert",
    "select",
    "update",
]
