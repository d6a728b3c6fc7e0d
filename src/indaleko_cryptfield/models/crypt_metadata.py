"""
Per-statement crypt metadata.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class CryptMetadata:
    """
    Crypto eligibility of one mapped statement.

    Created once per statement identifier and cached for the life of the
    process; instances are immutable.
    """

    # Parameter names whose values are encrypted on the way in
    encryptable_params: frozenset[str] = field(default_factory=frozenset)

    # Whether the statement's return value is decrypted on the way out
    decryptable: bool = False

    @property
    def has_encryptable_params(self) -> bool:
        return bool(self.encryptable_params)

    def is_encryptable(self, name: str) -> bool:
        """
        Check whether a named parameter is eligible for encryption.

        Args:
            name: Parameter name, as used as a multi-parameter map key

        Returns:
            True if the statement declares the parameter encryptable
        """
        return name in self.encryptable_params

    def to_dict(self) -> dict[str, object]:
        """
        Convert metadata to a dictionary for diagnostics.

        Returns:
            Dictionary representation of the metadata
        """
        return {
            "encryptable_params": sorted(self.encryptable_params),
            "decryptable": self.decryptable,
        }


# Metadata for statements whose backing method cannot be found
NO_CRYPT = CryptMetadata()
