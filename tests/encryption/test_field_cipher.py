"""
Tests for the FieldCipher class.
"""

import os

import pytest
from cryptography.exceptions import InvalidTag

from indaleko_cryptfield.config import CryptFieldConfig
from indaleko_cryptfield.encryption import (
    CipherError,
    CipherProvider,
    EncryptionAlgorithm,
    FieldCipher,
    PassthroughCipher,
    create_cipher,
)


class TestFieldCipher:
    """Tests for the FieldCipher class."""

    def setup_method(self) -> None:
        """Set up the test environment."""
        self.original_env = {
            key: os.environ.get(key)
            for key in ("INDALEKO_ENCRYPTION_KEY", "INDALEKO_MODE", "INDALEKO_ENCRYPTION_ENABLED")
        }
        os.environ["INDALEKO_ENCRYPTION_KEY"] = "test-master-key-for-unit-testing"
        os.environ["INDALEKO_MODE"] = "DEV"
        os.environ.pop("INDALEKO_ENCRYPTION_ENABLED", None)
        CryptFieldConfig.initialize()

    def teardown_method(self) -> None:
        """Clean up after tests."""
        for key, value in self.original_env.items():
            if value is not None:
                os.environ[key] = value
            elif key in os.environ:
                del os.environ[key]
        CryptFieldConfig.initialize()

    def test_round_trip(self) -> None:
        """Test encrypting and decrypting strings."""
        cipher = FieldCipher()

        for value in ["simple string", "a@b.com", "123-45-6789", "ünïcødé ✓", "pipe|inside"]:
            encrypted = cipher.encrypt(value)
            assert encrypted != value
            assert cipher.decrypt(encrypted) == value

    def test_envelope_format(self) -> None:
        """Test the encrypted value carries the separator marker."""
        cipher = FieldCipher()
        encrypted = cipher.encrypt("secret")

        parts = encrypted.split("|")
        assert len(parts) == 3
        assert parts[0] == EncryptionAlgorithm.AES_GCM.tag

    def test_fresh_nonce_per_value(self) -> None:
        """Test that encrypting the same value twice gives different envelopes."""
        cipher = FieldCipher()
        assert cipher.encrypt("same") != cipher.encrypt("same")

    def test_chacha20(self) -> None:
        """Test encryption with ChaCha20-Poly1305."""
        cipher = FieldCipher(algorithm=EncryptionAlgorithm.CHACHA20_POLY1305)
        encrypted = cipher.encrypt("secret message")

        assert encrypted.startswith(EncryptionAlgorithm.CHACHA20_POLY1305.tag + "|")
        assert cipher.decrypt(encrypted) == "secret message"

    def test_decrypt_reads_algorithm_from_envelope(self) -> None:
        """Test that values written with another algorithm stay readable."""
        aes = FieldCipher(algorithm="AES-GCM")
        chacha = FieldCipher(algorithm="ChaCha20-Poly1305")

        assert aes.decrypt(chacha.encrypt("rotated")) == "rotated"

    def test_custom_separator(self) -> None:
        """Test a configured separator is used for the envelope."""
        cipher = FieldCipher(separator="$")
        encrypted = cipher.encrypt("secret")

        assert "|" not in encrypted
        assert cipher.decrypt(encrypted) == "secret"

    def test_wrong_key_fails(self) -> None:
        """Test that decryption with another key fails authentication."""
        encrypted = FieldCipher(master_key="key-one").encrypt("secret")

        with pytest.raises(InvalidTag):
            FieldCipher(master_key="key-two").decrypt(encrypted)

    def test_malformed_envelope(self) -> None:
        """Test that unparseable envelopes raise CipherError."""
        cipher = FieldCipher()

        with pytest.raises(CipherError):
            cipher.decrypt("only|two")
        with pytest.raises(CipherError):
            cipher.decrypt("ZZ|AAAA|AAAA")
        with pytest.raises(CipherError):
            cipher.decrypt("A1|not base64!|AAAA")

    def test_unsupported_algorithm(self) -> None:
        """Test that unknown algorithms are rejected."""
        with pytest.raises(CipherError):
            FieldCipher(algorithm="ROT13")

    def test_master_key_from_environment(self) -> None:
        """Test getting the master key from environment variables."""
        os.environ["INDALEKO_ENCRYPTION_KEY"] = "env-master-key"
        assert FieldCipher().master_key == "env-master-key"

    def test_dev_mode_default_key(self) -> None:
        """Test using the default key in development mode."""
        del os.environ["INDALEKO_ENCRYPTION_KEY"]
        CryptFieldConfig.initialize()

        cipher = FieldCipher()

        assert "dev-only" in cipher.master_key
        assert cipher.decrypt(cipher.encrypt("test string")) == "test string"

    def test_prod_mode_requires_key(self) -> None:
        """Test that production mode requires a real key."""
        del os.environ["INDALEKO_ENCRYPTION_KEY"]
        os.environ["INDALEKO_MODE"] = "PROD"
        CryptFieldConfig.initialize()

        with pytest.raises(SystemExit):
            FieldCipher()

    def test_create_cipher(self) -> None:
        """Test the configured cipher factory."""
        assert isinstance(create_cipher(), FieldCipher)

        os.environ["INDALEKO_ENCRYPTION_ENABLED"] = "false"
        CryptFieldConfig.initialize()
        passthrough = create_cipher()
        assert isinstance(passthrough, PassthroughCipher)
        assert isinstance(passthrough, CipherProvider)
        assert passthrough.encrypt("plain") == "plain"

    def test_encryption_cannot_be_disabled_in_prod(self) -> None:
        """Test that disabling encryption in PROD mode is fatal."""
        os.environ["INDALEKO_ENCRYPTION_ENABLED"] = "false"
        os.environ["INDALEKO_MODE"] = "PROD"
        CryptFieldConfig.initialize()

        with pytest.raises(SystemExit):
            create_cipher()
