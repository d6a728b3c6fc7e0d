"""
Configuration management for Crypt Field.

This module provides configuration utilities for controlling behavior
of the crypt interceptor, including development/production modes,
cipher settings and the ArangoDB connection used by the executor.
"""

import os
import sys
from pathlib import Path
from copy import deepcopy

import yaml


class CryptFieldConfig:
    """
    Configuration for Crypt Field.

    This class provides access to configuration settings, including
    environment-specific behaviors and encryption settings.
    """

    # Default configuration values
    _default_config: dict[str, object] = {
        "mode": "DEV",  # DEV or PROD
        "encryption": {
            "enabled": True,
            "algorithm": "AES-GCM",
            "key_derivation": "PBKDF2",
            "key_iterations": 100000,
            "salt": "indaleko-cryptfield",
            "separator": "|",
        },
        "database": {
            "url": "http://localhost:8529",
            "database": "cryptfield",
            "username": "root",
            "password": "",
        },
    }

    # Instance configuration values, loaded from file or environment
    _config: dict[str, object] = {}

    # Flag indicating if the configuration has been initialized
    _initialized: bool = False

    @classmethod
    def initialize(cls, config_path: str | None = None) -> None:
        """
        Initialize the configuration.

        Args:
            config_path: Optional path to a YAML configuration file
        """
        cls._config = deepcopy(cls._default_config)

        if config_path:
            cls._load_from_file(config_path)

        # Environment always wins over the file
        cls._load_from_env()

        cls._initialized = True

    @classmethod
    def _merge(cls, values: dict) -> None:
        """Merge a loaded mapping into the configuration, one section at a time."""
        for section, section_values in values.items():
            if isinstance(section_values, dict):
                current = cls._config.setdefault(section, {})
                if isinstance(current, dict):
                    current.update(section_values)
                else:
                    cls._config[section] = dict(section_values)
            else:
                cls._config[section] = section_values

    @classmethod
    def _load_from_file(cls, config_path: str) -> None:
        """
        Load configuration from a YAML file.

        Args:
            config_path: Path to the YAML configuration file
        """
        path = Path(config_path)
        if not path.exists():
            print(f"Configuration file not found: {config_path}", file=sys.stderr)
            sys.exit(1)

        try:
            with open(path, "r") as f:
                file_config = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            print(f"Error loading configuration file: {e}", file=sys.stderr)
            sys.exit(1)

        if file_config:
            if not isinstance(file_config, dict):
                print(f"Configuration file must contain a mapping: {config_path}", file=sys.stderr)
                sys.exit(1)
            cls._merge(file_config)

    @classmethod
    def _load_from_env(cls) -> None:
        """Load configuration from environment variables."""
        env_mode = os.environ.get("INDALEKO_MODE")
        if env_mode in ("DEV", "PROD"):
            cls._config["mode"] = env_mode

        env_encryption = os.environ.get("INDALEKO_ENCRYPTION_ENABLED")
        if env_encryption in ("1", "true", "True", "yes", "Yes"):
            cls._config["encryption"]["enabled"] = True
        elif env_encryption in ("0", "false", "False", "no", "No"):
            cls._config["encryption"]["enabled"] = False

        env_key = os.environ.get("INDALEKO_ENCRYPTION_KEY")
        if env_key:
            cls._config["encryption"]["key"] = env_key

        env_algorithm = os.environ.get("INDALEKO_ENCRYPTION_ALGORITHM")
        if env_algorithm:
            cls._config["encryption"]["algorithm"] = env_algorithm

        env_db_url = os.environ.get("INDALEKO_DB_URL")
        if env_db_url:
            cls._config["database"]["url"] = env_db_url

        env_db_username = os.environ.get("INDALEKO_DB_USERNAME")
        if env_db_username:
            cls._config["database"]["username"] = env_db_username

        env_db_password = os.environ.get("INDALEKO_DB_PASSWORD")
        if env_db_password:
            cls._config["database"]["password"] = env_db_password

    @classmethod
    def _ensure_initialized(cls) -> None:
        """Ensure the configuration is initialized."""
        if not cls._initialized:
            cls.initialize()

    @classmethod
    def get(cls, key: str, default: object = None) -> object:
        """
        Get a configuration value.

        Args:
            key: The configuration key to retrieve, dot notation for nested keys
            default: Default value to return if key is not found

        Returns:
            The configuration value, or default if not found
        """
        cls._ensure_initialized()

        if "." in key:
            value = cls._config
            for part in key.split("."):
                if isinstance(value, dict) and part in value:
                    value = value[part]
                else:
                    return default
            return value

        return cls._config.get(key, default)

    @classmethod
    def is_dev_mode(cls) -> bool:
        """
        Check if the system is in development mode.

        Returns:
            True if in development mode, False otherwise
        """
        return cls.get("mode") == "DEV"

    @classmethod
    def is_encryption_enabled(cls) -> bool:
        """
        Check if encryption is enabled.

        Returns:
            True if encryption is enabled, False otherwise
        """
        return bool(cls.get("encryption.enabled", True))

    @classmethod
    def get_separator(cls) -> str:
        """
        Get the ciphertext separator.

        Returns:
            The character separating the segments of an encrypted value
        """
        return str(cls.get("encryption.separator", "|"))

    @classmethod
    def get_database_url(cls) -> str:
        """
        Get the database URL.

        Returns:
            The URL of the database
        """
        return cls.get("database.url", "http://localhost:8529")

    @classmethod
    def get_database_credentials(cls) -> dict:
        """
        Get the database credentials.

        Returns:
            Dictionary containing database credentials
        """
        return {
            "username": cls.get("database.username", "root"),
            "password": cls.get("database.password", ""),
            "database": cls.get("database.database", "cryptfield"),
        }

    @classmethod
    def load_from_secrets_file(cls, file_path: str) -> None:
        """
        Load configuration from a secrets file.

        Secrets files usually hold the master key and database password,
        and are merged section by section over the current configuration.
        A missing secrets file is not an error.

        Args:
            file_path: Path to the secrets file
        """
        cls._ensure_initialized()

        path = Path(file_path)
        if not path.exists():
            print(f"Secrets file not found: {file_path}", file=sys.stderr)
            return

        try:
            with open(path, "r") as f:
                secrets = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            print(f"Error loading secrets file: {e}", file=sys.stderr)
            sys.exit(1)

        if secrets:
            cls._merge(secrets)
