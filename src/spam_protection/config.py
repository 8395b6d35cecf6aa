# =============================================================================
# Configuration Management
# =============================================================================
# Handles loading, saving, and validating spam-protection configuration.
#
# XDG Base Directory Compliance (https://specifications.freedesktop.org/basedir-spec/):
#   - Config:  $XDG_CONFIG_HOME/spam-protection/  (default: ~/.config/spam-protection/)
#
# Files:
#   - config.toml: Endpoints, timeout and classification thresholds
#
# IMPORTANT: The API key is NOT stored in config.toml. It lives in the system
# keyring (via the 'keyring' library) and is fetched at runtime:
#     keyring set spam-protection api_key
# =============================================================================

import os
import tomllib  # Built into Python 3.11+
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import keyring
import tomli_w  # For writing TOML (tomllib is read-only)
from keyring.errors import KeyringError

from spam_protection.api.query import DEFAULT_API_URL, DEFAULT_REPORT_URL
from spam_protection.api.transport import HttpTransport
from spam_protection.client import ClientOptions
from spam_protection.core import (
    THRESHOLD_STRICT,
    TOR_DISALLOW,
    ClassificationPolicy,
    InvalidArgument,
    SpamProtectionError,
)


# =============================================================================
# XDG Directory Management
# =============================================================================

# Application identifier used in XDG paths and as the keyring service name
APP_NAME = "spam-protection"

# Keyring "username" under which the API key is stored
KEYRING_USER = "api_key"


def get_xdg_config_home() -> Path:
    """
    Returns the XDG config directory for spam-protection.

    Respects $XDG_CONFIG_HOME if set, otherwise uses ~/.config/spam-protection/
    """
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        base = Path(xdg_config)
    else:
        base = Path.home() / ".config"
    return base / APP_NAME


# =============================================================================
# Configuration Data Structures
# =============================================================================

@dataclass
class ApiConfig:
    """
    Configuration for talking to the service.

    Attributes:
        base_url: Lookup endpoint.
        report_url: Report submission endpoint.
        timeout: Request timeout in seconds.
    """
    base_url: str = DEFAULT_API_URL
    report_url: str = DEFAULT_REPORT_URL
    timeout: float = HttpTransport.TIMEOUT


@dataclass
class PolicyConfig:
    """
    Configuration for the spam verdict.

    Attributes:
        frequency_threshold: Reports needed before a subject counts as spam.
                             1 = strict, 3 = high, 5 = medium, 10 = low.
        confidence_threshold: Optional minimum confidence score (0-100).
                              None disables the confidence check.
        allow_tor_nodes: If False, Tor exit nodes are flagged as spam.
    """
    frequency_threshold: int = THRESHOLD_STRICT
    confidence_threshold: float | None = None
    allow_tor_nodes: bool = TOR_DISALLOW


@dataclass
class Config:
    """
    Main configuration container for spam-protection.

    Attributes:
        api: Endpoint and timeout settings.
        policy: Classification settings.

    Usage:
        >>> config = Config.load()
        >>> options = config.to_options(api_key=Config.load_api_key())
    """
    api: ApiConfig = field(default_factory=ApiConfig)
    policy: PolicyConfig = field(default_factory=PolicyConfig)

    # -------------------------------------------------------------------------
    # File Paths
    # -------------------------------------------------------------------------

    @staticmethod
    def config_file_path() -> Path:
        """Returns the path to the main config file."""
        return get_xdg_config_home() / "config.toml"

    # -------------------------------------------------------------------------
    # Loading and Saving
    # -------------------------------------------------------------------------

    @classmethod
    def load(cls, path: Path | None = None) -> "Config":
        """
        Load configuration from the config file.

        If the config file doesn't exist, returns default configuration.

        Args:
            path: Config file to read. Uses the XDG location if None.

        Returns:
            Loaded Config object.

        Raises:
            ConfigError: If the config file exists but is invalid.
        """
        config_path = path or cls.config_file_path()

        if not config_path.exists():
            # No config file yet - return defaults
            return cls()

        # Load and parse the TOML file
        try:
            with open(config_path, "rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid config file: {e}") from e

        config = cls._from_dict(data)
        config.validate()
        return config

    def save(self, path: Path | None = None) -> None:
        """
        Save configuration to the config file.

        Creates the config directory if it doesn't exist.
        """
        config_path = path or self.config_file_path()
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "wb") as f:
            tomli_w.dump(self._to_dict(), f)

    def validate(self) -> None:
        """
        Check that the thresholds, endpoints and timeout are usable.

        Raises:
            ConfigError: If any value is out of range or of the wrong type.
        """
        try:
            self.to_policy()
        except InvalidArgument as e:
            raise ConfigError(f"Invalid [policy] section: {e}") from e

        if not isinstance(self.policy.allow_tor_nodes, bool):
            raise ConfigError(
                f"Invalid [policy] section: allow_tor_nodes must be true or false, "
                f"got {self.policy.allow_tor_nodes!r}"
            )

        timeout = self.api.timeout
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            raise ConfigError(f"Invalid [api] section: timeout must be a positive number, got {timeout!r}")

        for name in ("base_url", "report_url"):
            url = getattr(self.api, name)
            if not isinstance(url, str) or not url:
                raise ConfigError(f"Invalid [api] section: {name} must be a non-empty string, got {url!r}")

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> "Config":
        """
        Create a Config object from a dictionary (parsed TOML).
        """
        config = cls()

        # API settings
        api = _section(data, "api")
        config.api = ApiConfig(
            base_url=api.get("base_url", DEFAULT_API_URL),
            report_url=api.get("report_url", DEFAULT_REPORT_URL),
            timeout=api.get("timeout", HttpTransport.TIMEOUT),
        )

        # Policy settings (TOML has no null, so a missing key means "unset")
        policy = _section(data, "policy")
        config.policy = PolicyConfig(
            frequency_threshold=policy.get("frequency_threshold", THRESHOLD_STRICT),
            confidence_threshold=policy.get("confidence_threshold"),
            allow_tor_nodes=policy.get("allow_tor_nodes", TOR_DISALLOW),
        )

        return config

    def _to_dict(self) -> dict[str, Any]:
        """
        Convert Config to a dictionary for TOML serialization.
        """
        data: dict[str, Any] = {}

        data["api"] = {
            "base_url": self.api.base_url,
            "report_url": self.api.report_url,
            "timeout": self.api.timeout,
        }

        data["policy"] = {
            "frequency_threshold": self.policy.frequency_threshold,
            "allow_tor_nodes": self.policy.allow_tor_nodes,
        }
        if self.policy.confidence_threshold is not None:
            data["policy"]["confidence_threshold"] = self.policy.confidence_threshold

        return data

    # -------------------------------------------------------------------------
    # Conversion
    # -------------------------------------------------------------------------

    def to_policy(self) -> ClassificationPolicy:
        """Build the ClassificationPolicy described by [policy]."""
        return ClassificationPolicy(
            frequency_threshold=self.policy.frequency_threshold,
            confidence_threshold=self.policy.confidence_threshold,
        )

    def to_options(self, api_key: str | None = None) -> ClientOptions:
        """
        Build client options from this configuration.

        Args:
            api_key: API key to include (see load_api_key()).
        """
        return ClientOptions(
            base_url=self.api.base_url,
            report_url=self.api.report_url,
            policy=self.to_policy(),
            allow_tor_nodes=self.policy.allow_tor_nodes,
            api_key=api_key,
            timeout=self.api.timeout,
        )

    # -------------------------------------------------------------------------
    # API Key (keyring)
    # -------------------------------------------------------------------------

    @staticmethod
    def load_api_key() -> str | None:
        """
        Fetch the API key from the system keyring.

        Returns:
            The stored key, or None if none has been set.
        """
        try:
            return keyring.get_password(APP_NAME, KEYRING_USER)
        except KeyringError as e:
            raise ConfigError(f"Cannot read API key from keyring: {e}") from e

    @staticmethod
    def save_api_key(api_key: str) -> None:
        """
        Store the API key in the system keyring.

        Raises:
            ConfigError: If the key is empty.
        """
        if not api_key:
            raise ConfigError("Refusing to store an empty API key")
        try:
            keyring.set_password(APP_NAME, KEYRING_USER, api_key)
        except KeyringError as e:
            raise ConfigError(f"Cannot store API key in keyring: {e}") from e


# =============================================================================
# Exceptions
# =============================================================================

class ConfigError(SpamProtectionError):
    """Raised when there's an error loading or parsing configuration."""
    pass


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    """Return a top-level TOML table, or {} if absent."""
    section = data.get(name, {})
    if not isinstance(section, dict):
        raise ConfigError(f"Invalid [{name}] section: expected a table, got {section!r}")
    return section


# =============================================================================
# Utility Functions
# =============================================================================

def print_paths() -> None:
    """
    Print config paths for debugging.
    Useful for users wondering where their config is stored.
    """
    print(f"Config:       {get_xdg_config_home()}")
    print(f"Config file:  {Config.config_file_path()}")
    print(f"API key:      keyring service {APP_NAME!r}, user {KEYRING_USER!r}")
