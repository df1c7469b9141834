# =============================================================================
# Configuration Management
# =============================================================================
# Handles loading, saving, and validating mailbox-engine configuration.
#
# XDG Base Directory Compliance (https://specifications.freedesktop.org/basedir-spec/):
#   - Config:  $XDG_CONFIG_HOME/mailbox-engine/  (default: ~/.config/mailbox-engine/)
#
# Files:
#   - config.toml: Accounts and engine tuning
#
# Example config.toml:
#
#   [general]
#   default_account = "personal"
#
#   [imap]
#   timeout = 30
#
#   [rendering]
#   embedded_image_size_threshold = 51200
#
#   [move]
#   poll_attempts = 5
#   poll_interval_seconds = 0.1
#
#   [listing]
#   initial_batch_size = 20
#   max_batch_size = 640
#
#   [accounts.personal]
#   email = "user@example.com"
#   imap_host = "imap.example.com"
#   imap_port = 993
#   imap_security = "ssl"
#
# Passwords never go in this file: see Account.keyring_service.
# =============================================================================

import os
import tomllib  # Built into Python 3.11+
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import tomli_w  # For writing TOML (tomllib is read-only)

from mailbox_engine.core import Account


# =============================================================================
# XDG Directory Management
# =============================================================================

# Application identifier used in all XDG paths
APP_NAME = "mailbox-engine"


def get_xdg_config_home() -> Path:
    """
    Returns the XDG config directory for mailbox-engine.

    Respects $XDG_CONFIG_HOME if set, otherwise uses ~/.config/mailbox-engine/
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
class IMAPConfig:
    """
    Configuration for IMAP connections.

    Attributes:
        timeout: Seconds to wait for the connection and for each command.
    """
    timeout: float = 30


@dataclass
class RenderingConfig:
    """
    Configuration for message rendering.

    Attributes:
        embedded_image_size_threshold: Embedded images up to this many bytes
            are inlined into the content as data: URLs. Bigger ones are
            listed as attachments and fetched separately.
    """
    embedded_image_size_threshold: int = 51200


@dataclass
class MoveConfig:
    """
    Configuration for cross-folder moves.

    Attributes:
        poll_attempts: How many times the destination folder is checked for
                       the moved messages.
        poll_interval_seconds: Pause between checks.
    """
    poll_attempts: int = 5
    poll_interval_seconds: float = 0.1


@dataclass
class ListingConfig:
    """
    Configuration for streamed message listing.

    Attributes:
        initial_batch_size: Messages in the first batch.
        max_batch_size: Batches double in size up to this cap.
    """
    initial_batch_size: int = 20
    max_batch_size: int = 640


@dataclass
class Config:
    """
    Main configuration container for mailbox-engine.

    Attributes:
        default_account: Name of the account used when none is given.
        accounts: Dictionary of configured accounts, keyed by name.
        imap: Connection settings.
        rendering: Message rendering settings.
        move: Move polling settings.
        listing: Streamed listing settings.

    Usage:
        >>> config = Config.load()
        >>> print(config.accounts['personal'].email)
        'user@example.com'
    """
    # General settings
    default_account: str = ""

    # Account configurations (name -> Account)
    accounts: dict[str, Account] = field(default_factory=dict)

    # Subsystem configurations
    imap: IMAPConfig = field(default_factory=IMAPConfig)
    rendering: RenderingConfig = field(default_factory=RenderingConfig)
    move: MoveConfig = field(default_factory=MoveConfig)
    listing: ListingConfig = field(default_factory=ListingConfig)

    # -------------------------------------------------------------------------
    # File Paths
    # -------------------------------------------------------------------------

    @staticmethod
    def config_file_path() -> Path:
        """Returns the path to the main config file."""
        return get_xdg_config_home() / "config.toml"

    # -------------------------------------------------------------------------
    # Account Lookup
    # -------------------------------------------------------------------------

    def get_account(self, name: str | None = None) -> Account:
        """
        Look up an account by name, or the default account.

        If no name is given and no default is set, a single configured
        account is used.

        Raises:
            ConfigError: If the account doesn't exist or none can be chosen.
        """
        name = name or self.default_account
        if not name:
            if len(self.accounts) == 1:
                return next(iter(self.accounts.values()))
            raise ConfigError("No account given and no default_account configured")

        account = self.accounts.get(name)
        if account is None:
            raise ConfigError(f"Unknown account: {name}")
        if not account.enabled:
            raise ConfigError(f"Account is disabled: {name}")
        return account

    # -------------------------------------------------------------------------
    # Loading and Saving
    # -------------------------------------------------------------------------

    @classmethod
    def load(cls, path: Path | None = None) -> "Config":
        """
        Load configuration from the config file.

        If the config file doesn't exist, returns default configuration.

        Args:
            path: Config file to read. Defaults to the XDG location.

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
            raise ConfigError(f"Invalid config file {config_path}: {e}") from e

        return cls._from_dict(data)

    def save(self, path: Path | None = None) -> None:
        """
        Save configuration to the config file.

        Creates the config directory if it doesn't exist.
        """
        config_path = path or self.config_file_path()
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "wb") as f:
            tomli_w.dump(self._to_dict(), f)

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> "Config":
        """
        Create a Config object from a dictionary (parsed TOML).

        This handles the nested structure of the config file and
        converts account entries into Account objects.

        Raises:
            ConfigError: If a value has the wrong type or is out of range.
        """
        config = cls()

        # General settings
        general = data.get("general", {})
        config.default_account = _get(general, "general", "default_account", str, "")

        # IMAP settings
        imap = data.get("imap", {})
        config.imap = IMAPConfig(
            timeout=_get(imap, "imap", "timeout", (int, float), 30, minimum=1),
        )

        # Rendering settings
        rendering = data.get("rendering", {})
        config.rendering = RenderingConfig(
            embedded_image_size_threshold=_get(
                rendering, "rendering", "embedded_image_size_threshold", int, 51200, minimum=0
            ),
        )

        # Move settings
        move = data.get("move", {})
        config.move = MoveConfig(
            poll_attempts=_get(move, "move", "poll_attempts", int, 5, minimum=1),
            poll_interval_seconds=_get(move, "move", "poll_interval_seconds", (int, float), 0.1, minimum=0),
        )

        # Listing settings
        listing = data.get("listing", {})
        config.listing = ListingConfig(
            initial_batch_size=_get(listing, "listing", "initial_batch_size", int, 20, minimum=1),
            max_batch_size=_get(listing, "listing", "max_batch_size", int, 640, minimum=1),
        )
        if config.listing.max_batch_size < config.listing.initial_batch_size:
            raise ConfigError("listing.max_batch_size must be >= listing.initial_batch_size")

        # Accounts - each key under [accounts] is an account name
        accounts_data = data.get("accounts", {})
        for name, acct_data in accounts_data.items():
            section = f"accounts.{name}"
            security = _get(acct_data, section, "imap_security", str, "ssl")
            if security not in ("ssl", "starttls"):
                raise ConfigError(f"{section}.imap_security must be 'ssl' or 'starttls', got {security!r}")

            config.accounts[name] = Account(
                name=name,
                email=_get(acct_data, section, "email", str, ""),
                imap_host=_get(acct_data, section, "imap_host", str, ""),
                imap_port=_get(acct_data, section, "imap_port", int, 993, minimum=1),
                imap_security=security,
                enabled=_get(acct_data, section, "enabled", bool, True),
            )

        return config

    def _to_dict(self) -> dict[str, Any]:
        """
        Convert Config to a dictionary for TOML serialization.
        """
        data: dict[str, Any] = {}

        data["general"] = {
            "default_account": self.default_account,
        }

        data["imap"] = {
            "timeout": self.imap.timeout,
        }

        data["rendering"] = {
            "embedded_image_size_threshold": self.rendering.embedded_image_size_threshold,
        }

        data["move"] = {
            "poll_attempts": self.move.poll_attempts,
            "poll_interval_seconds": self.move.poll_interval_seconds,
        }

        data["listing"] = {
            "initial_batch_size": self.listing.initial_batch_size,
            "max_batch_size": self.listing.max_batch_size,
        }

        # Accounts
        data["accounts"] = {}
        for name, account in self.accounts.items():
            data["accounts"][name] = {
                "email": account.email,
                "imap_host": account.imap_host,
                "imap_port": account.imap_port,
                "imap_security": account.imap_security,
                "enabled": account.enabled,
            }

        return data


def _get(section: dict[str, Any], section_name: str, key: str, kind, default, minimum=None):
    """Read one config value, checking its type and lower bound."""
    value = section.get(key, default)

    # bool is a subclass of int, but "poll_attempts = true" is still a mistake
    if isinstance(value, bool) and kind is not bool:
        raise ConfigError(f"{section_name}.{key} has invalid value {value!r}")
    if not isinstance(value, kind):
        raise ConfigError(f"{section_name}.{key} has invalid value {value!r}")
    if minimum is not None and value < minimum:
        raise ConfigError(f"{section_name}.{key} must be >= {minimum}, got {value!r}")
    return value


# =============================================================================
# Exceptions
# =============================================================================

class ConfigError(Exception):
    """Raised when there's an error loading or parsing configuration."""
    pass


# =============================================================================
# Utility Functions
# =============================================================================

def print_paths() -> None:
    """
    Print the paths mailbox-engine uses.
    Useful for users wondering where their config is stored.
    """
    print(f"Config:       {get_xdg_config_home()}")
    print(f"Config file:  {Config.config_file_path()}")
