# =============================================================================
# Account & Credentials Models
# =============================================================================
# An Account is what lives in the config file: where the IMAP server is and
# which user to log in as. Credentials are what the engine actually connects
# with: the same connection details plus the secret.
#
# IMPORTANT: Passwords are NOT stored in Account. They are retrieved from the
# system keyring at runtime using the 'keyring' library. Credentials hold the
# password in memory only and never print it.
# =============================================================================

from dataclasses import dataclass

import keyring


@dataclass
class Account:
    """
    A configured IMAP account.

    Attributes:
        name: Unique identifier for this account (e.g., "personal", "work").
              Used as the key in config files and for keyring lookups.
        email: Login user, usually the email address.
        imap_host: Hostname of the IMAP server (e.g., "imap.gmail.com").
        imap_port: Port for IMAP connection. Standard ports:
                   - 993 for IMAP with SSL/TLS
                   - 143 for IMAP with optional STARTTLS
        imap_security: Connection security method ("ssl" or "starttls").
        enabled: Disabled accounts are ignored by the CLI.

    Example:
        >>> account = Account(
        ...     name="personal",
        ...     email="user@example.com",
        ...     imap_host="imap.example.com",
        ... )
    """

    name: str
    email: str
    imap_host: str = ""
    imap_port: int = 993                # Default to SSL port
    imap_security: str = "ssl"          # "ssl" or "starttls"
    enabled: bool = True

    @property
    def keyring_service(self) -> str:
        """
        Returns the service name used for keyring password storage.

        Passwords can be managed with the keyring CLI:
            keyring set mailbox-engine:personal user@example.com
        """
        return f"mailbox-engine:{self.name}"

    def __str__(self) -> str:
        return f"{self.name} <{self.email}>"


@dataclass
class Credentials:
    """
    Everything needed to open an IMAP connection.

    Opaque to the engine beyond being handed to the session. The password is
    excluded from repr() so credentials can't leak into logs or tracebacks.

    Attributes:
        host: IMAP server hostname.
        port: IMAP server port.
        user: Login user name.
        password: Login secret.
        use_ssl: True for implicit TLS (IMAPS), False for a plain connection
                 that upgrades with STARTTLS when the server offers it.
    """

    host: str
    port: int
    user: str
    password: str
    use_ssl: bool = True

    @classmethod
    def from_account(cls, account: Account, password: str | None = None) -> "Credentials":
        """
        Build credentials for a configured account.

        Args:
            account: The account to connect as.
            password: Explicit secret. If None, it is looked up in the keyring.

        Raises:
            KeyError: If no password was given and none is stored in the keyring.
        """
        if password is None:
            password = keyring.get_password(account.keyring_service, account.email)
        if not password:
            raise KeyError(
                f"No password found in keyring for {account.email}. "
                f"Set it with: keyring set {account.keyring_service} {account.email}"
            )
        return cls(
            host=account.imap_host,
            port=account.imap_port,
            user=account.email,
            password=password,
            use_ssl=account.imap_security == "ssl",
        )

    @property
    def scheme(self) -> str:
        """URL scheme used in folder identifiers."""
        return "imaps" if self.use_ssl else "imap"

    def __repr__(self) -> str:
        return (
            f"Credentials(host={self.host!r}, port={self.port}, "
            f"user={self.user!r}, password='***', use_ssl={self.use_ssl})"
        )
