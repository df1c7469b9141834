# =============================================================================
# IMAP Client
# =============================================================================
# Provides an async IMAP client wrapper around aioimaplib.
#
# This is the engine's "mail-protocol capability": every wire-level command
# the engine issues goes through here. Higher layers (FolderAccessor,
# MessageLister, MoveCoordinator...) never touch aioimaplib directly.
#
# Key responsibilities:
#   - Connection management (connect, STARTTLS when offered, login, logout)
#   - Folder operations (list, select/examine, close, status)
#   - Message operations (batched envelope fetch, raw fetch, flag, copy,
#     expunge)
#
# Design notes:
#   - All methods are async; a session owns exactly one client
#   - The client tracks which folder is selected and in which mode, so
#     re-opening a folder that's already open is cheap
#   - Non-OK responses raise IMAPError with the server's text preserved
# =============================================================================

import asyncio
import email.utils
import logging
import re
from dataclasses import dataclass, field
from datetime import timezone
from email.parser import BytesHeaderParser
from email.policy import default as default_policy

from aioimaplib import aioimaplib

from mailbox_engine.core import Credentials, Folder, FolderRef, Message, MessageFlags

# Set up logging for this module
logger = logging.getLogger(__name__)

# Header fields fetched for envelope data (one round trip per batch)
ENVELOPE_HEADERS = "SUBJECT FROM TO CC DATE MESSAGE-ID"

_FETCH_START = re.compile(r"^\d+\s+FETCH\s*\(", re.IGNORECASE)
_UID = re.compile(r"UID\s+(\d+)", re.IGNORECASE)
_FLAGS = re.compile(r"FLAGS\s*\(([^)]*)\)", re.IGNORECASE)
_SIZE = re.compile(r"RFC822\.SIZE\s+(\d+)", re.IGNORECASE)
_MODSEQ = re.compile(r"MODSEQ\s*\(\s*(\d+)\s*\)", re.IGNORECASE)


def _quote_folder_name(name: str) -> str:
    """
    Quote an IMAP folder name if it contains special characters.

    IMAP folder names with spaces or special characters must be quoted.
    This function wraps folder names in double quotes and escapes
    any internal quotes or backslashes.

    Args:
        name: The folder name to quote.

    Returns:
        Properly quoted folder name for IMAP commands.
    """
    if ' ' in name or '"' in name or '\\' in name or any(c in name for c in '(){}[]%*'):
        escaped = name.replace('\\', '\\\\').replace('"', '\\"')
        return f'"{escaped}"'
    return name


def uid_set(uids: list[int]) -> str:
    """Format UIDs as an IMAP sequence set: "1,5,9"."""
    return ",".join(str(u) for u in uids)


@dataclass
class ConnectionState:
    """
    Tracks the current state of an IMAP connection.

    Attributes:
        connected: Whether we have an active connection.
        authenticated: Whether we've successfully logged in.
        selected_folder: Currently selected folder, if any.
        selected_readonly: True if the selected folder was opened with EXAMINE.
        capabilities: Server capabilities (from CAPABILITY response).
    """
    connected: bool = False
    authenticated: bool = False
    selected_folder: str | None = None
    selected_readonly: bool | None = None
    capabilities: list[str] = field(default_factory=list)


@dataclass
class FetchRecord:
    """
    One message's worth of a FETCH response.

    aioimaplib hands back a flat list of lines: text lines as bytes and
    literal data ({N} payloads) as bytearray. We regroup them per message.

    Attributes:
        text: All non-literal text belonging to this message, space-joined.
        literals: Literal payloads in order (headers or full message body).
    """
    text: str
    literals: list[bytes] = field(default_factory=list)

    @property
    def uid(self) -> int | None:
        match = _UID.search(self.text)
        return int(match.group(1)) if match else None

    @property
    def flags(self) -> MessageFlags:
        match = _FLAGS.search(self.text)
        return MessageFlags.from_imap(match.group(1)) if match else MessageFlags.NONE

    @property
    def size(self) -> int:
        match = _SIZE.search(self.text)
        return int(match.group(1)) if match else 0

    @property
    def modseq(self) -> int | None:
        match = _MODSEQ.search(self.text)
        return int(match.group(1)) if match else None


def split_fetch_response(lines) -> list[FetchRecord]:
    """
    Group the lines of a FETCH response into per-message records.

    Handles both UID placements servers use:
        - In the FETCH line:      b'1 FETCH (UID 7 BODY[...] {42}'
        - After the literal data: b' UID 7)'  (Proton Bridge and others)
    """
    records: list[FetchRecord] = []
    current: FetchRecord | None = None

    for item in lines:
        if isinstance(item, bytearray):
            if current is not None:
                current.literals.append(bytes(item))
            continue

        line = item.decode("utf-8", errors="replace") if isinstance(item, bytes) else str(item)
        if _FETCH_START.match(line):
            current = FetchRecord(text=line)
            records.append(current)
        elif current is not None and "completed" not in line.lower():
            current.text += " " + line.strip()

    return records


def parse_envelope(record: FetchRecord) -> Message | None:
    """
    Build a Message from a FETCH record carrying UID, FLAGS, size and headers.

    Returns:
        The Message, or None if the record carries no UID.
    """
    uid = record.uid
    if uid is None:
        return None

    headers = BytesHeaderParser(policy=default_policy).parsebytes(
        record.literals[0] if record.literals else b""
    )

    from_list = email.utils.getaddresses([str(h) for h in headers.get_all("From", [])])
    to_list = email.utils.getaddresses(
        [str(h) for h in headers.get_all("To", [])] + [str(h) for h in headers.get_all("Cc", [])]
    )

    # Parse date and normalize to UTC for consistent sorting
    date_sent = None
    date_str = headers.get("Date")
    if date_str:
        try:
            parsed = email.utils.parsedate_to_datetime(str(date_str))
            if parsed.tzinfo is not None:
                date_sent = parsed.astimezone(timezone.utc)
            else:
                date_sent = parsed.replace(tzinfo=timezone.utc)
        except (TypeError, ValueError) as e:
            logger.debug(f"Failed to parse date {date_str!r} of UID {uid}: {e}")

    sender_name, sender = from_list[0] if from_list else ("", "")

    return Message(
        uid=uid,
        message_id=str(headers.get("Message-ID", "") or "").strip(),
        subject=str(headers.get("Subject", "") or ""),
        sender=sender,
        sender_name=sender_name,
        recipients=[addr for _, addr in to_list if addr],
        date_sent=date_sent,
        size=record.size,
        flags=record.flags,
        modseq=record.modseq,
    )


class IMAPClient:
    """
    Async IMAP client for the mailbox engine.

    This class wraps aioimaplib and provides the higher-level commands the
    engine is built on.

    Usage:
        >>> client = IMAPClient(credentials)
        >>> await client.connect()
        >>> folders = await client.list_folders()
        >>> await client.select_folder("INBOX", readonly=True)
        >>> messages = await client.fetch_envelopes("1:20")
        >>> await client.close_folder()
        >>> await client.disconnect()

    Attributes:
        credentials: Connection details for this client.
        state: Current connection state.
    """

    # Timeout for IMAP operations (seconds)
    TIMEOUT = 30

    def __init__(self, credentials: Credentials, timeout: float = TIMEOUT) -> None:
        """
        Initialize the IMAP client.

        Args:
            credentials: Server and login details.
            timeout: Timeout in seconds for connecting and for each command.
        """
        self.credentials = credentials
        self.timeout = timeout
        self.state = ConnectionState()
        self._client: aioimaplib.IMAP4_SSL | aioimaplib.IMAP4 | None = None

    @property
    def is_connected(self) -> bool:
        """Check if client is connected and authenticated."""
        return self.state.connected and self.state.authenticated and self._client is not None

    # =========================================================================
    # Connection Management
    # =========================================================================

    async def connect(self) -> None:
        """
        Establish connection to the IMAP server and log in.

        Implicit TLS is used when credentials.use_ssl is set. On a plain
        connection, STARTTLS is used if the server offers it but is not
        required.

        Raises:
            IMAPConnectionError: If unable to connect to server.
            IMAPAuthenticationError: If login fails.
        """
        creds = self.credentials
        logger.info(f"Connecting to {creds.host}:{creds.port}")

        try:
            if creds.use_ssl:
                # Direct SSL connection (usually port 993)
                self._client = aioimaplib.IMAP4_SSL(
                    host=creds.host,
                    port=creds.port,
                    timeout=self.timeout,
                )
            else:
                # Plain connection, upgraded with STARTTLS when available
                self._client = aioimaplib.IMAP4(
                    host=creds.host,
                    port=creds.port,
                    timeout=self.timeout,
                )

            await self._client.wait_hello_from_server()
            self.state.connected = True

            # aioimaplib stores capabilities in client.protocol.capabilities
            # after wait_hello_from_server() is called
            self.state.capabilities = [c.upper() for c in self._client.protocol.capabilities]
            logger.debug(f"Server capabilities: {self.state.capabilities}")

            if not creds.use_ssl:
                # aioimaplib's IMAP4 has no starttls(); the upgrade only
                # happens where the connection object provides one
                starttls = getattr(self._client, "starttls", None)
                if self.has_capability("STARTTLS") and starttls is not None:
                    logger.debug("Upgrading to TLS via STARTTLS")
                    await starttls()
                else:
                    logger.warning(f"No STARTTLS upgrade for {creds.host}, continuing unencrypted")

            await self._authenticate()

            logger.info(f"Successfully connected to {creds.host}")

        except asyncio.TimeoutError as e:
            self._reset()
            raise IMAPConnectionError(
                f"Connection timed out to {creds.host}:{creds.port}"
            ) from e
        except OSError as e:
            self._reset()
            raise IMAPConnectionError(
                f"Failed to connect to {creds.host}:{creds.port}: {e}"
            ) from e
        except (aioimaplib.Abort, aioimaplib.CommandTimeout) as e:
            self._reset()
            raise IMAPConnectionError(
                f"Handshake with {creds.host}:{creds.port} failed: {e}"
            ) from e
        except IMAPError:
            self._reset()
            raise

    async def _authenticate(self) -> None:
        """
        Log in with the configured user and password.

        Raises:
            IMAPAuthenticationError: If the server rejects the login.
        """
        logger.debug(f"Authenticating as {self.credentials.user}")

        response = await self._client.login(self.credentials.user, self.credentials.password)

        if response.result != "OK":
            raise IMAPAuthenticationError(
                f"Authentication failed for {self.credentials.user}: {self._lines(response)}"
            )

        self.state.authenticated = True

        # Capabilities may change after login (RFC 3501 section 6.2.3)
        self.state.capabilities = [c.upper() for c in self._client.protocol.capabilities]
        logger.debug("Authentication successful")

    async def disconnect(self) -> None:
        """
        Gracefully disconnect from the IMAP server.

        Sends LOGOUT. Failures are logged, never raised.
        """
        if self._client and self.state.connected:
            try:
                logger.debug("Sending LOGOUT")
                await self._client.logout()
            except Exception as e:
                logger.warning(f"Error during logout: {e}")
            finally:
                self._reset()

    async def ensure_connected(self) -> None:
        """
        Ensure we have an active connection, connecting if necessary.

        Raises:
            IMAPConnectionError: If connecting fails.
            IMAPAuthenticationError: If login fails.
        """
        if not self.is_connected:
            await self.connect()

    def has_capability(self, capability: str) -> bool:
        """Check whether the server advertised a capability."""
        return capability.upper() in self.state.capabilities

    def discard(self) -> None:
        """
        Forget a broken connection without talking to the server.

        The next ensure_connected() opens a fresh one.
        """
        if self._client is not None:
            logger.debug(f"Discarding connection to {self.credentials.host}")
        self._reset()

    def _reset(self) -> None:
        self._client = None
        self.state = ConnectionState()

    @staticmethod
    def _lines(response) -> str:
        """Render response lines for error messages."""
        return " ".join(
            line.decode("utf-8", errors="replace") if isinstance(line, (bytes, bytearray)) else str(line)
            for line in response.lines
        )

    def _check(self, response, action: str) -> None:
        if response.result != "OK":
            logger.error(f"{action} failed: {self._lines(response)}")
            raise IMAPError(f"{action} failed: {self._lines(response)}")

    # =========================================================================
    # Folder Operations
    # =========================================================================

    async def list_folders(self) -> list[Folder]:
        """
        Fetch the flat list of all folders/mailboxes.

        Returns:
            Folders in server order, without counts or children.
        """
        await self.ensure_connected()

        logger.debug("Listing folders")

        # Pattern "" "*" means all folders from root
        response = await self._client.list('""', "*")
        self._check(response, "LIST")

        folders = []
        for line in response.lines:
            folder = self._parse_folder_line(line)
            if folder:
                folders.append(folder)

        logger.debug(f"Found {len(folders)} folders")
        return folders

    def _parse_folder_line(self, line: bytes | str) -> Folder | None:
        """
        Parse a single LIST response line into a Folder object.

        LIST response format:
            (\\HasNoChildren) "/" "INBOX"
            (\\HasNoChildren \\Sent) "/" "Sent"
            (\\Noselect) NIL "Public"
        """
        if isinstance(line, (bytes, bytearray)):
            line = bytes(line).decode("utf-8", errors="replace")

        # Skip empty lines and status/completion messages
        if not line or "completed" in line.lower():
            return None

        match = re.match(r'\(([^)]*)\)\s+(?:"((?:[^"\\]|\\.)*)"|NIL)\s+(.+)$', line.strip(), re.IGNORECASE)
        if not match:
            logger.warning(f"Could not parse folder line: {line}")
            return None

        flags_str, delimiter, name = match.groups()
        attributes = flags_str.split() if flags_str else []
        delimiter = (delimiter or "").replace('\\\\', '\\')

        name = name.strip()
        if name.startswith('"') and name.endswith('"'):
            name = name[1:-1].replace('\\"', '"').replace('\\\\', '\\')

        display_name = name.rsplit(delimiter, 1)[-1] if delimiter else name

        return Folder(
            name=display_name,
            full_name=name,
            ref=FolderRef.for_path(self.credentials, name),
            separator=delimiter,
            attributes=attributes,
            folder_type=Folder.detect_type(name, attributes),
        )

    async def select_folder(self, folder_name: str, readonly: bool = False) -> dict:
        """
        Open a folder for subsequent operations.

        A folder that is already open in a compatible mode is not re-opened:
        read-write satisfies both modes, read-only satisfies read-only. A
        read-only folder is re-selected when read-write is requested; a
        read-write folder is never downgraded.

        Args:
            folder_name: Name of the folder to select.
            readonly: If True, open in read-only mode (EXAMINE).

        Returns:
            Dictionary with folder status (EXISTS, UIDVALIDITY, UIDNEXT,
            HIGHESTMODSEQ when the server reports them).

        Raises:
            IMAPError: If folder selection fails.
        """
        await self.ensure_connected()

        if self.state.selected_folder == folder_name and (readonly or not self.state.selected_readonly):
            # Use STATUS to get message counts without reselecting
            status = await self.get_folder_status(folder_name)
            return {
                "EXISTS": status.get("MESSAGES", 0),
                "UIDVALIDITY": status.get("UIDVALIDITY"),
                "UIDNEXT": status.get("UIDNEXT"),
                "HIGHESTMODSEQ": status.get("HIGHESTMODSEQ"),
            }

        logger.debug(f"Selecting folder: {folder_name} (readonly={readonly})")

        quoted_name = _quote_folder_name(folder_name)

        if readonly:
            response = await self._client.examine(quoted_name)
        else:
            response = await self._client.select(quoted_name)

        self._check(response, f"Selecting folder '{folder_name}'")

        status = self._parse_select_response(response)

        self.state.selected_folder = folder_name
        self.state.selected_readonly = readonly

        logger.debug(f"Selected folder: {folder_name}, {status}")
        return status

    def _parse_select_response(self, response) -> dict:
        """Parse SELECT/EXAMINE response into a status dictionary."""
        status = {}

        for line in response.lines:
            if isinstance(line, (bytes, bytearray)):
                line = bytes(line).decode("utf-8", errors="replace")

            match = re.search(r"(\d+)\s+EXISTS", line, re.IGNORECASE)
            if match:
                status["EXISTS"] = int(match.group(1))

            match = re.search(r"UIDVALIDITY\s+(\d+)", line, re.IGNORECASE)
            if match:
                status["UIDVALIDITY"] = int(match.group(1))

            match = re.search(r"UIDNEXT\s+(\d+)", line, re.IGNORECASE)
            if match:
                status["UIDNEXT"] = int(match.group(1))

            # Reported once CONDSTORE is enabled; NOMODSEQ means "not tracked"
            match = re.search(r"HIGHESTMODSEQ\s+(\d+)", line, re.IGNORECASE)
            if match:
                status["HIGHESTMODSEQ"] = int(match.group(1))

        return status

    async def close_folder(self) -> None:
        """
        Close the selected folder without expunging anything.

        CLOSE on a read-write folder silently expunges \\Deleted messages, so
        a read-write folder is re-opened with EXAMINE first. aioimaplib has
        no UNSELECT command, so this path is used even when the server
        advertises UNSELECT (RFC 3691).
        """
        folder_name = self.state.selected_folder
        if folder_name is None or self._client is None:
            return

        logger.debug(f"Closing folder: {folder_name}")
        try:
            if not self.state.selected_readonly:
                response = await self._client.examine(_quote_folder_name(folder_name))
                self._check(response, f"Re-examining folder '{folder_name}'")
            response = await self._client.close()
            self._check(response, f"Closing folder '{folder_name}'")
        finally:
            self.state.selected_folder = None
            self.state.selected_readonly = None

    async def get_folder_status(self, folder_name: str) -> dict:
        """
        Get status of a folder without selecting it.

        Args:
            folder_name: Name of the folder.

        Returns:
            Dictionary with MESSAGES, UNSEEN, UIDNEXT, UIDVALIDITY and, on
            CONDSTORE servers, HIGHESTMODSEQ.
        """
        await self.ensure_connected()

        items = "MESSAGES UNSEEN UIDNEXT UIDVALIDITY"
        if self.has_capability("CONDSTORE"):
            items += " HIGHESTMODSEQ"

        response = await self._client.status(_quote_folder_name(folder_name), f"({items})")
        self._check(response, f"STATUS of '{folder_name}'")

        status = {}
        for line in response.lines:
            if isinstance(line, (bytes, bytearray)):
                line = bytes(line).decode("utf-8", errors="replace")

            # Extract values from the last parenthesised group
            match = re.search(r"\(([^()]*)\)\s*$", line)
            if match:
                pairs = match.group(1).split()
                for i in range(0, len(pairs) - 1, 2):
                    try:
                        status[pairs[i].upper()] = int(pairs[i + 1])
                    except ValueError:
                        pass

        return status

    # =========================================================================
    # Message Fetching
    # =========================================================================

    def _envelope_items(self, modseq: bool) -> str:
        items = "UID FLAGS RFC822.SIZE"
        if modseq and self.has_capability("CONDSTORE"):
            items += " MODSEQ"
        return f"({items} BODY.PEEK[HEADER.FIELDS ({ENVELOPE_HEADERS})])"

    async def fetch_envelopes(self, message_set: str, *, by_uid: bool = False, modseq: bool = False) -> list[Message]:
        """
        Batch-fetch envelope data for a set of messages in one round trip.

        Args:
            message_set: Sequence set, e.g. "1:20" or "5,7,9".
            by_uid: Interpret message_set as UIDs (UID FETCH).
            modseq: Also fetch each message's MODSEQ (CONDSTORE servers only).

        Returns:
            Messages in server order.
        """
        items = self._envelope_items(modseq)
        logger.debug(f"Fetching envelopes: {message_set} (UID={by_uid})")

        if by_uid:
            response = await self._client.uid("fetch", message_set, items)
        else:
            response = await self._client.fetch(message_set, items)
        self._check(response, "FETCH")

        messages = []
        for record in split_fetch_response(response.lines):
            message = parse_envelope(record)
            if message:
                messages.append(message)

        logger.debug(f"Fetched {len(messages)} envelopes")
        return messages

    async def fetch_envelopes_since_uid(self, first_uid: int, *, modseq: bool = False) -> list[Message]:
        """
        Fetch envelopes of messages with UID >= first_uid.

        "n:*" always matches at least the last message even when its UID is
        below n, so results under first_uid are dropped.
        """
        messages = await self.fetch_envelopes(f"{first_uid}:*", by_uid=True, modseq=modseq)
        return [m for m in messages if m.uid >= first_uid]

    async def resolve_uids(self, uids: list[int]) -> list[int]:
        """
        Filter UIDs down to messages that still exist in the selected folder.

        Args:
            uids: Requested UIDs, possibly stale.

        Returns:
            Live UIDs, in the order they were requested, without duplicates.
        """
        if not uids:
            return []

        response = await self._client.uid("fetch", uid_set(uids), "(UID)")
        self._check(response, "UID FETCH")

        live = {record.uid for record in split_fetch_response(response.lines)}
        resolved = []
        for uid in uids:
            if uid in live and uid not in resolved:
                resolved.append(uid)

        if len(resolved) != len(set(uids)):
            logger.debug(f"Dropped stale UIDs: {sorted(set(uids) - set(resolved))}")
        return resolved

    async def fetch_message_source(self, uid: int) -> tuple[Message, bytes] | None:
        """
        Fetch the full raw message (without setting \\Seen).

        Args:
            uid: IMAP UID of the message in the selected folder.

        Returns:
            (envelope, raw RFC 822 bytes), or None if no such message.
        """
        response = await self._client.uid("fetch", str(uid), "(UID FLAGS RFC822.SIZE BODY.PEEK[])")
        self._check(response, "UID FETCH")

        for record in split_fetch_response(response.lines):
            if record.uid == uid and record.literals:
                raw = record.literals[0]
                message = parse_envelope(FetchRecord(text=record.text, literals=[raw]))
                return message, raw

        return None

    # =========================================================================
    # Flag & Message Operations
    # =========================================================================

    async def store_flags(self, uids: list[int], flags: list[str], *, add: bool = True) -> None:
        """
        Add or remove flags on messages in the selected folder.

        Args:
            uids: UIDs of messages to modify.
            flags: Flags to add/remove (e.g., ["\\Seen"]).
            add: If True, add flags. If False, remove flags.
        """
        if not uids:
            return

        command = f"{'+' if add else '-'}FLAGS ({' '.join(flags)})"
        logger.debug(f"Setting flags on {uid_set(uids)}: {command}")

        response = await self._client.uid("store", uid_set(uids), command)
        self._check(response, "UID STORE")

    async def copy_messages(self, uids: list[int], dest_folder: str) -> None:
        """Copy messages from the selected folder to dest_folder."""
        if not uids:
            return

        logger.debug(f"Copying {len(uids)} messages to {dest_folder}")
        response = await self._client.uid("copy", uid_set(uids), _quote_folder_name(dest_folder))
        self._check(response, "UID COPY")

    async def expunge_messages(self, uids: list[int]) -> None:
        """
        Permanently remove the given \\Deleted messages from the selected folder.

        With UIDPLUS this is a single UID EXPUNGE. Without it, other messages
        already flagged \\Deleted have the flag taken off for the duration of
        a plain EXPUNGE and put back afterwards, so only the given UIDs go.
        """
        if not uids:
            return

        if self.has_capability("UIDPLUS"):
            response = await self._client.uid("expunge", uid_set(uids))
            self._check(response, "UID EXPUNGE")
            return

        wanted = set(uids)
        others = [uid for uid in await self._deleted_uids() if uid not in wanted]
        if others:
            logger.debug(f"Server lacks UIDPLUS, sparing {len(others)} other \\Deleted messages")
            await self.store_flags(others, ["\\Deleted"], add=False)
        try:
            response = await self._client.expunge()
            self._check(response, "EXPUNGE")
        finally:
            if others:
                await self.store_flags(others, ["\\Deleted"], add=True)

    async def _deleted_uids(self) -> list[int]:
        """UIDs of every message in the selected folder flagged \\Deleted."""
        response = await self._client.uid_search("DELETED", charset=None)
        self._check(response, "UID SEARCH DELETED")

        uids = []
        for line in response.lines:
            if isinstance(line, (bytes, bytearray)):
                line = line.decode("utf-8", errors="replace")
            if "completed" in line.lower():
                continue
            uids.extend(int(n) for n in re.findall(r"\b\d+\b", line))
        return uids


# =============================================================================
# Exceptions
# =============================================================================

class IMAPError(Exception):
    """Base exception for IMAP operations."""
    pass


class IMAPConnectionError(IMAPError):
    """Raised when unable to connect to IMAP server."""
    pass


class IMAPAuthenticationError(IMAPError):
    """Raised when IMAP authentication fails."""
    pass


# Everything a failed command or a broken connection can raise at callers
PROTOCOL_FAILURES = (
    IMAPError,
    aioimaplib.Abort,
    aioimaplib.CommandTimeout,
    OSError,
    asyncio.TimeoutError,
)

# The subset of PROTOCOL_FAILURES after which the connection can't be reused
CONNECTION_FAILURES = (
    IMAPConnectionError,
    aioimaplib.Abort,
    aioimaplib.CommandTimeout,
    OSError,
    asyncio.TimeoutError,
)
