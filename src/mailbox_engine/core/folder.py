# =============================================================================
# Folder Model
# =============================================================================
# Represents a mailbox folder (IMAP "mailbox") and the opaque identifier
# callers use to address it.
#
# A FolderRef is an imap[s]://user@host:port/path URL. Transports pass it
# around as a URL-safe base64 token, so a folder id survives being put in a
# URL path segment or a browser cache key.
#
# IMAP allows arbitrary folder hierarchies, so users may have custom folders
# like "Work/Projects/Alpha" or "Receipts.2024" (the separator is per server).
# =============================================================================

import base64
import binascii
from dataclasses import dataclass, field
from enum import Enum, auto
from urllib.parse import quote, unquote, urlsplit

from mailbox_engine.core.account import Credentials


class FolderType(Enum):
    """
    Standard folder types that have special meaning in email clients.

    These map to IMAP SPECIAL-USE attributes (RFC 6154) when available,
    or are inferred from common naming conventions.
    """
    INBOX = auto()      # Primary incoming mail
    SENT = auto()       # Sent messages
    DRAFTS = auto()     # Unsent drafts
    TRASH = auto()      # Deleted messages (before permanent deletion)
    JUNK = auto()       # Spam/junk mail
    ARCHIVE = auto()    # Archived messages
    OTHER = auto()      # User-created or unrecognized folders


@dataclass(frozen=True)
class FolderRef:
    """
    Opaque, round-trippable identifier for a folder on a specific server.

    Two refs are equal when they point to the same folder path; the server
    part is informational (a session only ever talks to one server).

    Attributes:
        url: The full folder URL, e.g. "imaps://user@imap.example.com:993/INBOX".

    Example:
        >>> ref = FolderRef.for_path(credentials, "Work/Projects")
        >>> FolderRef.from_token(ref.to_token()) == ref
        True
    """

    url: str

    @classmethod
    def for_path(cls, credentials: Credentials, path: str) -> "FolderRef":
        """Build the ref for a folder path on the credentials' server."""
        user = quote(credentials.user, safe="")
        return cls(
            f"{credentials.scheme}://{user}@{credentials.host}:{credentials.port}/"
            f"{quote(path, safe='')}"
        )

    @classmethod
    def from_token(cls, token: str) -> "FolderRef":
        """
        Decode a transport token produced by to_token().

        Raises:
            ValueError: If the token is not valid base64 or not a folder URL.
        """
        padded = token + "=" * (-len(token) % 4)
        try:
            url = base64.urlsafe_b64decode(padded.encode("ascii")).decode("utf-8")
        except (binascii.Error, UnicodeError) as e:
            raise ValueError(f"Invalid folder token: {token!r}") from e
        if not urlsplit(url).scheme.startswith("imap"):
            raise ValueError(f"Invalid folder token: {token!r}")
        return cls(url)

    def to_token(self) -> str:
        """Encode as a URL-safe base64 token (no padding)."""
        return base64.urlsafe_b64encode(self.url.encode("utf-8")).decode("ascii").rstrip("=")

    @property
    def path(self) -> str:
        """The decoded full folder path, e.g. "Work/Projects"."""
        return unquote(urlsplit(self.url).path.lstrip("/"))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FolderRef):
            return NotImplemented
        return self.path == other.path

    def __hash__(self) -> int:
        return hash(self.path)

    def __str__(self) -> str:
        return self.path


@dataclass
class Folder:
    """
    Represents a mailbox folder in an email account.

    Folders form a tree: a parent exclusively owns its children, and there
    are no links back up. Build the tree with build_folder_tree().

    Attributes:
        name: Display name (last path segment), e.g. "Alpha".
        full_name: Full server path, e.g. "Work/Projects/Alpha".
        ref: Identifier used to address this folder in later calls.
        separator: Hierarchy delimiter reported by the server.
        attributes: LIST attributes, e.g. ["\\HasNoChildren", "\\Sent"].
        folder_type: Semantic type derived from attributes or name.
        children: Sub-folders, in server order.
        message_count: Total number of messages (from STATUS).
        unread_count: Number of unseen messages (from STATUS).
    """

    name: str
    full_name: str
    ref: FolderRef
    separator: str = "/"
    attributes: list[str] = field(default_factory=list)
    folder_type: FolderType = FolderType.OTHER
    children: list["Folder"] = field(default_factory=list)
    message_count: int = 0
    unread_count: int = 0

    @property
    def selectable(self) -> bool:
        """False for placeholder folders that can't hold messages."""
        upper = {a.upper() for a in self.attributes}
        return "\\NOSELECT" not in upper and "\\NONEXISTENT" not in upper

    @property
    def parent_path(self) -> str | None:
        """
        Returns the parent folder path, or None if this is a top-level folder.

        Example:
            >>> Folder(name="Alpha", full_name="Work/Projects/Alpha", ...).parent_path
            "Work/Projects"
        """
        if self.separator and self.separator in self.full_name:
            return self.full_name.rsplit(self.separator, 1)[0]
        return None

    @staticmethod
    def detect_type(full_name: str, attributes: list[str]) -> FolderType:
        """
        Detect the folder type from SPECIAL-USE attributes or folder name.

        SPECIAL-USE attributes (RFC 6154):
            \\All, \\Archive, \\Drafts, \\Flagged, \\Junk, \\Sent, \\Trash

        Not all servers support SPECIAL-USE, so fall back to the names
        different providers commonly use.
        """
        upper = {a.upper() for a in attributes}

        if full_name.upper() == "INBOX":
            return FolderType.INBOX
        elif "\\SENT" in upper:
            return FolderType.SENT
        elif "\\DRAFTS" in upper:
            return FolderType.DRAFTS
        elif "\\TRASH" in upper:
            return FolderType.TRASH
        elif "\\JUNK" in upper:
            return FolderType.JUNK
        elif "\\ARCHIVE" in upper or "\\ALL" in upper:
            return FolderType.ARCHIVE

        name_lower = full_name.lower()
        if name_lower in ("sent", "sent mail", "sent items", "[gmail]/sent mail"):
            return FolderType.SENT
        elif name_lower in ("drafts", "draft", "[gmail]/drafts"):
            return FolderType.DRAFTS
        elif name_lower in ("trash", "deleted", "deleted items", "[gmail]/trash"):
            return FolderType.TRASH
        elif name_lower in ("junk", "spam", "junk mail", "[gmail]/spam"):
            return FolderType.JUNK
        elif name_lower in ("archive", "all mail", "[gmail]/all mail"):
            return FolderType.ARCHIVE

        return FolderType.OTHER

    def walk(self):
        """Yield this folder and all descendants, depth-first."""
        yield self
        for child in self.children:
            yield from child.walk()

    def __str__(self) -> str:
        unread_indicator = f" ({self.unread_count})" if self.unread_count > 0 else ""
        return f"{self.full_name}{unread_indicator}"

    def __repr__(self) -> str:
        return (
            f"Folder(full_name={self.full_name!r}, type={self.folder_type.name}, "
            f"messages={self.message_count}, unread={self.unread_count}, "
            f"children={len(self.children)})"
        )


def build_folder_tree(folders: list[Folder], load_children: bool = True) -> list[Folder]:
    """
    Arrange a flat LIST result into a tree.

    A folder whose parent path is missing from the listing is promoted to the
    top level. Duplicate paths are dropped (first occurrence wins).

    Args:
        folders: Flat folders in server order. Their children lists are reset.
        load_children: If False, only top-level folders are returned, with
                       empty children.

    Returns:
        Top-level folders in server order.
    """
    by_path: dict[str, Folder] = {}
    for folder in folders:
        if folder.full_name in by_path:
            continue
        folder.children = []
        by_path[folder.full_name] = folder

    roots: list[Folder] = []
    for folder in by_path.values():
        parent = by_path.get(folder.parent_path) if folder.parent_path else None
        if parent is None:
            roots.append(folder)
        elif load_children:
            parent.children.append(folder)

    return roots
