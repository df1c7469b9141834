# =============================================================================
# Message Model
# =============================================================================
# Represents an email message as the engine hands it to callers:
#   - Envelope information (from, to, subject, date, size)
#   - IMAP identity and state (UID, flags, MODSEQ)
#   - For fully loaded messages: rendered content and attachment list
#
# Everything here is built per request from live server state. Nothing is
# cached or persisted by the engine.
# =============================================================================

from dataclasses import dataclass, field
from datetime import datetime
from enum import IntFlag

from mailbox_engine.core.folder import FolderRef


class MessageFlags(IntFlag):
    """
    Standard IMAP system flags (RFC 3501), stored as a bitmask.

    Usage:
        # Check flags
        if msg.flags & MessageFlags.SEEN:
            print("Message has been read")

        # Add a flag
        msg.flags |= MessageFlags.ANSWERED
    """
    NONE = 0            # No flags set
    SEEN = 1 << 0       # Message has been read (\\Seen)
    ANSWERED = 1 << 1   # Message has been replied to (\\Answered)
    FLAGGED = 1 << 2    # User-flagged / starred (\\Flagged)
    DELETED = 1 << 3    # Marked for deletion (\\Deleted)
    DRAFT = 1 << 4      # Is a draft (\\Draft)

    @classmethod
    def from_imap(cls, flags_str: str) -> "MessageFlags":
        """Convert an IMAP FLAGS list (the text inside the parens) to MessageFlags."""
        result = cls.NONE

        flags_upper = flags_str.upper()
        if "\\SEEN" in flags_upper:
            result |= cls.SEEN
        if "\\ANSWERED" in flags_upper:
            result |= cls.ANSWERED
        if "\\FLAGGED" in flags_upper:
            result |= cls.FLAGGED
        if "\\DELETED" in flags_upper:
            result |= cls.DELETED
        if "\\DRAFT" in flags_upper:
            result |= cls.DRAFT

        return result


@dataclass
class Attachment:
    """
    A part of a message offered to the user for download.

    Attachments come in two kinds, told apart by content_id:
        - Embedded images too big to inline: content_id is set, and the part
          is retrieved by content-id.
        - Regular files and attached messages: content_id is None, and the
          part is retrieved by filename (the subject for attached messages).

    Attributes:
        content_id: Content-ID header value for embedded images, else None.
        filename: File name, or the subject of an attached message.
        content_type: Declared MIME type, including parameters.
        size: Size in bytes as stored on the server (encoded size).
    """
    content_id: str | None
    filename: str | None
    content_type: str
    size: int

    @property
    def is_image(self) -> bool:
        """Returns True if this attachment is an image."""
        return self.content_type.lower().startswith("image/")

    @property
    def is_embedded(self) -> bool:
        """Returns True if this is an embedded image addressed by content-id."""
        return self.content_id is not None

    @property
    def human_size(self) -> str:
        """
        Returns a human-readable file size.

        Examples:
            - 500 -> "500 B"
            - 1500 -> "1.5 KB"
        """
        size = float(self.size)
        for unit in ("B", "KB", "MB", "GB"):
            if size < 1024:
                return f"{size:.1f} {unit}" if size != int(size) else f"{int(size)} {unit}"
            size /= 1024
        return f"{size:.1f} TB"


@dataclass
class Message:
    """
    Envelope-level view of an email message.

    Attributes:
        uid: IMAP UID - unique within a folder, never reused, immutable.
        message_id: RFC 5322 Message-ID header (e.g., "<abc123@example.com>").
        subject: Email subject line.
        sender: The "From" address (single address).
        sender_name: Display name of the sender (e.g., "John Doe").
        recipients: "To" and "Cc" addresses.
        date_sent: When the message was sent (from the Date header), in UTC.
        size: RFC822.SIZE reported by the server.
        flags: IMAP system flags.
        modseq: Folder change watermark. Only set when requested and the
                server supports CONDSTORE.
    """

    uid: int = 0
    message_id: str = ""
    subject: str = ""
    sender: str = ""
    sender_name: str = ""
    recipients: list[str] = field(default_factory=list)
    date_sent: datetime | None = None
    size: int = 0
    flags: MessageFlags = MessageFlags.NONE
    modseq: int | None = None

    @property
    def is_read(self) -> bool:
        """Returns True if the message has been read (SEEN flag)."""
        return bool(self.flags & MessageFlags.SEEN)

    @property
    def is_flagged(self) -> bool:
        """Returns True if the message is starred/flagged."""
        return bool(self.flags & MessageFlags.FLAGGED)

    @property
    def is_deleted(self) -> bool:
        """Returns True if the message is marked for deletion."""
        return bool(self.flags & MessageFlags.DELETED)

    @property
    def display_sender(self) -> str:
        """Prefers the sender's display name, falls back to the address."""
        return self.sender_name or self.sender

    def __str__(self) -> str:
        read_marker = " " if self.is_read else "*"
        flag_marker = "!" if self.is_flagged else " "
        return f"{read_marker}{flag_marker} {self.uid:>6} {self.display_sender}: {self.subject}"

    def __repr__(self) -> str:
        return (
            f"Message(uid={self.uid}, subject={self.subject!r}, "
            f"from={self.sender!r}, flags={self.flags!r})"
        )


@dataclass(repr=False)
class MessageWithFolder(Message):
    """
    A message bound to its folder, optionally with rendered body.

    Attributes:
        folder: The folder the message lives in.
        content: Renderable HTML. Plain-text bodies are escaped inside <pre>.
        attachments: Parts offered for download, in MIME tree order.
    """

    folder: FolderRef | None = None
    content: str = ""
    attachments: list[Attachment] = field(default_factory=list)

    @classmethod
    def from_message(cls, message: Message, folder: FolderRef) -> "MessageWithFolder":
        """Attach a folder to an envelope-only message."""
        return cls(
            uid=message.uid,
            message_id=message.message_id,
            subject=message.subject,
            sender=message.sender,
            sender_name=message.sender_name,
            recipients=list(message.recipients),
            date_sent=message.date_sent,
            size=message.size,
            flags=message.flags,
            modseq=message.modseq,
            folder=folder,
        )

    @property
    def ref(self) -> tuple[FolderRef | None, int]:
        """The (folder, uid) pair identifying this message."""
        return self.folder, self.uid


@dataclass
class AttachmentPayload:
    """
    The bytes of a retrieved attachment or embedded image.

    Attributes:
        content_type: Declared MIME type of the part, including parameters.
        filename: File name (or attached message subject), if any.
        data: Decoded part content.
    """

    content_type: str
    filename: str | None
    data: bytes

    def stream(self, chunk_size: int = 64 * 1024):
        """Yield the payload in chunks, for transports that write incrementally."""
        for offset in range(0, len(self.data), chunk_size):
            yield self.data[offset:offset + chunk_size]
