# =============================================================================
# MIME Part Tree
# =============================================================================
# A message body is a tree of MIME parts. We model it as a tagged variant so
# the rendering code can walk it with plain recursive functions instead of
# poking at email.message.Message objects everywhere:
#
#   - LEAF:       a single body part (text, image, file...) with its bytes
#   - MULTIPART:  an ordered list of child parts (multipart/*)
#   - MESSAGE:    an embedded message (message/rfc822 and friends)
#
# parse_message() builds the tree from the raw RFC 822 bytes returned by
# FETCH BODY.PEEK[], using the standard library email parser.
# =============================================================================

import logging
from dataclasses import dataclass, field
from email.message import Message as EmailMessage
from email.parser import BytesParser
from email.policy import default as default_policy
from enum import Enum, auto

logger = logging.getLogger(__name__)


class PartKind(Enum):
    """Which branch of the tagged variant a MimePart is."""
    LEAF = auto()
    MULTIPART = auto()
    MESSAGE = auto()


@dataclass
class MimePart:
    """
    One node of a MIME tree.

    Attributes:
        kind: LEAF, MULTIPART or MESSAGE.
        content_type: Raw Content-Type value, parameters included
                      (e.g., 'image/png; name="logo.png"').
        disposition: Lowercased Content-Disposition type ("attachment",
                     "inline") or None.
        filename: Decoded file name, if any.
        content_id: Raw Content-ID value (e.g., "<logo@example.com>"), if any.
        transfer_encoding: Lowercased Content-Transfer-Encoding, if declared.
        charset: Declared charset for text parts.
        size: Size of the part as stored on the server (still encoded).
        payload: Decoded bytes for LEAF parts; raw bytes of the embedded
                 message for MESSAGE parts; empty for MULTIPART.
        children: Sub-parts of a MULTIPART, in order.
        subject: Subject of the embedded message (MESSAGE parts only).
        nested: Parsed body of the embedded message (MESSAGE parts only).
    """

    kind: PartKind
    content_type: str
    disposition: str | None = None
    filename: str | None = None
    content_id: str | None = None
    transfer_encoding: str | None = None
    charset: str | None = None
    size: int = 0
    payload: bytes = b""
    children: list["MimePart"] = field(default_factory=list)
    subject: str | None = None
    nested: "MimePart | None" = None

    # -------------------------------------------------------------------------
    # Classification helpers
    # -------------------------------------------------------------------------

    @property
    def mime_type(self) -> str:
        """Lowercased "type/subtype" without parameters."""
        return self.content_type.split(";", 1)[0].strip().lower()

    @property
    def is_multipart(self) -> bool:
        return self.kind is PartKind.MULTIPART

    @property
    def is_message(self) -> bool:
        return self.kind is PartKind.MESSAGE

    @property
    def is_image(self) -> bool:
        return self.kind is PartKind.LEAF and self.mime_type.startswith("image/")

    @property
    def is_attachment(self) -> bool:
        """True if Content-Disposition is literally "attachment"."""
        return self.disposition == "attachment"

    def text(self) -> str:
        """Decode the payload of a text part to str using its charset."""
        charset = self.charset or "utf-8"
        try:
            return self.payload.decode(charset, errors="replace")
        except LookupError:
            return self.payload.decode("utf-8", errors="replace")

    def walk(self):
        """Yield this part and every descendant, depth-first, left-to-right."""
        yield self
        for child in self.children:
            yield from child.walk()

    # -------------------------------------------------------------------------
    # Constructors (mostly handy for building trees by hand)
    # -------------------------------------------------------------------------

    @classmethod
    def leaf(
        cls,
        content_type: str,
        payload: bytes,
        *,
        disposition: str | None = None,
        filename: str | None = None,
        content_id: str | None = None,
        transfer_encoding: str | None = None,
        charset: str | None = None,
        size: int | None = None,
    ) -> "MimePart":
        return cls(
            kind=PartKind.LEAF,
            content_type=content_type,
            disposition=disposition.lower() if disposition else None,
            filename=filename,
            content_id=content_id,
            transfer_encoding=transfer_encoding.lower() if transfer_encoding else None,
            charset=charset,
            size=len(payload) if size is None else size,
            payload=payload,
        )

    @classmethod
    def multipart(cls, subtype: str, children: list["MimePart"]) -> "MimePart":
        return cls(
            kind=PartKind.MULTIPART,
            content_type=f"multipart/{subtype}",
            children=list(children),
            size=sum(c.size for c in children),
        )

    @classmethod
    def message(
        cls,
        subject: str,
        raw: bytes,
        *,
        content_type: str = "message/rfc822",
        disposition: str | None = None,
        nested: "MimePart | None" = None,
    ) -> "MimePart":
        return cls(
            kind=PartKind.MESSAGE,
            content_type=content_type,
            disposition=disposition.lower() if disposition else None,
            size=len(raw),
            payload=raw,
            subject=subject,
            nested=nested,
        )

    def __repr__(self) -> str:
        if self.is_multipart:
            return f"MimePart({self.mime_type}, children={len(self.children)})"
        return f"MimePart({self.mime_type}, size={self.size}, filename={self.filename!r})"


# =============================================================================
# Parsing
# =============================================================================

def parse_message(raw: bytes) -> MimePart:
    """
    Parse raw RFC 822 message bytes into a MimePart tree.

    Args:
        raw: The full message as returned by FETCH BODY.PEEK[].

    Returns:
        Root part of the message body.
    """
    msg = BytesParser(policy=default_policy).parsebytes(raw)
    return _convert(msg)


def _convert(part: EmailMessage) -> MimePart:
    """Recursively convert an email.message.Message into a MimePart."""
    content_type = str(part.get("Content-Type", "")) or part.get_content_type()
    maintype = part.get_content_maintype()
    disposition = part.get_content_disposition()

    # message/* must be checked before is_multipart(): the email package
    # reports embedded messages as multipart with a one-element payload
    if maintype == "message":
        nested_msg = part.get_payload(0) if part.is_multipart() else None
        if isinstance(nested_msg, EmailMessage):
            raw = _as_bytes(nested_msg)
            return MimePart(
                kind=PartKind.MESSAGE,
                content_type=content_type,
                disposition=disposition,
                filename=part.get_filename(),
                size=len(raw),
                payload=raw,
                subject=str(nested_msg.get("Subject", "")),
                nested=_convert(nested_msg),
            )
        # Unparsed message/* bodies (e.g., message/delivery-status) are leaves

    if part.is_multipart():
        children = [_convert(child) for child in part.get_payload()]
        return MimePart(
            kind=PartKind.MULTIPART,
            content_type=content_type,
            disposition=disposition,
            size=sum(c.size for c in children),
            children=children,
        )

    content_id = part.get("Content-ID")
    encoding = part.get("Content-Transfer-Encoding")
    payload = part.get_payload(decode=True)

    return MimePart(
        kind=PartKind.LEAF,
        content_type=content_type,
        disposition=disposition,
        filename=part.get_filename(),
        content_id=str(content_id).strip() if content_id else None,
        transfer_encoding=str(encoding).strip().lower() if encoding else None,
        charset=part.get_content_charset(),
        size=_encoded_size(part),
        payload=payload if isinstance(payload, bytes) else b"",
    )


def _encoded_size(part: EmailMessage) -> int:
    """Size of the part body as transferred (before content decoding)."""
    raw = part.get_payload(decode=False)
    if isinstance(raw, str):
        return len(raw.encode("utf-8", errors="surrogateescape"))
    if isinstance(raw, bytes):
        return len(raw)
    return 0


def _as_bytes(msg: EmailMessage) -> bytes:
    """Serialize an embedded message back to bytes."""
    try:
        return msg.as_bytes()
    except (UnicodeError, LookupError) as e:
        logger.debug(f"Falling back to string serialization of embedded message: {e}")
        return msg.as_string().encode("utf-8", errors="replace")
