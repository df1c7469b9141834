# =============================================================================
# Attachment Collection & Part Lookup
# =============================================================================
# Works out which parts of a message are offered for download, and finds a
# part again when one is requested.
#
# Classification, per part in tree order:
#   - multipart/*               -> look inside
#   - image/* with a Content-ID -> small enough: inlined into the content,
#                                  not listed. Too big: listed, addressed
#                                  by content-id.
#   - message/* (forwarded)     -> listed under the nested subject
#   - disposition "attachment"  -> listed under its filename
#   - anything else             -> body text or decoration, not listed
#
# find_part() follows the same rules in reverse, so anything listed by
# collect_attachments() can be retrieved.
# =============================================================================

import logging

from mailbox_engine.core import Attachment, MessageWithFolder, MimePart
from mailbox_engine.errors import NotFoundError
from mailbox_engine.rendering.inline import inline_image, normalize_content_id

logger = logging.getLogger(__name__)

# Images up to this many bytes are inlined as data: URLs
EMBEDDED_IMAGE_SIZE_THRESHOLD = 51200


def _top_parts(root: MimePart) -> list[MimePart]:
    """A single-part message is treated as a multipart holding that part."""
    return root.children if root.is_multipart else [root]


def collect_attachments(
    root: MimePart,
    owner: MessageWithFolder,
    size_threshold: int = EMBEDDED_IMAGE_SIZE_THRESHOLD,
) -> list[Attachment]:
    """
    List the attachments of a message, inlining small embedded images.

    Inlined images rewrite owner.content, so extract the content first.

    Args:
        root: The message's MIME tree.
        owner: The message being built; its content is updated in place.
        size_threshold: Largest image (encoded size, bytes) to inline.

    Returns:
        Attachments in tree order.
    """
    attachments: list[Attachment] = []
    _collect(_top_parts(root), owner, size_threshold, attachments)
    return attachments


def _collect(
    parts: list[MimePart],
    owner: MessageWithFolder,
    size_threshold: int,
    attachments: list[Attachment],
) -> None:
    for part in parts:
        if part.is_multipart:
            _collect(part.children, owner, size_threshold, attachments)

        elif part.is_image and part.content_id:
            if part.size <= size_threshold:
                owner.content = inline_image(owner.content, part)
            else:
                attachments.append(Attachment(
                    content_id=part.content_id,
                    filename=part.filename,
                    content_type=part.content_type,
                    size=part.size,
                ))

        elif part.is_message:
            attachments.append(Attachment(
                content_id=None,
                filename=part.subject,
                content_type=part.content_type,
                size=part.size,
            ))

        elif part.is_attachment:
            attachments.append(Attachment(
                content_id=None,
                filename=part.filename,
                content_type=part.content_type,
                size=part.size,
            ))


def find_part(root: MimePart, part_id: str, is_content_id: bool) -> MimePart:
    """
    Find the part a listed Attachment refers to.

    Args:
        root: The message's MIME tree.
        part_id: A content-id (brackets optional) or a filename / subject.
        is_content_id: Whether part_id is a content-id.

    Returns:
        The matching part.

    Raises:
        NotFoundError: If no part matches.
    """
    if is_content_id:
        part = _find_embedded(_top_parts(root), normalize_content_id(part_id))
    else:
        part = _find_named(_top_parts(root), part_id)

    if part is None:
        raise NotFoundError(f"Attachment not found: {part_id}")
    return part


def _find_embedded(parts: list[MimePart], cid: str) -> MimePart | None:
    for part in parts:
        if part.is_multipart:
            nested = _find_embedded(part.children, cid)
            if nested is not None:
                return nested
        elif part.is_image and part.content_id and normalize_content_id(part.content_id) == cid:
            return part
    return None


def _find_named(parts: list[MimePart], name: str) -> MimePart | None:
    for part in parts:
        if part.is_multipart:
            nested = _find_named(part.children, name)
            if nested is not None:
                return nested
        elif part.is_attachment:
            if part.filename == name:
                return part
            if part.is_message and part.subject == name:
                return part
    return None
