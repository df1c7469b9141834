# =============================================================================
# Rendering Module
# =============================================================================
# Turns a parsed MIME tree into what a web client displays:
#   - extract_content: the HTML (or escaped plain text) body
#   - collect_attachments: downloadable parts, inlining small images
#   - inline_image: cid: -> data: URL rewrite for one image
#   - find_part: locate a part again by content-id or filename
#
# The rendering pipeline for one message:
#   1. Parse the raw message into a MimePart tree
#   2. Extract the displayable content
#   3. Walk the tree for attachments, inlining small embedded images
# =============================================================================

from mailbox_engine.rendering.attachments import (
    EMBEDDED_IMAGE_SIZE_THRESHOLD,
    collect_attachments,
    find_part,
)
from mailbox_engine.rendering.content import extract_content, plain_text_to_html
from mailbox_engine.rendering.inline import inline_image, normalize_content_id

__all__ = [
    "EMBEDDED_IMAGE_SIZE_THRESHOLD",
    "collect_attachments",
    "find_part",
    "extract_content",
    "plain_text_to_html",
    "inline_image",
    "normalize_content_id",
]
