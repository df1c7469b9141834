# =============================================================================
# Content Extraction
# =============================================================================
# Picks the displayable body of a message out of its MIME tree.
#
# Rules, walking parts depth-first, left to right:
#   - multipart/*:  recurse; the nested result replaces what we have so far
#   - text/plain:   used only while nothing has been picked yet, escaped
#                   and wrapped in <pre> so it keeps its line breaks
#   - text/html:    always wins over anything picked before it
#   - anything else is ignored
#
# So for the usual multipart/alternative [text/plain, text/html] the HTML
# version is shown, and a plain-text-only message still renders.
# =============================================================================

import html

from mailbox_engine.core import MimePart


def extract_content(root: MimePart) -> str:
    """
    Select the renderable content of a message.

    A root that is not multipart is handled as a multipart with that single
    part in it.

    Args:
        root: The message's MIME tree, as returned by parse_message().

    Returns:
        HTML markup, or "" if the message has no text part.
    """
    parts = root.children if root.is_multipart else [root]
    return _extract(parts)


def _extract(parts: list[MimePart]) -> str:
    result = ""
    for part in parts:
        mime_type = part.mime_type
        if not result and mime_type.startswith("text/plain"):
            result = plain_text_to_html(part.text())
        if mime_type.startswith("text/html"):
            result = part.text()
        if part.is_multipart:
            result = _extract(part.children)
    return result


def plain_text_to_html(text: str) -> str:
    """Escape plain text and wrap it in <pre> to preserve formatting."""
    return f"<pre>{html.escape(text)}</pre>"
