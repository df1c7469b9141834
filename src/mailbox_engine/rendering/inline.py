# =============================================================================
# Embedded Image Inlining
# =============================================================================
# HTML mail references its embedded images as <img src="cid:logo@example">.
# A browser can't resolve cid: URLs, so small images are rewritten into
# self-contained data: URLs. That saves the client a second trip to the mail
# server for each image.
# =============================================================================

import base64
import logging

from mailbox_engine.core import MimePart

logger = logging.getLogger(__name__)


def normalize_content_id(content_id: str) -> str:
    """Strip the angle brackets from a Content-ID: "<a@b>" -> "a@b"."""
    return content_id.replace("<", "").replace(">", "").strip()


def inline_image(content: str, image: MimePart) -> str:
    """
    Replace every cid: reference to an image part with a data: URL.

    The data URL has the form data:<type>;<encoding>,<base64>, where <type>
    is the part's content type without parameters and <encoding> its
    declared transfer encoding ("base64" when it declares none).

    Args:
        content: Message markup that may reference the image.
        image: An image part with a Content-ID.

    Returns:
        The rewritten markup, or content unchanged if the image isn't
        referenced.
    """
    if not image.content_id:
        return content

    cid = normalize_content_id(image.content_id)
    reference = f"cid:{cid}"
    if reference not in content:
        return content

    content_type = image.content_type.split(";", 1)[0].strip()
    encoding = image.transfer_encoding or "base64"
    data = base64.b64encode(image.payload).decode("ascii")

    logger.debug(f"Inlining {content_type} image {cid} ({len(image.payload)} bytes)")
    return content.replace(reference, f"data:{content_type};{encoding},{data}")
