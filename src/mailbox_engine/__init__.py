# =============================================================================
# mailbox-engine: IMAP Mailbox Orchestration & MIME Rendering
# =============================================================================
#
# The server-side core of a web mail client. It turns raw IMAP server state
# (folders, UID-addressed messages, MIME bodies) into objects a browser can
# display, and performs the multi-step IMAP operations a UI needs.
#
# Features:
#   - Folder trees with message and unread counts
#   - Windowed, batched message listing with MODSEQ change watermarks
#   - HTML content extraction with small embedded images inlined as data: URLs
#   - Attachment listing and retrieval by content-id or filename
#   - Cross-folder move using COPY + \Deleted + EXPUNGE
#   - Bulk read/unread updates
#
# =============================================================================

__version__ = "0.1.0"
__app_name__ = "mailbox-engine"

from mailbox_engine.errors import (
    AuthenticationError,
    CancellationError,
    MailboxError,
    NotFoundError,
    ProtocolError,
)
from mailbox_engine.service import MailboxService
from mailbox_engine.session import MailSession

__all__ = [
    "__version__",
    "__app_name__",
    "MailboxService",
    "MailSession",
    "MailboxError",
    "AuthenticationError",
    "NotFoundError",
    "ProtocolError",
    "CancellationError",
]
