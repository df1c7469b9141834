# =============================================================================
# IMAP Module
# =============================================================================
# Everything that talks to the IMAP server:
#   - IMAPClient: thin async wrapper over aioimaplib
#   - FolderAccessor: open/close folders in a mode, window recomputation
#   - MessageLister: batched envelope listing with change watermark
#   - MoveCoordinator: COPY + \Deleted + EXPUNGE with destination polling
#   - FlagUpdater: bulk \Seen updates
#
# Every component works on a client owned by a MailSession; none of them
# connects or keeps state of its own between calls.
# =============================================================================

from mailbox_engine.imap.client import (
    IMAPClient,
    IMAPError,
    IMAPConnectionError,
    IMAPAuthenticationError,
    ConnectionState,
)
from mailbox_engine.imap.folders import (
    AccessMode,
    FolderAccessor,
    FolderHandle,
    recompute_window,
)
from mailbox_engine.imap.listing import MessageLister
from mailbox_engine.imap.move import MoveCoordinator
from mailbox_engine.imap.flags import FlagUpdater

__all__ = [
    # Client
    "IMAPClient",
    "IMAPError",
    "IMAPConnectionError",
    "IMAPAuthenticationError",
    "ConnectionState",
    # Folders
    "AccessMode",
    "FolderAccessor",
    "FolderHandle",
    "recompute_window",
    # Operations
    "MessageLister",
    "MoveCoordinator",
    "FlagUpdater",
]
