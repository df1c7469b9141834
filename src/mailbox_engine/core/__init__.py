# =============================================================================
# Mailbox Engine Core Module
# =============================================================================
# Domain models for the mailbox engine. These are plain dataclasses with no
# network code, so they can be imported anywhere without causing circular
# dependency issues.
#
#   - Account / Credentials: who we log in as, and where
#   - FolderRef / Folder: addressing and describing mailboxes
#   - Message / MessageWithFolder / Attachment: what callers get back
#   - MimePart: the parsed MIME tree of a message body
# =============================================================================

from mailbox_engine.core.account import Account, Credentials
from mailbox_engine.core.folder import Folder, FolderRef, FolderType, build_folder_tree
from mailbox_engine.core.message import (
    Attachment,
    AttachmentPayload,
    Message,
    MessageFlags,
    MessageWithFolder,
)
from mailbox_engine.core.mime import MimePart, PartKind, parse_message

__all__ = [
    "Account",
    "Credentials",
    "Folder",
    "FolderRef",
    "FolderType",
    "build_folder_tree",
    "Attachment",
    "AttachmentPayload",
    "Message",
    "MessageFlags",
    "MessageWithFolder",
    "MimePart",
    "PartKind",
    "parse_message",
]
