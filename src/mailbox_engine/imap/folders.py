# =============================================================================
# Folder Access
# =============================================================================
# Opening and closing folders on a live client.
#
# Every operation that touches messages follows the same shape:
#
#     async with accessor.opened(ref, AccessMode.READ_ONLY) as handle:
#         ...
#
# and the folder is closed on every exit path (success, error or
# cancellation). Closing never expunges: see IMAPClient.close_folder().
# =============================================================================

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from enum import Enum

from mailbox_engine.core import FolderRef
from mailbox_engine.imap.client import IMAPClient

logger = logging.getLogger(__name__)


class AccessMode(Enum):
    """How a folder is opened."""
    READ_ONLY = "examine"
    READ_WRITE = "select"


@dataclass
class FolderHandle:
    """
    An open folder, with the counters the server reported when it was opened.

    Attributes:
        ref: The folder that is open.
        mode: Mode it was requested in.
        message_count: Number of messages (EXISTS).
        uid_next: Predicted UID of the next message to arrive, if reported.
        uid_validity: UIDVALIDITY of the folder, if reported.
        highest_modseq: HIGHESTMODSEQ (CONDSTORE servers only).
    """
    ref: FolderRef
    mode: AccessMode
    message_count: int = 0
    uid_next: int | None = None
    uid_validity: int | None = None
    highest_modseq: int | None = None

    @property
    def path(self) -> str:
        return self.ref.path


class FolderAccessor:
    """
    Opens folders in a given mode and guarantees they get closed.

    Opening a folder that is already selected in a compatible mode does not
    issue another SELECT (READ_WRITE satisfies READ_ONLY). That bookkeeping
    lives in IMAPClient.select_folder().
    """

    def __init__(self, client: IMAPClient) -> None:
        self.client = client

    async def open(self, ref: FolderRef, mode: AccessMode) -> FolderHandle:
        """
        Open a folder.

        Raises:
            IMAPError: If the server refuses to open it (e.g., no such folder).
        """
        status = await self.client.select_folder(ref.path, readonly=mode is AccessMode.READ_ONLY)

        handle = FolderHandle(
            ref=ref,
            mode=mode,
            message_count=status.get("EXISTS", 0) or 0,
            uid_next=status.get("UIDNEXT"),
            uid_validity=status.get("UIDVALIDITY"),
            highest_modseq=status.get("HIGHESTMODSEQ"),
        )
        logger.debug(f"Opened {handle.path} ({mode.name}): {handle.message_count} messages")
        return handle

    async def close(self, handle: FolderHandle) -> None:
        """Close a folder opened with open()."""
        logger.debug(f"Closing {handle.path}")
        await self.client.close_folder()

    @asynccontextmanager
    async def opened(self, ref: FolderRef, mode: AccessMode):
        """
        Async context manager yielding an open FolderHandle.

        The folder is closed however the block exits. If the block is already
        failing, a failure to close is logged instead of masking the original
        exception.
        """
        handle = await self.open(ref, mode)
        try:
            yield handle
        except BaseException:
            try:
                await self.close(handle)
            except Exception as e:
                logger.warning(f"Error closing {handle.path}: {e}")
            raise
        else:
            await self.close(handle)


def recompute_window(start: int, end: int, count: int) -> tuple[int, int]:
    """
    Shift a 1-based message window so it ends at the last message.

    Messages may have been deleted since the caller last looked at the
    folder, so a window ending past the message count is moved down, keeping
    its length where possible. The start never drops below 1.

    Example:
        >>> recompute_window(90, 110, 100)
        (80, 100)

    Args:
        start: First sequence number requested (1-based, inclusive).
        end: Last sequence number requested (inclusive).
        count: Current number of messages in the folder.

    Returns:
        The (start, end) sequence range to fetch.
    """
    if end > count:
        start = count - (end - start)
        end = count
    return max(start, 1), end

