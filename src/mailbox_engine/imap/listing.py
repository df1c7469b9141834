# =============================================================================
# Message Listing
# =============================================================================
# Fetches envelope data for a window of messages in an open folder.
#
# One batched FETCH per call, never one round trip per message. When asked
# for a change watermark, every returned message is stamped with the same
# value so a client can later ask "has anything changed since X?".
# =============================================================================

import logging

from mailbox_engine.core import Message
from mailbox_engine.imap.client import IMAPClient
from mailbox_engine.imap.folders import FolderHandle, recompute_window

logger = logging.getLogger(__name__)


class MessageLister:
    """Lists messages of an open folder, newest UID first."""

    def __init__(self, client: IMAPClient) -> None:
        self.client = client

    async def list_messages(
        self,
        handle: FolderHandle,
        start: int | None = None,
        end: int | None = None,
        fetch_watermark: bool = False,
    ) -> list[Message]:
        """
        Fetch envelopes for a window of sequence numbers.

        Args:
            handle: The open folder.
            start: First sequence number (1-based). Ignored unless end is set.
            end: Last sequence number. A window past the end of the folder is
                 shifted down with recompute_window().
            fetch_watermark: Stamp every message with the folder's change
                             watermark (HIGHESTMODSEQ).

        Returns:
            Messages sorted by UID, descending.
        """
        if handle.message_count == 0:
            logger.debug(f"{handle.path} is empty")
            return []

        if start is not None and end is not None:
            start, end = recompute_window(start, end, handle.message_count)
            if end < start:
                return []
            message_set = f"{start}:{end}"
        else:
            message_set = "1:*"

        messages = await self.client.fetch_envelopes(message_set, modseq=fetch_watermark)

        if fetch_watermark and messages:
            watermark = self._watermark(handle, messages)
            for message in messages:
                message.modseq = watermark

        messages.sort(key=lambda m: m.uid, reverse=True)
        logger.debug(f"Listed {len(messages)} messages from {handle.path} ({message_set})")
        return messages

    @staticmethod
    def _watermark(handle: FolderHandle, messages: list[Message]) -> int | None:
        """
        The folder's HIGHESTMODSEQ, falling back to the MODSEQ of the last
        message in server order.
        """
        if handle.highest_modseq and handle.highest_modseq > 0:
            return handle.highest_modseq
        return messages[-1].modseq
