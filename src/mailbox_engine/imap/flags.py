# =============================================================================
# Flag Updates
# =============================================================================
# Bulk \Seen updates on an open (read-write) folder.
# =============================================================================

import logging

from mailbox_engine.core import Message
from mailbox_engine.imap.client import IMAPClient, uid_set
from mailbox_engine.imap.folders import FolderHandle

logger = logging.getLogger(__name__)


class FlagUpdater:
    """Marks messages read or unread."""

    def __init__(self, client: IMAPClient) -> None:
        self.client = client

    async def set_seen(self, handle: FolderHandle, seen: bool, uids: list[int]) -> list[Message]:
        """
        Add or remove \\Seen on messages in an open folder.

        UIDs that no longer exist are skipped.

        Args:
            handle: The folder, opened READ_WRITE.
            seen: True to mark read, False to mark unread.
            uids: UIDs to update.

        Returns:
            The updated messages, in the order their UIDs were given.
        """
        live = await self.client.resolve_uids(uids)
        if not live:
            logger.debug(f"No live messages among {uids} in {handle.path}")
            return []

        await self.client.store_flags(live, ["\\Seen"], add=seen)

        messages = await self.client.fetch_envelopes(uid_set(live), by_uid=True)
        by_uid = {m.uid: m for m in messages}

        logger.debug(f"Marked {len(live)} messages in {handle.path} as {'read' if seen else 'unread'}")
        return [by_uid[uid] for uid in live if uid in by_uid]
