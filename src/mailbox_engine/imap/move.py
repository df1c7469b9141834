# =============================================================================
# Cross-Folder Move
# =============================================================================
# Moves messages between folders using only COPY + STORE \Deleted + EXPUNGE,
# then works out which UIDs the copies got in the destination.
#
# The steps:
#   1. Destination (read-only): remember UIDNEXT. Every copy will get a UID
#      at or above it.
#   2. Source (read-write): drop UIDs that no longer exist, COPY the rest,
#      flag them \Deleted and expunge exactly those.
#   3. Destination (read-only): UID FETCH <UIDNEXT>:* until the copies show
#      up, a bounded number of times. Servers may make copies visible a
#      little later than the COPY response.
#
# Only one folder is open at a time: a session has a single connection.
# =============================================================================

import asyncio
import logging

from mailbox_engine.core import FolderRef, Message, MessageWithFolder
from mailbox_engine.errors import CancellationError
from mailbox_engine.imap.client import IMAPClient
from mailbox_engine.imap.folders import AccessMode, FolderAccessor

logger = logging.getLogger(__name__)

# Defaults for polling the destination folder
POLL_ATTEMPTS = 5
POLL_INTERVAL = 0.1


class MoveCoordinator:
    """
    Moves messages from one folder to another.

    Attributes:
        poll_attempts: How many times the destination is checked for the copies.
        poll_interval: Seconds to wait between checks.
    """

    def __init__(
        self,
        client: IMAPClient,
        poll_attempts: int = POLL_ATTEMPTS,
        poll_interval: float = POLL_INTERVAL,
    ) -> None:
        self.client = client
        self.folders = FolderAccessor(client)
        self.poll_attempts = poll_attempts
        self.poll_interval = poll_interval

    async def move(self, source: FolderRef, dest: FolderRef, uids: list[int]) -> list[MessageWithFolder]:
        """
        Move messages and return them as they now exist in the destination.

        UIDs that are missing from the source (already expunged, never
        existed) are skipped without error. If the copies never show up in the
        destination within the polling budget, the result is empty.

        Args:
            source: Folder to move messages from.
            dest: Folder to move messages to.
            uids: UIDs in the source folder.

        Returns:
            The moved messages bound to dest, in ascending UID order.

        Raises:
            CancellationError: If cancelled while waiting for the copies.
        """
        watermark = await self._destination_watermark(dest)

        moved = await self._copy_and_expunge(source, dest, uids)
        if not moved:
            logger.info(f"Nothing to move from {source.path}: none of {uids} exist")
            return []

        arrivals = await self._poll_destination(dest, watermark)
        arrivals.sort(key=lambda m: m.uid)

        logger.info(f"Moved {len(moved)} messages from {source.path} to {dest.path}")
        return [MessageWithFolder.from_message(m, dest) for m in arrivals]

    async def _destination_watermark(self, dest: FolderRef) -> int:
        """UIDNEXT of the destination before anything is copied into it."""
        async with self.folders.opened(dest, AccessMode.READ_ONLY) as handle:
            uid_next = handle.uid_next
            if uid_next is None:
                status = await self.client.get_folder_status(dest.path)
                uid_next = status.get("UIDNEXT")

        if uid_next is None:
            # Without UIDNEXT every message in the folder is a candidate
            logger.warning(f"Server did not report UIDNEXT for {dest.path}")
            return 1

        logger.debug(f"{dest.path} UIDNEXT before move: {uid_next}")
        return uid_next

    async def _copy_and_expunge(self, source: FolderRef, dest: FolderRef, uids: list[int]) -> list[int]:
        """Copy live messages to dest and expunge them from source. Returns the UIDs moved."""
        async with self.folders.opened(source, AccessMode.READ_WRITE):
            live = await self.client.resolve_uids(uids)
            if live:
                await self.client.copy_messages(live, dest.path)
                await self.client.store_flags(live, ["\\Deleted"], add=True)
                await self.client.expunge_messages(live)
        return live

    async def _poll_destination(self, dest: FolderRef, watermark: int) -> list[Message]:
        """Wait for messages at or above watermark to show up in dest."""
        async with self.folders.opened(dest, AccessMode.READ_ONLY):
            for attempt in range(1, self.poll_attempts + 1):
                arrivals = await self.client.fetch_envelopes_since_uid(watermark)
                if arrivals:
                    logger.debug(f"Found {len(arrivals)} arrivals in {dest.path} on attempt {attempt}")
                    return arrivals

                if attempt < self.poll_attempts:
                    try:
                        await asyncio.sleep(self.poll_interval)
                    except asyncio.CancelledError as e:
                        raise CancellationError(f"Move into {dest.path} was cancelled") from e

        logger.warning(f"No new messages appeared in {dest.path} after {self.poll_attempts} attempts")
        return []
