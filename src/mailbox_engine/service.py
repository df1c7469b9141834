# =============================================================================
# Mailbox Service
# =============================================================================
# The caller-facing operations of the engine.
#
# Every operation takes the MailSession it should run on, so the service
# itself holds no connection state and one instance can serve any number of
# users. Each operation:
#
#   1. takes exclusive use of the session's client
#   2. opens the folder(s) it needs, in the mode it needs
#   3. does its work
#   4. closes the folder(s), whatever happened
#
# Client-layer failures are translated into the engine's error types
# (mailbox_engine.errors) on the way out.
# =============================================================================

import logging
from contextlib import contextmanager
from typing import AsyncIterator

from mailbox_engine.config import Config
from mailbox_engine.core import (
    AttachmentPayload,
    Credentials,
    Folder,
    FolderRef,
    Message,
    MessageFlags,
    MessageWithFolder,
    build_folder_tree,
    parse_message,
)
from mailbox_engine.errors import AuthenticationError, MailboxError, NotFoundError, ProtocolError
from mailbox_engine.imap.client import PROTOCOL_FAILURES, IMAPAuthenticationError
from mailbox_engine.imap.flags import FlagUpdater
from mailbox_engine.imap.folders import AccessMode, FolderAccessor
from mailbox_engine.imap.listing import MessageLister
from mailbox_engine.imap.move import MoveCoordinator
from mailbox_engine.rendering import collect_attachments, extract_content, find_part
from mailbox_engine.session import MailSession

logger = logging.getLogger(__name__)


@contextmanager
def translate_errors(action: str):
    """
    Re-raise client-layer failures as engine errors.

    Engine errors pass through untouched. Cancellation is never caught.
    """
    try:
        yield
    except MailboxError:
        raise
    except IMAPAuthenticationError as e:
        raise AuthenticationError(str(e)) from e
    except PROTOCOL_FAILURES as e:
        logger.error(f"{action} failed: {e}")
        raise ProtocolError(f"{action} failed: {e}") from e


class MailboxService:
    """
    Folder, message and attachment operations on a MailSession.

    Usage:
        >>> service = MailboxService(Config.load())
        >>> async with MailSession(credentials) as session:
        ...     folders = await service.list_folders(session)
        ...     messages = await service.list_messages(session, folders[0].ref)

    Attributes:
        config: Engine tuning (inline threshold, move polling, batch sizes).
    """

    def __init__(self, config: Config | None = None) -> None:
        self.config = config or Config()

    # =========================================================================
    # Credentials & Folders
    # =========================================================================

    async def check_credentials(self, session: MailSession) -> Credentials:
        """
        Verify that the session's credentials can log in.

        Returns:
            The verified credentials.

        Raises:
            AuthenticationError: If the credentials are malformed, or the
                                 server rejects the connection or login.
        """
        creds = session.credentials
        if not creds.host or not creds.user:
            raise AuthenticationError("Host and user are required")
        if not 0 < creds.port < 65536:
            raise AuthenticationError(f"Invalid port: {creds.port}")

        async with session.exclusive():
            logger.info(f"Credentials accepted for {creds.user}@{creds.host}")
        return creds

    async def list_folders(self, session: MailSession, load_children: bool = False) -> list[Folder]:
        """
        List the account's folders with message and unread counts.

        Args:
            session: Session to run on.
            load_children: Return the full tree instead of top-level folders only.

        Returns:
            Top-level folders in server order (with children when requested).
        """
        async with session.exclusive() as client:
            with translate_errors("Listing folders"):
                roots = build_folder_tree(await client.list_folders(), load_children)

                for root in roots:
                    for folder in root.walk():
                        if not folder.selectable:
                            continue
                        status = await client.get_folder_status(folder.full_name)
                        folder.message_count = status.get("MESSAGES", 0)
                        folder.unread_count = status.get("UNSEEN", 0)

        return roots

    # =========================================================================
    # Messages
    # =========================================================================

    async def list_messages(
        self,
        session: MailSession,
        ref: FolderRef,
        start: int | None = None,
        end: int | None = None,
        fetch_watermark: bool = False,
    ) -> list[Message]:
        """
        List envelopes of a folder, newest UID first.

        Args:
            session: Session to run on.
            ref: Folder to list.
            start: First sequence number of the window (1-based).
            end: Last sequence number of the window. Without both bounds the
                 whole folder is listed.
            fetch_watermark: Stamp every message with the folder's change
                             watermark.
        """
        async with session.exclusive() as client:
            with translate_errors(f"Listing messages of {ref.path}"):
                async with FolderAccessor(client).opened(ref, AccessMode.READ_ONLY) as handle:
                    return await MessageLister(client).list_messages(handle, start, end, fetch_watermark)

    async def stream_messages(
        self,
        session: MailSession,
        ref: FolderRef,
        fetch_watermark: bool = False,
    ) -> AsyncIterator[list[Message]]:
        """
        Yield a folder's messages in batches, newest first.

        The first batch holds listing.initial_batch_size messages and every
        following batch is twice as big, up to listing.max_batch_size. Each
        batch is a separate list_messages() call, so the session is free for
        other operations between batches.
        """
        async with session.exclusive() as client:
            with translate_errors(f"Counting messages of {ref.path}"):
                status = await client.get_folder_status(ref.path)
        end = status.get("MESSAGES", 0)

        size = self.config.listing.initial_batch_size
        while end >= 1:
            start = max(end - size + 1, 1)
            batch = await self.list_messages(session, ref, start, end, fetch_watermark)
            if batch:
                yield batch
            end = start - 1
            size = min(size * 2, self.config.listing.max_batch_size)

    async def get_message(self, session: MailSession, ref: FolderRef, uid: int) -> MessageWithFolder:
        """
        Load a full message and mark it read.

        The body is rendered to HTML, small embedded images are inlined and
        the remaining attachments listed.

        Raises:
            NotFoundError: If there is no message with that UID.
        """
        async with session.exclusive() as client:
            with translate_errors(f"Loading message {uid} of {ref.path}"):
                async with FolderAccessor(client).opened(ref, AccessMode.READ_WRITE):
                    fetched = await client.fetch_message_source(uid)
                    if fetched is None:
                        raise NotFoundError(f"Message {uid} not found in {ref.path}")
                    envelope, raw = fetched

                    if not envelope.is_read:
                        await client.store_flags([uid], ["\\Seen"], add=True)
                        envelope.flags |= MessageFlags.SEEN

        message = MessageWithFolder.from_message(envelope, ref)
        root = parse_message(raw)
        message.content = extract_content(root)
        message.attachments = collect_attachments(
            root, message, self.config.rendering.embedded_image_size_threshold
        )
        return message

    async def get_attachment(
        self,
        session: MailSession,
        ref: FolderRef,
        uid: int,
        part_id: str,
        is_content_id: bool,
    ) -> AttachmentPayload:
        """
        Retrieve one attachment or embedded image of a message.

        Args:
            session: Session to run on.
            ref: Folder holding the message.
            uid: UID of the message.
            part_id: Content-id of an embedded image, or filename (subject
                     for attached messages) of a regular attachment.
            is_content_id: Whether part_id is a content-id.

        Raises:
            NotFoundError: If the message or the part doesn't exist.
        """
        async with session.exclusive() as client:
            with translate_errors(f"Loading attachment of message {uid} in {ref.path}"):
                async with FolderAccessor(client).opened(ref, AccessMode.READ_ONLY):
                    fetched = await client.fetch_message_source(uid)

        if fetched is None:
            raise NotFoundError(f"Message {uid} not found in {ref.path}")

        part = find_part(parse_message(fetched[1]), part_id, is_content_id)
        return AttachmentPayload(
            content_type=part.content_type,
            filename=part.filename or part.subject,
            data=part.payload,
        )

    # =========================================================================
    # Modifying Operations
    # =========================================================================

    async def move_messages(
        self,
        session: MailSession,
        from_ref: FolderRef,
        to_ref: FolderRef,
        uids: list[int],
    ) -> list[MessageWithFolder]:
        """
        Move messages to another folder.

        Returns:
            The moved messages as they exist in the destination, ascending
            by UID. Empty if none of the UIDs existed, or if the copies did not
            show up in time.

        Raises:
            CancellationError: If cancelled while waiting for the copies.
        """
        async with session.exclusive() as client:
            with translate_errors(f"Moving messages from {from_ref.path} to {to_ref.path}"):
                coordinator = MoveCoordinator(
                    client,
                    poll_attempts=self.config.move.poll_attempts,
                    poll_interval=self.config.move.poll_interval_seconds,
                )
                return await coordinator.move(from_ref, to_ref, uids)

    async def set_seen(
        self,
        session: MailSession,
        ref: FolderRef,
        seen: bool,
        uids: list[int],
    ) -> list[MessageWithFolder]:
        """
        Mark messages read or unread.

        Returns:
            The updated messages, in the order their UIDs were given. UIDs
            that don't exist are left out.
        """
        async with session.exclusive() as client:
            with translate_errors(f"Updating flags in {ref.path}"):
                async with FolderAccessor(client).opened(ref, AccessMode.READ_WRITE) as handle:
                    messages = await FlagUpdater(client).set_seen(handle, seen, uids)

        return [MessageWithFolder.from_message(m, ref) for m in messages]
