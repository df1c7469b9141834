# =============================================================================
# Mail Session
# =============================================================================
# A MailSession owns one IMAP connection for one user.
#
# The connection is opened on first use and reused by every later operation
# of the session. IMAP connections are stateful (one selected folder at a
# time), so operations on a session are serialized with an asyncio.Lock.
#
# Usage:
#
#     async with MailSession(credentials) as session:
#         folders = await service.list_folders(session)
#
# Callers that keep a session around (one per logged-in browser, say) call
# close() when they're done with it.
# =============================================================================

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Callable

from mailbox_engine.core import Credentials
from mailbox_engine.errors import AuthenticationError
from mailbox_engine.imap.client import (
    CONNECTION_FAILURES,
    IMAPAuthenticationError,
    IMAPClient,
    IMAPConnectionError,
)

logger = logging.getLogger(__name__)


class MailSession:
    """
    Lazily-connected, memoized IMAP connection for one set of credentials.

    Attributes:
        credentials: Who to log in as, and where.
        timeout: Connection/command timeout handed to the client.
    """

    def __init__(
        self,
        credentials: Credentials,
        timeout: float = IMAPClient.TIMEOUT,
        client_factory: Callable[..., IMAPClient] = IMAPClient,
    ) -> None:
        """
        Args:
            credentials: Connection details.
            timeout: Seconds for connecting and for each command.
            client_factory: Builds the client; called as
                            client_factory(credentials, timeout=timeout).
        """
        self.credentials = credentials
        self.timeout = timeout
        self._client_factory = client_factory
        self._client: IMAPClient | None = None
        self._lock = asyncio.Lock()

    @property
    def is_connected(self) -> bool:
        return self._client is not None and self._client.is_connected

    async def get_client(self) -> IMAPClient:
        """
        Return the session's client, connecting and logging in on first use.

        Raises:
            AuthenticationError: If the handshake or login is rejected.
                                 Nothing is memoized in that case.
        """
        if self._client is not None:
            return self._client

        client = self._client_factory(self.credentials, timeout=self.timeout)
        try:
            await client.connect()
        except IMAPAuthenticationError as e:
            logger.warning(f"Login rejected for {self.credentials.user}@{self.credentials.host}")
            raise AuthenticationError(str(e)) from e
        except IMAPConnectionError as e:
            logger.warning(f"Could not connect to {self.credentials.host}:{self.credentials.port}: {e}")
            raise AuthenticationError(str(e)) from e

        self._client = client
        return client

    @asynccontextmanager
    async def exclusive(self):
        """
        Async context manager giving exclusive use of the connected client.

        Every engine operation runs inside one of these, so two operations on
        the same session never interleave commands on the wire. If the
        operation fails because the connection broke (directly, or as the
        cause of an engine error), the client is discarded and the next
        operation reconnects.
        """
        async with self._lock:
            client = await self.get_client()
            try:
                yield client
            except Exception as e:
                if isinstance(e, CONNECTION_FAILURES) or isinstance(e.__cause__, CONNECTION_FAILURES):
                    logger.warning(f"Connection to {self.credentials.host} lost: {e}")
                    client.discard()
                    self._client = None
                raise

    async def close(self) -> None:
        """
        Log out and drop the connection. Failures are logged, never raised.
        """
        client, self._client = self._client, None
        if client is None:
            return

        try:
            await client.disconnect()
        except Exception as e:
            logger.warning(f"Error closing session for {self.credentials.host}: {e}")
        else:
            logger.debug(f"Closed session for {self.credentials.host}")

    async def __aenter__(self) -> "MailSession":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
