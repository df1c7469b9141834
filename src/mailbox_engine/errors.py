# =============================================================================
# Engine Errors
# =============================================================================
# The error taxonomy exposed to callers of the mailbox engine.
#
# The transport layer maps these to distinct responses:
#   - AuthenticationError: login rejected (401-ish)
#   - NotFoundError: message or attachment part missing (404-ish)
#   - ProtocolError: anything else the IMAP server or network threw at us
#   - CancellationError: the operation was cancelled while waiting
#
# The IMAP client layer has its own IMAPError hierarchy; MailboxService
# translates those into the types below.
# =============================================================================

import asyncio


class MailboxError(Exception):
    """Base exception for every failure surfaced by the mailbox engine."""
    pass


class AuthenticationError(MailboxError):
    """Raised when the connection handshake or login is rejected."""
    pass


class NotFoundError(MailboxError):
    """Raised when a requested message or attachment does not exist."""
    pass


class ProtocolError(MailboxError):
    """
    Raised for any other failure coming from the mail server or the network.

    The original exception is always chained (``raise ... from e``) and its
    message is preserved in ``str(error)``.
    """
    pass


class CancellationError(asyncio.CancelledError):
    """
    Raised when an operation is cancelled while waiting on the server.

    Subclasses asyncio.CancelledError so that task cancellation, timeouts
    and task groups keep working, while callers can still tell an engine
    cancellation apart from a bare one.
    """
    pass
