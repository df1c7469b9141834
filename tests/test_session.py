"""Tests for MailSession."""

import asyncio

import pytest
from aioimaplib import aioimaplib

from mailbox_engine.errors import AuthenticationError, ProtocolError
from mailbox_engine.imap.client import IMAPConnectionError, IMAPError
from mailbox_engine.session import MailSession

from tests.fakes import FakeIMAPClient


class TestMailSession:
    @pytest.mark.asyncio
    async def test_client_is_created_once(self, credentials):
        created = []

        def factory(creds, timeout):
            created.append(FakeIMAPClient(creds, timeout))
            return created[-1]

        session = MailSession(credentials, timeout=12, client_factory=factory)

        first = await session.get_client()
        second = await session.get_client()

        assert first is second
        assert len(created) == 1
        assert first.timeout == 12
        assert first.called("connect") == [()]

    @pytest.mark.asyncio
    async def test_rejected_login_is_not_memoized(self, credentials, fake_client):
        fake_client.reject_login = True
        session = MailSession(credentials, client_factory=lambda creds, timeout: fake_client)

        with pytest.raises(AuthenticationError):
            await session.get_client()
        assert not session.is_connected

        fake_client.reject_login = False
        assert await session.get_client() is fake_client

    @pytest.mark.asyncio
    async def test_handshake_failure_is_authentication_error(self, credentials, fake_client):
        async def refuse():
            raise IMAPConnectionError("Connection timed out to imap.example.com:993")

        fake_client.connect = refuse
        session = MailSession(credentials, client_factory=lambda creds, timeout: fake_client)

        with pytest.raises(AuthenticationError, match="timed out"):
            await session.get_client()

    @pytest.mark.asyncio
    async def test_close_swallows_errors(self, session, fake_client):
        await session.get_client()
        fake_client.fail_on = "disconnect"

        await session.close()

        assert not session.is_connected

    @pytest.mark.asyncio
    async def test_close_without_connecting(self, session, fake_client):
        await session.close()
        assert fake_client.called("disconnect") == []

    @pytest.mark.asyncio
    async def test_context_manager_closes(self, session, fake_client):
        async with session:
            await session.get_client()
        assert fake_client.called("disconnect") == [()]

    @pytest.mark.asyncio
    async def test_exclusive_serializes_operations(self, session):
        events = []

        async def operation(name):
            async with session.exclusive():
                events.append(f"{name} start")
                await asyncio.sleep(0)
                events.append(f"{name} end")

        await asyncio.gather(operation("a"), operation("b"))

        assert events == ["a start", "a end", "b start", "b end"]

    @pytest.mark.asyncio
    async def test_broken_connection_is_discarded(self, session, fake_client):
        client = await session.get_client()

        with pytest.raises(aioimaplib.Abort):
            async with session.exclusive():
                raise aioimaplib.Abort("connection lost")

        assert not session.is_connected
        assert fake_client.called("discard") == [()]

        # the next operation reconnects
        assert await session.get_client() is client
        assert fake_client.called("connect") == [(), ()]

    @pytest.mark.asyncio
    async def test_wrapped_connection_failure_is_discarded(self, session, fake_client):
        await session.get_client()

        with pytest.raises(ProtocolError):
            async with session.exclusive():
                try:
                    raise OSError("connection reset by peer")
                except OSError as e:
                    raise ProtocolError(str(e)) from e

        assert not session.is_connected

    @pytest.mark.asyncio
    async def test_command_failure_keeps_connection(self, session, fake_client):
        await session.get_client()

        with pytest.raises(ProtocolError):
            async with session.exclusive():
                try:
                    raise IMAPError("UID COPY failed: NO [TRYCREATE]")
                except IMAPError as e:
                    raise ProtocolError(str(e)) from e

        assert session.is_connected
        assert fake_client.called("discard") == []
