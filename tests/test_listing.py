"""Tests for MessageLister."""

from typing import get_type_hints

import pytest

from mailbox_engine.core import Message
from mailbox_engine.imap.folders import AccessMode, FolderAccessor
from mailbox_engine.imap.listing import MessageLister


async def _list(client, folder="INBOX", **kwargs):
    async with FolderAccessor(client).opened(client.ref(folder), AccessMode.READ_ONLY) as handle:
        return await MessageLister(client).list_messages(handle, **kwargs)


@pytest.fixture
def hundred(fake_client):
    """INBOX with 100 messages, UIDs 1001..1100, MODSEQ growing with UID."""
    for i in range(100):
        fake_client.add_message("INBOX", uid=1001 + i, modseq=500 + i)
    return fake_client


class TestMessageLister:
    @pytest.mark.asyncio
    async def test_whole_folder_sorted_newest_first(self, hundred):
        messages = await _list(hundred)

        assert len(messages) == 100
        assert [m.uid for m in messages] == sorted((m.uid for m in messages), reverse=True)
        assert hundred.called("fetch") == [("1:*", False)]

    @pytest.mark.asyncio
    async def test_window_past_end_is_recomputed(self, hundred):
        messages = await _list(hundred, start=90, end=110)

        assert hundred.called("fetch") == [("80:100", False)]
        assert len(messages) == 21
        assert messages[0].uid == 1100
        assert messages[-1].uid == 1080

    @pytest.mark.asyncio
    async def test_single_bound_lists_everything(self, hundred):
        await _list(hundred, start=5)
        assert hundred.called("fetch") == [("1:*", False)]

    @pytest.mark.asyncio
    async def test_empty_folder(self, fake_client):
        assert await _list(fake_client) == []
        assert await _list(fake_client, start=1, end=20) == []
        assert fake_client.called("fetch") == []

    @pytest.mark.asyncio
    async def test_watermark_uses_highest_modseq(self, hundred):
        hundred.highest_modseq = 9000
        messages = await _list(hundred, start=1, end=10, fetch_watermark=True)

        assert {m.modseq for m in messages} == {9000}

    @pytest.mark.asyncio
    async def test_watermark_falls_back_to_last_message(self, hundred):
        messages = await _list(hundred, start=1, end=10, fetch_watermark=True)

        # last message in server order is sequence 10, MODSEQ 509
        assert {m.modseq for m in messages} == {509}

    @pytest.mark.asyncio
    async def test_no_watermark_unless_requested(self, hundred):
        messages = await _list(hundred, start=1, end=10)
        assert {m.modseq for m in messages} == {None}

    def test_annotations_use_builtin_list(self):
        # a method named "list" on the class would shadow the builtin here
        assert get_type_hints(MessageLister.list_messages)["return"] == list[Message]
        assert get_type_hints(MessageLister._watermark)["messages"] == list[Message]
