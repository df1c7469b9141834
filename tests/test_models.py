"""Tests for the core data models."""

from unittest.mock import patch

import pytest

from mailbox_engine.core import (
    Attachment,
    Credentials,
    Folder,
    FolderRef,
    FolderType,
    Message,
    MessageFlags,
    MessageWithFolder,
    AttachmentPayload,
    build_folder_tree,
)


# ============================================================================
# Credentials
# ============================================================================


class TestCredentials:
    def test_repr_masks_password(self, credentials):
        assert "hunter2" not in repr(credentials)
        assert "***" in repr(credentials)

    def test_from_account_uses_keyring(self, sample_account):
        with patch("mailbox_engine.core.account.keyring.get_password", return_value="s3cret") as get_password:
            creds = Credentials.from_account(sample_account)

        get_password.assert_called_once_with("mailbox-engine:test", "test@example.com")
        assert creds.password == "s3cret"
        assert creds.host == "imap.example.com"
        assert creds.use_ssl is True

    def test_from_account_without_password_raises(self, sample_account):
        with patch("mailbox_engine.core.account.keyring.get_password", return_value=None):
            with pytest.raises(KeyError):
                Credentials.from_account(sample_account)

    def test_starttls_account_is_not_ssl(self, sample_account):
        sample_account.imap_security = "starttls"
        creds = Credentials.from_account(sample_account, password="x")
        assert creds.use_ssl is False
        assert creds.scheme == "imap"


# ============================================================================
# FolderRef
# ============================================================================


class TestFolderRef:
    def test_token_round_trip(self, credentials):
        ref = FolderRef.for_path(credentials, "Work/Projects Ünïcode")
        decoded = FolderRef.from_token(ref.to_token())

        assert decoded == ref
        assert decoded.path == "Work/Projects Ünïcode"
        assert decoded.url == ref.url

    def test_token_is_url_safe(self, credentials):
        token = FolderRef.for_path(credentials, "a/b?c=d&e").to_token()
        assert "/" not in token and "+" not in token and "=" not in token

    def test_url_shape(self, credentials):
        ref = FolderRef.for_path(credentials, "INBOX")
        assert ref.url == "imaps://test%40example.com@imap.example.com:993/INBOX"

    @pytest.mark.parametrize("token", ["!!!not base64!!!", "aHR0cDovL2V4YW1wbGUuY29tLw"])
    def test_invalid_tokens_rejected(self, token):
        # the second one is valid base64 for an http:// URL
        with pytest.raises(ValueError):
            FolderRef.from_token(token)

    def test_usable_as_dict_key(self, credentials):
        refs = {FolderRef.for_path(credentials, "INBOX"): 1}
        assert refs[FolderRef.for_path(credentials, "INBOX")] == 1


# ============================================================================
# Folder tree
# ============================================================================


def _folder(credentials, path, attributes=None):
    return Folder(
        name=path.rsplit("/", 1)[-1],
        full_name=path,
        ref=FolderRef.for_path(credentials, path),
        separator="/",
        attributes=attributes or [],
    )


class TestFolderTree:
    def test_builds_nested_tree_in_server_order(self, credentials):
        flat = [_folder(credentials, p) for p in ["INBOX", "Work", "Work/Alpha", "Work/Beta", "Sent"]]
        roots = build_folder_tree(flat)

        assert [f.full_name for f in roots] == ["INBOX", "Work", "Sent"]
        assert [c.full_name for c in roots[1].children] == ["Work/Alpha", "Work/Beta"]

    def test_without_children_returns_top_level_only(self, credentials):
        flat = [_folder(credentials, p) for p in ["INBOX", "Work", "Work/Alpha"]]
        roots = build_folder_tree(flat, load_children=False)

        assert [f.full_name for f in roots] == ["INBOX", "Work"]
        assert roots[1].children == []

    def test_orphans_are_promoted_and_duplicates_dropped(self, credentials):
        flat = [_folder(credentials, p) for p in ["INBOX", "Missing/Child", "INBOX"]]
        roots = build_folder_tree(flat)

        assert [f.full_name for f in roots] == ["INBOX", "Missing/Child"]

    def test_walk_visits_every_folder_once(self, credentials):
        flat = [_folder(credentials, p) for p in ["A", "A/B", "A/B/C", "D"]]
        roots = build_folder_tree(flat)

        paths = [f.full_name for root in roots for f in root.walk()]
        assert paths == ["A", "A/B", "A/B/C", "D"]
        assert len(set(paths)) == len(paths)

    def test_noselect_is_not_selectable(self, credentials):
        assert not _folder(credentials, "[Gmail]", ["\\Noselect", "\\HasChildren"]).selectable
        assert _folder(credentials, "INBOX").selectable

    @pytest.mark.parametrize("path,attributes,expected", [
        ("INBOX", [], FolderType.INBOX),
        ("Gesendet", ["\\Sent"], FolderType.SENT),
        ("[Gmail]/Trash", [], FolderType.TRASH),
        ("Spam", [], FolderType.JUNK),
        ("[Gmail]/All Mail", ["\\All"], FolderType.ARCHIVE),
        ("Receipts", [], FolderType.OTHER),
    ])
    def test_detect_type(self, path, attributes, expected):
        assert Folder.detect_type(path, attributes) == expected


# ============================================================================
# Messages & attachments
# ============================================================================


class TestMessage:
    def test_flags_from_imap(self):
        flags = MessageFlags.from_imap("\\Seen \\Flagged $Junk")
        assert flags == MessageFlags.SEEN | MessageFlags.FLAGGED

    def test_message_with_folder_keeps_envelope(self, credentials):
        ref = FolderRef.for_path(credentials, "INBOX")
        message = Message(uid=7, subject="Hi", sender="a@example.com", flags=MessageFlags.SEEN, modseq=42)

        bound = MessageWithFolder.from_message(message, ref)

        assert bound.ref == (ref, 7)
        assert bound.subject == "Hi"
        assert bound.is_read
        assert bound.modseq == 42
        assert bound.content == ""
        assert bound.attachments == []

    def test_display_sender_prefers_name(self):
        assert Message(sender="a@example.com", sender_name="Alice").display_sender == "Alice"
        assert Message(sender="a@example.com").display_sender == "a@example.com"

    @pytest.mark.parametrize("size,expected", [(500, "500 B"), (1536, "1.5 KB"), (1048576, "1 MB")])
    def test_attachment_human_size(self, size, expected):
        assert Attachment(None, "f.bin", "application/octet-stream", size).human_size == expected

    def test_payload_stream_chunks(self):
        payload = AttachmentPayload("application/pdf", "a.pdf", b"x" * 10)
        assert list(payload.stream(chunk_size=4)) == [b"xxxx", b"xxxx", b"xx"]
