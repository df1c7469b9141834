# =============================================================================
# Pytest Configuration and Fixtures
# =============================================================================
# Shared fixtures for the mailbox-engine test suite.
# =============================================================================

import pytest
import tempfile
from pathlib import Path

from mailbox_engine.config import Config
from mailbox_engine.core import Account, Credentials, MimePart
from mailbox_engine.service import MailboxService
from mailbox_engine.session import MailSession

from tests.fakes import FakeIMAPClient, build_raw_message


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_account():
    """Create a sample Account for testing."""
    return Account(
        name="test",
        email="test@example.com",
        imap_host="imap.example.com",
        imap_port=993,
        imap_security="ssl",
    )


@pytest.fixture
def credentials():
    """Credentials for a fictional server."""
    return Credentials(
        host="imap.example.com",
        port=993,
        user="test@example.com",
        password="hunter2",
    )


@pytest.fixture
def fake_client(credentials):
    """An in-memory IMAP server with an INBOX and an Archive folder."""
    client = FakeIMAPClient(credentials)
    client.add_folder("INBOX")
    client.add_folder("Archive")
    return client


@pytest.fixture
def session(credentials, fake_client):
    """A MailSession whose connection is the fake client."""
    return MailSession(credentials, client_factory=lambda creds, timeout: fake_client)


@pytest.fixture
def service():
    """A MailboxService that doesn't wait between move polls."""
    config = Config()
    config.move.poll_interval_seconds = 0
    return MailboxService(config)


@pytest.fixture
def alternative_tree():
    """multipart/alternative with a plain and an HTML version."""
    return MimePart.multipart("alternative", [
        MimePart.leaf("text/plain; charset=utf-8", b"hi", charset="utf-8"),
        MimePart.leaf("text/html; charset=utf-8", b"<b>hi</b>", charset="utf-8"),
    ])


@pytest.fixture
def sample_html_email():
    """Sample HTML email body referencing an embedded logo."""
    return """
    <html>
    <body>
        <p>Hello <strong>User</strong>,</p>
        <img src="cid:logo123" alt="Company Logo" width="200">
        <p>Footer again: <img src="cid:logo123"></p>
    </body>
    </html>
    """


@pytest.fixture
def raw_with_attachments():
    """
    A realistic message: HTML body with an embedded image, a PDF and a
    forwarded message.
    """
    from email.message import EmailMessage

    msg = EmailMessage()
    msg["Subject"] = "Quarterly report"
    msg["From"] = "Carol <carol@example.com>"
    msg["To"] = "test@example.com"
    msg["Date"] = "Tue, 16 Jan 2024 09:00:00 +0100"
    msg.set_content("See attached.")
    msg.add_alternative('<p>See <img src="cid:chart@example.com"></p>', subtype="html")
    msg.get_payload()[1].add_related(
        b"\x89PNG fake image bytes", maintype="image", subtype="png", cid="<chart@example.com>"
    )
    msg.add_attachment(b"%PDF-1.4 fake", maintype="application", subtype="pdf", filename="report.pdf")

    forwarded = EmailMessage()
    forwarded["Subject"] = "Original thread"
    forwarded["From"] = "dave@example.com"
    forwarded.set_content("earlier message")
    msg.add_attachment(forwarded)
    return msg.as_bytes()


@pytest.fixture
def sample_raw_message():
    """A plain multipart/alternative message."""
    return build_raw_message(subject="Greetings", body="hi", html="<b>hi</b>")
