"""Tests for parsing raw messages into MimePart trees."""

from mailbox_engine.core import MimePart, PartKind, parse_message


class TestParseMessage:
    def test_single_part_message_is_a_leaf(self):
        raw = (
            b"Subject: plain\r\n"
            b"Content-Type: text/plain; charset=utf-8\r\n"
            b"\r\n"
            b"just text\r\n"
        )
        root = parse_message(raw)

        assert root.kind is PartKind.LEAF
        assert root.mime_type == "text/plain"
        assert root.charset == "utf-8"
        assert root.text().strip() == "just text"

    def test_nested_tree_structure(self, raw_with_attachments):
        root = parse_message(raw_with_attachments)

        assert root.kind is PartKind.MULTIPART
        assert root.mime_type == "multipart/mixed"
        assert [p.mime_type for p in root.children] == [
            "multipart/alternative",
            "application/pdf",
            "message/rfc822",
        ]

        alternative = root.children[0]
        assert [p.mime_type for p in alternative.children] == ["text/plain", "multipart/related"]
        related = alternative.children[1]
        assert [p.mime_type for p in related.children] == ["text/html", "image/png"]

    def test_leaf_metadata(self, raw_with_attachments):
        root = parse_message(raw_with_attachments)
        image = root.children[0].children[1].children[1]
        pdf = root.children[1]

        assert image.is_image
        assert image.content_id == "<chart@example.com>"
        assert image.transfer_encoding == "base64"
        assert image.payload == b"\x89PNG fake image bytes"
        # encoded size, not decoded size
        assert image.size > len(image.payload)

        assert pdf.is_attachment
        assert pdf.filename == "report.pdf"
        assert pdf.payload == b"%PDF-1.4 fake"
        assert 'name="report.pdf"' not in pdf.mime_type

    def test_embedded_message(self, raw_with_attachments):
        forwarded = parse_message(raw_with_attachments).children[2]

        assert forwarded.kind is PartKind.MESSAGE
        assert forwarded.subject == "Original thread"
        assert forwarded.size == len(forwarded.payload) > 0
        assert b"earlier message" in forwarded.payload
        assert forwarded.nested is not None
        assert forwarded.nested.mime_type == "text/plain"

    def test_walk_is_depth_first(self, raw_with_attachments):
        types = [p.mime_type for p in parse_message(raw_with_attachments).walk()]
        assert types == [
            "multipart/mixed",
            "multipart/alternative",
            "text/plain",
            "multipart/related",
            "text/html",
            "image/png",
            "application/pdf",
            "message/rfc822",
        ]


class TestMimePartConstructors:
    def test_leaf_normalizes_metadata(self):
        part = MimePart.leaf("IMAGE/PNG; name=x.png", b"abc", disposition="INLINE", transfer_encoding="Base64")

        assert part.mime_type == "image/png"
        assert part.disposition == "inline"
        assert part.transfer_encoding == "base64"
        assert part.size == 3

    def test_text_falls_back_on_unknown_charset(self):
        part = MimePart.leaf("text/plain", "héllo".encode("utf-8"), charset="x-unknown-charset")
        assert part.text() == "héllo"
