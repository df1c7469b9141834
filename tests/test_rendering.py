"""Tests for content extraction, image inlining and attachment handling."""

import base64

import pytest

from mailbox_engine.core import MessageWithFolder, MimePart, parse_message
from mailbox_engine.errors import NotFoundError
from mailbox_engine.rendering import (
    collect_attachments,
    extract_content,
    find_part,
    inline_image,
)


def _text(subtype, body):
    return MimePart.leaf(f"text/{subtype}; charset=utf-8", body.encode(), charset="utf-8")


def _image(cid, size, payload=b"\x89PNG...", encoding="base64", content_type="image/png; name=logo.png"):
    return MimePart.leaf(
        content_type,
        payload,
        content_id=cid,
        filename="logo.png",
        transfer_encoding=encoding,
        size=size,
    )


def _owner(content):
    message = MessageWithFolder(uid=1)
    message.content = content
    return message


# ============================================================================
# Content extraction
# ============================================================================


class TestExtractContent:
    def test_html_wins_over_plain(self, alternative_tree):
        assert extract_content(alternative_tree) == "<b>hi</b>"

    def test_plain_text_is_escaped_in_pre(self):
        root = MimePart.multipart("mixed", [_text("plain", "a < b & c")])
        assert extract_content(root) == "<pre>a &lt; b &amp; c</pre>"

    def test_plain_never_overrides_earlier_result(self):
        root = MimePart.multipart("mixed", [_text("plain", "first"), _text("plain", "second")])
        assert extract_content(root) == "<pre>first</pre>"

    def test_later_html_overrides_earlier_html(self):
        root = MimePart.multipart("mixed", [_text("html", "<p>1</p>"), _text("html", "<p>2</p>")])
        assert extract_content(root) == "<p>2</p>"

    def test_nested_multipart_replaces_result(self):
        root = MimePart.multipart("mixed", [
            _text("html", "<p>outer</p>"),
            MimePart.multipart("alternative", [_text("plain", "inner")]),
        ])
        assert extract_content(root) == "<pre>inner</pre>"

    def test_other_types_ignored(self):
        root = MimePart.multipart("mixed", [MimePart.leaf("application/pdf", b"%PDF")])
        assert extract_content(root) == ""

    def test_single_part_root(self):
        assert extract_content(_text("plain", "solo")) == "<pre>solo</pre>"
        assert extract_content(_text("html", "<i>solo</i>")) == "<i>solo</i>"

    def test_deterministic(self, raw_with_attachments):
        root = parse_message(raw_with_attachments)
        assert extract_content(root) == extract_content(root)
        assert extract_content(root) == '<p>See <img src="cid:chart@example.com"></p>\n'


# ============================================================================
# Image inlining
# ============================================================================


class TestInlineImage:
    def test_replaces_every_reference(self, sample_html_email):
        image = _image("<logo123>", 500, payload=b"PNGDATA")
        expected = "data:image/png;base64," + base64.b64encode(b"PNGDATA").decode()

        result = inline_image(sample_html_email, image)

        assert "cid:logo123" not in result
        assert result.count(expected) == 2

    def test_miss_returns_input_unchanged(self, sample_html_email):
        image = _image("<other>", 500)
        assert inline_image(sample_html_email, image) is sample_html_email

    def test_base64_has_no_line_breaks(self):
        image = _image("<big>", 500, payload=bytes(range(256)) * 20)
        result = inline_image('<img src="cid:big">', image)
        assert "\n" not in result and "\r" not in result

    def test_declared_encoding_is_used(self):
        image = _image("<q>", 10, payload=b"x", encoding="quoted-printable")
        assert inline_image("cid:q", image) == "data:image/png;quoted-printable,eA=="

    def test_missing_encoding_defaults_to_base64(self):
        image = _image("<q>", 10, payload=b"x", encoding=None)
        assert inline_image("cid:q", image) == "data:image/png;base64,eA=="


# ============================================================================
# Attachment collection
# ============================================================================


class TestCollectAttachments:
    def test_small_image_is_inlined_not_listed(self):
        owner = _owner('<img src="cid:img1">')
        root = MimePart.multipart("related", [_text("html", owner.content), _image("<img1>", 500)])

        attachments = collect_attachments(root, owner, size_threshold=1000)

        assert attachments == []
        assert owner.content.startswith('<img src="data:image/png;base64,')

    def test_big_image_is_listed_by_content_id(self):
        owner = _owner('<img src="cid:img1">')
        root = MimePart.multipart("related", [_text("html", owner.content), _image("<img1>", 2000)])

        attachments = collect_attachments(root, owner, size_threshold=1000)

        assert len(attachments) == 1
        assert attachments[0].content_id == "<img1>"
        assert attachments[0].filename == "logo.png"
        assert attachments[0].size == 2000
        assert owner.content == '<img src="cid:img1">'

    def test_threshold_is_inclusive(self):
        owner = _owner("cid:img1")
        root = MimePart.multipart("related", [_image("<img1>", 1000)])
        assert collect_attachments(root, owner, size_threshold=1000) == []

    def test_image_without_content_id_needs_attachment_disposition(self):
        plain_image = MimePart.leaf("image/gif", b"GIF", filename="a.gif")
        attached_image = MimePart.leaf("image/gif", b"GIF", filename="b.gif", disposition="attachment")
        root = MimePart.multipart("mixed", [plain_image, attached_image])

        attachments = collect_attachments(root, _owner(""), size_threshold=0)

        assert [a.filename for a in attachments] == ["b.gif"]
        assert attachments[0].content_id is None

    def test_real_message(self, raw_with_attachments):
        root = parse_message(raw_with_attachments)
        owner = _owner(extract_content(root))

        attachments = collect_attachments(root, owner, size_threshold=51200)

        assert [(a.content_id, a.filename) for a in attachments] == [
            (None, "report.pdf"),
            (None, "Original thread"),
        ]
        assert attachments[1].content_type.startswith("message/rfc822")
        assert "cid:chart@example.com" not in owner.content
        assert "data:image/png;base64," in owner.content

    def test_order_is_tree_order(self):
        root = MimePart.multipart("mixed", [
            MimePart.leaf("application/zip", b"1", filename="z.zip", disposition="attachment"),
            MimePart.multipart("mixed", [
                MimePart.leaf("text/csv", b"2", filename="a.csv", disposition="ATTACHMENT"),
            ]),
            MimePart.leaf("application/zip", b"3", filename="z.zip", disposition="attachment"),
        ])

        attachments = collect_attachments(root, _owner(""), size_threshold=0)

        assert [a.filename for a in attachments] == ["z.zip", "a.csv", "z.zip"]


# ============================================================================
# Part lookup
# ============================================================================


class TestFindPart:
    def test_by_content_id_ignores_brackets(self):
        image = _image("<img1>", 2000)
        root = MimePart.multipart("mixed", [MimePart.multipart("related", [_text("html", ""), image])])

        assert find_part(root, "img1", is_content_id=True) is image
        assert find_part(root, "<img1>", is_content_id=True) is image

    def test_finds_the_part_that_was_inlined(self):
        image = _image("<img1>", 10, payload=b"IMG")
        owner = _owner("cid:img1")
        root = MimePart.multipart("related", [image])

        collect_attachments(root, owner, size_threshold=1000)
        found = find_part(root, "img1", is_content_id=True)

        assert found is image
        assert owner.content.endswith(base64.b64encode(found.payload).decode())

    def test_by_name(self, raw_with_attachments):
        root = parse_message(raw_with_attachments)

        pdf = find_part(root, "report.pdf", is_content_id=False)
        forwarded = find_part(root, "Original thread", is_content_id=False)

        assert pdf.payload == b"%PDF-1.4 fake"
        assert forwarded.is_message

    def test_by_name_requires_attachment_disposition(self):
        root = MimePart.multipart("mixed", [MimePart.leaf("image/gif", b"GIF", filename="a.gif")])
        with pytest.raises(NotFoundError):
            find_part(root, "a.gif", is_content_id=False)

    def test_missing_part_raises(self, alternative_tree):
        with pytest.raises(NotFoundError):
            find_part(alternative_tree, "nope", is_content_id=True)
        with pytest.raises(NotFoundError):
            find_part(alternative_tree, "nope.pdf", is_content_id=False)
