"""
Tests for form sessions and document parsing.
"""

from datetime import datetime, timedelta, timezone

import pytest

from services.form.document import container_html, form_container, form_stylesheets, parse_form_document
from services.form.regions import ImageSlot, TextRegion
from services.form.session import SessionStore
from utils.exceptions import DocumentParsingError, RegionNotFoundError, SessionNotFoundError


class TestParseFormDocument:
    """Tests for upload validation and parsing."""

    @pytest.mark.parametrize("name", ["form.html", "form.XHTML", "legacy.htm"])
    def test_accepted_extensions(self, name):
        soup = parse_form_document(b"<p>___</p>", name)
        assert soup.p.get_text() == "___"

    def test_rejects_other_extensions(self):
        with pytest.raises(DocumentParsingError):
            parse_form_document(b"<p>___</p>", "form.pdf")

    def test_rejects_empty_upload(self):
        with pytest.raises(DocumentParsingError):
            parse_form_document(b"   ", "form.html")

    def test_invalid_utf8_replaced(self):
        soup = parse_form_document(b"<p>caf\xe9 ___</p>", "form.html")
        assert "�" in soup.p.get_text()

    def test_container_is_body_when_present(self, sample_soup):
        assert form_container(sample_soup).name == "body"

    def test_fragment_container(self):
        soup = parse_form_document(b"<p>___</p>", "fragment.html")
        assert container_html(soup) == "<p>___</p>"

    def test_head_stylesheets_lead_container_html(self):
        """Head <style> and stylesheet links are kept; other links are not."""
        soup = parse_form_document(
            b"<html><head><style>.box{border:1px solid red}</style>"
            b'<link rel="stylesheet" href="form.css"><link rel="icon" href="f.ico"></head>'
            b"<body><p class='box'>Name ____</p></body></html>",
            "styled.html",
        )

        assert [tag.name for tag in form_stylesheets(soup)] == ["style", "link"]
        snapshot = container_html(soup)
        assert snapshot.startswith("<style>.box{border:1px solid red}</style>")
        assert 'href="form.css"' in snapshot
        assert "f.ico" not in snapshot
        assert snapshot.endswith("<p class=\"box\">Name ____</p>")


class TestSessionStore:
    """Tests for the in-memory session registry."""

    def test_create_and_transform(self, store, sample_soup):
        session = store.create("order.html", sample_soup)
        created = session.transform()

        assert store.get(session.session_id) is session
        assert len(created) == 5
        assert session.voice is session.context.voice
        assert len(store) == 1

    def test_unknown_session(self, store):
        with pytest.raises(SessionNotFoundError):
            store.get("missing")

    def test_replace_clears_regions_and_images(self, store, sample_soup, plain_form_html):
        session = store.create("order.html", sample_soup)
        session.transform()
        session.image_map["x"] = "data:image/png;base64,AAAA"

        replacement = parse_form_document(plain_form_html.encode(), "plain.html")
        replaced = store.replace(session.session_id, "plain.html", replacement)

        assert replaced.session_id == session.session_id
        assert replaced.regions == {}
        assert replaced.image_map == {}
        assert store.get(session.session_id).file_name == "plain.html"

    def test_replace_unknown_session(self, store, sample_soup):
        with pytest.raises(SessionNotFoundError):
            store.replace("missing", "order.html", sample_soup)

    def test_discard(self, store, sample_soup):
        session = store.create("order.html", sample_soup)
        store.discard(session.session_id)
        assert len(store) == 0

    def test_expired_session_dropped_on_lookup(self, store, sample_soup):
        session = store.create("order.html", sample_soup)
        session.expires_at = datetime.now(timezone.utc) - timedelta(seconds=1)

        with pytest.raises(SessionNotFoundError):
            store.get(session.session_id)
        assert len(store) == 0

    def test_lookup_extends_expiry(self, store, sample_soup):
        session = store.create("order.html", sample_soup)
        soon = datetime.now(timezone.utc) + timedelta(seconds=5)
        session.expires_at = soon

        store.get(session.session_id)

        assert session.expires_at > soon
        assert session.expires_at - datetime.now(timezone.utc) <= store.ttl

    def test_create_cleans_up_expired(self, store, sample_soup, plain_form_html):
        stale = store.create("order.html", sample_soup)
        stale.expires_at = datetime.now(timezone.utc) - timedelta(minutes=1)

        fresh = store.create("plain.html", parse_form_document(plain_form_html.encode(), "plain.html"))

        assert len(store) == 1
        assert store.get(fresh.session_id) is fresh
        assert store.cleanup_expired() == 0

    def test_ttl_configurable(self, agent):
        assert SessionStore(agent, ttl_minutes=5).ttl == timedelta(minutes=5)
        assert SessionStore(agent).ttl == timedelta(minutes=30)

    def test_region_lookup(self, store, sample_soup):
        session = store.create("order.html", sample_soup)
        session.transform()
        slot = next(r for r in session.regions.values() if isinstance(r, ImageSlot))

        with pytest.raises(RegionNotFoundError):
            session.region("editable-missing")
        with pytest.raises(RegionNotFoundError):
            session.text_region(slot.region_id)

    def test_editable_regions_in_document_order(self, store, plain_form_html):
        soup = parse_form_document(plain_form_html.encode(), "plain.html")
        session = store.create("plain.html", soup)
        session.transform()

        ordered = session.editable_regions()

        assert all(isinstance(region, TextRegion) for region in ordered)
        assert [region.text for region in ordered] == ["Name:", "Email"]
