"""
Tests for the Image Attachment Handler

Covers image slots, text regions frozen by an image, silent failures and
the region event routing that picks the target.
"""

import base64

import pytest
from bs4 import BeautifulSoup

from services.form.images import ImageAttachmentHandler, encode_data_url
from services.form.regions import (
    ImageSlot,
    InteractionContext,
    RegionEventRouter,
    TextRegion,
)
from services.form.styles import get_style
from utils.exceptions import InvalidRegionEventError, RegionFrozenError

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake"


def _text_region(markup: str = "<p>(photo)</p>") -> TextRegion:
    soup = BeautifulSoup(markup, "html.parser")
    region = TextRegion.create(soup.p)
    region.convert()
    return region


def _image_slot() -> ImageSlot:
    soup = BeautifulSoup('<img src="logo.png" alt="logo">', "html.parser")
    slot = ImageSlot.create(soup.img)
    slot.prepare()
    return slot


class TestEncodeDataUrl:
    """Tests for data URL encoding."""

    def test_uses_content_type(self):
        url = encode_data_url(PNG_BYTES, "x.bin", "image/png")
        assert url == "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode()

    def test_guesses_from_file_name(self):
        assert encode_data_url(b"GIF89a", "anim.gif").startswith("data:image/gif;base64,")

    def test_empty_payload(self):
        assert encode_data_url(b"", "empty.png") is None


class TestAttach:
    """Tests for attaching images to targets."""

    def test_replace_image_slot_source(self, scheduler):
        slot = _image_slot()
        context = InteractionContext(scheduler=scheduler)
        RegionEventRouter().dispatch("click", slot, context)
        image_map = {}

        data_url = ImageAttachmentHandler(image_map).attach(context, "brand.png", PNG_BYTES, "image/png")

        assert slot.tag["src"] == data_url
        assert slot.tag["alt"] == "brand.png"
        assert image_map == {slot.region_id: data_url}

    def test_text_region_gets_image_and_freezes(self, scheduler):
        """The region's text is replaced by an <img> and editing stops."""
        region = _text_region()
        context = InteractionContext(scheduler=scheduler)
        RegionEventRouter().dispatch("contextmenu", region, context)

        data_url = ImageAttachmentHandler({}).attach(context, "me.png", PNG_BYTES, "image/png")

        img = region.tag.find("img")
        assert img["src"] == data_url
        assert get_style(img, "max-width") == "100%"
        assert get_style(img, "display") == "block"
        assert region.frozen is True
        assert region.tag["contenteditable"] == "false"
        assert region.text == ""

    def test_frozen_region_rejects_typing(self, scheduler):
        region = _text_region()
        context = InteractionContext(scheduler=scheduler, image_target=region)
        ImageAttachmentHandler({}).attach(context, "me.png", PNG_BYTES)

        with pytest.raises(RegionFrozenError):
            region.set_text("hello")

    def test_click_on_frozen_region_selects_it_again(self, scheduler):
        """A frozen region's click means 'replace this image'."""
        region = _text_region()
        context = InteractionContext(scheduler=scheduler, image_target=region)
        image_map = {}
        handler = ImageAttachmentHandler(image_map)
        handler.attach(context, "one.png", PNG_BYTES, "image/png")
        context.image_target = None

        RegionEventRouter().dispatch("click", region, context)
        second = handler.attach(context, "two.gif", b"GIF89a", "image/gif")

        assert context.image_target is region
        assert len(region.tag.find_all("img")) == 1
        assert image_map[region.region_id] == second

    def test_click_on_live_region_does_nothing(self, scheduler):
        region = _text_region()
        context = InteractionContext(scheduler=scheduler)
        RegionEventRouter().dispatch("click", region, context)
        assert context.image_target is None

    def test_unreadable_file_is_silent(self, scheduler):
        region = _text_region()
        context = InteractionContext(scheduler=scheduler, image_target=region)
        image_map = {}

        assert ImageAttachmentHandler(image_map).attach(context, "broken.png", b"") is None
        assert image_map == {}
        assert region.frozen is False

    def test_no_target_is_silent(self, scheduler):
        context = InteractionContext(scheduler=scheduler)
        assert ImageAttachmentHandler({}).attach(context, "x.png", PNG_BYTES) is None


class TestRegionEvents:
    """Tests for focus handling and event routing."""

    def test_focus_and_blur(self, scheduler):
        region = _text_region("<p>___</p>")
        context = InteractionContext(scheduler=scheduler)
        router = RegionEventRouter()

        router.dispatch("focus", region, context)
        assert context.focused is region
        assert get_style(region.tag, "outline") == "2px solid #00aaff"
        assert get_style(region.tag, "background-color") == "#e6f7ff"

        router.dispatch("blur", region, context)
        assert context.focused is None
        assert get_style(region.tag, "outline") == ""
        assert get_style(region.tag, "background-color") == ""

    def test_image_slot_ignores_focus(self, scheduler):
        slot = _image_slot()
        context = InteractionContext(scheduler=scheduler)
        RegionEventRouter().dispatch("focus", slot, context)
        assert context.focused is None

    def test_unknown_event(self, scheduler):
        with pytest.raises(InvalidRegionEventError):
            RegionEventRouter().dispatch("keypress", _text_region(), InteractionContext(scheduler=scheduler))
