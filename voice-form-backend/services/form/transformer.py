"""
Editable Transformer

Walks a parsed form and converts "fillable" leaves into editable regions.

One pass does two things:
    1. Every <img> without an embedded data: source becomes an ImageSlot
       (placeholder-on-error hook + click to replace). Images are never
       classified as text blanks.
    2. Tags are visited category by category in PRIORITY_TAGS order
       (td, th, p, span, div). A tag is a candidate only if it is a leaf
       with respect to those categories: no nested candidate tag, table,
       row or image. Table cells convert when empty or when the classifier
       matches; every other tag needs a classifier match.

Re-running the pass over the same document is a no-op for tags that
already belong to a converted region.

Usage:
    transformer = EditableTransformer(session.regions)
    created = transformer.transform(container)
"""

from typing import Dict, List, Optional

from bs4 import Tag

from config.constants import (
    CELL_TAGS,
    EDITABLE_CLASS,
    IMAGE_SLOT_ATTR,
    ORIGINAL_TEXT_ATTR,
    PRIORITY_TAGS,
    REGION_ID_ATTR,
)
from services.form.classifier import needs_filling
from services.form.regions import ImageSlot, Region, TextRegion
from utils.logging import get_logger

logger = get_logger(__name__)

# Structured children that keep a tag from being treated as a single blank
_STRUCTURE_TAGS = ["table", "tr"]


class EditableTransformer:
    """
    Converts a document's blanks into regions registered in ``regions``.

    Args:
        regions: Registry shared with the owning session, keyed by region id
    """

    def __init__(self, regions: Dict[str, Region]):
        self.regions = regions

    def transform(self, container: Tag) -> List[Region]:
        """
        Run one transformation pass.

        Args:
            container: Root node of the form (usually <body>)

        Returns:
            List[Region]: Regions created by this pass, images first
        """
        created: List[Region] = list(self.process_images(container))

        for tag_name in PRIORITY_TAGS:
            for tag in container.find_all(tag_name):
                if self._is_converted(tag):
                    continue
                if not self._is_candidate(tag):
                    continue

                original_text = tag.get_text()
                if tag_name in CELL_TAGS:
                    should_convert = not original_text.strip() or needs_filling(original_text)
                else:
                    should_convert = needs_filling(original_text)

                if should_convert:
                    region = TextRegion.create(tag)
                    region.convert()
                    self.regions[region.region_id] = region
                    created.append(region)

        logger.info(f"Transform pass created {len(created)} region(s), {len(self.regions)} total")
        return created

    def process_images(self, container: Tag) -> List[ImageSlot]:
        """Prepare every image lacking an embedded source."""
        slots = []
        for img in container.find_all("img"):
            if img.get("src", "").startswith("data:"):
                continue
            if self._lookup(img, IMAGE_SLOT_ATTR) is not None:
                continue

            slot = ImageSlot.create(img)
            slot.prepare()
            self.regions[slot.region_id] = slot
            slots.append(slot)
        return slots

    def _is_candidate(self, tag: Tag) -> bool:
        if tag.find("img") is not None:
            return False
        if tag.find(PRIORITY_TAGS) is not None:
            return False
        return tag.find(_STRUCTURE_TAGS) is None

    def _is_converted(self, tag: Tag) -> bool:
        region = self._lookup(tag, REGION_ID_ATTR)
        if region is not None:
            return region.converted
        if EDITABLE_CLASS in tag.get("class", []):
            # Already-editable markup from elsewhere: register it as it is
            self._adopt(tag)
            return True
        return False

    def _adopt(self, tag: Tag) -> TextRegion:
        region_id = tag.get(REGION_ID_ATTR)
        if not region_id or region_id in self.regions:
            region = TextRegion.create(tag)
            tag[REGION_ID_ATTR] = region.region_id
        else:
            region = TextRegion(region_id, tag, tag.get_text())
        region.original_text = tag.get(ORIGINAL_TEXT_ATTR, region.original_text)
        region.converted = True
        self.regions[region.region_id] = region
        return region

    def _lookup(self, tag: Tag, attr: str) -> Optional[Region]:
        region_id = tag.get(attr)
        if not region_id:
            return None
        region = self.regions.get(region_id)
        if region is None or region.tag is not tag:
            return None
        return region
