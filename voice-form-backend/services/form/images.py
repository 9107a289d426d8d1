"""
Image Attachment Handler

Embeds a user-selected image into the form as a base64 data URL.

    - ImageSlot target: its source and alt text are replaced.
    - TextRegion target: content is replaced by a new <img>, and the
      region is frozen (no more text; clicking it replaces the image).

Each attachment is recorded in the session's image map so exports can
re-embed it. File type and size are not validated; an unreadable upload
is dropped without an error.
"""

import base64
import mimetypes
from typing import Dict, Optional

from bs4 import BeautifulSoup

from config.constants import INSERTED_IMAGE_STYLES
from services.form.regions import ImageSlot, InteractionContext, TextRegion
from services.form.styles import format_style
from utils.logging import get_logger

logger = get_logger(__name__)


def encode_data_url(data: bytes, file_name: str, content_type: Optional[str] = None) -> Optional[str]:
    """Encode raw bytes as a data URL, or None when there is nothing to encode."""
    if not data:
        return None
    mime = content_type or mimetypes.guess_type(file_name)[0] or "application/octet-stream"
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


class ImageAttachmentHandler:
    """
    Args:
        image_map: Session map of region id -> data URL, grown by attach()
    """

    def __init__(self, image_map: Dict[str, str]):
        self.image_map = image_map

    def attach(
        self,
        context: InteractionContext,
        file_name: str,
        data: bytes,
        content_type: Optional[str] = None,
    ) -> Optional[str]:
        """
        Attach an image to ``context.image_target``.

        Returns:
            Optional[str]: The embedded data URL, None if nothing happened
        """
        target = context.image_target
        if target is None:
            logger.debug("Image received with no target selected, ignoring")
            return None

        data_url = encode_data_url(data, file_name, content_type)
        if data_url is None:
            logger.debug(f"Unreadable image {file_name!r} ignored")
            return None

        if isinstance(target, ImageSlot):
            target.replace_source(data_url, file_name)
        elif isinstance(target, TextRegion):
            self._insert_image(target, data_url, file_name)
        else:
            logger.debug(f"Region {target.region_id} cannot hold an image")
            return None

        self.image_map[target.region_id] = data_url
        logger.info(f"🖼️ Image {file_name} attached to {target.region_id}")
        return data_url

    def _insert_image(self, region: TextRegion, data_url: str, file_name: str) -> None:
        img = BeautifulSoup("", "html.parser").new_tag(
            "img",
            attrs={
                "src": data_url,
                "alt": file_name,
                "style": format_style(INSERTED_IMAGE_STYLES),
            },
        )
        region.tag.clear()
        region.tag.append(img)
        region.freeze()
