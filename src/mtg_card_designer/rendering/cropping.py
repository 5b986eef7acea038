"""Zoom and pan crop of the original art into the template's art box."""

import logging

from PIL import Image

from mtg_card_designer.domain.template import Template
from mtg_card_designer.errors import InputValidationError
from mtg_card_designer.rendering.images import image_to_bytes, to_data_uri
from mtg_card_designer.rendering.layout import CARD_HEIGHT, CARD_WIDTH

logger = logging.getLogger(__name__)

CROP_OUTPUT_WIDTH = 800
CROP_JPEG_QUALITY = 90


def art_aspect_ratio(template: Template) -> float:
    """Width / height of the template's art box on the nominal card."""
    box = template.elements.art
    width = box.width / 100 * CARD_WIDTH
    height = box.height / 100 * CARD_HEIGHT
    if width <= 0 or height <= 0:
        raise InputValidationError("Art box must have a positive size")
    return width / height


def crop_art(
    image: Image.Image,
    aspect_ratio: float,
    zoom: float = 1.0,
    offset: tuple[float, float] = (0.0, 0.0),
    output_width: int = CROP_OUTPUT_WIDTH,
) -> Image.Image:
    """Crop ``image`` to ``aspect_ratio`` the way the interactive cropper does.

    At zoom 1 the image covers the output exactly along its tighter axis.
    ``offset`` pans the image in output pixels and is clamped so the output
    is always fully covered.

    Returns:
        An RGB image of ``output_width`` x ``output_width / aspect_ratio``
    """
    if aspect_ratio <= 0:
        raise InputValidationError(f"Aspect ratio must be positive, got {aspect_ratio}")
    zoom = max(1.0, zoom)

    out_width = output_width
    out_height = max(1, round(output_width / aspect_ratio))
    image_ratio = image.width / image.height

    if image_ratio > aspect_ratio:
        base_height = out_height
        base_width = base_height * image_ratio
    else:
        base_width = out_width
        base_height = base_width / image_ratio

    scaled_width = base_width * zoom
    scaled_height = base_height * zoom
    max_x = (scaled_width - out_width) / 2
    max_y = (scaled_height - out_height) / 2
    offset_x = max(-max_x, min(max_x, offset[0]))
    offset_y = max(-max_y, min(max_y, offset[1]))

    left = out_width / 2 - scaled_width / 2 + offset_x
    top = out_height / 2 - scaled_height / 2 + offset_y

    resized = image.convert("RGB").resize(
        (max(1, round(scaled_width)), max(1, round(scaled_height))), Image.LANCZOS
    )
    output = Image.new("RGB", (out_width, out_height))
    output.paste(resized, (round(left), round(top)))
    logger.debug(f"Cropped art {image.size} -> {output.size} at zoom {zoom}")
    return output


def crop_art_to_data_uri(
    image: Image.Image,
    aspect_ratio: float,
    zoom: float = 1.0,
    offset: tuple[float, float] = (0.0, 0.0),
) -> str:
    """Crop and encode as a JPEG data URI, ready for ``CardArt.cropped``."""
    cropped = crop_art(image, aspect_ratio, zoom=zoom, offset=offset)
    data = image_to_bytes(cropped, "JPEG", quality=CROP_JPEG_QUALITY)
    return to_data_uri(data, "image/jpeg")
