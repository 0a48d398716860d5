from __future__ import annotations

import re

from PIL import Image, ImageMath

from .errors import ColorFormatError
from .geometry import calculate_dimensions
from .models import RequestContext

HEX_COLOR_RE = re.compile(r"^[0-9A-Fa-f]{6}$")


def parse_color(value: str) -> tuple[int, int, int]:
    """Parse ``RRGGBB`` or ``#RRGGBB`` into an RGB triple."""
    color = value.strip().removeprefix("#")
    if not HEX_COLOR_RE.match(color):
        raise ColorFormatError(f"Invalid color format: {value}")
    return int(color[0:2], 16), int(color[2:4], 16), int(color[4:6], 16)


def _blend_channel(channel: Image.Image, alpha: Image.Image, background: int) -> Image.Image:
    # integer division on "I" images floors for the non-negative values here
    blended = ImageMath.lambda_eval(
        lambda args: (args["c"] * args["a"] + background * (255 - args["a"])) / 255,
        c=channel,
        a=alpha,
    )
    return blended.convert("L")


def composite(image: Image.Image, color: tuple[int, int, int]) -> Image.Image:
    """Flatten ``image`` onto a solid ``color``; the result is fully opaque RGBA.

    Each channel becomes ``(src * a + bg * (255 - a)) // 255``.
    """
    rgba = image.convert("RGBA")
    alpha_min, _ = rgba.getchannel("A").getextrema()
    if alpha_min == 255:
        return rgba.copy()

    red, green, blue, alpha = rgba.split()
    channels = [
        _blend_channel(channel, alpha, background)
        for channel, background in zip((red, green, blue), color)
    ]
    opaque = Image.new("L", rgba.size, 255)
    return Image.merge("RGBA", (*channels, opaque))


def finalize_image(ctx: RequestContext, image: Image.Image) -> Image.Image:
    """Resize to the context's policy, then apply the background if one is set."""
    width, height = calculate_dimensions(image.size, ctx.resize_mode, ctx.term_size)
    result = image
    if width and height and (width, height) != image.size:
        result = image.resize((width, height), Image.Resampling.BILINEAR)
    if ctx.background is not None:
        result = composite(result, ctx.background)
    return result


__all__ = ["parse_color", "composite", "finalize_image"]
