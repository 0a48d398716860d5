from __future__ import annotations

from io import BytesIO

from PIL import Image, ImageOps, UnidentifiedImageError

from ..errors import DecodeError


class PillowDecoder:
    def decode(self, data: bytes) -> Image.Image:
        try:
            with Image.open(BytesIO(data)) as source:
                # exif_transpose always returns a loaded copy
                return ImageOps.exif_transpose(source)
        except (UnidentifiedImageError, Image.DecompressionBombError) as exc:
            raise DecodeError("Failed to decode input: the image format could not be determined") from exc
        except (OSError, ValueError, SyntaxError) as exc:
            raise DecodeError(f"Failed to decode image: {exc}") from exc
