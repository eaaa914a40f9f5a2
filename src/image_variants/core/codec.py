"""Pillow-backed image codec: decode, queue transformations, encode."""

import io
from typing import Any, Callable, Dict, List, Optional, Tuple

from PIL import Image, ImageOps, UnidentifiedImageError

from .error_handling import with_error_handling
from .exceptions import DecodeError, EncodeError
from .models import Color

PIL_FORMATS: Dict[str, str] = {
    "jpg": "JPEG",
    "jpeg": "JPEG",
    "png": "PNG",
    "gif": "GIF",
    "bmp": "BMP",
    "tif": "TIFF",
    "tiff": "TIFF",
    "webp": "WEBP",
}

# Extra keyword arguments passed to Image.save per format
SAVE_OPTIONS: Dict[str, Dict[str, Any]] = {
    "JPEG": {"quality": 95},
    "WEBP": {"quality": 95},
}


def pil_format(image_type: str) -> Optional[str]:
    """Pillow format name for a type tag such as ``jpg`` or ``image/png``."""
    if not image_type:
        return None
    return PIL_FORMATS.get(image_type.lower().replace("image/", ""))


class TransformBatch:
    """Transformations queued against an image and committed together."""

    def __init__(self, image: Image.Image):
        self._image = image
        self._operations: List[Tuple[str, Callable[[Image.Image], Image.Image]]] = []

    @property
    def operations(self) -> List[str]:
        return [name for name, _ in self._operations]

    def resize(self, width: int, height: int) -> "TransformBatch":
        self._operations.append(
            (
                f"resize({width}, {height})",
                lambda img: img.resize((width, height), Image.Resampling.LANCZOS),
            )
        )
        return self

    def crop(self, left: int, top: int, right: int, bottom: int) -> "TransformBatch":
        self._operations.append(
            (
                f"crop({left}, {top}, {right}, {bottom})",
                lambda img: img.crop((left, top, right, bottom)),
            )
        )
        return self

    def contain(self, width: int, height: int, color: Color) -> "TransformBatch":
        """Letterbox the image into a ``width`` x ``height`` canvas filled with ``color``."""
        self._operations.append(
            (
                f"contain({width}, {height}, {color!r})",
                lambda img: ImageOps.pad(
                    img,
                    (width, height),
                    method=Image.Resampling.LANCZOS,
                    color=color,
                    centering=(0.5, 0.5),
                ),
            )
        )
        return self

    def apply(self) -> Image.Image:
        image = self._image
        for _, operation in self._operations:
            image = operation(image)
        return image


class ImageHandle:
    """A decoded image exposing its natural size."""

    def __init__(self, image: Image.Image):
        self.image = image

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    def batch(self) -> TransformBatch:
        return TransformBatch(self.image)


class PillowCodec:
    """Codec collaborator used by the variant pipeline."""

    @with_error_handling(DecodeError, "decode image")
    def decode(self, data: bytes, image_type: str) -> ImageHandle:
        if pil_format(image_type) is None:
            raise DecodeError(f"Unsupported image type: {image_type!r}")
        try:
            image = Image.open(io.BytesIO(data))
            image.load()
        except (UnidentifiedImageError, OSError, SyntaxError, Image.DecompressionBombError) as img_err:
            raise DecodeError(f"Cannot decode {image_type} image: {img_err}") from img_err

        # Palette images are resampled poorly; work in RGBA instead
        if image.mode in ("P", "PA"):
            image = image.convert("RGBA")
        return ImageHandle(image)

    @with_error_handling(EncodeError, "encode image")
    def encode(self, image: Image.Image, image_type: str) -> bytes:
        format_type = pil_format(image_type)
        if format_type is None:
            raise EncodeError(f"Unsupported image type: {image_type!r}")

        if format_type == "JPEG" and image.mode not in ("RGB", "L", "CMYK"):
            image = image.convert("RGB")

        output_stream = io.BytesIO()
        image.save(output_stream, format=format_type, **SAVE_OPTIONS.get(format_type, {}))
        return output_stream.getvalue()
