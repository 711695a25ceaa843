import io
from pathlib import PurePosixPath

from PIL import Image, ImageOps

from app.imaging.exceptions import CompressionError
from app.imaging.models import CompressedAsset, UploadCandidate
from app.logging.logger import Log

DEFAULT_MAX_BYTES = 2 * 1024 * 1024
DEFAULT_MAX_DIMENSION = 1920
DEFAULT_QUALITY = 85


class ImageCompressor:
    """Re-encodes a photo as JPEG within a byte ceiling, keeping its aspect ratio."""

    MIN_QUALITY = 40
    QUALITY_STEP = 10
    SHRINK_FACTOR = 0.75
    MIN_EDGE = 16

    def __init__(
        self,
        max_bytes: int = DEFAULT_MAX_BYTES,
        max_dimension: int = DEFAULT_MAX_DIMENSION,
        quality: int = DEFAULT_QUALITY,
    ) -> None:
        self._max_bytes = max_bytes
        self._max_dimension = max_dimension
        self._quality = quality

    def compress(self, candidate: UploadCandidate) -> CompressedAsset:
        """Decode, downscale to the maximum dimension and encode under the byte ceiling.

        Raises:
            CompressionError: if the payload is not a decodable image, or the
                budget cannot be met.
        """
        image = self._decode(candidate)
        image = fit_within(image, self._max_dimension)

        while True:
            data = self._encode_within_budget(image)
            if data is not None:
                break
            width, height = image.size
            if min(width, height) * self.SHRINK_FACTOR < self.MIN_EDGE:
                raise CompressionError(
                    f"Cannot compress {candidate.file_name} below {self._max_bytes} bytes"
                )
            image = image.resize(
                _scaled(image.size, self.SHRINK_FACTOR), Image.Resampling.LANCZOS
            )

        Log.info(
            f"Compressed {candidate.file_name}: {candidate.size} -> {len(data)} bytes",
            width=image.width,
            height=image.height,
        )
        return CompressedAsset(
            data=data,
            content_type="image/jpeg",
            width=image.width,
            height=image.height,
            file_name=jpeg_file_name(candidate.file_name),
        )

    def _decode(self, candidate: UploadCandidate) -> Image.Image:
        try:
            with Image.open(io.BytesIO(candidate.data)) as source:
                source.load()
                image = ImageOps.exif_transpose(source) or source
                return _flatten_to_rgb(image)
        except Exception as exc:
            raise CompressionError(
                f"Failed to load image {candidate.file_name}: {exc}"
            ) from exc

    def _encode_within_budget(self, image: Image.Image) -> bytes | None:
        quality = self._quality
        while True:
            buffer = io.BytesIO()
            image.save(buffer, format="JPEG", quality=quality, optimize=True)
            if buffer.tell() <= self._max_bytes:
                return buffer.getvalue()
            if quality <= self.MIN_QUALITY:
                return None
            quality = max(self.MIN_QUALITY, quality - self.QUALITY_STEP)


def fit_within(image: Image.Image, max_dimension: int) -> Image.Image:
    """Scale the image so its longest edge is at most max_dimension."""
    longest = max(image.size)
    if longest <= max_dimension:
        return image
    return image.resize(
        _scaled(image.size, max_dimension / longest), Image.Resampling.LANCZOS
    )


def jpeg_file_name(file_name: str) -> str:
    stem = PurePosixPath(file_name.replace("\\", "/")).stem or "photo"
    return f"{stem}.jpg"


def _scaled(size: tuple[int, int], factor: float) -> tuple[int, int]:
    width, height = size
    return max(1, round(width * factor)), max(1, round(height * factor))


def _flatten_to_rgb(image: Image.Image) -> Image.Image:
    if image.mode == "RGB":
        return image.copy()
    if image.mode in ("RGBA", "LA") or (image.mode == "P" and "transparency" in image.info):
        rgba = image.convert("RGBA")
        background = Image.new("RGB", rgba.size, (255, 255, 255))
        background.paste(rgba, mask=rgba.getchannel("A"))
        return background
    return image.convert("RGB")
