import io
import os
from collections.abc import Callable

import pytest
from PIL import ExifTags, Image
from PIL.TiffImagePlugin import IFDRational

from app.imaging.models import UploadCandidate


def make_jpeg(
    width: int = 64,
    height: int = 48,
    exif: Image.Exif | None = None,
    color: tuple[int, int, int] = (34, 139, 34),
) -> bytes:
    buf = io.BytesIO()
    image = Image.new("RGB", (width, height), color)
    if exif is not None:
        image.save(buf, format="JPEG", exif=exif)
    else:
        image.save(buf, format="JPEG")
    return buf.getvalue()


def make_gps_exif(
    lat: tuple[int, int, int],
    lat_ref: str,
    lon: tuple[int, int, int],
    lon_ref: str,
    taken_at: str | None = None,
) -> Image.Exif:
    exif = Image.Exif()
    exif[ExifTags.IFD.GPSInfo] = {
        ExifTags.GPS.GPSLatitudeRef: lat_ref,
        ExifTags.GPS.GPSLatitude: tuple(IFDRational(part, 1) for part in lat),
        ExifTags.GPS.GPSLongitudeRef: lon_ref,
        ExifTags.GPS.GPSLongitude: tuple(IFDRational(part, 1) for part in lon),
    }
    if taken_at is not None:
        exif[ExifTags.IFD.Exif] = {ExifTags.Base.DateTimeOriginal: taken_at}
    return exif


def make_candidate(
    data: bytes,
    content_type: str = "image/jpeg",
    file_name: str = "acacia.jpg",
) -> UploadCandidate:
    return UploadCandidate(data=data, content_type=content_type, file_name=file_name)


@pytest.fixture()
def small_jpeg_bytes() -> bytes:
    """A tiny JPEG without any EXIF segment."""
    return make_jpeg()


@pytest.fixture()
def gps_jpeg_bytes() -> bytes:
    """JPEG tagged at 1°17'24" S, 36°49'12" E (Nairobi)."""
    exif = make_gps_exif((1, 17, 24), "S", (36, 49, 12), "E", taken_at="2025:03:14 09:30:00")
    return make_jpeg(exif=exif)


@pytest.fixture()
def noisy_large_jpeg_bytes() -> bytes:
    """High-entropy 3000x2000 JPEG that is well above a 200 KB budget."""
    image = Image.frombytes("RGB", (3000, 2000), os.urandom(3000 * 2000 * 3))
    buf = io.BytesIO()
    image.save(buf, format="JPEG", quality=95)
    return buf.getvalue()


@pytest.fixture()
def png_with_alpha_bytes() -> bytes:
    buf = io.BytesIO()
    Image.new("RGBA", (40, 20), (10, 200, 10, 128)).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture()
def jpeg_factory() -> Callable[..., bytes]:
    return make_jpeg


@pytest.fixture()
def gps_exif_factory() -> Callable[..., Image.Exif]:
    return make_gps_exif


@pytest.fixture()
def candidate_factory() -> Callable[..., UploadCandidate]:
    return make_candidate
