"""EXIF metadata extraction for verification photos."""

import io
import math
from datetime import datetime
from typing import Any

from PIL import ExifTags, Image

from app.imaging.models import ExtractedLocation, PhotoMetadata, UploadCandidate
from app.logging.logger import Log

_EXIF_DATETIME_FORMAT = "%Y:%m:%d %H:%M:%S"
_NEGATIVE_REFS = frozenset({"S", "W"})


class ExifMetadataExtractor:
    """Recovers GPS coordinates and capture time from embedded EXIF data.

    Extraction is best effort: a missing, malformed, or incomplete metadata
    segment is an expected outcome and yields an absent value, never an error.
    """

    def extract(self, candidate: UploadCandidate) -> ExtractedLocation | None:
        """Return the photo's coordinates, or None when no GPS data is found."""
        return self.extract_metadata(candidate).location

    def extract_metadata(self, candidate: UploadCandidate) -> PhotoMetadata:
        try:
            with Image.open(io.BytesIO(candidate.data)) as image:
                exif = image.getexif()
                gps_ifd = exif.get_ifd(ExifTags.IFD.GPSInfo)
                exif_ifd = exif.get_ifd(ExifTags.IFD.Exif)
        except Exception as exc:
            Log.warning(
                f"Could not read EXIF data from {candidate.file_name}: {exc}",
                file_name=candidate.file_name,
            )
            return PhotoMetadata()

        location = parse_gps_location(gps_ifd)
        if location is None:
            Log.info(f"No GPS data found in {candidate.file_name}")
        return PhotoMetadata(location=location, taken_at=read_capture_time(exif_ifd))


def parse_gps_location(gps_ifd: dict[int, Any]) -> ExtractedLocation | None:
    """Convert a GPS IFD into signed decimal degrees.

    Both coordinates must parse and fall inside valid ranges, otherwise the
    location is absent as a whole.
    """
    latitude = _signed_degrees(
        gps_ifd.get(ExifTags.GPS.GPSLatitude),
        gps_ifd.get(ExifTags.GPS.GPSLatitudeRef),
    )
    longitude = _signed_degrees(
        gps_ifd.get(ExifTags.GPS.GPSLongitude),
        gps_ifd.get(ExifTags.GPS.GPSLongitudeRef),
    )
    if latitude is None or longitude is None:
        return None
    if not (-90.0 <= latitude <= 90.0 and -180.0 <= longitude <= 180.0):
        return None
    return ExtractedLocation(latitude=latitude, longitude=longitude)


def read_capture_time(exif_ifd: dict[int, Any]) -> datetime | None:
    """Capture time from DateTimeOriginal, falling back to DateTimeDigitized."""
    raw = exif_ifd.get(ExifTags.Base.DateTimeOriginal) or exif_ifd.get(
        ExifTags.Base.DateTimeDigitized
    )
    return _parse_timestamp(raw)


def dms_to_decimal(dms: Any) -> float | None:
    """degrees + minutes / 60 + seconds / 3600, or None for malformed input."""
    try:
        degrees, minutes, seconds = (float(part) for part in dms)
    except (TypeError, ValueError, ZeroDivisionError):
        return None
    decimal = degrees + minutes / 60.0 + seconds / 3600.0
    if not math.isfinite(decimal):
        return None
    return decimal


def _signed_degrees(dms: Any, ref: Any) -> float | None:
    if dms is None or ref is None:
        return None
    decimal = dms_to_decimal(dms)
    if decimal is None:
        return None
    if isinstance(ref, bytes):
        ref = ref.decode("ascii", errors="ignore")
    ref = str(ref).strip("\x00 ").upper()
    return -decimal if ref in _NEGATIVE_REFS else decimal


def _parse_timestamp(raw: Any) -> datetime | None:
    if not isinstance(raw, str):
        return None
    try:
        return datetime.strptime(raw.strip("\x00 "), _EXIF_DATETIME_FORMAT)
    except ValueError:
        return None
