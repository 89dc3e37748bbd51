"""Read image dimensions from raw bytes without decoding pixels.

Supports PNG, JPEG, GIF and WebP (lossy VP8 and lossless VP8L). Anything
else, or a truncated file, yields ``None``.
"""

import struct
from dataclasses import dataclass
from typing import Optional


PNG_SIGNATURE = b"\x89PNG"
JPEG_SIGNATURE = b"\xff\xd8"
GIF_SIGNATURE = b"GIF"
VP8L_SIGNATURE = 0x2F

# Start-of-frame markers; 0xC4 is DHT, not a frame.
SOF_MARKERS = frozenset(range(0xC0, 0xC4)) | frozenset(range(0xC5, 0xD0))


@dataclass(frozen=True)
class ImageSize:
    width: int
    height: int

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height if self.height else 0.0

    def to_dict(self) -> dict[str, int]:
        return {"width": self.width, "height": self.height}


def sniff_format(data: bytes) -> Optional[str]:
    """Name the image format from its signature."""
    if data[:4] == PNG_SIGNATURE:
        return "png"
    if data[:2] == JPEG_SIGNATURE:
        return "jpeg"
    if data[:3] == GIF_SIGNATURE:
        return "gif"
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "webp"
    return None


def _png_size(data: bytes) -> Optional[ImageSize]:
    if len(data) < 24:
        return None
    width, height = struct.unpack(">II", data[16:24])
    return ImageSize(width, height)


def _jpeg_size(data: bytes) -> Optional[ImageSize]:
    offset = 2
    while offset + 8 < len(data):
        if data[offset] != 0xFF:
            offset += 1
            continue
        marker = data[offset + 1]
        if marker == 0xFF:
            # fill byte before the real marker
            offset += 1
            continue
        if marker in SOF_MARKERS:
            height, width = struct.unpack(">HH", data[offset + 5:offset + 9])
            return ImageSize(width, height)
        (length,) = struct.unpack(">H", data[offset + 2:offset + 4])
        if length < 2:
            return None
        offset += 2 + length
    return None


def _gif_size(data: bytes) -> Optional[ImageSize]:
    if len(data) < 10:
        return None
    width, height = struct.unpack("<HH", data[6:10])
    return ImageSize(width, height)


def _webp_size(data: bytes) -> Optional[ImageSize]:
    chunk = data[12:16]
    if chunk == b"VP8 ":
        if len(data) < 30:
            return None
        width, height = struct.unpack("<HH", data[26:30])
        return ImageSize(width & 0x3FFF, height & 0x3FFF)
    if chunk == b"VP8L":
        if len(data) < 26 or data[21] != VP8L_SIGNATURE:
            return None
        (bits,) = struct.unpack("<I", data[22:26])
        return ImageSize((bits & 0x3FFF) + 1, ((bits >> 14) & 0x3FFF) + 1)
    return None


_READERS = {
    "png": _png_size,
    "jpeg": _jpeg_size,
    "gif": _gif_size,
    "webp": _webp_size,
}


def sniff_dimensions(data: bytes) -> Optional[ImageSize]:
    """Return the pixel size of an image, or None if it can't be read."""
    fmt = sniff_format(data)
    if fmt is None:
        return None
    return _READERS[fmt](data)
