import struct

from site_grader.imaging import ImageSize, sniff_dimensions, sniff_format

from conftest import png_bytes


def jpeg_bytes(width, height, fill=False):
    app0 = b"\xff\xe0" + struct.pack(">H", 16) + b"JFIF\x00" + b"\x01\x01\x00\x00\x01\x00\x01\x00\x00"
    sof0 = b"\xff\xc0" + struct.pack(">HBHH", 17, 8, height, width) + b"\x03" + b"\x01\x22\x00" * 3
    prefix = b"\xff" if fill else b""
    return b"\xff\xd8" + app0 + prefix + sof0 + b"\xff\xd9"


def test_png_dimensions():
    assert sniff_dimensions(png_bytes(1200, 630)) == ImageSize(1200, 630)
    assert sniff_format(png_bytes(1, 1)) == "png"


def test_jpeg_sof0_dimensions():
    data = jpeg_bytes(1200, 630)
    assert sniff_format(data) == "jpeg"
    assert sniff_dimensions(data) == ImageSize(1200, 630)


def test_jpeg_skips_fill_bytes():
    assert sniff_dimensions(jpeg_bytes(800, 418, fill=True)) == ImageSize(800, 418)


def test_jpeg_ignores_dht_marker():
    dht = b"\xff\xc4" + struct.pack(">H", 5) + b"\x00\x00\x00"
    sof2 = b"\xff\xc2" + struct.pack(">HBHH", 17, 8, 300, 400) + b"\x00" * 10
    data = b"\xff\xd8" + dht + sof2
    assert sniff_dimensions(data) == ImageSize(400, 300)


def test_gif_dimensions():
    data = b"GIF89a" + struct.pack("<HH", 640, 480) + b"\x00" * 4
    assert sniff_format(data) == "gif"
    assert sniff_dimensions(data) == ImageSize(640, 480)


def test_webp_lossy_dimensions():
    header = b"RIFF" + struct.pack("<I", 100) + b"WEBP" + b"VP8 " + b"\x00" * 10
    data = header + struct.pack("<HH", 1200 | 0xC000, 630)
    assert sniff_format(data) == "webp"
    assert sniff_dimensions(data) == ImageSize(1200, 630)


def test_webp_lossless_dimensions():
    bits = (1200 - 1) | ((630 - 1) << 14)
    data = b"RIFF" + struct.pack("<I", 100) + b"WEBP" + b"VP8L" + b"\x00" * 5 + b"\x2f" + struct.pack("<I", bits)
    assert sniff_dimensions(data) == ImageSize(1200, 630)


def test_webp_lossless_bad_signature():
    data = b"RIFF" + struct.pack("<I", 100) + b"WEBP" + b"VP8L" + b"\x00" * 5 + b"\x00" + b"\x00" * 4
    assert sniff_dimensions(data) is None


def test_unknown_and_truncated_input():
    assert sniff_format(b"") is None
    assert sniff_dimensions(b"") is None
    assert sniff_dimensions(b"not an image at all") is None
    assert sniff_dimensions(png_bytes(10, 10)[:20]) is None
    assert sniff_dimensions(b"GIF8") is None
    assert sniff_dimensions(jpeg_bytes(10, 10)[:12]) is None


def test_jpeg_zero_length_segment_stops():
    data = b"\xff\xd8\xff\xe0\x00\x00" + b"\x00" * 20
    assert sniff_dimensions(data) is None


def test_aspect_ratio():
    assert round(ImageSize(1200, 630).aspect_ratio, 2) == 1.90
    assert ImageSize(10, 0).aspect_ratio == 0.0
