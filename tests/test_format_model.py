import pytest

from pamstream.models.errors import HeaderError, OutOfRangeError
from pamstream.models.format_model import FormatVariant, bytes_per_sample
from pamstream.models.image_model import ImageDescriptor


@pytest.mark.parametrize(
    "magic, variant",
    [
        (b"P1", FormatVariant.PLAIN_BITMAP),
        (b"P2", FormatVariant.PLAIN_GRAYMAP),
        (b"P3", FormatVariant.PLAIN_PIXMAP),
        (b"P4", FormatVariant.RAW_BITMAP),
        (b"P5", FormatVariant.RAW_GRAYMAP),
        (b"P6", FormatVariant.RAW_PIXMAP),
        (b"P7", FormatVariant.ARBITRARY_MAP),
    ],
)
def test_from_magic(magic, variant):
    assert FormatVariant.from_magic(magic) is variant
    assert variant.magic == magic


def test_from_magic_unknown():
    assert FormatVariant.from_magic(b"P8") is None
    assert FormatVariant.from_magic(b"GI") is None


def test_variant_properties():
    assert FormatVariant.PLAIN_PIXMAP.is_plain
    assert not FormatVariant.RAW_PIXMAP.is_plain
    assert FormatVariant.RAW_BITMAP.is_bitmap
    assert FormatVariant.RAW_PIXMAP.implied_depth == 3
    assert FormatVariant.RAW_GRAYMAP.implied_depth == 1
    assert FormatVariant.ARBITRARY_MAP.implied_depth is None
    assert FormatVariant.RAW_GRAYMAP.plain_variant() is FormatVariant.PLAIN_GRAYMAP
    assert FormatVariant.PLAIN_BITMAP.raw_variant() is FormatVariant.RAW_BITMAP
    assert FormatVariant.ARBITRARY_MAP.raw_variant() is FormatVariant.ARBITRARY_MAP
    with pytest.raises(ValueError):
        FormatVariant.ARBITRARY_MAP.plain_variant()


@pytest.mark.parametrize("maxval, expected", [(1, 1), (255, 1), (256, 2), (65535, 2)])
def test_bytes_per_sample(maxval, expected):
    assert bytes_per_sample(maxval) == expected


def test_for_variant_fills_defaults():
    bitmap = ImageDescriptor.for_variant(FormatVariant.RAW_BITMAP, 10, 2, maxval=255)
    assert bitmap.maxval == 1
    assert bitmap.depth == 1
    assert bitmap.tuple_type == "BLACKANDWHITE"

    pixmap = ImageDescriptor.for_variant(FormatVariant.PLAIN_PIXMAP, 4, 4, 1023)
    assert pixmap.depth == 3
    assert pixmap.tuple_type == "RGB"
    assert pixmap.bytes_per_sample == 2
    assert pixmap.raw_row_size == 4 * 3 * 2


def test_raw_bitmap_row_size_rounds_up():
    descriptor = ImageDescriptor.for_variant(FormatVariant.RAW_BITMAP, 10, 1)
    assert descriptor.raw_row_size == 2


@pytest.mark.parametrize(
    "kwargs",
    [
        dict(variant=FormatVariant.RAW_GRAYMAP, width=0, height=1, depth=1, maxval=255),
        dict(variant=FormatVariant.RAW_GRAYMAP, width=1, height=0, depth=1, maxval=255),
        dict(variant=FormatVariant.RAW_GRAYMAP, width=1, height=1, depth=1, maxval=0),
        dict(variant=FormatVariant.RAW_GRAYMAP, width=1, height=1, depth=1, maxval=65536),
        dict(variant=FormatVariant.RAW_PIXMAP, width=1, height=1, depth=1, maxval=255),
        dict(variant=FormatVariant.RAW_BITMAP, width=1, height=1, depth=1, maxval=255),
        dict(variant=FormatVariant.ARBITRARY_MAP, width=1, height=1, depth=0, maxval=255),
    ],
)
def test_descriptor_invariants(kwargs):
    with pytest.raises(OutOfRangeError):
        ImageDescriptor(**kwargs)


def test_descriptor_errors_are_value_errors():
    with pytest.raises(ValueError):
        ImageDescriptor(FormatVariant.RAW_GRAYMAP, 1, 1, 1, 0)
    assert issubclass(OutOfRangeError, HeaderError)


def test_replace_revalidates():
    descriptor = ImageDescriptor.for_variant(FormatVariant.RAW_GRAYMAP, 3, 2)
    assert descriptor.replace(maxval=1000).maxval == 1000
    with pytest.raises(OutOfRangeError):
        descriptor.replace(depth=3)


def test_comments_stored_as_tuple():
    descriptor = ImageDescriptor(FormatVariant.ARBITRARY_MAP, 1, 1, 1, 255, comments=["a", "b"])
    assert descriptor.comments == ("a", "b")
