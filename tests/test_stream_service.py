import io

import numpy as np
import pytest
from numpy.testing import assert_array_equal

from pamstream.models.errors import (
    AllRowsConsumedError,
    BadMagicError,
    IncompleteImageError,
    StreamError,
)
from pamstream.models.format_model import FormatVariant
from pamstream.models.image_model import ImageDescriptor
from pamstream.services.stream_service import (
    PamReader,
    open_for_read,
    open_for_write,
    read_image,
    write_image,
)

TWO_IMAGES = b"P5\n2 1\n255\n\x01\x02P2\n1 1\n7\n7\n"


def random_samples(descriptor: ImageDescriptor, seed: int = 0) -> np.ndarray:
    rng = np.random.default_rng(seed)
    shape = (descriptor.height, descriptor.width, descriptor.depth)
    return rng.integers(0, descriptor.maxval, size=shape, endpoint=True)


ROUND_TRIP_DESCRIPTORS = [
    ImageDescriptor.for_variant(FormatVariant.PLAIN_BITMAP, 13, 3),
    ImageDescriptor.for_variant(FormatVariant.PLAIN_GRAYMAP, 5, 4, 255),
    ImageDescriptor.for_variant(FormatVariant.PLAIN_PIXMAP, 9, 2, 65535),
    ImageDescriptor.for_variant(FormatVariant.RAW_BITMAP, 17, 3),
    ImageDescriptor.for_variant(FormatVariant.RAW_GRAYMAP, 6, 5, 1000),
    ImageDescriptor.for_variant(FormatVariant.RAW_PIXMAP, 4, 3, 255),
    ImageDescriptor(FormatVariant.ARBITRARY_MAP, 5, 3, 4, 65535, "RGB_ALPHA", comments=("made in a test",)),
    ImageDescriptor(FormatVariant.ARBITRARY_MAP, 8, 2, 2, 7, "GRAYSCALE_ALPHA"),
]


@pytest.mark.parametrize(
    "descriptor", ROUND_TRIP_DESCRIPTORS, ids=lambda d: f"{d.variant.magic.decode()}-{d.maxval}"
)
def test_round_trip(descriptor):
    samples = random_samples(descriptor)
    stream = io.BytesIO()
    write_image(stream, descriptor, samples)

    stream.seek(0)
    parsed, restored = read_image(stream)
    expected = descriptor if descriptor.variant.is_pam else descriptor.replace(comments=())
    assert parsed == expected
    assert_array_equal(restored, samples)


def test_write_image_accepts_two_dimensional_single_plane():
    descriptor = ImageDescriptor.for_variant(FormatVariant.RAW_GRAYMAP, 2, 2, 255)
    stream = io.BytesIO()
    write_image(stream, descriptor, np.array([[1, 2], [3, 4]]))
    assert stream.getvalue() == b"P5\n2 2\n255\n\x01\x02\x03\x04"


def test_row_cardinality():
    with open_for_read(io.BytesIO(b"P5\n2 3\n255\n" + bytes(range(6)))) as reader:
        rows = [reader.read_row() for _ in range(3)]
        assert reader.rows_remaining == 0
        with pytest.raises(AllRowsConsumedError):
            reader.read_row()
    assert_array_equal(rows[2][:, 0], [4, 5])


def test_multi_image_boundary():
    reader = open_for_read(io.BytesIO(TWO_IMAGES))
    assert reader.descriptor.variant is FormatVariant.RAW_GRAYMAP
    assert_array_equal(reader.read_row()[:, 0], [1, 2])

    assert reader.next_image() is True
    assert reader.image_index == 1
    assert reader.row_index == 0
    assert reader.descriptor.variant is FormatVariant.PLAIN_GRAYMAP
    assert reader.descriptor.maxval == 7
    assert_array_equal(reader.read_row()[:, 0], [7])

    assert reader.next_image() is False
    reader.close()


def test_next_image_treats_trailing_whitespace_as_end():
    with open_for_read(io.BytesIO(b"P5\n1 1\n255\n\x05 \n\t")) as reader:
        reader.skip_rest()
        assert reader.next_image() is False


def test_next_image_requires_all_rows():
    with open_for_read(io.BytesIO(TWO_IMAGES)) as reader:
        with pytest.raises(IncompleteImageError):
            reader.next_image()


def test_next_image_rejects_trailing_junk():
    with open_for_read(io.BytesIO(b"P5\n1 1\n255\n\x05junk")) as reader:
        reader.skip_rest()
        with pytest.raises(BadMagicError):
            reader.next_image()


def test_read_rest_after_all_rows_is_empty():
    with open_for_read(io.BytesIO(b"P6\n2 1\n255\n" + bytes(6))) as reader:
        reader.skip_rest()
        assert reader.read_rest().shape == (0, 2, 3)


def test_reader_iterates_rows():
    reader = open_for_read(io.BytesIO(b"P2\n2 2\n9\n1 2\n3 4\n"))
    assert [row[:, 0].tolist() for row in reader] == [[1, 2], [3, 4]]


def test_writer_rejects_extra_rows():
    descriptor = ImageDescriptor.for_variant(FormatVariant.RAW_GRAYMAP, 1, 1, 255)
    writer = open_for_write(io.BytesIO(), descriptor)
    writer.write_row(np.array([1]))
    with pytest.raises(AllRowsConsumedError):
        writer.write_row(np.array([2]))
    writer.close()


def test_writer_close_reports_incomplete_image():
    descriptor = ImageDescriptor.for_variant(FormatVariant.RAW_GRAYMAP, 1, 2, 255)
    writer = open_for_write(io.BytesIO(), descriptor)
    writer.write_row(np.array([1]))
    with pytest.raises(IncompleteImageError):
        writer.close()
    # already released; a second close is a no-op
    writer.close()


def test_writer_context_keeps_original_exception():
    descriptor = ImageDescriptor.for_variant(FormatVariant.RAW_GRAYMAP, 1, 2, 255)
    with pytest.raises(KeyError):
        with open_for_write(io.BytesIO(), descriptor):
            raise KeyError("boom")


def test_writer_multi_image_stream():
    first = ImageDescriptor.for_variant(FormatVariant.RAW_GRAYMAP, 2, 1, 255)
    second = ImageDescriptor.for_variant(FormatVariant.PLAIN_BITMAP, 3, 1)
    stream = io.BytesIO()
    with open_for_write(stream, first) as writer:
        writer.write_row(np.array([1, 2]))
        writer.next_image(second)
        writer.write_row(np.array([1, 0, 1]))
        assert writer.image_index == 1
    assert stream.getvalue() == b"P5\n2 1\n255\n\x01\x02P1\n3 1\n101\n"

    stream.seek(0)
    with open_for_read(stream) as reader:
        reader.skip_rest()
        assert reader.next_image()
        assert_array_equal(reader.read_row()[:, 0], [1, 0, 1])
        assert not reader.next_image()


def test_writer_next_image_requires_complete_image():
    descriptor = ImageDescriptor.for_variant(FormatVariant.RAW_GRAYMAP, 1, 1, 255)
    writer = open_for_write(io.BytesIO(), descriptor)
    with pytest.raises(IncompleteImageError):
        writer.next_image(descriptor)


def test_paths_are_opened_and_closed(tmp_path):
    path = tmp_path / "gradient.pgm"
    descriptor = ImageDescriptor.for_variant(FormatVariant.RAW_GRAYMAP, 4, 2, 255)
    samples = np.arange(8).reshape(2, 4, 1)
    write_image(path, descriptor, samples)
    assert path.read_bytes() == b"P5\n4 2\n255\n" + bytes(range(8))

    parsed, restored = read_image(str(path))
    assert parsed == descriptor
    assert_array_equal(restored, samples)


def test_missing_path_is_stream_error(tmp_path):
    with pytest.raises(StreamError):
        PamReader.open(tmp_path / "missing.pam")


class FailingStream:
    def read(self, size=-1):
        raise OSError("device unplugged")


def test_io_failure_is_wrapped():
    with pytest.raises(StreamError) as excinfo:
        open_for_read(FailingStream())
    assert isinstance(excinfo.value.__cause__, OSError)
    assert isinstance(excinfo.value, OSError)


def test_closed_reader_refuses_reads():
    reader = open_for_read(io.BytesIO(b"P5\n1 1\n255\n\x00"))
    reader.close()
    with pytest.raises(ValueError):
        reader.read_row()


def test_bool_samples_round_trip_through_plain_graymap():
    descriptor = ImageDescriptor.for_variant(FormatVariant.PLAIN_GRAYMAP, 2, 1, 1)
    stream = io.BytesIO()
    write_image(stream, descriptor, np.array([[[True], [False]]]))
    assert stream.getvalue() == b"P2\n2 1\n1\n1 0\n"

    stream.seek(0)
    _, restored = read_image(stream)
    assert_array_equal(restored[..., 0], [[1, 0]])
