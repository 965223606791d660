"""Кодек одной строки растра: байты/текст потока <-> массив кортежей.

Принципы:
- SRP: ровно одна строка за вызов, память O(width * depth).
- Буфер строки — `numpy.ndarray` формы (width, depth), dtype uint16.

Варианты:
- raw PBM: 8 сэмплов на байт, старший бит первым, 1 = чёрный; хвост байта
  при чтении игнорируется, при записи заполняется нулями;
- plain PBM: символы `0`/`1`, разделители необязательны;
- raw PGM/PPM и PAM: 1 или 2 байта на сэмпл, big-endian;
- plain PGM/PPM: десятичные числа через пробельные символы.
"""
from __future__ import annotations

from typing import BinaryIO

import numpy as np

from pamstream.core.config import Config
from pamstream.models.errors import (
    MalformedSampleError,
    MalformedTokenError,
    RowShapeError,
    SampleOutOfRangeError,
    TruncatedRowError,
)
from pamstream.models.format_model import FormatVariant
from pamstream.models.image_model import SAMPLE_DTYPE, ImageDescriptor
from pamstream.services.header_service import getc, is_whitespace, read_uint


# ---------- Decode ----------
def decode_row(stream: BinaryIO, descriptor: ImageDescriptor) -> np.ndarray:
    """Читает одну строку растра и возвращает массив формы (width, depth).

    Raises:
        TruncatedRowError: данные закончились посреди строки.
        SampleOutOfRangeError: сэмпл больше maxval.
        MalformedSampleError: посторонний символ в plain-растре.
    """
    variant = descriptor.variant
    if variant is FormatVariant.PLAIN_BITMAP:
        return _decode_plain_bitmap(stream, descriptor)
    if variant.is_plain:
        return _decode_plain(stream, descriptor)
    if variant is FormatVariant.RAW_BITMAP:
        return _decode_raw_bitmap(stream, descriptor)
    return _decode_raw(stream, descriptor)


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    data = stream.read(size)
    # pipes may deliver a row in several pieces
    while len(data) < size:
        more = stream.read(size - len(data))
        if not more:
            raise TruncatedRowError(f"premature EOF: row needs {size} bytes, got {len(data)}")
        data += more
    return data


def _decode_raw(stream: BinaryIO, descriptor: ImageDescriptor) -> np.ndarray:
    data = _read_exact(stream, descriptor.raw_row_size)
    dtype = ">u2" if descriptor.bytes_per_sample == 2 else "u1"
    samples = np.frombuffer(data, dtype=dtype).astype(SAMPLE_DTYPE).reshape(descriptor.row_shape)
    if int(samples.max()) > descriptor.maxval:
        raise SampleOutOfRangeError(
            f"sample value {int(samples.max())} exceeds maxval {descriptor.maxval}"
        )
    return samples


def _decode_raw_bitmap(stream: BinaryIO, descriptor: ImageDescriptor) -> np.ndarray:
    data = _read_exact(stream, descriptor.raw_row_size)
    bits = np.unpackbits(np.frombuffer(data, dtype=np.uint8))[: descriptor.width]
    return bits.astype(SAMPLE_DTYPE).reshape(descriptor.row_shape)


def _decode_plain_bitmap(stream: BinaryIO, descriptor: ImageDescriptor) -> np.ndarray:
    row = np.empty(descriptor.row_shape, dtype=SAMPLE_DTYPE)
    for col in range(descriptor.width):
        ch = getc(stream)
        while ch is not None and is_whitespace(ch):
            ch = getc(stream)
        if ch is None:
            raise TruncatedRowError(f"premature EOF: row has {col} of {descriptor.width} bits")
        if ch not in (b"0", b"1"):
            raise MalformedSampleError(f"junk in file where bits should be: {ch!r}")
        row[col, 0] = 1 if ch == b"1" else 0
    return row


def _decode_plain(stream: BinaryIO, descriptor: ImageDescriptor) -> np.ndarray:
    count = descriptor.samples_per_row
    values = np.empty(count, dtype=SAMPLE_DTYPE)
    for i in range(count):
        try:
            value = read_uint(stream)
        except MalformedTokenError as exc:
            raise MalformedSampleError(str(exc)) from exc
        if value is None:
            raise TruncatedRowError(f"premature EOF: row has {i} of {count} samples")
        if value > descriptor.maxval:
            raise SampleOutOfRangeError(f"sample value {value} exceeds maxval {descriptor.maxval}")
        values[i] = value
    return values.reshape(descriptor.row_shape)


# ---------- Encode ----------
def encode_row(stream: BinaryIO, descriptor: ImageDescriptor, row: np.ndarray) -> None:
    """Записывает одну строку растра в поток.

    Args:
        stream: Бинарный поток вывода.
        descriptor: Дескриптор изображения, чей заголовок уже записан.
        row: Массив формы (width, depth); для depth 1 допустим и (width,).

    Raises:
        RowShapeError: форма или тип буфера не соответствуют дескриптору.
        SampleOutOfRangeError: сэмпл вне [0, maxval].
    """
    samples = validate_row(descriptor, row)
    variant = descriptor.variant
    if variant is FormatVariant.PLAIN_BITMAP:
        data = _encode_plain_bitmap(samples)
    elif variant.is_plain:
        data = _encode_plain(samples, descriptor)
    elif variant is FormatVariant.RAW_BITMAP:
        data = np.packbits(samples[:, 0].astype(np.uint8)).tobytes()
    else:
        dtype = ">u2" if descriptor.bytes_per_sample == 2 else "u1"
        data = samples.astype(dtype).tobytes()
    stream.write(data)


def validate_row(descriptor: ImageDescriptor, row: np.ndarray) -> np.ndarray:
    """Проверяет буфер строки и возвращает его в форме (width, depth)."""
    samples = np.asarray(row)
    if samples.dtype != np.bool_ and not np.issubdtype(samples.dtype, np.integer):
        raise RowShapeError(f"row samples must be integers, got {samples.dtype}")
    if samples.dtype == np.bool_:
        # plain rasters format each sample with str(); True must become 1
        samples = samples.astype(SAMPLE_DTYPE)
    if samples.ndim == 1 and descriptor.depth == 1:
        samples = samples.reshape(descriptor.row_shape)
    if samples.shape != descriptor.row_shape:
        raise RowShapeError(f"row shape {samples.shape} does not match {descriptor.row_shape}")
    if samples.size:
        low, high = int(samples.min()), int(samples.max())
        if low < 0 or high > descriptor.maxval:
            bad = low if low < 0 else high
            raise SampleOutOfRangeError(f"sample value {bad} outside 0..{descriptor.maxval}")
    return samples


def _encode_plain_bitmap(samples: np.ndarray) -> bytes:
    digits = "".join("1" if v else "0" for v in samples[:, 0].tolist())
    per_line = Config.PBM_DIGITS_PER_LINE
    lines = [digits[i:i + per_line] for i in range(0, len(digits), per_line)]
    return ("\n".join(lines) + "\n").encode("ascii")


def samples_per_plain_line(maxval: int, depth: int, line_length: int) -> int:
    """Сколько сэмплов помещается в строку plain-растра, кратно depth, если возможно."""
    fit = max(1, line_length // (len(str(maxval)) + 1))
    return fit - (fit % depth) if fit > depth else fit


def _encode_plain(samples: np.ndarray, descriptor: ImageDescriptor) -> bytes:
    per_line = samples_per_plain_line(descriptor.maxval, descriptor.depth, Config.PLAIN_LINE_LENGTH)
    flat = [str(v) for v in samples.reshape(-1).tolist()]
    lines = [" ".join(flat[i:i + per_line]) for i in range(0, len(flat), per_line)]
    return ("\n".join(lines) + "\n").encode("ascii")
