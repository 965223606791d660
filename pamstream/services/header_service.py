"""Разбор и формирование заголовков PBM/PGM/PPM/PAM.

Принципы:
- SRP: только заголовок; растр читает `row_codec`.
- Поток читается побайтно и ровно до начала растра, поэтому после
  `parse_header` поток стоит на первой строке изображения.

Грамматика устаревших форматов: магическое число, затем десятичные числа
`width height [maxval]`, разделённые пробелами; комментарии `#` до конца
строки допустимы между числами и отбрасываются. После последнего числа
поглощается ровно один пробельный символ.

Грамматика PAM: построчные поля `WIDTH`, `HEIGHT`, `DEPTH`, `MAXVAL`,
повторяемое `TUPLTYPE`, завершается строкой `ENDHDR`. Комментарии
сохраняются по порядку в `ImageDescriptor.comments`.
"""
from __future__ import annotations

import logging
from typing import BinaryIO, Dict, List, Optional

from pamstream.models.errors import (
    BadMagicError,
    MalformedTokenError,
    MissingFieldError,
    OutOfRangeError,
    UnexpectedEofError,
    UnrecognizedFieldError,
)
from pamstream.models.format_model import FormatVariant
from pamstream.models.image_model import ImageDescriptor

logger = logging.getLogger(__name__)

WHITESPACE = b" \t\n\r\v\f"
PAM_REQUIRED_FIELDS = ("WIDTH", "HEIGHT", "DEPTH", "MAXVAL")
# header text is ASCII in practice; latin-1 keeps arbitrary comment bytes intact
HEADER_ENCODING = "latin-1"


# ---------- Tokenizer (shared with the plain raster codec) ----------
def getc(stream: BinaryIO) -> Optional[bytes]:
    """Следующий байт потока; комментарий `#...` заменяется на `\\n`; None — конец данных."""
    ch = stream.read(1)
    if not ch:
        return None
    if ch == b"#":
        while True:
            ch = stream.read(1)
            if not ch:
                return None
            if ch in (b"\n", b"\r"):
                return b"\n"
    return ch


def is_whitespace(ch: bytes) -> bool:
    return len(ch) == 1 and ch in WHITESPACE


def read_uint(stream: BinaryIO) -> Optional[int]:
    """Читает десятичное число без знака, пропуская пробелы и комментарии.

    Returns:
        Значение или None, если данные закончились до первой цифры.

    Raises:
        MalformedTokenError: если вместо цифры встретился другой символ
            (в том числе знак минус).
    """
    ch = getc(stream)
    while ch is not None and is_whitespace(ch):
        ch = getc(stream)
    if ch is None:
        return None
    if not ch.isdigit():
        raise MalformedTokenError(f"junk in file where an unsigned integer should be: {ch!r}")
    value = 0
    while ch is not None and ch.isdigit():
        value = value * 10 + (ch[0] - 0x30)
        ch = getc(stream)
    # the single delimiter after the number is consumed here
    if ch is not None and not is_whitespace(ch):
        raise MalformedTokenError(f"junk in file after an unsigned integer: {ch!r}")
    return value


# ---------- Parsing ----------
def parse_header(stream: BinaryIO, prefix: bytes = b"") -> ImageDescriptor:
    """Читает заголовок очередного изображения и возвращает его дескриптор.

    Args:
        stream: Бинарный поток, стоящий на магическом числе.
        prefix: Уже прочитанные байты магического числа (используется при
            переходе к следующему изображению многокадрового потока).

    Raises:
        HeaderError: любой подкласс — заголовок неполон или некорректен.
    """
    magic = prefix + stream.read(2 - len(prefix))
    if not magic:
        raise UnexpectedEofError("empty stream: no magic number")
    if len(magic) < 2:
        raise UnexpectedEofError(f"stream ends inside the magic number: {magic!r}")
    variant = FormatVariant.from_magic(magic)
    if variant is None:
        raise BadMagicError(f"bad magic number {magic!r} - not a PPM, PGM, PBM, or PAM file")

    if variant.is_pam:
        descriptor = _parse_pam_rest(stream)
    else:
        descriptor = _parse_legacy_rest(stream, variant)
    logger.debug(
        f"Parsed {variant.magic.decode()} header: {descriptor.width}x{descriptor.height} "
        f"depth {descriptor.depth} maxval {descriptor.maxval}"
    )
    return descriptor


def _header_uint(stream: BinaryIO, name: str) -> int:
    value = read_uint(stream)
    if value is None:
        raise UnexpectedEofError(f"stream ends before {name} in header")
    if value == 0:
        raise OutOfRangeError(f"{name} in header is zero")
    return value


def _parse_legacy_rest(stream: BinaryIO, variant: FormatVariant) -> ImageDescriptor:
    width = _header_uint(stream, "width")
    height = _header_uint(stream, "height")
    maxval = 1 if variant.is_bitmap else _header_uint(stream, "maxval")
    return ImageDescriptor.for_variant(variant, width, height, maxval)


def _parse_pam_rest(stream: BinaryIO) -> ImageDescriptor:
    rest = stream.readline()
    if rest.strip():
        raise MalformedTokenError(f"unexpected data after P7 magic number: {rest.strip()!r}")

    fields: Dict[str, int] = {}
    tuple_types: List[str] = []
    comments: List[str] = []
    while True:
        line = stream.readline()
        if not line:
            raise UnexpectedEofError("stream ends before ENDHDR in PAM header")
        text = line.rstrip(b"\r\n")
        if text.startswith(b"#"):
            comments.append(text[1:].decode(HEADER_ENCODING))
            continue
        tokens = text.split()
        if not tokens:
            continue
        keyword = tokens[0].decode(HEADER_ENCODING)
        if keyword == "ENDHDR":
            break
        if keyword == "TUPLTYPE":
            value = text.strip()[len(b"TUPLTYPE"):].strip()
            if not value:
                raise MalformedTokenError("TUPLTYPE header line has no value")
            tuple_types.append(value.decode(HEADER_ENCODING))
        elif keyword in PAM_REQUIRED_FIELDS:
            if len(tokens) != 2 or not tokens[1].isdigit():
                raise MalformedTokenError(f"invalid value for {keyword} in PAM header: {text!r}")
            fields[keyword] = int(tokens[1])
        else:
            raise UnrecognizedFieldError(f"unrecognized header line in PAM header: {keyword!r}")

    for name in PAM_REQUIRED_FIELDS:
        if name not in fields:
            raise MissingFieldError(f"no {name} header line in PAM header")
    return ImageDescriptor(
        variant=FormatVariant.ARBITRARY_MAP,
        width=fields["WIDTH"],
        height=fields["HEIGHT"],
        depth=fields["DEPTH"],
        maxval=fields["MAXVAL"],
        tuple_type=" ".join(tuple_types),
        comments=tuple(comments),
    )


# ---------- Emission ----------
def format_header(descriptor: ImageDescriptor) -> bytes:
    """Формирует заголовок по дескриптору (обратная операция к `parse_header`)."""
    lines: List[str] = [descriptor.variant.magic.decode()]
    for comment in descriptor.comments:
        # a comment with line breaks becomes several comment lines
        for part in comment.splitlines() or [""]:
            lines.append(f"#{part}")
    if descriptor.variant.is_pam:
        lines.append(f"WIDTH {descriptor.width}")
        lines.append(f"HEIGHT {descriptor.height}")
        lines.append(f"DEPTH {descriptor.depth}")
        lines.append(f"MAXVAL {descriptor.maxval}")
        if descriptor.tuple_type:
            lines.append(f"TUPLTYPE {descriptor.tuple_type}")
        lines.append("ENDHDR")
    else:
        lines.append(f"{descriptor.width} {descriptor.height}")
        if not descriptor.variant.is_bitmap:
            lines.append(f"{descriptor.maxval}")
    return ("\n".join(lines) + "\n").encode(HEADER_ENCODING)
