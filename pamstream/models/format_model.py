"""Варианты формата Netpbm и связанные с ними константы.

Принципы:
- SRP: только описание форматов (магические числа, глубина, семейство).
- Чистый код: перечисление вместо «магических» чисел в коде чтения/записи.
"""
from __future__ import annotations

from enum import Enum
from typing import Optional

OVERALL_MAXVAL = 65535
MAX_DIMENSION = 2**31 - 3  # Netpbm: cols/rows must leave room for +2

TUPLE_TYPE_BLACKANDWHITE = "BLACKANDWHITE"
TUPLE_TYPE_GRAYSCALE = "GRAYSCALE"
TUPLE_TYPE_RGB = "RGB"
TUPLE_TYPE_BLACKANDWHITE_ALPHA = "BLACKANDWHITE_ALPHA"
TUPLE_TYPE_GRAYSCALE_ALPHA = "GRAYSCALE_ALPHA"
TUPLE_TYPE_RGB_ALPHA = "RGB_ALPHA"


class FormatVariant(Enum):
    """Семь вариантов потока: P1–P6 (PBM/PGM/PPM, plain и raw) и P7 (PAM)."""

    PLAIN_BITMAP = b"P1"
    PLAIN_GRAYMAP = b"P2"
    PLAIN_PIXMAP = b"P3"
    RAW_BITMAP = b"P4"
    RAW_GRAYMAP = b"P5"
    RAW_PIXMAP = b"P6"
    ARBITRARY_MAP = b"P7"

    @classmethod
    def from_magic(cls, magic: bytes) -> Optional["FormatVariant"]:
        """Возвращает вариант по двум байтам магического числа или None."""
        try:
            return cls(bytes(magic))
        except ValueError:
            return None

    @property
    def magic(self) -> bytes:
        return self.value

    @property
    def is_plain(self) -> bool:
        return self in (FormatVariant.PLAIN_BITMAP, FormatVariant.PLAIN_GRAYMAP, FormatVariant.PLAIN_PIXMAP)

    @property
    def is_bitmap(self) -> bool:
        return self in (FormatVariant.PLAIN_BITMAP, FormatVariant.RAW_BITMAP)

    @property
    def is_pam(self) -> bool:
        return self is FormatVariant.ARBITRARY_MAP

    @property
    def family(self) -> str:
        """Имя семейства: "PBM" | "PGM" | "PPM" | "PAM"."""
        return _FAMILY[self]

    @property
    def implied_depth(self) -> Optional[int]:
        """Глубина, заданная самим форматом; для PAM её задаёт заголовок."""
        if self.is_pam:
            return None
        return 3 if self.family == "PPM" else 1

    @property
    def default_tuple_type(self) -> str:
        """Тип кортежа, который Netpbm сообщает для устаревших форматов."""
        return _DEFAULT_TUPLE_TYPE[self]

    def plain_variant(self) -> "FormatVariant":
        """ASCII-вариант того же семейства (у PAM его нет)."""
        if self.is_pam:
            raise ValueError("PAM has no plain variant")
        return _PLAIN_OF[self.family]

    def raw_variant(self) -> "FormatVariant":
        if self.is_pam:
            return self
        return _RAW_OF[self.family]


_FAMILY = {
    FormatVariant.PLAIN_BITMAP: "PBM",
    FormatVariant.RAW_BITMAP: "PBM",
    FormatVariant.PLAIN_GRAYMAP: "PGM",
    FormatVariant.RAW_GRAYMAP: "PGM",
    FormatVariant.PLAIN_PIXMAP: "PPM",
    FormatVariant.RAW_PIXMAP: "PPM",
    FormatVariant.ARBITRARY_MAP: "PAM",
}

_DEFAULT_TUPLE_TYPE = {
    FormatVariant.PLAIN_BITMAP: TUPLE_TYPE_BLACKANDWHITE,
    FormatVariant.RAW_BITMAP: TUPLE_TYPE_BLACKANDWHITE,
    FormatVariant.PLAIN_GRAYMAP: TUPLE_TYPE_GRAYSCALE,
    FormatVariant.RAW_GRAYMAP: TUPLE_TYPE_GRAYSCALE,
    FormatVariant.PLAIN_PIXMAP: TUPLE_TYPE_RGB,
    FormatVariant.RAW_PIXMAP: TUPLE_TYPE_RGB,
    FormatVariant.ARBITRARY_MAP: "",
}

_PLAIN_OF = {
    "PBM": FormatVariant.PLAIN_BITMAP,
    "PGM": FormatVariant.PLAIN_GRAYMAP,
    "PPM": FormatVariant.PLAIN_PIXMAP,
}

_RAW_OF = {
    "PBM": FormatVariant.RAW_BITMAP,
    "PGM": FormatVariant.RAW_GRAYMAP,
    "PPM": FormatVariant.RAW_PIXMAP,
}


def bytes_per_sample(maxval: int) -> int:
    """Ширина сэмпла в байтах для raw-растра: 1 при maxval <= 255, иначе 2."""
    return 1 if maxval <= 255 else 2
