"""Модели данных для изображений.

Принципы:
- SRP: только структура данных, без логики ввода-вывода.
- Чистый код: неизменяемость (`frozen=True`) для предсказуемости; инварианты
  проверяются при создании.
"""
from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

import numpy as np
from PIL import Image

from pamstream.models.errors import OutOfRangeError
from pamstream.models.format_model import (
    MAX_DIMENSION,
    OVERALL_MAXVAL,
    FormatVariant,
    bytes_per_sample,
)

# Row buffers hold samples as uint16: maxval never exceeds 65535.
SAMPLE_DTYPE = np.uint16


@dataclass(frozen=True)
class ImageDescriptor:
    """Неизменяемое описание одного изображения потока.

    Fields:
        variant: Вариант формата (P1–P7).
        width: Ширина, кортежей.
        height: Высота, строк.
        depth: Число сэмплов в кортеже.
        maxval: Максимальное значение сэмпла.
        tuple_type: Смысл кортежа ("RGB", "GRAYSCALE", ...); пусто, если не задан.
        comments: Комментарии заголовка без ведущего `#` и конца строки.
    """
    variant: FormatVariant
    width: int
    height: int
    depth: int
    maxval: int
    tuple_type: str = ""
    comments: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not 1 <= self.width <= MAX_DIMENSION:
            raise OutOfRangeError(f"width {self.width} out of range")
        if not 1 <= self.height <= MAX_DIMENSION:
            raise OutOfRangeError(f"height {self.height} out of range")
        if self.depth < 1:
            raise OutOfRangeError(f"depth {self.depth} out of range")
        if not 1 <= self.maxval <= OVERALL_MAXVAL:
            raise OutOfRangeError(f"maxval {self.maxval} out of range 1..{OVERALL_MAXVAL}")
        implied = self.variant.implied_depth
        if implied is not None and self.depth != implied:
            raise OutOfRangeError(f"{self.variant.family} requires depth {implied}, got {self.depth}")
        if self.variant.is_bitmap and self.maxval != 1:
            raise OutOfRangeError(f"PBM requires maxval 1, got {self.maxval}")
        # any sequence is accepted; stored as a tuple
        object.__setattr__(self, "comments", tuple(self.comments))

    @classmethod
    def for_variant(
        cls,
        variant: FormatVariant,
        width: int,
        height: int,
        maxval: int = 255,
        *,
        depth: Optional[int] = None,
        tuple_type: Optional[str] = None,
        comments: Tuple[str, ...] = (),
    ) -> "ImageDescriptor":
        """Создаёт дескриптор, подставляя глубину, maxval и тип кортежа по формату."""
        if variant.is_bitmap:
            maxval = 1
        if depth is None:
            depth = variant.implied_depth or 1
        if tuple_type is None:
            tuple_type = variant.default_tuple_type
        return cls(variant, width, height, depth, maxval, tuple_type, tuple(comments))

    @property
    def bytes_per_sample(self) -> int:
        return bytes_per_sample(self.maxval)

    @property
    def samples_per_row(self) -> int:
        return self.width * self.depth

    @property
    def raw_row_size(self) -> int:
        """Размер одной raw-строки в байтах (для plain-вариантов не определён)."""
        if self.variant.is_bitmap:
            return (self.width + 7) // 8
        return self.samples_per_row * self.bytes_per_sample

    @property
    def row_shape(self) -> Tuple[int, int]:
        return (self.width, self.depth)

    def replace(self, **changes: object) -> "ImageDescriptor":
        """Копия с изменёнными полями; инварианты проверяются заново."""
        return dataclasses.replace(self, **changes)


@dataclass(frozen=True)
class ImageData:
    """Изображение, загруженное целиком, и его метаданные (для просмотрщика).

    Fields:
        path: Путь к исходному файлу.
        descriptor: Заголовок выбранного изображения потока.
        samples: Сэмплы формы (height, width, depth).
        pil_image: 8-битное превью Pillow.
        image_index: Номер изображения в потоке (с нуля).
        image_count: Сколько изображений в потоке.
        size_bytes: Размер файла, если доступен.
    """
    path: Path
    descriptor: ImageDescriptor
    samples: np.ndarray
    pil_image: Image.Image
    image_index: int
    image_count: int
    size_bytes: Optional[int]
