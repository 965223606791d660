"""Операции над кортежами и строками: выделение, сравнение, масштабирование, глубина.

Чистые функции без ввода-вывода. Кортеж — одномерный массив из `depth`
сэмплов; строка — массив (width, depth).

Для PBM сэмпл равен биту потока: 1 — чёрная «краска», 0 — фон. Поэтому при
переходе PBM <-> PGM/PPM в `convert_row` значения инвертируются.
"""
from __future__ import annotations

from enum import Enum
from typing import Optional, Sequence

import numpy as np

from pamstream.models.image_model import SAMPLE_DTYPE, ImageDescriptor


class DepthPolicy(Enum):
    """Как заполнять новые плоскости при увеличении глубины кортежа."""
    REPLICATE_FIRST_PLANE = "replicate_first_plane"
    APPEND_OPAQUE_ALPHA = "append_opaque_alpha"
    APPEND_ZERO = "append_zero"


def allocate_row(descriptor: ImageDescriptor) -> np.ndarray:
    """Строка из `width` нулевых кортежей."""
    return np.zeros(descriptor.row_shape, dtype=SAMPLE_DTYPE)


def compare_equal(a: Sequence[int], b: Sequence[int]) -> bool:
    """Равенство кортежей поэлементно; глубины обязаны совпадать."""
    left, right = np.asarray(a), np.asarray(b)
    if left.shape != right.shape:
        raise ValueError(f"tuples of different depth: {left.shape} vs {right.shape}")
    return bool(np.array_equal(left, right))


def has_alpha(descriptor: ImageDescriptor) -> bool:
    """Последняя плоскость — альфа-канал (тип кортежа "..._ALPHA")."""
    return descriptor.depth >= 2 and descriptor.tuple_type.upper().endswith("_ALPHA")


# ---------- Scaling ----------
def _check_scale_args(from_maxval: int, to_maxval: int) -> None:
    if from_maxval < 1 or to_maxval < 1:
        raise ValueError(f"maxval must be positive: {from_maxval} -> {to_maxval}")


def scale_sample(value: int, from_maxval: int, to_maxval: int) -> int:
    """Линейно переводит сэмпл в другой maxval с округлением к ближайшему.

    `value' = round(value * to_maxval / from_maxval)`; половины округляются вверх.
    Вычисляется в целых Python, поэтому переполнения нет.
    """
    _check_scale_args(from_maxval, to_maxval)
    if not 0 <= value <= from_maxval:
        raise ValueError(f"sample {value} outside 0..{from_maxval}")
    return (value * to_maxval + from_maxval // 2) // from_maxval


def scale_tuple(tuple_: Sequence[int], from_maxval: int, to_maxval: int) -> np.ndarray:
    return scale_row(np.asarray(tuple_), from_maxval, to_maxval)


def scale_row(row: np.ndarray, from_maxval: int, to_maxval: int) -> np.ndarray:
    """Поэлементный `scale_sample` для строки (или любого массива сэмплов)."""
    _check_scale_args(from_maxval, to_maxval)
    samples = np.asarray(row)
    if samples.size and (int(samples.min()) < 0 or int(samples.max()) > from_maxval):
        raise ValueError(f"samples outside 0..{from_maxval}")
    if from_maxval == to_maxval:
        return samples.astype(SAMPLE_DTYPE)
    wide = samples.astype(np.uint64)
    return ((wide * to_maxval + from_maxval // 2) // from_maxval).astype(SAMPLE_DTYPE)


# ---------- Depth ----------
def promote_depth(
    tuple_: Sequence[int],
    from_depth: int,
    to_depth: int,
    policy: DepthPolicy,
    maxval: Optional[int] = None,
) -> np.ndarray:
    """Расширяет кортеж до `to_depth` плоскостей по явной политике.

    Args:
        tuple_: Исходный кортеж длины `from_depth`.
        policy: REPLICATE_FIRST_PLANE — копии первой плоскости (серый -> RGB);
            APPEND_OPAQUE_ALPHA — новые плоскости равны maxval (непрозрачность);
            APPEND_ZERO — новые плоскости равны нулю.
        maxval: Обязателен для APPEND_OPAQUE_ALPHA.
    """
    samples = np.asarray(tuple_, dtype=SAMPLE_DTYPE)
    if samples.shape != (from_depth,):
        raise ValueError(f"tuple has shape {samples.shape}, expected ({from_depth},)")
    return _promote_planes(samples[np.newaxis, :], to_depth, policy, maxval)[0]


def _promote_planes(
    samples: np.ndarray, to_depth: int, policy: DepthPolicy, maxval: Optional[int]
) -> np.ndarray:
    """Расширяет последнюю ось массива (..., from_depth) до to_depth."""
    from_depth = samples.shape[-1]
    if to_depth < from_depth:
        raise ValueError(f"cannot promote depth {from_depth} to smaller depth {to_depth}")
    extra = to_depth - from_depth
    if extra == 0:
        return samples.astype(SAMPLE_DTYPE)
    if policy is DepthPolicy.REPLICATE_FIRST_PLANE:
        added = np.repeat(samples[..., :1], extra, axis=-1)
    elif policy is DepthPolicy.APPEND_OPAQUE_ALPHA:
        if maxval is None:
            raise ValueError("APPEND_OPAQUE_ALPHA requires maxval")
        added = np.full(samples.shape[:-1] + (extra,), maxval, dtype=SAMPLE_DTYPE)
    elif policy is DepthPolicy.APPEND_ZERO:
        added = np.zeros(samples.shape[:-1] + (extra,), dtype=SAMPLE_DTYPE)
    else:
        raise ValueError(f"unknown depth policy {policy!r}")
    return np.concatenate([samples.astype(SAMPLE_DTYPE), added.astype(SAMPLE_DTYPE)], axis=-1)


# ---------- Black / white ----------
def black_tuple(descriptor: ImageDescriptor) -> np.ndarray:
    """Чёрный кортеж: нули, альфа-плоскость (если есть) непрозрачна (maxval).

    Для PBM чёрный — это «краска», то есть сэмпл 1.
    """
    if descriptor.variant.is_bitmap:
        return np.ones(descriptor.depth, dtype=SAMPLE_DTYPE)
    tuple_ = np.zeros(descriptor.depth, dtype=SAMPLE_DTYPE)
    if has_alpha(descriptor):
        tuple_[-1] = descriptor.maxval
    return tuple_


def white_tuple(descriptor: ImageDescriptor) -> np.ndarray:
    """Белый кортеж: все плоскости maxval (альфа тоже); для PBM — фон, сэмпл 0."""
    if descriptor.variant.is_bitmap:
        return np.zeros(descriptor.depth, dtype=SAMPLE_DTYPE)
    return np.full(descriptor.depth, descriptor.maxval, dtype=SAMPLE_DTYPE)


# ---------- Format conversion ----------
def luminance(rgb: np.ndarray) -> np.ndarray:
    """Яркость по весам 0.299/0.587/0.114 для массива (..., 3), целочисленно."""
    wide = rgb.astype(np.uint64)
    value = wide[..., 0] * 299 + wide[..., 1] * 587 + wide[..., 2] * 114
    return ((value + 500) // 1000).astype(SAMPLE_DTYPE)


def convert_row(
    row: np.ndarray,
    source: ImageDescriptor,
    target: ImageDescriptor,
    policy: DepthPolicy = DepthPolicy.REPLICATE_FIRST_PLANE,
) -> np.ndarray:
    """Переводит строку из описания `source` в описание `target`.

    Шаги: PBM-«краска» -> интенсивность, масштаб maxval, изменение глубины
    (расширение по `policy`, сужение RGB -> серый по яркости), затем
    интенсивность -> PBM-«краска» порогом в середине диапазона.
    """
    samples = np.asarray(row)
    if samples.shape != source.row_shape:
        raise ValueError(f"row shape {samples.shape} does not match {source.row_shape}")
    if source.width != target.width:
        raise ValueError(f"width differs: {source.width} vs {target.width}")

    # PBM ink (1 = black) to intensity (maxval = white)
    if source.variant.is_bitmap:
        samples = (1 - samples.astype(np.int64)).astype(SAMPLE_DTYPE)

    samples = scale_row(samples, source.maxval, target.maxval)
    samples = _convert_planes(samples, source, target, policy)

    if target.variant.is_bitmap:
        threshold = (target.maxval + 1) // 2
        samples = (samples < threshold).astype(SAMPLE_DTYPE)
    return samples


def _convert_planes(
    samples: np.ndarray, source: ImageDescriptor, target: ImageDescriptor, policy: DepthPolicy
) -> np.ndarray:
    if target.depth >= source.depth:
        return _promote_planes(samples, target.depth, policy, target.maxval)
    if source.depth >= 3 and target.depth < 3:
        planes = [luminance(samples[:, :3])]
        if target.depth == 2:
            if has_alpha(source):
                planes.append(samples[:, -1])
            else:
                planes.append(np.full(samples.shape[0], target.maxval, dtype=SAMPLE_DTYPE))
        return np.stack(planes, axis=-1).astype(SAMPLE_DTYPE)
    return samples[:, : target.depth].astype(SAMPLE_DTYPE)
