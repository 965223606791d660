"""Сводка по всем сэмплам изображения: сумма, среднее, минимум, максимум.

Аккумулятор — отдельный класс на каждую функцию, а не общая структура,
смысл полей которой зависит от выбранной операции.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Union

import numpy as np

from pamstream.services.stream_service import PamReader

logger = logging.getLogger(__name__)


class SummaryFunction(Enum):
    SUM = "sum"
    MEAN = "mean"
    MIN = "min"
    MAX = "max"


@dataclass
class SumAccumulator:
    total: int = 0

    def update(self, row: np.ndarray) -> None:
        self.total += int(row.sum(dtype=np.uint64))


@dataclass
class MinAccumulator:
    value: Union[int, None] = None

    def update(self, row: np.ndarray) -> None:
        low = int(row.min())
        self.value = low if self.value is None else min(self.value, low)


@dataclass
class MaxAccumulator:
    value: Union[int, None] = None

    def update(self, row: np.ndarray) -> None:
        high = int(row.max())
        self.value = high if self.value is None else max(self.value, high)


Accumulator = Union[SumAccumulator, MinAccumulator, MaxAccumulator]


@dataclass(frozen=True)
class SampleSummary:
    """Результат сводки.

    Fields:
        function: Вычисленная функция.
        value: Сумма, среднее, минимум или максимум (в единицах сэмплов).
        count: Число сэмплов (height * width * depth).
        maxval: maxval изображения, для нормализации.
    """
    function: SummaryFunction
    value: float
    count: int
    maxval: int

    @property
    def normalized(self) -> float:
        """Значение, делённое на maxval."""
        return self.value / self.maxval


def _new_accumulator(function: SummaryFunction) -> Accumulator:
    if function in (SummaryFunction.SUM, SummaryFunction.MEAN):
        return SumAccumulator()
    if function is SummaryFunction.MIN:
        return MinAccumulator()
    return MaxAccumulator()


def summarize(reader: PamReader, function: SummaryFunction) -> SampleSummary:
    """Читает оставшиеся строки текущего изображения и сводит их сэмплы."""
    descriptor = reader.descriptor
    accumulator = _new_accumulator(function)
    for row in reader.rows():
        accumulator.update(row)

    count = descriptor.height * descriptor.width * descriptor.depth
    if isinstance(accumulator, SumAccumulator):
        value: float = accumulator.total
        if function is SummaryFunction.MEAN:
            value = accumulator.total / count
    else:
        value = accumulator.value if accumulator.value is not None else 0
    logger.debug(f"{function.value} of {count} samples is {value}")
    return SampleSummary(function=function, value=value, count=count, maxval=descriptor.maxval)


def summarize_rows(samples: np.ndarray, maxval: int) -> dict:
    """Минимум, максимум и среднее по массиву, уже загруженному в память."""
    if samples.size == 0:
        return {"min": 0, "max": 0, "mean": 0.0, "maxval": maxval}
    return {
        "min": int(samples.min()),
        "max": int(samples.max()),
        "mean": float(samples.mean(dtype=np.float64)),
        "maxval": maxval,
    }


_INTRO = {
    SummaryFunction.SUM: "the sum of all samples is ",
    SummaryFunction.MEAN: "the mean of all samples is ",
    SummaryFunction.MIN: "the minimum of all samples is ",
    SummaryFunction.MAX: "the maximum of all samples is ",
}


def format_summary(summary: SampleSummary, normalize: bool = False, brief: bool = False) -> str:
    """Текстовый отчёт: "the mean of all samples is 12.500000" или только число."""
    intro = "" if brief else _INTRO[summary.function]
    if normalize:
        return f"{intro}{summary.normalized:f}"
    if summary.function is SummaryFunction.MEAN:
        return f"{intro}{summary.value:f}"
    return f"{intro}{int(summary.value)}"
