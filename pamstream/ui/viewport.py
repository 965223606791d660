"""Геометрия окна просмотра: дискретные масштабы, панорамирование, координаты сэмплов.

Модуль не зависит от tkinter, поэтому проверяется без дисплея.

Масштабы дискретны: при увеличении каждый сэмпл занимает квадрат N×N экранных
точек (N целое), при уменьшении — 1/n. Превью не интерполирует значения, а
точка канвы всегда указывает ровно на один кортеж.
"""
from __future__ import annotations

from dataclasses import dataclass
from fractions import Fraction
from typing import List, Optional, Tuple

_CANDIDATE_LEVELS = [Fraction(1, n) for n in (16, 8, 4, 3, 2)] + [
    Fraction(k) for k in (1, 2, 3, 4, 6, 8, 12, 16, 24, 32, 48, 64)
]

Region = Tuple[int, int, int, int]


def zoom_levels(min_percent: int, max_percent: int) -> List[Fraction]:
    """Допустимые масштабы в пределах [min_percent, max_percent]; 100% есть всегда."""
    levels = [level for level in _CANDIDATE_LEVELS if min_percent <= level * 100 <= max_percent]
    if Fraction(1) not in levels:
        levels.append(Fraction(1))
        levels.sort()
    return levels


def level_percent(level: Fraction) -> int:
    return int(round(level * 100))


def nearest_level(levels: List[Fraction], percent: float) -> Fraction:
    """Ближайший к `percent` допустимый масштаб."""
    return min(levels, key=lambda level: abs(level * 100 - Fraction(percent)))


def _place_axis(offset: int, scaled: int, canvas: int) -> int:
    if scaled <= canvas:
        return (canvas - scaled) // 2
    return max(canvas - scaled, min(0, offset))


@dataclass
class Viewport:
    """Масштаб и положение изображения `width`×`height` сэмплов на канве.

    Fields:
        width, height: Размер изображения в сэмплах.
        levels: Упорядоченный список допустимых масштабов.
        level_index: Текущий масштаб, индекс в `levels`.
        origin: Точка канвы, где лежит левый верхний угол сэмпла (0, 0);
            None — ещё не размещено (будет отцентровано).
    """
    width: int
    height: int
    levels: List[Fraction]
    level_index: int = 0
    origin: Optional[Tuple[int, int]] = None

    @property
    def scale(self) -> Fraction:
        return self.levels[self.level_index]

    @property
    def percent(self) -> int:
        return level_percent(self.scale)

    def span(self, samples: int) -> int:
        """Сколько точек канвы занимают `samples` сэмплов (не меньше одной)."""
        return max(1, int(samples * self.scale))

    def fit(self, canvas_w: int, canvas_h: int) -> None:
        """Выбирает крупнейший масштаб, при котором изображение помещается целиком."""
        fitting = [
            index for index, level in enumerate(self.levels)
            if self.width * level <= canvas_w and self.height * level <= canvas_h
        ]
        self.level_index = fitting[-1] if fitting else 0
        self.origin = None

    def set_percent(self, percent: float) -> None:
        self.level_index = self.levels.index(nearest_level(self.levels, percent))

    def zoom_at(self, cx: int, cy: int, steps: int) -> bool:
        """Сдвигает масштаб на `steps` уровней, удерживая точку изображения под (cx, cy).

        Returns:
            False, если масштаб уже на границе и не изменился.
        """
        index = max(0, min(len(self.levels) - 1, self.level_index + steps))
        if index == self.level_index:
            return False
        if self.origin is not None:
            ox, oy = self.origin
            old, new = self.scale, self.levels[index]
            self.origin = (round(cx - (cx - ox) / old * new), round(cy - (cy - oy) / old * new))
        self.level_index = index
        return True

    def pan(self, dx: int, dy: int) -> None:
        if self.origin is not None:
            ox, oy = self.origin
            self.origin = (ox + dx, oy + dy)

    def place(self, canvas_w: int, canvas_h: int) -> Tuple[int, int]:
        """Фиксирует `origin`: меньшее канвы изображение по центру, большее — без пустых полей."""
        scaled_w, scaled_h = self.span(self.width), self.span(self.height)
        if self.origin is None:
            ox, oy = (canvas_w - scaled_w) // 2, (canvas_h - scaled_h) // 2
        else:
            ox, oy = self.origin
        self.origin = (_place_axis(ox, scaled_w, canvas_w), _place_axis(oy, scaled_h, canvas_h))
        return self.origin

    def sample_to_canvas(self, x: int, y: int) -> Tuple[int, int]:
        """Точка канвы левого верхнего угла сэмпла (x, y); `place` должен быть вызван."""
        ox, oy = self.origin or (0, 0)
        return ox + int(x * self.scale), oy + int(y * self.scale)

    def canvas_to_sample(self, cx: int, cy: int) -> Optional[Tuple[int, int]]:
        """Сэмпл под точкой канвы или None вне изображения."""
        if self.origin is None:
            return None
        ox, oy = self.origin
        x = (cx - ox) // self.scale
        y = (cy - oy) // self.scale
        if 0 <= x < self.width and 0 <= y < self.height:
            return int(x), int(y)
        return None

    def visible_region(self, canvas_w: int, canvas_h: int) -> Optional[Region]:
        """Сэмплы (x0, y0, x1, y1), видимые на канве (x1, y1 не включаются)."""
        if self.origin is None:
            return None
        ox, oy = self.origin
        x0 = max(0, (-ox) // self.scale)
        y0 = max(0, (-oy) // self.scale)
        x1 = min(self.width, -((ox - canvas_w) // self.scale))
        y1 = min(self.height, -((oy - canvas_h) // self.scale))
        if x0 >= x1 or y0 >= y1:
            return None
        return int(x0), int(y0), int(x1), int(y1)
