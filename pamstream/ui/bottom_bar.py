from __future__ import annotations

from typing import Callable, Optional

import customtkinter as ctk

from pamstream.core.config import Config
from pamstream.ui.viewport import level_percent, nearest_level, zoom_levels

PRESET_PERCENTS = (25, 50, 100, 200, 800, 1600)


class BottomBar(ctk.CTkFrame):
    def __init__(self, master: ctk.CTk, **kwargs) -> None:
        super().__init__(master, height=64, **kwargs)

        # callbacks
        self.on_zoom_change: Optional[Callable[[int], None]] = None
        self.on_zoom_preset: Optional[Callable[[int], None]] = None
        self.on_zoom_fit: Optional[Callable[[], None]] = None
        self.on_image_step: Optional[Callable[[int], None]] = None

        # layout
        self.grid_rowconfigure(0, weight=1)
        self.grid_columnconfigure(1, weight=1)  # slider stretches

        # Zoom controls: the slider walks the discrete zoom levels
        self._levels = zoom_levels(Config.ZOOM_MIN_PERCENT, Config.ZOOM_MAX_PERCENT)
        self._zoom_label = ctk.CTkLabel(self, text="Масштаб")
        self._zoom_label.grid(row=0, column=0, padx=(10, 6), pady=8, sticky="w")

        self._zoom_value = ctk.StringVar(value="100%")
        self._zoom_slider = ctk.CTkSlider(
            self,
            from_=0,
            to=max(1, len(self._levels) - 1),
            number_of_steps=max(1, len(self._levels) - 1),
            command=self._on_slider_change,
        )
        self._zoom_slider.grid(row=0, column=1, padx=6, pady=8, sticky="ew")
        self._zoom_value_label = ctk.CTkLabel(self, textvariable=self._zoom_value, width=56, anchor="w")
        self._zoom_value_label.grid(row=0, column=2, padx=(6, 12), pady=8, sticky="w")

        level_percents = {level_percent(level) for level in self._levels}
        self._presets = [f"{p}%" for p in PRESET_PERCENTS if p in level_percents]
        self._preset_buttons = ctk.CTkSegmentedButton(
            self, values=["Fit"] + self._presets, command=self._on_preset_click
        )
        self._preset_buttons.grid(row=0, column=3, padx=6, pady=8, sticky="w")
        self.set_zoom_percent(100)

        # Multi-image stream navigation
        self._prev_btn = ctk.CTkButton(self, text="◀", width=32, command=lambda: self._emit_step(-1))
        self._prev_btn.grid(row=0, column=4, padx=(12, 2), pady=8, sticky="w")
        self._image_value = ctk.StringVar(value="—")
        self._image_label = ctk.CTkLabel(self, textvariable=self._image_value, width=96)
        self._image_label.grid(row=0, column=5, padx=2, pady=8)
        self._next_btn = ctk.CTkButton(self, text="▶", width=32, command=lambda: self._emit_step(1))
        self._next_btn.grid(row=0, column=6, padx=(2, 10), pady=8, sticky="w")
        self.set_image_position(None, None)

    # public API (sync from controller)
    def set_zoom_percent(self, percent: int) -> None:
        """Ставит ползунок на ближайший уровень масштаба и подсвечивает пресет, если он есть."""
        level = nearest_level(self._levels, percent)
        self._zoom_slider.set(self._levels.index(level))
        label = f"{level_percent(level)}%"
        self._zoom_value.set(label)
        self._preset_buttons.set(label if label in self._presets else "")

    def set_image_position(self, index: Optional[int], count: Optional[int]) -> None:
        """Показывает «Кадр i / n» и включает кнопки перехода по потоку."""
        if index is None or count is None:
            self._image_value.set("—")
            self._prev_btn.configure(state="disabled")
            self._next_btn.configure(state="disabled")
            return
        self._image_value.set(f"Кадр {index + 1} / {count}")
        self._prev_btn.configure(state="normal" if index > 0 else "disabled")
        self._next_btn.configure(state="normal" if index + 1 < count else "disabled")

    # events
    def _on_slider_change(self, value: float) -> None:
        percent = level_percent(self._levels[int(round(value))])
        self._zoom_value.set(f"{percent}%")
        if self.on_zoom_change:
            self.on_zoom_change(percent)

    def _on_preset_click(self, value: str) -> None:
        if value == "Fit":
            if self.on_zoom_fit:
                self.on_zoom_fit()
            return
        if self.on_zoom_preset:
            self.on_zoom_preset(int(value.rstrip("%")))

    def _emit_step(self, delta: int) -> None:
        if self.on_image_step:
            self.on_image_step(delta)
