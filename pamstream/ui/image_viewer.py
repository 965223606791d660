"""Виджет просмотра сэмплов: дискретный масштаб, панорамирование, сетка сэмплов.

Принципы:
- SRP: рисует видимую часть изображения и сообщает кортеж под курсором;
  геометрия вынесена в `Viewport`.
- Рисуется только видимый фрагмент, поэтому крупный масштаб не создаёт
  гигантских промежуточных изображений.
"""
from __future__ import annotations

from typing import Callable, List, Optional, Tuple

import customtkinter as ctk
import numpy as np
import tkinter as tk
from PIL import Image, ImageTk

from pamstream.core.config import Config
from pamstream.ui.viewport import Region, Viewport, zoom_levels

GRID_COLOR = "#808080"
HOVER_COLOR = "#ff3b30"

CursorCallback = Callable[[Optional[int], Optional[int], Optional[List[int]]], None]


class ImageViewer(ctk.CTkFrame):
    def __init__(self, master: ctk.CTk | tk.Misc, **kwargs) -> None:
        super().__init__(master, **kwargs)
        self.grid_rowconfigure(0, weight=1)
        self.grid_columnconfigure(0, weight=1)

        bg = "#1f1f1f" if ctk.get_appearance_mode().lower() == "dark" else "#f2f2f2"
        self._canvas = tk.Canvas(self, highlightthickness=0, bg=bg)
        self._canvas.grid(row=0, column=0, sticky="nsew")

        self._levels = zoom_levels(Config.ZOOM_MIN_PERCENT, Config.ZOOM_MAX_PERCENT)
        self._image: Optional[Image.Image] = None
        self._samples: Optional[np.ndarray] = None
        self._viewport: Optional[Viewport] = None
        self._tk_image: Optional[ImageTk.PhotoImage] = None
        self._hover: Optional[Tuple[int, int]] = None
        self._drag_from: Optional[Tuple[int, int]] = None

        self.on_cursor_move: Optional[CursorCallback] = None
        self.on_zoom_change: Optional[Callable[[int], None]] = None

        for sequence, handler in (
            ("<Configure>", lambda _e: self._render()),
            ("<Motion>", self._on_motion),
            ("<Leave>", self._on_leave),
            ("<MouseWheel>", self._on_wheel),
            ("<Button-4>", self._on_wheel),
            ("<Button-5>", self._on_wheel),
            ("<ButtonPress-1>", self._on_drag_start),
            ("<B1-Motion>", self._on_drag),
            ("<ButtonRelease-1>", self._on_drag_end),
        ):
            self._canvas.bind(sequence, handler)

    # ---- Public API ----
    def set_image(self, image: Image.Image, samples: np.ndarray) -> None:
        """Показывает превью `image`; `samples` (height, width, depth) — для кортежа под курсором."""
        self._image = image
        self._samples = samples
        self._viewport = Viewport(image.width, image.height, self._levels)
        self._hover = None
        self.set_zoom_to_fit()

    def set_zoom_to_fit(self) -> None:
        if self._viewport is None:
            return
        self._viewport.fit(*self._canvas_size())
        self._render()

    def set_zoom_percent(self, zoom_percent: int) -> None:
        """Ставит ближайший допустимый масштаб к `zoom_percent`."""
        if self._viewport is None:
            return
        self._viewport.set_percent(zoom_percent)
        self._render()

    def get_zoom_percent(self) -> int:
        return self._viewport.percent if self._viewport is not None else 100

    # ---- Rendering ----
    def _canvas_size(self) -> Tuple[int, int]:
        return max(1, self._canvas.winfo_width()), max(1, self._canvas.winfo_height())

    def _show_grid(self) -> bool:
        return self._viewport is not None and self._viewport.percent >= Config.GRID_MIN_ZOOM_PERCENT

    def _render(self) -> None:
        self._canvas.delete("all")
        viewport = self._viewport
        if viewport is None or self._image is None:
            return
        canvas_w, canvas_h = self._canvas_size()
        viewport.place(canvas_w, canvas_h)
        region = viewport.visible_region(canvas_w, canvas_h)
        if region is None:
            return

        x0, y0, x1, y1 = region
        size = (viewport.span(x1 - x0), viewport.span(y1 - y0))
        fragment = self._image.crop(region).resize(size, Image.Resampling.NEAREST)
        self._tk_image = ImageTk.PhotoImage(fragment)
        self._canvas.create_image(*viewport.sample_to_canvas(x0, y0), image=self._tk_image, anchor="nw")

        if self._show_grid():
            self._draw_grid(region)
        self._draw_hover()

    def _draw_grid(self, region: Region) -> None:
        viewport = self._viewport
        x0, y0, x1, y1 = region
        left, top = viewport.sample_to_canvas(x0, y0)
        right, bottom = viewport.sample_to_canvas(x1, y1)
        for x in range(x0, x1 + 1):
            cx = viewport.sample_to_canvas(x, y0)[0]
            self._canvas.create_line(cx, top, cx, bottom, fill=GRID_COLOR)
        for y in range(y0, y1 + 1):
            cy = viewport.sample_to_canvas(x0, y)[1]
            self._canvas.create_line(left, cy, right, cy, fill=GRID_COLOR)

    def _draw_hover(self) -> None:
        self._canvas.delete("hover")
        if self._hover is None or not self._show_grid():
            return
        x, y = self._hover
        left, top = self._viewport.sample_to_canvas(x, y)
        right, bottom = self._viewport.sample_to_canvas(x + 1, y + 1)
        self._canvas.create_rectangle(left, top, right, bottom, outline=HOVER_COLOR, width=2, tags="hover")

    # ---- Cursor ----
    def _set_hover(self, sample: Optional[Tuple[int, int]]) -> None:
        if sample == self._hover:
            return
        self._hover = sample
        self._draw_hover()
        if self.on_cursor_move is None:
            return
        if sample is None or self._samples is None:
            self.on_cursor_move(None, None, None)
            return
        x, y = sample
        self.on_cursor_move(x, y, self._samples[y, x].tolist())

    def _on_motion(self, event: tk.Event) -> None:
        if self._viewport is not None:
            self._set_hover(self._viewport.canvas_to_sample(event.x, event.y))

    def _on_leave(self, _event: tk.Event) -> None:
        self._set_hover(None)

    # ---- Zoom / pan ----
    def _on_wheel(self, event: tk.Event) -> None:
        # <MouseWheel> carries delta (Windows/macOS); X11 sends Button-4 up, Button-5 down
        if event.num == 4 or event.delta > 0:
            steps = 1
        elif event.num == 5 or event.delta < 0:
            steps = -1
        else:
            return
        if self._viewport is None or not self._viewport.zoom_at(event.x, event.y, steps):
            return
        self._render()
        if self.on_zoom_change:
            self.on_zoom_change(self._viewport.percent)

    def _on_drag_start(self, event: tk.Event) -> None:
        self._canvas.focus_set()
        self._drag_from = (event.x, event.y)

    def _on_drag(self, event: tk.Event) -> None:
        if self._drag_from is None or self._viewport is None:
            return
        fx, fy = self._drag_from
        self._viewport.pan(event.x - fx, event.y - fy)
        self._drag_from = (event.x, event.y)
        self._render()

    def _on_drag_end(self, _event: tk.Event) -> None:
        self._drag_from = None
