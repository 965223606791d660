"""Контроллер приложения: оркестрация UI и сервисов.

SOLID:
- SRP: класс управляет связями между UI и сервисами (без разбора форматов).
- DIP: зависит от сервисов как от ролей; чтение потоков инкапсулировано в `ImageService`.
Clean Code:
- Обработчики компактны; ошибки формата показываются пользователю, а не глушатся.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from tkinter import TclError, filedialog, messagebox
from typing import List, Optional

import customtkinter as ctk

from pamstream.models.errors import PamError
from pamstream.models.image_model import ImageData
from pamstream.services.image_service import ImageService
from pamstream.ui.bottom_bar import BottomBar
from pamstream.ui.image_viewer import ImageViewer
from pamstream.ui.sidebar import Sidebar

logger = logging.getLogger(__name__)

NETPBM_FILETYPES = (
    ("Netpbm", "*.pbm *.pgm *.ppm *.pnm *.pam"),
    ("All files", "*.*"),
)


@dataclass
class AppController:
    """Связывает элементы UI с прикладной логикой.

    Ответственности:
    - Инициализация и бинд событий (UI -> контроллер).
    - Загрузка изображений через `ImageService`, переход по кадрам потока.
    - Синхронизация состояния зума и информации о курсоре.
    """
    viewer: ImageViewer
    sidebar: Sidebar
    bottom: BottomBar
    window: ctk.CTk

    _image_service: ImageService = ImageService()
    _current_image: Optional[ImageData] = None

    def bind_events(self) -> None:
        """Регистрирует обработчики событий между UI-компонентами."""
        self.sidebar.on_open_file = self._handle_open_file
        self.viewer.on_cursor_move = self._handle_cursor_move
        self.viewer.on_zoom_change = self._handle_viewer_zoom_changed

        self.bottom.on_zoom_change = self._handle_zoom_change
        self.bottom.on_zoom_preset = self._handle_zoom_change
        self.bottom.on_zoom_fit = self._handle_zoom_fit
        self.bottom.on_image_step = self._handle_image_step

    def open_path(self, file_path: str | Path, index: int = 0) -> bool:
        """Загружает кадр `index` из файла и показывает его. False — при ошибке."""
        try:
            image_data = self._image_service.load_image(file_path, index=index)
        except (PamError, OSError, IndexError) as exc:
            logger.warning(f"Cannot open {file_path}: {exc}")
            messagebox.showerror("Ошибка чтения", f"{file_path}\n\n{exc}", parent=self.window)
            return False
        self._show(image_data)
        return True

    # ---- Handlers ----
    def _handle_open_file(self) -> None:
        try:
            file_path = filedialog.askopenfilename(title="Выберите изображение", filetypes=NETPBM_FILETYPES)
        except TclError:
            # Silent fail if dialog cannot open
            return

        if not file_path:
            return
        self.open_path(file_path)

    def _handle_image_step(self, delta: int) -> None:
        if self._current_image is None:
            return
        index = self._current_image.image_index + delta
        if 0 <= index < self._current_image.image_count:
            self.open_path(self._current_image.path, index=index)

    def _handle_cursor_move(
        self, x: Optional[int], y: Optional[int], samples: Optional[List[int]]
    ) -> None:
        self.sidebar.update_cursor_info(x, y, samples)

    def _handle_zoom_change(self, zoom_percent: int) -> None:
        self.viewer.set_zoom_percent(zoom_percent)
        self.bottom.set_zoom_percent(self.viewer.get_zoom_percent())

    def _handle_viewer_zoom_changed(self, zoom_percent: int) -> None:
        # Sync slider/value when user zooms with mouse wheel
        self.bottom.set_zoom_percent(zoom_percent)

    def _handle_zoom_fit(self) -> None:
        self.viewer.set_zoom_to_fit()
        self.bottom.set_zoom_percent(self.viewer.get_zoom_percent())

    # ---- Helpers ----
    def _show(self, image_data: ImageData) -> None:
        self._current_image = image_data
        self.viewer.set_image(image_data.pil_image, image_data.samples)
        self.sidebar.set_image_info(image_data)
        self.bottom.set_image_position(image_data.image_index, image_data.image_count)
        self.bottom.set_zoom_percent(self.viewer.get_zoom_percent())
        self.window.title(f"PAM Inspector — {image_data.path.name}")
