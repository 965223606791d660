"""Боковая панель: открытие файла, заголовок изображения, комментарии, сводка, курсор.

Принципы:
- SRP: управляет только отображением, не читает файлы сам.
- ISP: события наружу через `on_*`, данные внутрь через компактные методы `set_*`.
"""
from __future__ import annotations

from typing import Callable, Optional, Sequence

import customtkinter as ctk

from pamstream.models.image_model import ImageData
from pamstream.services.describe_service import describe_human
from pamstream.services.summary_service import summarize_rows


def _format_tuple(samples: Sequence[int]) -> str:
    """Кортеж как "(10, 20, 30)"."""
    return "(" + ", ".join(str(int(v)) for v in samples) + ")"


class Sidebar(ctk.CTkFrame):
    """Панель с блоками: файл, заголовок, комментарии, сводка, курсор."""
    def __init__(self, master: ctk.CTk, **kwargs) -> None:
        super().__init__(master, width=280, **kwargs)

        self.grid_columnconfigure(0, weight=1)

        # Callbacks
        self.on_open_file: Optional[Callable[[], None]] = None

        # Controls
        self._title = ctk.CTkLabel(self, text="Инструменты", font=ctk.CTkFont(size=16, weight="bold"))
        self._title.grid(row=0, column=0, padx=8, pady=(8, 4), sticky="w")

        self._open_btn = ctk.CTkButton(self, text="Открыть PAM/PNM…", command=self._emit_open_file)
        self._open_btn.grid(row=1, column=0, padx=8, pady=(0, 12), sticky="ew")

        # Header section
        self._info_title = ctk.CTkLabel(self, text="Заголовок", font=ctk.CTkFont(size=16, weight="bold"))
        self._info_title.grid(row=2, column=0, padx=8, pady=(8, 4), sticky="w")

        self._path_val = ctk.StringVar(value="—")
        self._size_val = ctk.StringVar(value="—")
        self._format_val = ctk.StringVar(value="—")
        self._depth_val = ctk.StringVar(value="—")
        self._tuple_type_val = ctk.StringVar(value="—")

        self._info_path = ctk.CTkLabel(self, textvariable=self._path_val, wraplength=250, anchor="w", justify="left")
        self._info_size = ctk.CTkLabel(self, textvariable=self._size_val, anchor="w", justify="left")
        self._info_format = ctk.CTkLabel(self, textvariable=self._format_val, wraplength=250, anchor="w", justify="left")
        self._info_depth = ctk.CTkLabel(self, textvariable=self._depth_val, anchor="w", justify="left")
        self._info_tuple_type = ctk.CTkLabel(self, textvariable=self._tuple_type_val, anchor="w", justify="left")

        self._info_path.grid(row=3, column=0, padx=8, pady=(0, 2), sticky="ew")
        self._info_size.grid(row=4, column=0, padx=8, pady=(0, 2), sticky="ew")
        self._info_format.grid(row=5, column=0, padx=8, pady=(0, 2), sticky="ew")
        self._info_depth.grid(row=6, column=0, padx=8, pady=(0, 2), sticky="ew")
        self._info_tuple_type.grid(row=7, column=0, padx=8, pady=(0, 10), sticky="ew")

        # Comments section
        self._comments_title = ctk.CTkLabel(self, text="Комментарии", font=ctk.CTkFont(size=16, weight="bold"))
        self._comments_title.grid(row=8, column=0, padx=8, pady=(8, 4), sticky="w")
        self._comments_box = ctk.CTkTextbox(self, height=90, wrap="word")
        self._comments_box.grid(row=9, column=0, padx=8, pady=(0, 10), sticky="nsew")
        self._comments_box.configure(state="disabled")

        # Summary section
        self._summary_title = ctk.CTkLabel(self, text="Сводка", font=ctk.CTkFont(size=16, weight="bold"))
        self._summary_title.grid(row=10, column=0, padx=8, pady=(8, 4), sticky="w")
        self._summary_val = ctk.StringVar(value="—")
        self._summary = ctk.CTkLabel(self, textvariable=self._summary_val, anchor="w", justify="left")
        self._summary.grid(row=11, column=0, padx=8, pady=(0, 10), sticky="ew")

        # Cursor section
        self._cursor_title = ctk.CTkLabel(self, text="Курсор", font=ctk.CTkFont(size=16, weight="bold"))
        self._cursor_title.grid(row=12, column=0, padx=8, pady=(8, 4), sticky="w")

        self._cursor_xy_val = ctk.StringVar(value="—")
        self._cursor_tuple_val = ctk.StringVar(value="—")

        self._cursor_xy = ctk.CTkLabel(self, textvariable=self._cursor_xy_val, anchor="w", justify="left")
        self._cursor_tuple = ctk.CTkLabel(self, textvariable=self._cursor_tuple_val, wraplength=250, anchor="w", justify="left")

        self._cursor_xy.grid(row=13, column=0, padx=8, pady=(0, 2), sticky="ew")
        self._cursor_tuple.grid(row=14, column=0, padx=8, pady=(0, 2), sticky="ew")

        # filler
        self.grid_rowconfigure(99, weight=1)

    # ---- Public API ----
    def set_image_info(self, image_data: ImageData) -> None:
        """Отображает заголовок, комментарии и сводку загруженного изображения."""
        descriptor = image_data.descriptor
        self._path_val.set(str(image_data.path))
        self._size_val.set(self._format_size(image_data.size_bytes))
        self._format_val.set("\n".join(line.strip() for line in describe_human(descriptor)))
        self._depth_val.set(
            f"Глубина {descriptor.depth}, maxval {descriptor.maxval}, "
            f"{descriptor.bytes_per_sample} Б/сэмпл"
        )
        self._tuple_type_val.set(f"Тип кортежа: {descriptor.tuple_type or '—'}")

        self._comments_box.configure(state="normal")
        self._comments_box.delete("1.0", "end")
        self._comments_box.insert("1.0", "\n".join(f"#{c}" for c in descriptor.comments))
        self._comments_box.configure(state="disabled")

        stats = summarize_rows(image_data.samples, descriptor.maxval)
        self._summary_val.set(
            f"min {stats['min']}  max {stats['max']}\nсреднее {stats['mean']:.3f} из {stats['maxval']}"
        )

    def update_cursor_info(self, x: Optional[int], y: Optional[int], samples: Optional[Sequence[int]]) -> None:
        """Обновляет информацию по курсору (координаты и кортеж)."""
        if x is None or y is None or samples is None:
            self._cursor_xy_val.set("—")
            self._cursor_tuple_val.set("—")
            return
        self._cursor_xy_val.set(f"({x}, {y})")
        self._cursor_tuple_val.set(f"Кортеж: {_format_tuple(samples)}")

    # ---- Internals ----
    def _emit_open_file(self) -> None:
        if self.on_open_file:
            self.on_open_file()

    def _format_size(self, size_bytes: Optional[int]) -> str:
        if size_bytes is None:
            return "—"
        thresholds = [("Б", 1024), ("КБ", 1024**2), ("МБ", 1024**3), ("ГБ", 1024**4)]
        for label, limit in thresholds:
            if size_bytes < limit:
                if label == "Б":
                    return f"{size_bytes} {label}"
                value = size_bytes / (limit // 1024)
                return f"{value:.1f} {label}"
        value = size_bytes / (1024**4)
        return f"{value:.1f} ГБ"
