"""Потоковое чтение и запись изображений PAM/PNM, включая многокадровые потоки.

Принципы:
- SRP: последовательность «заголовок -> height строк -> следующий заголовок».
- Только последовательный доступ: строки читаются и пишутся по порядку,
  без перемотки назад и пропусков вперёд.
- Ресурсы: `PamReader`/`PamWriter` — контекстные менеджеры; поток,
  открытый по пути, закрывается ровно один раз на любом пути выхода.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterable, Iterator, Optional, Tuple, Union

import numpy as np

from pamstream.models.errors import (
    AllRowsConsumedError,
    IncompleteImageError,
    StreamError,
)
from pamstream.models.image_model import SAMPLE_DTYPE, ImageDescriptor
from pamstream.services.header_service import WHITESPACE, format_header, parse_header
from pamstream.services.row_codec import decode_row, encode_row

logger = logging.getLogger(__name__)

Source = Union[str, Path, BinaryIO]


@contextmanager
def _io_errors(action: str) -> Iterator[None]:
    """Оборачивает `OSError` нижележащего потока в `StreamError`."""
    try:
        yield
    except StreamError:
        raise
    except OSError as exc:
        raise StreamError(f"{action} failed: {exc}") from exc


def _open_path(path: Union[str, Path], mode: str) -> BinaryIO:
    with _io_errors(f"opening {path}"):
        return open(path, mode)


class PamReader:
    """Последовательный читатель одного или нескольких изображений потока."""

    def __init__(self, stream: BinaryIO, *, owns_stream: bool = False, name: str = "<stream>") -> None:
        self._stream = stream
        self._owns_stream = owns_stream
        self.name = name
        self._descriptor: Optional[ImageDescriptor] = None
        self._row_index = 0
        self._image_index = 0
        self._closed = False

    # ---- Construction ----
    @classmethod
    def open(cls, source: Source) -> "PamReader":
        """Открывает поток (или файл по пути) и читает заголовок первого изображения."""
        if isinstance(source, (str, Path)):
            reader = cls(_open_path(source, "rb"), owns_stream=True, name=str(source))
        else:
            reader = cls(source, name=getattr(source, "name", "<stream>"))
        try:
            reader._begin_image()
        except BaseException:
            reader._release()
            raise
        return reader

    # ---- Public API ----
    @property
    def descriptor(self) -> ImageDescriptor:
        if self._descriptor is None:
            raise ValueError("no image header has been read")
        return self._descriptor

    @property
    def row_index(self) -> int:
        """Номер следующей строки текущего изображения."""
        return self._row_index

    @property
    def image_index(self) -> int:
        """Номер текущего изображения в потоке (с нуля)."""
        return self._image_index

    @property
    def rows_remaining(self) -> int:
        return self.descriptor.height - self._row_index

    def read_row(self) -> np.ndarray:
        """Читает следующую строку текущего изображения.

        Raises:
            AllRowsConsumedError: все `height` строк уже прочитаны.
            RowError: строка усечена или содержит недопустимый сэмпл.
            StreamError: ошибка ввода-вывода.
        """
        self._check_open()
        descriptor = self.descriptor
        if self._row_index >= descriptor.height:
            raise AllRowsConsumedError(
                f"all {descriptor.height} rows of image {self._image_index} have been read"
            )
        with _io_errors("reading row"):
            row = decode_row(self._stream, descriptor)
        self._row_index += 1
        return row

    def rows(self) -> Iterator[np.ndarray]:
        """Итератор по оставшимся строкам текущего изображения."""
        while self._row_index < self.descriptor.height:
            yield self.read_row()

    def read_rest(self) -> np.ndarray:
        """Оставшиеся строки текущего изображения одним массивом (rows, width, depth)."""
        descriptor = self.descriptor
        rows = list(self.rows())
        if not rows:
            return np.empty((0, descriptor.width, descriptor.depth), dtype=SAMPLE_DTYPE)
        return np.stack(rows)

    def skip_rest(self) -> None:
        """Дочитывает и отбрасывает оставшиеся строки текущего изображения."""
        for _row in self.rows():
            pass

    def next_image(self) -> bool:
        """Переходит к следующему изображению потока.

        Returns:
            False, если поток чисто закончился (нет данных или только пробельные
            символы); True, если прочитан заголовок следующего изображения.

        Raises:
            IncompleteImageError: строки текущего изображения прочитаны не все.
            HeaderError: данные есть, но не образуют корректный заголовок.
        """
        self._check_open()
        if self._row_index < self.descriptor.height:
            raise IncompleteImageError(
                f"{self.rows_remaining} rows of image {self._image_index} are still unread"
            )
        with _io_errors("reading next image"):
            ch = self._stream.read(1)
            while ch and ch in WHITESPACE:
                ch = self._stream.read(1)
            if not ch:
                logger.debug(f"{self.name}: end of stream after {self._image_index + 1} image(s)")
                return False
            self._descriptor = parse_header(self._stream, prefix=ch)
        self._row_index = 0
        self._image_index += 1
        logger.debug(f"{self.name}: image {self._image_index} begins")
        return True

    def close(self) -> None:
        self._release()

    # ---- Context manager ----
    def __enter__(self) -> "PamReader":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self._release()

    def __iter__(self) -> Iterator[np.ndarray]:
        return self.rows()

    # ---- Internals ----
    def _begin_image(self) -> None:
        with _io_errors("reading header"):
            self._descriptor = parse_header(self._stream)
        self._row_index = 0

    def _check_open(self) -> None:
        if self._closed:
            raise ValueError("I/O operation on closed PamReader")

    def _release(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._owns_stream:
            with _io_errors(f"closing {self.name}"):
                self._stream.close()


class PamWriter:
    """Последовательный писатель одного или нескольких изображений в поток."""

    def __init__(self, stream: BinaryIO, *, owns_stream: bool = False, name: str = "<stream>") -> None:
        self._stream = stream
        self._owns_stream = owns_stream
        self.name = name
        self._descriptor: Optional[ImageDescriptor] = None
        self._row_index = 0
        self._image_index = -1
        self._closed = False

    @classmethod
    def open(cls, target: Source, descriptor: ImageDescriptor) -> "PamWriter":
        """Открывает поток (или создаёт файл) и записывает заголовок первого изображения."""
        if isinstance(target, (str, Path)):
            writer = cls(_open_path(target, "wb"), owns_stream=True, name=str(target))
        else:
            writer = cls(target, name=getattr(target, "name", "<stream>"))
        try:
            writer._begin_image(descriptor)
        except BaseException:
            writer._release()
            raise
        return writer

    @property
    def descriptor(self) -> ImageDescriptor:
        if self._descriptor is None:
            raise ValueError("no image header has been written")
        return self._descriptor

    @property
    def row_index(self) -> int:
        return self._row_index

    @property
    def image_index(self) -> int:
        return self._image_index

    def write_row(self, row: np.ndarray) -> None:
        """Записывает следующую строку текущего изображения.

        Raises:
            AllRowsConsumedError: все `height` строк уже записаны.
            RowShapeError / SampleOutOfRangeError: буфер не подходит дескриптору.
        """
        self._check_open()
        descriptor = self.descriptor
        if self._row_index >= descriptor.height:
            raise AllRowsConsumedError(
                f"all {descriptor.height} rows of image {self._image_index} have been written"
            )
        with _io_errors("writing row"):
            encode_row(self._stream, descriptor, row)
        self._row_index += 1

    def write_rows(self, rows: Iterable[np.ndarray]) -> None:
        for row in rows:
            self.write_row(row)

    def next_image(self, descriptor: ImageDescriptor) -> None:
        """Начинает следующее изображение того же потока (пишет его заголовок)."""
        self._check_open()
        self._check_complete()
        self._begin_image(descriptor)

    def close(self) -> None:
        """Завершает запись.

        Raises:
            IncompleteImageError: записано меньше `height` строк; поток при этом
                всё равно освобождается.
        """
        if self._closed:
            return
        try:
            self._check_complete()
        finally:
            self._release()
        logger.debug(f"{self.name}: closed after {self._image_index + 1} image(s)")

    def __enter__(self) -> "PamWriter":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        if exc_type is None:
            self.close()
        else:
            # keep the original exception; only release the stream
            self._release()

    # ---- Internals ----
    def _begin_image(self, descriptor: ImageDescriptor) -> None:
        with _io_errors("writing header"):
            self._stream.write(format_header(descriptor))
        self._descriptor = descriptor
        self._row_index = 0
        self._image_index += 1

    def _check_complete(self) -> None:
        if self._descriptor is not None and self._row_index < self._descriptor.height:
            raise IncompleteImageError(
                f"image {self._image_index} has {self._row_index} of {self._descriptor.height} rows written"
            )

    def _check_open(self) -> None:
        if self._closed:
            raise ValueError("I/O operation on closed PamWriter")

    def _release(self) -> None:
        if self._closed:
            return
        self._closed = True
        with _io_errors(f"closing {self.name}"):
            if self._owns_stream:
                self._stream.close()
            elif hasattr(self._stream, "flush"):
                self._stream.flush()


# ---------- Functional facade ----------
def open_for_read(source: Source) -> PamReader:
    """Открывает поток для чтения; заголовок первого изображения уже разобран."""
    return PamReader.open(source)


def open_for_write(target: Source, descriptor: ImageDescriptor) -> PamWriter:
    """Открывает поток для записи и сразу выводит заголовок по дескриптору."""
    return PamWriter.open(target, descriptor)


def read_image(source: Source) -> Tuple[ImageDescriptor, np.ndarray]:
    """Читает первое изображение целиком: дескриптор и массив (height, width, depth)."""
    with open_for_read(source) as reader:
        return reader.descriptor, reader.read_rest()


def write_image(target: Source, descriptor: ImageDescriptor, samples: np.ndarray) -> None:
    """Записывает изображение целиком из массива (height, width, depth)."""
    samples = np.asarray(samples)
    if samples.ndim == 2 and descriptor.depth == 1:
        samples = samples[:, :, np.newaxis]
    with open_for_write(target, descriptor) as writer:
        writer.write_rows(samples)
