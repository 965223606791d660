"""Загрузка изображений PAM/PNM с диска и упаковка метаданных для просмотра.

Принципы:
- SRP: класс отвечает только за загрузку и построение 8-битного превью.
- OCP: источник — любой путь или поток, который понимает `PamReader`.
- LSP/ISP: возвращает `ImageData` с предсказуемыми полями; интерфейс узкий и конкретный.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import numpy as np
from PIL import Image

from pamstream.models.image_model import ImageData, ImageDescriptor
from pamstream.services.stream_service import Source, open_for_read
from pamstream.services.tuple_service import has_alpha, scale_row

logger = logging.getLogger(__name__)


def to_pil_image(descriptor: ImageDescriptor, samples: np.ndarray) -> Image.Image:
    """Строит 8-битное изображение Pillow из массива (height, width, depth).

    PBM: 1 -> чёрный, 0 -> белый. Глубина 1 -> "L", 2 -> "LA", 3 -> "RGB",
    4 и больше -> "RGBA" при альфа-канале, иначе первые три плоскости "RGB".
    """
    if descriptor.variant.is_bitmap:
        gray = np.where(samples[..., 0] != 0, 0, 255).astype(np.uint8)
        return Image.fromarray(gray)

    arr = scale_row(samples, descriptor.maxval, 255).astype(np.uint8)
    depth = descriptor.depth
    if depth == 1:
        return Image.fromarray(arr[..., 0])
    if depth == 2:
        return Image.fromarray(arr)  # LA
    if depth == 3:
        return Image.fromarray(arr)  # RGB
    if has_alpha(descriptor):
        return Image.fromarray(np.ascontiguousarray(np.concatenate([arr[..., :3], arr[..., -1:]], axis=-1)))
    return Image.fromarray(np.ascontiguousarray(arr[..., :3]))


class ImageService:
    def load_image(self, file_path: str | Path, index: int = 0) -> ImageData:
        """Загружает изображение с номером `index` из потока на диске.

        Args:
            file_path: Путь до файла PAM/PNM.
            index: Номер изображения в многокадровом потоке (с нуля).

        Returns:
            `ImageData` с дескриптором, сэмплами, превью Pillow и числом изображений.

        Raises:
            FileNotFoundError: если путь не существует или не указывает на файл.
            IndexError: если изображений в потоке меньше, чем `index + 1`.
            PamError: если поток некорректен.
        """
        path = Path(file_path)
        if not path.exists() or not path.is_file():
            raise FileNotFoundError(f"File not found: {path}")

        with open_for_read(path) as reader:
            while reader.image_index < index:
                reader.skip_rest()
                if not reader.next_image():
                    raise IndexError(f"{path} has only {reader.image_index + 1} image(s)")
            descriptor = reader.descriptor
            samples = reader.read_rest()
            image_count = reader.image_index + 1
            while reader.next_image():
                reader.skip_rest()
                image_count += 1

        try:
            size_bytes: Optional[int] = path.stat().st_size
        except OSError:
            size_bytes = None

        logger.info(f"Loaded image {index} of {image_count} from {path}")
        return ImageData(
            path=path,
            descriptor=descriptor,
            samples=samples,
            pil_image=to_pil_image(descriptor, samples),
            image_index=index,
            image_count=image_count,
            size_bytes=size_bytes,
        )

    def count_images(self, source: Source) -> int:
        """Число изображений в потоке (читает весь растр)."""
        count = 1
        with open_for_read(source) as reader:
            reader.skip_rest()
            while reader.next_image():
                reader.skip_rest()
                count += 1
        return count
