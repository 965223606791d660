"""Текстовое описание заголовков изображений потока.

Форматы отчёта:
- HUMAN:   "PGM raw, 3 by 2  maxval 255" (для PAM ещё строка с типом кортежа);
- MACHINE: "PGM RAW 3 2 1 255 GRAYSCALE";
- SIZE:    "3 2";
- COUNT:   "<name>:\\t<n> images" (всегда обходит все изображения).
"""
from __future__ import annotations

from enum import Enum
from typing import List

from pamstream.models.image_model import ImageDescriptor
from pamstream.services.stream_service import PamReader, Source, open_for_read


class ReportFormat(Enum):
    HUMAN = "human"
    MACHINE = "machine"
    SIZE = "size"
    COUNT = "count"


def describe_human(descriptor: ImageDescriptor) -> List[str]:
    variant = descriptor.variant
    if variant.is_pam:
        return [
            f"PAM, {descriptor.width} by {descriptor.height} by {descriptor.depth} maxval {descriptor.maxval}",
            f"    Tuple type: {descriptor.tuple_type}",
        ]
    kind = "plain" if variant.is_plain else "raw"
    line = f"{variant.family} {kind}, {descriptor.width} by {descriptor.height}"
    if not variant.is_bitmap:
        line += f"  maxval {descriptor.maxval}"
    return [line]


def describe_machine(descriptor: ImageDescriptor) -> str:
    variant = descriptor.variant
    kind = "PLAIN" if variant.is_plain else "RAW"
    return (
        f"{variant.family} {kind} {descriptor.width} {descriptor.height} "
        f"{descriptor.depth} {descriptor.maxval} {descriptor.tuple_type}"
    )


def describe_comments(descriptor: ImageDescriptor) -> List[str]:
    return ["Comments:"] + [f"  #{comment}" for comment in descriptor.comments]


def _describe_one(
    reader: PamReader, name: str, report: ReportFormat, all_images: bool, comments: bool
) -> List[str]:
    descriptor = reader.descriptor
    if report is ReportFormat.COUNT:
        return []
    if report is ReportFormat.SIZE:
        return [f"{descriptor.width} {descriptor.height}"]
    if report is ReportFormat.MACHINE:
        return [f"{name}: {describe_machine(descriptor)}"]

    first, *rest = describe_human(descriptor)
    prefix = f"{name}:\tImage {reader.image_index}:\t" if all_images else f"{name}:\t"
    lines = [prefix + first] + rest
    if comments:
        lines.extend(describe_comments(descriptor))
    return lines


def describe_stream(
    source: Source,
    name: str = "stdin",
    report: ReportFormat = ReportFormat.HUMAN,
    all_images: bool = False,
    comments: bool = False,
) -> List[str]:
    """Описывает первое (или каждое, при `all_images`) изображение потока.

    Args:
        source: Поток или путь.
        name: Имя для отчёта.
        report: Формат отчёта.
        all_images: Описать все изображения; требует прочитать весь растр.
        comments: Для HUMAN — вывести комментарии заголовка.

    Raises:
        PamError: поток некорректен.
    """
    all_images = all_images or report is ReportFormat.COUNT
    lines: List[str] = []
    image_count = 0
    with open_for_read(source) as reader:
        while True:
            lines.extend(_describe_one(reader, name, report, all_images, comments))
            image_count += 1
            if not all_images:
                break
            reader.skip_rest()
            if not reader.next_image():
                break
    if report is ReportFormat.COUNT:
        lines.append(f"{name}:\t{image_count} images")
    return lines
