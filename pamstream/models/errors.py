"""Иерархия ошибок чтения/записи PAM/PNM.

Все ошибки фатальны для текущего потока: повторных попыток и частичного
восстановления нет. Исключения наследуют `ValueError`/`OSError`, чтобы
вызывающий код мог ловить их так же, как ошибки стандартной библиотеки.
"""
from __future__ import annotations


class PamError(Exception):
    """Базовая ошибка пакета."""


# ---- Header ----
class HeaderError(PamError, ValueError):
    """Заголовок изображения не удалось разобрать."""


class BadMagicError(HeaderError):
    pass


class MalformedTokenError(HeaderError):
    pass


class MissingFieldError(HeaderError):
    pass


class UnrecognizedFieldError(HeaderError):
    pass


class OutOfRangeError(HeaderError):
    pass


class UnexpectedEofError(HeaderError):
    pass


# ---- Rows ----
class RowError(PamError, ValueError):
    """Ошибка чтения или записи строки растра."""


class TruncatedRowError(RowError):
    pass


class SampleOutOfRangeError(RowError):
    pass


class MalformedSampleError(RowError):
    """В plain-растре вместо сэмпла встретился посторонний символ."""


class AllRowsConsumedError(RowError):
    pass


class RowShapeError(RowError):
    """Буфер строки не соответствует ширине/глубине дескриптора."""


class IncompleteImageError(RowError):
    """Записано или прочитано меньше строк, чем `height`, до перехода дальше."""


# ---- Stream ----
class StreamError(PamError, OSError):
    """Ошибка ввода-вывода нижележащего потока байтов."""
