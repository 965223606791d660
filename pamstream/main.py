"""Точка входа в приложение."""
import sys

from pamstream.app import PamInspectorApp
from pamstream.core.logging_config import configure_logging


def main() -> None:
    """Создаёт и запускает главное окно; необязательный аргумент — путь к файлу."""
    configure_logging()
    initial_path = sys.argv[1] if len(sys.argv) > 1 else None
    app = PamInspectorApp(initial_path)
    app.mainloop()


if __name__ == "__main__":
    main()
