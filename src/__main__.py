"""Entry point для запуска через python -m src.

Запускает uvicorn сервер с FastAPI приложением.

Использование:
    python -m src              # Production mode (без hot-reload)
    python -m src --dev        # Development mode (с hot-reload)
    python -m src --help       # Показать справку
"""

import argparse

import uvicorn


def main() -> None:
    """Запустить приложение через uvicorn."""
    parser = argparse.ArgumentParser(
        description="AI Broker — доступ к AI-моделям по токенам",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Примеры:
    python -m src              # Production mode
    python -m src --dev        # Development mode с hot-reload
    python -m src --port 3000  # Указать кастомный порт
        """,
    )
    parser.add_argument(
        "--dev",
        action="store_true",
        help="Включить hot-reload для разработки",
    )
    parser.add_argument(
        "--host",
        default="0.0.0.0",
        help="Хост для сервера (по умолчанию: 0.0.0.0)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Порт для сервера (по умолчанию: APP__PORT или 4444)",
    )
    args = parser.parse_args()

    # Порт по умолчанию — из настроек (APP__PORT)
    if args.port is None:
        from src.config.settings import settings

        args.port = settings.app.port

    if args.dev:
        # Development mode с hot-reload
        uvicorn.run(
            "src.main:app",
            host=args.host,
            port=args.port,
            reload=True,
            reload_includes=["src/**/*.py"],
            reload_excludes=[".venv/**", "data/**", "tests/**", ".git/**"],
        )
    else:
        # Production mode без hot-reload
        uvicorn.run(
            "src.main:app",
            host=args.host,
            port=args.port,
            reload=False,
        )


if __name__ == "__main__":
    main()
