"""Run the HTTP application with uvicorn: ``python -m application``."""

import logging

import uvicorn

from application.app import create_app
from application.settings import settings


def main() -> None:
    logging.basicConfig(level=settings.LOG_LEVEL)
    uvicorn.run(create_app(settings), host=settings.APP_HOST, port=settings.APP_PORT)


if __name__ == "__main__":
    main()
