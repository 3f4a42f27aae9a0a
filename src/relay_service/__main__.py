"""Entrypoint: python -m relay_service [--local]"""
from __future__ import annotations

import argparse
import logging

import uvicorn

from relay_service.app import create_app
from relay_service.config import detect_environment, settings


def main() -> None:
    parser = argparse.ArgumentParser(description="Teleprompter controller/display relay")
    parser.add_argument("-l", "--local", action="store_true", help="force local LAN mode")
    args = parser.parse_args()

    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    environment = detect_environment(settings, force_local=args.local)
    uvicorn.run(
        create_app(environment),
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
