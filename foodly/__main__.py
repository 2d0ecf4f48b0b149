"""Run the Foodly server.

Usage:
  python -m foodly

Listens on 0.0.0.0 at $PORT (default 3000).
"""
import uvicorn

from .config import get_settings


def main():
    settings = get_settings()
    uvicorn.run("foodly.main:app", host="0.0.0.0", port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
