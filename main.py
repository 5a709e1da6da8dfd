"""
Main entry point for the AI Interview API.

Usage:
    python main.py
    python main.py --reload
"""

import argparse

import uvicorn

from config.settings import settings


def main():
    parser = argparse.ArgumentParser(description="Run the AI Interview API server")
    parser.add_argument("--host", default=settings.API_HOST)
    parser.add_argument("--port", type=int, default=settings.API_PORT)
    parser.add_argument("--reload", action="store_true", help="Auto-reload on code changes (development)")
    args = parser.parse_args()

    uvicorn.run(
        "api.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
