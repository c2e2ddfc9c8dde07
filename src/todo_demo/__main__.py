"""
Run the service with uvicorn.

Usage:
    python -m todo_demo
"""
from __future__ import annotations

import uvicorn

from .logging_config import configure_logging
from .settings import get_settings


def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    # log_config=None keeps the handlers installed by configure_logging
    uvicorn.run(
        "todo_demo.main:app",
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
