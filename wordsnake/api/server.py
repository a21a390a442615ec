"""Serve the Word Snake API with uvicorn using the ``WORDSNAKE_*`` settings."""

from __future__ import annotations

import uvicorn

from wordsnake.common.config import settings


def main() -> None:
    uvicorn.run(
        "wordsnake.api.app:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
