"""Scratch Auth Demo entrypoint.

Run with:
  python -m scratch_auth_demo
"""

import uvicorn

from scratch_auth_demo.core.config import settings


def main() -> None:
    uvicorn.run(
        "scratch_auth_demo.main:app",
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
