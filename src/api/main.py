"""Uvicorn entrypoint for the CMS API."""

from __future__ import annotations

import uvicorn

from src.api.api_config import get_api_config


def main() -> None:
    config = get_api_config()
    uvicorn.run(
        "src.api.app:app",
        host=config.host,
        port=config.port,
        reload=config.environment == "development",
    )


if __name__ == "__main__":
    main()
