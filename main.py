import argparse
import asyncio
import sys

import uvicorn
from loguru import logger

from internal.app import create_app
from internal.config import get_settings
from internal.core.exception import ConfigurationError


def main() -> int:
    parser = argparse.ArgumentParser(description="TikTok OAuth2 Server")
    parser.add_argument("--port", type=int, default=None, help="Port to run the server on (default: SERVER_PORT)")
    args = parser.parse_args()

    try:
        settings = get_settings()
    except ConfigurationError as e:
        logger.critical(f"Startup aborted: {e}")
        return 1

    app = create_app(settings)
    config = uvicorn.Config(
        app,
        host=settings.SERVER_HOST,
        port=args.port or settings.SERVER_PORT,
        reload=False,
        log_level=settings.log_level.lower(),
    )
    server = uvicorn.Server(config)
    asyncio.run(server.serve())
    return 0


if __name__ == "__main__":
    sys.exit(main())
