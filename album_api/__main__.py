"""
Album API — Process Entry Point
================================

What:  Runs the API under uvicorn in the foreground (`python -m album_api`
       or the `album-api` console script).
How:   Builds the app, gives it a shutdown hook bound to this uvicorn server
       and, once the server has stopped, exits with status 1 if it stopped
       because the database became unreachable.
"""

import logging
import sys

import uvicorn

from album_api.config import settings
from album_api.main import create_app

logger = logging.getLogger("album_api")


def main() -> int:
    app = create_app()
    server = uvicorn.Server(
        uvicorn.Config(
            app,
            host=settings.host,
            port=settings.port,
            log_level=settings.log_level.lower(),
        )
    )

    def request_shutdown() -> None:
        server.should_exit = True

    app.state.request_shutdown = request_shutdown

    server.run()

    fatal_error = app.state.fatal_error
    if fatal_error is not None:
        logger.critical("Exiting after fatal error: %s", fatal_error.message)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
