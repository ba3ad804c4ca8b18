"""
Command line entry point for the trackhub service.
"""

from typing import Annotated, Optional

import cyclopts
from dotenv import load_dotenv

app = cyclopts.App(name="trackhub", help="Serve repository documents over HTTP")


@app.command
def serve(
    host: Annotated[
        Optional[str], cyclopts.Parameter(help="Host to bind to (default: HOST)")
    ] = None,
    port: Annotated[
        Optional[int], cyclopts.Parameter(help="Port to listen on (default: PORT)")
    ] = None,
    reload: Annotated[
        bool, cyclopts.Parameter(help="Restart on code changes (development)")
    ] = False,
):
    """
    Run the trackhub HTTP server.

    Configuration is read from the environment and from ``.env`` in the
    working directory; see ``trackhub.config.Settings``.

    Example:
        trackhub serve
        trackhub serve --host 127.0.0.1 --port 8080
    """
    import uvicorn

    from trackhub.config import Settings

    settings = Settings()
    host = host or settings.host
    port = port or settings.port

    print(f"Server running on http://{host}:{port}")

    uvicorn.run(
        "trackhub.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


load_dotenv()


def main():
    app()


if __name__ == "__main__":
    main()
