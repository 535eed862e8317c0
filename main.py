"""
Navi Server Entry Point
=======================
Settings (host, port, log level) come from navi.config and can be
overridden with NAVI_* environment variables or a .env file.
"""
import uvicorn

from navi.config import settings


def serve():
    """Start the uvicorn server."""
    uvicorn.run(
        "navi.main:app",
        host=settings.host,
        port=settings.port,
        reload=False,
    )


if __name__ == "__main__":
    serve()
