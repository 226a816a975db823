import uvicorn

from bytespark.core.app import create_app
from bytespark.core.config import get_settings

app = create_app()


def run() -> None:
    """Entrypoint for the `bytespark-api` script."""
    settings = get_settings()
    uvicorn.run(
        "bytespark.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    run()
