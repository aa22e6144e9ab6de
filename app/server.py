"""Server entry point."""
import uvicorn

from app.core.config import settings

KEEP_ALIVE_SECONDS = 120


def main() -> None:
    """Run the API with uvicorn on the configured host and port."""
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        timeout_keep_alive=KEEP_ALIVE_SECONDS,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
