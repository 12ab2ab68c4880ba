"""Application entry point for the archive captioning API server."""

import uvicorn

from zipmeta.api.app import app
from zipmeta.utils.config import load_config
from zipmeta.utils.logger import setup_logging


def main() -> None:
    """Start the FastAPI application server."""
    config = load_config()
    setup_logging(config.log_level)
    uvicorn.run(app, host=config.api.host, port=config.api.port)


if __name__ == "__main__":
    main()
