"""Run the service with uvicorn: ``python -m geolookup``."""

import uvicorn

from geolookup.configs.config import get_app_config


def main() -> None:
    server = get_app_config().server
    # Logging is configured by the app itself.
    uvicorn.run("geolookup.app:app", host=server.host, port=server.port, log_config=None)


if __name__ == "__main__":
    main()
