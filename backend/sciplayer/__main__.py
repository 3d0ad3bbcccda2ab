"""Entry: serve the API with uvicorn on the configured listen address."""

import uvicorn

from sciplayer.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "sciplayer.main:app",
        host=settings.listen_host,
        port=settings.listen_port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
