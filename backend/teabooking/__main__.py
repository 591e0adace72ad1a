"""Run the tea booking server: ``python -m teabooking``."""
import uvicorn

from teabooking.core.config import Config
from teabooking.main import create_app


def main() -> None:
    config = Config.from_file()
    uvicorn.run(
        create_app(config),
        host=config.server.host,
        port=config.server.port,
        log_level="info" if config.is_production else "debug",
    )


if __name__ == "__main__":
    main()
