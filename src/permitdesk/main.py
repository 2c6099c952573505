"""Application entry point for the permitdesk server."""

from permitdesk.app import App
from permitdesk.config import Config
from permitdesk.logging import setup_logging
from permitdesk.web.runner import run_server


def main() -> None:
    config = Config()  # type: ignore[call-arg]
    setup_logging(config.debug)
    app = App(config)
    run_server(app, config)


if __name__ == "__main__":
    main()
