"""Run the ticket panel with uvicorn: `python -m ticket_panel` or `ticket-panel`."""

from .config import get_config


def main() -> None:
    import uvicorn

    config = get_config()
    uvicorn.run(
        "ticket_panel.main:app",
        host=config.api_host,
        port=config.api_port,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
