import logging

from fastapi import FastAPI
from fastapi.responses import RedirectResponse

# Load environment variables from .env file
from dotenv import load_dotenv
load_dotenv()

from .api.notifications import router as notifications_router
from .config import get_config
from .domains.tickets.api import router as tickets_router

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    """Configure root logging once for the process."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app() -> FastAPI:
    """Build the ticket panel application."""
    config = get_config()
    configure_logging(config.log_level)

    app = FastAPI(title="Ticket Panel", debug=config.debug)
    app.include_router(tickets_router)
    app.include_router(notifications_router)

    @app.get("/", include_in_schema=False)
    async def index():
        return RedirectResponse(url="/tickets/page")

    @app.get("/health")
    async def health():
        return {"status": "ok", "environment": config.environment}

    logger.info(f"Ticket panel ready (environment: {config.environment})")
    return app


app = create_app()
