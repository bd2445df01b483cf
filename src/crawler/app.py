"""Xitzin application factory for the dungeon crawler."""

from pathlib import Path

from sqlmodel import Session, SQLModel, create_engine
from xitzin import Xitzin

from .config import Config
from .logging import get_logger

logger = get_logger(__name__)


def create_app(config: Config | None = None) -> Xitzin:
    """Create and configure the Xitzin application."""
    config = config or Config.from_env()

    templates_dir = Path(__file__).parent / "templates"

    app = Xitzin(
        title="Dungeon Crawler",
        version="0.1.0",
        templates_dir=templates_dir,
    )

    engine = create_engine(config.database_url)
    app.state.engine = engine
    app.state.config = config

    @app.on_startup
    async def startup():
        """Initialize the database."""
        SQLModel.metadata.create_all(engine)
        logger.debug("database_setup_complete")
        logger.info(
            "startup_complete",
            difficulty=config.difficulty,
            seeded=config.seed is not None,
        )

    from .routes import home, play

    home.register_routes(app)
    play.register_routes(app)

    return app


def get_session(app: Xitzin) -> Session:
    """Get a database session from the app."""
    return Session(app.state.engine)
