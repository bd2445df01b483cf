"""Configuration for the dungeon crawler."""

import os
from dataclasses import dataclass
from pathlib import Path

from .engine.errors import ConfigurationError
from .engine.game import DIFFICULTY_PRESETS


@dataclass
class Config:
    """Application configuration."""

    database_url: str = "sqlite:///./crawler.db"
    host: str = "localhost"
    port: int = 1965
    certfile: Path | None = None
    keyfile: Path | None = None
    log_level: str = "INFO"
    log_file: Path | None = None
    json_logs: bool = False
    hash_fingerprints: bool = True
    difficulty: str = "normal"
    player_name: str = "Adventurer"
    seed: int | None = None

    def __post_init__(self) -> None:
        if self.difficulty not in DIFFICULTY_PRESETS:
            raise ConfigurationError(
                f"Unknown difficulty {self.difficulty!r}, "
                f"expected one of {', '.join(DIFFICULTY_PRESETS)}"
            )
        if not self.player_name.strip():
            raise ConfigurationError("Player name cannot be empty")

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        certfile = os.getenv("CRAWLER_CERTFILE")
        keyfile = os.getenv("CRAWLER_KEYFILE")
        log_file = os.getenv("CRAWLER_LOG_FILE")
        seed = os.getenv("CRAWLER_SEED")

        return cls(
            database_url=os.getenv("CRAWLER_DATABASE_URL", cls.database_url),
            host=os.getenv("CRAWLER_HOST", cls.host),
            port=int(os.getenv("CRAWLER_PORT", str(cls.port))),
            certfile=Path(certfile) if certfile else None,
            keyfile=Path(keyfile) if keyfile else None,
            log_level=os.getenv("CRAWLER_LOG_LEVEL", cls.log_level),
            log_file=Path(log_file) if log_file else None,
            json_logs=os.getenv("CRAWLER_JSON_LOGS", "").lower()
            in ("true", "1", "yes"),
            hash_fingerprints=os.getenv("CRAWLER_HASH_FINGERPRINTS", "true").lower()
            not in ("false", "0", "no"),
            difficulty=os.getenv("CRAWLER_DIFFICULTY", cls.difficulty).lower(),
            player_name=os.getenv("CRAWLER_PLAYER_NAME", cls.player_name),
            seed=int(seed) if seed else None,
        )
