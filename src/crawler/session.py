"""Session layer bridging the game engine and database."""

import datetime as dt
import pickle
import random
import zlib

from sqlmodel import Session, select

from .config import Config
from .engine.commands import (
    get_exits,
    get_inventory,
    get_map,
    get_room_description,
    get_status,
    handle_command,
)
from .engine.game import Game, GamePhase
from .engine.generator import DungeonGenerator
from .logging import get_logger
from .models import Account, SavedGame

logger = get_logger(__name__)


def new_game(config: Config) -> Game:
    """Generate a fresh dungeon using the configured difficulty and seed."""
    generator = DungeonGenerator(random.Random(config.seed))
    return Game.create(config.player_name, config.difficulty, generator)


def dump_game(game: Game) -> bytes:
    return zlib.compress(pickle.dumps(game))


def load_game(blob: bytes) -> Game:
    return pickle.loads(zlib.decompress(blob))


class CrawlerSession:
    """Wraps an Account + SavedGame + in-memory Game."""

    def __init__(
        self,
        db_session: Session,
        account: Account,
        saved_game: SavedGame | None,
        game: Game,
        config: Config,
        rng: random.Random | None = None,
    ):
        self.db_session = db_session
        self.account = account
        self.saved_game = saved_game
        self.game = game
        self.config = config
        self.rng = rng if rng is not None else random.Random()

    @classmethod
    def load_or_create(
        cls,
        db_session: Session,
        account: Account,
        config: Config,
        rng: random.Random | None = None,
    ) -> "CrawlerSession":
        """Load the account's unfinished game or start a new one."""
        saved_game = db_session.exec(
            select(SavedGame).where(SavedGame.account_id == account.id)
        ).first()

        if saved_game and not saved_game.is_finished:
            game = load_game(saved_game.game_blob)
            logger.debug(
                "game_loaded",
                fingerprint=account.fingerprint,
                turn=saved_game.turn,
            )
        else:
            game = new_game(config)
            logger.info(
                "new_game_started",
                fingerprint=account.fingerprint,
                difficulty=config.difficulty,
                rooms=len(game.dungeon.rooms),
            )

        return cls(db_session, account, saved_game, game, config, rng)

    @property
    def is_finished(self) -> bool:
        return self.game.is_over

    @property
    def phase(self) -> GamePhase:
        return self.game.phase

    def process_command(self, raw_input: str) -> str:
        """Delegate to the engine and return response text."""
        was_over = self.game.is_over
        response = handle_command(self.game, raw_input, self.rng)
        if self.game.is_over and not was_over:
            logger.info(
                "game_finished",
                fingerprint=self.account.fingerprint,
                phase=self.game.phase.value,
                gave_up=self.game.gave_up,
                score=self.game.score.value,
                turn=self.game.turn,
            )
        return response

    def save(self) -> None:
        """Serialize the game back to the database."""
        now = dt.datetime.now(dt.UTC)
        blob = dump_game(self.game)

        if self.saved_game is None:
            self.saved_game = SavedGame(
                account_id=self.account.id,
                game_blob=blob,
                started_at=self.game.started_at,
            )
            self.db_session.add(self.saved_game)
        else:
            self.saved_game.game_blob = blob
            self.saved_game.started_at = self.game.started_at

        self.saved_game.turn = self.game.turn
        self.saved_game.score = self.game.score.value
        self.saved_game.difficulty = self.config.difficulty
        self.saved_game.is_finished = self.game.is_over
        self.saved_game.is_victory = self.game.is_victory
        self.saved_game.last_played = now

        self.db_session.commit()
        logger.debug(
            "game_saved",
            fingerprint=self.account.fingerprint,
            turn=self.game.turn,
            score=self.game.score.value,
        )

    def get_room_description(self) -> str:
        return get_room_description(self.game)

    def get_exits(self) -> list[str]:
        return get_exits(self.game)

    def get_status(self) -> str:
        return get_status(self.game)

    def get_inventory(self) -> list[str]:
        return get_inventory(self.game)

    def get_map(self) -> str:
        return get_map(self.game)

    def reset(self) -> None:
        """Throw away the current game and generate a new dungeon."""
        self.game = new_game(self.config)
        if self.saved_game:
            self.db_session.delete(self.saved_game)
            self.db_session.commit()
            self.saved_game = None
        logger.info("game_reset", fingerprint=self.account.fingerprint)
