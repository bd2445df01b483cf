"""Shared test fixtures for the dungeon crawler."""

import random
from pathlib import Path

import pytest
from sqlmodel import Session, SQLModel, create_engine

from crawler.app import create_app
from crawler.config import Config
from crawler.engine.game import Game
from crawler.engine.generator import DungeonGenerator
from crawler.engine.world import Dungeon
from crawler.models import Account


class ScriptedRandom(random.Random):
    """A Random whose randint() returns queued rolls first.

    Once the queue is empty it falls back to the seeded stream, so
    choice() and any unscripted roll stay deterministic.
    """

    def __init__(self, seed: int = 0):
        super().__init__(seed)
        self.rolls: list[int] = []

    def queue(self, *rolls: int) -> "ScriptedRandom":
        self.rolls.extend(rolls)
        return self

    def randint(self, a: int, b: int) -> int:
        if not self.rolls:
            return super().randint(a, b)
        roll = self.rolls.pop(0)
        assert a <= roll <= b, f"scripted roll {roll} outside [{a}, {b}]"
        return roll


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def scripted() -> ScriptedRandom:
    return ScriptedRandom()


@pytest.fixture
def simple_dungeon(rng: random.Random) -> Dungeon:
    return DungeonGenerator(rng).generate_simple()


@pytest.fixture
def game(simple_dungeon: Dungeon) -> Game:
    return Game.start("Hero", simple_dungeon)


@pytest.fixture
def db_engine(tmp_path: Path):
    db_url = f"sqlite:///{tmp_path}/test.db"
    engine = create_engine(db_url)
    SQLModel.metadata.create_all(engine)
    return engine


@pytest.fixture
def db_session(db_engine):
    with Session(db_engine) as session:
        yield session


@pytest.fixture
def test_account(db_session: Session) -> Account:
    account = Account(fingerprint="test-fingerprint-abc123")
    db_session.add(account)
    db_session.commit()
    db_session.refresh(account)
    return account


@pytest.fixture
def test_config(tmp_path: Path) -> Config:
    return Config(
        database_url=f"sqlite:///{tmp_path}/test.db",
        difficulty="easy",
        seed=7,
    )


@pytest.fixture
def app(test_config: Config):
    return create_app(test_config)


@pytest.fixture
def client(app):
    from xitzin.testing import test_app

    with test_app(app) as client:
        yield client


@pytest.fixture
def auth_client(client):
    return client.with_certificate("test-fingerprint-abc123")
