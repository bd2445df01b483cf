"""Database models for the dungeon crawler."""

import datetime as dt

from sqlmodel import Field, SQLModel


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.UTC)


class Account(SQLModel, table=True):
    """A player identified by their client certificate."""

    id: int | None = Field(default=None, primary_key=True)
    fingerprint: str = Field(unique=True, index=True)
    created_at: dt.datetime = Field(default_factory=_utcnow)
    last_seen: dt.datetime = Field(default_factory=_utcnow)


class SavedGame(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    account_id: int = Field(foreign_key="account.id", unique=True, index=True)
    game_blob: bytes  # zlib-compressed pickle of the Game
    turn: int = 1
    score: int = 0
    difficulty: str = "normal"
    is_finished: bool = False
    is_victory: bool = False
    started_at: dt.datetime = Field(default_factory=_utcnow)
    last_played: dt.datetime = Field(default_factory=_utcnow)
