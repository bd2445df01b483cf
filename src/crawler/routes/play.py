"""Gameplay routes."""

from contextlib import contextmanager

from sqlmodel import Session
from xitzin import Redirect, Request, Xitzin
from xitzin.auth import get_identity, require_certificate

from ..accounts import get_or_create_account
from ..engine.commands import MAP_LEGEND
from ..engine.game import GamePhase
from ..session import CrawlerSession


@contextmanager
def _game_session(request: Request):
    """Load the account's game session with auto-close."""
    identity = get_identity(request)
    db_session = Session(request.app.state.engine)
    try:
        account = get_or_create_account(db_session, identity.fingerprint)
        yield CrawlerSession.load_or_create(
            db_session, account, request.app.state.config,
        )
    finally:
        db_session.close()


def _render_play(app: Xitzin, game: CrawlerSession, message: str = ""):
    """Render the main play view."""
    phase = game.phase
    return app.template(
        "play.gmi",
        description=game.get_room_description(),
        exits=[label.lower() for label in game.get_exits()],
        status=game.get_status(),
        message=message,
        phase=phase.value,
        can_fight=phase in (GamePhase.BLOCKED, GamePhase.IN_COMBAT)
        or game.game.current_room.has_monster,
        can_take=phase is not GamePhase.IN_COMBAT
        and game.game.current_room.has_treasure,
        is_finished=game.is_finished,
    )


def _run(app: Xitzin, request: Request, command: str):
    with _game_session(request) as game:
        message = game.process_command(command)
        game.save()
        return _render_play(app, game, message=message)


def _register_action_routes(app: Xitzin) -> None:
    """Register command, movement, and combat routes."""

    @app.gemini("/play", name="play")
    @require_certificate
    def play(request: Request):
        """Main game view."""
        with _game_session(request) as game:
            game.save()
            return _render_play(app, game)

    @app.gemini("/go/{direction}", name="go")
    @require_certificate
    def go(request: Request, direction: str):
        """Movement via clickable link."""
        return _run(app, request, f"go {direction}")

    @app.input("/cmd", prompt="What do you want to do?", name="cmd")
    @require_certificate
    def cmd(request: Request, query: str):
        """Freeform command entry."""
        return _run(app, request, query)

    @app.gemini("/attack", name="attack")
    @require_certificate
    def attack(request: Request):
        return _run(app, request, "attack")

    @app.gemini("/flee", name="flee")
    @require_certificate
    def flee(request: Request):
        return _run(app, request, "flee")

    @app.gemini("/take", name="take")
    @require_certificate
    def take(request: Request):
        return _run(app, request, "take all")


def _register_info_routes(app: Xitzin) -> None:
    """Register map, inventory, score, and game management routes."""

    @app.gemini("/map", name="map")
    @require_certificate
    def dungeon_map(request: Request):
        with _game_session(request) as game:
            return _render_play(app, game, message=f"{game.get_map()}\n\n{MAP_LEGEND}")

    @app.gemini("/inventory", name="inventory")
    @require_certificate
    def inventory(request: Request):
        """Show carried items."""
        with _game_session(request) as game:
            items = game.get_inventory()
            if not items:
                message = "You're not carrying anything."
            else:
                message = "You are carrying:\n" + "\n".join(
                    f"  {item}" for item in items
                )
            return _render_play(app, game, message=message)

    @app.gemini("/score", name="score")
    @require_certificate
    def score(request: Request):
        with _game_session(request) as game:
            return _render_play(app, game, message=game.get_status())

    @app.input(
        "/new",
        prompt="Are you sure you want to abandon this dungeon? Type YES to confirm:",
        name="new_game",
    )
    @require_certificate
    def new_game(request: Request, query: str):
        """Reset game with confirmation."""
        with _game_session(request) as game:
            if query.strip().upper() == "YES":
                game.reset()
                game.save()
                return _render_play(
                    app, game, message="You descend into a new dungeon...",
                )
            return Redirect("/play")


def register_routes(app: Xitzin) -> None:
    """Register gameplay routes."""
    _register_action_routes(app)
    _register_info_routes(app)
