"""Command dispatch and handler functions.

handle_command(game, raw_input, rng) -> str is the main entry point.
It splits the input into a verb and an optional argument and dispatches
to handler functions. Handlers mutate the game in place and return
descriptive text. Only completed actions advance the turn counter.
"""

import random
from collections.abc import Callable

from .combat import CombatResolver, health_bar
from .game import Game, GamePhase
from .movement import MovementResolver
from .values import Direction, Position
from .world import Item, ItemKind, Monster, Room

HELP_TEXT = """\
MOVEMENT:
  north, n / south, s / east, e / west, w
  go <direction>, move <direction>

COMBAT:
  attack [target]    Attack a monster here or blocking your path
  flee               Try to escape from combat

ITEMS:
  take [item|all]    Pick up treasure
  use <item>         Drink a potion or equip a weapon
  equip <weapon>     Equip a weapon

INFO:
  look, l            Describe the room again
  map, m             Show the dungeon map
  inventory, i       Check your inventory
  scout              Peek through each passage
  score              Show your score

GAME:
  quit, q            Give up
  help, h            Show this help

Defeat monsters blocking your path and find the exit to win!"""

MAP_LEGEND = (
    "[P] You | [X] Exit | [M] Monster | [T] Treasure | [O] Explored | "
    "[ ] Seen | · Unexplored"
)

_movement = MovementResolver()


def monster_points(monster: Monster) -> int:
    """Score awarded for a kill."""
    return monster.health.max * 2 + monster.attack_power * 3


def handle_command(game: Game, raw_input: str, rng: random.Random | None = None) -> str:
    """Process a command and return the response text."""
    if game.is_over:
        return "The game is over. Start a new game to play again."

    words = raw_input.strip().lower().split()
    if not words:
        return "I beg your pardon?"

    verb = words[0]
    noun = " ".join(words[1:]) or None

    if verb in _DIRECTION_WORDS:
        return _cmd_go(game, verb, rng)

    handler = _VERB_DISPATCH.get(verb)
    if handler is None:
        return "I don't understand that command. Type 'help' for a list of commands."
    return handler(game, noun, rng)


def _opponent(game: Game) -> tuple[Monster, Room] | None:
    """The monster the player is facing and the room it stands in."""
    room = game.current_room
    if room.has_monster:
        return room.monster, room
    monster = game.blocking_monster
    if monster is None or not monster.is_alive:
        return None
    blocked_room = game.dungeon.room_in_direction(
        game.current_position, game.blocked_direction
    )
    if blocked_room is None:
        return None
    return monster, blocked_room


def _game_over_text(game: Game) -> str:
    if game.phase is GamePhase.VICTORY:
        return (
            "You step through the exit into daylight. You have escaped the dungeon!\n"
            f"Final score: {game.score} in {game.turn} turns."
        )
    return f"You have been defeated... Game over.\nFinal score: {game.score}"


def get_room_description(game: Game) -> str:
    """Describe the current room and what is in it."""
    room = game.current_room
    lines = [room.description]
    if room.has_monster:
        lines.append(f"A {room.monster.name} stands before you! ({room.monster.health} HP)")
    for item in room.treasures:
        lines.append(f"You see {item.name} glinting in the corner.")
    if room.is_exit:
        lines.append("The exit glows with inviting light. Your escape is at hand!")
    if game.is_path_blocked:
        lines.append(
            f"A {game.blocking_monster.name} blocks the way "
            f"{game.blocked_direction.value}."
        )
    return "\n".join(lines)


def get_exits(game: Game) -> list[str]:
    return [d.label for d in game.current_room.available_directions]


def get_status(game: Game) -> str:
    player = game.player
    weapon = f" ({player.weapon.name})" if player.weapon else ""
    return (
        f"{player.name} | HP {player.health} | Attack {player.attack_power}{weapon} | "
        f"XP {player.experience} | Score {game.score} | Turn {game.turn}"
    )


def get_inventory(game: Game) -> list[str]:
    player = game.player
    lines = []
    for item in player.inventory:
        line = f"{item.name} ({item.kind.display_name}, {item.value})"
        if player.weapon is not None and item.id == player.weapon.id:
            line += " [equipped]"
        lines.append(line)
    return lines


def _map_cell(game: Game, room: Room | None) -> str:
    if room is None:
        return "   "
    seen = room.visited or any(
        neighbor.visited for _, neighbor in game.dungeon.neighbors(room.position)
    )
    if not seen:
        return " · "
    if room.position == game.current_position:
        return "[P]"
    if room.is_exit:
        return "[X]"
    if room.has_monster and (room.visited or room.monster is game.blocking_monster):
        return "[M]"
    if room.has_treasure and room.visited:
        return "[T]"
    if room.visited:
        return "[O]"
    return "[ ]"


def get_map(game: Game) -> str:
    """Render the explored part of the dungeon as an ASCII grid."""
    dungeon = game.dungeon
    rows = []
    for y in range(dungeon.height):
        cells = []
        for x in range(dungeon.width):
            cells.append(_map_cell(game, dungeon.room_at(Position(x, y))))
        rows.append("".join(cells).rstrip())
    return "\n".join(rows)


def _cmd_go(game: Game, noun: str | None, rng: random.Random | None = None) -> str:
    """Handle movement commands."""
    if noun is None:
        return "Which way do you want to go?"
    try:
        direction = Direction.parse(noun)
    except ValueError:
        return "I don't know that direction."

    if game.in_combat:
        opponent = _opponent(game)
        name = opponent[0].name if opponent else "monster"
        return f"You can't walk away from the {name}! Attack or flee."

    result = _movement.move(game.player, direction, game.dungeon)
    if result.is_blocked:
        game.set_blocking_monster(result.blocking_monster, direction)
        return result.reason
    if not result.successful:
        return result.reason

    game.clear_blocking_monster()
    game.increment_turn()
    text = f"You move {direction.value}.\n\n{get_room_description(game)}"
    if game.is_victory:
        text += "\n\n" + _game_over_text(game)
    return text


def _matches_target(noun: str, monster: Monster) -> bool:
    return noun in monster.name.lower() or noun in ("monster", "enemy")


def _cmd_attack(game: Game, noun: str | None = None, rng: random.Random | None = None) -> str:
    """Handle ATTACK/FIGHT/KILL commands."""
    opponent = _opponent(game)
    if opponent is None:
        return "There's nothing to attack here!"
    monster, room = opponent
    if noun is not None and not _matches_target(noun, monster):
        return f"Cannot attack '{noun}'. The {monster.name} is your only target."

    game.start_combat()
    result = CombatResolver(rng).attack(game.player, monster)
    if not result.successful:
        return result.message
    game.increment_turn()

    lines = [result.full_message]
    if result.victory:
        room.remove_monster()
        game.clear_blocking_monster()
        game.end_combat()
        points = monster_points(monster)
        game.add_score(points)
        if result.drop is not None:
            room.add_treasure(result.drop)
        lines.append(
            f"You gain {points} points and {result.experience_gained} experience."
        )
    elif not game.player.is_alive:
        game.end_combat()
        lines.append(_game_over_text(game))
    else:
        lines.append(
            f"You: {health_bar(game.player.health)}\n"
            f"{monster.name}: {health_bar(monster.health)}"
        )
    return "\n".join(lines)


def _cmd_flee(game: Game, noun: str | None = None, rng: random.Random | None = None) -> str:
    """Handle FLEE/RUN/ESCAPE commands."""
    opponent = _opponent(game)
    if opponent is None or not (game.in_combat or game.is_path_blocked):
        return "There's nothing to flee from."
    monster, _ = opponent

    result = CombatResolver(rng).flee(game.player, monster)
    game.increment_turn()
    if result.successful:
        game.end_combat()
        game.clear_blocking_monster()
        return result.full_message
    if not game.player.is_alive:
        game.end_combat()
        return f"{result.full_message}\n{_game_over_text(game)}"
    return result.full_message


def _describe_items(items: list[Item]) -> str:
    return ", ".join(f"{item.name} ({item.kind.display_name})" for item in items)


def _cmd_take(game: Game, noun: str | None = None, rng: random.Random | None = None) -> str:
    """Handle TAKE/GET commands."""
    if game.in_combat:
        return "You can't pick things up in the middle of a fight!"
    room = game.current_room
    if not room.has_treasure:
        return "There's no treasure here to take."

    if noun is None or noun == "all":
        taken = room.take_all_treasures()
    else:
        item = room.take_treasure(noun)
        if item is None:
            return (
                f"Cannot find '{noun}'. Available items: {_describe_items(room.treasures)}\n"
                "Use 'take all' to take everything."
            )
        taken = [item]

    total = sum(item.value for item in taken)
    for item in taken:
        game.player.add_item(item)
    game.add_score(total)
    game.increment_turn()

    if len(taken) == 1:
        return f"You take {taken[0].name} worth {total} gold. (+{total} points)"
    listing = "\n".join(f"  * {item.name}" for item in taken)
    return f"You take {len(taken)} items:\n{listing}\nTotal value: {total} (+{total} points)"


def _equip(game: Game, weapon: Item) -> str:
    player = game.player
    if player.weapon is not None and player.weapon.id == weapon.id:
        return f"You are already wielding the {weapon.name}."
    previous = player.equip(weapon)
    game.increment_turn()
    text = f"You equip the {weapon.name}. Attack power: {player.attack_power}."
    if previous is not None:
        text += f" You put away the {previous.name}."
    return text


def _cmd_use(game: Game, noun: str | None = None, rng: random.Random | None = None) -> str:
    """Handle USE commands."""
    if noun is None:
        return "What do you want to use?"
    player = game.player
    item = player.find_item(noun)
    if item is None:
        return f"You don't have '{noun}' in your inventory."

    if item.kind is ItemKind.WEAPON:
        return _equip(game, item)
    if item.kind is not ItemKind.POTION:
        return f"You can't use {item.name}. It's not a usable item."

    before = player.health.current
    player.heal(item.heal_amount)
    player.remove_item(item.id)
    game.increment_turn()
    restored = player.health.current - before
    if restored == 0:
        return f"You drink the {item.name} but you're already at full health."
    return (
        f"You drink the {item.name} and restore {restored} health points! "
        f"(Health: {player.health})"
    )


def _cmd_equip(game: Game, noun: str | None = None, rng: random.Random | None = None) -> str:
    """Handle EQUIP/WIELD commands."""
    if noun is None:
        return "What do you want to equip?"
    weapon = game.player.find_item(noun, kind=ItemKind.WEAPON)
    if weapon is None:
        return f"You don't have a weapon named '{noun}' in your inventory."
    return _equip(game, weapon)


def _cmd_look(game: Game, noun: str | None = None, rng: random.Random | None = None) -> str:
    exits = ", ".join(get_exits(game)) or "none"
    return f"{get_room_description(game)}\n\nExits: {exits}"


def _cmd_inventory(game: Game, noun: str | None = None, rng: random.Random | None = None) -> str:
    items = get_inventory(game)
    if not items:
        return "You're not carrying anything."
    return "You are carrying:\n" + "\n".join(f"  {item}" for item in items)


def _cmd_map(game: Game, noun: str | None = None, rng: random.Random | None = None) -> str:
    return f"{get_map(game)}\n\n{MAP_LEGEND}"


def _cmd_score(game: Game, noun: str | None = None, rng: random.Random | None = None) -> str:
    explored = game.dungeon.exploration_percentage
    return (
        f"Score: {game.score} | Turn: {game.turn} | "
        f"Explored: {explored:.0f}% | Experience: {game.player.experience}"
    )


def _cmd_scout(game: Game, noun: str | None = None, rng: random.Random | None = None) -> str:
    hints = _movement.scout(game.player, game.dungeon)
    return "\n".join(f"{direction.label}: {hint}" for direction, hint in hints.items())


def _cmd_quit(game: Game, noun: str | None = None, rng: random.Random | None = None) -> str:
    game.gave_up = True
    return f"You give up. Final score: {game.score} in {game.turn} turns. Thanks for playing!"


def _static_response(msg: str):
    """Return a handler that ignores all arguments and returns a fixed message."""
    def handler(game: Game, noun: str | None = None, rng: random.Random | None = None) -> str:
        return msg
    return handler


_DIRECTION_WORDS = frozenset(("north", "south", "east", "west", "n", "s", "e", "w"))

_VERB_DISPATCH: dict[str, Callable] = {
    **dict.fromkeys(("go", "move", "walk"), _cmd_go),
    **dict.fromkeys(("attack", "fight", "kill"), _cmd_attack),
    **dict.fromkeys(("flee", "run", "escape"), _cmd_flee),
    **dict.fromkeys(("take", "get"), _cmd_take),
    "use": _cmd_use,
    **dict.fromkeys(("equip", "wield"), _cmd_equip),
    **dict.fromkeys(("look", "l"), _cmd_look),
    **dict.fromkeys(("inventory", "inv", "i"), _cmd_inventory),
    **dict.fromkeys(("map", "m"), _cmd_map),
    "score": _cmd_score,
    "scout": _cmd_scout,
    **dict.fromkeys(("quit", "q"), _cmd_quit),
    **dict.fromkeys(("help", "h"), _static_response(HELP_TEXT)),
    "save": _static_response("Your game is automatically saved after each move."),
}
