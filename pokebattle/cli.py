from __future__ import annotations
import argparse
import random
import sys
from typing import List, Optional, Sequence, Tuple

from rich.console import Console
from rich.table import Table
from rich.text import Text
from rich import box

from pokebattle.battle.combatant import Combatant
from pokebattle.battle.experience import GROWTH_RATES, xp_for_next_level, xp_to_reach_level
from pokebattle.battle.factory import combatant_from_species, wild_combatant
from pokebattle.battle.models import TrainerRank
from pokebattle.battle.session import BattleSession
from pokebattle.battle.state import BattleState, Side
from pokebattle.core.errors import DataLoadError, DistributionError, PokeBattleError, ValidationError
from pokebattle.core.logging import logger
from pokebattle.core.types import format_types
from pokebattle.data.loader import all_species_ids, check_learnsets, resolve_species
from pokebattle.data.moves import all_moves
from pokebattle.encounters.loader import get_location, load_locations, validate_spawn_tables
from pokebattle.system.settings import Settings
from pokebattle.ui.typewriter import type_lines

console = Console()


def _parse_member(text: str) -> Tuple[str, int]:
    """``pikachu:12`` -> ("pikachu", 12)."""
    name, _, level = text.partition(":")
    if not level.isdigit():
        raise argparse.ArgumentTypeError(f"expected SPECIES:LEVEL, got '{text}'")
    return name, int(level)


def _build_roster(specs: Sequence[Tuple[str, int]], rng: random.Random,
                  rank: Optional[TrainerRank] = None) -> List[Combatant]:
    return [combatant_from_species(resolve_species(name), lvl, rng=rng, rank=rank) for name, lvl in specs]


def _roster_table(title: str, roster: Sequence[Combatant]) -> Table:
    table = Table(title=title, box=box.ROUNDED)
    table.add_column("Pokemon", style="bright_white")
    table.add_column("Types")
    table.add_column("Lv", justify="right")
    table.add_column("HP", justify="right")
    table.add_column("XP", justify="right")
    table.add_column("Moves")
    for c in roster:
        hp = "[red]FAINTED[/red]" if c.fainted else str(c.health)
        table.add_row(c.name, Text.from_ansi(format_types(c.types)), str(c.level), hp, str(c.exp),
                      ", ".join(str(s) for s in c.moves))
    return table


def cmd_simulate(args, settings: Settings) -> int:
    seed = args.seed if args.seed is not None else settings.data.seed
    rng = random.Random(seed)
    player = _build_roster(args.player, rng)
    if args.location:
        opponent = [wild_combatant(get_location(args.location), rng)]
    else:
        rank = TrainerRank.parse(args.rank) if args.trainer else None
        opponent = _build_roster(args.opponent or [("pidgey", 3)], rng, rank)
    state = BattleState(player, opponent, trainer_name=args.trainer, rng=rng,
                        tie_policy=args.tie_policy or settings.data.speed_tie_policy)
    session = BattleSession(state)
    speed = 0 if args.fast else settings.data.text_speed
    shown = 0
    while not session.is_over() and state.round <= args.max_rounds:
        session.step()
        new = session.log[shown:]
        shown = len(session.log)
        if speed:
            type_lines(new, speed)
        else:
            for line in new:
                console.print(line, highlight=False)
    outcome = state.outcome
    console.print(_roster_table("Your team", state.roster(Side.PLAYER)))
    console.print(_roster_table("Opponent", state.roster(Side.OPPONENT)))
    console.print(f"[bold]Outcome:[/bold] {outcome.value} after {state.round} round(s)")
    return 0


def cmd_validate(args, settings: Settings) -> int:
    table = Table(title="Content validation", box=box.ROUNDED)
    table.add_column("Check")
    table.add_column("Result")
    failures = 0
    checks = [
        ("species catalog", lambda: f"{len(all_species_ids())} species"),
        ("move catalog", lambda: f"{len(all_moves())} moves"),
        ("learnsets", lambda: _raise_if(check_learnsets()) or "ok"),
        ("encounter tables", lambda: f"{len(load_locations(force=True))} locations"),
        ("spawn distributions", lambda: ", ".join(f"{k}={v:.2f}" for k, v in validate_spawn_tables().items())),
    ]
    for label, fn in checks:
        try:
            table.add_row(label, f"[green]{fn()}[/green]")
        except (DataLoadError, DistributionError, PokeBattleError) as e:
            failures += 1
            logger.error("ValidationFailed", check=label, error=str(e))
            table.add_row(label, f"[red]{e}[/red]")
    console.print(table)
    return 1 if failures else 0


def _raise_if(problems: List[str]):
    if problems:
        raise PokeBattleError("; ".join(problems))


def cmd_curve(args, settings: Settings) -> int:
    table = Table(title=f"Growth rate: {args.rate}", box=box.SIMPLE)
    table.add_column("Level", justify="right")
    table.add_column("Total XP", justify="right")
    table.add_column("To next", justify="right")
    for level in range(args.start, args.stop + 1):
        table.add_row(str(level), str(xp_to_reach_level(args.rate, level)), str(xp_for_next_level(args.rate, level)))
    console.print(table)
    return 0


def cmd_config(args, settings: Settings) -> int:
    if args.assign:
        changes = {}
        for item in args.assign:
            key, _, value = item.partition("=")
            changes[key] = _coerce(value)
        try:
            settings.update(**changes)
        except KeyError as e:
            raise ValidationError(e.args[0]) from None
    table = Table(title=str(settings.path), box=box.SIMPLE)
    table.add_column("Setting")
    table.add_column("Value")
    for key, value in vars(settings.data).items():
        table.add_row(key, repr(value))
    console.print(table)
    return 0


def _coerce(value: str):
    low = value.lower()
    if low in {"true", "on", "yes"}:
        return True
    if low in {"false", "off", "no"}:
        return False
    if low in {"none", "null", ""}:
        return None
    if value.lstrip("-").isdigit():
        return int(value)
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pokebattle", description="Turn-based monster battle engine")
    sub = parser.add_subparsers(dest="command", required=True)

    sim = sub.add_parser("simulate", help="Run an automatic battle and narrate it")
    sim.add_argument("--player", type=_parse_member, action="append", required=True, metavar="SPECIES:LEVEL")
    sim.add_argument("--opponent", type=_parse_member, action="append", metavar="SPECIES:LEVEL")
    sim.add_argument("--location", help="Roll a wild opponent from this location's spawn table")
    sim.add_argument("--trainer", help="Opponent trainer name (disables fleeing)")
    sim.add_argument("--rank", default="normal", help="Trainer rank for opponent EVs")
    sim.add_argument("--seed", type=int)
    sim.add_argument("--tie-policy", choices=["coin_flip", "stable"])
    sim.add_argument("--max-rounds", type=int, default=200)
    sim.add_argument("--fast", action="store_true", help="Print narration without the typewriter effect")
    sim.set_defaults(func=cmd_simulate)

    val = sub.add_parser("validate", help="Load and check every catalog and spawn table")
    val.set_defaults(func=cmd_validate)

    curve = sub.add_parser("curve", help="Print an experience curve")
    curve.add_argument("rate", choices=GROWTH_RATES)
    curve.add_argument("--start", type=int, default=1)
    curve.add_argument("--stop", type=int, default=20)
    curve.set_defaults(func=cmd_curve)

    cfg = sub.add_parser("config", help="Show or change persisted settings")
    cfg.add_argument("assign", nargs="*", metavar="KEY=VALUE")
    cfg.set_defaults(func=cmd_config)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = Settings.load()
    logger.set_level("DEBUG" if settings.data.debug else settings.data.log_level)
    try:
        return args.func(args, settings)
    except PokeBattleError as e:
        logger.error("CommandFailed", command=args.command, error=str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
