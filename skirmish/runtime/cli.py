import argparse
import logging
import sys
from typing import List, Optional
from pydantic import ValidationError
from skirmish.engine.grid import ParseError
from skirmish.engine.model import Race
from .runner import BattleRunner, find_minimum_power
from .schemas import BattleReport, BattleSettings

def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="skirmish", description="Simulate a Goblins vs Elves grid battle.")
    p.add_argument("map", nargs="?", help="battlefield file (default: stdin)")
    p.add_argument("--hit-points", type=int, default=None, help="starting hit points for every unit")
    p.add_argument("--goblin-power", type=int, default=None, help="goblin attack power")
    p.add_argument("--elf-power", type=int, default=None, help="elf attack power")
    p.add_argument("--max-rounds", type=int, default=None, help="stop after this many full rounds")
    p.add_argument("--find-power", action="store_true",
                   help="search the lowest elf attack power that wins without losing an elf")
    p.add_argument("--render", action="store_true", help="print the final map (not with --find-power)")
    p.add_argument("--json", action="store_true", help="print the result as JSON")
    p.add_argument("-v", "--verbose", action="count", default=0, help="-v for info, -vv for debug logs")
    return p

def _settings(args: argparse.Namespace) -> BattleSettings:
    values = {
        "hit_points": args.hit_points,
        "goblin_attack_power": args.goblin_power,
        "elf_attack_power": args.elf_power,
        "max_rounds": args.max_rounds,
    }
    return BattleSettings(**{k: v for k, v in values.items() if v is not None})

def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    level = logging.WARNING - 10 * min(args.verbose, 2)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    try:
        settings = _settings(args)
    except ValidationError as e:
        print(f"Invalid settings: {e}", file=sys.stderr)
        return 2

    if args.map:
        with open(args.map) as f:
            text = f.read()
    else:
        text = sys.stdin.read()

    try:
        if args.find_power:
            found = find_minimum_power(text, settings, Race.ELF)
            if found is None:
                print("Elves cannot win without losses", file=sys.stderr)
                return 1
            power, outcome = found
            settings = settings.model_copy(update={"elf_attack_power": power})
            runner = None
        else:
            runner = BattleRunner.from_text(text, settings)
            outcome = runner.run(settings.max_rounds)
    except ParseError as e:
        print(f"Parse error: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(BattleReport.from_outcome(outcome, settings).model_dump_json())
    else:
        if args.find_power:
            print(f"Elf attack power: {settings.elf_attack_power}")
        print(f"Rounds: {outcome.rounds}, Total HP: {outcome.hit_points}")
        print(f"Result: {outcome.score}")
    if args.render and runner is not None:
        print(runner.engine.render())
    return 0

if __name__ == "__main__":
    sys.exit(main())
