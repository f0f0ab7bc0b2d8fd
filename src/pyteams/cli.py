"""Command-line interface for balancing a roster into two teams."""

from __future__ import annotations

import argparse
import csv
import json
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

from pyteams.balance import STRATEGY_KINDS, AbilityStrategy, PerformanceStrategy, RandomStrategy, balance_teams
from pyteams.config_loader import WeightsProfile
from pyteams.errors import BalanceError
from pyteams.ingest import exclude_retired, load_roster_csv
from pyteams.models import UNASSIGNED, Assignment, PlayerRecord


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Balance a roster into two football teams")
    parser.add_argument("roster", type=Path, help="Path to roster CSV")
    parser.add_argument("--team-size", type=int, default=None, help="Players per side (default: half the pool)")
    parser.add_argument("--team-size-a", type=int, default=None, help="Players on team A for uneven sides")
    parser.add_argument("--team-size-b", type=int, default=None, help="Players on team B for uneven sides")
    parser.add_argument(
        "--strategy",
        choices=STRATEGY_KINDS,
        default="ability",
        help="Balancing strategy",
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for the random strategy")
    parser.add_argument("--power-weight", type=float, default=None, help="Power rating weight (performance strategy)")
    parser.add_argument("--goal-weight", type=float, default=None, help="Goal threat weight (performance strategy)")
    parser.add_argument("--include-retired", action="store_true", help="Keep retired players in the pool")
    parser.add_argument(
        "--column",
        action="append",
        default=[],
        help="Mapping for roster CSV columns (e.g., name=Player Name)",
    )
    parser.add_argument("--load-profile", type=Path, help="Load weights profile JSON", default=None)
    parser.add_argument("--save-profile", type=Path, help="Save weights profile JSON", default=None)
    parser.add_argument("--output", type=Path, default=Path("teams.csv"), help="Output CSV path")
    parser.add_argument(
        "--report",
        type=Path,
        default=None,
        help="Optional path to write the balance summary JSON",
    )
    parser.add_argument("--verbose", action="store_true", help="Log balancing progress")
    return parser.parse_args(argv)


def _parse_mapping(entries: list[str]) -> dict[str, str]:
    mapping: dict[str, str] = {}
    for entry in entries:
        if "=" not in entry:
            raise ValueError(f"Invalid mapping entry '{entry}', expected key=value")
        key, value = entry.split("=", 1)
        mapping[key.strip()] = value.strip()
    return mapping


def _resolve_sizes(args: argparse.Namespace, pool_size: int) -> tuple[int, int]:
    if args.team_size_a is not None or args.team_size_b is not None:
        size_a = args.team_size_a if args.team_size_a is not None else pool_size - (args.team_size_b or 0)
        size_b = args.team_size_b if args.team_size_b is not None else pool_size - size_a
        return size_a, size_b
    if args.team_size is not None:
        return args.team_size, args.team_size
    return pool_size - pool_size // 2, pool_size // 2


def _print_teams(assignment: Assignment, players: Dict[str, PlayerRecord]) -> None:
    for team in ("A", "B"):
        formation = assignment.formation(team)
        print(f"Team {team} ({formation.defenders}-{formation.midfielders}-{formation.attackers})")
        for slot in assignment.team_slots(team):
            name = players[slot.player_id].name if slot.player_id else "-"
            print(f"  {slot.slot_number:>2} {slot.position:<8} {name}")


def _write_assignment(path: Path, assignment: Assignment, players: Dict[str, PlayerRecord]) -> None:
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(["team", "slot_number", "position", "player_id", "name"])
        for slot in assignment.slots:
            name = players[slot.player_id].name if slot.player_id else ""
            writer.writerow([slot.team, slot.slot_number, slot.position, slot.player_id or "", name])
        for player_id in assignment.unassigned:
            writer.writerow([UNASSIGNED, "", "", player_id, players[player_id].name])


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)

    try:
        profile = WeightsProfile.load(args.load_profile) if args.load_profile else WeightsProfile()
        players, metrics = load_roster_csv(args.roster, mapping=_parse_mapping(args.column) or None)
    except (BalanceError, ValueError) as exc:
        print(f"Could not read input: {exc}", file=sys.stderr)
        return 1
    if not args.include_retired:
        players = exclude_retired(players)

    if args.strategy == "performance":
        strategy = PerformanceStrategy(
            power_weight=args.power_weight if args.power_weight is not None else profile.performance.power_weight,
            goal_weight=args.goal_weight if args.goal_weight is not None else profile.performance.goal_weight,
        )
    elif args.strategy == "random":
        strategy = RandomStrategy(seed=args.seed)
    else:
        strategy = AbilityStrategy()

    size_a, size_b = _resolve_sizes(args, len(players))
    try:
        output = balance_teams(
            players,
            size_a,
            size_b,
            strategy,
            weights=profile.weights,
            metrics=metrics,
            overrides=profile.overrides(),
        )
    except BalanceError as exc:
        print(f"Could not balance teams: {exc.message}", file=sys.stderr)
        return 1

    if args.save_profile:
        if isinstance(strategy, PerformanceStrategy):
            profile.performance = strategy
        profile.save(args.save_profile)
        print(f"Saved weights profile to {args.save_profile}")

    lookup = {player.player_id: player for player in players}
    _print_teams(output.assignment, lookup)
    result = output.result
    if result.balance_score is not None:
        print(
            "Balance: {:.1f}% ({}) score={:.3f}".format(
                result.balance_percentage,
                result.quality_band.value,
                result.balance_score,
            )
        )
    _write_assignment(args.output, output.assignment, lookup)
    print(f"Wrote teams to {args.output}")

    if args.report:
        report_payload = {
            "strategy": result.strategy,
            "balance_score": result.balance_score,
            "balance_percentage": result.balance_percentage,
            "quality_band": result.quality_band.value if result.quality_band else None,
            "team_a": output.assignment.team_player_ids("A"),
            "team_b": output.assignment.team_player_ids("B"),
        }
        args.report.write_text(json.dumps(report_payload, indent=2), encoding="utf-8")
        print(f"Wrote balance report to {args.report}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
