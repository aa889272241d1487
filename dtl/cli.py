"""Command-line front end for scoring DTL rounds.

Each invocation performs one action against the configured round store and
prints the result as JSON, e.g.::

    dtl start --gun beretta-686 --venue "Bisley"
    dtl cycle 0 --times 2
    dtl complete
    dtl stats --from 2024-01-01
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date
from typing import Any, Optional, Sequence

from dtl.config import get_settings
from dtl.equipment.directory import get_directory
from dtl.rounds import stats
from dtl.rounds.errors import InvalidRoundInput, RoundNotComplete
from dtl.rounds.models import Round, SetupParameters
from dtl.rounds.service import RoundService, get_round_service

EXIT_INVALID_INPUT = 2
EXIT_NOT_COMPLETE = 3


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def _add_filter_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--from", dest="date_from", type=date.fromisoformat, help="YYYY-MM-DD."
    )
    parser.add_argument(
        "--to", dest="date_to", type=date.fromisoformat, help="YYYY-MM-DD."
    )
    parser.add_argument("--gun", dest="gun_id")
    parser.add_argument("--choke", dest="choke_id", help="Matches either barrel.")
    parser.add_argument("--ammunition", dest="ammunition_id")
    parser.add_argument("--venue", help="Case-insensitive substring.")
    parser.add_argument("--min-score", type=int)
    parser.add_argument("--max-score", type=int)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="dtl", description="DTL shot tracker.")
    parser.add_argument("--user", help="User id (defaults to DTL_USER).")
    parser.add_argument(
        "--log-level", help="Logging level (defaults to DTL_LOG_LEVEL)."
    )
    sub = parser.add_subparsers(dest="command", required=True)

    start = sub.add_parser("start", help="Start a round.")
    start.add_argument("--gun", dest="gun_id", default="")
    start.add_argument("--over-choke", dest="over_choke_id", default="")
    start.add_argument("--under-choke", dest="under_choke_id", default="")
    start.add_argument("--ammunition", dest="ammunition_id", default="")
    start.add_argument("--venue", default="")
    start.add_argument("--conditions", default="", help="Weather, light, wind.")

    sub.add_parser(
        "quick-start", help="Start with the only gun/choke/cartridge/venue, if any."
    )

    cycle = sub.add_parser("cycle", help="Advance a target: 3 -> 2 -> 0 -> blank.")
    cycle.add_argument("index", type=int, help="Shot index 0-24, station-major.")
    cycle.add_argument("--times", type=_positive_int, default=1)

    sub.add_parser("status", help="Show the round in progress.")
    sub.add_parser("complete", help="Save the round once all targets are scored.")
    sub.add_parser("reset", help="Discard the round in progress.")

    history = sub.add_parser("history", help="List completed rounds.")
    _add_filter_args(history)
    history.add_argument(
        "--sort", choices=[k.value for k in stats.SortKey], default="date"
    )
    history.add_argument(
        "--order", choices=[o.value for o in stats.SortOrder], default="desc"
    )

    summary = sub.add_parser("stats", help="Summary statistics.")
    _add_filter_args(summary)

    equipment = sub.add_parser("equipment", help="Compare equipment performance.")
    _add_filter_args(equipment)
    equipment.add_argument(
        "--slot",
        choices=[s.value for s in stats.EquipmentSlot],
        default=stats.EquipmentSlot.GUN.value,
    )
    return parser


def _filters(args: argparse.Namespace) -> stats.RoundFilter:
    return stats.RoundFilter(
        date_from=args.date_from,
        date_to=args.date_to,
        gun_id=args.gun_id,
        choke_id=args.choke_id,
        ammunition_id=args.ammunition_id,
        venue=args.venue,
        min_score=args.min_score,
        max_score=args.max_score,
    )


def _round_payload(round_: Round) -> dict[str, Any]:
    payload = round_.to_dict()
    payload["progress"] = stats.progress(round_).model_dump()
    payload["stations"] = [s.model_dump() for s in stats.station_breakdown(round_)]
    return payload


def _run(args: argparse.Namespace, service: RoundService, user_id: str) -> Any:
    settings = get_settings()
    command = args.command

    if command == "start":
        setup = SetupParameters(
            gun_id=args.gun_id,
            over_choke_id=args.over_choke_id,
            under_choke_id=args.under_choke_id,
            ammunition_id=args.ammunition_id,
            venue=args.venue,
            conditions=args.conditions,
        )
        return _round_payload(service.start_round(user_id, setup))
    if command == "quick-start":
        return _round_payload(service.quick_start(user_id))
    if command == "cycle":
        round_ = None
        for _ in range(args.times):
            round_ = service.cycle(user_id, args.index)
        return _round_payload(round_)
    if command == "status":
        current = service.current_round(user_id)
        return {"round": _round_payload(current) if current else None}
    if command == "complete":
        return service.complete(user_id).to_dict()
    if command == "reset":
        service.reset(user_id)
        return {"reset": True}

    if command == "history":
        ordered = service.history(
            user_id,
            _filters(args),
            sort_key=stats.SortKey(args.sort),
            order=stats.SortOrder(args.order),
        )
        return [r.to_dict() for r in ordered]

    rounds = service.history(user_id, _filters(args))
    if command == "stats":
        summary = stats.summarize(rounds, recent_window=settings.recent_window)
        barrels = stats.barrel_breakdown(rounds)
        trend = stats.performance_trend(rounds, limit=settings.trend_limit)
        return {
            "summary": summary.model_dump(by_alias=True) if summary.has_data else None,
            "barrels": barrels.model_dump(by_alias=True) if barrels else None,
            "trend": [p.model_dump(mode="json", by_alias=True) for p in trend],
        }
    if command == "equipment":
        rows = stats.equipment_comparison(
            rounds, stats.EquipmentSlot(args.slot), get_directory()
        )
        return [row.model_dump(by_alias=True) for row in rows]
    raise InvalidRoundInput(f"unknown command {command!r}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    logging.basicConfig(
        level=(args.log_level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    user_id = args.user or settings.user_id

    try:
        result = _run(args, get_round_service(), user_id)
    except RoundNotComplete as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_NOT_COMPLETE
    except InvalidRoundInput as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_INVALID_INPUT

    print(json.dumps(result, indent=2, sort_keys=True))
    return 0


if __name__ == "__main__":
    sys.exit(main())
