"""Command line entry point."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
import tomllib
from pathlib import Path

from pydantic import BaseModel, ValidationError

from archsim.config import EngineConfig
from archsim.core.challenge import SAMPLE_CHALLENGES, challenge_by_id
from archsim.core.faults import CHAOS_EVENTS
from archsim.core.topology import validate_design
from archsim.schema import DesignModel, TrafficProfileModel, UnknownFault, with_traffic
from archsim.simulator import Simulator


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="System design simulation and scoring engine")
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to TOML engine configuration file",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    simulate = subparsers.add_parser("simulate", help="Score a design JSON file")
    simulate.add_argument("design", type=Path, help="Design JSON (camelCase fields)")
    simulate.add_argument(
        "--challenge",
        default="c1",
        help=f"Challenge id ({', '.join(c.id for c in SAMPLE_CHALLENGES)}; default: c1)",
    )
    simulate.add_argument(
        "--fault",
        action="append",
        default=[],
        metavar="ID",
        help="Activate a fault event (repeatable)",
    )
    simulate.add_argument(
        "--traffic",
        type=Path,
        help="Traffic profile JSON overriding the challenge's profile",
    )
    simulate.add_argument(
        "--no-feedback",
        action="store_true",
        help="Skip the model-backed design review",
    )

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=8000, help="Port (default: 8000)")

    subparsers.add_parser("catalog", help="List component types")
    subparsers.add_parser("faults", help="List fault events")

    return parser


def _load_json[M: BaseModel](
    parser: argparse.ArgumentParser, model: type[M], path: Path, what: str
) -> M:
    try:
        return model.model_validate_json(path.read_text(encoding="utf-8"))
    except OSError as e:
        parser.error(f"cannot read {what} file {path}: {e.strerror or e}")
    except ValidationError as e:
        parser.error(f"invalid {what} file {path}:\n{e}")


def _load_config(parser: argparse.ArgumentParser, path: Path | None) -> EngineConfig:
    if path is None:
        return EngineConfig()
    try:
        return EngineConfig.from_toml(path)
    except OSError as e:
        parser.error(f"cannot read config file {path}: {e.strerror or e}")
    except (tomllib.TOMLDecodeError, TypeError, ValueError) as e:
        parser.error(f"invalid config file {path}: {e}")


def main(argv: list[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = _load_config(parser, args.config)

    if args.command == "serve":
        from archsim.server import run_server

        run_server(host=args.host, port=args.port, config=config)
        return

    if args.command == "catalog":
        simulator = Simulator(config=config)
        for component_type in simulator.catalog.values():
            category = component_type.category.value
            print(f"{component_type.id:<18} {category:<12} {component_type.name}")
        return

    if args.command == "faults":
        for event in CHAOS_EVENTS:
            print(f"{event.id:<18} {event.severity.value:<9} {event.name}")
        return

    challenge = challenge_by_id(args.challenge)
    if challenge is None:
        parser.error(f"unknown challenge: {args.challenge}")

    design_model = _load_json(parser, DesignModel, args.design, "design")
    try:
        design = design_model.to_design(args.fault)
    except UnknownFault as e:
        parser.error(str(e))

    if args.traffic is not None:
        traffic = _load_json(parser, TrafficProfileModel, args.traffic, "traffic")
        challenge = with_traffic(challenge, traffic.to_traffic())

    simulator = Simulator.build(config, with_feedback=not args.no_feedback)

    ok, warnings = validate_design(simulator.catalog, design)
    if not ok:
        for warning in warnings:
            print(f"warning: {warning}", file=sys.stderr)

    result = asyncio.run(simulator.simulate(challenge, design))
    print(json.dumps(result.to_dict(), indent=2))


if __name__ == "__main__":
    main()
