"""
Command line entry point.

Usage:
    snakebrain serve                                  # serve the configured policy
    snakebrain serve --policy exhaustive --port 8080  # override config
    snakebrain play greedy lookahead                  # one local game
    snakebrain play greedy exhaustive --seed 42 -v    # reproducible, turn-by-turn
"""

import argparse
import logging
import sys
import time
from functools import partial

from snakebrain import config as cfg
from snakebrain.engine import COST_MODELS
from snakebrain.localgame import run_game
from snakebrain.server import serve
from snakebrain.strategies import POLICIES, decide_move


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="snakebrain", description="Snake move decision engine")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Logging level (default: INFO)")
    sub = parser.add_subparsers(dest="command", required=True)

    search = argparse.ArgumentParser(add_help=False)
    search.add_argument("--horizon", type=int, default=None, help="Exhaustive search plies")
    search.add_argument("--max-expansions", type=int, default=None, help="Exhaustive search state budget")
    search.add_argument("--depth", type=int, default=None, help="Lookahead plies")
    search.add_argument("--max-nodes", type=int, default=None, help="Lookahead state budget")
    search.add_argument("--time-budget-ms", type=int, default=None, help="Wall-clock budget per move")
    search.add_argument("--cost", choices=list(COST_MODELS), default=None, help="Step cost model")

    serve_p = sub.add_parser("serve", parents=[search], help="Run the HTTP server")
    serve_p.add_argument("--host", default=None, help=f"Listen address (default: {cfg.HOST})")
    serve_p.add_argument("--port", type=int, default=None, help=f"Listen port (default: {cfg.PORT})")
    serve_p.add_argument("--policy", choices=list(POLICIES), default=None,
                         help=f"Decision policy (default: {cfg.DEFAULT_POLICY})")

    play_p = sub.add_parser("play", parents=[search], help="Play one local game between policies")
    play_p.add_argument("policies", nargs="+", choices=list(POLICIES), help="One policy per snake")
    play_p.add_argument("--width", type=int, default=11)
    play_p.add_argument("--height", type=int, default=11)
    play_p.add_argument("--max-turns", type=int, default=500)
    play_p.add_argument("--seed", type=int, default=None, help="Random seed")
    play_p.add_argument("--verbose", "-v", action="store_true", help="Turn-by-turn output")
    return parser


def _search_overrides(args) -> dict:
    return {
        "horizon": args.horizon,
        "max_expansions": args.max_expansions,
        "depth": args.depth,
        "max_nodes": args.max_nodes,
        "time_budget_ms": args.time_budget_ms,
        "cost": args.cost,
    }


def cmd_serve(args) -> int:
    config = cfg.override(
        cfg.from_env(),
        host=args.host,
        port=args.port,
        policy=args.policy,
        **_search_overrides(args),
    )
    serve(config)
    return 0


def cmd_play(args) -> int:
    base = cfg.from_env()
    strategies = {}
    for i, name in enumerate(args.policies):
        search = cfg.override(base, policy=name, **_search_overrides(args)).search
        strategies[f"{name}-{i + 1}"] = partial(decide_move, config=search)

    start = time.time()
    result = run_game(
        strategies,
        width=args.width,
        height=args.height,
        max_turns=args.max_turns,
        seed=args.seed,
    )
    elapsed = time.time() - start

    if args.verbose:
        for entry in result["turn_log"]:
            print(f"Turn {entry['turn']}: {entry['moves']}")

    print("=" * 65)
    print(f"  Winner: {result['winner'] or 'draw'}  turns={result['turns']}  ({elapsed:.1f}s)")
    print("=" * 65)
    for sid, reason in result["death_reasons"].items():
        print(f"    {sid:20s} {reason}")
    for sid, info in result["final_snakes"].items():
        print(f"    {sid:20s} alive  length={info['length']} health={info['health']}")
    return 0


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        if args.command == "serve":
            return cmd_serve(args)
        return cmd_play(args)
    except ValueError as e:
        print(f"  ERROR: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
