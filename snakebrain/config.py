"""
Runtime configuration.

Defaults live here as module constants; environment variables override
them, and CLI flags override both.
"""

import os
from dataclasses import dataclass, field, replace
from typing import Mapping

from snakebrain.engine import COST_MODELS

HOST = "127.0.0.1"
PORT = 8008
SNAKE_COLOR = "#54A4E5"
HEAD_TYPE = "safe"
TAIL_TYPE = "hook"

POLICY_NAMES = ("exhaustive", "lookahead", "greedy")
DEFAULT_POLICY = "greedy"

HEAD_TYPES = (
    "beluga", "bendr", "dead", "evil", "fang", "pixel", "regular",
    "safe", "sand-worm", "shades", "silly", "smile", "tongue",
)
TAIL_TYPES = (
    "block-bum", "bolt", "curled", "fat-rattle", "freckled", "hook", "pixel",
    "regular", "round-bum", "sharp", "skinny", "small-rattle",
)


@dataclass(frozen=True)
class SearchConfig:
    policy: str = DEFAULT_POLICY
    horizon: int = 3  # plies the exhaustive search looks ahead
    max_expansions: int = 2000  # states the exhaustive search may expand
    depth: int = 4  # plies the lookahead tree explores
    max_nodes: int = 4000  # states the lookahead tree may visit
    time_budget_ms: int = 400  # wall clock per decision, setup included
    cost: str = "uniform"

    def __post_init__(self):
        if self.policy not in POLICY_NAMES:
            raise ValueError(f"unknown policy {self.policy!r}, choose from {', '.join(POLICY_NAMES)}")
        if self.cost not in COST_MODELS:
            raise ValueError(f"unknown cost model {self.cost!r}, choose from {', '.join(COST_MODELS)}")
        for name in ("horizon", "max_expansions", "depth", "max_nodes", "time_budget_ms"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be at least 1")


@dataclass(frozen=True)
class ServerConfig:
    host: str = HOST
    port: int = PORT
    color: str = SNAKE_COLOR
    head_type: str = HEAD_TYPE
    tail_type: str = TAIL_TYPE
    search: SearchConfig = field(default_factory=SearchConfig)

    def __post_init__(self):
        if not 0 <= self.port <= 65535:
            raise ValueError(f"port out of range: {self.port}")
        if self.head_type not in HEAD_TYPES:
            raise ValueError(f"unknown head type {self.head_type!r}")
        if self.tail_type not in TAIL_TYPES:
            raise ValueError(f"unknown tail type {self.tail_type!r}")


_SEARCH_ENV = {
    "SNAKEBRAIN_POLICY": ("policy", str),
    "SNAKEBRAIN_HORIZON": ("horizon", int),
    "SNAKEBRAIN_MAX_EXPANSIONS": ("max_expansions", int),
    "SNAKEBRAIN_DEPTH": ("depth", int),
    "SNAKEBRAIN_MAX_NODES": ("max_nodes", int),
    "SNAKEBRAIN_TIME_BUDGET_MS": ("time_budget_ms", int),
    "SNAKEBRAIN_COST": ("cost", str),
}


def from_env(environ: Mapping[str, str] | None = None) -> ServerConfig:
    """Build a ServerConfig from SNAKEBRAIN_* variables on top of the defaults."""
    environ = os.environ if environ is None else environ

    search_kwargs = {}
    for var, (name, conv) in _SEARCH_ENV.items():
        if var in environ:
            search_kwargs[name] = _convert(var, environ[var], conv)

    server_kwargs = {}
    if "SNAKEBRAIN_HOST" in environ:
        server_kwargs["host"] = environ["SNAKEBRAIN_HOST"]
    if "SNAKEBRAIN_PORT" in environ:
        server_kwargs["port"] = _convert("SNAKEBRAIN_PORT", environ["SNAKEBRAIN_PORT"], int)

    return ServerConfig(search=SearchConfig(**search_kwargs), **server_kwargs)


def override(config: ServerConfig, **changes) -> ServerConfig:
    """Apply non-None overrides, routing search fields to the nested config."""
    search_fields = {k: v for k, v in changes.items() if k in SearchConfig.__dataclass_fields__ and v is not None}
    server_fields = {k: v for k, v in changes.items() if k in ServerConfig.__dataclass_fields__ and v is not None}
    if search_fields:
        server_fields["search"] = replace(config.search, **search_fields)
    return replace(config, **server_fields)


def _convert(var: str, raw: str, conv):
    try:
        return conv(raw)
    except ValueError as e:
        raise ValueError(f"{var}: {e}") from e
