# SPDX-License-Identifier: MIT
#
#  █████╗ ██████╗  █████╗ ███████╗
# ██╔══██╗██╔══██╗██╔══██╗██╔════╝
# ███████║██████╔╝███████║███████╗
# ██╔══██║██╔══██╗██╔══██║╚════██║
# ██║  ██║██║  ██║██║  ██║███████║
# ╚═╝  ╚═╝╚═╝  ╚═╝╚═╝  ╚═╝╚══════╝
# Copyright (C) 2026 Riza Emre ARAS <r.emrearas@proton.me>
#
# Licensed under the MIT License.
# See LICENSE and THIRD_PARTY_LICENSES for details.

"""Loads a run definition (YAML) and its type configuration (JSON or YAML).

The run definition replaces what used to be hardcoded constants: seed
entity, endpoint, type configuration path and output file. The type
configuration is an ordered mapping; its key order is the traversal order
and is kept as a tuple of TypeRule.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from cascade_engine.result import Fail, Ok, Result
from cascade_engine.sparql.queries import iri_term

STRATEGIES = ("configured", "breadth_first")
ORDERS = ("declared", "topological")
ERROR_MODES = ("continue", "abort")
DIRECTIONS = ("forward", "reverse")


# ── Type configuration ─────────────────────────────────────────

@dataclass(frozen=True, slots=True)
class TypeRule:
    """Edges followed from one entity type, as IRI terms."""
    type: str
    reverse: tuple[str, ...]
    forward: tuple[str, ...]

    @property
    def targets(self) -> tuple[str, ...]:
        return self.reverse + self.forward


# ── Run definition ─────────────────────────────────────────────

@dataclass(frozen=True, slots=True)
class SeedConfig:
    iri: str
    type: str


@dataclass(frozen=True, slots=True)
class RetryConfig:
    attempts: int
    delay_seconds: float


@dataclass(frozen=True, slots=True)
class SparqlConfig:
    endpoint: str
    timeout: int
    retry: RetryConfig


@dataclass(frozen=True, slots=True)
class TraversalConfig:
    strategy: str
    rules: tuple[TypeRule, ...]
    order: str
    on_endpoint_error: str
    workers: int
    direction: str
    max_rounds: int | None


@dataclass(frozen=True, slots=True)
class OutputConfig:
    path: Path
    truncate: bool
    include_seed: bool


@dataclass(frozen=True, slots=True)
class RunConfig:
    seed: SeedConfig
    sparql: SparqlConfig
    traversal: TraversalConfig
    output: OutputConfig


# ── Type configuration loader ─────────────────────────────────

def _edge_list(raw: Mapping[str, Any], key: str, owner: str) -> tuple[str, ...]:
    values = raw.get(key, [])
    if not isinstance(values, list) or not all(isinstance(v, str) for v in values):
        raise TypeError(f"'{key}' of {owner} must be a list of IRI strings")
    return tuple(iri_term(v) for v in values)


def build_rules(raw: Any) -> Result[tuple[TypeRule, ...]]:
    """Turn an already-parsed ordered mapping into TypeRules, keeping key order.

    Each value needs at least one of 'reverse' / 'forward'; the missing one
    defaults to an empty list.
    """
    if not isinstance(raw, Mapping):
        return Fail(error="Type config must be a mapping of type IRI to edges")

    rules: list[TypeRule] = []
    try:
        for type_iri, edges in raw.items():
            if not isinstance(edges, Mapping):
                raise TypeError(f"edges of {type_iri} must be a mapping")
            if "reverse" not in edges and "forward" not in edges:
                raise KeyError(f"{type_iri} has neither 'reverse' nor 'forward'")
            rules.append(
                TypeRule(
                    type=iri_term(type_iri),
                    reverse=_edge_list(edges, "reverse", type_iri),
                    forward=_edge_list(edges, "forward", type_iri),
                )
            )
    except (KeyError, TypeError) as exc:
        return Fail(error=f"Type config structure error: {exc}")

    return Ok(data=tuple(rules))


def load_type_config(path: Path) -> Result[tuple[TypeRule, ...]]:
    """Load a JSON (or YAML) type config file into ordered TypeRules."""
    if not path.exists():
        return Fail(error=f"Type config file not found: {path}")

    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix in (".yaml", ".yml"):
            raw = yaml.safe_load(text)
        else:
            raw = json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        return Fail(error=f"Type config parse error: {exc}", context=str(path))

    result = build_rules(raw)
    if not result.ok:
        return Fail(error=result.error, context=str(path))
    return result


# ── Run definition loader ─────────────────────────────────────

def _choice(value: str, allowed: tuple[str, ...], key: str) -> str:
    if value not in allowed:
        raise ValueError(f"{key} must be one of {', '.join(allowed)}, got {value!r}")
    return value


def _load_rules(raw: dict[str, Any], base_dir: Path, strategy: str) -> Result[tuple[TypeRule, ...]]:
    if "types" in raw:
        return build_rules(raw["types"])
    if "type_config" in raw:
        return load_type_config((base_dir / raw["type_config"]).resolve())
    if strategy == "configured":
        return Fail(error="Configured strategy needs 'traversal.type_config' or 'traversal.types'")
    return Ok(data=())


def load_config(path: Path) -> Result[RunConfig]:
    """Load a run definition YAML into RunConfig.

    Relative paths (type config, output) resolve against the YAML file's
    directory.
    """
    if not path.exists():
        return Fail(error=f"Config file not found: {path}")

    try:
        raw: dict[str, Any] = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        return Fail(error=f"YAML parse error: {exc}", context=str(path))

    base_dir = path.resolve().parent

    try:
        trav = raw.get("traversal", {})
        strategy = _choice(trav.get("strategy", "configured"), STRATEGIES, "traversal.strategy")

        rules_result = _load_rules(trav, base_dir, strategy)
        if not rules_result.ok:
            return rules_result  # type: ignore[return-value]

        retry = raw["sparql"].get("retry", {})
        output = raw.get("output", {})
        workers = int(trav.get("workers", 1))
        attempts = int(retry.get("attempts", 1))
        timeout = int(raw["sparql"].get("timeout", 30))
        max_rounds = trav.get("max_rounds")
        if max_rounds is not None:
            max_rounds = int(max_rounds)
        if min(workers, attempts, timeout, 1 if max_rounds is None else max_rounds) < 1:
            raise ValueError(
                "traversal.workers, traversal.max_rounds, sparql.timeout and "
                "sparql.retry.attempts must be >= 1"
            )

        config = RunConfig(
            seed=SeedConfig(
                iri=iri_term(raw["seed"]["iri"]),
                type=iri_term(raw["seed"]["type"]),
            ),
            sparql=SparqlConfig(
                endpoint=raw["sparql"]["endpoint"],
                timeout=timeout,
                retry=RetryConfig(
                    attempts=attempts,
                    delay_seconds=float(retry.get("delay_seconds", 0)),
                ),
            ),
            traversal=TraversalConfig(
                strategy=strategy,
                rules=rules_result.data,
                order=_choice(trav.get("order", "declared"), ORDERS, "traversal.order"),
                on_endpoint_error=_choice(
                    trav.get("on_endpoint_error", "continue"), ERROR_MODES, "traversal.on_endpoint_error"
                ),
                workers=workers,
                direction=_choice(trav.get("direction", "reverse"), DIRECTIONS, "traversal.direction"),
                max_rounds=max_rounds,
            ),
            output=OutputConfig(
                path=base_dir / output.get("path", "out_folder/output.txt"),
                truncate=bool(output.get("truncate", False)),
                include_seed=bool(output.get("include_seed", True)),
            ),
        )
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        return Fail(error=f"Config structure error: {exc}", context=str(path))

    return Ok(data=config)
