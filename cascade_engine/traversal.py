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

"""Traversal engine — builds the ordered deletion plan for a seed entity.

Two strategies, both returning Result[Traversal]:

  traverse_configured     one pass over the type rules in their given
                          order; an edge is queried only when its source
                          type is already in the frontier.
  traverse_breadth_first  untyped neighbour rounds in one direction until
                          a round discovers nothing unvisited.

Endpoint errors are tolerated (logged, counted, recorded in
Traversal.failures) unless on_endpoint_error="abort".
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from cascade_engine.config import TypeRule
from cascade_engine.frontier import Frontier
from cascade_engine.logger import RunSummary, get_logger
from cascade_engine.result import Fail, Ok, Result
from cascade_engine.sparql.client import QueryFn
from cascade_engine.sparql.queries import backward_query, forward_query, iri_term, join_terms
from cascade_engine.sparql.results import Binding, binding_terms, parse_typed
from cascade_engine.sparql.snippets import build_delete

log = get_logger(__name__)

# direction → (query builder, result variable)
_DIRECTIONS: dict[str, tuple[Callable[..., str], str]] = {
    "reverse": (backward_query, "s"),
    "forward": (forward_query, "o"),
}


@dataclass
class Traversal:
    """Outcome of one run: final frontier, plan in emission order, tolerated errors."""

    frontier: Frontier
    plan: list[str] = field(default_factory=list)
    failures: list[Fail] = field(default_factory=list)
    queries: int = 0


@dataclass(frozen=True, slots=True)
class _Edge:
    source: str
    target: str
    direction: str

    def __str__(self) -> str:
        return f"{self.direction} {self.source} → {self.target}"


# ── Ordering ───────────────────────────────────────────────────

def check_order(rules: Sequence[TypeRule], seed_type: str) -> list[str]:
    """Types of rules that neither the seed nor an earlier rule can produce.

    Such rules are always skipped in a single pass.
    """
    available = {iri_term(seed_type)}
    unreachable: list[str] = []
    for rule in rules:
        if rule.type in available:
            available.update(rule.targets)
        else:
            unreachable.append(rule.type)
    return unreachable


def topological_order(rules: Sequence[TypeRule], seed_type: str) -> tuple[TypeRule, ...]:
    """Reorder rules so each one comes after a rule producing its type.

    Declared order breaks ties. Rules that nothing produces keep their
    declared order at the end.
    """
    available = {iri_term(seed_type)}
    remaining = list(rules)
    ordered: list[TypeRule] = []
    while remaining:
        ready = next((rule for rule in remaining if rule.type in available), None)
        if ready is None:
            break
        ordered.append(ready)
        available.update(ready.targets)
        remaining.remove(ready)
    return tuple(ordered + remaining)


# ── Edge execution ─────────────────────────────────────────────

def _run_edge(edge: _Edge, iris: str, query: QueryFn) -> Result[list[Binding]]:
    """Query one edge and keep the IRI-typed bindings."""
    builder, variable = _DIRECTIONS[edge.direction]
    outcome = query(builder(iris, edge.target))
    if not outcome.ok:
        return outcome  # type: ignore[return-value]
    return Ok(data=parse_typed(outcome.data, variable))


def _apply(
    edge: _Edge,
    outcome: Result[list[Binding]],
    traversal: Traversal,
    summary: RunSummary,
    abort: bool,
) -> Fail | None:
    """Fold one edge outcome into the run. Returns a Fail only when aborting."""
    counter = summary.counter(edge.direction)
    traversal.queries += 1

    if not outcome.ok:
        counter.failed += 1
        failure = outcome.prefixed(str(edge))
        if abort:
            return failure
        log.warning("Endpoint error, treating as no matches: %s", failure.error)
        traversal.failures.append(failure)
        return None

    bindings = outcome.data
    if not bindings:
        counter.empty += 1
        log.debug("%s: no matches", edge)
        return None

    counter.ok += 1
    variable = _DIRECTIONS[edge.direction][1]
    traversal.frontier.set(edge.target, binding_terms(bindings, variable))
    traversal.plan.append(build_delete(bindings, variable))
    log.info("%s: %d entities", edge, len(bindings))
    return None


def _edges(rule: TypeRule) -> list[_Edge]:
    return [_Edge(rule.type, target, "reverse") for target in rule.reverse] + [
        _Edge(rule.type, target, "forward") for target in rule.forward
    ]


# ── Strategies ─────────────────────────────────────────────────

def traverse_configured(
    seed_iri: str,
    seed_type: str,
    rules: Sequence[TypeRule],
    query: QueryFn,
    *,
    on_endpoint_error: str = "continue",
    workers: int = 1,
    summary: RunSummary | None = None,
) -> Result[Traversal]:
    """Walk the type rules once, in order, collecting delete statements.

    With workers > 1 the edges of one rule are queried concurrently and
    applied in declared order, so the plan matches a sequential run. A rule
    with an edge back to its own type stays sequential: later edges must see
    the updated frontier.
    """
    summary = summary if summary is not None else RunSummary()
    abort = on_endpoint_error == "abort"
    traversal = Traversal(frontier=Frontier.seeded(seed_type, seed_iri))
    frontier = traversal.frontier

    for skipped in check_order(rules, seed_type):
        log.warning("Rule for %s can never run: no earlier rule produces it", skipped)

    executor = ThreadPoolExecutor(max_workers=workers) if workers > 1 else None
    try:
        for rule in rules:
            if rule.type not in frontier:
                log.debug("Skipping %s: not in frontier", rule.type)
                continue

            edges = _edges(rule)
            log.info("── %s (%d in scope, %d edges) ──", rule.type, len(frontier[rule.type]), len(edges))

            if executor is not None and len(edges) > 1 and rule.type not in rule.targets:
                iris = frontier.values_block(rule.type)
                futures = [executor.submit(_run_edge, edge, iris, query) for edge in edges]
                for edge, future in zip(edges, futures):
                    failure = _apply(edge, future.result(), traversal, summary, abort)
                    if failure is not None:
                        return failure
                continue

            for edge in edges:
                outcome = _run_edge(edge, frontier.values_block(rule.type), query)
                failure = _apply(edge, outcome, traversal, summary, abort)
                if failure is not None:
                    return failure
    finally:
        if executor is not None:
            executor.shutdown(wait=True, cancel_futures=True)

    return Ok(data=traversal)


def traverse_breadth_first(
    seed_iri: str,
    direction: str,
    query: QueryFn,
    *,
    on_endpoint_error: str = "continue",
    max_rounds: int | None = None,
    summary: RunSummary | None = None,
) -> Result[Traversal]:
    """Follow every neighbour in one direction, round by round.

    Already visited IRIs (the seed included) are never expanded again, so
    cyclic chains terminate. The frontier holds the last discovered round
    under the direction name.
    """
    if direction not in _DIRECTIONS:
        return Fail(error=f"Unknown direction: {direction}")

    summary = summary if summary is not None else RunSummary()
    counter = summary.counter("breadth_first")
    builder, variable = _DIRECTIONS[direction]

    seed = iri_term(seed_iri)
    traversal = Traversal(frontier=Frontier(entries={direction: [seed]}))
    visited = {seed}
    current = [seed]
    rounds = 0

    while current:
        if max_rounds is not None and rounds >= max_rounds:
            log.warning("Stopped after %d rounds with %d IRIs unexpanded", rounds, len(current))
            break
        rounds += 1

        outcome = query(builder(join_terms(current)))
        traversal.queries += 1
        if not outcome.ok:
            counter.failed += 1
            failure = outcome.prefixed(f"{direction} round {rounds}")
            if on_endpoint_error == "abort":
                return failure
            log.warning("Endpoint error, stopping traversal: %s", failure.error)
            traversal.failures.append(failure)
            break

        fresh: list[Binding] = []
        for binding in parse_typed(outcome.data, variable):
            term = iri_term(binding[variable]["value"])
            if term not in visited:
                visited.add(term)
                fresh.append(binding)

        if not fresh:
            counter.empty += 1
            log.info("Round %d: nothing new, done", rounds)
            break

        counter.ok += 1
        traversal.plan.append(build_delete(fresh, variable))
        current = binding_terms(fresh, variable)
        traversal.frontier.set(direction, current)
        log.info("Round %d: %d new entities", rounds, len(fresh))

    return Ok(data=traversal)
