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

"""Run orchestrator.

Executes one run described by RunConfig:
  1. Traverse: configured rules or breadth-first, per traversal.strategy
  2. Seed: append the seed entity's own delete statement
  3. Write: append the plan to the output file (skipped on dry run)

The summary block is logged whether the run succeeds or not.
"""

from __future__ import annotations

from cascade_engine.config import RunConfig
from cascade_engine.logger import RunSummary, get_logger
from cascade_engine.result import Ok, Result
from cascade_engine.sparql.client import QueryFn, query_function
from cascade_engine.sparql.queries import simple_delete
from cascade_engine.traversal import (
    Traversal,
    topological_order,
    traverse_breadth_first,
    traverse_configured,
)
from cascade_engine.writer import write_plan

log = get_logger(__name__)


def build_plan(config: RunConfig, query: QueryFn, summary: RunSummary) -> Result[Traversal]:
    """Traverse from the seed and append the seed's own delete statement."""
    trav = config.traversal

    if trav.strategy == "breadth_first":
        result = traverse_breadth_first(
            config.seed.iri,
            trav.direction,
            query,
            on_endpoint_error=trav.on_endpoint_error,
            max_rounds=trav.max_rounds,
            summary=summary,
        )
    else:
        rules = trav.rules
        if trav.order == "topological":
            rules = topological_order(rules, config.seed.type)
        result = traverse_configured(
            config.seed.iri,
            config.seed.type,
            rules,
            query,
            on_endpoint_error=trav.on_endpoint_error,
            workers=trav.workers,
            summary=summary,
        )

    if not result.ok:
        return result

    if config.output.include_seed:
        result.data.plan.append(simple_delete(config.seed.iri))
    return result


def run_pipeline(
    config: RunConfig,
    query: QueryFn | None = None,
    dry_run: bool = False,
) -> Result[Traversal]:
    """Run the full workflow: traverse → seed delete → write.

    Args:
        config: Loaded run definition.
        query: Query function; defaults to HTTP against config.sparql.
        dry_run: Build the plan but do not touch the output file.
    """
    summary = RunSummary()
    query = query if query is not None else query_function(config.sparql)

    log.info("Seed: %s a %s", config.seed.iri, config.seed.type)
    log.info("Strategy: %s against %s", config.traversal.strategy, config.sparql.endpoint)

    plan_result = build_plan(config, query, summary)
    if not plan_result.ok:
        log.error("Traversal failed: %s", plan_result.error)
        log.info(summary.report())
        return plan_result

    traversal = plan_result.data
    log.info("Plan: %d statements from %d queries", len(traversal.plan), traversal.queries)

    if not dry_run:
        counter = summary.counter("write")
        write_result = write_plan(traversal.plan, config.output.path, config.output.truncate)
        if not write_result.ok:
            counter.failed += 1
            log.error("Write failed: %s", write_result.error)
            log.info(summary.report())
            return write_result  # type: ignore[return-value]
        counter.ok += 1

    log.info(summary.report())
    return Ok(data=traversal)
