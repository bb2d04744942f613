# SPDX-License-Identifier: MIT
"""
█████╗ ██████╗  █████╗ ███████╗
██╔══██╗██╔══██╗██╔══██╗██╔════╝
███████║██████╔╝███████║███████╗
██╔══██║██╔══██╗██╔══██║╚════██║
██║  ██║██║  ██║██║  ██║███████║
╚═╝  ╚═╝╚═╝  ╚═╝╚═╝  ╚═╝╚══════╝
Copyright (C) 2026 Riza Emre ARAS <r.emrearas@proton.me>

Licensed under the MIT License.
See LICENSE and THIRD_PARTY_LICENSES for details.

SPARQL Cascade Delete

Config-driven deletion planner for RDF triple stores.
Reads a YAML run definition, walks the entities related to a seed entity
via the configured type edges, and writes SPARQL DELETE statements for
the seed and everything that must go with it.

Pipeline: Traverse -> Seed delete -> Write

Usage: cascade-delete --workflow=workflows/organization.yaml
"""

from __future__ import annotations

import argparse
import dataclasses
import sys
from pathlib import Path

from cascade_engine.config import DIRECTIONS, STRATEGIES, RunConfig, load_config
from cascade_engine.logger import get_logger
from cascade_engine.pipeline import run_pipeline
from cascade_engine.sparql.queries import iri_term
from cascade_engine.writer import render_plan

log = get_logger("main")


def _apply_overrides(config: RunConfig, args: argparse.Namespace) -> RunConfig:
    """Command line values win over the run definition."""
    seed = config.seed
    if args.seed_iri:
        seed = dataclasses.replace(seed, iri=iri_term(args.seed_iri))
    if args.seed_type:
        seed = dataclasses.replace(seed, type=iri_term(args.seed_type))

    sparql = config.sparql
    if args.endpoint:
        sparql = dataclasses.replace(sparql, endpoint=args.endpoint)

    traversal = config.traversal
    if args.strategy:
        traversal = dataclasses.replace(traversal, strategy=args.strategy)
    if args.direction:
        traversal = dataclasses.replace(traversal, direction=args.direction)

    output = config.output
    if args.output:
        output = dataclasses.replace(output, path=args.output.resolve())
    if args.truncate:
        output = dataclasses.replace(output, truncate=True)

    return RunConfig(seed=seed, sparql=sparql, traversal=traversal, output=output)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="cascade-delete",
        description="Plan SPARQL DELETE statements for an entity and its dependents",
    )
    parser.add_argument(
        "--workflow",
        type=Path,
        required=True,
        help="Path to run definition YAML (e.g. workflows/organization.yaml)",
    )
    parser.add_argument("--seed-iri", help="Override seed.iri")
    parser.add_argument("--seed-type", help="Override seed.type")
    parser.add_argument("--endpoint", help="Override sparql.endpoint")
    parser.add_argument("--strategy", choices=STRATEGIES, help="Override traversal.strategy")
    parser.add_argument("--direction", choices=DIRECTIONS, help="Override traversal.direction")
    parser.add_argument("--output", type=Path, help="Override output.path")
    parser.add_argument("--truncate", action="store_true", help="Clear the output file first")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the plan to stdout instead of writing the output file",
    )
    args = parser.parse_args(argv)

    workflow = args.workflow.resolve()
    if not workflow.exists():
        log.error("Workflow file not found: %s", workflow)
        return 1

    cfg_result = load_config(workflow)
    if not cfg_result.ok:
        log.error(cfg_result.error)
        return 1

    config = _apply_overrides(cfg_result.data, args)
    if config.traversal.strategy == "configured" and not config.traversal.rules:
        log.error("Configured strategy needs type rules in %s", workflow.name)
        return 1

    log.info("Workflow: %s", workflow.name)
    if not args.dry_run:
        log.info("Output: %s", config.output.path)

    result = run_pipeline(config, dry_run=args.dry_run)
    if not result.ok:
        log.error("Run failed: %s", result.error)
        return 1

    if args.dry_run:
        sys.stdout.write(render_plan(result.data.plan))

    return 0


if __name__ == "__main__":
    sys.exit(main())
