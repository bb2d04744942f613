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

"""Structured logger with per-direction query counters and a run summary.

Every edge query is counted as ok (rows found), empty (no rows) or failed
(endpoint error), so a run that tolerated endpoint errors says so at the end.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field

_FMT = "%(asctime)s [%(levelname)s] %(name)s — %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Return a stdlib logger configured with a consistent format."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_FMT, datefmt="%H:%M:%S"))
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
    return logger


@dataclass
class StepCounter:
    """Tracks ok/empty/failed counts for one kind of query."""

    name: str
    ok: int = 0
    empty: int = 0
    failed: int = 0


@dataclass
class RunSummary:
    """Accumulates counters across a traversal run."""

    steps: dict[str, StepCounter] = field(default_factory=dict)

    def counter(self, name: str) -> StepCounter:
        """Get or create a counter for a named step."""
        if name not in self.steps:
            self.steps[name] = StepCounter(name=name)
        return self.steps[name]

    @property
    def failed(self) -> int:
        return sum(step.failed for step in self.steps.values())

    def report(self) -> str:
        """Format a human-readable summary block."""
        lines: list[str] = ["", "Run Summary", "=" * 40]
        for step in self.steps.values():
            parts = [f"{step.name}: {step.ok} ok"]
            if step.empty:
                parts.append(f"{step.empty} empty")
            if step.failed:
                parts.append(f"{step.failed} failed")
            lines.append("  ".join(parts))
        if self.failed:
            lines.append("WARNING: endpoint errors were tolerated, plan may be incomplete")
        lines.append("=" * 40)
        return "\n".join(lines)
