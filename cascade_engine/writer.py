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

"""Deletion plan writer.

Statements are separated by ';' and a blank line, in emission order. The
file is opened in append mode, so repeated runs accumulate unless the run
asks for truncation. Each run ends with a separator so appended runs stay
valid SPARQL Update requests.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from cascade_engine.logger import get_logger
from cascade_engine.result import Fail, Ok, Result

log = get_logger(__name__)

SEPARATOR = ";\n\n"


def render_plan(plan: Sequence[str]) -> str:
    """Join statements with the separator; empty plan renders as ''."""
    if not plan:
        return ""
    return SEPARATOR.join(plan) + SEPARATOR


def write_plan(plan: Sequence[str], path: Path, truncate: bool = False) -> Result[Path]:
    """Append (or overwrite, with truncate) the rendered plan to path."""
    mode = "w" if truncate else "a"
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open(mode, encoding="utf-8") as fh:
            fh.write(render_plan(plan))
    except OSError as exc:
        return Fail(error=f"Cannot write plan: {exc}", context=str(path))

    log.info("Wrote %d statements to %s", len(plan), path)
    return Ok(data=path)
