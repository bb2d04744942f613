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
"""SPARQL JSON result parsing — keeps IRI-typed bindings only.

A missing `results` / `results.bindings` (or a non-list bindings value) is
an empty result, not an error.
"""

from __future__ import annotations

from typing import Any

Binding = dict[str, dict[str, str]]


def parse_typed(result_json: Any, variable: str) -> list[Binding]:
    """Return the full bindings whose `variable` is a `uri`, in result order."""
    if not isinstance(result_json, dict):
        return []
    results = result_json.get("results")
    if not isinstance(results, dict):
        return []
    bindings = results.get("bindings")
    if not isinstance(bindings, list):
        return []

    return [
        binding
        for binding in bindings
        if isinstance(binding, dict)
        and isinstance(binding.get(variable), dict)
        and binding[variable].get("type") == "uri"
        and "value" in binding[variable]
    ]


def binding_terms(bindings: list[Binding], variable: str) -> list[str]:
    """Angle-bracket IRI terms of `variable`, one per binding, in order."""
    return [f"<{binding[variable]['value']}>" for binding in bindings]
