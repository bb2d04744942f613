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
"""DELETE-WHERE-VALUES statements for discovered entities."""

from __future__ import annotations

from cascade_engine.sparql.results import Binding, binding_terms


def build_delete(bindings: list[Binding], variable: str) -> str:
    """Delete the outgoing triples of every IRI bound to `variable`.

    Whether the IRIs came from ?s (reverse hits) or ?o (forward hits), they
    are bound to ?s here: discovered entities are deleted as subjects.
    """
    values = "".join(f"    {term}\n" for term in binding_terms(bindings, variable))
    return (
        "DELETE {\n"
        "  GRAPH ?g {\n"
        "    ?s ?p ?o .\n"
        "  }\n"
        "}\n"
        "WHERE {\n"
        "  VALUES ?s {\n"
        f"{values}"
        "  }\n"
        "\n"
        "  GRAPH ?g {\n"
        "    ?s ?p ?o .\n"
        "  }\n"
        "}\n"
    )
