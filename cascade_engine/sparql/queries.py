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
"""SPARQL query builders for neighbour lookup and seed deletion.

Pure string interpolation. The `iris` argument is a newline-joined list of
angle-bracket IRI terms (see join_terms); nothing is escaped, so callers
must pass well-formed IRIs.
"""

from __future__ import annotations

from collections.abc import Iterable


def iri_term(value: str) -> str:
    """Wrap a bare IRI in angle brackets; leave a wrapped one unchanged."""
    value = value.strip()
    if value.startswith("<") and value.endswith(">"):
        return value
    return f"<{value}>"


def join_terms(terms: Iterable[str]) -> str:
    """Build the `iris` argument of the query builders."""
    return "\n".join(iri_term(t) for t in terms)


def _indent(block: str, spaces: int) -> str:
    pad = " " * spaces
    return "\n".join(pad + line for line in block.splitlines())


def forward_query(iris: str, type_iri: str | None = None) -> str:
    """Objects of any triple whose subject is one of `iris`, optionally typed."""
    type_filter = f"\n  ?o a {type_iri} ." if type_iri else ""
    return (
        "SELECT DISTINCT ?o WHERE {\n"
        "  VALUES ?values {\n"
        f"{_indent(iris, 4)}\n"
        "  }\n"
        "\n"
        f"  ?values ?p ?o .{type_filter}\n"
        "}\n"
    )


def backward_query(iris: str, type_iri: str | None = None) -> str:
    """Subjects of any triple whose object is one of `iris`, optionally typed."""
    pattern = f"?s a {type_iri} ;\n    ?p ?values ." if type_iri else "?s ?p ?values ."
    return (
        "SELECT DISTINCT ?s WHERE {\n"
        "  VALUES ?values {\n"
        f"{_indent(iris, 4)}\n"
        "  }\n"
        "\n"
        f"  {pattern}\n"
        "}\n"
    )


def simple_delete(iri: str) -> str:
    """Delete every outgoing triple of one entity, in every graph."""
    return (
        "DELETE {\n"
        "  GRAPH ?g {\n"
        "    ?s ?p ?o .\n"
        "  }\n"
        "}\n"
        "WHERE {\n"
        f"  BIND({iri_term(iri)} AS ?s)\n"
        "\n"
        "  GRAPH ?g {\n"
        "    ?s ?p ?o .\n"
        "  }\n"
        "}\n"
    )
