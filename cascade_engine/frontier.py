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

"""Per-run frontier: entity type → IRI terms currently in scope.

Created by one traversal call and returned with its plan. Rediscovering a
type replaces its IRIs; nothing is merged or deduplicated.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

from cascade_engine.sparql.queries import iri_term, join_terms


@dataclass
class Frontier:
    entries: dict[str, list[str]] = field(default_factory=dict)

    @classmethod
    def seeded(cls, seed_type: str, seed_iri: str) -> Frontier:
        """Frontier holding only the seed entity under its type."""
        return cls(entries={iri_term(seed_type): [iri_term(seed_iri)]})

    def __contains__(self, type_iri: object) -> bool:
        return type_iri in self.entries

    def __getitem__(self, type_iri: str) -> list[str]:
        return self.entries[type_iri]

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    def set(self, type_iri: str, iris: list[str]) -> None:
        """Overwrite the IRIs in scope for a type."""
        self.entries[type_iri] = list(iris)

    def values_block(self, type_iri: str) -> str:
        """IRIs of a type as the newline-joined `iris` query argument."""
        return join_terms(self.entries[type_iri])

    def as_dict(self) -> dict[str, list[str]]:
        return {key: list(value) for key, value in self.entries.items()}
