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

"""Result pattern for expected failures.

Endpoint errors, config errors and output errors are returned as values,
never raised. A query outcome is one of three things:

    Ok(data=json) with rows    : success with data
    Ok(data=json) without rows : success, legitimately empty
    Fail(error=...)             : endpoint unreachable or erroring

Callers decide whether a Fail aborts the run or is tolerated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful result carrying typed data."""

    data: T
    ok: bool = field(default=True, init=False)


@dataclass(frozen=True, slots=True)
class Fail:
    """Failed result carrying error message and optional context."""

    error: str
    context: Any = None
    ok: bool = field(default=False, init=False)

    def prefixed(self, prefix: str) -> Fail:
        """Return a copy whose message is prefixed with where it failed."""
        return Fail(error=f"{prefix}: {self.error}", context=self.context)


Result = Ok[T] | Fail
