"""
Pytest configuration and fixtures for the test suite.

Provides fake SPARQL endpoints so traversal tests never touch the network:

    fake_endpoint   canned responses keyed by a substring of the query
    graph_endpoint  answers neighbour queries from an in-memory adjacency map
"""

import os
import re
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from cascade_engine.result import Fail, Ok


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Fast unit tests")
    config.addinivalue_line("markers", "integration: Tests crossing several modules")


def sparql_json(variable, *iris, kind="uri"):
    """Minimal SPARQL 1.1 JSON result with one row per IRI."""
    return {
        "head": {"vars": [variable]},
        "results": {
            "bindings": [{variable: {"type": kind, "value": iri}} for iri in iris]
        },
    }


class FakeEndpoint:
    """Query function returning canned results; records every query it sees.

    `routes` maps a substring of the query (usually the edge type term) to a
    Result or to a SPARQL JSON dict. Unmatched queries return no rows.
    """

    def __init__(self, routes=None):
        self.routes = routes or {}
        self.queries = []

    def __call__(self, query):
        self.queries.append(query)
        for needle, response in self.routes.items():
            if needle in query:
                if isinstance(response, (Ok, Fail)):
                    return response
                return Ok(data=response)
        return Ok(data={"head": {"vars": []}, "results": {"bindings": []}})


class GraphEndpoint:
    """Answers untyped neighbour queries from an adjacency map of bare IRIs."""

    _VALUES = re.compile(r"VALUES \?values \{(.*?)\}", re.S)

    def __init__(self, edges):
        self.edges = edges
        self.queries = []

    def __call__(self, query):
        self.queries.append(query)
        variable = "o" if query.startswith("SELECT DISTINCT ?o") else "s"
        block = self._VALUES.search(query).group(1)
        sources = re.findall(r"<([^>]+)>", block)
        hits = []
        for source in sources:
            for target in self.edges.get(source, []):
                if target not in hits:
                    hits.append(target)
        return Ok(data=sparql_json(variable, *hits))


@pytest.fixture
def fake_endpoint():
    return FakeEndpoint


@pytest.fixture
def graph_endpoint():
    return GraphEndpoint


@pytest.fixture
def make_json():
    return sparql_json
