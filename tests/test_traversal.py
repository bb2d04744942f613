"""
Tests for the traversal engine: configured pass, ordering helpers,
edge fan-out and breadth-first rounds.
"""

from concurrent.futures import ThreadPoolExecutor

import pytest

from cascade_engine.config import build_rules
from cascade_engine.logger import RunSummary
from cascade_engine.result import Fail, Ok
from cascade_engine.traversal import (
    check_order,
    topological_order,
    traverse_breadth_first,
    traverse_configured,
)

ORG = "<http://ex/Org>"
MEMBERSHIP = "<http://ex/Membership>"
SITE = "<http://ex/Site>"
ADDRESS = "<http://ex/Address>"


def rules(mapping):
    result = build_rules(mapping)
    assert result.ok, result
    return result.data


@pytest.mark.unit
class TestConfiguredTraversal:

    def test_reverse_edge_end_to_end(self, fake_endpoint, make_json):
        endpoint = fake_endpoint({MEMBERSHIP: make_json("s", "http://ex/mem1")})
        config = rules({ORG: {"reverse": [MEMBERSHIP], "forward": []}})

        result = traverse_configured("<http://ex/org1>", ORG, config, endpoint)

        assert result.ok
        traversal = result.data
        assert len(traversal.plan) == 1
        assert "  VALUES ?s {\n    <http://ex/mem1>\n  }\n" in traversal.plan[0]
        assert traversal.frontier[MEMBERSHIP] == ["<http://ex/mem1>"]
        assert len(endpoint.queries) == 1
        assert endpoint.queries[0].startswith("SELECT DISTINCT ?s")
        assert "    <http://ex/org1>\n" in endpoint.queries[0]

    def test_stops_after_empty_forward_list(self, fake_endpoint, make_json):
        endpoint = fake_endpoint({"<http://ex/B>": make_json("o", "http://ex/b1")})
        config = rules({"http://ex/A": {"forward": ["http://ex/B"]}, "http://ex/B": {"forward": []}})

        result = traverse_configured("http://ex/a1", "http://ex/A", config, endpoint)

        assert result.ok
        assert len(endpoint.queries) == 1
        assert endpoint.queries[0].startswith("SELECT DISTINCT ?o")
        assert result.data.frontier["<http://ex/B>"] == ["<http://ex/b1>"]

    def test_rule_absent_from_frontier_issues_no_query(self, fake_endpoint):
        endpoint = fake_endpoint()
        config = rules({SITE: {"reverse": [ADDRESS], "forward": [ADDRESS]}})

        result = traverse_configured("<http://ex/org1>", ORG, config, endpoint)

        assert result.ok
        assert endpoint.queries == []
        assert result.data.plan == []
        assert list(result.data.frontier) == [ORG]

    def test_empty_result_leaves_frontier_untouched(self, fake_endpoint):
        endpoint = fake_endpoint()
        config = rules({ORG: {"reverse": [MEMBERSHIP], "forward": [SITE]}})
        summary = RunSummary()

        result = traverse_configured("<http://ex/org1>", ORG, config, endpoint, summary=summary)

        assert result.ok
        assert result.data.plan == []
        assert MEMBERSHIP not in result.data.frontier
        assert summary.counter("reverse").empty == 1
        assert summary.counter("forward").empty == 1

    def test_discovered_type_feeds_later_rule(self, fake_endpoint, make_json):
        endpoint = fake_endpoint({
            ADDRESS: make_json("o", "http://ex/addr1"),
            SITE: make_json("o", "http://ex/site1", "http://ex/site2"),
        })
        config = rules({
            ORG: {"reverse": [], "forward": [SITE]},
            SITE: {"reverse": [], "forward": [ADDRESS]},
        })

        result = traverse_configured("<http://ex/org1>", ORG, config, endpoint)

        assert result.ok
        assert len(endpoint.queries) == 2
        assert "    <http://ex/site1>\n    <http://ex/site2>\n" in endpoint.queries[1]
        assert len(result.data.plan) == 2
        assert "<http://ex/addr1>" in result.data.plan[1]

    def test_rediscovered_type_is_overwritten(self, fake_endpoint, make_json):
        endpoint = fake_endpoint({
            "?o a <http://ex/Site>": make_json("o", "http://ex/site-forward"),
            "?s a <http://ex/Site>": make_json("s", "http://ex/site-reverse"),
        })
        config = rules({ORG: {"reverse": [SITE], "forward": [SITE]}})

        result = traverse_configured("<http://ex/org1>", ORG, config, endpoint)

        assert result.ok
        assert result.data.frontier[SITE] == ["<http://ex/site-forward>"]
        assert len(result.data.plan) == 2

    def test_literal_matches_do_not_count(self, fake_endpoint, make_json):
        endpoint = fake_endpoint({MEMBERSHIP: make_json("s", "not an iri", kind="literal")})
        config = rules({ORG: {"reverse": [MEMBERSHIP], "forward": []}})

        result = traverse_configured("<http://ex/org1>", ORG, config, endpoint)

        assert result.ok
        assert result.data.plan == []
        assert MEMBERSHIP not in result.data.frontier


@pytest.mark.unit
class TestEndpointErrors:

    def test_continue_treats_failure_as_no_matches(self, fake_endpoint, make_json):
        endpoint = fake_endpoint({
            MEMBERSHIP: Fail(error="SPARQL HTTP 500: Internal Server Error"),
            SITE: make_json("o", "http://ex/site1"),
        })
        config = rules({ORG: {"reverse": [MEMBERSHIP], "forward": [SITE]}})
        summary = RunSummary()

        result = traverse_configured("<http://ex/org1>", ORG, config, endpoint, summary=summary)

        assert result.ok
        assert len(result.data.plan) == 1
        assert len(result.data.failures) == 1
        assert "HTTP 500" in result.data.failures[0].error
        assert MEMBERSHIP in result.data.failures[0].error
        assert summary.failed == 1

    def test_abort_returns_fail(self, fake_endpoint, make_json):
        endpoint = fake_endpoint({
            MEMBERSHIP: Fail(error="SPARQL connection error: refused"),
            SITE: make_json("o", "http://ex/site1"),
        })
        config = rules({ORG: {"reverse": [MEMBERSHIP], "forward": [SITE]}})

        result = traverse_configured(
            "<http://ex/org1>", ORG, config, endpoint, on_endpoint_error="abort"
        )

        assert not result.ok
        assert "connection error" in result.error
        assert len(endpoint.queries) == 1


@pytest.mark.unit
class TestFanOut:

    def _setup(self, fake_endpoint, make_json):
        endpoint = fake_endpoint({
            MEMBERSHIP: make_json("s", "http://ex/mem1", "http://ex/mem2"),
            "<http://ex/Post>": make_json("s", "http://ex/post1"),
            SITE: make_json("o", "http://ex/site1"),
            ADDRESS: make_json("o", "http://ex/addr1"),
        })
        config = rules({
            ORG: {"reverse": [MEMBERSHIP, "<http://ex/Post>"], "forward": [SITE]},
            SITE: {"reverse": [], "forward": [ADDRESS]},
        })
        return endpoint, config

    def test_parallel_plan_matches_sequential(self, fake_endpoint, make_json):
        endpoint, config = self._setup(fake_endpoint, make_json)
        sequential = traverse_configured("<http://ex/org1>", ORG, config, endpoint).data

        endpoint, config = self._setup(fake_endpoint, make_json)
        parallel = traverse_configured("<http://ex/org1>", ORG, config, endpoint, workers=4).data

        assert parallel.plan == sequential.plan
        assert parallel.frontier.as_dict() == sequential.frontier.as_dict()
        assert parallel.queries == sequential.queries == 4

    def _failing(self, fake_endpoint, make_json):
        endpoint = fake_endpoint({
            MEMBERSHIP: make_json("s", "http://ex/mem1"),
            "<http://ex/Post>": Fail(error="SPARQL HTTP 502: Bad Gateway"),
            SITE: make_json("o", "http://ex/site1"),
            ADDRESS: make_json("o", "http://ex/addr1"),
        })
        config = rules({
            ORG: {"reverse": [MEMBERSHIP, "<http://ex/Post>"], "forward": [SITE]},
            SITE: {"reverse": [], "forward": [ADDRESS]},
        })
        return endpoint, config

    def test_parallel_tolerated_failure_matches_sequential(self, fake_endpoint, make_json):
        endpoint, config = self._failing(fake_endpoint, make_json)
        sequential = traverse_configured("<http://ex/org1>", ORG, config, endpoint).data

        endpoint, config = self._failing(fake_endpoint, make_json)
        summary = RunSummary()
        parallel = traverse_configured(
            "<http://ex/org1>", ORG, config, endpoint, workers=4, summary=summary
        ).data

        assert parallel.plan == sequential.plan
        assert len(parallel.plan) == 3
        assert parallel.frontier.as_dict() == sequential.frontier.as_dict()
        assert [f.error for f in parallel.failures] == [f.error for f in sequential.failures]
        assert len(parallel.failures) == 1
        assert "<http://ex/Post>" in parallel.failures[0].error
        assert summary.counter("reverse").failed == 1

    def test_parallel_abort_returns_fail_and_shuts_down_pool(self, fake_endpoint, make_json, monkeypatch):
        pools = []

        class RecordingExecutor(ThreadPoolExecutor):
            def __init__(self, *args, **kwargs):
                super().__init__(*args, **kwargs)
                self.shut_down = False
                pools.append(self)

            def shutdown(self, *args, **kwargs):
                self.shut_down = True
                super().shutdown(*args, **kwargs)

        monkeypatch.setattr("cascade_engine.traversal.ThreadPoolExecutor", RecordingExecutor)
        endpoint, config = self._failing(fake_endpoint, make_json)

        result = traverse_configured(
            "<http://ex/org1>", ORG, config, endpoint, workers=4, on_endpoint_error="abort"
        )

        assert not result.ok
        assert "502" in result.error
        assert "<http://ex/Post>" in result.error
        assert len(pools) == 1 and pools[0].shut_down
        assert not any(ADDRESS in query for query in endpoint.queries)

    def test_self_edge_stays_sequential(self, fake_endpoint, make_json):
        endpoint = fake_endpoint({
            "?s a <http://ex/Org>": make_json("s", "http://ex/parent"),
        })
        config = rules({ORG: {"reverse": [ORG], "forward": [SITE]}})

        result = traverse_configured("<http://ex/org1>", ORG, config, endpoint, workers=4)

        assert result.ok
        # the forward edge sees the frontier updated by the reverse edge
        assert "    <http://ex/parent>\n" in endpoint.queries[1]


@pytest.mark.unit
class TestOrdering:

    def test_check_order_flags_rules_before_their_producer(self):
        config = rules({
            ORG: {"reverse": [], "forward": []},
            ADDRESS: {"reverse": [], "forward": []},
            SITE: {"reverse": [], "forward": [ADDRESS]},
        })
        assert check_order(config, ORG) == [ADDRESS, SITE]

    def test_check_order_clean(self):
        config = rules({
            ORG: {"reverse": [], "forward": [SITE]},
            SITE: {"reverse": [], "forward": [ADDRESS]},
            ADDRESS: {"reverse": [], "forward": []},
        })
        assert check_order(config, ORG) == []

    def test_topological_order_puts_producers_first(self):
        config = rules({
            ADDRESS: {"reverse": [], "forward": []},
            SITE: {"reverse": [], "forward": [ADDRESS]},
            ORG: {"reverse": [], "forward": [SITE]},
            "<http://ex/Orphan>": {"reverse": [], "forward": []},
        })
        ordered = topological_order(config, ORG)
        assert [rule.type for rule in ordered] == [ORG, SITE, ADDRESS, "<http://ex/Orphan>"]
        assert check_order(ordered, ORG) == ["<http://ex/Orphan>"]

    def test_topological_order_keeps_declared_ties(self):
        config = rules({
            ORG: {"reverse": [MEMBERSHIP], "forward": [SITE]},
            SITE: {"reverse": [], "forward": []},
            MEMBERSHIP: {"reverse": [], "forward": []},
        })
        assert topological_order(config, ORG) == config


@pytest.mark.unit
class TestBreadthFirst:

    def test_reverse_rounds_until_nothing_new(self, graph_endpoint):
        endpoint = graph_endpoint({
            "http://ex/org1": ["http://ex/a", "http://ex/b"],
            "http://ex/a": ["http://ex/c"],
        })

        result = traverse_breadth_first("<http://ex/org1>", "reverse", endpoint)

        assert result.ok
        traversal = result.data
        assert len(traversal.plan) == 2
        assert "    <http://ex/a>\n    <http://ex/b>\n" in traversal.plan[0]
        assert "    <http://ex/c>\n" in traversal.plan[1]
        assert traversal.queries == 3
        assert traversal.frontier["reverse"] == ["<http://ex/c>"]

    def test_cycle_terminates(self, graph_endpoint):
        endpoint = graph_endpoint({
            "http://ex/a": ["http://ex/b"],
            "http://ex/b": ["http://ex/c"],
            "http://ex/c": ["http://ex/a"],
        })

        result = traverse_breadth_first("http://ex/a", "forward", endpoint)

        assert result.ok
        assert len(result.data.plan) == 2
        assert result.data.queries == 3
        assert all("<http://ex/a>" not in statement for statement in result.data.plan)

    def test_max_rounds_bounds_the_walk(self, graph_endpoint):
        endpoint = graph_endpoint({f"http://ex/n{i}": [f"http://ex/n{i + 1}"] for i in range(10)})

        result = traverse_breadth_first("http://ex/n0", "forward", endpoint, max_rounds=3)

        assert result.ok
        assert len(result.data.plan) == 3
        assert result.data.queries == 3

    def test_forward_queries_select_objects(self, graph_endpoint):
        endpoint = graph_endpoint({})
        traverse_breadth_first("http://ex/a", "forward", endpoint)
        assert endpoint.queries[0].startswith("SELECT DISTINCT ?o")

    def test_failure_stops_or_aborts(self, fake_endpoint):
        endpoint = fake_endpoint({"SELECT": Fail(error="SPARQL timeout after 30s")})

        tolerated = traverse_breadth_first("http://ex/a", "reverse", endpoint)
        assert tolerated.ok
        assert tolerated.data.plan == []
        assert len(tolerated.data.failures) == 1

        aborted = traverse_breadth_first("http://ex/a", "reverse", endpoint, on_endpoint_error="abort")
        assert not aborted.ok
        assert "timeout" in aborted.error

    def test_unknown_direction(self, fake_endpoint):
        result = traverse_breadth_first("http://ex/a", "sideways", fake_endpoint())
        assert isinstance(result, Fail)

    def test_ok_type(self, graph_endpoint):
        assert isinstance(traverse_breadth_first("http://ex/a", "reverse", graph_endpoint({})), Ok)
