import pytest

from singgen.projector.filters import NodeFilter, filter_candidates
from singgen.schemas import FilterRule, Outbound

pytestmark = pytest.mark.fast


def include(*keywords):
    return FilterRule(action="include", keywords=list(keywords))


def exclude(*keywords):
    return FilterRule(action="exclude", keywords=list(keywords))


class TestNodeFilter:

    def test_no_rules_returns_all_in_order(self, candidates):
        assert filter_candidates(candidates, []) == [c["tag"] for c in candidates]

    def test_include(self, candidates):
        assert filter_candidates(candidates, [include("US")]) == ["🇺🇸 US Node"]

    def test_exclude_starts_from_full_list(self, candidates):
        result = filter_candidates(candidates, [exclude("sec_", "HK|香港")])
        assert result == ["🇺🇸 US Node", "🇯🇵 Japan 01"]

    def test_include_after_exclude_recomputes_from_full_list(self, candidates):
        rules = [exclude("sec_"), include("sec_")]
        assert filter_candidates(candidates, rules) == ["sec_us1"]

    def test_exclude_after_include_narrows(self, candidates):
        rules = [include("US|us"), exclude("sec_")]
        assert filter_candidates(candidates, rules) == ["🇺🇸 US Node"]

    def test_exclude_everything_falls_back_to_sink(self, candidates):
        assert filter_candidates(candidates, [exclude(".*")]) == ["block"]

    def test_include_nothing_falls_back_to_sink(self, candidates):
        assert filter_candidates(candidates, [include("Mars")]) == ["block"]

    def test_exclude_after_empty_include_stays_empty(self, candidates):
        rules = [include("Mars"), exclude("HK")]
        assert filter_candidates(candidates, rules) == ["block"]

    def test_custom_sink_tag(self, candidates):
        assert NodeFilter(sink_tag="REJECT").filter(candidates, [exclude(".*")]) == ["REJECT"]

    def test_accepts_outbound_objects(self):
        outbounds = [
            Outbound(type="trojan", tag="HK 1", server="a", server_port=443),
            Outbound(type="trojan", tag="JP 1", server="b", server_port=443),
        ]
        assert filter_candidates(outbounds, [include("JP")]) == ["JP 1"]
