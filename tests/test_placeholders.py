import pytest

from singgen.projector.placeholders import (
    PlaceholderExpander,
    expand_placeholders,
    parse_filter_rule,
    parse_filter_rules,
)

pytestmark = pytest.mark.fast


class TestParseFilterRules:

    def test_legacy_form(self):
        rule = parse_filter_rule({"action": "include", "keywords": ["HK", "SG"]})
        assert rule.action == "include"
        assert rule.keywords == ["HK", "SG"]

    def test_legacy_single_keyword_string(self):
        rule = parse_filter_rule({"action": "EXCLUDE", "keywords": "expire"})
        assert rule.action == "exclude"
        assert rule.keywords == ["expire"]

    def test_shorthand_forms(self):
        assert parse_filter_rule({"include": "HK|SG"}).keywords == ["HK|SG"]
        assert parse_filter_rule({"exclude": ["a", "b"]}).action == "exclude"

    def test_invalid_rules_are_skipped(self):
        assert parse_filter_rule({"keywords": ["HK"]}) is None
        assert parse_filter_rule({"action": "drop", "keywords": ["HK"]}) is None
        assert parse_filter_rule({"action": "include", "keywords": []}) is None
        assert parse_filter_rule({"include": 42}) is None

    def test_list_keeps_order_and_drops_bad_entries(self):
        rules = parse_filter_rules([
            {"exclude": "x"},
            "not a mapping",
            {"action": "bogus", "keywords": ["y"]},
            {"include": "z"},
        ])
        assert [(r.action, r.keywords) for r in rules] == [("exclude", ["x"]), ("include", ["z"])]

    def test_single_mapping(self):
        assert len(parse_filter_rules({"include": ["HK"]})) == 1

    def test_unsupported_type(self):
        assert parse_filter_rules("HK") == []


class TestPlaceholderExpander:

    def test_order_preserved_without_filter(self):
        doc = {"outbounds": [{"tag": "G", "type": "selector", "outbounds": ["{all}"]}]}
        count = expand_placeholders(doc, [{"tag": "a"}, {"tag": "b"}, {"tag": "c"}])
        assert count == 1
        assert doc["outbounds"][0]["outbounds"] == ["a", "b", "c"]

    def test_substitution_in_place_keeps_literals(self):
        doc = {"outbounds": [{"tag": "G", "type": "selector", "outbounds": ["Auto", "{all}", "DirectConn"]}]}
        references = doc["outbounds"][0]["outbounds"]
        expand_placeholders(doc, [{"tag": "a"}, {"tag": "b"}])
        assert references == ["Auto", "a", "b", "DirectConn"]
        assert doc["outbounds"][0]["outbounds"] is references

    def test_filter_applied_and_removed(self, candidates):
        doc = {
            "outbounds": [
                {"tag": "HK", "type": "urltest", "outbounds": ["{all}"], "filter": {"include": "香港|HK"}},
            ]
        }
        expand_placeholders(doc, candidates)
        block = doc["outbounds"][0]
        assert block["outbounds"] == ["🇭🇰 香港 01"]
        assert "filter" not in block

    def test_invalid_filter_falls_back_to_all_candidates(self, candidates):
        doc = {"outbounds": [{"tag": "G", "type": "selector", "outbounds": ["{all}"], "filter": {"action": "nope"}}]}
        expand_placeholders(doc, candidates)
        assert doc["outbounds"][0]["outbounds"] == [c["tag"] for c in candidates]
        assert "filter" not in doc["outbounds"][0]

    def test_placeholder_must_be_exact_element(self, candidates):
        doc = {"outbounds": [{"tag": "G", "type": "selector", "outbounds": ["{all}-x", "prefix {all}"]}]}
        assert expand_placeholders(doc, candidates) == 0
        assert doc["outbounds"][0]["outbounds"] == ["{all}-x", "prefix {all}"]

    def test_nested_structures(self, candidates):
        doc = {
            "section": {
                "groups": [
                    {"inner": {"outbounds": ["{all}"], "filter": [{"include": ["sec_"]}]}},
                ],
                "matrix": [["{all}"]],
            }
        }
        assert PlaceholderExpander().expand(doc, candidates) == 2
        assert doc["section"]["groups"][0]["inner"] == {"outbounds": ["sec_us1"]}
        assert doc["section"]["matrix"][0] == [c["tag"] for c in candidates]

    def test_stray_filter_without_placeholder_is_dropped(self):
        doc = {"outbounds": [{"tag": "G", "type": "selector", "outbounds": ["x"], "filter": {"include": "x"}}]}
        expand_placeholders(doc, [{"tag": "x"}])
        assert doc["outbounds"][0] == {"tag": "G", "type": "selector", "outbounds": ["x"]}

    def test_no_placeholder_survives(self, candidates):
        doc = {"outbounds": [{"tag": f"G{i}", "type": "selector", "outbounds": ["{all}"]} for i in range(3)]}
        expand_placeholders(doc, candidates)
        assert all("{all}" not in block["outbounds"] for block in doc["outbounds"])
