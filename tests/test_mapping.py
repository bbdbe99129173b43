"""Tests for the customer group mapping loader.

Covers:
- Plain JSON object, key order preserved as rule order
- Double-encoded value (escaped quotes) recovered
- Unparsable / non-object / empty input → empty mapping, never an exception
- Invalid entries dropped, valid ones kept
"""

from __future__ import annotations

import logging

import pytest

from src.assignment.mapping import (
    EMPTY_MAPPING,
    CustomerGroupMapping,
    GroupRule,
    load_customer_group_mapping,
)


class TestLoadValidMapping:
    def test_single_group(self):
        mapping = load_customer_group_mapping('{"cg-vip": ["pt-electronics", "pt-premium"]}')

        assert mapping.group_ids == ["cg-vip"]
        rule = mapping.rules[0]
        assert rule.product_type_ids == ("pt-electronics", "pt-premium")

    def test_key_order_is_rule_order(self):
        mapping = load_customer_group_mapping('{"cg-b": ["pt1"], "cg-a": ["pt2"], "cg-c": ["pt3"]}')
        assert mapping.group_ids == ["cg-b", "cg-a", "cg-c"]

    def test_double_encoded_value_recovered(self):
        raw = '{\\"cg1\\":[\\"pt1\\",\\"pt2\\"]}'
        mapping = load_customer_group_mapping(raw)

        assert mapping.group_ids == ["cg1"]
        assert mapping.rules[0].product_type_ids == ("pt1", "pt2")

    def test_empty_list_is_kept_but_matches_nothing(self):
        mapping = load_customer_group_mapping('{"cg1": []}')
        assert len(mapping) == 1
        assert mapping.rules[0].covers("pt1") is False


class TestLoadInvalidMapping:
    @pytest.mark.parametrize(
        "raw",
        [
            None,
            "",
            "   ",
            "{}",
            "not json",
            "{cg1: [pt1]}",
            '{"cg1": ["pt1"]',
            '["cg1", "pt1"]',
            '"cg1"',
            "42",
            "null",
            "[" * 100000,
        ],
    )
    def test_returns_empty_mapping(self, raw):
        mapping = load_customer_group_mapping(raw)
        assert mapping == EMPTY_MAPPING
        assert not mapping

    def test_parse_failure_logged(self, caplog):
        with caplog.at_level(logging.ERROR, logger="src.assignment.mapping"):
            load_customer_group_mapping("not json")
        assert "Failed to parse CGROUP_TO_PRODUCT_TYPE_MAP" in caplog.text

    def test_invalid_entries_dropped(self):
        raw = '{"cg1": "pt1", "": ["pt2"], "cg3": ["pt3", ""], "cg4": [1], "cg5": ["pt5"]}'
        mapping = load_customer_group_mapping(raw)
        assert mapping.group_ids == ["cg5"]


class TestGroupRule:
    def test_covers(self):
        rule = GroupRule("cg1", ("pt1", "pt2"))
        assert rule.covers("pt2") is True
        assert rule.covers("pt3") is False
        assert rule.covers(None) is False

    def test_mapping_is_immutable(self):
        mapping = CustomerGroupMapping.from_dict({"cg1": ["pt1"]})
        with pytest.raises(AttributeError):
            mapping.rules = ()  # type: ignore[misc]

    def test_equal_inputs_give_equal_mappings(self):
        raw = '{"cg1": ["pt1"], "cg2": ["pt2"]}'
        assert load_customer_group_mapping(raw) == load_customer_group_mapping(raw)
