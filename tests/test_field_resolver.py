from __future__ import annotations

import unittest

from app.mappers.field_resolver import TRITON_ALIASES, FieldResolver, resolve


class TestResolve(unittest.TestCase):
    def test_exact_match_returned(self) -> None:
        self.assertEqual(resolve({"CUME": "1200"}, ["CUME"]), "1200")

    def test_case_insensitive_match(self) -> None:
        self.assertEqual(resolve({"cUmE": "1200"}, ["CUME"]), "1200")

    def test_alias_order_is_priority(self) -> None:
        row = {"Cumulative Audience": "900", "CUME": "1200"}

        self.assertEqual(resolve(row, ["CUME", "Cumulative Audience"]), "1200")

    def test_blank_value_treated_as_absent(self) -> None:
        row = {"CUME": "", "Cumulative Audience": "900"}

        self.assertEqual(resolve(row, ["CUME", "Cumulative Audience"]), "900")

    def test_whitespace_and_none_treated_as_absent(self) -> None:
        self.assertIsNone(resolve({"CUME": "   ", "Cume": None}, ["CUME", "Cume"]))

    def test_missing_field_returns_none(self) -> None:
        self.assertIsNone(resolve({"TLH": "5"}, ["CUME"]))

    def test_zero_is_a_value(self) -> None:
        self.assertEqual(resolve({"cume": 0}, ["CUME"]), 0)

    def test_non_string_keys_are_ignored(self) -> None:
        self.assertEqual(resolve({None: ["extra"], "Tlh": "3"}, ["TLH"]), "3")


class TestFieldResolver(unittest.TestCase):
    def setUp(self) -> None:
        self.resolver = FieldResolver(TRITON_ALIASES)

    def test_resolves_week_as_date(self) -> None:
        self.assertEqual(self.resolver.resolve({"Week": "2024-01-07"}, "date"), "2024-01-07")

    def test_resolves_aas_as_active_sessions(self) -> None:
        self.assertEqual(self.resolver.resolve({"aas": "12"}, "active_sessions"), "12")

    def test_unknown_canonical_field_resolves_to_none(self) -> None:
        self.assertIsNone(self.resolver.resolve({"CUME": "1"}, "not_a_field"))

    def test_canonical_fields_listed(self) -> None:
        self.assertIn("cume", self.resolver.canonical_fields)
        self.assertIn("hour", self.resolver.canonical_fields)


if __name__ == "__main__":
    unittest.main()
