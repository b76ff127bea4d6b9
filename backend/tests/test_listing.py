from __future__ import annotations

from datetime import datetime
from types import SimpleNamespace
import unittest

from careerpath.services.listing import (
    filter_by_offer_status,
    is_high_rated,
    offer_status_counts,
    search_candidates,
    sort_by_rating,
    sort_by_status_order,
)


def row(name: str, **kwargs) -> SimpleNamespace:
    fields = {
        "name": name,
        "email": f"{name.lower()}@example.com",
        "process_position": None,
        "status": "initial",
        "rating": None,
        "offer_status": None,
        "created_at": datetime(2024, 1, 1),
    }
    fields.update(kwargs)
    return SimpleNamespace(**fields)


class SearchTests(unittest.TestCase):
    def test_matches_name_and_email_case_insensitively(self) -> None:
        rows = [row("Alice"), row("Bob", email="robert@corp.io")]
        self.assertEqual([r.name for r in search_candidates(rows, "ALI")], ["Alice"])
        self.assertEqual([r.name for r in search_candidates(rows, "corp.io")], ["Bob"])

    def test_position_only_when_requested(self) -> None:
        rows = [row("Alice", process_position="Data Engineer")]
        self.assertEqual(search_candidates(rows, "data"), [])
        self.assertEqual(len(search_candidates(rows, "data", include_position=True)), 1)

    def test_blank_query_returns_everything(self) -> None:
        rows = [row("Alice"), row("Bob")]
        self.assertEqual(len(search_candidates(rows, "  ")), 2)
        self.assertEqual(len(search_candidates(rows, None)), 2)


class OfferFilterTests(unittest.TestCase):
    def setUp(self) -> None:
        self.rows = [
            row("A", offer_status="pending"),
            row("B", offer_status="sent"),
            row("C", offer_status="accepted"),
            row("D", offer_status="accepted"),
            row("E", offer_status=None),
        ]

    def test_filter(self) -> None:
        self.assertEqual([r.name for r in filter_by_offer_status(self.rows, "accepted")], ["C", "D"])
        self.assertEqual(len(filter_by_offer_status(self.rows, "all")), 5)
        # Pass candidates without an offer row yet count as pending.
        self.assertEqual([r.name for r in filter_by_offer_status(self.rows, "pending")], ["A", "E"])

    def test_counts(self) -> None:
        self.assertDictEqual(
            offer_status_counts(self.rows),
            {"all": 5, "pending": 2, "sent": 1, "accepted": 2, "rejected": 0},
        )

    def test_counts_of_nothing(self) -> None:
        self.assertDictEqual(
            offer_status_counts([]),
            {"all": 0, "pending": 0, "sent": 0, "accepted": 0, "rejected": 0},
        )


class SortTests(unittest.TestCase):
    def test_status_order_then_newest(self) -> None:
        rows = [
            row("Old", status="technical_first", created_at=datetime(2024, 1, 1)),
            row("Final", status="final_decision"),
            row("New", status="technical_first", created_at=datetime(2024, 2, 1)),
            row("Start", status="initial"),
        ]
        self.assertEqual([r.name for r in sort_by_status_order(rows)], ["Start", "New", "Old", "Final"])

    def test_rating_highest_first_unrated_last(self) -> None:
        rows = [row("None"), row("Low", rating=3), row("High", rating=9)]
        self.assertEqual([r.name for r in sort_by_rating(rows)], ["High", "Low", "None"])

    def test_sort_accepts_generators(self) -> None:
        rows = (r for r in [row("A", rating=2), row("B")])
        self.assertEqual([r.name for r in sort_by_rating(rows)], ["A", "B"])

    def test_high_rating_threshold(self) -> None:
        self.assertTrue(is_high_rated(6))
        self.assertFalse(is_high_rated(5))
        self.assertFalse(is_high_rated(None))


if __name__ == "__main__":
    unittest.main()
