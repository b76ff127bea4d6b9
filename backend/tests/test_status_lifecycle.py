from __future__ import annotations

import unittest

from careerpath.core.status_lifecycle import (
    ALL_STATUSES,
    FAIL,
    FINAL_DECISION,
    HR_THOUGHTS,
    INITIAL,
    PASS,
    START_STATUS,
    STATUS_LABELS,
    TECHNICAL_FIRST,
    TECHNICAL_SECOND,
    current_status,
    evaluate_decision,
    is_known_decision,
    is_known_status,
    normalize_status_name,
    status_rank,
)


class StatusSetTests(unittest.TestCase):
    def test_pipeline_order(self) -> None:
        self.assertTupleEqual(
            ALL_STATUSES,
            (INITIAL, HR_THOUGHTS, TECHNICAL_FIRST, TECHNICAL_SECOND, FINAL_DECISION),
        )
        self.assertEqual(START_STATUS, INITIAL)

    def test_every_status_has_a_label(self) -> None:
        self.assertSetEqual(set(STATUS_LABELS.keys()), set(ALL_STATUSES))

    def test_legacy_hr_started_maps_to_initial(self) -> None:
        self.assertEqual(normalize_status_name("hr_started"), INITIAL)
        self.assertTrue(is_known_status("hr_started"))

    def test_normalization(self) -> None:
        self.assertEqual(normalize_status_name(" Final Decision "), FINAL_DECISION)
        self.assertIsNone(normalize_status_name("   "))
        self.assertIsNone(normalize_status_name(None))

    def test_unknown_statuses(self) -> None:
        self.assertFalse(is_known_status("offer"))
        self.assertFalse(is_known_status(None))
        self.assertEqual(status_rank("offer"), len(ALL_STATUSES))

    def test_rank_follows_pipeline(self) -> None:
        ranks = [status_rank(s) for s in ALL_STATUSES]
        self.assertListEqual(ranks, sorted(ranks))

    def test_decisions(self) -> None:
        self.assertTrue(is_known_decision(None))
        self.assertTrue(is_known_decision("PASS"))
        self.assertTrue(is_known_decision("fail"))
        self.assertFalse(is_known_decision("maybe"))

    def test_current_status_is_last_entry(self) -> None:
        self.assertEqual(current_status([]), START_STATUS)
        self.assertEqual(current_status([INITIAL, TECHNICAL_FIRST, HR_THOUGHTS]), HR_THOUGHTS)


class DecisionRuleTests(unittest.TestCase):
    def test_fail_at_any_status_sets_final_decision(self) -> None:
        for status in ALL_STATUSES:
            outcome = evaluate_decision(new_status=status, decision=FAIL, existing_final_decision=None)
            self.assertEqual(outcome.final_decision, FAIL)
            self.assertTrue(outcome.sets_final_decision)
            self.assertFalse(outcome.opens_offer)
            self.assertFalse(outcome.notify_hr)

    def test_pass_before_final_stage_changes_nothing(self) -> None:
        for status in ALL_STATUSES[:-1]:
            outcome = evaluate_decision(new_status=status, decision=PASS, existing_final_decision=None)
            self.assertIsNone(outcome.final_decision)
            self.assertFalse(outcome.sets_final_decision)
            self.assertFalse(outcome.notify_hr)

    def test_pass_at_final_stage_opens_offer_and_notifies(self) -> None:
        outcome = evaluate_decision(new_status=FINAL_DECISION, decision=PASS, existing_final_decision=None)
        self.assertEqual(outcome.final_decision, PASS)
        self.assertTrue(outcome.sets_final_decision)
        self.assertTrue(outcome.opens_offer)
        self.assertTrue(outcome.notify_hr)

    def test_settled_decision_is_kept(self) -> None:
        again = evaluate_decision(new_status=FINAL_DECISION, decision=PASS, existing_final_decision=PASS)
        self.assertFalse(again.sets_final_decision)
        self.assertFalse(again.notify_hr)
        flipped = evaluate_decision(new_status=TECHNICAL_FIRST, decision=FAIL, existing_final_decision=PASS)
        self.assertEqual(flipped.final_decision, PASS)
        self.assertFalse(flipped.sets_final_decision)

    def test_no_decision_is_a_comment(self) -> None:
        outcome = evaluate_decision(new_status=FINAL_DECISION, decision=None, existing_final_decision=None)
        self.assertIsNone(outcome.final_decision)
        self.assertFalse(outcome.sets_final_decision)


if __name__ == "__main__":
    unittest.main()
