from __future__ import annotations

import random
from collections import Counter
from unittest import TestCase

from . import transitions as t
from .errors import InvalidTransition
from .models import OptionStatus, Phase, QuestionDetail, QuestionSummary, SessionState, Team


def _question(correct_option: str = "A") -> QuestionDetail:
    return QuestionDetail(
        id=7,
        theme="Science",
        question_number=3,
        question="Which planet is known as the Red Planet?",
        option_a="Mars",
        option_b="Venus",
        option_c="Jupiter",
        option_d="Saturn",
        correct_option=correct_option,
    )


def _on_question(correct_option: str = "A") -> SessionState:
    return SessionState(
        phase=Phase.QUESTION,
        current_category="Science",
        current_question=_question(correct_option),
    )


class RoundTransitionTests(TestCase):
    def test_dismiss_rules_goes_to_teams(self):
        state = t.dismiss_rules(SessionState())
        self.assertEqual(state.phase, Phase.TEAMS)

    def test_dismiss_rules_only_once(self):
        with self.assertRaises(InvalidTransition):
            t.dismiss_rules(SessionState(phase=Phase.TEAMS))

    def test_lightning_on_routes_to_categories(self):
        state = t.toggle_lightning(SessionState(phase=Phase.TEAMS))
        self.assertEqual(state.phase, Phase.CATEGORIES)
        self.assertTrue(state.is_lightning)

    def test_lightning_off_stays_on_teams(self):
        state = t.toggle_lightning(SessionState(phase=Phase.TEAMS, is_lightning=True))
        self.assertEqual(state.phase, Phase.TEAMS)
        self.assertFalse(state.is_lightning)

    def test_next_round_is_capped_and_clears_lightning(self):
        state = SessionState(phase=Phase.TEAMS, round=3, is_lightning=True)
        state = t.next_round(state, max_rounds=4)
        self.assertEqual((state.round, state.is_lightning, state.phase), (4, False, Phase.CATEGORIES))

        state = t.next_round(state.model_copy(update={"phase": Phase.TEAMS}), max_rounds=4)
        self.assertEqual(state.round, 4)

    def test_score_adjustment_is_additive_and_local(self):
        state = SessionState(phase=Phase.TEAMS, teams=[Team(id=1, name="Red"), Team(id=2, name="Blue")])
        state = t.adjust_score(state, 1, 10)
        state = t.adjust_score(state, 1, 10)
        self.assertEqual([team.score for team in state.teams], [20, 0])

    def test_score_adjustment_for_unknown_team(self):
        with self.assertRaises(InvalidTransition):
            t.adjust_score(SessionState(phase=Phase.TEAMS), 9, 10)

    def test_navigation_table(self):
        state = SessionState(phase=Phase.NUMBERS)
        self.assertEqual(t.navigate(state, Phase.CATEGORIES).phase, Phase.CATEGORIES)
        self.assertEqual(t.navigate(state, Phase.TEAMS).phase, Phase.TEAMS)
        with self.assertRaises(InvalidTransition):
            t.navigate(state, Phase.QUESTION)
        with self.assertRaises(InvalidTransition):
            t.navigate(SessionState(), Phase.TEAMS)

    def test_opening_category_clears_stale_question(self):
        state = _on_question().model_copy(
            update={"phase": Phase.CATEGORIES, "selected_answers": ["B"], "show_correct_answer": True}
        )
        summaries = [QuestionSummary(id=1, question_number=1)]
        state = t.category_opened(state, "History", summaries)

        self.assertEqual(state.phase, Phase.NUMBERS)
        self.assertEqual(state.current_category, "History")
        self.assertIsNone(state.current_question)
        self.assertEqual(state.selected_answers, [])
        self.assertFalse(state.show_correct_answer)


class CategoryDrawTests(TestCase):
    def test_empty_draw_is_noop(self):
        self.assertIsNone(t.draw_category([], random.Random(1)))

    def test_draw_is_roughly_uniform(self):
        rng = random.Random(42)
        candidates = ["History", "Music", "Science"]
        counts = Counter(t.draw_category(candidates, rng) for _ in range(6000))

        self.assertEqual(set(counts), set(candidates))
        for name in candidates:
            self.assertAlmostEqual(counts[name] / 6000, 1 / 3, delta=0.03)


class QuestionPickTests(TestCase):
    def setUp(self) -> None:
        self.state = SessionState(
            phase=Phase.NUMBERS,
            current_category="Science",
            questions=[
                QuestionSummary(id=1, question_number=1, used=True),
                QuestionSummary(id=2, question_number=2),
            ],
        )

    def test_used_question_cannot_be_opened(self):
        with self.assertRaises(InvalidTransition):
            t.find_summary(self.state, 1)

    def test_unknown_question_cannot_be_opened(self):
        with self.assertRaises(InvalidTransition):
            t.find_summary(self.state, 99)

    def test_open_resets_answer_state(self):
        stale = self.state.model_copy(update={"selected_answers": ["C"], "correct_answered": True})
        state = t.question_opened(stale, _question())
        self.assertEqual(state.phase, Phase.QUESTION)
        self.assertEqual(state.selected_answers, [])
        self.assertFalse(state.correct_answered)


class AnswerTests(TestCase):
    def test_match_ignores_case_and_whitespace(self):
        state = t.select_option(_on_question("A"), " a ")
        self.assertTrue(state.correct_answered)

        state = t.select_option(_on_question(" b\n"), "B")
        self.assertTrue(state.correct_answered)

    def test_wrong_answers_accumulate_without_duplicates(self):
        state = _on_question("D")
        for option in ("A", "C", "a"):
            state = t.select_option(state, option)
        self.assertEqual(state.selected_answers, ["A", "C"])
        self.assertFalse(state.correct_answered)

    def test_no_selection_after_correct_answer(self):
        state = t.select_option(_on_question("B"), "B")
        after = t.select_option(state, "C")
        self.assertEqual(after.selected_answers, ["B"])

    def test_reveal_requires_a_wrong_selection(self):
        state = _on_question("B")
        self.assertFalse(t.reveal_answer(state).show_correct_answer)

        state = t.select_option(state, "A")
        state = t.reveal_answer(state)
        self.assertTrue(state.show_correct_answer)
        self.assertTrue(t.can_mark_used(state))

    def test_reveal_not_offered_after_correct_answer(self):
        state = t.select_option(_on_question("B"), "B")
        self.assertFalse(t.can_reveal(state))
        self.assertFalse(t.reveal_answer(state).show_correct_answer)

    def test_option_statuses(self):
        state = _on_question("C")
        self.assertEqual(set(t.option_statuses(state).values()), {OptionStatus.DEFAULT})

        state = t.select_option(state, "A")
        statuses = t.option_statuses(state)
        self.assertEqual(statuses["A"], OptionStatus.WRONG)
        self.assertEqual(statuses["C"], OptionStatus.DEFAULT)

        state = t.reveal_answer(state)
        self.assertEqual(t.option_statuses(state)["C"], OptionStatus.CORRECT)

    def test_correct_answer_shows_correct(self):
        state = t.select_option(_on_question("C"), "c")
        statuses = t.option_statuses(state)
        self.assertEqual(statuses["C"], OptionStatus.CORRECT)
        self.assertEqual(statuses["D"], OptionStatus.DEFAULT)

    def test_answer_outside_question_phase(self):
        with self.assertRaises(InvalidTransition):
            t.select_option(SessionState(phase=Phase.NUMBERS), "A")
