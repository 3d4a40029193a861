"""
Unit tests for answer evaluation and the question timer.
"""
import asyncio
import unittest

from trivia.models import Question
from trivia.quiz_engine import (
    QuizEngine,
    QuizTimer,
    evaluate_answer,
    parse_command,
)
from tests.test_fixtures import async_test

TICK = 0.01


class TestEvaluateAnswer(unittest.TestCase):
    """Test cases for answer parsing and scoring."""

    def setUp(self):
        """Set up test fixtures."""
        self.question = Question(
            "What is the capital of France?",
            ("London", "Berlin", "Paris", "Madrid"),
            2,
            "Geography",
            10
        )

    def test_correct_answer_without_timer(self):
        """Timer disabled: exactly the base points, never a bonus."""
        result = evaluate_answer(self.question, "3", 0, 0)

        self.assertTrue(result.accepted)
        self.assertTrue(result.correct)
        self.assertEqual(result.points_earned, 10)
        self.assertEqual(result.time_bonus, 0)

    def test_incorrect_answer(self):
        result = evaluate_answer(self.question, "1", 2, 30)

        self.assertTrue(result.accepted)
        self.assertFalse(result.correct)
        self.assertEqual(result.points_earned, 0)

    def test_out_of_range_answer_is_not_accepted(self):
        for raw in ("5", "0", "-1"):
            result = evaluate_answer(self.question, raw, 0, 0)
            self.assertFalse(result.accepted, raw)
            self.assertFalse(result.correct, raw)
            self.assertEqual(result.points_earned, 0)

    def test_non_numeric_answer_is_not_accepted(self):
        for raw in ("", "three", "2.5", "Paris"):
            result = evaluate_answer(self.question, raw, 0, 0)
            self.assertFalse(result.accepted, raw)

    def test_whitespace_around_number_is_ignored(self):
        result = evaluate_answer(self.question, "  3 \n", 0, 0)
        self.assertTrue(result.correct)

    def test_time_bonus_applied_under_half_budget(self):
        """30s budget, answered at 10s: base plus half the base."""
        result = evaluate_answer(self.question, "3", 10, 30)

        self.assertEqual(result.points_earned, 15)
        self.assertEqual(result.time_bonus, 5)

    def test_no_time_bonus_at_or_over_half_budget(self):
        """30s budget, answered at 15s or 20s: base points only."""
        for elapsed in (15, 20):
            result = evaluate_answer(self.question, "3", elapsed, 30)
            self.assertEqual(result.points_earned, 10, elapsed)
            self.assertEqual(result.time_bonus, 0, elapsed)

    def test_time_bonus_rounds_down(self):
        odd_question = Question("Q?", ("a", "b", "c", "d"), 0, "Misc", 5)
        result = evaluate_answer(odd_question, "1", 1, 30)

        # floor(5 * 0.5) == 2
        self.assertEqual(result.points_earned, 7)

    def test_out_of_range_correct_index_never_correct(self):
        broken = Question("Q?", ("a", "b", "c", "d"), 7, "Misc", 5)
        for raw in ("1", "2", "3", "4"):
            result = evaluate_answer(broken, raw, 0, 0)
            self.assertTrue(result.accepted)
            self.assertFalse(result.correct)

    def test_option_count_defines_range(self):
        two_options = Question("True or false?", ("True", "False"), 1, "Logic", 5)

        self.assertTrue(evaluate_answer(two_options, "2", 0, 0).correct)
        self.assertFalse(evaluate_answer(two_options, "3", 0, 0).accepted)


class TestParseCommand(unittest.TestCase):
    """Test cases for control command recognition."""

    def test_commands_are_case_insensitive(self):
        self.assertEqual(parse_command("skip"), "skip")
        self.assertEqual(parse_command("  SKIP "), "skip")
        self.assertEqual(parse_command("Quit"), "quit")

    def test_answers_are_not_commands(self):
        self.assertIsNone(parse_command("1"))
        self.assertIsNone(parse_command(""))
        self.assertIsNone(parse_command("skipping"))


class TestQuizTimer(unittest.TestCase):
    """Test cases for QuizTimer functionality."""

    @async_test
    async def test_timer_countdown_completion(self):
        """Ticks once per second down to zero, then times out exactly once."""
        ticks = []
        timeouts = []

        timer = QuizTimer(tick_interval=TICK).start(3, ticks.append, lambda: timeouts.append(True))
        await asyncio.wait_for(timer._task, timeout=2)

        self.assertEqual(ticks, [2, 1, 0])
        self.assertEqual(timeouts, [True])
        self.assertTrue(timer.has_fired)
        self.assertFalse(timer.is_running)

    @async_test
    async def test_async_callbacks_are_awaited(self):
        ticks = []
        timed_out = asyncio.Event()

        async def on_tick(remaining):
            ticks.append(remaining)

        async def on_timeout():
            timed_out.set()

        QuizTimer(tick_interval=TICK).start(2, on_tick, on_timeout)
        await asyncio.wait_for(timed_out.wait(), timeout=2)

        self.assertEqual(ticks, [1, 0])

    @async_test
    async def test_cancel_prevents_timeout(self):
        timeouts = []

        timer = QuizTimer(tick_interval=TICK).start(50, None, lambda: timeouts.append(True))
        await asyncio.sleep(TICK * 3)

        self.assertTrue(timer.cancel())
        await asyncio.sleep(TICK * 5)

        self.assertTrue(timer.is_cancelled)
        self.assertFalse(timer.is_running)
        self.assertEqual(timeouts, [])

    @async_test
    async def test_cancel_from_tick_callback(self):
        ticks = []
        timeouts = []
        timer = QuizTimer(tick_interval=TICK)

        def on_tick(remaining):
            ticks.append(remaining)
            timer.cancel()

        timer.start(3, on_tick, lambda: timeouts.append(True))
        await asyncio.sleep(TICK * 10)

        self.assertEqual(ticks, [2])
        self.assertEqual(timeouts, [])

    @async_test
    async def test_cancel_twice_is_noop(self):
        timer = QuizTimer(tick_interval=TICK).start(50)

        self.assertTrue(timer.cancel())
        self.assertFalse(timer.cancel())
        await asyncio.sleep(TICK)

    @async_test
    async def test_cancel_after_fired_is_noop(self):
        timeouts = []
        timer = QuizTimer(tick_interval=TICK).start(1, None, lambda: timeouts.append(True))
        await asyncio.wait_for(timer._task, timeout=2)

        self.assertFalse(timer.cancel())
        self.assertFalse(timer.is_cancelled)
        self.assertEqual(timeouts, [True])

    @async_test
    async def test_zero_budget_timer_is_inert(self):
        ticks = []
        timeouts = []

        for budget in (0, -5):
            timer = QuizTimer(tick_interval=TICK).start(budget, ticks.append, lambda: timeouts.append(True))
            self.assertTrue(timer.is_inert)
            self.assertFalse(timer.is_running)
            self.assertFalse(timer.cancel())

        await asyncio.sleep(TICK * 3)
        self.assertEqual(ticks, [])
        self.assertEqual(timeouts, [])

    def test_new_timer_state(self):
        timer = QuizTimer()

        self.assertEqual(timer.remaining_time, 0)
        self.assertFalse(timer.is_cancelled)
        self.assertFalse(timer.has_fired)


class TestQuizEngineTimer(unittest.TestCase):
    """Test cases for QuizEngine timer management."""

    def setUp(self):
        """Set up test fixtures."""
        self.engine = QuizEngine(tick_interval=TICK)

    def test_timer_status_no_active_timer(self):
        self.assertIsNone(self.engine.get_timer_status())

    def test_cancel_timer_no_active_timer(self):
        self.assertFalse(self.engine.cancel_timer())

    @async_test
    async def test_start_and_cancel_timer(self):
        timer = self.engine.start_timer(50)
        await asyncio.sleep(TICK * 2)

        status = self.engine.get_timer_status()
        self.assertTrue(status['is_running'])
        self.assertFalse(status['has_fired'])

        self.assertTrue(self.engine.cancel_timer(timer))
        self.assertIsNone(self.engine.get_timer_status())
        self.assertFalse(self.engine.cancel_timer(timer))
        await asyncio.sleep(TICK)

    @async_test
    async def test_starting_new_timer_cancels_previous(self):
        first_timeouts = []
        first = self.engine.start_timer(3, None, lambda: first_timeouts.append(True))
        second = self.engine.start_timer(50)

        await asyncio.sleep(TICK * 6)

        self.assertTrue(first.is_cancelled)
        self.assertEqual(first_timeouts, [])
        self.assertTrue(second.is_running)
        self.engine.cancel_timer()
        await asyncio.sleep(TICK)

    @async_test
    async def test_disabled_timer_through_engine(self):
        timer = self.engine.start_timer(0)

        self.assertTrue(timer.is_inert)
        self.assertIsNone(self.engine.get_timer_status())
        self.assertFalse(self.engine.cancel_timer(timer))

    @async_test
    async def test_disabled_timer_replaces_running_timer(self):
        first = self.engine.start_timer(50)
        self.engine.start_timer(0)

        self.assertTrue(first.is_cancelled)
        self.assertIsNone(self.engine.get_timer_status())
        await asyncio.sleep(TICK)


if __name__ == '__main__':
    unittest.main()
