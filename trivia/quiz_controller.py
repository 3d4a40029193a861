"""
Quiz session controller for the Trivia CLI game.
Drives one play-through from the first question to game over.
"""
import asyncio
import logging
import math
import time
from typing import Callable, List, Optional

from .models import (
    Question,
    QuestionOutcome,
    QuestionResolution,
    SessionPhase,
    SessionState,
)
from .quiz_engine import (
    QUIT_COMMAND,
    SKIP_COMMAND,
    QuizEngine,
    TimerLifecycleLogger,
    evaluate_answer,
    parse_command,
)

# Pause after each resolved question before the next one is shown
PACING_DELAY = 2.0
SKIP_DELAY = 1.5
TIMEOUT_DISPLAY_DELAY = 2.0


class QuizControllerError(Exception):
    """Base exception for quiz controller errors."""
    pass


class InvalidSessionStateError(QuizControllerError):
    """Raised when session is in an invalid state for the requested operation."""
    pass


class QuizController:
    """
    Orchestrates a single trivia session.

    The session is an explicit state machine (NOT_STARTED -> IN_PROGRESS ->
    ENDED). Each question is presented, then the player's input races the
    countdown; whichever finishes first decides the question's outcome and
    the other side is cancelled.
    """

    def __init__(
        self,
        ui,
        input_source,
        quiz_engine: Optional[QuizEngine] = None,
        clock: Callable[[], float] = time.monotonic,
        pacing_delay: float = PACING_DELAY,
        skip_delay: float = SKIP_DELAY,
        timeout_delay: float = TIMEOUT_DISPLAY_DELAY
    ):
        """
        Initialize the quiz controller.

        Args:
            ui: Presentation object (see trivia.terminal.TerminalUI)
            input_source: Object with async read_line(prompt) and discard_pending()
            quiz_engine: Engine owning the countdown timer
            clock: Monotonic clock used to measure response times
        """
        self.logger = logging.getLogger(__name__)
        self.ui = ui
        self.input_source = input_source
        self.quiz_engine = quiz_engine or QuizEngine()
        self.clock = clock
        self._delays = {
            QuestionOutcome.ANSWERED: pacing_delay,
            QuestionOutcome.SKIPPED: skip_delay,
            QuestionOutcome.TIMED_OUT: timeout_delay,
            QuestionOutcome.QUIT: 0.0,
        }

    def start_session(self, questions: List[Question], time_per_question: int) -> SessionState:
        """
        Create a fresh session and move it to IN_PROGRESS.

        Args:
            questions: Ordered questions for this play-through
            time_per_question: Seconds per question, 0 disables the timer

        Returns:
            New SessionState; already ENDED if there are no questions
        """
        state = SessionState(
            questions=list(questions),
            time_per_question=max(time_per_question, 0)
        )

        state.phase = SessionPhase.IN_PROGRESS
        state.active = True
        self.logger.info(
            f"Started session: questions={len(state.questions)}, "
            f"timer={state.time_per_question}s",
            extra={
                'event_type': 'session_started',
                'question_count': len(state.questions),
                'time_per_question': state.time_per_question,
                'timestamp': time.time()
            }
        )

        if not state.questions:
            self.end_session(state, "no questions")
        return state

    async def run_session(self, state: SessionState) -> SessionState:
        """
        Play every remaining question until the session ends.

        Args:
            state: Session created by start_session

        Returns:
            The same state, now ENDED

        Raises:
            InvalidSessionStateError: If the session was never started
        """
        if state.phase is SessionPhase.NOT_STARTED:
            raise InvalidSessionStateError("Session must be started before it can run")

        while state.active:
            question = state.current_question
            self.ui.display_question(
                question,
                state.current_index,
                len(state.questions),
                state.time_per_question
            )

            resolution = await self.resolve_question(state, question)
            self.apply_resolution(state, resolution)

            delay = self._delays[resolution.outcome]
            if state.active and delay > 0:
                await asyncio.sleep(delay)

        return state

    async def resolve_question(self, state: SessionState, question: Question) -> QuestionResolution:
        """
        Wait for the question's outcome: an answer, a command, or the timeout.

        Args:
            state: Active session
            question: Question currently on screen

        Returns:
            QuestionResolution tagged with the winning outcome
        """
        # Anything typed while the previous question was resolving is stale
        self.input_source.discard_pending()

        budget = state.time_per_question
        started = self.clock()

        if budget <= 0:
            return await self._await_answer(question, budget, started)

        timed_out = asyncio.Event()
        timer = self.quiz_engine.start_timer(
            budget,
            lambda remaining: self.ui.display_countdown(remaining, budget),
            timed_out.set,
            name=f"question-{state.current_index + 1}"
        )
        answer_task = asyncio.create_task(self._await_answer(question, budget, started))
        timeout_task = asyncio.create_task(timed_out.wait())

        try:
            done, _ = await asyncio.wait(
                {answer_task, timeout_task},
                return_when=asyncio.FIRST_COMPLETED
            )

            if answer_task in done:
                if timeout_task in done:
                    TimerLifecycleLogger.log_race_condition_detected(
                        f"question-{state.current_index + 1}",
                        "Timeout fired after the answer arrived; timeout ignored"
                    )
                return answer_task.result()

            self.logger.info(
                f"Question {state.current_index + 1} timed out after {budget}s",
                extra={
                    'event_type': 'question_timed_out',
                    'question_index': state.current_index,
                    'budget': budget,
                    'timestamp': time.time()
                }
            )
            self.ui.display_timeout(question)
            return QuestionResolution(QuestionOutcome.TIMED_OUT, elapsed_seconds=budget)

        finally:
            self.quiz_engine.cancel_timer(timer)
            for task in (answer_task, timeout_task):
                if not task.done():
                    task.cancel()
            await asyncio.gather(answer_task, timeout_task, return_exceptions=True)

    async def _await_answer(self, question: Question, budget: int, started: float) -> QuestionResolution:
        """Read lines until a command or a valid option number arrives."""
        prompt = f'\nYour answer (1-{len(question.options)}) or "skip": '

        while True:
            raw_input = await self.input_source.read_line(prompt)
            elapsed = self._elapsed_since(started, budget)

            command = parse_command(raw_input)
            if command == QUIT_COMMAND:
                return QuestionResolution(QuestionOutcome.QUIT, elapsed_seconds=elapsed)

            if command == SKIP_COMMAND:
                self.ui.display_skipped()
                return QuestionResolution(QuestionOutcome.SKIPPED, elapsed_seconds=elapsed)

            result = evaluate_answer(question, raw_input, elapsed, budget)
            if not result.accepted:
                self.logger.debug(f"Rejected answer input {raw_input!r}")
                self.ui.display_invalid_answer(len(question.options))
                continue

            self.ui.display_answer_result(question, result)
            return QuestionResolution(
                QuestionOutcome.ANSWERED,
                elapsed_seconds=elapsed,
                result=result
            )

    def _elapsed_since(self, started: float, budget: int) -> int:
        elapsed = max(math.floor(self.clock() - started), 0)
        if budget > 0:
            elapsed = min(elapsed, budget)
        return elapsed

    def apply_resolution(self, state: SessionState, resolution: QuestionResolution) -> None:
        """
        Record a resolved question and advance the session.

        Quit ends the session without advancing; every other outcome adds its
        points and elapsed time and moves current_index forward by one.

        Raises:
            InvalidSessionStateError: If the session is not in progress
        """
        if state.phase is not SessionPhase.IN_PROGRESS:
            raise InvalidSessionStateError(
                f"Cannot apply a resolution to a session in phase {state.phase.value}"
            )

        if resolution.outcome is QuestionOutcome.QUIT:
            self.end_session(state, "quit")
            return

        state.history.append(resolution)
        state.score += resolution.points_earned
        state.total_elapsed_seconds += resolution.elapsed_seconds
        state.current_index += 1

        self.logger.debug(
            f"Question {state.current_index} resolved as {resolution.outcome.value}, "
            f"score {state.score}",
            extra={
                'event_type': 'question_resolved',
                'outcome': resolution.outcome.value,
                'points_earned': resolution.points_earned,
                'elapsed_seconds': resolution.elapsed_seconds,
                'timestamp': time.time()
            }
        )

        if state.current_index >= len(state.questions):
            self.end_session(state, "completed")

    def end_session(self, state: SessionState, reason: str) -> None:
        """Move the session to ENDED; calling it again is a no-op."""
        if state.phase is SessionPhase.ENDED:
            return

        state.phase = SessionPhase.ENDED
        state.active = False
        self.quiz_engine.cancel_timer()
        self.logger.info(
            f"Session ended ({reason}) at question {state.current_index} "
            f"of {len(state.questions)} with score {state.score}",
            extra={
                'event_type': 'session_ended',
                'reason': reason,
                'current_index': state.current_index,
                'score': state.score,
                'timestamp': time.time()
            }
        )
