"""
Quiz engine core logic for the Trivia CLI game.
Handles question timing and answer evaluation.
"""
import asyncio
import inspect
import logging
import math
import time
from typing import Any, Callable, Optional

from .models import AnswerResult, Question

# Set up logger for timer operations
logger = logging.getLogger(__name__)

SKIP_COMMAND = "skip"
QUIT_COMMAND = "quit"

# Fraction of the base points awarded for answering in under half the time
TIME_BONUS_RATIO = 0.5


class TimerLifecycleLogger:
    """Structured logging for timer lifecycle events."""

    @staticmethod
    def log_timer_start(timer_name: str, duration: int) -> None:
        """Log timer countdown start."""
        logger.info(
            f"Timer lifecycle: COUNTDOWN_START - {timer_name}, Duration {duration}s",
            extra={
                'event_type': 'timer_countdown_start',
                'timer_name': timer_name,
                'duration': duration,
                'timestamp': time.time()
            }
        )

    @staticmethod
    def log_timer_disabled(timer_name: str, duration: int) -> None:
        """Log that a timer was requested with no budget."""
        logger.debug(
            f"Timer lifecycle: DISABLED - {timer_name}, Duration {duration}s",
            extra={
                'event_type': 'timer_disabled',
                'timer_name': timer_name,
                'duration': duration,
                'timestamp': time.time()
            }
        )

    @staticmethod
    def log_timer_update(timer_name: str, remaining_time: int, total_duration: int) -> None:
        """Log timer update events (throttled to avoid spam)."""
        # Log only at specific intervals to avoid log spam
        if remaining_time % 10 == 0 or remaining_time <= 5:
            progress_percent = ((total_duration - remaining_time) / total_duration) * 100
            logger.debug(
                f"Timer lifecycle: UPDATE - {timer_name}, Remaining {remaining_time}s ({progress_percent:.1f}% complete)",
                extra={
                    'event_type': 'timer_update',
                    'timer_name': timer_name,
                    'remaining_time': remaining_time,
                    'total_duration': total_duration,
                    'progress_percent': progress_percent,
                    'timestamp': time.time()
                }
            )

    @staticmethod
    def log_timer_completion(timer_name: str, completion_type: str, total_duration: int) -> None:
        """Log timer completion (natural expiry or cancellation)."""
        logger.info(
            f"Timer lifecycle: COMPLETED - {timer_name}, Type {completion_type}, Duration {total_duration}s",
            extra={
                'event_type': 'timer_completed',
                'timer_name': timer_name,
                'completion_type': completion_type,
                'total_duration': total_duration,
                'timestamp': time.time()
            }
        )

    @staticmethod
    def log_timer_error(timer_name: str, error_type: str, error_message: str, operation: str) -> None:
        """Log timer-related errors with context."""
        logger.error(
            f"Timer lifecycle: ERROR - {timer_name}, Operation {operation}, Type {error_type}: {error_message}",
            extra={
                'event_type': 'timer_error',
                'timer_name': timer_name,
                'error_type': error_type,
                'error_message': error_message,
                'operation': operation,
                'timestamp': time.time()
            }
        )

    @staticmethod
    def log_race_condition_detected(timer_name: str, details: str) -> None:
        """Log race condition detection."""
        logger.warning(
            f"Timer lifecycle: RACE_CONDITION - {timer_name}: {details}",
            extra={
                'event_type': 'timer_race_condition',
                'timer_name': timer_name,
                'details': details,
                'timestamp': time.time()
            }
        )


async def _invoke(callback: Optional[Callable[..., Any]], *args) -> None:
    """Call a plain or coroutine callback."""
    if callback is None:
        return
    result = callback(*args)
    if inspect.isawaitable(result):
        await result


class QuizTimer:
    """
    Countdown timer for a single question.

    The timer itself is the cancellable handle returned by QuizEngine.start_timer.
    A timer started with a budget of zero or less is inert: it never ticks and
    never times out.
    """

    def __init__(self, name: str = "question", tick_interval: float = 1.0):
        """Initialize the timer."""
        self._task: Optional[asyncio.Task] = None
        self._name = name
        self._tick_interval = tick_interval
        self._remaining_time = 0
        self._total_duration = 0
        self._is_cancelled = False
        self._has_fired = False

    def start(
        self,
        duration: int,
        tick_callback: Optional[Callable[[int], Any]] = None,
        timeout_callback: Optional[Callable[[], Any]] = None
    ) -> "QuizTimer":
        """
        Start the countdown as a background task on the running event loop.

        Args:
            duration: Time budget in seconds; <= 0 leaves the timer inert
            tick_callback: Called once per elapsed second with the seconds remaining
            timeout_callback: Called exactly once when the budget reaches zero

        Returns:
            This timer, as the handle used for cancellation
        """
        self._total_duration = duration
        self._remaining_time = max(duration, 0)

        if duration <= 0:
            TimerLifecycleLogger.log_timer_disabled(self._name, duration)
            return self

        TimerLifecycleLogger.log_timer_start(self._name, duration)
        self._task = asyncio.create_task(
            self._countdown(tick_callback, timeout_callback)
        )
        return self

    async def _countdown(
        self,
        tick_callback: Optional[Callable[[int], Any]],
        timeout_callback: Optional[Callable[[], Any]]
    ) -> None:
        try:
            while self._remaining_time > 0:
                await asyncio.sleep(self._tick_interval)
                if self._is_cancelled:
                    return
                self._remaining_time -= 1
                TimerLifecycleLogger.log_timer_update(
                    self._name,
                    self._remaining_time,
                    self._total_duration
                )
                await _invoke(tick_callback, self._remaining_time)

            # A tick callback may have cancelled us
            if self._is_cancelled:
                return

            self._has_fired = True
            TimerLifecycleLogger.log_timer_completion(
                self._name,
                "natural_expiry",
                self._total_duration
            )
            await _invoke(timeout_callback)

        except asyncio.CancelledError:
            self._is_cancelled = True
            TimerLifecycleLogger.log_timer_completion(
                self._name,
                "cancelled",
                self._total_duration
            )
            raise
        except Exception as e:
            TimerLifecycleLogger.log_timer_error(
                self._name,
                "countdown_execution_error",
                str(e),
                "_countdown"
            )
            raise

    def cancel(self) -> bool:
        """
        Stop further ticks and the timeout.

        Returns:
            True if a running countdown was stopped, False if this was a no-op
            (inert timer, already cancelled, or already fired)
        """
        if self._task is None or self._is_cancelled or self._has_fired:
            return False

        self._is_cancelled = True
        if not self._task.done():
            logger.debug(f"Cancelling timer task for {self._name}")
            self._task.cancel()
        return True

    @property
    def is_inert(self) -> bool:
        """Check if the timer was started without a budget."""
        return self._task is None

    @property
    def is_running(self) -> bool:
        """Check if the countdown task is still active."""
        return self._task is not None and not self._task.done() and not self._is_cancelled

    @property
    def is_cancelled(self) -> bool:
        """Check if timer is cancelled."""
        return self._is_cancelled

    @property
    def has_fired(self) -> bool:
        """Check if the timeout callback was triggered."""
        return self._has_fired

    @property
    def remaining_time(self) -> int:
        """Get remaining time in seconds."""
        return self._remaining_time


class QuizEngine:
    """Core quiz engine that owns the per-question countdown."""

    def __init__(self, tick_interval: float = 1.0):
        """
        Initialize the quiz engine.

        Args:
            tick_interval: Real seconds per timer tick
        """
        self.tick_interval = tick_interval
        self._active_timer: Optional[QuizTimer] = None

    def start_timer(
        self,
        duration: int,
        tick_callback: Optional[Callable[[int], Any]] = None,
        timeout_callback: Optional[Callable[[], Any]] = None,
        name: str = "question"
    ) -> QuizTimer:
        """
        Start a countdown for the current question.

        Any timer still running from a previous question is cancelled first so
        that at most one countdown exists at a time.

        Returns:
            The cancellable timer handle (inert if duration <= 0)
        """
        if self._active_timer is not None and self._active_timer.is_running:
            TimerLifecycleLogger.log_race_condition_detected(
                name,
                "Previous timer still running when a new one was requested"
            )
            self._active_timer.cancel()

        timer = QuizTimer(name=name, tick_interval=self.tick_interval)
        timer.start(duration, tick_callback, timeout_callback)
        # Inert timers are never tracked
        self._active_timer = None if timer.is_inert else timer
        return timer

    def cancel_timer(self, timer: Optional[QuizTimer] = None) -> bool:
        """
        Cancel a timer; defaults to the active one.

        Returns:
            True if a running countdown was stopped, False otherwise
        """
        target = timer if timer is not None else self._active_timer
        if target is None:
            return False

        cancelled = target.cancel()
        if target is self._active_timer:
            self._active_timer = None
        return cancelled

    def get_timer_status(self) -> Optional[dict]:
        """
        Get the status of the active timer.

        Returns:
            Dictionary with timer status or None if no active timer
        """
        if self._active_timer is None:
            return None
        return {
            'remaining_time': self._active_timer.remaining_time,
            'is_running': self._active_timer.is_running,
            'is_cancelled': self._active_timer.is_cancelled,
            'has_fired': self._active_timer.has_fired
        }


def parse_command(raw_input: str) -> Optional[str]:
    """Return "skip" or "quit" if the input is a control command, else None."""
    command = raw_input.strip().lower()
    if command in (SKIP_COMMAND, QUIT_COMMAND):
        return command
    return None


def evaluate_answer(
    question: Question,
    raw_input: str,
    elapsed_seconds: float,
    time_budget_seconds: int
) -> AnswerResult:
    """
    Judge a typed answer and compute the points earned.

    Args:
        question: Question being answered
        raw_input: Player input, expected to be a 1-based option number
        elapsed_seconds: Time taken to answer
        time_budget_seconds: Per-question time budget; 0 when the timer is disabled

    Returns:
        AnswerResult; accepted is False when the input is not a valid option number
    """
    try:
        choice = int(raw_input.strip())
    except ValueError:
        return AnswerResult(accepted=False, correct=False, points_earned=0)

    if choice < 1 or choice > len(question.options):
        return AnswerResult(accepted=False, correct=False, points_earned=0)

    if choice - 1 != question.correct_index:
        return AnswerResult(accepted=True, correct=False, points_earned=0)

    bonus = 0
    if time_budget_seconds > 0 and elapsed_seconds < time_budget_seconds / 2:
        bonus = math.floor(question.points * TIME_BONUS_RATIO)

    return AnswerResult(
        accepted=True,
        correct=True,
        points_earned=question.points + bonus,
        time_bonus=bonus
    )
