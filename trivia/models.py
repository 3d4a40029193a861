"""
Core data models for the Trivia CLI game.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class Question:
    """Represents a single multiple-choice trivia question."""
    text: str
    options: Tuple[str, ...]
    correct_index: int
    category: str
    points: int

    @property
    def correct_option(self) -> Optional[Tuple[int, str]]:
        """1-based number and text of the correct option, or None if out of range."""
        if 0 <= self.correct_index < len(self.options):
            return self.correct_index + 1, self.options[self.correct_index]
        return None


@dataclass
class QuizSettings:
    """Configuration settings for a play-through."""
    time_per_question: int = 30
    questions_file: str = "questions.json"


class SessionPhase(Enum):
    """Lifecycle phases of a single session."""
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    ENDED = "ended"


class QuestionOutcome(Enum):
    """How a question was resolved."""
    ANSWERED = "answered"
    TIMED_OUT = "timed_out"
    SKIPPED = "skipped"
    QUIT = "quit"


@dataclass(frozen=True)
class AnswerResult:
    """Result of evaluating a typed answer."""
    accepted: bool
    correct: bool
    points_earned: int
    time_bonus: int = 0


@dataclass(frozen=True)
class QuestionResolution:
    """Terminal outcome of one question."""
    outcome: QuestionOutcome
    elapsed_seconds: int = 0
    result: Optional[AnswerResult] = None

    @property
    def points_earned(self) -> int:
        return self.result.points_earned if self.result else 0

    @property
    def correct(self) -> bool:
        return bool(self.result and self.result.correct)


@dataclass
class SessionState:
    """Mutable state of one play-through."""
    questions: List[Question]
    time_per_question: int = 0
    current_index: int = 0
    score: int = 0
    total_elapsed_seconds: int = 0
    active: bool = False
    phase: SessionPhase = SessionPhase.NOT_STARTED
    history: List[QuestionResolution] = field(default_factory=list)

    @property
    def timer_enabled(self) -> bool:
        return self.time_per_question > 0

    @property
    def current_question(self) -> Optional[Question]:
        if self.current_index < len(self.questions):
            return self.questions[self.current_index]
        return None


@dataclass
class CategoryStat:
    """Count and possible points of the reached questions in one category."""
    questions: int = 0
    points: int = 0


@dataclass(frozen=True)
class Report:
    """Final statistics of a finished session."""
    total_questions: int
    questions_answered: int
    correct_answers: int
    score: int
    total_possible_points: int
    total_time_seconds: int
    average_time_seconds: float
    percentage: float
    grade: str
    category_stats: Dict[str, CategoryStat]
    feedback: str
