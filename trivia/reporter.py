"""
Results reporter for finished trivia sessions.
"""
import logging
from typing import Dict, List, Tuple

from .models import CategoryStat, Report, SessionState

# Minimum percentage for each grade, checked top to bottom
GRADE_LADDER: List[Tuple[float, str]] = [
    (90, "A+"),
    (80, "A"),
    (70, "B"),
    (60, "C"),
    (50, "D"),
]
FAILING_GRADE = "F"

GRADE_EMOJI = {
    "A+": "🏆",
    "A": "🎯",
    "B": "👍",
    "C": "📊",
    "D": "😅",
    "F": "😢",
}

FEEDBACK_LADDER: List[Tuple[float, str]] = [
    (80, "Outstanding! You're a trivia master! 🌟"),
    (60, "Great job! You know your stuff! 👍"),
    (40, "Good effort! Keep practicing! 📚"),
]
DEFAULT_FEEDBACK = "Keep learning! Every expert was once a beginner! 💪"


def calculate_percentage(score: int, total_possible: int) -> float:
    """Score as a percentage of the possible points; 0 when nothing was possible."""
    if total_possible <= 0:
        return 0.0
    return (score / total_possible) * 100


def calculate_grade(percentage: float) -> str:
    """Map a percentage to a letter grade."""
    for threshold, grade in GRADE_LADDER:
        if percentage >= threshold:
            return grade
    return FAILING_GRADE


def feedback_for(percentage: float) -> str:
    """Map a percentage to a closing remark."""
    for threshold, message in FEEDBACK_LADDER:
        if percentage >= threshold:
            return message
    return DEFAULT_FEEDBACK


class ResultsReporter:
    """Builds the end-of-game report from a finished session."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def summarize(self, state: SessionState) -> Report:
        """
        Compute final statistics for a session.

        Only questions before current_index count as reached. The category
        breakdown reports the possible points of the reached questions, not
        the points actually earned.

        Args:
            state: Finished (or quit) session; not modified

        Returns:
            Report with score, timing, grade and category breakdown
        """
        answered = state.current_index
        total_possible = sum(q.points for q in state.questions)
        percentage = calculate_percentage(state.score, total_possible)
        average_time = state.total_elapsed_seconds / answered if answered > 0 else 0.0

        report = Report(
            total_questions=len(state.questions),
            questions_answered=answered,
            correct_answers=sum(1 for resolution in state.history if resolution.correct),
            score=state.score,
            total_possible_points=total_possible,
            total_time_seconds=state.total_elapsed_seconds,
            average_time_seconds=average_time,
            percentage=percentage,
            grade=calculate_grade(percentage),
            category_stats=self._category_breakdown(state),
            feedback=feedback_for(percentage)
        )

        self.logger.info(
            f"Session summary: {report.score}/{report.total_possible_points} points, "
            f"{answered}/{report.total_questions} questions, grade {report.grade}",
            extra={
                'event_type': 'session_summarized',
                'score': report.score,
                'questions_answered': answered,
                'percentage': percentage,
                'grade': report.grade
            }
        )
        return report

    def _category_breakdown(self, state: SessionState) -> Dict[str, CategoryStat]:
        stats: Dict[str, CategoryStat] = {}
        for question in state.questions[:state.current_index]:
            stat = stats.setdefault(question.category, CategoryStat())
            stat.questions += 1
            stat.points += question.points
        return stats
