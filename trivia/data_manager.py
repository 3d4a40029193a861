"""
Question store for loading the trivia question list from JSON.
"""
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List

from .models import Question


# Built-in questions used whenever the question file cannot be loaded
FALLBACK_QUESTIONS = [
    Question(
        text="What is 2 + 2?",
        options=("3", "4", "5", "6"),
        correct_index=1,
        category="Math",
        points=5
    ),
    Question(
        text="What color is the sky?",
        options=("Red", "Green", "Blue", "Yellow"),
        correct_index=2,
        category="Science",
        points=5
    ),
]

REQUIRED_FIELDS = {
    "question": str,
    "options": list,
    "answer": int,
    "category": str,
    "points": int,
}


class QuestionLoadError(Exception):
    """Raised internally when the question file cannot be used."""
    pass


class QuestionStore:
    """Loads the ordered question list for a session, with a built-in fallback."""

    # Refuse to parse absurdly large files
    MAX_FILE_SIZE = 10 * 1024 * 1024

    def __init__(self, questions_file: str = "questions.json"):
        """
        Initialize the store.

        Args:
            questions_file: Path to the JSON question list
        """
        self.questions_file = Path(questions_file)
        self.logger = logging.getLogger(__name__)
        self.questions: List[Question] = []
        self.load_errors: List[str] = []
        self.fallback_active = False

    def load(self) -> List[Question]:
        """
        Load questions from the JSON file, falling back to the built-in set.

        Never raises: any read or parse failure is logged and recorded in
        load_errors, and the fallback questions are returned instead.

        Returns:
            Ordered list of Question objects (never empty)
        """
        self.load_errors.clear()
        self.fallback_active = False

        try:
            data = self._read_file()
            self.questions = self._parse_questions(data)
        except QuestionLoadError as e:
            self.load_errors.append(str(e))
            self.logger.warning(f"Error loading questions: {e}")
            return self._use_fallback()

        self.logger.info(
            f"Loaded {len(self.questions)} questions from {self.questions_file}"
        )
        return list(self.questions)

    def _read_file(self) -> Any:
        """
        Read and decode the question file.

        Returns:
            Decoded JSON value

        Raises:
            QuestionLoadError: If the file is missing, unreadable, not UTF-8 or not valid JSON
        """
        try:
            if not self.questions_file.exists():
                raise QuestionLoadError(f"Question file not found: {self.questions_file}")

            if not os.access(self.questions_file, os.R_OK):
                raise QuestionLoadError(f"Permission denied: Cannot read {self.questions_file}")

            file_size = self.questions_file.stat().st_size
            if file_size > self.MAX_FILE_SIZE:
                raise QuestionLoadError(
                    f"File too large ({file_size / 1024 / 1024:.1f}MB). "
                    f"Maximum size is {self.MAX_FILE_SIZE / 1024 / 1024}MB"
                )

            with open(self.questions_file, 'r', encoding='utf-8') as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise QuestionLoadError(f"Invalid JSON in {self.questions_file}: {e}") from e
        except UnicodeDecodeError as e:
            raise QuestionLoadError(f"Invalid UTF-8 in {self.questions_file}: {e}") from e
        except RecursionError as e:
            raise QuestionLoadError(f"JSON in {self.questions_file} is nested too deeply") from e
        except PermissionError as e:
            raise QuestionLoadError(f"Permission denied: {e}") from e
        except OSError as e:
            raise QuestionLoadError(f"Failed to read {self.questions_file}: {e}") from e

    def _parse_questions(self, data: Any) -> List[Question]:
        """
        Convert decoded JSON into Question objects.

        Expected structure:
        [
            {
                "question": str,
                "options": [str, ...],
                "answer": int,      # 0-based index of the correct option
                "category": str,
                "points": int
            }
        ]

        Raises:
            QuestionLoadError: If the structure does not match
        """
        if not isinstance(data, list):
            raise QuestionLoadError("Question data must be a JSON array")

        if not data:
            raise QuestionLoadError("Question list cannot be empty")

        questions = []
        for i, record in enumerate(data):
            if not isinstance(record, dict):
                raise QuestionLoadError(f"Question {i} must be an object")

            for field_name, field_type in REQUIRED_FIELDS.items():
                if field_name not in record:
                    raise QuestionLoadError(f"Question {i} missing '{field_name}' field")
                value = record[field_name]
                # bool is an int subclass but never a valid index or score
                if not isinstance(value, field_type) or isinstance(value, bool):
                    raise QuestionLoadError(
                        f"Question {i} '{field_name}' field must be {field_type.__name__}"
                    )

            question = Question(
                text=record["question"],
                options=tuple(str(option) for option in record["options"]),
                correct_index=record["answer"],
                category=record["category"],
                points=record["points"]
            )

            if question.correct_option is None:
                self.logger.warning(
                    f"Question {i} has answer index {question.correct_index} outside "
                    f"its {len(question.options)} options; it can never be answered correctly"
                )

            questions.append(question)

        return questions

    def _use_fallback(self) -> List[Question]:
        """Switch to the built-in question set."""
        self.questions = list(FALLBACK_QUESTIONS)
        self.fallback_active = True
        self.logger.warning("Using default questions due to load failure")
        return list(self.questions)

    def is_fallback_active(self) -> bool:
        """
        Check if the built-in questions replaced the question file.

        Returns:
            True if the last load fell back, False otherwise
        """
        return self.fallback_active

    def get_load_errors(self) -> List[str]:
        """Get errors encountered during the last load."""
        return self.load_errors.copy()

    def get_loading_summary(self) -> Dict[str, Any]:
        """
        Get a summary of the last load operation.

        Returns:
            Dictionary with loading statistics and status
        """
        return {
            'question_count': len(self.questions),
            'has_errors': bool(self.load_errors),
            'errors': self.get_load_errors(),
            'fallback_active': self.fallback_active,
            'questions_file': str(self.questions_file),
            'categories': sorted({q.category for q in self.questions})
        }
