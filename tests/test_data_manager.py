"""
Unit tests for QuestionStore class.
"""
import logging
import shutil
import tempfile
import unittest
from pathlib import Path

from trivia.data_manager import FALLBACK_QUESTIONS, QuestionStore
from trivia.models import Question
from tests.test_fixtures import TestFixtures


class TestQuestionStore(unittest.TestCase):
    """Test cases for QuestionStore loading and fallback."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        logging.disable(logging.CRITICAL)

    def tearDown(self):
        """Clean up test fixtures."""
        logging.disable(logging.NOTSET)
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_load_valid_file(self):
        path = TestFixtures.write_json(
            self.temp_dir, "questions.json", TestFixtures.create_valid_questions_json()
        )
        store = QuestionStore(str(path))

        questions = store.load()

        self.assertEqual(len(questions), 3)
        self.assertFalse(store.is_fallback_active())
        self.assertEqual(store.get_load_errors(), [])
        self.assertEqual(
            questions[0],
            Question("What is the capital of Japan?", ("Seoul", "Tokyo", "Beijing", "Bangkok"), 1, "Geography", 10)
        )

    def test_load_preserves_file_order(self):
        path = TestFixtures.write_json(
            self.temp_dir, "questions.json", TestFixtures.create_valid_questions_json()
        )
        questions = QuestionStore(str(path)).load()

        self.assertEqual([q.category for q in questions], ["Geography", "Math", "Science"])

    def test_missing_file_falls_back(self):
        store = QuestionStore(str(Path(self.temp_dir) / "missing.json"))

        questions = store.load()

        self.assertEqual(questions, FALLBACK_QUESTIONS)
        self.assertTrue(store.is_fallback_active())
        self.assertIn("not found", store.get_load_errors()[0])

    def test_invalid_json_falls_back(self):
        path = Path(self.temp_dir) / "questions.json"
        path.write_text("{ invalid json }", encoding='utf-8')
        store = QuestionStore(str(path))

        questions = store.load()

        self.assertEqual(questions, FALLBACK_QUESTIONS)
        self.assertIn("Invalid JSON", store.get_load_errors()[0])

    def test_invalid_utf8_falls_back(self):
        path = Path(self.temp_dir) / "questions.json"
        path.write_bytes(b'[{"question": "\xff\xfe bad"}]')
        store = QuestionStore(str(path))

        questions = store.load()

        self.assertEqual(questions, FALLBACK_QUESTIONS)
        self.assertTrue(store.is_fallback_active())
        self.assertIn("Invalid UTF-8", store.get_load_errors()[0])

    def test_deeply_nested_json_falls_back(self):
        path = Path(self.temp_dir) / "questions.json"
        path.write_text("[" * 100000 + "]" * 100000, encoding='utf-8')
        store = QuestionStore(str(path))

        questions = store.load()

        self.assertEqual(questions, FALLBACK_QUESTIONS)
        self.assertTrue(store.is_fallback_active())
        self.assertIn("nested too deeply", store.get_load_errors()[0])

    def test_invalid_structures_fall_back(self):
        for i, data in enumerate(TestFixtures.create_invalid_questions_json_structures()):
            path = TestFixtures.write_json(self.temp_dir, f"invalid_{i}.json", data)
            store = QuestionStore(str(path))

            questions = store.load()

            self.assertEqual(questions, FALLBACK_QUESTIONS, data)
            self.assertTrue(store.is_fallback_active(), data)
            self.assertEqual(len(store.get_load_errors()), 1, data)

    def test_fallback_set_is_playable(self):
        self.assertGreaterEqual(len(FALLBACK_QUESTIONS), 2)
        for question in FALLBACK_QUESTIONS:
            self.assertIsNotNone(question.correct_option)
            self.assertGreater(question.points, 0)

    def test_out_of_range_answer_is_loaded_with_warning(self):
        data = TestFixtures.create_valid_questions_json()
        data[0]["answer"] = 7
        path = TestFixtures.write_json(self.temp_dir, "questions.json", data)
        store = QuestionStore(str(path))

        logging.disable(logging.NOTSET)
        with self.assertLogs("trivia.data_manager", level="WARNING") as logs:
            questions = store.load()

        self.assertFalse(store.is_fallback_active())
        self.assertEqual(questions[0].correct_index, 7)
        self.assertIsNone(questions[0].correct_option)
        self.assertTrue(any("outside" in line for line in logs.output))

    def test_reload_clears_previous_errors(self):
        path = Path(self.temp_dir) / "questions.json"
        store = QuestionStore(str(path))
        store.load()
        self.assertTrue(store.is_fallback_active())

        TestFixtures.write_json(self.temp_dir, "questions.json", TestFixtures.create_valid_questions_json())
        store.load()

        self.assertFalse(store.is_fallback_active())
        self.assertEqual(store.get_load_errors(), [])

    def test_loading_summary(self):
        store = QuestionStore(str(Path(self.temp_dir) / "missing.json"))
        store.load()

        summary = store.get_loading_summary()

        self.assertEqual(summary['question_count'], 2)
        self.assertTrue(summary['has_errors'])
        self.assertTrue(summary['fallback_active'])
        self.assertEqual(summary['categories'], ["Math", "Science"])

    def test_returned_list_is_a_copy(self):
        store = QuestionStore(str(Path(self.temp_dir) / "missing.json"))
        questions = store.load()
        questions.clear()

        self.assertEqual(len(store.load()), 2)


if __name__ == '__main__':
    unittest.main()
