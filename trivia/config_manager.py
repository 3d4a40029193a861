"""
Configuration manager for Trivia CLI settings.
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict

from .models import QuizSettings


class ConfigManager:
    """Manages game settings loaded from an optional JSON config file."""

    # Default configuration values
    DEFAULT_TIMER_DURATION = 30
    DEFAULT_QUESTIONS_FILE = "questions.json"
    DEFAULT_LOG_LEVEL = "INFO"
    DEFAULT_LOG_DIRECTORY = "./logs/"

    # Validation limits; 0 disables the timer
    TIMER_DISABLED = 0
    MIN_TIMER_DURATION = 5
    MAX_TIMER_DURATION = 300  # 5 minutes
    VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

    def __init__(self):
        """Initialize ConfigManager with default settings."""
        self.logger = logging.getLogger(__name__)
        self._settings = QuizSettings(
            time_per_question=self.DEFAULT_TIMER_DURATION,
            questions_file=self.DEFAULT_QUESTIONS_FILE
        )
        self._logging = self._default_logging()

    def _default_logging(self) -> Dict[str, Any]:
        return {
            'level': self.DEFAULT_LOG_LEVEL,
            'log_directory': self.DEFAULT_LOG_DIRECTORY,
            'console': False
        }

    def load_config_file(self, config_path: str = "config.json") -> Dict[str, Any]:
        """
        Apply settings from a JSON config file.

        A missing file is not an error: defaults stay in effect. Invalid values
        are reported and skipped individually.

        Args:
            config_path: Path to the JSON config file

        Returns:
            Dictionary with success status, list of errors, and user-friendly message
        """
        path = Path(config_path)
        if not path.exists():
            self.logger.info(f"No config file at {path}, using defaults")
            return {
                'success': True,
                'errors': [],
                'user_message': "Using default settings"
            }

        try:
            with open(path, 'r', encoding='utf-8') as f:
                config = json.load(f)
        except json.JSONDecodeError as e:
            error_msg = f"Invalid JSON in {path}: {e}"
            self.logger.error(error_msg)
            return {
                'success': False,
                'errors': [error_msg],
                'user_message': f"❌ Invalid JSON in {path.name}, using default settings"
            }
        except OSError as e:
            error_msg = f"Error loading {path}: {e}"
            self.logger.error(error_msg)
            return {
                'success': False,
                'errors': [error_msg],
                'user_message': f"❌ Could not read {path.name}, using default settings"
            }

        if not isinstance(config, dict):
            error_msg = f"Config file {path} must contain a JSON object"
            self.logger.error(error_msg)
            return {
                'success': False,
                'errors': [error_msg],
                'user_message': f"❌ {path.name} must contain a JSON object, using default settings"
            }

        errors = []
        quiz_config = config.get('quiz') or {}
        if not isinstance(quiz_config, dict):
            errors.append("'quiz' section must be a JSON object")
            quiz_config = {}
        if 'timer_duration' in quiz_config:
            result = self.set_timer_duration(quiz_config['timer_duration'])
            if not result['success']:
                errors.append(result['error'])
        if 'questions_file' in quiz_config:
            result = self.set_questions_file(quiz_config['questions_file'])
            if not result['success']:
                errors.append(result['error'])

        log_config = config.get('logging') or {}
        if not isinstance(log_config, dict):
            errors.append("'logging' section must be a JSON object")
            log_config = {}
        if 'level' in log_config:
            result = self.set_log_level(log_config['level'])
            if not result['success']:
                errors.append(result['error'])
        if 'log_directory' in log_config:
            self._logging['log_directory'] = str(log_config['log_directory'])
        if 'console' in log_config:
            self._logging['console'] = bool(log_config['console'])

        if errors:
            return {
                'success': False,
                'errors': errors,
                'user_message': f"⚠️ Some settings in {path.name} were invalid and were ignored"
            }

        self.logger.info(f"Loaded configuration from {path}")
        return {
            'success': True,
            'errors': [],
            'user_message': f"✅ Loaded settings from {path.name}"
        }

    def get_quiz_settings(self) -> QuizSettings:
        """
        Get current quiz settings.

        Returns:
            Copy of the current QuizSettings
        """
        return QuizSettings(
            time_per_question=self._settings.time_per_question,
            questions_file=self._settings.questions_file
        )

    def set_timer_duration(self, duration: int) -> Dict[str, Any]:
        """
        Set the time budget per question.

        Args:
            duration: Seconds per question, or 0 to disable the timer

        Returns:
            Dictionary with success status, error message, and user-friendly message
        """
        if not isinstance(duration, int) or isinstance(duration, bool):
            error_msg = f"Timer duration must be an integer, got {type(duration).__name__}"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"❌ Invalid input: Expected a number, got {type(duration).__name__}"
            }

        if duration == self.TIMER_DISABLED:
            self._settings.time_per_question = self.TIMER_DISABLED
            self.logger.info("Timer disabled")
            return {
                'success': True,
                'message': "Timer disabled",
                'user_message': "✅ Timer disabled"
            }

        if duration < self.MIN_TIMER_DURATION:
            error_msg = f"Timer duration must be at least {self.MIN_TIMER_DURATION} seconds"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"❌ Timer too short: Minimum is {self.MIN_TIMER_DURATION} seconds"
            }

        if duration > self.MAX_TIMER_DURATION:
            error_msg = f"Timer duration cannot exceed {self.MAX_TIMER_DURATION} seconds"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"❌ Timer too long: Maximum is {self.MAX_TIMER_DURATION} seconds ({self.MAX_TIMER_DURATION // 60} minutes)"
            }

        self._settings.time_per_question = duration
        self.logger.info(f"Timer duration set to {duration} seconds")
        return {
            'success': True,
            'message': f"Timer duration set to {duration} seconds",
            'user_message': f"✅ Timer set to {duration} seconds"
        }

    def get_timer_duration(self) -> int:
        """Get current timer duration in seconds (0 means disabled)."""
        return self._settings.time_per_question

    def set_questions_file(self, questions_file: str) -> Dict[str, Any]:
        """
        Set the path of the JSON question list.

        Returns:
            Dictionary with success status, error message, and user-friendly message
        """
        if not isinstance(questions_file, str) or not questions_file.strip():
            error_msg = "Questions file must be a non-empty path string"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': "❌ Questions file path cannot be empty"
            }

        self._settings.questions_file = questions_file
        self.logger.info(f"Questions file set to {questions_file}")
        return {
            'success': True,
            'message': f"Questions file set to {questions_file}",
            'user_message': f"✅ Questions will be loaded from {questions_file}"
        }

    def set_log_level(self, level: str) -> Dict[str, Any]:
        """Set the logging level by name."""
        if not isinstance(level, str) or level.upper() not in self.VALID_LOG_LEVELS:
            error_msg = f"Invalid log level: {level}"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"❌ Log level must be one of {', '.join(self.VALID_LOG_LEVELS)}"
            }

        self._logging['level'] = level.upper()
        return {
            'success': True,
            'message': f"Log level set to {level.upper()}",
            'user_message': f"✅ Log level set to {level.upper()}"
        }

    def get_logging_settings(self) -> Dict[str, Any]:
        """Get a copy of the logging settings."""
        return dict(self._logging)

    def get_settings_summary(self) -> str:
        """
        Get a formatted summary of current settings.

        Returns:
            Human-readable string describing current settings
        """
        timer_str = (
            f"{self._settings.time_per_question} seconds"
            if self._settings.time_per_question > 0
            else "disabled"
        )
        return (
            f"Game Settings:\n"
            f"• Timer: {timer_str}\n"
            f"• Questions File: {self._settings.questions_file}\n"
            f"• Log Level: {self._logging['level']}"
        )
