"""
Interactive application shell for the Trivia CLI game.
Runs the main menu, game setup and replay loop around the quiz controller.
"""
import asyncio
import logging
from typing import List, Optional

from .config_manager import ConfigManager
from .data_manager import QuestionStore
from .models import Question
from .quiz_controller import QuizController
from .reporter import ResultsReporter
from .terminal import ConsoleInput, TerminalUI

logger = logging.getLogger(__name__)

MENU_START = "1"
MENU_RULES = "2"
MENU_EXIT = "3"


class TriviaApp:
    """Terminal trivia game: menu, play-throughs and results."""

    def __init__(
        self,
        config_manager: ConfigManager,
        ui: Optional[TerminalUI] = None,
        input_source=None,
        question_store: Optional[QuestionStore] = None,
        controller: Optional[QuizController] = None,
        reporter: Optional[ResultsReporter] = None
    ):
        self.config_manager = config_manager
        self.ui = ui or TerminalUI()
        self.input_source = input_source or ConsoleInput(console=self.ui.console)
        self.question_store = question_store or QuestionStore(
            config_manager.get_quiz_settings().questions_file
        )
        self.controller = controller or QuizController(self.ui, self.input_source)
        self.reporter = reporter or ResultsReporter()

    async def run(self) -> int:
        """
        Run the game until the player exits.

        Returns:
            Process exit status: 0 on a normal exit, 1 after an unexpected error
        """
        try:
            while True:
                questions = self._prepare_questions()

                if not await self._main_menu():
                    self.ui.display_goodbye()
                    return 0

                if not await self.play_game(questions):
                    self.ui.display_goodbye()
                    return 0

                logger.info("Player chose to play again")

        except EOFError:
            logger.info("Input closed, exiting")
            self.ui.display_goodbye()
            return 0
        except asyncio.CancelledError:
            # Interrupted: make sure no countdown outlives the game
            self.controller.quiz_engine.cancel_timer()
            raise
        except Exception as e:
            logger.exception(f"Unexpected error in game loop: {e}")
            self.ui.display_error(str(e))
            return 1

    def _prepare_questions(self) -> List[Question]:
        """Show the welcome screen and load this round's questions."""
        settings = self.config_manager.get_quiz_settings()
        self.ui.display_welcome(settings.time_per_question)

        questions = self.question_store.load()
        summary = self.question_store.get_loading_summary()
        logger.info(
            f"Prepared {summary['question_count']} questions from {summary['questions_file']}",
            extra={'event_type': 'questions_loaded', 'loading_summary': summary}
        )
        if self.question_store.is_fallback_active():
            self.ui.display_load_warning(self.question_store.get_load_errors())

        self.ui.display_quiz_summary(questions)
        return questions

    async def _main_menu(self) -> bool:
        """
        Loop over the main menu until the player starts a game or exits.

        Returns:
            True to start a game, False to exit
        """
        while True:
            self.ui.display_menu()
            choice = await self.input_source.read_line("\nSelect an option (1-3): ")

            if choice == MENU_START:
                return True
            if choice == MENU_RULES:
                self.ui.display_rules()
            elif choice == MENU_EXIT:
                return False
            else:
                self.ui.display_invalid_menu_option()

    async def play_game(self, questions: List[Question]) -> bool:
        """
        Play one session and show its report.

        Returns:
            True if the player wants to play again
        """
        self.ui.display_game_start()

        time_per_question = self.config_manager.get_timer_duration()
        if time_per_question > 0:
            use_timer = await self.input_source.read_line(
                "Do you want to play with timer? (yes/no): "
            )
            if use_timer.lower() == "no":
                time_per_question = 0

        state = self.controller.start_session(questions, time_per_question)
        await self.controller.run_session(state)

        report = self.reporter.summarize(state)
        self.ui.display_report(report)

        answer = await self.input_source.read_line("\nPlay again? (yes/no): ")
        return answer.lower() == "yes"
