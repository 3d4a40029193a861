"""
Terminal presentation for the Trivia CLI game.

TerminalUI renders everything the player sees with rich; ConsoleInput feeds
typed lines into the event loop so that reading input can race the countdown.
"""
import asyncio
import logging
import sys
import threading
from typing import Iterable, List, Optional, TextIO

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table

from .models import AnswerResult, Question, Report
from .reporter import GRADE_EMOJI

logger = logging.getLogger(__name__)

# Summary lines show this many characters of each question
SUMMARY_PREVIEW_LENGTH = 30


class ConsoleInput:
    """
    Line reader that can be awaited alongside other tasks.

    A daemon thread blocks on the input stream and forwards each line into an
    asyncio.Queue on the loop that first awaited read_line.
    """

    def __init__(self, stream: Optional[TextIO] = None, console: Optional[Console] = None):
        self._stream = stream if stream is not None else sys.stdin
        self._console = console or Console()
        self._queue: Optional[asyncio.Queue] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._reader_thread: Optional[threading.Thread] = None
        self._closed = False

    def _ensure_reader(self) -> None:
        if self._reader_thread is not None:
            return
        self._loop = asyncio.get_running_loop()
        self._queue = asyncio.Queue()
        self._reader_thread = threading.Thread(
            target=self._read_lines,
            name="console-input",
            daemon=True
        )
        self._reader_thread.start()

    def _read_lines(self) -> None:
        try:
            for line in iter(self._stream.readline, ''):
                self._deliver(line.rstrip('\r\n'))
        except (OSError, ValueError) as e:
            logger.warning(f"Input stream failed: {e}")
        finally:
            # None marks end of input
            self._deliver(None)

    def _deliver(self, line: Optional[str]) -> None:
        try:
            self._loop.call_soon_threadsafe(self._queue.put_nowait, line)
        except RuntimeError:
            # Event loop already closed during shutdown
            pass

    async def read_line(self, prompt: str = "") -> str:
        """
        Print a prompt and wait for the next line.

        Returns:
            The line with surrounding whitespace stripped

        Raises:
            EOFError: If the input stream is closed
        """
        if self._closed:
            raise EOFError("Input stream closed")

        self._ensure_reader()
        if prompt:
            self._console.print(prompt, end="", markup=False, highlight=False)

        line = await self._queue.get()
        if line is None:
            self._closed = True
            raise EOFError("Input stream closed")
        return line.strip()

    def discard_pending(self) -> int:
        """
        Drop lines typed before the current prompt.

        Returns:
            Number of lines discarded
        """
        if self._queue is None:
            return 0

        discarded = 0
        while not self._queue.empty():
            line = self._queue.get_nowait()
            if line is None:
                # Keep the end-of-input marker for the next read
                self._queue.put_nowait(None)
                break
            discarded += 1

        if discarded:
            logger.debug(f"Discarded {discarded} stale input line(s)")
        return discarded


class TerminalUI:
    """Renders menus, questions and results to the terminal."""

    SEPARATOR_WIDTH = 50

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def _rule(self, title: str = "") -> None:
        self.console.print(Rule(title, characters="─"))

    def display_welcome(self, time_per_question: int) -> None:
        """Show the banner and instructions."""
        instructions = [
            "Instructions:",
            "- You will be presented with multiple choice questions",
            f"- You have {time_per_question} seconds per question"
            if time_per_question > 0 else "- There is no time limit per question",
            "- Enter the number of your answer (1-4)",
            '- Type "skip" to skip a question',
            '- Type "quit" to exit the game',
        ]
        self.console.print(Panel(
            "\n".join(instructions),
            title="🎮  TRIVIA CLI GAME  🎮",
            width=self.SEPARATOR_WIDTH + 10
        ))

    def display_load_warning(self, errors: Iterable[str]) -> None:
        """Tell the player the question file could not be used."""
        for error in errors:
            self.console.print(f"[red]Error loading questions:[/red] {escape(error)}")
        self.console.print("[yellow]Using default questions...[/yellow]")

    def display_quiz_summary(self, questions: List[Question]) -> None:
        """List each question's category and the start of its text."""
        self.console.print("\n📚 Quiz Summary:")
        self._rule()
        for i, question in enumerate(questions, start=1):
            preview = question.text[:SUMMARY_PREVIEW_LENGTH]
            self.console.print(f"{i}. {escape(question.category)}: {escape(preview)}...")
        self._rule()

    def display_menu(self) -> None:
        self.console.print("\n📋 MAIN MENU")
        self._rule()
        self.console.print("1. Start New Game")
        self.console.print("2. View Game Rules")
        self.console.print("3. Exit")

    def display_invalid_menu_option(self) -> None:
        self.console.print("\n[red]❌ Invalid option. Please try again.[/red]\n")

    def display_rules(self) -> None:
        self.console.print("\n📖 GAME RULES")
        self._rule()
        rules = [
            "Answer multiple choice questions (1-4)",
            "You can enable/disable timer at start",
            "Points are awarded for correct answers",
            "Time bonus for quick answers (if timer enabled)",
            'Type "skip" to skip a question',
            'Type "quit" to exit the game',
            "Your final score and grade will be displayed",
        ]
        for i, rule in enumerate(rules, start=1):
            self.console.print(f"{i}. {rule}")
        self._rule()

    def display_game_start(self) -> None:
        self.console.print("\n🎯 Game starting... Get ready!\n")

    def display_question(self, question: Question, index: int, total: int, time_per_question: int) -> None:
        """Show a question with its numbered options."""
        self.console.print()
        self._rule()
        self.console.print(f"📝 Question {index + 1} of {total}")
        self.console.print(f"📂 Category: {escape(question.category)}")
        self.console.print(f"⭐ Points: {question.points}")
        self._rule()
        self.console.print(f"\n[bold]{escape(question.text)}[/bold]\n")

        for i, option in enumerate(question.options, start=1):
            self.console.print(f"{i}. {escape(option)}")

        if time_per_question > 0:
            self.console.print(f"\n⏰ Time remaining: {time_per_question} seconds")
        self._rule()

    def display_countdown(self, remaining: int, total: int) -> None:
        """Show the remaining time at milestones only."""
        if remaining <= 0 or (remaining % 10 != 0 and remaining > 5):
            return

        if remaining > 5:
            style = "green"
        elif remaining > 2:
            style = "dark_orange"
        else:
            style = "red"
        self.console.print(
            f"\n[{style}]⏰ Time remaining: {remaining} second{'s' if remaining != 1 else ''}[/{style}]"
        )

    def display_invalid_answer(self, option_count: int) -> None:
        self.console.print(
            f"\n[red]❌ Invalid answer! Please enter a number between 1 and {option_count}.[/red]\n"
        )

    def _correct_answer_text(self, question: Question) -> str:
        correct = question.correct_option
        if correct is None:
            return "The correct answer is unavailable."
        number, text = correct
        return f"The correct answer was: {number}. {escape(text)}"

    def display_answer_result(self, question: Question, result: AnswerResult) -> None:
        """Show whether the answer was right and what it earned."""
        if result.correct:
            suffix = " (with time bonus!)" if result.time_bonus else ""
            self.console.print(
                f"\n[green]✅ Correct! 🎉 +{result.points_earned} points{suffix}[/green]"
            )
        else:
            self.console.print(f"\n[red]❌ Incorrect![/red] {self._correct_answer_text(question)}")

    def display_timeout(self, question: Question) -> None:
        self.console.print("\n\n[red]⏰ Time's up![/red]")
        self.console.print(self._correct_answer_text(question))

    def display_skipped(self) -> None:
        self.console.print("\n⏭️ Question skipped!")

    def display_report(self, report: Report) -> None:
        """Show final score, grade, category breakdown and feedback."""
        self.console.print()
        self.console.print(Panel("🏁 GAME OVER", width=self.SEPARATOR_WIDTH))

        self.console.print("\n📊 FINAL SCORE")
        self._rule()
        self.console.print(f"Questions answered: {report.questions_answered}/{report.total_questions}")
        self.console.print(f"Correct answers: {report.correct_answers}")
        self.console.print(f"Total Score: {report.score}/{report.total_possible_points} points")
        self.console.print(f"Time taken: {report.total_time_seconds} seconds")
        self.console.print(f"Average time per question: {report.average_time_seconds:.1f} seconds")
        self.console.print(
            f"Grade: {report.grade} {GRADE_EMOJI.get(report.grade, '')} ({report.percentage:.1f}%)"
        )

        self.console.print("\n📈 PERFORMANCE BREAKDOWN")
        if report.category_stats:
            table = Table(show_header=True, header_style="bold")
            table.add_column("Category")
            table.add_column("Questions", justify="right")
            table.add_column("Possible points", justify="right")
            for category, stat in report.category_stats.items():
                table.add_row(escape(category), str(stat.questions), str(stat.points))
            self.console.print(table)
        else:
            self.console.print("No questions reached.")

        self.console.print("\n💬 FINAL FEEDBACK")
        self._rule()
        self.console.print(report.feedback)
        self._rule()

    def display_goodbye(self) -> None:
        self.console.print("\nThanks for playing! Goodbye! 👋\n")

    def display_farewell(self) -> None:
        """Shown when the game is interrupted."""
        self.console.print("\n\n👋 Thanks for playing! Goodbye!\n")

    def display_error(self, message: str) -> None:
        self.console.print(f"[red]❌ An error occurred: {escape(message)}[/red]")
