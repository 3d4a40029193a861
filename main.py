#!/usr/bin/env python3
"""
Trivia CLI Game - Main Entry Point

This script runs the terminal trivia game. Questions are read from
questions.json; settings can be overridden in an optional config.json.

Usage:
    python main.py

Configuration (config.json, all keys optional):
    quiz.questions_file: Path to the JSON question list
    quiz.timer_duration: Seconds per question (0 disables the timer)
    logging.level / logging.log_directory / logging.console
"""

import asyncio
import logging
import sys
from pathlib import Path

from trivia.app import TriviaApp
from trivia.config_manager import ConfigManager
from trivia.terminal import TerminalUI

CONFIG_PATH = "config.json"


def setup_logging_from_config(config_manager: ConfigManager) -> None:
    """Set up logging based on configuration."""
    log_config = config_manager.get_logging_settings()
    log_level = getattr(logging, log_config['level'].upper())
    log_directory = Path(log_config['log_directory'])

    # Create logs directory
    log_directory.mkdir(parents=True, exist_ok=True)

    handlers = [logging.FileHandler(log_directory / "trivia.log", encoding='utf-8')]
    # Console logging would interleave with the game screen, so it is opt-in
    if log_config['console']:
        handlers.append(logging.StreamHandler())

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )


async def run_game_with_config(ui: TerminalUI) -> int:
    """Run the game with configuration."""
    config_manager = ConfigManager()
    result = config_manager.load_config_file(CONFIG_PATH)

    setup_logging_from_config(config_manager)
    logging.getLogger(__name__).info(config_manager.get_settings_summary())
    if not result['success']:
        for error in result['errors']:
            logging.getLogger(__name__).warning(f"Config problem: {error}")
        ui.console.print(result['user_message'])

    app = TriviaApp(config_manager, ui=ui)
    return await app.run()


def main() -> int:
    ui = TerminalUI()
    try:
        return asyncio.run(run_game_with_config(ui))
    except KeyboardInterrupt:
        ui.display_farewell()
        return 0
    except Exception as e:
        print(f"❌ Failed to start game: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
