"""
Trivia CLI - a single-player terminal trivia game.
"""
