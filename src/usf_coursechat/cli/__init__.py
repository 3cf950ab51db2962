"""
CLI Module - Command-line interface for USF CourseChat.
=======================================================

Usage:
    coursechat --help
    coursechat index --rebuild
    coursechat ask "Who is teaching CS 272?"
    coursechat chat
    coursechat eval --suite lab07

Components:
- main: Typer CLI application
"""

from usf_coursechat.cli.main import app, cli

__all__ = ["app", "cli"]
