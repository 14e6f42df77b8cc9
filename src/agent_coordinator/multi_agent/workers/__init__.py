"""Predefined workers for common tasks.

This module provides factory functions that return WorkerConfig objects for
research, coding, review, and writing work.
"""

from .coder import create_coder_worker
from .researcher import create_researcher_worker
from .reviewer import create_reviewer_worker
from .writer import create_writer_worker

__all__ = [
    "create_coder_worker",
    "create_researcher_worker",
    "create_reviewer_worker",
    "create_writer_worker",
]
