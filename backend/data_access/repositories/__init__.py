"""
Repository pattern implementations for data access.

This module provides a clean abstraction over database operations
with proper connection management and error handling.
"""

from .base import BaseRepository
from .match_repository import MatchRepository

__all__ = ['BaseRepository', 'MatchRepository']
