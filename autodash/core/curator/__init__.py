"""Suggestion validation and rule-based fallback suggestions."""

from .fallback import fallback_suggester, FallbackSuggester
from .validator import suggestion_validator, SuggestionValidator

__all__ = ['fallback_suggester', 'FallbackSuggester', 'suggestion_validator', 'SuggestionValidator']
