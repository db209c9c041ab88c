"""Suggestion service client and response decoding."""
