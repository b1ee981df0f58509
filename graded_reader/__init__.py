"""Graded Reader: spaced-repetition review of vocabulary learned while reading."""

__version__ = "0.1.0"
