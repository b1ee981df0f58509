"""
Entry point for running the review CLI as a module.

Usage:
    python -m graded_reader.review study
    python -m graded_reader.review queue --lang ko
    python -m graded_reader.review --help
"""
from .cli import main

if __name__ == "__main__":
    main()
