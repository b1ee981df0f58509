"""
Setup script for graded-reader.

Graded Reader review core: daily spaced-repetition flashcards for the
vocabulary a learner collects while reading graded stories.

1. SRS Engine - SM-2 derived scheduling, one state per recall direction
2. Session Builder - A bounded, resumable review queue per day and language
3. Review CLI - Terminal flashcards over a local SQLite store

The 'graded-reader' command is the entry point.
"""

from setuptools import find_packages, setup

setup(
    name="graded-reader",
    version="0.1.0",
    description="Spaced-repetition vocabulary review for graded readers",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "graded-reader=graded_reader.review.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Environment :: Console",
        "Intended Audience :: Education",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
        "Topic :: Education :: Computer Aided Instruction (CAI)",
    ],
    keywords="language-learning spaced-repetition flashcards cli education",
)
