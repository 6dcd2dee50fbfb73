"""Lesson progress, final exam and certificate eligibility service."""

__version__ = "1.0.0"
