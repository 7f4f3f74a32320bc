"""Typed observation and time-series analytics for veterinary patient monitoring.

This package contains the business logic and domain models,
isolated from persistence and transport so it is easy to test and reason about.
"""

__version__ = "0.1.0"
