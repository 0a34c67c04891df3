"""Bank statement feed adapters."""

from .fio import FioBankFeed, parse_statement

__all__ = ["FioBankFeed", "parse_statement"]
