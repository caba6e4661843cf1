"""Advisory hints for generated SQL."""

from prompt2sql.sql.insights import analyze_query

__all__ = ["analyze_query"]
