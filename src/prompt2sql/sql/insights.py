"""Keyword-level performance hints for generated SQL."""

from __future__ import annotations

import sqlglot
from sqlglot.errors import TokenError
from sqlglot.tokens import Token, TokenType

WHERE_HINT = (
    "Consider adding a WHERE clause to filter results and improve query performance."
)
SELECT_STAR_HINT = (
    "Using 'SELECT *' retrieves all columns. For better performance, specify "
    "only the columns you need."
)
INNER_JOIN_HINT = (
    "Consider using INNER JOIN instead of JOIN if you only need matching "
    "records from both tables."
)
ORDER_BY_HINT = (
    "Ensure columns in ORDER BY have proper indexes to speed up sorting operations."
)
GROUP_BY_HINT = (
    "GROUP BY operations can be expensive. Consider indexing the columns used "
    "in the GROUP BY clause."
)
GENERIC_HINT = (
    "No specific optimization suggestions found. Consider adding indexes on "
    "frequently queried columns for better performance."
)


def _selects_star(tokens: list[Token]) -> bool:
    for index, token in enumerate(tokens[:-1]):
        if token.token_type != TokenType.SELECT:
            continue
        following = tokens[index + 1]
        if following.token_type == TokenType.DISTINCT and index + 2 < len(tokens):
            following = tokens[index + 2]
        if following.token_type == TokenType.STAR:
            return True
    return False


def analyze_query(sql: str) -> list[str]:
    """Return advisory hints for ``sql``; the statement is never parsed."""
    if not sql.strip():
        return []

    try:
        tokens = sqlglot.tokenize(sql)
    except TokenError:
        return [GENERIC_HINT]

    types = {token.token_type for token in tokens}
    insights: list[str] = []

    if TokenType.SELECT in types and TokenType.WHERE not in types:
        insights.append(WHERE_HINT)
    if _selects_star(tokens):
        insights.append(SELECT_STAR_HINT)
    if TokenType.JOIN in types and TokenType.INNER not in types:
        insights.append(INNER_JOIN_HINT)
    if TokenType.ORDER_BY in types:
        insights.append(ORDER_BY_HINT)
    if TokenType.GROUP_BY in types:
        insights.append(GROUP_BY_HINT)

    return insights or [GENERIC_HINT]
