"""
SQL Text - statement splitting, classification and formatting.

Strings with embedded semicolons and comments are handled by sqlparse.
"""
import logging
from typing import List

import sqlparse

logger = logging.getLogger(__name__)

READ_ONLY_KEYWORDS = {'SELECT', 'WITH'}


def split_statements(sql_text: str) -> List[str]:
    """
    Split SQL text into individual statements.

    Args:
        sql_text: Full SQL text, possibly with several statements

    Returns:
        Non-empty statements, stripped, without trailing semicolons
    """
    if not sql_text or not sql_text.strip():
        return []

    statements = []
    for stmt_text in sqlparse.split(sql_text):
        stmt_text = stmt_text.strip().rstrip(';').strip()
        if _strip_comments(stmt_text):
            statements.append(stmt_text)
    return statements


def _strip_comments(stmt_text: str) -> str:
    return sqlparse.format(stmt_text, strip_comments=True).strip()


def is_select_statement(stmt_text: str) -> bool:
    """
    Determine if a statement only reads data.

    Returns True for SELECT and WITH ... SELECT (CTEs), False for everything
    else (INSERT/UPDATE/DELETE, DDL, PRAGMA, ATTACH ...).
    """
    cleaned = _strip_comments(stmt_text).upper()
    if not cleaned:
        return False

    # Parenthesised queries: "(SELECT ...) UNION (SELECT ...)"
    first_word = cleaned.lstrip('(').split()[0] if cleaned.lstrip('(') else ""
    return first_word in READ_ONLY_KEYWORDS


def format_sql(sql_text: str) -> str:
    """
    Reformat SQL for the editor.

    Args:
        sql_text: SQL query to format

    Returns:
        Formatted SQL string, or the input unchanged if it is blank
    """
    if not sql_text or not sql_text.strip():
        return sql_text

    return sqlparse.format(
        sql_text,
        reindent=True,
        keyword_case='upper',
        indent_width=2,
        use_space_around_operators=True,
        wrap_after=120,
    ).strip()
