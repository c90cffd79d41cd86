# ABOUTME: Row extraction from SQL INSERT dumps of the old SQLite database
# ABOUTME: Quote-aware scanner, not a SQL parser: only INSERT INTO t (cols) VALUES (...) is understood
import logging
import re
from collections.abc import Iterator
from typing import Any

logger = logging.getLogger(__name__)

# ABOUTME: Skipped when reading column names out of CREATE TABLE
_CONSTRAINT_KEYWORDS = {"PRIMARY", "UNIQUE", "FOREIGN", "CHECK", "CONSTRAINT"}

# ABOUTME: sqlite3 .dump writes newlines as replace('a\nb','\n',char(10))
_CHAR_CALL = re.compile(r"^char\((\d+)\)$", re.IGNORECASE)


def _insert_pattern(table: str) -> re.Pattern[str]:
    return re.compile(
        r"INSERT\s+INTO\s+(?P<q>[\"'`]?)" + re.escape(table) + r"(?P=q)\s*"
        r"(?:\((?P<cols>[^)]*)\)\s*)?VALUES\s*\(",
        re.IGNORECASE,
    )


def _create_pattern(table: str) -> re.Pattern[str]:
    return re.compile(
        r"CREATE\s+TABLE\s+(?:IF\s+NOT\s+EXISTS\s+)?(?P<q>[\"'`]?)"
        + re.escape(table) + r"(?P=q)\s*\(",
        re.IGNORECASE,
    )


def _strip_identifier(name: str) -> str:
    return name.strip().strip("\"'`[]")


def scan_value_list(text: str, start: int) -> tuple[str, int]:
    """Find the end of a parenthesised list whose '(' precedes start.

    ABOUTME: Tracks single-quote state (with backslash escapes) and paren depth
    ABOUTME: Parens inside quotes are ignored, the first unmatched ')' ends the list
    ABOUTME: An unterminated list runs to end of text

    Args:
        text: Full text being scanned
        start: Index just after the opening '('

    Returns:
        Tuple of (list body without the parens, index just after the closing ')')
    """
    depth = 0
    in_quote = False
    i = start
    while i < len(text):
        ch = text[i]
        if in_quote:
            if ch == "\\":
                i += 2
                continue
            if ch == "'":
                in_quote = False
        elif ch == "'":
            in_quote = True
        elif ch == "(":
            depth += 1
        elif ch == ")":
            if depth == 0:
                return text[start:i], i + 1
            depth -= 1
        i += 1
    return text[start:], len(text)


def split_values(body: str) -> list[str]:
    """Split a value list on top-level commas.

    ABOUTME: Commas inside quotes or nested parens do not split
    ABOUTME: Tokens are returned trimmed but still quoted

    Examples:
        >>> split_values("'a,b', 2, 'c)d'")
        ["'a,b'", '2', "'c)d'"]
    """
    if not body.strip():
        return []

    tokens: list[str] = []
    current: list[str] = []
    depth = 0
    in_quote = False
    i = 0
    while i < len(body):
        ch = body[i]
        if in_quote:
            if ch == "\\" and i + 1 < len(body):
                current.append(body[i:i + 2])
                i += 2
                continue
            if ch == "'":
                in_quote = False
        elif ch == "'":
            in_quote = True
        elif ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
        elif ch == "," and depth == 0:
            tokens.append("".join(current).strip())
            current = []
            i += 1
            continue
        current.append(ch)
        i += 1

    tokens.append("".join(current).strip())
    return tokens


def parse_value(token: str) -> Any:
    """Turn one SQL literal into a Python value.

    ABOUTME: NULL -> None, 0/1 -> bool, 'quoted' -> str with '' un-escaped
    ABOUTME: Anything else is returned as trimmed raw text

    Examples:
        >>> parse_value("NULL") is None
        True
        >>> parse_value("'it''s'")
        "it's"
        >>> parse_value("42")
        '42'
    """
    token = token.strip()
    if token.upper() == "NULL":
        return None
    if token in ("0", "1"):
        return token == "1"
    if len(token) >= 2 and token[0] == "'" and token[-1] == "'":
        return token[1:-1].replace("''", "'")
    if token.lower().startswith("replace(") and token.endswith(")"):
        return _parse_replace_call(token)
    return token


def _parse_replace_call(token: str) -> Any:
    args = split_values(token[len("replace("):-1])
    if len(args) == 3:
        char_match = _CHAR_CALL.match(args[2])
        source = parse_value(args[0])
        needle = parse_value(args[1])
        if char_match and isinstance(source, str) and isinstance(needle, str):
            return source.replace(needle, chr(int(char_match.group(1))))
    return token


def table_columns(dump: str, table: str) -> list[str]:
    """Column names declared by the dump's CREATE TABLE for table.

    ABOUTME: Used for INSERT statements that omit the column list
    ABOUTME: Returns [] when the dump has no CREATE TABLE for the table
    """
    match = _create_pattern(table).search(dump)
    if not match:
        return []

    body, _end = scan_value_list(dump, match.end())
    columns = []
    for definition in split_values(body):
        words = definition.split()
        if not words or words[0].upper() in _CONSTRAINT_KEYWORDS:
            continue
        columns.append(_strip_identifier(words[0]))
    return columns


def _iter_statements(dump: str, table: str) -> Iterator[tuple[str | None, str]]:
    pattern = _insert_pattern(table)
    pos = 0
    while True:
        match = pattern.search(dump, pos)
        if not match:
            return
        body, pos = scan_value_list(dump, match.end())
        yield match.group("cols"), body


def extract_rows(dump: str, table: str) -> Iterator[dict[str, Any]]:
    """Yield one {column: value} row per INSERT statement for table.

    ABOUTME: Rows come out in text order, single pass
    ABOUTME: Columns are zipped positionally, missing trailing values become ""
    ABOUTME: Without a column list, columns come from CREATE TABLE in the same dump

    Args:
        dump: Full SQL dump text
        table: Table name, matched literally (quoted or not)

    Yields:
        Row dicts mapping column name to parsed value

    Examples:
        >>> list(extract_rows("INSERT INTO providers (id,name) VALUES ('p1','Name');", "providers"))
        [{'id': 'p1', 'name': 'Name'}]
    """
    fallback_columns: list[str] | None = None

    for cols_text, body in _iter_statements(dump, table):
        if cols_text is not None:
            columns = [_strip_identifier(c) for c in cols_text.split(",")]
        else:
            if fallback_columns is None:
                fallback_columns = table_columns(dump, table)
            if not fallback_columns:
                logger.warning("Skipping INSERT into %s: no column list and no CREATE TABLE", table)
                continue
            columns = fallback_columns

        values = [parse_value(token) for token in split_values(body)]
        yield {
            column: values[i] if i < len(values) else ""
            for i, column in enumerate(columns)
        }


def count_inserts(dump: str, table: str) -> int:
    """Number of INSERT statements for table, without building rows."""
    return sum(1 for _ in _iter_statements(dump, table))
