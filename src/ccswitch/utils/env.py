# .env text parsing and formatting
import re
from typing import Any

# ABOUTME: Pattern matches KEY=value lines, optionally prefixed with 'export'
ENV_LINE_PATTERN = re.compile(r"^\s*(?:export\s+)?([A-Za-z_][A-Za-z0-9_]*)\s*=(.*)$")


def _strip_inline_comment(value: str) -> str:
    in_single = False
    in_double = False
    for i, ch in enumerate(value):
        if ch == "'" and not in_double:
            in_single = not in_single
        elif ch == '"' and not in_single:
            in_double = not in_double
        elif ch == "#" and not in_single and not in_double:
            return value[:i].rstrip()
    return value.rstrip()


def _unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        value = value[1:-1]
    return value


def parse_env_text(text: str) -> dict[str, str]:
    """Parse .env style text into a dict.

    ABOUTME: Skips blank lines, comments and lines without KEY=
    ABOUTME: Strips surrounding quotes and trailing # comments from values

    Args:
        text: Contents of a .env file

    Returns:
        Mapping of variable name to value, in file order

    Examples:
        >>> parse_env_text("GEMINI_API_KEY=sk-1  # key\\nexport GEMINI_MODEL='pro'")
        {'GEMINI_API_KEY': 'sk-1', 'GEMINI_MODEL': 'pro'}
    """
    env: dict[str, str] = {}
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        match = ENV_LINE_PATTERN.match(line)
        if not match:
            continue
        env[match.group(1)] = _unquote(_strip_inline_comment(match.group(2)))
    return env


def _format_line(key: str, value: Any) -> str:
    value = str(value)
    if any(ch in value for ch in " \t#"):
        quote = "'" if '"' in value else '"'
        return f"{key}={quote}{value}{quote}"
    return f"{key}={value}"


def merge_env_text(text: str, updates: dict[str, Any]) -> str:
    """Set variables in .env text, leaving every other line as written.

    ABOUTME: A variable already defined is rewritten in place, new ones are appended
    ABOUTME: Comments, blank lines and lines without KEY= are copied through unchanged
    ABOUTME: Values are written with str() and quoted when they contain whitespace or '#'

    Args:
        text: Current contents of the .env file
        updates: Variables to set

    Returns:
        The new file contents, ending in a newline unless empty

    Examples:
        >>> merge_env_text("# proxy\\nHTTPS_PROXY=p\\nGEMINI_MODEL=old\\n", {"GEMINI_MODEL": "pro"})
        '# proxy\\nHTTPS_PROXY=p\\nGEMINI_MODEL=pro\\n'
    """
    remaining = dict(updates)
    lines = []
    for line in text.splitlines():
        match = ENV_LINE_PATTERN.match(line)
        if not match or match.group(1) not in updates:
            lines.append(line)
            continue
        key = match.group(1)
        # Later definitions of a key already rewritten would win on read
        if key not in remaining:
            continue
        prefix = "export " if line.lstrip().startswith("export") else ""
        lines.append(prefix + _format_line(key, remaining.pop(key)))
    lines.extend(_format_line(key, value) for key, value in remaining.items())
    return "\n".join(lines) + "\n" if lines else ""
