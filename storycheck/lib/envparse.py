"""
Safe .env file parser.

Parses storycheck.env (KEY=value) without shell execution.
Values that look like shell expansions are rejected outright.
"""

import re
from pathlib import Path

FORBIDDEN_PATTERNS = [
    r'`',           # backticks
    r'\$\(',        # command substitution
    r'\$\{',        # variable expansion
    r';',           # command chaining
    r'&&',          # AND chaining
    r'\|',          # pipe / OR chaining
]

KEY_PATTERN = re.compile(r'^[A-Z][A-Z0-9_]*$')

TRUE_VALUES = ("1", "true", "yes", "on")
FALSE_VALUES = ("0", "false", "no", "off")


def parse_env_text(text: str, source: str = "<string>") -> dict[str, str]:
    """
    Parse KEY=value lines, return dict.

    Blank lines and '#' comments are skipped. An optional leading
    'export ' is accepted so the same file can be sourced by a shell.

    Raises:
        ValueError: if syntax invalid or forbidden pattern found
    """
    result = {}

    for lineno, line in enumerate(text.splitlines(), 1):
        line = line.strip()

        if not line or line.startswith('#'):
            continue

        if line.startswith('export '):
            line = line[len('export '):].lstrip()

        if '=' not in line:
            raise ValueError(f"{source}:{lineno}: Invalid syntax (no '=')")

        key, _, value = line.partition('=')
        key = key.strip()
        value = value.strip()

        if not KEY_PATTERN.match(key):
            raise ValueError(f"{source}:{lineno}: Invalid key '{key}'")

        quoted = len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'")
        if quoted:
            value = value[1:-1]
        elif ' #' in value:
            # Trailing comment on an unquoted value
            value = value.split(' #', 1)[0].rstrip()

        for pattern in FORBIDDEN_PATTERNS:
            if re.search(pattern, value):
                raise ValueError(f"{source}:{lineno}: Forbidden pattern in value of {key}")

        result[key] = value

    return result


def load_env(filepath: str) -> dict[str, str]:
    """
    Parse env file safely, return dict.

    Raises:
        FileNotFoundError: if file doesn't exist
        ValueError: if syntax invalid or forbidden pattern found
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Env file not found: {filepath}")
    return parse_env_text(path.read_text(), source=path.name)


def get_int(env: dict, key: str, default: int) -> int:
    """Read an integer value, raising ValueError with the key name on bad input."""
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{key} must be an integer, got '{raw}'") from None


def get_bool(env: dict, key: str, default: bool) -> bool:
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    lowered = raw.lower()
    if lowered in TRUE_VALUES:
        return True
    if lowered in FALSE_VALUES:
        return False
    raise ValueError(f"{key} must be a boolean, got '{raw}'")
