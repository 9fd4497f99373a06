import os
from urllib.parse import urlparse
from typing import List, Tuple
from ..models.exceptions import InputException

_SCHEMES = ("http://", "https://")


def read_lines(path: str) -> List[str]:
    """Non-empty lines of a text file, unstripped and in file order."""
    try:
        with open(path, "r", encoding="utf-8-sig", newline="") as f:
            text = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise InputException(f"Cannot read {path}: {e}", path=path)

    lines = []
    for line in text.split("\n"):
        if line.endswith("\r"):
            line = line[:-1]
        if line != "":
            lines.append(line)
    return lines


def file_exists(path: str) -> bool:
    return bool(path) and os.path.isfile(path)


def normalize_test_url(line: str) -> str:
    u = line.strip()
    if not u:
        return u
    if not u.startswith(_SCHEMES):
        return f"https://{u}"
    return u


def validate_test_url(url: str) -> Tuple[bool, str]:
    if not url or not isinstance(url, str):
        return False, "URL must be a non-empty string"
    try:
        parsed = urlparse(url)
    except ValueError as e:
        return False, f"URL parsing error: {e}"
    if parsed.scheme not in ("http", "https"):
        return False, f"Invalid scheme: {parsed.scheme}"
    if not parsed.netloc:
        return False, "Missing network location"
    return True, ""


def load_strategies(path: str) -> List[str]:
    return read_lines(path)


def load_checklist(path: str) -> List[str]:
    urls = []
    for line in read_lines(path):
        u = normalize_test_url(line)
        if u:
            urls.append(u)
    return urls
