import os
import re
import unicodedata
from pathlib import Path
from typing import Union

__all__ = ["clean_title", "file_exists_and_non_empty"]

RESERVED_PATTERN = re.compile(r"[/\\:?*\"<>|()'!#&=+]")
WHITESPACE_PATTERN = re.compile(r"\s+")
NAME_LENGTH_LIMIT = 255


def clean_title(title: str) -> str:
    """Turn a course or module title into a directory-safe name."""
    title = _fold_to_ascii(title.strip())
    title = RESERVED_PATTERN.sub('-', title)
    title = WHITESPACE_PATTERN.sub(' ', title).strip()
    # Output is pure ASCII here, so characters and bytes line up
    return title[:NAME_LENGTH_LIMIT].rstrip()


def _fold_to_ascii(text: str) -> str:
    # Accented letters keep their base letter, anything else non-ASCII becomes a space
    out = []
    for char in text:
        if ord(char) < 128:
            out.append(char)
            continue
        base = unicodedata.normalize('NFKD', char)[0]
        out.append(base if ord(base) < 128 and base.isalpha() else ' ')
    return ''.join(out)


def file_exists_and_non_empty(path: Union[str, os.PathLike]) -> bool:
    """True when ``path`` is a regular file holding at least one byte."""
    path = Path(path)
    try:
        return path.is_file() and path.stat().st_size > 0
    except OSError:
        return False
