"""Backslash escaping for manifest file names and symlink targets.

Only two escapes exist: ``\\\\`` for a backslash and ``\\n`` for a newline.
"""

from __future__ import annotations


class EscapeError(ValueError):
    """Raised for an invalid or truncated escape sequence."""


def escape_path(text: str) -> tuple[str, bool]:
    """Escape ``text`` and report whether any substitution was needed."""
    if "\\" not in text and "\n" not in text:
        return text, False
    return text.replace("\\", "\\\\").replace("\n", "\\n"), True


def unescape_path(text: str) -> str:
    """Reverse ``escape_path``; raises EscapeError on any other escape."""
    if "\\" not in text:
        return text
    output: list[str] = []
    index = 0
    length = len(text)
    while index < length:
        char = text[index]
        if char != "\\":
            output.append(char)
            index += 1
            continue
        if index + 1 >= length:
            raise EscapeError("Escaped text ends with a single backslash.")
        following = text[index + 1]
        if following == "n":
            output.append("\n")
        elif following == "\\":
            output.append("\\")
        else:
            raise EscapeError(f"Invalid escape sequence: \\{following}")
        index += 2
    return "".join(output)
