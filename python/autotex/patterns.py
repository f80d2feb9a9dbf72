"""
Fixed pattern tables used to recognise LaTeX shapes.

Each table maps a short label to a compiled pattern so the scorer and the
fallback detector can report exactly which shape fired.
"""

import re
from typing import Dict, List, Pattern

# Whole-text shapes that are markup and nothing else. Matched with fullmatch
# against trimmed text.
PURE_MARKUP_SHAPES: Dict[str, Pattern] = {
    "command_with_braces": re.compile(r"\\[a-zA-Z]+\{[^}]*\}"),
    "bare_command": re.compile(r"\\[a-zA-Z]+"),
    "inline_math": re.compile(r"\$.*\$", re.DOTALL),
    "environment": re.compile(r"\\begin\{[^}]+\}.*\\end\{[^}]+\}", re.DOTALL),
}

BEGIN_END = re.compile(r"\\(?:begin|end)\{")
SECTIONING = re.compile(r"\\(?:section|subsection|chapter)")
COMMAND = re.compile(r"\\[a-zA-Z]+")

# One command per this many characters marks text as command-dense.
COMMAND_DENSITY_CHARS = 20

ENGLISH_WORD = re.compile(r"\b[a-zA-Z]{3,}\b")
MATH_SYMBOL = re.compile(r"[$\{\}\[\]\\]")

# Any "$" followed only by non-"$" characters up to the end of the text.
TRAILING_MATH_OPENER = re.compile(r"\$[^$]*\Z")
TRAILING_BARE_COMMAND = re.compile(r"\\[a-zA-Z]+\s*\Z")

# A single line that belongs to finished document structure.
FORMATTED_LINE_PATTERNS: List[Pattern] = [
    re.compile(r"\\begin\{"),
    re.compile(r"\\end\{"),
    re.compile(r"\\section"),
    re.compile(r"\\subsection"),
    re.compile(r"\\chapter"),
    re.compile(r"\\documentclass"),
    re.compile(r"\\usepackage"),
    re.compile(r"\\title"),
    re.compile(r"\\author"),
    re.compile(r"\\maketitle"),
]

FENCE_TOKEN = "autotex"
FENCE_MARKER = "```"


def fence_pattern(token: str = FENCE_TOKEN) -> Pattern:
    """
    Opening line: optional indentation, the marker and token, optional
    trailing blanks. Content is captured non-greedily and ends at the first
    closing marker, whether it starts its own line or ends a content line.
    Indentation before a closing marker on its own line is not content.
    """
    return re.compile(
        r"^[ \t]*" + re.escape(FENCE_MARKER + token) + r"[ \t]*\r?\n"
        r"(.*?)"
        r"(?:^[ \t]*)?" + re.escape(FENCE_MARKER) + r"[ \t]*",
        re.MULTILINE | re.DOTALL,
    )


def is_pure_markup(trimmed: str) -> bool:
    return any(pattern.fullmatch(trimmed) for pattern in PURE_MARKUP_SHAPES.values())


def looks_like_formatted_line(line: str) -> bool:
    return any(pattern.search(line) for pattern in FORMATTED_LINE_PATTERNS)


def has_unclosed_math(trimmed: str) -> bool:
    """
    True for any text containing a "$": the last one always runs to the end
    of the text without meeting another. Closed spans such as "$x$" count too.
    """
    return TRAILING_MATH_OPENER.search(trimmed) is not None


def has_trailing_bare_command(trimmed: str) -> bool:
    return TRAILING_BARE_COMMAND.search(trimmed) is not None
