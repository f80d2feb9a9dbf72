from collections import Counter
from enum import Enum
from typing import List, NamedTuple

import structlog
from diff_match_patch import diff_match_patch

from autotex.document import TextDocument
from autotex.models import Range

logger = structlog.get_logger(__name__)


class ChangeKind(str, Enum):
    UNCHANGED = "unchanged"
    ADDED = "added"
    REMOVED = "removed"


class LineChange(NamedTuple):
    kind: ChangeKind
    count: int
    lines: List[str]


class LineSpan(NamedTuple):
    """Inclusive span of line indices in the current text."""

    start_line: int
    end_line: int


_OPS = {0: ChangeKind.UNCHANGED, 1: ChangeKind.ADDED, -1: ChangeKind.REMOVED}


def _split_run(text: str) -> List[str]:
    # A run is whole lines, each ending in "\n" except possibly the last line of the text.
    lines = text.split("\n")
    if text.endswith("\n"):
        lines.pop()
    return lines


def _terminated(text: str) -> str:
    if text and not text.endswith("\n"):
        return text + "\n"
    return text


def compute_line_changes(baseline: str, current: str) -> List[LineChange]:
    """
    Minimal line-level edit script between two snapshots.
    Each line is encoded as one character so the Myers diff runs over lines.
    """
    dmp = diff_match_patch()
    # Run to completion; a timed-out diff is not minimal and not deterministic.
    dmp.Diff_Timeout = 0

    # Terminate the last line so "b" and "b\n" compare equal.
    chars1, chars2, line_array = dmp.diff_linesToChars(_terminated(baseline), _terminated(current))
    diffs = dmp.diff_main(chars1, chars2, False)
    dmp.diff_charsToLines(diffs, line_array)

    changes = []
    for op, text in diffs:
        if not text:
            continue
        lines = _split_run(text)
        changes.append(LineChange(kind=_OPS[op], count=len(lines), lines=lines))
    return changes


def _normalize(line: str) -> str:
    return line.rstrip("\r")


def _is_moved(change: LineChange, removed_pool: Counter) -> bool:
    """
    True when every line of an added run was removed elsewhere, i.e. the
    block moved without modification. Consumes the matched lines.
    """
    needed = Counter(_normalize(line) for line in change.lines)
    if any(removed_pool[line] < count for line, count in needed.items()):
        return False
    removed_pool.subtract(needed)
    return True


def added_line_spans(baseline: str, current: str) -> List[LineSpan]:
    """
    Line spans of `current` that are net-new insertions.

    Unchanged and added runs advance the cursor over `current`; removed runs
    do not exist there. Moved blocks count as unchanged.
    """
    changes = compute_line_changes(baseline, current)

    removed_pool: Counter = Counter()
    for change in changes:
        if change.kind == ChangeKind.REMOVED:
            removed_pool.update(_normalize(line) for line in change.lines)

    spans: List[LineSpan] = []
    current_line = 0

    for change in changes:
        if change.kind == ChangeKind.REMOVED:
            continue

        if change.kind == ChangeKind.ADDED:
            if _is_moved(change, removed_pool):
                logger.debug("Skipping moved block", start_line=current_line, lines=change.count)
            else:
                spans.append(LineSpan(current_line, current_line + change.count - 1))

        current_line += change.count

    return spans


def compute_diff_regions(baseline: str, document: TextDocument) -> List[Range]:
    """
    Candidate ranges for newly typed text: one per added run, from column 0
    of its first line to the end of its last line, clamped to the document.
    """
    regions = []
    for span in added_line_spans(baseline, document.text):
        if span.start_line >= document.line_count:
            continue
        regions.append(document.line_range(span.start_line, span.end_line))

    logger.debug("Computed diff regions", document=document.uri, regions=len(regions))
    return regions
