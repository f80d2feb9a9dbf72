"""
Line-scanning fallback used when a document has no saved baseline.

Formatted-looking lines and blank lines bound candidate spans; every span
of other lines is handed to the scorer.
"""

from typing import List

import structlog

from autotex.document import TextDocument
from autotex.models import DraftRegion, RegionType
from autotex.patterns import looks_like_formatted_line
from autotex.scoring import score_text

logger = structlog.get_logger(__name__)

DEFAULT_THRESHOLD = 0.3


def _scored_region(document: TextDocument, start_line: int, end_line: int, threshold: float):
    range_ = document.line_range(start_line, end_line)
    text = document.get_text(range_)
    result = score_text(text)

    if result.confidence <= threshold:
        logger.debug(
            "Dropping heuristic span",
            start_line=start_line,
            end_line=end_line,
            confidence=round(result.confidence, 3),
        )
        return None

    return DraftRegion(
        range=range_,
        text=text,
        type=RegionType.AUTO,
        confidence=result.confidence,
        breakdown=result.breakdown,
    )


def detect_heuristic_drafts(document: TextDocument, threshold: float = DEFAULT_THRESHOLD) -> List[DraftRegion]:
    regions: List[DraftRegion] = []
    lines = document.lines

    in_draft = False
    draft_start = 0

    for index, line in enumerate(lines):
        is_formatted = looks_like_formatted_line(line)
        is_blank = line.strip() == ""

        if not in_draft:
            if not is_formatted and not is_blank:
                in_draft = True
                draft_start = index
            continue

        if is_formatted or is_blank:
            region = _scored_region(document, draft_start, index - 1, threshold)
            if region is not None:
                regions.append(region)
            in_draft = False

    if in_draft:
        region = _scored_region(document, draft_start, len(lines) - 1, threshold)
        if region is not None:
            regions.append(region)

    logger.debug("Heuristic detection finished", document=document.uri, regions=len(regions))
    return regions
