"""
Extraction of author-marked draft blocks:

    ```autotex
    rough text to convert
    ```

Each block is its own region with full confidence. Blocks are never merged,
even with an adjacent block.
"""

from typing import List

import structlog

from autotex.document import TextDocument
from autotex.models import ConfidenceBreakdown, DraftRegion, Range, RegionType
from autotex.patterns import FENCE_MARKER, FENCE_TOKEN, fence_pattern

logger = structlog.get_logger(__name__)

MANUAL_CONFIDENCE = 1.0


def fence_snippet(content: str = "", token: str = FENCE_TOKEN) -> str:
    """The text an editor inserts to open a manual block around `content`."""
    if content and not content.endswith("\n"):
        content += "\n"
    return f"{FENCE_MARKER}{token}\n{content}{FENCE_MARKER}"


def _manual_breakdown(inner_text: str) -> ConfidenceBreakdown:
    return ConfidenceBreakdown(
        base_score=MANUAL_CONFIDENCE,
        natural_language_score=MANUAL_CONFIDENCE,
        incomplete_latex=False,
        multi_line=len(inner_text.split("\n")) > 2,
        has_formatted_latex=False,
        is_short_text=False,
        factors=["manually marked"],
        penalties=[],
    )


def extract_manual_blocks(document: TextDocument, token: str = FENCE_TOKEN) -> List[DraftRegion]:
    """
    Scans left to right for fenced blocks. An opener without a closing fence
    yields nothing.
    """
    regions = []

    for match in fence_pattern(token).finditer(document.text):
        start = document.position_at(match.start())
        end = document.position_at(match.end())
        inner_text = match.group(1)

        regions.append(
            DraftRegion(
                range=document.validate_range(Range(start=start, end=end)),
                text=inner_text,
                type=RegionType.MANUAL,
                confidence=MANUAL_CONFIDENCE,
                breakdown=_manual_breakdown(inner_text),
            )
        )

    logger.debug("Extracted manual blocks", document=document.uri, blocks=len(regions))
    return regions
