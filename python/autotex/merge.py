from typing import List, Optional

import structlog

from autotex.document import TextDocument
from autotex.models import DraftRegion, Range, RegionType

logger = structlog.get_logger(__name__)

DEFAULT_MAX_GAP_LINES = 2


def overlaps_any(range_: Range, others: List[DraftRegion]) -> bool:
    return any(range_.overlaps(other.range) for other in others)


def filter_overlapping(candidates: List[DraftRegion], manual_regions: List[DraftRegion]) -> List[DraftRegion]:
    """Drops every candidate touching a manual region. Manual regions always win."""
    if not manual_regions:
        return list(candidates)
    return [region for region in candidates if not overlaps_any(region.range, manual_regions)]


def _sort_key(region: DraftRegion):
    return region.range.start.as_tuple()


def _coalesces(region_type: RegionType) -> bool:
    if region_type == RegionType.MANUAL:
        return False
    if region_type == RegionType.AUTO:
        return True
    raise ValueError(f"Unknown region type: {region_type!r}")


def _bridgeable(current: DraftRegion, nxt: DraftRegion, document: TextDocument, max_gap_lines: int) -> bool:
    """
    At most `max_gap_lines` lines lie between the two regions and all of
    them are blank.
    """
    first_between = current.range.end.line + 1
    last_between = nxt.range.start.line - 1
    if last_between - first_between + 1 > max_gap_lines:
        return False
    return all(document.is_blank_line(line) for line in range(first_between, last_between + 1))


def _combine(current: DraftRegion, nxt: DraftRegion, document: TextDocument) -> DraftRegion:
    end = nxt.range.end if current.range.end.is_before(nxt.range.end) else current.range.end
    merged_range = document.validate_range(Range(start=current.range.start, end=end))
    # The breakdown described one scoring decision; a merged region has none.
    return DraftRegion(
        range=merged_range,
        text=document.get_text(merged_range),
        type=current.type,
        confidence=max(current.confidence, nxt.confidence),
        breakdown=None,
    )


def merge_regions(
    regions: List[DraftRegion],
    document: TextDocument,
    max_gap_lines: int = DEFAULT_MAX_GAP_LINES,
) -> List[DraftRegion]:
    """
    Sorts regions by start and coalesces neighbours of the same provenance
    separated only by blank lines. Manual regions are never combined, nor
    are regions of different provenance. Idempotent on its own output.
    """
    if not regions:
        return []

    ordered = sorted(regions, key=_sort_key)
    merged: List[DraftRegion] = []
    current: Optional[DraftRegion] = ordered[0]

    for nxt in ordered[1:]:
        if nxt.type != current.type or not _coalesces(current.type):
            merged.append(current)
            current = nxt
            continue

        if _bridgeable(current, nxt, document, max_gap_lines):
            logger.debug(
                "Merging regions",
                type=current.type.value,
                first_line=current.range.start.line,
                last_line=nxt.range.end.line,
            )
            current = _combine(current, nxt, document)
            continue

        merged.append(current)
        current = nxt

    merged.append(current)
    return merged
