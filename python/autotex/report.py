# FILE: python/autotex/report.py
"""
Text renderings of detected regions: hover tooltips, flat summaries for a
debug view, and CriticMarkup highlighting of the whole document.
"""

from typing import Any, Dict, List, Optional

import structlog

from autotex.config import DetectionSettings, get_settings
from autotex.document import TextDocument
from autotex.models import DraftRegion, RegionType

logger = structlog.get_logger(__name__)

TYPE_LABELS = {
    RegionType.MANUAL: "Manually marked",
    RegionType.AUTO: "Auto-detected",
}


def _percent(value: float) -> int:
    return int(value * 100 + 0.5)


def confidence_level(confidence: float, settings: Optional[DetectionSettings] = None) -> str:
    settings = settings or get_settings()
    return "High" if confidence >= settings.high_confidence_threshold else "Low"


def hover_message(region: DraftRegion, settings: Optional[DetectionSettings] = None) -> str:
    """Markdown tooltip for a highlighted region."""
    percent = _percent(region.confidence)
    lines = [
        f"**Draft Section: {percent}% confidence ({confidence_level(region.confidence, settings)})**",
        "",
        f"Type: {TYPE_LABELS[region.type]}",
        "",
    ]

    breakdown = region.breakdown
    if breakdown is not None:
        lines.extend(["**Confidence Breakdown:**", ""])

        if breakdown.factors:
            lines.append("Positive factors:")
            lines.extend(f"  + {factor}" for factor in breakdown.factors)
            lines.append("")

        if breakdown.penalties:
            lines.append("Penalties:")
            lines.extend(f"  - {penalty}" for penalty in breakdown.penalties)
            lines.append("")

        if breakdown.is_short_text:
            lines.append("Note: Short text has reduced confidence")
        elif breakdown.has_formatted_latex:
            lines.append("Note: Contains formatted LaTeX, likely not a draft")
        else:
            lines.append(f"Final score = {percent}%")
        lines.append("")

    lines.extend(["---", "", "Convert the section to LaTeX to replace it."])
    return "\n".join(lines)


def region_summary(region: DraftRegion) -> Dict[str, Any]:
    """Flat, JSON-ready description of a region."""
    return {
        "type": region.type.value,
        "start_line": region.range.start.line,
        "start_column": region.range.start.column,
        "end_line": region.range.end.line,
        "end_column": region.range.end.column,
        "confidence": round(region.confidence, 4),
        "text": region.text,
        "breakdown": region.breakdown.model_dump() if region.breakdown is not None else None,
    }


def _build_critic_markup(text: str, region: DraftRegion, include_score: bool) -> str:
    parts = [f"{{=={text}==}}"]
    if include_score:
        parts.append(f"{{>>{region.type.value} {_percent(region.confidence)}%<<}}")
    return "".join(parts)


def highlight_drafts(document: TextDocument, regions: List[DraftRegion], include_score: bool = True) -> str:
    """
    Wraps every region's span in CriticMarkup highlight notation.
    Overlapping regions after the first one (in document order) are skipped.
    """
    if not regions:
        return document.text

    spans = []
    occupied_end = -1
    for region in sorted(regions, key=lambda r: r.range.start.as_tuple()):
        start = document.offset_at(region.range.start)
        end = document.offset_at(region.range.end)
        if start < occupied_end:
            logger.warning("Skipping overlapping region", start_line=region.range.start.line)
            continue
        spans.append((start, end, region))
        occupied_end = end

    # Apply from the end so earlier offsets stay valid.
    result = document.text
    for start, end, region in reversed(spans):
        result = result[:start] + _build_critic_markup(result[start:end], region, include_score) + result[end:]

    return result


def strip_drafts(document: TextDocument, regions: List[DraftRegion]) -> str:
    """The document with every draft span removed, trimmed."""
    result = document.text
    for region in sorted(regions, key=lambda r: r.range.start.as_tuple(), reverse=True):
        start = document.offset_at(region.range.start)
        end = document.offset_at(region.range.end)
        result = result[:start] + result[end:]
    return result.strip()
