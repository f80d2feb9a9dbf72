"""
Confidence scoring: how likely a fragment is unpolished prose that still
needs converting to LaTeX, as opposed to finished markup.

The checks run in a fixed order and short-circuit:
pure-markup shortcut, symbol-dominance veto, formatted-but-not-prose veto,
incremental scoring, formatted-prose penalty.
"""

from typing import List, Tuple

import structlog

from autotex import patterns
from autotex.models import ConfidenceBreakdown, ScoreResult

logger = structlog.get_logger(__name__)

SHORT_TEXT_CHARS = 10
SHORT_TEXT_CONFIDENCE = 0.3
FORMATTED_CONFIDENCE = 0.2
FORMATTED_PROSE_CUTOFF = 0.3

AVERAGE_WORD_LENGTH = 5
NATURAL_LANGUAGE_GAIN = 1.5
NATURAL_LANGUAGE_WEIGHT = 0.6
INCOMPLETE_LATEX_BONUS = 0.3
MULTI_LINE_BONUS = 0.1
MULTI_LINE_MIN_LINES = 3
FORMATTED_PENALTY_FACTOR = 0.7


def _percent(value: float) -> int:
    # Round half up, so 0.125 -> 13 rather than banker's 12.
    return int(value * 100 + 0.5)


def natural_language_score(text: str) -> float:
    """
    Approximates the fraction of characters that belong to English words.
    Returns 0 for markup-only or symbol-dominated text.
    """
    trimmed = text.strip()

    if patterns.is_pure_markup(trimmed):
        return 0.0

    english_words = len(patterns.ENGLISH_WORD.findall(trimmed))
    latex_commands = len(patterns.COMMAND.findall(trimmed))
    math_symbols = len(patterns.MATH_SYMBOL.findall(trimmed))

    if latex_commands > english_words or math_symbols > english_words * 0.5:
        return 0.0

    english_char_ratio = (english_words * AVERAGE_WORD_LENGTH) / max(1, len(trimmed))
    return min(1.0, english_char_ratio * NATURAL_LANGUAGE_GAIN)


def _formatted_signals(trimmed: str) -> Tuple[bool, bool, bool]:
    has_begin_end = patterns.BEGIN_END.search(trimmed) is not None
    has_section = patterns.SECTIONING.search(trimmed) is not None
    command_count = len(patterns.COMMAND.findall(trimmed))
    has_many_commands = command_count > len(trimmed) / patterns.COMMAND_DENSITY_CHARS
    return has_begin_end, has_section, has_many_commands


def _signal_labels(has_begin_end: bool, has_section: bool, has_many_commands: bool, suffix: str = "") -> List[str]:
    labels = []
    if has_begin_end:
        labels.append("Contains \\begin{}\\end{}" + suffix)
    if has_section:
        labels.append("Contains section commands" + suffix)
    if has_many_commands:
        labels.append("High LaTeX command density" + suffix)
    return labels


def score_text(text: str) -> ScoreResult:
    """
    Scores `text` in [0, 1] and explains the score.

    Pure and deterministic. Degenerate input (empty or whitespace) scores 0.
    """
    trimmed = text.strip()

    if not trimmed:
        return ScoreResult(
            confidence=0.0,
            breakdown=ConfidenceBreakdown(base_score=0.0, natural_language_score=0.0, is_short_text=True),
        )

    if len(trimmed) < SHORT_TEXT_CHARS:
        return ScoreResult(
            confidence=SHORT_TEXT_CONFIDENCE,
            breakdown=ConfidenceBreakdown(
                base_score=SHORT_TEXT_CONFIDENCE,
                natural_language_score=0.0,
                is_short_text=True,
                penalties=[f"Short text (<{SHORT_TEXT_CHARS} chars)"],
            ),
        )

    has_begin_end, has_section, has_many_commands = _formatted_signals(trimmed)
    has_formatted_latex = has_begin_end or has_section or has_many_commands

    natural_score = natural_language_score(trimmed)

    if has_formatted_latex and natural_score < FORMATTED_PROSE_CUTOFF:
        return ScoreResult(
            confidence=FORMATTED_CONFIDENCE,
            breakdown=ConfidenceBreakdown(
                base_score=FORMATTED_CONFIDENCE,
                natural_language_score=natural_score,
                has_formatted_latex=True,
                penalties=_signal_labels(has_begin_end, has_section, has_many_commands),
            ),
        )

    factors: List[str] = []
    penalties: List[str] = []

    confidence = natural_score * NATURAL_LANGUAGE_WEIGHT
    factors.append(
        f"Natural language: {_percent(natural_score)}% "
        f"(×{NATURAL_LANGUAGE_WEIGHT} = {_percent(natural_score * NATURAL_LANGUAGE_WEIGHT)}%)"
    )

    has_incomplete_math = patterns.has_unclosed_math(trimmed)
    has_incomplete_cmd = patterns.has_trailing_bare_command(trimmed)
    incomplete_latex = has_incomplete_math or has_incomplete_cmd
    if incomplete_latex:
        confidence += INCOMPLETE_LATEX_BONUS
        if has_incomplete_math:
            factors.append(f"Incomplete math ($...) +{_percent(INCOMPLETE_LATEX_BONUS)}%")
        if has_incomplete_cmd:
            factors.append(f"Incomplete command +{_percent(INCOMPLETE_LATEX_BONUS)}%")

    line_count = len(trimmed.split("\n"))
    multi_line = line_count >= MULTI_LINE_MIN_LINES
    if multi_line:
        confidence += MULTI_LINE_BONUS
        factors.append(f"Multi-line ({line_count} lines) +{_percent(MULTI_LINE_BONUS)}%")

    if has_formatted_latex:
        confidence *= FORMATTED_PENALTY_FACTOR
        penalties.extend(
            _signal_labels(
                has_begin_end,
                has_section,
                has_many_commands,
                suffix=f" (-{_percent(1 - FORMATTED_PENALTY_FACTOR)}%)",
            )
        )

    final_confidence = min(1.0, max(0.0, confidence))

    logger.debug(
        "Scored text",
        chars=len(trimmed),
        natural_language=round(natural_score, 3),
        confidence=round(final_confidence, 3),
    )

    return ScoreResult(
        confidence=final_confidence,
        breakdown=ConfidenceBreakdown(
            base_score=confidence,
            natural_language_score=natural_score,
            incomplete_latex=incomplete_latex,
            multi_line=multi_line,
            has_formatted_latex=has_formatted_latex,
            is_short_text=False,
            factors=factors,
            penalties=penalties,
        ),
    )
