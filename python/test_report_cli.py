"""
Tests for autotex/report.py, autotex/config.py, autotex/scheduler.py and
autotex/cli.py.

Run: python3 -m pytest test_report_cli.py
From: python/
"""

import json
import sys
import threading
import time

sys.path.insert(0, '.')

import pytest
import structlog
from pydantic import ValidationError

from autotex import cli
from autotex.config import DetectionSettings, get_settings
from autotex.document import TextDocument
from autotex.manual import extract_manual_blocks
from autotex.models import DraftRegion, RegionType
from autotex.report import highlight_drafts, hover_message, region_summary, strip_drafts
from autotex.scheduler import Debouncer
from autotex.scoring import score_text

TEXT = "\\section{Intro}\nthis is messy and needs cleanup\n"


def _auto_region(document, line):
    range_ = document.line_range(line, line)
    text = document.get_text(range_)
    result = score_text(text)
    return DraftRegion(range=range_, text=text, type=RegionType.AUTO, confidence=result.confidence, breakdown=result.breakdown)


# ---------------------------------------------------------------------------
# Report rendering
# ---------------------------------------------------------------------------

def test_hover_message_for_auto_region():
    document = TextDocument(TEXT)
    message = hover_message(_auto_region(document, 1), DetectionSettings())

    assert "**Draft Section: 60% confidence (High)**" in message
    assert "Type: Auto-detected" in message
    assert "  + Natural language: 100% (×0.6 = 60%)" in message
    assert "Final score = 60%" in message
    assert "Penalties:" not in message
    print("PASS: test_hover_message_for_auto_region")


def test_hover_message_for_manual_region():
    region = extract_manual_blocks(TextDocument("```autotex\nsome notes\n```\n"))[0]
    message = hover_message(region, DetectionSettings())
    assert "100% confidence (High)" in message
    assert "Type: Manually marked" in message
    assert "  + manually marked" in message
    print("PASS: test_hover_message_for_manual_region")


def test_hover_message_notes_formatted_latex():
    document = TextDocument("\\section{Intro} we should explain the main idea here in words\n")
    message = hover_message(_auto_region(document, 0), DetectionSettings())
    assert "(Low)" in message
    assert "  - Contains section commands (-30%)" in message
    assert "Note: Contains formatted LaTeX, likely not a draft" in message
    print("PASS: test_hover_message_notes_formatted_latex")


def test_hover_message_without_breakdown():
    document = TextDocument(TEXT)
    region = _auto_region(document, 1).model_copy(update={"breakdown": None})
    assert "Confidence Breakdown" not in hover_message(region, DetectionSettings())
    print("PASS: test_hover_message_without_breakdown")


def test_region_summary_is_json_ready():
    document = TextDocument(TEXT)
    summary = region_summary(_auto_region(document, 1))
    json.dumps(summary)
    assert summary["type"] == "auto"
    assert summary["start_line"] == 1 and summary["end_line"] == 1
    assert summary["confidence"] == 0.6
    assert summary["breakdown"]["natural_language_score"] == 1.0
    print("PASS: test_region_summary_is_json_ready")


def test_highlight_drafts():
    document = TextDocument(TEXT)
    result = highlight_drafts(document, [_auto_region(document, 1)])
    assert result == "\\section{Intro}\n{==this is messy and needs cleanup==}{>>auto 60%<<}\n"

    plain = highlight_drafts(document, [_auto_region(document, 1)], include_score=False)
    assert plain == "\\section{Intro}\n{==this is messy and needs cleanup==}\n"
    assert highlight_drafts(document, []) == TEXT
    print("PASS: test_highlight_drafts")


def test_strip_drafts():
    document = TextDocument(TEXT)
    assert strip_drafts(document, [_auto_region(document, 1)]) == "\\section{Intro}"
    print("PASS: test_strip_drafts")


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

def test_settings_defaults():
    settings = DetectionSettings()
    assert settings.draft_threshold == 0.3
    assert settings.actionable_threshold == 0.4
    assert settings.merge_gap_lines == 2
    assert settings.fence_token == "autotex"
    print("PASS: test_settings_defaults")


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("AUTOTEX_DRAFT_THRESHOLD", "0.35")
    monkeypatch.setenv("AUTOTEX_MANUAL_BLOCKS", "false")
    settings = DetectionSettings()
    assert settings.draft_threshold == 0.35
    assert settings.manual_blocks is False


def test_settings_validation():
    with pytest.raises(ValidationError):
        DetectionSettings(draft_threshold=1.5)
    with pytest.raises(ValidationError):
        DetectionSettings(draft_threshold=0.5, actionable_threshold=0.4)
    with pytest.raises(ValidationError):
        DetectionSettings(merge_gap_lines=-1)


def test_get_settings_is_cached():
    assert get_settings() is get_settings()


# ---------------------------------------------------------------------------
# Debouncer
# ---------------------------------------------------------------------------

def test_debouncer_coalesces_calls():
    calls = []
    fired = threading.Event()

    def callback():
        calls.append(1)
        fired.set()

    debouncer = Debouncer(callback, delay=0.05)
    for _ in range(5):
        debouncer.schedule()

    assert fired.wait(2.0)
    time.sleep(0.1)
    assert calls == [1]
    assert debouncer.pending is False


def test_debouncer_cancel():
    calls = []
    debouncer = Debouncer(lambda: calls.append(1), delay=0.05)
    debouncer.schedule()
    assert debouncer.pending is True
    assert debouncer.cancel() is True
    time.sleep(0.15)
    assert calls == []
    assert debouncer.cancel() is False


def test_debouncer_flush():
    calls = []
    debouncer = Debouncer(lambda: calls.append(1), delay=10)
    debouncer.schedule()
    assert debouncer.flush() is True
    assert calls == [1]
    assert debouncer.flush() is False


def test_debouncer_logs_callback_failure_once(monkeypatch):
    hook_calls = []
    monkeypatch.setattr(threading, "excepthook", hook_calls.append)
    attempted = threading.Event()

    def callback():
        attempted.set()
        raise RuntimeError("boom")

    debouncer = Debouncer(callback, delay=0.01)
    debouncer.schedule()

    assert attempted.wait(2.0)
    time.sleep(0.1)
    assert hook_calls == []
    assert debouncer.pending is False


def test_debouncer_from_settings():
    debouncer = Debouncer.from_settings(lambda: None, DetectionSettings(debounce_seconds=1.5))
    assert debouncer.delay == 1.5
    assert Debouncer.from_settings(lambda: None, DetectionSettings()).delay == 0.3


def test_debouncer_rejects_negative_delay():
    with pytest.raises(ValueError):
        Debouncer(lambda: None, delay=-1)


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

@pytest.fixture
def reset_logging():
    yield
    structlog.reset_defaults()


def test_cli_score(capsys, reset_logging):
    cli.main(["score", "this is messy and needs cleanup"])
    out = json.loads(capsys.readouterr().out)
    assert out["confidence"] == 0.6
    assert out["breakdown"]["is_short_text"] is False


def test_cli_detect_json(tmp_path, capsys, reset_logging):
    current = tmp_path / "paper.tex"
    baseline = tmp_path / "saved.tex"
    current.write_text(TEXT, encoding="utf-8")
    baseline.write_text("\\section{Intro}\n", encoding="utf-8")

    cli.main(["detect", str(current), "--baseline", str(baseline), "--json"])
    regions = json.loads(capsys.readouterr().out)
    assert len(regions) == 1
    assert regions[0]["type"] == "auto"
    assert regions[0]["text"] == "this is messy and needs cleanup"


def test_cli_highlight_to_file(tmp_path, capsys, reset_logging):
    current = tmp_path / "paper.tex"
    output = tmp_path / "marked.tex"
    current.write_text("```autotex\nmake this a table\n```\n", encoding="utf-8")

    cli.main(["highlight", str(current), "-o", str(output), "--no-score"])
    assert output.read_text(encoding="utf-8") == "{==```autotex\nmake this a table\n```==}\n"


def test_cli_missing_file_exits(tmp_path, reset_logging):
    with pytest.raises(SystemExit) as exc:
        cli.main(["detect", str(tmp_path / "missing.tex")])
    assert exc.value.code == 1


if __name__ == '__main__':
    sys.exit(pytest.main([__file__, "-q"]))
