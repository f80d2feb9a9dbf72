from importlib.metadata import PackageNotFoundError, version

from autotex.detector import DraftDetector, detect_draft_regions
from autotex.document import TextDocument
from autotex.models import ConfidenceBreakdown, DraftRegion, Position, Range, RegionType, ScoreResult
from autotex.scoring import score_text
from autotex.state import SavedStateStore

try:
    __version__ = version("autotex")
except PackageNotFoundError:
    # Running from a source checkout without an install.
    __version__ = "0.0.0-dev"

__all__ = [
    "DraftDetector",
    "detect_draft_regions",
    "TextDocument",
    "DraftRegion",
    "ConfidenceBreakdown",
    "Position",
    "Range",
    "RegionType",
    "ScoreResult",
    "SavedStateStore",
    "score_text",
    "__version__",
]
