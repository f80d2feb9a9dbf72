from typing import List, Optional

import structlog

from autotex.config import DetectionSettings, get_settings
from autotex.diff import compute_diff_regions
from autotex.document import TextDocument
from autotex.heuristic import detect_heuristic_drafts
from autotex.manual import extract_manual_blocks
from autotex.merge import filter_overlapping, merge_regions, overlaps_any
from autotex.models import DraftRegion, RegionType
from autotex.scoring import score_text
from autotex.state import SavedStateStore

logger = structlog.get_logger(__name__)


class DraftDetector:
    """
    Entry point for draft detection over one or more documents.

    Owns the saved-state store used as the diff baseline. Calls are
    synchronous and assume at most one detection in flight per document.
    """

    def __init__(self, store: Optional[SavedStateStore] = None, settings: Optional[DetectionSettings] = None):
        self.store = store if store is not None else SavedStateStore()
        self.settings = settings if settings is not None else get_settings()

    # --- Baseline lifecycle ---

    def update_saved_state(self, document_id: str, full_text: str) -> None:
        self.store.update_saved_state(document_id, full_text)

    def get_saved_state(self, document_id: str) -> Optional[str]:
        return self.store.get_saved_state(document_id)

    def clear_document(self, document_id: str) -> None:
        self.store.clear_document(document_id)

    def observe_document(self, document: TextDocument, is_dirty: bool, is_persisted: bool = True) -> bool:
        return self.store.observe(document.uri, document.text, is_dirty=is_dirty, is_persisted=is_persisted)

    # --- Detection ---

    def detect_draft_regions(
        self,
        document: TextDocument,
        use_automatic: Optional[bool] = None,
        use_manual: Optional[bool] = None,
    ) -> List[DraftRegion]:
        """
        Manual blocks first, then automatic regions that do not touch them.
        No merge is applied across the two lists.
        """
        if use_automatic is None:
            use_automatic = self.settings.automatic_detection
        if use_manual is None:
            use_manual = self.settings.manual_blocks

        manual_regions: List[DraftRegion] = []
        if use_manual:
            manual_regions = extract_manual_blocks(document, token=self.settings.fence_token)

        auto_regions: List[DraftRegion] = []
        if use_automatic:
            auto_regions = self._detect_automatic(document, manual_regions)

        logger.info(
            "Draft detection complete",
            document=document.uri,
            manual=len(manual_regions),
            auto=len(auto_regions),
        )
        return manual_regions + auto_regions

    def actionable_regions(
        self,
        document: TextDocument,
        use_automatic: Optional[bool] = None,
        use_manual: Optional[bool] = None,
    ) -> List[DraftRegion]:
        """
        Regions worth rewriting, bottom of the document first so replacing one
        does not shift the positions of those still pending.
        """
        regions = self.detect_draft_regions(document, use_automatic, use_manual)
        threshold = self.settings.actionable_threshold
        actionable = [region for region in regions if region.is_actionable(threshold)]
        return sorted(actionable, key=lambda region: region.range.start.as_tuple(), reverse=True)

    def _detect_automatic(self, document: TextDocument, manual_regions: List[DraftRegion]) -> List[DraftRegion]:
        threshold = self.settings.draft_threshold
        baseline = self.store.get_saved_state(document.uri)

        if baseline is None:
            logger.debug("No saved state, using heuristic detection", document=document.uri)
            return filter_overlapping(detect_heuristic_drafts(document, threshold), manual_regions)

        regions: List[DraftRegion] = []
        for range_ in compute_diff_regions(baseline, document):
            if overlaps_any(range_, manual_regions):
                continue

            text = document.get_text(range_)
            result = score_text(text)
            if result.confidence <= threshold:
                logger.debug("Dropping diff region", start_line=range_.start.line, confidence=round(result.confidence, 3))
                continue

            regions.append(
                DraftRegion(
                    range=range_,
                    text=text,
                    type=RegionType.AUTO,
                    confidence=result.confidence,
                    breakdown=result.breakdown,
                )
            )

        return merge_regions(regions, document, max_gap_lines=self.settings.merge_gap_lines)


def detect_draft_regions(
    document: TextDocument,
    use_automatic: bool = True,
    use_manual: bool = True,
    store: Optional[SavedStateStore] = None,
    settings: Optional[DetectionSettings] = None,
) -> List[DraftRegion]:
    """One-shot detection without keeping a detector around."""
    return DraftDetector(store=store, settings=settings).detect_draft_regions(document, use_automatic, use_manual)
