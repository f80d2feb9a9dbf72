from typing import Dict, Iterator, Optional

import structlog

logger = structlog.get_logger(__name__)


class SavedStateStore:
    """
    Last-saved full text per document, keyed by a stable document id.

    The store is the only diff baseline. A document without an entry is
    detected with the line-scanning fallback instead.
    """

    def __init__(self):
        self._states: Dict[str, str] = {}

    def update_saved_state(self, document_id: str, full_text: str) -> None:
        self._states[document_id] = full_text
        logger.debug("Saved state updated", document=document_id, chars=len(full_text))

    def get_saved_state(self, document_id: str) -> Optional[str]:
        return self._states.get(document_id)

    def clear_document(self, document_id: str) -> None:
        if self._states.pop(document_id, None) is not None:
            logger.debug("Saved state cleared", document=document_id)

    def observe(self, document_id: str, full_text: str, is_dirty: bool, is_persisted: bool = True) -> bool:
        """
        Seeds a baseline for a document seen for the first time. Only a clean
        document that exists on disk qualifies. Returns True if seeded.
        """
        if document_id in self._states or is_dirty or not is_persisted:
            return False
        self.update_saved_state(document_id, full_text)
        return True

    def __contains__(self, document_id: str) -> bool:
        return document_id in self._states

    def __len__(self) -> int:
        return len(self._states)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._states))
