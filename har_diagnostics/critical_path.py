"""
Critical rendering path extraction.
"""

import logging
from typing import Optional, Sequence, Tuple

from .models import CriticalPathItem, CriticalPathKind, Record, ResourceClass


class CriticalPathExtractor:
    """
    Selects the document and render-blocking resources from a trace.

    The document is the earliest-starting html record. Render-blocking
    candidates are css and js records whose URL contains none of the
    excluded substrings; the ``limit`` fastest of them are kept.
    """

    def __init__(self, limit: int = 5,
                 excluded_url_substrings: Sequence[str] = ('analytics', 'tracking')):
        self.limit = limit
        self.excluded_url_substrings = tuple(excluded_url_substrings)
        self.logger = logging.getLogger(__name__)

    def find_document(self, records: Sequence[Record]) -> Optional[Record]:
        """Earliest html record; ties go to the first one in trace order."""
        documents = [r for r in records if r.resource_class == ResourceClass.HTML]
        if not documents:
            return None
        return min(documents, key=lambda r: (r.start_offset_ms, r.index))

    def is_excluded(self, url: str) -> bool:
        return any(marker in url for marker in self.excluded_url_substrings)

    def extract(self, records: Sequence[Record]) -> Tuple[CriticalPathItem, ...]:
        items = []

        document = self.find_document(records)
        if document is not None:
            items.append(CriticalPathItem(kind=CriticalPathKind.HTML_DOCUMENT, record=document))

        candidates = [
            r for r in records
            if r.resource_class in (ResourceClass.CSS, ResourceClass.JS) and not self.is_excluded(r.url)
        ]
        candidates.sort(key=lambda r: r.duration_ms)

        for record in candidates[:self.limit]:
            kind = (CriticalPathKind.CRITICAL_CSS if record.resource_class == ResourceClass.CSS
                    else CriticalPathKind.CRITICAL_JS)
            items.append(CriticalPathItem(kind=kind, record=record))

        self.logger.debug(f"Critical path has {len(items)} items ({len(candidates)} render-blocking candidates)")
        return tuple(items)
