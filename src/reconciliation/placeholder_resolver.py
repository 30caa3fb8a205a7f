"""Replaces placeholder tokens with links and inline images.

Each token was inserted exactly once, so it must be found exactly once in the
snapshot (paragraphs and table cells). A token that is missing or repeated is a
resolution failure for that token only.

Replacements are ordered highest offset first across the whole set. Split into
chunks, every chunk only touches offsets below those of the chunks before it,
so all chunks can be computed from one snapshot.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from src.markdown_compiler import request_builders as rb
from src.markdown_compiler.models import ImageDirective, LinkDirective

from .errors import PositionResolutionError
from .snapshot import DocumentSnapshot, FlattenedText, utf16_length

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 20


@dataclass(frozen=True)
class Replacement:
    """One located token and what replaces it."""

    token: str
    start_index: int
    end_index: int
    link: Optional[LinkDirective] = None
    image: Optional[ImageDirective] = None

    @property
    def is_image(self) -> bool:
        return self.image is not None

    def requests(self) -> List[Dict]:
        """Delete the token, then insert the link text or the image in its place."""
        requests = [rb.delete_content_range(self.start_index, self.end_index)]
        if self.image is not None:
            requests.append(rb.insert_inline_image(self.image.uri, self.start_index))
            return requests
        return requests + self._link_requests()

    def fallback_requests(self) -> List[Dict]:
        """Like requests(), but images become plain markdown text."""
        if self.image is None:
            return self.requests()
        return [
            rb.delete_content_range(self.start_index, self.end_index),
            rb.insert_text(self.image.fallback_text(), index=self.start_index),
        ]

    def _link_requests(self) -> List[Dict]:
        display = self.link.display_text or self.link.url
        requests = [rb.insert_text(display, index=self.start_index)]
        if self.link.url:
            requests.append(rb.update_text_style(
                self.start_index,
                self.start_index + utf16_length(display),
                rb.link_style(self.link.url),
            ))
        return requests


class PlaceholderLinkResolver:
    """Locates placeholder tokens and builds their replacement requests.

    Example:
        >>> resolver = PlaceholderLinkResolver(chunk_size=10)
        >>> replacements = resolver.plan(links, images, snapshot)
        >>> for chunk in resolver.chunk(replacements):
        ...     api.batch_update(doc_id, resolver.chunk_requests(chunk))
    """

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE):
        if chunk_size < 1:
            raise ValueError("chunk_size must be at least 1")
        self.chunk_size = chunk_size

    def plan(self, links: Sequence[LinkDirective], images: Sequence[ImageDirective],
             snapshot: DocumentSnapshot) -> List[Replacement]:
        """Locate every token; return replacements sorted by descending offset."""
        flat = snapshot.flatten(include_tables=True)
        replacements: List[Replacement] = []

        for link in links:
            try:
                start, end = self._locate(flat, link.token)
            except PositionResolutionError as e:
                logger.warning(f"Leaving link '{link.display_text}' unresolved: {e}")
                continue
            replacements.append(Replacement(link.token, start, end, link=link))

        for image in images:
            try:
                start, end = self._locate(flat, image.token)
            except PositionResolutionError as e:
                logger.warning(f"Leaving {image.kind.value} '{image.alt_text}' unresolved: {e}")
                continue
            replacements.append(Replacement(image.token, start, end, image=image))

        replacements.sort(key=lambda r: r.start_index, reverse=True)
        return replacements

    def link_requests(self, links: Sequence[LinkDirective],
                      snapshot: DocumentSnapshot) -> List[Dict]:
        """All link replacement requests for one snapshot, highest offset first."""
        return self.chunk_requests(self.plan(links, (), snapshot))

    def chunk(self, replacements: Sequence[Replacement]) -> List[List[Replacement]]:
        return [
            list(replacements[i:i + self.chunk_size])
            for i in range(0, len(replacements), self.chunk_size)
        ]

    @staticmethod
    def chunk_requests(chunk: Sequence[Replacement], fallback: bool = False) -> List[Dict]:
        requests: List[Dict] = []
        for replacement in chunk:
            requests.extend(
                replacement.fallback_requests() if fallback else replacement.requests()
            )
        return requests

    def _locate(self, flat: FlattenedText, token: str):
        positions = flat.find_all(token)
        if not positions:
            raise PositionResolutionError(token, "token not found")
        if len(positions) > 1:
            raise PositionResolutionError(token, f"token found {len(positions)} times")
        return flat.to_real_range(positions[0], positions[0] + len(token))
