"""Replaces links, images and diagrams with unique placeholder tokens.

This runs before classification. Every occurrence gets its own token, even
when the same link or image appears several times, so each one resolves to
exactly one buffer range later. Token numbers keep counting across documents
of one run because all documents share the same remote buffer.

Fenced code and inline code spans are left untouched.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple
from urllib.parse import unquote

from src.markdown_compiler.block_classifier import DIAGRAM_LANGUAGES, FENCE_MARKER
from src.markdown_compiler.models import ImageDirective, ImageKind, LinkDirective

from .collaborators import AttachmentUploader, ContentHashStore, DiagramRenderer

logger = logging.getLogger(__name__)

IMAGE_PATTERN = re.compile(r'!\[([^\]]*)\]\(([^)\s]+)(?:\s+"[^"]*")?\)')
LINK_PATTERN = re.compile(r'(?<!!)\[([^\]]+)\]\(([^)\s]+)(?:\s+"[^"]*")?\)')
INLINE_CODE_PATTERN = re.compile(r'(`[^`\n]*`)')
EXTERNAL_URL_PATTERN = re.compile(r'^(https?:|mailto:)', re.IGNORECASE)
MARKDOWN_SUFFIXES = {".md", ".mdx"}


@dataclass
class PlaceholderResult:
    """Markdown with tokens in place, plus what each token stands for."""

    markdown: str
    links: List[LinkDirective] = field(default_factory=list)
    images: List[ImageDirective] = field(default_factory=list)
    stats: Dict[str, int] = field(default_factory=dict)


class PlaceholderBuilder:
    """Tokenizes links, images and diagrams of a markdown body.

    Without a renderer and uploader, diagrams stay as fences (and are later
    dropped by the compiler) and only remote images become inline images.

    Example:
        >>> builder = PlaceholderBuilder()
        >>> result = builder.build("See [Docs](https://x.io) and [Docs](https://x.io)")
        >>> result.markdown
        'See [[[LINK_0]]] and [[[LINK_1]]]'
    """

    def __init__(self, renderer: Optional[DiagramRenderer] = None,
                 uploader: Optional[AttachmentUploader] = None,
                 cache: Optional[ContentHashStore] = None,
                 diagram_languages: Optional[Iterable[str]] = None):
        self.renderer = renderer
        self.uploader = uploader
        self.cache = cache if cache is not None else ContentHashStore()
        self.diagram_languages = frozenset(
            lang.lower() for lang in (diagram_languages or DIAGRAM_LANGUAGES)
        )
        self._counters: Dict[str, int] = {"LINK": 0, "IMAGE": 0, "DIAGRAM": 0}

    def build(self, markdown: str, base_dir: Optional[Path] = None) -> PlaceholderResult:
        """Replace links, images and rendered diagrams with tokens.

        Args:
            markdown: Markdown body
            base_dir: Directory relative paths resolve from

        Returns:
            PlaceholderResult for this document
        """
        result = PlaceholderResult(markdown="", stats={
            "links": 0,
            "images": 0,
            "diagrams": 0,
            "diagrams_unrendered": 0,
            "uploads": 0,
            "uploads_cached": 0,
        })

        pieces = []
        for is_fence, language, body, raw in _split_fences(markdown):
            if not is_fence:
                pieces.append(self._process_text(body, base_dir, result))
            elif language and language.lower() in self.diagram_languages:
                pieces.append(self._process_diagram(language, body, raw, result))
            else:
                pieces.append(raw)

        result.markdown = "\n".join(pieces)
        return result

    def _next_token(self, kind: str) -> str:
        number = self._counters[kind]
        self._counters[kind] += 1
        return f"[[[{kind}_{number}]]]"

    def _process_text(self, text: str, base_dir: Optional[Path],
                      result: PlaceholderResult) -> str:
        parts = INLINE_CODE_PATTERN.split(text)
        for i in range(0, len(parts), 2):
            part = IMAGE_PATTERN.sub(lambda m: self._replace_image(m, base_dir, result), parts[i])
            parts[i] = LINK_PATTERN.sub(lambda m: self._replace_link(m, base_dir, result), part)
        return "".join(parts)

    def _replace_image(self, match: "re.Match[str]", base_dir: Optional[Path],
                       result: PlaceholderResult) -> str:
        alt_text, source = match.group(1), match.group(2)

        if EXTERNAL_URL_PATTERN.match(source):
            url = source
        else:
            url = self._upload_local(source, base_dir, result)
            if url is None:
                return match.group(0)

        token = self._next_token("IMAGE")
        result.images.append(ImageDirective(token=token, uri=url, alt_text=alt_text))
        result.stats["images"] += 1
        return token

    def _replace_link(self, match: "re.Match[str]", base_dir: Optional[Path],
                      result: PlaceholderResult) -> str:
        text, target = match.group(1), match.group(2)

        if EXTERNAL_URL_PATTERN.match(target):
            url, is_external = target, True
        elif target.startswith("#") or Path(target.split("#")[0]).suffix.lower() in MARKDOWN_SUFFIXES:
            # Anchors and cross-document links have no target in a single document.
            logger.debug(f"Keeping internal link '{text}' -> {target} as plain text")
            return text
        else:
            url = self._upload_local(target.split("#")[0], base_dir, result)
            if url is None:
                return text
            is_external = False

        token = self._next_token("LINK")
        result.links.append(LinkDirective(
            token=token, display_text=text, url=url, is_external=is_external
        ))
        result.stats["links"] += 1
        return token

    def _upload_local(self, source: str, base_dir: Optional[Path],
                      result: PlaceholderResult) -> Optional[str]:
        if self.uploader is None or base_dir is None:
            logger.debug(f"No uploader configured, leaving '{source}' in place")
            return None

        path = (Path(base_dir) / unquote(source)).resolve()
        if not path.is_file():
            logger.warning(f"Referenced file not found: {path}")
            return None

        key = ContentHashStore.key_for(path.read_bytes())
        url = self.cache.get(key)
        if url is None:
            upload = self.uploader.upload(str(path))
            url = upload.url
            self.cache.put(key, url)
            result.stats["uploads"] += 1
            if upload.cached:
                result.stats["uploads_cached"] += 1
        else:
            result.stats["uploads_cached"] += 1
        return url

    def _process_diagram(self, language: str, code: str, raw: str,
                         result: PlaceholderResult) -> str:
        if self.renderer is None or self.uploader is None:
            result.stats["diagrams_unrendered"] += 1
            return raw

        key = ContentHashStore.key_for(f"{language.lower()}\n{code}")
        url = self.cache.get(key)
        if url is None:
            image_path = self.renderer.render(code, language.lower())
            if not image_path:
                logger.warning(f"Rendering {language} diagram failed; leaving it unconverted")
                result.stats["diagrams_unrendered"] += 1
                return raw
            url = self.uploader.upload(image_path).url
            self.cache.put(key, url)
            result.stats["uploads"] += 1

        token = self._next_token("DIAGRAM")
        result.images.append(ImageDirective(
            token=token, uri=url, alt_text=f"{language} diagram", kind=ImageKind.DIAGRAM
        ))
        result.stats["diagrams"] += 1
        return token


def _split_fences(markdown: str) -> List[Tuple[bool, Optional[str], str, str]]:
    """Split markdown into text and fenced segments.

    Returns:
        List of (is_fence, language, body, raw) where raw is the exact source
        of the segment. An unterminated fence stays text.
    """
    lines = markdown.split("\n")
    segments: List[Tuple[bool, Optional[str], str, str]] = []
    text: List[str] = []
    i = 0

    while i < len(lines):
        stripped = lines[i].strip()
        if stripped.startswith(FENCE_MARKER):
            end = i + 1
            while end < len(lines) and lines[end].strip() != FENCE_MARKER:
                end += 1
            if end < len(lines):
                if text:
                    segments.append((False, None, "\n".join(text), "\n".join(text)))
                    text = []
                language = stripped[len(FENCE_MARKER):].strip() or None
                body = "\n".join(lines[i + 1:end])
                raw = "\n".join(lines[i:end + 1])
                segments.append((True, language, body, raw))
                i = end + 1
                continue
        text.append(lines[i])
        i += 1

    if text:
        segments.append((False, None, "\n".join(text), "\n".join(text)))
    return segments
