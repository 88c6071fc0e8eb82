from __future__ import annotations

from dataclasses import dataclass
from html import escape, unescape
from html.parser import HTMLParser
from typing import Iterable, List, Optional, Sequence, Tuple

from langdetect import DetectorFactory, detect_langs
from langdetect.lang_detect_exception import LangDetectException

DetectorFactory.seed = 0

TAG_SPEC: Tuple[str, ...] = ("p", "h1", "h2", "h3", "h4", "h5", "h6", "a")

# Text under these elements is never visible copy.
SKIP_TAGS = frozenset({"script", "style", "noscript", "template", "textarea"})

VOID_TAGS = frozenset(
    {
        "area", "base", "br", "col", "embed", "hr", "img", "input",
        "link", "meta", "param", "source", "track", "wbr",
    }
)


@dataclass(frozen=True)
class Fragment:
    index: int
    tag: str
    text: str
    start: int
    end: int
    leading: str = ""
    trailing: str = ""


@dataclass(frozen=True)
class TranslationEdit:
    start: int
    end: int
    replacement: str


def _line_starts(html: str) -> List[int]:
    starts = [0]
    for pos, ch in enumerate(html):
        if ch == "\n":
            starts.append(pos + 1)
    return starts


def _looks_like_text(text: str, *, min_alpha: int) -> bool:
    stripped = text.strip()
    if not stripped:
        return False
    alpha = sum(1 for ch in stripped if ch.isalpha())
    return alpha >= min_alpha


def detect_language(text: str) -> Tuple[str, float]:
    try:
        langs = detect_langs(text)
    except LangDetectException:
        return "", 0.0
    if not langs:
        return "", 0.0
    top = langs[0]
    return top.lang, float(top.prob)


def _safe_text(text: str) -> str:
    return escape(unescape(text), quote=False)


class _TextNodeCollector(HTMLParser):
    """
    Walks the markup and records every visible text node owned by one of the
    watched elements, together with its raw character span in the input.
    """

    def __init__(self, html: str, tags: Iterable[str], *, min_alpha: int) -> None:
        super().__init__(convert_charrefs=True)
        self._html = html
        self._line_starts = _line_starts(html)
        self._tags = frozenset(tag.lower() for tag in tags)
        self._min_alpha = min_alpha
        self._stack: List[str] = []
        self._pending: Optional[Tuple[int, Optional[str]]] = None
        self._fragments: List[Fragment] = []

    @property
    def fragments(self) -> List[Fragment]:
        return self._fragments

    def _offset(self) -> int:
        lineno, col = self.getpos()
        return self._line_starts[lineno - 1] + col

    def _owner(self) -> Optional[str]:
        for tag in reversed(self._stack):
            if tag in SKIP_TAGS:
                return None
            if tag in self._tags:
                return tag
        return None

    def _flush(self, end: Optional[int] = None) -> None:
        if self._pending is None:
            return
        start, owner = self._pending
        self._pending = None
        if owner is None:
            return
        if end is None:
            end = self._offset()
        raw = self._html[start:end]
        text = " ".join(unescape(raw).split())
        if not _looks_like_text(text, min_alpha=self._min_alpha):
            return
        self._fragments.append(
            Fragment(
                index=len(self._fragments),
                tag=owner,
                text=text,
                start=start,
                end=end,
                leading=raw[: len(raw) - len(raw.lstrip())],
                trailing=raw[len(raw.rstrip()):],
            )
        )

    def handle_starttag(self, tag: str, attrs: List[Tuple[str, Optional[str]]]) -> None:
        self._flush()
        if tag not in VOID_TAGS:
            self._stack.append(tag)

    def handle_startendtag(self, tag: str, attrs: List[Tuple[str, Optional[str]]]) -> None:
        self._flush()

    def handle_endtag(self, tag: str) -> None:
        self._flush()
        for pos in range(len(self._stack) - 1, -1, -1):
            if self._stack[pos] == tag:
                del self._stack[pos:]
                break

    def handle_data(self, data: str) -> None:
        if self._pending is None:
            self._pending = (self._offset(), self._owner())

    def handle_comment(self, data: str) -> None:
        self._flush()

    def handle_decl(self, decl: str) -> None:
        self._flush()

    def handle_pi(self, data: str) -> None:
        self._flush()

    def unknown_decl(self, data: str) -> None:
        self._flush()

    def close(self) -> None:
        super().close()
        self._flush(end=len(self._html))


def extract_fragments(
    html: str,
    tags: Sequence[str] = TAG_SPEC,
    *,
    min_alpha: int = 1,
) -> List[Fragment]:
    """
    Collect translatable text nodes in document order.

    A text node belongs to the nearest enclosing element listed in ``tags``;
    nodes inside script-like elements or outside any watched element are
    ignored, as are nodes with fewer than ``min_alpha`` letters.
    """
    collector = _TextNodeCollector(html, tags, min_alpha=min_alpha)
    collector.feed(html)
    collector.close()
    return collector.fragments


def edit_for(fragment: Fragment, translated: str) -> TranslationEdit:
    return TranslationEdit(
        start=fragment.start,
        end=fragment.end,
        replacement=fragment.leading + _safe_text(translated) + fragment.trailing,
    )


def apply_edits(html: str, edits: Iterable[TranslationEdit]) -> str:
    """Apply non-overlapping span edits to ``html`` in offset order."""
    out: List[str] = []
    cursor = 0
    for edit in sorted(edits, key=lambda e: e.start):
        if edit.start < cursor:
            raise ValueError(f"Overlapping edit at offset {edit.start}")
        out.append(html[cursor:edit.start])
        out.append(edit.replacement)
        cursor = edit.end
    out.append(html[cursor:])
    return "".join(out)
