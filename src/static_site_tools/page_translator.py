"""
Translate the visible copy of a page through the public translate endpoint.

A pass captures the page markup once, requests a translation for every text
fragment concurrently, waits for all of them to settle and only then writes
the accumulated edits back to the page in a single replacement.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Mapping, Optional, Sequence

from .documents import PageDocument
from .endpoint import (
    DEFAULT_ENDPOINT_TEMPLATE,
    DEFAULT_ORIGIN,
    append_cache_buster,
    build_request_url,
    parse_translation_response,
    request_headers,
)
from .errors import ConfigurationError, RequestFailed, SiteToolsError
from .parsers import (
    TAG_SPEC,
    Fragment,
    apply_edits,
    detect_language,
    edit_for,
    extract_fragments,
)
from .transport import Transport

logger = logging.getLogger(__name__)


class CommitPolicy(str, Enum):
    # Replace the page only when the final fragment was translated.
    LAST = "last"
    # Replace the page when anything was translated.
    ANY = "any"


class FragmentStatus(str, Enum):
    TRANSLATED = "translated"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class TranslationRequest:
    fragment: Fragment
    url: str
    headers: Mapping[str, str]
    is_last: bool


@dataclass(frozen=True)
class FragmentOutcome:
    fragment: Fragment
    status: FragmentStatus
    translated: Optional[str] = None
    error: Optional[str] = None
    is_last: bool = False


@dataclass(frozen=True)
class TranslationPassResult:
    outcomes: List[FragmentOutcome]
    replaced: bool
    markup: str

    @property
    def requested(self) -> int:
        return sum(1 for o in self.outcomes if o.status is not FragmentStatus.SKIPPED)

    @property
    def translated(self) -> int:
        return sum(1 for o in self.outcomes if o.status is FragmentStatus.TRANSLATED)

    @property
    def failed(self) -> int:
        return sum(1 for o in self.outcomes if o.status is FragmentStatus.FAILED)


class PageTranslator:
    def __init__(
        self,
        transport: Transport,
        *,
        target_language: str,
        endpoint_template: str = DEFAULT_ENDPOINT_TEMPLATE,
        origin: str = DEFAULT_ORIGIN,
        tags: Sequence[str] = TAG_SPEC,
        max_concurrency: int = 8,
        commit_policy: CommitPolicy = CommitPolicy.LAST,
        skip_target_language: bool = False,
        language_confidence: float = 0.90,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if not target_language:
            raise ConfigurationError("A target language is required")
        if max_concurrency < 1:
            raise ConfigurationError("max_concurrency must be at least 1")
        self._transport = transport
        self._target_language = target_language
        self._endpoint_template = endpoint_template
        self._headers = request_headers(origin)
        self._tags = tuple(tags)
        self._max_concurrency = max_concurrency
        self._commit_policy = CommitPolicy(commit_policy)
        self._skip_target_language = skip_target_language
        self._language_confidence = language_confidence
        self._clock = clock

    @property
    def target_language(self) -> str:
        return self._target_language

    def _already_translated(self, fragment: Fragment) -> bool:
        if not self._skip_target_language:
            return False
        lang, conf = detect_language(fragment.text)
        return lang == self._target_language and conf >= self._language_confidence

    def build_requests(self, fragments: Sequence[Fragment]) -> List[TranslationRequest]:
        requests: List[TranslationRequest] = []
        for fragment in fragments:
            url = build_request_url(self._endpoint_template, fragment.text, self._target_language)
            url = append_cache_buster(url, now=self._clock())
            requests.append(
                TranslationRequest(fragment=fragment, url=url, headers=self._headers, is_last=False)
            )
        if requests:
            last = requests[-1]
            requests[-1] = TranslationRequest(
                fragment=last.fragment, url=last.url, headers=last.headers, is_last=True
            )
        return requests

    async def _translate(
        self, request: TranslationRequest, semaphore: asyncio.Semaphore
    ) -> FragmentOutcome:
        fragment = request.fragment
        async with semaphore:
            logger.debug("Requesting fragment %d <%s>: %s", fragment.index, fragment.tag, request.url)
            try:
                response = await self._transport.get(request.url, request.headers)
                if response.status != 200:
                    raise RequestFailed(
                        f"Endpoint answered HTTP {response.status}", status=response.status
                    )
                translated = parse_translation_response(response.body)
            except (SiteToolsError, OSError, ValueError) as exc:
                logger.warning(
                    "Fragment %d <%s> was not translated: %s", fragment.index, fragment.tag, exc
                )
                return FragmentOutcome(
                    fragment=fragment,
                    status=FragmentStatus.FAILED,
                    error=str(exc),
                    is_last=request.is_last,
                )
        return FragmentOutcome(
            fragment=fragment,
            status=FragmentStatus.TRANSLATED,
            translated=translated,
            is_last=request.is_last,
        )

    def _should_commit(self, outcomes: Sequence[FragmentOutcome]) -> bool:
        if self._commit_policy is CommitPolicy.LAST:
            return any(o.is_last and o.status is FragmentStatus.TRANSLATED for o in outcomes)
        return any(o.status is FragmentStatus.TRANSLATED for o in outcomes)

    async def run_translation_pass(self, document: PageDocument) -> TranslationPassResult:
        snapshot = await document.read()
        fragments = extract_fragments(snapshot, self._tags)

        skipped: List[FragmentOutcome] = []
        pending: List[Fragment] = []
        for fragment in fragments:
            if self._already_translated(fragment):
                skipped.append(FragmentOutcome(fragment=fragment, status=FragmentStatus.SKIPPED))
            else:
                pending.append(fragment)

        requests = self.build_requests(pending)
        logger.info(
            "Translating %d fragment(s) into %r (%d skipped)",
            len(requests),
            self._target_language,
            len(skipped),
        )

        semaphore = asyncio.Semaphore(self._max_concurrency)
        try:
            settled = await asyncio.gather(*(self._translate(r, semaphore) for r in requests))
        finally:
            await self._transport.aclose()
        outcomes = sorted([*skipped, *settled], key=lambda o: o.fragment.index)

        if not self._should_commit(outcomes):
            logger.info("Page left untouched (policy=%s)", self._commit_policy.value)
            return TranslationPassResult(outcomes=outcomes, replaced=False, markup=snapshot)

        edits = [
            edit_for(o.fragment, o.translated)
            for o in outcomes
            if o.status is FragmentStatus.TRANSLATED and o.translated is not None
        ]
        markup = apply_edits(snapshot, edits)
        await document.replace(markup)
        logger.info("Page replaced with %d translated fragment(s)", len(edits))
        return TranslationPassResult(outcomes=outcomes, replaced=True, markup=markup)


def translate_document(document: PageDocument, translator: PageTranslator) -> TranslationPassResult:
    """Run one pass to completion from synchronous code."""
    return asyncio.run(translator.run_translation_pass(document))
