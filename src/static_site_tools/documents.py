"""
Page sources a translation pass can read from and write back to.
"""

from __future__ import annotations

import contextlib
import logging
from pathlib import Path
from typing import Any, AsyncIterator, List, Optional, Protocol, Union

from .errors import ConfigurationError

logger = logging.getLogger(__name__)


class PageDocument(Protocol):
    async def read(self) -> str:
        ...

    async def replace(self, markup: str) -> None:
        ...


class InMemoryDocument:
    def __init__(self, markup: str) -> None:
        self.markup = markup
        self.replacements: List[str] = []

    async def read(self) -> str:
        return self.markup

    async def replace(self, markup: str) -> None:
        self.replacements.append(markup)
        self.markup = markup


class FileDocument:
    """An HTML file rewritten in place, or into ``output`` when given."""

    def __init__(
        self,
        path: Union[Path, str],
        *,
        output: Optional[Union[Path, str]] = None,
        encoding: str = "utf-8",
    ) -> None:
        self.path = Path(path)
        self.output = Path(output) if output is not None else self.path
        self.encoding = encoding

    async def read(self) -> str:
        return self.path.read_text(encoding=self.encoding)

    async def replace(self, markup: str) -> None:
        self.output.write_text(markup, encoding=self.encoding)
        logger.info("Wrote translated page to %s", self.output)


class BrowserDocument:
    """
    A live Playwright page. Reading serializes the rendered DOM; replacing
    swaps the whole document, the way ``document.write`` would in the page.
    """

    def __init__(self, page: Any) -> None:
        self._page = page

    async def read(self) -> str:
        return await self._page.content()

    async def replace(self, markup: str) -> None:
        await self._page.set_content(markup)


@contextlib.asynccontextmanager
async def open_browser_document(url: str, *, headless: bool = True) -> AsyncIterator[BrowserDocument]:
    try:
        from playwright.async_api import async_playwright
    except ImportError as exc:  # pragma: no cover - import guard
        raise ConfigurationError("playwright is required to translate live pages") from exc

    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=headless)
        try:
            page = await browser.new_page()
            await page.goto(url)
            yield BrowserDocument(page)
        finally:
            await browser.close()
