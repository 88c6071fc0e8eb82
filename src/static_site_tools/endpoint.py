"""
Request construction and response parsing for the public translate endpoint.
"""

from __future__ import annotations

import json
import time
import urllib.parse
from typing import Any, Dict, List, Optional

from .errors import ResponseParseError

DEFAULT_ENDPOINT_TEMPLATE = (
    "https://translate.googleapis.com/translate_a/single"
    "?client=gtx&sl=auto&tl={lang}&hl=en&dt=t&dt=bd&dj=1&source=icon&q={text}"
)
DEFAULT_ORIGIN = "https://aeonSolutions.github.io"
CACHE_BUSTER_KEY = "no-cache"


def build_request_url(template: str, text: str, lang: str) -> str:
    url = template.replace("{text}", urllib.parse.quote(text, safe=""))
    return url.replace("{lang}", urllib.parse.quote(lang, safe=""))


def append_cache_buster(url: str, now: Optional[float] = None) -> str:
    """Append ``no-cache=<epoch millis>`` using ``&`` or ``?`` as appropriate."""
    if now is None:
        now = time.time()
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}{CACHE_BUSTER_KEY}={int(now * 1000)}"


def request_headers(origin: str = DEFAULT_ORIGIN) -> Dict[str, str]:
    return {
        "Access-Control-Allow-Origin": origin,
        "Content-Type": "text/plain",
        "Pragma": "no-cache",
        "Expires": "Fri, 01 Jan 1990 00:00:00 GMT",
        "Cache-Control": "no-store, no-cache, must-revalidate",
        "X-XSS-Protection": "0",
    }


def parse_translation_response(body: str) -> str:
    """
    Turn a provider response body into translated text.

    With ``dj=1`` the endpoint answers with an object whose ``sentences``
    list carries ``trans`` pieces; without it, with a nested array whose
    first element lists ``[trans, orig, ...]`` rows. Both are accepted.
    """
    try:
        parsed: Any = json.loads(body)
    except (TypeError, ValueError) as exc:
        raise ResponseParseError(f"Response is not valid JSON: {exc}") from exc

    pieces: List[str] = []
    if isinstance(parsed, dict):
        sentences = parsed.get("sentences")
        if not isinstance(sentences, list):
            raise ResponseParseError("Response object has no 'sentences' list")
        for sentence in sentences:
            if isinstance(sentence, dict) and isinstance(sentence.get("trans"), str):
                pieces.append(sentence["trans"])
    elif isinstance(parsed, list) and parsed and isinstance(parsed[0], list):
        for row in parsed[0]:
            if isinstance(row, list) and row and isinstance(row[0], str):
                pieces.append(row[0])
    else:
        raise ResponseParseError(f"Unexpected response shape: {type(parsed).__name__}")

    translated = "".join(pieces)
    if not translated.strip():
        raise ResponseParseError("Response carried no translated text")
    return translated
