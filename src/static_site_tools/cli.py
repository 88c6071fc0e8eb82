"""Command line interface: translate a page or serve the contact form."""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from .configuration import Settings, load_settings
from .documents import FileDocument, open_browser_document
from .errors import ConfigurationError, SiteToolsError
from .page_translator import CommitPolicy, PageTranslator, TranslationPassResult, translate_document
from .transport import build_transport


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="site-tools",
        description="Translate static site pages and forward contact-form messages.",
    )
    parser.add_argument("--env-file", help="Path to a .env file with settings.")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Log every request.")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only log errors.")
    sub = parser.add_subparsers(dest="command", required=True)

    translate = sub.add_parser("translate", help="Translate the visible copy of a page.")
    translate.add_argument("target", help="HTML file path, or an http(s) URL rendered in a browser.")
    translate.add_argument("-l", "--lang", help="Target language code (default: SITE_TARGET_LANGUAGE).")
    translate.add_argument("-o", "--output", help="Write here instead of rewriting the file in place.")
    translate.add_argument(
        "--policy",
        choices=[p.value for p in CommitPolicy],
        help="When to write the page back (default: SITE_COMMIT_POLICY).",
    )
    translate.add_argument("--tags", help="Comma separated element names to translate.")
    translate.add_argument("--concurrency", type=int, help="Maximum requests in flight.")
    translate.add_argument(
        "--skip-target-language",
        action="store_true",
        help="Do not request fragments already detected as the target language.",
    )

    serve = sub.add_parser("serve", help="Serve the contact form endpoint.")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    return parser


def _configure_logging(args: argparse.Namespace) -> None:
    level = logging.INFO
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.ERROR
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def _apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    changes = {}
    if args.lang:
        changes["target_language"] = args.lang
    if args.policy:
        changes["commit_policy"] = CommitPolicy(args.policy)
    if args.tags:
        changes["tags"] = tuple(t.strip().lower() for t in args.tags.split(",") if t.strip())
    if args.concurrency is not None:
        changes["max_concurrency"] = args.concurrency
    return dataclasses.replace(settings, **changes)


def _is_url(target: str) -> bool:
    return target.startswith(("http://", "https://"))


async def _translate_url(url: str, output: str, translator: PageTranslator) -> TranslationPassResult:
    async with open_browser_document(url) as document:
        result = await translator.run_translation_pass(document)
    if result.replaced:
        Path(output).write_text(result.markup, encoding="utf-8")
    return result


def _run_translate(args: argparse.Namespace, settings: Settings) -> int:
    settings = _apply_overrides(settings, args)
    if _is_url(args.target) and not args.output:
        raise ConfigurationError("--output is required when translating a URL")
    transport = build_transport(settings.transports, timeout=settings.timeout)
    translator = PageTranslator(
        transport,
        target_language=settings.target_language,
        endpoint_template=settings.endpoint_template,
        origin=settings.origin,
        tags=settings.tags,
        max_concurrency=settings.max_concurrency,
        commit_policy=settings.commit_policy,
        skip_target_language=args.skip_target_language,
    )
    if _is_url(args.target):
        result = asyncio.run(_translate_url(args.target, args.output, translator))
    else:
        result = translate_document(FileDocument(args.target, output=args.output), translator)

    print(
        f"{args.target}: {result.translated} translated, {result.failed} failed, "
        f"{len(result.outcomes) - result.requested} skipped; "
        + ("page replaced" if result.replaced else "page left untouched")
    )
    return 0 if result.replaced else 1


def _run_serve(args: argparse.Namespace, settings: Settings) -> int:
    import uvicorn

    from .server import create_app

    app = create_app(settings)
    uvicorn.run(app, host=args.host, port=args.port)
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args)
    try:
        settings = load_settings(env_file=args.env_file)
        if args.command == "translate":
            return _run_translate(args, settings)
        return _run_serve(args, settings)
    except (SiteToolsError, OSError, UnicodeDecodeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
