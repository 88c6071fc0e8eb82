"""
static_site_tools

Glue for a static marketing site: translate a page's visible copy through a
public translate endpoint, and forward contact-form messages by mail.
"""

from .contact import ContactResult, ContactSubmission, SmtpMailSender, forward_submission
from .documents import BrowserDocument, FileDocument, InMemoryDocument
from .endpoint import append_cache_buster, parse_translation_response
from .errors import (
    ConfigurationError,
    InvalidSubmission,
    MailDeliveryFailed,
    RequestFailed,
    ResponseParseError,
    SiteToolsError,
    TransportUnavailable,
)
from .page_translator import (
    CommitPolicy,
    PageTranslator,
    TranslationPassResult,
    translate_document,
)
from .parsers import TAG_SPEC, Fragment, extract_fragments
from .transport import Transport, TransportResponse, build_transport

__all__ = [
    "__version__",
    "BrowserDocument",
    "CommitPolicy",
    "ConfigurationError",
    "ContactResult",
    "ContactSubmission",
    "FileDocument",
    "Fragment",
    "InMemoryDocument",
    "InvalidSubmission",
    "MailDeliveryFailed",
    "PageTranslator",
    "RequestFailed",
    "ResponseParseError",
    "SiteToolsError",
    "SmtpMailSender",
    "TAG_SPEC",
    "TranslationPassResult",
    "Transport",
    "TransportResponse",
    "TransportUnavailable",
    "append_cache_buster",
    "build_transport",
    "extract_fragments",
    "forward_submission",
    "parse_translation_response",
    "translate_document",
]
__version__ = "0.1.0"
