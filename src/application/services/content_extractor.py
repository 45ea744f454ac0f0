"""
Content Extractor - Turns raw HTML into a structured WebContent record.

Extraction is a cascade of independent strategies evaluated in priority
order: each candidate selector is tried in turn and the first non-empty
result wins. Candidate lists and thresholds are plain data so they can be
extended and tested one strategy at a time.

Extraction never raises for malformed markup; every step degrades to a
safe default, and non-HTML input is treated as body text.
"""

import math
import re
from typing import Iterable, List, Optional, Sequence, Tuple
from urllib.parse import urlparse

from bs4 import BeautifulSoup
from bs4.element import CData, NavigableString, Tag

from src.config.logging import get_logger
from src.domain.models import ContentMetadata, ContentType, WebContent, extract_domain

logger = get_logger(__name__)


# =============================================================================
# Strategy Data
# =============================================================================

CLEAN_SELECTORS = "script, style, nav, header, footer, aside, .ads, .advertisement, .sidebar"
FALLBACK_STRIP_SELECTORS = "script, style, nav, header, footer"

DEFAULT_TITLE = "Untitled Page"
TITLE_SELECTORS: Tuple[str, ...] = (
    "h1",
    "title",
    ".page-title",
    ".article-title",
    '[data-testid="title"]',
    ".entry-title",
)

MIN_CONTENT_LENGTH = 100
CONTENT_SELECTORS: Tuple[str, ...] = (
    "main",
    ".main-content",
    ".content",
    ".article-content",
    ".post-content",
    ".entry-content",
    '[role="main"]',
    ".documentation-content",
    ".wiki-content",
)

EXCERPT_LENGTH = 300
EXCERPT_BACKOFF_RATIO = 0.8
ELLIPSIS = "..."

WORDS_PER_MINUTE = 200

# (selector, attributes consulted before falling back to element text)
PUBLISHED_DATE_STRATEGIES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ('meta[property="article:published_time"]', ("content",)),
    ('meta[name="date"]', ("content",)),
    ('meta[name="publish-date"]', ("content",)),
    ("[datetime]", ("datetime",)),
    (".published-date", ()),
    (".date-published", ()),
)

AUTHOR_STRATEGIES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ('meta[name="author"]', ("content",)),
    ('meta[property="article:author"]', ("content",)),
    (".author", ()),
    (".byline", ()),
    ('[rel="author"]', ()),
)

BREADCRUMB_SELECTORS: Tuple[str, ...] = (
    ".breadcrumb a",
    ".breadcrumbs a",
    '[data-testid="breadcrumb"] a',
    'nav[aria-label="breadcrumb"] a',
)

KEYWORDS_META_SELECTOR = 'meta[name="keywords"]'
TAG_SELECTORS: Tuple[str, ...] = (
    ".tags a",
    ".tag",
    '[data-testid="tags"] a',
)

ARTICLE_SELECTORS = 'article, .article, [role="article"]'
API_PATH_MARKER = "/api/"
DOCUMENTATION_PATH_MARKERS: Tuple[str, ...] = ("/api/", "/reference/")
FORUM_PATH_MARKERS: Tuple[str, ...] = ("/forum/", "/discussion/", "/community/")

# Boundaries where text nodes are separated by a space; inline tags
# (b, i, a, sub, span, code...) join their text directly.
BLOCK_TAGS = frozenset({
    "address", "article", "aside", "blockquote", "body", "br", "caption",
    "dd", "details", "div", "dl", "dt", "fieldset", "figcaption", "figure",
    "footer", "form", "h1", "h2", "h3", "h4", "h5", "h6", "head", "header",
    "hr", "html", "li", "main", "nav", "ol", "option", "p", "pre", "section",
    "summary", "table", "tbody", "td", "tfoot", "th", "thead", "title", "tr",
    "ul",
})
TEXT_NODE_TYPES = (NavigableString, CData)

_WHITESPACE = re.compile(r"\s+")
_BLOCK_END = object()


# =============================================================================
# Text Helpers
# =============================================================================

def normalize_text(text: str) -> str:
    """Collapse whitespace runs (blank lines included) to single spaces and trim."""
    return _WHITESPACE.sub(" ", text).strip()


def make_excerpt(content: str, max_length: int = EXCERPT_LENGTH) -> str:
    """
    Truncate content to ``max_length`` characters on a word boundary.

    If the cut would split a word, back up to the last space provided it
    sits at or after 80% of the limit. The ellipsis is only appended when
    the content was actually truncated.
    """
    if len(content) <= max_length:
        return content

    excerpt = content[:max_length]
    if not content[max_length].isspace():
        last_space = excerpt.rfind(" ")
        if last_space >= max_length * EXCERPT_BACKOFF_RATIO:
            excerpt = excerpt[:last_space]
    return excerpt.rstrip() + ELLIPSIS


def _element_text(element: Tag) -> str:
    """Text of an element with a space at block boundaries only."""
    parts: List[str] = []
    stack: List[object] = [element]
    while stack:
        node = stack.pop()
        if node is _BLOCK_END:
            parts.append(" ")
        elif isinstance(node, Tag):
            if node.name in BLOCK_TAGS:
                parts.append(" ")
                stack.append(_BLOCK_END)
            stack.extend(reversed(node.contents))
        elif type(node) in TEXT_NODE_TYPES:
            parts.append(str(node))
    return normalize_text("".join(parts))


def _host_matches(host: str, candidates: Iterable[str]) -> bool:
    return any(host == c or host.endswith("." + c) for c in candidates)


# =============================================================================
# Extractor
# =============================================================================

class ContentExtractor:
    """
    Pure HTML → WebContent transform.

    The instance only holds classification data (documentation and forum
    hosts); repeated calls with the same input yield identical records.
    """

    def __init__(
        self,
        documentation_hosts: Sequence[str] = (),
        forum_hosts: Sequence[str] = (),
    ):
        self._documentation_hosts = tuple(h.lower() for h in documentation_hosts)
        self._forum_hosts = tuple(h.lower() for h in forum_hosts)

    def extract(
        self,
        html: str,
        url: str,
        *,
        clean_content: bool = True,
        last_modified: Optional[str] = None,
    ) -> WebContent:
        """
        Extract a structured content record from an HTML document.

        Args:
            html: Raw document (non-HTML input is treated as body text)
            url: Source URL, used for domain and content-type classification
            clean_content: Strip scripts, navigation and ads before reading text
            last_modified: Last-Modified header carried into the metadata

        Returns:
            WebContent record
        """
        soup = BeautifulSoup(html or "", "lxml")

        if clean_content:
            self._strip(soup, CLEAN_SELECTORS)

        published_date = self._first_value(soup, PUBLISHED_DATE_STRATEGIES)
        author = self._first_value(soup, AUTHOR_STRATEGIES)
        breadcrumbs = self._extract_breadcrumbs(soup)
        tags = self._extract_tags(soup)
        has_article = soup.select_one(ARTICLE_SELECTORS) is not None

        title = self._extract_title(soup)
        content = self._extract_main_content(soup)
        word_count = len(content.split())

        return WebContent(
            url=url,
            title=title,
            content=content,
            excerpt=make_excerpt(content),
            published_date=published_date,
            author=author,
            domain=extract_domain(url),
            content_type=self.classify(url, has_article=has_article),
            metadata=ContentMetadata(
                word_count=word_count,
                reading_time=math.ceil(word_count / WORDS_PER_MINUTE),
                last_modified=last_modified,
                breadcrumbs=breadcrumbs,
                tags=tags,
            ),
        )

    def classify(self, url: str, has_article: bool = False) -> ContentType:
        """
        Classify a page by URL rules first, then by document structure.

        Args:
            url: Source URL
            has_article: Whether the document contains an article element

        Returns:
            Content type label
        """
        parsed = urlparse(url.lower())
        host = parsed.hostname or ""
        path = parsed.path

        if _host_matches(host, self._documentation_hosts) or any(
            marker in path for marker in DOCUMENTATION_PATH_MARKERS
        ):
            return "api-reference" if API_PATH_MARKER in path else "documentation"

        if _host_matches(host, self._forum_hosts) or any(
            marker in path for marker in FORUM_PATH_MARKERS
        ):
            return "forum"

        if has_article:
            return "article"

        return "general"

    @staticmethod
    def _strip(soup: BeautifulSoup, selectors: str) -> None:
        for element in soup.select(selectors):
            element.extract()

    @staticmethod
    def _extract_title(soup: BeautifulSoup) -> str:
        for selector in TITLE_SELECTORS:
            element = soup.select_one(selector)
            if element is not None:
                title = _element_text(element)
                if title:
                    return title
        return DEFAULT_TITLE

    def _extract_main_content(self, soup: BeautifulSoup) -> str:
        for selector in CONTENT_SELECTORS:
            element = soup.select_one(selector)
            if element is not None:
                text = _element_text(element)
                if len(text) > MIN_CONTENT_LENGTH:
                    return text

        logger.debug("content_extractor_body_fallback")
        self._strip(soup, FALLBACK_STRIP_SELECTORS)
        body = soup.body if soup.body is not None else soup
        return _element_text(body)

    @staticmethod
    def _first_value(
        soup: BeautifulSoup,
        strategies: Sequence[Tuple[str, Tuple[str, ...]]],
    ) -> Optional[str]:
        for selector, attributes in strategies:
            element = soup.select_one(selector)
            if element is None:
                continue
            for attribute in attributes:
                value = element.get(attribute)
                if isinstance(value, str) and value.strip():
                    return value.strip()
            text = _element_text(element)
            if text:
                return text
        return None

    @staticmethod
    def _extract_breadcrumbs(soup: BeautifulSoup) -> List[str]:
        for selector in BREADCRUMB_SELECTORS:
            crumbs = [text for text in (_element_text(a) for a in soup.select(selector)) if text]
            if crumbs:
                return crumbs
        return []

    @staticmethod
    def _extract_tags(soup: BeautifulSoup) -> List[str]:
        tags: List[str] = []

        for meta in soup.select(KEYWORDS_META_SELECTOR):
            keywords = meta.get("content")
            if isinstance(keywords, str):
                tags.extend(tag.strip() for tag in keywords.split(","))

        for selector in TAG_SELECTORS:
            tags.extend(_element_text(element) for element in soup.select(selector))

        return list(dict.fromkeys(tag for tag in tags if tag))
