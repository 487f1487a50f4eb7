"""
HTML signal extraction for AI visibility scoring.

The default analyzer works on raw markup with regular expressions and is
tolerant of broken HTML at the cost of the occasional false positive. A
BeautifulSoup-backed analyzer produces the same HtmlSignals record and can
be selected with ``config.analyzer_backend = "soup"``.
"""
import re
import json
import logging
from typing import List, Tuple

from bs4 import BeautifulSoup

from models import HtmlSignals
from config import config

logger = logging.getLogger(__name__)

SEMANTIC_TAGS = ('nav', 'main', 'article', 'section', 'aside', 'header', 'footer')
FAQ_TYPE = 'FAQPage'
HOW_TO_TYPE = 'HowTo'

JSON_LD_RE = re.compile(
    r'<script[^>]*type=["\']application/ld\+json["\'][^>]*>([\s\S]*?)</script>',
    re.IGNORECASE,
)
TITLE_RE = re.compile(r'<title[^>]*>([^<]*)</title>', re.IGNORECASE)
IMG_RE = re.compile(r'<img[^>]*>', re.IGNORECASE)
EMPTY_ALT_RE = re.compile(r'alt=["\']\s*["\']')
SCRIPT_RE = re.compile(r'<script[\s\S]*?</script>', re.IGNORECASE)
STYLE_RE = re.compile(r'<style[\s\S]*?</style>', re.IGNORECASE)
TAG_RE = re.compile(r'<[^>]+>')

def summarize_json_ld(blocks: List[str]) -> Tuple[List[str], bool, bool]:
    """
    Parse JSON-LD block bodies and collect their @type values.

    Returns (types, has_faq, has_how_to). Blocks that are not valid JSON are
    skipped. FAQ/HowTo are also detected anywhere inside a block, which
    covers @graph and nested entities.
    """
    types = []
    has_faq = False
    has_how_to = False

    for block in blocks:
        try:
            parsed = json.loads(block)
            serialized = json.dumps(parsed)
        except (ValueError, TypeError, RecursionError) as e:
            # RecursionError: nesting deeper than the interpreter stack allows
            logger.debug(f"Skipping malformed JSON-LD block: {e}")
            continue

        block_types = []
        if isinstance(parsed, dict):
            declared = parsed.get('@type')
            if isinstance(declared, list):
                block_types = [str(t) for t in declared if t]
            elif declared:
                block_types = [str(declared)]
        types.extend(block_types)

        if FAQ_TYPE in block_types or FAQ_TYPE in serialized:
            has_faq = True
        if HOW_TO_TYPE in block_types or HOW_TO_TYPE in serialized:
            has_how_to = True

    return types, has_faq, has_how_to

class HtmlAnalyzer:
    """Regex-based analyzer; raw HTML in, HtmlSignals out"""

    def analyze(self, html: str) -> HtmlSignals:
        html = html or ''
        if not html:
            return HtmlSignals()

        doc = self._prepare(html)
        blocks = self._extract_json_ld_blocks(doc)
        types, has_faq, has_how_to = summarize_json_ld(blocks)
        image_count, images_without_alt = self._count_images(doc)

        return HtmlSignals(
            title=self._extract_title(doc),
            meta_description=self._extract_meta_content(doc, 'description'),
            og_title=self._extract_meta_content(doc, 'og:title'),
            og_description=self._extract_meta_content(doc, 'og:description'),
            og_image=self._extract_meta_content(doc, 'og:image'),
            h1_count=self._count_tag(doc, 'h1'),
            h2_count=self._count_tag(doc, 'h2'),
            h3_count=self._count_tag(doc, 'h3'),
            h4_count=self._count_tag(doc, 'h4'),
            h5_count=self._count_tag(doc, 'h5'),
            h6_count=self._count_tag(doc, 'h6'),
            has_json_ld=len(blocks) > 0,
            json_ld_types=tuple(types),
            has_faq_schema=has_faq,
            has_how_to_schema=has_how_to,
            word_count=self._count_words(doc),
            paragraph_count=self._count_tag(doc, 'p'),
            image_count=image_count,
            images_without_alt=images_without_alt,
            has_semantic_html=self._has_semantic_html(doc),
        )

    def _prepare(self, html: str):
        return html

    def _extract_title(self, html: str) -> str:
        match = TITLE_RE.search(html)
        return match.group(1) if match else ''

    def _extract_meta_content(self, html: str, name: str) -> str:
        """Meta content by name/property, in either attribute order"""
        key = re.escape(name)
        name_first = re.search(
            rf'<meta[^>]+(?:name|property)=["\']{key}["\'][^>]+content=["\']([^"\']*)["\']',
            html, re.IGNORECASE)
        if name_first and name_first.group(1):
            return name_first.group(1)
        content_first = re.search(
            rf'<meta[^>]+content=["\']([^"\']*)["\'][^>]+(?:name|property)=["\']{key}["\']',
            html, re.IGNORECASE)
        return content_first.group(1) if content_first else ''

    def _count_tag(self, html: str, tag: str) -> int:
        return len(re.findall(rf'<{tag}[\s>]', html, re.IGNORECASE))

    def _extract_json_ld_blocks(self, html: str) -> List[str]:
        return JSON_LD_RE.findall(html)

    def _count_words(self, html: str) -> int:
        text = STYLE_RE.sub('', SCRIPT_RE.sub('', html))
        return len(TAG_RE.sub(' ', text).split())

    def _count_images(self, html: str) -> Tuple[int, int]:
        images = IMG_RE.findall(html)
        missing = [img for img in images if 'alt=' not in img or EMPTY_ALT_RE.search(img)]
        return len(images), len(missing)

    def _has_semantic_html(self, html: str) -> bool:
        lowered = html.lower()
        return any(f'<{tag}' in lowered for tag in SEMANTIC_TAGS)

class SoupHtmlAnalyzer(HtmlAnalyzer):
    """Same signals, extracted from a BeautifulSoup tree"""

    def _prepare(self, html: str):
        return BeautifulSoup(html, 'html.parser')

    def _extract_title(self, soup) -> str:
        title = soup.find('title')
        return title.get_text() if title else ''

    def _extract_meta_content(self, soup, name: str) -> str:
        for meta in soup.find_all('meta'):
            key = meta.get('name') or meta.get('property') or ''
            if key.lower() == name.lower() and meta.get('content'):
                return meta['content']
        return ''

    def _count_tag(self, soup, tag: str) -> int:
        return len(soup.find_all(tag))

    def _extract_json_ld_blocks(self, soup) -> List[str]:
        scripts = soup.find_all(
            'script', attrs={'type': lambda value: value and value.lower() == 'application/ld+json'})
        return [script.string or '' for script in scripts]

    def _count_words(self, soup) -> int:
        # Work on a copy so later extractors still see scripts
        clone = BeautifulSoup(str(soup), 'html.parser')
        for element in clone(['script', 'style']):
            element.decompose()
        return len(clone.get_text(' ').split())

    def _count_images(self, soup) -> Tuple[int, int]:
        images = soup.find_all('img')
        missing = [img for img in images if not (img.get('alt') or '').strip()]
        return len(images), len(missing)

    def _has_semantic_html(self, soup) -> bool:
        return soup.find(list(SEMANTIC_TAGS)) is not None

def create_analyzer(backend: str = None) -> HtmlAnalyzer:
    """Return the analyzer for a backend name ("regex" or "soup")"""
    backend = (backend or config.analyzer_backend).lower()
    if backend == 'regex':
        return HtmlAnalyzer()
    if backend == 'soup':
        return SoupHtmlAnalyzer()
    raise ValueError(f"Unknown analyzer backend: {backend}")
