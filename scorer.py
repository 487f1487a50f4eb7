"""
Scoring rules: ScanData in, ScanResult out.

Each check is a row in CHECK_DEFINITIONS pointing at a pure rule function.
Categories are the unweighted mean of their checks and the overall score is
the unweighted mean of the categories.
"""
import logging
from collections import namedtuple
from datetime import datetime, timezone
from typing import Dict, Any, List

from models import (
    ScanData, CheckResult, CategoryResult, ScanResult, PASS, WARNING, FAIL,
)
from utils import mean_score, round_half_up

logger = logging.getLogger(__name__)

CheckDefinition = namedtuple('CheckDefinition', ['id', 'category', 'title', 'rule'])
CategoryDefinition = namedtuple('CategoryDefinition', ['id', 'name', 'icon'])

CATEGORY_DEFINITIONS = (
    CategoryDefinition('ai-access', 'AI Crawler Access', 'Bot'),
    CategoryDefinition('structured-data', 'Structured Data', 'Code2'),
    CategoryDefinition('meta-content', 'Meta & Content', 'FileText'),
    CategoryDefinition('discoverability', 'Discoverability', 'Search'),
)

GRADE_THRESHOLDS = ((90, 'A'), (75, 'B'), (60, 'C'), (40, 'D'))

META_DESCRIPTION_MIN = 120
META_DESCRIPTION_MAX = 160

def letter_grade(score: int) -> str:
    """Map an overall score to A-F"""
    for threshold, grade in GRADE_THRESHOLDS:
        if score >= threshold:
            return grade
    return 'F'

def _utc_timestamp() -> str:
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec='milliseconds').replace('+00:00', 'Z')

def _check_robots_txt(data: ScanData, context: Dict[str, Any]) -> Dict[str, Any]:
    robots = data.robots_txt
    crawlers = robots.crawlers
    all_allowed = all(c.allowed for c in crawlers)
    some_allowed = any(c.allowed for c in crawlers)
    blocked = [c.name for c in crawlers if not c.allowed]

    if not robots.exists:
        status, score = WARNING, 40
        summary = 'No robots.txt found. AI crawlers will assume full access.'
        details = ("No robots.txt file was found. While this means AI crawlers aren't explicitly "
                   "blocked, having one gives you control over what gets indexed.")
    else:
        if all_allowed:
            status, score = PASS, 100
            summary = 'robots.txt allows all major AI crawlers.'
        elif some_allowed:
            status, score = WARNING, 60
            summary = f"robots.txt blocks: {', '.join(blocked)}."
        else:
            status, score = FAIL, 20
            summary = f"robots.txt blocks: {', '.join(blocked)}."
        states = [
            f"{c.name}: {'allowed' if c.allowed else 'BLOCKED'}"
            f"{'' if c.found else ' (not mentioned, defaults to allowed)'}"
            for c in crawlers
        ]
        details = f"Found robots.txt. {'. '.join(states)}."

    outcome = dict(status=status, score=score, summary=summary, details=details)
    if blocked:
        outcome['fix_snippet'] = '\n'.join(f"User-agent: {name}\nAllow: /\n" for name in blocked)
        outcome['fix_label'] = 'Allow blocked AI crawlers'
    return outcome

def _check_llms_txt(data: ScanData, context: Dict[str, Any]) -> Dict[str, Any]:
    llms = data.llms_txt
    if llms.exists:
        return dict(
            status=PASS, score=100,
            summary='llms.txt found! Your site provides AI-readable summaries.',
            details=(f"Found llms.txt ({len(llms.content)} chars). This helps AI systems "
                     "understand your site structure and content."),
        )
    return dict(
        status=FAIL, score=0,
        summary='No llms.txt file found.',
        details=('The llms.txt standard provides a structured summary of your site for AI models. '
                 'Adding one can significantly improve how AI systems understand and reference '
                 'your content.'),
        fix_snippet=(f"# {data.url} llms.txt\n\n> Brief description of your site.\n\n"
                     "## Key Pages\n- [About](/about)\n- [Docs](/docs)\n- [Blog](/blog)"),
        fix_label='Create an llms.txt file',
    )

def _check_json_ld(data: ScanData, context: Dict[str, Any]) -> Dict[str, Any]:
    html = data.html
    if not html.has_json_ld:
        return dict(
            status=FAIL, score=0,
            summary='No JSON-LD structured data found.',
            details=('No Schema.org/JSON-LD markup detected. Adding structured data helps AI '
                     'systems understand what your pages are about.'),
            fix_snippet=(
                '<script type="application/ld+json">\n{\n'
                '  "@context": "https://schema.org",\n'
                '  "@type": "WebPage",\n'
                f'  "name": "{html.title or "Your Page Title"}",\n'
                f'  "description": "{html.meta_description or "Your description"}",\n'
                f'  "url": "https://{data.url}"\n'
                '}\n</script>'
            ),
            fix_label='Add basic JSON-LD',
        )

    distinct_types = list(dict.fromkeys(html.json_ld_types))
    type_count = len(distinct_types)
    type_list = ', '.join(distinct_types) or 'none declared'
    return dict(
        status=PASS if type_count > 1 else WARNING,
        score=min(50 + type_count * 20, 100),
        summary=f"JSON-LD found with types: {type_list}.",
        details=(f"Found {type_count} Schema.org type(s): {type_list}. This helps AI understand "
                 "your page content and context."),
    )

def _check_faq_schema(data: ScanData, context: Dict[str, Any]) -> Dict[str, Any]:
    has_faq = data.html.has_faq_schema
    has_how_to = data.html.has_how_to_schema
    if has_faq and has_how_to:
        summary = 'Both FAQ and HowTo schemas found.'
    elif has_faq:
        summary = 'FAQ schema found.'
    elif has_how_to:
        summary = 'HowTo schema found.'
    else:
        summary = 'No FAQ or HowTo schema detected.'
    return dict(
        status=PASS if has_faq or has_how_to else FAIL,
        score=(50 if has_faq else 0) + (50 if has_how_to else 0),
        summary=summary,
        details='FAQ and HowTo schemas help AI models extract structured, citable answers from your content.',
    )

def _check_meta_description(data: ScanData, context: Dict[str, Any]) -> Dict[str, Any]:
    description = data.html.meta_description
    length = len(description)
    if length == 0:
        return dict(
            status=FAIL, score=0,
            summary='No meta description found.',
            details='Missing meta description. AI models use this to understand and summarize your page.',
        )

    if META_DESCRIPTION_MIN <= length <= META_DESCRIPTION_MAX:
        status, score, note, advice = PASS, 100, '', 'Good length for AI parsing.'
    elif length < META_DESCRIPTION_MIN:
        status, score, note = WARNING, 50, ', too short'
        advice = 'Consider expanding to 120-160 chars for optimal AI parsing.'
    else:
        status, score, note = WARNING, 50, ', too long'
        advice = 'Consider trimming to 120-160 chars.'
    return dict(
        status=status, score=score,
        summary=f"Meta description found ({length} chars{note}).",
        details=f'"{description[:200]}": {advice}',
    )

def _check_og_tags(data: ScanData, context: Dict[str, Any]) -> Dict[str, Any]:
    html = data.html
    complete = bool(html.og_title and html.og_description and html.og_image)
    if complete:
        status = PASS
    elif html.og_title or html.og_description or html.og_image:
        status = WARNING
    else:
        status = FAIL

    missing = [name for name, value in (('og:title', html.og_title),
                                        ('og:description', html.og_description),
                                        ('og:image', html.og_image)) if not value]
    return dict(
        status=status,
        score=(30 if html.og_title else 0) + (30 if html.og_description else 0) + (40 if html.og_image else 0),
        summary='Complete OpenGraph tags found.' if complete else f"Missing: {', '.join(missing)}.",
        details=(f"og:title: {html.og_title or 'missing'}. "
                 f"og:description: {'present' if html.og_description else 'missing'}. "
                 f"og:image: {'present' if html.og_image else 'missing'}."),
    )

def _check_headings(data: ScanData, context: Dict[str, Any]) -> Dict[str, Any]:
    html = data.html
    good_headings = html.h1_count == 1 and html.h2_count > 0
    if good_headings and html.has_semantic_html:
        status = PASS
    elif good_headings or html.h1_count == 1:
        status = WARNING
    else:
        status = FAIL

    if html.h1_count == 1:
        h1_points = 40
    elif html.h1_count > 0:
        h1_points = 20
    else:
        h1_points = 0
    score = (h1_points
             + (20 if html.h2_count > 0 else 0)
             + (20 if html.has_semantic_html else 0)
             + (10 if html.h3_count > 0 else 0)
             + (10 if html.h1_count <= 1 else 0))

    semantic = 'Semantic HTML detected.' if html.has_semantic_html else 'No semantic HTML elements.'
    multiple_h1 = 'Multiple H1 tags detected; use exactly one per page. ' if html.h1_count > 1 else ''
    semantic_detail = ('Yes (nav, main, article, etc.)' if html.has_semantic_html
                       else 'Not detected; consider using semantic HTML5 elements.')
    return dict(
        status=status, score=score,
        summary=(f"{html.h1_count} H1{'' if html.h1_count == 1 else 's'}, {html.h2_count} H2s, "
                 f"{html.h3_count} H3s. {semantic}"),
        details=(f"Heading counts: H1: {html.h1_count}, H2: {html.h2_count}, H3: {html.h3_count}, "
                 f"H4: {html.h4_count}, H5: {html.h5_count}, H6: {html.h6_count}. "
                 f"{multiple_h1}Semantic elements: {semantic_detail}"),
    )

def _check_readability(data: ScanData, context: Dict[str, Any]) -> Dict[str, Any]:
    html = data.html
    words = html.word_count
    paragraphs = html.paragraph_count
    avg_words = words / paragraphs if paragraphs > 0 else 0

    if words > 300:
        score = 80 if avg_words < 40 else 50
    elif words > 100:
        score = 50
    else:
        score = 20

    if score >= 70:
        status = PASS
    elif score >= 40:
        status = WARNING
    else:
        status = FAIL

    if words < 200:
        verdict = 'Very thin content.'
    elif avg_words < 40:
        verdict = 'Good paragraph length.'
    else:
        verdict = 'Paragraphs may be too long.'
    volume = ('Consider adding more content; AI needs substance to reference.' if words < 300
              else 'Good content volume.')
    return dict(
        status=status, score=score,
        summary=f"{words} words across {paragraphs} paragraphs. {verdict}",
        details=(f"Word count: {words}. Paragraphs: {paragraphs}. "
                 f"Average words/paragraph: {round_half_up(avg_words)}. "
                 f"Images: {html.image_count} ({html.images_without_alt} missing alt text). {volume}"),
    )

def _check_sitemap(data: ScanData, context: Dict[str, Any]) -> Dict[str, Any]:
    if data.sitemap.exists:
        return dict(
            status=PASS, score=100,
            summary='sitemap.xml found.',
            details='Your sitemap helps AI crawlers discover all important pages on your site.',
        )
    return dict(
        status=FAIL, score=0,
        summary='No sitemap.xml found.',
        details=('Without a sitemap, AI crawlers must discover pages by following links, and may '
                 'miss important content.'),
        fix_snippet=(
            '<?xml version="1.0" encoding="UTF-8"?>\n'
            '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">\n'
            '  <url>\n'
            f'    <loc>https://{data.url}/</loc>\n'
            f"    <lastmod>{context['date']}</lastmod>\n"
            '    <priority>1.0</priority>\n'
            '  </url>\n'
            '</urlset>'
        ),
        fix_label='Create a sitemap.xml',
    )

def _check_page_speed(data: ScanData, context: Dict[str, Any]) -> Dict[str, Any]:
    images = data.html.image_count
    missing_alt = data.html.images_without_alt
    return dict(
        status=PASS if images < 20 and missing_alt < 5 else WARNING,
        score=max(20, 80 - missing_alt * 10 - max(0, images - 15) * 5),
        summary=f"{images} images found, {missing_alt} missing alt text.",
        details=(f"Total images: {images}. Missing alt text: {missing_alt}. Basic content weight "
                 "analysis only; for full performance metrics, use Lighthouse."),
    )

CHECK_DEFINITIONS = (
    CheckDefinition('robots-txt', 'ai-access', 'robots.txt', _check_robots_txt),
    CheckDefinition('llms-txt', 'ai-access', 'llms.txt', _check_llms_txt),
    CheckDefinition('json-ld', 'structured-data', 'JSON-LD / Schema.org', _check_json_ld),
    CheckDefinition('faq-schema', 'structured-data', 'FAQ / How-To Schema', _check_faq_schema),
    CheckDefinition('meta-description', 'meta-content', 'Meta Description', _check_meta_description),
    CheckDefinition('og-tags', 'meta-content', 'OpenGraph Tags', _check_og_tags),
    CheckDefinition('headings', 'meta-content', 'Content Structure', _check_headings),
    CheckDefinition('readability', 'meta-content', 'Content Clarity', _check_readability),
    CheckDefinition('sitemap', 'discoverability', 'Sitemap', _check_sitemap),
    CheckDefinition('page-speed', 'discoverability', 'Page Speed Indicators', _check_page_speed),
)

def run_checks(data: ScanData, date: str) -> List[CheckResult]:
    """Apply every rule in CHECK_DEFINITIONS, in table order"""
    context = {'date': date}
    return [
        CheckResult(id=definition.id, category=definition.category, title=definition.title,
                    **definition.rule(data, context))
        for definition in CHECK_DEFINITIONS
    ]

def build_categories(checks: List[CheckResult]) -> List[CategoryResult]:
    categories = []
    for definition in CATEGORY_DEFINITIONS:
        members = tuple(check for check in checks if check.category == definition.id)
        categories.append(CategoryResult(
            id=definition.id,
            name=definition.name,
            icon=definition.icon,
            score=mean_score(check.score for check in members),
            checks=members,
        ))
    return categories

def score_scan(data: ScanData, timestamp: str = None) -> ScanResult:
    """Score assembled scan data.

    ``timestamp`` defaults to the current UTC time; its date is also used in
    the sitemap fix snippet so identical inputs give identical results.
    """
    timestamp = timestamp or _utc_timestamp()
    checks = run_checks(data, timestamp[:10])
    categories = build_categories(checks)
    overall = mean_score(category.score for category in categories)

    result = ScanResult(
        url=data.url,
        timestamp=timestamp,
        overall_score=overall,
        letter_grade=letter_grade(overall),
        categories=tuple(categories),
    )
    logger.debug(f"Scored {data.url}: {overall} ({result.letter_grade})")
    return result
