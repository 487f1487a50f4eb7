"""
Priority recommendations: non-passing checks ranked by how much fixing them
would move AI visibility.
"""
import logging
from collections import namedtuple
from typing import Dict, List

from models import ScanResult, PriorityRecommendation, PASS
from utils import round_half_up

logger = logging.getLogger(__name__)

ImpactWeight = namedtuple('ImpactWeight', ['weight', 'reason'])

IMPACT_WEIGHTS: Dict[str, ImpactWeight] = {
    'robots-txt': ImpactWeight(
        100,
        'Blocking AI crawlers prevents all AI systems from indexing your site. '
        'This is the single most impactful fix.'),
    'json-ld': ImpactWeight(
        85,
        'Structured data helps every AI model understand your content type, business details, '
        'and page context.'),
    'faq-schema': ImpactWeight(
        80,
        'FAQ schema directly feeds AI answers. Sites with FAQ schema are cited 3x more often '
        'in AI responses.'),
    'llms-txt': ImpactWeight(
        75,
        'llms.txt gives AI models a structured summary of your site. Early adopters get better '
        'representation in AI outputs.'),
    'meta-description': ImpactWeight(
        70,
        'Meta descriptions are the primary text AI uses to summarize your site. A weak one means '
        'weak AI references.'),
    'sitemap': ImpactWeight(
        65,
        'Without a sitemap, AI crawlers may miss important pages entirely. Easy to add, broad impact.'),
    'headings': ImpactWeight(
        55,
        'Heading structure helps AI parse your content hierarchy. Important for accurate summarization.'),
    'readability': ImpactWeight(
        50,
        'Clear, well-structured writing is easier for AI to parse, quote, and recommend accurately.'),
    'og-tags': ImpactWeight(
        40,
        'OpenGraph tags improve how AI systems display your site in previews and citations.'),
    'page-speed': ImpactWeight(
        35,
        'Slow pages may time out during AI crawling. Improving speed ensures reliable indexing.'),
}

IMPACT_LEVELS = ((85, 'critical'), (65, 'high'), (45, 'medium'))

def impact_level(weight: int) -> str:
    """Coarse label for a base impact weight"""
    for threshold, level in IMPACT_LEVELS:
        if weight >= threshold:
            return level
    return 'low'

def adjusted_weight(base_weight: int, check_score: int) -> int:
    """Scale a base weight by how badly the check is failing"""
    return round_half_up(base_weight * (100 - check_score) / 100)

def rank_recommendations(result: ScanResult) -> List[PriorityRecommendation]:
    """
    Rank every non-passing check by adjusted impact, highest first.

    The impact label comes from the base weight while the order comes from
    the adjusted weight, so a nearly-passing critical check can rank below
    a completely failing medium one. Ties keep scan order.
    """
    recommendations = []
    for check in result.all_checks():
        if check.status == PASS:
            continue

        impact = IMPACT_WEIGHTS.get(check.id)
        if impact is None:
            logger.debug(f"No impact weight for check '{check.id}', skipping")
            continue

        recommendations.append(PriorityRecommendation(
            check=check,
            impact=impact_level(impact.weight),
            impact_score=adjusted_weight(impact.weight, check.score),
            reason=impact.reason,
        ))

    recommendations.sort(key=lambda rec: rec.impact_score, reverse=True)
    return recommendations
