"""
Per-model visibility projection.

Every AI model sees the same ten check scores; each weighs them differently.
The weight tables are static and sum to 1.0 per model.
"""
import logging
from collections import namedtuple
from typing import Dict, List

from models import ScanResult, AIModelScore
from utils import round_half_up

logger = logging.getLogger(__name__)

ModelMeta = namedtuple('ModelMeta', ['name', 'icon', 'emphasis'])

MODEL_WEIGHTS: Dict[str, Dict[str, float]] = {
    'chatgpt': {
        'robots-txt': 0.20,
        'llms-txt': 0.05,
        'json-ld': 0.15,
        'faq-schema': 0.15,
        'meta-description': 0.10,
        'og-tags': 0.05,
        'headings': 0.10,
        'readability': 0.10,
        'sitemap': 0.05,
        'page-speed': 0.05,
    },
    'claude': {
        'robots-txt': 0.18,
        'llms-txt': 0.12,
        'json-ld': 0.10,
        'faq-schema': 0.10,
        'meta-description': 0.12,
        'og-tags': 0.05,
        'headings': 0.12,
        'readability': 0.13,
        'sitemap': 0.04,
        'page-speed': 0.04,
    },
    'perplexity': {
        'robots-txt': 0.15,
        'llms-txt': 0.08,
        'json-ld': 0.12,
        'faq-schema': 0.18,
        'meta-description': 0.10,
        'og-tags': 0.05,
        'headings': 0.08,
        'readability': 0.08,
        'sitemap': 0.10,
        'page-speed': 0.06,
    },
    'gemini': {
        'robots-txt': 0.15,
        'llms-txt': 0.05,
        'json-ld': 0.18,
        'faq-schema': 0.15,
        'meta-description': 0.10,
        'og-tags': 0.07,
        'headings': 0.08,
        'readability': 0.07,
        'sitemap': 0.10,
        'page-speed': 0.05,
    },
}

MODEL_META: Dict[str, ModelMeta] = {
    'chatgpt': ModelMeta('ChatGPT', '🤖', 'Crawler access and FAQ schema'),
    'claude': ModelMeta('Claude', '🟠', 'Content clarity and llms.txt'),
    'perplexity': ModelMeta('Perplexity', '🔍', 'FAQ schema and sitemap coverage'),
    'gemini': ModelMeta('Gemini', '✦', 'Structured data and sitemap'),
}

SCORE_LABELS = ((90, 'Excellent'), (75, 'Good'), (60, 'Fair'), (40, 'Needs work'))

def score_label(score: int) -> str:
    for threshold, label in SCORE_LABELS:
        if score >= threshold:
            return label
    return 'Poor'

def weighted_score(check_scores: Dict[str, int], weights: Dict[str, float]) -> int:
    """Weighted mean over the checks present in ``check_scores``.

    Checks missing from the result drop out of both numerator and
    denominator. Returns 0 when no weighted check is present.
    """
    total = 0.0
    total_weight = 0.0
    for check_id, weight in weights.items():
        score = check_scores.get(check_id)
        if score is None:
            continue
        total += score * weight
        total_weight += weight

    if total_weight <= 0:
        return 0
    # Float weights can land a hair off the true mean (e.g. 79.99999)
    return round_half_up(round(total / total_weight, 6))

def project_model_scores(result: ScanResult) -> List[AIModelScore]:
    """Project a scan result onto each tracked AI model"""
    check_scores = {check.id: check.score for check in result.all_checks()}

    projections = []
    for key, weights in MODEL_WEIGHTS.items():
        meta = MODEL_META[key]
        score = weighted_score(check_scores, weights)
        projections.append(AIModelScore(
            model=meta.name,
            icon=meta.icon,
            score=score,
            label=score_label(score),
            emphasis=meta.emphasis,
        ))

    logger.debug(f"Model projections for {result.url}: "
                 f"{', '.join(f'{p.model}={p.score}' for p in projections)}")
    return projections
