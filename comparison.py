"""
Competitor comparison: side-by-side category scores for a site and up to
three competitors
"""
import logging
from typing import List, Optional, Tuple, Dict, Any

from models import ScanResult, ComparisonCell, ComparisonRow
from scorer import letter_grade
from utils import normalize_site, validate_url

logger = logging.getLogger(__name__)

def score_band(score: int) -> str:
    """Colour band used when rendering a comparison cell"""
    if score >= 75:
        return 'good'
    if score >= 50:
        return 'fair'
    return 'poor'

def select_competitors(primary: str, candidates: List[str], limit: int = 3) -> List[str]:
    """Normalize candidates, dropping blanks, invalid URLs, duplicates and the primary site"""
    primary_site = normalize_site(primary)
    selected = []
    for candidate in candidates or []:
        site = normalize_site(candidate)
        if not site or site == primary_site or site in selected:
            continue
        if not validate_url(site):
            logger.warning(f"Ignoring competitor {candidate!r}: not a valid URL")
            continue
        if len(selected) >= limit:
            logger.info(f"Ignoring competitor {site}: limit of {limit} reached")
            break
        selected.append(site)
    return selected

def _overall_cell(url: str, is_you: bool, result: Optional[ScanResult]) -> ComparisonCell:
    if result is None:
        return ComparisonCell(url=url, is_you=is_you, available=False)
    return ComparisonCell(url=url, is_you=is_you, score=result.overall_score,
                          band=score_band(result.overall_score))

def _category_cell(url: str, is_you: bool, result: Optional[ScanResult],
                   category_id: str) -> ComparisonCell:
    category = result.category(category_id) if result is not None else None
    if category is None:
        return ComparisonCell(url=url, is_you=is_you, available=False)
    return ComparisonCell(url=url, is_you=is_you, score=category.score,
                          band=score_band(category.score))

def _grade_cell(url: str, is_you: bool, result: Optional[ScanResult]) -> ComparisonCell:
    if result is None:
        return ComparisonCell(url=url, is_you=is_you, available=False)
    return ComparisonCell(url=url, is_you=is_you, score=result.overall_score,
                          grade=letter_grade(result.overall_score),
                          band=score_band(result.overall_score))

def build_comparison(primary: ScanResult,
                     competitors: List[Tuple[str, Optional[ScanResult]]]) -> Dict[str, Any]:
    """
    Build the comparison table.

    ``competitors`` pairs each competitor site with its scan result, or None
    when its scan failed. Rows are: overall score, one per category of the
    primary result, and letter grade.
    """
    sites = [(primary.url, True, primary)] + [(url, False, result) for url, result in competitors]

    rows = [ComparisonRow(id='overall', label='Overall score',
                          cells=[_overall_cell(url, is_you, result) for url, is_you, result in sites])]
    for category in primary.categories:
        rows.append(ComparisonRow(
            id=category.id,
            label=category.name,
            cells=[_category_cell(url, is_you, result, category.id) for url, is_you, result in sites],
        ))
    rows.append(ComparisonRow(id='grade', label='Letter grade',
                              cells=[_grade_cell(url, is_you, result) for url, is_you, result in sites]))

    return {
        'sites': [{'url': url, 'isYou': is_you, 'scanned': result is not None}
                  for url, is_you, result in sites],
        'rows': [row.to_dict() for row in rows],
    }
