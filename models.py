"""
Data models for the AI Visibility Scanner
"""
from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional, Tuple

PASS = "pass"
WARNING = "warning"
FAIL = "fail"

@dataclass(frozen=True)
class ScanTarget:
    """Normalized scan target: the page to fetch and its origin"""
    url: str
    page_url: str
    origin: str

@dataclass(frozen=True)
class FetchOutcome:
    """Result of one artifact request.

    ``status`` is None when the resource was unreachable (timeout, connection
    failure or any other transport error). Only a 2xx status counts as
    existing; ``body`` is only read in that case.
    """
    url: str
    status: Optional[int] = None
    body: str = ""

    @property
    def reachable(self) -> bool:
        return self.status is not None

    @property
    def ok(self) -> bool:
        return self.status is not None and 200 <= self.status < 300

@dataclass(frozen=True)
class SiteArtifacts:
    """The four resources fetched for a target"""
    robots_txt: FetchOutcome
    llms_txt: FetchOutcome
    sitemap: FetchOutcome
    homepage: FetchOutcome

    def unreachable(self) -> List[str]:
        outcomes = [self.robots_txt, self.llms_txt, self.sitemap, self.homepage]
        return [outcome.url for outcome in outcomes if not outcome.reachable]

@dataclass(frozen=True)
class CrawlerStatus:
    """Access decision for one AI crawler"""
    name: str
    allowed: bool
    found: bool

@dataclass(frozen=True)
class RobotsTxtData:
    exists: bool
    content: str
    crawlers: Tuple[CrawlerStatus, ...]

@dataclass(frozen=True)
class LlmsTxtData:
    exists: bool
    content: str

@dataclass(frozen=True)
class SitemapData:
    exists: bool

@dataclass(frozen=True)
class HtmlSignals:
    """Signals extracted from the homepage HTML"""
    title: str = ""
    meta_description: str = ""
    og_title: str = ""
    og_description: str = ""
    og_image: str = ""
    h1_count: int = 0
    h2_count: int = 0
    h3_count: int = 0
    h4_count: int = 0
    h5_count: int = 0
    h6_count: int = 0
    has_json_ld: bool = False
    json_ld_types: Tuple[str, ...] = ()
    has_faq_schema: bool = False
    has_how_to_schema: bool = False
    word_count: int = 0
    paragraph_count: int = 0
    image_count: int = 0
    images_without_alt: int = 0
    has_semantic_html: bool = False

@dataclass(frozen=True)
class ScanData:
    """Aggregate of everything the scorer needs for one scan"""
    url: str
    robots_txt: RobotsTxtData
    llms_txt: LlmsTxtData
    sitemap: SitemapData
    html: HtmlSignals

@dataclass(frozen=True)
class CheckResult:
    """Outcome of one scoring rule"""
    id: str
    category: str
    title: str
    status: str
    score: int
    summary: str
    details: str
    fix_snippet: Optional[str] = None
    fix_label: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "category": self.category,
            "title": self.title,
            "status": self.status,
            "score": self.score,
            "summary": self.summary,
            "details": self.details,
        }
        if self.fix_snippet is not None:
            data["fixSnippet"] = self.fix_snippet
        if self.fix_label is not None:
            data["fixLabel"] = self.fix_label
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CheckResult":
        return cls(
            id=data["id"],
            category=data["category"],
            title=data["title"],
            status=data["status"],
            score=int(data["score"]),
            summary=data.get("summary", ""),
            details=data.get("details", ""),
            fix_snippet=data.get("fixSnippet"),
            fix_label=data.get("fixLabel"),
        )

@dataclass(frozen=True)
class CategoryResult:
    """One of the four scoring categories"""
    id: str
    name: str
    icon: str
    score: int
    checks: Tuple[CheckResult, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "icon": self.icon,
            "score": self.score,
            "checks": [check.to_dict() for check in self.checks],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CategoryResult":
        return cls(
            id=data["id"],
            name=data["name"],
            icon=data.get("icon", ""),
            score=int(data["score"]),
            checks=tuple(CheckResult.from_dict(check) for check in data.get("checks", [])),
        )

@dataclass(frozen=True)
class ScanResult:
    """Terminal, externally consumed result of a scan"""
    url: str
    timestamp: str
    overall_score: int
    letter_grade: str
    categories: Tuple[CategoryResult, ...]

    def all_checks(self) -> List[CheckResult]:
        return [check for category in self.categories for check in category.checks]

    def category(self, category_id: str) -> Optional[CategoryResult]:
        for category in self.categories:
            if category.id == category_id:
                return category
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "timestamp": self.timestamp,
            "overallScore": self.overall_score,
            "letterGrade": self.letter_grade,
            "categories": [category.to_dict() for category in self.categories],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScanResult":
        return cls(
            url=data["url"],
            timestamp=data["timestamp"],
            overall_score=int(data["overallScore"]),
            letter_grade=data["letterGrade"],
            categories=tuple(CategoryResult.from_dict(cat) for cat in data.get("categories", [])),
        )

@dataclass(frozen=True)
class PriorityRecommendation:
    """A non-passing check ranked by how much fixing it would help"""
    check: CheckResult
    impact: str
    impact_score: int
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "check": self.check.to_dict(),
            "impact": self.impact,
            "impactScore": self.impact_score,
            "reason": self.reason,
        }

@dataclass(frozen=True)
class AIModelScore:
    """Projected visibility for one AI model"""
    model: str
    icon: str
    score: int
    label: str
    emphasis: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "model": self.model,
            "icon": self.icon,
            "score": self.score,
            "label": self.label,
            "emphasis": self.emphasis,
        }

@dataclass
class ComparisonCell:
    """One site's value in a comparison row"""
    url: str
    is_you: bool
    score: Optional[int] = None
    grade: Optional[str] = None
    band: Optional[str] = None
    available: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "isYou": self.is_you,
            "score": self.score,
            "grade": self.grade,
            "band": self.band,
            "available": self.available,
        }

@dataclass
class ComparisonRow:
    id: str
    label: str
    cells: List[ComparisonCell] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "cells": [cell.to_dict() for cell in self.cells],
        }
