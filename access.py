"""
Access capability for the paid report views.

A grant is resolved once per request and passed explicitly to the code that
derives model scores, recommendations and comparisons. Scoring itself never
sees it.
"""
import enum
import logging
import secrets
from dataclasses import dataclass
from typing import Dict, Any, Optional

from models import ScanResult
from config import config, ScannerConfig
from model_projector import project_model_scores
from recommendations import rank_recommendations

logger = logging.getLogger(__name__)

class AccessLevel(str, enum.Enum):
    FREE = "free"
    DEMO = "demo"
    PAID = "paid"

class AccessDeniedError(PermissionError):
    """Raised when a free grant is used for a paid view"""

@dataclass(frozen=True)
class AccessGrant:
    level: AccessLevel

    @property
    def has_full_access(self) -> bool:
        return self.level in (AccessLevel.DEMO, AccessLevel.PAID)

def resolve_access(access_key: Optional[str] = None, demo: bool = False,
                   cfg: ScannerConfig = None) -> AccessGrant:
    """Issue a grant from an access key and/or a demo request"""
    cfg = cfg or config
    if access_key and any(secrets.compare_digest(access_key.encode(), key.encode()) for key in cfg.access_keys):
        return AccessGrant(AccessLevel.PAID)
    if access_key:
        logger.warning("Rejected unknown access key")
    if demo and cfg.demo_mode_enabled:
        return AccessGrant(AccessLevel.DEMO)
    return AccessGrant(AccessLevel.FREE)

def require_full_access(grant: AccessGrant):
    if not grant.has_full_access:
        raise AccessDeniedError("Full report access required: provide an access key or use demo mode")

def build_insights(result: ScanResult, grant: AccessGrant) -> Dict[str, Any]:
    """Per-model scores and priority recommendations for a scan result"""
    require_full_access(grant)
    return {
        'access': grant.level.value,
        'modelScores': [score.to_dict() for score in project_model_scores(result)],
        'recommendations': [rec.to_dict() for rec in rank_recommendations(result)],
    }
