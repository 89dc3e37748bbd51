"""Website analyzers, one per scored dimension."""

from .seo import check_seo
from .security import check_security
from .performance import check_performance
from .keywords import check_keywords
from .accessibility import check_accessibility
from .mobile import check_mobile
from .email_dns import check_email_dns
from .ai_readiness import check_ai_readiness
from .social_card import check_social_card

__all__ = [
    "check_seo",
    "check_security",
    "check_performance",
    "check_keywords",
    "check_accessibility",
    "check_mobile",
    "check_email_dns",
    "check_ai_readiness",
    "check_social_card",
]
