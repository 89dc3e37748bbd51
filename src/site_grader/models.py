"""Data models for website analysis results."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class Priority(Enum):
    """How urgently a finding should be addressed."""
    CRITICAL = "critical"
    IMPORTANT = "important"
    OPTIONAL = "optional"


class Category(Enum):
    """The analyzer that produced a finding."""
    SEO = "seo"
    SECURITY = "security"
    PERFORMANCE = "performance"
    KEYWORDS = "keywords"
    ACCESSIBILITY = "accessibility"
    MOBILE = "mobile"
    EMAIL = "email"
    AI_READINESS = "ai-readiness"
    SOCIAL_CARD = "seo-card"


PRIORITY_RANK = {
    Priority.CRITICAL: 0,
    Priority.IMPORTANT: 1,
    Priority.OPTIONAL: 2,
}


@dataclass(frozen=True)
class Finding:
    """A single observation from one analyzer."""
    category: Category
    subcategory: str
    issue: str
    impact: str
    priority: Priority
    how_to_fix: str = ""
    code_example: Optional[str] = None
    passed: bool = False

    def __post_init__(self):
        if not self.passed and not self.how_to_fix:
            raise ValueError(f"Failed finding needs remediation text: {self.issue!r}")
        if self.passed and self.how_to_fix:
            raise ValueError(f"Passed finding cannot carry remediation text: {self.issue!r}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category.value,
            "subcategory": self.subcategory,
            "issue": self.issue,
            "impact": self.impact,
            "priority": self.priority.value,
            "how_to_fix": self.how_to_fix,
            "code_example": self.code_example,
            "passed": self.passed,
        }


@dataclass(frozen=True)
class Outcome:
    """A finding plus the score changes it applies.

    ``deltas`` maps a score bucket to a signed amount. Failed findings carry
    penalties (or nothing), passed findings carry nothing or a bonus.
    """
    finding: Finding
    deltas: dict[str, int] = field(default_factory=dict)

    def __post_init__(self):
        if self.finding.passed and any(d < 0 for d in self.deltas.values()):
            raise ValueError(f"Passed finding cannot carry a penalty: {self.finding.issue!r}")


@dataclass
class CheckResult:
    """Result of a single analyzer."""
    name: str
    score: int  # 0-100
    findings: list[Finding] = field(default_factory=list)
    breakdown: dict[str, int] = field(default_factory=dict)
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def passed(self) -> bool:
        return all(f.passed for f in self.findings)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "score": self.score,
            "breakdown": dict(self.breakdown),
            "metadata": dict(self.metadata),
            "findings": [f.to_dict() for f in self.findings],
        }


@dataclass
class AnalysisResult:
    """Complete analysis result for a URL."""
    url: str
    overall_score: int = 0
    grade: str = "F"
    checks: list[CheckResult] = field(default_factory=list)
    fetch_time_ms: int = 0
    ttfb_ms: Optional[int] = None
    error: Optional[str] = None

    @property
    def scores(self) -> dict[str, int]:
        return {c.name: c.score for c in self.checks}

    @property
    def findings(self) -> list[Finding]:
        """All findings, in analyzer invocation order."""
        return [f for check in self.checks for f in check.findings]

    @property
    def metadata(self) -> dict[str, dict[str, Any]]:
        return {c.name: c.metadata for c in self.checks if c.metadata}

    def check(self, name: str) -> Optional[CheckResult]:
        for c in self.checks:
            if c.name == name:
                return c
        return None

    @property
    def quick_wins(self) -> list[Finding]:
        """Get the most urgent failed findings."""
        failed = [f for f in self.findings if not f.passed]
        return sorted(failed, key=lambda f: PRIORITY_RANK[f.priority])[:5]

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "overall_score": self.overall_score,
            "grade": self.grade,
            "scores": self.scores,
            "fetch_time_ms": self.fetch_time_ms,
            "ttfb_ms": self.ttfb_ms,
            "error": self.error,
            "metadata": self.metadata,
            "findings": [f.to_dict() for f in self.findings],
            "checks": [c.to_dict() for c in self.checks],
        }
