import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class CamelModel(BaseModel):
    """Reports are immutable and travel camelCased."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class CriterionResult(CamelModel):
    criterion: str
    criterion_key: str
    issues: List[str]
    score: Optional[int] = Field(default=None, ge=0, le=100)
    details: Optional[Dict[str, Any]] = None


class AuditSummary(CamelModel):
    total_issues: int
    criteria_with_issues: int
    criteria_total: int
    passed: bool
    average_score: Optional[int] = None

    @classmethod
    def from_criteria(
        cls, criteria: Sequence[CriterionResult], include_average: bool = False
    ) -> "AuditSummary":
        total_issues = sum(len(c.issues) for c in criteria)
        fields = dict(
            total_issues=total_issues,
            criteria_with_issues=sum(1 for c in criteria if c.issues),
            criteria_total=len(criteria),
            passed=total_issues == 0,
        )
        if include_average:
            # Unscored criteria count as zero
            scores = [c.score or 0 for c in criteria]
            fields["average_score"] = math.floor(sum(scores) / len(scores) + 0.5) if scores else 0
        return cls(**fields)


class AuditReport(CamelModel):
    url: str
    timestamp: str
    criteria: List[CriterionResult]
    summary: AuditSummary


class MockAuditReport(AuditReport):
    platform: str


class LighthouseIssue(CamelModel):
    id: str
    title: str
    description: str
    score: Optional[int] = Field(default=None, ge=0, le=100)
    display_value: Optional[str] = None
    savings: Optional[int] = None
    savings_unit: Optional[str] = None
    savings_bytes: Optional[int] = None
    items: Optional[List[Any]] = Field(default=None, max_length=5)
    items_count: Optional[int] = None


class LighthouseCriterion(CriterionResult):
    issues: List[LighthouseIssue]


class LighthouseScores(CamelModel):
    performance: int
    accessibility: int
    best_practices: int
    seo: int


class LighthouseReport(AuditReport):
    criteria: List[LighthouseCriterion]
    scores: LighthouseScores


class HealthOut(BaseModel):
    status: str
    timestamp: str
