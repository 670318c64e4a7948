import math
import re
from typing import Any, Dict, List, Mapping, Optional, Tuple

from app.features.lighthouse.services.runner import CATEGORIES, LighthouseRunner
from app.platform.browser import ChromeLauncher, browser_session
from app.platform.exceptions import AuditFailure
from app.platform.i18n import TranslationCatalog
from app.platform.logger import get_logger
from app.platform.schemas import (
    AuditSummary,
    LighthouseCriterion,
    LighthouseIssue,
    LighthouseReport,
    LighthouseScores,
    utc_timestamp,
)
from app.platform.utils.url_validator import ensure_valid_url

logger = get_logger(__name__)

MAX_ITEMS = 5

_MARKDOWN_LINK_RE = re.compile(r"\[([^\]]+)\]\([^)]+\)")


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def to_percent(score: Optional[float]) -> int:
    """0..1 score to a 0..100 integer."""
    return round_half_up((score or 0) * 100)


def clean_markdown_links(text: Optional[str]) -> str:
    """[text](url) -> text"""
    if not text:
        return ""
    return _MARKDOWN_LINK_RE.sub(r"\1", text)


def translate_audit(
    translations: TranslationCatalog, lang: str, audit_id: str, title: str, description: str
) -> Tuple[str, str]:
    translated = translations.lookup(lang, f"lighthouse.audits.{audit_id}")
    if isinstance(translated, Mapping):
        return (
            translated.get("title") or title,
            translated.get("description") or clean_markdown_links(description),
        )
    return title, clean_markdown_links(description)


def sort_issues(issues: List[LighthouseIssue]) -> List[LighthouseIssue]:
    """Worst score first, unscored issues last."""
    return sorted(issues, key=lambda issue: (issue.score is None, issue.score or 0))


def build_issue(
    audit_id: str, audit: Mapping[str, Any], translations: TranslationCatalog, lang: str
) -> LighthouseIssue:
    title, description = translate_audit(
        translations, lang, audit_id, audit.get("title") or audit_id, audit.get("description") or ""
    )
    score = audit.get("score")
    fields: Dict[str, Any] = dict(
        id=audit_id,
        title=title,
        description=description,
        score=to_percent(score) if score is not None else None,
    )
    if audit.get("displayValue"):
        fields["display_value"] = audit["displayValue"]

    details = audit.get("details") or {}
    if details.get("type") == "opportunity":
        if details.get("overallSavingsMs"):
            fields["savings"] = round_half_up(details["overallSavingsMs"])
            fields["savings_unit"] = "ms"
        if details.get("overallSavingsBytes"):
            fields["savings_bytes"] = round_half_up(details["overallSavingsBytes"])

    items = details.get("items") or []
    if items:
        fields["items"] = list(items[:MAX_ITEMS])
        fields["items_count"] = len(items)

    return LighthouseIssue(**fields)


def extract_category_issues(
    category: Optional[Mapping[str, Any]],
    audits: Mapping[str, Any],
    translations: TranslationCatalog,
    lang: str,
) -> List[LighthouseIssue]:
    """
    Failing audits of one category. Metrics (numeric audits) and audits with
    a perfect or missing score are left out.
    """
    if not category or not category.get("auditRefs"):
        return []

    issues = []
    for ref in category["auditRefs"]:
        audit_id = ref.get("id")
        audit = audits.get(audit_id)
        if not audit:
            continue
        if audit.get("scoreDisplayMode") == "numeric":
            continue

        score = audit.get("score")
        if score is None or score >= 1:
            continue

        issues.append(build_issue(audit_id, audit, translations, lang))

    return sort_issues(issues)


class LighthouseService:
    def __init__(
        self,
        translations: TranslationCatalog,
        launcher: Optional[ChromeLauncher] = None,
        runner: Optional[LighthouseRunner] = None,
    ):
        self.translations = translations
        self.launcher = launcher or ChromeLauncher()
        self.runner = runner or LighthouseRunner()

    async def run_audit(self, url: str, lang: str = "ru") -> LighthouseReport:
        logger.info(f"[Lighthouse] Starting audit for: {url}")
        url = ensure_valid_url(url)
        logger.info(f"[Lighthouse] Normalized URL: {url}")

        self.runner.resolve()

        async with browser_session(self.launcher) as driver:
            port = self.launcher.debugger_port(driver)
            logger.info(f"[Lighthouse] Chrome launched on port {port}")
            lhr = await self.runner.run(url, port)
            report = self.build_report(url, lhr, lang)

        logger.info(f"[Lighthouse] Audit completed for {url}")
        return report

    def build_report(self, url: str, lhr: Mapping[str, Any], lang: str) -> LighthouseReport:
        categories = lhr.get("categories")
        if not categories:
            raise AuditFailure("No categories found in Lighthouse results")
        audits = lhr.get("audits") or {}

        criteria = []
        for key in CATEGORIES:
            category = categories.get(key)
            criteria.append(
                LighthouseCriterion(
                    criterion=self.translations.get(
                        lang, f"lighthouse.categories.{key}", default=key
                    ),
                    criterion_key=key,
                    issues=extract_category_issues(category, audits, self.translations, lang),
                    score=to_percent((category or {}).get("score")),
                )
            )

        scores = {c.criterion_key: c.score for c in criteria}
        return LighthouseReport(
            url=url,
            timestamp=utc_timestamp(),
            scores=LighthouseScores(
                performance=scores["performance"],
                accessibility=scores["accessibility"],
                best_practices=scores["best-practices"],
                seo=scores["seo"],
            ),
            criteria=criteria,
            summary=AuditSummary.from_criteria(criteria, include_average=True),
        )
