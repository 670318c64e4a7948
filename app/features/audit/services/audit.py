import asyncio
import random
from typing import Dict, List, Optional

from app.platform.i18n import TranslationCatalog
from app.platform.logger import get_logger
from app.platform.schemas import AuditSummary, CriterionResult, MockAuditReport, utc_timestamp
from app.platform.utils.url_validator import normalize_url

logger = get_logger(__name__)

PLATFORMS = ("web", "mobile")

MOBILE_ONLY_CRITERION = "Mobile-specific"

# Probability that a criterion comes back clean
NO_ISSUES_PROBABILITY = 0.3
MAX_ISSUES_PER_CRITERION = 2


def candidate_issues(platform: str) -> Dict[str, List[str]]:
    """Issue keys that can be reported for each criterion on a platform."""
    web = platform == "web"
    mobile = platform == "mobile"
    return {
        "Layout & Structure": [
            *(["contentWidthExceeds"] if web else []),
            *(["horizontalScrolling"] if mobile else []),
            "inconsistentSpacing",
        ],
        "Navigation": [
            *(["noStickyHeader"] if web else []),
            *(["hamburgerMenuMissing"] if mobile else []),
            "confusingHierarchy",
        ],
        "Typography & Readability": [
            *(["fontSizeTooSmall"] if web else []),
            *(["poorReadability"] if mobile else []),
            "insufficientLineSpacing",
        ],
        "Accessibility": ["missingAltText", "lowContrast", "noKeyboardNav"],
        MOBILE_ONLY_CRITERION: (
            ["tapTargetsTooSmall", "viewportMissing", "noResponsiveLayout"] if mobile else []
        ),
        "Visual hierarchy": ["inconsistentHeadings", "noClearCTA", "overuseOfBold"],
    }


class MockAuditService:
    """
    Emulates a UX audit: every criterion gets zero to two issues picked at
    random from a fixed pool. Pass a seeded ``random.Random`` to make the
    picks reproducible.
    """

    def __init__(
        self,
        translations: TranslationCatalog,
        rng: Optional[random.Random] = None,
        delay_seconds: float = 1.0,
    ):
        self.translations = translations
        self.rng = rng or random.Random()
        self.delay_seconds = delay_seconds

    def pick_issues(self, pool: List[str]) -> List[str]:
        if not pool:
            return []
        if self.rng.random() < NO_ISSUES_PROBABILITY:
            return []
        count = min(self.rng.randint(1, MAX_ISSUES_PER_CRITERION), len(pool))
        return self.rng.sample(pool, count)

    async def run_audit(self, url: str, platform: str = "web", lang: str = "ru") -> MockAuditReport:
        url = normalize_url(url)
        logger.info(f"Running mock audit for {url} (platform={platform}, lang={lang})")

        if self.delay_seconds > 0:
            await asyncio.sleep(self.delay_seconds)

        criteria = []
        for criterion, pool in candidate_issues(platform).items():
            if criterion == MOBILE_ONLY_CRITERION and platform != "mobile":
                continue

            issues = [
                self.translations.get(lang, f"issues.{criterion}.{key}", default=key)
                for key in self.pick_issues(pool)
            ]
            criteria.append(
                CriterionResult(
                    criterion=self.translations.get(lang, f"criteria.{criterion}", default=criterion),
                    criterion_key=criterion,
                    issues=issues,
                )
            )

        return MockAuditReport(
            url=url,
            platform=platform,
            timestamp=utc_timestamp(),
            criteria=criteria,
            summary=AuditSummary.from_criteria(criteria),
        )
