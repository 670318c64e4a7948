from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Tuple

from selenium.webdriver.remote.webdriver import WebDriver

from app.features.ux_audit.schemas.ux_audit import CheckResult
from app.features.ux_audit.services import scripts
from app.platform.i18n import TranslationCatalog

# Points taken off per detected issue
DEFAULT_PENALTY = 25
NAVIGATION_PENALTY = 20
ACCESSIBILITY_PENALTY = 20

MIN_FONT_SIZE_PX = 14
MIN_LINE_HEIGHT_RATIO = 1.4
MAX_SMALL_TEXT_ELEMENTS = 5
MAX_UNLABELLED_INTERACTIVE = 5
DEFAULT_BODY_FONT_SIZE = 16.0
DEFAULT_LINE_HEIGHT_RATIO = 1.5


def penalty_score(issue_count: int, penalty: int) -> int:
    return max(0, 100 - issue_count * penalty)


@dataclass
class CheckContext:
    driver: WebDriver
    translations: TranslationCatalog
    lang: str
    # Measurements taken at the mobile viewport before the checks start
    mobile_viewport: Dict[str, Any] = field(default_factory=dict)

    def evaluate(self, script: str) -> Dict[str, Any]:
        return self.driver.execute_script(script) or {}

    def issue(self, key: str, **params: Any) -> str:
        return self.translations.get(self.lang, f"ux.issues.{key}", **params)


def _number(value: Any, default: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    return float(value)


def check_visual_hierarchy(ctx: CheckContext) -> CheckResult:
    data = ctx.evaluate(scripts.VISUAL_HIERARCHY_SCRIPT)
    h1_count = int(data.get("h1Count") or 0)
    cta_count = int(data.get("ctaCount") or 0)

    details = {
        "headings": {
            "h1Count": h1_count,
            "hasMultipleH1": h1_count > 1,
            "hasNoH1": h1_count == 0,
            "sizes": data.get("headingSizes") or {},
        },
        "ctaCount": cta_count,
    }

    issues = []
    if h1_count == 0:
        issues.append(ctx.issue("noH1"))
    if h1_count > 1:
        issues.append(ctx.issue("multipleH1", count=h1_count))
    if cta_count == 0:
        issues.append(ctx.issue("noCTA"))

    return CheckResult(issues=issues, score=penalty_score(len(issues), DEFAULT_PENALTY), details=details)


def check_navigation(ctx: CheckContext) -> CheckResult:
    data = ctx.evaluate(scripts.NAVIGATION_SCRIPT)
    has_main_nav = bool(data.get("hasMainNav"))

    issues = []
    if not has_main_nav:
        issues.append(ctx.issue("noMainNav"))
    if not data.get("navLinksCount"):
        issues.append(ctx.issue("noNavLinks"))
    if has_main_nav and not data.get("isSticky"):
        issues.append(ctx.issue("notSticky"))

    return CheckResult(
        issues=issues,
        score=penalty_score(len(issues), NAVIGATION_PENALTY),
        details={"navigation": data},
    )


def check_typography(ctx: CheckContext) -> CheckResult:
    data = ctx.evaluate(scripts.TYPOGRAPHY_SCRIPT)
    body_font_size = _number(data.get("bodyFontSize"), DEFAULT_BODY_FONT_SIZE)
    line_height_ratio = _number(data.get("lineHeightRatio"), DEFAULT_LINE_HEIGHT_RATIO)
    small_text_count = int(data.get("smallTextCount") or 0)

    issues = []
    if body_font_size < MIN_FONT_SIZE_PX:
        issues.append(ctx.issue("smallBodyFont", size=f"{body_font_size:.1f}"))
    if line_height_ratio < MIN_LINE_HEIGHT_RATIO:
        issues.append(ctx.issue("tightLineHeight", ratio=f"{line_height_ratio:.2f}"))
    if small_text_count > MAX_SMALL_TEXT_ELEMENTS:
        issues.append(ctx.issue("smallText", count=small_text_count))

    return CheckResult(
        issues=issues,
        score=penalty_score(len(issues), DEFAULT_PENALTY),
        details={"typography": data},
    )


def check_interactivity(ctx: CheckContext) -> CheckResult:
    data = ctx.evaluate(scripts.INTERACTIVITY_SCRIPT)
    small_buttons = int(data.get("smallButtonsCount") or 0)

    issues = []
    if small_buttons > 0:
        issues.append(ctx.issue("smallTapTargets", count=small_buttons))
    if not data.get("hasHoverStyles") and data.get("totalButtons"):
        issues.append(ctx.issue("noHover"))
    if not data.get("hasFocusStyles"):
        issues.append(ctx.issue("noFocus"))

    return CheckResult(
        issues=issues,
        score=penalty_score(len(issues), DEFAULT_PENALTY),
        details={"interactivity": data},
    )


def check_mobile_adaptation(ctx: CheckContext) -> CheckResult:
    data = ctx.evaluate(scripts.MOBILE_ADAPTATION_SCRIPT)

    issues = []
    if not data.get("hasViewport"):
        issues.append(ctx.issue("noViewport"))
    if ctx.mobile_viewport.get("hasHorizontalScroll"):
        issues.append(ctx.issue("horizontalScroll"))
    if not data.get("hasHamburger") and data.get("hasMediaQueries"):
        issues.append(ctx.issue("noHamburger"))

    return CheckResult(
        issues=issues,
        score=penalty_score(len(issues), DEFAULT_PENALTY),
        details={"mobile": {**data, "mobileViewport": ctx.mobile_viewport}},
    )


def check_accessibility(ctx: CheckContext) -> CheckResult:
    data = ctx.evaluate(scripts.ACCESSIBILITY_SCRIPT)
    images_without_alt = int(data.get("imagesWithoutAlt") or 0)
    inputs_without_labels = int(data.get("inputsWithoutLabels") or 0)
    without_aria = int(data.get("elementsWithoutAria") or 0)

    issues = []
    if images_without_alt > 0:
        issues.append(ctx.issue("missingAlt", count=images_without_alt))
    if not data.get("hasMain"):
        issues.append(ctx.issue("noMain"))
    if inputs_without_labels > 0 and data.get("totalInputs"):
        issues.append(ctx.issue("unlabeledInputs", count=inputs_without_labels))
    if without_aria > MAX_UNLABELLED_INTERACTIVE:
        issues.append(ctx.issue("missingAria", count=without_aria))

    return CheckResult(
        issues=issues,
        score=penalty_score(len(issues), ACCESSIBILITY_PENALTY),
        details={"accessibility": data},
    )


Check = Callable[[CheckContext], CheckResult]

# (criterion key, translation key, check) in report order
CHECKS: List[Tuple[str, str, Check]] = [
    ("Visual Hierarchy", "visualHierarchy", check_visual_hierarchy),
    ("Navigation", "navigation", check_navigation),
    ("Typography & Readability", "typography", check_typography),
    ("Interactivity", "interactivity", check_interactivity),
    ("Mobile Adaptation", "mobileAdaptation", check_mobile_adaptation),
    ("Accessibility", "accessibility", check_accessibility),
]