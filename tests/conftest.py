"""
Test configuration and fixtures for the UX Audit Bot API.

Browsers are never started here: Selenium is replaced by ``FakeDriver`` and
``FakeLauncher``, which record every launch and quit so tests can check that
each audit releases its browser exactly once.
"""

import os
import tempfile
from typing import Any, Callable, Dict, Generator, List, Optional

# Must be set before app.platform.config is imported anywhere
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="ux-audit-logs-"))
os.environ["MOCK_AUDIT_DELAY_SECONDS"] = "0"
os.environ["ENVIRONMENT"] = "local"

import pytest
from fastapi.testclient import TestClient

from app.features.ux_audit.services import scripts
from app.platform.browser import ChromeLauncher
from app.platform.config import Settings
from app.platform.exceptions import LaunchFailure
from app.platform.i18n import TranslationCatalog


# Page measurements of a well-built page: no UX check should fire
CLEAN_PAGE: Dict[str, Dict[str, Any]] = {
    scripts.VISUAL_HIERARCHY_SCRIPT: {
        "h1Count": 1,
        "h2Count": 3,
        "headingSizes": {"h1": [32.0], "h2": [24.0, 24.0, 24.0]},
        "ctaCount": 2,
    },
    scripts.NAVIGATION_SCRIPT: {
        "hasMainNav": True,
        "isSticky": True,
        "navLinksCount": 6,
        "hasBreadcrumbs": False,
        "hasSearch": True,
    },
    scripts.TYPOGRAPHY_SCRIPT: {
        "bodyFontSize": 16.0,
        "lineHeightRatio": 1.5,
        "avgParagraphSize": 16.0,
        "smallTextCount": 0,
    },
    scripts.INTERACTIVITY_SCRIPT: {
        "totalButtons": 4,
        "smallButtonsCount": 0,
        "smallButtons": [],
        "hasHoverStyles": True,
        "hasFocusStyles": True,
    },
    scripts.MOBILE_ADAPTATION_SCRIPT: {
        "hasViewport": True,
        "hasMediaQueries": True,
        "hasHorizontalScroll": False,
        "bodyWidth": 1920,
        "windowWidth": 1920,
        "hasHamburger": True,
    },
    scripts.HORIZONTAL_SCROLL_SCRIPT: {
        "hasHorizontalScroll": False,
        "bodyWidth": 375,
        "windowWidth": 375,
    },
    scripts.ACCESSIBILITY_SCRIPT: {
        "totalImages": 3,
        "imagesWithoutAlt": 0,
        "totalInteractive": 10,
        "elementsWithoutAria": 0,
        "hasMain": True,
        "hasHeader": True,
        "hasFooter": True,
        "totalInputs": 1,
        "inputsWithoutLabels": 0,
    },
}


class FakeDriver:
    """Stands in for a Selenium Chrome WebDriver."""

    def __init__(
        self,
        page: Optional[Dict[str, Dict[str, Any]]] = None,
        get_error: Optional[Exception] = None,
        script_error: Optional[Exception] = None,
        debugger_address: Optional[str] = "localhost:9222",
    ):
        self.page = {**CLEAN_PAGE, **(page or {})}
        self.get_error = get_error
        self.script_error = script_error
        self.visited: List[str] = []
        self.cdp_commands: List[tuple] = []
        self.refreshes = 0
        self.quit_calls = 0
        self.page_load_timeout = None
        self.capabilities = {"goog:chromeOptions": {}}
        if debugger_address:
            self.capabilities["goog:chromeOptions"]["debuggerAddress"] = debugger_address

    def set_page_load_timeout(self, seconds):
        self.page_load_timeout = seconds

    def get(self, url):
        self.visited.append(url)
        if self.get_error:
            raise self.get_error

    def refresh(self):
        self.refreshes += 1

    def execute_cdp_cmd(self, cmd, cmd_args):
        self.cdp_commands.append((cmd, cmd_args))
        return {}

    def execute_script(self, script, *args):
        if script == scripts.NETWORK_IDLE_SCRIPT:
            return True
        if self.script_error:
            raise self.script_error
        return self.page.get(script, {})

    def quit(self):
        self.quit_calls += 1


class FakeLauncher(ChromeLauncher):
    """Hands out FakeDrivers and keeps a ledger of launches."""

    def __init__(self, driver: Optional[FakeDriver] = None, fail: bool = False):
        super().__init__(Settings())
        self.driver = driver or FakeDriver()
        self.fail = fail
        self.launches = 0
        self.window_sizes: List[Any] = []

    def launch(self, window_size=None):
        if self.fail:
            raise LaunchFailure("Failed to launch Chrome: chrome not reachable")
        self.launches += 1
        self.window_sizes.append(window_size)
        return self.driver


class FakeLighthouseRunner:
    def __init__(self, report: Optional[Dict[str, Any]] = None, error: Optional[Exception] = None, resolve_error: Optional[Exception] = None):
        self.report = report
        self.error = error
        self.resolve_error = resolve_error
        self.calls: List[tuple] = []

    def resolve(self) -> str:
        if self.resolve_error:
            raise self.resolve_error
        return "/usr/bin/lighthouse"

    async def run(self, url: str, port: int) -> Dict[str, Any]:
        self.calls.append((url, port))
        if self.error:
            raise self.error
        return self.report


@pytest.fixture(scope="session")
def translations() -> TranslationCatalog:
    from app.platform.config import settings

    return TranslationCatalog.from_directory(settings.LOCALES_DIR)


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        NAVIGATION_TIMEOUT_SECONDS=1,
        UX_SETTLE_DELAY_SECONDS=0,
        UX_MOBILE_SETTLE_DELAY_SECONDS=0,
        MOCK_AUDIT_DELAY_SECONDS=0,
    )


@pytest.fixture
def fake_driver() -> FakeDriver:
    return FakeDriver()


@pytest.fixture
def fake_launcher(fake_driver) -> FakeLauncher:
    return FakeLauncher(fake_driver)


@pytest.fixture
def lighthouse_report() -> Dict[str, Any]:
    """A trimmed-down Lighthouse result (LHR)."""
    return {
        "categories": {
            "performance": {
                "score": 0.555,
                "auditRefs": [
                    {"id": "first-contentful-paint"},
                    {"id": "render-blocking-resources"},
                    {"id": "unused-javascript"},
                    {"id": "uses-text-compression"},
                ],
            },
            "accessibility": {
                "score": 0.9,
                "auditRefs": [{"id": "image-alt"}, {"id": "color-contrast"}, {"id": "aria-allowed-attr"}],
            },
            "best-practices": {
                "score": 1,
                "auditRefs": [{"id": "is-on-https"}],
            },
            "seo": {
                "score": 0.7,
                "auditRefs": [{"id": "meta-description"}, {"id": "missing-audit"}],
            },
        },
        "audits": {
            "first-contentful-paint": {
                "title": "First Contentful Paint",
                "description": "FCP marks the time at which the first text is painted.",
                "score": 0.3,
                "scoreDisplayMode": "numeric",
                "displayValue": "3.1 s",
            },
            "render-blocking-resources": {
                "title": "Eliminate render-blocking resources",
                "description": "Resources are blocking the first paint. [Learn more](https://developer.chrome.com/docs/lighthouse/).",
                "score": 0.42,
                "scoreDisplayMode": "metricSavings",
                "displayValue": "Potential savings of 1,230 ms",
                "details": {
                    "type": "opportunity",
                    "overallSavingsMs": 1230.4,
                    "overallSavingsBytes": 20480.6,
                    "items": [{"url": f"https://example.com/style-{i}.css"} for i in range(8)],
                },
            },
            "unused-javascript": {
                "title": "Reduce unused JavaScript",
                "description": "Reduce unused JavaScript. [Learn how](https://web.dev/unused-javascript/).",
                "score": 0.9,
                "scoreDisplayMode": "metricSavings",
                "details": {"type": "opportunity", "overallSavingsMs": 0, "items": []},
            },
            "uses-text-compression": {
                "title": "Enable text compression",
                "description": "Text-based resources should be served with compression.",
                "score": 1,
                "scoreDisplayMode": "metricSavings",
            },
            "image-alt": {
                "title": "Image elements do not have `[alt]` attributes",
                "description": "Informative elements should aim for short, descriptive alternate text. [Learn more](https://dequeuniversity.com/rules/axe/image-alt).",
                "score": 0,
                "scoreDisplayMode": "binary",
                "details": {"type": "table", "items": [{"node": {"snippet": "<img src=a.png>"}}]},
            },
            "color-contrast": {
                "title": "Background and foreground colors do not have a sufficient contrast ratio.",
                "description": "Low-contrast text is difficult to read.",
                "score": None,
                "scoreDisplayMode": "notApplicable",
            },
            "aria-allowed-attr": {
                "title": "`[aria-*]` attributes match their roles",
                "description": "Each ARIA role supports a specific subset of attributes.",
                "score": 1,
                "scoreDisplayMode": "binary",
            },
            "is-on-https": {
                "title": "Uses HTTPS",
                "description": "All sites should be protected with HTTPS.",
                "score": 1,
                "scoreDisplayMode": "binary",
            },
            "meta-description": {
                "title": "Document does not have a meta description",
                "description": "Meta descriptions may be included in search results. [Learn more](https://developer.chrome.com/docs/lighthouse/seo/meta-description/).",
                "score": 0,
                "scoreDisplayMode": "binary",
            },
        },
    }


@pytest.fixture
def make_client(translations, test_settings) -> Generator[Callable[..., TestClient], None, None]:
    """
    Build a TestClient around an app whose audit drivers come from the given
    factories, e.g. ``make_client(ux_audit=lambda: service)``.
    """
    from app.main import create_app

    clients = []

    def _make(**factories: Callable[[], Any]) -> TestClient:
        app = create_app(
            settings=test_settings,
            translations=translations,
            driver_factories=factories,
        )
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client) -> TestClient:
    """Client with no audit drivers registered."""
    return make_client()
