import asyncio
import time
from typing import Any, Dict, Optional, Tuple

from selenium.common.exceptions import TimeoutException, WebDriverException
from selenium.webdriver.remote.webdriver import WebDriver
from selenium.webdriver.support.ui import WebDriverWait

from app.features.ux_audit.services import scripts
from app.features.ux_audit.services.checks import CHECKS, CheckContext
from app.platform.browser import ChromeLauncher, browser_session
from app.platform.config import Settings, settings as default_settings
from app.platform.exceptions import AuditFailure, DriverFailure, NavigationTimeout
from app.platform.i18n import TranslationCatalog
from app.platform.logger import get_logger
from app.platform.schemas import AuditReport, AuditSummary, CriterionResult, utc_timestamp
from app.platform.utils.url_validator import ensure_valid_url

logger = get_logger(__name__)

DESKTOP_VIEWPORT: Tuple[int, int] = (1920, 1080)
# iPhone SE
MOBILE_VIEWPORT: Tuple[int, int] = (375, 667)
MOBILE_DEVICE_METRICS: Dict[str, Any] = {
    "width": MOBILE_VIEWPORT[0],
    "height": MOBILE_VIEWPORT[1],
    "deviceScaleFactor": 2,
    "mobile": True,
}


class UXAuditService:
    """
    Heuristic UX audit of a single page in headless Chrome.

    The page is loaded once at desktop size, measured once at mobile size,
    and then six read-only checks run against it concurrently.
    """

    def __init__(
        self,
        translations: TranslationCatalog,
        launcher: Optional[ChromeLauncher] = None,
        settings: Optional[Settings] = None,
    ):
        self.translations = translations
        self.settings = settings or default_settings
        self.launcher = launcher or ChromeLauncher(self.settings)

    @property
    def navigation_timeout(self) -> int:
        return self.settings.NAVIGATION_TIMEOUT_SECONDS

    def wait_for_network_idle(self, driver: WebDriver) -> None:
        """
        Wait until no request is in flight and none started or finished within
        the idle window. Gives up quietly on timeout.
        """
        try:
            WebDriverWait(driver, self.navigation_timeout, poll_frequency=0.25).until(
                lambda d: d.execute_script(scripts.NETWORK_IDLE_SCRIPT, self.settings.NETWORK_IDLE_MS)
            )
        except TimeoutException:
            logger.warning("Network did not go idle in time; proceeding anyway")

    def _navigate(self, driver: WebDriver, url: str, action) -> None:
        try:
            action()
        except TimeoutException as e:
            raise NavigationTimeout(
                f"Navigation timeout of {self.navigation_timeout}s exceeded for {url}"
            ) from e
        except WebDriverException as e:
            raise AuditFailure(f"Failed to load {url}: {e.msg or e}") from e
        self.wait_for_network_idle(driver)

    def load_page(self, driver: WebDriver, url: str) -> None:
        logger.info(f"Navigating to: {url}")
        driver.set_page_load_timeout(self.navigation_timeout)
        self._navigate(driver, url, lambda: driver.get(url))
        if self.settings.UX_SETTLE_DELAY_SECONDS > 0:
            time.sleep(self.settings.UX_SETTLE_DELAY_SECONDS)

    def probe_mobile_viewport(self, driver: WebDriver, url: str) -> Dict[str, Any]:
        """Horizontal scroll under an emulated mobile viewport, then back to desktop."""
        try:
            driver.execute_cdp_cmd("Emulation.setDeviceMetricsOverride", MOBILE_DEVICE_METRICS)
        except WebDriverException as e:
            raise AuditFailure(f"Failed to emulate mobile viewport: {e.msg or e}") from e
        self._navigate(driver, url, driver.refresh)
        if self.settings.UX_MOBILE_SETTLE_DELAY_SECONDS > 0:
            time.sleep(self.settings.UX_MOBILE_SETTLE_DELAY_SECONDS)

        try:
            measurement = driver.execute_script(scripts.HORIZONTAL_SCROLL_SCRIPT) or {}
        except WebDriverException as e:
            raise AuditFailure(f"Failed to inspect mobile viewport: {e.msg or e}") from e

        try:
            driver.execute_cdp_cmd("Emulation.clearDeviceMetricsOverride", {})
        except WebDriverException as e:
            raise AuditFailure(f"Failed to restore desktop viewport: {e.msg or e}") from e
        self._navigate(driver, url, driver.refresh)
        return measurement

    async def run_checks(self, ctx: CheckContext) -> list:
        # Every check must be done with the driver before the session closes it
        results = await asyncio.gather(
            *(asyncio.to_thread(check, ctx) for _, _, check in CHECKS),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, DriverFailure):
                raise result
            if isinstance(result, WebDriverException):
                raise AuditFailure(f"Page inspection failed: {result.msg or result}") from result
            if isinstance(result, BaseException):
                raise AuditFailure(f"Page inspection failed: {result}") from result
        return results

    async def run_audit(self, url: str, lang: str = "ru") -> AuditReport:
        url = ensure_valid_url(url)
        logger.info(f"Launching browser for UX audit of {url}")

        async with browser_session(self.launcher, window_size=DESKTOP_VIEWPORT) as driver:
            await asyncio.to_thread(self.load_page, driver, url)
            mobile_viewport = await asyncio.to_thread(self.probe_mobile_viewport, driver, url)

            ctx = CheckContext(
                driver=driver,
                translations=self.translations,
                lang=lang,
                mobile_viewport=mobile_viewport,
            )
            results = await self.run_checks(ctx)

        criteria = [
            CriterionResult(
                criterion=self.translations.get(lang, f"ux.criteria.{name_key}", default=key),
                criterion_key=key,
                issues=result.issues,
                score=result.score,
                details=result.details,
            )
            for (key, name_key, _), result in zip(CHECKS, results)
        ]

        logger.info(f"UX audit completed for {url}")
        return AuditReport(
            url=url,
            timestamp=utc_timestamp(),
            criteria=criteria,
            summary=AuditSummary.from_criteria(criteria, include_average=True),
        )
