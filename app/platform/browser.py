import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional, Sequence, Tuple

from selenium import webdriver
from selenium.common.exceptions import WebDriverException
from selenium.webdriver.chrome.options import Options
from selenium.webdriver.chrome.service import Service
from selenium.webdriver.chrome.webdriver import WebDriver
from webdriver_manager.chrome import ChromeDriverManager

from app.platform.config import Settings, settings as default_settings
from app.platform.exceptions import LaunchFailure
from app.platform.logger import get_logger

logger = get_logger(__name__)

DEFAULT_CHROME_ARGS = (
    "--headless=new",
    "--no-sandbox",
    "--disable-gpu",
    "--disable-dev-shm-usage",
    "--disable-setuid-sandbox",
)


class ChromeLauncher:
    """Starts headless Chrome instances through Selenium."""

    def __init__(self, settings: Optional[Settings] = None, extra_args: Sequence[str] = ()):
        self.settings = settings or default_settings
        self.extra_args = tuple(extra_args)

    def build_options(self, window_size: Optional[Tuple[int, int]] = None) -> Options:
        chrome_options = Options()
        for arg in DEFAULT_CHROME_ARGS + tuple(self.settings.CHROME_EXTRA_ARGS) + self.extra_args:
            chrome_options.add_argument(arg)
        if window_size:
            chrome_options.add_argument(f"--window-size={window_size[0]},{window_size[1]}")
        if self.settings.CHROME_BINARY:
            chrome_options.binary_location = self.settings.CHROME_BINARY
        return chrome_options

    def _service(self) -> Optional[Service]:
        if self.settings.CHROMEDRIVER_PATH:
            return Service(executable_path=self.settings.CHROMEDRIVER_PATH)
        if self.settings.USE_WEBDRIVER_MANAGER:
            return Service(ChromeDriverManager().install())
        # Selenium Manager resolves the driver on its own
        return None

    def launch(self, window_size: Optional[Tuple[int, int]] = None) -> WebDriver:
        chrome_options = self.build_options(window_size)
        try:
            service = self._service()
            if service is not None:
                driver = webdriver.Chrome(service=service, options=chrome_options)
            else:
                driver = webdriver.Chrome(options=chrome_options)
        except (WebDriverException, OSError, ValueError) as e:
            logger.error(f"Failed to launch Chrome: {e}")
            raise LaunchFailure(f"Failed to launch Chrome: {e}") from e

        logger.info("Chrome launched")
        return driver

    @staticmethod
    def debugger_port(driver: WebDriver) -> int:
        """DevTools port of a running Chrome, as reported by chromedriver."""
        options = (driver.capabilities or {}).get("goog:chromeOptions") or {}
        address = options.get("debuggerAddress") or ""
        _, _, port = address.rpartition(":")
        if not port.isdigit():
            raise LaunchFailure("Failed to launch Chrome instance - no port assigned")
        return int(port)


@asynccontextmanager
async def browser_session(
    launcher: ChromeLauncher, window_size: Optional[Tuple[int, int]] = None
) -> AsyncIterator[WebDriver]:
    """
    Launch a browser and guarantee a single quit() once the block exits,
    whichever way it exits. Errors while quitting are logged, never raised.
    """
    driver = await asyncio.to_thread(launcher.launch, window_size)
    try:
        yield driver
    finally:
        try:
            logger.info("Closing Chrome instance...")
            await asyncio.to_thread(driver.quit)
            logger.info("Chrome instance closed")
        except Exception as e:
            logger.error(f"Error closing Chrome: {e}")
