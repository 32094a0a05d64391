"""
School portal session driven by a Selenium Chrome browser.

This module handles:
- Session reuse through cookies persisted to a JSON file
- Credential login when the saved session is missing or expired
- Visiting each subject's group page and handing its source to the page parser
"""
from __future__ import annotations

import json
import time
import typing as t
from pathlib import Path

from loguru import logger
from selenium import webdriver
from selenium.common.exceptions import TimeoutException, WebDriverException
from selenium.webdriver.chrome.options import Options
from selenium.webdriver.chrome.service import Service
from selenium.webdriver.common.by import By
from selenium.webdriver.common.keys import Keys
from selenium.webdriver.support import expected_conditions as EC
from selenium.webdriver.support.ui import WebDriverWait
from webdriver_manager.chrome import ChromeDriverManager

from portal_scraper import config
from portal_scraper.models import SubjectExtraction
from portal_scraper.page_parser import parse_subject_page


class PortalLoginError(RuntimeError):
    """Raised when no authenticated portal session could be established."""


def _build_chrome_driver(headless: bool) -> webdriver.Chrome:
    options = Options()
    if headless:
        options.add_argument("--headless=new")
    options.add_argument("--no-sandbox")
    options.add_argument("--disable-dev-shm-usage")
    options.add_argument("--window-size=1920,1080")
    options.add_argument(f"user-agent={config.USER_AGENT}")
    # Skip images; only the page markup is needed
    options.add_experimental_option("prefs", {"profile.managed_default_content_settings.images": 2})

    service = Service(ChromeDriverManager().install())
    driver = webdriver.Chrome(service=service, options=options)
    driver.set_page_load_timeout(config.PAGE_LOAD_TIMEOUT)
    return driver


class PortalSession:
    """Authenticated browser session on the school portal.

    Args:
        username: Portal login name.
        password: Portal password.
        headless: Whether to run Chrome without a window.
        cookies_file: Where the session cookies are persisted between runs.
        request_delay: Seconds to wait after each page load.
        driver_factory: Builds the WebDriver; defaults to a local Chrome.
        sleep: Delay function, replaceable in tests.
    """

    def __init__(
            self,
            username: str = config.PORTAL_USERNAME,
            password: str = config.PORTAL_PASSWORD,
            headless: bool = config.PORTAL_HEADLESS,
            cookies_file: Path = config.COOKIES_FILE,
            request_delay: float = config.REQUEST_DELAY,
            base_url: str = config.PORTAL_BASE_URL,
            driver_factory: t.Optional[t.Callable[[bool], t.Any]] = None,
            sleep: t.Callable[[float], None] = time.sleep,
    ) -> None:
        self.username = username
        self.password = password
        self.headless = headless
        self.cookies_file = Path(cookies_file)
        self.request_delay = request_delay
        self.base_url = base_url
        self._driver_factory = driver_factory or _build_chrome_driver
        self._sleep = sleep
        self.driver: t.Any = None

    def __enter__(self) -> "PortalSession":
        self.login()
        return self

    def __exit__(self, *exc_info: t.Any) -> None:
        self.close()

    # -----------------------------
    # Cookies
    # -----------------------------

    def load_cookies(self) -> bool:
        """Add persisted cookies to the browser; returns True if any were loaded."""
        if not self.cookies_file.is_file():
            return False
        try:
            cookies = json.loads(self.cookies_file.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read cookies from {self.cookies_file}: {e}")
            return False

        loaded = 0
        for cookie in cookies:
            try:
                self.driver.add_cookie(cookie)
                loaded += 1
            except WebDriverException as e:
                logger.debug(f"Skipped cookie {cookie.get('name')}: {e}")
        logger.info(f"Loaded {loaded}/{len(cookies)} cookies from {self.cookies_file}")
        return loaded > 0

    def save_cookies(self) -> None:
        cookies = self.driver.get_cookies()
        self.cookies_file.parent.mkdir(parents=True, exist_ok=True)
        self.cookies_file.write_text(json.dumps(cookies, indent=2), encoding="utf-8")
        logger.info(f"Saved {len(cookies)} cookies to {self.cookies_file}")

    # -----------------------------
    # Login
    # -----------------------------

    def is_logged_in(self) -> bool:
        """Check the current page for signs of an authenticated session."""
        if self.driver.find_elements(By.CSS_SELECTOR, "form#loginForm"):
            logger.debug("Login form is still present")
            return False

        markers = (
            self.driver.find_elements(By.CSS_SELECTOR, "div.user-info")
            or self.driver.find_elements(By.CSS_SELECTOR, "form[action*='logout']")
            or self.driver.find_elements(By.CSS_SELECTOR, "img.wilma-logo")
        )
        return bool(markers) and "login" not in self.driver.current_url

    def perform_login(self) -> bool:
        """Type the credentials into the login form and submit it."""
        if not self.username or not self.password:
            raise PortalLoginError("PORTAL_USERNAME and PORTAL_PASSWORD must be set to log in")

        try:
            wait = WebDriverWait(self.driver, config.LOGIN_TIMEOUT)
            username_input = wait.until(EC.presence_of_element_located((By.NAME, "Login")))
            password_input = wait.until(EC.presence_of_element_located((By.NAME, "Password")))

            username_input.clear()
            password_input.clear()
            logger.info("Entering credentials...")
            username_input.send_keys(self.username)
            password_input.send_keys(self.password)
            password_input.send_keys(Keys.ENTER)

            wait.until(EC.staleness_of(password_input))
        except TimeoutException as e:
            logger.error(f"Login form did not respond: {e}")
            return False

        self._sleep(self.request_delay)
        return self.is_logged_in()

    def login(self) -> None:
        """Start the browser and establish an authenticated session.

        Saved cookies are tried first; credentials are used only if they
        do not yield a session.

        Raises:
            PortalLoginError: If neither cookies nor credentials work.
        """
        self.driver = self._driver_factory(self.headless)
        try:
            logger.info("Loading initial page...")
            self.driver.get(self.base_url)
            self._sleep(self.request_delay)

            logged_in = False
            if self.load_cookies():
                self.driver.refresh()
                self._sleep(self.request_delay)
                logged_in = self.is_logged_in()
                if logged_in:
                    logger.info("Already logged in using saved cookies")

            if not logged_in:
                logger.info("Performing credential login")
                logged_in = self.perform_login()

            if not logged_in:
                screenshot = self.cookies_file.parent / "login_failed.png"
                self.driver.save_screenshot(str(screenshot))
                raise PortalLoginError(f"Failed to log in to {self.base_url} (screenshot: {screenshot})")

            self.save_cookies()
        except Exception:
            self.close()
            raise

    # -----------------------------
    # Extraction
    # -----------------------------

    def extract_subject_data(self, subject: str, url: str) -> SubjectExtraction:
        """Scrape one subject page; failures are reported on the result, not raised."""
        logger.info(f"Processing {subject}: {url}")
        try:
            self.driver.get(url)
            self._sleep(self.request_delay)

            if "login" in self.driver.current_url:
                logger.info("Redirected to login page, attempting to re-login")
                if not self.perform_login():
                    raise PortalLoginError("Failed to re-login")
                self.driver.get(url)
                self._sleep(self.request_delay)

            data = parse_subject_page(self.driver.page_source)
        except (WebDriverException, PortalLoginError) as e:
            logger.error(f"Error processing {subject}: {e}")
            return SubjectExtraction(subject=subject, error=str(e))

        logger.info(
            f"{subject}: {len(data.homework)} homework, "
            f"{len(data.future_exams)} upcoming exams, {len(data.past_exams)} past exams"
        )
        return SubjectExtraction(subject=subject, data=data)

    def extract_all_subject_data(
            self,
            pages: t.Sequence[tuple[str, str]] = tuple(config.SUBJECT_PAGES),
    ) -> list[SubjectExtraction]:
        """Scrape every subject page in turn, then close the browser."""
        results: list[SubjectExtraction] = []
        try:
            for subject, url in pages:
                results.append(self.extract_subject_data(subject, url))
                self._sleep(self.request_delay * 2)
        finally:
            self.close()
        return results

    def close(self) -> None:
        if self.driver is None:
            return
        logger.info("Closing browser...")
        try:
            self.driver.quit()
        except WebDriverException as e:
            logger.warning(f"Error closing browser: {e}")
        finally:
            self.driver = None
