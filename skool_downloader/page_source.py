"""
Page data accessors: fetch the ``__NEXT_DATA__`` hydration payload of a Skool page.

Two interchangeable sources are provided:

* ``BrowserPageSource`` drives Chrome through Selenium and logs in with email/password.
* ``HttpPageSource`` fetches the server-rendered HTML with requests, authenticated by a
  cookie copied from a logged-in browser.

Both share one wall-clock deadline for the whole session; once it is spent every
further navigation raises ``SessionTimeout``.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional, Union

import requests
from bs4 import BeautifulSoup
from requests.adapters import HTTPAdapter
from selenium import webdriver
from selenium.common.exceptions import WebDriverException
from selenium.webdriver.common.by import By
from selenium.webdriver.support import expected_conditions as EC
from selenium.webdriver.support.ui import WebDriverWait
from urllib3.util.retry import Retry

from .config import Settings

logger = logging.getLogger(__name__)

LOGIN_URL = "https://www.skool.com/login"
NEXT_DATA_ID = "__NEXT_DATA__"
NEXT_DATA_SCRIPT = f'return document.getElementById("{NEXT_DATA_ID}").textContent'
USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/110.0.0.0 Safari/537.36"
)
ELEMENT_WAIT_SECONDS = 30
LOGIN_SETTLE_SECONDS = 4
HTTP_TIMEOUT_SECONDS = 60


class PageDataError(Exception):
    """A page could not be loaded or carried no readable hydration payload."""


class LoginError(Exception):
    """Authentication against the platform failed."""


class SessionTimeout(Exception):
    """The session's overall time budget is exhausted."""


class SessionDeadline:
    """Tracks the remaining wall-clock budget of a session."""

    def __init__(self, seconds: float, clock: Callable[[], float] = time.monotonic):
        self.seconds = seconds
        self.clock = clock
        self.started = clock()

    def remaining(self) -> float:
        return max(0.0, self.seconds - (self.clock() - self.started))

    @property
    def expired(self) -> bool:
        return self.remaining() <= 0

    def check(self, action: str) -> float:
        """Return the remaining budget, or raise SessionTimeout if none is left."""
        remaining = self.remaining()
        if remaining <= 0:
            raise SessionTimeout(f"Session timeout of {self.seconds:.0f}s reached before {action}")
        return remaining


def chrome_options(headless: bool) -> webdriver.ChromeOptions:
    options = webdriver.ChromeOptions()
    if headless:
        options.add_argument("--headless=new")
    options.add_argument("--disable-gpu")
    options.add_argument("--no-sandbox")
    options.add_argument(f"--user-agent={USER_AGENT}")
    return options


class BrowserPageSource:
    """Reads page payloads through one reused Chrome session."""

    def __init__(
        self,
        settings: Settings,
        driver_factory: Optional[Callable[[], webdriver.Remote]] = None,
        sleep: Callable[[float], None] = time.sleep,
        deadline: Optional[SessionDeadline] = None,
    ):
        self.settings = settings
        self.driver_factory = driver_factory or (
            lambda: webdriver.Chrome(options=chrome_options(settings.headless))
        )
        self.sleep = sleep
        self.deadline = deadline or SessionDeadline(settings.session_timeout)
        self.driver: Optional[webdriver.Remote] = None

    def _driver(self) -> webdriver.Remote:
        if self.driver is None:
            logger.debug("Starting Chrome (headless=%s)", self.settings.headless)
            self.driver = self.driver_factory()
        return self.driver

    def _navigate(self, url: str) -> webdriver.Remote:
        remaining = self.deadline.check(f"opening {url}")
        driver = self._driver()
        driver.set_page_load_timeout(remaining)
        driver.get(url)
        return driver

    def _wait(self) -> WebDriverWait:
        timeout = min(ELEMENT_WAIT_SECONDS, self.deadline.remaining())
        return WebDriverWait(self._driver(), timeout)

    def login(self) -> None:
        """Sign in with the configured email and password."""
        logger.info("Logging in as %s", self.settings.email)
        try:
            driver = self._navigate(LOGIN_URL)
            email_input = self._wait().until(
                EC.visibility_of_element_located((By.CSS_SELECTOR, 'input[type="email"]'))
            )
            email_input.send_keys(self.settings.email)
            driver.find_element(By.CSS_SELECTOR, 'input[type="password"]').send_keys(self.settings.password)
            driver.find_element(By.CSS_SELECTOR, 'button[type="submit"]').click()
            self.sleep(LOGIN_SETTLE_SECONDS)
        except WebDriverException as exc:
            if self.deadline.expired:
                raise SessionTimeout(f"Session timeout reached during login: {exc.msg}") from exc
            raise LoginError(f"Login failed: {exc.msg}") from exc

        if "/login" in (driver.current_url or ""):
            logger.warning("Still on the login page after submitting credentials")

    def read_next_data(self, url: str) -> str:
        """Navigate to ``url`` and return the raw text of its ``__NEXT_DATA__`` script."""
        try:
            driver = self._navigate(url)
            self.sleep(min(self.settings.wait_seconds, self.deadline.remaining()))
            self._wait().until(EC.presence_of_element_located((By.ID, NEXT_DATA_ID)))
            raw = driver.execute_script(NEXT_DATA_SCRIPT)
        except WebDriverException as exc:
            if self.deadline.expired:
                raise SessionTimeout(f"Session timeout reached while loading {url}") from exc
            raise PageDataError(f"Cannot read {NEXT_DATA_ID} from {url}: {exc.msg}") from exc

        if not raw:
            raise PageDataError(f"Empty {NEXT_DATA_ID} on {url}")
        return raw

    def close(self) -> None:
        if self.driver is not None:
            try:
                self.driver.quit()
            except WebDriverException as exc:
                logger.debug("Chrome did not shut down cleanly: %s", exc)
            self.driver = None

    def __enter__(self) -> "BrowserPageSource":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class HttpPageSource:
    """Reads server-rendered page payloads with a cookie-authenticated requests session."""

    def __init__(
        self,
        settings: Settings,
        session: Optional[requests.Session] = None,
        deadline: Optional[SessionDeadline] = None,
    ):
        self.settings = settings
        self.session = session or self._create_session()
        self.deadline = deadline or SessionDeadline(settings.session_timeout)

    def _create_session(self) -> requests.Session:
        """Create a requests session with proper configuration."""
        session = requests.Session()

        # Configure retry strategy
        retry_strategy = Retry(
            total=3,
            backoff_factor=1,
            status_forcelist=[429, 500, 502, 503, 504],
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)

        session.headers.update({
            'User-Agent': USER_AGENT,
            'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
            'cookie': self.settings.cookie_data,
        })
        return session

    def _get(self, url: str) -> requests.Response:
        remaining = self.deadline.check(f"fetching {url}")
        try:
            response = self.session.get(url, timeout=min(HTTP_TIMEOUT_SECONDS, remaining))
            response.raise_for_status()
        except requests.RequestException as exc:
            raise PageDataError(f"Request to {url} failed: {exc}") from exc
        return response

    def login(self) -> None:
        """Check that the cookie opens the classroom instead of bouncing to the login page."""
        try:
            response = self._get(self.settings.skool_url)
        except PageDataError as exc:
            raise LoginError(str(exc)) from exc
        if "/login" in response.url:
            raise LoginError("Cookie was rejected (redirected to the login page)")
        logger.info("Cookie session accepted")

    def read_next_data(self, url: str) -> str:
        response = self._get(url)
        soup = BeautifulSoup(response.text, "html.parser")
        script = soup.find("script", id=NEXT_DATA_ID)
        raw = script.string if script is not None else None
        if not raw:
            raise PageDataError(f"No {NEXT_DATA_ID} script on {url}")
        return raw

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "HttpPageSource":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


PageSource = Union[BrowserPageSource, HttpPageSource]


def create_page_source(settings: Settings) -> PageSource:
    """Pick the cookie-based source when only a cookie is configured, the browser otherwise."""
    if settings.use_cookie_session:
        return HttpPageSource(settings)
    return BrowserPageSource(settings)


__all__ = [
    "BrowserPageSource",
    "HttpPageSource",
    "LoginError",
    "PageDataError",
    "PageSource",
    "SessionDeadline",
    "SessionTimeout",
    "create_page_source",
]
