"""Tests for the page data accessors, with Selenium and requests mocked out."""

from unittest.mock import MagicMock, patch

import pytest
import requests
from selenium.common.exceptions import TimeoutException, WebDriverException

from skool_downloader.config import Settings
from skool_downloader.page_source import (
    LOGIN_URL,
    BrowserPageSource,
    HttpPageSource,
    LoginError,
    PageDataError,
    SessionDeadline,
    SessionTimeout,
    create_page_source,
)


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


@pytest.fixture
def settings():
    return Settings(
        skool_url="https://www.skool.com/g/classroom",
        email="me@example.com",
        password="secret",
        wait_seconds=2,
        session_timeout=60,
    )


class TestSessionDeadline:
    def test_counts_down(self):
        clock = FakeClock()
        deadline = SessionDeadline(60, clock)

        clock.now += 15
        assert deadline.remaining() == 45
        assert deadline.check("step") == 45
        assert not deadline.expired

    def test_expired_check_raises(self):
        clock = FakeClock()
        deadline = SessionDeadline(10, clock)
        clock.now += 11

        assert deadline.expired
        assert deadline.remaining() == 0
        with pytest.raises(SessionTimeout, match="opening"):
            deadline.check("opening page")


class TestBrowserPageSource:
    def make_source(self, settings, driver, clock=None):
        deadline = SessionDeadline(settings.session_timeout, clock or FakeClock())
        return BrowserPageSource(settings, driver_factory=lambda: driver, sleep=MagicMock(), deadline=deadline)

    def test_read_next_data(self, settings):
        driver = MagicMock()
        driver.execute_script.return_value = '{"props": {}}'
        source = self.make_source(settings, driver)

        with patch("skool_downloader.page_source.WebDriverWait") as wait:
            raw = source.read_next_data("https://www.skool.com/g/classroom/abc")

        assert raw == '{"props": {}}'
        driver.get.assert_called_once_with("https://www.skool.com/g/classroom/abc")
        driver.set_page_load_timeout.assert_called_once_with(60)
        source.sleep.assert_called_once_with(2)
        wait.return_value.until.assert_called_once()

    def test_missing_payload(self, settings):
        driver = MagicMock()
        driver.execute_script.return_value = None
        source = self.make_source(settings, driver)

        with patch("skool_downloader.page_source.WebDriverWait"):
            with pytest.raises(PageDataError, match="Empty"):
                source.read_next_data("https://x")

    def test_webdriver_errors_become_page_data_errors(self, settings):
        driver = MagicMock()
        source = self.make_source(settings, driver)

        with patch("skool_downloader.page_source.WebDriverWait") as wait:
            wait.return_value.until.side_effect = TimeoutException("no script")
            with pytest.raises(PageDataError):
                source.read_next_data("https://x")

    def test_webdriver_error_after_deadline_is_a_timeout(self, settings):
        clock = FakeClock()
        driver = MagicMock()

        def slow_get(url):
            clock.now += 61
            raise WebDriverException("page load timed out")

        driver.get.side_effect = slow_get
        source = self.make_source(settings, driver, clock)

        with pytest.raises(SessionTimeout):
            source.read_next_data("https://x")

    def test_no_navigation_after_deadline(self, settings):
        clock = FakeClock()
        driver = MagicMock()
        source = self.make_source(settings, driver, clock)
        clock.now += 1000

        with pytest.raises(SessionTimeout):
            source.read_next_data("https://x")
        driver.get.assert_not_called()

    def test_login_fills_the_form(self, settings):
        driver = MagicMock()
        driver.current_url = "https://www.skool.com/g/classroom"
        source = self.make_source(settings, driver)

        with patch("skool_downloader.page_source.WebDriverWait") as wait:
            email_input = wait.return_value.until.return_value
            source.login()

        driver.get.assert_called_once_with(LOGIN_URL)
        email_input.send_keys.assert_called_once_with("me@example.com")
        driver.find_element.return_value.send_keys.assert_called_once_with("secret")
        driver.find_element.return_value.click.assert_called_once()

    def test_login_failure(self, settings):
        driver = MagicMock()
        source = self.make_source(settings, driver)

        with patch("skool_downloader.page_source.WebDriverWait") as wait:
            wait.return_value.until.side_effect = TimeoutException("no form")
            with pytest.raises(LoginError):
                source.login()

    def test_close_quits_once(self, settings):
        driver = MagicMock()
        with self.make_source(settings, driver) as source:
            with patch("skool_downloader.page_source.WebDriverWait"):
                source.read_next_data("https://x")

        driver.quit.assert_called_once()
        assert source.driver is None


def response(text="", url="https://www.skool.com/g/classroom", status=200):
    resp = MagicMock()
    resp.text = text
    resp.url = url
    if status >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status} error")
    return resp


class TestHttpPageSource:
    def make_source(self, settings, resp):
        session = MagicMock()
        session.get.return_value = resp
        return HttpPageSource(settings, session=session, deadline=SessionDeadline(60, FakeClock()))

    def test_reads_script_tag(self, settings):
        page = '<html><script id="__NEXT_DATA__" type="application/json">{"props": {}}</script></html>'
        source = self.make_source(settings, response(page))

        assert source.read_next_data("https://x") == '{"props": {}}'
        source.session.get.assert_called_once_with("https://x", timeout=60)

    def test_page_without_script(self, settings):
        source = self.make_source(settings, response("<html></html>"))

        with pytest.raises(PageDataError):
            source.read_next_data("https://x")

    def test_http_errors(self, settings):
        source = self.make_source(settings, response(status=500))

        with pytest.raises(PageDataError):
            source.read_next_data("https://x")

    def test_login_checks_for_redirect(self, settings):
        source = self.make_source(settings, response(url="https://www.skool.com/login?next=/g"))

        with pytest.raises(LoginError, match="rejected"):
            source.login()

    def test_login_accepts_classroom(self, settings):
        source = self.make_source(settings, response())

        source.login()

        source.session.get.assert_called_once()

    def test_default_session_sends_cookie(self, settings):
        settings.cookie_data = "auth_token=abc"

        source = HttpPageSource(settings)

        assert source.session.headers["cookie"] == "auth_token=abc"
        source.close()


class TestCreatePageSource:
    def test_choice_depends_on_credentials(self, settings):
        assert isinstance(create_page_source(settings), BrowserPageSource)

        cookie_only = Settings(skool_url="u", cookie_data="c")
        assert isinstance(create_page_source(cookie_only), HttpPageSource)
