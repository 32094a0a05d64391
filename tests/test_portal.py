"""Tests for the portal session, driven through a fake WebDriver."""
import json
import typing as t

import pytest

from portal_scraper.portal import PortalLoginError, PortalSession

SUBJECT_PAGE = """
<main id="main-content">
  <h3>Kotitehtävät</h3>
  <table>
    <tr><th>Pvm</th><th>Kuvaus</th></tr>
    <tr><td>3.6.2024</td><td>Sivut 10-12</td></tr>
  </table>
</main>
"""


class FakeDriver:
    """Minimal stand-in for a Selenium WebDriver."""

    def __init__(self, logged_in: bool = True, page_source: str = SUBJECT_PAGE) -> None:
        self.logged_in = logged_in
        self.page_source = page_source
        self.current_url = "https://portal.example/"
        self.visited: list[str] = []
        self.cookies: list[dict[str, t.Any]] = []
        self.screenshots: list[str] = []
        self.quit_called = False

    def get(self, url: str) -> None:
        self.visited.append(url)
        self.current_url = url

    def refresh(self) -> None:
        pass

    def find_elements(self, by: str, selector: str) -> list[object]:
        if selector == "div.user-info" and self.logged_in:
            return [object()]
        if selector == "form#loginForm" and not self.logged_in:
            return [object()]
        return []

    def add_cookie(self, cookie: dict[str, t.Any]) -> None:
        self.cookies.append(cookie)

    def get_cookies(self) -> list[dict[str, t.Any]]:
        return self.cookies

    def save_screenshot(self, path: str) -> bool:
        self.screenshots.append(path)
        return True

    def quit(self) -> None:
        self.quit_called = True


def make_session(tmp_path, driver: FakeDriver, **kwargs: t.Any) -> PortalSession:
    return PortalSession(
        username=kwargs.pop("username", ""),
        password=kwargs.pop("password", ""),
        cookies_file=tmp_path / "cookies.json",
        request_delay=0,
        base_url="https://portal.example/",
        driver_factory=lambda headless: driver,
        sleep=lambda seconds: None,
        **kwargs,
    )


def test_login_with_saved_cookies(tmp_path) -> None:
    (tmp_path / "cookies.json").write_text(json.dumps([{"name": "session", "value": "abc"}]))
    driver = FakeDriver(logged_in=True)

    session = make_session(tmp_path, driver)
    session.login()

    assert driver.cookies == [{"name": "session", "value": "abc"}]
    assert session.driver is driver
    assert json.loads((tmp_path / "cookies.json").read_text()) == driver.cookies


def test_login_without_credentials_fails_and_closes(tmp_path) -> None:
    driver = FakeDriver(logged_in=False)
    session = make_session(tmp_path, driver)

    with pytest.raises(PortalLoginError):
        session.login()

    assert driver.quit_called
    assert session.driver is None


def test_unreadable_cookie_file_is_ignored(tmp_path) -> None:
    (tmp_path / "cookies.json").write_text("{not json")
    session = make_session(tmp_path, FakeDriver())
    session.driver = FakeDriver()

    assert session.load_cookies() is False


def test_extract_subject_data(tmp_path) -> None:
    driver = FakeDriver()
    session = make_session(tmp_path, driver)
    session.driver = driver

    result = session.extract_subject_data("Math", "https://portal.example/groups/1")

    assert result.error == ""
    assert [(h.date_added, h.description) for h in result.data.homework] == [("3.6.2024", "Sivut 10-12")]


def test_login_redirect_without_credentials_is_reported(tmp_path) -> None:
    driver = FakeDriver()
    session = make_session(tmp_path, driver)
    session.driver = driver

    result = session.extract_subject_data("Math", "https://portal.example/login?returnpath=groups")

    assert result.subject == "Math"
    assert "PORTAL_USERNAME" in result.error


def test_extract_all_closes_browser(tmp_path) -> None:
    driver = FakeDriver()
    session = make_session(tmp_path, driver)
    session.driver = driver

    results = session.extract_all_subject_data([
        ("Math", "https://portal.example/groups/1"),
        ("Art", "https://portal.example/groups/2"),
    ])

    assert [r.subject for r in results] == ["Math", "Art"]
    assert driver.visited == ["https://portal.example/groups/1", "https://portal.example/groups/2"]
    assert driver.quit_called
