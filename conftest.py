"""Shared fakes for the Jira tools tests."""

import json

import pytest
import requests
from playwright.sync_api import Error as PlaywrightError, sync_playwright

from clients import SPRINT_FIELD, JiraClient, RemoteApiError
from models import Issue

BASE_URL = "https://jira.example.com"


def make_response(status: int = 200, body=None, reason: str = "") -> requests.Response:
    """Build a real requests.Response without touching the network."""
    r = requests.Response()
    r.status_code = status
    r.reason = reason
    if isinstance(body, (dict, list)):
        r._content = json.dumps(body).encode()
    else:
        r._content = (body or "").encode()
    r.encoding = "utf-8"
    return r


def make_issue(key: str, summary: str = "", sprint: str | None = None) -> Issue:
    fields = {"summary": summary}
    if sprint is not None:
        fields[SPRINT_FIELD] = [
            "com.atlassian.greenhopper.service.sprint.Sprint@5f1e2c3d"
            f"[id=42,rapidViewId=7,state=ACTIVE,name={sprint},startDate=2026-10-05T09:00:00.000+03:00,"
            "endDate=2026-10-19T09:00:00.000+03:00,completeDate=<null>,sequence=42]"
        ]
    return Issue(key=key, summary=summary, fields=fields)


class FakeJira:
    """Records every call; search answers are queued lists or exceptions."""

    base_url = BASE_URL
    sprint_field = SPRINT_FIELD
    sprint_name_of = JiraClient.sprint_name_of

    def __init__(self, search_results=None, fail_keys=(), worklog_error=None):
        self.search_results = list(search_results or [])
        self.fail_keys = set(fail_keys)
        self.worklog_error = worklog_error
        self.searches = []
        self.updates = []
        self.worklogs = []

    def browse_url(self, key):
        return f"{self.base_url}/browse/{key}"

    def search(self, jql, fields=None):
        self.searches.append(jql)
        result = self.search_results.pop(0) if self.search_results else []
        if isinstance(result, Exception):
            raise result
        return result

    def update_issue(self, spec):
        self.updates.append(spec)
        if spec.issue_key in self.fail_keys:
            raise RemoteApiError(f"Jira: Resource not found ({spec.issue_key})", 404)

    def add_worklog(self, issue_key, entry):
        self.worklogs.append((issue_key, entry))
        if self.worklog_error:
            raise self.worklog_error
        return "31337"


class FakeTimesheet:
    def __init__(self, worked=None, error=None):
        self.worked = worked
        self.error = error
        self.dates = []

    def worked_time(self, date):
        self.dates.append(date)
        if self.error:
            raise self.error
        return self.worked


@pytest.fixture
def no_prompt(monkeypatch):
    """Fail the test if anything asks the operator."""

    def _input(prompt=""):
        raise AssertionError(f"unexpected prompt: {prompt}")

    monkeypatch.setattr("builtins.input", _input)


@pytest.fixture
def answer(monkeypatch):
    """Queue answers for input()."""

    def _set(*answers):
        queue = list(answers)
        prompts = []

        def _input(prompt=""):
            prompts.append(prompt)
            return queue.pop(0)

        monkeypatch.setattr("builtins.input", _input)
        return prompts

    return _set


@pytest.fixture(scope="session")
def chromium():
    """Skip browser tests when no Chromium build is installed."""
    try:
        with sync_playwright() as p:
            p.chromium.launch(headless=True).close()
    except PlaywrightError as e:
        pytest.skip(f"Chromium not available: {e}")
