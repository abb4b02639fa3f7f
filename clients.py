"""API clients for Jira and the internal timesheet page."""

import asyncio
import logging

import requests
from playwright.async_api import Error as PlaywrightError

from models import Issue, UpdateSpec, WorklogEntry
from patterns import Patterns
from timesheet_page import find_log_info_text, parse_worked_time

logger = logging.getLogger(__name__)

API_PATH = "/rest/api/2"
SPRINT_FIELD = "customfield_10440"
DEFAULT_TIMEOUT = 30
SEARCH_LIMIT = 50


class ApiError(Exception):
    """User-friendly API error."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class NetworkError(ApiError):
    """The service could not be reached."""


class RemoteApiError(ApiError):
    """The service answered with an error status."""


class ParseError(Exception):
    """A page could not be read."""


def _handle_api_error(response: requests.Response, service: str) -> str:
    """Convert HTTP errors to user-friendly messages."""
    status = response.status_code

    messages = {
        400: f"{service}: Bad request. Check the JQL or the field values!",
        401: f"{service}: Authentication failed. Check your API token!",
        403: f"{service}: Access denied. Check your permissions or API token!",
        404: f"{service}: Resource not found. Check the issue key or the URL in config.json!",
        429: f"{service}: Too many requests. Wait a moment and try again.",
        500: f"{service}: Server error. The service may be temporarily unavailable.",
        502: f"{service}: Bad gateway. The service may be temporarily unavailable.",
        503: f"{service}: Service unavailable. Try again later.",
    }
    message = messages.get(status, f"{service}: HTTP {status} - {response.reason}")

    # Jira explains most 400s in the body
    try:
        body = response.json()
    except ValueError:
        return message
    if not isinstance(body, dict):
        return message
    details = list(body.get("errorMessages") or [])
    details += [f"{k}: {v}" for k, v in (body.get("errors") or {}).items()]
    if details:
        message = f"{message} ({'; '.join(details)})"
    return message


class JiraClient:
    """Client for the Jira REST API (v2, server)."""

    def __init__(self, config: dict):
        jira = config["jira"]
        self.base_url = jira["base_url"].rstrip("/")
        self.user = jira["user"]
        self.token = jira["api_token"]
        self.timeout = jira.get("timeout", DEFAULT_TIMEOUT)
        self.sprint_field = config.get("update", {}).get("sprint_field", SPRINT_FIELD)

    def browse_url(self, key: str) -> str:
        return f"{self.base_url}/browse/{key}"

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        url = f"{self.base_url}{API_PATH}{path}"
        logger.debug("%s %s", method, url)
        try:
            r = requests.request(
                method,
                url,
                auth=(self.user, self.token),
                headers={"Accept": "application/json", "Content-Type": "application/json"},
                timeout=self.timeout,
                **kwargs,
            )
        except requests.exceptions.ConnectionError:
            raise NetworkError(f"Jira: Cannot connect to {self.base_url}. Check your network!")
        except requests.exceptions.Timeout:
            raise NetworkError("Jira: Connection timed out. The server may be slow.")
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"Jira: Request to {url} failed: {e}")

        if not r.ok:
            raise RemoteApiError(_handle_api_error(r, "Jira"), r.status_code)
        return r

    def _json(self, r: requests.Response) -> dict:
        """Decode a reply body; proxies and SSO pages answer 200 with HTML."""
        try:
            data = r.json()
        except ValueError:
            raise RemoteApiError(f"Jira: Expected JSON from {r.url}, got something else.", r.status_code)
        if not isinstance(data, dict):
            raise RemoteApiError(f"Jira: Unexpected reply from {r.url}.", r.status_code)
        return data

    def search(self, jql: str, fields: list[str] | None = None) -> list[Issue]:
        """Run a JQL query and return the first page of hits."""
        payload = {
            "jql": jql,
            "maxResults": SEARCH_LIMIT,
            "fields": fields or ["summary"],
        }
        data = self._json(self._request("POST", "/search", json=payload))

        issues = []
        for raw in data.get("issues", []):
            fields_data = raw.get("fields") or {}
            issues.append(
                Issue(key=raw["key"], summary=fields_data.get("summary", ""), fields=fields_data)
            )
        return issues

    def update_issue(self, spec: UpdateSpec) -> None:
        """Set one custom field on an issue."""
        self._request("PUT", f"/issue/{spec.issue_key}", json=spec.to_payload())

    def add_worklog(self, issue_key: str, entry: WorklogEntry) -> str:
        """Add a worklog and return its id."""
        r = self._request("POST", f"/issue/{issue_key}/worklog", json=entry.to_payload())
        data = self._json(r)
        if "id" not in data:
            raise RemoteApiError("Jira: Worklog reply has no id.", r.status_code)
        return str(data["id"])

    def sprint_name_of(self, issue: Issue) -> str:
        """Name of the issue's first sprint, or "" if it has none."""
        sprints = issue.fields.get(self.sprint_field) or []
        if not sprints:
            return ""
        first = sprints[0]

        # Newer servers send objects, older ones the greenhopper toString()
        if isinstance(first, dict):
            return first.get("name") or ""
        m = Patterns.SPRINT_NAME.search(str(first))
        return m.group(0) if m else ""


class TimesheetClient:
    """Client for the internal timesheet page (jira_log.php)."""

    def __init__(self, config: dict):
        timesheet = config["timesheet"]
        self.url = timesheet["url"]
        self.username = timesheet["username"]
        self.timeout = timesheet.get("timeout", DEFAULT_TIMEOUT)

    def fetch_page(self, date: str) -> str | None:
        """POST the day form; None unless the page answered 200."""
        try:
            r = requests.post(
                self.url,
                data={"username": self.username, "submit_day": 1, "date": date},
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"Timesheet: Cannot load {self.url}: {e}")

        if r.status_code != requests.codes.ok:
            logger.info("Timesheet answered HTTP %s for %s", r.status_code, date)
            return None
        return r.text

    def worked_time(self, date: str) -> tuple[int, int] | None:
        """Hours and minutes already logged on a date.

        Returns None when the page is unavailable or shows no summary.
        """
        html = self.fetch_page(date)
        if html is None:
            return None

        try:
            text = asyncio.run(find_log_info_text(html))
        except PlaywrightError as e:
            raise ParseError(f"Timesheet: Cannot read page for {date}: {e}")

        return parse_worked_time(text)
