"""
Log the missing time of a workday in Jira.

Reads how much was already logged for the day on the timesheet page and adds
the rest (up to 8h) as a worklog on your sub-task of the current story.

The timesheet page is read in headless Chromium. Install it once after
installing the package:
    playwright install chromium
Without it the worked time cannot be read and the full day is logged.

Usage:
    # Today, story picked from the current sprint
    python log_work.py

    # A given day
    python log_work.py --date 2026-10-16

    # A given story
    python log_work.py -s SCM-1234
"""

import argparse
import logging
from dataclasses import replace

from clients import ApiError, JiraClient, NetworkError, ParseError, TimesheetClient
from models import (
    WORKDAY_SECONDS,
    Failed,
    Found,
    NotFound,
    Resolution,
    WorkLogRequest,
    WorklogEntry,
)
from patterns import Patterns
from utils import CONFIG_FILE, announce, load_config_safe, normalize_date, report_error, setup_logging

logger = logging.getLogger(__name__)

DEFAULT_STORY_JQL = (
    'project = SCM AND status = Open AND cf[10840] = SCM-25028 AND text ~ "SCM-Δ" '
    "AND sprint in openSprints ()"
)
TASK_JQL = "parent = {story} and assignee = currentUser()"


class WorkLogger:
    """Fetch -> compute -> resolve story -> resolve sub-task -> submit."""

    def __init__(self, jira: JiraClient, timesheet: TimesheetClient, story_jql: str = DEFAULT_STORY_JQL):
        self.jira = jira
        self.timesheet = timesheet
        self.story_jql = story_jql

    def run(self, date: str | None = None, story: str | None = None) -> str | None:
        """Log the missing time for a day. Returns the new worklog id, if any."""
        request = WorkLogRequest(date=normalize_date(date), story_key=story or None)

        request = self.fetch_worked_time(request)
        if request.missing_seconds <= 0:
            announce(f">> [{request.date}] No need to continue. Log action was skipped.", logger)
            return None

        outcome = self.resolve_story(request)
        if not isinstance(outcome, Found):
            return None
        request = replace(request, story_key=outcome.value)

        outcome = self.resolve_task(request)
        if not isinstance(outcome, Found):
            return None
        request = replace(request, issue_key=outcome.value)

        outcome = self.submit_worklog(request)
        return outcome.value if isinstance(outcome, Found) else None

    def fetch_worked_time(self, request: WorkLogRequest) -> WorkLogRequest:
        """Fill worked and missing seconds; an unreadable page counts as 0."""
        hours, minutes = 0, 0
        try:
            worked = self.timesheet.worked_time(request.date)
        except (NetworkError, ParseError) as e:
            report_error(e, logger)
            announce(f">> [{request.date}] Worked time could not be read. Logging the full day.", logger)
            worked = None

        if worked is not None:
            hours, minutes = worked
            announce(f">> [{request.date}] You already worked {hours} hours and {minutes} minutes", logger)

        worked_seconds = WorkLogRequest.to_seconds(hours, minutes)
        return replace(
            request,
            worked_seconds=worked_seconds,
            missing_seconds=WORKDAY_SECONDS - worked_seconds,
        )

    def resolve_story(self, request: WorkLogRequest) -> Resolution:
        if request.story_key:
            return Found(request.story_key)

        outcome = self._first_hit(self.story_jql)
        if isinstance(outcome, Found):
            key = outcome.value
            announce(
                f">> [{request.date}] Current active story {key} ({self.jira.browse_url(key)})", logger
            )
        elif isinstance(outcome, NotFound):
            logger.info("No active story for %s", request.date)
        return outcome

    def resolve_task(self, request: WorkLogRequest) -> Resolution:
        if request.issue_key:
            return Found(request.issue_key)

        outcome = self._first_hit(TASK_JQL.format(story=request.story_key))
        if isinstance(outcome, Found):
            key = outcome.value
            announce(
                f">> [{request.date}] Current sub-task to be used {key} ({self.jira.browse_url(key)})", logger
            )
        elif isinstance(outcome, NotFound):
            logger.info("No sub-task of %s assigned to you", request.story_key)
        return outcome

    def submit_worklog(self, request: WorkLogRequest) -> Resolution:
        entry = WorklogEntry(started=request.date, time_spent_seconds=request.missing_seconds)
        try:
            worklog_id = self.jira.add_worklog(request.issue_key, entry)
        except ApiError as e:
            report_error(e, logger)
            return Failed(e)

        announce(
            f">> [{request.date}] Successfully added work log (id:{worklog_id}) on {request.issue_key}: "
            f"{{Missing time was: {request.missing_seconds} seconds}}",
            logger,
        )
        return Found(worklog_id)

    def _first_hit(self, jql: str) -> Resolution:
        try:
            issues = self.jira.search(jql)
        except ApiError as e:
            report_error(e, logger)
            return Failed(e)
        if not issues:
            return NotFound(jql)
        return Found(issues[0].key)


# ============================================================================
# CLI
# ============================================================================


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Log work in Jira",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Today, story picked from the current sprint
    log-work

    # A given day and story
    log-work --date 2026-10-16 --story SCM-1234
        """,
    )
    parser.add_argument("-d", "--date", help="The date you want to add work log on to (YYYY-MM-DD)")
    parser.add_argument("-s", "--story", help="The story you want to add work log on to")
    parser.add_argument("--config", default=CONFIG_FILE, help=f"Config file (default: {CONFIG_FILE})")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    try:
        day = normalize_date(args.date)
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    if args.story and not Patterns.ISSUE_KEY.match(args.story):
        print(f"Error: Invalid story key '{args.story}'. Expected e.g. SCM-1234")
        return 1

    config = load_config_safe(args.config, sections=("jira", "timesheet"))
    if config is None:
        return 1
    setup_logging(config)

    story_jql = config.get("worklog", {}).get("story_jql") or DEFAULT_STORY_JQL
    worklogger = WorkLogger(JiraClient(config), TimesheetClient(config), story_jql=story_jql)
    worklogger.run(day, args.story)
    return 0


if __name__ == "__main__":
    exit(main())
