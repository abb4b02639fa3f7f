"""Centralized regex patterns for the Jira tools."""

import re


class Patterns:
    """Regex patterns used by log-work and update-issue."""

    # Any run of digits in the timesheet summary line
    DIGITS = re.compile(r"(\d+)")

    # Jira issue key: SCM-1234
    ISSUE_KEY = re.compile(r"^[A-Z][A-Z0-9_]+-\d+$")

    # Sprint name inside the greenhopper payload:
    # "...Sprint@1a2b[id=7,rapidViewId=3,state=ACTIVE,name=Sprint 42,startDate=...]"
    SPRINT_NAME = re.compile(r"(?<=name=)(.*)(?=,startDate)")

    # Date format: YYYY-MM-DD
    DATE_FORMAT = re.compile(r"^\d{4}-\d{2}-\d{2}$")
