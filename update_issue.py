"""
Update a custom field on one or more Jira issues.

The new field value is the content of a template file. Issues are given
either directly or by a JQL script; the JQL matches are listed and must be
confirmed before anything is written.

Usage:
    # One issue
    python update_issue.py -i SCM-99 --custom_field_id customfield_10500 \\
        --template_path templates/definition_of_done.txt

    # Every issue matched by a JQL script
    python update_issue.py --use_jql --jql_script_path jql/open_stories.jql \\
        --custom_field_id customfield_10500 \\
        --template_path templates/definition_of_done.txt

Paths are relative to the storage root (storage/app by default).
"""

import argparse
import logging

from clients import ApiError, JiraClient
from models import Declined, Failed, Found, NotFound, Resolution, UpdateSpec
from patterns import Patterns
from utils import (
    CONFIG_FILE,
    announce,
    ask_yes_no,
    load_config_safe,
    print_table,
    read_storage_file,
    report_error,
    setup_logging,
)

logger = logging.getLogger(__name__)

TABLE_HEADERS = ["Issue Key", "Summary", "Sprint"]
CONFIRM_QUESTION = "All these issues will be updated. Do you wish to continue?"


class IssueUpdater:
    """Resolve the target issues, then set the custom field on each."""

    def __init__(self, jira: JiraClient, config: dict):
        self.jira = jira
        self.config = config

    def run(
        self,
        issue: str | None = None,
        use_jql: bool = False,
        jql_script_path: str | None = None,
        custom_field_id: str | None = None,
        use_template: bool = False,
        template_path: str | None = None,
    ) -> int:
        """Returns the number of issues updated.

        The new value always comes from the template file, so nothing is
        done without a template path and a field id. use_template is
        accepted for the command line but does not gate the update.
        """
        if not (template_path and custom_field_id):
            logger.debug("Nothing to update: no template or custom field given")
            return 0

        if issue:
            keys = [issue]
        elif use_jql and jql_script_path:
            outcome = self.find_issues_from_jql(jql_script_path)
            if not isinstance(outcome, Found):
                print("No issues were updated!")
                return 0
            keys = outcome.value
        else:
            logger.debug("Nothing to update: no issue and no JQL script given")
            return 0

        try:
            template = read_storage_file(self.config, template_path)
        except OSError as e:
            report_error(e, logger)
            return 0

        updated = 0
        for key in keys:
            spec = UpdateSpec(issue_key=key, custom_field_id=custom_field_id, value=template)
            if self.update_issue(spec):
                updated += 1
        return updated

    def update_issue(self, spec: UpdateSpec) -> bool:
        try:
            self.jira.update_issue(spec)
        except ApiError as e:
            report_error(e, logger)
            return False

        url = self.jira.browse_url(spec.issue_key)
        announce(f">> Successfully updated story {spec.issue_key} ({url})", logger)
        return True

    def find_issues_from_jql(self, jql_script_path: str) -> Resolution:
        """Search with the JQL script and ask before touching the matches."""
        try:
            jql = read_storage_file(self.config, jql_script_path).strip()
        except OSError as e:
            report_error(e, logger)
            return Failed(e)

        try:
            issues = self.jira.search(jql, fields=["summary", self.jira.sprint_field])
        except ApiError as e:
            report_error(e, logger)
            return Failed(e)

        if not issues:
            return NotFound(jql)

        rows = [(i.key, i.summary, self.jira.sprint_name_of(i)) for i in issues]
        print_table(TABLE_HEADERS, rows)
        if not ask_yes_no(CONFIRM_QUESTION):
            logger.info("Update of %d issues declined", len(issues))
            return Declined()

        return Found([i.key for i in issues])


# ============================================================================
# CLI
# ============================================================================


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Update issue",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # One issue
    update-issue -i SCM-99 --custom_field_id customfield_10500 --template_path dod.txt

    # Every issue matched by a JQL script (asks before updating)
    update-issue --use_jql --jql_script_path stories.jql --custom_field_id customfield_10500 \\
        --template_path dod.txt
        """,
    )
    parser.add_argument("-i", "--issue", help="The issue you want to update")
    parser.add_argument("--use_jql", action="store_true", help="Use jql script to identify issue(s)")
    parser.add_argument("--jql_script_path", help="JQL script path")
    parser.add_argument("--custom_field_id", help="Id of the custom field to change")
    parser.add_argument("--use_template", action="store_true", help="If template should be used")
    parser.add_argument(
        "--template_path",
        help="Template path. By default, path is relative to the storage/app directory",
    )
    parser.add_argument("--config", default=CONFIG_FILE, help=f"Config file (default: {CONFIG_FILE})")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    if args.issue and not Patterns.ISSUE_KEY.match(args.issue):
        print(f"Error: Invalid issue key '{args.issue}'. Expected e.g. SCM-1234")
        return 1

    wants_update = bool(args.issue) or (args.use_jql and bool(args.jql_script_path))
    if wants_update and not (args.custom_field_id and args.template_path):
        print("Error: --custom_field_id and --template_path are required")
        return 1

    config = load_config_safe(args.config, sections=("jira",))
    if config is None:
        return 1
    setup_logging(config)

    updater = IssueUpdater(JiraClient(config), config)
    updater.run(
        issue=args.issue,
        use_jql=args.use_jql,
        jql_script_path=args.jql_script_path,
        custom_field_id=args.custom_field_id,
        use_template=args.use_template,
        template_path=args.template_path,
    )
    return 0


if __name__ == "__main__":
    exit(main())
