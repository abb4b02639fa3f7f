"""Reading the worked time out of the internal timesheet page.

Needs a Chromium build for Playwright (`playwright install chromium`).
"""

from playwright.async_api import async_playwright

from patterns import Patterns

# Summary paragraph rendered by jira_log.php, e.g.
# <p class="outerLogInfo_ok">You worked 7 hours and 30 minutes</p>
LOG_INFO_XPATH = '//body/div/p[contains(@class, "outerLogInfo_")]'


async def find_log_info_text(html: str) -> str | None:
    """Return the text of the first summary paragraph, or None if absent.

    The page is loaded as static markup (no scripts, no navigation) into a
    headless browser so the XPath is evaluated against a real DOM.
    """
    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=True)
        try:
            context = await browser.new_context(java_script_enabled=False)
            page = await context.new_page()
            await page.set_content(html, wait_until="domcontentloaded")

            node = page.locator(f"xpath={LOG_INFO_XPATH}").first
            if await node.count() == 0:
                return None
            return await node.text_content()
        finally:
            await browser.close()


def parse_worked_time(text: str | None) -> tuple[int, int] | None:
    """Extract (hours, minutes) from the summary text.

    Repeated numbers are collapsed before the first two are taken, so
    "3 hours and 2 minutes 3 2" gives (3, 2). A lone number is read as hours.
    Returns None when the text holds no number at all.
    """
    if not text or not text.strip():
        return None

    numbers: list[int] = []
    for match in Patterns.DIGITS.findall(text):
        value = int(match)
        if value not in numbers:
            numbers.append(value)

    if not numbers:
        return None

    hours = numbers[0]
    minutes = numbers[1] if len(numbers) > 1 else 0
    return hours, minutes
