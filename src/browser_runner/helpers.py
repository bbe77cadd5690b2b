"""
Helper library for ad hoc automation scripts.

Bare scripts run by ``browser-run`` get this module as ``helpers``. All
browser helpers are coroutines over the Playwright async API. Playwright
timeouts are in milliseconds, as in Playwright itself; retry and backoff
delays are in seconds.
"""

import asyncio
import json
import re
import tempfile
import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Sequence, TypeVar, Union

import httpx
from playwright.async_api import (
    Browser,
    BrowserContext,
    ConsoleMessage,
    Dialog,
    Download,
    Error as PlaywrightError,
    Page,
    Playwright,
    Request,
    Response,
    Route,
    TimeoutError as PlaywrightTimeoutError,
    async_playwright,
)

from browser_runner.application.services.detector_service import DetectorService
from browser_runner.errors import BrowserRunnerError
from browser_runner.infrastructure.config import get_settings
from browser_runner.infrastructure.http.probe_client import HttpProbeClient
from browser_runner.infrastructure.logging import get_logger


logger = get_logger(__name__)

T = TypeVar("T")
UrlPattern = Union[str, re.Pattern]

DEFAULT_VIEWPORT = {"width": 1280, "height": 720}
MOBILE_USER_AGENT = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 16_0 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/16.0 Mobile/15E148 Safari/604.1"
)
RESPONSIVE_VIEWPORTS = {
    "mobile": {"width": 375, "height": 667},
    "tablet": {"width": 768, "height": 1024},
    "desktop": {"width": 1280, "height": 720},
}
COOKIE_BANNER_SELECTORS = [
    'button:has-text("Accept")',
    'button:has-text("Accept all")',
    'button:has-text("Accept All")',
    'button:has-text("OK")',
    'button:has-text("Got it")',
    'button:has-text("I agree")',
    'button:has-text("Allow")',
    ".cookie-accept",
    "#cookie-accept",
    '[data-testid="cookie-accept"]',
    '[data-testid="accept-cookies"]',
]

_playwright: Optional[Playwright] = None


# ============================================================================
# BROWSER & CONTEXT
# ============================================================================

async def get_playwright() -> Playwright:
    """Start Playwright on first use and return the shared instance."""
    global _playwright
    if _playwright is None:
        _playwright = await async_playwright().start()
    return _playwright


async def shutdown() -> None:
    """Stop the shared Playwright instance, if one was started."""
    global _playwright
    if _playwright is not None:
        await _playwright.stop()
        _playwright = None


def launch_options(browser_type: str = "chromium", **options: Any) -> Dict[str, Any]:
    """
    Build launch options from the environment plus caller overrides.

    ``HEADLESS`` and ``SLOW_MO`` are passed through as Playwright's
    ``headless`` and ``slow_mo``.
    """
    settings = get_settings()
    defaults: Dict[str, Any] = {
        "headless": settings.headless,
        "slow_mo": settings.slow_mo,
    }
    if browser_type == "chromium":
        defaults["args"] = ["--no-sandbox", "--disable-setuid-sandbox"]
    defaults.update(options)
    return defaults


async def launch_browser(browser_type: str = "chromium", **options: Any) -> Browser:
    """
    Launch a browser with standard configuration.

    Args:
        browser_type: "chromium", "firefox" or "webkit"
        **options: Extra Playwright launch options
    """
    if browser_type not in ("chromium", "firefox", "webkit"):
        raise ValueError(f"Invalid browser type: {browser_type}. Use 'chromium', 'firefox', or 'webkit'.")
    playwright = await get_playwright()
    launcher = getattr(playwright, browser_type)
    return await launcher.launch(**launch_options(browser_type, **options))


async def create_context(browser: Browser, mobile: bool = False, **options: Any) -> BrowserContext:
    """Create a browser context with common settings."""
    defaults: Dict[str, Any] = {
        "viewport": DEFAULT_VIEWPORT,
        "locale": "en-US",
        "timezone_id": "America/New_York",
        "color_scheme": "light",
    }
    if mobile:
        defaults["user_agent"] = MOBILE_USER_AGENT
    defaults.update(options)
    return await browser.new_context(**defaults)


async def create_page(context: BrowserContext, viewport: Optional[Dict[str, int]] = None, timeout: float = 30000) -> Page:
    page = await context.new_page()
    if viewport:
        await page.set_viewport_size(viewport)
    page.set_default_timeout(timeout)
    return page


async def save_storage_state(context: BrowserContext, save_path: str) -> str:
    """Save cookies and local storage for session reuse."""
    await context.storage_state(path=save_path)
    print(f"Session saved to: {save_path}")
    return save_path


async def load_storage_state(browser: Browser, state_path: str, **options: Any) -> BrowserContext:
    if not Path(state_path).exists():
        raise FileNotFoundError(f"Storage state file not found: {state_path}")
    return await browser.new_context(storage_state=state_path, **options)


async def detect_dev_servers(custom_ports: Optional[Iterable[int]] = None, timeout: Optional[float] = None) -> List[str]:
    """
    Detect running dev servers on common ports.

    Args:
        custom_ports: Ports to check in addition to the configured baseline
        timeout: Per-probe timeout in seconds, defaults to the configured one

    Returns:
        Base URLs such as ``http://localhost:3000``; empty when nothing answers
    """
    settings = get_settings()
    probe_timeout = timeout or settings.probe_timeout

    print("Checking for running dev servers...")
    async with HttpProbeClient(timeout=probe_timeout) as client:
        detector = DetectorService(client, settings.dev_server_ports, probe_timeout=probe_timeout)
        servers = await detector.detect(custom_ports)

    for url in servers:
        print(f"  Found server on {url}")
    if not servers:
        print("  No dev servers detected")
    return servers


# ============================================================================
# NAVIGATION & WAITING
# ============================================================================

async def wait_for_page_ready(
    page: Page,
    wait_until: str = "networkidle",
    timeout: float = 30000,
    wait_for_selector: Optional[str] = None,
) -> None:
    """Wait for a load state, continuing on timeout, then optionally for a selector."""
    try:
        await page.wait_for_load_state(wait_until, timeout=timeout)
    except PlaywrightTimeoutError:
        logger.warning("Page load timeout, continuing", url=page.url)

    if wait_for_selector:
        await page.wait_for_selector(wait_for_selector, timeout=timeout)


async def navigate_with_retry(
    page: Page,
    url: str,
    retries: int = 3,
    retry_delay: float = 1.0,
    wait_until: str = "networkidle",
    timeout: float = 30000,
):
    """Navigate to url, retrying failed attempts."""
    for attempt in range(retries):
        try:
            return await page.goto(url, wait_until=wait_until, timeout=timeout)
        except PlaywrightError as e:
            if attempt == retries - 1:
                raise BrowserRunnerError(
                    f"Failed to navigate to {url} after {retries} attempts: {e.message}"
                ) from e
            print(f"Navigation attempt {attempt + 1} failed, retrying in {retry_delay}s...")
            await delay(retry_delay)


async def wait_for_element(page: Page, selector: str, state: str = "visible", timeout: float = 10000) -> None:
    await page.locator(selector).wait_for(state=state, timeout=timeout)


async def wait_for_spa(page: Page, url_pattern: Optional[UrlPattern] = None, timeout: float = 10000) -> None:
    """Wait for a client-side route change, or for network idle when no URL pattern is given."""
    if url_pattern:
        await page.wait_for_url(url_pattern, timeout=timeout)
    else:
        await page.wait_for_load_state("networkidle", timeout=timeout)


# ============================================================================
# SAFE INTERACTIONS
# ============================================================================

async def safe_click(
    page: Page,
    selector: str,
    retries: int = 3,
    retry_delay: float = 1.0,
    timeout: float = 5000,
    force: bool = False,
) -> bool:
    """
    Wait for a selector to be visible and click it, retrying on failure.

    Raises:
        playwright.async_api.Error: The last failure once retries run out
    """
    for attempt in range(retries):
        try:
            await page.wait_for_selector(selector, state="visible", timeout=timeout)
            await page.click(selector, force=force, timeout=timeout)
            return True
        except PlaywrightError:
            if attempt == retries - 1:
                logger.error("Click failed", selector=selector, attempts=retries)
                raise
            print(f"Retry {attempt + 1}/{retries} for clicking {selector}")
            await delay(retry_delay)
    return False


async def safe_type(
    page: Page,
    selector: str,
    text: str,
    clear: bool = True,
    slow: bool = False,
    key_delay: float = 100,
    timeout: float = 10000,
) -> None:
    """Type into an input after it becomes visible; ``slow`` types key by key."""
    await page.wait_for_selector(selector, state="visible", timeout=timeout)
    if clear:
        await page.fill(selector, "")
    if slow:
        await page.locator(selector).press_sequentially(text, delay=key_delay)
    else:
        await page.fill(selector, text)


async def safe_select(page: Page, selector: str, value: Union[str, Sequence[str]], timeout: float = 10000) -> List[str]:
    """Pick option(s) of a visible <select>; returns the selected values."""
    await page.wait_for_selector(selector, state="visible", timeout=timeout)
    return await page.select_option(selector, value)


async def safe_check(page: Page, selector: str, checked: bool = True, timeout: float = 10000) -> None:
    await page.wait_for_selector(selector, state="visible", timeout=timeout)
    if checked:
        await page.check(selector)
    else:
        await page.uncheck(selector)


async def scroll_page(page: Page, direction: str = "down", distance: int = 500) -> None:
    """Scroll "down", "up", "top" or "bottom"."""
    if direction == "down":
        await page.evaluate("d => window.scrollBy(0, d)", distance)
    elif direction == "up":
        await page.evaluate("d => window.scrollBy(0, -d)", distance)
    elif direction == "top":
        await page.evaluate("() => window.scrollTo(0, 0)")
    elif direction == "bottom":
        await page.evaluate("() => window.scrollTo(0, document.body.scrollHeight)")
    else:
        raise ValueError(f"Invalid scroll direction: {direction}")
    await delay(0.5)


async def scroll_to_element(page: Page, selector: str, offset: int = 0) -> None:
    """Scroll the first match into view, then by ``offset`` more pixels (negative scrolls back up)."""
    await page.locator(selector).first.scroll_into_view_if_needed()
    if offset:
        await page.evaluate("d => window.scrollBy(0, d)", offset)


LOGIN_SELECTORS = {
    "username": 'input[name="username"], input[name="email"], #username, #email, input[type="email"]',
    "password": 'input[name="password"], #password, input[type="password"]',
    "submit": 'button[type="submit"], input[type="submit"], button:has-text("Login"), button:has-text("Sign in")',
    "success": ".dashboard, .user-menu, .logout",
}


async def authenticate(
    page: Page,
    username: str,
    password: str,
    selectors: Optional[Dict[str, str]] = None,
    timeout: float = 10000,
) -> bool:
    """
    Fill a login form and submit it.

    Afterwards waits for whichever comes first: network idle, or an element
    matching the ``success`` selector. A login that shows neither is not an
    error; it is reported and the function returns False.

    Args:
        page: Page showing the login form
        username: Value typed into the username or email field
        password: Value typed into the password field
        selectors: Overrides for the ``username``, ``password``, ``submit``
            and ``success`` entries of LOGIN_SELECTORS
        timeout: How long to wait for the login to settle, in ms

    Returns:
        True when a settle signal was seen
    """
    chosen = {**LOGIN_SELECTORS, **(selectors or {})}
    await safe_type(page, chosen["username"], username)
    await safe_type(page, chosen["password"], password)
    await safe_click(page, chosen["submit"])

    waiters = [
        asyncio.ensure_future(page.wait_for_load_state("networkidle", timeout=timeout)),
        asyncio.ensure_future(page.wait_for_selector(chosen["success"], timeout=timeout)),
    ]
    done, pending = await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)
    for task in pending:
        task.cancel()
    await asyncio.gather(*pending, return_exceptions=True)

    if all(task.exception() is not None for task in done):
        print("Login might have completed without navigation")
        return False
    return True


async def handle_cookie_banner(page: Page, timeout: float = 3000) -> bool:
    """Dismiss a cookie banner if one of the common accept buttons shows up."""
    per_selector = timeout / len(COOKIE_BANNER_SELECTORS)
    for selector in COOKIE_BANNER_SELECTORS:
        try:
            element = await page.wait_for_selector(selector, timeout=per_selector, state="visible")
        except PlaywrightError:
            continue
        if element:
            await element.click()
            print("Cookie banner dismissed")
            return True
    return False


# ============================================================================
# FORMS
# ============================================================================

_FORM_FIELDS_JS = """(selector) => {
  const form = document.querySelector(selector);
  if (!form) return [];
  return Array.from(form.querySelectorAll('input, select, textarea')).map(field => ({
    name: field.name || field.id,
    type: field.type || field.tagName.toLowerCase(),
    required: field.required || field.hasAttribute('aria-required'),
    value: field.value,
    placeholder: field.placeholder || null,
    disabled: field.disabled
  }));
}"""

_FIELD_ERRORS_JS = """(selector) => {
  const form = document.querySelector(selector);
  if (!form) return [];
  const errors = [];
  form.querySelectorAll('input, select, textarea').forEach(field => {
    if (field.validationMessage) {
      errors.push({ field: field.name || field.id, message: field.validationMessage });
    }
  });
  form.querySelectorAll('.error, .error-message, [role="alert"], .invalid-feedback').forEach(el => {
    const text = el.textContent ? el.textContent.trim() : '';
    if (text) errors.push({ field: 'unknown', message: text });
  });
  return errors;
}"""

_FIELD_STATE_JS = """(selector) => {
  const field = document.querySelector(selector);
  if (!field) return { exists: false };
  const validity = field.validity || {};
  return {
    exists: true,
    valid: validity.valid ?? true,
    valueMissing: validity.valueMissing ?? false,
    typeMismatch: validity.typeMismatch ?? false,
    patternMismatch: validity.patternMismatch ?? false,
    tooShort: validity.tooShort ?? false,
    tooLong: validity.tooLong ?? false,
    validationMessage: field.validationMessage || null
  };
}"""


async def get_form_fields(page: Page, form_selector: str = "form") -> List[Dict[str, Any]]:
    """
    Describe every input, select and textarea in a form.

    Each entry has ``name``, ``type``, ``required``, ``value``,
    ``placeholder`` and ``disabled``. A missing form gives an empty list.
    """
    return await page.evaluate(_FORM_FIELDS_JS, form_selector)


async def get_required_fields(page: Page, form_selector: str = "form") -> List[Dict[str, Any]]:
    return [f for f in await get_form_fields(page, form_selector) if f.get("required")]


async def get_field_errors(page: Page, form_selector: str = "form") -> List[Dict[str, str]]:
    """Browser validation messages plus visible error elements, as ``{"field", "message"}``."""
    return await page.evaluate(_FIELD_ERRORS_JS, form_selector)


async def validate_field_state(page: Page, selector: str) -> Dict[str, Any]:
    return await page.evaluate(_FIELD_STATE_JS, selector)


def _field_selectors(form_selector: str, name: str) -> List[str]:
    return [
        f'{form_selector} [name="{name}"]',
        f"{form_selector} #{name}",
        f'{form_selector} [data-testid="{name}"]',
    ]


async def fill_form_from_data(page: Page, form_selector: str, data: Dict[str, Any], clear: bool = True) -> List[str]:
    """
    Fill form fields by name, id or ``data-testid``.

    Selects pick options, checkboxes and radios are checked when the value
    is truthy, file inputs receive the value as path(s), and everything else
    is filled with ``str(value)``. Fields that cannot be found are skipped.

    Returns:
        Names of the fields that were filled
    """
    filled: List[str] = []
    for name, value in data.items():
        for selector in _field_selectors(form_selector, name):
            element = page.locator(selector).first
            try:
                if await element.count() == 0:
                    continue
                tag = await element.evaluate("el => el.tagName.toLowerCase()")
                input_type = await element.get_attribute("type")
                if tag == "select":
                    await element.select_option(value)
                elif input_type in ("checkbox", "radio"):
                    if value:
                        await element.check()
                    else:
                        await element.uncheck()
                elif input_type == "file":
                    await element.set_input_files(value)
                else:
                    if clear:
                        await element.clear()
                    await element.fill(str(value))
            except PlaywrightError as e:
                logger.debug("Field selector failed", selector=selector, error=e.message)
                continue
            filled.append(name)
            break
        else:
            logger.warning("Form field not found", form=form_selector, field=name)
    return filled


async def submit_and_validate(
    page: Page,
    form_selector: str,
    submit_selector: Optional[str] = None,
    wait_time: float = 1.0,
) -> Dict[str, Any]:
    """Click the form's submit button, wait, then report ``{"success", "errors"}``."""
    selector = submit_selector or f'{form_selector} button[type="submit"], {form_selector} input[type="submit"]'
    await page.click(selector)
    await delay(wait_time)
    errors = await get_field_errors(page, form_selector)
    return {"success": not errors, "errors": errors}


# ============================================================================
# SCREENSHOTS & RESPONSIVENESS
# ============================================================================

def _screenshot_path(name: str, directory: Optional[str]) -> Path:
    timestamp = datetime.now().isoformat().replace(":", "-").replace(".", "-")
    return Path(directory or tempfile.gettempdir()) / f"{name}-{timestamp}.png"


async def take_screenshot(page: Page, name: str, directory: Optional[str] = None, full_page: bool = True, **options: Any) -> Path:
    """Save a timestamped PNG, by default in the system temp directory."""
    filename = _screenshot_path(name, directory)
    await page.screenshot(path=str(filename), full_page=full_page, **options)
    print(f"Screenshot saved: {filename}")
    return filename


async def take_element_screenshot(page: Page, selector: str, name: str, directory: Optional[str] = None, **options: Any) -> Path:
    filename = _screenshot_path(name, directory)
    await page.locator(selector).screenshot(path=str(filename), **options)
    print(f"Element screenshot saved: {filename}")
    return filename


async def check_viewports(
    page: Page,
    url: str,
    viewports: Optional[Dict[str, Dict[str, int]]] = None,
    name: str = "viewport",
    directory: Optional[str] = None,
) -> Dict[str, Path]:
    """
    Load url at each viewport size and take one screenshot per size.

    Returns:
        Mapping of viewport name to screenshot path
    """
    shots: Dict[str, Path] = {}
    for label, size in (viewports or RESPONSIVE_VIEWPORTS).items():
        await page.set_viewport_size(size)
        await page.goto(url, wait_until="networkidle")
        shots[label] = await take_screenshot(page, f"{name}-{label}", directory=directory)
    return shots


async def emulate_device(browser: Browser, device_name: str, **options: Any) -> BrowserContext:
    """
    Create a context from one of Playwright's device descriptors.

    Raises:
        ValueError: When device_name is not a known descriptor
    """
    devices = (await get_playwright()).devices
    device = devices.get(device_name)
    if device is None:
        available = ", ".join(list(devices)[:10])
        raise ValueError(f"Unknown device: {device_name}. Available: {available}...")
    return await browser.new_context(**{**device, **options})


async def set_geolocation(context: BrowserContext, latitude: float, longitude: float, accuracy: float = 100) -> None:
    await context.grant_permissions(["geolocation"])
    await context.set_geolocation({"latitude": latitude, "longitude": longitude, "accuracy": accuracy})


# ============================================================================
# LINKS & PAGE HEALTH
# ============================================================================

@dataclass(frozen=True)
class LinkStatus:
    """Result of checking one link."""

    url: str
    status_code: Optional[int] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.status_code is not None and self.status_code < 400


_EXTRACT_LINKS_JS = """({ internal, external }) => {
  const currentHost = window.location.host;
  const links = [];
  document.querySelectorAll('a[href]').forEach(a => {
    const href = a.href;
    const text = a.textContent ? a.textContent.trim() : '';
    const isExternal = !href.includes(currentHost) && href.startsWith('http');
    if ((isExternal && external) || (!isExternal && internal)) {
      links.push({ href, text, isExternal });
    }
  });
  return links;
}"""


async def extract_links(page: Page, internal: bool = True, external: bool = True) -> List[Dict[str, Any]]:
    """Return ``{"href", "text", "isExternal"}`` for each anchor on the page."""
    return await page.evaluate(_EXTRACT_LINKS_JS, {"internal": internal, "external": external})


async def check_links(urls: Iterable[str], timeout: float = 5.0, concurrency: int = 10) -> List[LinkStatus]:
    """
    Check links concurrently.

    A HEAD request is tried first and a GET is used when the server rejects
    HEAD with 405. Links with a status of 400 or above, or that fail at the
    transport level, are reported as broken.

    Args:
        urls: Absolute http(s) URLs; duplicates are checked once
        timeout: Per-request timeout in seconds
        concurrency: Maximum requests in flight

    Returns:
        One LinkStatus per unique URL, in first-seen order
    """
    unique = list(dict.fromkeys(u for u in urls if u.startswith(("http://", "https://"))))
    semaphore = asyncio.Semaphore(concurrency)

    async with httpx.AsyncClient(timeout=httpx.Timeout(timeout), follow_redirects=True) as client:

        async def _check(url: str) -> LinkStatus:
            async with semaphore:
                try:
                    response = await client.head(url)
                    if response.status_code == 405:
                        response = await client.get(url)
                except httpx.HTTPError as e:
                    return LinkStatus(url=url, error=f"{type(e).__name__}: {e}")
                return LinkStatus(url=url, status_code=response.status_code)

        results = await asyncio.gather(*(_check(url) for url in unique))

    broken = [r for r in results if not r.ok]
    if broken:
        logger.warning("Broken links found", count=len(broken))
    return list(results)


_NAVIGATION_TIMING_JS = """() => {
  const timing = performance.timing;
  return {
    dns: timing.domainLookupEnd - timing.domainLookupStart,
    tcp: timing.connectEnd - timing.connectStart,
    ttfb: timing.responseStart - timing.requestStart,
    download: timing.responseEnd - timing.responseStart,
    domContentLoaded: timing.domContentLoadedEventEnd - timing.navigationStart,
    load: timing.loadEventEnd - timing.navigationStart,
    resourceCount: performance.getEntriesByType('resource').length
  };
}"""


async def measure_page_load(page: Page, url: str, wait_until: str = "networkidle", timeout: float = 30000) -> Dict[str, Any]:
    """Navigate to url and collect navigation timing metrics."""
    start_time = time.perf_counter()
    response = await page.goto(url, wait_until=wait_until, timeout=timeout)
    load_time_ms = (time.perf_counter() - start_time) * 1000

    await delay(1.0)
    metrics = await page.evaluate(_NAVIGATION_TIMING_JS)

    return {
        "url": url,
        "status_code": response.status if response else None,
        "load_time_ms": round(load_time_ms, 2),
        "metrics": metrics,
    }


_LCP_JS = """(waitMs) => new Promise((resolve) => {
  new PerformanceObserver((list) => {
    const entries = list.getEntries();
    const last = entries[entries.length - 1];
    resolve(last ? last.startTime : null);
  }).observe({ type: 'largest-contentful-paint', buffered: true });
  setTimeout(() => resolve(null), waitMs);
})"""

_FCP_JS = """() => {
  const entries = performance.getEntriesByName('first-contentful-paint');
  return entries.length > 0 ? entries[0].startTime : null;
}"""

_CLS_JS = """(waitMs) => new Promise((resolve) => {
  let cls = 0;
  new PerformanceObserver((list) => {
    for (const entry of list.getEntries()) {
      if (!entry.hadRecentInput) cls += entry.value;
    }
  }).observe({ type: 'layout-shift', buffered: true });
  setTimeout(() => resolve(cls), waitMs);
})"""


async def measure_lcp(page: Page, wait: float = 5.0) -> Optional[float]:
    """Largest Contentful Paint in ms, or None if none is reported within ``wait`` seconds."""
    return await page.evaluate(_LCP_JS, int(wait * 1000))


async def measure_fcp(page: Page) -> Optional[float]:
    """First Contentful Paint in ms, or None if the page has not painted."""
    return await page.evaluate(_FCP_JS)


async def measure_cls(page: Page, wait: float = 3.0) -> float:
    """Cumulative Layout Shift observed over ``wait`` seconds, ignoring input-driven shifts."""
    return await page.evaluate(_CLS_JS, int(wait * 1000))


# ============================================================================
# NETWORK
# ============================================================================

def url_matcher(pattern: Optional[UrlPattern]) -> Callable[[str], bool]:
    """
    Build a URL predicate.

    A string is a glob where ``**`` matches anything and ``*`` matches
    within one path segment; a compiled regex is searched as-is; None
    matches every URL.
    """
    if pattern is None:
        return lambda url: True
    if isinstance(pattern, str):
        pattern = re.compile(".*".join(re.escape(part).replace(r"\*", "[^/]*") for part in pattern.split("**")))
    return lambda url: pattern.search(url) is not None


@dataclass
class ApiMock:
    """Route handler that answers matching requests with a canned body."""

    page: Any
    url_pattern: UrlPattern
    response: Any
    status: int = 200
    content_type: str = "application/json"
    times: Optional[int] = None
    call_count: int = 0

    async def handle(self, route: Route) -> None:
        self.call_count += 1
        if self.times is not None and self.call_count > self.times:
            await route.continue_()
            return
        body = self.response(route.request) if callable(self.response) else self.response
        await route.fulfill(
            status=self.status,
            content_type=self.content_type,
            body=body if isinstance(body, str) else json.dumps(body),
        )

    async def unroute(self) -> None:
        await self.page.unroute(self.url_pattern, self.handle)


async def mock_api_response(
    page: Page,
    url_pattern: UrlPattern,
    response: Any,
    status: int = 200,
    content_type: str = "application/json",
    times: Optional[int] = None,
) -> ApiMock:
    """
    Answer requests matching url_pattern without hitting the server.

    Args:
        page: Page whose requests are intercepted
        url_pattern: Playwright route pattern (glob or regex)
        response: Body to send; a callable receives the Request and returns
            the body. Anything but a string is sent as JSON.
        status: HTTP status of the mocked response
        content_type: Content-Type of the mocked response
        times: Stop mocking after this many calls and let requests through

    Returns:
        The installed ApiMock; its ``call_count`` counts intercepted requests
    """
    mock = ApiMock(page, url_pattern, response, status=status, content_type=content_type, times=times)
    await page.route(url_pattern, mock.handle)
    return mock


async def block_resources(page: Page, resource_types: Iterable[str]) -> None:
    """Abort requests of the given resource types (image, stylesheet, font, ...)."""
    blocked = frozenset(resource_types)

    async def _route(route: Route) -> None:
        if route.request.resource_type in blocked:
            await route.abort()
        else:
            await route.continue_()

    await page.route("**/*", _route)


@dataclass
class RequestCapture:
    """Records outgoing requests whose URL matches until stopped."""

    page: Any
    url_pattern: Optional[UrlPattern] = None
    _requests: List[Dict[str, Any]] = field(default_factory=list, init=False)

    def __post_init__(self):
        self._matches = url_matcher(self.url_pattern)
        self.page.on("request", self._handle)

    def _handle(self, request: Request) -> None:
        if not self._matches(request.url):
            return
        self._requests.append({
            "url": request.url,
            "method": request.method,
            "resource_type": request.resource_type,
            "headers": request.headers,
            "post_data": request.post_data,
            "timestamp": time.time(),
        })

    @property
    def requests(self) -> List[Dict[str, Any]]:
        return list(self._requests)

    @property
    def api_requests(self) -> List[Dict[str, Any]]:
        return [r for r in self._requests if r["resource_type"] in ("fetch", "xhr")]

    def clear(self) -> None:
        self._requests.clear()

    def stop(self) -> List[Dict[str, Any]]:
        self.page.remove_listener("request", self._handle)
        return self.requests


@dataclass
class ResponseCapture:
    """Records responses (with their text body when available) until stopped."""

    page: Any
    url_pattern: Optional[UrlPattern] = None
    _responses: List[Dict[str, Any]] = field(default_factory=list, init=False)

    def __post_init__(self):
        self._matches = url_matcher(self.url_pattern)
        self.page.on("response", self._handle)

    async def _handle(self, response: Response) -> None:
        if not self._matches(response.url):
            return
        try:
            body: Optional[str] = await response.text()
        except PlaywrightError:
            # redirects and evicted bodies
            body = None
        self._responses.append({
            "url": response.url,
            "status": response.status,
            "status_text": response.status_text,
            "headers": response.headers,
            "body": body,
            "timestamp": time.time(),
        })

    @property
    def responses(self) -> List[Dict[str, Any]]:
        return list(self._responses)

    def by_status(self, status: int) -> List[Dict[str, Any]]:
        return [r for r in self._responses if r["status"] == status]

    def clear(self) -> None:
        self._responses.clear()

    def stop(self) -> List[Dict[str, Any]]:
        self.page.remove_listener("response", self._handle)
        return self.responses


def capture_requests(page: Page, url_pattern: Optional[UrlPattern] = None) -> RequestCapture:
    return RequestCapture(page, url_pattern)


def capture_responses(page: Page, url_pattern: Optional[UrlPattern] = None) -> ResponseCapture:
    return ResponseCapture(page, url_pattern)


async def wait_for_api(
    page: Page,
    url_pattern: UrlPattern,
    method: Optional[str] = None,
    timeout: float = 30000,
) -> Dict[str, Any]:
    """
    Wait for a response from a matching API call.

    A string pattern matches any URL containing it; a regex is searched.

    Returns:
        ``{"url", "status", "body"}`` with body None when it cannot be read
    """

    def _is_match(response: Response) -> bool:
        if isinstance(url_pattern, str):
            matched = url_pattern in response.url
        else:
            matched = url_pattern.search(response.url) is not None
        return matched and (method is None or response.request.method == method.upper())

    response = await page.wait_for_response(_is_match, timeout=timeout)
    try:
        body: Optional[str] = await response.text()
    except PlaywrightError:
        body = None
    return {"url": response.url, "status": response.status, "body": body}


# ============================================================================
# CONSOLE MONITORING
# ============================================================================

@dataclass
class ConsoleCapture:
    """Collects console messages of the given types from a page until stopped."""

    page: Any
    levels: Iterable[str] = ("log", "warning", "error", "info")
    _logs: List[Dict[str, Any]] = field(default_factory=list, init=False)

    def __post_init__(self):
        self.levels = tuple(self.levels)
        self.page.on("console", self._handle)

    def _handle(self, msg: ConsoleMessage) -> None:
        if msg.type not in self.levels:
            return
        self._logs.append({
            "type": msg.type,
            "text": msg.text,
            "location": msg.location,
            "timestamp": time.time(),
        })

    @property
    def logs(self) -> List[Dict[str, Any]]:
        return list(self._logs)

    @property
    def errors(self) -> List[Dict[str, Any]]:
        return [entry for entry in self._logs if entry["type"] == "error"]

    @property
    def warnings(self) -> List[Dict[str, Any]]:
        return [entry for entry in self._logs if entry["type"] == "warning"]

    def has_errors(self) -> bool:
        return any(entry["type"] == "error" for entry in self._logs)

    def clear(self) -> None:
        self._logs.clear()

    def stop(self) -> List[Dict[str, Any]]:
        self.page.remove_listener("console", self._handle)
        return self.logs


@dataclass
class PageErrorCapture:
    """Collects uncaught page exceptions until stopped."""

    page: Any
    _errors: List[Dict[str, Any]] = field(default_factory=list, init=False)

    def __post_init__(self):
        self.page.on("pageerror", self._handle)

    def _handle(self, error: Any) -> None:
        self._errors.append({
            "message": getattr(error, "message", str(error)),
            "stack": getattr(error, "stack", None),
            "timestamp": time.time(),
        })

    @property
    def errors(self) -> List[Dict[str, Any]]:
        return list(self._errors)

    def has_errors(self) -> bool:
        return bool(self._errors)

    def clear(self) -> None:
        self._errors.clear()

    def stop(self) -> List[Dict[str, Any]]:
        self.page.remove_listener("pageerror", self._handle)
        return self.errors


def capture_console_logs(page: Page, levels: Optional[Iterable[str]] = None) -> ConsoleCapture:
    if levels is None:
        return ConsoleCapture(page)
    return ConsoleCapture(page, levels)


def capture_page_errors(page: Page) -> PageErrorCapture:
    return PageErrorCapture(page)


def assert_no_console_errors(capture: ConsoleCapture) -> bool:
    errors = capture.errors
    if errors:
        summary = "\n".join(f"  - {entry['text']}" for entry in errors)
        raise AssertionError(f"Found {len(errors)} console error(s):\n{summary}")
    return True


# ============================================================================
# DIALOGS & TABS
# ============================================================================

def handle_dialog(page: Page, action: str = "accept", prompt_text: str = "") -> None:
    """
    Answer the next alert, confirm or prompt shown by the page.

    Register before the action that opens the dialog. ``prompt_text`` is
    only sent to prompt dialogs.
    """
    if action not in ("accept", "dismiss"):
        raise ValueError(f"Invalid dialog action: {action}. Use 'accept' or 'dismiss'.")

    async def _answer(dialog: Dialog) -> None:
        print(f"Dialog type: {dialog.type}, message: {dialog.message}")
        if action == "dismiss":
            await dialog.dismiss()
        elif dialog.type == "prompt":
            await dialog.accept(prompt_text)
        else:
            await dialog.accept()

    page.once("dialog", _answer)


async def handle_popup(
    page: Page,
    trigger: Callable[[], Awaitable[Any]],
    timeout: float = 30000,
    wait_for_load: bool = True,
) -> Page:
    """Run trigger and return the popup window it opens."""
    async with page.expect_popup(timeout=timeout) as popup_info:
        await trigger()
    popup = await popup_info.value
    if wait_for_load:
        await popup.wait_for_load_state("networkidle")
    return popup


async def handle_new_tab(
    page: Page,
    trigger: Callable[[], Awaitable[Any]],
    timeout: float = 30000,
    wait_for_load: bool = True,
) -> Page:
    """Run trigger and return the page it opens anywhere in the same context."""
    async with page.context.expect_page(timeout=timeout) as page_info:
        await trigger()
    new_page = await page_info.value
    if wait_for_load:
        await new_page.wait_for_load_state("networkidle")
    return new_page


async def close_all_popups(context: BrowserContext) -> int:
    """Close every page of the context except the first; returns how many were closed."""
    extra = context.pages[1:]
    for extra_page in extra:
        await extra_page.close()
    return len(extra)


# ============================================================================
# DATA EXTRACTION
# ============================================================================

_TEXTS_JS = "els => els.map(el => el.textContent ? el.textContent.trim() : '').filter(Boolean)"

_TABLE_JS = """(selector) => {
  const table = document.querySelector(selector);
  if (!table) return null;
  const text = el => el.textContent ? el.textContent.trim() : '';
  const headers = Array.from(table.querySelectorAll('thead th')).map(text);
  const rows = Array.from(table.querySelectorAll('tbody tr')).map(tr => {
    const cells = Array.from(tr.querySelectorAll('td')).map(text);
    if (headers.length === 0) return cells;
    const row = {};
    cells.forEach((value, index) => { row[headers[index] || `column_${index}`] = value; });
    return row;
  });
  return { headers, rows };
}"""

_META_JS = """() => {
  const metas = {};
  document.querySelectorAll('meta').forEach(meta => {
    const name = meta.getAttribute('name') || meta.getAttribute('property');
    const content = meta.getAttribute('content');
    if (name && content) metas[name] = content;
  });
  return metas;
}"""

_OPEN_GRAPH_JS = """() => {
  const og = {};
  document.querySelectorAll('meta[property^="og:"]').forEach(meta => {
    og[meta.getAttribute('property').slice(3)] = meta.getAttribute('content');
  });
  return og;
}"""

_JSON_LD_JS = """() => Array.from(document.querySelectorAll('script[type="application/ld+json"]'))
  .map(script => script.textContent)"""


async def extract_texts(page: Page, selector: str, timeout: float = 10000) -> List[str]:
    """Trimmed, non-empty text of every element matching selector."""
    await page.wait_for_selector(selector, timeout=timeout)
    return await page.eval_on_selector_all(selector, _TEXTS_JS)


async def extract_table_data(page: Page, table_selector: str, timeout: float = 10000) -> Optional[Dict[str, Any]]:
    """
    Read a table as ``{"headers": [...], "rows": [...]}``.

    With ``thead`` headers each row is a dict keyed by header text (unnamed
    columns become ``column_<n>``); without headers rows are lists of cell
    text.
    """
    await page.wait_for_selector(table_selector, timeout=timeout)
    return await page.evaluate(_TABLE_JS, table_selector)


async def extract_meta_tags(page: Page) -> Dict[str, str]:
    return await page.evaluate(_META_JS)


async def extract_open_graph(page: Page) -> Dict[str, str]:
    """Open Graph properties with the ``og:`` prefix removed."""
    return await page.evaluate(_OPEN_GRAPH_JS)


async def extract_json_ld(page: Page) -> List[Any]:
    """Parsed JSON-LD blocks; blocks that are not valid JSON are skipped."""
    blocks = []
    for raw in await page.evaluate(_JSON_LD_JS):
        try:
            blocks.append(json.loads(raw or ""))
        except json.JSONDecodeError:
            logger.debug("Skipping invalid JSON-LD block", length=len(raw or ""))
    return blocks


# ============================================================================
# FILES
# ============================================================================

async def upload_file(page: Page, selector: str, file_path: Union[str, Path]) -> None:
    await page.locator(selector).set_input_files(file_path)


async def upload_multiple_files(page: Page, selector: str, file_paths: Sequence[Union[str, Path]]) -> None:
    await page.locator(selector).set_input_files(list(file_paths))


async def wait_for_download(page: Page, trigger: Callable[[], Awaitable[Any]], timeout: float = 30000) -> Download:
    """Run trigger and return the download it starts."""
    async with page.expect_download(timeout=timeout) as download_info:
        await trigger()
    return await download_info.value


async def download_file(
    page: Page,
    trigger: Callable[[], Awaitable[Any]],
    save_path: Optional[Union[str, Path]] = None,
    timeout: float = 30000,
) -> Dict[str, Any]:
    """
    Run trigger and save the download it starts.

    Args:
        page: Page the download starts from
        trigger: Coroutine function that starts the download, e.g. a click
        save_path: Destination; defaults to the suggested filename in the
            system temp directory
        timeout: How long to wait for the download to start, in ms

    Returns:
        ``{"path": Path, "filename": suggested filename}``
    """
    download = await wait_for_download(page, trigger, timeout=timeout)
    filename = download.suggested_filename
    destination = Path(save_path) if save_path else Path(tempfile.gettempdir()) / filename
    await download.save_as(destination)
    print(f"Downloaded: {destination}")
    return {"path": destination, "filename": filename}


# ============================================================================
# UTILITIES
# ============================================================================

async def retry_with_backoff(fn: Callable[[], Awaitable[T]], max_retries: int = 3, initial_delay: float = 1.0) -> T:
    """Await fn() until it succeeds, doubling the delay after each failure."""
    last_error: Optional[BaseException] = None
    for attempt in range(max_retries):
        try:
            return await fn()
        except Exception as e:
            last_error = e
            if attempt == max_retries - 1:
                break
            wait = initial_delay * (2 ** attempt)
            print(f"Attempt {attempt + 1} failed, retrying in {wait}s...")
            await delay(wait)
    raise last_error


async def delay(seconds: float) -> None:
    await asyncio.sleep(seconds)
