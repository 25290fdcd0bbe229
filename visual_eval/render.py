"""
Renderer step: load an HTML string in headless Chromium and screenshot it.

Every call launches and closes its own browser. Errors (browser crash, timeout)
are not caught here.
"""

import base64
import os

from playwright.sync_api import sync_playwright

from visual_eval.eval_config import RENDER_SETTLE_MS, VIEWPORT_HEIGHT, VIEWPORT_WIDTH
from visual_eval.records import RenderedImage


def screenshot_to_base64(data: bytes) -> str:
    """Encode raw PNG bytes as a base64 string."""
    return base64.b64encode(data).decode("utf-8")


def render_html(
    html: str,
    viewport_width: int = VIEWPORT_WIDTH,
    viewport_height: int = VIEWPORT_HEIGHT,
    full_page: bool = False,
    settle_ms: int = RENDER_SETTLE_MS,
) -> RenderedImage:
    """Render trusted HTML to a base64 PNG screenshot."""
    with sync_playwright() as pw:
        browser = pw.chromium.launch(headless=True)
        try:
            page = browser.new_page(
                viewport={"width": viewport_width, "height": viewport_height}
            )
            try:
                page.set_content(html, wait_until="networkidle")
                if settle_ms:
                    page.wait_for_timeout(settle_ms)
                png = page.screenshot(type="png", full_page=full_page)
            finally:
                page.close()
        finally:
            browser.close()
    return RenderedImage(data=screenshot_to_base64(png))


def save_rendered_image(image: RenderedImage, path: str) -> str:
    """Write a rendered screenshot to disk for human review."""
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "wb") as f:
        f.write(base64.b64decode(image.data))
    return path
