"""
README content cache for the documentation endpoint.

The cache is an explicit value: content plus the time it was last read. Each
access checks the age and re-reads the file once it is older than the
refresh interval.
"""

from html import escape
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from .logger import logger

_FALLBACK_MARKDOWN = "# Error\nCould not load README.md"

_HTML_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Park Fan Sync - Documentation</title>
    <style>
        body {{ font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, sans-serif;
               max-width: 900px; margin: 0 auto; padding: 2rem; background-color: #f6f8fa; }}
        .readme-content {{ font-family: SFMono-Regular, Consolas, Menlo, monospace; background: white;
                          border: 1px solid #d0d7de; border-radius: 6px; padding: 1.5rem;
                          white-space: pre-wrap; word-wrap: break-word; font-size: 14px; }}
    </style>
</head>
<body>
    <div class="readme-content">{body}</div>
</body>
</html>
"""


def render_markdown_as_html(markdown: str) -> str:
    """Escape markdown and wrap it in a page; line breaks become <br>."""
    body = escape(markdown, quote=True).replace('\n', '<br>')
    return _HTML_TEMPLATE.format(body=body)


@dataclass
class ReadmeCache:
    """
    README file contents with their last refresh time.

    Args:
        path: README file location
        refresh_seconds: Maximum age before the file is read again
        clock: Monotonic time source (seconds)
    """
    path: str
    refresh_seconds: float = 60.0
    clock: Callable[[], float] = time.monotonic
    markdown: Optional[str] = field(default=None, init=False)
    html: Optional[str] = field(default=None, init=False)
    last_refreshed: Optional[float] = field(default=None, init=False)

    def is_stale(self) -> bool:
        if self.last_refreshed is None:
            return True
        return self.clock() - self.last_refreshed > self.refresh_seconds

    def refresh(self):
        """Re-read the file. A missing file leaves a placeholder and stays stale."""
        try:
            with open(self.path, encoding='utf-8') as f:
                self.markdown = f.read()
            self.last_refreshed = self.clock()
        except OSError as e:
            logger.warning(f"Could not load README from {self.path}: {e}")
            self.markdown = _FALLBACK_MARKDOWN
            self.last_refreshed = None
        self.html = render_markdown_as_html(self.markdown)

    def get_markdown(self) -> str:
        if self.is_stale():
            self.refresh()
        return self.markdown

    def get_html(self) -> str:
        if self.is_stale():
            self.refresh()
        return self.html
