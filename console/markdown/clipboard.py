# console/markdown/clipboard.py
"""
Copy-to-clipboard action behind the code widget's copy button.

The widget stores the exact code in the button's ``data-code`` attribute.
``CopyButton.copy()`` tries the asynchronous clipboard first and falls back
to a synchronous legacy copy (select text, issue the copy command) when the
clipboard is missing or refuses. Either way the button pulses ``success`` or
``error`` and returns to ``idle`` after two seconds. Nothing is raised to
the caller.
"""

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, Optional, Protocol

logger = logging.getLogger(__name__)

PULSE_SECONDS = 2.0


class CopyState(str, Enum):
    IDLE = "idle"
    SUCCESS = "success"
    ERROR = "error"


LABELS = {
    CopyState.IDLE: "复制",
    CopyState.SUCCESS: "已复制",
    CopyState.ERROR: "复制失败",
}


class ClipboardUnavailable(Exception):
    """No asynchronous clipboard is available."""


class Clipboard(Protocol):
    def write_text(self, text: str) -> Awaitable[None]:
        ...


class CopyButton:
    def __init__(
        self,
        code: str,
        clipboard: Optional[Clipboard] = None,
        fallback: Optional[Callable[[str], None]] = None,
        pulse_seconds: float = PULSE_SECONDS,
    ):
        self.code = code
        self.clipboard = clipboard
        self.fallback = fallback
        self.pulse_seconds = pulse_seconds
        self.state = CopyState.IDLE
        self._revert = None

    @classmethod
    def from_widget(cls, widget, **kwargs) -> "CopyButton":
        """Build the action for a rendered code widget (a BeautifulSoup tag)."""
        button = widget.find("button", class_="code-block-copy-btn")
        code = button.get("data-code", "") if button is not None else ""
        return cls(code, **kwargs)

    @property
    def label(self) -> str:
        return LABELS[self.state]

    async def copy(self) -> CopyState:
        try:
            if self.clipboard is None:
                raise ClipboardUnavailable()
            await self.clipboard.write_text(self.code)
            state = CopyState.SUCCESS
        except Exception as e:
            logger.warning("Clipboard write failed (%s), trying legacy copy", e or type(e).__name__)
            state = self._legacy_copy()

        self._pulse(state)
        return state

    def _legacy_copy(self) -> CopyState:
        if self.fallback is None:
            logger.warning("No legacy copy available")
            return CopyState.ERROR
        try:
            self.fallback(self.code)
        except Exception:
            logger.warning("Legacy copy failed", exc_info=True)
            return CopyState.ERROR
        return CopyState.SUCCESS

    def _pulse(self, state: CopyState):
        self.state = state
        if self._revert is not None:
            self._revert.cancel()
        loop = asyncio.get_running_loop()
        self._revert = loop.call_later(self.pulse_seconds, self.reset)

    def reset(self):
        self.state = CopyState.IDLE
        self._revert = None
