"""
Centralized logging for Geography 3-Mark Buddy.

Every line carries a wall-clock time, the seconds since start-up and a
category tag, colour-coded per category:

    ENV   configuration and credentials
    API   model calls and their timings
    JSON  replies that needed cleaning or failed to parse
    UI    session phase changes and window events
    TASK  background worker threads
    OK / WARN / ERR / INFO / DBG  general status

Usage:
    from core.logger import logger

    logger.api_call("chat.completions.create", model="gpt-4o-mini")
    logger.env_success("API key loaded")
    logger.error("Grading failed", exc_info=True)
"""

import sys
import time
import traceback
from datetime import datetime
from typing import Dict, Optional, TextIO


def force_utf8_output() -> None:
    """Reconfigure stdout/stderr to UTF-8 so status glyphs print on Windows consoles."""
    for stream in (sys.stdout, sys.stderr):
        if hasattr(stream, "reconfigure"):
            stream.reconfigure(encoding="utf-8")


RESET = "\033[0m"
BOLD = "\033[1m"
DIM = "\033[2m"

# (category tag, ANSI colour) per logging style
STYLES: Dict[str, tuple] = {
    "env": ("ENV", "\033[35m"),
    "env_ok": ("ENV", "\033[32m"),
    "env_fail": ("ENV", "\033[31m"),
    "api": ("API", "\033[36m"),
    "api_reply": ("API", "\033[96m"),
    "api_fail": ("API", "\033[91m"),
    "json": ("JSON", "\033[33m"),
    "json_fail": ("JSON", "\033[91m"),
    "ui": ("UI", "\033[34m"),
    "ui_move": ("UI", "\033[94m"),
    "task": ("TASK", "\033[37m"),
    "task_ok": ("TASK", "\033[92m"),
    "task_fail": ("TASK", "\033[91m"),
    "ok": ("OK", "\033[92m"),
    "warn": ("WARN", "\033[93m"),
    "err": ("ERR", "\033[91m"),
    "info": ("INFO", "\033[37m"),
    "debug": ("DBG", DIM),
}
BANNER_COLOR = "\033[96m"
TRACEBACK_COLOR = "\033[31m"


def _timing(duration_ms: Optional[float]) -> str:
    return f" ({duration_ms:.0f}ms)" if duration_ms else ""


class DebugLogger:
    """Colour-coded console logger. Silent when ``enabled`` is False."""

    def __init__(self, enabled: bool = True, stream: Optional[TextIO] = None):
        self.enabled = enabled
        self.stream = stream
        self._start_time = datetime.now()

    def _out(self) -> TextIO:
        return self.stream if self.stream is not None else sys.stdout

    def _timestamp(self) -> str:
        now = datetime.now()
        elapsed = (now - self._start_time).total_seconds()
        return f"{now:%H:%M:%S}.{now.microsecond // 1000:03d} (+{elapsed:>6.1f}s)"

    def _log(self, style: str, message: str, exc_info: bool = False) -> None:
        if not self.enabled:
            return

        category, color = STYLES[style]
        timestamp = self._timestamp()
        indent = f"{DIM}{' ' * (len(timestamp) + 8)}{RESET}"
        out = self._out()

        first, *rest = message.split("\n")
        print(f"{DIM}{timestamp}{RESET} {color}{BOLD}[{category:>4}]{RESET} {first}", file=out, flush=True)
        for line in rest:
            print(f"{indent}{line}", file=out, flush=True)

        if exc_info:
            for line in traceback.format_exc().splitlines():
                if line.strip():
                    print(f"{indent}{TRACEBACK_COLOR}{line}{RESET}", file=sys.stderr, flush=True)

    # === Environment/Configuration ===
    def env(self, message: str) -> None:
        self._log("env", message)

    def env_success(self, message: str) -> None:
        self._log("env_ok", f"✓ {message}")

    def env_error(self, message: str) -> None:
        self._log("env_fail", f"✗ {message}")

    # === Model calls ===
    def api(self, message: str) -> None:
        self._log("api", message)

    def api_call(self, endpoint: str, model: Optional[str] = None) -> None:
        model_info = f" (model: {model})" if model else ""
        self._log("api", f"→ Calling {endpoint}{model_info}")

    def api_response(self, endpoint: str, duration_ms: Optional[float] = None) -> None:
        self._log("api_reply", f"← Response from {endpoint}{_timing(duration_ms)}")

    def api_error(self, message: str) -> None:
        self._log("api_fail", f"✗ {message}")

    # === Reply parsing ===
    def json_recovered(self, how: str) -> None:
        """Log that a reply needed cleaning before it parsed."""
        self._log("json", f"↺ Recovered JSON ({how})")

    def json_error(self, message: str, raw: Optional[str] = None) -> None:
        """Log a reply that could not be parsed, with a short excerpt of the raw text."""
        if raw is not None:
            excerpt = raw[:120] + "..." if len(raw) > 120 else raw
            message = f"{message}\nraw: {excerpt!r}"
        self._log("json_fail", f"✗ {message}")

    # === Session and window ===
    def ui(self, message: str) -> None:
        self._log("ui", message)

    def ui_transition(self, from_state: str, to_state: str) -> None:
        self._log("ui_move", f"{from_state} → {to_state}")

    # === Worker threads ===
    def task(self, message: str) -> None:
        self._log("task", message)

    def task_start(self, task_name: str) -> None:
        self._log("task", f"⚡ Starting: {task_name}")

    def task_complete(self, task_name: str, duration_ms: Optional[float] = None) -> None:
        self._log("task_ok", f"✓ Completed: {task_name}{_timing(duration_ms)}")

    def task_error(self, task_name: str, error: str, exc_info: bool = False) -> None:
        self._log("task_fail", f"✗ Failed: {task_name} - {error}", exc_info=exc_info)

    # === General status ===
    def success(self, message: str) -> None:
        self._log("ok", f"✓ {message}")

    def warning(self, message: str) -> None:
        self._log("warn", f"⚠ {message}")

    def error(self, message: str, exc_info: bool = False) -> None:
        self._log("err", f"✗ {message}", exc_info=exc_info)

    def info(self, message: str) -> None:
        self._log("info", message)

    def debug(self, message: str) -> None:
        self._log("debug", message)

    # === Formatting ===
    def separator(self, title: Optional[str] = None) -> None:
        if not self.enabled:
            return
        line = f"{'─' * 20} {title} {'─' * 20}" if title else "─" * 60
        print(f"\n{DIM}{line}{RESET}\n", file=self._out(), flush=True)

    def banner(self, text: str) -> None:
        if not self.enabled:
            return
        width = max(60, len(text) + 4)
        border = "═" * width
        padding = " " * ((width - len(text)) // 2)
        out = self._out()
        print(f"\n{BANNER_COLOR}{border}{RESET}", file=out, flush=True)
        print(f"{BANNER_COLOR}║{padding}{BOLD}{text}{RESET}{BANNER_COLOR}{padding}║{RESET}", file=out, flush=True)
        print(f"{BANNER_COLOR}{border}{RESET}\n", file=out, flush=True)


# Global logger instance
logger = DebugLogger(enabled=True)


class Timer:
    """Context manager for timing model calls."""

    def __init__(self):
        self.start_time: Optional[float] = None
        self.duration_ms: float = 0

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, *args) -> None:
        if self.start_time:
            self.duration_ms = (time.perf_counter() - self.start_time) * 1000
