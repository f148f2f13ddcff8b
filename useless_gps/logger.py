"""Logging module for Useless GPS."""

import json
from datetime import datetime
from typing import Optional, Callable


class Logger:
    """Logs run events as `[time] message | {json}` lines.

    Lines go to stdout (unless echo is off), to an append-only file when a
    path is given, and to an optional callback receiving (message, data).
    """

    def __init__(self, log_path: Optional[str] = None, callback: Optional[Callable] = None,
                 echo: bool = True, context: Optional[dict] = None):
        self.log_path = log_path
        self.callback = callback
        self.echo = echo
        self.context = dict(context or {})
        self.file = None
        if log_path:
            self.file = open(log_path, "a")
            self._write_header()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def _write_header(self):
        self.file.write(f"\n{'='*60}\n")
        self.file.write(f"Useless GPS Log - {datetime.now().isoformat(timespec='seconds')}\n")
        self.file.write(f"{'='*60}\n\n")
        self.file.flush()

    def log(self, message: str, data: Optional[dict] = None):
        """Log a message with optional structured data"""
        timestamp = datetime.now().isoformat(timespec="milliseconds")
        payload = {**self.context, **(data or {})}
        line = f"[{timestamp}] {message}"
        if payload:
            line += f" | {json.dumps(payload, default=str)}"
        if self.echo:
            print(line)
        if self.file:
            self.file.write(line + "\n")
            self.file.flush()
        if self.callback:
            self.callback(message, payload or None)

    def close(self):
        if self.file:
            self.file.close()
            self.file = None
