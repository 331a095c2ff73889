"""Command output in text or JSON mode.

Results go to stdout, errors to stderr. In JSON mode every payload is a
single JSON document so commands compose with ``jq``.
"""
from __future__ import annotations

import json
import sys
from typing import Any, Dict, Optional, Union

from turnstile.core.exceptions import TurnstileError


class OutputFormatter:
    def __init__(self, json_mode: bool = False, indent: int = 2):
        self.json_mode = json_mode
        self.indent = indent

    def _dump(self, data: Any) -> str:
        return json.dumps(data, indent=self.indent, default=str)

    def success(self, data: Dict[str, Any], message: str, *, status: str = "success") -> None:
        """Print ``message`` in text mode, ``{"status": ..., **data}`` in JSON mode."""
        if self.json_mode:
            print(self._dump({"status": status, **data}))
        else:
            print(message)

    def error(
        self,
        error: Union[Exception, str],
        message: Optional[str] = None,
        *,
        error_code: str = "error",
    ) -> None:
        """Report ``error`` on stderr.

        Turnstile errors contribute their code and context to the JSON payload.
        """
        msg = message or str(error)
        if not self.json_mode:
            print(f"Error: {msg}", file=sys.stderr)
            return
        payload: Dict[str, Any] = {"error": error_code, "message": msg}
        if isinstance(error, TurnstileError):
            details = error.to_json_error()
            payload.update(code=details["code"], context=details["context"])
        print(self._dump(payload), file=sys.stderr)

    def json_output(self, data: Any) -> None:
        print(self._dump(data))

    def text(self, message: str) -> None:
        print(message)


__all__ = ["OutputFormatter"]
