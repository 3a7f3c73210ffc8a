from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class JsonParseResult:
    """Outcome of parsing free-text JSON: a value, or an error message."""

    value: Any = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def parse_json_text(text: str | None) -> JsonParseResult:
    """Parse any strict JSON value from user text without raising."""
    try:
        value = json.loads(text if text is not None else "", parse_constant=_reject_constant)
    except (TypeError, ValueError) as exc:
        return JsonParseResult(error=str(exc))
    return JsonParseResult(value=value)


def pretty_json(value: Any) -> str:
    return json.dumps(value if value is not None else {}, indent=2, ensure_ascii=False)
