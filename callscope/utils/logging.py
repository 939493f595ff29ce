from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field, is_dataclass
from datetime import date, datetime
from typing import Any
from rich.console import Console

console = Console()

logger = logging.getLogger("callscope.diagnostics")


def _to_jsonable(x: Any) -> Any:
    if is_dataclass(x) and not isinstance(x, type):
        return asdict(x)
    if hasattr(x, "model_dump"):
        return x.model_dump()
    if isinstance(x, (datetime, date)):
        return x.isoformat()
    return x


def log_event(event: str, payload: dict[str, Any]) -> None:
    console.print(f"[bold]{event}[/bold]")
    console.print_json(json.dumps({k: _to_jsonable(v) for k, v in payload.items()}, default=str))


@dataclass(frozen=True)
class DiagnosticEvent:
    event: str
    payload: dict[str, Any]


@dataclass
class DiagnosticLog:
    """
    Request-scoped collector for pipeline diagnostics.

    Events are informational only: which candidate, page or row was skipped
    and why. Nothing in the pipeline reads them back.
    """

    ticker: str | None = None
    events: list[DiagnosticEvent] = field(default_factory=list)

    def emit(self, event: str, **payload: Any) -> None:
        self.events.append(DiagnosticEvent(event=event, payload=payload))
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("%s %s %s", self.ticker or "-", event, payload)

    def count(self, event: str) -> int:
        return sum(1 for e in self.events if e.event == event)

    def __len__(self) -> int:
        return len(self.events)

    def print(self) -> None:
        for e in self.events:
            log_event(e.event, e.payload)
