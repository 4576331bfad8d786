"""
Receipt model — what a runtime client hands back for every call.

Runtime clients NEVER raise for a failed external command: a non-zero
exit, a timeout or a missing binary all come back as a failed Receipt,
and the lifecycle decides what that means for the resource.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

ReceiptStatus = Literal["ok", "skipped", "failed"]


def _utc_now() -> str:
    return datetime.now(UTC).isoformat()


class Receipt(BaseModel):
    """Outcome of one runtime operation.

    ``operation`` is the verb sent to the runtime (``up``, ``down``,
    ``ps``, ``logs``, ``network-create``, ``run``) and ``target`` what it
    acted on: a compose file path, a network name or an image.
    ``metadata`` carries runtime specifics such as the command line,
    the exit code, or the parsed ``services`` list of ``ps``.
    """

    adapter: str
    operation: str
    target: str = ""
    status: ReceiptStatus = "ok"

    started_at: str = Field(default_factory=_utc_now)
    ended_at: str = Field(default_factory=_utc_now)
    duration_ms: int = 0

    output: str = ""
    error: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    @property
    def skipped(self) -> bool:
        return self.status == "skipped"

    @property
    def command(self) -> str:
        """The command line that produced this receipt, if one ran."""
        return " ".join(self.metadata.get("command", []))

    @classmethod
    def success(cls, adapter: str, operation: str, output: str = "", **kwargs: Any) -> Receipt:
        return cls(adapter=adapter, operation=operation, output=output, **kwargs)

    @classmethod
    def failure(cls, adapter: str, operation: str, error: str, **kwargs: Any) -> Receipt:
        return cls(adapter=adapter, operation=operation, status="failed", error=error, **kwargs)

    @classmethod
    def skip(cls, adapter: str, operation: str, reason: str, **kwargs: Any) -> Receipt:
        """Nothing was run; ``reason`` says why."""
        return cls(adapter=adapter, operation=operation, status="skipped", output=reason, **kwargs)
