"""Pydantic models for conversion results and run summaries."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, Field


def _utc_now() -> str:
    """Return current UTC timestamp as ISO string."""
    return datetime.now(timezone.utc).isoformat()


class ConversionResult(BaseModel):
    """Outcome of producing one derived image from one source file."""

    filename: str = Field(..., description="Source filename, e.g. ring-01.jpg")
    kind: Literal["optimized", "thumbnail"]
    status: Literal["converted", "skipped", "failed"]
    output_path: Optional[str] = None
    width: Optional[int] = Field(default=None, ge=1)
    height: Optional[int] = Field(default=None, ge=1)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        """True unless the conversion failed."""
        return self.status != "failed"


class RunSummary(BaseModel):
    """Totals for one pass over the source directory."""

    started_at: str = Field(default_factory=_utc_now)
    candidates: int = Field(default=0, ge=0)
    processed: int = Field(default=0, ge=0, description="Untracked files attempted")
    optimized: int = Field(default=0, ge=0)
    thumbnails: int = Field(default=0, ge=0)
    failures: list[ConversionResult] = Field(default_factory=list)
    tracker_size: int = Field(default=0, ge=0)
    dry_run: bool = False
