# Copyright (c) Syntropy Systems
"""Pydantic models for published experiment results."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, computed_field

from crosscheck.errors import Operation

from .base import CrosscheckBaseModel


class ObservationRecord(CrosscheckBaseModel):
    """One behavior's outcome, with the value rendered for display."""

    name: str
    started_at: datetime
    duration_seconds: float
    value: str | None = None
    error: str | None = None
    error_type: str | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def failed(self) -> bool:
        """Whether the behavior raised."""
        return self.error_type is not None


class OperationErrorRecord(CrosscheckBaseModel):
    """A non-fatal operation failure recorded during a run."""

    operation: Operation
    experiment: str
    message: str
    error_type: str


class ResultRecord(CrosscheckBaseModel):
    """Summary of one experiment run."""

    experiment: str
    control: ObservationRecord
    candidates: list[ObservationRecord] = Field(default_factory=list)
    ignored: list[str] = Field(default_factory=list)
    mismatched: list[str] = Field(default_factory=list)
    errors: list[OperationErrorRecord] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def matched(self) -> bool:
        """Whether every candidate matched the control."""
        return not self.ignored and not self.mismatched

    @computed_field  # type: ignore[prop-decorator]
    @property
    def mismatched_count(self) -> int:
        """Number of mismatched candidates."""
        return len(self.mismatched)

    def candidate(self, name: str) -> ObservationRecord | None:
        """Get a candidate record by behavior name."""
        for record in self.candidates:
            if record.name == name:
                return record
        return None
