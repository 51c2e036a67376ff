"""
PhantomHash Shared Data Models
===============================

Result envelope shared by the engine, the console and the report writers.
An audit, a similarity scan or a statistics run each end up as one
:class:`ScanResult`; its :class:`Finding` list is what the JSON and HTML
reports render. Findings describe a password by its masked form only.

References:
    - SARIF v2.1.0 Specification (OASIS, 2020).
    - Pydantic v2 documentation. https://docs.pydantic.dev/latest/
"""

from __future__ import annotations

import json
from collections import Counter
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Severity(str, Enum):
    """How bad a finding is, most severe first.

    CRITICAL marks a verbatim breach match; HIGH a whole-word match or a
    very weak password; MEDIUM frequent substrings and structural gaps.
    """

    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"
    INFO = "INFO"

    @property
    def rank(self) -> int:
        """0 for CRITICAL up to 4 for INFO."""
        return _SEVERITY_ORDER.index(self)

    @property
    def css_class(self) -> str:
        return "severity-" + self.value.lower()


_SEVERITY_ORDER: tuple[Severity, ...] = tuple(Severity)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Finding(BaseModel):
    """One reportable observation.

    ``evidence`` accepts structured data and stores it as a JSON string so
    every report format can print it verbatim.
    """

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    severity: Severity
    title: str = Field(min_length=1, max_length=256)
    description: str = Field(min_length=1)
    evidence: str = ""
    recommendation: str = ""

    @field_validator("evidence", mode="before")
    @classmethod
    def _evidence_as_text(cls, value: Any) -> str:
        if isinstance(value, (dict, list, tuple)):
            return json.dumps(value, ensure_ascii=False, default=str)
        return value if isinstance(value, str) else str(value)


class ScanResult(BaseModel):
    """Findings plus timing and a free-form metadata payload.

    ``metadata`` holds the serialised domain model behind the findings
    (a ``Verdict``, ``SimilarityReport`` or ``CorpusStats`` dump).
    """

    model_config = ConfigDict(validate_assignment=True, extra="ignore")

    tool_name: str = Field(min_length=1)
    target: str = Field(min_length=1)
    start_time: datetime = Field(default_factory=_now)
    end_time: Optional[datetime] = None
    findings: list[Finding] = Field(default_factory=list)
    summary: str = ""
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.end_time is None:
            return None
        return (self.end_time - self.start_time).total_seconds()

    @property
    def severity_counts(self) -> dict[str, int]:
        """Per-severity tally, every level present (zero included)."""
        tally = Counter(f.severity for f in self.findings)
        return {level.value: tally[level] for level in Severity}

    @property
    def highest_severity(self) -> Optional[Severity]:
        ranked = sorted((f.severity for f in self.findings), key=lambda s: s.rank)
        return ranked[0] if ranked else None

    def add_finding(self, finding: Finding) -> None:
        self.findings.append(finding)

    def finalize(self, summary: Optional[str] = None) -> ScanResult:
        """Stamp ``end_time`` and set the summary; returns ``self``.

        Without an explicit *summary* one is derived from the severity
        tally, e.g. ``"Analysis complete. Findings: 2 (HIGH: 1, LOW: 1)"``.
        """
        self.end_time = _now()
        if summary is None:
            nonzero = [f"{k}: {v}" for k, v in self.severity_counts.items() if v]
            summary = (
                f"Analysis complete. Findings: {len(self.findings)} "
                f"({', '.join(nonzero) or 'none'})"
            )
        self.summary = summary
        return self
