"""Workspace-wide signals for cross-file findings (RISK-003, RISK-004)."""
from __future__ import annotations
import threading
from dataclasses import dataclass, field
from typing import List, Optional

from . import findings
from .signals import Finding, SignalHit, SignalKind


@dataclass
class WorkspaceRiskContext:
    """Monotonic flags plus the location of the first DB and external-call hits."""

    has_db_connection: bool = False
    has_pooling: bool = False
    has_fallback: bool = False
    has_external_calls: bool = False
    has_retry_mechanism: bool = False
    db_path: Optional[str] = None
    db_line: int = 0
    external_call_path: Optional[str] = None
    external_call_line: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def observe(self, hit: SignalHit) -> None:
        kind = hit.kind
        with self._lock:
            if kind is SignalKind.DB_CONNECTION:
                self._first_db(hit.line.path, hit.line.number)
            elif kind is SignalKind.POOLING:
                self.has_pooling = True
            elif kind is SignalKind.FALLBACK:
                self.has_fallback = True
            elif kind is SignalKind.EXTERNAL_CALL:
                self._first_external(hit.line.path, hit.line.number)
            elif kind is SignalKind.RETRY_MECHANISM:
                self.has_retry_mechanism = True

    def merge(self, other: "WorkspaceRiskContext") -> None:
        """Fold a context observed later in file order into this one."""
        with self._lock:
            if other.has_db_connection:
                self._first_db(other.db_path, other.db_line)
            if other.has_external_calls:
                self._first_external(other.external_call_path, other.external_call_line)
            self.has_pooling = self.has_pooling or other.has_pooling
            self.has_fallback = self.has_fallback or other.has_fallback
            self.has_retry_mechanism = self.has_retry_mechanism or other.has_retry_mechanism

    def _first_db(self, path, line) -> None:
        if not self.has_db_connection:
            self.has_db_connection = True
            self.db_path, self.db_line = path, line

    def _first_external(self, path, line) -> None:
        if not self.has_external_calls:
            self.has_external_calls = True
            self.external_call_path, self.external_call_line = path, line


class WorkspaceRiskAggregator:
    def __init__(self, context: Optional[WorkspaceRiskContext] = None):
        self.context = context if context is not None else WorkspaceRiskContext()
        self._concluded = False

    def observe(self, hit: SignalHit) -> None:
        self.context.observe(hit)

    def merge(self, other: WorkspaceRiskContext) -> None:
        self.context.merge(other)

    def conclude(self) -> List[Finding]:
        if self._concluded:
            raise RuntimeError("workspace risks already concluded for this scan")
        self._concluded = True

        rc = self.context
        out: List[Finding] = []
        if rc.has_db_connection and not rc.has_pooling and not rc.has_fallback:
            out.append(findings.single_point_of_failure(rc.db_path, rc.db_line))
        if rc.has_external_calls and not rc.has_retry_mechanism:
            out.append(findings.missing_recovery(rc.external_call_path, rc.external_call_line))
        return out
