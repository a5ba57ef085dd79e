from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, Optional, List, Tuple


class Severity(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    @property
    def rank(self) -> int:
        return {"High": 3, "Medium": 2, "Low": 1}[self.value]


class Confidence(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class SignalKind(str, Enum):
    SECURITY_DEBT = "security_debt"
    DEPRECATED_API = "deprecated_api"
    DB_CONNECTION = "db_connection"
    POOLING = "pooling"
    FALLBACK = "fallback"
    EXTERNAL_CALL = "external_call"
    RETRY_MECHANISM = "retry_mechanism"
    FUNCTION_START = "function_start"
    NESTED_CONDITIONAL = "nested_conditional"


@dataclass(frozen=True)
class SourceLine:
    path: str
    number: int  # 1-based
    text: str
    language: Optional[str] = None


@dataclass(frozen=True)
class SignalHit:
    kind: SignalKind
    line: SourceLine
    detail: Optional[str] = None


@dataclass
class FunctionSpan:
    path: str
    start_line: int
    line_count: int = 0
    current_nesting: int = 0
    max_nesting: int = 0


@dataclass(frozen=True)
class Finding:
    rule_id: str
    severity: Severity
    confidence: Confidence
    message: str
    path: str
    start_line: int
    end_line: int
    metadata: Tuple[Tuple[str, str], ...] = ()

    def meta(self, key: str) -> Optional[str]:
        for k, v in self.metadata:
            if k == key:
                return v
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rule_id": self.rule_id,
            "severity": self.severity.value,
            "confidence": self.confidence.value,
            "message": self.message,
            "location": {"path": self.path, "start_line": self.start_line, "end_line": self.end_line},
            "metadata": dict(self.metadata),
        }


@dataclass
class ScanResult:
    repo_root: str
    findings: List[Finding] = field(default_factory=list)
    complete: bool = True
    files_scanned: int = 0
    files_skipped: int = 0

    def summary(self) -> Dict[str, Any]:
        by_rule: Dict[str, int] = {}
        by_severity: Dict[str, int] = {s.value: 0 for s in Severity}
        for f in self.findings:
            by_rule[f.rule_id] = by_rule.get(f.rule_id, 0) + 1
            by_severity[f.severity.value] += 1
        return {
            "count": len(self.findings),
            "by_rule": dict(sorted(by_rule.items())),
            "by_severity": by_severity,
            "files_scanned": self.files_scanned,
            "files_skipped": self.files_skipped,
            "complete": self.complete,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "repo_root": self.repo_root,
            "summary": self.summary(),
            "findings": [f.to_dict() for f in self.findings],
        }
