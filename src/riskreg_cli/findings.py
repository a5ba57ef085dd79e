"""Builders that turn hits, spans and workspace conclusions into findings."""
from __future__ import annotations

from .patterns import RULES
from .signals import Finding, FunctionSpan, SignalHit


def _finding(rule_id: str, message: str, path: str, start: int, end: int, *meta) -> Finding:
    rule = RULES[rule_id]
    return Finding(
        rule_id=rule_id,
        severity=rule.severity,
        confidence=rule.confidence,
        message=message,
        path=path,
        start_line=start,
        end_line=end,
        metadata=tuple(meta),
    )


def security_debt(hit: SignalHit) -> Finding:
    ln = hit.line
    return _finding(
        "RISK-001",
        f"Security-related technical debt: {ln.text.strip()}",
        ln.path, ln.number, ln.number,
        ("risk_type", "tech_debt"),
    )


def deprecated_api(hit: SignalHit) -> Finding:
    ln = hit.line
    return _finding(
        "RISK-002",
        f"Deprecated API usage detected ({hit.detail}): {ln.text.strip()}",
        ln.path, ln.number, ln.number,
        ("risk_type", "deprecated_api"),
        ("language", ln.language or ""),
    )


def long_function(span: FunctionSpan) -> Finding:
    return _finding(
        "RISK-005",
        f"Long function detected ({span.line_count} lines): increases maintenance risk",
        span.path, span.start_line, span.start_line + span.line_count,
        ("risk_type", "complexity"),
        ("line_count", str(span.line_count)),
    )


def deep_nesting(span: FunctionSpan, end_line: int) -> Finding:
    return _finding(
        "RISK-005",
        f"Deeply nested conditional logic (depth {span.max_nesting}): increases cognitive complexity",
        span.path, span.start_line, end_line,
        ("risk_type", "nesting_depth"),
        ("max_depth", str(span.max_nesting)),
    )


def single_point_of_failure(path: str, line: int) -> Finding:
    return _finding(
        "RISK-003",
        "Single point of failure: database connection without pooling or fallback mechanism",
        path, line, line,
        ("risk_type", "single_point_of_failure"),
        ("resource", "database"),
    )


def missing_recovery(path: str, line: int) -> Finding:
    return _finding(
        "RISK-004",
        "External service calls detected without retry or circuit breaker mechanism",
        path, line, line,
        ("risk_type", "missing_recovery"),
    )
