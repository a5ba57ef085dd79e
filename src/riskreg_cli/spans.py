"""Per-file function span tracking for long-function and deep-nesting findings.

The tracker holds at most one open span. A function-start line closes the
previous span and opens a new one; end-of-file closes whatever is open.
Nesting depth is approximated from indentation (a tab counts as four columns,
four columns make one level).
"""
from __future__ import annotations
from enum import Enum
from typing import Iterable, List, Optional

from . import findings
from .signals import Finding, FunctionSpan, SignalHit, SignalKind, SourceLine

MAX_FUNCTION_LINES = 50
MAX_NESTING = 4
INDENT_WIDTH = 4
CLOSING_MARKERS = ("}", "end", "")


class SpanState(str, Enum):
    NO_OPEN_SPAN = "no_open_span"
    SPAN_OPEN = "span_open"


def indent_depth(text: str) -> int:
    indent = len(text) - len(text.lstrip(" \t"))
    tabs = text[:indent].count("\t")
    return (tabs * INDENT_WIDTH + (indent - tabs)) // INDENT_WIDTH


def is_closing_marker(text: str) -> bool:
    return text.strip() in CLOSING_MARKERS


class SpanTracker:
    def __init__(self, path: str):
        self.path = path
        self.span: Optional[FunctionSpan] = None

    @property
    def state(self) -> SpanState:
        return SpanState.SPAN_OPEN if self.span is not None else SpanState.NO_OPEN_SPAN

    def feed(self, line: SourceLine, hits: Iterable[SignalHit]) -> List[Finding]:
        kinds = {h.kind for h in hits}
        out: List[Finding] = []

        if SignalKind.FUNCTION_START in kinds:
            out.extend(self._close())
            self.span = FunctionSpan(path=self.path, start_line=line.number)

        span = self.span
        if span is None:
            return out

        # The header line counts towards the span
        span.line_count += 1

        if SignalKind.NESTED_CONDITIONAL in kinds:
            depth = indent_depth(line.text)
            if depth > span.current_nesting:
                span.current_nesting = depth
            if span.current_nesting > span.max_nesting:
                span.max_nesting = span.current_nesting

        if span.max_nesting >= MAX_NESTING and is_closing_marker(line.text):
            out.append(findings.deep_nesting(span, line.number))
            span.max_nesting = 0

        return out

    def finish(self) -> List[Finding]:
        return self._close()

    def _close(self) -> List[Finding]:
        span, self.span = self.span, None
        if span is not None and span.line_count > MAX_FUNCTION_LINES:
            return [findings.long_function(span)]
        return []
