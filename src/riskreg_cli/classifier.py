from __future__ import annotations
from typing import List

from . import patterns
from .signals import SignalHit, SignalKind, SourceLine

# Order of hits within one line; downstream consumers do not depend on it
_WORKSPACE_SIGNALS = [
    (SignalKind.DB_CONNECTION, patterns.DB_CONNECTION),
    (SignalKind.POOLING, patterns.POOLING),
    (SignalKind.FALLBACK, patterns.FALLBACK),
    (SignalKind.EXTERNAL_CALL, patterns.EXTERNAL_CALL),
    (SignalKind.RETRY_MECHANISM, patterns.RETRY_MECHANISM),
]

WORKSPACE_KINDS = frozenset(kind for kind, _ in _WORKSPACE_SIGNALS)


def classify(line: SourceLine) -> List[SignalHit]:
    text = line.text
    hits: List[SignalHit] = []

    if patterns.is_security_debt(text):
        hits.append(SignalHit(SignalKind.SECURITY_DEBT, line))

    family = patterns.deprecated_family(text, line.language)
    if family:
        hits.append(SignalHit(SignalKind.DEPRECATED_API, line, family))

    for kind, pat in _WORKSPACE_SIGNALS:
        if patterns.matches(pat, text):
            hits.append(SignalHit(kind, line))

    if patterns.matches(patterns.FUNCTION_START, text):
        hits.append(SignalHit(SignalKind.FUNCTION_START, line))
    if patterns.matches(patterns.NESTED_CONDITIONAL, text):
        hits.append(SignalHit(SignalKind.NESTED_CONDITIONAL, line))

    return hits
