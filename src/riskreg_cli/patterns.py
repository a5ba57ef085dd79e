from __future__ import annotations
import re
from dataclasses import dataclass
from typing import Dict, List, Pattern, Tuple

from .signals import Severity, Confidence


@dataclass(frozen=True)
class Rule:
    rule_id: str
    severity: Severity
    confidence: Confidence
    title: str


RULES: Dict[str, Rule] = {
    "RISK-001": Rule("RISK-001", Severity.HIGH, Confidence.MEDIUM, "Security-related technical debt marker"),
    "RISK-002": Rule("RISK-002", Severity.MEDIUM, Confidence.HIGH, "Deprecated API usage"),
    "RISK-003": Rule("RISK-003", Severity.HIGH, Confidence.HIGH, "Database single point of failure"),
    "RISK-004": Rule("RISK-004", Severity.MEDIUM, Confidence.MEDIUM, "External calls without error recovery"),
    "RISK-005": Rule("RISK-005", Severity.LOW, Confidence.HIGH, "Code complexity hotspot"),
}

# Security debt is a TODO/FIXME/HACK/XXX marker followed anywhere later on the
# line by security vocabulary, searched from the end of the earliest marker.
DEBT_MARKER = re.compile(r"(TODO|FIXME|HACK|XXX)", re.I)
SECURITY_VOCABULARY = re.compile(
    r"(security|auth|crypt|password|secret|token|vulnerab|inject|xss|csrf|sanitiz|escap|privilege|permiss)",
    re.I,
)

DEPRECATED_GO = re.compile(
    r"(ioutil\.|x509\.ParseCRL|http\.ListenAndServeTLS\(|md5\.New\(\)|sha1\.New\(\)|des\.NewCipher)", re.I
)
DEPRECATED_PY = re.compile(
    r"(import\s+md5|import\s+sha\b|from\s+sha\s+import|\.has_key\(|print\s+[^(]|raw_input|execfile|reload\()", re.I
)
DEPRECATED_JS = re.compile(r"(document\.write\(|escape\(|unescape\(|__proto__|Object\.observe|\.substr\()", re.I)

# Language tag (file extension) -> ordered (family, pattern) pairs
DEPRECATED_BY_LANGUAGE: Dict[str, List[Tuple[str, Pattern[str]]]] = {
    ".go": [("Go deprecated API", DEPRECATED_GO)],
    ".py": [("Python deprecated pattern", DEPRECATED_PY)],
    ".js": [("JavaScript deprecated API", DEPRECATED_JS)],
    ".ts": [("JavaScript deprecated API", DEPRECATED_JS)],
    ".jsx": [("JavaScript deprecated API", DEPRECATED_JS)],
    ".tsx": [("JavaScript deprecated API", DEPRECATED_JS)],
}

DB_CONNECTION = re.compile(r"(sql\.Open\(|connect\(|createConnection\(|MongoClient\()", re.I)
POOLING = re.compile(r"(SetMaxOpenConns|pool|createPool|ConnectionPool|pool_size)", re.I)
FALLBACK = re.compile(r"(fallback|failover|replica|secondary|backup|standby|redundan)", re.I)

EXTERNAL_CALL = re.compile(
    r"(http\.Get|http\.Post|http\.Do|requests\.(get|post|put|delete)|fetch\(|axios\.|grpc\.|\.Dial\(|\.Connect\()",
    re.I,
)
RETRY_MECHANISM = re.compile(
    r"(retry|backoff|circuit.?breaker|resilience|polly|tenacity|retrying|go-retryablehttp"
    r"|hashicorp/go-retryablehttp|sony/gobreaker|afex/hystrix)",
    re.I,
)

# Case-sensitive: keywords only, after at least one column of indentation
NESTED_CONDITIONAL = re.compile(r"^(\s+)(if\s|for\s|while\s|switch\s|case\s|select\s)")
FUNCTION_START = re.compile(
    r"^(func\s|def\s|function\s|const\s+\w+\s*=\s*\("
    r"|\s*(public|private|protected)\s+(static\s+)?[\w<>\[\]]+\s+\w+\s*\()",
    re.I,
)


def matches(pattern: Pattern[str], text: str) -> bool:
    return pattern.search(text) is not None


def is_security_debt(text: str) -> bool:
    m = DEBT_MARKER.search(text)
    return m is not None and SECURITY_VOCABULARY.search(text, m.end()) is not None


def deprecated_family(text: str, language: str | None) -> str | None:
    """Return the deprecated-API family matched by ``text`` for ``language``, if any."""
    for family, pat in DEPRECATED_BY_LANGUAGE.get(language or "", []):
        if pat.search(text):
            return family
    return None
