from __future__ import annotations
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Tuple

from . import findings as emit
from .aggregator import WorkspaceRiskAggregator, WorkspaceRiskContext
from .classifier import WORKSPACE_KINDS, classify
from .config import Config
from .signals import Finding, ScanResult, SignalKind, SourceLine
from .spans import SpanTracker
from .utils import discover_files, iter_lines

logger = logging.getLogger(__name__)


def is_cancelled(cancel: Any) -> bool:
    return cancel is not None and cancel.is_set()


@dataclass
class FileScan:
    path: str
    findings: List[Finding] = field(default_factory=list)
    context: WorkspaceRiskContext = field(default_factory=WorkspaceRiskContext)
    skipped: bool = False
    cancelled: bool = False


def scan_file(path: str, language: Optional[str], cancel: Any = None,
              context: Optional[WorkspaceRiskContext] = None) -> FileScan:
    """Scan one file, feeding workspace signals into ``context``.

    Per-line findings (RISK-001, RISK-002) and span findings (RISK-005) are
    returned in the order they are produced.
    """
    result = FileScan(path=path, context=context if context is not None else WorkspaceRiskContext())
    tracker = SpanTracker(path)
    out = result.findings
    lines_read = 0

    try:
        for line_no, text in iter_lines(path):
            lines_read += 1
            if is_cancelled(cancel):
                result.cancelled = True
                return result
            if text is None:
                continue

            line = SourceLine(path, line_no, text, language)
            hits = classify(line)
            for hit in hits:
                if hit.kind is SignalKind.SECURITY_DEBT:
                    out.append(emit.security_debt(hit))
                elif hit.kind is SignalKind.DEPRECATED_API:
                    out.append(emit.deprecated_api(hit))
                elif hit.kind in WORKSPACE_KINDS:
                    result.context.observe(hit)
            out.extend(tracker.feed(line, hits))
    except OSError as e:
        if lines_read == 0:
            logger.debug("Skipping unreadable file %s: %s", path, e)
            result.skipped = True
            return result
        logger.debug("Read error in %s after %d lines: %s", path, lines_read, e)

    out.extend(tracker.finish())
    return result


def scan_files(files: Iterable[Tuple[str, Optional[str]]], cancel: Any = None,
               workers: int = 1, repo_root: str = "") -> ScanResult:
    """Scan ``(path, language)`` pairs and append workspace findings at the end.

    Results are merged in input order, so ``workers`` never changes the output.
    On cancellation the result is marked incomplete and carries no workspace
    findings.
    """
    files = list(files)
    result = ScanResult(repo_root=repo_root)
    aggregator = WorkspaceRiskAggregator()

    def scan_or_cancel(entry: Tuple[str, Optional[str]]) -> FileScan:
        if is_cancelled(cancel):
            return FileScan(path=entry[0], cancelled=True)
        return scan_file(entry[0], entry[1], cancel)

    if workers > 1 and len(files) > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            scans = list(pool.map(scan_or_cancel, files))
    else:
        scans = []
        for path, language in files:
            if is_cancelled(cancel):
                break
            scans.append(scan_file(path, language, cancel))

    cancelled = len(scans) < len(files)
    for fs in scans:
        if fs.cancelled:
            cancelled = True
        if fs.skipped:
            result.files_skipped += 1
            continue
        if not fs.cancelled:
            result.files_scanned += 1
        result.findings.extend(fs.findings)
        aggregator.merge(fs.context)

    if cancelled:
        logger.info("Scan cancelled after %d files; workspace findings withheld", result.files_scanned)
        result.complete = False
        return result

    result.findings.extend(aggregator.conclude())
    return result


def scan_repo(repo_root: str, cfg: Config, cancel: Any = None, workers: Optional[int] = None) -> ScanResult:
    files = discover_files(repo_root, cfg)
    n = workers if workers is not None else cfg.workers
    logger.info("Scanning %d files under %s", len(files), repo_root)
    result = scan_files(files, cancel=cancel, workers=n, repo_root=repo_root)
    logger.info("Scan finished: %d findings", len(result.findings))
    return result
