from __future__ import annotations
import logging, os
from jinja2 import Environment, FileSystemLoader, select_autoescape

from .patterns import RULES
from .signals import ScanResult

logger = logging.getLogger(__name__)


def render_text(result: ScanResult) -> str:
    lines = []
    for f in result.findings:
        lines.append(
            f"[{f.rule_id}] {f.severity.value.upper():<6} {f.path}:{f.start_line} "
            f"({f.meta('risk_type')}) {f.message}"
        )
    s = result.summary()
    status = "complete" if result.complete else "INCOMPLETE (cancelled)"
    lines.append(
        f"{s['count']} findings in {s['files_scanned']} files "
        f"({s['files_skipped']} skipped), scan {status}"
    )
    return "\n".join(lines)


def markdown_report(result: ScanResult) -> str:
    tmpl_dir = os.path.join(os.path.dirname(__file__), "templates")
    env = Environment(loader=FileSystemLoader(tmpl_dir), autoescape=select_autoescape())
    tmpl = env.get_template("report.md.j2")
    return tmpl.render(
        repo_root=result.repo_root,
        summary=result.summary(),
        findings=[f.to_dict() for f in result.findings],
        rules=RULES,
    )


def render_markdown(result: ScanResult, repo_root: str) -> str:
    path = os.path.join(repo_root, "RISK_REGISTER.md")
    with open(path, "w", encoding="utf-8") as f:
        f.write(markdown_report(result))
    logger.info("Wrote %s", path)
    return path
