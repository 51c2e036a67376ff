"""
PhantomHash Report Generator
=============================

Writes :class:`ScanResult` objects (single audits or similarity scans) to
JSON or HTML. The HTML report is a single file with inline CSS; the JSON
report is the machine-readable form for CI pipelines.

Neither format ever contains the audited password: the scan target is
masked by the engine and the verdict metadata holds only derived values
(entropy, band, weakness kinds, matched corpus substrings).

References:
    - OWASP Cheat Sheet: Cross Site Scripting Prevention.
      https://cheatsheetseries.owasp.org/
"""

from __future__ import annotations

import html
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from shared.models import Finding, ScanResult

_PAGE = """\
<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<title>PhantomHash &middot; {title}</title>
<style>
  body {{ font: 15px/1.5 system-ui, sans-serif; margin: 0; background: #f6f7f9; color: #1f2328; }}
  main {{ max-width: 960px; margin: 2.5rem auto; padding: 0 1rem; }}
  header {{ border-bottom: 3px solid #0969da; padding-bottom: .75rem; margin-bottom: 1.5rem; }}
  header h1 {{ margin: 0; font-size: 1.6rem; }}
  header small {{ color: #59636e; }}
  dl {{ display: grid; grid-template-columns: max-content 1fr; gap: .25rem 1.25rem; }}
  dt {{ font-weight: 600; }}
  dd {{ margin: 0; }}
  article {{ background: #fff; border: 1px solid #d1d9e0; border-radius: 6px;
             padding: .75rem 1rem; margin: .75rem 0; }}
  article h3 {{ margin: 0 0 .25rem; font-size: 1rem; }}
  .badge {{ display: inline-block; min-width: 5.5em; text-align: center; color: #fff;
            border-radius: 3px; font-size: .75rem; margin-right: .5rem; }}
  .severity-critical .badge {{ background: #82071e; }}
  .severity-high .badge {{ background: #cf222e; }}
  .severity-medium .badge {{ background: #9a6700; }}
  .severity-low .badge {{ background: #0969da; }}
  .severity-info .badge {{ background: #59636e; }}
  code, pre {{ font: 13px ui-monospace, monospace; background: #eff2f5; }}
  pre {{ padding: .75rem; overflow-x: auto; }}
  footer {{ margin-top: 2rem; color: #59636e; font-size: .8rem; }}
</style>
</head>
<body>
<main>
<header>
  <h1>PhantomHash</h1>
  <small>{title} &middot; {timestamp}</small>
</header>
<h2>Overview</h2>
<p>{summary}</p>
<dl>
  <dt>Command</dt><dd>{tool}</dd>
  <dt>Target</dt><dd>{target}</dd>
  <dt>Findings</dt><dd>{finding_count}</dd>
  <dt>Duration</dt><dd>{duration}</dd>
</dl>
<h2>Findings</h2>
{findings}
{details}
<footer>PhantomHash {version}</footer>
</main>
</body>
</html>
"""


class PhantomHashReportGenerator:
    """Renders a :class:`ScanResult` as a JSON document or an HTML page.

    Usage::

        reports = PhantomHashReportGenerator(version="1.0.0")
        reports.generate_json(result, Path("output/audit.json"))
        reports.generate_html(result, Path("output/audit.html"))
    """

    def __init__(self, version: str = "1.0.0") -> None:
        self.version = version

    def build_json(self, result: ScanResult) -> dict[str, Any]:
        highest = result.highest_severity
        return {
            "report_metadata": {
                "generated_at": datetime.now(timezone.utc).isoformat(),
                "tool": result.tool_name,
                "target": result.target,
                "version": self.version,
            },
            "summary": {
                "total_findings": len(result.findings),
                "severity_counts": result.severity_counts,
                "highest_severity": highest.value if highest else None,
                "duration_seconds": result.duration_seconds,
                "description": result.summary,
            },
            "findings": [f.model_dump(mode="json") for f in result.findings],
            "metadata": result.metadata,
        }

    def generate_json(self, result: ScanResult, output_path: Path) -> Path:
        """Write :meth:`build_json` output to *output_path*."""
        document = json.dumps(self.build_json(result), indent=2, ensure_ascii=False, default=str)
        return _write(output_path, document)

    def generate_html(
        self,
        result: ScanResult,
        output_path: Path,
        title: Optional[str] = None,
    ) -> Path:
        """Write a standalone HTML page for *result*.

        Every interpolated value is escaped; the page loads no external
        resources.

        Args:
            result: Audit, similarity or statistics result.
            output_path: Destination; missing parent directories are created.
            title: Heading text, defaults to ``"Analysis of <target>"``.
        """
        seconds = result.duration_seconds
        page = _PAGE.format(
            title=html.escape(title or f"Analysis of {result.target}"),
            timestamp=datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC"),
            summary=html.escape(result.summary),
            tool=html.escape(result.tool_name),
            target=html.escape(result.target),
            finding_count=len(result.findings),
            duration="n/a" if seconds is None else f"{seconds:.3f} s",
            findings="\n".join(map(_finding_html, result.findings)) or "<p>No findings.</p>",
            details=_details_html(result.metadata),
            version=html.escape(self.version),
        )
        return _write(output_path, page)


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def _finding_html(finding: Finding) -> str:
    lines = [
        f'<article class="{finding.severity.css_class}">',
        f'<h3><span class="badge">{finding.severity.value}</span>'
        f"{html.escape(finding.title)}</h3>",
        f"<p>{html.escape(finding.description)}</p>",
    ]
    if finding.evidence:
        lines.append(f"<p>Evidence: <code>{html.escape(finding.evidence)}</code></p>")
    if finding.recommendation:
        lines.append(f"<p><em>{html.escape(finding.recommendation)}</em></p>")
    lines.append("</article>")
    return "\n".join(lines)


def _details_html(metadata: dict[str, Any]) -> str:
    if not metadata:
        return ""
    body = json.dumps(metadata, indent=2, ensure_ascii=False, default=str)
    return f"<h2>Details</h2>\n<pre>{html.escape(body)}</pre>"
