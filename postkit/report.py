"""QC and validation reports rendered as text, JSON or HTML."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from enum import Enum
from pathlib import Path

_HTML_STYLE = (
    "<style>body{font-family:sans-serif;margin:2em}"
    "table{border-collapse:collapse;width:100%}"
    "th,td{border:1px solid #ccc;padding:8px;text-align:left}"
    ".error{color:#c00}.warning{color:#c80}.pass{color:#0a0}"
    "</style>"
)
_SEVERITY_CLASSES = {"error": "error", "warning": "warning"}


class ReportFormat(Enum):
    """Report output format."""

    TEXT = "Text"
    JSON = "Json"
    HTML = "Html"


@dataclass
class ReportEntry:
    """A single finding or metric in a report."""

    severity: str
    category: str
    message: str
    details: str = ""


@dataclass
class Report:
    """A QC or validation report."""

    title: str = ""
    timestamp: str = ""
    summary: str = ""
    entries: list[ReportEntry] = field(default_factory=list)
    pass_count: int = 0
    warning_count: int = 0
    error_count: int = 0

    def render(self, fmt: ReportFormat) -> str:
        """Render the report in the given format."""
        if fmt is ReportFormat.JSON:
            return self._render_json()
        if fmt is ReportFormat.HTML:
            return self._render_html()
        return self._render_text()

    def write_to_file(self, path: Path, fmt: ReportFormat) -> None:
        """Render the report and write it to ``path``."""
        Path(path).write_text(self.render(fmt), encoding="utf-8")

    def _render_text(self) -> str:
        lines = [
            f"=== {self.title} ===",
            f"Date: {self.timestamp}",
            f"Summary: {self.pass_count} pass, {self.warning_count} warnings, "
            f"{self.error_count} errors",
            "",
        ]
        for entry in self.entries:
            lines.append(f"[{entry.severity}] {entry.category}: {entry.message}")
            if entry.details:
                lines.append(f"  {entry.details}")
        return "".join(f"{line}\n" for line in lines)

    def _render_json(self) -> str:
        return json.dumps(asdict(self), indent=2, ensure_ascii=False)

    def _render_html(self) -> str:
        parts = [
            "<!DOCTYPE html><html><head><meta charset='utf-8'>",
            f"<title>{self.title}</title>",
            _HTML_STYLE,
            "</head><body>",
            f"<h1>{self.title}</h1>",
            f"<p>Date: {self.timestamp}</p>",
            f"<p><span class='pass'>{self.pass_count} pass</span> | "
            f"<span class='warning'>{self.warning_count} warnings</span> | "
            f"<span class='error'>{self.error_count} errors</span></p>",
            "<table><tr><th>Severity</th><th>Category</th><th>Message</th>"
            "<th>Details</th></tr>",
        ]
        for entry in self.entries:
            css = _SEVERITY_CLASSES.get(entry.severity.lower(), "pass")
            parts.append(
                f"<tr><td class='{css}'>{entry.severity}</td><td>{entry.category}</td>"
                f"<td>{entry.message}</td><td>{entry.details}</td></tr>"
            )
        parts.append("</table></body></html>")
        return "".join(parts)