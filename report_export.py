"""Copy the rendered report to the clipboard."""

from __future__ import annotations

import logging

from models import ExportResult
from report_view import InspectionReport, render_text

logger = logging.getLogger(__name__)

try:
    import pyperclip
except Exception:  # pragma: no cover
    pyperclip = None  # type: ignore


class ClipboardReportExporter:
    def export(self, report: InspectionReport) -> ExportResult:
        if report.is_empty:
            return ExportResult(success=False, reason="report is empty")
        if pyperclip is None:
            return ExportResult(success=False, reason="clipboard dependency missing")

        try:
            pyperclip.copy(render_text(report))
        except Exception as exc:
            logger.warning("Copying report to clipboard failed: %s", exc)
            return ExportResult(success=False, reason=f"clipboard unavailable: {exc}")
        return ExportResult(success=True, reason="ok")
