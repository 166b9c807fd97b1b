"""
JSON and CSV export of analysis output.

The JSON document is AnalysisOutput.to_dict() pretty-printed with a 2-space
indent, the same shape consumers of the analysis already read. The CSV is
one row per risk in behavior-score order.
"""

import csv
import io
import json
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Union

import structlog

from riskbehavior.exceptions import ExportError
from riskbehavior.schemas.outputs import AnalysisOutput, RiskAnalysis

logger = structlog.get_logger(__name__)

FILENAME_PREFIX: str = "risk-analysis"


class ExportFormat(str, Enum):
    """Supported export formats."""

    JSON = "json"
    CSV = "csv"
    EXCEL_CSV = "excel_csv"  # CSV with BOM for Excel


class AnalysisExporter:
    """Serialise an AnalysisOutput to JSON or CSV."""

    CSV_FIELDNAMES = [
        "rank",
        "riskId",
        "title",
        "behaviorScore",
        "expectedTimeImpact",
        "expectedCostImpact",
        "addedDays",
        "addedCost",
        "propagatedProbability",
        "dependencyCentrality",
        "scopeChangeRatio",
    ]

    def __init__(self, delimiter: str = ",", indent: int = 2):
        self._delimiter = delimiter
        self._indent = indent

    def to_json(self, output: AnalysisOutput) -> str:
        return json.dumps(output.to_dict(), indent=self._indent)

    def to_csv(self, output: AnalysisOutput, include_bom: bool = False) -> str:
        buffer = io.StringIO()
        if include_bom:
            buffer.write("\ufeff")  # UTF-8 BOM
        writer = csv.DictWriter(
            buffer,
            fieldnames=self.CSV_FIELDNAMES,
            delimiter=self._delimiter,
            extrasaction="ignore",
            lineterminator="\n",
        )
        writer.writeheader()
        for rank, analysis in enumerate(output.top_risks_by_behavior_score, start=1):
            writer.writerow(self._row(rank, analysis))
        return buffer.getvalue()

    def render(self, output: AnalysisOutput, fmt: Union[ExportFormat, str]) -> str:
        try:
            fmt = ExportFormat(fmt)
        except ValueError:
            raise ExportError(f"Unsupported export format: {fmt}", export_format=str(fmt)) from None

        if fmt == ExportFormat.JSON:
            return self.to_json(output)
        return self.to_csv(output, include_bom=fmt == ExportFormat.EXCEL_CSV)

    def _row(self, rank: int, analysis: RiskAnalysis) -> dict[str, Any]:
        data = analysis.to_dict()
        row = {name: data.get(name) for name in self.CSV_FIELDNAMES}
        row["rank"] = rank
        return row


def export_filename(
    on: Optional[Union[date, datetime]] = None,
    fmt: Union[ExportFormat, str] = ExportFormat.JSON,
) -> str:
    """risk-analysis-YYYY-MM-DD.json (or .csv)."""
    on = on or date.today()
    day = on.date() if isinstance(on, datetime) else on
    extension = "json" if ExportFormat(fmt) == ExportFormat.JSON else "csv"
    return f"{FILENAME_PREFIX}-{day.isoformat()}.{extension}"


def export_json(output: AnalysisOutput) -> str:
    return AnalysisExporter().to_json(output)


def export_csv(output: AnalysisOutput) -> str:
    return AnalysisExporter().to_csv(output)


def write_export(
    output: AnalysisOutput,
    directory: Union[str, Path],
    fmt: Union[ExportFormat, str] = ExportFormat.JSON,
    on: Optional[Union[date, datetime]] = None,
) -> Path:
    """Write the export into directory and return the file path."""
    content = AnalysisExporter().render(output, fmt)
    path = Path(directory) / export_filename(on, fmt)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")

    logger.info(
        "analysis_exported",
        path=str(path),
        format=ExportFormat(fmt).value,
        n_risks=len(output.per_risk_analysis),
    )
    return path
