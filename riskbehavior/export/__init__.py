"""
Analysis output export.

Provides:
- JSON export (the full AnalysisOutput document)
- CSV export of the behavior-score ranking
"""

from riskbehavior.export.exporter import (
    AnalysisExporter,
    ExportFormat,
    export_csv,
    export_filename,
    export_json,
    write_export,
)

__all__ = [
    "AnalysisExporter",
    "ExportFormat",
    "export_csv",
    "export_filename",
    "export_json",
    "write_export",
]
