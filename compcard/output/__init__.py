"""Output module for exporting ranked board applications."""

from compcard.output.export import (
    export_csv,
    export_json,
    export_results,
)

__all__ = [
    "export_csv",
    "export_json",
    "export_results",
]
