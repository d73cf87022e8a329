"""Export functions for ranked board applications."""

import csv
import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from compcard.matching.scorer import ranking_key


def _ranked(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return sorted(
        rows,
        key=lambda r: ranking_key(
            r.get("match_score"), r.get("created_at"), r.get("application_id", "")
        ),
    )


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def export_json(
    rows: List[Dict[str, Any]],
    filepath: str,
    board_name: Optional[str] = None,
) -> None:
    """Export a board's ranked applications to JSON format.

    Args:
        rows: Application dictionaries as returned by board_rankings()
        filepath: Path to write JSON file
        board_name: Optional board name for the header

    Raises:
        IOError: If file cannot be written
    """
    ranked = _ranked(rows)
    scored_count = sum(1 for r in ranked if r.get("match_score") is not None)

    export_data = {
        "exported_at": datetime.now().isoformat(),
        "board": board_name,
        "total_applications": len(ranked),
        "scored_count": scored_count,
        "applications": [
            {
                "rank": i,
                "application_id": r.get("application_id"),
                "profile_id": r.get("profile_id"),
                "profile_name": r.get("profile_name"),
                "match_score": r.get("match_score"),
                "eligible": r.get("eligible"),
                "stale": r.get("stale", False),
                "applied_at": _isoformat(r.get("created_at")),
                "match_details": r.get("match_details"),
            }
            for i, r in enumerate(ranked, 1)
        ],
    }

    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        json.dump(export_data, f, indent=2, ensure_ascii=False)


def export_csv(
    rows: List[Dict[str, Any]],
    filepath: str,
) -> None:
    """Export a board's ranked applications to CSV format.

    Args:
        rows: Application dictionaries as returned by board_rankings()
        filepath: Path to write CSV file

    Raises:
        IOError: If file cannot be written
    """
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)

    fieldnames = [
        "rank",
        "application_id",
        "profile_name",
        "match_score",
        "eligible",
        "stale",
        "applied_at",
    ]

    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()

        for i, row in enumerate(_ranked(rows), 1):
            score = row.get("match_score")
            eligible = row.get("eligible")

            writer.writerow({
                "rank": i,
                "application_id": row.get("application_id", ""),
                "profile_name": row.get("profile_name") or "",
                "match_score": "" if score is None else score,
                "eligible": "" if eligible is None else ("Yes" if eligible else "No"),
                "stale": "Yes" if row.get("stale") else "No",
                "applied_at": _isoformat(row.get("created_at")) or "",
            })


def export_results(
    rows: List[Dict[str, Any]],
    filepath: str,
    board_name: Optional[str] = None,
) -> None:
    """Export ranked applications with format auto-detection from file extension.

    Args:
        rows: Application dictionaries as returned by board_rankings()
        filepath: Path to write file (extension determines format)
        board_name: Optional board name for the JSON header

    Raises:
        ValueError: If file extension is not recognized
        IOError: If file cannot be written
    """
    extension = Path(filepath).suffix.lower()

    if extension == ".json":
        export_json(rows, filepath, board_name)
    elif extension == ".csv":
        export_csv(rows, filepath)
    else:
        raise ValueError(
            f"Unsupported file format: {extension}. "
            "Supported formats: .json, .csv"
        )
