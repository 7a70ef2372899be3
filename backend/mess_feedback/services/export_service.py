"""
CSV rendering of admin feedback listings.
"""

import csv
import io
from datetime import date
from typing import Iterable

from mess_feedback.schemas.feedback import AdminFeedbackOut

CSV_HEADERS = [
    "ID", "Date", "Meal Type", "Rating", "Comment", "User",
    "Dishes", "Anonymous", "Status", "Created At",
]


def _submitter(item: AdminFeedbackOut) -> str:
    if item.is_anonymous:
        return "Anonymous"
    return item.username or item.email or "Unknown"


def render_feedback_csv(items: Iterable[AdminFeedbackOut]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for item in items:
        writer.writerow([
            item.id,
            item.meal_date.isoformat(),
            item.meal_type,
            item.rating,
            item.comment or "",
            _submitter(item),
            item.dish_names or "",
            "Yes" if item.is_anonymous else "No",
            item.status,
            item.created_at.isoformat(),
        ])
    return buffer.getvalue()


def export_filename(today: date) -> str:
    return f"feedback-export-{today.isoformat()}.csv"
