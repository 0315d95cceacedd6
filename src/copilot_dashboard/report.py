import json
from typing import Any

from copilot_dashboard.models import UsageRecord
from copilot_dashboard.state import DashboardState


def _acceptance_rate(suggestions: "int", acceptances: "int") -> "float":
    if not suggestions:
        return 0.0
    return round(acceptances / suggestions * 100, 2)


def summarize_row(record: "UsageRecord") -> "dict[str, Any]":
    """
    totals of the breakdown entries left in a filtered row.
    """
    suggestions = sum(b.suggestions_count for b in record.breakdown)
    acceptances = sum(b.acceptances_count for b in record.breakdown)
    return {
        "time_frame": record.time_frame_display,
        "day": record.day.isoformat(),
        "suggestions": suggestions,
        "acceptances": acceptances,
        "acceptance_rate": _acceptance_rate(suggestions, acceptances),
        "lines_suggested": sum(b.lines_suggested for b in record.breakdown),
        "lines_accepted": sum(b.lines_accepted for b in record.breakdown),
        "chat_turns": sum(b.chat_turns for b in record.breakdown),
        "chat_acceptances": sum(b.chat_acceptances for b in record.breakdown),
    }


def build_report(state: "DashboardState") -> "dict[str, Any]":
    seats = state.filtered_seats_data
    return {
        "time_frame": state.time_frame.value,
        "hide_weekends": state.hide_weekends,
        "filters": {
            "languages": [i.value for i in state.languages if i.is_selected],
            "editors": [i.value for i in state.editors if i.is_selected],
            "teams": state.selected_teams,
        },
        "seats": {
            "total_seats": seats.total_seats,
            "total_active_seats": seats.total_active_seats,
        },
        "rows": [summarize_row(r) for r in state.filtered_data],
    }


def render_json(state: "DashboardState") -> "str":
    return json.dumps(build_report(state), indent=2)


def render_text(state: "DashboardState") -> "str":
    report = build_report(state)
    seats = report["seats"]
    lines = [
        f"Seats: {seats['total_seats']} assigned, "
        f"{seats['total_active_seats']} active in the last 30 days",
        f"View: {report['time_frame']}"
        + (", weekends hidden" if report["hide_weekends"] else ""),
        "",
        f"{'Time frame':<14}{'Suggestions':>13}{'Accepted':>10}{'Rate %':>9}"
        f"{'Chat turns':>12}",
    ]
    for row in report["rows"]:
        lines.append(
            f"{row['time_frame']:<14}{row['suggestions']:>13}"
            f"{row['acceptances']:>10}{row['acceptance_rate']:>9.2f}"
            f"{row['chat_turns']:>12}"
        )
    if not report["rows"]:
        lines.append("(no data)")
    return "\n".join(lines)
