from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from ..attendance.repository import AttendanceRepository
from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError
from ..seasons.model import SeasonWindow
from ..seasons.service import SeasonService


@dataclass(frozen=True)
class ReportData:
    rows: list[dict]
    summary: list[dict]
    window: Optional[SeasonWindow]


class AttendanceReportService:
    """Team attendance report, scoped to the team's season unless a range is given."""

    def __init__(self, attendance: AttendanceRepository, seasons: SeasonService):
        self._attendance = attendance
        self._seasons = seasons

    def team_report(self, *, team_id: int, start: Optional[date] = None, end: Optional[date] = None) -> ReportData:
        if start is not None and end is not None and end < start:
            raise ValidationError("End date must be on or after start date")

        window: Optional[SeasonWindow]
        if start is None and end is None:
            window = self._seasons.window_for_team(int(team_id))
        else:
            window = None

        query_rows = self._attendance.get_report_rows(
            team_id=int(team_id),
            start_date=window.start if window else start,
            end_date=window.end if window else end,
            approved_only=True,
        )

        summary_map: dict[int, dict] = {}
        out_rows: list[dict] = []

        for r in query_rows:
            out_rows.append(
                {
                    "user_id": r.user_id,
                    "full_name": r.full_name,
                    "occurrence_id": r.occurrence_id,
                    "title": r.title,
                    "date": r.occurrence_date.strftime("%Y-%m-%d"),
                    "check_in": r.check_in_time.strftime("%H:%M") if r.check_in_time else "-",
                    "check_out": r.check_out_time.strftime("%H:%M") if r.check_out_time else "-",
                    "hours": str(r.hours),
                    "status": r.status.value,
                    "ad_hoc": r.is_ad_hoc,
                    "note": r.note or "",
                }
            )

            s = summary_map.get(r.user_id)
            if not s:
                s = {
                    "user_id": r.user_id,
                    "full_name": r.full_name,
                    "total_hours": Decimal("0"),
                    "records": 0,
                    **{status.value: 0 for status in AttendanceStatus},
                }
                summary_map[r.user_id] = s
            s["total_hours"] += r.hours
            s["records"] += 1
            s[r.status.value] += 1

        summary = []
        for s in summary_map.values():
            attended = s[AttendanceStatus.ON_TIME.value] + s[AttendanceStatus.LATE.value]
            rate = Decimal(attended * 100) / Decimal(s["records"]) if s["records"] else Decimal("0")
            summary.append(
                {
                    "user_id": s["user_id"],
                    "full_name": s["full_name"],
                    "total_hours": str(s["total_hours"]),
                    "on_time": s[AttendanceStatus.ON_TIME.value],
                    "late": s[AttendanceStatus.LATE.value],
                    "absent": s[AttendanceStatus.ABSENT.value],
                    "excused": s[AttendanceStatus.EXCUSED.value],
                    "attendance_rate": float(rate.quantize(Decimal("0.1"))),
                }
            )

        summary.sort(key=lambda x: Decimal(x["total_hours"]), reverse=True)
        return ReportData(rows=out_rows, summary=summary, window=window)
