"""Dashboard exports as XLSX (openpyxl) and PDF (reportlab) byte strings."""
from datetime import date
from io import BytesIO
from typing import Any, Dict, List, Optional

from openpyxl import Workbook
from pydantic import BaseModel, Field
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from lib.schemas import ScheduledMeeting, Workbody
from services.reports.generators import generate_report_data
from utils.dates import parse_date

PEC_GREEN = colors.HexColor("#007A33")
TOP_WORKBODIES = 10
UPCOMING_MEETINGS = 10

STAT_LABELS = (
    ("totalWorkbodies", "Total Workbodies"),
    ("meetingsThisYear", "Meetings This Year"),
    ("completionRate", "Completion Rate"),
    ("upcomingMeetingsCount", "Upcoming Meetings"),
    ("overdueActions", "Overdue Actions"),
)
MEETING_HEADERS = ["Date", "Workbody", "Time", "Location", "Agenda Items"]

style_title = ParagraphStyle(
    "Title", fontName="Helvetica-Bold", fontSize=14, textColor=colors.white,
    alignment=TA_CENTER, leading=18,
)
style_generated = ParagraphStyle(
    "Generated", fontName="Helvetica", fontSize=9, alignment=TA_CENTER, leading=12,
)
style_h2 = ParagraphStyle(
    "Heading", fontName="Helvetica-Bold", fontSize=12, leading=15, spaceBefore=10, spaceAfter=4,
)


class ExportData(BaseModel):
    workbodies: List[Workbody] = Field(default_factory=list)
    meetings: List[ScheduledMeeting] = Field(default_factory=list)
    stats: Dict[str, Any] = Field(default_factory=dict)
    generated_on: Optional[date] = None


def _stat_rows(stats: Dict[str, Any]) -> List[List[str]]:
    rows = []
    for key, label in STAT_LABELS:
        value = stats.get(key, 0)
        rows.append([label, f"{value}%" if key == "completionRate" else str(value)])
    return rows


def _meeting_row(meeting: ScheduledMeeting) -> List[str]:
    return [
        meeting.date,
        meeting.workbody_name,
        meeting.time,
        meeting.location,
        "; ".join(meeting.agenda_items),
    ]


def upcoming_meetings(meetings: List[ScheduledMeeting], today: date, limit: int) -> List[ScheduledMeeting]:
    dated = [(parse_date(m.date), m) for m in meetings]
    upcoming = sorted(
        ((day, m) for day, m in dated if day is not None and day >= today),
        key=lambda pair: (pair[0], pair[1].time),
    )
    return [m for _, m in upcoming[:limit]]


def export_excel(data: ExportData) -> bytes:
    """Workbook with Dashboard Stats, Workbodies and Meetings sheets."""
    wb = Workbook()

    ws = wb.active
    ws.title = "Dashboard Stats"
    ws.append(["Metric", "Value"])
    for row in _stat_rows(data.stats):
        ws.append(row)

    rows = generate_report_data("all", data.workbodies)
    ws2 = wb.create_sheet(title="Workbodies")
    if rows:
        headers = list(rows[0].keys())
        ws2.append(headers)
        for row in rows:
            ws2.append([row[h] for h in headers])

    ws3 = wb.create_sheet(title="Meetings")
    ws3.append(MEETING_HEADERS)
    for meeting in data.meetings:
        ws3.append(_meeting_row(meeting))

    bio = BytesIO()
    wb.save(bio)
    return bio.getvalue()


def _grid(rows: List[List[str]], col_widths: List[float]) -> Table:
    table = Table(rows, colWidths=col_widths, repeatRows=1)
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), PEC_GREEN),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, -1), 9),
                ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ]
        )
    )
    return table


def export_pdf(data: ExportData) -> bytes:
    """
    One-page executive summary.

    Contains the dashboard stats, the first ten workbodies and the next ten
    meetings dated today or later.
    """
    today = data.generated_on or date.today()
    bio = BytesIO()
    doc = SimpleDocTemplate(
        bio, pagesize=A4,
        topMargin=0.5 * inch, bottomMargin=0.5 * inch,
        leftMargin=0.6 * inch, rightMargin=0.6 * inch,
        title="PEC Pulse - Chairman's Executive Dashboard",
    )
    W = doc.width

    banner = Table(
        [[Paragraph("PEC Pulse - Chairman's Executive Dashboard", style_title)]],
        colWidths=[W],
    )
    banner.setStyle(TableStyle([("BACKGROUND", (0, 0), (-1, -1), PEC_GREEN)]))

    story = [
        banner,
        Spacer(1, 4),
        Paragraph(f"Generated: {today.isoformat()}", style_generated),
        Paragraph("Dashboard Summary", style_h2),
        _grid([["Metric", "Value"], *_stat_rows(data.stats)], [W * 0.6, W * 0.4]),
        Paragraph("Top Workbodies", style_h2),
    ]

    workbody_rows = [["Name", "Type", "Meetings", "Actions (Done/Total)"]]
    for wb in data.workbodies[:TOP_WORKBODIES]:
        workbody_rows.append(
            [wb.name, wb.type, str(wb.total_meetings), f"{wb.actions_completed}/{wb.actions_agreed}"]
        )
    story.append(_grid(workbody_rows, [W * 0.45, W * 0.2, W * 0.15, W * 0.2]))

    story.append(Paragraph("Upcoming Meetings", style_h2))
    meeting_rows = [["Date", "Workbody", "Time", "Location"]]
    for meeting in upcoming_meetings(data.meetings, today, UPCOMING_MEETINGS):
        meeting_rows.append([meeting.date, meeting.workbody_name, meeting.time, meeting.location])
    story.append(_grid(meeting_rows, [W * 0.18, W * 0.42, W * 0.12, W * 0.28]))

    doc.build(story)
    return bio.getvalue()
