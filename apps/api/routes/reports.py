"""Report data, file exports and report history."""
from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from supabase import Client

from apps.api.dependencies import Caller, get_caller, get_client, get_store
from lib.roles import REPORT_ROLES, require_role
from lib.schemas import Workbody
from services.dashboard.chairman import dashboard_stats
from services.meetings.store import ScheduledMeetingStore
from services.reports import history
from services.reports.export import ExportData, export_excel, export_pdf
from services.reports.generators import REPORT_TYPES, generate_csv, generate_report_data
from services.workbodies.repository import list_workbodies
from utils.errors import ValidationError

router = APIRouter(prefix="/reports")

XLSX_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _reporter(caller: Caller = Depends(get_caller)) -> Caller:
    require_role(caller.role, REPORT_ROLES, "generate reports")
    return caller


def _select(workbodies: List[Workbody], workbody_type: str, workbody_id: Optional[str]) -> List[Workbody]:
    if workbody_id:
        return [wb for wb in workbodies if wb.id == workbody_id]
    if workbody_type and workbody_type != "all":
        return [wb for wb in workbodies if wb.type == workbody_type]
    return workbodies


@router.get("/data")
def report_data(
    report_type: str = Query(default="all", alias="type"),
    workbody_type: str = Query(default="all", alias="workbodyType"),
    workbody_id: Optional[str] = Query(default=None, alias="workbodyId"),
    fmt: str = Query(default="json", alias="format"),
    caller: Caller = Depends(_reporter),
    client: Client = Depends(get_client),
):
    if report_type not in REPORT_TYPES:
        raise ValidationError(f"Unknown report type: {report_type}")
    rows = generate_report_data(report_type, _select(list_workbodies(client), workbody_type, workbody_id))
    if fmt == "csv":
        headers = list(rows[0].keys()) if rows else []
        return Response(
            generate_csv(rows, headers),
            media_type="text/csv",
            headers={"Content-Disposition": f'attachment; filename="{report_type}-report.csv"'},
        )
    return rows


@router.get("/export")
def export_dashboard(
    fmt: str = Query(default="xlsx", alias="format"),
    caller: Caller = Depends(_reporter),
    client: Client = Depends(get_client),
    store: ScheduledMeetingStore = Depends(get_store),
) -> Response:
    workbodies = list_workbodies(client)
    meetings = store.fetch()
    data = ExportData(
        workbodies=workbodies,
        meetings=meetings,
        stats=dashboard_stats(workbodies, meetings),
        generated_on=date.today(),
    )
    filename = f"pec-pulse-dashboard-{date.today().isoformat()}"
    if fmt == "xlsx":
        return Response(
            export_excel(data),
            media_type=XLSX_TYPE,
            headers={"Content-Disposition": f'attachment; filename="{filename}.xlsx"'},
        )
    if fmt == "pdf":
        return Response(
            export_pdf(data),
            media_type="application/pdf",
            headers={"Content-Disposition": f'attachment; filename="{filename}.pdf"'},
        )
    raise ValidationError(f"Unsupported export format: {fmt}")


@router.get("/history")
def list_history(caller: Caller = Depends(_reporter), client: Client = Depends(get_client)) -> List[dict]:
    return [item.to_view() for item in history.list_history(client)]


@router.post("/history", status_code=status.HTTP_201_CREATED)
def add_history(
    body: Dict[str, Any], caller: Caller = Depends(_reporter), client: Client = Depends(get_client)
) -> dict:
    data = {**body, "generatedBy": body.get("generatedBy") or caller.user_id or ""}
    return history.add_report(data, client).to_view()


@router.delete("/history/{report_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_history(
    report_id: str, caller: Caller = Depends(_reporter), client: Client = Depends(get_client)
) -> None:
    history.remove_report(report_id, client)


@router.delete("/history")
def clear_history(caller: Caller = Depends(_reporter), client: Client = Depends(get_client)) -> dict:
    return {"deleted": history.clear_history(client)}
