"""Best-effort member extraction from uploaded workbody documents.

Each text line (PDF text, Word paragraph or OCR'd image line) is matched
against a ``Name - Role`` / ``Name: Role`` pattern. Nothing here is exact:
when the pattern finds nobody a single placeholder member is stored so the
secretary can see that the document was processed and fix it by hand.
"""
from __future__ import annotations

import logging
import re
from typing import Callable, Dict, List, Optional

from supabase import Client

from lib.documents import docx_lines, download_file, file_extension, image_lines, pdf_lines
from lib.schemas import WorkbodyMember
from lib.supabase_client import execute, get_supabase_client
from services.members.repository import add_history_entry
from utils.errors import ExtractionError, NotFoundError
from utils.logging import log_event

logger = logging.getLogger(__name__)

MEMBER_LINE_RE = re.compile(r"([A-Za-z\s]+)[\s\-:]+([A-Za-z\s]+)")

PDF_EMPTY = ("Extracted from PDF", "Member")
PDF_ERROR = ("PDF Processing Error", "Error occurred during extraction")
WORD_EMPTY = ("Extracted from Word", "Member")
IMAGE_EMPTY = ("Extracted from Image", "Member")
NO_MEMBERS = ("Placeholder Member", "Member")

WORD_EXTENSIONS = ("doc", "docx")
IMAGE_EXTENSIONS = ("jpg", "jpeg", "png")


def parse_member_line(text: str) -> Optional[WorkbodyMember]:
    match = MEMBER_LINE_RE.search(text or "")
    if not match:
        return None
    name, role = match.group(1).strip(), match.group(2).strip()
    if not name or not role:
        return None
    return WorkbodyMember(name=name, role=role)


def members_from_lines(lines: List[str]) -> List[WorkbodyMember]:
    members = []
    for line in lines:
        member = parse_member_line(line)
        if member:
            members.append(member)
    return members


def _placeholder(pair: tuple) -> List[WorkbodyMember]:
    return [WorkbodyMember(name=pair[0], role=pair[1])]


def extract_from_pdf(data: bytes) -> List[WorkbodyMember]:
    """PDF parse failures produce an error placeholder instead of raising."""
    try:
        members = members_from_lines(pdf_lines(data))
    except Exception as exc:
        logger.error("Error processing PDF: %s", exc)
        return _placeholder(PDF_ERROR)
    return members or _placeholder(PDF_EMPTY)


def _extract_with(
    reader: Callable[[bytes], List[str]], data: bytes, empty: tuple, label: str
) -> List[WorkbodyMember]:
    try:
        lines = reader(data)
    except Exception as exc:
        raise ExtractionError(f"Error processing {label}: {exc}") from exc
    return members_from_lines(lines) or _placeholder(empty)


def extract_members(data: bytes, extension: str) -> List[WorkbodyMember]:
    """Dispatch on file extension; unsupported formats raise ExtractionError."""
    if extension == "pdf":
        return extract_from_pdf(data)
    if extension in WORD_EXTENSIONS:
        return _extract_with(docx_lines, data, WORD_EMPTY, "Word document")
    if extension in IMAGE_EXTENSIONS:
        return _extract_with(image_lines, data, IMAGE_EMPTY, "image")
    raise ExtractionError(f"Unsupported file format: {extension or 'unknown'}")


def extract_members_from_document(
    document_id: str,
    workbody_id: str,
    changed_by: Optional[str] = None,
    client: Optional[Client] = None,
) -> List[WorkbodyMember]:
    """
    Extract members from a ``workbody_documents`` file and store them.

    Args:
        document_id: Row id in ``workbody_documents``.
        workbody_id: Workbody the members are added to.
        changed_by: Caller id for the composition history entry.

    Returns:
        The stored members, each tagged with ``source_document_id``.

    Raises:
        NotFoundError: The document row does not exist or has no file.
        ExtractionError: Unsupported format or unreadable Word/image file.
    """
    client = client or get_supabase_client()
    rows = execute(
        client.table("workbody_documents").select("file_url, document_type").eq("id", document_id),
        "workbody_documents",
        "select",
    )
    if not rows or not rows[0].get("file_url"):
        raise NotFoundError("No document URL found")
    file_url = rows[0]["file_url"]
    extension = file_extension(file_url)
    if extension not in ("pdf",) + WORD_EXTENSIONS + IMAGE_EXTENSIONS:
        raise ExtractionError(f"Unsupported file format: {extension or 'unknown'}")

    data = download_file(file_url)
    members = extract_members(data, extension) or _placeholder(NO_MEMBERS)
    log_event(document_id, "member_extraction", "members_extracted", {"count": len(members), "format": extension})

    insert_rows: List[Dict] = []
    for member in members:
        member.workbody_id = workbody_id
        member.source_document_id = document_id
        insert_rows.append(member.to_row())
    saved = execute(client.table("workbody_members").insert(insert_rows), "workbody_members", "insert")
    add_history_entry(
        workbody_id,
        "members_extracted",
        {"count": len(members), "names": [m.name for m in members]},
        changed_by=changed_by,
        source_document=document_id,
        client=client,
    )
    if saved:
        return [WorkbodyMember.from_row(row) for row in saved]
    return members
