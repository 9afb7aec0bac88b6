"""Document download and text extraction (PDF, Word, images)."""
import io
import logging
from typing import List, Tuple

import pytesseract
import requests
from docx import Document
from PIL import Image
from pypdf import PdfReader

from utils.decorators import retry

logger = logging.getLogger(__name__)

DOWNLOAD_TIMEOUT = 30


@retry(max_attempts=3, delay=1.0, exceptions=(requests.ConnectionError, requests.Timeout))
def fetch_document(url: str) -> Tuple[bytes, str]:
    """Fetch a stored document and its content type; HTTP errors are raised, connection failures retried."""
    response = requests.get(url, timeout=DOWNLOAD_TIMEOUT)
    response.raise_for_status()
    return response.content, response.headers.get("content-type", "")


def download_file(url: str) -> bytes:
    return fetch_document(url)[0]


def file_extension(url: str) -> str:
    """Lower-cased extension of a URL path, ignoring any query string."""
    path = url.split("?", 1)[0].split("#", 1)[0]
    last = path.rsplit("/", 1)[-1]
    if "." not in last:
        return ""
    return last.rsplit(".", 1)[-1].lower()


def pdf_lines(data: bytes) -> List[str]:
    """Non-empty text lines of every page, in page order."""
    reader = PdfReader(io.BytesIO(data))
    lines: List[str] = []
    for page in reader.pages:
        text = page.extract_text() or ""
        lines.extend(line.strip() for line in text.splitlines() if line.strip())
    return lines


def pdf_text(data: bytes) -> str:
    return "\n".join(pdf_lines(data)).strip()


def docx_lines(data: bytes) -> List[str]:
    doc = Document(io.BytesIO(data))
    return [p.text.strip() for p in doc.paragraphs if p.text.strip()]


def image_lines(data: bytes) -> List[str]:
    image = Image.open(io.BytesIO(data))
    text = pytesseract.image_to_string(image) or ""
    return [line.strip() for line in text.splitlines() if line.strip()]
