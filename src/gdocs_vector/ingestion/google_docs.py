"""Google Docs fetcher — normalises a Doc into heading-aware segments.

The Docs API returns a tree of structural elements; this module flattens
it into :class:`DocumentSegment` objects in reading order:

* one segment per non-empty paragraph (text runs concatenated),
* table cells recursed row by row, cell by cell,
* an empty segment per section break.

Paragraphs styled ``HEADING_<n>`` carry a :class:`DocumentHeading`.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
import re
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from gdocs_vector.errors import ConfigurationError, DocumentFetchError
from gdocs_vector.ingestion.models import DocumentContent, DocumentHeading, DocumentSegment

logger = logging.getLogger(__name__)

DOCS_SCOPE = "https://www.googleapis.com/auth/documents.readonly"
DRIVE_SCOPE = "https://www.googleapis.com/auth/drive.readonly"
DRIVE_FIELDS = "id, name, parents, modifiedTime, version, headRevisionId"

_HEADING_STYLE = re.compile(r"^HEADING_(\d)$")


class DocumentFetcher(ABC):
    """Anything that can turn a document id into :class:`DocumentContent`."""

    @abstractmethod
    def fetch_document(self, file_id: str) -> DocumentContent:
        ...


class UnavailableFetcher(DocumentFetcher):
    """Stand-in used when Google credentials are missing; every fetch fails."""

    def __init__(self, reason: str = "Google Drive credentials not configured") -> None:
        self.reason = reason

    def fetch_document(self, file_id: str) -> DocumentContent:
        raise DocumentFetchError(self.reason)


# ── Structural-element parsing ────────────────────────────────────────


def _extract_heading(style: dict[str, Any] | None, text: str) -> DocumentHeading | None:
    named = (style or {}).get("namedStyleType")
    if not named:
        return None
    match = _HEADING_STYLE.match(named)
    if not match:
        return None
    return DocumentHeading(level=int(match.group(1)), text=text, id=style.get("headingId") or None)


def _segment_from_paragraph(paragraph: dict[str, Any]) -> DocumentSegment | None:
    pieces: list[str] = []
    for element in paragraph.get("elements", []):
        content = (element.get("textRun") or {}).get("content")
        if content:
            pieces.append(content[:-1] if content.endswith("\n") else content)

    text = "".join(pieces).strip()
    if not text:
        return None
    return DocumentSegment(text=text, heading=_extract_heading(paragraph.get("paragraphStyle"), text))


def extract_segments(elements: list[dict[str, Any]]) -> list[DocumentSegment]:
    """Flatten Docs API ``body.content`` into ordered segments."""
    segments: list[DocumentSegment] = []
    for element in elements:
        if "paragraph" in element:
            segment = _segment_from_paragraph(element["paragraph"])
            if segment is not None:
                segments.append(segment)
        elif "table" in element:
            for row in element["table"].get("tableRows", []):
                for cell in row.get("tableCells", []):
                    segments.extend(extract_segments(cell.get("content", [])))
        elif "sectionBreak" in element:
            segments.append(DocumentSegment(text=""))
    return segments


# ── Credentials ───────────────────────────────────────────────────────


def parse_service_account_key(value: str) -> str:
    """Return the PEM private key from a PEM string, raw JSON, or base64 JSON."""
    trimmed = value.strip()
    if trimmed.startswith("-----BEGIN"):
        return trimmed

    if trimmed.startswith("{"):
        try:
            parsed = json.loads(trimmed)
        except json.JSONDecodeError as exc:
            raise ConfigurationError("Service account key looks like JSON but does not parse") from exc
        if not isinstance(parsed, dict) or not parsed.get("private_key"):
            raise ConfigurationError("Service account JSON missing private_key field")
        return parsed["private_key"]

    try:
        decoded = base64.b64decode(trimmed).decode("utf-8")
        parsed = json.loads(decoded)
    except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ConfigurationError("Service account key is neither PEM, JSON, nor base64 JSON") from exc
    if not isinstance(parsed, dict) or not parsed.get("private_key"):
        raise ConfigurationError("Decoded service account JSON missing private_key field")
    return parsed["private_key"]


def create_service_account_credentials(email: str, key: str) -> Any:
    """Build read-only Docs + Drive credentials for a service account."""
    if not email or not key:
        raise ConfigurationError("Google service account credentials are not configured")

    from google.oauth2 import service_account

    info = {
        "type": "service_account",
        "client_email": email,
        "private_key": parse_service_account_key(key),
        "token_uri": "https://oauth2.googleapis.com/token",
    }
    try:
        return service_account.Credentials.from_service_account_info(info, scopes=[DOCS_SCOPE, DRIVE_SCOPE])
    except ValueError as exc:
        raise ConfigurationError(f"Service account private key is unusable: {exc}") from exc


# ── Fetcher ───────────────────────────────────────────────────────────


class GoogleDocsFetcher(DocumentFetcher):
    """Fetches a Doc's body (Docs v1) and file metadata (Drive v3) together.

    The watched folder must be shared with the service account for the
    API calls to succeed.

    Parameters
    ----------
    credentials:
        ``google.auth`` credentials with Docs and Drive read scopes.
    watch_folder_id:
        When set, files outside this Drive folder are rejected.
    """

    def __init__(self, credentials: Any, watch_folder_id: str | None = None) -> None:
        from googleapiclient.discovery import build

        self._credentials = credentials
        self._docs = build("docs", "v1", credentials=credentials, cache_discovery=False)
        self._drive = build("drive", "v3", credentials=credentials, cache_discovery=False)
        self.watch_folder_id = watch_folder_id or None

    def _authorized_http(self) -> Any:
        # httplib2 connections are not thread-safe; one per request.
        import google_auth_httplib2
        import httplib2

        return google_auth_httplib2.AuthorizedHttp(self._credentials, http=httplib2.Http())

    def _get_document(self, file_id: str) -> dict[str, Any]:
        return self._docs.documents().get(documentId=file_id).execute(http=self._authorized_http())

    def _get_file(self, file_id: str) -> dict[str, Any]:
        request = self._drive.files().get(fileId=file_id, fields=DRIVE_FIELDS)
        return request.execute(http=self._authorized_http())

    def fetch_document(self, file_id: str) -> DocumentContent:
        from googleapiclient.errors import HttpError

        try:
            with ThreadPoolExecutor(max_workers=2) as pool:
                doc_future = pool.submit(self._get_document, file_id)
                file_future = pool.submit(self._get_file, file_id)
                doc = doc_future.result()
                drive_file = file_future.result()
        except HttpError as exc:
            raise DocumentFetchError(f"Failed to fetch document {file_id}: {exc}") from exc

        if self.watch_folder_id and self.watch_folder_id not in (drive_file.get("parents") or []):
            raise DocumentFetchError(
                f"File {file_id} is not within configured watch folder {self.watch_folder_id}"
            )

        return build_document_content(file_id, doc, drive_file)


def build_document_content(file_id: str, doc: dict[str, Any], drive_file: dict[str, Any]) -> DocumentContent:
    """Combine a Docs API document and Drive file resource into one record."""
    segments = extract_segments((doc.get("body") or {}).get("content", []))
    return DocumentContent(
        document_id=doc.get("documentId") or file_id,
        title=doc.get("title") or drive_file.get("name") or "Untitled",
        revision_id=doc.get("revisionId"),
        version=drive_file.get("version"),
        modified_time=drive_file.get("modifiedTime"),
        text="\n\n".join(s.text for s in segments),
        segments=segments,
    )
