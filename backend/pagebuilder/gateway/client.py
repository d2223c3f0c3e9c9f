"""
HTTP client for the page-builder persistence endpoints.

The editor talks to the server only through this gateway: load the site
document with its revision, save it against the revision it was based on,
publish, and upload images. Transport failures and 5xx responses surface as
``NetworkError``; a stale revision surfaces as ``SaveConflict``.
"""
from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any, BinaryIO, Dict, Optional, Tuple

import requests

from pagebuilder.domain.document import SiteDocument
from pagebuilder.domain.exceptions import (
    FieldError,
    NetworkError,
    PageBuilderError,
    SaveConflict,
    ValidationError,
)
from pagebuilder.domain.migrate import ensure_current

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class PersistenceGateway:
    """
    Thin wrapper around ``/api/v1/pages`` and ``/api/v1/uploads``.

    ``token`` is the default bearer token; every call also accepts a
    per-call ``token`` so one gateway can serve several editing sessions.
    The gateway never retries; the save coordinator owns retry policy.
    """

    def __init__(
        self,
        base_url: str,
        *,
        token: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._token = token
        self._session = session or requests.Session()
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: Any, **kwargs: Any) -> "PersistenceGateway":
        return cls(config.GATEWAY_BASE_URL, timeout=config.GATEWAY_TIMEOUT, **kwargs)

    def _headers(self, token: Optional[str]) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        token = token or self._token
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _request(self, method: str, path: str, *, token: Optional[str] = None, **kwargs: Any) -> requests.Response:
        url = f"{self._base_url}{path}"
        try:
            response = self._session.request(
                method, url, headers=self._headers(token), timeout=self.timeout, **kwargs
            )
        except requests.RequestException as exc:
            raise NetworkError(f"{method} {path} failed: {exc}") from exc

        if response.status_code >= HTTPStatus.INTERNAL_SERVER_ERROR:
            raise NetworkError(
                f"{method} {path} returned {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )
        return response

    @staticmethod
    def _json(response: requests.Response) -> Dict[str, Any]:
        try:
            body = response.json()
        except ValueError as exc:
            raise NetworkError("Server returned a non-JSON body", status_code=response.status_code) from exc
        if not isinstance(body, dict):
            raise NetworkError("Server returned an unexpected payload", status_code=response.status_code)
        return body

    def _raise_for_client_error(self, response: requests.Response, action: str) -> None:
        status = response.status_code
        if status < HTTPStatus.BAD_REQUEST:
            return
        body = self._json(response) if response.content else {}
        if status in (HTTPStatus.BAD_REQUEST, HTTPStatus.UNPROCESSABLE_ENTITY) and body.get("fields"):
            raise ValidationError(
                [FieldError(f["field"], f["message"]) for f in body["fields"]],
                message=body.get("message"),
            )
        raise PageBuilderError(f"{action} failed ({status}): {body.get('message') or response.text[:200]}")

    # ------------------------
    # Site document
    # ------------------------

    def load_site(self, clinic_id: str, *, token: Optional[str] = None) -> Tuple[SiteDocument, int]:
        """Fetch the saved site and its revision. A clinic with no site gets an empty one."""
        response = self._request("GET", f"/pages/{clinic_id}", token=token)
        self._raise_for_client_error(response, "load")
        body = self._json(response)

        raw = ensure_current(body.get("site"), clinic_id)
        revision = int(body.get("revision") or 0)
        if raw is None:
            return SiteDocument.empty(clinic_id), revision
        return SiteDocument.from_dict(raw, clinic_id=clinic_id), revision

    def fetch_revision(self, clinic_id: str, *, token: Optional[str] = None) -> int:
        response = self._request("GET", f"/pages/{clinic_id}/revision", token=token)
        self._raise_for_client_error(response, "revision")
        return int(self._json(response).get("revision") or 0)

    def save_site(
        self,
        clinic_id: str,
        site: SiteDocument,
        revision: int,
        *,
        token: Optional[str] = None,
    ) -> int:
        """PUT the whole document. Returns the new server revision."""
        response = self._request(
            "PUT",
            f"/pages/{clinic_id}",
            token=token,
            json={"site": site.to_dict(), "revision": revision},
        )
        if response.status_code == HTTPStatus.CONFLICT:
            body = self._json(response)
            raise SaveConflict(revision, body.get("revision"))
        self._raise_for_client_error(response, "save")

        new_revision = int(self._json(response)["revision"])
        logger.debug("Saved clinic %s site: revision %s -> %s", clinic_id, revision, new_revision)
        return new_revision

    def publish(self, clinic_id: str, *, token: Optional[str] = None) -> Dict[str, Any]:
        response = self._request("POST", f"/pages/{clinic_id}/publish", token=token)
        self._raise_for_client_error(response, "publish")
        return self._json(response)

    # ------------------------
    # Media
    # ------------------------

    def upload_image(
        self,
        stream: BinaryIO,
        filename: str,
        content_type: Optional[str] = None,
        *,
        token: Optional[str] = None,
    ) -> str:
        """Upload one image and return its public URL."""
        file_tuple = (filename, stream, content_type) if content_type else (filename, stream)
        response = self._request("POST", "/uploads", token=token, files={"file": file_tuple})
        self._raise_for_client_error(response, "upload")
        return self._json(response)["url"]
