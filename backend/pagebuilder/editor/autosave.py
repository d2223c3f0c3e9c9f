"""
Save coordinator.

Turns document changes into persistence-gateway saves:

* changes are debounced (``notify_change`` + ``tick``);
* at most one save is in flight; a save requested meanwhile is coalesced
  into a single follow-up that sends the latest document;
* content is validated before sending and never sent when invalid;
* a stale revision stops autosave with status ``CONFLICT`` until the user
  chooses ``force_overwrite`` or ``reload``;
* transient network failures are retried with exponential backoff;
* responses that arrive after a reload are discarded.
"""
from __future__ import annotations

import logging
import threading
import time
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from pagebuilder.config import BaseConfig
from pagebuilder.domain.exceptions import FieldError, NetworkError, SaveConflict
from pagebuilder.gateway.client import PersistenceGateway
from .session import EditingSession

logger = logging.getLogger(__name__)


class SaveStatus(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    SAVING = "saving"
    SAVED = "saved"
    INVALID = "invalid"
    CONFLICT = "conflict"
    ERROR = "error"


class SaveCoordinator:
    def __init__(
        self,
        session: EditingSession,
        gateway: PersistenceGateway,
        *,
        debounce_seconds: Optional[float] = None,
        max_retries: Optional[int] = None,
        backoff_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.session = session
        self.gateway = gateway
        self.debounce_seconds = (
            BaseConfig.AUTOSAVE_DEBOUNCE_SECONDS if debounce_seconds is None else debounce_seconds
        )
        self.max_retries = BaseConfig.SAVE_MAX_RETRIES if max_retries is None else max_retries
        self.backoff_seconds = BaseConfig.SAVE_BACKOFF_SECONDS if backoff_seconds is None else backoff_seconds
        self._clock = clock
        self._sleep = sleep

        self.status = SaveStatus.IDLE
        self.errors: List[FieldError] = []
        self.last_error: Optional[Exception] = None

        self._lock = threading.Lock()
        self._in_flight = False
        self._rerun = False
        self._changed_at: Optional[float] = None

    # ------------------------
    # Debounce
    # ------------------------

    def notify_change(self, now: Optional[float] = None) -> None:
        if self.status is SaveStatus.CONFLICT:
            # autosave stays paused until the conflict is resolved
            return
        self._changed_at = self._clock() if now is None else now
        if not self._in_flight:
            self.status = SaveStatus.PENDING

    def tick(self, now: Optional[float] = None) -> bool:
        """Save if the debounce window since the last change has elapsed."""
        if self._changed_at is None:
            return False
        now = self._clock() if now is None else now
        if now - self._changed_at < self.debounce_seconds:
            return False
        self._changed_at = None
        self.save()
        return True

    # ------------------------
    # Saving
    # ------------------------

    def save(self) -> SaveStatus:
        """
        Save the latest document. If a save is already in flight, mark a
        follow-up and return immediately; the running save sends it.
        """
        with self._lock:
            if self._in_flight:
                self._rerun = True
                return self.status
            self._in_flight = True

        try:
            while True:
                status = self._save_once()
                with self._lock:
                    if not (self._rerun and status is SaveStatus.SAVED):
                        return status
                    self._rerun = False
        finally:
            with self._lock:
                self._in_flight = False
                self._rerun = False

    def _save_once(self) -> SaveStatus:
        session = self.session
        if not session.is_dirty:
            if self.status is not SaveStatus.SAVED:
                self.status = SaveStatus.IDLE
            return self.status

        # 1️⃣ Snapshot what we are about to send
        site = session.site
        local_revision = session.local_revision
        base_revision = session.server_revision
        generation = session.generation

        # 2️⃣ Never send invalid content
        errors = session.validate_site()
        if errors:
            self.errors = errors
            self.status = SaveStatus.INVALID
            logger.info("Save skipped for clinic %s: %d invalid fields", session.clinic_id, len(errors))
            return self.status

        # 3️⃣ Send, retrying transient failures
        self.status = SaveStatus.SAVING
        try:
            new_revision = self._with_retries(
                lambda: self.gateway.save_site(
                    session.clinic_id, site, base_revision, token=session.auth_token
                )
            )
        except SaveConflict as exc:
            if generation != session.generation:
                return self.status
            self.last_error = exc
            self.status = SaveStatus.CONFLICT
            logger.warning("Save conflict for clinic %s: %s", session.clinic_id, exc)
            raise
        except NetworkError as exc:
            if generation != session.generation:
                return self.status
            self.last_error = exc
            self.status = SaveStatus.ERROR
            logger.error("Save failed for clinic %s after retries: %s", session.clinic_id, exc)
            raise

        # 4️⃣ Discard responses that belong to a document we no longer hold
        if generation != session.generation:
            logger.info("Discarding stale save response for clinic %s", session.clinic_id)
            return self.status

        session.acknowledge_save(local_revision, new_revision)
        self.errors = []
        self.last_error = None
        self.status = SaveStatus.SAVED if not session.is_dirty else SaveStatus.PENDING
        return SaveStatus.SAVED

    def _with_retries(self, send: Callable[[], int]) -> int:
        attempt = 0
        while True:
            try:
                return send()
            except NetworkError as exc:
                if attempt >= self.max_retries:
                    raise
                delay = self.backoff_seconds * (2 ** attempt)
                logger.warning(
                    "Save attempt %d failed (%s); retrying in %.2fs", attempt + 1, exc, delay
                )
                self._sleep(delay)
                attempt += 1

    # ------------------------
    # Conflict resolution
    # ------------------------

    def force_overwrite(self) -> SaveStatus:
        """Adopt the server's current revision and resend the local document."""
        session = self.session
        session.server_revision = self.gateway.fetch_revision(session.clinic_id, token=session.auth_token)
        self.status = SaveStatus.PENDING
        logger.info("Overwriting clinic %s at revision %s", session.clinic_id, session.server_revision)
        return self.save()

    def reload(self) -> SaveStatus:
        """Discard local edits and re-hydrate from the server."""
        session = self.session
        site, revision = self.gateway.load_site(session.clinic_id, token=session.auth_token)
        session.hydrate(site, revision)
        self._changed_at = None
        self.errors = []
        self.last_error = None
        self.status = SaveStatus.IDLE
        return self.status

    # ------------------------
    # Publishing
    # ------------------------

    def publish(self) -> Optional[Dict[str, Any]]:
        """
        Save outstanding edits, then publish. Returns the server's publish
        record, or ``None`` when the document is invalid and nothing was sent.
        """
        self._changed_at = None
        if self.session.is_dirty and self.save() is SaveStatus.INVALID:
            return None
        result = self.gateway.publish(self.session.clinic_id, token=self.session.auth_token)
        logger.info("Published clinic %s: %s", self.session.clinic_id, result)
        return result
