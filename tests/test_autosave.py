"""Tests for the save coordinator."""

from __future__ import annotations

import typing as typ

import pytest

from pagebuilder.domain.document import SiteDocument
from pagebuilder.domain.exceptions import NetworkError, SaveConflict
from pagebuilder.domain.schema import SectionType
from pagebuilder.editor.autosave import SaveCoordinator, SaveStatus
from pagebuilder.editor.session import EditingSession


class FakeGateway:
    """In-memory stand-in for the persistence gateway."""

    def __init__(self) -> None:
        self.revision = 0
        self.saves: list[tuple[SiteDocument, int]] = []
        self.failures: list[Exception] = []
        self.on_save: typ.Callable[[], None] | None = None
        self.published = 0

    def save_site(self, clinic_id: str, site: SiteDocument, revision: int, *, token: str | None = None) -> int:
        self.saves.append((site, revision))
        if self.on_save is not None:
            hook, self.on_save = self.on_save, None
            hook()
        if self.failures:
            raise self.failures.pop(0)
        if revision != self.revision:
            raise SaveConflict(revision, self.revision)
        self.revision += 1
        return self.revision

    def fetch_revision(self, clinic_id: str, *, token: str | None = None) -> int:
        return self.revision

    def load_site(self, clinic_id: str, *, token: str | None = None) -> tuple[SiteDocument, int]:
        return SiteDocument.empty(clinic_id), self.revision

    def publish(self, clinic_id: str, *, token: str | None = None) -> dict[str, int]:
        self.published += 1
        return {"revision": self.revision, "version": self.published}


@pytest.fixture()
def session() -> EditingSession:
    return EditingSession("clinic-1", auth_token="t0k3n")


@pytest.fixture()
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture()
def sleeps() -> list[float]:
    return []


@pytest.fixture()
def coordinator(session: EditingSession, gateway: FakeGateway, sleeps: list[float]) -> SaveCoordinator:
    return SaveCoordinator(
        session,
        gateway,
        debounce_seconds=2.0,
        max_retries=3,
        backoff_seconds=0.5,
        clock=lambda: 0.0,
        sleep=sleeps.append,
    )


def test_changes_are_saved_after_debounce(
    session: EditingSession, gateway: FakeGateway, coordinator: SaveCoordinator
) -> None:
    session.add_section(SectionType.HERO)
    coordinator.notify_change(now=0.0)
    session.add_section(SectionType.TEXT)
    coordinator.notify_change(now=1.0)

    assert coordinator.status is SaveStatus.PENDING
    assert coordinator.tick(now=2.5) is False
    assert coordinator.tick(now=3.0) is True

    assert len(gateway.saves) == 1
    assert len(gateway.saves[0][0].home.sections) == 2
    assert coordinator.status is SaveStatus.SAVED
    assert session.server_revision == 1
    assert not session.is_dirty


def test_clean_session_sends_nothing(gateway: FakeGateway, coordinator: SaveCoordinator) -> None:
    assert coordinator.save() is SaveStatus.IDLE
    assert gateway.saves == []


def test_save_requested_mid_flight_is_coalesced(
    session: EditingSession, gateway: FakeGateway, coordinator: SaveCoordinator
) -> None:
    session.add_section(SectionType.HERO)
    requested: list[SaveStatus] = []

    def edit_while_saving() -> None:
        session.add_section(SectionType.FAQ)
        session.add_section(SectionType.MAP)
        requested.append(coordinator.save())
        requested.append(coordinator.save())

    gateway.on_save = edit_while_saving

    assert coordinator.save() is SaveStatus.SAVED

    assert requested == [SaveStatus.SAVING, SaveStatus.SAVING]
    assert [rev for _, rev in gateway.saves] == [0, 1]
    assert len(gateway.saves[1][0].home.sections) == 3
    assert not session.is_dirty
    assert coordinator.status is SaveStatus.SAVED


def test_response_after_reload_is_discarded(
    session: EditingSession, gateway: FakeGateway, coordinator: SaveCoordinator
) -> None:
    session.add_section(SectionType.HERO)
    gateway.on_save = coordinator.reload

    coordinator.save()

    assert session.server_revision == 0
    assert session.site.home.sections == []
    assert not session.is_dirty
    assert coordinator.status is SaveStatus.IDLE


def test_conflict_pauses_autosave_until_overwrite(
    session: EditingSession, gateway: FakeGateway, coordinator: SaveCoordinator
) -> None:
    gateway.revision = 3
    session.add_section(SectionType.HERO)

    with pytest.raises(SaveConflict) as excinfo:
        coordinator.save()

    assert excinfo.value.server_revision == 3
    assert coordinator.status is SaveStatus.CONFLICT
    coordinator.notify_change(now=0.0)
    assert coordinator.tick(now=10.0) is False

    assert coordinator.force_overwrite() is SaveStatus.SAVED
    assert gateway.saves[-1][1] == 3
    assert session.server_revision == 4
    assert coordinator.status is SaveStatus.SAVED


def test_conflict_resolved_by_reload(
    session: EditingSession, gateway: FakeGateway, coordinator: SaveCoordinator
) -> None:
    gateway.revision = 2
    session.add_section(SectionType.HERO)
    with pytest.raises(SaveConflict):
        coordinator.save()

    coordinator.reload()

    assert session.server_revision == 2
    assert session.site.home.sections == []
    assert coordinator.status is SaveStatus.IDLE


def test_transient_failures_are_retried_with_backoff(
    session: EditingSession, gateway: FakeGateway, coordinator: SaveCoordinator, sleeps: list[float]
) -> None:
    session.add_section(SectionType.HERO)
    gateway.failures = [NetworkError("timeout"), NetworkError("502", status_code=502)]

    assert coordinator.save() is SaveStatus.SAVED

    assert sleeps == [0.5, 1.0]
    assert len(gateway.saves) == 3


def test_exhausted_retries_keep_the_document(
    session: EditingSession, gateway: FakeGateway, coordinator: SaveCoordinator, sleeps: list[float]
) -> None:
    hero = session.add_section(SectionType.HERO)
    gateway.failures = [NetworkError("down") for _ in range(4)]

    with pytest.raises(NetworkError):
        coordinator.save()

    assert sleeps == [0.5, 1.0, 2.0]
    assert coordinator.status is SaveStatus.ERROR
    assert session.is_dirty
    assert session.get_section(hero.id) is not None


def test_invalid_content_is_never_sent(
    session: EditingSession, gateway: FakeGateway, coordinator: SaveCoordinator
) -> None:
    image = session.add_section(SectionType.IMAGE)

    assert coordinator.save() is SaveStatus.INVALID

    assert gateway.saves == []
    assert [e.field.rsplit(".", 1)[-1] for e in coordinator.errors] == ["src"]

    session.update_section_content(image.id, {"src": "/uploads/x.png"})
    assert coordinator.save() is SaveStatus.SAVED
    assert coordinator.errors == []


def test_publish_saves_outstanding_edits_first(
    session: EditingSession, gateway: FakeGateway, coordinator: SaveCoordinator
) -> None:
    session.add_section(SectionType.HERO)

    result = coordinator.publish()

    assert result == {"revision": 1, "version": 1}
    assert len(gateway.saves) == 1


def test_publish_with_invalid_content_sends_nothing(
    session: EditingSession, gateway: FakeGateway, coordinator: SaveCoordinator
) -> None:
    session.add_section(SectionType.IMAGE)

    assert coordinator.publish() is None
    assert gateway.published == 0
