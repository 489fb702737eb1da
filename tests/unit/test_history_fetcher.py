"""Tests for HistoryFetcher: cursor handling, pagination, fallback, and error translation."""

import pytest

from chronomail.application.services.history_fetcher import HistoryFetcher
from chronomail.domain.entities.change_event import ChangeEvent, ChangeKind
from chronomail.domain.errors import InsufficientPermissionsError, InvalidCursorError, ProviderError


@pytest.mark.asyncio
async def test_queries_from_one_before_the_cursor(session):
    session.history_pages = [
        {"history": [{"id": "101", "messagesAdded": [{"message": {"id": "m1"}}]}], "historyId": "101"}
    ]

    events = await HistoryFetcher(session).fetch("100", "owner@example.com")

    assert events == [ChangeEvent(ChangeKind.MESSAGE_ADDED, "m1")]
    history_calls = [c for c in session.calls if c[0] == "list_history"]
    assert history_calls == [("list_history", 99, ("messageAdded", "labelAdded"), None)]


@pytest.mark.asyncio
async def test_checks_current_cursor_first(session):
    session.history_pages = [{"history": [{"messages": [{"id": "m1"}]}]}]

    await HistoryFetcher(session).fetch(100, "owner@example.com")

    assert session.calls[0] == ("get_profile",)


@pytest.mark.asyncio
async def test_missing_profile_cursor_is_not_enforced(session):
    session.profile = {}
    session.history_pages = [{"history": [{"messages": [{"id": "m1"}]}]}]

    events = await HistoryFetcher(session).fetch("100", "owner@example.com")

    assert [e.message_id for e in events] == ["m1"]


@pytest.mark.asyncio
async def test_start_cursor_clamped_at_minimum(session):
    session.history_pages = [{"history": [{"messages": [{"id": "m1"}]}]}]

    await HistoryFetcher(session).fetch("1", "owner@example.com")

    assert [c[1] for c in session.calls if c[0] == "list_history"] == [1]


@pytest.mark.asyncio
async def test_follows_every_history_page(session):
    session.history_pages = [
        {"history": [{"messages": [{"id": "m1"}]}], "nextPageToken": "1"},
        {"history": [{"messages": [{"id": "m2"}]}]},
    ]

    events = await HistoryFetcher(session).fetch("500", "owner@example.com")

    assert [e.message_id for e in events] == ["m1", "m2"]
    assert [c[3] for c in session.calls if c[0] == "list_history"] == [None, "1"]


@pytest.mark.asyncio
async def test_invalid_cursor_raises_before_any_call(session):
    with pytest.raises(InvalidCursorError):
        await HistoryFetcher(session).fetch("not-a-number", "owner@example.com")
    assert session.calls == []


@pytest.mark.asyncio
async def test_empty_history_falls_back_to_cursor_as_message_id(session):
    session.history_pages = [{"historyId": "777"}]
    session.add_message("777", b"Subject: hi\r\n\r\nbody")

    events = await HistoryFetcher(session).fetch("777", "owner@example.com")

    assert events == [ChangeEvent(ChangeKind.MESSAGE_ADDED, "777")]
    assert ("get_message", "777", "minimal") in session.calls


@pytest.mark.asyncio
async def test_failed_fallback_yields_no_events(session):
    session.history_pages = [{"history": []}]

    events = await HistoryFetcher(session).fetch("777", "owner@example.com")

    assert events == []


@pytest.mark.asyncio
async def test_permission_denied_is_translated(session):
    session.history_error = ProviderError("Forbidden", status=403)

    with pytest.raises(InsufficientPermissionsError):
        await HistoryFetcher(session).fetch("100", "owner@example.com")


@pytest.mark.asyncio
async def test_permission_denied_during_fallback_is_translated(session):
    session.history_pages = [{}]
    session.errors["100"] = ProviderError("Forbidden", status=403)

    with pytest.raises(InsufficientPermissionsError):
        await HistoryFetcher(session).fetch("100", "owner@example.com")


@pytest.mark.asyncio
async def test_other_provider_errors_propagate_untranslated(session):
    error = ProviderError("Backend Error", status=500)
    session.history_error = error

    with pytest.raises(ProviderError) as exc_info:
        await HistoryFetcher(session).fetch("100", "owner@example.com")

    assert exc_info.value is error
    assert len([c for c in session.calls if c[0] == "list_history"]) == 1
