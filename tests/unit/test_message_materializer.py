from datetime import datetime, timezone

import pytest

from chronomail.application.services.message_materializer import (
    MessageMaterializer,
    archive_filename,
    decode_raw,
)
from chronomail.domain.errors import DecodeError, FetchError, ProviderError, WriteError

RAW = b"From: a@example.com\r\nTo: b@example.com\r\nSubject: Hello\r\n\r\nBody \xe2\x9c\x93\r\n"


def test_archive_filename_replaces_colons():
    at = datetime(2026, 10, 19, 8, 15, 2, 123456, tzinfo=timezone.utc)
    assert archive_filename("18c2f", at) == "2026-10-19T08-15-02.123Z-18c2f.eml"


def test_archive_filename_keeps_ids_inside_directory():
    at = datetime(2026, 1, 1, tzinfo=timezone.utc)
    assert "/" not in archive_filename("../etc/passwd", at)


def test_decode_raw_tolerates_missing_padding():
    assert decode_raw("m", "YQ") == b"a"


@pytest.mark.parametrize("raw", [None, "", "!!not base64!!", 42])
def test_decode_raw_rejects_bad_payloads(raw):
    with pytest.raises(DecodeError):
        decode_raw("m", raw)


@pytest.mark.asyncio
async def test_writes_raw_bytes_verbatim(session, fixed_clock, archive_dir):
    session.add_message("m1", RAW)

    result = await MessageMaterializer(session, clock=fixed_clock).materialize(
        "m1", "owner@example.com", archive_dir
    )

    assert result.message_id == "m1"
    assert result.archive_path == archive_dir / "2026-10-19T08-15-02.123Z-m1.eml"
    assert result.archive_path.read_bytes() == RAW
    assert result.raw_bytes == RAW
    assert session.fetched_ids("full") == ["m1"]
    assert session.fetched_ids("raw") == ["m1"]


@pytest.mark.asyncio
async def test_same_timestamp_and_id_overwrites(session, fixed_clock, archive_dir):
    session.add_message("m1", b"first")
    materializer = MessageMaterializer(session, clock=fixed_clock)

    first = await materializer.materialize("m1", "owner@example.com", archive_dir)
    session.add_message("m1", b"second")
    second = await materializer.materialize("m1", "owner@example.com", archive_dir)

    assert first.archive_path == second.archive_path
    assert second.archive_path.read_bytes() == b"second"
    assert len(list(archive_dir.iterdir())) == 1


@pytest.mark.asyncio
async def test_distinct_ids_produce_distinct_files(session, fixed_clock, archive_dir):
    session.add_message("m1", b"one")
    session.add_message("m2", b"two")
    materializer = MessageMaterializer(session, clock=fixed_clock)

    await materializer.materialize("m1", "owner@example.com", archive_dir)
    await materializer.materialize("m2", "owner@example.com", archive_dir)

    assert len(list(archive_dir.iterdir())) == 2


@pytest.mark.asyncio
async def test_fetch_failure_raises_fetch_error(session, archive_dir):
    session.errors["m1"] = ProviderError("Not Found", status=404)

    with pytest.raises(FetchError) as exc_info:
        await MessageMaterializer(session).materialize("m1", "owner@example.com", archive_dir)

    assert exc_info.value.message_id == "m1"
    assert not archive_dir.exists()


@pytest.mark.asyncio
async def test_transport_failure_raises_fetch_error(session, archive_dir):
    session.errors["m1"] = ConnectionResetError("connection reset by peer")

    with pytest.raises(FetchError) as exc_info:
        await MessageMaterializer(session).materialize("m1", "owner@example.com", archive_dir)

    assert exc_info.value.message_id == "m1"
    assert isinstance(exc_info.value.__cause__, ConnectionResetError)


@pytest.mark.asyncio
async def test_missing_raw_raises_decode_error(session, archive_dir):
    session.add_message("m1", b"")

    with pytest.raises(DecodeError):
        await MessageMaterializer(session).materialize("m1", "owner@example.com", archive_dir)


@pytest.mark.asyncio
async def test_unwritable_destination_raises_write_error(session, tmp_path):
    session.add_message("m1", RAW)
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("occupied")

    with pytest.raises(WriteError):
        await MessageMaterializer(session).materialize("m1", "owner@example.com", blocker)
