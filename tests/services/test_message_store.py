"""Tests for message assignment, persistence and rendering."""

from __future__ import annotations

from datetime import UTC, datetime
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from forever_wall.core.errors import ConfigurationError, StorageError, ValidationError
from forever_wall.models.message import Message
from forever_wall.repositories.message_repo import MessageRepository
from forever_wall.services.message_store import (
    CANVAS_MAX,
    CANVAS_MIN,
    EMPTY_WALL_TEXT,
    PALETTE,
    MessageStore,
    clamp_limit,
    normalize_text,
    render_text,
)


def _message(text: str, x: float, y: float) -> Message:
    return Message(
        id="00000000-0000-4000-8000-000000000000",
        text=text,
        x=x,
        y=y,
        color=PALETTE[0],
        created_at=datetime(2026, 1, 1, tzinfo=UTC),
    )


def test_palette_has_ten_colors() -> None:
    assert len(PALETTE) == 10
    assert len(set(PALETTE)) == 10


def test_append_trims_and_assigns_fields(message_store: MessageStore) -> None:
    message = message_store.append("  hi  ")

    assert message.text == "hi"
    assert CANVAS_MIN <= message.x <= CANVAS_MAX
    assert CANVAS_MIN <= message.y <= CANVAS_MAX
    assert message.color in PALETTE
    assert len(message.id) == 36
    assert message_store.list()[0].id == message.id


def test_append_assigns_unique_ids(message_store: MessageStore) -> None:
    ids = {message_store.append(f"message {i}").id for i in range(20)}
    assert len(ids) == 20


def test_positions_stay_in_bounds_across_many_messages(message_store: MessageStore) -> None:
    for i in range(200):
        message = message_store.build(f"message {i}")
        assert CANVAS_MIN <= message.x <= CANVAS_MAX
        assert CANVAS_MIN <= message.y <= CANVAS_MAX
        assert message.color in PALETTE


def test_append_accepts_exactly_max_length(message_store: MessageStore) -> None:
    text = "é" * 280
    assert message_store.append(text).text == text


def test_append_rejects_oversized_text_before_persistence() -> None:
    repository = MagicMock(spec=MessageRepository)
    store = MessageStore(repository)

    with pytest.raises(ValidationError, match="280 characters or less"):
        store.append("x" * 281)

    repository.insert.assert_not_called()


def test_length_counts_code_points_not_bytes() -> None:
    # 280 emoji are 1120 bytes in UTF-8 but still 280 code points.
    assert normalize_text("🙂" * 280) == "🙂" * 280
    with pytest.raises(ValidationError):
        normalize_text("🙂" * 281)


@pytest.mark.parametrize("raw", ["", "   ", "\n\t", None, 42, ["hi"]])
def test_normalize_rejects_missing_or_blank(raw: object) -> None:
    with pytest.raises(ValidationError):
        normalize_text(raw)


def test_normalize_measures_length_after_trim() -> None:
    padded = "  " + "a" * 280 + "  "
    assert normalize_text(padded) == "a" * 280


def test_list_orders_newest_first_by_default(message_store: MessageStore) -> None:
    for text in ("first", "second", "third"):
        message_store.append(text)

    assert [m.text for m in message_store.list()] == ["third", "second", "first"]
    assert [m.text for m in message_store.list(order="asc")] == ["first", "second", "third"]


def test_list_breaks_timestamp_ties_by_id(session_factory) -> None:
    stamp = datetime(2026, 1, 1, tzinfo=UTC)
    store = MessageStore(MessageRepository(session_factory), now=lambda: stamp)
    ids = sorted(store.append(text).id for text in ("a", "b", "c", "d"))

    assert [m.id for m in store.list()] == ids[::-1]
    assert [m.id for m in store.list(order="asc")] == ids


def test_list_clamps_limit(message_store: MessageStore) -> None:
    for i in range(3):
        message_store.append(f"m{i}")

    assert len(message_store.list(limit=0)) == 1
    assert len(message_store.list(limit=-5)) == 1
    assert len(message_store.list(limit=2)) == 2
    assert len(message_store.list(limit=1000)) == 3


@pytest.mark.parametrize(
    ("limit", "expected"),
    [(None, 50), (0, 1), (1, 1), (50, 50), (100, 100), (101, 100), (-3, 1)],
)
def test_clamp_limit(limit: int | None, expected: int) -> None:
    assert clamp_limit(limit, default=50, maximum=100) == expected


def test_render_text_empty_wall() -> None:
    assert render_text([]) == EMPTY_WALL_TEXT == "The wall is empty."


def test_render_text_numbers_lines_from_one() -> None:
    messages = [_message("hello", 200.4, 2799.5), _message("world", 1000.5, 999.49)]

    lines = render_text(messages).split("\n")

    assert lines == [
        '[1] "hello" (at 200, 2800)',
        '[2] "world" (at 1001, 999)',
    ]


def test_render_text_returns_one_line_per_message() -> None:
    messages = [_message(f"m{i}", 500, 500) for i in range(7)]
    assert len(render_text(messages).splitlines()) == 7


def test_insert_failure_surfaces_storage_error() -> None:
    session = MagicMock()
    session.commit.side_effect = IntegrityError("INSERT", {}, Exception("duplicate"))
    factory = MagicMock()
    factory.return_value.__enter__.return_value = session
    store = MessageStore(MessageRepository(factory))

    with pytest.raises(StorageError, match="Failed to save message"):
        store.append("hello")
    assert session.commit.call_count == 1


def test_unreachable_database_surfaces_configuration_error() -> None:
    session = MagicMock()
    session.scalars.side_effect = OperationalError("SELECT", {}, Exception("no db"))
    factory = MagicMock()
    factory.return_value.__enter__.return_value = session
    store = MessageStore(MessageRepository(factory))

    with pytest.raises(ConfigurationError):
        store.list()
