import pytest

from ttdl_lunar.errors import DuplicateFieldError, RecordFormatError
from ttdl_lunar.utils.record_utils import (
    FieldEntry,
    denormalize_groups,
    denormalize_message,
    normalize_groups,
    normalize_message,
)


def test_normalize_groups_keeps_positions():
    fields = normalize_groups([{"due": "2000-01-01"}, {"tag": "x"}], "specialTags")
    assert fields == {
        "due": FieldEntry("2000-01-01", 0),
        "tag": FieldEntry("x", 1),
    }
    assert list(fields) == ["due", "tag"]


def test_denormalize_groups_orders_by_position():
    fields = {"b": FieldEntry("2", 1), "a": FieldEntry("1", 0), "c": FieldEntry("3", 5)}
    assert denormalize_groups(fields) == [{"a": "1"}, {"b": "2"}, {"c": "3"}]


def test_duplicate_names_fail_fast():
    with pytest.raises(DuplicateFieldError) as exc:
        normalize_groups([{"due": "1"}, {"due": "2"}], "specialTags")
    assert exc.value.name == "due"
    assert exc.value.collection == "specialTags"


@pytest.mark.parametrize("groups", [[{}], [{"a": "1", "b": "2"}], ["due"], {"due": "1"}])
def test_malformed_groups(groups):
    with pytest.raises(RecordFormatError):
        normalize_groups(groups, "optional")


def test_round_trip_without_changes(make_message):
    message = make_message(
        [("due", "2000-01-01"), ("t", "1"), ("!lunar-calendar", "#due")],
        optional=[("created", "2000-01-01"), ("finished", "2000-01-02")],
    )
    assert denormalize_message(normalize_message(message)) == message


def test_round_trip_keeps_unknown_members_and_order():
    message = {"optional": None, "description": "d", "extra": 1, "specialTags": []}
    out = denormalize_message(normalize_message(message))
    assert out == message
    assert list(out) == ["optional", "description", "extra", "specialTags"]


def test_missing_optional_stays_missing(make_message):
    record = normalize_message(make_message([("due", "1")]))
    assert record.optional is None
    assert "optional" not in denormalize_message(record)


def test_same_name_in_both_collections_is_unrelated(make_message):
    record = normalize_message(make_message([("due", "a")], optional=[("due", "b")]))
    assert record.special_tags["due"].value == "a"
    assert record.optional["due"].value == "b"


def test_copy_is_independent(make_message):
    record = normalize_message(make_message([("due", "a")]))
    scratch = record.copy()
    scratch.special_tags["due"].value = "b"
    assert record.get_special_tag("due") == "a"


@pytest.mark.parametrize(
    "message",
    [
        [],
        {"specialTags": []},
        {"description": 1, "specialTags": []},
        {"description": "d"},
        {"description": "d", "specialTags": [], "optional": "x"},
    ],
)
def test_malformed_messages(message):
    with pytest.raises(RecordFormatError):
        normalize_message(message)


def test_lenient_normalize_keeps_first_entry():
    fields = normalize_groups([{"due": "1"}, {"x": "y"}, {"due": "2"}], "optional", strict=False)
    assert fields == {"due": FieldEntry("1", 0), "x": FieldEntry("y", 1)}
