import pytest

from ttdl_lunar.errors import RecordFormatError
from ttdl_lunar.utils.directive_utils import (
    EnableAllDueFields,
    ExplicitReferenceList,
    Reference,
    parse_directive,
    parse_references,
)


# --------------------------- REFERENCES ---------------------------

def test_special_tag_and_optional_references_keep_order():
    refs = parse_references("created,#due,#tag-lunar-calendar")
    assert refs == [
        Reference(literal="created", name="created", kind="optional"),
        Reference(literal="#due", name="due", kind="special_tag"),
        Reference(literal="#tag-lunar-calendar", name="tag-lunar-calendar", kind="special_tag"),
    ]


def test_empty_value_gives_no_references():
    assert parse_references("") == []


def test_empty_segments_are_skipped():
    assert [r.literal for r in parse_references(",#due,,created,")] == ["#due", "created"]


def test_whitespace_is_not_trimmed():
    refs = parse_references("#due, #tag")
    assert refs[1] == Reference(literal=" #tag", name=" #tag", kind="optional")


def test_duplicates_are_kept_for_the_orchestrator():
    assert [r.literal for r in parse_references("#due,#tag,#tag")] == ["#due", "#tag", "#tag"]


def test_only_the_first_marker_is_stripped():
    assert parse_references("##due")[0].name == "#due"


# --------------------------- PLANS ---------------------------

def test_reference_list_plan():
    plan = parse_directive("#due")
    assert isinstance(plan, ExplicitReferenceList)
    assert plan.references[0].name == "due"


@pytest.mark.parametrize("value", [True, "true", "True", "yes", "ON"])
def test_enable_flag_on(value):
    assert parse_directive(value) == EnableAllDueFields(enabled=True)


@pytest.mark.parametrize("value", [False, "false", "No", "off"])
def test_enable_flag_off(value):
    assert parse_directive(value) == EnableAllDueFields(enabled=False)


@pytest.mark.parametrize("value", [1, None, ["#due"]])
def test_unsupported_directive_types(value):
    with pytest.raises(RecordFormatError):
        parse_directive(value)
