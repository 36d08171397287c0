import logging
from dataclasses import dataclass
from typing import Any, List, Literal, Union

from ttdl_lunar.errors import RecordFormatError

logger = logging.getLogger(__name__)

DIRECTIVE_TAG_KEY = "!lunar-calendar"
REFERENCE_SEPARATOR = ","
SPECIAL_TAG_MARKER = "#"

DUE_FIELD_NAME = "due"

_TRUE_WORDS = {"true", "yes", "on"}
_FALSE_WORDS = {"false", "no", "off"}

ReferenceKind = Literal["special_tag", "optional"]


@dataclass(frozen=True)
class Reference:
    literal: str  # verbatim text from the directive, used in error messages
    name: str
    kind: ReferenceKind


@dataclass(frozen=True)
class ExplicitReferenceList:
    """`!lunar-calendar:created,#due` converts exactly the listed fields."""
    references: List[Reference]


@dataclass(frozen=True)
class EnableAllDueFields:
    """`!lunar-calendar:true` converts every field named `due`."""
    enabled: bool


ConversionPlan = Union[ExplicitReferenceList, EnableAllDueFields]


def parse_references(value: str) -> List[Reference]:
    """
    Split a directive value into references, keeping their order.

    `#name` points at a special tag, a bare `name` at an optional field.
    Segments are not trimmed: `" #tag"` is the optional field `" #tag"`.
    """
    references: List[Reference] = []
    for segment in value.split(REFERENCE_SEPARATOR):
        if not segment:
            continue
        if segment.startswith(SPECIAL_TAG_MARKER):
            references.append(
                Reference(literal=segment, name=segment[len(SPECIAL_TAG_MARKER):], kind="special_tag")
            )
        else:
            references.append(Reference(literal=segment, name=segment, kind="optional"))
    return references


def _as_flag(value: Any):
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        word = value.lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    return None


def parse_directive(value: Any) -> ConversionPlan:
    flag = _as_flag(value)
    if flag is not None:
        logger.debug("🧭 parse_directive: enable flag → %s", flag)
        return EnableAllDueFields(enabled=flag)

    if not isinstance(value, str):
        raise RecordFormatError(
            f"{DIRECTIVE_TAG_KEY} must be a string or a boolean, got {type(value).__name__}"
        )

    references = parse_references(value)
    logger.debug("🧭 parse_directive: %s reference(s) %s", len(references), [r.literal for r in references])
    return ExplicitReferenceList(references=references)


# What the enable flag expands to; fields missing from the record are skipped
DUE_FIELD_REFERENCES: List[Reference] = [
    Reference(literal=SPECIAL_TAG_MARKER + DUE_FIELD_NAME, name=DUE_FIELD_NAME, kind="special_tag"),
    Reference(literal=DUE_FIELD_NAME, name=DUE_FIELD_NAME, kind="optional"),
]
