import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ttdl_lunar.errors import DuplicateFieldError, RecordFormatError
from ttdl_lunar.types.message_types import FieldGroupTD, PluginMessageTD

logger = logging.getLogger(__name__)

DESCRIPTION_KEY = "description"
SPECIAL_TAGS_KEY = "specialTags"
OPTIONAL_KEY = "optional"


@dataclass
class FieldEntry:
    value: Any
    index: int  # position of the group in the raw list


# Keyed by field name, in first-seen order
FieldMap = Dict[str, FieldEntry]


@dataclass
class Record:
    """
    A plugin message with both field collections turned into name-keyed maps.

    `raw` is the decoded top-level object as received. It is only read back
    by `denormalize_message` to keep members the plugin does not know about,
    in their original order.
    """
    description: str
    special_tags: FieldMap
    optional: Optional[FieldMap] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    def copy(self) -> "Record":
        return copy.deepcopy(self)

    def get_special_tag(self, name: str) -> Optional[Any]:
        entry = self.special_tags.get(name)
        return entry.value if entry is not None else None

    def has_special_tag(self, name: str) -> bool:
        return name in self.special_tags


# ───────────────────────────  Collections  ────────────────────────────── #

def normalize_groups(groups: Any, collection: str, strict: bool = True) -> FieldMap:
    """
    Turn `[{"a": "1"}, {"b": "2"}]` into `{"a": FieldEntry("1", 0), "b": FieldEntry("2", 1)}`.

    Every group must be an object with exactly one member. A name seen twice
    within the same collection raises `DuplicateFieldError`, or keeps its
    first entry when `strict` is off.
    """
    if not isinstance(groups, list):
        raise RecordFormatError(f"{collection} must be a list, got {type(groups).__name__}")

    fields: FieldMap = {}
    for index, group in enumerate(groups):
        if not isinstance(group, dict) or len(group) != 1:
            raise RecordFormatError(
                f"{collection}[{index}] must be an object with exactly one member"
            )
        (name, value), = group.items()
        if name in fields:
            if strict:
                raise DuplicateFieldError(collection, name)
            continue
        fields[name] = FieldEntry(value=value, index=index)

    logger.debug("🧩 normalize_groups: %s → %s field(s)", collection, len(fields))
    return fields


def denormalize_groups(fields: FieldMap) -> List[FieldGroupTD]:
    ordered = sorted(fields.items(), key=lambda item: item[1].index)
    return [{name: entry.value} for name, entry in ordered]


# ───────────────────────────  Messages  ───────────────────────────────── #

def normalize_message(message: Any, strict: bool = True) -> Record:
    if not isinstance(message, dict):
        raise RecordFormatError(f"message must be an object, got {type(message).__name__}")

    description = message.get(DESCRIPTION_KEY)
    if not isinstance(description, str):
        raise RecordFormatError(f"{DESCRIPTION_KEY} must be a string")

    if SPECIAL_TAGS_KEY not in message:
        raise RecordFormatError(f"{SPECIAL_TAGS_KEY} is missing")
    special_tags = normalize_groups(message[SPECIAL_TAGS_KEY], SPECIAL_TAGS_KEY, strict)

    raw_optional = message.get(OPTIONAL_KEY)
    optional = None
    if raw_optional is not None:
        optional = normalize_groups(raw_optional, OPTIONAL_KEY, strict)

    return Record(
        description=description,
        special_tags=special_tags,
        optional=optional,
        raw=message,
    )


def denormalize_message(record: Record) -> PluginMessageTD:
    message: Dict[str, Any] = dict(record.raw)
    message[DESCRIPTION_KEY] = record.description
    message[SPECIAL_TAGS_KEY] = denormalize_groups(record.special_tags)
    if record.optional is not None:
        message[OPTIONAL_KEY] = denormalize_groups(record.optional)
    return message
