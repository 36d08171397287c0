import json
import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from ttdl_lunar.errors import LunarConversionError
from ttdl_lunar.utils.date_utils import lunar_to_solar, parse_lunar_date
from ttdl_lunar.utils.directive_utils import (
    DIRECTIVE_TAG_KEY,
    DUE_FIELD_REFERENCES,
    ConversionPlan,
    EnableAllDueFields,
    Reference,
)
from ttdl_lunar.utils.record_utils import FieldEntry, Record, denormalize_message

logger = logging.getLogger(__name__)

PLUGIN_NAME = "ttdl-lunar-calendar"

# ────────────────────────────  Error values  ─────────────────────────────── #


@dataclass(frozen=True)
class ConversionError:
    """A directive-level failure. Reported in the description, never raised."""
    literal: str

    def describe(self) -> str:
        return f'cannot convert "{self.literal}"'


@dataclass(frozen=True)
class NotFound(ConversionError):
    def describe(self) -> str:
        return f'not found "{self.literal}"'


@dataclass(frozen=True)
class DuplicateReference(ConversionError):
    def describe(self) -> str:
        return f'duplicated "{self.literal}"'


@dataclass(frozen=True)
class BadFormat(ConversionError):
    def describe(self) -> str:
        return f'unexpected format for "{self.literal}"'


@dataclass(frozen=True)
class BadValue(ConversionError):
    reason: str

    def describe(self) -> str:
        return f'unexpected value for "{self.literal}": {self.reason}'


@dataclass
class ConversionOutcome:
    record: Record
    error: Optional[ConversionError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


# ────────────────────────────  Modules  ─────────────────────────────────── #


class ApplyConversionPlan:
    """
    Convert the fields a plan points at, all or nothing.

    Works on a scratch copy of the record. The first failure stops the walk
    and the untouched input record is returned alongside the error.
    """

    def __call__(self, record: Record, plan: ConversionPlan) -> ConversionOutcome:
        return self.forward(record, plan)

    def forward(self, record: Record, plan: ConversionPlan) -> ConversionOutcome:
        scratch = record.copy()
        if isinstance(plan, EnableAllDueFields):
            error = self._apply_due_flag(scratch, plan)
        else:
            error = self._apply_references(scratch, plan.references)

        if error is not None:
            logger.debug("🛑 ApplyConversionPlan: aborted → %s", error.describe())
            return ConversionOutcome(record=record, error=error)

        logger.debug("✅ ApplyConversionPlan: all conversions applied")
        return ConversionOutcome(record=scratch)

    # ---- plans --------------------------------------------------------------
    def _apply_references(self, record: Record, references: Iterable[Reference]) -> Optional[ConversionError]:
        seen = set()
        for ref in references:
            entry = self._resolve(record, ref)
            if ref.literal in seen:
                return DuplicateReference(ref.literal)
            if entry is None:
                return NotFound(ref.literal)
            error = self._convert_entry(entry, ref)
            if error is not None:
                return error
            seen.add(ref.literal)
        return None

    def _apply_due_flag(self, record: Record, plan: EnableAllDueFields) -> Optional[ConversionError]:
        if plan.enabled:
            for ref in DUE_FIELD_REFERENCES:
                entry = self._resolve(record, ref)
                if entry is None:
                    continue
                error = self._convert_entry(entry, ref)
                if error is not None:
                    return error
        # The flag has done its job once the record is converted
        record.special_tags.pop(DIRECTIVE_TAG_KEY, None)
        return None

    # ---- steps --------------------------------------------------------------
    @staticmethod
    def _resolve(record: Record, ref: Reference) -> Optional[FieldEntry]:
        if ref.kind == "special_tag":
            return record.special_tags.get(ref.name)
        if record.optional is None:
            return None
        return record.optional.get(ref.name)

    @staticmethod
    def _convert_entry(entry: FieldEntry, ref: Reference) -> Optional[ConversionError]:
        lunar = parse_lunar_date(entry.value) if isinstance(entry.value, str) else None
        if lunar is None:
            return BadFormat(ref.literal)
        try:
            solar = lunar_to_solar(lunar.year, lunar.month, lunar.day)
        except LunarConversionError as e:
            return BadValue(ref.literal, e.message)

        logger.debug("🔁 %s: %s → %s", ref.literal, entry.value, solar)
        entry.value = solar
        return None


class FormatResult:
    """Serialize the converted record, or the original one with the error annotated."""

    def __init__(self, plugin_name: str = PLUGIN_NAME):
        self.plugin_name = plugin_name

    def __call__(self, original: Record, outcome: ConversionOutcome) -> str:
        return self.forward(original, outcome)

    def annotate(self, description: str, error: ConversionError) -> str:
        return f"[ERR({self.plugin_name}) {error.describe()}] {description}"

    def forward(self, original: Record, outcome: ConversionOutcome) -> str:
        if outcome.ok:
            record = outcome.record
        else:
            record = original.copy()
            record.description = self.annotate(original.description, outcome.error)
        return dump_message(denormalize_message(record))


def dump_message(message) -> str:
    return json.dumps(message, ensure_ascii=False, separators=(",", ":"))
