import json
import logging

from ttdl_lunar.conversion_modules import ApplyConversionPlan, FormatResult
from ttdl_lunar.errors import RecordFormatError
from ttdl_lunar.utils.directive_utils import DIRECTIVE_TAG_KEY, parse_directive
from ttdl_lunar.utils.record_utils import normalize_message

logger = logging.getLogger(__name__)

# ───────────────────────────  Orchestrator  ────────────────────────────── #


class LunarCalendarFlow:
    """Full pipeline: plugin message → lunar dates converted → plugin message."""

    def __init__(self):
        self.apply_plan = ApplyConversionPlan()
        self.format_result = FormatResult()

    def __call__(self, input_text: str) -> str:
        return self.forward(input_text)

    def forward(self, input_text: str) -> str:
        try:
            message = json.loads(input_text)
        except json.JSONDecodeError as e:
            raise RecordFormatError(f"input is not valid JSON: {e}") from e

        # Nothing asked for: hand the input back byte for byte
        if not normalize_message(message, strict=False).has_special_tag(DIRECTIVE_TAG_KEY):
            logger.debug("⏭️  LunarCalendarFlow: no %s tag, passing through", DIRECTIVE_TAG_KEY)
            return input_text

        # Repeated field names only matter once something is converted
        record = normalize_message(message)

        plan = parse_directive(record.get_special_tag(DIRECTIVE_TAG_KEY))
        outcome = self.apply_plan(record, plan)
        return self.format_result(record, outcome)


def run(input_text: str) -> str:
    """Convert one TTDL plugin message. Raises `RecordFormatError` on malformed input."""
    return LunarCalendarFlow()(input_text)
