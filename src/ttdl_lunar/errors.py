"""
Exceptions raised by the lunar calendar plugin.

Structural problems with the incoming record raise `RecordFormatError`; the
entry point turns them into a non-zero exit. Problems with the directive or
the referenced dates never escape the pipeline: they are reported in-band as
`ConversionError` values (see `ttdl_lunar.conversion_modules`).
"""


class LunarCalendarError(Exception):
    """Base class for every error raised by the plugin."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class RecordFormatError(LunarCalendarError):
    """The record is not a valid TTDL plugin message."""
    pass


class DuplicateFieldError(RecordFormatError):
    """A field name appears more than once within one collection."""

    def __init__(self, collection: str, name: str):
        self.collection = collection
        self.name = name
        super().__init__(f'duplicated field "{name}" in {collection}')


class LunarConversionError(LunarCalendarError):
    """A lunar date cannot be mapped to a solar date."""
    pass
