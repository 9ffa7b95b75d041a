"""Exceptions raised while binding spreadsheets to model outlines.

Every failure is a structural validation error: the sheet is malformed or
does not match the outline. None of them is retried or recovered from inside
the engine; callers surface the message to the end user.
"""


class BindingError(Exception):
    """Base class for all binding errors."""

    pass


# Spreadsheet access


class SheetError(BindingError):
    """Raised when the underlying spreadsheet cannot serve a request."""

    pass


class SheetNotFoundError(SheetError):
    """Raised when a range references a sheet that does not exist."""

    def __init__(self, sheet: str):
        self.sheet = sheet
        super().__init__(f"Sheet not found: {sheet}")


class UnsupportedValueError(SheetError):
    """Raised when a cell holds a value that is neither a string nor a number."""

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"Unsupported value {value!r}")


class UnboundedRangeError(SheetError):
    """Raised when a bounded range is required but an edge is open."""

    pass


class SpreadsheetAccessError(SheetError):
    """Raised when a remote spreadsheet API call fails."""

    pass


class SnapshotTooLargeError(SheetError):
    """Raised when a workbook snapshot exceeds the configured cell budget."""

    pass


# Headers and tables


class TableError(BindingError):
    """Raised when table structure cannot be detected."""

    pass


class EmptyHeaderError(TableError):
    """Raised when a header is blank."""

    def __init__(self):
        super().__init__("Empty header")


class NumericHeaderError(TableError):
    """Raised when a header cell holds a number."""

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"Numeric header {value}")


class UnalignedTableHeadersError(TableError):
    """Raised when blocks of one table do not start on the same row."""

    def __init__(self, header: str, top: int, expected_top: int):
        self.header = header
        super().__init__(
            f"Unaligned table headers: '{header}' starts at row {top}, expected {expected_top}"
        )


class DuplicateTableHeaderError(TableError):
    """Raised when a table holds two blocks with the same header."""

    def __init__(self, header: str):
        self.header = header
        super().__init__(f"Duplicate table header '{header}'")


class JaggedKeyColumnsError(TableError):
    """Raised when key columns which must be row-aligned have different heights."""

    def __init__(self, heights: list[int]):
        self.heights = heights
        super().__init__(f"Jagged key columns (heights: {heights})")


# Mapping


class MappingError(BindingError):
    """Raised when an outline cannot be bound to the detected tables."""

    pass


class HeaderCollisionError(MappingError):
    """Raised when two outline labels normalize to the same header."""

    def __init__(self, header: str, previous: str, label: str):
        self.header = header
        super().__init__(f"Header collision '{header}' ({previous}, {label})")


class ConflictingQualifierError(MappingError):
    """Raised when a binding qualifier collides with a label or another qualifier."""

    def __init__(self, label: str, qualifier: str):
        self.label = label
        self.qualifier = qualifier
        super().__init__(f"Conflicting qualifier '{qualifier}' in tensor {label}")


class MissingParameterError(MappingError):
    """Raised when no table block holds a parameter."""

    def __init__(self, label: str):
        self.label = label
        super().__init__(f"Parameter not found: {label}")


class DuplicateTensorError(MappingError):
    """Raised when a tensor's header appears in more than one table."""

    def __init__(self, label: str):
        self.label = label
        super().__init__(f"Duplicate tensor {label}")


class UnderqualifiedTensorError(MappingError):
    """Raised when a binding has neither a dimension nor a qualifier."""

    def __init__(self, label: str):
        self.label = label
        super().__init__(f"Underqualified tensor {label}")


class ReusedBindingHeaderError(MappingError):
    """Raised when two bindings of the same tensor resolve to one header."""

    def __init__(self, label: str, header: str):
        self.label = label
        self.header = header
        super().__init__(f"Reused binding header '{header}' in tensor {label}")


class MissingBindingError(MappingError):
    """Raised when a binding has no matching key box and cannot be projected."""

    def __init__(self, label: str, header: str):
        self.label = label
        self.header = header
        super().__init__(f"Missing binding '{header}' in tensor {label}")


class WideDimensionBlockError(MappingError):
    """Raised when a dimension's items are laid out in a wide block."""

    def __init__(self, label: str):
        self.label = label
        super().__init__(f"Wide dimension block {label}")


class UnknownDimensionError(MappingError):
    """Raised when no range holds a dimension's items."""

    def __init__(self, label: str):
        self.label = label
        super().__init__(f"Dimension not found: {label}")


class InvalidMappingError(MappingError):
    """Raised when a tensor mapping has an inconsistent key box layout."""

    pass


# Extraction


class ExtractionError(BindingError):
    """Raised when bound cells cannot be read as model inputs."""

    pass


class NonNumericValueError(ExtractionError):
    """Raised when a value cell does not hold a number."""

    def __init__(self, label: str, value: object):
        self.label = label
        self.value = value
        super().__init__(f"Non-numeric value {value!r} in tensor {label}")


class NonNumericItemError(ExtractionError):
    """Raised when a numeric dimension holds a non-numeric item."""

    def __init__(self, label: str, item: object):
        self.label = label
        self.item = item
        super().__init__(f"Expected only numbers for {label}, got {item!r}")


# Injection


class InjectionError(BindingError):
    """Raised when solver results cannot be written back."""

    pass


class MissingResultError(InjectionError):
    """Raised when a mapped variable has no result."""

    def __init__(self, label: str):
        self.label = label
        super().__init__(f"Missing result for {label}")


class InvalidScalarResultError(InjectionError):
    """Raised when a scalar variable receives more than one entry."""

    def __init__(self, label: str, count: int):
        self.label = label
        super().__init__(f"Invalid scalar variable result for {label} ({count} entries)")


class ConflictingKeyHashError(InjectionError):
    """Raised when two existing rows share the same key."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Conflicting key hash: {key}")


class DuplicatePivotValueError(InjectionError):
    """Raised when a pivot header row lists a category twice."""

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"Duplicate pivot value: {value}")


class UnspecifiedPivotValueError(InjectionError):
    """Raised when a result entry targets a category missing from the pivot row."""

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"Unspecified pivot value {value}")


class ConflictingResultEntryError(InjectionError):
    """Raised when two result entries target the same cell."""

    def __init__(self, label: str, key: str):
        self.label = label
        self.key = key
        super().__init__(f"Conflicting result entry in {label}: {key}")


class NonIndicatorValueError(InjectionError):
    """Raised when a projected variable receives a value other than 1."""

    def __init__(self, label: str, value: float):
        self.label = label
        self.value = value
        super().__init__(f"Non-indicator value {value} in {label}")
