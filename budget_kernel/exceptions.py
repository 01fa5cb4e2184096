"""
Typed Exception Hierarchy for the Budget Kernel.

Bad user data never raises: the ingestion layer reports it as
ValidationError values (see budget_kernel.domain.dtos). Exceptions are
reserved for misuse of the pipeline and for unusable configuration or
source files, where continuing would produce meaningless results.

Every exception carries a machine-readable ``code`` class attribute and
structured fields, so callers catch by type and report by code instead of
parsing messages.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    BudgetKernelError (base)
    |
    +-- PipelineContractError
    |   +-- UnparsedPricingError
    |   +-- UnknownItemError
    |
    +-- ConfigurationError
    |   +-- PresetNotFoundError
    |   +-- InvalidOptionError
    |
    +-- SourceError
        +-- UnsupportedSourceFormatError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Pipeline        | UNPARSED_PRICING            | Amount engine got unvalidated item rows
                | UNKNOWN_ITEM                | Item update names an id with no item row
----------------|-----------------------------|-----------------------------------------
Configuration   | PRESET_NOT_FOUND            | Unknown calculation preset name
                | INVALID_OPTION              | Option value outside its allowed domain
----------------|-----------------------------|-----------------------------------------
Source          | UNSUPPORTED_SOURCE_FORMAT   | No adapter for the file suffix
"""


class BudgetKernelError(Exception):
    """
    Base exception for all budget kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "BUDGET_KERNEL_ERROR"


# Pipeline contract exceptions


class PipelineContractError(BudgetKernelError):
    """A pipeline stage was called with input that skipped an earlier stage."""

    code: str = "PIPELINE_CONTRACT_ERROR"


class UnparsedPricingError(PipelineContractError):
    """Amount calculation was requested for item rows never run through validation."""

    code: str = "UNPARSED_PRICING"

    def __init__(self, row_id: str, line: int | None = None):
        self.row_id = row_id
        self.line = line
        location = f" (line {line})" if line is not None else ""
        super().__init__(
            f"Item {row_id}{location} has unparsed pricing; "
            f"run structural validation before calculating amounts"
        )


class UnknownItemError(PipelineContractError):
    """An item update named an id that has no item row."""

    code: str = "UNKNOWN_ITEM"

    def __init__(self, item_id: str):
        self.item_id = item_id
        super().__init__(f"No item row with id {item_id}")


# Configuration exceptions


class ConfigurationError(BudgetKernelError):
    """Base exception for configuration errors."""

    code: str = "CONFIGURATION_ERROR"


class PresetNotFoundError(ConfigurationError):
    """Requested calculation preset does not exist."""

    code: str = "PRESET_NOT_FOUND"

    def __init__(self, preset: str, available: tuple[str, ...] = ()):
        self.preset = preset
        self.available = available
        super().__init__(
            f"Calculation preset not found: {preset!r} "
            f"(available: {', '.join(available) or 'none'})"
        )


class InvalidOptionError(ConfigurationError):
    """A configuration option has a value outside its allowed domain."""

    code: str = "INVALID_OPTION"

    def __init__(self, option: str, value: object, reason: str):
        self.option = option
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid value for {option}: {value!r} ({reason})")


# Source exceptions


class SourceError(BudgetKernelError):
    """Base exception for source file errors."""

    code: str = "SOURCE_ERROR"


class UnsupportedSourceFormatError(SourceError):
    """No source adapter is registered for the file format."""

    code: str = "UNSUPPORTED_SOURCE_FORMAT"

    def __init__(self, source_format: str, supported: tuple[str, ...] = ()):
        self.source_format = source_format
        self.supported = supported
        super().__init__(
            f"Unsupported source format: {source_format!r} "
            f"(supported: {', '.join(supported) or 'none'})"
        )
