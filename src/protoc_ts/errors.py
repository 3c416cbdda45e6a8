from __future__ import annotations


UNHANDLED_BEHAVIOUR_SUFFIX = (
    " - This is unhandled behaviour and should be reported as an issue"
)


class GeneratorError(Exception):
    """Base class for errors that abort a generation run."""


class ParameterError(GeneratorError):
    """Raised when the plugin parameter string holds an unrecognised value."""


class UnhandledCaseError(GeneratorError):
    """Raised for descriptor shapes the generator has no mapping for.

    These point at a generator defect rather than a problem in the user's
    schema, so the message asks for a bug report.
    """

    def __init__(self, message: str):
        super().__init__(message + UNHANDLED_BEHAVIOUR_SUFFIX)


class UnresolvedTypeError(UnhandledCaseError):
    """Raised when a type reference has no entry in the export map."""

    def __init__(self, kind: str, type_name: str, referencing_file: str):
        self.kind = kind
        self.type_name = type_name
        self.referencing_file = referencing_file
        super().__init__(
            f"No {kind} export for: {type_name} (referenced from {referencing_file})"
        )
