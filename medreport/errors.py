"""
Error taxonomy for report processing
"""


class ReportProcessingError(Exception):
    """Base class for failures surfaced to the upload boundary."""

    status_code = 500


class InvalidInputType(ReportProcessingError):
    status_code = 400


class DocumentParseError(ReportProcessingError):
    pass


class StructuringError(ReportProcessingError):
    pass
