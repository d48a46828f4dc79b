# rupeebook/errors.py


class RupeeBookError(Exception):
    """Base class for errors raised by rupeebook."""


class InvalidTransaction(RupeeBookError, ValueError):
    pass


class InvalidFilter(RupeeBookError, ValueError):
    pass


class UnknownReportType(RupeeBookError, ValueError):
    def __init__(self, report_type):
        self.report_type = report_type
        super().__init__(f"Unknown report type: {report_type!r}")


class PermissionDenied(RupeeBookError):
    pass


class LoaderError(RupeeBookError, RuntimeError):
    pass


class InvalidConfig(RupeeBookError, ValueError):
    pass
