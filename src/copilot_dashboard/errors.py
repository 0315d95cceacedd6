class DashboardError(Exception):
    """
    base class for errors raised by the dashboard data sources.
    """

    def __init__(self, message: "str") -> "None":
        self.message = message
        super().__init__(message)


class UpstreamError(DashboardError):
    """
    UpstreamError is raised when a collaborator answers with a
    non-success status. Carries the HTTP status and the vendor
    supplied message.
    """

    def __init__(self, status: "int", message: "str") -> "None":
        self.status = status
        super().__init__(message)

    def __str__(self) -> "str":
        return f"{self.status}: {self.message}"


class NoDataError(DashboardError):
    """
    the collaborator succeeded but returned nothing usable.
    """

    def __init__(self, message: "str" = "No data found") -> "None":
        super().__init__(message)


class UnknownError(DashboardError):
    """
    wraps any unexpected exception (network failure, malformed
    payloads). Raise it from the original exception.
    """

    @classmethod
    def wrap(cls, exc: "BaseException") -> "UnknownError":
        return cls(str(exc) or type(exc).__name__)
