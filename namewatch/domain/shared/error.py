"""Error hierarchy for namewatch.

Error layers:
- NameWatchError: Base class for all namewatch errors
- DomainError: Bookkeeping violations, e.g. unwatching something never watched
- InfrastructureError: The bus refused a request or sent something unreadable

The service layer raises these. The integer-status API in
``namewatch.application.api`` and the inbound message filter are the two
boundaries that turn them into a status code or a log line.
"""


class NameWatchError(Exception):
    """Base class for all namewatch errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(message)


# =============================================================================
# Domain Errors
# =============================================================================


class DomainError(NameWatchError):
    """Base class for domain errors."""


class NotFoundError(DomainError):
    """No watch for the name, or no matching callback under it."""


# =============================================================================
# Infrastructure Errors
# =============================================================================


class InfrastructureError(NameWatchError):
    """Base class for infrastructure/system errors."""


class AllocationError(InfrastructureError):
    """Memory could not be obtained for a new registration."""


class BusError(InfrastructureError):
    """A synchronous request to the bus failed.

    Raised by BusConnection implementations. ``name`` carries the bus-level
    error name (e.g. ``org.freedesktop.DBus.Error.MatchRuleInvalid``).
    """

    def __init__(self, message: str, name: str | None = None) -> None:
        super().__init__(message, code="BUS_ERROR")
        self.name = name


class FilterInstallError(InfrastructureError):
    """The bus rejected installation of the inbound message filter."""


class MatchRuleError(InfrastructureError):
    """The bus rejected a new match rule."""


class MatchRuleRemovalError(InfrastructureError):
    """The bus rejected removal of a match rule."""


class DecodeError(InfrastructureError):
    """An inbound signal did not carry the expected arguments."""
