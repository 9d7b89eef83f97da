"""Error types raised by the TDS protocol layer."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(eq=False)
class SqlError(Exception):
    """An error reported by SQL Server.

    ``all_errors`` lists every error received for the request, first to
    last, including the one described by the other fields.
    """

    number: int = 0
    state: int = 0
    severity: int = 0
    message: str = ""
    server_name: str = ""
    proc_name: str = ""
    line_no: int = 0
    all_errors: list[SqlError] = field(default_factory=list)

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:
        return "mssql: " + self.message


class StreamError(Exception):
    """Raised when the incoming TDS stream is malformed or truncated."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class ServerError(Exception):
    """The server hit a fatal error that aborted the process and the connection.

    The error reported before the abort is kept in ``sql_error``.
    """

    MESSAGE = "SQL Server had internal error"

    def __init__(self, sql_error: SqlError) -> None:
        super().__init__(self.MESSAGE)
        self.sql_error = sql_error
        self.__cause__ = sql_error

    def __str__(self) -> str:
        return self.MESSAGE


class BadConnectionError(Exception):
    """The connection is unusable and the operation may be retried on another."""

    def __init__(self, message: str = "driver: bad connection") -> None:
        super().__init__(message)


class RetryableError(Exception):
    """A bad connection at the start of a query; safe to retry.

    The underlying error is kept in ``err``.
    """

    def __init__(self, err: BaseException) -> None:
        super().__init__(str(err))
        self.err = err
        self.__cause__ = err

    def __str__(self) -> str:
        return str(self.err)

    def matches(self, err: object) -> bool:
        """Tell whether ``err`` is a bad-connection error."""
        if isinstance(err, type):
            return issubclass(err, BadConnectionError)
        return isinstance(err, BadConnectionError)


def stream_error(message: str) -> StreamError:
    """Build a StreamError describing an invalid TDS stream."""
    return StreamError("Invalid TDS stream: " + message)


def raise_bad_stream(err: object) -> None:
    """Raise a StreamError wrapping ``err``."""
    exc = stream_error(str(err))
    if isinstance(err, BaseException):
        raise exc from err
    raise exc


def raise_bad_stream_format(fmt: str, *args: object) -> None:
    """Raise a StreamError whose message is ``fmt % args``."""
    raise stream_error(fmt % args if args else fmt)