import pytest

from tdswire.errors import (
    BadConnectionError,
    RetryableError,
    ServerError,
    SqlError,
    StreamError,
    raise_bad_stream,
    raise_bad_stream_format,
    stream_error,
)


def test_server_error_message_and_wrapped_error():
    original = SqlError(message="underlying error")
    err = ServerError(original)
    assert str(err) == "SQL Server had internal error"
    assert err.sql_error.message == "underlying error"
    assert err.__cause__ is original


def test_retryable_error():
    original = BadConnectionError()
    err = RetryableError(original)
    assert str(err) == str(original)
    assert err.err is original
    assert err.__cause__ is original
    assert err.matches(BadConnectionError())
    assert err.matches(BadConnectionError)
    assert not err.matches(ValueError("other"))


def test_raise_bad_stream():
    msg = "test error XYZ"
    with pytest.raises(StreamError) as info:
        raise_bad_stream(ValueError(msg))
    assert str(info.value).endswith(msg)
    assert str(info.value).startswith("Invalid TDS stream: ")
    assert isinstance(info.value.__cause__, ValueError)


def test_raise_bad_stream_format():
    with pytest.raises(StreamError) as info:
        raise_bad_stream_format("the error is '%s'", "test error XYZ")
    assert str(info.value).endswith("the error is 'test error XYZ'")


def test_stream_error_builds_message():
    err = stream_error("broken")
    assert err.message == "Invalid TDS stream: broken"


def test_sql_error_fields_and_text():
    first = SqlError(number=8111, message="first")
    err = SqlError(
        number=50000,
        state=111,
        severity=18,
        message="test message",
        line_no=1,
        all_errors=[first],
    )
    assert str(err) == "mssql: test message"
    assert err.number == 50000
    assert err.state == 111
    assert err.severity == 18
    assert err.line_no == 1
    assert err.all_errors[0].number == 8111
    with pytest.raises(SqlError):
        raise err