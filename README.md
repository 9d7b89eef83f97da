# tdswire

Pure-Python building blocks for the Tabular Data Stream (TDS) protocol that
SQL Server uses. There are no runtime dependencies.

## Modules

### `tdswire.buffer`

- `TdsBuffer(packet_size, transport)` splits outgoing data into TDS packets
  and joins incoming packets back into one message. The transport is any
  object with `read(size)` and `write(data)`, for example a socket file or an
  `io.BytesIO`.
  - Writing: `begin_packet(packet_type, reset_session=False)`, `write(data)`,
    `write_byte(value)`, `finish_packet()`. Each packet is sent with its
    eight-byte header as soon as it is full. `finish_packet()` marks the last
    one. The reset-session flag is set only for SQL batch, RPC request and
    transaction manager packets. `after_first` may hold a callable that runs
    once, after the first packet has been sent.
  - Reading: `begin_read()` reads the first packet and returns its type.
    `read_byte()` raises `EOFError` at the end of the message.
    `read(size)` returns `b""` at the end. `read_exact(size)`, `uint16()`,
    `uint32()`, `int32()`, `uint64()` (little-endian), `bvarchar()` and
    `usvarchar()` raise `StreamError` when the data runs out. A header whose
    size is larger than the packet size, or smaller than the header itself,
    raises `StreamError`.
  - `packet_size` and `resize(packet_size)` manage the negotiated size.
- `Header.unpack(data)` decodes a packet header. `PacketType` lists the
  packet types.
- `read_bvarchar(stream)` and `read_usvarchar(stream)` read UTF-16 strings
  that start with a one-byte or two-byte character count.

### `tdswire.errors`

- `SqlError`: an error reported by the server, with `number`, `state`,
  `severity`, `message`, `server_name`, `proc_name`, `line_no` and
  `all_errors`. `str()` gives `"mssql: <message>"`.
- `StreamError`: a malformed or truncated stream. `stream_error(message)`
  builds one prefixed with `"Invalid TDS stream: "`.
  `raise_bad_stream(err)` and `raise_bad_stream_format(fmt, *args)` raise it.
- `ServerError`: a fatal server error. The earlier `SqlError` is in
  `sql_error`.
- `BadConnectionError` and `RetryableError`. `RetryableError.matches(err)`
  tells whether `err` is a bad-connection error or that class.

### `tdswire.batch`

- `split(sql, separator)` breaks a script into batches at lines that start
  with the separator (for example `GO`, matched without regard to case). It
  skips separators that appear in comments and in quoted strings. `GO n`
  repeats the preceding batch `n` times, up to 1000. Inside a string, a
  backslash before a line break removes both.
- `has_prefix_fold(s, prefix)` is a case-insensitive prefix test.

### `tdswire.bulk`

- `BulkOptions` holds `check_constraints`, `fire_triggers`, `keep_nulls`,
  `kilobytes_per_batch`, `rows_per_batch`, `order` and `tablock`.
  `with_clause()` renders them as a `WITH (...)` clause.
- `BulkConfig` holds the table name, columns and options.
  `to_json()` and `from_json(text)` convert it to and from JSON.
- `copy_in(table, options, *columns)` builds an `INSERTBULK {json}`
  statement. `parse_copy_in(query)` reads the configuration back.
- `insert_bulk_statement(table, column_defs, options=None)` builds the
  `INSERT BULK` command from `(name, declaration)` pairs.

## Examples

```python
from tdswire.batch import split

split("select 1\ngo\nselect 2\n", "go")
# ['select 1\n', '\nselect 2\n']
```

```python
import io
from tdswire.buffer import TdsBuffer

transport = io.BytesIO()
buf = TdsBuffer(4096, transport)
buf.begin_packet(1, reset_session=False)
buf.write(b"payload")
buf.finish_packet()
```

```python
from tdswire.bulk import BulkOptions, copy_in, parse_copy_in

stmt = copy_in("test_table", BulkOptions(tablock=True), "col_a", "col_b")
config = parse_copy_in(stmt)
```

## What it does not do

This is not a database driver. It does not open connections, log in or
authenticate. It does not run queries, decode result tokens or encode row
values for bulk loading. You supply the transport and the higher protocol
layers yourself.

## Running the tests

```
pip install .[test]
pytest
```