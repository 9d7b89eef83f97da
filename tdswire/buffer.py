"""Packet framing for the TDS transport: splitting writes and joining reads."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import Callable, Optional, Protocol

from tdswire.errors import StreamError, raise_bad_stream

HEADER_SIZE = 8
_HEADER = struct.Struct(">BBHHBB")


class PacketType(IntEnum):
    """TDS packet types."""

    SQL_BATCH = 1
    PRE_TDS7_LOGIN = 2
    RPC_REQUEST = 3
    REPLY = 4
    ATTENTION = 6
    BULK_LOAD_BCP = 7
    FED_AUTH_TOKEN = 8
    TRANS_MGR_REQ = 14
    LOGIN7 = 16
    SSPI_MESSAGE = 17
    PRELOGIN = 18


_RESETTABLE = frozenset(
    {PacketType.SQL_BATCH, PacketType.RPC_REQUEST, PacketType.TRANS_MGR_REQ}
)


class _Reader(Protocol):
    def read(self, size: int) -> bytes: ...


@dataclass(frozen=True)
class Header:
    """The eight-byte header that starts every TDS packet."""

    packet_type: int
    status: int
    size: int
    spid: int
    packet_no: int
    pad: int

    @classmethod
    def unpack(cls, data: bytes) -> Header:
        """Decode a header from its eight bytes."""
        return cls(*_HEADER.unpack(bytes(data[:HEADER_SIZE])))


def _read_full(stream: _Reader, size: int) -> bytes:
    """Read exactly ``size`` bytes or raise EOFError."""
    chunks = bytearray()
    while len(chunks) < size:
        chunk = stream.read(size - len(chunks))
        if not chunk:
            if chunks:
                raise EOFError("unexpected EOF")
            raise EOFError("EOF")
        chunks += chunk
    return bytes(chunks)


def _as_packet_type(value: int) -> int:
    try:
        return PacketType(value)
    except ValueError:
        return value


class TdsBuffer:
    """Reads and writes TDS packets over a byte transport.

    The transport needs ``read(size)`` and ``write(data)``. Write and read
    state are kept apart so that an attention signal can be sent while a
    response is being read.
    """

    def __init__(self, packet_size: int, transport) -> None:
        self.transport = transport
        self._packet_size = packet_size
        self._wbuf = bytearray(packet_size)
        self._wpos = HEADER_SIZE
        self._wseq = 0
        self._wtype = 0
        self._rbuf = b""
        self._rpos = 0
        self._rsize = 0
        self._final = False
        self._rtype = 0
        self.after_first: Optional[Callable[[], None]] = None

    @property
    def packet_size(self) -> int:
        """The negotiated packet size."""
        return self._packet_size

    def resize(self, packet_size: int) -> None:
        """Change the packet size used from now on."""
        if packet_size > len(self._wbuf):
            self._wbuf.extend(bytes(packet_size - len(self._wbuf)))
        self._packet_size = packet_size

    # Writing

    def _flush(self) -> None:
        self._wbuf[0] = self._wtype
        struct.pack_into(">H", self._wbuf, 2, self._wpos)
        self._wbuf[6] = self._wseq
        self.transport.write(bytes(self._wbuf[: self._wpos]))
        if self.after_first is not None:
            hook, self.after_first = self.after_first, None
            hook()
        self._wpos = HEADER_SIZE
        self._wseq = (self._wseq + 1) & 0xFF

    def begin_packet(self, packet_type: int, reset_session: bool = False) -> None:
        """Start a new outgoing message of the given packet type."""
        status = 0
        if reset_session and packet_type in _RESETTABLE:
            status = 0x08
        self._wbuf[1] = status
        self._wpos = HEADER_SIZE
        self._wseq = 1
        self._wtype = int(packet_type)

    def write(self, data: bytes) -> int:
        """Append bytes to the message, sending full packets as needed."""
        view = memoryview(bytes(data))
        total = 0
        while True:
            room = self._packet_size - self._wpos
            chunk = view[:room]
            self._wbuf[self._wpos : self._wpos + len(chunk)] = chunk
            self._wpos += len(chunk)
            total += len(chunk)
            if len(chunk) == len(view):
                return total
            self._flush()
            view = view[len(chunk) :]

    def write_byte(self, value: int) -> None:
        """Append a single byte to the message."""
        if self._wpos >= self._packet_size:
            self._flush()
        self._wbuf[self._wpos] = value
        self._wpos += 1

    def finish_packet(self) -> None:
        """Mark the current packet as the last one and send it."""
        self._wbuf[1] |= 0x01
        self._flush()

    # Reading

    def _read_next_packet(self) -> None:
        header = Header.unpack(_read_full(self.transport, HEADER_SIZE))
        if header.size > self._packet_size:
            raise StreamError("invalid packet size, it is longer than buffer size")
        if header.size < HEADER_SIZE:
            raise StreamError("invalid packet size, it is shorter than header size")
        body = _read_full(self.transport, header.size - HEADER_SIZE)
        self._rbuf = body
        self._rpos = 0
        self._rsize = len(body)
        self._final = header.status != 0
        self._rtype = header.packet_type

    def _ensure_data(self) -> bool:
        """Load packets until data is available; False at end of message."""
        while self._rpos == self._rsize:
            if self._final:
                return False
            self._read_next_packet()
        return True

    def begin_read(self) -> int:
        """Read the first packet of a response and return its packet type."""
        self._read_next_packet()
        return _as_packet_type(self._rtype)

    def read_byte(self) -> int:
        """Return the next byte of the message; EOFError at its end."""
        if not self._ensure_data():
            raise EOFError("EOF")
        value = self._rbuf[self._rpos]
        self._rpos += 1
        return value

    def read(self, size: int) -> bytes:
        """Return up to ``size`` bytes from the current packet; b"" at the end."""
        if not self._ensure_data():
            return b""
        chunk = self._rbuf[self._rpos : self._rpos + size]
        self._rpos += len(chunk)
        return chunk

    def read_exact(self, size: int) -> bytes:
        """Return exactly ``size`` bytes or raise StreamError."""
        chunks = bytearray()
        try:
            while len(chunks) < size:
                chunk = self.read(size - len(chunks))
                if not chunk:
                    raise EOFError("unexpected EOF" if chunks else "EOF")
                chunks += chunk
        except (EOFError, OSError, StreamError) as err:
            raise_bad_stream(err)
        return bytes(chunks)

    def uint16(self) -> int:
        return int.from_bytes(self.read_exact(2), "little")

    def uint32(self) -> int:
        return int.from_bytes(self.read_exact(4), "little")

    def int32(self) -> int:
        return int.from_bytes(self.read_exact(4), "little", signed=True)

    def uint64(self) -> int:
        return int.from_bytes(self.read_exact(8), "little")

    def bvarchar(self) -> str:
        """Read a string prefixed by a one-byte character count."""
        return read_bvarchar(self)

    def usvarchar(self) -> str:
        """Read a string prefixed by a two-byte character count."""
        return read_usvarchar(self)


def _read_ucs2(stream: _Reader, prefix_size: int) -> str:
    try:
        count = int.from_bytes(_read_full(stream, prefix_size), "little")
        raw = _read_full(stream, count * 2)
    except (EOFError, OSError, StreamError) as err:
        raise_bad_stream(err)
    return raw.decode("utf-16-le", errors="replace")


def read_bvarchar(stream: _Reader) -> str:
    """Read a UCS-2 string with a one-byte length prefix; StreamError on failure."""
    return _read_ucs2(stream, 1)


def read_usvarchar(stream: _Reader) -> str:
    """Read a UCS-2 string with a two-byte length prefix; StreamError on failure."""
    return _read_ucs2(stream, 2)