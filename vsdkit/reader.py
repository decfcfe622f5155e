"""A cursor over a byte string with typed integer reads."""

import struct


class Reader:
    """Reads integers and byte runs from an in-memory buffer.

    Reads past the end raise EOFError and leave the position unchanged.
    """

    def __init__(self, data, little_endian=False):
        self._data = bytes(data)
        self._pos = 0
        self.little_endian = little_endian
        self._order = "<" if little_endian else ">"

    def has_more_data(self):
        return self._pos < len(self._data)

    @property
    def length(self):
        return len(self._data)

    @property
    def position(self):
        return self._pos

    def _take(self, count):
        if count < 0:
            raise ValueError(f"cannot read a negative number of bytes ({count})")
        end = self._pos + count
        if end > len(self._data):
            raise EOFError("failed to fill whole buffer")
        chunk = self._data[self._pos:end]
        self._pos = end
        return chunk

    def _unpack(self, fmt, size):
        return struct.unpack(self._order + fmt, self._take(size))[0]

    def read_u16(self):
        return self._unpack("H", 2)

    def read_i32(self):
        return self._unpack("i", 4)

    def read_u32(self):
        return self._unpack("I", 4)

    def read_u64(self):
        return self._unpack("Q", 8)

    def read_bytes(self, count):
        return self._take(count)

    def read_u16_array(self, count):
        """Read ``count`` bytes and return them as 16-bit code units."""
        if count % 2:
            raise ValueError(f"cannot split {count} bytes into 16-bit units")
        raw = self._take(count)
        return list(struct.unpack(f"{self._order}{count // 2}H", raw))

    def skip(self, count):
        position = self._pos + count
        if position > len(self._data) or position < 0:
            raise EOFError("mp4reader: out of bounds")
        self._pos = position