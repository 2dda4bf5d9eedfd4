import struct

from map_errors import OutOfRange, Truncated


class ByteCursor:
    """Little-endian reader over an in-memory map file"""

    def __init__(self, data: bytes):
        self.data = data
        self.pos = 0

    def __len__(self):
        return len(self.data)

    @property
    def remaining(self) -> int:
        return len(self.data) - self.pos

    def tell(self) -> int:
        return self.pos

    def seek(self, offset: int):
        if offset < 0 or offset > len(self.data):
            raise OutOfRange(offset, len(self.data))
        self.pos = offset

    def read(self, n: int) -> bytes:
        if n > self.remaining:
            raise Truncated(self.pos, n, self.remaining)
        buf = self.data[self.pos : self.pos + n]
        self.pos += n
        return buf

    def skip(self, n: int):
        self.read(n)

    def read_u32(self) -> int:
        return struct.unpack("<I", self.read(4))[0]

    def read_u32s(self, count: int) -> tuple[int, ...]:
        return struct.unpack(f"<{count}I", self.read(4 * count))

    def unpack(self, fmt: str) -> tuple:
        return struct.unpack(fmt, self.read(struct.calcsize(fmt)))
