class MapDecodeError(ValueError):
    """Base class for everything that can go wrong reading a map file"""


class InvalidFormat(MapDecodeError):
    def __init__(self, magic: bytes):
        self.magic = magic
        super().__init__(f"Invalid map file, magic: {magic!r}")


class Truncated(MapDecodeError, EOFError):
    def __init__(self, offset: int, expected: int, available: int):
        self.offset = offset
        self.expected = expected
        self.available = available
        super().__init__(
            f"Unexpected EOF at offset {offset}: "
            f"need {expected} bytes, {available} available"
        )


class OutOfRange(MapDecodeError, IndexError):
    def __init__(self, offset: int, length: int):
        self.offset = offset
        self.length = length
        super().__init__(f"Seek to {offset} past end of buffer ({length} bytes)")


class MaskDecompressionFailed(MapDecodeError):
    def __init__(self, offset: int, reason: str):
        self.offset = offset
        self.reason = reason
        super().__init__(f"Decompress mask data failed at offset {offset}: {reason}")


class EncodingError(MapDecodeError, UnicodeError):
    def __init__(self, offset: int, raw: bytes):
        self.offset = offset
        self.raw = raw
        super().__init__(f"Invalid tag {raw!r} at offset {offset}")
