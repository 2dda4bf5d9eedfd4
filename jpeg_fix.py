"""
GEPJ tiles are jpeg streams with a broken Start Of Scan header and without the
0x00 byte that must follow every 0xFF inside the entropy coded data.

The SOS segment is stored with its last 3 bytes (spectral selection start/end,
successive approximation) missing. We force the segment length to 12, put
00 3F 00 back after the 9 bytes that are there, then stuff every 0xFF in the
scan data until the End Of Image marker.
"""

import logging

from map_errors import Truncated

SOS = b"\xff\xda"
EOI = 0xD9

SOS_LENGTH = 0x0C
# FF DA, 2 length bytes, 9 bytes of header body
SOS_STORED_SIZE = 13
SOS_MISSING = b"\x00\x3f\x00"


def repair_jpeg(data: bytes) -> bytes:
    sos = data.find(SOS)
    if sos < 0:
        logging.debug("no SOS marker, leaving tile as is")
        return bytes(data)

    if sos + SOS_STORED_SIZE > len(data):
        raise Truncated(sos, SOS_STORED_SIZE, len(data) - sos)

    out = bytearray(data[: sos + SOS_STORED_SIZE])
    out[sos + 3] = SOS_LENGTH
    out += SOS_MISSING

    stuffed = 0
    pos = sos + SOS_STORED_SIZE
    while True:
        ff = data.find(b"\xff", pos)
        # a trailing 0xFF has nothing after it to check, copy it as is
        if ff < 0 or ff + 1 >= len(data) or data[ff + 1] == EOI:
            out += data[pos:]
            break
        out += data[pos : ff + 1]
        out.append(0x00)
        stuffed += 1
        pos = ff + 1

    logging.debug(f"SOS at {sos}, stuffed {stuffed} bytes, {len(data)} -> {len(out)}")
    return bytes(out)
