import logging
import math
import struct

from byte_cursor import ByteCursor
from jpeg_fix import repair_jpeg
from map_errors import EncodingError, InvalidFormat
from map_headers import (
    MAP_MAGIC,
    TAG_JPEG,
    TAG_JPEG2,
    TILE_HEIGHT,
    TILE_WIDTH,
    DecodedMap,
    MapHeader,
    TileUnit,
    unit_head_format,
)
from map_mask import read_masks


def decode(filename: str) -> DecodedMap:
    """Read a whole .map file into memory and decode it"""
    with open(filename, "rb") as f:
        data = f.read()
    logging.info(f"map: {filename}, {len(data)} bytes")
    return decode_bytes(data)


def decode_bytes(data: bytes) -> DecodedMap:
    cursor = ByteCursor(bytes(data))
    header = read_header(cursor)
    masks = read_masks(cursor)
    units = read_units(header, cursor)
    return DecodedMap(header, units, masks)


def read_header(cursor: ByteCursor) -> MapHeader:
    magic = cursor.read(4)
    if magic != MAP_MAGIC:
        raise InvalidFormat(magic)
    # the magic doubles as a flag field
    flag = struct.unpack("<I", magic)[0]
    width = cursor.read_u32()
    height = cursor.read_u32()

    rows = math.ceil(height / TILE_HEIGHT)
    cols = math.ceil(width / TILE_WIDTH)
    index_size = rows * cols
    offsets = cursor.read_u32s(index_size)

    header = MapHeader(magic, flag, width, height, rows, cols, index_size, offsets)
    logging.info(f"w: {width}, h: {height}, rows: {rows}, cols: {cols}")
    return header


def read_units(header: MapHeader, cursor: ByteCursor) -> tuple[TileUnit, ...]:
    units = []
    for index, offset in enumerate(header.offsets):
        unit = read_unit(cursor, index, offset)
        if unit is not None:
            units.append(unit)
    logging.info(f"units: {len(units)} of {header.index_size}")
    return tuple(units)


def read_unit(cursor: ByteCursor, index: int, offset: int):
    cursor.seek(offset)

    # meaning unknown, just skip over it
    count = cursor.read_u32()
    cursor.skip(4 * count)

    head_pos = cursor.tell()
    raw_tag, size = cursor.unpack(unit_head_format)
    try:
        # any valid utf-8 tag is accepted, unknown ones are skipped below
        tag = raw_tag.decode("utf-8")
    except UnicodeDecodeError as e:
        raise EncodingError(head_pos, raw_tag) from e

    if tag == TAG_JPEG:
        data = repair_jpeg(cursor.read(size))
    elif tag == TAG_JPEG2:
        data = cursor.read(size)
    else:
        logging.debug(f"unit {index} @{offset}: skipping tag {tag!r}")
        return None

    logging.debug(f"unit {index} @{offset}: {tag} size: {size}")
    return TileUnit(index, offset, tag, size, data)
