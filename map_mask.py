import logging

import lzallright
import numpy as np
from PIL import Image
from PIL.Image import Image as PILImage

from byte_cursor import ByteCursor
from map_errors import MaskDecompressionFailed
from map_headers import MaskRecord, mask_record_format, mask_table_format

MASK_ON = 0xF0

# LZO1X can expand at most ~255 output bytes per input byte
MAX_LZO_RATIO = 256

_lzo = lzallright.LZOCompressor()


def align4(width: int) -> int:
    """Round width up to the next multiple of 4"""
    return ((width >> 2) + (1 if width % 4 != 0 else 0)) << 2


def mask_plane_size(width: int, height: int) -> int:
    # 2 bits per pixel, rows padded to 4 pixels
    return (align4(width) * height) >> 2


def read_masks(cursor: ByteCursor) -> tuple[MaskRecord, ...]:
    """Read the mask table that follows the tile offsets, and every mask it points to"""
    _unknown, count = cursor.unpack(mask_table_format)
    offsets = cursor.read_u32s(count)
    logging.info(f"masks: {count}")

    masks = []
    for offset in offsets:
        cursor.seek(offset)
        masks.append(read_mask(cursor))
    return tuple(masks)


def read_mask(cursor: ByteCursor) -> MaskRecord:
    offset = cursor.tell()
    x, y, width, height, size = cursor.unpack(mask_record_format)
    data = cursor.read(size)
    logging.debug(f"mask @{offset}: x:{x} y:{y} w:{width} h:{height} size:{size}")

    bits = decompress_mask(data, mask_plane_size(width, height), offset)
    pixels = unpack_mask(bits, width, height)
    return MaskRecord(offset, x, y, width, height, size, data, bits, pixels)


def decompress_mask(data: bytes, expected: int, offset: int = 0) -> bytes:
    if expected > MAX_LZO_RATIO * (len(data) + 1):
        raise MaskDecompressionFailed(
            offset, f"{len(data)} bytes can't expand to {expected}"
        )

    try:
        out = _lzo.decompress(data, expected)
    except lzallright.LZOError as e:
        raise MaskDecompressionFailed(offset, f"lzo error {e}") from e
    except (MemoryError, OverflowError) as e:
        raise MaskDecompressionFailed(offset, f"can't allocate {expected} bytes") from e

    if len(out) != expected:
        raise MaskDecompressionFailed(
            offset, f"size is {len(out)} but should be {expected}"
        )
    return out


def unpack_mask(bits: bytes, width: int, height: int) -> np.ndarray:
    """
    Unpack the 2 bit plane into one byte per pixel.

    Pixel (k, i) lives at bit (k * align4(width) + i) * 2. Only a field value
    of 3 marks the pixel, which becomes 0xF0, everything else is 0.
    """
    aligned = align4(width)
    plane = np.frombuffer(bits, dtype=np.uint8).reshape(height, aligned // 4)
    # 4 pixels per byte, lowest bits first
    fields = (plane[:, :, None] >> np.array([0, 2, 4, 6], dtype=np.uint8)) & 3
    fields = fields.reshape(height, aligned)[:, :width]

    pixels = np.where(fields == 3, MASK_ON, 0).astype(np.uint8)
    pixels.flags.writeable = False
    return pixels


def rgb565_to_rgba(values: np.ndarray) -> np.ndarray:
    # legacy mapping, a marked pixel comes out as (0, 0x1C, 0x80, 0) which is
    # fully transparent. The real pixel encoding is still unknown
    v = values.astype(np.uint32)
    r = ((v >> 11) & 0x1F) << 3
    g = ((v >> 5) & 0x3F) << 2
    b = (v & 0x1F) << 3
    a = ((v >> 16) & 0x1F) << 3
    return np.stack([r, g, b, a], axis=-1).astype(np.uint8)


def mask_to_rgba(pixels: np.ndarray, color=rgb565_to_rgba) -> np.ndarray:
    rgba = color(pixels)
    if rgba.shape != pixels.shape + (4,):
        raise ValueError(f"color mapping returned shape {rgba.shape}")
    return rgba


def mask_image(mask: MaskRecord, color=rgb565_to_rgba) -> PILImage:
    return Image.fromarray(mask_to_rgba(mask.pixels, color))

