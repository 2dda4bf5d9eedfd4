#!/usr/bin/env python3

from io import BytesIO
import argparse
import logging
import os

from PIL import Image
from PIL.Image import Image as PILImage

import map_decoder
from map_headers import TILE_HEIGHT, TILE_WIDTH, DecodedMap, TileUnit
from map_mask import mask_image


def main(argv=None):
    parser = argparse.ArgumentParser(description="Convert MAP files to PNG")
    parser.add_argument("file", help="The MAP file to convert.")
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Enable verbose mode. Can be specified multiple times.",
    )
    parser.add_argument(
        "-o",
        "--output",
        help="Output filename, .png or .jpg (default: <file>.png)",
        default=None,
    )
    parser.add_argument(
        "--masks", help="Also save every mask as a PNG in this directory."
    )
    parser.add_argument(
        "--tiles", help="Also save every repaired tile as a JPEG in this directory."
    )
    args = parser.parse_args(argv)

    if args.verbose >= 2:
        logging.basicConfig(level=logging.DEBUG)
    elif args.verbose == 1:
        logging.basicConfig(level=logging.INFO)
    else:
        logging.basicConfig(level=logging.WARNING)

    filename = args.file
    out = args.output if args.output else f"{os.path.basename(filename)}.png"

    decoded = map_decoder.decode(filename)
    convert(decoded, out)

    if args.masks:
        save_masks(decoded, args.masks)
    if args.tiles:
        save_tiles(decoded, args.tiles)


def convert(decoded: DecodedMap, out: str):
    image = compose_background(decoded)
    # jpeg has no alpha
    if out.lower().endswith((".jpg", ".jpeg")):
        image = image.convert("RGB")
    logging.debug(f"saving to {out}")
    image.save(out)


def tile_image(unit: TileUnit) -> PILImage:
    image = Image.open(BytesIO(unit.data))
    image.load()
    return image


# tiles are laid out row major, 320x240 each. The tiles on the last row and
# column hang over the edge of the map and get clipped
def compose_background(decoded: DecodedMap) -> PILImage:
    header = decoded.header
    background = Image.new("RGB", (header.width, header.height))

    for unit in decoded.units:
        row, col = divmod(unit.index, header.cols)
        tile = tile_image(unit).convert("RGB")
        background.paste(tile, (col * TILE_WIDTH, row * TILE_HEIGHT))

    missing = header.index_size - len(decoded.units)
    if missing:
        logging.warning(f"{missing} tiles missing, left black")
    return background


def save_masks(decoded: DecodedMap, directory: str):
    os.makedirs(directory, exist_ok=True)
    for mask in decoded.masks:
        out = os.path.join(directory, f"{mask.offset}.png")
        logging.debug(f"saving mask to {out}")
        mask_image(mask).save(out)


def save_tiles(decoded: DecodedMap, directory: str):
    os.makedirs(directory, exist_ok=True)
    for unit in decoded.units:
        out = os.path.join(directory, f"{unit.index}.jpg")
        logging.debug(f"saving tile to {out}")
        with open(out, "wb") as f:
            f.write(unit.data)


if __name__ == "__main__":
    main()
