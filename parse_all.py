#!/usr/bin/env python3

import argparse
import fnmatch
import logging
import os

import map2png
import map_decoder
from map_errors import MapDecodeError


def main(argv=None):
    parser = argparse.ArgumentParser(description="Convert every MAP file under a directory")
    parser.add_argument("dir", nargs="?", default=".", help="Directory to search.")
    parser.add_argument(
        "-o", "--output-dir", default=".", help="Where to write the PNG files."
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    convert_all(args.dir, args.output_dir)


def convert_all(dir: str, output_dir: str) -> dict[str, bool]:
    results = {}
    os.makedirs(output_dir, exist_ok=True)

    # Recursively find all .map files (case-insensitive)
    for root, dirs, files in os.walk(dir):
        for filename in sorted(files):
            if not fnmatch.fnmatchcase(filename.lower(), "*.map"):
                continue

            filepath = os.path.join(root, filename)
            try:
                decoded = map_decoder.decode(filepath)
                out = os.path.join(output_dir, f"{filename}.png")
                map2png.convert(decoded, out)
                logging.info(f"{filename}: SUCCESS")
                results[filepath] = True
            except (MapDecodeError, OSError) as e:
                logging.info(f"{filename}: FAIL {e}")
                results[filepath] = False
    return results


if __name__ == "__main__":
    main()
