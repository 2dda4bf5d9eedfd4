import numpy as np
from PIL import Image

import map2png
import parse_all
from map_decoder import decode_bytes
from map_mask import MASK_ON
from map_builder import build_map, jpeg_bytes, mask_record, mask_record_raw, tile_record

RED = (255, 0, 0)
GREEN = (0, 255, 0)
BLUE = (0, 0, 255)
WHITE = (255, 255, 255)


def close_to(pixel, color, tolerance=12):
    return all(abs(a - b) <= tolerance for a, b in zip(pixel, color))


def four_tile_map(third_tag=b"2GPJ", masks=()) -> bytes:
    # 400x300 is 2x2 tiles, the right column and bottom row get clipped
    tiles = [
        tile_record(b"2GPJ", jpeg_bytes(RED)),
        tile_record(b"2GPJ", jpeg_bytes(GREEN)),
        tile_record(third_tag, jpeg_bytes(BLUE)),
        tile_record(b"2GPJ", jpeg_bytes(WHITE)),
    ]
    return build_map(400, 300, tiles, masks=masks)


def test_tile_image():
    unit = decode_bytes(four_tile_map()).units[0]
    image = map2png.tile_image(unit)
    assert image.size == (320, 240)
    assert close_to(image.convert("RGB").getpixel((100, 100)), RED)


def test_compose_background():
    image = map2png.compose_background(decode_bytes(four_tile_map()))

    assert image.size == (400, 300)
    assert close_to(image.getpixel((10, 10)), RED)
    assert close_to(image.getpixel((319, 239)), RED)
    assert close_to(image.getpixel((330, 10)), GREEN)
    assert close_to(image.getpixel((10, 250)), BLUE)
    assert close_to(image.getpixel((399, 299)), WHITE)


def test_compose_background_missing_tile_is_black():
    decoded = decode_bytes(four_tile_map(third_tag=b"XXXX"))
    assert len(decoded.units) == 3

    image = map2png.compose_background(decoded)

    assert image.getpixel((10, 250)) == (0, 0, 0)
    assert close_to(image.getpixel((330, 250)), WHITE)


def test_main_writes_png(tmp_path):
    src = tmp_path / "1001.map"
    pixels = np.zeros((3, 7), dtype=np.uint8)
    pixels[1, 1] = MASK_ON
    src.write_bytes(four_tile_map(masks=[mask_record(5, 6, pixels)]))
    out = tmp_path / "out.png"
    masks_dir = tmp_path / "masks"
    tiles_dir = tmp_path / "tiles"

    map2png.main(
        [str(src), "-o", str(out), "--masks", str(masks_dir), "--tiles", str(tiles_dir)]
    )

    with Image.open(out) as image:
        assert image.size == (400, 300)
        assert image.format == "PNG"

    mask_files = list(masks_dir.iterdir())
    assert len(mask_files) == 1
    with Image.open(mask_files[0]) as mask:
        assert mask.size == (7, 3)
        assert mask.mode == "RGBA"

    assert sorted(p.name for p in tiles_dir.iterdir()) == ["0.jpg", "1.jpg", "2.jpg", "3.jpg"]
    assert (tiles_dir / "1.jpg").read_bytes() == jpeg_bytes(GREEN)


def test_main_writes_jpeg(tmp_path):
    src = tmp_path / "1001.map"
    src.write_bytes(four_tile_map())
    out = tmp_path / "out.jpg"

    map2png.main([str(src), "-o", str(out)])

    with Image.open(out) as image:
        assert image.format == "JPEG"
        assert image.size == (400, 300)


def test_convert_all(tmp_path):
    maps = tmp_path / "scene"
    maps.mkdir()
    (maps / "1001.map").write_bytes(four_tile_map())
    (maps / "1002.MAP").write_bytes(b"not a map file")
    (maps / "readme.txt").write_bytes(b"ignored")
    out_dir = tmp_path / "png"

    results = parse_all.convert_all(str(maps), str(out_dir))

    assert results == {
        str(maps / "1001.map"): True,
        str(maps / "1002.MAP"): False,
    }
    assert sorted(p.name for p in out_dir.iterdir()) == ["1001.map.png"]


def test_convert_all_survives_huge_mask(tmp_path):
    maps = tmp_path / "scene"
    maps.mkdir()
    huge = mask_record_raw(0, 0, 0x40000, 0x40000, b"\x11\x00\x00")
    (maps / "1001.map").write_bytes(four_tile_map(masks=[huge]))
    (maps / "1002.map").write_bytes(four_tile_map())

    results = parse_all.convert_all(str(maps), str(tmp_path / "png"))

    assert results == {
        str(maps / "1001.map"): False,
        str(maps / "1002.map"): True,
    }
