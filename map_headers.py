from collections import namedtuple

MAP_MAGIC = b"0.1M"

# every background tile is 320x240, the last row/column may be cut short
TILE_WIDTH = 320
TILE_HEIGHT = 240

TAG_JPEG = "GEPJ"  # stripped down jpeg, needs jpeg_fix.repair_jpeg
TAG_JPEG2 = "2GPJ"  # complete jpeg stream

# typedef struct {  // Map header
#     char magic[4];          // "0.1M", also read as a uint32 flag
#     uint32_t width;         // background width in pixels
#     uint32_t height;        // background height in pixels
#     uint32_t offsets[];     // rows * cols absolute tile offsets
# } map_header_t;
MapHeader = namedtuple(
    "MapHeader",
    ["magic", "flag", "width", "height", "rows", "cols", "index_size", "offsets"],
)

# typedef struct {  // Mask table, right after the tile offsets
#     uint32_t unknown;
#     uint32_t count;
#     uint32_t offsets[];     // count absolute mask record offsets
# } map_mask_table_t;
mask_table_format = "<II"

# typedef struct {  // Mask record
#     uint32_t x;
#     uint32_t y;
#     uint32_t width;
#     uint32_t height;
#     uint32_t size;          // length of lzo_data
#     uint8_t lzo_data[];     // LZO1X compressed 2 bit plane
# } map_mask_t;
MaskRecord = namedtuple(
    "MaskRecord",
    ["offset", "x", "y", "width", "height", "size", "data", "bits", "pixels"],
)
mask_record_format = "<IIIII"

# typedef struct {  // Tile record
#     uint32_t count;
#     uint32_t unknown[count];
#     char tag[4];            // "GEPJ" or "2GPJ"
#     uint32_t size;          // length of data
#     uint8_t data[];         // jpeg stream
# } map_unit_t;
TileUnit = namedtuple("TileUnit", ["index", "offset", "tag", "size", "data"])
unit_head_format = "<4sI"

DecodedMap = namedtuple("DecodedMap", ["header", "units", "masks"])
