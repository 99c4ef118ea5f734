"""Game-wide constants and helpers for the pixel colour format.

Pixels are 32-bit integers laid out as ``0xAABBGGRR``: the value you get
when the bytes R, G, B, A are read as one little-endian word.
"""

WINDOW_TITLE = "cub3d"
WIDTH = 1280
HEIGHT = 720

# UI colours, 0xAaBbGgRr
C_TRANSPARENT = 0x00000000
C_TRANSLUCENT = 0x42000000
C_CEILING = 0xBB000000
C_FLOOR = 0x80424242
C_WALL = 0xFF2A66C0
C_DOOR = 0xFF153360
C_ERROR = 0xFF80FF00

# ratio of wall height / width
CAMERA_PLANE = 1

MLX_FONT_WIDTH = 10

STANDARD_TOKENS = " 01NESW"

# player defaults
STARTING_HEALTH = 100
MOVEMENT_SPEED = 6
ROTATION_SPEED = 3
DOOR_SHIFT_SPEED = 1
INTERACTION_RANGE = 2
COLLISION_HITBOX = 0.2

# weapon
G1_MAG_CAPACITY = 9
G1_SPARE_MAGS = 4
G1_DAMAGE = 12
G1_FRAME_RATE = 16
G1_TEXTURES_PATH = "./data/textures/g1_fri/"


def pack_colour(r: int, g: int, b: int, a: int = 0xFF) -> int:
    """Pack colour channels into one pixel value.

    Each channel is truncated to its low eight bits, as a byte store would.
    """
    return ((a & 0xFF) << 24) | ((b & 0xFF) << 16) | ((g & 0xFF) << 8) | (r & 0xFF)


def unpack_colour(colour: int) -> tuple[int, int, int, int]:
    """Split a pixel value into its ``(r, g, b, a)`` channels."""
    return (
        colour & 0xFF,
        (colour >> 8) & 0xFF,
        (colour >> 16) & 0xFF,
        (colour >> 24) & 0xFF,
    )