"""Scene files: wall textures, colours, the tilemap, doors and the player start."""

from __future__ import annotations

import math
import re
import string
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterator, Optional

from .cell import get_id, get_type, is_door, is_solid, set_cell
from .config import (
    CAMERA_PLANE,
    HEIGHT,
    MOVEMENT_SPEED,
    ROTATION_SPEED,
    STARTING_HEALTH,
    WIDTH,
    pack_colour,
)
from .image import Texture, load_column_major, load_texture

DOOR_TEXTURE_PATH = "./scenes/textures/door.xpm42"

EMPTY_CELL = -1
MAX_ELEMENTS = 6
WALL_KEYS = ("north", "east", "south", "west")

_TEXTURE_PREFIXES = {"NO ": "north", "EA ": "east", "SO ": "south", "WE ": "west"}
_COLOUR_PREFIXES = {"F ": "floor", "C ": "ceiling"}
_CARDINALS = {"N": (-1.0, 0.0), "E": (0.0, 1.0), "S": (1.0, 0.0), "W": (0.0, -1.0)}
_ATOI = re.compile(r"[ \t\n\v\f\r]*([+-]?[0-9]+)")

Loader = Callable[[str], Texture]


class SceneError(Exception):
    """Raised when a scene file is missing, malformed or incomplete."""


class DoorState(Enum):
    OPEN = "open"
    CLOSED = "closed"
    OPENING = "opening"
    CLOSING = "closing"


@dataclass
class Door:
    """A sliding door; ``position`` runs from 0 (open) to 1 (closed)."""

    pos_y: int
    pos_x: int
    row: list[int] = field(repr=False, compare=False)
    position: float = 1.0
    state: DoorState = DoorState.CLOSED

    @property
    def cell(self) -> int:
        """The tilemap cell the door occupies."""
        return self.row[self.pos_x]

    @cell.setter
    def cell(self, value: int) -> None:
        self.row[self.pos_x] = value

    @property
    def solid(self) -> bool:
        """Whether the door's cell currently blocks movement."""
        return is_solid(self.cell)

    @solid.setter
    def solid(self, value: bool) -> None:
        cell = self.cell
        self.cell = set_cell(value, get_id(cell), get_type(cell))


@dataclass
class Doors:
    """All doors of a grid, indexed by the identifier stored in their cells."""

    items: list[Door] = field(default_factory=list)
    frame_shift: float = 0.0

    @property
    def count(self) -> int:
        return len(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[Door]:
        return iter(self.items)

    def __getitem__(self, index: int) -> Door:
        return self.items[index]

    def at(self, pos_y: int, pos_x: int) -> Optional[Door]:
        """Return the door at the given map position, or ``None``."""
        return next(
            (door for door in self.items if door.pos_y == pos_y and door.pos_x == pos_x),
            None,
        )


@dataclass
class Grid:
    """The tilemap, one row per map line, padded to a common width."""

    tilemap: list[list[int]]
    doors: Doors = field(default_factory=Doors)

    @property
    def y_max(self) -> int:
        return len(self.tilemap)

    @property
    def x_max(self) -> int:
        return max((len(row) for row in self.tilemap), default=0)

    def cell(self, y: int, x: int) -> int:
        """Return the cell at row ``y`` and column ``x``."""
        if not (0 <= y < self.y_max and 0 <= x < len(self.tilemap[y])):
            raise IndexError(f"cell ({y}, {x}) outside {self.y_max}x{self.x_max} map")
        return self.tilemap[y][x]


@dataclass
class Camera:
    """Player position, view direction and camera plane in map units."""

    pos_y: float = 0.0
    pos_x: float = 0.0
    dir_y: float = 0.0
    dir_x: float = 0.0
    plane_y: float = 0.0
    plane_x: float = 0.0
    movement_speed: float = float(MOVEMENT_SPEED)
    rotation_cos: float = math.cos(ROTATION_SPEED)
    rotation_sin: float = math.sin(ROTATION_SPEED)
    aspect_ratio: float = WIDTH / HEIGHT
    sign_rotate: int = 0


@dataclass
class Scene:
    """Everything read from a scene file."""

    grid: Grid
    camera: Camera
    textures: dict[str, Texture]
    floor: int = 0
    ceiling: int = 0
    health: int = STARTING_HEALTH
    treasure: int = 0


def init_camera(pos_y: int, pos_x: int, cardinal: str) -> Camera:
    """Place a camera in the centre of a cell, facing a cardinal direction."""
    try:
        dir_y, dir_x = _CARDINALS[cardinal]
    except KeyError as exc:
        raise ValueError(f"unknown cardinal direction {cardinal!r}") from exc
    aspect_ratio = WIDTH / HEIGHT
    return Camera(
        pos_y=pos_y + 0.5,
        pos_x=pos_x + 0.5,
        dir_y=dir_y,
        dir_x=dir_x,
        plane_y=CAMERA_PLANE * aspect_ratio * dir_x,
        plane_x=CAMERA_PLANE * aspect_ratio * -dir_y,
        movement_speed=float(MOVEMENT_SPEED),
        rotation_cos=math.cos(ROTATION_SPEED),
        rotation_sin=math.sin(ROTATION_SPEED),
        aspect_ratio=aspect_ratio,
        sign_rotate=0,
    )


def read_content(path) -> list[str]:
    """Read a scene file into lines, dropping blank lines and line endings."""
    try:
        with open(path, "rb") as handle:
            raw_lines = handle.readlines()
    except OSError as exc:
        raise SceneError(f"cannot open scene file {path}: {exc.strerror or exc}") from exc
    if not raw_lines:
        raise SceneError(f"scene file {path} is empty")
    lines = []
    for raw in raw_lines:
        line = raw.decode("utf-8", "surrogateescape")
        if line.startswith("\n"):
            continue
        lines.append(line[:-1] if line.endswith("\n") else line)
    return lines


def _atoi(text: str) -> int:
    match = _ATOI.match(text)
    return int(match.group(1)) if match else 0


def parse_colour(text: str) -> int:
    """Parse ``R,G,B`` into an opaque pixel value; channels wrap to a byte."""
    rest = text.lstrip(" ")
    channels = [_atoi(rest)]
    for _ in range(2):
        comma = rest.find(",")
        if comma < 0:
            raise SceneError(f"invalid colour {text!r}: expected R,G,B")
        rest = rest[comma + 1 :]
        channels.append(_atoi(rest))
    red, green, blue = channels
    return pack_colour(red, green, blue)


def _default_loader(path: str) -> Texture:
    if ".png" in path:
        return load_texture(path)
    return load_column_major(path)


def _load_element_texture(text: str, loader: Loader) -> Texture:
    path = text.lstrip(" ")
    if ".png" in path:
        kind = ".png"
    elif ".xpm42" in path:
        kind = ".xpm42"
    else:
        raise SceneError("Only .png or .xpm42 textures in scene svp")
    try:
        return loader(path)
    except (OSError, ValueError) as exc:
        raise SceneError(f"failed to load {kind} file from scene: {path}") from exc


def read_elements(
    lines: list[str], loader: Loader = _default_loader
) -> tuple[dict[str, Texture], dict[str, int], list[str]]:
    """Read the texture and colour lines at the head of a scene.

    Returns the loaded textures (including the door texture), the floor and
    ceiling colours, and the lines that follow the elements.
    """
    textures: dict[str, Texture] = {}
    colours = {"floor": 0, "ceiling": 0}
    count = 0
    index = 0
    while index < len(lines) and count < MAX_ELEMENTS:
        count += 1
        line = lines[index]
        texture_key = next(
            (key for prefix, key in _TEXTURE_PREFIXES.items() if line.startswith(prefix)),
            None,
        )
        colour_key = next(
            (key for prefix, key in _COLOUR_PREFIXES.items() if line.startswith(prefix)),
            None,
        )
        if texture_key is not None:
            textures[texture_key] = _load_element_texture(line[3:], loader)
        elif colour_key is not None:
            colours[colour_key] = parse_colour(line[2:])
        elif line:
            raise SceneError("missing or invalid scene.cub elements")
        else:
            count -= 1
        index += 1
    textures["door"] = _load_element_texture(DOOR_TEXTURE_PATH, loader)
    return textures, colours, lines[index:]


def read_tilemap(lines: list[str]) -> Grid:
    """Encode the map lines into a grid of cells and collect its doors."""
    width = max((len(line) for line in lines), default=0)
    tilemap = []
    door_count = 0
    for y, line in enumerate(lines):
        row = []
        for x, token in enumerate(line):
            if token == " ":
                row.append(EMPTY_CELL)
            elif token in string.digits:
                row.append(set_cell(token != "0", int(token), token))
            elif token in string.ascii_letters:
                if is_door(token):
                    row.append(set_cell(True, door_count, token))
                    door_count += 1
                else:
                    row.append(set_cell(True, 0, token))
            else:
                raise SceneError(
                    "invalid map: only letters, digits and spaces allowed "
                    f"(found {token!r} at row {y}, column {x})"
                )
        row.extend([EMPTY_CELL] * (width - len(row)))
        tilemap.append(row)
    grid = Grid(tilemap)
    grid.doors = find_doors(grid)
    return grid


def find_doors(grid: Grid) -> Doors:
    """Create a closed door for every door cell, in row-major order."""
    return Doors(
        [
            Door(y, x, row)
            for y, row in enumerate(grid.tilemap)
            for x, cell in enumerate(row)
            if is_door(get_type(cell))
        ]
    )


def find_player(grid: Grid) -> Camera:
    """Locate the single start position, clear its cell and return a camera."""
    camera = None
    for y, row in enumerate(grid.tilemap):
        for x, cell in enumerate(row):
            kind = get_type(cell)
            if kind not in _CARDINALS:
                continue
            if camera is not None:
                raise SceneError("invalid map: multiple player positions")
            camera = init_camera(y, x, kind)
            row[x] = set_cell(False, 0, "0")
    if camera is None:
        raise SceneError("invalid map: missing player position")
    return camera


def load_scene(path, loader: Loader = _default_loader) -> Scene:
    """Read a complete scene file."""
    content = read_content(path)
    textures, colours, rest = read_elements(content, loader)
    if any(key not in textures for key in WALL_KEYS):
        raise SceneError("missing scene.cub texture path")
    grid = read_tilemap(rest)
    camera = find_player(grid)
    return Scene(
        grid=grid,
        camera=camera,
        textures=textures,
        floor=colours["floor"],
        ceiling=colours["ceiling"],
    )