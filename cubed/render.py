"""Ray casting: walk rays through the grid and draw textured wall columns."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .cell import get_id, get_type, is_door, is_solid, is_transparent
from .image import Image, Texture
from .mathutil import sign
from .scene import EMPTY_CELL, Camera, Grid

# Stand-in for an infinite step when a ray runs parallel to an axis.
_UNREACHABLE_STEP = float(2**32)
# Nudge that keeps the centre row of a texture from flickering between texels.
_TEXEL_NUDGE = 0.0005


class HitAxis(Enum):
    """Which kind of grid line a ray crossed last."""

    HORIZONTAL = 0
    VERTICAL = 1


@dataclass
class Ray:
    """State of one ray walking through the grid."""

    camera_x: float = 0.0
    pos_x: int = 0
    pos_y: int = 0
    dir_x: float = 0.0
    dir_y: float = 0.0
    step_x: float = 0.0
    step_y: float = 0.0
    total_x: float = 0.0
    total_y: float = 0.0
    start_x: float = 0.0
    start_y: float = 0.0
    partial: float = 0.0
    distance: float = 0.0
    door_position: float = 0.0
    sign_x: int = 0
    sign_y: int = 0
    hit_type: HitAxis = HitAxis.HORIZONTAL
    hits_door: bool = False

    @classmethod
    def from_camera(cls, camera: Camera, camera_x: float) -> Ray:
        """Aim a ray through ``camera_x`` (-1 left edge, 1 right edge)."""
        pos_x = int(camera.pos_x)
        pos_y = int(camera.pos_y)
        dir_x = camera.dir_x + camera.plane_x * 0.5 * camera_x
        dir_y = camera.dir_y + camera.plane_y * 0.5 * camera_x
        step_x = abs(1 / dir_x) if dir_x != 0 else _UNREACHABLE_STEP
        step_y = abs(1 / dir_y) if dir_y != 0 else _UNREACHABLE_STEP
        sign_x = sign(dir_x)
        sign_y = sign(dir_y)
        if sign_x > 0:
            total_x = (pos_x + 1 - camera.pos_x) * step_x
        else:
            total_x = (camera.pos_x - pos_x) * step_x
        if sign_y > 0:
            total_y = (pos_y + 1 - camera.pos_y) * step_y
        else:
            total_y = (camera.pos_y - pos_y) * step_y
        return cls(
            camera_x=camera_x,
            pos_x=pos_x,
            pos_y=pos_y,
            dir_x=dir_x,
            dir_y=dir_y,
            step_x=step_x,
            step_y=step_y,
            total_x=total_x,
            total_y=total_y,
            start_x=camera.pos_x,
            start_y=camera.pos_y,
            sign_x=sign_x,
            sign_y=sign_y,
        )


@dataclass
class Walls:
    """The wall image and the textures drawn onto it."""

    image: Image
    north: Texture
    east: Texture
    south: Texture
    west: Texture
    door: Texture
    recast: bool = True


def _cell_at(grid: Grid, y: int, x: int) -> int:
    """Return a cell; anything outside the map counts as empty space."""
    if 0 <= y < grid.y_max:
        row = grid.tilemap[y]
        if 0 <= x < len(row):
            return row[x]
    return EMPTY_CELL


def _calculate_partial(ray: Ray) -> None:
    if ray.hit_type is HitAxis.VERTICAL:
        partial = ray.start_y + (ray.total_x - ray.step_x) * ray.dir_y
    else:
        partial = ray.start_x + (ray.total_y - ray.step_y) * ray.dir_x
    ray.partial = partial - int(partial)


def _door_half_step(ray: Ray, grid: Grid, cell: int, simple_doors: bool) -> None:
    if ray.hit_type is HitAxis.HORIZONTAL:
        new_partial = ray.partial + (ray.step_y * 0.5) * ray.dir_x
    else:
        new_partial = ray.partial + (ray.step_x * 0.5) * ray.dir_y

    if new_partial < 0 or new_partial > 1:
        if simple_doors:
            return
        steps = abs(int(new_partial)) + (new_partial < 0)
        if ray.hit_type is HitAxis.HORIZONTAL:
            next_y, next_x = ray.pos_y, ray.pos_x + ray.sign_x * steps
            if not 0 <= next_x < grid.x_max:
                return
        else:
            next_y, next_x = ray.pos_y + ray.sign_y * steps, ray.pos_x
            if not 0 <= next_y < grid.y_max:
                return
        next_cell = _cell_at(grid, next_y, next_x)
        if not is_door(get_type(next_cell)):
            return
        cell = next_cell

    ray.partial = (new_partial - int(new_partial)) + (new_partial < 0)
    ray.door_position = grid.doors[get_id(cell)].position
    if get_type(cell) == "d":
        ray.partial = 1 - ray.partial
    ray.hits_door = ray.partial < ray.door_position
    if ray.hits_door:
        ray.partial += 1 - ray.door_position
        ray.total_y += ray.step_y * 0.5
        ray.total_x += ray.step_x * 0.5


def _hit_position(ray: Ray, grid: Grid, simple_doors: bool) -> bool:
    cell = _cell_at(grid, ray.pos_y, ray.pos_x)
    kind = get_type(cell)
    if not is_solid(cell) and not is_door(kind):
        return False
    _calculate_partial(ray)
    if kind.isdigit():
        return True
    if is_transparent(kind):
        if ray.hit_type is HitAxis.HORIZONTAL:
            facing = _cell_at(grid, ray.pos_y - ray.sign_y, ray.pos_x)
        else:
            facing = _cell_at(grid, ray.pos_y, ray.pos_x - ray.sign_x)
        if is_transparent(get_type(facing)):
            return False
    if is_door(kind):
        _calculate_partial(ray)
        _door_half_step(ray, grid, cell, simple_doors)
        return ray.hits_door
    return True


def cast_ray(ray: Ray, grid: Grid, simple_doors: bool = False) -> Ray:
    """Advance ``ray`` to the first wall or closed door part it meets.

    With ``simple_doors`` a ray that would leave a door cell through its
    side misses the door instead of checking the neighbouring door.
    The ray is updated in place and returned.
    """
    while True:
        if ray.total_y < ray.total_x:
            ray.total_y += ray.step_y
            ray.pos_y += ray.sign_y
            ray.hit_type = HitAxis.HORIZONTAL
        else:
            ray.total_x += ray.step_x
            ray.pos_x += ray.sign_x
            ray.hit_type = HitAxis.VERTICAL
        if _hit_position(ray, grid, simple_doors):
            break
    if ray.hit_type is HitAxis.HORIZONTAL:
        ray.distance = ray.total_y - ray.step_y
    else:
        ray.distance = ray.total_x - ray.step_x
    return ray


def select_texture(ray: Ray, walls: Walls) -> Texture:
    """Pick the texture for the wall face the ray hit."""
    if ray.hits_door:
        return walls.door
    if ray.hit_type is HitAxis.HORIZONTAL:
        return walls.south if ray.sign_y >= 0 else walls.north
    return walls.east if ray.sign_x >= 0 else walls.west


def draw_texture_column(ray: Ray, walls: Walls, screen_x: int) -> None:
    """Draw the textured wall slice for ``ray`` in column ``screen_x``."""
    texture = select_texture(ray, walls)
    image = walls.image
    half = image.height // 2
    if ray.distance > 0:
        height = int(image.height / ray.distance / 2)
    else:
        height = image.height
    if height <= 0:
        return
    start = max(half - height, 0)
    end = min(half + height, image.height)
    step = texture.height / (height * 2)
    tex_y = (start - half + height) * step

    if ray.partial >= 1 or ray.partial < 0:
        return
    tex_x = int(ray.partial * texture.width)
    last_row = texture.height - 1
    for screen_y in range(start, end):
        row = min(int(tex_y + _TEXEL_NUDGE), last_row)
        image.pixels[screen_x + screen_y * image.width] = texture.pixel(tex_x, row)
        tex_y += step


def raycast(walls: Walls, camera: Camera, grid: Grid) -> None:
    """Redraw the whole wall image from the camera's point of view."""
    walls.image.reset()
    width = walls.image.width
    for x in range(width):
        ray = Ray.from_camera(camera, 2 * x / width - 1)
        cast_ray(ray, grid)
        draw_texture_column(ray, walls, x)