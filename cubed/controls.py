"""Player controls: turning, walking, timing and door interaction."""

from __future__ import annotations

import math
from typing import Optional

from .cell import get_id, get_type, is_door, is_solid
from .config import (
    CAMERA_PLANE,
    COLLISION_HITBOX,
    DOOR_SHIFT_SPEED,
    INTERACTION_RANGE,
    MOVEMENT_SPEED,
    ROTATION_SPEED,
)
from .mathutil import sign
from .scene import EMPTY_CELL, Camera, Door, Doors, DoorState, Grid

# Per-frame movement is capped below half a cell so collisions stay reliable.
MAX_MOVEMENT_SPEED = 0.49

# Stand-in for an infinite step when a ray runs parallel to an axis.
_UNREACHABLE_STEP = float(2**32)

_DIAGONAL = 1 / math.sqrt(2)
# Normalised direction components for the eight walking directions,
# indexed by [1 + first key axis][1 + second key axis].
_MOVEMENT_MATRIX = (
    (-_DIAGONAL, 0.0, _DIAGONAL),
    (-1.0, 0.0, 1.0),
    (-_DIAGONAL, 0.0, _DIAGONAL),
)


def _cell_at(grid: Grid, y: int, x: int) -> int:
    """Return a cell; anything outside the map counts as empty space."""
    if 0 <= y < grid.y_max:
        row = grid.tilemap[y]
        if 0 <= x < len(row):
            return row[x]
    return EMPTY_CELL


def rotate_camera(camera: Camera, direction: int) -> bool:
    """Turn the camera one frame's worth: 1 turns left, -1 turns right.

    Returns whether the camera turned.
    """
    if direction == 0:
        return False
    cos_r = camera.rotation_cos
    sin_r = camera.rotation_sin * direction
    previous_x = camera.dir_x
    camera.dir_x = camera.dir_x * cos_r + camera.dir_y * sin_r
    camera.dir_y = previous_x * -sin_r + camera.dir_y * cos_r
    camera.plane_x = CAMERA_PLANE * camera.aspect_ratio * -camera.dir_y
    camera.plane_y = CAMERA_PLANE * camera.aspect_ratio * camera.dir_x
    camera.sign_rotate = 0
    return True


def move_camera(
    camera: Camera, grid: Grid, forward_backward: int, left_right: int
) -> bool:
    """Walk the camera, stopping a hitbox short of solid cells.

    ``forward_backward`` is 1 forward, -1 backward; ``left_right`` is
    1 right, -1 left. Returns whether a movement key was active.
    """
    if not forward_backward and not left_right:
        return False
    cos_m = _MOVEMENT_MATRIX[1 + left_right][1 + forward_backward]
    sin_m = _MOVEMENT_MATRIX[1 + forward_backward][1 + left_right]
    move_x = camera.dir_x * cos_m + camera.dir_y * -sin_m
    move_y = camera.dir_x * sin_m + camera.dir_y * cos_m
    speed = camera.movement_speed

    target_x = int(camera.pos_x + move_x * speed + COLLISION_HITBOX * sign(move_x))
    if is_solid(_cell_at(grid, int(camera.pos_y), target_x)):
        move_x = (
            int(camera.pos_x)
            + (move_x > 0)
            - camera.pos_x
            - COLLISION_HITBOX * sign(move_x)
        )
    camera.pos_x += move_x * speed

    target_y = int(camera.pos_y + move_y * speed + COLLISION_HITBOX * sign(move_y))
    if is_solid(_cell_at(grid, target_y, int(camera.pos_x))):
        move_y = (
            int(camera.pos_y)
            + (move_y > 0)
            - camera.pos_y
            - COLLISION_HITBOX * sign(move_y)
        )
    camera.pos_y += move_y * speed
    return True


def update_frametime(camera: Camera, doors: Doors, delta_time: float) -> None:
    """Scale movement, turning and door speed to the last frame's duration."""
    camera.movement_speed = min(MOVEMENT_SPEED * delta_time, MAX_MOVEMENT_SPEED)
    camera.rotation_cos = math.cos(ROTATION_SPEED * delta_time)
    camera.rotation_sin = math.sin(ROTATION_SPEED * delta_time)
    doors.frame_shift = DOOR_SHIFT_SPEED * delta_time


def cast_interaction_ray(grid: Grid, camera: Camera) -> int:
    """Follow the view direction and return the first cell worth stopping at.

    That is a solid cell, a door cell, or the cell reached once the ray has
    gone beyond interaction range.
    """
    pos_x = int(camera.pos_x)
    pos_y = int(camera.pos_y)
    dir_x, dir_y = camera.dir_x, camera.dir_y
    sign_x, sign_y = sign(dir_x), sign(dir_y)
    step_x = abs(1 / dir_x) if dir_x != 0 else _UNREACHABLE_STEP
    step_y = abs(1 / dir_y) if dir_y != 0 else _UNREACHABLE_STEP
    if sign_x > 0:
        total_x = (pos_x + 1 - camera.pos_x) * step_x
    else:
        total_x = (camera.pos_x - pos_x) * step_x
    if sign_y > 0:
        total_y = (pos_y + 1 - camera.pos_y) * step_y
    else:
        total_y = (camera.pos_y - pos_y) * step_y

    while True:
        if total_x < total_y:
            total_x += step_x
            pos_x += sign_x
            distance = total_x - step_x
        else:
            total_y += step_y
            pos_y += sign_y
            distance = total_y - step_y
        cell = _cell_at(grid, pos_y, pos_x)
        if is_solid(cell) or is_door(get_type(cell)) or distance > INTERACTION_RANGE:
            return cell


def generic_interaction(grid: Grid, camera: Camera) -> Optional[Door]:
    """Operate the door the camera looks at, if one is in range.

    Returns the door that was operated, or ``None``.
    """
    cell = cast_interaction_ray(grid, camera)
    if not is_door(get_type(cell)):
        return None
    index = get_id(cell)
    operate_door(grid.doors, camera, index)
    return grid.doors[index]


def operate_door(doors: Doors, camera: Camera, index: int) -> None:
    """Start opening a shut door, or start closing an open one.

    A door does not close on a player standing in its cell.
    """
    door = doors[index]
    if door.state in (DoorState.CLOSED, DoorState.CLOSING):
        door.state = DoorState.OPENING
    elif door.state in (DoorState.OPEN, DoorState.OPENING):
        if door.pos_y == int(camera.pos_y) and door.pos_x == int(camera.pos_x):
            return
        door.state = DoorState.CLOSING
        door.solid = True


def update_doors(doors: Doors) -> None:
    """Slide every moving door by the current frame shift."""
    shift = doors.frame_shift
    for door in doors:
        if door.state is DoorState.OPENING:
            door.position -= shift
            if door.position <= 0.0:
                door.position = 0.0
                door.state = DoorState.OPEN
                door.solid = False
        elif door.state is DoorState.CLOSING:
            door.position += shift
            if door.position >= 1.0:
                door.position = 1.0
                door.state = DoorState.CLOSED