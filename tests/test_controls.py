import math

import pytest

from cubed.cell import get_type, is_solid
from cubed.config import (
    COLLISION_HITBOX,
    DOOR_SHIFT_SPEED,
    MOVEMENT_SPEED,
    ROTATION_SPEED,
)
from cubed.controls import (
    MAX_MOVEMENT_SPEED,
    cast_interaction_ray,
    generic_interaction,
    move_camera,
    operate_door,
    rotate_camera,
    update_doors,
    update_frametime,
)
from cubed.scene import Camera, Doors, DoorState, find_player, init_camera, read_tilemap

ROOM = ["111111", "100001", "10N001", "100001", "111111"]
DOOR_MAP = ["11111", "1S001", "1D111", "10001", "11111"]
CORRIDOR = ["111", "1S1", "101", "101", "101", "101", "111"]


def _world(lines):
    grid = read_tilemap(lines)
    camera = find_player(grid)
    return grid, camera


def test_rotate_zero_direction_does_nothing():
    camera = init_camera(2, 2, "N")
    assert rotate_camera(camera, 0) is False
    assert (camera.dir_x, camera.dir_y) == (0.0, -1.0)


def test_quarter_left_turn_from_north_faces_west():
    camera = init_camera(2, 2, "N")
    camera.rotation_cos = 0.0
    camera.rotation_sin = 1.0
    camera.sign_rotate = 1
    assert rotate_camera(camera, 1) is True
    west = init_camera(2, 2, "W")
    assert camera.dir_x == pytest.approx(west.dir_x)
    assert camera.dir_y == pytest.approx(west.dir_y)
    assert camera.plane_x == pytest.approx(west.plane_x)
    assert camera.plane_y == pytest.approx(west.plane_y)
    assert camera.sign_rotate == 0


def test_left_then_right_returns_to_start():
    camera = init_camera(2, 2, "E")
    original = (camera.dir_x, camera.dir_y)
    rotate_camera(camera, 1)
    rotate_camera(camera, -1)
    assert camera.dir_x == pytest.approx(original[0], abs=1e-9)
    assert camera.dir_y == pytest.approx(original[1], abs=1e-9)


def test_rotation_keeps_direction_unit_and_plane_perpendicular():
    camera = init_camera(2, 2, "S")
    for _ in range(7):
        rotate_camera(camera, -1)
    assert math.hypot(camera.dir_x, camera.dir_y) == pytest.approx(1.0)
    assert camera.plane_x * camera.dir_x + camera.plane_y * camera.dir_y == pytest.approx(
        0.0, abs=1e-9
    )


def test_update_frametime_scales_speeds():
    camera = Camera()
    doors = Doors()
    update_frametime(camera, doors, 0.01)
    assert camera.movement_speed == pytest.approx(MOVEMENT_SPEED * 0.01)
    assert camera.rotation_cos == pytest.approx(math.cos(ROTATION_SPEED * 0.01))
    assert camera.rotation_sin == pytest.approx(math.sin(ROTATION_SPEED * 0.01))
    assert doors.frame_shift == pytest.approx(DOOR_SHIFT_SPEED * 0.01)


def test_update_frametime_caps_movement_speed():
    camera = Camera()
    update_frametime(camera, Doors(), 10.0)
    assert camera.movement_speed == MAX_MOVEMENT_SPEED
    assert MAX_MOVEMENT_SPEED == 0.49


def test_move_without_keys_reports_no_movement():
    grid, camera = _world(ROOM)
    before = (camera.pos_x, camera.pos_y)
    assert move_camera(camera, grid, 0, 0) is False
    assert (camera.pos_x, camera.pos_y) == before


def test_move_forward_follows_direction():
    grid, camera = _world(ROOM)
    camera.movement_speed = 0.1
    start_x, start_y = camera.pos_x, camera.pos_y
    assert move_camera(camera, grid, 1, 0) is True
    assert camera.pos_x == pytest.approx(start_x)
    assert camera.pos_y == pytest.approx(start_y - camera.movement_speed)


def test_strafe_right_moves_along_plane():
    grid, camera = _world(ROOM)
    camera.movement_speed = 0.1
    start_x, start_y = camera.pos_x, camera.pos_y
    move_camera(camera, grid, 0, 1)
    assert camera.pos_x > start_x
    assert camera.pos_y == pytest.approx(start_y)


def test_diagonal_move_is_normalised():
    grid, camera = _world(ROOM)
    camera.movement_speed = 0.1
    start_x, start_y = camera.pos_x, camera.pos_y
    move_camera(camera, grid, 1, 1)
    distance = math.hypot(camera.pos_x - start_x, camera.pos_y - start_y)
    assert distance == pytest.approx(camera.movement_speed)


def test_walls_stop_the_camera():
    grid, camera = _world(ROOM)
    camera.movement_speed = MAX_MOVEMENT_SPEED
    for _ in range(200):
        move_camera(camera, grid, 1, 0)
    assert camera.pos_y >= 1.0 + COLLISION_HITBOX - 1e-6
    assert not is_solid(grid.tilemap[int(camera.pos_y)][int(camera.pos_x)])


def test_interaction_ray_stops_at_wall():
    grid, camera = _world(ROOM)
    camera.pos_y = 1.5
    cell = cast_interaction_ray(grid, camera)
    assert get_type(cell) == "1"
    assert generic_interaction(grid, camera) is None


def test_interaction_ray_stops_beyond_range():
    grid, camera = _world(CORRIDOR)
    cell = cast_interaction_ray(grid, camera)
    assert get_type(cell) == "0"
    assert generic_interaction(grid, camera) is None


def test_door_open_and_close_cycle():
    grid, camera = _world(DOOR_MAP)
    door = generic_interaction(grid, camera)
    assert door is grid.doors[0]
    assert door.state is DoorState.OPENING
    assert door.solid

    grid.doors.frame_shift = 1.0
    update_doors(grid.doors)
    assert door.state is DoorState.OPEN
    assert door.position == 0.0
    assert not door.solid

    operate_door(grid.doors, camera, 0)
    assert door.state is DoorState.CLOSING
    assert door.solid

    update_doors(grid.doors)
    assert door.state is DoorState.CLOSED
    assert door.position == 1.0


def test_door_moves_partially_per_frame():
    grid, camera = _world(DOOR_MAP)
    operate_door(grid.doors, camera, 0)
    grid.doors.frame_shift = 0.25
    update_doors(grid.doors)
    door = grid.doors[0]
    assert door.state is DoorState.OPENING
    assert door.position == pytest.approx(0.75)
    assert door.solid


def test_closing_door_reopens():
    grid, camera = _world(DOOR_MAP)
    door = grid.doors[0]
    door.state = DoorState.CLOSING
    operate_door(grid.doors, camera, 0)
    assert door.state is DoorState.OPENING


def test_door_does_not_close_on_player():
    grid, camera = _world(DOOR_MAP)
    door = grid.doors[0]
    door.state = DoorState.OPEN
    door.position = 0.0
    door.solid = False
    camera.pos_y = door.pos_y + 0.5
    camera.pos_x = door.pos_x + 0.5
    operate_door(grid.doors, camera, 0)
    assert door.state is DoorState.OPEN
    assert not door.solid