import math

import pytest

from cubed.cell import get_id, get_type, is_door, is_solid, set_cell
from cubed.config import HEIGHT, STARTING_HEALTH, WIDTH, pack_colour, unpack_colour
from cubed.image import Texture
from cubed.scene import (
    DOOR_TEXTURE_PATH,
    EMPTY_CELL,
    Camera,
    Door,
    DoorState,
    Doors,
    Grid,
    Scene,
    SceneError,
    find_doors,
    find_player,
    init_camera,
    load_scene,
    parse_colour,
    read_content,
    read_elements,
    read_tilemap,
)

SCENE_TEXT = (
    "NO ./n.xpm42\n"
    "SO ./s.xpm42\n"
    "\n"
    "WE ./w.png\n"
    "EA ./e.xpm42\n"
    "F 220,100,0\n"
    "C 225,30,0\n"
    "\n"
    "111111\n"
    "1N0D01\n"
    "11 111\n"
)


class FakeLoader:
    def __init__(self):
        self.paths = []

    def __call__(self, path):
        self.paths.append(path)
        return Texture(1, 1, (len(self.paths),))


def failing_loader(path):
    raise OSError("no such file")


@pytest.fixture
def scene_file(tmp_path):
    path = tmp_path / "scene.cub"
    path.write_text(SCENE_TEXT)
    return path


def test_read_content_drops_blank_lines_and_newlines(scene_file):
    lines = read_content(scene_file)
    assert "" not in lines
    assert lines[0] == "NO ./n.xpm42"
    assert lines[-1] == "11 111"
    assert all(not line.endswith("\n") for line in lines)


def test_read_content_keeps_last_line_without_newline(tmp_path):
    path = tmp_path / "x.cub"
    path.write_text("abc\n\ndef")
    assert read_content(path) == ["abc", "def"]


def test_read_content_missing_file(tmp_path):
    with pytest.raises(SceneError):
        read_content(tmp_path / "absent.cub")


def test_read_content_empty_file(tmp_path):
    path = tmp_path / "empty.cub"
    path.write_text("")
    with pytest.raises(SceneError):
        read_content(path)


def test_parse_colour_matches_packed_channels():
    assert parse_colour("220,100,0") == pack_colour(220, 100, 0)


def test_parse_colour_skips_leading_spaces_and_is_opaque():
    assert unpack_colour(parse_colour("   10,20,30")) == (10, 20, 30, 0xFF)


def test_parse_colour_wraps_channels_to_a_byte():
    assert parse_colour("256,0,0") == parse_colour("0,0,0")


def test_parse_colour_requires_commas():
    with pytest.raises(SceneError):
        parse_colour("220 100 0")


def test_read_elements_loads_all_elements():
    loader = FakeLoader()
    lines = read_content_lines = SCENE_TEXT.replace("\n\n", "\n").splitlines()
    textures, colours, rest = read_elements(read_content_lines, loader)
    assert set(textures) == {"north", "east", "south", "west", "door"}
    assert colours == {"floor": parse_colour("220,100,0"), "ceiling": parse_colour("225,30,0")}
    assert rest == lines[6:]
    assert loader.paths[-1] == DOOR_TEXTURE_PATH
    assert "./w.png" in loader.paths


def test_read_elements_rejects_unknown_line():
    with pytest.raises(SceneError):
        read_elements(["NO ./n.xpm42", "XX what"], FakeLoader())


def test_read_elements_rejects_unknown_extension():
    with pytest.raises(SceneError):
        read_elements(["NO ./n.bmp"], FakeLoader())


def test_read_elements_wraps_loader_failure():
    with pytest.raises(SceneError):
        read_elements(["NO ./n.xpm42"], failing_loader)


def test_read_tilemap_pads_rows():
    grid = read_tilemap(["111", "1", "1 1"])
    assert grid.y_max == 3
    assert grid.x_max == 3
    assert all(len(row) == grid.x_max for row in grid.tilemap)
    assert grid.cell(1, 2) == EMPTY_CELL
    assert grid.cell(2, 1) == EMPTY_CELL


def test_read_tilemap_encodes_digits():
    grid = read_tilemap(["0", "7"])
    assert not is_solid(grid.cell(0, 0))
    assert is_solid(grid.cell(1, 0))
    assert get_id(grid.cell(1, 0)) == 7
    assert get_type(grid.cell(1, 0)) == "7"


def test_read_tilemap_numbers_doors_in_order():
    grid = read_tilemap(["1D1", "d0D"])
    doors = [(y, x) for y, row in enumerate(grid.tilemap) for x, c in enumerate(row) if is_door(get_type(c))]
    assert [get_id(grid.cell(y, x)) for y, x in doors] == list(range(len(doors)))
    assert [(d.pos_y, d.pos_x) for d in grid.doors] == doors
    assert all(is_solid(grid.cell(y, x)) for y, x in doors)


def test_read_tilemap_rejects_symbols():
    with pytest.raises(SceneError):
        read_tilemap(["1#1"])


def test_grid_cell_out_of_range():
    grid = read_tilemap(["11"])
    with pytest.raises(IndexError):
        grid.cell(0, 2)


def test_find_doors_starts_closed():
    grid = read_tilemap(["1D1"])
    doors = find_doors(grid)
    assert doors.count == 1
    assert doors[0].state is DoorState.CLOSED
    assert doors[0].position == 1.0


def test_doors_at_lookup():
    grid = read_tilemap(["1D1", "1d1"])
    assert grid.doors.at(1, 1) is grid.doors[1]
    assert grid.doors.at(0, 0) is None


def test_door_solid_updates_grid_cell():
    grid = read_tilemap(["1D1"])
    door = grid.doors[0]
    door.solid = False
    assert not is_solid(grid.cell(0, 1))
    assert get_type(grid.cell(0, 1)) == "D"
    door.solid = True
    assert is_solid(grid.cell(0, 1))
    assert grid.cell(0, 1) == set_cell(True, 0, "D")


def test_init_camera_centres_in_cell():
    camera = init_camera(2, 3, "N")
    assert (camera.pos_y, camera.pos_x) == (2.5, 3.5)
    assert (camera.dir_y, camera.dir_x) == (-1.0, 0.0)
    assert camera.aspect_ratio == WIDTH / HEIGHT


@pytest.mark.parametrize("cardinal", ["N", "E", "S", "W"])
def test_init_camera_plane_is_perpendicular(cardinal):
    camera = init_camera(0, 0, cardinal)
    assert camera.dir_y * camera.plane_y + camera.dir_x * camera.plane_x == 0
    assert math.hypot(camera.plane_x, camera.plane_y) == pytest.approx(camera.aspect_ratio)
    assert math.hypot(camera.dir_x, camera.dir_y) == 1


def test_init_camera_rejects_unknown_direction():
    with pytest.raises(ValueError):
        init_camera(0, 0, "X")


def test_find_player_clears_start_cell():
    grid = read_tilemap(["111", "1E1", "111"])
    camera = find_player(grid)
    assert (camera.pos_y, camera.pos_x) == (1.5, 1.5)
    assert camera.dir_x == 1.0
    assert grid.cell(1, 1) == set_cell(False, 0, "0")


def test_find_player_multiple():
    with pytest.raises(SceneError, match="multiple"):
        find_player(read_tilemap(["1NS1"]))


def test_find_player_missing():
    with pytest.raises(SceneError, match="missing"):
        find_player(read_tilemap(["111"]))


def test_load_scene(scene_file):
    loader = FakeLoader()
    scene = load_scene(scene_file, loader)
    assert scene.floor == parse_colour("220,100,0")
    assert scene.ceiling == parse_colour("225,30,0")
    assert scene.health == STARTING_HEALTH
    assert scene.treasure == 0
    assert (scene.camera.pos_y, scene.camera.pos_x) == (1.5, 1.5)
    assert scene.grid.doors.at(1, 3) is scene.grid.doors[0]
    assert len(loader.paths) == 5


def test_load_scene_duplicate_element_leaves_texture_missing(tmp_path):
    path = tmp_path / "dup.cub"
    path.write_text(SCENE_TEXT.replace("SO ./s.xpm42", "NO ./n.xpm42"))
    with pytest.raises(SceneError, match="texture path"):
        load_scene(path, FakeLoader())


def test_scene_and_door_defaults():
    grid = Grid([[set_cell(False, 0, "0")]], Doors())
    scene = Scene(grid, Camera(), {})
    door = Door(0, 0, grid.tilemap[0])
    assert door.cell == grid.cell(0, 0)
    assert scene.health == STARTING_HEALTH
    assert scene.grid.doors.count == 0