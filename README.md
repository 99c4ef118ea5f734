# cubed

A small first-person raycasting game. A scene file describes the wall
textures, the floor and ceiling colours and a tile map; the game draws it
as textured walls seen from the player's position, with sliding doors, a
round minimap that turns with the view, a full-window map, an FPS counter
and a start menu. The window is drawn with pygame.

## Installing

```
pip install .
```

## Running

```
cubed path/to/scene.cub
```

The command takes exactly one argument, the scene file. With any other
number of arguments it prints a usage line and exits with status
`errno.EINVAL`. If the scene or any texture cannot be loaded it prints
`Error` and a message to standard error and exits with status 1.

Besides the textures named in the scene, the game loads these files,
relative to the current directory:

- `./scenes/textures/door.xpm42` — the door texture
- `./data/textures/g1_fri/0.xpm42`, `f0.xpm42`, `f1.xpm42`, … and
  `r0.xpm42`, `r1.xpm42`, … — the weapon's resting, firing and reloading
  frames (each animation stops at the first missing frame)
- `./data/textures/arrow_32.xpm42` — the player marker on the maps
- `./data/png/menu_background.png`
- `./data/textures/button_start_128.xpm42`,
  `./data/textures/button_quit_128.xpm42`,
  `./data/textures/button_highlight_128.xpm42` — the menu buttons

## Scene files

A scene file starts with six elements, in any order, followed by the map.
Lines that are completely empty are ignored.

```
NO ./textures/north.xpm42
EA ./textures/east.xpm42
SO ./textures/south.png
WE ./textures/west.png
F 66,66,66
C 0,0,0

111111
1N0D01
100001
111111
```

- `NO`, `EA`, `SO`, `WE`: paths to the wall textures, `.png` or `.xpm42`.
- `F`, `C`: floor and ceiling colours as `r,g,b`; each value is taken
  modulo 256.
- Map characters: a space is nothing, `0` is floor, `1`–`9` are walls,
  `d` and `D` are doors, and exactly one of `N`, `E`, `S`, `W` marks the
  player's start cell and facing. Any other letter is a solid wall.
  Shorter rows are padded with empty space.

A line other than the six elements before the map, a missing wall
texture, a texture path that is neither `.png` nor `.xpm42`, a map
character that is not a letter, digit or space, a missing player or more
than one player all raise `cubed.scene.SceneError`.

### XPM42 textures

An XPM42 file starts with a line `!XPM42`, then a line
`width height colours chars-per-pixel mode` (mode `c` or `m`), then one
line per colour (the key followed by `#RRGGBB` or `#RRGGBBAA`), then one
line per row of pixel keys.

## Controls

In the menu:

- Up / Down: choose a button
- Enter / Space: confirm (Start or Quit)

In the game:

- W / S: move forward / backward
- A / D: step left / right
- Left / Right: turn
- E: open or close the door in front of you (within 2 cells); a door does
  not close while you stand in it
- G: fire
- R: reload
- M or Tab: switch between the minimap and the full map
- Left Control: back to the menu

Escape closes the window at any time.

## What it does not do

The weapon keeps track of its ammunition and runs its fire and reload
animations, but its sprite is kept hidden and never drawn. There is no
on-screen ammunition, health or treasure display, there are no enemies,
and firing does no damage to anything.

## Using it as a library

The pieces can be used without opening a window:

- `cubed.scene.load_scene(path, loader)` reads a scene file into a
  `Scene` holding a `Grid` (with its `Doors`), a `Camera`, the textures
  and the floor and ceiling colours. `read_elements`, `read_tilemap`,
  `find_doors`, `find_player` and `parse_colour` do the separate steps.
- `cubed.cell` packs a map token, an identifier and a solid flag into one
  cell value (`set_cell`, `get_type`, `get_id`, `is_solid`, `is_door`).
- `cubed.image` has `Texture`, `Image` and the loaders `load_xpm42`,
  `load_texture` and `load_column_major`.
- `cubed.render.raycast(walls, camera, grid)` draws a frame of walls into
  a `Walls` image; `Ray.from_camera` and `cast_ray` trace a single ray.
- `cubed.controls` moves and turns the camera (`move_camera`,
  `rotate_camera`), scales speeds to frame time (`update_frametime`) and
  operates doors (`generic_interaction`, `operate_door`, `update_doors`).
- `cubed.weapon` has `Weapon` with `fire`, `reload` and `advance`, and
  `load_weapon` / `load_animation`.
- `cubed.hud` builds the minimap, the full map and the menu
  (`minimap_for`, `bigmap_for`, `menu_layout`) and counts frames per
  second (`FpsCounter`).
- `cubed.app.Game` ties them together: `Game.update(delta_time,
  keys_down)` advances one frame and `Game.handle_key(key)` reacts to a
  key press, with keys named as strings such as `"w"`, `"left"`,
  `"enter"` or `"escape"`.