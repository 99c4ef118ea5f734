"""The game window: start-up, key handling and the per-frame update."""

from __future__ import annotations

import errno
import sys
from array import array
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional

from .config import HEIGHT, MLX_FONT_WIDTH, WIDTH, WINDOW_TITLE
from .controls import (
    generic_interaction,
    move_camera,
    rotate_camera,
    update_doors,
    update_frametime,
)
from .hud import Bigmap, FpsCounter, Menu, Minimap, Scalable, bigmap_for, menu_layout, minimap_for
from .image import Image, load_texture, load_xpm42
from .render import Walls, raycast
from .scene import Camera, Grid, Scene, SceneError, load_scene
from .weapon import Weapon, load_weapon

# menu
MENU_BACKGROUND_PATH = "./data/png/menu_background.png"
MENU_B_HIGHLIGHT_PATH = "./data/textures/button_highlight_128.xpm42"
MENU_B_START_INDEX = 0
MENU_B_START_PATH = "./data/textures/button_start_128.xpm42"
MENU_B_QUIT_INDEX = 1
MENU_B_QUIT_PATH = "./data/textures/button_quit_128.xpm42"

# minimap / map
PLAYER_ICON_PATH = "./data/textures/arrow_32.xpm42"

_MAP_KEYS = frozenset({"m", "tab"})
_CONFIRM_KEYS = frozenset({"enter", "space"})


class View(Enum):
    """Which screen currently receives input."""

    MENU = "menu"
    GAME = "game"


def background_image(width: int, height: int, ceiling: int, floor: int) -> Image:
    """Paint the upper half (and the middle row) with the ceiling, the rest with the floor."""
    half = height // 2
    image = Image(width, height)
    image.fill(lambda x, y: ceiling if y <= half else floor)
    return image


@dataclass
class Game:
    """All state of a running game and the rules that change it."""

    scene: Scene
    walls: Walls
    background: Image
    minimap: Minimap
    bigmap: Bigmap
    menu: Menu
    fps: FpsCounter = field(default_factory=FpsCounter)
    weapon: Optional[Weapon] = None
    weapon_sprite: Optional[Scalable] = None
    view: View = View.MENU
    running: bool = True

    @property
    def camera(self) -> Camera:
        return self.scene.camera

    @property
    def grid(self) -> Grid:
        return self.scene.grid

    def layers(self) -> list[Image]:
        """Every image in drawing order, bottom first."""
        images = [self.background, self.walls.image]
        if self.weapon_sprite is not None and self.weapon_sprite.image is not None:
            images.append(self.weapon_sprite.image)
        images += [self.bigmap.walls, self.bigmap.player, self.minimap.walls]
        if self.minimap.player_icon.image is not None:
            images.append(self.minimap.player_icon.image)
        images.append(self.menu.background.image)
        images += [button.image for button in self.menu.buttons]
        images.append(self.menu.highlight.image)
        return [image for image in images if image is not None]

    def handle_key(self, key: str) -> None:
        """React to a single key press."""
        if key == "escape":
            self.running = False
        if self.view is View.GAME:
            if key in _MAP_KEYS:
                self.toggle_maps()
            if key == "left_control":
                self.toggle_view()
            if key == "e":
                generic_interaction(self.grid, self.camera)
        elif self.view is View.MENU:
            if key == "up":
                self.menu.move_selection(-1)
            elif key == "down":
                self.menu.move_selection(1)
            if key in _CONFIRM_KEYS:
                self.confirm_selection()

    def update(self, delta_time: float, keys_down: Iterable[str] = ()) -> None:
        """Advance one frame given its duration and the keys held down."""
        keys = set(keys_down)
        update_frametime(self.camera, self.grid.doors, delta_time)
        self.fps.tick(delta_time)
        if self.view is not View.GAME:
            return
        forward_backward = ("w" in keys) - ("s" in keys)
        left_right = ("d" in keys) - ("a" in keys)
        if move_camera(self.camera, self.grid, forward_backward, left_right):
            self.walls.recast = True
        direction = 0
        if "left" in keys:
            direction = 1
        if "right" in keys:
            direction = -1
        if rotate_camera(self.camera, direction):
            self.walls.recast = True
        self._animate_weapon(delta_time, keys)
        update_doors(self.grid.doors)
        # Redrawn every frame to keep frame times even.
        raycast(self.walls, self.camera, self.grid)
        if self.minimap.enabled:
            self.minimap.render()
        if self.bigmap.enabled:
            self.bigmap.render_player()
        self.walls.recast = False

    def _animate_weapon(self, delta_time: float, keys: set[str]) -> None:
        weapon = self.weapon
        if weapon is None:
            return
        if "g" in keys:
            weapon.fire()
        if "r" in keys:
            weapon.reload()
        if weapon.advance(delta_time) and self.weapon_sprite is not None:
            self.weapon_sprite.texture = weapon.texture
            self.weapon_sprite.render()

    def toggle_maps(self) -> None:
        """Swap between the minimap and the full map."""
        minimap, bigmap = self.minimap, self.bigmap
        if minimap.player_icon.image is not None:
            minimap.player_icon.image.enabled = not minimap.player_icon.image.enabled
        minimap.walls.enabled = not minimap.walls.enabled
        minimap.enabled = not minimap.enabled
        bigmap.player.enabled = not bigmap.player.enabled
        bigmap.walls.enabled = not bigmap.walls.enabled
        bigmap.enabled = not bigmap.enabled
        self.walls.recast = True

    def toggle_view(self) -> None:
        """Switch between the menu and the game, showing or hiding the menu."""
        self.view = View.GAME if self.view is View.MENU else View.MENU
        menu = self.menu
        for scalable in (menu.background, menu.highlight, *menu.buttons):
            if scalable.image is not None:
                scalable.image.enabled = not scalable.image.enabled

    def confirm_selection(self) -> None:
        """Act on the selected menu button."""
        if self.menu.selection == MENU_B_START_INDEX:
            self.toggle_view()
        if self.menu.selection == MENU_B_QUIT_INDEX:
            self.running = False


def _build_game(path: str) -> Game:
    scene = load_scene(path)
    textures = scene.textures
    walls = Walls(
        Image(WIDTH, HEIGHT),
        north=textures["north"],
        east=textures["east"],
        south=textures["south"],
        west=textures["west"],
        door=textures["door"],
    )
    background = background_image(WIDTH, HEIGHT, scene.ceiling, scene.floor)

    weapon = load_weapon()
    sprite = Scalable(weapon.rest, WIDTH / weapon.rest.width)
    sprite_image = sprite.render()
    sprite_image.y = HEIGHT - sprite_image.height
    sprite_image.enabled = False

    icon = load_xpm42(PLAYER_ICON_PATH)
    bigmap = bigmap_for(WIDTH, HEIGHT, scene.camera, scene.grid, icon)
    minimap = minimap_for(WIDTH, HEIGHT, scene.camera, scene.grid, icon)
    fps = FpsCounter(x=int(WIDTH / 2 - MLX_FONT_WIDTH * 1.5), y=HEIGHT // 42)

    menu = menu_layout(
        WIDTH,
        HEIGHT,
        load_texture(MENU_BACKGROUND_PATH),
        [load_xpm42(MENU_B_START_PATH), load_xpm42(MENU_B_QUIT_PATH)],
        load_xpm42(MENU_B_HIGHLIGHT_PATH),
    )
    game = Game(
        scene=scene,
        walls=walls,
        background=background,
        minimap=minimap,
        bigmap=bigmap,
        menu=menu,
        fps=fps,
        weapon=weapon,
        weapon_sprite=sprite,
    )
    walls.recast = True
    return game


def _image_bytes(image: Image) -> bytes:
    data = array("I", image.pixels)
    if sys.byteorder == "big":
        data.byteswap()
    return data.tobytes()


def _run(game: Game) -> None:
    import pygame

    keymap = {
        pygame.K_ESCAPE: "escape",
        pygame.K_m: "m",
        pygame.K_TAB: "tab",
        pygame.K_LCTRL: "left_control",
        pygame.K_e: "e",
        pygame.K_UP: "up",
        pygame.K_DOWN: "down",
        pygame.K_RETURN: "enter",
        pygame.K_SPACE: "space",
        pygame.K_w: "w",
        pygame.K_a: "a",
        pygame.K_s: "s",
        pygame.K_d: "d",
        pygame.K_LEFT: "left",
        pygame.K_RIGHT: "right",
        pygame.K_g: "g",
        pygame.K_r: "r",
    }
    static = {id(game.background), id(game.bigmap.walls)}
    static.update(id(s.image) for s in (game.menu.background, *game.menu.buttons))
    cache: dict[int, object] = {}

    def surface_for(image: Image):
        key = id(image)
        if key in static and key in cache:
            return cache[key]
        surface = pygame.image.frombuffer(
            _image_bytes(image), (image.width, image.height), "RGBA"
        )
        if key in static:
            cache[key] = surface
        return surface

    pygame.init()
    try:
        screen = pygame.display.set_mode((WIDTH, HEIGHT))
        pygame.display.set_caption(WINDOW_TITLE)
        font = pygame.font.Font(None, 24)
        clock = pygame.time.Clock()
        while game.running:
            delta_time = clock.tick() / 1000.0
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    game.running = False
                elif event.type == pygame.KEYDOWN and event.key in keymap:
                    game.handle_key(keymap[event.key])
            pressed = pygame.key.get_pressed()
            keys_down = {name for code, name in keymap.items() if pressed[code]}
            game.update(delta_time, keys_down)
            screen.fill((0, 0, 0))
            for image in game.layers():
                if image.enabled and image.width and image.height:
                    screen.blit(surface_for(image), (image.x, image.y))
            text = font.render(game.fps.text, True, (255, 255, 255))
            screen.blit(text, (game.fps.x, game.fps.y))
            pygame.display.flip()
    finally:
        pygame.quit()


def main(argv=None) -> int:
    """Start the game on the scene file named on the command line."""
    args = sys.argv[1:] if argv is None else list(argv)
    if len(args) != 1:
        print("Usage:\ncubed <path/to/scene.cub>")
        return errno.EINVAL
    try:
        game = _build_game(args[0])
    except (SceneError, OSError, ValueError) as exc:
        print("Error", file=sys.stderr)
        print(f"message  :    : initialisation failed: {exc}", file=sys.stderr)
        return 1
    _run(game)
    return 0


if __name__ == "__main__":
    sys.exit(main())