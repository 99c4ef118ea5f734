"""Heads-up display: scaled sprites, the minimap, the full map, the menu and FPS."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from .cell import get_type, is_door, is_solid
from .config import (
    C_CEILING,
    C_DOOR,
    C_FLOOR,
    C_TRANSLUCENT,
    C_TRANSPARENT,
    C_WALL,
)
from .image import Image, Texture
from .mathutil import clamp, nearest_power_of_2
from .scene import EMPTY_CELL, Camera, Grid

MAX_FPS = 99999
FPS_INTERVAL = 0.01
_BORDER_ALPHA_STEP = 0x42


@dataclass
class Scalable:
    """A texture drawn into an image at a fixed scale."""

    texture: Texture
    scale: float = 1.0
    image: Optional[Image] = None

    def render(self) -> Image:
        """Draw the scaled texture into a fresh image and return it.

        A previous image's position and visibility are kept.
        """
        texture = self.texture
        scale = self.scale
        image = Image(int(texture.width * scale), int(texture.height * scale))
        if self.image is not None:
            image.x, image.y, image.enabled = self.image.x, self.image.y, self.image.enabled

        def sample(img_x: int, img_y: int) -> Optional[int]:
            x = img_x / scale
            y = img_y / scale
            if x < 0 or x >= texture.width or y < 0 or y >= texture.height:
                return None
            return texture.pixel(int(x), int(y))

        image.fill(sample)
        self.image = image
        return image


def _in_circle(x: int, y: int, radius: int) -> bool:
    return x * x + y * y <= radius * radius


def circle_overlay(side: int, radius: int) -> Image:
    """Build the round minimap mask: clear outside, a translucent rim, opaque inside."""
    inner = radius * 39 // 42

    def sample(x: int, y: int) -> int:
        xc = x - radius
        yc = y - radius
        if not _in_circle(xc, yc, radius):
            return C_TRANSPARENT
        if not _in_circle(xc, yc, inner):
            return C_TRANSLUCENT
        return C_WALL

    overlay = Image(side, side)
    overlay.fill(sample)
    return overlay


@dataclass
class Minimap:
    """A round map centred on the player that turns with the view."""

    camera: Camera
    grid: Grid
    walls: Image
    overlay: Image
    player_icon: Scalable
    side: int
    radius: int
    block_size: float
    enabled: bool = True

    def render(self) -> Image:
        """Redraw the map around the camera and apply the round border."""
        camera = self.camera
        tilemap = self.grid.tilemap
        x_max, y_max = self.grid.x_max, self.grid.y_max
        radius = self.radius
        block = self.block_size

        def sample(img_x: int, img_y: int) -> int:
            x = img_x - radius
            y = img_y - radius
            map_x = (x * camera.plane_x + y * -camera.plane_y) / block + camera.pos_x
            map_y = (x * camera.plane_y + y * camera.plane_x) / block + camera.pos_y
            if map_x < 0 or map_x >= x_max or map_y < 0 or map_y >= y_max:
                return C_CEILING
            cell = tilemap[int(map_y)][int(map_x)]
            if cell == EMPTY_CELL:
                return C_CEILING
            if is_solid(cell):
                return C_WALL
            return C_FLOOR

        self.walls.fill(sample)
        pixels = self.walls.pixels
        for index, mask in enumerate(self.overlay.pixels):
            alpha = (mask >> 24) & 0xFF
            if alpha % _BORDER_ALPHA_STEP == 0:
                pixels[index] = (pixels[index] & 0x00FFFFFF) | (alpha << 24)
        return self.walls


def minimap_for(
    width: int, height: int, camera: Camera, grid: Grid, icon: Texture
) -> Minimap:
    """Lay out a minimap in the lower left corner of a window."""
    side = int(min(height, width) / 3)
    block_size = (side // 6) * camera.aspect_ratio
    radius = side // 2
    if block_size <= 0:
        raise ValueError("window too small for a minimap")
    overlay = circle_overlay(side, radius)
    walls = Image(
        side, side, list(overlay.pixels), x=int(side * 0.2), y=int(height - side * 1.2)
    )
    player_icon = Scalable(icon, nearest_power_of_2(block_size / icon.height / 2))
    icon_image = player_icon.render()
    icon_image.x = walls.x + radius - icon_image.width // 2
    icon_image.y = walls.y + radius - icon_image.height // 2
    return Minimap(
        camera=camera,
        grid=grid,
        walls=walls,
        overlay=overlay,
        player_icon=player_icon,
        side=side,
        radius=radius,
        block_size=block_size,
    )


@dataclass
class Bigmap:
    """A full-window map of the whole grid with a rotating player marker."""

    camera: Camera
    grid: Grid
    walls: Image
    player: Image
    player_icon: Scalable
    x_offset: int
    y_offset: int
    block_size: float
    enabled: bool = False

    def render_walls(self) -> Image:
        """Draw the grid centred in the walls image."""
        grid = self.grid
        tilemap = grid.tilemap
        x_max, y_max = grid.x_max, grid.y_max
        half_w = self.walls.width / 2
        half_h = self.walls.height / 2
        block = self.block_size

        def sample(img_x: int, img_y: int) -> int:
            x = (img_x - half_w) / block + x_max / 2
            y = (img_y - half_h) / block + y_max / 2
            if x < 0 or x >= x_max or y < 0 or y >= y_max:
                return C_TRANSLUCENT
            cell = tilemap[int(y)][int(x)]
            if cell == EMPTY_CELL:
                return C_TRANSLUCENT
            if is_door(get_type(cell)):
                return C_DOOR
            if is_solid(cell):
                return C_WALL
            return C_FLOOR

        self.walls.fill(sample)
        return self.walls

    def render_player(self) -> Image:
        """Redraw the player marker turned to the view and move it into place."""
        camera = self.camera
        icon = self.player_icon.image
        if icon is None:
            icon = self.player_icon.render()
        half_w = float(icon.width // 2)
        half_h = float(icon.height // 2)

        def sample(img_x: int, img_y: int) -> int:
            x = img_x - half_w
            y = img_y - half_h
            rx = x * camera.plane_x + y * camera.plane_y + half_w
            ry = x * -camera.plane_y + y * camera.plane_x + half_h
            if rx < 0 or rx >= icon.width or ry < 0 or ry >= icon.height:
                return C_TRANSPARENT
            return icon.get(int(rx), int(ry))

        self.player.fill(sample)
        self.player.x, self.player.y = self.player_position()
        return self.player

    def player_position(self) -> tuple[int, int]:
        """Screen position of the player marker's top left corner."""
        return (
            int(self.x_offset + self.camera.pos_x * self.block_size),
            int(self.y_offset + self.camera.pos_y * self.block_size),
        )


def bigmap_for(
    width: int, height: int, camera: Camera, grid: Grid, icon: Texture
) -> Bigmap:
    """Lay out the full map for a window; it starts hidden."""
    block_size = float(min(height // (grid.y_max + 2), width // (grid.x_max + 2)))
    if block_size <= 0:
        raise ValueError("map too large for the window")
    x_offset = int(width - grid.x_max * block_size) // 2
    y_offset = int(height - grid.y_max * block_size) // 2
    player_icon = Scalable(icon, nearest_power_of_2(block_size / icon.height))
    icon_image = player_icon.render()
    player = Image(icon_image.width, icon_image.height)
    player.x = int(x_offset + camera.pos_x * block_size)
    player.y = int(y_offset + camera.pos_y * block_size)
    player.enabled = False
    walls = Image(width, height, enabled=False)
    bigmap = Bigmap(
        camera=camera,
        grid=grid,
        walls=walls,
        player=player,
        player_icon=player_icon,
        x_offset=x_offset - player.width // 2,
        y_offset=y_offset - player.height // 2,
        block_size=block_size,
    )
    bigmap.render_walls()
    return bigmap


@dataclass
class Menu:
    """The start menu: a background, a column of buttons and a highlight."""

    background: Scalable
    buttons: list[Scalable]
    highlight: Scalable
    buttons_x_offset: int
    buttons_y_offset: int
    buttons_y_margin: int
    selection: int = 0

    def highlight_position(self) -> tuple[int, int]:
        """Screen position of the selected button."""
        image = self.buttons[self.selection].image
        return image.x, image.y

    def move_selection(self, delta: int) -> int:
        """Move the selection within the buttons and follow it with the highlight."""
        self.selection = clamp(self.selection + delta, 0, len(self.buttons) - 1)
        self.highlight.image.x, self.highlight.image.y = self.highlight_position()
        return self.selection


def menu_layout(
    width: int,
    height: int,
    background: Texture,
    buttons: Sequence[Texture],
    highlight: Texture,
) -> Menu:
    """Scale and place the menu images for a window."""
    if not buttons:
        raise ValueError("a menu needs at least one button")

    def button_scale(texture: Texture) -> float:
        return min((width // 3) / texture.width, (height // 10) / texture.height)

    back = Scalable(
        background, max(width / background.width, height / background.height)
    )
    back.render()
    high = Scalable(highlight, button_scale(highlight))
    x_offset = int(width // 2 - highlight.width * high.scale / 2)
    margin = int(highlight.height * high.scale)
    y_offset = height // 2 - margin * len(buttons)

    scaled_buttons = []
    for index, texture in enumerate(buttons):
        button = Scalable(texture, button_scale(texture))
        image = button.render()
        image.x = x_offset
        image.y = y_offset + margin * index * 2
        scaled_buttons.append(button)
    high.render()

    menu = Menu(
        background=back,
        buttons=scaled_buttons,
        highlight=high,
        buttons_x_offset=x_offset,
        buttons_y_offset=y_offset,
        buttons_y_margin=margin,
    )
    menu.move_selection(0)
    return menu


@dataclass
class FpsCounter:
    """Averages frame times and reports frames per second."""

    cum_time: float = 0.0
    frames: int = 0
    text: str = "00000"
    x: int = 0
    y: int = 0

    def tick(self, delta_time: float) -> Optional[str]:
        """Count one frame; returns new text once enough time has passed."""
        self.cum_time += delta_time
        self.frames += 1
        if self.cum_time < FPS_INTERVAL:
            return None
        fps = min(int(self.frames / self.cum_time), MAX_FPS)
        self.cum_time = 0.0
        self.frames = 0
        self.text = str(fps)
        return self.text