"""Textures, drawable images and texture loading."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

from PIL import Image as PILImage

from .config import pack_colour

XPM42_HEADER = "!XPM42"


@dataclass(frozen=True)
class Texture:
    """Read-only pixel data, stored row-major or column-major."""

    width: int
    height: int
    pixels: tuple[int, ...]
    column_major: bool = False

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError("texture dimensions must not be negative")
        if len(self.pixels) != self.width * self.height:
            raise ValueError(
                f"expected {self.width * self.height} pixels, got {len(self.pixels)}"
            )
        object.__setattr__(self, "pixels", tuple(self.pixels))

    def pixel(self, x: int, y: int) -> int:
        """Return the pixel at column ``x`` and row ``y``."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}, {y}) outside {self.width}x{self.height}")
        if self.column_major:
            return self.pixels[x * self.height + y]
        return self.pixels[y * self.width + x]

    def transposed(self) -> Texture:
        """Return the same texture with its storage order switched."""
        w, h = self.width, self.height
        if self.column_major:
            pixels = tuple(self.pixels[x * h + y] for y in range(h) for x in range(w))
        else:
            pixels = tuple(self.pixels[y * w + x] for x in range(w) for y in range(h))
        return Texture(w, h, pixels, not self.column_major)


@dataclass
class Image:
    """A mutable row-major image placed on screen at ``(x, y)``."""

    width: int
    height: int
    pixels: Optional[list[int]] = field(default=None)
    x: int = 0
    y: int = 0
    enabled: bool = True

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError("image dimensions must not be negative")
        if self.pixels is None:
            self.pixels = [0] * (self.width * self.height)
        elif len(self.pixels) != self.width * self.height:
            raise ValueError(
                f"expected {self.width * self.height} pixels, got {len(self.pixels)}"
            )

    def _index(self, x: int, y: int) -> int:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}, {y}) outside {self.width}x{self.height}")
        return y * self.width + x

    def reset(self) -> None:
        """Clear every pixel to fully transparent."""
        self.pixels[:] = [0] * (self.width * self.height)

    def fill(self, function: Callable[[int, int], Optional[int]]) -> None:
        """Set each pixel to ``function(x, y)``; ``None`` leaves it unchanged."""
        width = self.width
        for y in range(self.height):
            row = y * width
            for x in range(width):
                colour = function(x, y)
                if colour is not None:
                    self.pixels[row + x] = colour

    def get(self, x: int, y: int) -> int:
        """Return the pixel at ``(x, y)``."""
        return self.pixels[self._index(x, y)]

    def set(self, x: int, y: int, colour: int) -> None:
        """Store ``colour`` at ``(x, y)``."""
        self.pixels[self._index(x, y)] = colour


def _parse_hex_colour(text: str) -> int:
    if not text.startswith("#"):
        raise ValueError(f"invalid xpm42 colour {text!r}")
    digits = text[1:]
    if len(digits) == 6:
        digits += "FF"
    if len(digits) != 8:
        raise ValueError(f"invalid xpm42 colour {text!r}")
    try:
        value = int(digits, 16)
    except ValueError as exc:
        raise ValueError(f"invalid xpm42 colour {text!r}") from exc
    return pack_colour(
        (value >> 24) & 0xFF, (value >> 16) & 0xFF, (value >> 8) & 0xFF, value & 0xFF
    )


def load_xpm42(path) -> Texture:
    """Load an XPM42 file as a row-major texture."""
    lines = Path(path).read_text(encoding="ascii").splitlines()
    if not lines or lines[0].strip() != XPM42_HEADER:
        raise ValueError(f"{path}: missing {XPM42_HEADER} header")
    try:
        width_s, height_s, count_s, cpp_s, mode = lines[1].split()
        width, height, count, cpp = (int(v) for v in (width_s, height_s, count_s, cpp_s))
    except (IndexError, ValueError) as exc:
        raise ValueError(f"{path}: invalid xpm42 size line") from exc
    if mode not in ("c", "m") or width <= 0 or height <= 0 or count <= 0 or cpp <= 0:
        raise ValueError(f"{path}: invalid xpm42 size line")

    colour_lines = lines[2 : 2 + count]
    rows = lines[2 + count : 2 + count + height]
    if len(colour_lines) != count or len(rows) != height:
        raise ValueError(f"{path}: truncated xpm42 data")

    palette = {line[:cpp]: _parse_hex_colour(line[cpp:].strip()) for line in colour_lines}

    pixels = []
    for row in rows:
        if len(row) < width * cpp:
            raise ValueError(f"{path}: xpm42 row too short")
        for start in range(0, width * cpp, cpp):
            key = row[start : start + cpp]
            try:
                pixels.append(palette[key])
            except KeyError as exc:
                raise ValueError(f"{path}: unknown xpm42 colour key {key!r}") from exc
    return Texture(width, height, tuple(pixels))


def _load_png(path) -> Texture:
    with PILImage.open(path) as picture:
        rgba = picture.convert("RGBA")
        pixels = tuple(pack_colour(*channels) for channels in rgba.getdata())
        return Texture(rgba.width, rgba.height, pixels)


def load_texture(path) -> Texture:
    """Load a ``.png`` or ``.xpm42`` file as a row-major texture."""
    name = str(path)
    if ".png" in name:
        return _load_png(path)
    if ".xpm42" in name:
        return load_xpm42(path)
    raise ValueError("Only .png or .xpm42 textures in scene svp")


def load_column_major(path) -> Texture:
    """Load an XPM42 file stored column-major, for drawing wall columns."""
    return load_xpm42(path).transposed()