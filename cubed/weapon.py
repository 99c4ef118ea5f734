"""The player's weapon: ammunition and its fire and reload animations."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from .config import (
    G1_DAMAGE,
    G1_FRAME_RATE,
    G1_MAG_CAPACITY,
    G1_SPARE_MAGS,
    G1_TEXTURES_PATH,
)
from .image import Texture, load_xpm42

TEXTURE_SUFFIX = ".xpm42"

Loader = Callable[[str], Texture]


class WeaponState(Enum):
    IDLE = "idle"
    FIRING = "firing"
    RELOADING = "reloading"


@dataclass
class Weapon:
    """A magazine-fed weapon with frame-based animations."""

    rest: Texture
    fire_frames: list[Texture] = field(default_factory=list)
    reload_frames: list[Texture] = field(default_factory=list)
    damage: int = G1_DAMAGE
    mag_capacity: int = G1_MAG_CAPACITY
    ammo: Optional[int] = None
    total_ammo: Optional[int] = None
    frame_index: int = -1
    frame_time: float = 0.0
    frame_time_goal: float = 1 / G1_FRAME_RATE
    state: WeaponState = WeaponState.IDLE
    texture: Optional[Texture] = None

    def __post_init__(self) -> None:
        if self.ammo is None:
            self.ammo = self.mag_capacity
        if self.total_ammo is None:
            self.total_ammo = self.ammo * G1_SPARE_MAGS
        if self.texture is None:
            self.texture = self.rest

    def fire(self) -> bool:
        """Start the fire animation if idle and loaded; returns whether it did."""
        if self.state is not WeaponState.IDLE or self.ammo == 0:
            return False
        self.state = WeaponState.FIRING
        self.ammo -= 1
        return True

    def reload(self) -> bool:
        """Start reloading if idle and not full; returns whether it did."""
        if self.state is not WeaponState.IDLE or self.ammo == self.mag_capacity:
            return False
        self.state = WeaponState.RELOADING
        self.total_ammo += self.ammo
        self.ammo = 0
        return True

    def _finish(self) -> None:
        self.state = WeaponState.IDLE
        self.frame_index = -1
        self.texture = self.rest

    def advance(self, delta_time: float) -> bool:
        """Move the running animation on; returns whether the frame changed."""
        if self.state is WeaponState.IDLE:
            return False
        self.frame_time += delta_time
        if self.frame_time < self.frame_time_goal:
            return False
        self.frame_time = 0.0
        self.frame_index += 1
        if self.state is WeaponState.FIRING:
            if self.frame_index < len(self.fire_frames):
                self.texture = self.fire_frames[self.frame_index]
            else:
                self._finish()
        elif self.state is WeaponState.RELOADING:
            if self.frame_index < len(self.reload_frames):
                self.texture = self.reload_frames[self.frame_index]
            else:
                self.ammo = min(self.mag_capacity, self.total_ammo)
                self.total_ammo -= self.ammo
                self._finish()
        return True


def load_animation(
    directory: str = G1_TEXTURES_PATH, prefix: str = "f", loader: Loader = load_xpm42
) -> list[Texture]:
    """Load ``<prefix>0``, ``<prefix>1``, ... until a frame cannot be loaded."""
    frames = []
    index = 0
    while True:
        path = os.path.join(directory, f"{prefix}{index}{TEXTURE_SUFFIX}")
        try:
            frames.append(loader(path))
        except (OSError, ValueError):
            return frames
        index += 1


def load_weapon(directory: str = G1_TEXTURES_PATH, loader: Loader = load_xpm42) -> Weapon:
    """Load the resting texture and both animations of a weapon."""
    rest = loader(os.path.join(directory, f"0{TEXTURE_SUFFIX}"))
    return Weapon(
        rest=rest,
        fire_frames=load_animation(directory, "f", loader),
        reload_frames=load_animation(directory, "r", loader),
    )