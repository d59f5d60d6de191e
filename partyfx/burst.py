"""Two-sided confetti burst drawn on a full-page canvas layer."""

import io
import logging
import math
import threading
import urllib.request
from dataclasses import dataclass
from functools import lru_cache

import pygame

from partyfx.config import (
    BURST_HEIGHT_RATIO,
    CANVAS_Z_INDEX,
    DRAG_RANGE,
    FINAL_SPEED_RANGE,
    GLYPH_ROTATION_SPEED,
    GRAVITY,
    ICON_FETCH_TIMEOUT,
    ICON_POLL_MS,
    LAUNCH_ANGLE_RANGE,
    REMOVAL_MARGIN,
    RESIZE_DEBOUNCE_MS,
    ROTATION_DECAY,
    ROTATION_SPEED_RANGE,
    SPAWN_OFFSET_RANGE,
    SPEED_RANGE,
    merge_burst_config,
)
from partyfx.scheduler import FrameScheduler
from partyfx.utils import debounce, random_in_range, random_item, scale_factor

logger = logging.getLogger(__name__)

LEFT, RIGHT = "left", "right"
DOWN, UP = "down", "up"


class IconHandle:
    """An image that becomes drawable once its deferred load completes.

    Local files decode inside ``load``. URLs download on a daemon thread and
    ``poll`` publishes the result, so the image only changes on the frame
    thread.
    """

    def __init__(self, source):
        self.source = source
        self.image = None
        self.failed = False
        self._fetch = None
        self._data = None
        self._error = None

    @property
    def loaded(self):
        return self.image is not None

    @property
    def remote(self):
        return self.source.startswith(("http://", "https://"))

    @property
    def pending(self):
        return self._fetch is not None

    def load(self):
        if not self.remote:
            self._decode(lambda: pygame.image.load(self.source))
            return
        self._fetch = threading.Thread(target=self._download, name=f"icon-fetch {self.source}", daemon=True)
        self._fetch.start()
        logger.debug("Icon %s downloading", self.source)

    def _download(self):
        try:
            with urllib.request.urlopen(self.source, timeout=ICON_FETCH_TIMEOUT) as response:
                self._data = response.read()
        except OSError as e:
            self._error = e

    def poll(self):
        """Publish a finished download. Returns True while it is still running."""
        if self._fetch is None:
            return False
        if self._fetch.is_alive():
            return True
        self._fetch = None
        if self._error is not None:
            error, self._error = self._error, None
            self._fail(error)
            return False
        data, self._data = self._data, None
        self._decode(lambda: pygame.image.load(io.BytesIO(data), self.source))
        return False

    def _decode(self, loader):
        try:
            self.image = loader()
        except (pygame.error, OSError) as e:
            self._fail(e)
            return
        logger.debug("Icon %s loaded", self.source)

    def _fail(self, error):
        self.failed = True
        logger.warning("Icon %s could not be loaded, its confetti stay invisible: %s", self.source, error)


@dataclass
class ColorMode:
    color: str


@dataclass
class EmojiMode:
    emoji: str


@dataclass
class IconMode:
    handle: IconHandle


def _parse_color(value):
    # pygame only knows the long hex form
    if isinstance(value, str) and value.startswith("#") and len(value) in (4, 5):
        value = "#" + "".join(ch * 2 for ch in value[1:])
    return pygame.Color(value)


@lru_cache(maxsize=32)
def _glyph_font(size):
    if not pygame.font.get_init():
        pygame.font.init()
    return pygame.font.SysFont("serif", size)


def _blit_rotated(surface, image, center, angle):
    rotated = pygame.transform.rotate(image, -math.degrees(angle))
    surface.blit(rotated, rotated.get_rect(center=center))


class CanvasParticle:
    def __init__(self, initial_position, direction, radius, colors, emojis=(), icon=None, now=0, viewport_width=1920):
        scale = scale_factor(viewport_width)
        glyph = bool(emojis) or icon is not None

        speed_factor = random_in_range(*SPEED_RANGE, 3) * scale
        self.speed = [speed_factor, speed_factor]
        self.final_speed_x = random_in_range(*FINAL_SPEED_RANGE, 3)
        self.rotation_speed = GLYPH_ROTATION_SPEED if glyph else random_in_range(*ROTATION_SPEED_RANGE, 3) * scale
        self.drag_coefficient = random_in_range(*DRAG_RANGE, 6)
        self.radius = [radius, radius]
        self.initial_radius = radius
        self.rotation_angle = random_in_range(0, 0.2, 3) if direction == LEFT else random_in_range(-0.2, 0, 3)
        self.emoji_rotation_angle = random_in_range(0, 2 * math.pi)
        self.radius_y_direction = DOWN

        high, low = LAUNCH_ANGLE_RANGE
        if direction == LEFT:
            angle = math.radians(random_in_range(high, low))
        else:
            angle = math.radians(random_in_range(-low, -high))
        self.abs_cos = abs(math.cos(angle))
        self.abs_sin = abs(math.sin(angle))

        # Start behind the edge point so the stream converges on it
        offset = random_in_range(*SPAWN_OFFSET_RANGE)
        x, y = initial_position
        position = [
            x + (-offset if direction == LEFT else offset) * self.abs_cos,
            y - offset * self.abs_sin,
        ]
        self.position = list(position)
        self.initial_position = list(position)

        if icon is not None:
            self.mode = IconMode(icon)
        elif emojis:
            self.mode = EmojiMode(random_item(emojis))
        else:
            self.mode = ColorMode(random_item(colors))

        self.created_at = now
        self.direction = direction

    def update_position(self, delta_time, now):
        elapsed = now - self.created_at

        if self.speed[0] > self.final_speed_x:
            self.speed[0] = max(self.speed[0] - self.drag_coefficient * delta_time, self.final_speed_x)

        sign = -1 if self.direction == LEFT else 1
        self.position[0] += self.speed[0] * sign * self.abs_cos * delta_time
        self.position[1] = (
            self.initial_position[1]
            - self.speed[1] * self.abs_sin * elapsed
            + GRAVITY * elapsed ** 2 / 2
        )

        if isinstance(self.mode, ColorMode):
            self.rotation_speed = max(self.rotation_speed - ROTATION_DECAY * delta_time, 0)

            if self.radius_y_direction == DOWN:
                self.radius[1] -= delta_time * self.rotation_speed
                if self.radius[1] <= 0:
                    self.radius[1] = 0
                    self.radius_y_direction = UP
            else:
                self.radius[1] += delta_time * self.rotation_speed
                if self.radius[1] >= self.initial_radius:
                    self.radius[1] = self.initial_radius
                    self.radius_y_direction = DOWN

    def draw(self, surface, pixel_ratio=1.0):
        x, y = self.position
        radius_x, radius_y = self.radius
        center = (x * pixel_ratio, y * pixel_ratio)

        if isinstance(self.mode, IconMode):
            if not self.mode.handle.loaded:
                return
            size = (max(1, round(radius_x * 2)), max(1, round(radius_y * 2)))
            image = pygame.transform.scale(self.mode.handle.image, size)
            _blit_rotated(surface, image, center, self.emoji_rotation_angle)
        elif isinstance(self.mode, ColorMode):
            width = round(radius_x * pixel_ratio * 2)
            height = round(radius_y * pixel_ratio * 2)
            if width < 1 or height < 1:
                return
            ellipse = pygame.Surface((width, height), pygame.SRCALPHA)
            pygame.draw.ellipse(ellipse, _parse_color(self.mode.color), ellipse.get_rect())
            _blit_rotated(surface, ellipse, center, self.rotation_angle)
        else:
            font = _glyph_font(max(1, round(radius_x * pixel_ratio)))
            glyph = font.render(self.mode.emoji, True, (255, 255, 255))
            _blit_rotated(surface, glyph, center, self.emoji_rotation_angle)

    def is_visible(self, canvas_height):
        return self.position[1] < canvas_height + REMOVAL_MARGIN


class CanvasLayer:
    z_index = CANVAS_Z_INDEX

    def __init__(self, size=(1, 1)):
        self.surface = pygame.Surface(size, pygame.SRCALPHA)

    @property
    def width(self):
        return self.surface.get_width()

    @property
    def height(self):
        return self.surface.get_height()

    def resize(self, width, height):
        self.surface = pygame.Surface((max(1, width), max(1, height)), pygame.SRCALPHA)

    def clear(self):
        self.surface.fill((0, 0, 0, 0))

    def render(self, screen, viewport):
        if self.surface.get_size() == (viewport.width, viewport.height):
            screen.blit(self.surface, (0, 0))
        else:
            screen.blit(pygame.transform.smoothscale(self.surface, (viewport.width, viewport.height)), (0, 0))


class CanvasParticleSystem:
    """Owns the burst canvas and keeps its frame loop running for its lifetime.

    The loop never stops on its own, even when no confetti are left, so a
    later ``spawn`` starts drawing on the very next frame. Drop the system
    (and detach ``layer`` from the page) to stop it.
    """

    def __init__(self, page, scheduler=None):
        self.page = page
        self.scheduler = scheduler or FrameScheduler()
        self.layer = CanvasLayer()
        self.page.append(self.layer)
        self.particles = []
        self._icons = {}
        self.last_updated = self.scheduler.now()

        self.page.add_resize_listener(debounce(self.resize_canvas, RESIZE_DEBOUNCE_MS, self.scheduler))
        self.resize_canvas()
        self.scheduler.request_frame(self._loop)
        logger.info("Burst canvas created (%sx%s)", self.layer.width, self.layer.height)

    def resize_canvas(self):
        viewport = self.page.viewport
        self.layer.resize(
            round(viewport.width * viewport.pixel_ratio),
            round(viewport.height * viewport.pixel_ratio),
        )
        logger.debug("Burst canvas resized to %sx%s", self.layer.width, self.layer.height)

    def _icon(self, source):
        if source not in self._icons:
            handle = IconHandle(source)
            self._icons[source] = handle
            self.scheduler.set_timeout(lambda: self._load_icon(handle), 0)
        return self._icons[source]

    def _load_icon(self, handle):
        handle.load()
        self._poll_icon(handle)

    def _poll_icon(self, handle):
        if handle.poll():
            self.scheduler.set_timeout(lambda: self._poll_icon(handle), ICON_POLL_MS)

    def spawn(self, config=None):
        config = merge_burst_config(config)
        viewport = self.page.viewport
        icon = self._icon(config["icon"]) if config["icon"] else None
        now = self.scheduler.now()
        base_y = BURST_HEIGHT_RATIO * viewport.height

        for _ in range(math.ceil(config["count"] / 2)):
            for origin, direction in (((0, base_y), RIGHT), ((viewport.width, base_y), LEFT)):
                self.particles.append(CanvasParticle(
                    initial_position=origin,
                    direction=direction,
                    radius=config["radius"],
                    colors=config["colors"],
                    emojis=config["emojis"],
                    icon=icon,
                    now=now,
                    viewport_width=viewport.width,
                ))
        logger.info("Burst spawned, %d confetti live", len(self.particles))

    def reset(self, config=None):
        config = merge_burst_config(config)
        self.particles = []
        self.spawn(config)

    def _loop(self, timestamp):
        now = self.scheduler.now()
        delta_time = now - self.last_updated
        self.last_updated = now

        self.layer.clear()
        pixel_ratio = self.page.viewport.pixel_ratio
        survivors = []
        for particle in self.particles:
            particle.update_position(delta_time, now)
            particle.draw(self.layer.surface, pixel_ratio)
            if particle.is_visible(self.layer.height):
                survivors.append(particle)
        self.particles = survivors

        self.scheduler.request_frame(self._loop)
