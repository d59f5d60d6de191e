"""Ambient confetti shower.

Each confetto is a small tumbling square sprite. It drifts down the page on
a straight line while a closed spline (see ``partyfx.spline``) adds a slow
circular wobble on top.
"""

import logging
import math
import random

import pygame

from partyfx.config import (
    AMBIENT_Z_INDEX,
    D_THETA_MAX,
    D_THETA_MIN,
    DEVIATION,
    DX_THETA_MAX,
    DX_THETA_MIN,
    DY_MAX,
    DY_MIN,
    SIZE_MAX,
    SIZE_MIN,
    SPLINE_PERIOD,
    SPREAD,
)
from partyfx.scheduler import FrameScheduler
from partyfx.spline import create_poisson, sample

logger = logging.getLogger(__name__)


def _channel(limit=200):
    return int(limit * random.random())


def _red():
    black = _channel()
    return (200, black, black)


def _green():
    black = _channel()
    return (black, 200, black)


def _blue():
    black = _channel()
    return (black, black, 200)


def _grey():
    black = _channel(256)
    return (black, black, black)


COLOR_THEMES = [
    lambda: (_channel(), _channel(), _channel()),
    _red,
    _green,
    _blue,
    lambda: (200, 100, _channel()),
    lambda: (_channel(), 200, 200),
    _grey,
    lambda: COLOR_THEMES[1 if random.random() < .5 else 2](),
    lambda: COLOR_THEMES[3 if random.random() < .5 else 5](),
    lambda: COLOR_THEMES[2 if random.random() < .5 else 4](),
]


def _unit_axis(x, y):
    norm = math.hypot(x, y)
    if norm == 0:
        return (1.0, 0.0)
    return (x / norm, y / norm)


class DomSplineParticle(pygame.sprite.Sprite):
    def __init__(self, theme, viewport_width):
        super().__init__()
        self.frame = 0
        self.width = SIZE_MIN + SIZE_MAX * random.random()
        self.height = SIZE_MIN + SIZE_MAX * random.random()
        self.color = theme()

        self.rotation = 360 * random.random()
        self.axis = _unit_axis(math.cos(360 * random.random()), math.cos(360 * random.random()))
        self.theta = 360 * random.random()
        self.d_theta = D_THETA_MIN + D_THETA_MAX * random.random()

        self.x = viewport_width * random.random()
        self.y = -DEVIATION
        self.dx = math.sin(DX_THETA_MIN + DX_THETA_MAX * random.random())
        self.dy = DY_MIN + DY_MAX * random.random()
        self.left, self.top = self.x, self.y

        # Closed loop: the first and last control points share a radius
        self.spline_x = create_poisson()
        last = len(self.spline_x) - 1
        self.spline_y = [DEVIATION * random.random() for _ in self.spline_x]
        self.spline_y[0] = self.spline_y[last] = DEVIATION * random.random()

        self._render()

    def update(self, viewport_height, delta):
        """Advance by ``delta`` ms. Returns True once below the viewport."""
        self.frame += delta
        self.x += self.dx * delta
        self.y += self.dy * delta
        self.theta += self.d_theta * delta

        phi = self.frame % SPLINE_PERIOD / SPLINE_PERIOD
        rho = sample(self.spline_x, self.spline_y, phi)
        phi *= 2 * math.pi

        self.left = self.x + rho * math.cos(phi)
        self.top = self.y + rho * math.sin(phi)
        self._render()
        return self.y > viewport_height + DEVIATION

    def corners(self):
        # Project the square spun by theta about the in-plane axis, then
        # apply the flat outer rotation about its centre.
        theta = math.radians(self.theta)
        ux, uy = self.axis
        cos_t = math.cos(theta)
        k = 1 - cos_t
        edge_x = ((cos_t + ux * ux * k) * self.width, ux * uy * k * self.width)
        edge_y = (ux * uy * k * self.height, (cos_t + uy * uy * k) * self.height)

        cx = self.left + self.width / 2
        cy = self.top + self.height / 2
        angle = math.radians(self.rotation)
        cos_a, sin_a = math.cos(angle), math.sin(angle)

        points = []
        for sx, sy in ((-0.5, -0.5), (0.5, -0.5), (0.5, 0.5), (-0.5, 0.5)):
            px = sx * edge_x[0] + sy * edge_y[0]
            py = sx * edge_x[1] + sy * edge_y[1]
            points.append((cx + px * cos_a - py * sin_a, cy + px * sin_a + py * cos_a))
        return points

    def _render(self):
        points = self.corners()
        min_x = math.floor(min(x for x, _ in points))
        min_y = math.floor(min(y for _, y in points))
        width = math.ceil(max(x for x, _ in points)) - min_x + 1
        height = math.ceil(max(y for _, y in points)) - min_y + 1

        self.image = pygame.Surface((width, height), pygame.SRCALPHA)
        pygame.draw.polygon(self.image, self.color, [(x - min_x, y - min_y) for x, y in points])
        self.rect = self.image.get_rect(topleft=(min_x, min_y))


class AmbientContainer(pygame.sprite.Group):
    z_index = AMBIENT_Z_INDEX

    def render(self, screen, viewport):
        self.draw(screen)


class DomParticleSystem:
    """Staggered spawner and frame loop for the ambient shower.

    ``start`` attaches a container to the page and keeps adding confetti
    every ``spread * random()`` ms. The loop tears everything down on the
    first frame where no spawn is pending and no confetti are left.
    """

    def __init__(self, page, scheduler=None, theme=0, spread=SPREAD, max_particles=None):
        if max_particles is not None and max_particles < 1:
            raise ValueError(f"max_particles must be >= 1, got {max_particles}")
        self.page = page
        self.scheduler = scheduler or FrameScheduler()
        self.theme = COLOR_THEMES[theme]
        self.spread = spread
        self.max_particles = max_particles
        self.particles = []
        self.container = None
        self.spawned = 0
        self._timer = None
        self._frame = None
        self._prev = None

    @property
    def running(self):
        return self.container is not None

    @property
    def spawn_pending(self):
        return self._timer is not None

    def start(self):
        if self.running:
            return
        self.container = AmbientContainer()
        self.page.append(self.container)
        self.spawned = 0
        self._prev = None
        self._add_particle()
        self._frame = self.scheduler.request_frame(self._loop)
        logger.info("Ambient confetti started")

    def stop_spawning(self):
        if self._timer is not None:
            self.scheduler.clear_timeout(self._timer)
            self._timer = None
            logger.debug("Ambient spawning stopped after %d confetti", self.spawned)

    def _add_particle(self):
        particle = DomSplineParticle(self.theme, self.page.viewport.width)
        self.particles.append(particle)
        self.container.add(particle)
        self.spawned += 1

        if self.max_particles is not None and self.spawned >= self.max_particles:
            self._timer = None
        else:
            self._timer = self.scheduler.set_timeout(self._add_particle, self.spread * random.random())

    def _loop(self, timestamp):
        delta = timestamp - self._prev if self._prev is not None else 0
        self._prev = timestamp
        height = self.page.viewport.height

        for i in range(len(self.particles) - 1, -1, -1):
            if self.particles[i].update(height, delta):
                self.particles.pop(i).kill()

        if self._timer is not None or self.particles:
            self._frame = self.scheduler.request_frame(self._loop)
            return

        self.page.remove(self.container)
        self.container = None
        self._frame = None
        logger.info("Ambient confetti finished, %d shown", self.spawned)
