import os

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import pygame
import pytest

from partyfx.page import Page, Viewport
from partyfx.scheduler import FrameScheduler


class FakeClock:
    def __init__(self, now=0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += ms
        return self.now


@pytest.fixture(scope="session", autouse=True)
def pygame_headless():
    pygame.init()
    yield
    pygame.quit()


@pytest.fixture
def clock():
    return FakeClock(1000)


@pytest.fixture
def scheduler(clock):
    return FrameScheduler(clock)


@pytest.fixture
def page():
    return Page(Viewport(1920, 1080, 1.0))
