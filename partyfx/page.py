import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class Viewport:
    width: int
    height: int
    pixel_ratio: float = 1.0


class Page:
    """The drawable page the effects attach their layers to.

    Layers need a ``z_index`` attribute and a ``render(screen, viewport)``
    method. They are painted from lowest to highest z-index; layers with the
    same z-index keep their insertion order.
    """

    def __init__(self, viewport):
        self.viewport = viewport
        self.layers = []
        self._resize_listeners = []

    def append(self, layer):
        if layer not in self.layers:
            self.layers.append(layer)

    def remove(self, layer):
        if layer not in self.layers:
            raise ValueError(f"{layer!r} is not attached to this page")
        self.layers.remove(layer)

    def contains(self, layer):
        return layer in self.layers

    def add_resize_listener(self, callback):
        self._resize_listeners.append(callback)

    def resize(self, width, height):
        self.viewport.width = width
        self.viewport.height = height
        logger.debug("Page resized to %sx%s", width, height)
        for callback in self._resize_listeners:
            callback()

    def render(self, screen):
        for layer in sorted(self.layers, key=lambda layer: layer.z_index):
            layer.render(screen, self.viewport)
