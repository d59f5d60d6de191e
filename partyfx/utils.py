import math
import random

from partyfx.config import REFERENCE_WIDTH


def random_in_range(min_value, max_value, precision=0):
    """Uniform sample in [min_value, max_value), truncated to ``precision`` decimals."""
    multiplier = 10 ** precision
    value = random.random() * (max_value - min_value) + min_value
    return math.floor(value * multiplier) / multiplier


def random_item(items):
    return items[math.floor(random.random() * len(items))]


def scale_factor(viewport_width):
    return math.log(viewport_width) / math.log(REFERENCE_WIDTH)


def debounce(func, delay_ms, scheduler):
    """Wrap ``func`` so it only runs once calls stop for ``delay_ms``."""
    pending = None

    def wrapper(*args, **kwargs):
        nonlocal pending
        if pending is not None:
            scheduler.clear_timeout(pending)

        def fire():
            nonlocal pending
            pending = None
            func(*args, **kwargs)

        pending = scheduler.set_timeout(fire, delay_ms)

    return wrapper
