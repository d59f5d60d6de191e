FRAMERATE = 60
WIDTH, HEIGHT = 1280, 720
PIXEL_RATIO = 1.0  # backing-store pixels per logical pixel
BACKGROUND = (18, 14, 30)
REFERENCE_WIDTH = 1920  # viewport width where scale_factor() == 1
RESIZE_DEBOUNCE_MS = 200

# --- Burst (canvas) confetti ---
DEFAULT_BURST_CONFIG = {
    "count": 295,
    "radius": 5,
    "colors": [
        "#c3c77e",
        "#c7548c",
        "#6d3ba6",
        "#20c371",
        "#11888d",
        "#a6660e",
        "#a40e0e",
        "#34a40e",
    ],
    "emojis": [],
    "icon": None,  # image path or URL
}
BURST_HEIGHT_RATIO = 5 / 7  # emission height as a fraction of the viewport
SPEED_RANGE = (0.9, 1.7)  # px/ms before scaling
FINAL_SPEED_RANGE = (0.2, 0.6)
DRAG_RANGE = (0.0005, 0.0009)  # px/ms^2
ROTATION_SPEED_RANGE = (0.03, 0.07)
GLYPH_ROTATION_SPEED = 0.01
ROTATION_DECAY = 1e-5
LAUNCH_ANGLE_RANGE = (82, 15)  # degrees
SPAWN_OFFSET_RANGE = (-150, 0)  # px along the launch vector
GRAVITY = 0.00125  # px/ms^2
REMOVAL_MARGIN = 100  # px below the canvas
ICON_FETCH_TIMEOUT = 10  # s per icon download
ICON_POLL_MS = 50  # how often a running download is checked

# --- Ambient (sprite) confetti ---
SPREAD = 40  # max ms between spawns
SIZE_MIN = 3
SIZE_MAX = 12 - SIZE_MIN
ECCENTRICITY = 10
DEVIATION = 100  # px above/below the viewport, also the max wobble radius
DX_THETA_MIN = -0.1
DX_THETA_MAX = -DX_THETA_MIN - DX_THETA_MIN
DY_MIN = 0.13  # px/ms
DY_MAX = 0.18
D_THETA_MIN = 0.4  # deg/ms
D_THETA_MAX = 0.7 - D_THETA_MIN
SPLINE_PERIOD = 7777  # ms per wobble loop
AMBIENT_Z_INDEX = 9999
CANVAS_Z_INDEX = 1000


class ConfigError(ValueError):
    pass


def merge_burst_config(config=None):
    """Overlay ``config`` on DEFAULT_BURST_CONFIG and validate the result."""
    config = dict(config or {})
    unknown = set(config) - set(DEFAULT_BURST_CONFIG)
    if unknown:
        raise ConfigError(f"Unknown burst option(s): {', '.join(sorted(unknown))}")

    merged = {**DEFAULT_BURST_CONFIG, **config}
    if merged["count"] < 0:
        raise ConfigError(f"count must be >= 0, got {merged['count']}")
    if merged["radius"] <= 0:
        raise ConfigError(f"radius must be > 0, got {merged['radius']}")
    if not merged["colors"]:
        raise ConfigError("colors must not be empty")
    merged["emojis"] = list(merged["emojis"] or [])
    if merged["emojis"] and merged["icon"]:
        raise ConfigError("emojis and icon are mutually exclusive")
    return merged
