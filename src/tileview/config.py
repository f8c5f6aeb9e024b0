"""Default configuration values for tileview."""

from __future__ import annotations

from typing import Final

TILE_SIZE: Final[int] = 256

# Many 2D scene graphs store actor positions as signed 16-bit integers.  Every
# position handed to the host must stay below this magnitude, which is what
# the anchor re-basing in ``tileview.core.anchor`` guarantees.
MAX_REPRESENTABLE_PIXEL: Final[int] = 32767

# At 256 px tiles the whole grid of zoom level 7 is 32768 px wide, one pixel
# over the bound, but the first level whose visible neighbourhood actually
# drifts out of range in practice is 8.
ANCHOR_ZOOM_THRESHOLD: Final[int] = 8

MERCATOR_LAT_BOUND: Final[float] = 85.05112878
MIN_ZOOM: Final[int] = 0
MAX_ZOOM: Final[int] = 18
INITIAL_ZOOM: Final[int] = 3

# ``ensure_visible`` pads the requested box by 10% so that markers on the
# edges keep some breathing room.
ENSURE_VISIBLE_PADDING: Final[float] = 1.1

GO_TO_BASE_DURATION_MS: Final[int] = 500
KINETIC_SCROLL_DURATION_MS: Final[int] = 300
FRAME_INTERVAL_MS: Final[int] = 16

SCROLL_MODES: Final[tuple[str, ...]] = ("push", "kinetic")
DEFAULT_SOURCE_ID: Final[str] = "synthetic"
SETTINGS_SCHEMA_ID: Final[str] = "tileview/settings@1"
