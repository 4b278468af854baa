"""Global configuration: constants, tolerances, settings loader."""

from __future__ import annotations

import logging
import os
from typing import Any, Mapping

from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

# World up axis (IFC models are Z-up, metres)
WORLD_UP = (0.0, 0.0, 1.0)

# Host-wall search
HOST_WALL_TOLERANCE_M = 0.05
HOST_WALL_SEARCH_START_M = 0.25
HOST_WALL_SEARCH_GROWTH = 2.0
HOST_WALL_SEARCH_MAX_M = 2.0
MIN_WALL_VOLUME_RATIO = 0.1

# Devices within this distance of a door centre count as "nearby"
DEVICE_RADIUS_M = 1.0

# Space footprints
FLOOR_TOLERANCE_M = 0.1
BOUNDARY_BAND_M = 0.3

# Projection windows
DEPTH_WINDOW_M = 1.0
WALL_SLICE_M = 0.5
VERTICAL_TOLERANCE = 1e-3

# Spatial index grid cell
INDEX_CELL_SIZE_M = 2.0

# Concurrent in-flight renders in a batch
DEFAULT_MAX_WORKERS = 3

_ENV_PREFIX = "AECVIEW_"


class EngineSettings(BaseModel):
    """Every tunable tolerance used by the resolvers and the projector."""

    host_wall_tolerance_m: float = HOST_WALL_TOLERANCE_M
    host_wall_search_start_m: float = HOST_WALL_SEARCH_START_M
    host_wall_search_growth: float = HOST_WALL_SEARCH_GROWTH
    host_wall_search_max_m: float = HOST_WALL_SEARCH_MAX_M
    min_wall_volume_ratio: float = MIN_WALL_VOLUME_RATIO
    device_radius_m: float = DEVICE_RADIUS_M
    floor_tolerance_m: float = FLOOR_TOLERANCE_M
    boundary_band_m: float = BOUNDARY_BAND_M
    depth_window_m: float = DEPTH_WINDOW_M
    wall_slice_m: float = WALL_SLICE_M
    vertical_tolerance: float = VERTICAL_TOLERANCE
    index_cell_size_m: float = INDEX_CELL_SIZE_M
    max_workers: int = DEFAULT_MAX_WORKERS
    log_level: str | None = None


def load_settings(environ: Mapping[str, str] | None = None) -> EngineSettings:
    """Load merged settings: defaults -> ``AECVIEW_*`` environment variables.

    ``AECVIEW_DEVICE_RADIUS_M=1.5`` overrides ``device_radius_m`` and so on.
    Values that do not parse are ignored and the default is kept.
    """
    env = os.environ if environ is None else environ
    settings = EngineSettings()
    overrides: dict[str, Any] = {}

    for field_name in EngineSettings.model_fields:
        raw = env.get(_ENV_PREFIX + field_name.upper())
        if raw is None or raw.strip() == "":
            continue
        candidate = {**overrides, field_name: raw.strip()}
        try:
            EngineSettings(**candidate)
        except ValidationError:
            logger.debug("Ignoring unparsable %s%s=%r", _ENV_PREFIX, field_name.upper(), raw)
            continue
        overrides[field_name] = raw.strip()

    if overrides:
        settings = EngineSettings(**overrides)
    return settings
