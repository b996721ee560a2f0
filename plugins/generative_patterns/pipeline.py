"""
Generative Patterns Pipeline

Text-only video source: the pattern engine is the video. A background
FrameTicker keeps rendering at the target rate; ``__call__`` applies the
host's runtime controls and returns the latest completed frame as a
(1, H, W, 3) float32 tensor in [0, 1]. No video input is consumed.
"""

import enum

import numpy as np
import torch
from pydantic import BaseModel, Field

from .presets import PRESET_ORDER
from .simulator import PatternSimulator


PresetEnum = enum.Enum(
    "PresetEnum", {key: key for key in PRESET_ORDER}, type=str,
)
PresetEnum.__doc__ = "All pattern presets. Hosts render enum fields as dropdowns."


def ui_field_config(order, label, is_load_param=False):
    """UI hints carried in a field's JSON schema."""
    config = {"order": order, "label": label}
    if is_load_param:
        config["is_load_param"] = True
    return config


class PatternPipelineConfig(BaseModel):
    """Load-time settings and runtime controls exposed to the host UI."""

    pipeline_id: str = "generative-patterns"
    pipeline_name: str = "Generative Patterns"
    pipeline_description: str = "Procedural ASCII, shader, tunnel, wave and isometric patterns"

    # Load-time
    width: int = Field(
        default=640, ge=64, le=2048,
        json_schema_extra=ui_field_config(1, "Width", is_load_param=True),
    )
    height: int = Field(
        default=480, ge=64, le=2048,
        json_schema_extra=ui_field_config(2, "Height", is_load_param=True),
    )
    fps: int = Field(
        default=30, ge=1, le=120,
        json_schema_extra=ui_field_config(3, "Target FPS", is_load_param=True),
    )
    # Runtime
    preset: PresetEnum = Field(
        default=PresetEnum.hypnotic,
        description="Pattern preset to run",
        json_schema_extra=ui_field_config(1, "Preset"),
    )
    speed: float = Field(
        default=1.0, ge=0.0, le=5.0,
        json_schema_extra=ui_field_config(2, "Speed"),
    )
    complexity: float = Field(
        default=1.0, ge=0.1, le=5.0,
        json_schema_extra=ui_field_config(3, "Complexity"),
    )
    symmetry: float = Field(
        default=6.0, ge=0.0, le=16.0,
        json_schema_extra=ui_field_config(4, "Symmetry"),
    )
    zoom: float = Field(
        default=1.0, ge=0.1, le=5.0,
        json_schema_extra=ui_field_config(5, "Zoom"),
    )
    hue_start: float = Field(
        default=0.0, ge=0.0, le=360.0,
        json_schema_extra=ui_field_config(10, "Hue Start"),
    )
    hue_end: float = Field(
        default=360.0, ge=0.0, le=360.0,
        json_schema_extra=ui_field_config(11, "Hue End"),
    )
    saturation: float = Field(
        default=80.0, ge=0.0, le=100.0,
        json_schema_extra=ui_field_config(12, "Saturation"),
    )
    lightness: float = Field(
        default=60.0, ge=0.0, le=100.0,
        json_schema_extra=ui_field_config(13, "Lightness"),
    )
    paused: bool = Field(
        default=False,
        json_schema_extra=ui_field_config(20, "Paused"),
    )


# Runtime controls forwarded to the simulator (fields the current family
# does not have are ignored there)
RUNTIME_KEYS = (
    "speed", "complexity", "symmetry", "zoom",
    "hue_start", "hue_end", "saturation", "lightness", "paused",
)


class PatternPipeline:
    """Video-source pipeline around a background-ticking PatternSimulator."""

    @classmethod
    def get_config_class(cls):
        return PatternPipelineConfig

    def __init__(self, width: int = 640, height: int = 480, preset: str = "hypnotic",
                 fps: int = 30, **kwargs):
        """
        Args:
            width, height: output frame size in pixels
            preset: initial preset key (e.g. 'hypnotic', 'matrix')
            fps: background render rate
        """
        preset = getattr(preset, "value", preset)
        self.simulator = PatternSimulator(preset_key=preset, width=width, height=height)
        # First frame is ready before the host asks for one
        self.simulator.render_frame(force=True)
        self._ticker = self.simulator.start(fps=fps)
        print(f"[GP] Pipeline ready: {preset} @ {width}x{height}, {fps} fps")

    def __call__(self, prompt: str = "", **kwargs) -> dict:
        """
        Apply runtime controls and grab the latest frame.

        Args:
            prompt: Ignored (text-only pipeline).
            **kwargs: Runtime controls from the host UI; only keys present
                are applied so preset values are not overwritten by defaults:
                preset (PresetEnum|str), speed, complexity, symmetry, zoom,
                hue_start, hue_end, saturation, lightness, paused

        Returns:
            {"video": tensor} where tensor is (1, H, W, 3) float32 [0,1]
        """
        preset = kwargs.get("preset")
        if preset is not None:
            preset = getattr(preset, "value", preset)
            if preset != self.simulator.preset_key:
                self.simulator.apply_preset(preset)

        updates = {key: kwargs[key] for key in RUNTIME_KEYS if key in kwargs}
        if updates:
            self.simulator.set_runtime_params(**updates)

        frame_np = self.simulator.surface.astype(np.float32) / 255.0
        tensor = torch.from_numpy(frame_np.copy()).unsqueeze(0)
        return {"video": tensor}

    def close(self):
        """Stop the background ticker."""
        self.simulator.stop()
        print("[GP] Pipeline closed")
