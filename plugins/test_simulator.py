#!/usr/bin/env python3
"""
Tests for the simulator, presets, pipeline and plugin registration.

Verifies:
1. Every preset builds and renders without errors
2. Pause freezes the surface, resize reaches the renderers
3. Runtime parameter updates, pattern cycling and family switching
4. Frame errors are contained (previous surface kept)
5. Pipeline returns a (1, H, W, 3) float32 tensor and honors presets
"""

import time

import numpy as np
import pytest
import torch
from pydantic import ValidationError

from generative_patterns.clock import AnimationClock
from generative_patterns.params import FAMILY_ORDER, ShaderParams, WaveParams
from generative_patterns.pipeline import PatternPipeline, PatternPipelineConfig, PresetEnum
from generative_patterns.plugin import register_pipelines
from generative_patterns.presets import (
    PRESET_ORDER, PRESET_ORDERS, PRESETS, build_params, get_preset, get_presets_for_family,
    list_presets,
)
from generative_patterns.simulator import (
    RENDERER_CLASSES, RENDERER_ORDER, PatternSimulator, pattern_choices,
)


W, H = 120, 84


class FakeTime:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


def _sim(preset="donut"):
    fake = FakeTime()
    return PatternSimulator(preset, W, H, clock=AnimationClock(fake)), fake


# ---------------------------------------------------------------------------
# Presets
# ---------------------------------------------------------------------------

def test_presets_cover_every_family():
    print("Testing presets...")
    assert set(PRESET_ORDERS) == set(FAMILY_ORDER)
    for family in FAMILY_ORDER:
        assert get_presets_for_family(family), f"No presets for {family}"
    assert sorted(PRESET_ORDER) == sorted(PRESETS)
    assert len(list_presets()) == len(PRESETS)
    assert [k for k, _, _ in list_presets("tunnel")] == PRESET_ORDERS["tunnel"]
    assert get_preset("nope") is None
    assert get_presets_for_family("nope") == []
    print(f"  ✓ {len(PRESETS)} presets")


def test_build_params():
    for key in PRESET_ORDER:
        family, params = build_params(key)
        assert family == PRESETS[key]["family"]
        assert params.family == family
    family, params = build_params("hypnotic", symmetry=3)
    assert family == "shader" and params.symmetry == 3
    with pytest.raises(ValueError):
        build_params("nope")


def test_every_preset_renders():
    print("Testing preset rendering...")
    sim, _ = _sim()
    for key in PRESET_ORDER:
        sim.apply_preset(key)
        frame = sim.render_at(0.75)
        assert frame.shape == (H, W, 3), key
        assert frame.dtype == np.uint8, key
        assert sim.errors == 0, f"{key}: {sim.last_error}"
    print("  ✓ all presets render")


# ---------------------------------------------------------------------------
# Simulator
# ---------------------------------------------------------------------------

def test_family_registry():
    assert RENDERER_ORDER == FAMILY_ORDER
    for family, cls in RENDERER_CLASSES.items():
        assert cls.renderer_name == family
        assert cls.default_params().family == family


def test_render_frame_advances_with_clock():
    sim, fake = _sim("hypnotic")
    first = sim.render_frame().copy()
    fake.now += 1.0
    second = sim.render_frame()
    assert not np.array_equal(first, second)
    assert sim.surface is second


def test_pause_freezes_surface():
    print("Testing pause...")
    sim, fake = _sim("hypnotic")
    frame = sim.render_frame()
    count = sim.renderer.frame_count

    sim.pause()
    assert sim.paused
    fake.now += 5.0
    again = sim.render_frame()
    assert again is frame, "Paused render must return the last surface"
    assert sim.renderer.frame_count == count, "Nothing evaluated while paused"

    sim.toggle_pause()
    assert not sim.paused
    assert np.isclose(sim.clock.elapsed(), 0.0), "Paused time does not count"
    print("  ✓ paused frames reuse the last surface")


def test_resize():
    sim, _ = _sim("donut")
    sim.render_frame()
    sim.resize(200, 100)
    assert sim.renderer.width == 200 and sim.renderer.grid == (7, 25)
    assert sim.render_frame().shape == (100, 200, 3)

    sim.pause()
    sim.resize(64, 64)
    assert sim.render_frame(force=True).shape == (64, 64, 3)
    assert sim.surface.shape == (64, 64, 3)


def test_switching():
    sim, _ = _sim("donut")
    sim.set_family("wave")
    assert sim.family == "wave" and isinstance(sim.params, WaveParams)
    assert sim.preset_key is None
    with pytest.raises(ValueError):
        sim.set_family("hologram")
    with pytest.raises(ValueError):
        sim.apply_preset("nope")

    sim.set_params(ShaderParams(pattern="moire"))
    assert sim.family == "shader" and sim.params.pattern == "moire"
    assert sim.render_frame().shape == (H, W, 3)


def test_runtime_params():
    sim, _ = _sim("hypnotic")
    sim.set_runtime_params(speed=2.0, symmetry=4, not_a_knob=1)
    assert sim.params.speed == 2.0 and sim.params.symmetry == 4

    sim.set_runtime_params(preset="matrix", speed=3.0)
    assert sim.family == "ascii" and sim.params.pattern == "matrix"
    assert sim.params.speed == 3.0

    sim.set_runtime_params(paused=True)
    assert sim.paused
    sim.set_runtime_params(paused=False)
    assert not sim.paused

    sim.set_runtime_params(family="isometric")
    assert sim.family == "isometric"
    with pytest.raises(ValidationError):
        sim.set_runtime_params(height_pattern="cathedral")


def test_next_pattern_cycles():
    sim, _ = _sim("wormhole")
    choices = pattern_choices("tunnel")
    assert choices == ["circle", "triangle", "square", "hexagon", "star"]
    seen = [sim.next_pattern() for _ in choices]
    assert seen == choices[1:] + choices[:1]
    assert sim.next_pattern(step=-1) == "star"
    assert sim.preset_key is None


def test_restart_resets_state():
    sim, fake = _sim("matrix")
    fake.now += 3.0
    sim.render_frame()
    state = sim.renderer.state
    sim.restart()
    assert sim.clock.elapsed() == 0.0
    assert sim.renderer.state is not state


def test_frame_errors_are_contained():
    print("Testing error containment...")
    sim, fake = _sim("hypnotic")
    good = sim.render_frame()

    def broken(params, frame):
        raise RuntimeError("kernel exploded")

    sim.renderer.draw = broken
    fake.now += 1.0
    kept = sim.render_frame()
    assert kept is good
    assert sim.errors == 1
    assert isinstance(sim.last_error, RuntimeError)
    print("  ✓ previous surface kept")


def test_image_pattern():
    sim, _ = _sim("donut")
    sim.set_runtime_params(pattern="image")
    blank = sim.render_frame().copy()
    img = np.zeros((40, 40, 3), dtype=np.uint8)
    img[:, 20:] = 255
    sim.set_image(img)
    shown = sim.render_frame()
    assert not blank.any()
    assert shown.any()


def test_render_float_and_status():
    sim, _ = _sim("ocean")
    out = sim.render_float()
    assert out.dtype == np.float32 and out.shape == (H, W, 3)
    assert 0.0 <= out.min() and out.max() <= 1.0
    line = sim.status_line()
    assert "Wave Field" in line and "Ocean Lines" in line
    sim.pause()
    assert "PAUSED" in sim.status_line()


def test_background_ticker():
    sim = PatternSimulator("hypnotic", 48, 32)
    ticker = sim.start(fps=100)
    try:
        assert sim.start() is ticker
        deadline = time.monotonic() + 3.0
        while sim.renderer.frame_count < 3 and time.monotonic() < deadline:
            time.sleep(0.01)
        assert sim.renderer.frame_count >= 3
        sim.pause()
        assert ticker.paused
        sim.resume()
        assert not ticker.paused
    finally:
        sim.stop()
    assert not ticker.is_alive()


# ---------------------------------------------------------------------------
# Pipeline / plugin
# ---------------------------------------------------------------------------

def test_preset_enum_and_config():
    assert [p.value for p in PresetEnum] == PRESET_ORDER
    config = PatternPipelineConfig()
    assert config.preset == PresetEnum.hypnotic
    assert PatternPipeline.get_config_class() is PatternPipelineConfig
    with pytest.raises(ValidationError):
        PatternPipelineConfig(speed=50.0)
    extra = PatternPipelineConfig.model_json_schema()["properties"]["width"]
    assert extra["is_load_param"] is True


def test_pipeline_call():
    print("Testing pipeline...")
    pipe = PatternPipeline(width=64, height=48, preset="hypnotic", fps=60)
    try:
        out = pipe()
        video = out["video"]
        assert isinstance(video, torch.Tensor)
        assert tuple(video.shape) == (1, 48, 64, 3)
        assert video.dtype == torch.float32
        assert float(video.min()) >= 0.0 and float(video.max()) <= 1.0

        pipe(preset=PresetEnum.matrix, speed=2.0)
        assert pipe.simulator.family == "ascii"
        assert pipe.simulator.params.speed == 2.0

        # Keys absent from kwargs leave preset values alone
        pipe(prompt="ignored")
        assert pipe.simulator.params.speed == 2.0

        pipe(paused=True)
        assert pipe.simulator.paused
    finally:
        pipe.close()
    print("  ✓ pipeline frames")


def test_plugin_registration():
    class Registry:
        def __init__(self):
            self.calls = []

        def register(self, **kwargs):
            self.calls.append(kwargs)

    registry = Registry()
    register_pipelines(registry)
    assert len(registry.calls) == 1
    assert registry.calls[0]["pipeline_class"] is PatternPipeline
    assert registry.calls[0]["name"] == "generative_patterns"


if __name__ == "__main__":
    print("\n=== Testing Simulator & Pipeline ===\n")

    test_presets_cover_every_family()
    test_build_params()
    test_every_preset_renders()
    test_family_registry()
    test_render_frame_advances_with_clock()
    test_pause_freezes_surface()
    test_resize()
    test_switching()
    test_runtime_params()
    test_next_pattern_cycles()
    test_restart_resets_state()
    test_frame_errors_are_contained()
    test_image_pattern()
    test_render_float_and_status()
    test_background_ticker()
    test_preset_enum_and_config()
    test_pipeline_call()
    test_plugin_registration()

    print("\n✓ All tests passed!\n")
