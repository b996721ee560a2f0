"""
Generative Patterns Viewer - Entry Point

Usage:
    python -m generative_patterns [preset] [--window WxH] [--scale F] [--image PATH]

Examples:
    python -m generative_patterns
    python -m generative_patterns hypnotic
    python -m generative_patterns matrix --window 1200x800
    python -m generative_patterns donut --snap 2.5
    python -m generative_patterns all --snap 1.0 --window 640x480

Families:
    ascii       - Character-grid renderer (3D solids, rain, fire, plasma...)
    shader      - Per-pixel procedural fields (spirals, voronoi, fractals...)
    tunnel      - Zooming nested shapes
    wave        - Stacked parametric polylines
    isometric   - Height-mapped isometric cube field

Use --list to see all available presets.
"""

import os
import sys

from PIL import Image

from .presets import PRESET_ORDER, list_presets
from .params import FAMILY_ORDER
from .simulator import PatternSimulator


def snap(preset, width, height, elapsed, image=None):
    """Headless mode: render one frame at a fixed time, save PNG, exit."""
    screenshots_dir = os.path.join(
        os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))),
        "screenshots"
    )
    os.makedirs(screenshots_dir, exist_ok=True)

    presets_to_snap = [preset] if preset != "all" else PRESET_ORDER

    for pkey in presets_to_snap:
        sim = PatternSimulator(pkey, width, height)
        if image is not None:
            sim.set_image(image)

        print(f"  {pkey}: rendering t={elapsed:.2f}s...", end="", flush=True)
        rgb = sim.render_at(elapsed)
        if sim.errors:
            print(f" failed: {sim.last_error}")
            continue

        img = Image.fromarray(rgb)
        path = os.path.join(screenshots_dir, f"gp_{pkey}.png")
        img.save(path)
        img.save(os.path.join(screenshots_dir, "latest.png"))
        print(f" saved: {path}")


def main():
    preset = "donut"
    win_w, win_h = 960, 640
    render_scale = 1.0
    snap_time = None
    image = None

    args = sys.argv[1:]
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--window" and i + 1 < len(args):
            parts = args[i + 1].split("x")
            win_w, win_h = int(parts[0]), int(parts[1])
            i += 2
        elif arg == "--scale" and i + 1 < len(args):
            render_scale = float(args[i + 1])
            i += 2
        elif arg == "--snap" and i + 1 < len(args):
            snap_time = float(args[i + 1])
            i += 2
        elif arg == "--image" and i + 1 < len(args):
            image = args[i + 1]
            i += 2
        elif arg == "--list":
            print("\nAvailable presets:")
            for family in FAMILY_ORDER:
                print(f"\n  [{family}]")
                for key, name, desc in list_presets(family):
                    print(f"    {key:16s} {name:20s} {desc}")
            print()
            return
        elif arg in ("--help", "-h"):
            print(__doc__)
            return
        elif arg in PRESET_ORDER or arg == "all":
            preset = arg
            i += 1
        else:
            print(f"Unknown argument: {arg}")
            print("Use --list to see available presets")
            return

    if snap_time is not None:
        print(f"Headless snap mode: {preset} @ {win_w}x{win_h}, t={snap_time}s")
        snap(preset, win_w, win_h, snap_time, image=image)
        return

    if preset == "all":
        preset = PRESET_ORDER[0]

    print("Starting Generative Patterns Viewer")
    print(f"  Preset: {preset}")
    print(f"  Window: {win_w}x{win_h} (render scale {render_scale})")
    print()

    # pygame is only needed for the interactive window
    from .viewer import PatternViewer

    viewer = PatternViewer(
        width=win_w,
        height=win_h,
        start_preset=preset,
        render_scale=render_scale,
        image=image,
    )
    viewer.run()


if __name__ == "__main__":
    main()
