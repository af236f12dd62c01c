"""Command-line entry point.

Renders one of the preset scenes and writes it as PPM (to a file or to
standard output) or PNG, picking the format from the output extension.

Usage:
    pathtracer [options]
    python -m pathtracer [options]

Options:
    --scene NAME         Preset scene: random, two-spheres or showcase (default: random)
    --width WIDTH        Image width in pixels (default: 1200)
    --aspect-ratio R     Width / height (default: 16/9)
    --samples SAMPLES    Samples per pixel (default: 500)
    --max-depth DEPTH    Maximum bounces per path (default: 50)
    --seed SEED          Seed for scene layout and sampling (default: 0)
    --threads N          CPU threads (default: all cores)
    --output OUTPUT      Output path, or - for standard output (default: -)
    --quiet              Suppress progress output

Example:
    pathtracer --scene showcase --width 400 --samples 50 --output showcase.png
"""

from __future__ import annotations

import argparse
import sys
import time
from collections.abc import Sequence
from pathlib import Path

from pathtracer.config import RenderSettings, TaichiSettings, init_taichi

SCENE_NAMES = ("random", "two-spheres", "showcase")


def _aspect_ratio(text: str) -> float:
    """Parse an aspect ratio written as a number or as W/H (e.g. 16/9)."""
    try:
        if "/" in text:
            numerator, denominator = text.split("/", 1)
            return float(numerator) / float(denominator)
        return float(text)
    except (ValueError, ZeroDivisionError) as e:
        raise argparse.ArgumentTypeError(f"invalid aspect ratio: {text!r}") from e


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line argument parser."""
    defaults = RenderSettings()
    parser = argparse.ArgumentParser(
        prog="pathtracer",
        description="Render a scene of spheres with a Monte Carlo path tracer.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--scene",
        choices=SCENE_NAMES,
        default="random",
        help="Preset scene to render (default: random)",
    )
    parser.add_argument(
        "--width",
        type=int,
        default=defaults.image_width,
        help=f"Image width in pixels (default: {defaults.image_width})",
    )
    parser.add_argument(
        "--aspect-ratio",
        type=_aspect_ratio,
        default=defaults.aspect_ratio,
        help="Image width divided by height, as a number or W/H (default: 16/9)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=defaults.samples_per_pixel,
        help=f"Number of samples per pixel (default: {defaults.samples_per_pixel})",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=defaults.max_depth,
        help=f"Maximum bounces per path (default: {defaults.max_depth})",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Seed for the scene layout and the sampler (default: 0)",
    )
    parser.add_argument(
        "--threads",
        type=int,
        default=None,
        help="Number of CPU threads (default: all cores)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="-",
        help="Output path; .png writes PNG, anything else PPM, - writes PPM "
        "to standard output (default: -)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    return build_parser().parse_args(argv)


def settings_from_args(args: argparse.Namespace) -> tuple[RenderSettings, TaichiSettings]:
    """Build validated settings from parsed arguments.

    Raises:
        ValueError: If any setting is out of range.
    """
    render_settings = RenderSettings(
        image_width=args.width,
        aspect_ratio=args.aspect_ratio,
        samples_per_pixel=args.samples,
        max_depth=args.max_depth,
    )
    taichi_settings = TaichiSettings(random_seed=args.seed, num_threads=args.threads)
    return render_settings, taichi_settings


def _log(message: str, quiet: bool) -> None:
    if not quiet:
        print(message, file=sys.stderr, flush=True)


def render_scene(
    scene: str,
    settings: RenderSettings,
    output_path: str = "-",
    seed: int | None = 0,
    quiet: bool = False,
) -> str:
    """Render a preset scene and write it out.

    Taichi must already be initialized.

    Args:
        scene: Preset scene name (one of SCENE_NAMES).
        settings: Image and sampling parameters.
        output_path: Output file path, or "-" for PPM on standard output.
        seed: Seed for the scene layout.
        quiet: If True, suppress progress output.

    Returns:
        The output path.
    """
    # Lazy imports: these modules declare Taichi fields
    from pathtracer.camera.thin_lens import setup_camera
    from pathtracer.core.renderer import Renderer
    from pathtracer.output.export import save_image
    from pathtracer.scene.presets import create_scene

    world, camera = create_scene(scene, seed=seed, aspect_ratio=settings.aspect_ratio)
    setup_camera(camera)

    renderer = Renderer.from_settings(settings)
    _log(
        f"Rendering {scene} scene ({world.get_sphere_count()} spheres) at "
        f"{renderer.width}x{renderer.height}, {renderer.samples_per_pixel} samples per pixel",
        quiet,
    )

    start_time = time.time()
    renderer.render(callback=lambda remaining: _log(f"Scanlines remaining: {remaining}", quiet))
    _log("Done.", quiet)

    save_image(renderer.get_image_uint8(), output_path)

    if output_path != "-":
        _log(f"Saved to: {Path(output_path).absolute()}", quiet)
    _log(f"Total time: {time.time() - start_time:.2f}s", quiet)

    return output_path


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    try:
        render_settings, taichi_settings = settings_from_args(args)
        init_taichi(taichi_settings)
        render_scene(
            args.scene,
            render_settings,
            output_path=args.output,
            seed=args.seed,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
