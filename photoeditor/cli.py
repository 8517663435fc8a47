#!/usr/bin/env python3
"""
PhotoEditor Command Line Interface

Applies brightness, contrast, saturation and gamma adjustments to image
files using the same coordinated pipeline an interactive editor uses.
"""

import logging
from pathlib import Path
from typing import Optional

import click

from photoeditor.config import load_config, get_config_value
from photoeditor.io import (
    ImageLoadError, load_image, save_image, create_default_image, find_images
)
from photoeditor.preview import FilterCoordinator
from photoeditor.processing import (
    AdjustmentParameters, PipelineConfig, PixelBuffer, RunState
)
from photoeditor.utils.logging import setup_console_logging

logger = logging.getLogger(__name__)


def adjustment_options(func):
    """Attach the four adjustment options to a command."""
    func = click.option('--gamma', '-g', type=float, default=1.0, show_default=True,
                        help='Gamma exponent (1.0 = unchanged)')(func)
    func = click.option('--saturation', '-s', type=float, default=0.0, show_default=True,
                        help='Saturation amount (-254..254)')(func)
    func = click.option('--contrast', '-k', type=float, default=0.0, show_default=True,
                        help='Contrast amount (-254..254)')(func)
    func = click.option('--brightness', '-b', type=float, default=0.0, show_default=True,
                        help='Brightness offset (-255..255)')(func)
    return func


def _parameters(config: dict, brightness: float, contrast: float, saturation: float,
                gamma: float) -> AdjustmentParameters:
    params = AdjustmentParameters(
        brightness=brightness, contrast=contrast, saturation=saturation, gamma=gamma
    )
    try:
        return params.validated(PipelineConfig.from_dict(config).limits)
    except ValueError as e:
        raise click.BadParameter(str(e))


def run_adjustments(config: dict, buffer: PixelBuffer,
                    params: AdjustmentParameters) -> PixelBuffer:
    """Run one coordinated adjustment and return the delivered buffer."""
    results = []
    with FilterCoordinator(config=PipelineConfig.from_dict(config),
                           on_result=results.append) as coordinator:
        coordinator.set_source(buffer)
        run = coordinator.submit(params)
        coordinator.wait_idle()

    if run.state == RunState.FAILED:
        raise click.ClickException(f"Adjustment failed: {run.error}")
    if not results:
        raise click.ClickException("Adjustment was cancelled before completion")
    return results[0].buffer


@click.group()
@click.option('--config', '-c', type=click.Path(exists=True, dir_okay=False),
              help='Configuration file path')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--quiet', '-q', is_flag=True, help='Suppress non-error output')
@click.pass_context
def main(ctx, config: Optional[str] = None, verbose: bool = False, quiet: bool = False):
    """
    PhotoEditor - brightness, contrast, saturation and gamma adjustments

    Adjustments are applied in a fixed order: brightness, contrast,
    saturation, gamma.
    """
    if ctx.obj is None:
        ctx.obj = {}

    ctx.obj['config'] = load_config(config)

    level = get_config_value(ctx.obj['config'], 'logging.level', 'INFO')
    if verbose:
        level = 'DEBUG'
    elif quiet:
        level = 'ERROR'
    setup_console_logging(level, color=get_config_value(ctx.obj['config'], 'logging.color', True))

    ctx.obj['verbose'] = verbose
    ctx.obj['quiet'] = quiet


@main.command()
@click.argument('input_path', type=click.Path(exists=True, dir_okay=False))
@click.option('--output', '-o', required=True, type=click.Path(dir_okay=False),
              help='Output image path')
@adjustment_options
@click.pass_context
def apply(ctx, input_path: str, output: str, brightness: float, contrast: float,
          saturation: float, gamma: float):
    """
    Adjust a single image.

    INPUT_PATH: Image file to adjust
    """
    config = ctx.obj['config']
    params = _parameters(config, brightness, contrast, saturation, gamma)

    try:
        source = load_image(input_path)
    except ImageLoadError as e:
        raise click.ClickException(str(e))

    result = run_adjustments(config, source, params)
    save_image(result, output, quality=get_config_value(config, 'output.jpeg_quality', 100))

    if not ctx.obj['quiet']:
        click.echo(f"Saved {output} ({result.width}x{result.height})")


@main.command()
@click.argument('directory', type=click.Path(exists=True, file_okay=False, dir_okay=True))
@click.option('--output-dir', '-o', required=True,
              type=click.Path(file_okay=False, dir_okay=True),
              help='Directory for adjusted images')
@click.option('--recursive/--no-recursive', default=False, help='Process subdirectories')
@adjustment_options
@click.pass_context
def batch(ctx, directory: str, output_dir: str, recursive: bool, brightness: float,
          contrast: float, saturation: float, gamma: float):
    """
    Apply the same adjustments to every image in a directory.

    DIRECTORY: Directory containing images
    """
    config = ctx.obj['config']
    quiet = ctx.obj['quiet']
    verbose = ctx.obj['verbose']
    params = _parameters(config, brightness, contrast, saturation, gamma)
    quality = get_config_value(config, 'output.jpeg_quality', 100)

    directory_path = Path(directory)
    output_path = Path(output_dir)
    images = find_images(directory_path, recursive=recursive)

    if not images:
        click.echo("No images found in directory", err=True)
        return

    if not quiet:
        click.echo(f"Found {len(images)} images")

    saved = 0
    failed = 0
    with click.progressbar(images, label="Adjusting images") as bar:
        for image_path in bar:
            try:
                result = run_adjustments(config, load_image(image_path), params)
            except (ImageLoadError, click.ClickException) as e:
                failed += 1
                logger.error(f"Skipping {image_path.name}: {e}")
                continue

            save_image(result, output_path / image_path.relative_to(directory_path),
                       quality=quality)
            saved += 1
            if verbose:
                click.echo(f"  {image_path.name}")

    if not quiet:
        click.echo(f"Adjusted {saved} images, {failed} failed")


@main.command()
@click.option('--output', '-o', required=True, type=click.Path(dir_okay=False),
              help='Output image path')
@click.option('--width', type=click.IntRange(min=1), default=200, show_default=True)
@click.option('--height', type=click.IntRange(min=1), default=100, show_default=True)
@adjustment_options
@click.pass_context
def demo(ctx, output: str, width: int, height: int, brightness: float,
         contrast: float, saturation: float, gamma: float):
    """Adjust the built-in gradient test image."""
    config = ctx.obj['config']
    params = _parameters(config, brightness, contrast, saturation, gamma)

    result = run_adjustments(config, create_default_image(width, height), params)
    save_image(result, output, quality=get_config_value(config, 'output.jpeg_quality', 100))

    if not ctx.obj['quiet']:
        click.echo(f"Saved {output} ({width}x{height})")


if __name__ == '__main__':
    main()
