"""Batch optimization pipeline for catalog product images.

Sequence: ensure output dirs → load tracker → list source images →
for each image optimize (if untracked) then thumbnail → save tracker.

Entry point: python -m catalog_images
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional

from catalog_images.config import Settings, get_settings
from catalog_images.converter import create_thumbnail, optimize_image
from catalog_images.models import RunSummary
from catalog_images.tracker import load_tracker, save_tracker

logger = logging.getLogger(__name__)


def is_source_image(name: str, settings: Settings) -> bool:
    """Check whether a directory entry name qualifies as a source image."""
    if name.startswith("."):
        return False
    if settings.is_output_format(name):
        return False
    if name.endswith(settings.tracker_filename):
        return False
    extension = name.rsplit(".", 1)[-1].lower() if "." in name else ""
    return extension in settings.source_extensions


def list_source_images(settings: Settings) -> list[str]:
    """Return filenames of candidate source images in image_dir.

    Only regular files directly inside image_dir are considered; the
    output subdirectories are never descended into.

    Raises:
        OSError: If the source directory cannot be listed.
    """
    return sorted(
        entry.name
        for entry in settings.image_path.iterdir()
        if entry.is_file() and is_source_image(entry.name, settings)
    )


def run_optimization(
    settings: Optional[Settings] = None,
    dry_run: bool = False,
) -> RunSummary:
    """Run one pass over the source directory.

    Per-image failures are logged and collected in the summary. Failures
    outside a single image (creating output directories, listing the
    source directory, writing the tracker) propagate.

    Args:
        settings: Pipeline settings (defaults to get_settings()).
        dry_run: If True, report what would be done without writing files.

    Returns:
        RunSummary with counts and failed conversions.
    """
    settings = settings or get_settings()
    summary = RunSummary(dry_run=dry_run)

    logger.info("=== Starting image optimization at %s ===", summary.started_at)
    logger.info("Image directory: %s", settings.image_path)
    logger.info("Optimized directory: %s", settings.optimized_dir)
    logger.info("Thumbnail directory: %s", settings.thumbnail_dir)

    if not dry_run:
        settings.optimized_dir.mkdir(parents=True, exist_ok=True)
        settings.thumbnail_dir.mkdir(parents=True, exist_ok=True)

    tracked = load_tracker(settings.tracker_path)
    logger.info("Tracker currently has %d entries.", len(tracked))

    image_files = list_source_images(settings)
    summary.candidates = len(image_files)
    logger.info("Found %d image files to process.", len(image_files))

    for filename in image_files:
        full_path = settings.image_path / filename

        if filename not in tracked:
            summary.processed += 1
            if dry_run:
                logger.info("Would optimize: %s", filename)
            else:
                result = optimize_image(full_path, filename, tracked, settings)
                if result.status == "converted":
                    tracked.add(filename)
                    summary.optimized += 1
                elif result.status == "failed":
                    summary.failures.append(result)

        # Thumbnails are regenerated every run
        if dry_run:
            logger.info("Would create thumbnail: %s", filename)
            continue
        thumb = create_thumbnail(full_path, filename, settings)
        if thumb.ok:
            summary.thumbnails += 1
        else:
            summary.failures.append(thumb)

    if not dry_run:
        save_tracker(settings.tracker_path, tracked)
    summary.tracker_size = len(tracked)

    logger.info(
        "=== Optimization complete. Processed %d new images. "
        "Tracker now has %d entries. ===",
        summary.processed,
        summary.tracker_size,
    )
    return summary


def main(argv: Optional[list[str]] = None) -> int:
    """CLI entry point for the image pipeline."""
    parser = argparse.ArgumentParser(
        description="Optimize, watermark and thumbnail catalog product images",
    )
    parser.add_argument("--image-dir", help="Source image directory (overrides config)")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be processed without writing files",
    )
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING or ERROR")
    args = parser.parse_args(argv)

    overrides = {}
    if args.image_dir:
        overrides["image_dir"] = args.image_dir
    if args.log_level:
        overrides["log_level"] = args.log_level
    settings = get_settings(**overrides)

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )

    try:
        summary = run_optimization(settings, dry_run=args.dry_run)
    except Exception as e:
        logger.exception("Image optimization failed: %s", e)
        return 1

    prefix = "Would process" if summary.dry_run else "Processed"
    print(f"\n{prefix} {summary.processed} new images, {summary.thumbnails} thumbnails")
    print(f"  Tracker entries: {summary.tracker_size}")
    if summary.failures:
        print(f"\nFailures ({len(summary.failures)}):")
        for failure in summary.failures:
            print(f"  - {failure.filename} [{failure.kind}]: {failure.error}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
