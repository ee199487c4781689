"""
Playlist Probe CLI - extract a YouTube playlist into spreadsheets and documents
"""
import argparse
import os
import sys

from playlist_probe.errors import PlaylistProbeError
from playlist_probe.extractor.pipeline import PlaylistPipeline
from playlist_probe.extractor.urls import normalize_playlist_input
from playlist_probe.render.exporter import export_format, style_from_config
from playlist_probe.utils.config import EXPORT_FORMATS, apply_env_overrides, load_config
from playlist_probe.utils.logger import logger


def _log_progress(event):
    logger.info(f"[{event.fraction_complete:3d}%] {event.message}")


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Playlist Probe: export YouTube playlist data as evidence documents"
    )

    parser.add_argument(
        "--url",
        type=str,
        required=True,
        help="YouTube playlist URL or playlist id"
    )
    parser.add_argument(
        "--api-key",
        type=str,
        default=None,
        help="YouTube Data API key (default: from config / PLAYLIST_PROBE_API_KEY)"
    )
    parser.add_argument(
        "--screenshot-token",
        type=str,
        default=None,
        help="Screenshot service token (default: from config)"
    )
    parser.add_argument(
        "--output_dir",
        type=str,
        default=None,
        help="Output directory (default: export_dir from config)"
    )
    parser.add_argument(
        "--format",
        type=str,
        choices=list(EXPORT_FORMATS) + ["all"],
        default=None,
        help="Export format (default: export_formats from config)"
    )
    parser.add_argument(
        "--browser",
        action="store_true",
        help="Render pages with a headless browser instead of plain HTTP"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show debug logs"
    )

    args = parser.parse_args(argv)

    if args.verbose:
        logger.setLevel("DEBUG")

    cfg = apply_env_overrides(load_config())
    if args.api_key is not None:
        cfg.youtube_api_key = args.api_key.strip()
    if args.screenshot_token is not None:
        cfg.screenshot_token = args.screenshot_token.strip()
    if args.browser:
        cfg.page_render_mode = "browser"

    output_dir = args.output_dir or cfg.export_dir
    if args.format == "all":
        formats = list(EXPORT_FORMATS)
    elif args.format:
        formats = [args.format]
    else:
        formats = list(cfg.export_formats)

    logger.info("Starting Playlist Probe...")
    logger.info(f"Target: {args.url}")
    logger.info(f"Output directory: {output_dir}")

    if not os.path.exists(output_dir):
        try:
            os.makedirs(output_dir)
            logger.info(f"Created directory: {output_dir}")
        except OSError as e:
            logger.error(f"Failed to create directory {output_dir}: {e}")
            sys.exit(1)

    try:
        playlist_id = normalize_playlist_input(args.url)
        pipeline = PlaylistPipeline(cfg)
        run = pipeline.extract(playlist_id, _log_progress)
    except KeyboardInterrupt:
        logger.info("\nExtraction interrupted by user")
        sys.exit(130)
    except PlaylistProbeError as e:
        logger.error(e.user_message)
        sys.exit(1)

    summary = run.summary()
    print(f"Playlist: {run.playlist_id} ({run.mode.value} source)")
    print(f"Videos: {summary['videos']}  Images: {summary['images']}")
    print(f"Total duration: {run.total_duration_display}")
    for warning in run.warnings:
        print(f"Warning: {warning}")
    if run.used_fallback_data:
        print("Warning: some records contain demo data, not values extracted from YouTube.")

    style = style_from_config(cfg)
    written = set()
    for fmt in formats:
        artifact = export_format(run, fmt, style=style)
        path = os.path.join(output_dir, artifact.filename)
        if path in written:
            # docx degraded to html, already written
            continue
        with open(path, "wb") as f:
            f.write(artifact.data)
        written.add(path)
        logger.info(f"Wrote {path}")
        print(f"Saved: {path}")


if __name__ == "__main__":
    main()
