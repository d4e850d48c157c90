"""
Command Line Interface for focal-point crop derivation and upload.
"""

import argparse
import logging
import os
from typing import List, Optional

from .config import PipelineConfig, RepositoryConfig
from .crop_set import CropSetBuilder
from .errors import FocalCropError
from .pipeline import CropPipeline
from .rasterizer import Rasterizer
from .source_image import FocalPoint, SourceImage
from .upload_progress import UploadProgress
from .viewport import parse_viewport_specs


def setup_logging(verbose: bool) -> logging.Logger:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    logging.getLogger('httpx').setLevel(logging.WARNING)
    logging.getLogger('httpcore').setLevel(logging.WARNING)
    logging.getLogger('PIL').setLevel(logging.WARNING)

    return logging.getLogger('focalcrop')


def get_repository_config(args: argparse.Namespace) -> RepositoryConfig:
    """Get repository configuration from environment and CLI overrides."""
    config = RepositoryConfig.from_env()

    if getattr(args, 'graphql_endpoint', None):
        config.graphql_endpoint = args.graphql_endpoint
    if getattr(args, 'context_id', None):
        config.context_id = args.context_id
    if getattr(args, 'client_id', None):
        config.client_id = args.client_id
    if getattr(args, 'client_secret', None):
        config.client_secret = args.client_secret
    if getattr(args, 'token_url', None):
        config.token_url = args.token_url
    if getattr(args, 'no_verify_ssl', False):
        config.verify_ssl = False

    return config


def load_inputs(args: argparse.Namespace, logger: logging.Logger):
    """Load source image, focal point and viewports; None on invalid input."""
    try:
        source = SourceImage.from_path(args.image)
        focal_point = FocalPoint.parse(args.focal)
        viewports = parse_viewport_specs(args.viewport or [])
    except FileNotFoundError:
        logger.error(f"Image not found: {args.image}")
        return None
    except (OSError, FocalCropError) as e:
        logger.error(f"Invalid input: {e}")
        return None

    if not viewports:
        logger.error("At least one --viewport is required")
        return None

    return source, focal_point, viewports


def add_crop_arguments(parser: argparse.ArgumentParser) -> None:
    """Add source image and viewport arguments to a parser."""
    parser.add_argument('-i', '--image', required=True, help='Source image file')
    parser.add_argument('--focal', default='0.5,0.5',
                        help='Focal point as x,y in [0,1] (default: 0.5,0.5)')
    parser.add_argument('--viewport', action='append', metavar='LABEL=WxH',
                        help='Viewport spec, repeatable (e.g., Mobile=375x667)')


def add_repository_arguments(parser: argparse.ArgumentParser) -> None:
    """Add repository configuration arguments to a parser."""
    repo_group = parser.add_argument_group('Repository')
    repo_group.add_argument('--graphql-endpoint', help='Override FOCALCROP_GRAPHQL_ENDPOINT')
    repo_group.add_argument('--context-id', help='Override FOCALCROP_CONTEXT_ID')
    repo_group.add_argument('--client-id', help='Override FOCALCROP_CLIENT_ID')
    repo_group.add_argument('--client-secret', help='Override FOCALCROP_CLIENT_SECRET')
    repo_group.add_argument('--token-url', help='Override FOCALCROP_TOKEN_URL')
    repo_group.add_argument('--no-verify-ssl', action='store_true', help='Skip TLS verification')


def cmd_crop(args: argparse.Namespace) -> int:
    """Execute crop command (offline)."""
    logger = setup_logging(args.verbose)

    inputs = load_inputs(args, logger)
    if inputs is None:
        return 1
    source, focal_point, viewports = inputs

    logger.info(f"Source: {args.image} ({source.width}x{source.height})")
    logger.info(f"Focal point: {focal_point.x:.3f},{focal_point.y:.3f}")

    try:
        rasterizer = Rasterizer(logger=logger)
        crop_set = CropSetBuilder(rasterizer, logger=logger).build(source, focal_point, viewports)

        os.makedirs(args.output_dir, exist_ok=True)
        stem = os.path.splitext(os.path.basename(args.image))[0]

        for asset in crop_set:
            data, _, extension = rasterizer.encode(asset.to_image(), source.mime_type)
            out_path = os.path.join(args.output_dir, f"{stem}_{asset.viewport.dimensions}.{extension}")
            with open(out_path, 'wb') as f:
                f.write(data)
            if not args.quiet:
                print(f"  {asset.viewport_label}: {out_path} ({len(data):,} bytes)")

        if not args.quiet:
            print(f"Fingerprint: {crop_set.fingerprint}")

        return 0

    except Exception as e:
        logger.exception(f"Crop failed: {e}")
        return 1


def cmd_upload(args: argparse.Namespace) -> int:
    """Execute upload command (crop + distribute)."""
    logger = setup_logging(args.verbose)

    inputs = load_inputs(args, logger)
    if inputs is None:
        return 1
    source, focal_point, viewports = inputs

    config = PipelineConfig(
        repository=get_repository_config(args),
        destination_base_path=args.destination,
        viewports=viewports,
        provision=not args.no_provision,
    )
    errors = config.validate()
    if errors:
        for error in errors:
            logger.error(error)
        return 1

    logger.info(f"Destination: {config.destination_base_path}")
    logger.info(f"Endpoint: {config.repository.graphql_endpoint}")

    try:
        progress = None if args.quiet else UploadProgress(show_files=args.show_files, logger=logger)
        with CropPipeline(config, logger=logger) as pipeline:
            run = pipeline.run(source, focal_point, force=True, progress=progress)

        if not args.quiet:
            print()
            for result in run.results:
                status = 'OK' if result.success else 'FAILED'
                detail = result.item_id if result.success else result.error
                print(f"  [{status}] {result.label} {result.path} {detail or ''}")
            print(f"Uploaded: {len(run.succeeded)}")
            print(f"Errors: {len(run.failed)}")

        return 0 if not run.failed else 1

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except FocalCropError as e:
        logger.error(f"Upload aborted: {e}")
        return 1
    except Exception as e:
        logger.exception(f"Upload failed: {e}")
        return 1


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog='focalcrop',
        description='Focal-point crop derivation and repository upload',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Crop locally:  python -m focalcrop crop -i hero.jpg --focal 0.3,0.4 \\
                   --viewport Mobile=375x667 --viewport Tablet=768x1024 -o out/
  Upload:        python -m focalcrop upload -i hero.jpg --focal 0.3,0.4 \\
                   --viewport Mobile=375x667 \\
                   --destination "/sitecore/media library/Project/hero"

Repository settings are read from FOCALCROP_* environment variables.
"""
    )

    parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    # Crop command
    crop_parser = subparsers.add_parser('crop', help='Derive crops and write them locally')
    add_crop_arguments(crop_parser)
    crop_parser.add_argument('-o', '--output-dir', default='crops', help='Output directory')
    crop_parser.add_argument('-q', '--quiet', action='store_true', help='Suppress output')
    crop_parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')

    # Upload command
    upload_parser = subparsers.add_parser('upload', help='Derive crops and upload them')
    add_crop_arguments(upload_parser)
    upload_parser.add_argument('-d', '--destination', required=True,
                               help='Destination base item path (dimensions are appended)')
    upload_parser.add_argument('--no-provision', action='store_true',
                               help='Skip folder provisioning (folder already exists)')
    upload_parser.add_argument('-q', '--quiet', action='store_true', help='Suppress progress output')
    upload_parser.add_argument('--show-files', action='store_true',
                               help='Print each asset as it is uploaded')
    upload_parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')
    add_repository_arguments(upload_parser)

    return parser


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    if not parsed_args.command:
        parser.print_help()
        return 1

    if parsed_args.command == 'crop':
        return cmd_crop(parsed_args)
    elif parsed_args.command == 'upload':
        return cmd_upload(parsed_args)

    return 1

