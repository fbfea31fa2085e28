"""
Command Line Interface for resource package generation.
"""

import argparse
import logging
from typing import List, Optional

from .build_config import BuildConfig
from .errors import ConfigurationError, FilesystemError
from .generator import PackageGenerator
from .package_settings import PackageSettings
from .reporter import Reporter
from .sync_progress import SyncProgress

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_NOT_STARTED = 2
EXIT_INTERRUPTED = 130


def setup_logging(verbose: bool) -> logging.Logger:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    logging.getLogger('sh').setLevel(logging.WARNING)
    logging.getLogger('PIL').setLevel(logging.WARNING)

    return logging.getLogger('pkggen')


def get_build_config(args: argparse.Namespace) -> BuildConfig:
    """Get build configuration from environment and CLI overrides."""
    config = BuildConfig.from_env(args.source, args.build)

    if getattr(args, 'compiler', None):
        config.compiler = args.compiler
    if getattr(args, 'timeout', None):
        config.timeout = args.timeout
    if getattr(args, 'jobs', None):
        config.jobs = args.jobs
    config.full = getattr(args, 'clean', False)
    config.force = getattr(args, 'force', False)

    return config


def load_generator(args: argparse.Namespace, logger: logging.Logger) -> PackageGenerator:
    """
    Load settings and build configuration.

    Raises:
        ConfigurationError: If settings or options are invalid
    """
    try:
        config = get_build_config(args)
    except ValueError as e:
        raise ConfigurationError(f"Invalid environment setting: {e}")

    errors = config.validate()
    if errors:
        for error in errors:
            logger.error(error)
        raise ConfigurationError("Build configuration invalid")

    model = PackageSettings(logger).load(config.source_root)
    logger.info(f"Package: {model.name}")
    logger.info(f"Buckets: {', '.join(model.bucket_tokens)}")
    logger.info(f"Images: {len(model.images)}")

    return PackageGenerator(model, config, logger=logger)


def cmd_plan(args: argparse.Namespace) -> int:
    """Execute plan command."""
    logger = setup_logging(args.verbose)

    try:
        model = PackageSettings(logger).load(args.source)
    except ConfigurationError as e:
        logger.error(str(e))
        return EXIT_NOT_STARTED

    Reporter().report_plan(model)
    return EXIT_OK


def cmd_sync(args: argparse.Namespace) -> int:
    """Execute sync command (prune and scale, no packaging)."""
    logger = setup_logging(args.verbose)
    reporter = Reporter()

    try:
        generator = load_generator(args, logger)
        generator.prune()
    except (ConfigurationError, FilesystemError) as e:
        logger.error(str(e))
        reporter.report_not_started(e)
        return EXIT_NOT_STARTED

    progress = SyncProgress(show_files=args.show_files, logger=logger)
    try:
        stats = generator.sync_images(progress)
    except FilesystemError as e:
        logger.error(str(e))
        return EXIT_FAILED
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return EXIT_INTERRUPTED

    if not args.quiet:
        print()
        reporter.report_sync(stats)

    return EXIT_OK if stats.errors == 0 else EXIT_FAILED


def cmd_build(args: argparse.Namespace) -> int:
    """Execute build command (prune, scale, manifest, package)."""
    logger = setup_logging(args.verbose)
    reporter = Reporter()

    try:
        generator = load_generator(args, logger)
    except ConfigurationError as e:
        logger.error(str(e))
        reporter.report_not_started(e)
        return EXIT_NOT_STARTED

    try:
        prune = generator.prune()
    except FilesystemError as e:
        logger.error(str(e))
        reporter.report_not_started(e)
        return EXIT_NOT_STARTED

    progress = SyncProgress(show_files=args.show_files, logger=logger)
    try:
        outcome = generator.package(prune, progress)
    except FilesystemError as e:
        logger.error(str(e))
        reporter.report_aborted(e)
        return EXIT_FAILED
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return EXIT_INTERRUPTED

    if not args.quiet:
        print()
        reporter.report_outcome(outcome)

    return EXIT_OK if outcome.success else EXIT_FAILED


def add_tree_arguments(parser: argparse.ArgumentParser) -> None:
    """Add source/build folder and sync arguments to a parser."""
    parser.add_argument('source', help='Source folder containing package.json')
    parser.add_argument('build', help='Build output folder')
    parser.add_argument('--clean', action='store_true',
                        help='Remove the whole build folder instead of pruning it')
    parser.add_argument('-q', '--quiet', action='store_true', help='Suppress summary output')
    parser.add_argument('--show-files', action='store_true',
                        help='Print each image as processed with result')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog='pkggen',
        description='Multi-resolution resource package generator',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Workflow:
  1. Plan:  python -m pkggen plan assets/ui
  2. Sync:  python -m pkggen sync assets/ui build/ui
  3. Build: python -m pkggen build assets/ui build/ui

Environment:
  PKGGEN_COMPILER, PKGGEN_TIMEOUT and PKGGEN_JOBS set defaults for build.
"""
    )

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    # Plan command
    plan_parser = subparsers.add_parser('plan', help='Show source size used per image and bucket')
    plan_parser.add_argument('source', help='Source folder containing package.json')
    plan_parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')

    # Sync command
    sync_parser = subparsers.add_parser('sync', help='Prune and scale images without packaging')
    add_tree_arguments(sync_parser)

    # Build command
    build_parser = subparsers.add_parser('build', help='Scale images and package every bucket')
    add_tree_arguments(build_parser)
    build_parser.add_argument('--compiler', help='Packaging compiler (default: rcc)')
    build_parser.add_argument('-t', '--timeout', type=float,
                              help='Seconds per packaging job (default: 600)')
    build_parser.add_argument('-j', '--jobs', type=int, help='Parallel packaging jobs')
    build_parser.add_argument('-f', '--force', action='store_true',
                              help='Repackage buckets even if their bundle is up to date')

    return parser


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    if not parsed_args.command:
        parser.print_help()
        return 1

    if parsed_args.command == 'plan':
        return cmd_plan(parsed_args)
    elif parsed_args.command == 'sync':
        return cmd_sync(parsed_args)
    elif parsed_args.command == 'build':
        return cmd_build(parsed_args)

    return 1
