"""Command-line interface for arcadedex."""

import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

from rich.console import Console

from arcadedex import __version__
from arcadedex.config.loader import (
    ConfigError,
    apply_cli_overrides,
    get_config_value,
    get_export_path,
    load_config,
)
from arcadedex.config.validator import ValidationError, validate_config
from arcadedex.data_types import SourceType, parse_sources
from arcadedex.errors import ArcadeDexError
from arcadedex.ui.console_progress import SourceProgressDisplay, render_errors, render_summary

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_CONFIG_ERROR = 1
EXIT_PARTIAL_FAILURE = 2


def create_parser() -> argparse.ArgumentParser:
    """Create and configure argument parser."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        '--config',
        type=Path,
        metavar='PATH',
        help='Path to arcadedex.yaml (default: ./arcadedex.yaml)'
    )
    common.add_argument(
        '--workspace',
        type=Path,
        metavar='PATH',
        help='Workspace folder for downloads and extracted files. Overrides config.'
    )
    common.add_argument(
        '--sources',
        nargs='+',
        metavar='SOURCE',
        help=f"Sources to process ({', '.join(s.value for s in SourceType)}). Overrides config."
    )
    common.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Logging level. Overrides config.'
    )

    parser = argparse.ArgumentParser(
        prog='arcadedex',
        description='MAME metadata downloader, reader and exporter',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Download and unpack every source into ./playground
  arcadedex download --workspace ./playground
  arcadedex unpack --workspace ./playground

  # Read only the catalog and categories
  arcadedex read --sources mame catver

  # Export to CSV and SQLite
  arcadedex export --format csv sqlite --output ./export
        """
    )
    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    subparsers = parser.add_subparsers(dest='command', metavar='COMMAND')
    subparsers.required = True

    subparsers.add_parser('download', parents=[common], help='Download source archives')
    subparsers.add_parser('unpack', parents=[common], help='Unpack downloaded archives')
    subparsers.add_parser('read', parents=[common], help='Read and reconcile data files')

    export_parser = subparsers.add_parser(
        'export', parents=[common], help='Read, filter and export machines'
    )
    export_parser.add_argument(
        '--format',
        dest='formats',
        nargs='+',
        choices=['json', 'csv', 'sqlite'],
        help='Export formats. Overrides config.'
    )
    export_parser.add_argument(
        '--output',
        type=Path,
        metavar='PATH',
        help='Export folder (default: <workspace>/export). Overrides config.'
    )

    return parser


def _setup_logging(config: dict) -> None:
    """
    Setup logging configuration from config.

    Args:
        config: Configuration dictionary
    """
    logging_config = config.get('logging', {})

    level_str = logging_config.get('level', 'INFO').upper()
    level = getattr(logging, level_str, logging.INFO)

    handlers = []

    if logging_config.get('console', True):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
        handlers.append(console_handler)

    log_file = logging_config.get('file')
    if log_file:
        try:
            log_path = Path(log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)

            file_handler = logging.FileHandler(log_file)
            file_handler.setLevel(level)
            file_handler.setFormatter(
                logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
            )
            handlers.append(file_handler)
        except OSError as e:
            print(f"Error: Could not create log file '{log_file}': {e}", file=sys.stderr)
            sys.exit(EXIT_CONFIG_ERROR)

    if not handlers:
        handlers.append(logging.NullHandler())

    logging.basicConfig(
        level=level,
        handlers=handlers,
        force=True  # Override any existing configuration
    )

    # httpx logs every request at INFO/DEBUG
    logging.getLogger('httpx').setLevel(logging.WARNING)
    logging.getLogger('httpcore').setLevel(logging.WARNING)


def _report_outcomes(console: Console, outcomes: Dict[SourceType, object]) -> int:
    errors = {
        source: str(outcome) for source, outcome in outcomes.items()
        if isinstance(outcome, ArcadeDexError)
    }
    for source, outcome in outcomes.items():
        if source not in errors:
            console.print(f"[bright_green]{source.value}[/]: {outcome}")
    render_errors(console, errors)
    return EXIT_PARTIAL_FAILURE if errors else EXIT_OK


def run_download(config: dict, sources: List[SourceType], console: Console) -> int:
    from arcadedex.fetch.downloader import download_files

    with SourceProgressDisplay(sources, console) as display:
        outcomes = download_files(
            config['workspace'], display, sources,
            timeout=get_config_value(config, 'download.timeout', 60)
        )
    return _report_outcomes(console, outcomes)


def run_unpack(config: dict, sources: List[SourceType], console: Console) -> int:
    from arcadedex.fetch.unpacker import unpack_files

    with SourceProgressDisplay(sources, console) as display:
        outcomes = unpack_files(config['workspace'], display, sources)
    return _report_outcomes(console, outcomes)


def _read(config: dict, sources: List[SourceType], console: Console):
    from arcadedex.workflow.orchestrator import read_files

    with SourceProgressDisplay(sources, console) as display:
        result = read_files(config['workspace'], display, sources)

    render_errors(console, {e.source: e.message for e in result.errors})
    return result


def run_read(config: dict, sources: List[SourceType], console: Console) -> int:
    from arcadedex.models.collections import (
        get_categories_list,
        get_manufacturers_list,
        get_series_list,
    )

    result = _read(config, sources, console)
    machines = result.machines

    render_summary(console, {
        'Machines': len(machines),
        'Games': sum(1 for m in machines.values() if m.is_game()),
        'Manufacturers': len(get_manufacturers_list(machines)),
        'Series': len(get_series_list(machines)),
        'Categories': len(get_categories_list(machines)),
        'Failed sources': len(result.errors),
    })
    return EXIT_OK if result.ok else EXIT_PARTIAL_FAILURE


def run_export(config: dict, sources: List[SourceType], console: Console) -> int:
    from arcadedex.filters import (
        MachineFilter,
        remove_machines_by_category,
        remove_machines_by_filter,
    )
    from arcadedex.writers import export

    result = _read(config, sources, console)
    machines = result.machines

    if not machines:
        console.print("[red]No machines read, nothing to export[/]")
        return EXIT_PARTIAL_FAILURE

    remove = get_config_value(config, 'filters.remove', [])
    if remove:
        machines = remove_machines_by_filter(machines, [MachineFilter(f) for f in remove])

    categories = get_config_value(config, 'filters.categories', [])
    if categories and machines:
        machines = remove_machines_by_category(machines, categories)

    output = get_export_path(config)
    failed = False
    for fmt in get_config_value(config, 'export.formats', ['json']):
        try:
            location = export(fmt, machines, output / fmt)
            console.print(f"[bright_green]{fmt}[/]: {location}")
        except ArcadeDexError as e:
            logger.error(f"Export to {fmt} failed: {e}")
            console.print(f"[red]{fmt}[/]: {e}")
            failed = True

    return EXIT_PARTIAL_FAILURE if failed or not result.ok else EXIT_OK


COMMANDS = {
    'download': run_download,
    'unpack': run_unpack,
    'read': run_read,
    'export': run_export,
}


def main(argv: Optional[list] = None) -> int:
    """
    Main entry point for arcadedex CLI.

    Args:
        argv: Command-line arguments (default: sys.argv)

    Returns:
        Exit code (0 for success, 1 for configuration errors, 2 when some
        sources failed)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
        apply_cli_overrides(config, args)
        validate_config(config)
        sources = parse_sources(config['sources'])
    except (ConfigError, ValidationError, ValueError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    _setup_logging(config)

    console = Console(stderr=True)
    try:
        return COMMANDS[args.command](config, sources, console)
    except KeyboardInterrupt:
        print("\n\nInterrupted by user.", file=sys.stderr)
        return 130


if __name__ == '__main__':
    sys.exit(main())
