import argparse
import logging
import sys
import textwrap
from functools import wraps
from pathlib import Path

from . import HierarchicalPath, HierarchicalPathTree, SettingsSnapshot, TreeSettingsError
from .config import SETTING_LOGGING_LEVEL, SETTING_LOGGING_PATH, ToolSettings
from .settings.snapshot import FORMAT_JSON, FORMAT_MSGPACK, FORMAT_TOML, SnapshotEntry

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def needs_snapshot(func):
    """Decorator for commands that read a snapshot file.

    The decorated function will receive (snapshot, settings, output, args).
    The wrapper function takes (settings, output, args) and reads the snapshot named by args.snapshot.
    """
    @wraps(func)
    def wrapper(settings, output, args):
        snapshot = SettingsSnapshot.read_file(Path(args.snapshot), args.format)
        return func(snapshot, settings, output, args)
    return wrapper


def treesettings_main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        prog='treesettings',
        description='Inspect, convert and query hierarchical settings snapshots.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent('''
            Examples:
              treesettings inspect settings.json
              treesettings convert defaults.toml defaults.msgpack
              treesettings lookup settings.json /editor/python --hierarchical
            ''').strip()
    )
    parser.add_argument(
        '--config',
        metavar='PATH',
        help='Path to a TOML configuration file. If not provided, uses the TREESETTINGS_CONFIG environment variable.')
    parser.add_argument(
        '--format',
        choices=[FORMAT_JSON, FORMAT_MSGPACK, FORMAT_TOML],
        help='Snapshot format of the input file. If not provided, it is chosen from the file suffix.')
    parser.add_argument(
        '--log-file',
        metavar='PATH',
        help='Path to log file for operation logging. If not provided, uses logging.path from the configuration file or '
             'no logging.')
    parser.add_argument(
        '--log-level',
        metavar='LEVEL',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        help='Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL). Defaults to INFO when a log file is used.')
    subparsers = parser.add_subparsers(
        dest='command',
        title='Commands',
        description='Available commands for snapshot operations',
        help='Use "treesettings COMMAND --help" for command-specific help',
        required=True
    )

    parser_inspect = subparsers.add_parser(
        'inspect',
        help='Display the records stored in a snapshot',
        description='Prints one line per record: the path, the type tag and the fields of the stored setting.')
    parser_inspect.add_argument(
        'snapshot',
        metavar='SNAPSHOT',
        help='Snapshot file to read')
    parser_inspect.set_defaults(method=_inspect)

    parser_convert = subparsers.add_parser(
        'convert',
        help='Convert a snapshot between formats',
        description='Reads a JSON, msgpack or TOML snapshot and writes it as JSON or msgpack, chosen by the suffix '
                    'of the destination.')
    parser_convert.add_argument(
        'source',
        metavar='SOURCE',
        help='Snapshot file to read')
    parser_convert.add_argument(
        'destination',
        metavar='DEST',
        help='Snapshot file to write')
    parser_convert.set_defaults(method=_convert)

    parser_lookup = subparsers.add_parser(
        'lookup',
        help='Print the fields stored at a path',
        description='Finds the records stored at a path without importing the setting types and prints their fields. '
                    'Exits with status 1 when nothing is found.')
    parser_lookup.add_argument(
        'snapshot',
        metavar='SNAPSHOT',
        help='Snapshot file to read')
    parser_lookup.add_argument(
        'path',
        metavar='PATH',
        help='Hierarchical path to look up, e.g. /editor/python')
    parser_lookup.add_argument(
        '--hierarchical',
        action='store_true',
        help='Fall back to the nearest ancestor path holding a record')
    parser_lookup.add_argument(
        '--type',
        metavar='TAG',
        dest='type_tag',
        help='Only consider records with this type tag')
    parser_lookup.set_defaults(method=_lookup)

    args = parser.parse_args(argv)

    settings = ToolSettings(Path(args.config) if args.config else None)

    # Configure logging from CLI argument if provided, otherwise from the configuration file
    log_file = args.log_file or settings.get(SETTING_LOGGING_PATH)
    if log_file:
        log_level = args.log_level or settings.get(SETTING_LOGGING_LEVEL) or 'INFO'
        logging.basicConfig(
            filename=str(log_file),
            level=getattr(logging, str(log_level).upper()),
            format=LOG_FORMAT
        )

    try:
        return args.method(settings, sys.stdout, args)
    except (TreeSettingsError, ValueError, OSError) as e:
        logging.getLogger(__name__).error(f"{args.command} failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1


@needs_snapshot
def _inspect(snapshot: SettingsSnapshot, settings: ToolSettings, output, args):
    for entry in snapshot.records:
        print(_format_entry(entry), file=output)
    return 0


def _convert(settings: ToolSettings, output, args):
    snapshot = SettingsSnapshot.read_file(Path(args.source), args.format)
    snapshot.write_file(Path(args.destination), indent=settings.snapshot_indent())
    return 0


@needs_snapshot
def _lookup(snapshot: SettingsSnapshot, settings: ToolSettings, output, args):
    tree: HierarchicalPathTree[list[SnapshotEntry]] = HierarchicalPathTree()
    for entry in snapshot.records:
        if args.type_tag is not None and entry.type != args.type_tag:
            continue
        path = HierarchicalPath(entry.path)
        entries = tree.try_get(path)
        if entries is None:
            entries = []
            tree.add(path, entries)
        entries.append(entry)

    path = HierarchicalPath(args.path)
    while path is not None:
        entries = tree.try_get(path)
        if entries:
            for entry in entries:
                print(_format_entry(entry), file=output)
            return 0
        path = path.parent if args.hierarchical else None

    print(f"No record found for {args.path}", file=sys.stderr)
    return 1


def _format_entry(entry: SnapshotEntry) -> str:
    fields = ' '.join(f"{name}={value}" for name, value in sorted(entry.fields.items()))
    return f"{entry.path}\t{entry.type}\t{fields}"


def main():
    sys.exit(treesettings_main())


if __name__ == '__main__':
    main()
