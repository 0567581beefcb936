"""
CLI entry point for pagegen.

Usage:
    pagegen run                        Render all configured tables
    pagegen run --only CropsTemplate.txt
    pagegen fields <struct file>       Show the fields a struct definition declares
    pagegen tables                     List configured tables
    pagegen init-config [path]         Write a starter pagegen.yaml
"""

import argparse
import logging
import sys
from pathlib import Path

from . import __version__


def configure_logging(verbose: bool = False, quiet: bool = False) -> None:
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%H:%M:%S'
    )


def _load_config(args):
    from .config import GeneratorConfig, ConfigError

    try:
        return GeneratorConfig(Path(args.config) if args.config else None)
    except ConfigError as e:
        print(f"Config error: {e}", file=sys.stderr)
        return None


def cmd_run(args):
    """Render the configured tables."""
    from .assets import JsonExportProvider, AssetProviderError
    from .config import ConfigError
    from .generator import PageGenerator, build_localization

    config = _load_config(args)
    if config is None:
        return 1
    if args.overwrite is not None:
        config.overwrite = args.overwrite

    try:
        tables = config.select_tables(args.only)
    except ConfigError as e:
        print(f"Config error: {e}", file=sys.stderr)
        return 1

    try:
        provider = JsonExportProvider(config.export_root)
    except AssetProviderError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    localization = build_localization(provider, config.language_table)
    generator = PageGenerator.from_config(config, provider, localization)
    report = generator.process_all(tables)

    print(report.summary())
    return 0


def cmd_fields(args):
    """Show the fields a struct definition declares."""
    from .schema import parse_struct_definition
    from .extract import field_kind

    path = Path(args.file)
    if not path.is_file():
        print(f"Not found: {path}", file=sys.stderr)
        return 1

    fields = parse_struct_definition(path)
    for f in fields:
        print(f"  {f.template_key:<32} {f.declared_type:<24} {field_kind(f.declared_type).name}")
    print(f"\n{len(fields)} fields")
    return 0


def cmd_tables(args):
    """List configured tables."""
    config = _load_config(args)
    if config is None:
        return 1

    for t in config.tables:
        extra = f" [{t.postprocess}]" if t.postprocess else ""
        print(f"  {t.template_name:<32} {t.mode:<10} {t.table_path}{extra}")
    return 0


def cmd_init_config(args):
    """Write a starter configuration file."""
    from .config import write_default_config

    path = Path(args.path)
    if path.exists() and not args.force:
        print(f"{path} already exists (use --force to replace it)", file=sys.stderr)
        return 1

    written = write_default_config(path)
    print(f"Wrote {written}")
    return 0


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="pagegen",
        description="Wiki page generator for game DataTables",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    pagegen init-config
    pagegen run
    pagegen run --only BuildingsOverviewTemplate.txt --no-overwrite
    pagegen fields StructDefinitions/FCropMasterSyncData.txt
"""
    )
    parser.add_argument('--version', action='version', version=f'pagegen {__version__}')
    parser.add_argument('-c', '--config', help='Config file (default: ./pagegen.yaml, ~/.pagegen/config.yaml)')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')
    parser.add_argument('-q', '--quiet', action='store_true', help='Warnings and errors only')

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # run
    run_p = subparsers.add_parser('run', help='Render configured tables')
    run_p.add_argument('--only', nargs='+', metavar='TEMPLATE', help='Only these templates')
    run_p.add_argument('--overwrite', dest='overwrite', action='store_true', default=None,
                       help='Replace existing pages')
    run_p.add_argument('--no-overwrite', dest='overwrite', action='store_false',
                       help='Keep existing pages')
    run_p.set_defaults(func=cmd_run)

    # fields
    fields_p = subparsers.add_parser('fields', help='Show struct definition fields')
    fields_p.add_argument('file', help='Struct definition file')
    fields_p.set_defaults(func=cmd_fields)

    # tables
    tables_p = subparsers.add_parser('tables', help='List configured tables')
    tables_p.set_defaults(func=cmd_tables)

    # init-config
    init_p = subparsers.add_parser('init-config', help='Write a starter config file')
    init_p.add_argument('path', nargs='?', default='pagegen.yaml', help='Where to write it')
    init_p.add_argument('-f', '--force', action='store_true', help='Replace an existing file')
    init_p.set_defaults(func=cmd_init_config)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    configure_logging(args.verbose, args.quiet)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
