"""Command line interface: backup and restore dokku apps and databases."""
import sys
import argparse

from dokkuMigrate.logger import logger, setupLogging, printHeader, printLine
from dokkuMigrate.config.config import ConfigHelper, getConfigPath, writeDefaultConfig
from dokkuMigrate.backup.worker import BackupWorker, ACTIONS
from dokkuMigrate.definitions.backupResult import BatchResult
from dokkuMigrate.definitions.errors import DokkuMigrateError, UsageError

EXIT_OK      = 0
EXIT_FATAL   = 1
EXIT_USAGE   = 2
EXIT_PARTIAL = 3

USAGE = """
  dokku-migrate backup <servername> [appname]
         Backup all apps (or a single app if provided) from the specified server.
  dokku-migrate restore <servername> [appname]
         Restore all apps (or a single app if provided) to the specified server.
  dokku-migrate list <servername>
         List apps on the specified remote server.
  dokku-migrate backup-db <dbtype> <servername> <dbname>
         Backup a database (dbtype: postgres or mongo) from the specified server.
  dokku-migrate restore-db <dbtype> <servername> <dbname>
         Restore a database (dbtype: postgres or mongo) to the specified server.
  dokku-migrate init
         Create a default configuration file.
"""

def buildParser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='dokku-migrate',
        description='Backup and restore dokku apps and databases over ssh.',
        epilog=USAGE,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument('--config', default=None, help='Path to config.json (default: ~/.dokku-migrate/config.json).')
    parser.add_argument('-v', '--verbose', action='count', default=0, help='Increase log verbosity.')
    parser.add_argument('action', choices=(*ACTIONS, 'init'), help='Action to run.')
    parser.add_argument('args', nargs='*', help='Action arguments.')
    return parser

def reportResult(result: BatchResult) -> int:
    if result.output is not None:
        sys.stdout.write(result.output)

    if not result.entities:
        return EXIT_OK

    printLine()
    for entity in result.entities:
        if entity.ok:
            logger.info(f"  [x] {entity.entity}")
        else:
            logger.info(f"  [ ] {entity.entity}: {entity.error}")
    logger.info(f"{result.action} on {result.server}: {len(result.succeeded)} succeeded, {len(result.failed)} failed")

    if result.ok:
        return EXIT_OK
    return EXIT_FATAL if len(result.entities) == 1 else EXIT_PARTIAL

def main(argv: list[str]|None = None) -> int:
    args = buildParser().parse_args(argv)
    setupLogging(args.verbose)

    if args.action == 'init':
        configPath = getConfigPath(args.config)
        if writeDefaultConfig(configPath):
            print(f"Default config created. Edit {configPath} to customize your servers and backup_directory.")
        else:
            print(f"Configuration file {configPath} already exists.")
        return EXIT_OK

    try:
        configHelper = ConfigHelper(args.config)
        logger.debug(f"Using configuration {configHelper.getPath()}")
        printHeader()
        logger.info(f"dokku-migrate {args.action} {' '.join(args.args)}")
        printHeader()
        result = BackupWorker(configHelper).run(args.action, args.args)
    except UsageError as e:
        print(f"Error: {e}", file=sys.stderr)
        print(f"Usage:{USAGE}", file=sys.stderr)
        return EXIT_USAGE
    except DokkuMigrateError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FATAL

    exitCode = reportResult(result)
    print("Operation completed.")
    return exitCode

if __name__ == '__main__':
    sys.exit(main())
