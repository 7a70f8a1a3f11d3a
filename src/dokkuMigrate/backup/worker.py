import logging

from typing import Callable
from pathlib import Path

from dokkuMigrate.config.config import ConfigHelper
from dokkuMigrate.remotes.helper import RemoteHelper
from dokkuMigrate.remotes.IRemote import IRemote
from dokkuMigrate.remotes import commands
from dokkuMigrate.definitions.backupConfig import ServerProfile
from dokkuMigrate.definitions.backupResult import BatchResult, EntityResult, Status
from dokkuMigrate.definitions.dbKind import DatabaseKind
from dokkuMigrate.definitions.errors import UsageError, BackupNotFound

from .appBackup  import AppBackupHelper
from .appRestore import AppRestoreHelper
from .dbBackup   import DatabaseHelper, dumpPath

ACTIONS = ('backup', 'restore', 'list', 'backup-db', 'restore-db')

class BackupWorker():
    """Dispatches a CLI action to the engines and collects one result per entity.

    A failing app never stops the batch; the error is logged and recorded
    in the returned BatchResult.
    """

    def __init__(self, configHelper: ConfigHelper, remoteHelper: RemoteHelper|None = None):
        self.m_logger       = logging.getLogger(__name__)
        self.m_configHelper = configHelper
        self.m_remoteHelper = remoteHelper or RemoteHelper()

        self.m_actions: dict[str, Callable[[list[str]], BatchResult]] = {
            'backup':     self.doBackup,
            'restore':    self.doRestore,
            'list':       self.doList,
            'backup-db':  self.doBackupDb,
            'restore-db': self.doRestoreDb,
        }

    def run(self, action: str, args: list[str]) -> BatchResult:
        handler = self.m_actions.get(action)
        if handler is None:
            raise UsageError(f"Unknown action '{action}'")
        try:
            return handler(list(args))
        finally:
            self.m_remoteHelper.closeAll()

    def processEntity(self, result: BatchResult, entity: str, func: Callable[[], Path|None]) -> EntityResult:
        try:
            entityResult = EntityResult(entity=entity, path=func())
        except Exception as e:
            self.m_logger.error(f"{result.action} of {entity} on {result.server} failed: {e}")
            entityResult = EntityResult(entity=entity, status=Status.FAILED, error=str(e))
        result.add(entityResult)
        return entityResult

    def getContext(self, serverName: str) -> tuple[ServerProfile, Path, IRemote]:
        profile = self.m_configHelper.resolve(serverName)
        remote  = self.m_remoteHelper.getRemote(profile)
        self.m_logger.info(f"Using remote {remote.getDescriptor()} for {profile}")
        return profile, self.m_configHelper.getServerDir(serverName), remote

    # Apps

    def doBackup(self, args: list[str]) -> BatchResult:
        serverName, app = self.splitServerArgs('backup', args)
        profile, serverDir, remote = self.getContext(serverName)
        serverDir.joinpath('apps').mkdir(parents=True, exist_ok=True)

        result = BatchResult(action='backup', server=serverName)
        helper = AppBackupHelper(remote, profile.name)

        if app is not None:
            apps = [app]
        else:
            self.m_logger.info(f"Fetching app list from {profile.host}...")
            apps = commands.parseAppList(remote.run(commands.appsList()).stdout)
            self.m_logger.info(f"Found {len(apps)} apps: {apps}")

        for app in apps:
            self.processEntity(result, app, lambda: helper.backup(app, serverDir))
        return result

    def doRestore(self, args: list[str]) -> BatchResult:
        serverName, app = self.splitServerArgs('restore', args)
        profile, serverDir, remote = self.getContext(serverName)

        result = BatchResult(action='restore', server=serverName)
        helper = AppRestoreHelper(remote, self.m_configHelper.getStorageOwner())

        if app is not None:
            apps = [app]
        else:
            appsDir = serverDir.joinpath('apps')
            self.m_logger.info(f"Restoring all apps from {appsDir}...")
            apps = sorted(p.name for p in appsDir.iterdir() if p.is_dir()) if appsDir.is_dir() else []

        for app in apps:
            self.processEntity(result, app, lambda: helper.restore(app, serverDir))
        return result

    def doList(self, args: list[str]) -> BatchResult:
        if len(args) != 1:
            raise UsageError("list expects exactly <servername>")
        profile, _, remote = self.getContext(args[0])
        result = BatchResult(action='list', server=profile.name)
        result.output = remote.run(commands.appsList()).stdout
        return result

    # Databases

    def doBackupDb(self, args: list[str]) -> BatchResult:
        kind, serverName, dbName = self.splitDbArgs('backup-db', args)
        profile, serverDir, remote = self.getContext(serverName)

        result = BatchResult(action='backup-db', server=serverName)
        helper = DatabaseHelper(remote, profile.name)
        self.processEntity(result, dbName, lambda: helper.backup(kind, dbName, serverDir))
        return result

    def doRestoreDb(self, args: list[str]) -> BatchResult:
        kind, serverName, dbName = self.splitDbArgs('restore-db', args)
        profile   = self.m_configHelper.resolve(serverName)
        serverDir = self.m_configHelper.getServerDir(serverName)

        localFile = dumpPath(serverDir, kind, dbName)
        if not localFile.is_file():
            raise BackupNotFound(localFile)

        result = BatchResult(action='restore-db', server=serverName)
        helper = DatabaseHelper(self.m_remoteHelper.getRemote(profile), profile.name)
        self.processEntity(result, dbName, lambda: helper.restore(kind, dbName, serverDir))
        return result

    # Argument checks, done before any remote contact

    @staticmethod
    def splitServerArgs(action: str, args: list[str]) -> tuple[str, str|None]:
        if len(args) not in (1, 2):
            raise UsageError(f"{action} expects <servername> [appname]")
        return args[0], commands.checkName(args[1]) if len(args) == 2 else None

    @staticmethod
    def splitDbArgs(action: str, args: list[str]) -> tuple[DatabaseKind, str, str]:
        if len(args) != 3:
            raise UsageError(f"{action} expects <dbtype> <servername> <dbname>")
        return DatabaseKind.parse(args[0]), args[1], commands.checkName(args[2])
