import logging

from pathlib import Path

from dokkuMigrate.remotes.IRemote import IRemote
from dokkuMigrate.remotes import commands
from dokkuMigrate.definitions.dbKind import DatabaseKind
from dokkuMigrate.definitions.errors import BackupNotFound


def dumpPath(serverDir: Path, kind: DatabaseKind, dbName: str) -> Path:
    return serverDir.joinpath(kind.value, kind.dumpName(commands.checkName(dbName)))


class DatabaseHelper:
    """Export and import of dokku postgres and mongo services"""

    def __init__(self, remote: IRemote, serverName: str):
        self.m_logger     = logging.getLogger(__name__)
        self.m_remote     = remote
        self.m_serverName = serverName

    def backup(self, kind: DatabaseKind, dbName: str, serverDir: Path) -> Path:
        localFile  = dumpPath(serverDir, kind, dbName)
        remoteFile = commands.dbTmpDump(dbName, kind.value, kind.extension)
        localFile.parent.mkdir(parents=True, exist_ok=True)

        self.m_logger.info(f"Backing up {kind} database {dbName} from server {self.m_serverName}...")
        try:
            # The shell creates the redirect target even when the export fails
            self.m_remote.run(commands.dbExport(kind.exportProcedure, dbName, remoteFile))
            partial = localFile.with_name(localFile.name + '.part')
            self.m_remote.download(remoteFile, partial)
            partial.replace(localFile)
        finally:
            self.m_remote.run(commands.removeFile(remoteFile), check=False)

        self.m_logger.info(f"{kind} backup for {dbName} saved as {localFile}")
        return localFile

    def restore(self, kind: DatabaseKind, dbName: str, serverDir: Path) -> Path:
        localFile = dumpPath(serverDir, kind, dbName)
        if not localFile.is_file():
            raise BackupNotFound(localFile)

        remoteFile = f'{commands.REMOTE_TMP}/{localFile.name}'

        self.m_logger.info(f"Restoring {kind} database {dbName} to server {self.m_serverName}...")
        self.m_remote.upload(localFile, remoteFile)
        try:
            self.m_remote.run(commands.dbImport(kind.importProcedure, dbName, remoteFile))
        finally:
            self.m_remote.run(commands.removeFile(remoteFile), check=False)

        self.m_logger.info(f"{kind} database {dbName} restored from {localFile}")
        return localFile
