class DokkuMigrateError(Exception):
    """Base class of all errors reported to the user"""


class ConfigMissing(DokkuMigrateError):
    def __init__(self, path):
        super().__init__(f"Configuration file {path} not found!")
        self.path = path


class ConfigInvalid(DokkuMigrateError):
    pass


class ServerNotFound(DokkuMigrateError):
    def __init__(self, serverName: str):
        super().__init__(f"Server '{serverName}' is not defined in the configuration")
        self.serverName = serverName


class UsageError(DokkuMigrateError):
    pass


class UnsupportedDatabaseKind(DokkuMigrateError):
    def __init__(self, kind: str):
        super().__init__(f"Unsupported dbtype: {kind}")
        self.kind = kind


class BackupNotFound(DokkuMigrateError):
    def __init__(self, path):
        super().__init__(f"Backup {path} not found!")
        self.path = path


class RemoteCommandFailed(DokkuMigrateError):
    def __init__(self, command: str, exitStatus: int, stderr: str = ''):
        message = f"Remote command '{command}' failed with exit status {exitStatus}"
        if stderr.strip():
            message += f": {stderr.strip()}"
        super().__init__(message)
        self.command    = command
        self.exitStatus = exitStatus
        self.stderr     = stderr


class TransferFailed(DokkuMigrateError):
    pass
