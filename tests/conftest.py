import json
import pytest

from pathlib import Path

from dokkuMigrate.remotes.IRemote import IRemote, CommandResult
from dokkuMigrate.remotes.commands import RemoteCommand
from dokkuMigrate.remotes.helper import RemoteHelper
from dokkuMigrate.config.config import ConfigHelper
from dokkuMigrate.backup.worker import BackupWorker
from dokkuMigrate.definitions.errors import RemoteCommandFailed, TransferFailed


class FakeDokkuHost(IRemote):
    """In-memory dokku host. Records every command and transfer."""

    def __init__(self, name: str = 'server1'):
        self.name      = name
        self.files:    dict[str, bytes] = {}
        self.dirs:     set[str]         = set()
        self.apps:     dict[str, dict]  = {}
        self.dbs:      dict[tuple[str, str], bytes] = {}
        self.extracted: dict[str, bytes] = {}
        self.owners:   dict[str, str]   = {}
        self.commands: list[RemoteCommand] = []
        self.transfers: list[tuple[str, str, str]] = []
        self.failures: list[tuple[list[str], int]] = []
        self.closed    = False

    # Setup helpers

    def addApp(self, app: str, vhost: str|None = None, env: str|None = None, storage: bytes|None = None):
        self.apps[app] = {'domains': [], 'config': {}}
        if vhost is not None:
            self.files[f'/home/dokku/{app}/VHOST'] = vhost.encode()
        if env is not None:
            self.files[f'/home/dokku/{app}/ENV'] = env.encode()
        if storage is not None:
            storageDir = f'/var/lib/dokku/data/storage/{app}'
            self.dirs.add(storageDir)
            self.extracted[storageDir] = storage

    def failWhen(self, *argsPrefix: str, status: int = 1):
        """Make every command starting with the given arguments exit with status"""
        self.failures.append((list(argsPrefix), status))

    @property
    def ioCount(self) -> int:
        return len(self.commands) + len(self.transfers)

    def commandArgs(self) -> list[list[str]]:
        return [c.args for c in self.commands]

    # IRemote

    def getDescriptor(self) -> str:
        return self.name

    def close(self) -> None:
        self.closed = True

    def run(self, command: RemoteCommand, check: bool = True) -> CommandResult:
        self.commands.append(command)
        result = self.execute(command)
        if check and not result.ok:
            raise RemoteCommandFailed(command.render(), result.exitStatus, result.stderr)
        return result

    def download(self, remotePath: str, localPath: Path) -> None:
        self.transfers.append(('download', remotePath, str(localPath)))
        if remotePath not in self.files:
            raise TransferFailed(f"Download of {remotePath} failed: no such file")
        Path(localPath).write_bytes(self.files[remotePath])

    def upload(self, localPath: Path, remotePath: str) -> None:
        self.transfers.append(('upload', str(localPath), remotePath))
        self.files[remotePath] = Path(localPath).read_bytes()

    # Command simulation

    def execute(self, command: RemoteCommand) -> CommandResult:
        args = command.args
        for prefix, status in self.failures:
            if args[:len(prefix)] == prefix:
                return CommandResult('', f'{args[0]} failed', status)

        if args[0] == 'dokku':
            return self.dokku(args[1:], command)

        match args:
            case ['cat', path]:
                if path not in self.files:
                    return CommandResult('', f'cat: {path}: No such file or directory', 1)
                return CommandResult(self.files[path].decode(), '', 0)
            case ['test', '-d', path]:
                return CommandResult('', '', 0 if path in self.dirs else 1)
            case ['tar', '-czf', archive, '-C', source, '.']:
                self.files[archive] = self.extracted.get(source, b'')
            case ['tar', '-xzf', archive, '-C', target]:
                if target not in self.dirs:
                    return CommandResult('', 'tar: cannot chdir', 2)
                self.extracted[target] = self.files[archive]
            case ['mkdir', '-p', path]:
                self.dirs.add(path)
            case ['chown', '-R', owner, path]:
                self.owners[path] = owner
            case ['rm', '-f', path]:
                self.files.pop(path, None)
            case _:
                return CommandResult('', f'unknown command {args}', 127)
        return CommandResult('', '', 0)

    def dokku(self, args: list[str], command: RemoteCommand) -> CommandResult:
        match args:
            case ['apps:list']:
                return CommandResult('=====> My Apps\n' + ''.join(f'{a}\n' for a in self.apps), '', 0)
            case ['apps:create', app]:
                if app in self.apps:
                    return CommandResult('', ' !     Name is already taken', 1)
                self.apps[app] = {'domains': [], 'config': {}}
            case ['domains:add', app, *domains]:
                self.apps[app]['domains'].extend(domains)
            case ['config:set', app, *pairs]:
                for pair in pairs:
                    key, _, value = pair.partition('=')
                    self.apps[app]['config'][key] = value
            case ['config:unset', app, *keys]:
                for key in keys:
                    self.apps[app]['config'].pop(key, None)
            case [procedure, dbName] if procedure.endswith(':export'):
                kind = procedure.split(':')[0]
                if (kind, dbName) not in self.dbs:
                    return CommandResult('', f' !     {kind} service {dbName} does not exist', 1)
                self.files[command.stdout] = self.dbs[(kind, dbName)]
            case [procedure, dbName] if procedure.endswith(':import'):
                kind = procedure.split(':')[0]
                self.dbs[(kind, dbName)] = self.files[command.stdin]
            case _:
                return CommandResult('', f'unknown dokku command {args}', 1)
        return CommandResult('', '', 0)


@pytest.fixture
def host():
    return FakeDokkuHost()


@pytest.fixture
def backup_root(tmp_path):
    return tmp_path / 'backups'


@pytest.fixture
def config_path(tmp_path, backup_root):
    path = tmp_path / 'config.json'
    path.write_text(json.dumps({
        'backup_directory': str(backup_root),
        'servers': {
            'server1': {'host': 'dokku1.example.com', 'user': 'root', 'ssh_key': '~/.ssh/id_rsa'},
            'acme':    {'host': 'acme.example.com', 'user': 'ubuntu', 'ssh_key': '~/.ssh/acme', 'port': 2222},
        }
    }))
    return path


@pytest.fixture
def config_helper(config_path):
    return ConfigHelper(config_path)


@pytest.fixture
def created_remotes(host):
    """Profiles for which the worker asked for a remote"""
    return []


@pytest.fixture
def worker(config_helper, host, created_remotes):
    def factory(profile):
        created_remotes.append(profile)
        return host
    return BackupWorker(config_helper, RemoteHelper(factory=factory))
