"""Builders for the commands run on a Dokku host.

Every command is a list of arguments which gets quoted when rendered, so app
and database names never reach the remote shell unescaped.
"""
import shlex

from dataclasses import dataclass

from dokkuMigrate.definitions.errors import UsageError

DOKKU_HOME    = '/home/dokku'
STORAGE_ROOT  = '/var/lib/dokku/data/storage'
REMOTE_TMP    = '/tmp'
RESERVED_KEYS = ['GIT_REV']


@dataclass(frozen=True)
class RemoteCommand:
    args:   list[str]
    stdout: str|None = None
    stdin:  str|None = None
    sudo:   bool     = False

    def render(self) -> str:
        args = ['sudo', *self.args] if self.sudo else list(self.args)
        cmd  = shlex.join(args)
        if self.stdin is not None:
            cmd += f' < {shlex.quote(self.stdin)}'
        if self.stdout is not None:
            cmd += f' > {shlex.quote(self.stdout)}'
        return cmd

    def __str__(self):
        return self.render()


def dokku(*args: str, **kwargs) -> RemoteCommand:
    return RemoteCommand(args=['dokku', *args], **kwargs)


def checkName(name: str) -> str:
    """App and database names end up in local and remote paths"""
    if not name or name == '.' or '/' in name or '\\' in name or '..' in name:
        raise UsageError(f"Invalid name '{name}'")
    return name

def appHome(app: str) -> str:
    return f'{DOKKU_HOME}/{app}'

def storageDir(app: str) -> str:
    return f'{STORAGE_ROOT}/{app}'

def storageTmpArchive(app: str) -> str:
    return f'{REMOTE_TMP}/{app}_storage.tar.gz'

def dbTmpDump(dbName: str, kind: str, extension: str) -> str:
    return f'{REMOTE_TMP}/{dbName}_{kind}_backup.{extension}'


# Dokku procedures

def appsList() -> RemoteCommand:
    return dokku('apps:list')

def appsCreate(app: str) -> RemoteCommand:
    return dokku('apps:create', app)

def domainsAdd(app: str, domains: list[str]) -> RemoteCommand:
    return dokku('domains:add', app, *domains)

def configSet(app: str, pairs: list[str]) -> RemoteCommand:
    return dokku('config:set', app, *pairs)

def configUnset(app: str, *keys: str) -> RemoteCommand:
    return dokku('config:unset', app, *keys)

def dbExport(procedure: str, dbName: str, remotePath: str) -> RemoteCommand:
    return dokku(procedure, dbName, stdout=remotePath)

def dbImport(procedure: str, dbName: str, remotePath: str) -> RemoteCommand:
    return dokku(procedure, dbName, stdin=remotePath)


# Plain shell helpers

def readFile(path: str) -> RemoteCommand:
    return RemoteCommand(args=['cat', path])

def isDirectory(path: str) -> RemoteCommand:
    return RemoteCommand(args=['test', '-d', path])

def createArchive(sourceDir: str, archive: str) -> RemoteCommand:
    return RemoteCommand(args=['tar', '-czf', archive, '-C', sourceDir, '.'])

def extractArchive(archive: str, targetDir: str) -> RemoteCommand:
    return RemoteCommand(args=['tar', '-xzf', archive, '-C', targetDir])

def makeDirs(path: str) -> RemoteCommand:
    return RemoteCommand(args=['mkdir', '-p', path])

def chownRecursive(owner: str, path: str) -> RemoteCommand:
    return RemoteCommand(args=['chown', '-R', owner, path], sudo=True)

def removeFile(path: str) -> RemoteCommand:
    return RemoteCommand(args=['rm', '-f', path])


# Parsing of command output and backup artifacts

def parseAppList(output: str) -> list[str]:
    """Strip the '=====> My Apps' header newer dokku versions print"""
    apps = []
    for line in output.replace('\r', '').splitlines():
        line = line.strip()
        if not line or line.startswith('=====>') or line.startswith('!'):
            continue
        apps.extend(line.split())
    return apps

def contentLines(text: str) -> list[str]:
    """Non-empty lines of a VHOST/ENV artifact, placeholder and comment lines dropped"""
    lines = [l.strip() for l in text.replace('\r', '').splitlines()]
    return [l for l in lines if l and not l.startswith('#')]

def parseVhost(text: str) -> list[str]:
    domains = []
    for line in contentLines(text):
        domains.extend(line.split())
    return domains

def parseEnv(text: str) -> list[str]:
    """Turn ENV file lines into KEY=VALUE arguments for config:set.

    Dokku writes its ENV file as `export KEY='value'`, older versions as plain
    `KEY=value` where everything after the first '=' is the value.
    """
    pairs = []
    for line in contentLines(text):
        if line.startswith('export '):
            try:
                tokens = shlex.split(line)[1:]
            except ValueError:
                tokens = [line[len('export '):].strip()]
        else:
            tokens = [line]

        for token in tokens:
            key, sep, value = token.partition('=')
            key = key.strip()
            if not sep or not key:
                continue
            pairs.append(f'{key}={value}')
    return pairs
