import time
import logging
import paramiko

from pathlib import Path

from .IRemote  import IRemote, CommandResult
from .commands import RemoteCommand

from dokkuMigrate.definitions.backupConfig import ServerProfile
from dokkuMigrate.definitions.errors       import RemoteCommandFailed, TransferFailed

CONNECT_TIMEOUT = 30
READ_CHUNK      = 32768
POLL_INTERVAL   = 0.05

class SshRemote(IRemote):
    """Runs commands via ssh and copies files via sftp on a single server.

    The connection is opened on first use and kept open until close().
    """

    def __init__(self, profile: ServerProfile, timeout: float = CONNECT_TIMEOUT):
        self.m_logger  = logging.getLogger(__name__)
        self.m_profile = profile
        self.m_timeout = timeout

        self.m_client: paramiko.SSHClient|None  = None
        self.m_sftp:   paramiko.SFTPClient|None = None

    def __str__(self):
        return f'SshRemote: {self.m_profile.user}@{self.m_profile.host}:{self.m_profile.port}'

    def getDescriptor(self) -> str:
        return self.m_profile.name

    def connect(self) -> paramiko.SSHClient:
        if self.m_client is not None:
            return self.m_client

        client = paramiko.SSHClient()
        client.load_system_host_keys()
        client.set_missing_host_key_policy(paramiko.AutoAddPolicy())

        connectArgs = {
            'hostname': self.m_profile.host,
            'port':     self.m_profile.port,
            'username': self.m_profile.user,
            'timeout':  self.m_timeout,
        }
        if self.m_profile.ssh_key is not None:
            connectArgs['key_filename']  = str(self.m_profile.ssh_key)
            connectArgs['look_for_keys'] = False

        try:
            client.connect(**connectArgs)
        except (paramiko.SSHException, OSError) as e:
            client.close()
            raise TransferFailed(f"Connection to {self} failed: {e}") from e

        self.m_logger.info(f"Connected via ssh to {self.m_profile.host}")
        self.m_client = client
        return client

    def openSftp(self) -> paramiko.SFTPClient:
        if self.m_sftp is None:
            self.m_sftp = self.connect().open_sftp()
        return self.m_sftp

    def close(self) -> None:
        if self.m_sftp is not None:
            self.m_sftp.close()
            self.m_sftp = None
        if self.m_client is not None:
            self.m_client.close()
            self.m_client = None
            self.m_logger.debug(f"Disconnected from {self.m_profile.host}")

    # Interface Methods of IRemote

    def run(self, command: RemoteCommand, check: bool = True) -> CommandResult:
        cmd = command.render()
        self.m_logger.debug(f"[{self.m_profile.name}] $ {cmd}")

        try:
            _, stdout, _ = self.connect().exec_command(cmd)
            out, err, exitStatus = self.readChannel(stdout.channel)
        except (paramiko.SSHException, OSError) as e:
            raise RemoteCommandFailed(cmd, -1, str(e)) from e

        result = CommandResult(
            stdout     = out.decode('utf-8', errors='replace'),
            stderr     = err.decode('utf-8', errors='replace'),
            exitStatus = exitStatus
        )
        if check and not result.ok:
            raise RemoteCommandFailed(cmd, exitStatus, result.stderr)
        return result

    def readChannel(self, channel: paramiko.Channel) -> tuple[bytes, bytes, int]:
        """Drain stdout and stderr side by side, a full stderr window would block the command"""
        out, err = bytearray(), bytearray()
        while True:
            busy = False
            if channel.recv_ready():
                out += channel.recv(READ_CHUNK)
                busy = True
            if channel.recv_stderr_ready():
                err += channel.recv_stderr(READ_CHUNK)
                busy = True
            if busy:
                continue
            if channel.exit_status_ready():
                break
            time.sleep(POLL_INTERVAL)
        return bytes(out), bytes(err), channel.recv_exit_status()

    def download(self, remotePath: str, localPath: Path) -> None:
        self.m_logger.debug(f"Downloading {self.m_profile.host}:{remotePath} to {localPath}")
        try:
            self.openSftp().get(remotePath, str(localPath))
        except (paramiko.SSHException, OSError) as e:
            raise TransferFailed(f"Download of {remotePath} from {self.m_profile.name} failed: {e}") from e

    def upload(self, localPath: Path, remotePath: str) -> None:
        self.m_logger.debug(f"Uploading {localPath} to {self.m_profile.host}:{remotePath}")
        try:
            self.openSftp().put(str(localPath), remotePath)
        except (paramiko.SSHException, OSError) as e:
            raise TransferFailed(f"Upload of {localPath} to {self.m_profile.name} failed: {e}") from e
