import json
import pytest

from pathlib import Path

from dokkuMigrate.config.config import ConfigHelper, getConfigPath, writeDefaultConfig, CONFIG_ENV_VAR
from dokkuMigrate.definitions.errors import ConfigMissing, ConfigInvalid, ServerNotFound


def test_missing_config_file(tmp_path):
    with pytest.raises(ConfigMissing) as excinfo:
        ConfigHelper(tmp_path / 'nope.json')
    assert 'nope.json' in str(excinfo.value)


def test_invalid_json(tmp_path):
    path = tmp_path / 'config.json'
    path.write_text('{"backup_directory": ')
    with pytest.raises(ConfigInvalid):
        ConfigHelper(path)


def test_missing_required_field(tmp_path):
    path = tmp_path / 'config.json'
    path.write_text(json.dumps({'servers': {}}))
    with pytest.raises(ConfigInvalid):
        ConfigHelper(path)


def test_resolve_server(config_helper, monkeypatch, tmp_path):
    monkeypatch.setenv('HOME', str(tmp_path / 'home'))
    profile = config_helper.resolve('server1')

    assert profile.name == 'server1'
    assert profile.host == 'dokku1.example.com'
    assert profile.user == 'root'
    assert profile.port == 22
    assert profile.ssh_key == tmp_path / 'home' / '.ssh' / 'id_rsa'


def test_resolve_custom_port(config_helper):
    assert config_helper.resolve('acme').port == 2222


def test_unknown_server(config_helper):
    with pytest.raises(ServerNotFound) as excinfo:
        config_helper.resolve('server9')
    assert excinfo.value.serverName == 'server9'


def test_backup_root_tilde_expansion(tmp_path, monkeypatch):
    monkeypatch.setenv('HOME', str(tmp_path))
    path = tmp_path / 'config.json'
    path.write_text(json.dumps({'backup_directory': '~/dokku', 'servers': {}}))

    helper = ConfigHelper(path)
    assert helper.getBackupRoot() == tmp_path / 'dokku'
    assert helper.getServerDir('server1') == tmp_path / 'dokku' / 'server1'


def test_storage_owner_default(config_helper):
    assert config_helper.getStorageOwner() == 'nobody:nogroup'


def test_config_path_from_environment(tmp_path, monkeypatch):
    monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / 'other.json'))
    assert getConfigPath() == tmp_path / 'other.json'
    assert getConfigPath(tmp_path / 'explicit.json') == tmp_path / 'explicit.json'


def test_default_config_path(tmp_path, monkeypatch):
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    monkeypatch.setenv('HOME', str(tmp_path))
    assert getConfigPath() == tmp_path / '.dokku-migrate' / 'config.json'


def test_write_default_config(tmp_path):
    path = tmp_path / '.dokku-migrate' / 'config.json'

    assert writeDefaultConfig(path)
    helper = ConfigHelper(path)
    assert helper.resolve('server1').host == 'dokku1.example.com'
    assert helper.resolve('server2').user == 'ubuntu'

    path.write_text(json.dumps({'backup_directory': '/tmp', 'servers': {}}))
    assert not writeDefaultConfig(path)
    with pytest.raises(ServerNotFound):
        ConfigHelper(path).resolve('server1')
