import pytest

from zfsrepl.config import ZFSReplConfig, get_config, reset_config


@pytest.fixture(autouse=True)
def clean_config(monkeypatch):
    for key in ("ZFS_BINARY", "COMMAND_TIMEOUT", "COPY_CHUNK_SIZE", "NOT_FOUND_MARKER",
                "SSH_HOST", "SSH_PORT", "LOG_LEVEL", "PORT"):
        monkeypatch.delenv(key, raising=False)
        monkeypatch.delenv(f"ZFSREPL_{key}", raising=False)
    reset_config()
    yield
    reset_config()


class TestZFSReplConfig:

    def test_defaults(self):
        config = ZFSReplConfig()

        assert config.zfs.binary == "zfs"
        assert config.zfs.command_timeout == 30
        assert config.zfs.copy_chunk_size == 65536
        assert config.zfs.not_found_marker == "dataset does not exist"
        assert config.ssh_config() is None

    def test_prefixed_environment(self, monkeypatch):
        monkeypatch.setenv("ZFSREPL_ZFS_BINARY", "/usr/sbin/zfs")
        monkeypatch.setenv("NOT_FOUND_MARKER", "no such dataset")

        config = ZFSReplConfig()

        assert config.zfs.binary == "/usr/sbin/zfs"
        assert config.zfs.not_found_marker == "no such dataset"

    def test_invalid_values_fall_back(self, monkeypatch):
        monkeypatch.setenv("COMMAND_TIMEOUT", "soon")
        monkeypatch.setenv("COPY_CHUNK_SIZE", "-1")
        monkeypatch.setenv("LOG_LEVEL", "chatty")

        config = ZFSReplConfig()

        assert config.zfs.command_timeout == 30
        assert config.zfs.copy_chunk_size == 65536
        assert config.server.log_level == "INFO"

    def test_ssh_config(self, monkeypatch):
        monkeypatch.setenv("SSH_HOST", "backup.example")
        monkeypatch.setenv("SSH_PORT", "2222")

        ssh = ZFSReplConfig().ssh_config()

        assert ssh.host == "backup.example"
        assert ssh.port == 2222
        assert ssh.key_file is None

    def test_get_config_is_cached(self):
        assert get_config() is get_config()
