"""
zfsrepl Configuration Module

Loads settings from environment variables into small dataclass groups.
Every key is looked up bare and with the ZFSREPL_ prefix.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Optional

from .zfs_operations.core.value_objects.ssh_config import SSHConfig


logger = logging.getLogger(__name__)


@dataclass
class ServerConfig:
    """HTTP API settings"""
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000
    enable_docs: bool = True
    cors_origins: list[str] = field(default_factory=lambda: ["*"])


@dataclass
class ZFSConfig:
    """How the zfs binary is invoked and its output interpreted"""
    binary: str = "zfs"
    # applies to blocking list/get/set calls, never to a send/recv stream
    command_timeout: int = 30
    copy_chunk_size: int = 64 * 1024
    not_found_marker: str = "dataset does not exist"


@dataclass
class SSHSettings:
    """Optional remote host; empty host means run zfs locally"""
    host: str = ""
    user: str = "root"
    port: int = 22
    key_file: str = ""


class ZFSReplConfig:
    """
    zfsrepl configuration loaded from environment variables.

    Invalid values are reported and replaced by defaults rather than
    aborting startup.
    """

    def __init__(self):
        self.server = ServerConfig()
        self.zfs = ZFSConfig()
        self.ssh = SSHSettings()

        self._load_environment_variables()
        self._validate_configuration()

    def _load_environment_variables(self):
        # ==== SERVER CONFIG ====
        self.server.log_level = self._get_string("LOG_LEVEL", self.server.log_level).upper()
        self.server.host = self._get_string("HOST", self.server.host)
        self.server.port = self._get_int("PORT", self.server.port)
        self.server.enable_docs = self._get_bool("ENABLE_DOCS", self.server.enable_docs)
        self.server.cors_origins = self._get_string("CORS_ORIGINS", "*").split(",")

        # ==== ZFS CONFIG ====
        self.zfs.binary = self._get_string("ZFS_BINARY", self.zfs.binary)
        self.zfs.command_timeout = self._get_int("COMMAND_TIMEOUT", self.zfs.command_timeout)
        self.zfs.copy_chunk_size = self._get_int("COPY_CHUNK_SIZE", self.zfs.copy_chunk_size)
        self.zfs.not_found_marker = self._get_string("NOT_FOUND_MARKER", self.zfs.not_found_marker)

        # ==== SSH CONFIG ====
        self.ssh.host = self._get_string("SSH_HOST", self.ssh.host)
        self.ssh.user = self._get_string("SSH_USER", self.ssh.user)
        self.ssh.port = self._get_int("SSH_PORT", self.ssh.port)
        self.ssh.key_file = self._get_string("SSH_KEY_FILE", self.ssh.key_file)

    def _get_string(self, key: str, default: str) -> str:
        for prefix in ["", "ZFSREPL_"]:
            value = os.getenv(f"{prefix}{key}")
            if value is not None:
                return value
        return default

    def _get_int(self, key: str, default: int) -> int:
        value = self._get_string(key, str(default))
        try:
            return int(value)
        except ValueError:
            logger.warning(f"Invalid integer value for {key}: {value}, using default: {default}")
            return default

    def _get_bool(self, key: str, default: bool) -> bool:
        value = self._get_string(key, str(default)).lower()
        return value in ("true", "1", "yes", "on")

    def _validate_configuration(self):
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self.server.log_level not in valid_levels:
            logger.warning(f"Invalid log level: {self.server.log_level}, using INFO")
            self.server.log_level = "INFO"

        if not (1 <= self.server.port <= 65535):
            logger.warning(f"Invalid port: {self.server.port}, using default: 8000")
            self.server.port = 8000

        if self.zfs.command_timeout <= 0:
            logger.warning(f"Invalid command timeout: {self.zfs.command_timeout}, using 30")
            self.zfs.command_timeout = 30

        if self.zfs.copy_chunk_size <= 0:
            logger.warning(f"Invalid copy chunk size: {self.zfs.copy_chunk_size}, using 65536")
            self.zfs.copy_chunk_size = 64 * 1024

        if not self.zfs.not_found_marker:
            logger.warning("Empty not-found marker, using 'dataset does not exist'")
            self.zfs.not_found_marker = "dataset does not exist"

        if not (1 <= self.ssh.port <= 65535):
            logger.warning(f"Invalid SSH port: {self.ssh.port}, using 22")
            self.ssh.port = 22

    def ssh_config(self) -> Optional[SSHConfig]:
        if not self.ssh.host:
            return None
        return SSHConfig(
            host=self.ssh.host,
            user=self.ssh.user or "root",
            port=self.ssh.port,
            key_file=self.ssh.key_file or None,
            timeout=self.zfs.command_timeout
        )


_config: Optional[ZFSReplConfig] = None


def get_config() -> ZFSReplConfig:
    """Return the process configuration, loading it on first use."""
    global _config
    if _config is None:
        _config = ZFSReplConfig()
    return _config


def reset_config() -> None:
    """Forget the loaded configuration so the next get_config() rereads the environment."""
    global _config
    _config = None
