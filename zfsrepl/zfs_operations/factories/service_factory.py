"""
Service factory for dependency injection and service creation.
"""
import asyncio
from typing import Dict, Any, Optional

from ..core.interfaces.command_executor import ICommandExecutor
from ..core.interfaces.logger_interface import ILogger
from ..core.value_objects.ssh_config import SSHConfig
from ..infrastructure.command_executor import CommandExecutor
from ..infrastructure.logging.structured_logger import StructuredLogger, OperationLogger
from ..services.dataset_service import DatasetService
from ..services.directory_service import DirectoryService, NotFoundPredicate, marker_predicate, DEFAULT_NOT_FOUND_MARKER
from ..services.property_service import PropertyService
from ..services.replication_pipeline import ReplicationPipeline, DEFAULT_CHUNK_SIZE
from ..services.replication_service import ReplicationService


class ServiceFactory:
    """Builds services that share one command executor.

    Construct one factory per pool connection and pass the services it
    returns to whoever needs them; there is no module-level default.
    """

    def __init__(self,
                 config: Optional[Dict[str, Any]] = None,
                 executor: Optional[ICommandExecutor] = None,
                 is_not_found: Optional[NotFoundPredicate] = None):
        self._config = config or {}
        self._logger_instances: Dict[str, ILogger] = {}
        self._lock = asyncio.Lock()
        self._executor: ICommandExecutor = executor or self._build_executor()
        self._is_not_found = is_not_found or marker_predicate(
            self._config.get('not_found_marker', DEFAULT_NOT_FOUND_MARKER)
        )

    def _build_executor(self) -> CommandExecutor:
        return CommandExecutor(
            zfs_binary=self._config.get('zfs_binary', 'zfs'),
            timeout=self._config.get('command_timeout', 30),
            ssh_config=self._config.get('ssh_config')
        )

    @property
    def executor(self) -> ICommandExecutor:
        return self._executor

    async def create_property_service(self) -> PropertyService:
        return PropertyService(self._executor, await self._get_logger("property_service"))

    async def create_directory_service(self) -> DirectoryService:
        return DirectoryService(
            executor=self._executor,
            logger=await self._get_logger("directory_service"),
            property_service=await self.create_property_service(),
            is_not_found=self._is_not_found
        )

    async def create_dataset_service(self) -> DatasetService:
        return DatasetService(self._executor, await self._get_logger("dataset_service"))

    async def create_replication_pipeline(self) -> ReplicationPipeline:
        return ReplicationPipeline(
            self._executor,
            await self._get_logger("replication_pipeline"),
            chunk_size=self._config.get('copy_chunk_size', DEFAULT_CHUNK_SIZE)
        )

    async def create_replication_service(self) -> ReplicationService:
        # OperationLogger keeps per-operation state, so each service gets its own
        return ReplicationService(
            directory=await self.create_directory_service(),
            datasets=await self.create_dataset_service(),
            pipeline=await self.create_replication_pipeline(),
            logger=OperationLogger("replication_service", self._config.get('log_level', 'INFO'))
        )

    async def _get_logger(self, service_name: str) -> ILogger:
        async with self._lock:
            if service_name not in self._logger_instances:
                self._logger_instances[service_name] = StructuredLogger(
                    name=service_name,
                    level=self._config.get('log_level', 'INFO')
                )
            return self._logger_instances[service_name]

    def get_config(self) -> Dict[str, Any]:
        return self._config.copy()


class ServiceFactoryBuilder:
    """Builder for creating ServiceFactory instances with fluent configuration."""

    def __init__(self):
        self._config: Dict[str, Any] = {}
        self._executor: Optional[ICommandExecutor] = None
        self._is_not_found: Optional[NotFoundPredicate] = None

    def with_zfs_binary(self, path: str) -> 'ServiceFactoryBuilder':
        self._config['zfs_binary'] = path
        return self

    def with_command_timeout(self, timeout: float) -> 'ServiceFactoryBuilder':
        self._config['command_timeout'] = timeout
        return self

    def with_log_level(self, level: str) -> 'ServiceFactoryBuilder':
        self._config['log_level'] = level
        return self

    def with_copy_chunk_size(self, size: int) -> 'ServiceFactoryBuilder':
        self._config['copy_chunk_size'] = size
        return self

    def with_not_found_marker(self, marker: str) -> 'ServiceFactoryBuilder':
        self._config['not_found_marker'] = marker
        return self

    def with_not_found_predicate(self, predicate: NotFoundPredicate) -> 'ServiceFactoryBuilder':
        self._is_not_found = predicate
        return self

    def with_ssh(self, ssh_config: Optional[SSHConfig]) -> 'ServiceFactoryBuilder':
        self._config['ssh_config'] = ssh_config
        return self

    def with_executor(self, executor: ICommandExecutor) -> 'ServiceFactoryBuilder':
        self._executor = executor
        return self

    def build(self) -> ServiceFactory:
        return ServiceFactory(self._config, executor=self._executor, is_not_found=self._is_not_found)


def create_service_factory_from_config(config) -> ServiceFactory:
    """Create a factory from a ZFSReplConfig."""
    return ServiceFactoryBuilder() \
        .with_zfs_binary(config.zfs.binary) \
        .with_command_timeout(config.zfs.command_timeout) \
        .with_copy_chunk_size(config.zfs.copy_chunk_size) \
        .with_not_found_marker(config.zfs.not_found_marker) \
        .with_log_level(config.server.log_level) \
        .with_ssh(config.ssh_config()) \
        .build()
