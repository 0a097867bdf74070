"""
Dependencies for API endpoints.

Services come from the ServiceFactory stored on the application state.
"""
from fastapi import Request

from ..zfs_operations.factories.service_factory import ServiceFactory
from ..zfs_operations.services.directory_service import DirectoryService
from ..zfs_operations.services.property_service import PropertyService
from ..zfs_operations.services.replication_service import ReplicationService


def get_service_factory(request: Request) -> ServiceFactory:
    return request.app.state.service_factory


async def get_directory_service(request: Request) -> DirectoryService:
    return await get_service_factory(request).create_directory_service()


async def get_property_service(request: Request) -> PropertyService:
    return await get_service_factory(request).create_property_service()


async def get_replication_service(request: Request) -> ReplicationService:
    return await get_service_factory(request).create_replication_service()
