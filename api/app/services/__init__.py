"""Services for API business logic."""

from .mongo_service import MongoService
from .resources import RESOURCES, ResourceDefinition, list_resources
from .record_model import RecordModel
from .record_repository import RecordRepository, InMemoryRecordRepository, MongoRecordRepository
from .record_service import RecordService
from .container import ResourceContext, ServiceContainer

__all__ = [
    # Core Services
    'MongoService',
    'ServiceContainer',
    'ResourceContext',
    # Resources
    'RESOURCES',
    'ResourceDefinition',
    'list_resources',
    # Records
    'RecordModel',
    'RecordRepository',
    'InMemoryRecordRepository',
    'MongoRecordRepository',
    'RecordService',
]
