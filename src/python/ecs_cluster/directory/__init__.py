from .boto3_directory_service import Boto3DirectoryService
from .directory_client import DirectoryClient
from .directory_service import DirectoryService

__all__ = [
    "Boto3DirectoryService",
    "DirectoryClient",
    "DirectoryService",
]
