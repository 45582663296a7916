# Services package
from discovery.services.discovery_service import DiscoveryService
from discovery.services.loader_service import LoaderVersionService

__all__ = [
    "DiscoveryService",
    "LoaderVersionService",
]
