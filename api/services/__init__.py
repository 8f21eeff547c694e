"""API services package."""

from .app_initializer import AppServiceInitializer
from .connection_hub import ConnectionHub
from .gateway import ConnectionGateway

__all__ = ["AppServiceInitializer", "ConnectionGateway", "ConnectionHub"]
