"""Store implementations for the infrastructure layer."""

from .account_repository import AccountRepository
from .secret_store import RedisSecretStore

__all__ = ["AccountRepository", "RedisSecretStore"]
