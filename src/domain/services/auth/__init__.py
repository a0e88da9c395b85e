from .token import TokenService

__all__ = ["TokenService"]
