"""Credential hashing adapters."""

from .bcrypt_hasher import BcryptPasswordHasher

__all__ = ["BcryptPasswordHasher"]
