"""
Bcrypt password hashing for just-in-time patient accounts.

bcrypt is CPU bound, so hashing and checking run in a worker thread.
"""

import asyncio

import bcrypt

from app.domains.scheduling.application.ports.services import IPasswordHasher


class BcryptPasswordHasher(IPasswordHasher):
    def __init__(self, rounds: int = 12):
        self.rounds = rounds

    async def hash(self, password: str) -> str:
        """Generate a bcrypt hash for the password."""
        return await asyncio.to_thread(self._hash_sync, password)

    async def verify(self, password: str, password_hash: str) -> bool:
        """Check a password against its hash."""
        return await asyncio.to_thread(
            bcrypt.checkpw, password.encode("utf-8"), password_hash.encode("utf-8")
        )

    def _hash_sync(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")
