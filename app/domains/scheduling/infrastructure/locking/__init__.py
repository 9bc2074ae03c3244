from app.domains.scheduling.infrastructure.locking.keyed_lock import KeyedLockRegistry, get_lock_registry

__all__ = ["KeyedLockRegistry", "get_lock_registry"]
