from app.domains.scheduling.infrastructure.security.password_hasher import BcryptPasswordHasher

__all__ = ["BcryptPasswordHasher"]
