from .rwlock import AsyncRWLock

__all__ = ['AsyncRWLock']
