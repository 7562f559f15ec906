"""
Models package for the Rent Reminder Service.
"""
from .database import MAX_ROOM_NUMBER, Base, Tenant

__all__ = ["Base", "MAX_ROOM_NUMBER", "Tenant"]
