"""
Storage Module
==============
Database connection and durable client key-value storage.
"""
from nyay_sahayak.storage.connection import Database, get_database, reset_database
from nyay_sahayak.storage.client_storage import ClientStorage

__all__ = [
    'Database',
    'get_database',
    'reset_database',
    'ClientStorage'
]
