"""Data access: one interface, a demo and a relational implementation."""

from projecthub.data.base import DataAccess, SessionMode
from projecthub.data.factory import create_data_access

__all__ = ["DataAccess", "SessionMode", "create_data_access"]
