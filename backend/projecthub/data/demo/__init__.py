"""In-memory demo data."""

from projecthub.data.demo.seed import ADMIN_USER_ID, DEMO_USER, DEMO_USER_ID, build_seed
from projecthub.data.demo.store import DemoDataAccess, DemoStore

__all__ = [
    "ADMIN_USER_ID",
    "DEMO_USER",
    "DEMO_USER_ID",
    "DemoDataAccess",
    "DemoStore",
    "build_seed",
]
