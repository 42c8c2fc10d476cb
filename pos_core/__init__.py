"""Point-of-sale core: catalog, stock ledger and checkout for a single shop."""

from .bootstrap import ShopServices, build_services
from .data_repository import Database
from .settings import AppSettings

__all__ = ["AppSettings", "Database", "ShopServices", "build_services"]
