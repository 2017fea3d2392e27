# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .sheet_service import SheetService
from .access_service import AccessService
from .public_link_service import PublicLinkService
from .export_service import ExportService
from .tracker_service import TrackerService
from .reserve_service import ReserveService
from .settlement_service import SettlementService
from .material_service import MaterialService
from .folder_service import FolderService
from .user_service import UserService

__all__ = [
    "SheetService",
    "AccessService",
    "PublicLinkService",
    "ExportService",
    "TrackerService",
    "ReserveService",
    "SettlementService",
    "MaterialService",
    "FolderService",
    "UserService",
]
