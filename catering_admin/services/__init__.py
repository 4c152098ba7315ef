"""Services package exports."""

from catering_admin.services.logging_service import configure_logging, get_logger
from catering_admin.services.session_manager import SessionManager
from catering_admin.services.user_service import AdminUserService
from catering_admin.services.user_store import AdminUserStore, PostgresAdminUserStore

__all__ = [
    "AdminUserService",
    "AdminUserStore",
    "PostgresAdminUserStore",
    "SessionManager",
    "configure_logging",
    "get_logger",
]
