# =======================================================================================
# doorcheck/services/__init__.py - Services Package
# =======================================================================================
from .doorcheck_service import DoorcheckService
from .credential_gate import CredentialGate
from .dashboard_service import DashboardService
from .member_service import MemberService

__all__ = ["DoorcheckService", "CredentialGate", "DashboardService", "MemberService"]
