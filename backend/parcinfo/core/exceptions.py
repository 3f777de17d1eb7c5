"""
Custom Exceptions for ParcInfo
==============================

Every layer below the HTTP handlers raises these typed failures instead of
HTTPException. `parcinfo.api.errors` is the only module that turns them into
status codes.

Usage:
    from parcinfo.core.exceptions import PcNotFoundError, AuthorizationError

    pc = await repository.get_pc(pc_id)
    if pc is None:
        raise PcNotFoundError(pc_id)
"""

from typing import Optional, Any, Dict


class ParcInfoError(Exception):
    """Base exception for all ParcInfo errors"""

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }


# ============================================
# Validation Errors (400-type)
# ============================================

class ValidationError(ParcInfoError):
    """Input validation failed"""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class IncorrectPasswordError(ValidationError):
    """Current password did not verify during a password change"""

    def __init__(self):
        super().__init__("Incorrect current password", field="currentPassword")
        self.code = "INCORRECT_PASSWORD"


class UnknownEstablishmentError(ValidationError):
    """A payload references an establishment that does not exist"""

    def __init__(self, establishment_id: int):
        super().__init__(
            f"Establishment with ID '{establishment_id}' does not exist",
            field="establishmentId"
        )
        self.code = "UNKNOWN_ESTABLISHMENT"


# ============================================
# Authentication & Authorization Errors
# ============================================

class AuthenticationError(ParcInfoError):
    """User authentication failed"""

    def __init__(self, message: str = "Invalid username or password"):
        super().__init__(message, code="AUTH_FAILED")


class SessionRequiredError(AuthenticationError):
    """No valid session was presented"""

    def __init__(self):
        super().__init__("Unauthorized")
        self.code = "SESSION_REQUIRED"


class AuthorizationError(ParcInfoError):
    """User not authorized for this action"""

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message, code="FORBIDDEN")


# ============================================
# Resource Errors (404-type)
# ============================================

class ResourceNotFoundError(ParcInfoError):
    """Base class for not found errors"""

    def __init__(self, resource_type: str, resource_id: Any):
        super().__init__(
            f"{resource_type} not found",
            code=f"{resource_type.upper()}_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": resource_id}
        )


class EstablishmentNotFoundError(ResourceNotFoundError):
    def __init__(self, establishment_id: int):
        super().__init__("Establishment", establishment_id)


class UserNotFoundError(ResourceNotFoundError):
    def __init__(self, user_id: int):
        super().__init__("User", user_id)


class PcNotFoundError(ResourceNotFoundError):
    def __init__(self, pc_id: int):
        super().__init__("PC", pc_id)


# ============================================
# Conflict Errors (uniqueness / referential integrity)
# ============================================

class ConflictError(ParcInfoError):
    """Write rejected by a uniqueness or foreign-key constraint"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="CONFLICT", details=details)


class DuplicateUsernameError(ConflictError):
    def __init__(self, username: str):
        super().__init__(f"Username '{username}' is already taken", details={"username": username})
        self.code = "DUPLICATE_USERNAME"


class EstablishmentInUseError(ConflictError):
    """Establishment still owns users or PCs"""

    def __init__(self, establishment_id: int, user_count: int, pc_count: int):
        super().__init__(
            "Cannot delete establishment: it still has "
            f"{user_count} user(s) and {pc_count} computer(s) linked",
            details={
                "establishment_id": establishment_id,
                "user_count": user_count,
                "pc_count": pc_count,
            }
        )
        self.code = "ESTABLISHMENT_IN_USE"


# ============================================
# Internal Faults (500-type)
# ============================================

class InternalFault(ParcInfoError):
    """Unexpected failure; the message is logged, never returned to clients"""

    def __init__(self, message: str, code: str = "INTERNAL_ERROR"):
        super().__init__(message, code=code)


class CredentialHashError(InternalFault):
    """Stored password hash is malformed"""

    def __init__(self, message: str = "Malformed stored password hash"):
        super().__init__(message, code="CREDENTIAL_HASH_ERROR")


class StorageError(InternalFault):
    """Persistence provider failed"""

    def __init__(self, operation: str):
        super().__init__(f"Storage failure during {operation}", code="STORAGE_ERROR")
        self.details = {"operation": operation}


def error_response(error: ParcInfoError) -> Dict[str, Any]:
    """Client-facing body for a domain error"""
    body: Dict[str, Any] = {"message": error.message, "code": error.code}
    if error.details:
        body["details"] = error.details
    return body
