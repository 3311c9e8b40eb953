from typing import Any, Dict, Iterable, Optional
from fastapi import HTTPException, status

class NotFoundException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        self.headers = headers
        self.status_code = status.HTTP_404_NOT_FOUND
        self.detail = detail or "Not found"

class ForbiddenException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        self.headers = headers
        self.status_code = status.HTTP_403_FORBIDDEN
        self.detail = detail or "Forbidden"

class BadRequestException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        self.headers = headers
        self.status_code = status.HTTP_400_BAD_REQUEST
        self.detail = detail or "Bad request"

class UnauthorizedException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        self.headers = headers or {"WWW-Authenticate": "Bearer"}
        self.status_code = status.HTTP_401_UNAUTHORIZED
        self.detail = detail or "Unauthorized"

class AccountInactiveException(UnauthorizedException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        super().__init__(detail or "Account is inactive", headers)

class TenantSuspendedException(UnauthorizedException):
    def __init__(self, tenant_status: str, headers: Optional[Dict[str, str]] = None):
        super().__init__({"message": f"Tenant account is {tenant_status}", "status": tenant_status}, headers)
        self.tenant_status = tenant_status

class InternalServerException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        self.headers = headers
        self.status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        self.detail = detail or "Internal server error"

def forbidden(message: str, required: Iterable[str] = (), user_roles: Iterable[str] = ()) -> ForbiddenException:
    """403 that echoes back what was required and what the caller holds."""
    return ForbiddenException(detail={
        "message": message,
        "required": list(required),
        "user_roles": list(user_roles),
    })
