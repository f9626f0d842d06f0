"""ServiceResult and ServiceError: the universal result contract.

INVARIANT: The deserializer and all service-layer methods return
ServiceResult. The CLI and any future interface consume this type.
A failed result carries exactly one error; there is no partial load.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult.

    ``recoverable`` is always False today: every validation failure is a
    hard stop for that document.
    """

    model_config = {"frozen": True}

    code: str
    message: str
    recoverable: bool = False
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Universal return type for pipeline and service operations.

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation (e.g. ``"deserialize"``).
        data: Operation-specific payload on success.
        warnings: Non-fatal issues encountered during the operation.
        error: Structured error if ``ok`` is False.
        meta: Optional metadata (paths, timing, etc.).
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None


def error_result(op: str, code: str, message: str, **detail: Any) -> ServiceResult:
    """Build a failed, non-recoverable ServiceResult."""
    return ServiceResult(
        ok=False,
        op=op,
        error=ServiceError(code=str(code), message=message, detail=detail),
    )
