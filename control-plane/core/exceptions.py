# control-plane/core/exceptions.py
"""
Exception hierarchy for the subnet control plane
Every failure is scoped to one request or reconcile pass
"""

from dataclasses import dataclass
from typing import Any, List, Optional

from fastapi import HTTPException, status


class SubnetControlPlaneError(Exception):
    """Base exception for the subnet control plane"""
    error_code = "INTERNAL_ERROR"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail={
                "error": self.message,
                "error_code": self.error_code,
                "details": self.details or None,
            }
        )


class MalformedAnnotationError(SubnetControlPlaneError):
    """A subnet annotation could not be decoded"""
    error_code = "MALFORMED_ANNOTATION"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, annotation: str, value: str, reason: Any):
        super().__init__(
            f"failed to parse annotation '{annotation}' value '{value}', error: {reason}",
            {"annotation": annotation, "value": value},
        )
        self.annotation = annotation
        self.value = value


class SubnetAnnotationError(SubnetControlPlaneError):
    """Decoded subnet annotations break a structural rule"""
    error_code = "INVALID_SUBNET_ANNOTATION"
    status_code = status.HTTP_400_BAD_REQUEST


class InvalidIPNumberError(SubnetAnnotationError):
    """IPPool IP number annotation is not '<n>' or '<n>+'"""
    error_code = "INVALID_IP_NUMBER"

    def __init__(self, value: str, reason: Optional[str] = None):
        message = f"invalid input '{value}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, {"value": value})
        self.value = value


class OwnerLookupError(SubnetControlPlaneError):
    """An owner in the pod's controller chain could not be fetched"""
    error_code = "OWNER_LOOKUP_FAILED"
    status_code = status.HTTP_502_BAD_GATEWAY

    def __init__(self, namespace: str, pod_name: str, reason: Any):
        super().__init__(
            f"failed to get pod '{namespace}/{pod_name}' owner: {reason}",
            {"namespace": namespace, "pod": pod_name},
        )


class IPRangeError(SubnetControlPlaneError):
    """An IP range string is malformed or of the wrong IP version"""
    error_code = "INVALID_IP_RANGE"
    status_code = status.HTTP_400_BAD_REQUEST


@dataclass
class FieldError:
    """One violation on one field, shaped like a Kubernetes StatusCause"""
    type: str
    field: str
    value: Any
    detail: str = ""

    def __str__(self) -> str:
        if self.type == "FieldValueRequired":
            return f"{self.field}: Required value"
        if self.type == "FieldValueForbidden":
            return f"{self.field}: Forbidden: {self.detail}"
        if self.type == "InternalError":
            return f"{self.field}: Internal error: {self.detail}"
        return f"{self.field}: Invalid value: {self.value!r}: {self.detail}"

    def to_cause(self) -> dict:
        return {"reason": self.type, "message": str(self), "field": self.field}


def field_invalid(field: str, value: Any, detail: str) -> FieldError:
    return FieldError("FieldValueInvalid", field, value, detail)


def field_required(field: str, detail: str = "") -> FieldError:
    return FieldError("FieldValueRequired", field, None, detail)


def field_forbidden(field: str, detail: str) -> FieldError:
    return FieldError("FieldValueForbidden", field, None, detail)


def field_internal(field: str, detail: str) -> FieldError:
    return FieldError("InternalError", field, None, detail)


class AdmissionInvalidError(SubnetControlPlaneError):
    """Aggregated field violations for one admission request"""
    error_code = "INVALID"
    status_code = 422

    def __init__(self, kind: str, name: str, errors: List[FieldError]):
        self.kind = kind
        self.name = name
        self.errors = list(errors)
        aggregate = ", ".join(str(e) for e in self.errors)
        if len(self.errors) > 1:
            aggregate = f"[{aggregate}]"
        super().__init__(
            f"{kind} \"{name}\" is invalid: {aggregate}",
            {"causes": [e.to_cause() for e in self.errors]},
        )


class AdmissionForbiddenError(SubnetControlPlaneError):
    """The requested transition is never allowed"""
    error_code = "FORBIDDEN"
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, reason: str):
        super().__init__(f"forbidden: {reason}")
        self.reason = reason
