# control-plane/api/v1/webhook.py
"""
SpiderSubnet Admission Webhook Endpoints
AdmissionReview (admission.k8s.io/v1) in, AdmissionReview out
"""

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import ValidationError
from sqlalchemy.orm import Session
from typing import Any, Dict, List, Optional
import base64
import json
import logging

from database.session import get_db
from database.models import AdmissionOperation
from schemas.admission import (
    AdmissionRequest,
    AdmissionResponse,
    AdmissionReview,
    Status,
    StatusCause,
    StatusDetails,
)
from schemas.subnet import SpiderSubnet
from core.audit import record_admission
from core.constants import SPIDERPOOL_API_GROUP
from core.exceptions import AdmissionForbiddenError, AdmissionInvalidError
from core.logutils import request_logger
from core.subnet_webhook import SubnetWebhook
from api.deps import get_subnet_webhook

logger = logging.getLogger(__name__)

router = APIRouter()

MUTATE_PATH = "/mutate-spiderpool-spidernet-io-v1-spidersubnet"
VALIDATE_PATH = "/validate-spiderpool-spidernet-io-v1-spidersubnet"

JSON_PATCH = "JSONPatch"


# === Helpers ===

def _require_request(review: AdmissionReview) -> AdmissionRequest:
    if review.request is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "AdmissionReview carries no request",
                "error_code": "BAD_ADMISSION_REVIEW"
            }
        )
    return review.request


def _resource_name(request: AdmissionRequest) -> str:
    if request.name:
        return request.name
    obj = request.object or request.old_object or {}
    return obj.get("metadata", {}).get("name", "")


def _username(request: AdmissionRequest) -> Optional[str]:
    if not request.user_info:
        return None
    return request.user_info.get("username")


def _review(response: AdmissionResponse) -> AdmissionReview:
    return AdmissionReview(response=response)


def _deny(uid: str, code: int, reason: str, message: str,
          details: Optional[StatusDetails] = None) -> AdmissionResponse:
    return AdmissionResponse(
        uid=uid,
        allowed=False,
        status=Status(code=code, message=message, reason=reason, details=details)
    )


def _bad_request(uid: str, error: ValidationError) -> AdmissionResponse:
    return _deny(
        uid,
        status.HTTP_400_BAD_REQUEST,
        "BadRequest",
        f"failed to decode SpiderSubnet: {error}"
    )


def _invalid(uid: str, error: AdmissionInvalidError) -> AdmissionResponse:
    causes = [StatusCause(**cause) for cause in error.details.get("causes", [])]
    return _deny(
        uid,
        error.status_code,
        "Invalid",
        error.message,
        StatusDetails(name=error.name, group=SPIDERPOOL_API_GROUP, kind=error.kind, causes=causes)
    )


def _forbidden(uid: str, error: AdmissionForbiddenError) -> AdmissionResponse:
    return _deny(uid, error.status_code, "Forbidden", error.message)


def _audit(db: Session, operation: str, request: AdmissionRequest, response: AdmissionResponse,
           details: Optional[dict] = None) -> None:
    reason = message = None
    if response.status is not None:
        reason = response.status.reason
        message = response.status.message
        if response.status.details is not None:
            details = response.status.details.model_dump(exclude_none=True)

    record_admission(
        db,
        operation=operation,
        resource_name=_resource_name(request),
        allowed=response.allowed,
        request_uid=request.uid,
        username=_username(request),
        reason=reason,
        message=message,
        details=details
    )


def build_subnet_patch(raw: Dict[str, Any], original: SpiderSubnet, mutated: SpiderSubnet) -> List[dict]:
    """
    JSON patch turning the submitted object into the defaulted one

    Only the fields defaulting touches are compared. The op is 'replace'
    when the submitted object already carries the key, 'add' otherwise.
    """
    ops: List[dict] = []

    raw_metadata = raw.get("metadata") or {}
    if mutated.metadata.finalizers != original.metadata.finalizers:
        ops.append({
            "op": "replace" if "finalizers" in raw_metadata else "add",
            "path": "/metadata/finalizers",
            "value": mutated.metadata.finalizers,
        })

    raw_spec = raw.get("spec") or {}
    for key, before, after in (
        ("ipVersion", original.spec.ip_version, mutated.spec.ip_version),
        ("ips", original.spec.ips, mutated.spec.ips),
        ("excludeIPs", original.spec.exclude_ips, mutated.spec.exclude_ips),
    ):
        if before != after:
            ops.append({
                "op": "replace" if key in raw_spec else "add",
                "path": f"/spec/{key}",
                "value": after,
            })

    return ops


# === Mutating ===

@router.post(
    MUTATE_PATH,
    response_model=AdmissionReview,
    response_model_exclude_none=True,
    summary="Default a SpiderSubnet",
    description="""
    Mutating admission hook for SpiderSubnet.

    Adds the spiderpool finalizer, infers `spec.ipVersion` from `spec.subnet`
    and merges `spec.ips` / `spec.excludeIPs`. Never denies a decodable
    object; anything it cannot fix is left for the validating hook.
    """
)
def mutate_subnet(
    review: AdmissionReview,
    webhook: SubnetWebhook = Depends(get_subnet_webhook),
    db: Session = Depends(get_db)
):
    """Mutating hook"""
    request = _require_request(review)
    log = request_logger(
        "subnet-webhook.mutating",
        SubnetName=_resource_name(request),
        Operation=AdmissionOperation.DEFAULT.value
    )

    raw = request.object or {}
    try:
        subnet = SpiderSubnet.model_validate(raw)
    except ValidationError as e:
        log.error(f"Failed to decode Subnet: {e}")
        response = _bad_request(request.uid, e)
        _audit(db, AdmissionOperation.DEFAULT.value, request, response)
        return _review(response)

    mutated = webhook.default(subnet, log)
    ops = build_subnet_patch(raw, subnet, mutated)

    response = AdmissionResponse(uid=request.uid, allowed=True)
    if ops:
        response.patch = base64.b64encode(json.dumps(ops).encode()).decode()
        response.patch_type = JSON_PATCH
        log.debug(f"Patch Subnet with {ops}")

    _audit(db, AdmissionOperation.DEFAULT.value, request, response,
           details={"patch": ops} if ops else None)
    return _review(response)


# === Validating ===

@router.post(
    VALIDATE_PATH,
    response_model=AdmissionReview,
    response_model_exclude_none=True,
    summary="Validate a SpiderSubnet",
    description="""
    Validating admission hook for SpiderSubnet.

    - **CREATE**: structural checks plus CIDR overlap against existing subnets
    - **UPDATE**: immutability of `ipVersion`/`subnet`, structural checks, and
      no IPs still held by a controlled IPPool may drop out of the subnet
    - **DELETE**: always allowed, the finalizer holds the object until its
      pools are reclaimed

    Denials carry every violation of the request in `status.details.causes`.
    """
)
def validate_subnet(
    review: AdmissionReview,
    webhook: SubnetWebhook = Depends(get_subnet_webhook),
    db: Session = Depends(get_db)
):
    """Validating hook"""
    request = _require_request(review)
    operation = request.operation
    log = request_logger(
        "subnet-webhook.validating",
        SubnetName=_resource_name(request),
        Operation=operation
    )

    try:
        if operation == AdmissionOperation.CREATE.value:
            webhook.validate_create(SpiderSubnet.model_validate(request.object or {}), log)
        elif operation == AdmissionOperation.UPDATE.value:
            old_subnet = SpiderSubnet.model_validate(request.old_object or {})
            new_subnet = SpiderSubnet.model_validate(request.object or {})
            webhook.validate_update(old_subnet, new_subnet, log)
        elif operation == AdmissionOperation.DELETE.value:
            if request.old_object is not None:
                webhook.validate_delete(SpiderSubnet.model_validate(request.old_object), log)
        else:
            log.debug(f"Skip unhandled operation '{operation}'")
    except ValidationError as e:
        log.error(f"Failed to decode Subnet: {e}")
        response = _bad_request(request.uid, e)
    except AdmissionInvalidError as e:
        response = _invalid(request.uid, e)
    except AdmissionForbiddenError as e:
        log.warning(f"Denied Subnet {operation.lower()}: {e.message}")
        response = _forbidden(request.uid, e)
    else:
        response = AdmissionResponse(uid=request.uid, allowed=True)

    _audit(db, operation, request, response)
    return _review(response)
