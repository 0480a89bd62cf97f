# control-plane/schemas/admission.py
"""
admission.k8s.io/v1 AdmissionReview schemas
"""

from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List, Dict, Any


class GroupVersionKind(BaseModel):
    group: str = ""
    version: str = ""
    kind: str = ""


class AdmissionRequest(BaseModel):
    """Request half of an AdmissionReview sent by the API server"""
    uid: str
    kind: Optional[GroupVersionKind] = None
    name: Optional[str] = None
    namespace: Optional[str] = None
    operation: str = Field(..., examples=["CREATE", "UPDATE", "DELETE"])
    user_info: Optional[Dict[str, Any]] = Field(None, alias="userInfo")
    object: Optional[Dict[str, Any]] = None
    old_object: Optional[Dict[str, Any]] = Field(None, alias="oldObject")
    dry_run: Optional[bool] = Field(None, alias="dryRun")

    model_config = ConfigDict(populate_by_name=True)


class StatusCause(BaseModel):
    reason: str
    message: str
    field: str


class StatusDetails(BaseModel):
    name: Optional[str] = None
    group: Optional[str] = None
    kind: Optional[str] = None
    causes: List[StatusCause] = Field(default_factory=list)


class Status(BaseModel):
    """metav1.Status returned with a denial"""
    code: int
    message: str
    reason: Optional[str] = None
    details: Optional[StatusDetails] = None


class AdmissionResponse(BaseModel):
    uid: str
    allowed: bool
    status: Optional[Status] = None
    patch: Optional[str] = Field(None, description="Base64 encoded JSON patch")
    patch_type: Optional[str] = Field(None, alias="patchType")
    warnings: Optional[List[str]] = None

    model_config = ConfigDict(populate_by_name=True)


class AdmissionReview(BaseModel):
    api_version: str = Field("admission.k8s.io/v1", alias="apiVersion")
    kind: str = "AdmissionReview"
    request: Optional[AdmissionRequest] = None
    response: Optional[AdmissionResponse] = None

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "apiVersion": "admission.k8s.io/v1",
                "kind": "AdmissionReview",
                "request": {
                    "uid": "705ab4f5-6393-11e8-b7cc-42010a800002",
                    "kind": {"group": "spiderpool.spidernet.io", "version": "v1", "kind": "SpiderSubnet"},
                    "name": "default-v4-subnet",
                    "operation": "CREATE",
                    "object": {
                        "apiVersion": "spiderpool.spidernet.io/v1",
                        "kind": "SpiderSubnet",
                        "metadata": {"name": "default-v4-subnet"},
                        "spec": {"subnet": "10.6.0.0/16", "ips": ["10.6.0.10-10.6.0.100"]}
                    }
                }
            }
        }
    )
