# src/vpa_metrics/models/vpa.py
"""
This module defines the Pydantic data models describing VerticalPodAutoscaler
objects as seen by the recommender: their identity, update mode, pod selector
and the per-container recommendations that have already been computed.
The metrics code only ever reads these models.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..core.exceptions import InvalidVpaObjectError
from .quantity import Quantity


class UpdateMode(str, Enum):
    """Enumeration of the update modes a VPA object may declare."""

    OFF = "Off"
    INITIAL = "Initial"
    RECREATE = "Recreate"
    AUTO = "Auto"


KNOWN_UPDATE_MODES = tuple(mode.value for mode in UpdateMode)


class VpaID(BaseModel):
    """Identifies a VPA object within the cluster."""

    model_config = ConfigDict(frozen=True)

    namespace: str = Field(..., description="The namespace the VPA object belongs to.")
    vpa_name: str = Field(..., description="The name of the VPA object.")


class Resources(BaseModel):
    """CPU and memory amounts of a single recommendation band."""

    cpu: Quantity = Field(default_factory=Quantity, description="CPU amount, in cores.")
    memory: Quantity = Field(default_factory=Quantity, description="Memory amount, in bytes.")


class RecommendedContainerResources(BaseModel):
    """The recommendation computed for one container."""

    model_config = ConfigDict(populate_by_name=True)

    container_name: str = Field(..., alias="containerName")
    target: Resources = Field(default_factory=Resources)
    lower_bound: Resources = Field(default_factory=Resources, alias="lowerBound")
    upper_bound: Resources = Field(default_factory=Resources, alias="upperBound")
    uncapped_target: Optional[Resources] = Field(None, alias="uncappedTarget")


class RecommendedPodResources(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    container_recommendations: List[RecommendedContainerResources] = Field(
        default_factory=list, alias="containerRecommendations"
    )


class SelectorOperator(str, Enum):
    IN = "In"
    NOT_IN = "NotIn"
    EXISTS = "Exists"
    DOES_NOT_EXIST = "DoesNotExist"


class LabelSelectorRequirement(BaseModel):
    key: str
    operator: SelectorOperator
    values: List[str] = Field(default_factory=list)

    def __str__(self) -> str:
        if self.operator == SelectorOperator.EXISTS:
            return self.key
        if self.operator == SelectorOperator.DOES_NOT_EXIST:
            return f"!{self.key}"
        op = "in" if self.operator == SelectorOperator.IN else "notin"
        return f"{self.key} {op} ({','.join(sorted(self.values))})"


class LabelSelector(BaseModel):
    """
    A Kubernetes label selector. Its string form follows the API server's
    rendering: one requirement per term, sorted by key, joined by commas.
    """

    model_config = ConfigDict(populate_by_name=True)

    match_labels: Dict[str, str] = Field(default_factory=dict, alias="matchLabels")
    match_expressions: List[LabelSelectorRequirement] = Field(default_factory=list, alias="matchExpressions")

    def __str__(self) -> str:
        terms = [(key, f"{key}={value}") for key, value in self.match_labels.items()]
        terms.extend((req.key, str(req)) for req in self.match_expressions)
        return ",".join(term for _, term in sorted(terms, key=lambda t: t[0]))


class Vpa(BaseModel):
    """
    A VPA object tracked by the recommender.
    """

    id: VpaID
    pod_selector: LabelSelector = Field(default_factory=LabelSelector)
    update_mode: Optional[str] = Field(
        None, description="Update mode declared by the object; None when the policy does not set one."
    )
    recommendation: Optional[RecommendedPodResources] = None
    created: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp of the VPA object.",
    )

    @field_validator("update_mode", mode="before")
    @classmethod
    def _mode_to_string(cls, value):
        if isinstance(value, UpdateMode):
            return value.value
        return value

    def has_recommendation(self) -> bool:
        return self.recommendation is not None and len(self.recommendation.container_recommendations) > 0

    def pod_selector_string(self) -> str:
        return str(self.pod_selector)

    @classmethod
    def from_custom_resource(cls, obj: Dict[str, Any], pod_selector: Optional[Dict[str, Any]] = None) -> "Vpa":
        """
        Builds a Vpa from a ``autoscaling.k8s.io`` VerticalPodAutoscaler manifest.

        The pod selector is not part of the manifest (the recommender resolves it
        from the target controller), so it is passed separately.

        Raises:
            InvalidVpaObjectError: If the manifest lacks identity fields or holds invalid values.
        """
        if not isinstance(obj, dict):
            raise InvalidVpaObjectError(f"Expected a mapping, got {type(obj).__name__}")

        metadata = obj.get("metadata") or {}
        spec = obj.get("spec") or {}
        status = obj.get("status") or {}
        name = metadata.get("name")
        if not name:
            raise InvalidVpaObjectError("VPA manifest has no metadata.name")

        data = {
            "id": {"namespace": metadata.get("namespace", "default"), "vpa_name": name},
            "pod_selector": pod_selector or {},
            "update_mode": (spec.get("updatePolicy") or {}).get("updateMode"),
            "recommendation": status.get("recommendation"),
        }
        if metadata.get("creationTimestamp"):
            data["created"] = metadata["creationTimestamp"]

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise InvalidVpaObjectError(f"Invalid VPA manifest '{name}': {e}") from e
