"""Dataclasses for the Rhino.Compute Grasshopper API contract.

This module contains serializable Data Transfer Objects (DTOs) used for
communication with the compute service. They mirror the JSON shape of the
`/grasshopper` endpoint and use primitive types for JSON serialization.
"""

import base64
import json

from dataclasses import dataclass, field
from typing import Any

STRING_TYPE_TAG = "System.String"
"""Type tag the service uses for strings, including Draco-compressed meshes."""


def branch_key(path: list[int]) -> str:
    """Format a branch index path as a data tree key, e.g. [0, 1] -> "{0;1}"."""
    return "{" + ";".join(str(index) for index in path) + "}"


@dataclass(frozen=True)
class ParameterValue:
    """A named scalar collected from a UI control."""

    name: str
    """Grasshopper input name the value binds to."""

    value: float
    """Current numeric value of the control."""


@dataclass
class DataTree:
    """Named parameter carrier structured as branch path -> ordered values.

    Example:
        >>> tree = DataTree("Height")
        >>> tree.append([0], [50.0])
        >>> tree.to_dict()
        {'ParamName': 'Height', 'InnerTree': {'{0}': [{'data': '50.0'}]}}
    """

    name: str
    """Name of the Grasshopper input this tree feeds."""

    branches: dict[str, list[Any]] = field(default_factory=dict)
    """Branch key -> values, in insertion order."""

    def append(self, path: list[int], items: list[Any]) -> None:
        """Append values to the branch at the given index path.

        Args:
            path: Branch index path, e.g. [0] for the "{0}" branch.
            items: Values to append. Must be JSON serializable.
        """
        self.branches.setdefault(branch_key(path), []).extend(items)

    def to_dict(self) -> dict:
        """Convert to the wire representation expected by the service."""
        return {
            "ParamName": self.name,
            "InnerTree": {
                key: [{"data": json.dumps(value)} for value in values]
                for key, values in self.branches.items()
            },
        }


@dataclass
class EvaluationRequest:
    """Request payload for a Grasshopper definition evaluation."""

    definition: bytes | str
    """Definition contents (sent base64 encoded as `algo`) or a URL (sent as
    `pointer`)."""

    trees: list[DataTree]
    """Input trees, in the order the definition expects."""

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization.

        Returns:
            Dictionary representation suitable for HTTP requests.
        """
        if isinstance(self.definition, bytes):
            algo = base64.b64encode(self.definition).decode("ascii")
            pointer = None
        else:
            algo = None
            pointer = self.definition
        return {
            "algo": algo,
            "pointer": pointer,
            "values": [tree.to_dict() for tree in self.trees],
        }

    def to_json(self) -> str:
        """Convert to JSON string for HTTP request body."""
        return json.dumps(self.to_dict())


@dataclass(frozen=True)
class Item:
    """A single leaf value of an output data tree."""

    type: str
    """Type tag assigned by the service (e.g. "System.String")."""

    data: str
    """JSON-encoded payload, possibly a Draco base64 string or an encoded
    rhino3dm object."""

    @classmethod
    def from_dict(cls, data: dict) -> "Item":
        payload = data.get("data", "null")
        if not isinstance(payload, str):
            payload = json.dumps(payload)
        return cls(type=data.get("type", ""), data=payload)


@dataclass
class Output:
    """One output parameter (RH_OUT:*) of an evaluation response."""

    param_name: str
    """Name of the output parameter."""

    inner_tree: dict[str, list[Item]]
    """Branch key -> items. Iteration order is the order the service sent."""

    @classmethod
    def from_dict(cls, data: dict) -> "Output":
        inner_tree = {
            path: [Item.from_dict(item) for item in items]
            for path, items in (data.get("InnerTree") or {}).items()
        }
        return cls(param_name=data.get("ParamName", ""), inner_tree=inner_tree)


@dataclass
class EvaluationResponse:
    """Response payload of a Grasshopper definition evaluation."""

    outputs: list[Output]
    """Outputs in the order the service returned them."""

    errors: list[str] = field(default_factory=list)
    """Errors reported by the definition (the request itself succeeded)."""

    warnings: list[str] = field(default_factory=list)
    """Warnings reported by the definition."""

    raw: dict = field(default_factory=dict, repr=False, compare=False)
    """The decoded JSON body, kept for proxying."""

    @classmethod
    def from_dict(cls, data: dict) -> "EvaluationResponse":
        """Build a response from the decoded JSON body.

        Raises:
            ValueError: If the body has no `values` list.
        """
        values = data.get("values")
        if not isinstance(values, list):
            raise ValueError("Response has no 'values' list")
        return cls(
            outputs=[Output.from_dict(value) for value in values],
            errors=list(data.get("errors") or []),
            warnings=list(data.get("warnings") or []),
            raw=data,
        )
