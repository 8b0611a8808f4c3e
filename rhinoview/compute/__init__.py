"""Rhino.Compute client components.

Usage:
    from rhinoview.compute import ComputeClient, ParameterCollector, ParameterSpec

    client = ComputeClient(url="http://localhost:6500/")
    definition = client.load_definition("BranchNodeRnd.gh")
    collector = ParameterCollector(
        [ParameterSpec("Height", 50), ParameterSpec("Radius", 10)], definition
    )
    response = client.evaluate_definition(
        collector.build_request({"Height": 60, "Radius": 12})
    )
"""

from .auth import ComputeConfig, CredentialStore, resolve_credential
from .client import ComputeClient
from .dataclasses import (
    DataTree,
    EvaluationRequest,
    EvaluationResponse,
    Item,
    Output,
    ParameterValue,
)
from .parameters import ParameterCollector, ParameterSpec

__all__ = [
    "ComputeClient",
    "ComputeConfig",
    "CredentialStore",
    "DataTree",
    "EvaluationRequest",
    "EvaluationResponse",
    "Item",
    "Output",
    "ParameterCollector",
    "ParameterSpec",
    "ParameterValue",
    "resolve_credential",
]
