"""Parameter collection: turns current slider values into input data trees."""

import logging

from dataclasses import dataclass
from typing import Mapping

from omegaconf import DictConfig, ListConfig

from .dataclasses import DataTree, EvaluationRequest, ParameterValue

console_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParameterSpec:
    """Description of one slider. Ranges are informational and never enforced."""

    name: str
    """Grasshopper input name."""

    default: float
    """Initial slider value."""

    minimum: float | None = None
    maximum: float | None = None
    step: float | None = None

    @classmethod
    def from_config(cls, cfg: DictConfig) -> "ParameterSpec":
        return cls(
            name=cfg.name,
            default=float(cfg.default),
            minimum=cfg.get("minimum"),
            maximum=cfg.get("maximum"),
            step=cfg.get("step"),
        )


class ParameterCollector:
    """Packages slider values as single-branch trees in a fixed order.

    The order of `parameters` must match the order the definition expects.
    A wrong order silently binds values to the wrong inputs; this collector
    does not try to detect that.
    """

    def __init__(self, parameters: list[ParameterSpec], definition: bytes | str):
        """
        Args:
            parameters: Slider descriptions, in definition input order.
            definition: Definition contents or URL to evaluate.
        """
        if not parameters:
            raise ValueError("At least one parameter must be configured")
        self.parameters = list(parameters)
        self.definition = definition

    @classmethod
    def from_config(
        cls, cfg: ListConfig, definition: bytes | str
    ) -> "ParameterCollector":
        return cls(
            parameters=[ParameterSpec.from_config(item) for item in cfg],
            definition=definition,
        )

    @property
    def names(self) -> list[str]:
        return [spec.name for spec in self.parameters]

    def defaults(self) -> dict[str, float]:
        """Slider values before the user touches anything."""
        return {spec.name: spec.default for spec in self.parameters}

    def collect(self, slider_values: Mapping[str, float]) -> list[ParameterValue]:
        """Snapshot the configured sliders as immutable parameter values.

        Raises:
            ValueError: If a configured parameter has no value or the value is
                not numeric.
        """
        missing = [name for name in self.names if name not in slider_values]
        if missing:
            raise ValueError(f"Missing values for parameters: {', '.join(missing)}")

        values = []
        for name in self.names:
            try:
                values.append(ParameterValue(name=name, value=float(slider_values[name])))
            except (TypeError, ValueError) as e:
                raise ValueError(
                    f"Parameter {name} is not numeric: {slider_values[name]!r}"
                ) from e
        return values

    def build_request(self, slider_values: Mapping[str, float]) -> EvaluationRequest:
        """Build an evaluation request from the current slider values.

        Each value is wrapped in its own tree under branch {0}. Extra keys in
        `slider_values` are ignored.

        Args:
            slider_values: Parameter name -> current value.

        Returns:
            Request with one tree per configured parameter, in configured order.
        """
        trees = []
        for parameter in self.collect(slider_values):
            tree = DataTree(parameter.name)
            tree.append([0], [parameter.value])
            trees.append(tree)

        console_logger.debug(
            "Built request: "
            + ", ".join(f"{tree.name}={tree.branches['{0}'][0]}" for tree in trees)
        )
        return EvaluationRequest(definition=self.definition, trees=trees)
