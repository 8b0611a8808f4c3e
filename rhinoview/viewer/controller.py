"""Viewer controller: owns the viewer state and sequences evaluations.

Every slider change bumps a monotonic generation counter. Results are only
committed to the scene while their generation is still the latest one (for
the latest-wins policy), so a slow, stale response can never overwrite a newer
result.
"""

import asyncio
import logging

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Mapping

from omegaconf import DictConfig

from rhinoview.compute.client import ComputeClient
from rhinoview.compute.parameters import ParameterCollector
from rhinoview.errors import (
    ComputeRequestError,
    NoGeometryDecodedError,
    ServiceUnavailableError,
)
from rhinoview.geometry.kernel import GeometryKernel

from .camera import OrbitControls, PerspectiveCamera
from .config import OverlapPolicy, ViewerConfig
from .export import save_export
from .materializer import MaterializeResult, ResultMaterializer
from .scene import Scene, default_scene

console_logger = logging.getLogger(__name__)


@dataclass
class ViewerState:
    """All mutable viewer state, held by a single controller."""

    scene: Scene
    camera: PerspectiveCamera
    controls: OrbitControls
    slider_values: dict[str, float] = field(default_factory=dict)

    loading: bool = False
    """True while the latest evaluation is in flight (spinner shown)."""

    download_enabled: bool = False
    """True once a result has been shown."""

    generation: int = 0
    """Id of the latest triggered evaluation."""

    last_error: str | None = None
    """User-facing message of the latest failure, cleared on success."""

    last_result: MaterializeResult | None = None


class ViewerController:
    """Wires slider changes to evaluation and materialization."""

    def __init__(
        self,
        state: ViewerState,
        client: ComputeClient,
        collector: ParameterCollector,
        materializer: ResultMaterializer,
        overlap_policy: OverlapPolicy = OverlapPolicy.LATEST_WINS,
        export_dir: Path = Path("exports"),
    ):
        self.state = state
        self.client = client
        self.collector = collector
        self.materializer = materializer
        self.overlap_policy = OverlapPolicy(overlap_policy)
        self.export_dir = Path(export_dir)
        self._lock = asyncio.Lock()
        self._in_flight: asyncio.Task | None = None

        if not self.state.slider_values:
            self.state.slider_values = collector.defaults()

    def _is_current(self, generation: int) -> bool:
        return generation == self.state.generation

    async def on_slider_change(
        self, values: Mapping[str, float] | None = None
    ) -> MaterializeResult | None:
        """Evaluate the definition with updated slider values and show the result.

        Args:
            values: Changed slider values, merged into the current ones.

        Returns:
            The materialization result, or None if the evaluation failed, was
            superseded by a newer one, or produced no geometry.
        """
        if values:
            self.state.slider_values.update(values)
        self.state.generation += 1
        generation = self.state.generation
        snapshot = dict(self.state.slider_values)
        self.state.loading = True

        if self.overlap_policy == OverlapPolicy.SERIALIZE:
            async with self._lock:
                return await self._evaluate(generation, snapshot)

        if self._in_flight is not None and not self._in_flight.done():
            console_logger.debug("Cancelling in-flight evaluation")
            self._in_flight.cancel()

        task = asyncio.create_task(self._evaluate(generation, snapshot))
        self._in_flight = task
        await asyncio.wait([task])
        if task.cancelled():
            return None
        return task.result()

    async def _evaluate(
        self, generation: int, slider_values: dict[str, float]
    ) -> MaterializeResult | None:
        latest_wins = self.overlap_policy == OverlapPolicy.LATEST_WINS
        try:
            request = self.collector.build_request(slider_values)
            response = await asyncio.to_thread(self.client.evaluate_definition, request)

            if latest_wins and not self._is_current(generation):
                console_logger.info(f"Dropping stale response {generation}")
                return None

            result = await self.materializer.materialize(
                response,
                should_commit=(lambda: self._is_current(generation))
                if latest_wins
                else None,
            )
            if result.committed:
                self.state.last_result = result
                self.state.last_error = None
                self.state.download_enabled = True
            return result

        except ServiceUnavailableError as e:
            console_logger.error(f"Compute service unavailable: {e}")
            self.state.last_error = f"Compute service unavailable: {e}"
            return None

        except ComputeRequestError as e:
            console_logger.error(f"Compute request failed: {e}")
            self.state.last_error = f"Compute request failed: {e}"
            return None

        except NoGeometryDecodedError as e:
            self.state.last_error = f"No geometry to display: {e}"
            return None

        finally:
            if self._is_current(generation):
                self.state.loading = False

    def export(self, fmt: str, filename: str | None = None) -> Path:
        """Write the shown result to the export directory as STL or 3dm.

        Both formats are taken from the committed result only: the scene for
        STL and the serialized model the scene was imported from for 3dm.

        Raises:
            ValueError: If the format is unknown or the shown result has nothing
                to export in it.
        """
        last_result = self.state.last_result
        return save_export(
            fmt,
            scene=self.state.scene,
            model=last_result.model if last_result is not None else None,
            output_dir=self.export_dir,
            filename=filename,
        )

    def export_all(self, formats: Iterable[str]) -> list[Path]:
        """Export the shown result in every format it supports.

        A format the result cannot be written in, such as STL for a result
        with only points and curves, is logged and skipped.

        Returns:
            Paths of the written files.
        """
        paths = []
        for fmt in formats:
            try:
                paths.append(self.export(fmt))
            except ValueError as e:
                console_logger.warning(f"Skipping {fmt} export: {e}")
        return paths

    @classmethod
    def from_config(
        cls, cfg: DictConfig, client: ComputeClient, kernel: GeometryKernel
    ) -> "ViewerController":
        """Build a controller with a fresh default scene from the full config.

        The definition is loaded once, here.
        """
        viewer_config = ViewerConfig.from_config(cfg.viewer)
        definition = client.load_definition(cfg.definition)
        collector = ParameterCollector.from_config(cfg.parameters, definition)

        scene = default_scene()
        camera = PerspectiveCamera(fov=viewer_config.fov)
        controls = OrbitControls()
        materializer = ResultMaterializer(
            scene=scene,
            camera=camera,
            controls=controls,
            kernel=kernel,
            wireframe=viewer_config.wireframe,
            fit_offset=viewer_config.fit_offset,
            min_extent=viewer_config.min_extent,
        )
        state = ViewerState(scene=scene, camera=camera, controls=controls)
        return cls(
            state=state,
            client=client,
            collector=collector,
            materializer=materializer,
            overlap_policy=viewer_config.overlap_policy,
            export_dir=viewer_config.export_dir,
        )
