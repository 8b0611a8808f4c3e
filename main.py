"""
Main file for the project. Evaluates the configured definition and exports the
result, or runs the compute proxy server.

Examples:
    python main.py +name=demo parameters.0.default=60
    python main.py +name=demo 'tasks=[serve]'
"""

import asyncio
import logging
import time

from datetime import timedelta
from pathlib import Path

import hydra

from omegaconf import DictConfig, OmegaConf

from rhinoview.compute.auth import ComputeConfig
from rhinoview.compute.client import ComputeClient
from rhinoview.compute.parameters import ParameterCollector
from rhinoview.geometry.kernel import RhinoGeometryKernel
from rhinoview.server.server_app import ComputeProxyApp
from rhinoview.server.server_manager import ComputeProxyServer
from rhinoview.utils.logging import FileLoggingContext, setup_logging
from rhinoview.viewer.controller import ViewerController

console_logger = logging.getLogger(__name__)

TASKS = ("view", "serve")


def run_view(cfg: DictConfig, client: ComputeClient) -> None:
    """Evaluate once per slider step, then export the final result."""
    kernel = RhinoGeometryKernel(curve_segments=cfg.viewer.curve_segments)
    controller = ViewerController.from_config(cfg, client=client, kernel=kernel)

    async def run_steps() -> None:
        steps = cfg.get("slider_steps") or [{}]
        for step in steps:
            result = await controller.on_slider_change(dict(step))
            if result is None:
                console_logger.warning(
                    f"No result for {controller.state.slider_values}: "
                    f"{controller.state.last_error}"
                )
            else:
                console_logger.info(
                    f"Showing {result.object_count} objects, camera at "
                    f"{controller.state.camera.position.round(3).tolist()}"
                )

    asyncio.run(run_steps())

    if controller.state.download_enabled:
        controller.export_all(cfg.viewer.export_formats)


def run_serve(cfg: DictConfig, client: ComputeClient) -> None:
    """Serve static files and the /compute proxy until interrupted."""
    definition = client.load_definition(cfg.server.definition)
    query_params = dict(cfg.server.query_params)
    collector = ParameterCollector.from_config(cfg.server.parameters, definition)
    app = ComputeProxyApp(
        client=client,
        collector=collector,
        query_params=query_params,
        static_dir=cfg.server.static_dir,
    )
    with ComputeProxyServer(app, host=cfg.server.host, port=cfg.server.port) as server:
        console_logger.info("Press Ctrl+C to stop the server")
        try:
            while server.is_running():
                time.sleep(1)
        except KeyboardInterrupt:
            console_logger.info("Keyboard interrupt received")


def run_local(cfg: DictConfig) -> None:
    start_time = time.time()

    hydra_cfg = hydra.core.hydra_config.HydraConfig.get()
    output_dir = Path(hydra_cfg.runtime.output_dir)

    # Set up run-level logging to file while preserving stdout.
    with FileLoggingContext(log_file_path=output_dir / "run.log", suppress_stdout=False):
        console_logger.info(f"Outputs will be saved to: {output_dir}")
        console_logger.info("Resolved configuration:\n" + OmegaConf.to_yaml(cfg))

        compute_config = ComputeConfig.from_config(cfg.compute)
        client = ComputeClient(
            url=compute_config.url,
            api_key=compute_config.api_key,
            timeout_s=compute_config.timeout_s,
            max_retries=compute_config.max_retries,
        )
        if not client.health_check():
            console_logger.warning(f"Compute server at {client.base_url} is not healthy")

        for task in cfg.tasks:
            if task not in TASKS:
                raise ValueError(f"Unknown task {task}, expected one of {TASKS}")
            console_logger.info(f"Executing task: {task}")
            if task == "view":
                run_view(cfg, client)
            else:
                run_serve(cfg, client)
            console_logger.info(f"Completed task: {task}")

        console_logger.info(
            f"Run completed in {timedelta(seconds=time.time() - start_time)}"
        )


@hydra.main(version_base=None, config_path="configurations", config_name="config")
def run(cfg: DictConfig):
    if "name" not in cfg:
        raise ValueError(
            "Must specify a name for the run with command line argument '+name=[name]'"
        )

    # Configure logging level from LOGLEVEL environment variable.
    setup_logging()
    run_local(cfg)


if __name__ == "__main__":
    run()
