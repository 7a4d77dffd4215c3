"""Main module entrypoint for local runtime execution.

This module validates startup configuration and launches either the HTTP
status surface or a one-shot Docker status check.
"""

import argparse
import asyncio
import logging

import uvicorn

from control_panel.bootstrap import (
    bootstrap_create_application,
    bootstrap_create_backend,
    bootstrap_create_reconciler,
)
from control_panel.config import AppSettings, config_load_settings
from control_panel.domain import ServicePhase, docker_status_tooltip


def main() -> None:
    """Run selected runtime command with validated startup configuration.

    Returns:
        None: This function does not return a runtime value.

    Raises:
        SettingsLoadError: Raised when configuration validation fails.
    """

    argument_parser = argparse.ArgumentParser(description="Control panel status core entrypoint")
    argument_parser.add_argument(
        "command",
        nargs="?",
        default="api",
        choices=("api", "docker-status"),
        help="Runtime command: `api` starts the status server, `docker-status` prints one reconciled status",
        type=str,
    )
    parsed_arguments = argument_parser.parse_args()

    settings = config_load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if parsed_arguments.command == "docker-status":
        phase = asyncio.run(main_print_docker_status(settings))
        if phase in (ServicePhase.ERRORED, ServicePhase.NOT_RUNNING):
            raise SystemExit(1)
        return

    application = bootstrap_create_application(settings)
    uvicorn.run(
        application,
        host=settings.application_host,
        port=settings.application_port,
    )


async def main_print_docker_status(settings: AppSettings) -> ServicePhase:
    """Run one bootstrap reconciliation and print its tooltip text.

    Args:
        settings: Validated runtime settings.

    Returns:
        ServicePhase: Phase after the bootstrap fetch.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    async with bootstrap_create_backend(settings) as backend:
        async with bootstrap_create_reconciler(settings, backend) as reconciler:
            await reconciler.sync_wait_idle()
            snapshot = reconciler.sync_snapshot()
    print(docker_status_tooltip(snapshot))
    return snapshot.phase


if __name__ == "__main__":
    main()
