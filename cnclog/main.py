"""Main module entrypoint for local runtime execution.

This module validates startup configuration and launches the FastAPI service
or runs the overtime sweep once.
"""

import argparse
import logging

import uvicorn

from cnclog.bootstrap import bootstrap_create_application, bootstrap_create_overtime_sweep_orchestrator
from cnclog.config import config_load_settings

logger = logging.getLogger(__name__)


def main() -> None:
    """Run selected runtime command with validated startup configuration.

    Returns:
        None: This function does not return a runtime value.

    Raises:
        SettingsLoadError: Raised when configuration validation fails.
    """

    argument_parser = argparse.ArgumentParser(description="CNC job log runtime entrypoint")
    argument_parser.add_argument(
        "command",
        nargs="?",
        default="api",
        choices=("api", "ot-sweep"),
        help="Runtime command: `api` starts server, `ot-sweep` closes overtime left open past the daily cutoff",
        type=str,
    )
    parsed_arguments = argument_parser.parse_args()

    settings = config_load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    if parsed_arguments.command == "ot-sweep":
        sweep_orchestrator = bootstrap_create_overtime_sweep_orchestrator()
        execution_result = sweep_orchestrator.job_execute(job_name="ot_sweep")
        print(
            f"OT_SWEEP status={execution_result.status} scanned={execution_result.scanned_row_count} "
            f"changed={execution_result.changed_row_count} failed={execution_result.failed_row_count}"
        )
        if execution_result.status != "success":
            raise SystemExit(1)
        return

    application = bootstrap_create_application()
    logger.info("starting api on %s:%s", settings.application_host, settings.application_port)
    uvicorn.run(
        application,
        host=settings.application_host,
        port=settings.application_port,
    )


if __name__ == "__main__":
    main()
