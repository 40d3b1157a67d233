"""Job command and open-job query router composition for floor terminals."""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Query, Request, status
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from cnclog.db import RowStorePersistenceError
from cnclog.jobs import (
    CORRUPT_SESSION_LOG_MESSAGE_TEMPLATE,
    INVALID_JSON_MESSAGE,
    PERSISTENCE_ERROR_MESSAGE_TEMPLATE,
    JobCommandError,
    JobCommandResult,
    JobLifecycleService,
    OpenJobStep,
    job_parse_command_payload,
)
from cnclog.ledger import CorruptSessionLogError

logger = logging.getLogger(__name__)


def api_create_jobs_router(job_service: JobLifecycleService) -> APIRouter:
    """Create router with the command endpoint and the open-jobs query.

    Command rejections are reported in a `{"status": "ERROR"}` envelope with
    HTTP 200 so terminals render the message instead of a transport error.

    Args:
        job_service: Job lifecycle service.

    Returns:
        APIRouter: Router exposing `/log` and `/open-jobs`.

    Raises:
        ValueError: Raised when job_service is invalid.
    """

    if job_service is None:
        raise ValueError("job_service must not be None")

    router = APIRouter(tags=["jobs"])

    @router.post("/log")
    async def api_job_command(request: Request) -> JSONResponse:
        """Execute one terminal job command.

        Args:
            request: Raw request carrying the JSON command payload.

        Returns:
            JSONResponse: `OK` envelope, or `ERROR` envelope with a localized message.

        Raises:
            RuntimeError: Unexpected failures propagate to the framework.
        """

        raw_body = await request.body()
        try:
            payload = json.loads(raw_body or b"null")
        except (json.JSONDecodeError, UnicodeDecodeError):
            return api_job_error_response(INVALID_JSON_MESSAGE)
        if not isinstance(payload, dict):
            return api_job_error_response(INVALID_JSON_MESSAGE)

        try:
            command_request = job_parse_command_payload(payload)
            result = await run_in_threadpool(job_service.job_dispatch, command_request)
        except JobCommandError as error:
            logger.info("job command rejected: %s", error.error_code)
            return api_job_error_response(str(error), error_code=error.error_code)
        except CorruptSessionLogError as error:
            logger.warning("job command hit unreadable %s session log", error.kind)
            return api_job_error_response(
                CORRUPT_SESSION_LOG_MESSAGE_TEMPLATE.format(detail=str(error)),
                error_code=CorruptSessionLogError.error_code,
            )
        except RowStorePersistenceError as error:
            return api_job_error_response(
                PERSISTENCE_ERROR_MESSAGE_TEMPLATE.format(detail=str(error)),
                error_code="PERSISTENCE_FAILED",
            )

        return JSONResponse(content=api_serialize_job_command_result(result), status_code=status.HTTP_200_OK)

    @router.get("/open-jobs")
    def api_open_jobs_list(
        project_no: str = Query(default="", alias="projectNo"),
        part_name: str = Query(default="", alias="partName"),
    ) -> JSONResponse:
        """List active steps of one job.

        Args:
            project_no: Project number.
            part_name: Part name.

        Returns:
            JSONResponse: Active steps, empty when nothing matches or reads fail.

        Raises:
            RuntimeError: This endpoint does not raise runtime errors.
        """

        if not project_no.strip() or not part_name.strip():
            return JSONResponse(content=[], status_code=status.HTTP_200_OK)
        open_steps = job_service.job_list_open_steps(project_no=project_no, part_name=part_name)
        return JSONResponse(
            content=[api_serialize_open_job_step(open_step) for open_step in open_steps],
            status_code=status.HTTP_200_OK,
        )

    return router


def api_job_error_response(message: str, error_code: str | None = None) -> JSONResponse:
    payload: dict[str, object] = {"status": "ERROR", "message": message}
    if error_code:
        payload["code"] = error_code
    return JSONResponse(content=payload, status_code=status.HTTP_200_OK)


def api_serialize_job_command_result(result: JobCommandResult) -> dict[str, object]:
    """Serialize one accepted command outcome.

    Args:
        result: Accepted command outcome.

    Returns:
        dict[str, object]: JSON-serializable `OK` envelope.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    return {
        "status": "OK",
        "command": result.command.value,
        "rowId": result.row_id,
        "jobStatus": result.status,
    }


def api_serialize_open_job_step(open_step: OpenJobStep) -> dict[str, str]:
    return {
        "processName": open_step.process_name,
        "processNo": open_step.process_no,
        "stepNo": open_step.step_no,
        "machineNo": open_step.machine_no,
        "status": open_step.status,
    }
