"""Job command rejection codes and the operator-facing messages shown on terminals."""

from __future__ import annotations

from enum import Enum
from typing import Final


class JobErrorCode(str, Enum):
    """Known job command rejection codes."""

    INVALID_COMMAND = "INVALID_COMMAND"
    MISSING_FIELD = "MISSING_FIELD"
    INVALID_QUANTITY = "INVALID_QUANTITY"
    INVALID_PAUSE_TYPE = "INVALID_PAUSE_TYPE"
    DUPLICATE_OPEN_JOB = "DUPLICATE_OPEN_JOB"
    PAUSE_NOT_FOUND = "PAUSE_NOT_FOUND"
    PAUSE_ALREADY_OPEN = "PAUSE_ALREADY_OPEN"
    CONTINUE_NOT_FOUND = "CONTINUE_NOT_FOUND"
    CONTINUE_NO_OPEN_PAUSE = "CONTINUE_NO_OPEN_PAUSE"
    OT_NOT_FOUND = "OT_NOT_FOUND"
    OT_BEFORE_WINDOW = "OT_BEFORE_WINDOW"
    OT_AFTER_CUTOFF = "OT_AFTER_CUTOFF"
    OT_ALREADY_OPEN = "OT_ALREADY_OPEN"
    OT_STOP_NOT_FOUND = "OT_STOP_NOT_FOUND"
    OT_STOP_NO_OPEN_SESSION = "OT_STOP_NO_OPEN_SESSION"
    CLOSE_NOT_FOUND = "CLOSE_NOT_FOUND"
    CLOSE_WHILE_PAUSED = "CLOSE_WHILE_PAUSED"
    START_TIME_INVALID = "START_TIME_INVALID"
    OT_NON_WORKING_DAY = "OT_NON_WORKING_DAY"


JOB_ERROR_MESSAGES: Final[dict[str, str]] = {
    JobErrorCode.INVALID_COMMAND.value: "ไม่รองรับคำสั่งนี้",
    JobErrorCode.MISSING_FIELD.value: "กรุณากรอกข้อมูลให้ครบถ้วน ({field_name})",
    JobErrorCode.INVALID_QUANTITY.value: "จำนวนชิ้นงานไม่ถูกต้อง",
    JobErrorCode.INVALID_PAUSE_TYPE.value: "ประเภทการหยุดงานไม่ถูกต้อง",
    JobErrorCode.DUPLICATE_OPEN_JOB.value: (
        "พบงานที่เปิดอยู่แล้วในระบบ:\n"
        "Project: {project_no}\n"
        "Part: {part_name}\n"
        "Process: {process_name} ({process_no})\n"
        "Step: {step_no}\n"
        "Machine: {machine_no}\n\n"
        "กรุณาปิดงานเดิมก่อนเริ่มงานใหม่"
    ),
    JobErrorCode.PAUSE_NOT_FOUND.value: "ไม่พบงานที่อยู่ในสถานะ OPEN หรือ OT สำหรับการหยุดชั่วคราว",
    JobErrorCode.PAUSE_ALREADY_OPEN.value: "งานนี้มีช่วงเวลาหยุดที่ยังไม่ถูกดำเนินการต่อ",
    JobErrorCode.CONTINUE_NOT_FOUND.value: "ไม่พบงานที่อยู่ในสถานะ PAUSE สำหรับการดำเนินการต่อ",
    JobErrorCode.CONTINUE_NO_OPEN_PAUSE.value: "ไม่พบช่วงเวลาหยุดที่ยังไม่ถูกดำเนินการต่อ",
    JobErrorCode.OT_NOT_FOUND.value: (
        "ไม่พบงานที่เปิดอยู่สำหรับการเริ่ม OT\n"
        "(หมายเหตุ: หากงานอยู่ในสถานะพักงาน กรุณาดำเนินการต่อก่อนเริ่ม OT)"
    ),
    JobErrorCode.OT_BEFORE_WINDOW.value: "ไม่สามารถเริ่ม OT ก่อน {overtime_start}",
    JobErrorCode.OT_AFTER_CUTOFF.value: "ไม่สามารถเริ่ม OT ได้หลัง {overtime_end}",
    JobErrorCode.OT_ALREADY_OPEN.value: "มีเซสชัน OT ที่เปิดอยู่แล้วสำหรับงานนี้",
    JobErrorCode.OT_STOP_NOT_FOUND.value: "ไม่พบงานที่ตรงกันหรือไม่มีเซสชัน OT ที่เปิดอยู่สำหรับการหยุด OT",
    JobErrorCode.OT_STOP_NO_OPEN_SESSION.value: "ไม่พบเซสชัน OT ที่เปิดอยู่สำหรับการหยุด OT",
    JobErrorCode.CLOSE_NOT_FOUND.value: "ไม่พบข้อมูลของการเริ่มงาน โปรดลองอีกครั้ง",
    JobErrorCode.CLOSE_WHILE_PAUSED.value: (
        'กรุณากด "ดำเนินงานต่อ" ก่อนที่จะกดปิดงาน งานที่คุณจะปิด อยู่ในสถานะพักงาน'
    ),
    JobErrorCode.START_TIME_INVALID.value: "เวลาเริ่มงานของงานนี้ไม่ถูกต้อง ไม่สามารถปิดงานได้",
    JobErrorCode.OT_NON_WORKING_DAY.value: "ไม่สามารถเริ่ม OT ในวันหยุดได้",
}

PERSISTENCE_ERROR_MESSAGE_TEMPLATE: Final[str] = "เกิดข้อผิดพลาดในการเขียนข้อมูล: {detail}"
CORRUPT_SESSION_LOG_MESSAGE_TEMPLATE: Final[str] = "ข้อมูลเซสชันของงานเสียหาย: {detail}"
INVALID_JSON_MESSAGE: Final[str] = "Invalid JSON format"


def job_error_message(error_code: JobErrorCode, **values: str) -> str:
    """Return the operator-facing message of one rejection code.

    Args:
        error_code: Rejection code.
        **values: Placeholder values for templated messages.

    Returns:
        str: Rendered message.

    Raises:
        KeyError: Raised when a templated message is missing a placeholder value.
    """

    return JOB_ERROR_MESSAGES[error_code.value].format(**values)


__all__ = [
    "CORRUPT_SESSION_LOG_MESSAGE_TEMPLATE",
    "INVALID_JSON_MESSAGE",
    "JOB_ERROR_MESSAGES",
    "JobErrorCode",
    "PERSISTENCE_ERROR_MESSAGE_TEMPLATE",
    "job_error_message",
]
