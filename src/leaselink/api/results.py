"""HTTP mapping for atomic procedure results."""

from fastapi import status

from leaselink.core.database import TRANSACTION_FAILED, TRANSACTION_TIMEOUT, ProcedureResult


VALIDATION_FAILED = "validation_error"

_STATUS_BY_CODE = {
    VALIDATION_FAILED: status.HTTP_422_UNPROCESSABLE_ENTITY,
    TRANSACTION_TIMEOUT: status.HTTP_503_SERVICE_UNAVAILABLE,
    TRANSACTION_FAILED: status.HTTP_400_BAD_REQUEST,
}


def procedure_status(result: ProcedureResult, success_status: int = status.HTTP_200_OK) -> int:
    """Pick the response status for a procedure outcome.

    Args:
        result: Outcome returned by ``run_atomic``
        success_status: Status to use when the procedure succeeded

    Returns:
        HTTP status code; unknown failure codes map to 400
    """
    if result.success:
        return success_status
    return _STATUS_BY_CODE.get(result.error_code or "", status.HTTP_400_BAD_REQUEST)
