from typing import Any, Optional, Dict
from fastapi.responses import JSONResponse


def success_response(
    message: str = "Success",
    data: Any = None,
    status_code: int = 200
) -> JSONResponse:
    """
    Standard success response

    Args:
        message: Success message
        data: Response data (optional)
        status_code: HTTP status code (default: 200)

    Returns:
        JSONResponse with success format
    """
    response = {
        "success": True,
        "message": message
    }

    if data is not None:
        response["data"] = data

    return JSONResponse(content=response, status_code=status_code)


def error_response(
    message: str = "Error",
    status_code: int = 400
) -> JSONResponse:
    """
    Standard error response

    Args:
        message: Error message
        status_code: HTTP status code (default: 400)

    Returns:
        JSONResponse with error format
    """
    return JSONResponse(
        content={
            "success": False,
            "message": message
        },
        status_code=status_code
    )


def validation_error_response(
    message: str = "Validation error",
    errors: Optional[Any] = None
) -> JSONResponse:
    """
    Standard validation error response

    Args:
        message: Validation error message
        errors: Validation errors, keyed by field or as a list (optional)

    Returns:
        JSONResponse with validation error format (422)
    """
    response = {
        "success": False,
        "message": message
    }

    if errors:
        response["errors"] = errors

    return JSONResponse(content=response, status_code=422)


def write_result_to_json(result: Any) -> Dict[str, Any]:
    """
    Render a driver write result (insert/update/delete) as plain JSON.

    Duck-typed so results from any Motor-compatible driver serialize.
    """
    if hasattr(result, "inserted_id"):
        return {"insertedId": str(result.inserted_id)}

    if hasattr(result, "deleted_count"):
        return {"deletedCount": result.deleted_count}

    upserted_id = getattr(result, "upserted_id", None)
    return {
        "matchedCount": result.matched_count,
        "modifiedCount": result.modified_count,
        "upsertedId": str(upserted_id) if upserted_id is not None else None
    }
