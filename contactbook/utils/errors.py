# contactbook/utils/errors.py

from fastapi.responses import JSONResponse

from contactbook.utils.form_fields import FieldDecodeError


def error_response(status_code: int, error: str, message: str, **extra) -> JSONResponse:
    # Clients only ever see a code and a short message; store details stay in the logs
    return JSONResponse(content={"error": error, "message": message, **extra}, status_code=status_code)


def malformed_field(e: FieldDecodeError) -> JSONResponse:
    return error_response(400, "malformed_field", e.reason, field=e.field)


def invalid_id(contact_id: str) -> JSONResponse:
    return error_response(400, "invalid_id", f"'{contact_id}' is not a valid contact id")


def contact_not_found(contact_id: str) -> JSONResponse:
    return error_response(400, "contact_not_found", f"No contact with id {contact_id}")


def store_error(message: str = "Contact store request failed") -> JSONResponse:
    return error_response(400, "store_error", message)


def internal_error(message: str = "Internal server error") -> JSONResponse:
    return error_response(500, "internal_error", message)
