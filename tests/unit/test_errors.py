import pytest
from fastapi.exceptions import RequestValidationError

from shortener.api.errors import binding_error_message, to_http_error
from shortener.exceptions import (
    DataStoreError,
    FullNotFoundError,
    IDNotFoundError,
    InvalidRecordError,
    ShortNotFoundError,
    UnavailableShortError,
)


@pytest.mark.parametrize("exc,status_code", [
    (InvalidRecordError(), 400),
    (UnavailableShortError(), 409),
    (IDNotFoundError(), 404),
    (ShortNotFoundError(), 404),
    (FullNotFoundError(), 404),
])
def test_recognized_kinds(exc, status_code):
    error = to_http_error(exc, type(exc))
    assert error.status_code == status_code
    assert error.detail == str(exc)

def test_unrecognized_kind_defaults_to_server_error():
    error = to_http_error(IDNotFoundError(), InvalidRecordError, UnavailableShortError)
    assert error.status_code == 500
    assert error.detail == IDNotFoundError.message

    error = to_http_error(DataStoreError())
    assert error.status_code == 500
    assert error.detail == "datastore failure"

def test_custom_message_is_kept():
    error = to_http_error(InvalidRecordError("invalid record: short and full are required"), InvalidRecordError)
    assert error.detail == "invalid record: short and full are required"

def test_binding_error_json_invalid():
    exc = RequestValidationError([{
        "type": "json_invalid",
        "loc": ("body", 3),
        "msg": "JSON decode error",
        "input": {},
        "ctx": {"error": "Expecting value"},
    }])
    assert binding_error_message(exc) == "Expecting value"

def test_binding_error_fields():
    exc = RequestValidationError([
        {"type": "missing", "loc": ("body",), "msg": "Field required", "input": None},
        {"type": "string_type", "loc": ("body", "full"), "msg": "Input should be a valid string", "input": 1},
    ])
    assert binding_error_message(exc) == "body: Field required; body.full: Input should be a valid string"
