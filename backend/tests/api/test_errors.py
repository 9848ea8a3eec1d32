"""Error envelope tests."""

import json

from estatehub.api.errors import app_error_handler
from estatehub.main import app
from estatehub.services.errors import NotFound, ValidationError


async def test_app_error_with_field_errors():
    exc = ValidationError(
        "Contact is required",
        errors=[{"field": "contact", "message": "Contact is required"}],
    )

    response = await app_error_handler(None, exc)  # type: ignore[arg-type]

    assert response.status_code == 400
    assert json.loads(response.body) == {
        "message": "Contact is required",
        "errors": [{"field": "contact", "message": "Contact is required"}],
    }


async def test_app_error_without_field_errors():
    response = await app_error_handler(None, NotFound("Property not found"))  # type: ignore[arg-type]

    assert response.status_code == 404
    assert json.loads(response.body) == {"message": "Property not found"}


def test_error_envelope_documented():
    schema = app.openapi()

    responses = schema["paths"]["/api/user/login"]["post"]["responses"]
    assert responses["400"]["content"]["application/json"]["schema"] == {
        "$ref": "#/components/schemas/ErrorResponse"
    }
    assert "ErrorDetail" in schema["components"]["schemas"]
