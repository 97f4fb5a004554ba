import typing as t

from marketplace.common.exceptions import APIError, SessionExpiredError
from marketplace.common.schema import ApiResponse, Pagination, Schema, query_params


class Sample(Schema):
    campaign_id: str
    sort_by: str | None = None


def test_schema_speaks_camel_case() -> None:
    sample = Sample.model_validate({"campaignId": "c-1"})

    assert sample.campaign_id == "c-1"
    assert Sample(campaign_id="c-2").to_payload() == {"campaignId": "c-2"}


def test_api_response_envelope() -> None:
    response = ApiResponse[dict[str, t.Any]].model_validate(
        {
            "success": False,
            "status": "fail",
            "message": "Validation failed",
            "errors": [{"field": "email", "message": "Invalid"}],
        }
    )

    assert response.success is False
    assert response.errors[0].field == "email"
    assert response.data is None


def test_pagination_from_wire() -> None:
    pagination = Pagination.model_validate(
        {"page": 2, "limit": 10, "total": 35, "pages": 4, "hasNext": True, "hasPrev": True}
    )

    assert pagination.has_next and pagination.has_prev


def test_query_params_drops_empty_values() -> None:
    assert query_params(Sample(campaign_id="c-1")) == {"campaignId": "c-1"}
    assert query_params({"status": None, "page": 2}) == {"page": 2}
    assert query_params({"status": None}) is None
    assert query_params(None) is None


def test_session_expired_error_defaults() -> None:
    error = SessionExpiredError()

    assert isinstance(error, APIError)
    assert error.is_unauthorized
    assert error.message == "Session expired"
    assert error.redirect_to == "/login?session_expired=true"
