"""
Roadie User Service — Schema Unit Tests
========================================

What:  UserRecord wire form, body decoding rules, and the proxy-event
       envelope (ApiRequest / ApiResponse).
"""

import base64

import pytest

from roadie_user.exceptions import ValidationError
from roadie_user.schemas.http import ApiRequest, ApiResponse
from roadie_user.schemas.user import SUB_MAX_LENGTH, UserRecord, decode_user_body


class TestUserRecord:

    def test_profile_excludes_identity(self):
        user = UserRecord.model_validate({"Sub": "u1", "Name": "Alice", "Age": 30})

        assert user.sub == "u1"
        assert user.profile == {"Name": "Alice", "Age": 30}

    def test_from_profile_rebuilds_flat_json(self):
        user = UserRecord.from_profile("u1", {"Name": "Alice"})

        assert user.to_json() == '{"Sub":"u1","Name":"Alice"}'

    def test_profile_is_a_copy(self):
        user = UserRecord.from_profile("u1", {"Name": "Alice"})

        user.profile["Name"] = "Mallory"

        assert user.profile == {"Name": "Alice"}


class TestDecodeUserBody:

    def test_decodes_client_identity_verbatim(self):
        user = decode_user_body('{"Sub":"auth0|abc","Name":"Alice"}')

        assert user.sub == "auth0|abc"
        assert user.profile == {"Name": "Alice"}

    def test_key_overrides_body_identity(self):
        user = decode_user_body('{"Sub":"other","Name":"Alice"}', key="u1")

        assert user.sub == "u1"
        assert user.profile == {"Name": "Alice"}

    def test_key_fills_missing_identity(self):
        assert decode_user_body("{}", key="u1").sub == "u1"

    def test_missing_body(self):
        with pytest.raises(ValidationError, match="required") as exc_info:
            decode_user_body(None)
        assert exc_info.value.field == "body"

    def test_non_object_body(self):
        with pytest.raises(ValidationError, match="JSON object"):
            decode_user_body("[1]")

    def test_numeric_identity_is_not_coerced(self):
        with pytest.raises(ValidationError) as exc_info:
            decode_user_body('{"Sub": 42}')
        assert exc_info.value.field == "Sub"

    def test_identity_longer_than_column_is_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            decode_user_body('{"Sub": "%s"}' % ("x" * (SUB_MAX_LENGTH + 1)))
        assert exc_info.value.field == "Sub"

    def test_identity_at_column_width_is_accepted(self):
        sub = "x" * SUB_MAX_LENGTH

        assert decode_user_body('{"Sub": "%s"}' % sub).sub == sub

    def test_utf8_bytes(self):
        user = decode_user_body('{"Sub":"u1","City":"Zürich"}'.encode("utf-8"))

        assert user.profile == {"City": "Zürich"}

    def test_invalid_utf8_bytes_are_rejected(self):
        with pytest.raises(ValidationError, match="UTF-8") as exc_info:
            decode_user_body(b'{"Sub":"u2","Name":"\xff"}')
        assert exc_info.value.field == "body"

    def test_base64_body(self):
        encoded = base64.b64encode(b'{"Sub":"u1"}').decode("ascii")

        assert decode_user_body(encoded, base64_encoded=True).sub == "u1"

    @pytest.mark.parametrize(
        "encoded",
        [
            "!!!notbase64",
            base64.b64encode(b'{"Sub":"u1","Name":"\xff"}').decode("ascii"),
            "Zürich",
        ],
        ids=["bad-alphabet", "not-utf8", "non-ascii"],
    )
    def test_undecodable_base64_body_is_rejected(self, encoded):
        with pytest.raises(ValidationError) as exc_info:
            decode_user_body(encoded, base64_encoded=True)
        assert exc_info.value.field == "body"


class TestApiRequest:

    def test_from_http_api_event(self, gateway_event):
        request = ApiRequest.from_gateway_event(
            gateway_event("PUT", key="u1", body='{"Name":"x"}')
        )

        assert request.method == "PUT"
        assert request.path_key == "u1"
        assert request.body == '{"Name":"x"}'

    def test_null_path_parameters_mean_no_key(self, gateway_event):
        request = ApiRequest.from_gateway_event(gateway_event("GET"))

        assert request.path_key is None
        assert request.body is None

    def test_other_path_parameters_do_not_count(self):
        event = {
            "requestContext": {"http": {"method": "GET"}},
            "pathParameters": {"userId": "u1"},
        }

        assert ApiRequest.from_gateway_event(event).path_key is None

    def test_custom_key_parameter(self):
        event = {
            "requestContext": {"http": {"method": "GET"}},
            "pathParameters": {"sub": "u1"},
        }

        assert ApiRequest.from_gateway_event(event, key_param="sub").path_key == "u1"

    def test_empty_key_is_present(self):
        event = {"requestContext": {"http": {"method": "GET"}}, "pathParameters": {"id": ""}}

        assert ApiRequest.from_gateway_event(event).path_key == ""

    def test_base64_body_is_kept_encoded(self, gateway_event):
        request = ApiRequest.from_gateway_event(
            gateway_event("POST", body='{"Sub":"ü"}', base64_body=True)
        )

        assert request.base64_encoded is True
        assert base64.b64decode(request.body).decode("utf-8") == '{"Sub":"ü"}'

    def test_undecodable_base64_does_not_break_the_envelope(self):
        event = {
            "requestContext": {"http": {"method": "GET"}},
            "pathParameters": {"id": "u1"},
            "body": "!!!notbase64",
            "isBase64Encoded": True,
        }

        request = ApiRequest.from_gateway_event(event)

        assert request.path_key == "u1"
        assert request.body == "!!!notbase64"

    def test_rest_api_payload_fallback(self):
        event = {
            "httpMethod": "DELETE",
            "pathParameters": {"id": "u1"},
            "body": base64.b64encode(b"{}").decode(),
            "isBase64Encoded": True,
        }

        request = ApiRequest.from_gateway_event(event)

        assert request.method == "DELETE"
        assert request.base64_encoded is True
        assert decode_user_body(request.body, key="u1", base64_encoded=True).sub == "u1"


class TestApiResponse:

    def test_plain_response_omits_headers(self):
        assert ApiResponse(status_code=405, body="Method not allowed").to_gateway() == {
            "statusCode": 405,
            "body": "Method not allowed",
        }

    def test_empty_response_omits_body(self):
        response = ApiResponse(status_code=204, headers={"Content-Type": "application/json"})

        assert response.to_gateway() == {
            "statusCode": 204,
            "headers": {"Content-Type": "application/json"},
        }
