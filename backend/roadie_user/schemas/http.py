"""
Roadie User Service — Request/Response Envelope Schemas
=========================================================

What:  Host-neutral request and response shapes the dispatcher works with.
How:   `ApiRequest.from_gateway_event()` reads an API Gateway proxy event
       (HTTP API payload 2.0, REST payload 1.0 as a fallback);
       `ApiResponse.to_gateway()` writes the proxy response dict back.
       The FastAPI routes build the same objects from Starlette requests.
"""

from typing import Any, Dict, Mapping, Optional, Union

from pydantic import BaseModel, Field

JSON_CONTENT_TYPE = "application/json"


class ApiRequest(BaseModel):
    """
    One inbound request, reduced to what routing needs.

    path_key is None when the path parameter is absent; an empty string
    still counts as present. The body is kept exactly as the host delivered
    it; only Create and Replace decode it (see `decode_user_body`).
    """
    method: str = Field(description="HTTP verb as sent by the host")
    path_key: Optional[str] = Field(default=None, description="Identity from the path")
    body: Optional[Union[str, bytes]] = Field(default=None, description="Request body as delivered")
    base64_encoded: bool = Field(default=False, description="Body is base64 text (API Gateway binary)")

    @classmethod
    def from_gateway_event(cls, event: Mapping[str, Any], key_param: str = "id") -> "ApiRequest":
        http = (event.get("requestContext") or {}).get("http") or {}
        method = http.get("method") or event.get("httpMethod") or ""

        path_parameters = event.get("pathParameters") or {}
        path_key = path_parameters.get(key_param)

        return cls(
            method=method,
            path_key=path_key,
            body=event.get("body"),
            base64_encoded=bool(event.get("isBase64Encoded")),
        )


class ApiResponse(BaseModel):
    """One outbound response: status, optional body, optional headers."""
    status_code: int
    body: Optional[str] = None
    headers: Dict[str, str] = Field(default_factory=dict)

    def to_gateway(self) -> Dict[str, Any]:
        """Proxy response dict; `headers`/`body` are left out when absent."""
        result: Dict[str, Any] = {"statusCode": self.status_code}
        if self.headers:
            result["headers"] = dict(self.headers)
        if self.body is not None:
            result["body"] = self.body
        return result
