"""Request routing and execution for catalog endpoints.

The router decides, for one tool call, which supplied fields are substituted
into the URL path, which go to the query string and which become members of
the JSON body. It then issues exactly one HTTP request and normalizes the
response into an InvocationResult. Failures never propagate: they come back as
an error envelope.
"""

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple
from urllib.parse import quote

import aiohttp
from yarl import URL

from .models import EndpointSpec, HTTPMethod, InvocationResult

REQUEST_BODY_DATA = "requestBodyData"

PATH = "path"
BODY = "body"
QUERY = "query"
DROPPED = "dropped"

# First matching rule wins. Path parameters come first so a value is never
# both substituted into the URL and repeated in the body or query string.
CLASSIFICATION_RULES: Tuple[Tuple[str, Callable[[EndpointSpec, str], bool]], ...] = (
    (PATH, EndpointSpec.is_path_param),
    (BODY, EndpointSpec.is_body_field),
    (QUERY, EndpointSpec.is_query_param),
)


def classify(endpoint: EndpointSpec, name: str) -> str:
    """Return where a field named `name` travels for `endpoint`"""
    for target, matches in CLASSIFICATION_RULES:
        if matches(endpoint, name):
            return target
    return DROPPED


def stringify(value: Any) -> str:
    """Coerce a path or query value to its wire form"""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(stringify(item) for item in value)
    if isinstance(value, Mapping):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


@dataclass
class PreparedRequest:
    """A fully classified request, ready to be sent"""
    method: HTTPMethod
    url: URL
    headers: Dict[str, str]
    body: Optional[Dict[str, Any]] = None
    dropped: List[str] = field(default_factory=list)

    def serialized_body(self) -> Optional[str]:
        if self.body is None:
            return None
        return json.dumps(self.body, separators=(",", ":"))


class RequestRouter:
    """Builds and executes upstream requests for EndpointSpecs

    Args:
        base_url: Fixed upstream base URL, e.g. https://blkmarket.ar
        headers: Extra headers sent with every request
    """

    def __init__(self, base_url: str, headers: Optional[Dict[str, str]] = None):
        self.base_url = base_url.rstrip("/")
        self.headers = dict(headers or {})

    def prepare(self, endpoint: EndpointSpec, params: Mapping) -> PreparedRequest:
        """Classify every supplied field and build the request

        Only keys present in `params` are supplied. An explicit None goes into
        the body as JSON null and into the path or query string as "null".
        """
        path = endpoint.path_template
        query: List[Tuple[str, str]] = []
        body: Dict[str, Any] = {}
        dropped: List[str] = []

        for name, value in params.items():
            if name == REQUEST_BODY_DATA:
                continue
            target = classify(endpoint, name)
            if target == PATH:
                path = path.replace(f"{{{name}}}", quote(stringify(value), safe=""))
            elif target == BODY:
                body[name] = value
            elif target == QUERY:
                query.append((name, stringify(value)))
            else:
                dropped.append(name)

        extra = params.get(REQUEST_BODY_DATA)
        if isinstance(extra, Mapping):
            shadowed = sorted(set(body) & set(extra))
            if shadowed:
                logging.warning(f"[Router] {REQUEST_BODY_DATA} overrides body fields: {shadowed}")
            body.update(extra)

        if dropped:
            logging.debug(f"[Router] Not forwarding undeclared fields: {dropped}")

        url = URL(self.base_url + path)
        if query:
            url = url.with_query(query)

        headers = {**self.headers, "Content-Type": "application/json"}
        attach_body = endpoint.method.allows_body and bool(body)
        if body and not attach_body:
            logging.debug(f"[Router] {endpoint.method.value} carries no body, ignoring fields: {sorted(body)}")

        return PreparedRequest(
            method=endpoint.method,
            url=url,
            headers=headers,
            body=body if attach_body else None,
            dropped=dropped,
        )

    async def invoke(self, endpoint: EndpointSpec, params: Mapping) -> InvocationResult:
        """Execute one request for `endpoint` and return the normalized result

        Non-2xx responses are returned as normal results with their status in
        the metadata. Only exceptions produce an error envelope.
        """
        try:
            request = self.prepare(endpoint, params)
            logging.info(f"[Router] {request.method.value} {request.url}")
            async with aiohttp.ClientSession() as session:
                async with session.request(
                    request.method.value,
                    request.url,
                    data=request.serialized_body(),
                    headers=request.headers,
                ) as response:
                    return await self._process_response(response)
        except Exception as e:
            logging.exception(f"[Router] Error calling {endpoint.method.value} {endpoint.path_template}: {e}")
            return InvocationResult.failure(str(e))

    async def _process_response(self, response: aiohttp.ClientResponse) -> InvocationResult:
        text = await response.text()
        content_type = response.headers.get("Content-Type", "")
        if "json" in content_type.lower():
            text = format_json_body(text)

        logging.info(f"[Router] Upstream returned {response.status}")
        return InvocationResult.success(
            text=text,
            status=response.status,
            status_text=response.reason or "",
            headers={key: value for key, value in response.headers.items()},
        )


def format_json_body(text: str) -> str:
    """Pretty-print a JSON body, or return it unchanged if it does not parse"""
    try:
        data = json.loads(text)
    except ValueError:
        return text
    if isinstance(data, str):
        return data
    return json.dumps(data, indent=2, ensure_ascii=False)


__all__ = [
    "REQUEST_BODY_DATA",
    "CLASSIFICATION_RULES",
    "PreparedRequest",
    "RequestRouter",
    "classify",
    "stringify",
    "format_json_body",
]
