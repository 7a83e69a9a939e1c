"""
Request construction for remote invocations.

Turns ``(address, path, method, params)`` into a ``requests.PreparedRequest``.
The prepared request is shared by the synchronous and asynchronous transports,
so both put exactly the same bytes on the wire.
"""

import re
from functools import partial
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional
from urllib.parse import quote

import requests
from requests.exceptions import InvalidURL
from urllib3.exceptions import LocationParseError
from urllib3.util import Url, parse_url

from .exceptions import InvalidParametersError, InvalidUriError, NoSuchMethodError

SCHEME = "http"
JSON_CONTENT_TYPE = "application/json"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

Params = Mapping[str, Mapping[str, str]]

# HTTP verb -> request constructor bound to a URI
METHOD_FACTORIES = MappingProxyType(
    {
        "GET": partial(requests.Request, "GET"),
        "POST": partial(requests.Request, "POST"),
        "PUT": partial(requests.Request, "PUT"),
        "DELETE": partial(requests.Request, "DELETE"),
    }
)

_HOST_RE = re.compile(
    r"^(?:(?:[A-Za-z0-9\-._~!$&'()*+,;=]|%[0-9A-Fa-f]{2})+|\[[0-9A-Fa-f:.]+\])"
    r"(?::[0-9]{1,5})?$"
)

# RFC 3986 pchar plus "/", "%" keeps existing escapes
_PATH_SAFE = "/%:@!$&'()*+,;="


def build_uri(address: str, path: Optional[str]) -> str:
    """
    Build the ``http`` URI of a remote operation, without query.

    Args:
        address: Host with an optional ``:port``, no scheme
        path: URL path, a leading ``/`` is added when missing

    Returns:
        Absolute URI string

    Raises:
        InvalidUriError: If the address cannot form a valid authority
    """
    if not isinstance(address, str) or not _HOST_RE.match(address):
        raise InvalidUriError(ValueError(f"Invalid host {address!r}"))

    try:
        authority = parse_url(f"{SCHEME}://{address}")
    except LocationParseError as e:
        raise InvalidUriError(e) from e

    return Url(
        scheme=SCHEME,
        host=authority.host,
        port=authority.port,
        path=_normalize_path(path),
    ).url


def _normalize_path(path: Optional[str]) -> str:
    path = path or "/"
    if not path.startswith("/"):
        path = "/" + path
    return quote(path, safe=_PATH_SAFE)


def _category(params: Params, name: str) -> Optional[Dict[str, Any]]:
    if name not in params:
        return None
    values = params[name]
    if values is None:
        values = {}
    if not isinstance(values, Mapping):
        raise InvalidParametersError(
            f"Parameter category {name!r} must be a mapping, got {type(values).__name__}"
        )
    return dict(values)


def build_request(
    address: str,
    path: Optional[str],
    method: str,
    params: Optional[Params] = None,
    headers: Optional[Mapping[str, str]] = None,
) -> requests.PreparedRequest:
    """
    Build the HTTP request of a remote invocation.

    The URI is built before the method is resolved, so a request wrong on
    both counts reports the URI error. Nothing here touches the network.

    Args:
        address: Host with an optional ``:port``
        path: URL path
        method: Case-insensitive HTTP verb
        params: Request parameters by category (``query``, ``json``, ``form``)
        headers: Extra request headers

    Returns:
        Prepared request ready to be sent

    Raises:
        InvalidUriError: If host, path or query cannot form a URI
        NoSuchMethodError: If the method is not GET, POST, PUT or DELETE
        InvalidParametersError: If the parameters are malformed, or carry
            both a ``json`` and a ``form`` body
    """
    params = params or {}

    query = _category(params, "query")
    uri = build_uri(address, path)

    factory = METHOD_FACTORIES.get(method.upper())
    if factory is None:
        raise NoSuchMethodError(method)

    request = factory(uri, headers=dict(headers or {}))
    if query:
        request.params = list(query.items())

    json_params = _category(params, "json")
    form_params = _category(params, "form")

    if json_params is not None and form_params is not None:
        raise InvalidParametersError("json and form bodies are mutually exclusive")

    if json_params is not None:
        if "body" not in json_params:
            raise InvalidParametersError('json parameters require a "body" entry')
        body = json_params["body"]
        request.data = body.encode("utf-8") if isinstance(body, str) else body
        request.headers["Content-Type"] = JSON_CONTENT_TYPE

    if form_params is not None:
        request.data = list(form_params.items())
        request.headers["Content-Type"] = FORM_CONTENT_TYPE

    try:
        return request.prepare()
    except (InvalidURL, LocationParseError) as e:
        raise InvalidUriError(e) from e
