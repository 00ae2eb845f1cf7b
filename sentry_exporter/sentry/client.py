"""HTTP client for the Sentry web API used by the probes."""

from __future__ import annotations

import typing as typ

import httpx

from sentry_exporter.logging import get_logger, log_debug, log_warning

from .errors import SentryStatusError, SentryTransportError

if typ.TYPE_CHECKING:
    from sentry_exporter.config.models import HTTPProbe

logger = get_logger(__name__)

API_PREFIX = "/api/0/"

_SUCCESS_STATUS_MIN = 200
_SUCCESS_STATUS_MAX = 300
_REDIRECT_STATUS_MAX = 400


def split_host_header(
    headers: typ.Mapping[str, str],
) -> tuple[str | None, dict[str, str]]:
    """Separate a configured ``Host`` override from the remaining headers.

    Header names are matched case-insensitively. The returned mapping keeps
    the other headers with their configured spelling.
    """
    virtual_host: str | None = None
    remaining: dict[str, str] = {}
    for name, value in headers.items():
        if name.strip().lower() == "host":
            virtual_host = value
            continue
        remaining[name] = value
    return virtual_host, remaining


def is_accepted_status(
    status_code: int, valid_status_codes: typ.Collection[int]
) -> bool:
    """Return ``True`` when ``status_code`` counts as a successful response.

    Explicitly configured codes must match exactly; without any configured
    codes every 2xx status is accepted.
    """
    if valid_status_codes:
        return status_code in valid_status_codes
    return _SUCCESS_STATUS_MIN <= status_code < _SUCCESS_STATUS_MAX


class SentryClient:
    """Send authenticated GET requests to one Sentry installation.

    The client never retries and never follows redirects. A redirect that
    the module does not list as a valid status is reported as a transport
    failure, like a connection error.
    """

    def __init__(
        self,
        config: HTTPProbe,
        *,
        timeout: float,
        http_client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialise the client for ``config`` with a per-call ``timeout``."""
        self._config = config
        self._timeout = timeout
        self._virtual_host, self._headers = split_host_header(config.headers)
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            transport=transport,
            follow_redirects=False,
        )

    @property
    def organization(self) -> str:
        """Return the organization slug requests are scoped to."""
        return self._config.organization

    @property
    def organization_key(self) -> tuple[str, str]:
        """Return the Sentry installation and organization this client targets."""
        return self._config.domain.rstrip("/"), self._config.organization

    @property
    def timeout(self) -> float:
        """Return the per-call timeout in seconds."""
        return self._timeout

    def url_for(self, path: str) -> str:
        """Return the absolute API address for ``path``."""
        return self._config.domain.rstrip("/") + API_PREFIX + path

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    async def request(self, path: str) -> httpx.Response:
        """GET ``path`` below ``/api/0/`` and return the accepted response.

        Raises
        ------
        SentryTransportError
            If the request could not be completed, including timeouts, bodies
            that fail to decode and refused redirects.
        SentryStatusError
            If the response status is not accepted by the module settings.

        """
        url = self.url_for(path)
        request = self._client.build_request(
            "GET",
            url,
            headers=self._headers,
            timeout=httpx.Timeout(self._timeout),
        )
        if self._virtual_host is not None:
            request.headers["Host"] = self._virtual_host

        try:
            response = await self._client.send(request, follow_redirects=False)
        except httpx.HTTPError as exc:
            log_warning(logger, "Error for HTTP request to %s: %s", path, exc)
            raise SentryTransportError.for_path(path, exc) from exc

        status_code = response.status_code
        if not is_accepted_status(status_code, self._config.valid_status_codes):
            if _SUCCESS_STATUS_MAX <= status_code < _REDIRECT_STATUS_MAX:
                raise SentryTransportError.refused_redirect(path, status_code)
            raise SentryStatusError.invalid_status(status_code)

        log_debug(logger, "received %d from %s", response.status_code, url)
        return response
