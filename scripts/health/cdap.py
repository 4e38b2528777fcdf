"""
scripts/health/cdap.py — CDAP program status lookups.

Uses the CDAP v3 REST API:
    GET <uri>/v3/namespaces/<ns>/apps/<app>/<category>/<program>/status
    -> {"status": "RUNNING"}

One request per program, no retries. Anything other than HTTP 200 with a
status field raises CheckError and ends the run.
"""

from __future__ import annotations

import http.client
import ssl
import sys
import time
import urllib.error
import urllib.parse
import urllib.request
from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING

import orjson

from scripts.health import CheckError, CheckResult, ProgramSpec, Severity

if TYPE_CHECKING:
    from config.settings import Settings

# Code reported when no HTTP response was received at all.
NO_RESPONSE = 0
READ_CHUNK = 8192


class NoRedirectHandler(urllib.request.HTTPRedirectHandler):
    """Return 3xx to the caller as HTTPError instead of following it.

    Following would classify the redirect target and copy the bearer token
    onto a request for another host.
    """

    def redirect_request(self, req, fp, code, msg, headers, newurl):  # noqa: ARG002
        return None


def build_opener(context: ssl.SSLContext | None) -> urllib.request.OpenerDirector:
    handlers: list[urllib.request.BaseHandler] = [NoRedirectHandler()]
    if context is not None:
        handlers.append(urllib.request.HTTPSHandler(context=context))
    return urllib.request.build_opener(*handlers)


def _set_read_timeout(resp, seconds: float) -> None:
    raw = getattr(getattr(resp, "fp", None), "raw", None)
    sock = getattr(raw, "_sock", None)
    if sock is not None:
        sock.settimeout(seconds)


def _read_body(resp, deadline: float) -> bytes | None:
    """Read the response body, or return None once the deadline has passed."""
    chunks: list[bytes] = []
    while True:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            return None
        _set_read_timeout(resp, remaining)
        chunk = resp.read1(READ_CHUNK)
        if not chunk:
            return b"".join(chunks)
        chunks.append(chunk)


def mask_token(token: str | None) -> str:
    if not token:
        return "<none>"
    if len(token) <= 8:
        return "****"
    return f"{token[:4]}...{token[-2:]}"


class CdapStatusClient:
    def __init__(
        self,
        uri: str,
        namespace: str = "default",
        timeout: int = 30,
        token: str | None = None,
        insecure: bool = False,
        verbose: bool = False,
    ) -> None:
        self.uri = uri.rstrip("/")
        self.namespace = namespace
        self.timeout = timeout
        self.token = token or None
        self.insecure = insecure
        self.verbose = verbose

    @classmethod
    def from_settings(cls, cfg: Settings) -> CdapStatusClient:
        return cls(
            uri=cfg.URI,
            namespace=cfg.NAMESPACE,
            timeout=cfg.TIMEOUT,
            token=cfg.TOKEN,
            insecure=cfg.INSECURE,
            verbose=cfg.VERBOSE,
        )

    def _debug(self, message: str) -> None:
        if self.verbose:
            print(f"  [DEBUG] {message}", file=sys.stderr)

    def status_url(self, spec: ProgramSpec) -> str:
        segments = (
            "v3",
            "namespaces",
            self.namespace,
            "apps",
            spec.application,
            spec.category.path,
            spec.program,
            "status",
        )
        return self.uri + "/" + "/".join(urllib.parse.quote(s, safe="") for s in segments)

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _ssl_context(self) -> ssl.SSLContext | None:
        if not self.insecure:
            return None
        ctx = ssl.create_default_context()
        ctx.check_hostname = False
        ctx.verify_mode = ssl.CERT_NONE
        return ctx

    def _get(self, url: str) -> tuple[int, bytes, str | None]:
        """Return (status code, body, transport error). Code 0 means no response.

        self.timeout bounds the whole exchange, not each socket operation.
        """
        deadline = time.monotonic() + self.timeout
        request = urllib.request.Request(url, headers=self._headers(), method="GET")
        opener = build_opener(self._ssl_context())
        try:
            with opener.open(request, timeout=self.timeout) as resp:
                body = _read_body(resp, deadline)
                if body is None:
                    return NO_RESPONSE, b"", f"timed out after {self.timeout}s"
                return resp.status, body, None
        except urllib.error.HTTPError as e:
            try:
                body = e.read()
            except OSError:
                body = b""
            return e.code, body, None
        except (urllib.error.URLError, OSError, http.client.HTTPException) as e:
            reason = getattr(e, "reason", None) or e
            return NO_RESPONSE, b"", str(reason)

    def fetch_status(self, spec: ProgramSpec) -> CheckResult:
        url = self.status_url(spec)
        self._debug(f"GET {url}")
        code, body, error = self._get(url)
        self._debug(f"{spec.label}: HTTP {code} {body[:200]!r}")

        if code == 200:
            return CheckResult(spec, _extract_status(body, url))
        if code == 401:
            if self.token:
                raise CheckError(
                    Severity.UNKNOWN, f"Invalid CDAP Access Token: {mask_token(self.token)}"
                )
            raise CheckError(Severity.UNKNOWN, "CDAP Access Token required but not specified")
        if code == 404:
            raise CheckError(Severity.CRITICAL, f"CDAP Endpoint not found: {url}")
        if code == 503:
            raise CheckError(Severity.UNKNOWN, f"CDAP Backend not responding: {url}")
        if code == NO_RESPONSE:
            raise CheckError(
                Severity.UNKNOWN, f"CDAP Router not responding: {url} ({error or 'no response'})"
            )
        raise CheckError(Severity.UNKNOWN, f"Unexpected response code {code} from {url}")


def _extract_status(body: bytes, url: str) -> str:
    try:
        payload = orjson.loads(body)
    except orjson.JSONDecodeError:
        payload = None
    status = payload.get("status") if isinstance(payload, dict) else None
    if not isinstance(status, str):
        raise CheckError(Severity.UNKNOWN, f"Unparseable status response from {url}")
    return status


def check_all(specs: Iterable[ProgramSpec], client: CdapStatusClient) -> Iterator[CheckResult]:
    """Yield one CheckResult per spec, in order. The first CheckError stops iteration."""
    for spec in specs:
        yield client.fetch_status(spec)
