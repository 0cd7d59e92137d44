"""
Remote Proving Network Client

HTTP API:
    POST /v1/proofs                     submit, returns {"id"}
    GET  /v1/proofs/{id}                {"status": pending|fulfilled|failed,
                                         "proof", "public_values", "error"}
    GET  /v1/programs/{circuit}/vkey    {"vkey"}

Transport errors and 5xx replies are retried with exponential backoff.
A 4xx reply to a submission means the prover rejected the witness.
"""

from __future__ import annotations
import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

import httpx

from btcspv.config import RemoteConfig
from btcspv.constants import HTTP_TIMEOUT_SEC
from btcspv.core.types import CircuitVariant
from btcspv.prover.backend import ProverBackend, ProofRequest, ProofResult
from btcspv.errors import (
    WitnessInvalidError,
    BackendFailureError,
    ProvingTimeoutError,
)

logger = logging.getLogger(__name__)

STATUS_PENDING = "pending"
STATUS_FULFILLED = "fulfilled"
STATUS_FAILED = "failed"


def _from_hex(value: Any, what: str, request_id: str) -> bytes:
    if not isinstance(value, str):
        raise BackendFailureError(f"missing {what}", request_id)
    text = value[2:] if value.startswith("0x") else value
    try:
        return bytes.fromhex(text)
    except ValueError as e:
        raise BackendFailureError(f"bad {what} encoding: {e}", request_id) from e


def _json(response: httpx.Response, what: str, request_id: Optional[str] = None) -> dict:
    try:
        body = response.json()
    except ValueError as e:
        raise BackendFailureError(f"{what}: body is not JSON: {e}", request_id) from e
    if not isinstance(body, dict):
        raise BackendFailureError(f"{what}: expected a JSON object", request_id)
    return body


class NetworkProver(ProverBackend):
    """Proving backend backed by a remote proving network."""

    def __init__(
        self,
        config: RemoteConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        headers = {}
        if config.api_key:
            headers["Authorization"] = f"Bearer {config.api_key}"
        self._client = httpx.AsyncClient(
            base_url=config.url,
            headers=headers,
            timeout=HTTP_TIMEOUT_SEC,
            transport=transport,
        )

    async def __aenter__(self) -> "NetworkProver":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    def _backoff(self, attempt: int) -> float:
        return self.config.backoff_base_sec * (2 ** attempt)

    async def _request(
        self,
        send: Callable[[], Awaitable[httpx.Response]],
        what: str,
        request_id: Optional[str] = None,
    ) -> httpx.Response:
        """
        Send with retries on transport errors and 5xx.

        Returns the first non-5xx response.
        """
        attempt = 0
        while True:
            try:
                response = await send()
                if response.status_code < 500:
                    return response
                reason = f"{what}: HTTP {response.status_code}"
            except httpx.TransportError as e:
                reason = f"{what}: {type(e).__name__}: {e}"

            if attempt >= self.config.max_retries:
                raise BackendFailureError(
                    f"{reason} (gave up after {attempt + 1} attempts)", request_id
                )

            delay = self._backoff(attempt)
            logger.warning(f"{reason}, retrying in {delay:.2f}s ({attempt + 1}/{self.config.max_retries})")
            await asyncio.sleep(delay)
            attempt += 1

    async def verifying_key(self, circuit: CircuitVariant) -> str:
        circuit = CircuitVariant(circuit)
        response = await self._request(
            lambda: self._client.get(f"/v1/programs/{circuit.value}/vkey"),
            "verifying key",
        )
        if response.status_code != 200:
            raise BackendFailureError(f"verifying key: HTTP {response.status_code}")
        vkey = _json(response, "verifying key").get("vkey")
        if not isinstance(vkey, str):
            raise BackendFailureError("verifying key missing from response")
        return vkey

    async def submit(self, request: ProofRequest) -> str:
        """Submit a job, return its id."""
        payload = request.to_dict()
        response = await self._request(
            lambda: self._client.post("/v1/proofs", json=payload),
            "submit",
        )
        if 400 <= response.status_code < 500:
            raise WitnessInvalidError(response.text or f"HTTP {response.status_code}")
        if response.status_code not in (200, 201, 202):
            raise BackendFailureError(f"submit: HTTP {response.status_code}")

        request_id = _json(response, "submit").get("id")
        if not isinstance(request_id, str) or not request_id:
            raise BackendFailureError("submit response carries no job id")

        logger.info(f"Submitted {request.circuit.value}/{request.system.value} proof job {request_id}")
        return request_id

    async def poll(self, request_id: str) -> dict:
        """Fetch job status once."""
        response = await self._request(
            lambda: self._client.get(f"/v1/proofs/{request_id}"),
            "poll",
            request_id,
        )
        if response.status_code != 200:
            raise BackendFailureError(f"poll: HTTP {response.status_code}", request_id)
        return _json(response, "poll", request_id)

    async def prove(self, request: ProofRequest) -> ProofResult:
        """
        Submit and wait for a proof.

        Raises:
            WitnessInvalidError: the prover rejected the witness
            BackendFailureError: job failed or retries were exhausted
            ProvingTimeoutError: not fulfilled within timeout_sec
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.config.timeout_sec

        request_id = await self.submit(request)

        try:
            while True:
                status = await self.poll(request_id)
                state = status.get("status")

                if state == STATUS_FULFILLED:
                    return ProofResult(
                        circuit=request.circuit,
                        system=request.system,
                        public_values=_from_hex(status.get("public_values"), "public values", request_id),
                        proof=_from_hex(status.get("proof"), "proof", request_id),
                        request_id=request_id,
                        metadata={k: v for k, v in status.items()
                                  if k not in ("proof", "public_values")},
                    )

                if state == STATUS_FAILED:
                    raise BackendFailureError(status.get("error") or "job failed", request_id)

                if state != STATUS_PENDING:
                    raise BackendFailureError(f"unknown job status '{state}'", request_id)

                remaining = deadline - loop.time()
                if remaining <= 0:
                    raise ProvingTimeoutError(request_id, self.config.timeout_sec)

                logger.debug(f"Job {request_id} pending")
                await asyncio.sleep(min(self.config.poll_interval_sec, remaining))
        except asyncio.CancelledError:
            logger.info(f"Stopped polling job {request_id}")
            raise
