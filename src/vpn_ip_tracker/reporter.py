"""Reports VPN interface addresses to the remote endpoint."""

import asyncio
import logging
from typing import Optional

import aiohttp

from vpn_ip_tracker.config import Config
from vpn_ip_tracker.errors import ReportError, ReportErrorKind
from vpn_ip_tracker.snapshot import InterfaceSnapshot

logger = logging.getLogger(__name__)

# Header carrying the application token
CREDENTIAL_HEADER = "Credential"


class Reporter:
    """POSTs the current VPN address to the report URL.

    Features:
    - Plain text body holding only the address
    - Token sent verbatim in the Credential header, never logged
    - Single attempt per call; the monitor retries on its next cycle
    - Context manager for session lifecycle
    """

    # Request timeout
    REQUEST_TIMEOUT = 10.0  # seconds
    # Bytes of an error reply kept for the debug log
    ERROR_BODY_LIMIT = 100

    def __init__(self, http_session: Optional[aiohttp.ClientSession] = None):
        """Initialize reporter.

        Args:
            http_session: Optional aiohttp session (for testing).
        """
        self._session = http_session
        self._owns_session = http_session is None

    async def __aenter__(self):
        """Enter async context, creating session if needed."""
        if self._session is None:
            self._session = aiohttp.ClientSession()
        return self

    async def __aexit__(self, *args):
        """Exit async context, closing owned session."""
        await self.close()

    async def report(self, snapshot: InterfaceSnapshot, config: Config) -> None:
        """Send one report.

        Args:
            snapshot: VPN interface state to report.
            config: Validated tracker configuration.

        Raises:
            ConfigInvalidError: If the config is incomplete.
            ReportError: If the endpoint could not be reached or did not
                answer with a 2xx status.
        """
        if self._session is None:
            raise RuntimeError("Reporter not initialized - use async context manager")

        config.validate()

        try:
            async with self._session.post(
                config.report_url,
                data=snapshot.address_text,
                headers={
                    CREDENTIAL_HEADER: config.token,
                    "Content-Type": "text/plain",
                },
                timeout=aiohttp.ClientTimeout(total=self.REQUEST_TIMEOUT),
            ) as resp:
                if not 200 <= resp.status < 300:
                    prefix = await self._read_error_prefix(resp)
                    logger.debug(f"Report endpoint replied {resp.status}: {prefix}")
                    raise ReportError(
                        ReportErrorKind.STATUS,
                        f"Report endpoint returned HTTP {resp.status}",
                        status=resp.status,
                    )
        except aiohttp.ClientSSLError as e:
            raise ReportError(ReportErrorKind.TLS, f"TLS error: {e}") from e
        except asyncio.TimeoutError as e:
            raise ReportError(
                ReportErrorKind.TRANSPORT,
                f"Request timed out after {self.REQUEST_TIMEOUT}s",
            ) from e
        except (aiohttp.ClientError, OSError) as e:
            raise ReportError(ReportErrorKind.TRANSPORT, f"Transport error: {e}") from e

        logger.debug(f"Reported {snapshot}")

    async def _read_error_prefix(self, resp: aiohttp.ClientResponse) -> str:
        """First bytes of an error reply, decoded leniently for logging."""
        try:
            body = await resp.content.read(self.ERROR_BODY_LIMIT)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.debug(f"Could not read error body: {e}")
            return ""
        return body.decode("utf-8", errors="replace")

    async def close(self) -> None:
        """Close the HTTP session if owned."""
        if self._owns_session and self._session:
            await self._session.close()
            self._session = None
