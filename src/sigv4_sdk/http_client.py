"""
HTTP client for sending signed requests

This module sends the requests produced by the service request builders.
Each request is sent once; failures surface as ServerCommunicationError.
"""

import logging
from typing import Optional

import requests

from .config import ClientConfig
from .exceptions import ServerCommunicationError
from .services.common import ServiceRequest
from .version import __version__

logger = logging.getLogger(__name__)


class SigV4HttpClient:
    """
    HTTP client for signed service requests.

    Wraps a requests.Session configured from a ClientConfig. Requests must be
    signed before they are handed to send().
    """

    def __init__(self, config: ClientConfig, session: Optional[requests.Session] = None):
        """
        Initialize the HTTP client.

        Args:
            config: Client configuration settings
            session: Optional existing session to send through
        """
        self.config = config
        self.session = session or self._create_session()

        logger.info(f"Initialized SigV4 HTTP client for region: {config.region}")

    def _create_session(self) -> requests.Session:
        session = requests.Session()
        session.headers.update({
            'User-Agent': f'SigV4-Python-SDK/{__version__}'
        })
        return session

    def send(self, request: ServiceRequest) -> requests.Response:
        """
        Send a signed request.

        Args:
            request: Signed request from a service builder

        Returns:
            requests.Response: Successful response

        Raises:
            ServerCommunicationError: On network errors or non-2xx responses
        """
        logger.debug(f"Making {request.method} request to {request.url}")

        try:
            response = self.session.request(
                request.method,
                request.url,
                headers=request.headers,
                data=request.body,
                timeout=self.config.timeout,
                verify=self.config.verify_ssl,
            )
        except requests.exceptions.Timeout:
            raise ServerCommunicationError(
                f"Request timeout after {self.config.timeout} seconds",
                "TIMEOUT"
            )
        except requests.exceptions.ConnectionError as e:
            raise ServerCommunicationError(f"Connection error: {e}", "CONNECTION_ERROR")
        except requests.exceptions.RequestException as e:
            raise ServerCommunicationError(f"Request failed: {e}", "REQUEST_FAILED")

        if not response.ok:
            raise ServerCommunicationError(
                f"Server request failed: HTTP {response.status_code}: {response.reason}",
                "HTTP_ERROR",
                http_status=response.status_code,
                details={'body': response.text}
            )

        return response

    def close(self) -> None:
        """Close the underlying session."""
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


def create_client(config: Optional[ClientConfig] = None) -> SigV4HttpClient:
    """
    Create an HTTP client.

    Args:
        config: Client configuration (read from the environment if None)

    Returns:
        SigV4HttpClient: Configured client
    """
    return SigV4HttpClient(config or ClientConfig.from_env())
