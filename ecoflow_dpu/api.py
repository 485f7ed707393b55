"""EcoFlow open platform REST client."""

import asyncio
import hashlib
import hmac
import logging
import random
import time
from dataclasses import dataclass
from functools import wraps
from typing import Any, Callable, Dict, List, Optional

import aiohttp

from .config import Credentials
from .const import (
    API_CERTIFICATION_ENDPOINT,
    API_DEVICE_LIST_ENDPOINT,
    API_QUOTA_ALL_ENDPOINT,
    API_TIMEOUT,
    ECOFLOW_API_HOST,
)
from .exceptions import ApiError, AuthenticationError
from .schemas import parse_baseline

_LOGGER = logging.getLogger(__name__)

# Response codes for a rejected access key or signature
AUTH_ERROR_CODES = {"8513", "8521", "8524"}


# Transport failures worth retrying; anything else is raised immediately
CONNECTION_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError)


def retry_with_backoff(
    max_retries: int = 3,
    initial_delay: float = 1.0,
    backoff_factor: float = 2.0,
    exceptions: tuple = CONNECTION_ERRORS,
):
    """Retry a coroutine with exponential backoff, re-raising the last error.

    Args:
        max_retries: Retries after the first attempt
        initial_delay: Seconds before the first retry
        backoff_factor: Delay multiplier applied after each retry
        exceptions: Exception types that trigger a retry
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs) -> Any:
            attempts = max_retries + 1
            delay = initial_delay

            for attempt in range(1, attempts + 1):
                try:
                    return await func(*args, **kwargs)
                except exceptions as err:
                    if attempt == attempts:
                        _LOGGER.error(
                            "%s gave up after %d attempts: %s", func.__name__, attempts, err
                        )
                        raise
                    _LOGGER.warning(
                        "%s attempt %d/%d failed, retrying in %.1fs: %s",
                        func.__name__,
                        attempt,
                        attempts,
                        delay,
                        err,
                    )
                    await asyncio.sleep(delay)
                    delay *= backoff_factor

        return wrapper
    return decorator


@dataclass
class DeviceInfo:
    """A device bound to the developer account."""

    serial_number: str
    product_name: str
    display_name: str
    online: bool = False


@dataclass
class MqttCredentials:
    """Broker connection details issued by the certification endpoint."""

    host: str
    port: int
    protocol: str
    username: str
    password: str

    def __repr__(self) -> str:
        return (
            f"MqttCredentials(host={self.host!r}, port={self.port}, "
            f"protocol={self.protocol!r}, username={self.username!r})"
        )

    @property
    def use_tls(self) -> bool:
        return self.protocol in ("mqtts", "ssl", "tls")


def _flatten(params: Dict[str, Any], prefix: str = "") -> List[tuple]:
    """Flatten nested params into sorted ``a.b=value`` pairs for signing."""
    pairs = []
    for key, value in params.items():
        name = f"{prefix}.{key}" if prefix else key
        if isinstance(value, dict):
            pairs.extend(_flatten(value, name))
        elif isinstance(value, list):
            for index, item in enumerate(value):
                item_name = f"{name}[{index}]"
                if isinstance(item, dict):
                    pairs.extend(_flatten(item, item_name))
                else:
                    pairs.append((item_name, item))
        else:
            pairs.append((name, value))
    return sorted(pairs)


def sign_request(
    credentials: Credentials,
    params: Optional[Dict[str, Any]],
    nonce: str,
    timestamp: str,
) -> str:
    """Compute the HMAC-SHA256 signature the open platform expects."""
    pairs = _flatten(params or {})
    pairs += [
        ("accessKey", credentials.access_key),
        ("nonce", nonce),
        ("timestamp", timestamp),
    ]
    message = "&".join(f"{key}={value}" for key, value in pairs)
    return hmac.new(
        credentials.secret_key.encode(), message.encode(), hashlib.sha256
    ).hexdigest()


class EcoflowRestClient:
    """Async client for the one-shot startup calls of the open platform."""

    def __init__(
        self,
        credentials: Credentials,
        host: str = ECOFLOW_API_HOST,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        """Initialize with open platform credentials."""
        self.credentials = credentials
        self.host = host.rstrip("/")
        self._session = session
        self._owns_session = session is None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create an aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=API_TIMEOUT)
            )
            self._owns_session = True
        return self._session

    async def close_session(self) -> None:
        """Close the aiohttp session if this client created it."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    def _signed_headers(self, params: Optional[Dict[str, Any]]) -> Dict[str, str]:
        nonce = str(random.randint(100000, 999999))
        timestamp = str(int(time.time() * 1000))
        return {
            "accessKey": self.credentials.access_key,
            "nonce": nonce,
            "timestamp": timestamp,
            "sign": sign_request(self.credentials, params, nonce, timestamp),
        }

    async def _get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Issue a signed GET and return the ``data`` member of the response."""
        url = f"{self.host}{endpoint}"
        session = await self._get_session()

        async with session.get(
            url, params=params, headers=self._signed_headers(params)
        ) as response:
            if response.status == 401:
                raise AuthenticationError(f"{endpoint} rejected the access key")
            if response.status != 200:
                text = await response.text()
                raise ApiError(f"{endpoint} returned HTTP {response.status}: {text}")
            body = await response.json(content_type=None)

        if not isinstance(body, dict):
            raise ApiError(f"Unexpected response format from {endpoint}: {body}")

        code = str(body.get("code", "0"))
        if code in AUTH_ERROR_CODES:
            raise AuthenticationError(body.get("message") or f"code {code}")
        if code != "0":
            raise ApiError(f"{endpoint} failed: {body.get('message')}", code=code)

        return body.get("data")

    @retry_with_backoff(max_retries=2, initial_delay=1.0)
    async def async_get_devices(self) -> List[DeviceInfo]:
        """List the devices bound to the account."""
        data = await self._get(API_DEVICE_LIST_ENDPOINT)
        if not isinstance(data, list):
            raise ApiError(f"Unexpected device list: {data}")

        devices = []
        for record in data:
            serial_number = record.get("sn") if isinstance(record, dict) else None
            if not serial_number:
                _LOGGER.debug("Skipping device record without serial: %s", record)
                continue
            devices.append(
                DeviceInfo(
                    serial_number=serial_number,
                    product_name=record.get("productName", ""),
                    display_name=record.get("deviceName") or serial_number,
                    online=record.get("online") == 1,
                )
            )

        _LOGGER.info("Found %d devices", len(devices))
        return devices

    @retry_with_backoff(max_retries=2, initial_delay=1.0)
    async def async_get_baseline(self, serial_number: str) -> Dict[str, Any]:
        """Fetch the full property snapshot of one device."""
        data = await self._get(API_QUOTA_ALL_ENDPOINT, {"sn": serial_number})
        if not isinstance(data, dict):
            raise ApiError(f"Unexpected quota snapshot for {serial_number}: {data}")
        _LOGGER.debug("Baseline for %s has %d properties", serial_number, len(data))
        return parse_baseline(data)

    @retry_with_backoff(max_retries=2, initial_delay=2.0)
    async def async_get_mqtt_credentials(self) -> MqttCredentials:
        """Fetch the broker address and certificate account."""
        data = await self._get(API_CERTIFICATION_ENDPOINT)
        try:
            return MqttCredentials(
                host=data["url"],
                port=int(data["port"]),
                protocol=data.get("protocol", "mqtts"),
                username=data["certificateAccount"],
                password=data["certificatePassword"],
            )
        except (KeyError, TypeError, ValueError) as err:
            raise ApiError(f"Unexpected certification response: {err}") from err
