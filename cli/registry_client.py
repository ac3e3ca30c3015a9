"""HTTP client for communicating with the Registry service."""

import base64
import json
import time
import uuid
from typing import Any, Dict, List, Optional

import httpx

from common.constants import (
    HASH_NAME_INDEX,
    TRANSIENT_FILE_DELETE_KEY,
    TRANSIENT_FILE_KEY,
    TRANSIENT_FILE_OWNER_KEY,
)
from common.logging_config import get_logger
from cli.config import Config
from cli.constants import GREEN, RESET
from registry.composite_key import is_composite_key, parse_key, prefix_range
from registry.exceptions import MalformedKeyError

logger = get_logger(__name__)


class RegistryClient:
    """HTTP client for the Registry API with retry logic and error handling."""

    def __init__(self, config: Config):
        """
        Initialize registry client.

        Args:
            config: Configuration instance
        """
        self.config = config
        self.session = httpx.Client(
            base_url=config.get_base_url(),
            timeout=config.get_timeout()
        )
        self.request_id = None
        logger.info(f"Initialized RegistryClient [base_url={config.get_base_url()}]")

    def reconnect(self) -> None:
        """Rebuild the HTTP session after the registry address changed."""
        self.session.close()
        self.session = httpx.Client(
            base_url=self.config.get_base_url(),
            timeout=self.config.get_timeout()
        )

    def _request_with_retry(
        self,
        method: str,
        endpoint: str,
        max_retries: Optional[int] = None,
        **kwargs
    ) -> httpx.Response:
        """
        Make HTTP request with retry logic on 5xx errors and network failures.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: API endpoint path
            max_retries: Max retry attempts (uses config default if None)
            **kwargs: Additional arguments to pass to httpx request

        Returns:
            HTTP response object

        Raises:
            ConnectionError: If max retries exceeded or connection fails
        """
        retry_config = self.config.get_retry_config()
        max_retries = max_retries if max_retries is not None else retry_config['max_retries']
        backoff = retry_config['retry_backoff_multiplier']

        last_exception = None

        self.request_id = str(uuid.uuid4())
        kwargs.setdefault('headers', {})
        kwargs['headers']['X-Request-ID'] = self.request_id

        logger.debug(f"Making request: {method} {endpoint} [request_id={self.request_id}]")

        for attempt in range(max_retries + 1):
            try:
                response = self.session.request(method, endpoint, **kwargs)

                logger.debug(
                    f"Response received: {method} {endpoint} status={response.status_code} [request_id={self.request_id}]"
                )

                if 400 <= response.status_code < 500:
                    logger.warning(
                        f"Client error: {method} {endpoint} status={response.status_code} [request_id={self.request_id}]"
                    )
                    return response

                if response.status_code >= 500 and attempt < max_retries:
                    delay = backoff ** attempt
                    logger.warning(
                        f"Server error (attempt {attempt + 1}/{max_retries + 1}): "
                        f"{method} {endpoint} status={response.status_code}, retrying in {delay}s [request_id={self.request_id}]"
                    )
                    time.sleep(delay)
                    continue

                return response

            except (httpx.ConnectError, httpx.TimeoutException) as e:
                last_exception = e
                if attempt < max_retries:
                    delay = backoff ** attempt
                    logger.warning(
                        f"Network error (attempt {attempt + 1}/{max_retries + 1}): "
                        f"{method} {endpoint} error={type(e).__name__}, retrying in {delay}s [request_id={self.request_id}]"
                    )
                    time.sleep(delay)
                    continue
                logger.error(
                    f"Network error (max retries exceeded): {method} {endpoint} error={e} [request_id={self.request_id}]"
                )

        if isinstance(last_exception, httpx.TimeoutException):
            raise ConnectionError("Request timed out. Registry may be overloaded.")
        if isinstance(last_exception, httpx.ConnectError):
            raise ConnectionError("Cannot connect to registry server. Is it running?")
        raise ConnectionError("Max retries exceeded")

    def _format_error(self, response: httpx.Response) -> str:
        """
        Map HTTP errors to user-friendly messages.

        Args:
            response: HTTP response object

        Returns:
            User-friendly error message
        """
        try:
            error_data = response.json()
            detail = error_data.get('detail', 'Unknown error')
            code = error_data.get('code', 'UNKNOWN')
        except ValueError:
            detail = response.text if response.text else 'Unknown error'
            code = 'UNKNOWN'

        if not isinstance(detail, str):
            detail = json.dumps(detail)

        error_messages = {
            'PROTOCOL_ERROR': 'Malformed invocation',
            'VALIDATION_ERROR': 'Invalid input',
            'ALREADY_EXISTS': 'File already exists',
            'NOT_FOUND': 'File not found',
            'MALFORMED_KEY': 'Malformed composite key',
            'LEDGER_ERROR': 'Ledger failure on the registry',
        }

        if code in error_messages:
            return f"{error_messages[code]}: {detail}"

        status_messages = {
            400: 'Bad request',
            404: 'Not found',
            409: 'Conflict',
            422: 'Request rejected by the registry',
            500: 'Server error',
            503: 'Service unavailable',
        }

        message = status_messages.get(response.status_code, detail)
        return f"{message} (Code: {code})" if code != 'UNKNOWN' else message

    def invoke(
        self,
        function: str,
        args: Optional[List[str]] = None,
        transient: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        """
        Invoke a registry operation.

        Transient payloads are serialized to JSON text; they travel in the
        request body only and never appear in the call record.
        """
        body = {
            'function': function,
            'args': args or [],
            'transient': {key: json.dumps(value) for key, value in (transient or {}).items()},
        }
        logger.info(f"Invoking {function} [args={len(body['args'])}] [transient_keys={sorted(body['transient'])}]")
        return self._request_with_retry('POST', '/invoke', json=body)

    @staticmethod
    def decode_payload(response: httpx.Response) -> bytes:
        payload = response.json().get('payload')
        if payload is None:
            return b''
        return base64.b64decode(payload)

    def _run(self, action: str, function: str, render, args=None, transient=None) -> str:
        try:
            response = self.invoke(function, args=args, transient=transient)
            if response.status_code != 200:
                return f"{action} failed: {self._format_error(response)}"
            return render(self.decode_payload(response))
        except ConnectionError as e:
            logger.error(f"Connection error during {function}: {e}")
            return f"Error: {e}"
        except Exception as e:
            logger.error(f"Unexpected error during {function}: {e}", exc_info=True)
            return f"Unexpected error during {action.lower()}: {e}"

    def create_file(self, name: str, content_hash: str, timestamp: int, owner: str, folio: int) -> str:
        transient = {
            TRANSIENT_FILE_KEY: {
                'name': name,
                'contentHash': content_hash,
                'timestamp': timestamp,
                'owner': owner,
                'folio': folio,
            }
        }
        return self._run(
            "Create", "create",
            lambda _: f"{GREEN}File created:{RESET} {name}",
            transient=transient,
        )

    def read_file(self, name: str) -> str:
        return self._run("Read", "readShared", _format_record, args=[name])

    def read_file_details(self, name: str) -> str:
        return self._run("Read details", "readRestricted", _format_record, args=[name])

    def transfer_file(self, name: str, owner: str) -> str:
        return self._run(
            "Transfer", "transfer",
            lambda _: f"{GREEN}File transferred:{RESET} {name} -> {owner}",
            transient={TRANSIENT_FILE_OWNER_KEY: {'name': name, 'owner': owner}},
        )

    def delete_file(self, name: str) -> str:
        return self._run(
            "Delete", "delete",
            lambda _: f"{GREEN}File deleted:{RESET} {name}",
            transient={TRANSIENT_FILE_DELETE_KEY: {'name': name}},
        )

    def get_file_hash(self, name: str) -> str:
        return self._run("Hash", "digestShared", lambda payload: payload.hex(), args=[name])

    def get_file_details_hash(self, name: str) -> str:
        return self._run("Details hash", "digestRestricted", lambda payload: payload.hex(), args=[name])

    def get_files_by_range(self, start_key: str, end_key: str) -> str:
        return self._run("Range query", "rangeScan", _format_range, args=[start_key, end_key])

    def get_files_by_hash(self, content_hash: str) -> str:
        start_key, end_key = prefix_range(HASH_NAME_INDEX, [content_hash])

        def render(payload: bytes) -> str:
            names = []
            for entry in json.loads(payload):
                _, segments = parse_key(entry['Key'])
                names.append(segments[1])
            if not names:
                return f"No files indexed under {content_hash}"
            return "\n".join(names)

        return self._run("Hash query", "rangeScan", render, args=[start_key, end_key])

    def history(self, limit: int = 20) -> str:
        try:
            response = self._request_with_retry('GET', '/invocations', params={'limit': limit})
            if response.status_code != 200:
                return f"History failed: {self._format_error(response)}"

            invocations = response.json()['invocations']
            if not invocations:
                return "No invocations recorded"

            lines = []
            for invocation in invocations:
                args = " ".join(_printable_key(arg) for arg in invocation['args'])
                status = invocation['status']
                if invocation.get('error_code'):
                    status = f"{status} ({invocation['error_code']})"
                lines.append(f"{invocation['created_at']}  {invocation['function']} {args}  [{status}]")
            return "\n".join(lines)
        except ConnectionError as e:
            logger.error(f"Connection error during history: {e}")
            return f"Error: {e}"
        except Exception as e:
            logger.error(f"Unexpected error during history: {e}", exc_info=True)
            return f"Unexpected error during history: {e}"


def _format_record(payload: bytes) -> str:
    return json.dumps(json.loads(payload), indent=2, ensure_ascii=False)


def _printable_key(key: str) -> str:
    if is_composite_key(key):
        try:
            index_name, segments = parse_key(key)
            return f"{index_name}:{':'.join(segments)}"
        except MalformedKeyError:
            return repr(key)
    return key


def _format_range(payload: bytes) -> str:
    entries = json.loads(payload)
    if not entries:
        return "No entries in range"

    lines = []
    for entry in entries:
        key = _printable_key(entry['Key'])
        record = entry['Record']
        if record is None:
            lines.append(f"{key}  (index entry)")
        else:
            lines.append(f"{key}  {json.dumps(record, ensure_ascii=False)}")
    return "\n".join(lines)
