import logging
import re
from typing import Any, TypeVar, Generic, Type, Sequence, Callable, Awaitable
import asyncio
import json
from dataclasses import dataclass
import httpx
import aiohttp
from pydantic import TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError
from hypothesisapi.entities.base_entity import BaseEntity
from hypothesisapi.exceptions import (APIError, ErrorBody, HeaderError, SerializationError,
                                      TransportError, URLError)

logger = logging.getLogger(__name__)

# Generic type for entities
T = TypeVar('T', bound=BaseEntity)
R = TypeVar('R')

API_MEDIA_TYPE = 'application/vnd.hypothesis.v1+json'
_HEADER_VALUE_RE = re.compile(r"[\t\x20-\x7e]*")

# Keeps a reference to the session finalizers of bulk calls that returned early
_BACKGROUND_TASKS: set[asyncio.Future] = set()


@dataclass
class ApiConfig:
    """Configuration for API client.

    Attributes:
        server_url: Base URL for the API.
        username: Authenticated user name.
        developer_key: Personal API key of the user.
        timeout: Request timeout in seconds.
    """
    server_url: str
    username: str
    developer_key: str
    timeout: float = 30.0

    def build_headers(self) -> dict[str, str]:
        """Build the authentication headers.

        Raises:
            HeaderError: If the developer key cannot be used in a header value.
        """
        authorization = f"Bearer {self.developer_key}"
        if not _HEADER_VALUE_RE.fullmatch(authorization):
            raise HeaderError("Invalid header value: the developer key contains characters "
                              "not allowed in an HTTP header.")
        return {'Authorization': authorization,
                'Accept': API_MEDIA_TYPE}


class BaseApi:
    """Base class for all API endpoint handlers.

    Single calls are synchronous and go through a shared ``httpx.Client``.
    Bulk calls run concurrently on one ``aiohttp.ClientSession`` per batch.
    Responses are decoded by shape: first as the expected success type, then as an
    API error body.
    """

    def __init__(self,
                 config: ApiConfig,
                 client: httpx.Client | None = None) -> None:
        """Initialize the base API handler.

        Args:
            config: API configuration containing base URL, credentials, etc.
            client: Optional HTTP client instance. If None, a new one will be created.
        """
        self.config = config
        self.client = client or self._create_client()

    def _create_client(self) -> httpx.Client:
        """Create and configure HTTP client with authentication and timeouts."""
        return create_client(self.config)

    def _make_request(self, method: str, endpoint: str, **kwargs) -> httpx.Response:
        """Make HTTP request with error handling. There are no retries.

        Args:
            method: HTTP method (GET, POST, PUT, PATCH, DELETE)
            endpoint: API endpoint path
            **kwargs: Additional arguments for the request

        Returns:
            HTTP response object, whatever its status code.

        Raises:
            TransportError: If the request could not be completed.
            URLError: If the URL is malformed.
        """
        url = endpoint.lstrip('/')  # Remove leading slash for httpx

        try:
            curl_command = self._generate_curl_command({"method": method,
                                                        "url": f"{self.config.server_url}/{url}",
                                                        "headers": self.client.headers,
                                                        **kwargs})
            logger.debug(f'Equivalent curl command: "{curl_command}"')
            response = self.client.request(method, url, **kwargs)
        except httpx.InvalidURL as e:
            raise URLError(f"Couldn't build URL for {method} {endpoint}: {e}") from e
        except httpx.RequestError as e:
            logger.debug(f"Request error for {method} {endpoint}: {e}")
            raise TransportError(f"Request error for {method} {endpoint}: {e}") from e

        if response.is_error:
            logger.debug(f"HTTP error {response.status_code} for {method} {endpoint}: {response.text}")
        return response

    def _generate_curl_command(self, request_args: dict) -> str:
        """
        Generate a curl command for debugging purposes.

        Args:
            request_args (dict): Request arguments dictionary containing method, url, headers, etc.

        Returns:
            str: Equivalent curl command
        """
        method = request_args.get('method', 'GET').upper()
        url = request_args['url']
        headers = request_args.get('headers', {})
        data = request_args.get('json')
        params = request_args.get('params')

        curl_command = ['curl']

        if method != 'GET':
            curl_command.extend(['-X', method])

        for key, value in headers.items():
            if key.lower() == 'authorization':
                value = 'Bearer <YOUR-API-KEY>'  # Mask API key for security
            curl_command.extend(['-H', f"'{key}: {value}'"])

        if params:
            items = params.items() if isinstance(params, dict) else params
            param_str = '&'.join([f"{k}={v}" for k, v in items])
            url = f"{url}?{param_str}"
        curl_command.append(f"'{url}'")

        if data is not None:
            curl_command.extend(['-d', f"'{json.dumps(data)}'"])

        return ' '.join(curl_command)

    @staticmethod
    def _dump_payload(payload: Any) -> Any:
        """Encode a request payload (model or dict) to a JSON compatible object."""
        try:
            if hasattr(payload, 'asdict'):
                return payload.asdict()
            return TypeAdapter(type(payload)).dump_python(payload, mode='json', by_alias=True)
        except PydanticSerializationError as e:
            raise SerializationError(f"Could not encode request payload: {e}", raw_text=repr(payload)) from e

    @staticmethod
    def _api_error(text: str, status_code: int | None = None) -> APIError:
        """Build an :class:`APIError` from a response body. Never fails."""
        try:
            error = ErrorBody.model_validate_json(text)
        except ValidationError:
            error = ErrorBody(status='', reason='')
        return APIError(error, raw_text=text, status_code=status_code)

    @staticmethod
    def _parse_response(text: str, response_type: Any, status_code: int | None = None) -> Any:
        """Decode `text` as `response_type`; otherwise raise the API error it contains.

        Raises:
            APIError: If `text` does not match `response_type`.
        """
        try:
            return TypeAdapter(response_type).validate_json(text)
        except ValidationError as e:
            logger.debug(f"Response does not match {response_type}: {e}")
            raise BaseApi._api_error(text, status_code) from None

    @staticmethod
    def _check_empty_response(text: str, status_code: int | None = None) -> None:
        """Endpoints answering with an empty body on success and an error body on failure.

        Raises:
            APIError: If `text` is an error body or the status code is an error.
        """
        try:
            error = ErrorBody.model_validate_json(text)
        except ValidationError:
            if status_code is not None and status_code >= 400:
                raise APIError(ErrorBody(status='', reason=''), raw_text=text, status_code=status_code)
            return
        raise APIError(error, raw_text=text, status_code=status_code)

    def _request_model(self, method: str, endpoint: str, response_type: Any, **kwargs) -> Any:
        response = self._make_request(method, endpoint, **kwargs)
        return self._parse_response(response.text, response_type, response.status_code)

    def _request_empty(self, method: str, endpoint: str, **kwargs) -> None:
        response = self._make_request(method, endpoint, **kwargs)
        self._check_empty_response(response.text, response.status_code)

    async def _make_request_async(self,
                                  method: str,
                                  endpoint: str,
                                  session: aiohttp.ClientSession | None = None,
                                  **kwargs) -> tuple[int, str]:
        """Make asynchronous HTTP request with error handling.

        Args:
            method: HTTP method (GET, POST, PUT, PATCH, DELETE)
            endpoint: API endpoint path
            session: Optional aiohttp session. If None, a new one will be created.
            **kwargs: Additional arguments for the request

        Returns:
            Tuple of (status code, response text)

        Raises:
            TransportError: If the request could not be completed.
        """
        url = f"{self.config.server_url.rstrip('/')}/{endpoint.lstrip('/')}"
        headers = kwargs.pop('headers', {})
        headers.update(self.config.build_headers())
        timeout = aiohttp.ClientTimeout(total=self.config.timeout)

        async def make_request(client_session: aiohttp.ClientSession) -> tuple[int, str]:
            logger.debug(f"Running request to {url}")
            curl_command = self._generate_curl_command({"method": method,
                                                        "url": url,
                                                        "headers": headers,
                                                        **kwargs})
            logger.debug(f'Equivalent curl command: "{curl_command}"')
            try:
                async with client_session.request(method=method,
                                                  url=url,
                                                  headers=headers,
                                                  timeout=timeout,
                                                  **kwargs) as response:
                    text = await response.text()
                    if response.status >= 400:
                        logger.debug(f"HTTP error {response.status} for {method} {endpoint}: {text}")
                    return response.status, text
            except aiohttp.InvalidURL as e:
                raise URLError(f"Couldn't build URL for {method} {endpoint}: {e}") from e
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                logger.debug(f"Request error for {method} {endpoint}: {e}")
                raise TransportError(f"Request error for {method} {endpoint}: {e}") from e

        if session is not None:
            return await make_request(session)
        else:
            async with aiohttp.ClientSession() as temp_session:
                return await make_request(temp_session)

    async def _request_model_async(self,
                                   method: str,
                                   endpoint: str,
                                   response_type: Any,
                                   session: aiohttp.ClientSession | None = None,
                                   **kwargs) -> Any:
        status, text = await self._make_request_async(method, endpoint, session=session, **kwargs)
        return self._parse_response(text, response_type, status)

    async def _run_concurrently(self,
                                calls: Sequence[Callable[[aiohttp.ClientSession], Awaitable[R]]]
                                ) -> list[R]:
        """Run independent calls concurrently on one session.

        Results are returned in the same order as `calls`.
        As soon as a call fails, its exception is raised and no partial result is returned.
        The remaining calls keep running in the background; the session is closed once they end.
        Note that :meth:`_run_sync` cancels them when its event loop shuts down.
        """
        if len(calls) == 0:
            return []
        session = aiohttp.ClientSession()
        tasks = [asyncio.ensure_future(call(session)) for call in calls]
        closing = asyncio.ensure_future(_close_when_done(session, tasks))
        _BACKGROUND_TASKS.add(closing)
        closing.add_done_callback(_BACKGROUND_TASKS.discard)

        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
        if not pending:
            await closing
        # several calls may fail in the same iteration of the loop
        for task in tasks:
            if task in done and not task.cancelled() and task.exception() is not None:
                raise task.exception()
        return [task.result() for task in tasks]

    @staticmethod
    def _run_sync(coro: Awaitable[R]) -> R:
        """Run a bulk coroutine from synchronous code.
        Inside a running event loop, await the ``*_async`` method instead.
        """
        return asyncio.run(coro)


class EntityBaseApi(BaseApi, Generic[T]):
    """Base API handler for entity-related endpoints with CRUD operations.

    Type Parameters:
        T: The entity type this API handler manages (must extend BaseEntity)
    """

    def __init__(self, config: ApiConfig,
                 entity_class: Type[T],
                 endpoint_base: str,
                 client: httpx.Client | None = None) -> None:
        """Initialize the entity API handler.

        Args:
            config: API configuration containing base URL, credentials, etc.
            entity_class: The entity class this handler manages
            endpoint_base: Base endpoint path (e.g., 'groups', 'annotations')
            client: Optional HTTP client instance. If None, a new one will be created.
        """
        super().__init__(config, client)
        self.entity_class = entity_class
        self.endpoint_base = endpoint_base.strip('/')

    def _entity_endpoint(self, entity_id: str, add_path: str = '') -> str:
        add_path = '/'.join(add_path.strip().strip('/').split('/'))
        endpoint = f'/{self.endpoint_base}/{entity_id}'
        if add_path:
            endpoint = f'{endpoint}/{add_path}'
        return endpoint

    def get_by_id(self, entity_id: str, **kwargs) -> T:
        """Get a specific entity by its ID.

        Args:
            entity_id: Unique identifier for the entity.

        Returns:
            Entity instance.

        Raises:
            APIError: If the entity is not found or the request fails.
        """
        return self._request_model('GET', self._entity_endpoint(entity_id), self.entity_class, **kwargs)

    async def get_by_id_async(self, entity_id: str,
                              session: aiohttp.ClientSession | None = None,
                              **kwargs) -> T:
        return await self._request_model_async('GET', self._entity_endpoint(entity_id), self.entity_class,
                                               session=session, **kwargs)

    def _create(self, entity_data: Any) -> T:
        """Create a new entity.

        Args:
            entity_data: Payload for the entity creation.

        Returns:
            The created entity.

        Raises:
            APIError: If creation fails.
        """
        return self._request_model('POST', f'/{self.endpoint_base}', self.entity_class,
                                   json=self._dump_payload(entity_data))

    async def _create_async(self, entity_data: Any,
                            session: aiohttp.ClientSession | None = None) -> T:
        return await self._request_model_async('POST', f'/{self.endpoint_base}', self.entity_class,
                                               session=session,
                                               json=self._dump_payload(entity_data))

    def _update(self, entity_id: str, entity_data: Any) -> T:
        """Update an existing entity with a (partial) representation.

        Raises:
            APIError: If update fails or entity not found.
        """
        return self._request_model('PATCH', self._entity_endpoint(entity_id), self.entity_class,
                                   json=self._dump_payload(entity_data))

    async def _update_async(self, entity_id: str, entity_data: Any,
                            session: aiohttp.ClientSession | None = None) -> T:
        return await self._request_model_async('PATCH', self._entity_endpoint(entity_id), self.entity_class,
                                               session=session,
                                               json=self._dump_payload(entity_data))


def create_client(config: ApiConfig) -> httpx.Client:
    """Create the authenticated transport shared by the endpoint handlers."""
    return httpx.Client(
        base_url=config.server_url,
        headers=config.build_headers(),
        timeout=config.timeout
    )


async def _close_when_done(session: aiohttp.ClientSession, tasks: Sequence[asyncio.Future]) -> None:
    """Close `session` once every task has ended, retrieving their exceptions."""
    try:
        await asyncio.gather(*tasks, return_exceptions=True)
    finally:
        await session.close()
