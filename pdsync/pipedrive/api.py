import logging
from typing import Optional

import httpx
import logfire
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from pdsync.core.config import Settings
from pdsync.exceptions import ConfigurationError, TransportError, ValidationError
from pdsync.pipedrive.models import Person, PersonSearchResult

logger = logging.getLogger('pdsync.pipedrive')

CONNECT_ERROR_CODE = 'connect_error'
MISSING_CREDENTIALS_MSG = 'Missing required environment variables: PIPEDRIVE_API_KEY or PIPEDRIVE_COMPANY_DOMAIN'
UNEXPECTED_RESPONSE_MSG = 'Pipedrive returned an unexpected response'


def _extract_rate_limit_headers(response: httpx.Response) -> dict:
    return {
        'limit': response.headers.get('x-ratelimit-limit'),
        'remaining': response.headers.get('x-ratelimit-remaining'),
        'reset': response.headers.get('x-ratelimit-reset'),
        'daily_left': response.headers.get('x-daily-requests-left'),
    }


def _validate(model: type[BaseModel], result: dict):
    try:
        return model.model_validate(result['data'])
    except PydanticValidationError as e:
        logger.error(f'Unexpected response from Pipedrive: {result}')
        raise TransportError(UNEXPECTED_RESPONSE_MSG, response_data=result) from e


def _response_data(response: httpx.Response):
    try:
        return response.json()
    except ValueError:
        return response.text


class PipedriveClient:
    """
    Client for the Pipedrive v1 persons API.

    Credentials come from the settings passed in, the httpx client can be passed in too (the tests use this to plug in
    a mock transport), otherwise one is created and closed with the PipedriveClient.
    """

    def __init__(self, settings: Settings, http_client: Optional[httpx.AsyncClient] = None):
        if not settings.has_pd_credentials:
            raise ConfigurationError(MISSING_CREDENTIALS_MSG)
        self.settings = settings
        self.base_url = settings.pd_api_url
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=settings.pd_request_timeout)

    async def __aenter__(self) -> 'PipedriveClient':
        return self

    async def __aexit__(self, *args) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def pipedrive_request(
        self,
        endpoint: str,
        *,
        method: str = 'GET',
        query_params: Optional[dict] = None,
        data: Optional[dict] = None,
    ) -> dict:
        """
        Make a request to the Pipedrive API v1.

        Args:
            endpoint: The API endpoint (without the /api/v1/ prefix)
            method: HTTP method (GET, POST, PUT)
            query_params: Query parameters dict, the api token is added to these
            data: Request body data

        Returns:
            Response JSON data

        Raises:
            TransportError: if no response was received or Pipedrive replied with an error status
        """
        url = f'{self.base_url}/{endpoint}'
        params = {**(query_params or {}), 'api_token': self.settings.pd_api_key}

        with logfire.span(f'{method} {endpoint}'):
            try:
                response = await self._client.request(
                    method=method, url=url, params=params, json=data, headers={'Accept': 'application/json'}
                )
            except httpx.RequestError as e:
                error_code = CONNECT_ERROR_CODE if isinstance(e, httpx.ConnectError) else type(e).__name__
                logger.error(f'Pipedrive request {method} {endpoint} failed: {e!r}')
                raise TransportError(f'Pipedrive request failed: {e}', error_code=error_code) from e

            rate_limit_info = _extract_rate_limit_headers(response)
            logger.info(
                f'Request method={method} url={endpoint} status_code={response.status_code} '
                f'rate_limit={rate_limit_info["remaining"]}/{rate_limit_info["limit"]} '
                f'daily_left={rate_limit_info["daily_left"]}'
            )
            try:
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                error_data = _response_data(response)
                # not e, its message has the request url and so the api token
                logger.error(
                    f'Pipedrive API error: {method} {endpoint} status_code={response.status_code}. '
                    f'Response: {error_data}'
                )
                raise TransportError(
                    f'Pipedrive API error: {response.status_code}',
                    status_code=response.status_code,
                    response_data=error_data,
                ) from e

            try:
                result = response.json()
            except ValueError as e:
                raise TransportError(
                    'Pipedrive returned an invalid JSON response',
                    status_code=response.status_code,
                    response_data=response.text,
                ) from e
            if not isinstance(result, dict):
                logger.error(f'Unexpected response from Pipedrive for {method} {endpoint}: {result}')
                raise TransportError(UNEXPECTED_RESPONSE_MSG, status_code=response.status_code, response_data=result)
            return result

    async def search_person_by_name(self, name: str) -> Optional[Person]:
        """Fuzzy search for a person by name, returns the best match or None"""
        if not name:
            raise ValidationError('A name is required to search for a person')

        result = await self.pipedrive_request(
            'persons/search',
            query_params={'term': name, 'exact_match': 'false', 'limit': 1},
        )
        if result.get('success') and result.get('data'):
            search_result = _validate(PersonSearchResult, result)
            if search_result.items:
                person = search_result.items[0].item
                logger.info(f'Found existing person: {person.name} (ID: {person.id})')
                return person

        logger.info(f'No existing person found with name: {name}')
        return None

    async def create_person(self, person_data: dict) -> Person:
        """Create person in Pipedrive"""
        result = await self.pipedrive_request('persons', method='POST', data=person_data)
        person = self._person_from_result(result, 'create')
        logger.info(f'Successfully created person: {person.name} (ID: {person.id})')
        return person

    async def update_person(self, person_id: int, person_data: dict) -> Person:
        """Update person using PUT, person_data replaces every mapped field"""
        result = await self.pipedrive_request(f'persons/{person_id}', method='PUT', data=person_data)
        person = self._person_from_result(result, 'update')
        logger.info(f'Successfully updated person: {person.name} (ID: {person.id})')
        return person

    @staticmethod
    def _person_from_result(result: dict, action: str) -> Person:
        if not result.get('success') or not result.get('data'):
            logger.error(f'Failed to {action} person in Pipedrive. Response: {result}')
            raise TransportError(f'Failed to {action} person in Pipedrive', response_data=result)
        return _validate(Person, result)
