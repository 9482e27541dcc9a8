import json
import logging

import logfire

from pdsync.core.config import Settings
from pdsync.exceptions import (
    AuthenticationError,
    ClassifiedTransportError,
    ConfigurationError,
    ConnectivityError,
    PermissionDeniedError,
    RateLimitError,
    RemoteServerError,
    TransportError,
    ValidationError,
)
from pdsync.pipedrive.api import CONNECT_ERROR_CODE, MISSING_CREDENTIALS_MSG, PipedriveClient
from pdsync.pipedrive.field_mappings import (
    build_person_payload,
    get_name_mapping,
    get_nested_value,
    load_field_mappings,
    load_input_data,
)
from pdsync.pipedrive.models import FieldMapping, Person

logger = logging.getLogger('pdsync.pipedrive')

_STATUS_ERRORS = {401: AuthenticationError, 403: PermissionDeniedError, 429: RateLimitError}


def classify_transport_error(exc: TransportError) -> TransportError:
    """
    Turn a TransportError into the matching ClassifiedTransportError using its status code or error code. Errors we
    don't recognise are returned unchanged.
    """
    if isinstance(exc, ClassifiedTransportError):
        return exc
    if exc.status_code in _STATUS_ERRORS:
        error_cls = _STATUS_ERRORS[exc.status_code]
    elif exc.status_code is not None and exc.status_code >= 500:
        error_cls = RemoteServerError
    elif exc.error_code == CONNECT_ERROR_CODE:
        error_cls = ConnectivityError
    else:
        return exc
    return error_cls.from_transport_error(exc)


def _dumps(obj) -> str:
    return json.dumps(obj, indent=2, default=str)


async def sync_person(input_data: dict, mappings: list[FieldMapping], client: PipedriveClient) -> Person:
    """
    Sync one person to Pipedrive: build the payload from the mappings, look the person up by name and then update the
    match or create a new person.
    """
    if not client.settings.has_pd_credentials:
        raise ConfigurationError(MISSING_CREDENTIALS_MSG)
    if not input_data:
        raise ConfigurationError('Input data is empty or invalid')
    if not mappings:
        raise ConfigurationError('Mappings configuration is empty or invalid')

    logger.info('Starting Pipedrive person synchronization...')
    logger.debug('Input data: %s', _dumps(input_data))
    logger.debug('Mappings: %s', _dumps([m.model_dump(by_alias=True) for m in mappings]))

    name_mapping = get_name_mapping(mappings)
    if not name_mapping:
        raise ValidationError('No mapping found for "name" field - required for person identification')
    name_mapping_count = sum(m.pipedrive_key == 'name' for m in mappings)
    if name_mapping_count > 1:
        raise ValidationError(f'Found {name_mapping_count} mappings for "name" field - exactly one is required')

    name = get_nested_value(input_data, name_mapping.input_key)
    if not name or not isinstance(name, str):
        raise ValidationError(f'Invalid or missing name value for field: {name_mapping.input_key}')

    person_data = build_person_payload(input_data, mappings)
    logger.info('Built person payload: %s', _dumps(person_data))

    with logfire.span('sync_person {name}', name=name):
        try:
            logger.info(f'Searching for person with name: "{name}"')
            existing_person = await client.search_person_by_name(name)
            if existing_person:
                logger.info('Updating existing person...')
                person = await client.update_person(existing_person.id, person_data)
            else:
                logger.info('Creating new person...')
                person = await client.create_person(person_data)
        except TransportError as e:
            classified = classify_transport_error(e)
            logger.error(f'Error syncing person "{name}": {classified}')
            if classified is e:
                raise
            raise classified from e

    logger.info('Synchronization completed successfully!')
    return person


async def run_sync(settings: Settings) -> Person:
    """Run a sync using the credentials and the mappings / input data files from settings"""
    if not settings.has_pd_credentials:
        raise ConfigurationError(MISSING_CREDENTIALS_MSG)

    mappings = load_field_mappings(settings.mappings_path)
    input_data = load_input_data(settings.input_data_path)
    async with PipedriveClient(settings) as client:
        return await sync_person(input_data, mappings, client)
