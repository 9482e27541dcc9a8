"""
Field mappings - turns the input data into the payload sent to Pipedrive for a person.

The mappings file is a JSON list of {"pipedriveKey": ..., "inputKey": ...} objects, where inputKey is a dot
separated path into the input data. Mapped values are copied as they are, apart from email and phone which Pipedrive
wants as a list of labelled entries.
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from pdsync.exceptions import ConfigurationError
from pdsync.pipedrive.models import ContactInfo, FieldMapping

logger = logging.getLogger('pdsync.pipedrive')

CONTACT_INFO_FIELDS = ('email', 'phone')

_field_mappings_adapter = TypeAdapter(list[FieldMapping])


def get_nested_value(data: Any, path: str) -> Any:
    """
    Get the value at a dot separated path, eg 'contact.address.city'.

    Returns None if any part of the path is missing. A key that is present with a null value is treated the same as a
    missing key. Numeric parts index into lists, so 'contact.phones.0' is the first phone.
    """
    current = data
    for key in path.split('.'):
        if isinstance(current, dict):
            current = current.get(key)
        elif isinstance(current, list) and key.isdigit() and int(key) < len(current):
            current = current[int(key)]
        else:
            return None
        if current is None:
            return None
    return current


def format_contact_info(value: str, label: str = 'work', primary: bool = True) -> list[dict]:
    if not value:
        return []
    return [ContactInfo(label=label, value=value, primary=primary).model_dump()]


def build_person_payload(input_data: dict, mappings: list[FieldMapping]) -> dict:
    """
    Build the person data to send to Pipedrive from the input data.

    Mappings whose input value can't be found are skipped. If more than one mapping targets the same Pipedrive key,
    the last one wins.
    """
    payload = {}
    for mapping in mappings:
        value = get_nested_value(input_data, mapping.input_key)
        if value is None:
            logger.debug('No value found for %s, skipping %s', mapping.input_key, mapping.pipedrive_key)
            continue

        if mapping.pipedrive_key in CONTACT_INFO_FIELDS and isinstance(value, str):
            payload[mapping.pipedrive_key] = format_contact_info(value)
        else:
            payload[mapping.pipedrive_key] = value
    return payload


def get_name_mapping(mappings: list[FieldMapping]) -> Optional[FieldMapping]:
    return next((m for m in mappings if m.pipedrive_key == 'name'), None)


def _read_json(path: Path, description: str) -> Any:
    try:
        return json.loads(Path(path).read_text())
    except FileNotFoundError as e:
        raise ConfigurationError(f'{description} file not found: {path}') from e
    except (OSError, ValueError) as e:
        raise ConfigurationError(f'Could not read {description} file {path}: {e}') from e


def load_field_mappings(path: Path) -> list[FieldMapping]:
    """Load and validate the mappings file"""
    raw_mappings = _read_json(path, 'Mappings')
    try:
        return _field_mappings_adapter.validate_python(raw_mappings)
    except PydanticValidationError as e:
        raise ConfigurationError(f'Mappings configuration is invalid: {e}') from e


def load_input_data(path: Path) -> dict:
    input_data = _read_json(path, 'Input data')
    if not isinstance(input_data, dict):
        raise ConfigurationError(f'Input data in {path} must be a JSON object')
    return input_data
