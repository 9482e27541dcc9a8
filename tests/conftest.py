import httpx
import pytest

from pdsync.core.config import Settings
from pdsync.pipedrive.api import PipedriveClient
from tests.pipedrive.helpers import FakePipedrive, fake_pd_handler


@pytest.fixture(name='settings')
def settings_fixture() -> Settings:
    """Settings with test credentials, ignoring any local .env file"""
    return Settings(_env_file=None, pd_api_key='test-key', pd_company_domain='test-company')


@pytest.fixture(name='fake_pipedrive')
def fake_pipedrive_fixture() -> FakePipedrive:
    return FakePipedrive()


@pytest.fixture(name='http_client')
async def http_client_fixture(fake_pipedrive):
    client = httpx.AsyncClient(transport=httpx.MockTransport(fake_pd_handler(fake_pipedrive)))
    yield client
    await client.aclose()


@pytest.fixture(name='pd_client')
async def pd_client_fixture(settings, http_client):
    async with PipedriveClient(settings, http_client=http_client) as client:
        yield client


@pytest.fixture
def jane_input_data():
    return {'contact': {'fullName': 'Jane Doe', 'email': 'jane@x.com'}}


@pytest.fixture
def jane_mappings_data():
    return [
        {'pipedriveKey': 'name', 'inputKey': 'contact.fullName'},
        {'pipedriveKey': 'email', 'inputKey': 'contact.email'},
    ]
