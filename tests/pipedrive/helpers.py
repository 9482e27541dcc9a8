"""Shared utilities for Pipedrive tests."""

import json

import httpx


class FakePipedrive:
    """
    In memory stand-in for the Pipedrive persons API.

    error_responses maps (method, path) tuples to the error to return for that request, path being relative to
    /api/v1/, eg ('GET', 'persons/search').
        - For HTTP errors: tuple of (status_code, error_message)
        - For 200 responses with success=false: a dict, returned as the response body
        - For exceptions: Exception instance to raise
    """

    def __init__(self):
        self.db = {'persons': {}}
        self.requests = []
        self.error_responses = {}

    def add_person(self, person_id: int, name: str, **fields) -> dict:
        self.db['persons'][person_id] = {'id': person_id, 'name': name, **fields}
        return self.db['persons'][person_id]


def fake_pd_handler(fake_pipedrive: FakePipedrive):
    """Create an httpx.MockTransport handler backed by fake_pipedrive"""

    def _handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path.split('/api/v1/', 1)[1]
        params = dict(request.url.params)
        payload = json.loads(request.content) if request.content else None
        fake_pipedrive.requests.append({'method': request.method, 'path': path, 'params': params, 'json': payload})

        error_key = (request.method, path)
        if error_key in fake_pipedrive.error_responses:
            error = fake_pipedrive.error_responses[error_key]
            if isinstance(error, Exception):
                raise error
            elif isinstance(error, dict):
                return httpx.Response(200, json=error)
            else:
                status_code, error_msg = error
                return httpx.Response(status_code, json={'success': False, 'error': error_msg})

        persons = fake_pipedrive.db['persons']
        if request.method == 'GET' and path == 'persons/search':
            term = params['term'].lower()
            matches = [p for p in persons.values() if term in p['name'].lower()][: int(params['limit'])]
            items = [{'result_score': 1.0, 'item': p} for p in matches]
            return httpx.Response(200, json={'success': True, 'data': {'items': items}})
        elif request.method == 'POST' and path == 'persons':
            person_id = len(persons) + 1
            persons[person_id] = {**payload, 'id': person_id}
            return httpx.Response(200, json={'success': True, 'data': persons[person_id]})
        else:
            assert request.method == 'PUT', f'Unexpected request {request.method} {path}'
            person_id = int(path.split('/')[1])
            if person_id not in persons:
                return httpx.Response(404, json={'success': False, 'error': 'Not Found'})
            persons[person_id].update(payload)
            return httpx.Response(200, json={'success': True, 'data': persons[person_id]})

    return _handler
