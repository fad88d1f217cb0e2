import json
import logging
import pytest
from unittest.mock import patch
import respx
import httpx
from hypothesisapi import Api
from hypothesisapi import configs
from hypothesisapi.api.base_api import API_MEDIA_TYPE
from hypothesisapi.entities import (Expand, GroupFilters, InputAnnotation, Order, RawSelector, SearchQuery,
                                    Target, TextQuoteSelector, UserAccountID, new_quote)
from hypothesisapi.exceptions import (APIError, HeaderError, HypothesisEnvironmentError, SerializationError,
                                      TransportError, URLError)

# pytest tests --log-cli-level=INFO

_TEST_URL = 'https://test_url.com/api'

# (method, path, call) for every single-call operation
_OPERATIONS = [
    ('POST', '/annotations', lambda api: api.annotations.create(InputAnnotation(uri='https://www.example.com'))),
    ('PATCH', '/annotations/a1', lambda api: api.annotations.update('a1', InputAnnotation(text='new'))),
    ('GET', '/search', lambda api: api.annotations.search(SearchQuery())),
    ('GET', '/annotations/a1', lambda api: api.annotations.get_by_id('a1')),
    ('DELETE', '/annotations/a1', lambda api: api.annotations.delete('a1')),
    ('PUT', '/annotations/a1/flag', lambda api: api.annotations.flag('a1')),
    ('PUT', '/annotations/a1/hide', lambda api: api.annotations.hide('a1')),
    ('DELETE', '/annotations/a1/hide', lambda api: api.annotations.show('a1')),
    ('GET', '/groups', lambda api: api.groups.get_list()),
    ('POST', '/groups', lambda api: api.groups.create('My group')),
    ('GET', '/groups/g1', lambda api: api.groups.get_by_id('g1')),
    ('PATCH', '/groups/g1', lambda api: api.groups.update('g1', name='New name')),
    ('GET', '/groups/g1/members', lambda api: api.groups.get_members('g1')),
    ('DELETE', '/groups/g1/members/me', lambda api: api.groups.leave('g1')),
    ('GET', '/profile', lambda api: api.profile.get_user()),
    ('GET', '/profile/groups', lambda api: api.profile.get_groups()),
]

_MODEL_OPERATIONS = [op for op in _OPERATIONS
                     if not op[1].endswith(('/flag', '/hide', '/members/me'))]
_EMPTY_OPERATIONS = [op for op in _OPERATIONS if op not in _MODEL_OPERATIONS]


def _operation_ids(operations) -> list[str]:
    return [f'{method} {path}' for method, path, _ in operations]


class TestApiClient:
    @pytest.fixture
    def api(self) -> Api:
        api = Api('alice', 'test_api_key', server_url=_TEST_URL)
        yield api
        api.close()

    def test_api_init(self):
        with patch('hypothesisapi.configs.get_value', return_value=None):
            api = Api('alice', 'test_api_key')
        assert api.config.server_url == Api.DEFAULT_SERVER_URL
        assert api.user == UserAccountID.from_username('alice')
        api.close()

        with Api('alice', 'test_api_key', server_url=f'{_TEST_URL}/') as api:
            assert api.config.server_url == _TEST_URL
            assert api.annotations is api.annotations
            assert api.annotations.client is api.groups.client is api.profile.client

    @pytest.mark.parametrize('developer_key', ['bad\nkey', 'bad_key\n', 'bäd'])
    def test_invalid_developer_key(self, developer_key: str):
        with pytest.raises(HeaderError):
            Api('alice', developer_key, server_url=_TEST_URL)

    def test_from_env(self):
        values = {configs.USERNAME_KEY: 'alice', configs.APIKEY_KEY: 'test_api_key'}
        with patch('hypothesisapi.configs.get_value', side_effect=values.get):
            with Api.from_env(server_url=_TEST_URL) as api:
                assert api.username == 'alice'
                assert api.config.developer_key == 'test_api_key'

    @pytest.mark.parametrize('missing, variable', [(configs.USERNAME_KEY, 'HYPOTHESIS_NAME'),
                                                   (configs.APIKEY_KEY, 'HYPOTHESIS_KEY')])
    def test_from_env_missing_variable(self, missing: str, variable: str):
        values = {configs.USERNAME_KEY: 'alice', configs.APIKEY_KEY: 'test_api_key'}
        del values[missing]
        with patch('hypothesisapi.configs.get_value', side_effect=values.get):
            with pytest.raises(HypothesisEnvironmentError) as excinfo:
                Api.from_env(server_url=_TEST_URL)
        assert excinfo.value.variable == variable
        assert variable in str(excinfo.value)

    def test_from_env_variables(self, monkeypatch):
        monkeypatch.setenv('HYPOTHESIS_NAME', 'alice')
        monkeypatch.setenv('HYPOTHESIS_KEY', 'test_api_key')
        with patch('hypothesisapi.configs.read_config', return_value={}):
            with Api.from_env(server_url=_TEST_URL) as api:
                assert str(api.user) == 'acct:alice@hypothes.is'
                assert api.config.developer_key == 'test_api_key'

            monkeypatch.delenv('HYPOTHESIS_KEY')
            with pytest.raises(HypothesisEnvironmentError) as excinfo:
                Api.from_env(server_url=_TEST_URL)
        assert excinfo.value.variable == 'HYPOTHESIS_KEY'

    @respx.mock
    def test_request_headers(self, api: Api, annotation_json: dict):
        route = respx.get(f"{_TEST_URL}/annotations/a1").mock(
            return_value=httpx.Response(200, json=annotation_json)
        )
        api.annotations.get_by_id('a1')
        request = route.calls.last.request
        assert request.headers['Authorization'] == 'Bearer test_api_key'
        assert request.headers['Accept'] == API_MEDIA_TYPE

    @respx.mock
    def test_create_annotation(self, api: Api, annotation_json: dict):
        route = respx.post(f"{_TEST_URL}/annotations").mock(
            return_value=httpx.Response(200, json=annotation_json)
        )
        new_annotation = InputAnnotation(uri='https://www.example.com',
                                         text='comment',
                                         target=Target(selector=[new_quote('Example Domain')]))
        annotation = api.annotations.create(new_annotation)

        assert annotation.id == 'a1'
        assert annotation.user == api.user
        assert isinstance(annotation.target[0].selector[0], TextQuoteSelector)
        payload = json.loads(route.calls.last.request.content)
        assert payload == {'uri': 'https://www.example.com',
                           'text': 'comment',
                           'target': {'selector': [{'type': 'TextQuoteSelector', 'exact': 'Example Domain',
                                                    'prefix': '', 'suffix': ''}]}}

    @respx.mock
    def test_update_annotation(self, api: Api, make_annotation_json):
        route = respx.patch(f"{_TEST_URL}/annotations/a1").mock(
            return_value=httpx.Response(200, json=make_annotation_json(text='new'))
        )
        annotation = api.annotations.update('a1', InputAnnotation(text='new'))
        assert annotation.text == 'new'
        assert json.loads(route.calls.last.request.content) == {'text': 'new'}

    @respx.mock
    def test_search(self, api: Api, make_annotation_json):
        route = respx.get(f"{_TEST_URL}/search").mock(
            return_value=httpx.Response(200, json={'rows': [make_annotation_json('a1'),
                                                            make_annotation_json('a2')],
                                                   'total': 2})
        )
        rows = api.annotations.search(SearchQuery(limit=2, group=['g1', 'g2'], uri_parts='example'))
        assert [r.id for r in rows] == ['a1', 'a2']

        params = route.calls.last.request.url.params
        assert params['limit'] == '2'
        assert params.get_list('group') == ['g1', 'g2']
        assert params['uri.parts'] == 'example'
        assert 'sort' not in params
        assert 'order' not in params

        api.annotations.search()
        assert len(route.calls.last.request.url.params) == 0

    @respx.mock
    def test_search_all(self, api: Api, make_annotation_json):
        first = '2019-01-03T19:46:09.334000+00:00'
        second = '2019-01-04T10:00:00+00:00'
        third = '2019-01-05T10:00:00+00:00'
        route = respx.get(f"{_TEST_URL}/search").mock(side_effect=[
            httpx.Response(200, json={'rows': [make_annotation_json('a1', first),
                                               make_annotation_json('a2', second)], 'total': 3}),
            httpx.Response(200, json={'rows': [make_annotation_json('a3', third)], 'total': 3}),
            httpx.Response(200, json={'rows': [], 'total': 3}),
        ])
        query = SearchQuery(order=Order.ASC, limit=2)
        annotations = api.annotations.search_all(query)

        assert [a.id for a in annotations] == ['a1', 'a2', 'a3']
        assert route.call_count == 3
        cursors = [call.request.url.params.get('search_after') for call in route.calls]
        assert cursors == [None, second, third]
        assert all(call.request.url.params['order'] == 'asc' for call in route.calls)
        # the caller's query is left untouched
        assert query.search_after == ''

    @respx.mock
    def test_get_and_delete_annotation(self, api: Api, annotation_json: dict):
        respx.get(f"{_TEST_URL}/annotations/a1").mock(
            return_value=httpx.Response(200, json=annotation_json)
        )
        respx.delete(f"{_TEST_URL}/annotations/a1").mock(
            return_value=httpx.Response(200, json={'id': 'a1', 'deleted': True})
        )
        annotation = api.annotations.get_by_id('a1')
        assert annotation.document.title == ['Example Domain']
        assert api.annotations.delete('a1') is True

    @respx.mock
    @pytest.mark.parametrize('method, path, call', _EMPTY_OPERATIONS, ids=_operation_ids(_EMPTY_OPERATIONS))
    def test_empty_response_operations(self, api: Api, method: str, path: str, call):
        route = respx.route(method=method, url=f"{_TEST_URL}{path}").mock(
            return_value=httpx.Response(204)
        )
        assert call(api) is None
        assert route.called

    @respx.mock
    def test_groups(self, api: Api, group_json: dict):
        list_route = respx.get(f"{_TEST_URL}/groups").mock(
            return_value=httpx.Response(200, json=[group_json])
        )
        groups = api.groups.get_list(GroupFilters(document_uri='https://www.example.com',
                                                  expand=[Expand.ORGANIZATION]))
        assert groups[0].id == 'g1'
        params = list_route.calls.last.request.url.params
        assert params['document_uri'] == 'https://www.example.com'
        assert params.get_list('expand') == ['organization']
        assert 'authority' not in params

        group_json['organization'] = {'id': '__default__', 'default': True, 'logo': None, 'name': 'Hypothesis'}
        fetch_route = respx.get(f"{_TEST_URL}/groups/g1").mock(
            return_value=httpx.Response(200, json=group_json)
        )
        group = api.groups.get_by_id('g1', expand=[Expand.ORGANIZATION, Expand.SCOPES])
        assert group.organization_expanded
        assert fetch_route.calls.last.request.url.params.get_list('expand') == ['organization', 'scopes']

    @respx.mock
    def test_create_and_update_group(self, api: Api, group_json: dict):
        create_route = respx.post(f"{_TEST_URL}/groups").mock(
            return_value=httpx.Response(200, json=group_json)
        )
        update_route = respx.patch(f"{_TEST_URL}/groups/g1").mock(
            return_value=httpx.Response(200, json=group_json)
        )
        api.groups.create('My group', 'A description')
        assert json.loads(create_route.calls.last.request.content) == {'name': 'My group',
                                                                       'description': 'A description'}
        api.groups.update('g1', description='Other description')
        assert json.loads(update_route.calls.last.request.content) == {'description': 'Other description'}

    @respx.mock
    def test_group_members(self, api: Api):
        respx.get(f"{_TEST_URL}/groups/g1/members").mock(
            return_value=httpx.Response(200, json=[{'authority': 'hypothes.is',
                                                    'username': 'alice',
                                                    'userid': 'acct:alice@hypothes.is',
                                                    'display_name': 'Alice'}])
        )
        members = api.groups.get_members('g1')
        assert members[0].username == 'alice'

    @respx.mock
    def test_profile(self, api: Api, group_json: dict):
        respx.get(f"{_TEST_URL}/profile").mock(
            return_value=httpx.Response(200, json={'authority': 'hypothes.is',
                                                   'features': {'some_feature': True},
                                                   'preferences': {},
                                                   'userid': 'acct:alice@hypothes.is'})
        )
        respx.get(f"{_TEST_URL}/profile/groups").mock(
            return_value=httpx.Response(200, json=[group_json])
        )
        profile = api.profile.get_user()
        assert profile.userid == api.user
        assert profile.features == {'some_feature': True}
        assert [g.name for g in api.profile.get_groups()] == ['My group']

    @respx.mock
    @pytest.mark.parametrize('method, path, call', _OPERATIONS, ids=_operation_ids(_OPERATIONS))
    def test_error_body(self, api: Api, error_json: dict, method: str, path: str, call):
        respx.route(method=method, url=f"{_TEST_URL}{path}").mock(
            return_value=httpx.Response(404, json=error_json)
        )
        with pytest.raises(APIError) as excinfo:
            call(api)
        assert excinfo.value.status == 'failure'
        assert excinfo.value.reason == error_json['reason']
        assert excinfo.value.status_code == 404

    @respx.mock
    @pytest.mark.parametrize('method, path, call', _MODEL_OPERATIONS, ids=_operation_ids(_MODEL_OPERATIONS))
    def test_unparseable_body(self, api: Api, method: str, path: str, call):
        respx.route(method=method, url=f"{_TEST_URL}{path}").mock(
            return_value=httpx.Response(200, text='<html>not json</html>')
        )
        with pytest.raises(APIError) as excinfo:
            call(api)
        assert excinfo.value.status == ''
        assert excinfo.value.reason == ''
        assert excinfo.value.raw_text == '<html>not json</html>'
        assert 'not json' in str(excinfo.value)

    @respx.mock
    @pytest.mark.parametrize('method, path, call', _EMPTY_OPERATIONS, ids=_operation_ids(_EMPTY_OPERATIONS))
    def test_empty_response_server_error(self, api: Api, method: str, path: str, call):
        respx.route(method=method, url=f"{_TEST_URL}{path}").mock(
            return_value=httpx.Response(500, text='Internal Server Error')
        )
        with pytest.raises(APIError) as excinfo:
            call(api)
        assert excinfo.value.status_code == 500
        assert excinfo.value.raw_text == 'Internal Server Error'

    @respx.mock
    def test_transport_error(self, api: Api):
        respx.get(f"{_TEST_URL}/annotations/a1").mock(side_effect=httpx.ConnectError('connection refused'))
        with pytest.raises(TransportError):
            api.annotations.get_by_id('a1')

    @respx.mock
    def test_invalid_url(self, api: Api):
        respx.get(f"{_TEST_URL}/annotations/a1").mock(side_effect=httpx.InvalidURL('bad url'))
        with pytest.raises(URLError):
            api.annotations.get_by_id('a1')

    @respx.mock
    def test_unencodable_payload(self, api: Api):
        route = respx.post(f"{_TEST_URL}/annotations")
        selector = RawSelector(type='CustomSelector', blob=object())
        with pytest.raises(SerializationError) as excinfo:
            api.annotations.create(InputAnnotation(target=Target(selector=[selector])))
        assert 'CustomSelector' in excinfo.value.raw_text
        assert not route.called

    @respx.mock
    def test_http_errors_logged_at_debug(self, api: Api, error_json: dict, caplog):
        respx.get(f"{_TEST_URL}/annotations/a1").mock(return_value=httpx.Response(404, json=error_json))
        logger = logging.getLogger('hypothesisapi')
        logger.addHandler(caplog.handler)
        try:
            with caplog.at_level(logging.DEBUG, logger='hypothesisapi'):
                with pytest.raises(APIError):
                    api.annotations.get_by_id('a1')
        finally:
            logger.removeHandler(caplog.handler)
        assert any('404' in r.getMessage() for r in caplog.records)
        assert all(r.levelno < logging.WARNING for r in caplog.records)
