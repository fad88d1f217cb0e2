import pytest


def _annotation(annotation_id: str = 'a1',
                updated: str = '2019-01-03T19:46:09.334000+00:00',
                text: str = 'comment') -> dict:
    return {'id': annotation_id,
            'created': '2019-01-03T19:46:09.334000+00:00',
            'updated': updated,
            'user': 'acct:alice@hypothes.is',
            'uri': 'https://www.example.com',
            'text': text,
            'tags': ['tag1'],
            'group': '__world__',
            'permissions': {'read': ['group:__world__'],
                            'admin': ['acct:alice@hypothes.is'],
                            'update': ['acct:alice@hypothes.is'],
                            'delete': ['acct:alice@hypothes.is']},
            'target': [{'source': 'https://www.example.com',
                        'selector': [{'type': 'TextQuoteSelector',
                                      'exact': 'Example Domain', 'prefix': '', 'suffix': 'This domain'},
                                     {'type': 'RangeSelector',
                                      'startContainer': '/div[1]/h1[1]', 'startOffset': 0,
                                      'endContainer': '/div[1]/h1[1]', 'endOffset': 14}]}],
            'links': {'html': f'https://hypothes.is/a/{annotation_id}',
                      'incontext': f'https://hyp.is/{annotation_id}/www.example.com/',
                      'json': f'https://hypothes.is/api/annotations/{annotation_id}'},
            'hidden': False,
            'flagged': False,
            'document': {'title': ['Example Domain']},
            'references': [],
            'user_info': {'display_name': None}}


@pytest.fixture
def make_annotation_json():
    return _annotation


@pytest.fixture
def annotation_json() -> dict:
    return _annotation()


@pytest.fixture
def group_json() -> dict:
    return {'id': 'g1',
            'groupid': None,
            'name': 'My group',
            'links': {'html': 'https://hypothes.is/groups/g1/my-group'},
            'organization': '__default__',
            'scoped': False,
            'type': 'private'}


@pytest.fixture
def error_json() -> dict:
    return {'status': 'failure', 'reason': 'Either the resource you requested does not exist, '
                                          'or you are not authorized to access it.'}
