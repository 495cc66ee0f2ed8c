import io

import pytest

from data.seed_data import seed_database
from models import db, Program
from test_html_parser import SAMPLE_PAGE

DATA_STRUCTURES = '2554210'
DATABASES = '2554211'
OPERATING_SYSTEMS = '2554212'


@pytest.fixture()
def program_id(app):
    with app.app_context():
        seed_database()
        return Program.query.filter_by(code='504').one().id


def upload(client, url, content=SAMPLE_PAGE, filename='programacion.html', field='file'):
    data = {field: (io.BytesIO(content.encode('utf-8')), filename)}
    return client.post(url, data=data, content_type='multipart/form-data')


def test_health(client):
    response = client.get('/api/health')

    assert response.status_code == 200
    assert response.get_json()['status'] == 'ok'
    assert response.headers['Cache-Control'].startswith('no-cache')


def test_unknown_route_returns_json(client):
    response = client.get('/api/nothing-here')

    assert response.status_code == 404
    assert 'error' in response.get_json()


# Catalog

def test_list_and_get_programs(client, program_id):
    listing = client.get('/api/programs/').get_json()['programs']
    assert [p['code'] for p in listing] == ['504']
    assert listing[0]['subject_count'] == 5

    program = client.get(f'/api/programs/{program_id}').get_json()
    assert program['semester'] == '20261'
    assert len(program['subjects']) == 5


def test_search_subjects_by_code_and_name(client, program_id):
    by_name = client.get(f'/api/programs/{program_id}/subjects/search?q=datos').get_json()['subjects']
    assert [s['code'] for s in by_name] == [DATA_STRUCTURES, DATABASES]

    by_code = client.get(f'/api/programs/{program_id}/subjects/search?q=4212').get_json()['subjects']
    assert [s['code'] for s in by_code] == [OPERATING_SYSTEMS]

    empty = client.get(f'/api/programs/{program_id}/subjects/search').get_json()['subjects']
    assert empty == []


def test_get_subject(client, program_id):
    response = client.get(f'/api/programs/{program_id}/subjects/{DATA_STRUCTURES}')
    assert response.status_code == 200
    assert [g['number'] for g in response.get_json()['groups']] == ['1', '2', '3']

    assert client.get(f'/api/programs/{program_id}/subjects/0000').status_code == 404
    assert client.get('/api/programs/999/subjects/0000').status_code == 404


def test_delete_program(client, app, program_id):
    assert client.delete(f'/api/programs/{program_id}').get_json() == {'success': True}
    assert client.get(f'/api/programs/{program_id}').status_code == 404


# Upload

def test_parse_upload_does_not_store(client, app):
    response = upload(client, '/api/upload/parse')

    assert response.status_code == 200
    body = response.get_json()
    assert body['subject_count'] == 2
    assert body['program']['program']['code'] == '504'
    with app.app_context():
        assert Program.query.count() == 0


def test_parse_upload_rejections(client):
    assert client.post('/api/upload/parse').status_code == 400
    assert upload(client, '/api/upload/parse', filename='page.pdf').status_code == 400
    assert upload(client, '/api/upload/parse', content='<html></html>').status_code == 400


def test_import_stores_and_replaces_program(client, app):
    first = upload(client, '/api/upload/import').get_json()
    assert first['success_count'] == 1
    assert first['results'][0]['subjects_added'] == 2
    assert first['results'][0]['replaced'] is False

    second = upload(client, '/api/upload/import', field='files[]').get_json()
    assert second['results'][0]['replaced'] is True

    with app.app_context():
        assert Program.query.count() == 1


def test_import_reports_per_file_errors(client):
    body = upload(client, '/api/upload/import', content='<p>nada</p>').get_json()

    assert body['success_count'] == 0
    assert body['results'][0]['status'] == 'error'


def test_import_rejects_page_with_out_of_range_hours(client, app):
    page = SAMPLE_PAGE.replace('MJ6-8', 'MJ5-7')
    result = upload(client, '/api/upload/import', content=page).get_json()['results'][0]

    assert result['status'] == 'error'
    assert '2554212' in result['message']
    with app.app_context():
        assert Program.query.count() == 0


def test_options_upload_lists_programs(client):
    script = "o[0] = new Option('INGENIERÍA DE SISTEMAS','504');"
    body = upload(client, '/api/upload/options', content=script, filename='programas.js').get_json()

    assert body['options'] == [{'value': '504', 'label': 'INGENIERÍA DE SISTEMAS'}]


def test_options_upload_rejections(client):
    assert client.post('/api/upload/options').status_code == 400
    assert upload(client, '/api/upload/options', content='var o;', filename='x.js').status_code == 400
    assert upload(client, '/api/upload/options', filename='x.pdf').status_code == 400


# Schedule generation

def test_generate_from_stored_program(client, program_id):
    response = client.post('/api/schedules/generate', json={
        'program_id': program_id,
        'selected_codes': [DATA_STRUCTURES, DATABASES],
    })

    assert response.status_code == 200
    body = response.get_json()
    assert body['combinations_found'] == 4
    assert body['partial'] is False
    scores = [s['score'] for s in body['schedules']]
    assert scores == sorted(scores, reverse=True)
    for schedule in body['schedules']:
        assert sorted(g['subject_code'] for g in schedule['groups']) == [DATA_STRUCTURES, DATABASES]


def test_generate_respects_min_start_hour_option(client, program_id):
    body = client.post('/api/schedules/generate', json={
        'program_id': program_id,
        'selected_codes': [DATA_STRUCTURES, DATABASES],
        'options': {'minStartHour': 8, 'topK': 1},
    }).get_json()

    assert body['combinations_found'] == 2
    assert len(body['schedules']) == 1


def test_generate_from_inline_subjects(client):
    body = client.post('/api/schedules/generate', json={
        'subjects': [
            {'code': 'A', 'name': 'Álgebra', 'groups': [
                {'number': '1', 'capacity_available': 5,
                 'time_slots': [{'days': 'L', 'start_hour': 8, 'end_hour': 10}]},
                {'number': '2', 'capacity_available': 5,
                 'time_slots': [{'days': 'L', 'start_hour': 10, 'end_hour': 12}]},
            ]},
            {'code': 'B', 'name': 'Biología', 'groups': [
                {'number': '1', 'capacity_available': 5,
                 'time_slots': [{'days': 'L', 'start_hour': 9, 'end_hour': 10}]},
            ]},
        ],
        'selected_codes': ['A', 'B', 'Z'],
    }).get_json()

    assert [s['signature'] for s in body['schedules']] == ['A-2|B-1']
    assert body['unknown_codes'] == ['Z']


@pytest.mark.parametrize('payload', [
    {'selected_codes': ['A']},
    {'program_id': '1', 'selected_codes': ['A']},
    {'subjects': 'A', 'selected_codes': ['A']},
    {'subjects': [{'name': 'no code'}], 'selected_codes': ['A']},
    {'subjects': [], 'selected_codes': 'A'},
    {'subjects': [], 'selected_codes': [], 'options': {'top_k': 0}},
])
def test_generate_rejects_malformed_input(client, payload):
    response = client.post('/api/schedules/generate', json=payload)

    assert response.status_code == 400
    assert 'error' in response.get_json()


@pytest.mark.parametrize('bad_slot', [
    {'days': 'L', 'start_hour': 12, 'end_hour': 8},
    {'days': [], 'start_hour': 8, 'end_hour': 10},
])
def test_generate_rejects_invalid_inline_slots(client, bad_slot):
    response = client.post('/api/schedules/generate', json={
        'subjects': [
            {'code': 'A', 'name': 'Álgebra', 'groups': [
                {'number': '1', 'capacity_available': 5, 'time_slots': [bad_slot]},
            ]},
            {'code': 'B', 'name': 'Biología', 'groups': [
                {'number': '1', 'capacity_available': 5,
                 'time_slots': [{'days': 'L', 'start_hour': 9, 'end_hour': 10}]},
            ]},
        ],
        'selected_codes': ['A', 'B'],
    })

    assert response.status_code == 400
    assert 'group 1 of subject A' in response.get_json()['error']


def test_generate_requires_json_body(client):
    response = client.post('/api/schedules/generate', data='not json', content_type='text/plain')
    assert response.status_code == 400


def test_generate_unknown_program(client):
    response = client.post('/api/schedules/generate', json={'program_id': 999, 'selected_codes': []})
    assert response.status_code == 404


# Clash check

def test_check_clash_reports_overlapping_group(client, program_id):
    body = client.post('/api/schedules/check-clash', json={
        'program_id': program_id,
        'selection': [{'subject_code': DATA_STRUCTURES, 'group_number': '1'}],
        'candidate': {'subject_code': OPERATING_SYSTEMS, 'group_number': '2'},
    }).get_json()

    assert body['has_clash'] is True
    assert body['clashing'][0]['subject_code'] == DATA_STRUCTURES
    assert body['clashing'][0]['days'] == ['WED']


def test_check_clash_without_overlap(client, program_id):
    body = client.post('/api/schedules/check-clash', json={
        'program_id': program_id,
        'selection': [{'subject_code': DATA_STRUCTURES, 'group_number': '1'}],
        'candidate': {'subject_code': DATABASES, 'group_number': '1'},
    }).get_json()

    assert body == {'has_clash': False, 'clashing': []}


def test_check_clash_unknown_group(client, program_id):
    response = client.post('/api/schedules/check-clash', json={
        'program_id': program_id,
        'selection': [],
        'candidate': {'subject_code': DATABASES, 'group_number': '9'},
    })
    assert response.status_code == 404

    response = client.post('/api/schedules/check-clash', json={
        'program_id': program_id,
        'selection': [{'subject_code': '0000', 'group_number': '1'}],
        'candidate': {'subject_code': DATABASES, 'group_number': '1'},
    })
    assert response.status_code == 404
