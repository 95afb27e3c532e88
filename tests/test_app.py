import io
from urllib.parse import parse_qs, urlparse

import pandas as pd

import store
from routine import SLOTS


def upload(client, name, body, filename):
    return client.post(f'/admin/upload/{name}', data={'file': (io.BytesIO(body), filename)},
                       content_type='multipart/form-data', follow_redirects=True)


def test_landing_page(client):
    resp = client.get('/')
    assert resp.status_code == 200
    assert b'Enter as Student' in resp.data


def test_admin_requires_login(client):
    resp = client.get('/admin')
    assert resp.status_code == 302
    location = urlparse(resp.headers['Location'])
    assert location.path == '/admin/login'
    assert parse_qs(location.query)['next'] == ['/admin']


def test_wrong_password_is_rejected(client):
    resp = client.post('/admin/login', data={'username': 'admin', 'password': 'nope'})
    assert resp.status_code == 200
    assert b'Incorrect password' in resp.data
    assert client.get('/admin').status_code == 302


def test_login_and_logout(admin_client):
    assert admin_client.get('/admin').status_code == 200
    admin_client.get('/admin/logout')
    assert admin_client.get('/admin').status_code == 302


def test_upload_creates_draft_not_published(app, admin_client, routine_csv):
    resp = upload(admin_client, 'routine', routine_csv, 'routine.csv')
    assert b'Parsed 5 classes from 2 day blocks.' in resp.data
    assert admin_client.get('/api/publish').get_json() == {'routine': False, 'tif': False}
    with app.app_context():
        draft = store.load_snapshot(store.ROUTINE, store.DRAFT)
    assert len(draft['data']) == 5
    assert draft['meta']['file_name'] == 'routine.csv'


def test_publish_promotes_drafts(admin_client, routine_csv, tif_csv):
    upload(admin_client, 'routine', routine_csv, 'routine.csv')
    upload(admin_client, 'tif', tif_csv, 'teachers.csv')
    resp = admin_client.post('/admin/publish', follow_redirects=True)
    assert b'Published: routine, tif.' in resp.data
    assert admin_client.get('/api/publish').get_json() == {'routine': True, 'tif': True}

    published = admin_client.get('/api/published/routine').get_json()
    assert published['meta']['file_name'] == 'routine.csv'
    assert published['at']
    assert published['data'][0] == {'day': 'Saturday', 'slot': SLOTS[0], 'course': 'Algorithms (65_C)',
                                    'batch': '65_C', 'teacher': 'AM', 'room': 'KT-101'}
    tif = admin_client.get('/api/published/tif').get_json()
    assert [t['initial'] for t in tif['data']] == ['AM', 'RH']


def test_failed_parse_leaves_empty_draft(app, admin_client):
    bad = b'Class Routine\nKT-101,Algorithms,AM\n'
    resp = upload(admin_client, 'routine', bad, 'routine.csv')
    assert b'No day banner rows detected.' in resp.data
    with app.app_context():
        draft = store.load_snapshot(store.ROUTINE, store.DRAFT)
    assert draft['data'] == []
    assert draft['meta']['error'] == 'No day banner rows detected.'

    resp = admin_client.post('/admin/publish', follow_redirects=True)
    assert b'Nothing to publish.' in resp.data
    assert admin_client.get('/api/published/routine').status_code == 404


def test_unreadable_workbook_is_reported(admin_client):
    resp = upload(admin_client, 'routine', b'garbage', 'routine.xlsx')
    assert b'Could not read routine.xlsx' in resp.data


def test_unsupported_extension(admin_client):
    resp = upload(admin_client, 'routine', b'hello', 'routine.txt')
    assert b'Unsupported file type' in resp.data


def test_xlsx_upload(admin_client, sample_grid):
    buf = io.BytesIO()
    pd.DataFrame(sample_grid).to_excel(buf, header=False, index=False)
    resp = upload(admin_client, 'routine', buf.getvalue(), 'routine.xlsx')
    assert b'Parsed 5 classes from 2 day blocks.' in resp.data


def test_discard_drafts(app, admin_client, routine_csv):
    upload(admin_client, 'routine', routine_csv, 'routine.csv')
    admin_client.post('/admin/discard')
    with app.app_context():
        assert store.load_snapshot(store.ROUTINE, store.DRAFT) is None


def test_clear_published(admin_client, routine_csv):
    upload(admin_client, 'routine', routine_csv, 'routine.csv')
    admin_client.post('/admin/publish')
    admin_client.post('/admin/clear')
    assert admin_client.get('/api/publish').get_json() == {'routine': False, 'tif': False}


def test_admin_preview_uses_draft(admin_client, routine_csv):
    upload(admin_client, 'routine', routine_csv, 'routine.csv')
    resp = admin_client.get('/admin?tab=student&day=Saturday')
    assert b'Algorithms (65_C)' in resp.data
    resp = admin_client.get('/admin/export/student.csv?batch=64_B')
    assert resp.status_code == 200
    assert b'Compiler (Sec A)(64_B)' in resp.data


def test_student_portal_before_publish(client):
    resp = client.get('/student?day=Saturday')
    assert b'No published routine yet.' in resp.data


def test_student_portal_after_publish(client, admin_client, routine_csv):
    upload(admin_client, 'routine', routine_csv, 'routine.csv')
    admin_client.post('/admin/publish')
    admin_client.get('/admin/logout')

    resp = client.get('/student')
    assert b'Pick any of Day / Batch / Slot' in resp.data
    resp = client.get('/student?tab=student&day=Saturday&batch=66_a')
    assert b'Data Structures (66_A)' in resp.data
    assert b'Algorithms (65_C)' not in resp.data


def test_student_csv_export(client, admin_client, routine_csv):
    upload(admin_client, 'routine', routine_csv, 'routine.csv')
    admin_client.post('/admin/publish')

    resp = client.get('/student/export.csv?batch=65_C')
    assert resp.status_code == 200
    assert 'student_allDays_65_C_any.csv' in resp.headers['Content-Disposition']
    df = pd.read_csv(io.BytesIO(resp.data), encoding='utf-8-sig')
    assert list(df['Course']) == ['Algorithms (65_C)', 'Networks Lab (65_C)']


def test_pdf_export(client, admin_client, routine_csv):
    upload(admin_client, 'routine', routine_csv, 'routine.csv')
    admin_client.post('/admin/publish')
    resp = client.get('/teacher/export.pdf?initial=am')
    assert resp.status_code == 200
    assert resp.mimetype == 'application/pdf'
    assert resp.data.startswith(b'%PDF')


def test_teacher_export_needs_initial(client):
    assert client.get('/teacher/export.csv').status_code == 400
    assert client.get('/teacher/export.doc?initial=AM').status_code == 404


def test_teacher_portal_shows_info(client, admin_client, routine_csv, tif_csv):
    upload(admin_client, 'routine', routine_csv, 'routine.csv')
    upload(admin_client, 'tif', tif_csv, 'teachers.csv')
    admin_client.post('/admin/publish')

    resp = client.get('/teacher?tab=teacher&initial=am')
    assert b'Abdul Mannan' in resp.data
    assert b'Compiler (Sec A)(64_B)' in resp.data
    assert b'Data Structures (66_A)' not in resp.data


def test_rooms_tab(client, admin_client, routine_csv):
    upload(admin_client, 'routine', routine_csv, 'routine.csv')
    admin_client.post('/admin/publish')
    resp = client.get(f'/student?tab=rooms&er_day=Saturday&er_slot={SLOTS[0]}')
    assert b'KT-208' in resp.data


def test_api_publish_requires_login(client):
    resp = client.post('/api/publish', json={'routine': []})
    assert resp.status_code == 401
    assert client.delete('/api/publish').status_code == 401


def test_api_publish_and_delete(admin_client):
    rows = [{'day': 'Monday', 'slot': SLOTS[0], 'course': 'OS (65_C)', 'batch': '65_C',
             'teacher': 'AM', 'room': 'KT-1'}]
    resp = admin_client.post('/api/publish', json={'routine': rows, 'routineMeta': {'file_name': 'api'}})
    assert resp.get_json()['published'] == ['routine']
    assert admin_client.get('/api/published/routine').get_json()['data'] == rows

    assert admin_client.post('/api/publish', json={'routine': 'nope'}).status_code == 400

    admin_client.delete('/api/publish')
    assert admin_client.get('/api/published/routine').status_code == 404


def test_api_published_unknown_name(client):
    resp = client.get('/api/published/other')
    assert resp.status_code == 404
    assert resp.get_json() == {'error': 'Not found'}


def test_api_empty_rooms(client, admin_client, routine_csv):
    upload(admin_client, 'routine', routine_csv, 'routine.csv')
    admin_client.post('/admin/publish')

    resp = client.get(f'/api/empty-rooms?day=Saturday&slot={SLOTS[0]}')
    assert resp.get_json()['rooms'] == ['KT-208']
    resp = client.get('/api/empty-rooms?day=Saturday')
    assert resp.get_json()['by_slot'] == [{'slot': SLOTS[0], 'rooms': ['KT-208']}]
    assert client.get('/api/empty-rooms').status_code == 400


def test_login_ignores_offsite_next(client):
    for target in ('//evil.example/x', '/\\evil.example/x', 'https://evil.example/x'):
        resp = client.post(f'/admin/login?next={target}', data={'username': 'admin', 'password': 'secret'})
        assert resp.status_code == 302
        assert urlparse(resp.headers['Location']).path == '/admin'
        assert not urlparse(resp.headers['Location']).netloc
        client.get('/admin/logout')


def test_login_keeps_local_next(client):
    resp = client.post('/admin/login?next=/admin?tab=rooms', data={'username': 'admin', 'password': 'secret'})
    assert resp.headers['Location'].endswith('/admin?tab=rooms')


def test_api_publish_rejects_non_object_meta(client, admin_client):
    rows = [{'day': 'Monday', 'slot': SLOTS[0], 'course': 'OS (65_C)', 'batch': '65_C',
             'teacher': 'AM', 'room': 'KT-1'}]
    resp = admin_client.post('/api/publish', json={'routine': rows, 'routineMeta': 'oops'})
    assert resp.status_code == 400
    assert admin_client.get('/api/publish').get_json() == {'routine': False, 'tif': False}
    assert client.get('/student').status_code == 200


def test_api_publish_writes_nothing_on_error(admin_client):
    rows = [{'day': 'Monday', 'slot': SLOTS[0], 'course': 'OS (65_C)', 'batch': '65_C',
             'teacher': 'AM', 'room': 'KT-1'}]
    resp = admin_client.post('/api/publish', json={'routine': rows, 'tif': 'bad'})
    assert resp.status_code == 400
    assert admin_client.get('/api/publish').get_json() == {'routine': False, 'tif': False}

    resp = admin_client.post('/api/publish', json={'routine': rows, 'tif': [None]})
    assert resp.status_code == 400
    assert admin_client.get('/api/publish').get_json() == {'routine': False, 'tif': False}


def test_status_line_tolerates_odd_meta(app, client):
    with app.app_context():
        store.save_snapshot(store.ROUTINE, [], 'oops')
    resp = client.get('/student')
    assert resp.status_code == 200
    assert b'Loaded published routine (published data)' in resp.data


def test_upload_with_bengali_file_name(app, admin_client, routine_csv):
    resp = upload(admin_client, 'routine', routine_csv, 'রুটিন.csv')
    assert b'Parsed 5 classes from 2 day blocks.' in resp.data
    with app.app_context():
        draft = store.load_snapshot(store.ROUTINE, store.DRAFT)
    assert draft['meta']['file_name'] == 'রুটিন.csv'


def test_export_file_name_is_sanitized(client, admin_client, routine_csv):
    upload(admin_client, 'routine', routine_csv, 'routine.csv')
    admin_client.post('/admin/publish')
    resp = client.get('/student/export.csv?batch=65"C')
    assert resp.headers['Content-Disposition'] == 'attachment; filename="student_allDays_65C_any.csv"'
