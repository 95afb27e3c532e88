from types import SimpleNamespace

import pytest

from app import app as flask_app, init_db
from routine import SLOTS

LABELS = ['Room', 'Course', 'Teacher']


def slot_header(offset=0, labels=SLOTS):
    row = [''] * offset
    for s in labels:
        row += [s, '', '']
    return row


def labels_row(offset=0):
    return [''] * offset + LABELS * len(SLOTS)


def data_row(triplets, offset=0):
    """triplets: {slot_index: (room, course, teacher)}"""
    row = [''] * (offset + 3 * len(SLOTS))
    for i, (room, course, teacher) in triplets.items():
        base = offset + 3 * i
        row[base:base + 3] = [room, course, teacher]
    return row


def day_block(day, rows, offset=0):
    banner = [''] * (offset + 1) + [day]
    return [banner, slot_header(offset), labels_row(offset)] + [data_row(t, offset) for t in rows]


@pytest.fixture
def grid_tools():
    return SimpleNamespace(slot_header=slot_header, labels_row=labels_row,
                           data_row=data_row, day_block=day_block)


@pytest.fixture
def sample_grid():
    return (
        day_block('Saturday', [
            {0: ('KT-101', 'Algorithms (65_C)', 'AM'), 1: ('KT-102', 'Data Structures (66_A)', 'RH')},
            {0: ('KT-208', '', ''), 2: ('KT-513 (COM LAB)', 'Networks Lab (65_C)', 'SN')},
        ])
        + day_block('Sunday', [
            {3: ('KT-101', 'Compiler (Sec A)(64_B)', 'AM')},
        ])
    )


@pytest.fixture
def app(tmp_path):
    flask_app.config.update(
        TESTING=True,
        SECRET_KEY='test-secret',
        DATABASE=str(tmp_path / 'routine.db'),
        ADMIN_USERNAME='admin',
        ADMIN_PASSWORD='secret',
    )
    init_db()
    yield flask_app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_client(client):
    resp = client.post('/admin/login', data={'username': 'admin', 'password': 'secret'})
    assert resp.status_code == 302
    return client


def grid_to_csv(grid):
    return '\n'.join(','.join(f'"{c}"' if ',' in c else c for c in r) for r in grid).encode('utf-8')


@pytest.fixture
def routine_csv(sample_grid):
    return grid_to_csv(sample_grid)


@pytest.fixture
def tif_csv():
    return grid_to_csv([
        ['Name', 'Initial', 'Designation', 'Mobile', 'Email', 'Office Desk', 'Day Off'],
        ['Abdul Mannan', 'AM', 'Lecturer', '01700000000', 'am@example.edu', 'KT-301', 'Friday'],
        ['Rahim Hasan', 'RH', 'Assistant Professor', '', '', '', ''],
    ])
