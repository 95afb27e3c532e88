"""
Draft / published snapshots kept in SQLite.

One row per (name, stage). Every save overwrites the previous payload: the
last writer wins and there is no conflict detection between admins.
"""

import json
import sqlite3
from datetime import datetime, timezone

from flask import current_app, g

ROUTINE = 'routine'
TIF = 'tif'
NAMES = (ROUTINE, TIF)

DRAFT = 'draft'
PUBLISHED = 'published'


# --- DATABASE HELPERS ---
def get_db():
    db = getattr(g, '_database', None)
    if db is None:
        db = sqlite3.connect(current_app.config['DATABASE'])
        db.row_factory = sqlite3.Row
        g._database = db
    return db


def close_connection(exception):
    db = g.pop('_database', None)
    if db is not None:
        db.close()


def create_tables(db):
    db.executescript('''
        CREATE TABLE IF NOT EXISTS snapshots (
            name TEXT NOT NULL,
            stage TEXT NOT NULL,
            payload TEXT NOT NULL,
            at TEXT NOT NULL,
            PRIMARY KEY (name, stage)
        );
        CREATE TABLE IF NOT EXISTS admins (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            username TEXT UNIQUE NOT NULL,
            password_hash TEXT NOT NULL
        );
    ''')


# --- SNAPSHOTS ---
def save_snapshot(name, data, meta=None, stage=PUBLISHED):
    """Store {data, meta, at} under name/stage and return the payload."""
    if name not in NAMES:
        raise ValueError(f'Unknown snapshot name: {name}')
    at = datetime.now(timezone.utc).isoformat()
    payload = {'data': data, 'meta': meta or {}, 'at': at}
    db = get_db()
    db.execute('INSERT OR REPLACE INTO snapshots (name, stage, payload, at) VALUES (?, ?, ?, ?)',
               (name, stage, json.dumps(payload, ensure_ascii=False), at))
    db.commit()
    current_app.logger.info('saved %s %s snapshot (%d records)', stage, name, len(data))
    return payload


def load_snapshot(name, stage=PUBLISHED):
    row = get_db().execute('SELECT payload FROM snapshots WHERE name = ? AND stage = ?',
                           (name, stage)).fetchone()
    if row is None:
        return None
    try:
        return json.loads(row['payload'])
    except ValueError:
        current_app.logger.warning('corrupted %s %s snapshot ignored', stage, name)
        return None


def snapshot_exists(name, stage=PUBLISHED):
    row = get_db().execute('SELECT 1 FROM snapshots WHERE name = ? AND stage = ?',
                           (name, stage)).fetchone()
    return row is not None


def delete_snapshot(name, stage=PUBLISHED):
    db = get_db()
    db.execute('DELETE FROM snapshots WHERE name = ? AND stage = ?', (name, stage))
    db.commit()


def promote_drafts():
    """Publish every pending draft; returns the names that were published.

    Drafts left behind by a failed upload carry meta['error'] and stay put.
    """
    published = []
    for name in NAMES:
        draft = load_snapshot(name, DRAFT)
        if draft is None or (draft.get('meta') or {}).get('error'):
            continue
        save_snapshot(name, draft['data'], draft.get('meta'), PUBLISHED)
        delete_snapshot(name, DRAFT)
        published.append(name)
    return published
