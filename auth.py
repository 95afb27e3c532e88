from functools import wraps

from flask import current_app, flash, redirect, request, session, url_for
from werkzeug.security import generate_password_hash, check_password_hash

from store import get_db


def seed_admin(db):
    cur = db.execute('SELECT 1 FROM admins LIMIT 1')
    if cur.fetchone() is None:
        db.execute('INSERT INTO admins (username, password_hash) VALUES (?, ?)',
                   (current_app.config['ADMIN_USERNAME'],
                    generate_password_hash(current_app.config['ADMIN_PASSWORD'])))
        db.commit()


def check_login(username, password):
    """Return the admin row for valid credentials, else None."""
    admin = get_db().execute('SELECT * FROM admins WHERE username = ?', (username,)).fetchone()
    if admin and check_password_hash(admin['password_hash'], password):
        return admin
    return None


def login_required(f):
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if 'admin_id' not in session:
            if request.path.startswith('/api/'):
                return {'status': 'error', 'message': 'Login required.'}, 401
            flash('You need to be logged in to access this page.', 'warning')
            return redirect(url_for('admin_login', next=request.path))
        return f(*args, **kwargs)
    return decorated_function
