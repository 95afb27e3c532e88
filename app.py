import logging
from urllib.parse import urlparse

from flask import (Flask, Response, flash, redirect, render_template, request, session,
                   url_for, abort)
from jinja2 import ChoiceLoader, DictLoader

import store
from admin_routes import api_bp
from auth import check_login, login_required, seed_admin
from config import Config
from exporters import (export_csv, export_xlsx, student_pdf, teacher_pdf,
                       student_file_name, teacher_file_name)
from grid_parser import UnreadableFile, try_parse_grid
from routine import (ALL_DAYS, DAY_NAMES, SLOTS, ClassRow, canon, days_in_order,
                     empty_rooms, empty_rooms_by_slot, schedule_matrix, student_rows,
                     teacher_rows)
from spreadsheet import read_grid
from teachers import TeacherInfo, find_by_initial, parse_teacher_grid, teacher_options
from templates import TEMPLATES

app = Flask(__name__)
app.config.from_object(Config)
app.jinja_loader = ChoiceLoader([DictLoader(TEMPLATES), app.jinja_loader])
app.teardown_appcontext(store.close_connection)
app.register_blueprint(api_bp)
app.logger.setLevel(getattr(logging, str(app.config['LOG_LEVEL']).upper(), logging.INFO))

EXPORT_TYPES = {
    'csv': 'text/csv',
    'xlsx': 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
    'pdf': 'application/pdf',
}
UPLOAD_LABELS = {store.ROUTINE: 'Routine', store.TIF: 'Teacher Info'}


def init_db():
    with app.app_context():
        db = store.get_db()
        store.create_tables(db)
        seed_admin(db)


def allowed_file(filename):
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in app.config['ALLOWED_EXTENSIONS']


def upload_name(filename):
    """Base name of an uploaded file as the browser sent it."""
    return canon(filename.replace('\\', '/').rsplit('/', 1)[-1])


def safe_next(target):
    """Only same-site paths are allowed as a post-login redirect."""
    if not target or not target.startswith('/') or target.startswith(('//', '/\\')):
        return url_for('admin')
    if urlparse(target).netloc:
        return url_for('admin')
    return target


# --- SNAPSHOT ACCESS ---
def routine_rows(snapshot):
    return [ClassRow.from_dict(d) for d in (snapshot or {}).get('data', [])]


def teacher_infos(snapshot):
    return [TeacherInfo.from_dict(d) for d in (snapshot or {}).get('data', [])]


def published_data():
    return (routine_rows(store.load_snapshot(store.ROUTINE)),
            teacher_infos(store.load_snapshot(store.TIF)))


def working_data():
    """Admin preview: drafts where present, otherwise what is published."""
    routine = store.load_snapshot(store.ROUTINE, store.DRAFT) or store.load_snapshot(store.ROUTINE)
    tif = store.load_snapshot(store.TIF, store.DRAFT) or store.load_snapshot(store.TIF)
    return routine_rows(routine), teacher_infos(tif)


# --- VIEW MODELS ---
def student_view(rows, args):
    patterns = app.config['NOISE_PATTERNS']
    day, batch, slot = canon(args.get('day')), canon(args.get('batch')), canon(args.get('slot'))
    filtered = student_rows(rows, day, batch, slot, patterns)
    single_day = bool(day) and day != ALL_DAYS
    days = [day] if single_day else days_in_order(rows)
    return {
        'day': day,
        'batch': batch,
        'slot': slot,
        'has_filter': bool(day or batch or slot),
        'days': days,
        'matrix': schedule_matrix(filtered, days),
        'show_empty': single_day,
        'count': len(filtered),
    }


def teacher_view(rows, infos, args):
    patterns = app.config['NOISE_PATTERNS']
    initial, slot = canon(args.get('initial')).upper(), canon(args.get('slot'))
    filtered = teacher_rows(rows, initial, slot, patterns) if initial else []
    days = days_in_order(rows)
    return {
        'initial': initial,
        'slot': slot,
        'options': teacher_options(rows, infos),
        'info': find_by_initial(infos, initial),
        'days': days,
        'matrix': schedule_matrix(filtered, days),
        'count': len(filtered),
    }


def rooms_view(rows, args):
    patterns = app.config['NOISE_PATTERNS']
    day, slot = canon(args.get('er_day')), canon(args.get('er_slot'))
    view = {'day': day, 'slot': slot, 'mode': 'idle', 'rooms': [], 'by_slot': {}}
    if not day:
        return view
    if slot:
        view.update(mode='single', rooms=empty_rooms(rows, day, slot, patterns))
    else:
        view.update(mode='group', by_slot=empty_rooms_by_slot(rows, day, patterns))
    return view


def portal_context(rows, infos, tabs, default_tab, export_endpoint):
    tab = request.args.get('tab', default_tab)
    if tab not in dict(tabs):
        tab = default_tab

    def export_url(view, fmt, **params):
        params = {k: v for k, v in params.items() if v}
        return url_for(export_endpoint, view=view, fmt=fmt, **params)

    return {
        'tab': tab,
        'tabs': tabs,
        'slots': SLOTS,
        'day_names': DAY_NAMES,
        'all_days': ALL_DAYS,
        'has_rows': bool(rows),
        'student': student_view(rows, request.args),
        'teacher': teacher_view(rows, infos, request.args),
        'rooms': rooms_view(rows, request.args),
        'export_url': export_url,
    }


def export_response(view, fmt, rows, infos):
    if fmt not in EXPORT_TYPES or view not in ('student', 'teacher'):
        abort(404)
    patterns = app.config['NOISE_PATTERNS']
    args = request.args
    slot = canon(args.get('slot'))
    days = days_in_order(rows)
    if view == 'student':
        day, batch = canon(args.get('day')), canon(args.get('batch'))
        filename = student_file_name(day, batch, slot, fmt)
        if fmt == 'pdf':
            body = student_pdf(rows, days, day, batch, slot,
                               institute=app.config['INSTITUTE'],
                               printed_by=session.get('admin_username'),
                               patterns=patterns)
        else:
            flat = student_rows(rows, day, batch, slot, patterns)
            body = export_csv(flat) if fmt == 'csv' else export_xlsx(flat)
    else:
        initial = canon(args.get('initial'))
        if not initial:
            abort(400)
        filename = teacher_file_name(initial, slot, fmt)
        if fmt == 'pdf':
            body = teacher_pdf(rows, days, initial, slot,
                               institute=app.config['INSTITUTE'], patterns=patterns)
        else:
            flat = teacher_rows(rows, initial, slot, patterns)
            body = export_csv(flat) if fmt == 'csv' else export_xlsx(flat)
    return Response(body, mimetype=EXPORT_TYPES[fmt],
                    headers={'Content-Disposition': f'attachment; filename="{filename}"'})


def published_status(snapshot, label):
    if snapshot is None:
        return f'No published {label}'
    meta = snapshot.get('meta')
    file_name = meta.get('file_name') if isinstance(meta, dict) else None
    return f'Loaded published {label} ({file_name or "published data"})'


# --- PUBLIC ROUTES ---
@app.route('/')
def index():
    return render_template('index.html')


@app.route('/student')
def student_portal():
    rows, infos = published_data()
    ctx = portal_context(rows, infos, [('student', 'Students End'), ('rooms', 'Empty Rooms')],
                         'student', 'export_published')
    status = published_status(store.load_snapshot(store.ROUTINE), 'routine')
    return render_template('portal.html', heading='Student Portal', status=status, **ctx)


@app.route('/teacher')
def teacher_portal():
    rows, infos = published_data()
    ctx = portal_context(rows, infos,
                         [('teacher', 'Teacher End'), ('student', 'Students End'), ('rooms', 'Empty Rooms')],
                         'teacher', 'export_published')
    status = published_status(store.load_snapshot(store.ROUTINE), 'routine')
    return render_template('portal.html', heading='Teacher Portal', status=status, **ctx)


@app.route('/<view>/export.<fmt>')
def export_published(view, fmt):
    rows, infos = published_data()
    return export_response(view, fmt, rows, infos)


# --- ADMIN ROUTES ---
@app.route('/admin/login', methods=['GET', 'POST'])
def admin_login():
    next_url = safe_next(request.values.get('next'))
    if 'admin_id' in session:
        return redirect(next_url)

    if request.method == 'POST':
        admin = check_login(request.form.get('username', ''), request.form.get('password', ''))
        if admin:
            session.clear()
            session.permanent = True
            session['admin_id'] = admin['id']
            session['admin_username'] = admin['username']
            app.logger.info('admin %s logged in', admin['username'])
            return redirect(next_url)
        flash('Incorrect password. Please try again.', 'danger')

    return render_template('login.html', next=next_url)


@app.route('/admin/logout')
def admin_logout():
    session.clear()
    flash('You have been successfully logged out.', 'success')
    return redirect(url_for('admin_login'))


@app.route('/admin')
@login_required
def admin():
    rows, infos = working_data()
    ctx = portal_context(rows, infos,
                         [('student', 'Student'), ('teacher', 'Teacher'), ('rooms', 'Empty Rooms')],
                         'student', 'admin_export')
    uploads = []
    for name in store.NAMES:
        snap = {'draft': store.load_snapshot(name, store.DRAFT),
                'published': store.load_snapshot(name, store.PUBLISHED)}
        uploads.append((name, UPLOAD_LABELS[name], snap))
    can_publish = any(s['draft'] for _, _, s in uploads)
    return render_template('admin.html', uploads=uploads, can_publish=can_publish, **ctx)


@app.route('/admin/export/<view>.<fmt>')
@login_required
def admin_export(view, fmt):
    rows, infos = working_data()
    return export_response(view, fmt, rows, infos)


def failed_upload(name, filename, error):
    # an empty draft records the error and is never promoted
    app.logger.warning('failed to parse %s file %s: %s', name, filename, error)
    store.save_snapshot(name, [], {'file_name': filename, 'error': error}, store.DRAFT)
    flash(error, 'error')
    return redirect(url_for('admin'))


@app.route('/admin/upload/<name>', methods=['POST'])
@login_required
def admin_upload(name):
    if name not in store.NAMES:
        abort(404)
    upload = request.files.get('file')
    if upload is None or not upload.filename:
        flash('Choose a file to upload.', 'warning')
        return redirect(url_for('admin'))
    filename = upload_name(upload.filename)
    if not allowed_file(filename):
        flash(f'Unsupported file type: {filename}', 'error')
        return redirect(url_for('admin'))

    try:
        grid = read_grid(upload.stream, filename)
    except UnreadableFile as e:
        return failed_upload(name, filename, str(e))

    if name == store.ROUTINE:
        result = try_parse_grid(grid)
        if not result.ok:
            return failed_upload(name, filename, result.detail)
        data = [r.to_dict() for r in result.rows]
        message = result.message
    else:
        data = [t.to_dict() for t in parse_teacher_grid(grid)]
        message = f'Parsed {len(data)} teachers.'

    store.save_snapshot(name, data, {'file_name': filename, 'message': message}, store.DRAFT)
    flash(message, 'success')
    return redirect(url_for('admin'))


@app.route('/admin/publish', methods=['POST'])
@login_required
def admin_publish():
    published = store.promote_drafts()
    if published:
        flash(f'Published: {", ".join(published)}.', 'success')
    else:
        flash('Nothing to publish.', 'warning')
    return redirect(url_for('admin'))


@app.route('/admin/discard', methods=['POST'])
@login_required
def admin_discard():
    for name in store.NAMES:
        store.delete_snapshot(name, store.DRAFT)
    flash('Drafts discarded.', 'success')
    return redirect(url_for('admin'))


@app.route('/admin/clear', methods=['POST'])
@login_required
def admin_clear():
    for name in store.NAMES:
        store.delete_snapshot(name, store.PUBLISHED)
    flash('Published routine and teacher info deleted.', 'success')
    return redirect(url_for('admin'))


if __name__ == '__main__':
    logging.basicConfig(level=app.config['LOG_LEVEL'])
    init_db()
    print('Starting Routine Assist on http://127.0.0.1:5000')
    app.run(debug=True)
