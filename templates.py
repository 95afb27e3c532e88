# Page templates, served through a DictLoader so no templates/ folder is needed.

BASE_HTML = r"""
<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1">
    <title>{% block title %}Routine Assist{% endblock %}</title>
    <link href="https://cdn.jsdelivr.net/npm/bootstrap@5.3.0/dist/css/bootstrap.min.css" rel="stylesheet">
    <style>
      body { background:#f6f7fb; }
      .panel { background:white; border-radius:12px; padding:20px; box-shadow:0 2px 8px rgba(0,0,0,0.06); }
      .slot-cell { min-width:150px; }
      .entry { border:1px solid #e6e9ef; border-radius:6px; padding:6px 8px; margin-bottom:6px; }
      .entry .meta { font-size:0.8rem; color:#555; }
      .small-muted { font-size:0.85rem; color:#6c757d; }
      .chip { display:inline-block; background:#eef0fb; color:#3f51b5; border-radius:999px; padding:1px 8px; font-size:0.75rem; margin:1px; }
    </style>
  </head>
  <body>
    <div class="container py-4">
      {% with messages = get_flashed_messages(with_categories=true) %}
        {% for category, message in messages %}
          <div class="alert alert-{{ 'danger' if category in ('error', 'danger') else category }}">{{ message }}</div>
        {% endfor %}
      {% endwith %}
      {% block content %}{% endblock %}
    </div>
  </body>
</html>
"""

INDEX_HTML = r"""
{% extends "base.html" %}
{% block content %}
<div class="d-flex justify-content-end">
  <a class="btn btn-outline-secondary btn-sm" href="{{ url_for('admin_login') }}">Admin Login</a>
</div>
<div class="text-center py-5">
  <h1 class="display-5 fw-bold">Routine Assist</h1>
  <p class="text-muted">View the latest published routine. Choose your portal.</p>
  <div class="d-flex justify-content-center gap-3 mt-4">
    <a class="btn btn-primary btn-lg" href="{{ url_for('student_portal') }}">Enter as Student</a>
    <a class="btn btn-outline-primary btn-lg" href="{{ url_for('teacher_portal') }}">Enter as Teacher</a>
  </div>
  <p class="small-muted mt-4">Admins can upload, preview, publish, or delete data from the admin panel.</p>
</div>
{% endblock %}
"""

LOGIN_HTML = r"""
{% extends "base.html" %}
{% block title %}Administrator Login{% endblock %}
{% block content %}
<div class="d-flex justify-content-between mb-4">
  <a href="{{ url_for('index') }}">Back to Home</a>
  <span class="small-muted">Routine Assist &middot; Admin Console</span>
</div>
<div class="row justify-content-center">
  <div class="col-md-5 panel">
    <h1 class="h4">Administrator Login</h1>
    <p class="small-muted">Restricted area, authorized users only.</p>
    <form method="post">
      <input type="hidden" name="next" value="{{ next }}">
      <div class="mb-3">
        <label class="form-label">Username</label>
        <input class="form-control" name="username" value="admin" required>
      </div>
      <div class="mb-3">
        <label class="form-label">Password</label>
        <input class="form-control" type="password" name="password" required>
      </div>
      <button class="btn btn-primary w-100">Sign in</button>
    </form>
  </div>
</div>
{% endblock %}
"""

# --- PARTIALS ---
MACROS_HTML = r"""
{% macro entries(items) %}
  {% for r in items %}
    <div class="entry">
      <div class="fw-semibold">{{ r.course or '-' }}</div>
      <div class="meta">
        {% if r.batch %}<span class="chip">{{ r.batch }}</span>{% endif %}
        {% if r.teacher %}<span>{{ r.teacher }}</span>{% endif %}
        {% if r.room %}<span>&middot; {{ r.room }}</span>{% endif %}
      </div>
    </div>
  {% else %}
    <span class="small-muted">-</span>
  {% endfor %}
{% endmacro %}

{% macro grid(days, matrix, slots, show_empty=false) %}
<div class="table-responsive mt-3">
  <table class="table table-bordered bg-white align-top">
    <thead class="table-light">
      <tr><th>Day</th>{% for s in slots %}<th class="slot-cell">{{ s }}</th>{% endfor %}</tr>
    </thead>
    <tbody>
      {% for day in days %}
        {% set cells = matrix[day] %}
        {% if show_empty or cells|map('length')|sum %}
          <tr>
            <td class="fw-semibold text-nowrap">{{ day }}</td>
            {% for items in cells %}<td>{{ entries(items) }}</td>{% endfor %}
          </tr>
        {% endif %}
      {% endfor %}
    </tbody>
  </table>
</div>
{% endmacro %}

{% macro day_select(name, value, day_names, all_days, with_all=true) %}
<select class="form-select" name="{{ name }}">
  <option value="">(pick a day)</option>
  {% if with_all %}<option value="{{ all_days }}" {{ 'selected' if value == all_days }}>(show all days)</option>{% endif %}
  {% for d in day_names %}<option value="{{ d }}" {{ 'selected' if value == d }}>{{ d }}</option>{% endfor %}
</select>
{% endmacro %}

{% macro slot_select(name, value, slots) %}
<select class="form-select" name="{{ name }}">
  <option value="">(any slot)</option>
  {% for s in slots %}<option value="{{ s }}" {{ 'selected' if value == s }}>{{ s }}</option>{% endfor %}
</select>
{% endmacro %}
"""

STUDENT_TAB_HTML = r"""
{% from "_macros.html" import grid, day_select, slot_select %}
<form method="get" class="row g-3 align-items-end">
  <input type="hidden" name="tab" value="student">
  <div class="col-md-3"><label class="form-label">Day</label>{{ day_select('day', student.day, day_names, all_days) }}</div>
  <div class="col-md-3"><label class="form-label">Batch Code (section)</label>
    <input class="form-control" name="batch" value="{{ student.batch }}" placeholder="e.g., 65_C"></div>
  <div class="col-md-3"><label class="form-label">Slot (optional)</label>{{ slot_select('slot', student.slot, slots) }}</div>
  <div class="col-md-3"><button class="btn btn-primary">Show</button></div>
</form>
{% if not has_rows %}
  <div class="alert alert-light mt-3">No published routine yet.</div>
{% elif not student.has_filter %}
  <div class="alert alert-light mt-3">Pick any of Day / Batch / Slot to see routine.</div>
{% else %}
  {{ grid(student.days, student.matrix, slots, student.show_empty) }}
  {% if student.count %}
    <div class="d-flex gap-2">
      {% for fmt in ('csv', 'xlsx', 'pdf') %}
        <a class="btn btn-outline-primary btn-sm" href="{{ export_url('student', fmt, day=student.day, batch=student.batch, slot=student.slot) }}">Export {{ fmt|upper }}</a>
      {% endfor %}
    </div>
  {% endif %}
{% endif %}
"""

TEACHER_TAB_HTML = r"""
{% from "_macros.html" import grid, slot_select %}
<form method="get" class="row g-3 align-items-end">
  <input type="hidden" name="tab" value="teacher">
  <div class="col-md-5"><label class="form-label">Teacher (Initial)</label>
    <input class="form-control" name="initial" list="initials" value="{{ teacher.initial }}" placeholder="e.g., AM">
    <datalist id="initials">
      {% for o in teacher.options %}<option value="{{ o.initial }}">{{ o.name }}</option>{% endfor %}
    </datalist>
  </div>
  <div class="col-md-4"><label class="form-label">Slot (optional)</label>{{ slot_select('slot', teacher.slot, slots) }}</div>
  <div class="col-md-3"><button class="btn btn-primary">Show</button></div>
</form>
{% if teacher.info %}
  <div class="panel mt-3">
    <div class="fw-semibold">{{ teacher.info.name or teacher.info.initial }} <span class="chip">{{ teacher.info.initial }}</span></div>
    <dl class="row small mb-0 mt-2">
      <dt class="col-sm-3">Designation</dt><dd class="col-sm-9">{{ teacher.info.designation or '-' }}</dd>
      <dt class="col-sm-3">Mobile</dt><dd class="col-sm-9">{{ teacher.info.mobile or '-' }}</dd>
      <dt class="col-sm-3">Email</dt><dd class="col-sm-9">{{ teacher.info.email or '-' }}</dd>
      <dt class="col-sm-3">Office Desk</dt><dd class="col-sm-9">{{ teacher.info.office_desk or '-' }}</dd>
      <dt class="col-sm-3">Day Off</dt><dd class="col-sm-9">{{ teacher.info.day_off or '-' }}</dd>
    </dl>
  </div>
{% endif %}
{% if teacher.initial %}
  {{ grid(teacher.days, teacher.matrix, slots) }}
  {% if teacher.count %}
    <div class="d-flex gap-2">
      {% for fmt in ('csv', 'xlsx', 'pdf') %}
        <a class="btn btn-outline-primary btn-sm" href="{{ export_url('teacher', fmt, initial=teacher.initial, slot=teacher.slot) }}">Export {{ fmt|upper }}</a>
      {% endfor %}
    </div>
  {% else %}
    <div class="alert alert-light">No classes found for {{ teacher.initial }}.</div>
  {% endif %}
{% else %}
  <div class="alert alert-light mt-3">Type or pick a teacher initial to see their routine.</div>
{% endif %}
"""

ROOMS_TAB_HTML = r"""
{% from "_macros.html" import day_select, slot_select %}
<form method="get" class="row g-3 align-items-end">
  <input type="hidden" name="tab" value="rooms">
  <div class="col-md-4"><label class="form-label">Day</label>{{ day_select('er_day', rooms.day, day_names, all_days, with_all=false) }}</div>
  <div class="col-md-4"><label class="form-label">Slot (optional)</label>{{ slot_select('er_slot', rooms.slot, slots) }}</div>
  <div class="col-md-4"><button class="btn btn-primary">Find empty rooms</button></div>
</form>
{% if rooms.mode == 'idle' %}
  <div class="alert alert-light mt-3">Pick a Day to see empty rooms. Choose a Slot to narrow to that slot; leave blank to see all slots for the day.</div>
{% elif rooms.mode == 'single' %}
  {% if rooms.rooms %}
    <div class="row mt-3">
      {% for room in rooms.rooms %}
        <div class="col-md-4"><div class="entry"><div class="fw-semibold">{{ room }}</div>
          <div class="meta">{{ rooms.day }} &middot; {{ rooms.slot }} &middot; Empty</div></div></div>
      {% endfor %}
    </div>
  {% else %}
    <div class="small-muted mt-3">No empty rooms detected for <b>{{ rooms.day }}</b>, <b>{{ rooms.slot }}</b>.</div>
  {% endif %}
{% else %}
  {% for slot, names in rooms.by_slot.items() %}
    <div class="mt-3 fw-semibold">{{ slot }}</div>
    <div class="row">
      {% for room in names %}
        <div class="col-md-4"><div class="entry"><div class="fw-semibold">{{ room }}</div>
          <div class="meta">{{ rooms.day }} &middot; {{ slot }} &middot; Empty</div></div></div>
      {% endfor %}
    </div>
  {% else %}
    <div class="small-muted mt-3">No empty rooms detected for <b>{{ rooms.day }}</b> in any slot.</div>
  {% endfor %}
{% endif %}
"""

TABS_HTML = r"""
<ul class="nav nav-tabs mb-3">
  {% for key, label in tabs %}
    <li class="nav-item"><a class="nav-link {{ 'active' if tab == key }}" href="?tab={{ key }}">{{ label }}</a></li>
  {% endfor %}
</ul>
{% if tab == 'teacher' %}{% include "_teacher_tab.html" %}
{% elif tab == 'rooms' %}{% include "_rooms_tab.html" %}
{% else %}{% include "_student_tab.html" %}{% endif %}
"""

PORTAL_HTML = r"""
{% extends "base.html" %}
{% block title %}{{ heading }}{% endblock %}
{% block content %}
<div class="d-flex justify-content-between align-items-center mb-3">
  <h1 class="h4 mb-0">{{ heading }}</h1>
  <a href="{{ url_for('index') }}" class="small">Home</a>
</div>
{% if status %}<div class="alert alert-light">{{ status }}</div>{% endif %}
<div class="panel">{% include "_tabs.html" %}</div>
{% endblock %}
"""

ADMIN_HTML = r"""
{% extends "base.html" %}
{% block title %}Routine Admin{% endblock %}
{% block content %}
<div class="d-flex justify-content-between align-items-start mb-3">
  <div>
    <h1 class="h4">Routine Admin</h1>
    <p class="small-muted">Upload &amp; preview in the same tabs students/teachers see, then publish.</p>
  </div>
  <a class="btn btn-outline-secondary btn-sm" href="{{ url_for('admin_logout') }}">Log out</a>
</div>

<div class="row g-3 mb-3">
  {% for name, label, snap in uploads %}
    <div class="col-md-6">
      <div class="panel h-100">
        <div class="d-flex justify-content-between">
          <h2 class="h6">{{ label }} (CSV/XLSX)</h2>
          <span class="small-muted">
            {% if snap.draft %}Draft: {{ snap.draft.meta.file_name }} &middot; {{ snap.draft.data|length }} rows
            {% elif snap.published %}Published: {{ snap.published.meta.file_name or '-' }} &middot; {{ snap.published.data|length }} rows
            {% else %}Nothing published{% endif %}
          </span>
        </div>
        {% if snap.draft and snap.draft.meta.error %}
          <div class="alert alert-danger small mt-2 mb-0">{{ snap.draft.meta.error }}</div>
        {% elif snap.draft and snap.draft.meta.message %}
          <div class="small-muted mt-2">{{ snap.draft.meta.message }}</div>
        {% endif %}
        <form class="mt-3 d-flex gap-2" method="post" enctype="multipart/form-data" action="{{ url_for('admin_upload', name=name) }}">
          <input class="form-control form-control-sm" type="file" name="file" accept=".xlsx,.xls,.csv" required>
          <button class="btn btn-primary btn-sm">Upload</button>
        </form>
      </div>
    </div>
  {% endfor %}
</div>

<div class="d-flex gap-2 mb-3">
  <form method="post" action="{{ url_for('admin_publish') }}"><button class="btn btn-success" {{ 'disabled' if not can_publish }}>Publish</button></form>
  <form method="post" action="{{ url_for('admin_discard') }}"><button class="btn btn-outline-secondary" {{ 'disabled' if not can_publish }}>Discard drafts</button></form>
  <form method="post" action="{{ url_for('admin_clear') }}" onsubmit="return confirm('Delete all published data?');"><button class="btn btn-outline-danger">Delete published</button></form>
</div>

<div class="panel">{% include "_tabs.html" %}</div>
{% endblock %}
"""

TEMPLATES = {
    'base.html': BASE_HTML,
    'index.html': INDEX_HTML,
    'login.html': LOGIN_HTML,
    'portal.html': PORTAL_HTML,
    'admin.html': ADMIN_HTML,
    '_macros.html': MACROS_HTML,
    '_tabs.html': TABS_HTML,
    '_student_tab.html': STUDENT_TAB_HTML,
    '_teacher_tab.html': TEACHER_TAB_HTML,
    '_rooms_tab.html': ROOMS_TAB_HTML,
}
