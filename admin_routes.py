from flask import Blueprint, request, jsonify, current_app

import store
from auth import login_required
from routine import ClassRow, canon, empty_rooms, empty_rooms_by_slot
from teachers import TeacherInfo

api_bp = Blueprint('api_bp', __name__, url_prefix='/api')

RECORD_TYPES = {store.ROUTINE: ClassRow, store.TIF: TeacherInfo}


@api_bp.route('/publish', methods=['GET'])
def publish_status():
    return jsonify({name: store.snapshot_exists(name) for name in store.NAMES})


@api_bp.route('/publish', methods=['POST'])
@login_required
def publish():
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({'status': 'error', 'message': 'Expected a JSON object'}), 400
    meta_keys = {store.ROUTINE: 'routineMeta', store.TIF: 'tifMeta'}
    pending = []
    for name in store.NAMES:
        records = data.get(name)
        if not records:
            continue
        if not isinstance(records, list):
            return jsonify({'status': 'error', 'message': f'{name} must be a list'}), 400
        meta = data.get(meta_keys[name]) or {}
        if not isinstance(meta, dict):
            return jsonify({'status': 'error', 'message': f'{meta_keys[name]} must be an object'}), 400
        record_type = RECORD_TYPES[name]
        try:
            clean = [record_type.from_dict(r).to_dict() for r in records]
        except (TypeError, AttributeError) as e:
            return jsonify({'status': 'error', 'message': f'Malformed record: {e}'}), 400
        pending.append((name, clean, meta))

    # nothing is written unless every part validated
    for name, clean, meta in pending:
        store.save_snapshot(name, clean, meta)
    return jsonify({'status': 'success', 'ok': True, 'published': [name for name, _, _ in pending]})


@api_bp.route('/publish', methods=['DELETE'])
@login_required
def clear_published():
    for name in store.NAMES:
        store.delete_snapshot(name)
    return jsonify({'status': 'success', 'ok': True})


@api_bp.route('/published/<name>')
def published(name):
    if name not in store.NAMES:
        return jsonify({'error': 'Not found'}), 404
    snapshot = store.load_snapshot(name)
    if snapshot is None:
        return jsonify({'error': 'Not found'}), 404
    return jsonify(snapshot)


@api_bp.route('/empty-rooms')
def api_empty_rooms():
    day = canon(request.args.get('day'))
    slot = canon(request.args.get('slot'))
    if not day:
        return jsonify({'status': 'error', 'message': 'day is required'}), 400
    snapshot = store.load_snapshot(store.ROUTINE) or {}
    rows = [ClassRow.from_dict(d) for d in snapshot.get('data', [])]
    patterns = current_app.config['NOISE_PATTERNS']
    if slot:
        return jsonify({'day': day, 'slot': slot, 'rooms': empty_rooms(rows, day, slot, patterns)})
    # a list keeps canonical slot order (JSON object keys get sorted)
    by_slot = [{'slot': s, 'rooms': rooms} for s, rooms in empty_rooms_by_slot(rows, day, patterns).items()]
    return jsonify({'day': day, 'by_slot': by_slot})
