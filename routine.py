"""
Shared routine vocabulary: canonical days and slots, the ClassRow record,
string helpers, noise filtering and the derived views (student, teacher,
empty rooms) that the portals and exporters build on.
"""

import re
from dataclasses import dataclass, asdict

# --- CANONICAL DAYS & SLOTS ---
SLOTS = [
    '08:30-10:00',
    '10:00-11:30',
    '11:30-01:00',
    '01:00-02:30',
    '02:30-04:00',
    '04:00-05:30',
]

DAY_NAMES = ['Saturday', 'Sunday', 'Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday']

# Filter value meaning "show all days"
ALL_DAYS = '__ALL__'

DAY_SET = {d.lower() for d in DAY_NAMES}
SLOT_SET = {re.sub(r'\s+', '', s) for s in SLOTS}

# Known footer / notice texts printed under the routine grid
NOISE_PATTERNS = [
    re.compile(r'in case of any routine[-\s]*related queries', re.I),
    re.compile(r'routine\s*committee', re.I),
    re.compile(r'dr\.\s*sheak\s*rashed\s*haider\s*noori', re.I),
    re.compile(r'professor\s*and\s*head', re.I),
    re.compile(r'department\s*of\s*cse', re.I),
]

ROOM_CHARS_RE = re.compile(r'^[A-Za-z0-9\-()/ ]+$')
LAB_RE = re.compile(r'\bLAB\b', re.I)
BATCH_RE = re.compile(r'\(([^)]+)\)(?!.*\([^)]*\))')


@dataclass(frozen=True)
class ClassRow:
    day: str
    slot: str
    course: str
    batch: str
    teacher: str
    room: str

    def to_dict(self):
        return asdict(self)

    @classmethod
    def from_dict(cls, data):
        return cls(**{k: canon(data.get(k)) for k in ('day', 'slot', 'course', 'batch', 'teacher', 'room')})


# --- STRING HELPERS ---
def canon(value):
    """Coerce a cell to text, collapse whitespace runs and trim."""
    if value is None:
        return ''
    if isinstance(value, float) and value != value:  # NaN from pandas
        return ''
    return re.sub(r'\s+', ' ', str(value)).strip()


def uc(value):
    return canon(value).upper()


def to_title(text):
    return text[0].upper() + text[1:].lower() if text else text


def extract_batch(course):
    """Batch code from the last parenthesised group of a course string.

    >>> extract_batch('Algorithms (Sec A)(65_C)')
    '65_C'
    """
    m = BATCH_RE.search(course or '')
    return re.sub(r'\s+', '', m.group(1)) if m else ''


def natural_key(text):
    return [int(part) if part.isdigit() else part.lower() for part in re.split(r'(\d+)', text)]


# --- NOISE & OCCUPANCY RULES ---
def compile_patterns(patterns):
    return [p if isinstance(p, re.Pattern) else re.compile(p, re.I) for p in patterns]


def is_noise_text(text, patterns=NOISE_PATTERNS):
    return any(rx.search(text or '') for rx in compile_patterns(patterns))


def is_routine_entry(row, patterns=NOISE_PATTERNS):
    joined = f'{canon(row.room)} {canon(row.course)} {canon(row.teacher)}'
    return not is_noise_text(joined, patterns)


def counts_as_occupied(row, patterns=NOISE_PATTERNS):
    """A slot is occupied only when it carries both a course and a teacher."""
    if not is_routine_entry(row, patterns):
        return False
    return bool(canon(row.course)) and bool(canon(row.teacher))


def is_room_candidate(room, patterns=NOISE_PATTERNS):
    s = canon(room)
    if not s or is_noise_text(s, patterns):
        return False
    if len(s) > 60:
        return False
    if not ROOM_CHARS_RE.match(s):
        return False
    return bool(re.search(r'\d', s)) or bool(LAB_RE.search(s))


# --- DERIVED VIEWS ---
def days_in_order(rows):
    """Days in the order they first appear, or the canonical week when empty."""
    order = []
    for r in rows:
        if r.day and r.day not in order:
            order.append(r.day)
    return order or list(DAY_NAMES)


def student_rows(rows, day='', batch='', slot='', patterns=NOISE_PATTERNS):
    q_batch = uc(batch)
    out = []
    for r in rows:
        if day and day != ALL_DAYS and r.day != day:
            continue
        if slot and r.slot != slot:
            continue
        if q_batch and q_batch not in uc(r.batch):
            continue
        if is_routine_entry(r, patterns):
            out.append(r)
    return out


def teacher_rows(rows, initial='', slot='', patterns=NOISE_PATTERNS):
    key = uc(initial)
    out = []
    for r in rows:
        if key and uc(r.teacher) != key:
            continue
        if slot and r.slot != slot:
            continue
        if is_routine_entry(r, patterns):
            out.append(r)
    return out


def schedule_matrix(rows, days):
    """Group rows into {day: [rows per canonical slot]} for the given days."""
    matrix = {day: [[] for _ in SLOTS] for day in days}
    slot_index = {s: i for i, s in enumerate(SLOTS)}
    for r in rows:
        if r.day in matrix and r.slot in slot_index:
            matrix[r.day][slot_index[r.slot]].append(r)
    return matrix


def sort_by_slot(rows):
    slot_index = {s: i for i, s in enumerate(SLOTS)}
    return sorted(rows, key=lambda r: slot_index.get(r.slot, 0))


def empty_rooms(rows, day, slot, patterns=NOISE_PATTERNS):
    """Rooms listed for a day/slot whose row is not occupied."""
    seen = set()
    out = []
    for r in rows:
        if r.day != day or r.slot != slot:
            continue
        if not is_routine_entry(r, patterns) or not is_room_candidate(r.room, patterns):
            continue
        if counts_as_occupied(r, patterns):
            continue
        name = canon(r.room)
        if name.upper() not in seen:
            seen.add(name.upper())
            out.append(name)
    return sorted(out, key=natural_key)


def empty_rooms_by_slot(rows, day, patterns=NOISE_PATTERNS):
    by_slot = {}
    for slot in SLOTS:
        rooms = empty_rooms(rows, day, slot, patterns)
        if rooms:
            by_slot[slot] = rooms
    return by_slot


def routine_initials(rows):
    return sorted({uc(r.teacher) for r in rows if canon(r.teacher)})
