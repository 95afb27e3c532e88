"""
Teacher info file (TIF) parsing.

Expected columns: Name | Initial | Designation | Mobile | Email | Office Desk | Day Off
Header names are matched loosely; unknown columns are ignored.
"""

from dataclasses import dataclass, asdict, fields

from routine import canon, uc, routine_initials

HEADER_ALIASES = {
    'name': 'name',
    'initial': 'initial',
    'designation': 'designation',
    'mobile': 'mobile',
    'phone': 'mobile',
    'email': 'email',
    'office desk': 'office_desk',
    'officedesk': 'office_desk',
    'day off': 'day_off',
    'dayoff': 'day_off',
}


@dataclass(frozen=True)
class TeacherInfo:
    name: str = ''
    initial: str = ''
    designation: str = ''
    mobile: str = ''
    email: str = ''
    office_desk: str = ''
    day_off: str = ''

    def to_dict(self):
        return asdict(self)

    @classmethod
    def from_dict(cls, data):
        return cls(**{f.name: canon(data.get(f.name)) for f in fields(cls)})


def map_headers(headers):
    return [HEADER_ALIASES.get(canon(h).lower()) for h in headers]


def parse_teacher_grid(grid):
    """Build TeacherInfo records from a grid whose first row is the header."""
    if not grid:
        return []
    header_map = map_headers(grid[0] or [])
    out = []
    for row in grid[1:]:
        cells = [canon(v) for v in (row or [])]
        values = {}
        for idx, key in enumerate(header_map):
            if key and idx < len(cells) and cells[idx]:
                values[key] = cells[idx]
        if values:
            out.append(TeacherInfo(**values))
    return out


def find_by_initial(infos, initial):
    key = uc(initial)
    if not key:
        return None
    for t in infos:
        if uc(t.initial) == key:
            return t
    return None


def teacher_options(rows, infos):
    """Initials found in the routine, paired with a name from the TIF if known."""
    name_by_initial = {uc(t.initial): t.name for t in infos}
    return [{'initial': i, 'name': name_by_initial.get(i, '')} for i in routine_initials(rows)]
