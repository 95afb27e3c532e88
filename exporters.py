"""
CSV / Excel / PDF exports of filtered routine rows.

PDFs are laid out as structured text tables (one table per day) rather than
screenshots of the page, so they stay searchable and print cleanly.
"""

import io
import re
from datetime import datetime

import pandas as pd
from fpdf import FPDF

from routine import ALL_DAYS, canon, uc, sort_by_slot, is_routine_entry, NOISE_PATTERNS

EXPORT_COLUMNS = ['Day', 'Slot', 'Course', 'Batch_Section', 'Teacher', 'Room']

# --- PDF LAYOUT (points, A4 portrait) ---
MARGIN = 40
TITLE_SIZE = 20
SUB_SIZE = 11
DAY_SIZE = 14
TABLE_SIZE = 9
ROW_HEIGHT = 16
PAGE_BREAK_GAP = 140

TABLE_HEAD = ['Slot', 'Course', 'Batch', 'Teacher', 'Room']
COLUMN_WIDTHS = [90, 180, 70, 80, None]  # None takes the remaining width
HEAD_FILL = (63, 81, 181)
STRIPE_FILL = (245, 245, 245)


def export_records(rows):
    return [{
        'Day': r.day,
        'Slot': r.slot,
        'Course': r.course,
        'Batch_Section': r.batch,
        'Teacher': r.teacher,
        'Room': r.room,
    } for r in rows]


def export_csv(rows):
    df = pd.DataFrame(export_records(rows), columns=EXPORT_COLUMNS)
    return df.to_csv(index=False).encode('utf-8-sig')


def export_xlsx(rows):
    buf = io.BytesIO()
    df = pd.DataFrame(export_records(rows), columns=EXPORT_COLUMNS)
    with pd.ExcelWriter(buf, engine='openpyxl') as writer:
        df.to_excel(writer, sheet_name='Routine', index=False)
    return buf.getvalue()


def _name_part(value, default):
    # header values must stay printable ASCII without quotes
    return re.sub(r'[^\x20-\x7e]|["\\;]', '', canon(value)) or default


def student_file_name(day, batch, slot, ext):
    day_part = day if day and day != ALL_DAYS else 'allDays'
    return f'student_{_name_part(day_part, "allDays")}_{_name_part(batch, "all")}_{_name_part(slot, "any")}.{ext}'


def teacher_file_name(initial, slot, ext):
    return f'teacher_{_name_part(uc(initial), "all")}_{_name_part(slot, "any")}.{ext}'


# --- PDF HELPERS ---
def _latin1(text):
    # core PDF fonts only cover latin-1
    return str(text).encode('latin-1', 'replace').decode('latin-1')


class RoutinePDF(FPDF):

    def __init__(self, title, subtitle_lines):
        super().__init__(orientation='P', unit='pt', format='A4')
        self.set_auto_page_break(False)
        self.title_text = title
        self.subtitle_lines = [s for s in subtitle_lines if s]
        self.y_pos = MARGIN

    @property
    def content_width(self):
        return self.w - 2 * MARGIN

    def column_widths(self):
        fixed = sum(w for w in COLUMN_WIDTHS if w)
        return [w if w else self.content_width - fixed for w in COLUMN_WIDTHS]

    def new_page(self):
        self.add_page()
        y = MARGIN
        self.set_text_color(0, 0, 0)
        self.set_font('helvetica', 'B', TITLE_SIZE)
        self.text(MARGIN, y, _latin1(self.title_text))
        y += TITLE_SIZE + 6

        self.set_font('helvetica', '', SUB_SIZE)
        for line in self.subtitle_lines:
            self.text(MARGIN, y, _latin1(line))
            y += SUB_SIZE + 4

        y += 6
        self.set_line_width(0.5)
        self.line(MARGIN, y, self.w - MARGIN, y)
        self.y_pos = y + 12

    def near_bottom(self, gap=PAGE_BREAK_GAP):
        return self.y_pos > self.h - gap

    def _fit(self, text, width):
        text = _latin1(text)
        if self.get_string_width(text) <= width:
            return text
        while text and self.get_string_width(text + '...') > width:
            text = text[:-1]
        return text + '...'

    def _table_row(self, values, fill=None, bold=False):
        widths = self.column_widths()
        self.set_font('helvetica', 'B' if bold else '', TABLE_SIZE)
        if fill:
            self.set_fill_color(*fill)
        x = MARGIN
        for value, width in zip(values, widths):
            self.set_xy(x, self.y_pos)
            self.cell(width, ROW_HEIGHT, self._fit(value, width - 6), border=0, fill=bool(fill))
            x += width
        self.y_pos += ROW_HEIGHT

    def _table_head(self):
        self.set_text_color(255, 255, 255)
        self._table_row(TABLE_HEAD, fill=HEAD_FILL, bold=True)
        self.set_text_color(0, 0, 0)

    def day_table(self, day, rows):
        if not rows:
            return
        self.set_font('helvetica', 'B', DAY_SIZE)
        self.set_text_color(0, 0, 0)
        self.text(MARGIN, self.y_pos, _latin1(day))
        self.y_pos += DAY_SIZE - 6

        self._table_head()
        for i, r in enumerate(sort_by_slot(rows)):
            if self.y_pos + ROW_HEIGHT > self.h - MARGIN:
                self.new_page()
                self._table_head()
            values = [v or '-' for v in (r.slot, r.course, r.batch, r.teacher, r.room)]
            self._table_row(values, fill=STRIPE_FILL if i % 2 else None)
        self.y_pos += 14 + DAY_SIZE

    def no_matches(self):
        self.set_font('helvetica', 'I', 11)
        self.text(MARGIN, self.y_pos, 'No matching entries for the selected filters.')


def _render(title, subtitle, days, rows_for_day):
    pdf = RoutinePDF(title, subtitle)
    pdf.new_page()
    any_printed = False
    for day in days:
        day_rows = rows_for_day(day)
        if not day_rows:
            continue
        if pdf.near_bottom():
            pdf.new_page()
        pdf.day_table(day, day_rows)
        any_printed = True
    if not any_printed:
        pdf.no_matches()
    return bytes(pdf.output())


def printed_on_line(printed_on, printed_by=None):
    line = f'Printed on: {printed_on:%Y-%m-%d %H:%M}'
    return f'{line} - by {printed_by}' if printed_by else line


def student_pdf(rows, days_list, day='', batch='', slot='', title='Class Routine',
                institute=None, printed_by=None, printed_on=None, patterns=NOISE_PATTERNS):
    """
    Student routine PDF.
    - batch given: every day for that batch (optionally one slot)
    - day blank or ALL_DAYS: every day
    - otherwise: only that day
    """
    printed_on = printed_on or datetime.now()
    slot_part = f' - Slot: {slot}' if slot else ''
    if batch:
        summary = f'Batch: {batch} - All Days{slot_part}'
    elif day and day != ALL_DAYS:
        summary = f'Day: {day}{slot_part}'
    else:
        summary = f'All Days{slot_part}'
    subtitle = [institute, summary, printed_on_line(printed_on, printed_by)]

    target_days = days_list if (batch or not day or day == ALL_DAYS) else [day]
    q_batch = uc(batch)

    def rows_for_day(d):
        return [r for r in rows
                if r.day == d
                and (not slot or r.slot == slot)
                and (not q_batch or q_batch in uc(r.batch))
                and is_routine_entry(r, patterns)]

    return _render(title, subtitle, target_days, rows_for_day)


def teacher_pdf(rows, days_list, initial, slot='', title='Class Routine - Teacher',
                institute=None, printed_on=None, patterns=NOISE_PATTERNS):
    printed_on = printed_on or datetime.now()
    key = uc(initial)
    subtitle = [
        institute,
        f'Teacher: {canon(initial)}' + (f' - Slot: {slot}' if slot else ''),
        printed_on_line(printed_on),
    ]

    def rows_for_day(d):
        return [r for r in rows
                if r.day == d
                and uc(r.teacher) == key
                and (not slot or r.slot == slot)
                and is_routine_entry(r, patterns)]

    return _render(title, subtitle, days_list, rows_for_day)
