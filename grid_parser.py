"""
Routine grid parser.

Turns the 2-D cell grid of an uploaded routine sheet into flat ClassRow
records. The sheet is laid out as repeated day blocks:

    <day banner>                      a row whose only cell is a day name
    <slot header>                     six canonical slot labels
    <labels row>                      Room | Course | Teacher per slot (skipped)
    <data rows ...>                   one room/course/teacher triplet per slot

Any structural problem aborts the whole parse; callers never get a partial
result.
"""

import logging
import re
from dataclasses import dataclass

from routine import SLOTS, DAY_SET, SLOT_SET, ClassRow, canon, to_title, extract_batch

logger = logging.getLogger(__name__)

# Rows below a banner probed for the slot header (banner+1 .. banner+3)
SLOT_SEARCH_WINDOW = 3
MIN_SLOT_HITS = len(SLOTS)
TRIPLET_WIDTH = 3


# --- ERRORS ---
class ParseError(Exception):
    """Base class for routine parsing failures."""

    kind = 'ParseError'


class NoDayBannersFound(ParseError):
    kind = 'NoDayBannersFound'

    def __init__(self):
        super().__init__('No day banner rows detected.')


class SlotHeaderNotFound(ParseError):
    kind = 'SlotHeaderNotFound'

    def __init__(self, day):
        self.day = day
        super().__init__(f'Slot header row not found for {day}')


class UnreadableFile(ParseError):
    kind = 'UnreadableFile'

    def __init__(self, filename, reason):
        self.filename = filename
        super().__init__(f'Could not read {filename or "file"}: {reason}')


# --- RESULTS ---
@dataclass(frozen=True)
class ParsedRoutine:
    rows: list
    message: str
    ok = True


@dataclass(frozen=True)
class ParseFailure:
    kind: str
    detail: str
    ok = False


@dataclass(frozen=True)
class SlotHit:
    col: int
    label: str


def _row_cells(grid, r):
    if r < 0 or r >= len(grid):
        return []
    return [canon(v) for v in (grid[r] or [])]


def _cell(cells, c):
    return cells[c] if 0 <= c < len(cells) else ''


def find_day_banners(grid):
    """Return (row_index, Day) for every banner row, in grid order."""
    banners = []
    for r in range(len(grid)):
        non_empty = [v for v in _row_cells(grid, r) if v]
        if len(non_empty) == 1 and non_empty[0].lower() in DAY_SET:
            banners.append((r, to_title(non_empty[0])))
    return banners


def find_slot_columns(grid, r):
    hits = []
    for c, text in enumerate(_row_cells(grid, r)):
        if re.sub(r'\s+', '', text) in SLOT_SET:
            hits.append(SlotHit(col=c, label=text))
    return hits


def locate_slot_header(grid, banner_row, day):
    """Find the slot header under a banner; returns (row_index, hits)."""
    hits = find_slot_columns(grid, banner_row + 1)
    if len(hits) >= MIN_SLOT_HITS:
        return banner_row + 1, hits
    for r in range(banner_row + 1, banner_row + SLOT_SEARCH_WINDOW + 1):
        hits = find_slot_columns(grid, r)
        if len(hits) >= MIN_SLOT_HITS:
            logger.debug('slot header for %s found at row %d (banner at %d)', day, r, banner_row)
            return r, hits
    raise SlotHeaderNotFound(day)


def parse_grid(grid):
    """Parse a routine grid into ClassRows. Raises ParseError."""
    banners = find_day_banners(grid)
    if not banners:
        raise NoDayBannersFound()

    rows_out = []
    for i, (banner_row, day) in enumerate(banners):
        block_end = banners[i + 1][0] if i + 1 < len(banners) else len(grid)
        header_row, hits = locate_slot_header(grid, banner_row, day)

        # header_row + 1 is the Room/Course/Teacher labels row
        for r in range(header_row + 2, block_end):
            cells = _row_cells(grid, r)
            if not any(cells):
                continue
            for pos, slot in enumerate(SLOTS):
                if pos >= len(hits):
                    continue
                base = hits[pos].col
                room, course, teacher = (_cell(cells, base + k) for k in range(TRIPLET_WIDTH))
                if room or course or teacher:
                    rows_out.append(ClassRow(
                        day=day,
                        slot=slot,
                        course=course,
                        batch=extract_batch(course),
                        teacher=teacher,
                        room=room,
                    ))

    message = f'Parsed {len(rows_out)} classes from {len(banners)} day blocks.'
    logger.info(message)
    return ParsedRoutine(rows=rows_out, message=message)


def try_parse_grid(grid):
    """Like parse_grid, but returns ParseFailure instead of raising."""
    try:
        return parse_grid(grid)
    except ParseError as e:
        logger.warning('routine parse failed: %s', e)
        return ParseFailure(kind=e.kind, detail=str(e))
