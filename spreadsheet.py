"""Decode uploaded CSV / Excel files into a plain grid of text cells."""

import csv
import io
import logging

import pandas as pd

from grid_parser import UnreadableFile
from routine import canon

logger = logging.getLogger(__name__)


def _csv_grid(raw):
    text = raw.decode('utf-8-sig', errors='replace')
    return [[canon(v) for v in row] for row in csv.reader(io.StringIO(text))]


def _excel_grid(raw):
    df = pd.read_excel(io.BytesIO(raw), sheet_name=0, header=None, dtype=str)
    df = df.dropna(how='all')
    return [[canon(v) for v in row] for row in df.fillna('').values.tolist()]


def read_grid(stream, filename):
    """Read the first sheet of an upload as a list of rows of strings.

    CSV keeps blank lines (row positions matter to the parser); workbooks
    drop fully blank rows. Anything not ending in .csv is read as a workbook.
    """
    raw = stream.read() if hasattr(stream, 'read') else bytes(stream)
    if not raw:
        raise UnreadableFile(filename, 'file is empty')
    name = (filename or '').lower()
    try:
        if name.endswith('.csv'):
            grid = _csv_grid(raw)
        else:
            grid = _excel_grid(raw)
    except Exception as e:
        # openpyxl/xlrd raise their own zip, xml and format errors
        raise UnreadableFile(filename, str(e)) from e
    logger.debug('decoded %s into %d rows', filename, len(grid))
    return grid
