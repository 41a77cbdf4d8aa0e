from io import BytesIO

import openpyxl
from django.core.exceptions import ValidationError
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _cell(value):
    if isinstance(value, str):
        return value.strip()
    return value


def read_first_sheet(file):
    """
    Load the first worksheet of an uploaded xlsx.
    Returns (headers, rows) where each row is {header: value}; blank rows are skipped.
    """
    try:
        workbook = openpyxl.load_workbook(file, read_only=True, data_only=True)
    except Exception as exc:  # openpyxl raises several unrelated types for bad files
        raise ValidationError(f"Failed to read Excel file: {exc}") from exc

    sheet = workbook.worksheets[0]
    values = sheet.iter_rows(values_only=True)
    first = next(values, None)
    if not first:
        workbook.close()
        raise ValidationError("The file has no header row.")
    headers = [str(h).strip() if h is not None else "" for h in first]

    rows = []
    for raw in values:
        cells = [_cell(v) for v in raw]
        if all(v in (None, "") for v in cells):
            continue
        rows.append({h: v for h, v in zip(headers, cells) if h})
    workbook.close()
    return headers, rows


def build_workbook(title, headers, rows):
    """xlsx bytes with a bold header row followed by `rows` (lists of cell values)."""
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = title

    ws.append(headers)
    for cell in ws[1]:
        cell.font = Font(bold=True)
    for row in rows:
        ws.append(list(row))

    # Roughly fit column widths
    for index, header in enumerate(headers, start=1):
        width = max([len(str(header))] + [len(str(r[index - 1] or "")) for r in rows])
        ws.column_dimensions[get_column_letter(index)].width = min(width + 2, 50)

    output = BytesIO()
    wb.save(output)
    return output.getvalue()
