import math
from datetime import datetime
from io import BytesIO

import pandas as pd
from marshmallow import ValidationError


CUSTOMER_COLUMNS = ["Name", "Phone", "Email", "Address", "Rating", "Comment", "Created At"]

PRODUCT_COLUMNS = ["ID", "Code", "Name", "Price", "Details", "Created At"]

ORDER_COLUMNS = [
    "Order ID", "Customer ID", "Product ID", "Product Name", "Price", "Quantity",
    "Delivery Charge", "Status", "Source", "Order Date", "Delivery Date", "Notes",
    "Address", "Has Order Time", "Has Delivery Time", "Created At",
]

ORDER_EXPORT_COLUMNS = ORDER_COLUMNS + ["Customer Name", "Customer Phone", "Products", "Total Amount"]

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
CSV_MIMETYPE = "text/csv"


def read_rows(file, filename=None):
    """
    Read an uploaded .xlsx or .csv into a list of row dicts keyed by column
    header. Empty cells come back as None.
    """
    filename = (filename or getattr(file, "filename", "") or "").lower()
    raw = file.read() if hasattr(file, "read") else file

    try:
        if filename.endswith(".csv"):
            df = pd.read_csv(BytesIO(raw), dtype=object)
        else:
            df = pd.read_excel(BytesIO(raw), dtype=object)
    except Exception as e:
        raise ValidationError(f"Could not read spreadsheet: {str(e)}")

    df.columns = [str(column).strip() for column in df.columns]
    df = df.astype(object).where(df.notna(), None)
    return df.to_dict(orient="records")


def write_rows(rows, columns, fmt="xlsx", sheet_name="Sheet1"):
    """Render rows (dicts keyed by column header) to xlsx or csv bytes."""
    df = pd.DataFrame(rows, columns=columns)
    buffer = BytesIO()
    if fmt == "csv":
        df.to_csv(buffer, index=False)
    else:
        with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
            df.to_excel(writer, index=False, sheet_name=sheet_name)
    return buffer.getvalue()


def mimetype_for(fmt):
    return CSV_MIMETYPE if fmt == "csv" else XLSX_MIMETYPE


# ---------- CELL COERCION ----------

def _is_blank(value):
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and not value.strip()


def cell_str(value):
    if _is_blank(value):
        return None
    # phone numbers typed into Excel come back as floats
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def cell_float(value, default=0.0):
    if _is_blank(value):
        return default
    return float(value)


def cell_int(value, default=0):
    if _is_blank(value):
        return default
    return int(float(value))


def cell_bool(value):
    if _is_blank(value):
        return False
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "1", "y")
    return bool(value)


def cell_datetime(value):
    if _is_blank(value):
        return None
    if isinstance(value, datetime):
        return value.to_pydatetime() if isinstance(value, pd.Timestamp) else value
    parsed = pd.to_datetime(value, errors="coerce")
    if pd.isna(parsed):
        raise ValueError(f"Invalid date: {value}")
    return parsed.to_pydatetime().replace(tzinfo=None)


def format_datetime(value):
    return value.strftime("%Y-%m-%d %H:%M:%S") if isinstance(value, datetime) else value
