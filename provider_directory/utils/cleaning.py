"""Record normalisation and text helpers.

The directory backend returns doctors, clinics and cities as JSON records
with Bosnian field names. The helpers here turn those records into
DataFrames with canonical column names shared by every part of the engine,
and provide the small text utilities (diacritic folding, slugs, collation
keys) the filters, sort stage and URL hydration rely on.
"""
import logging
import re
import unicodedata
from typing import Any, Dict, Iterable, List, Optional, Tuple
from urllib.parse import unquote_plus

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

PROVIDER_COLUMNS = [
    "ID",
    "Display Name",
    "Slug",
    "City",
    "Specialty",
    "Specialty ID",
    "Specialty IDs",
    "Location",
    "Address",
    "Description",
    "Phone",
    "Rating",
    "Review Count",
    "Latitude",
    "Longitude",
]

CITY_COLUMNS = ["ID", "Name", "Slug"]

# Letters that NFKD leaves intact but that collate with their base letter
_EXTRA_FOLDS = str.maketrans({"đ": "d", "Đ": "D", "ł": "l", "Ł": "L", "ø": "o", "Ø": "O"})


def fold_diacritics(text: Any) -> str:
    """Strip accents so 'Čapljina' and 'Đurđevik' become 'Capljina' and 'Durdevik'."""
    if text is None or (isinstance(text, float) and np.isnan(text)):
        return ""
    decomposed = unicodedata.normalize("NFKD", str(text).translate(_EXTRA_FOLDS))
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def collation_key(text: Any) -> str:
    """Sort key that orders accented letters next to their base letter.

    The folded form decides the order; the unfolded (casefolded) text breaks
    ties so that 'c' < 'č' < 'd'.
    """
    raw = "" if text is None or (isinstance(text, float) and np.isnan(text)) else str(text)
    return fold_diacritics(raw).casefold() + "\x00" + raw.casefold()


def slugify(value: Any) -> str:
    """URL slug: decoded, accents stripped, lowercase, dash separated."""
    if value is None:
        return ""
    text = fold_diacritics(unquote_plus(str(value))).lower().strip()
    text = re.sub(r"[^a-z0-9\s-]", "", text)
    text = re.sub(r"\s+", "-", text)
    return re.sub(r"-+", "-", text)


def decode_query_value(value: Any) -> str:
    """Decode a query-string value ('Banja+Luka' -> 'Banja Luka')."""
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        value = value[0] if value else ""
    return unquote_plus(str(value)).strip()


def _optional_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        if pd.isna(value):
            return None
        return int(value)
    except (ValueError, TypeError):
        return None


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and np.isnan(value):
        return ""
    return str(value)


def extract_specialty(record: Dict[str, Any]) -> Tuple[Optional[int], str]:
    """Return (specialty id, specialty name) from a doctor record.

    The backend sends either ``specijalnost_id`` plus a ``specijalnost`` name,
    or a nested ``specijalnost`` object carrying ``id`` and ``naziv``.
    """
    specialty = record.get("specijalnost")
    specialty_id = _optional_int(record.get("specijalnost_id"))
    if isinstance(specialty, dict):
        if specialty_id is None:
            specialty_id = _optional_int(specialty.get("id"))
        return specialty_id, _text(specialty.get("naziv"))
    return specialty_id, _text(specialty)


def normalize_doctor_records(records: Iterable[Dict[str, Any]]) -> pd.DataFrame:
    rows = []
    for record in records:
        specialty_id, specialty_name = extract_specialty(record)
        rows.append(
            {
                "ID": _optional_int(record.get("id")),
                "Display Name": f"{_text(record.get('ime'))} {_text(record.get('prezime'))}".strip(),
                "Slug": _text(record.get("slug")),
                "City": _text(record.get("grad")),
                "Specialty": specialty_name,
                "Specialty ID": specialty_id,
                "Specialty IDs": [specialty_id] if specialty_id is not None else [],
                "Location": _text(record.get("lokacija")),
                "Address": _text(record.get("adresa")),
                "Description": _text(record.get("opis")),
                "Phone": _text(record.get("telefon")),
                "Rating": record.get("ocjena"),
                "Review Count": record.get("broj_ocjena"),
                "Latitude": record.get("latitude"),
                "Longitude": record.get("longitude"),
            }
        )
    return _finalize_provider_frame(rows)


def normalize_clinic_records(records: Iterable[Dict[str, Any]]) -> pd.DataFrame:
    """Clinics carry no specialty of their own; they inherit their doctors' ones."""
    rows = []
    for record in records:
        doctor_ids: List[int] = []
        for doctor in record.get("doktori") or []:
            if not isinstance(doctor, dict):
                continue
            specialty_id, _ = extract_specialty(doctor)
            if specialty_id is not None and specialty_id not in doctor_ids:
                doctor_ids.append(specialty_id)
        rows.append(
            {
                "ID": _optional_int(record.get("id")),
                "Display Name": _text(record.get("naziv")).strip(),
                "Slug": _text(record.get("slug")),
                "City": _text(record.get("grad")),
                "Specialty": "",
                "Specialty ID": None,
                "Specialty IDs": doctor_ids,
                "Location": "",
                "Address": _text(record.get("adresa")),
                "Description": _text(record.get("opis")),
                "Phone": _text(record.get("telefon")),
                "Rating": record.get("ocjena"),
                "Review Count": record.get("broj_ocjena"),
                "Latitude": record.get("latitude"),
                "Longitude": record.get("longitude"),
            }
        )
    return _finalize_provider_frame(rows)


def _finalize_provider_frame(rows: List[Dict[str, Any]]) -> pd.DataFrame:
    df = pd.DataFrame(rows, columns=PROVIDER_COLUMNS)
    df["ID"] = df["ID"].astype("Int64")
    df["Specialty ID"] = df["Specialty ID"].astype("Int64")
    df["Rating"] = pd.to_numeric(df["Rating"], errors="coerce").fillna(0.0).astype(float)
    df["Review Count"] = pd.to_numeric(df["Review Count"], errors="coerce").fillna(0).astype(int)
    return validate_and_clean_coordinates(df)


def normalize_city_records(records: Iterable[Dict[str, Any]]) -> pd.DataFrame:
    rows = [
        {
            "ID": _optional_int(record.get("id")),
            "Name": _text(record.get("naziv")),
            "Slug": _text(record.get("slug")),
        }
        for record in records
    ]
    df = pd.DataFrame(rows, columns=CITY_COLUMNS)
    df["ID"] = df["ID"].astype("Int64")
    return df[df["Name"] != ""].reset_index(drop=True)


def validate_and_clean_coordinates(df: pd.DataFrame) -> pd.DataFrame:
    """Coerce coordinates to floats; unusable values become NaN.

    A 0 coordinate is the backend's placeholder for "not set" and is treated
    as missing, as are values outside the valid latitude/longitude ranges.
    """
    if df.empty:
        return df

    df = df.copy()
    for col in ("Latitude", "Longitude"):
        if col in df.columns:
            df[col] = pd.to_numeric(df[col], errors="coerce").astype(float)
            df.loc[df[col] == 0, col] = np.nan

    if "Latitude" in df.columns and "Longitude" in df.columns:
        out_of_range = (df["Latitude"].abs() > 90) | (df["Longitude"].abs() > 180)
        if out_of_range.any():
            logger.warning(f"{int(out_of_range.sum())} providers have out-of-range coordinates; ignoring them")
            df.loc[out_of_range, ["Latitude", "Longitude"]] = np.nan

    return df


def validate_provider_data(df: pd.DataFrame) -> Tuple[bool, str]:
    if df.empty:
        return False, "❌ **Error**: No provider data available."

    issues = []
    info = []

    required_cols = ["ID", "Display Name", "City", "Specialty IDs"]
    missing_cols = [col for col in required_cols if col not in df.columns]
    if missing_cols:
        issues.append(f"Missing required columns: {', '.join(missing_cols)}")

    if "Latitude" in df.columns and "Longitude" in df.columns:
        missing_coords = int((df["Latitude"].isna() | df["Longitude"].isna()).sum())
        if missing_coords > 0:
            info.append(f"{missing_coords} providers have no coordinates and will not appear on the map")
    else:
        issues.append("Geographic columns missing: Latitude, Longitude")

    if "Specialty IDs" in df.columns:
        without_specialty = int(df["Specialty IDs"].apply(lambda ids: len(ids) == 0).sum())
        if without_specialty > 0:
            info.append(f"{without_specialty} providers have no specialty")

    info.append(f"Total providers: {len(df)}")

    message_parts = []
    if issues:
        message_parts.append("⚠️ **Data Quality Issues**: " + "; ".join(issues))
    if info:
        message_parts.append("ℹ️ **Data Summary**: " + "; ".join(info))

    is_valid = len(issues) == 0
    message = "\n\n".join(message_parts)
    return is_valid, message
