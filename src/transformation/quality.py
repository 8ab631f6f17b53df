"""
Record validation and data quality checks for the dashboard reports.
"""
import logging
import math
from collections import Counter
from datetime import datetime, timezone
import pandas as pd

logger = logging.getLogger(__name__)


def parse_timestamp(value):
    """
    Turn a stored timestamp into an aware UTC datetime.

    Accepts datetimes (naive ones are taken as UTC), ISO-8601 strings, epoch
    seconds and exported `{"_seconds": ...}` maps. Anything unusable gives
    None rather than an error.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    if isinstance(value, dict):
        seconds = value.get('_seconds', value.get('seconds'))
        if seconds is None:
            return None
        nanos = value.get('_nanoseconds', value.get('nanoseconds', 0)) or 0
        try:
            return parse_timestamp(float(seconds) + float(nanos) / 1e9)
        except (TypeError, ValueError):
            return None

    if isinstance(value, (int, float)):
        if math.isnan(value) or math.isinf(value):
            return None
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    if isinstance(value, str):
        if not value.strip():
            return None
        parsed = pd.to_datetime(value, utc=True, errors='coerce')
        if pd.isna(parsed):
            return None
        return parsed.to_pydatetime()

    return None


def normalize_records(documents, record_type):
    """
    Convert raw documents into typed records.

    A document missing a required field raises MissingFieldError; the whole
    batch is rejected since reports cannot run on partial input.
    """
    records = [record_type.from_document(doc) for doc in documents]
    logger.info(f"Normalized {len(records)} {record_type.collection} records")
    return records


def run_data_quality_checks(records, timestamp_field='timestamp'):
    """
    Summarise quality issues in a list of typed records.

    Informational only: missing timestamps are excluded later by the
    aggregators, duplicates are reported but kept.
    """
    try:
        missing_timestamps = sum(
            1 for record in records if getattr(record, timestamp_field, None) is None
        )
        id_counts = Counter(record.id for record in records)
        duplicate_ids = [doc_id for doc_id, count in id_counts.items() if count > 1]

        results = {
            'records': len(records),
            'missing_timestamps': missing_timestamps,
            'duplicate_ids': duplicate_ids[:10],  # first 10 for logging
            'duplicate_count': len(duplicate_ids),
        }

        if missing_timestamps > 0:
            logger.warning(
                f"{missing_timestamps} of {len(records)} records have no usable "
                f"'{timestamp_field}' and will be left out of daily series"
            )
        if duplicate_ids:
            logger.warning(f"Found {len(duplicate_ids)} duplicate record ids")

        return results
    except Exception as e:
        logger.error(f"Error running data quality checks: {str(e)}")
        raise
