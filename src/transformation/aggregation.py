"""
Time bucketing and keyed accumulation of records.
"""
import logging
import pandas as pd
from transformation.quality import parse_timestamp

logger = logging.getLogger(__name__)


def format_day_label(day):
    """Chart label for a calendar day, e.g. 'May 1'."""
    return f"{day.strftime('%b')} {day.day}"


def bucket_by_day(records, timestamp_of, series, timezone='UTC'):
    """
    Group records by calendar day and total each series per day.

    Args:
        records: iterable of records
        timestamp_of: callable returning a record's timestamp (or None)
        series: ordered mapping of series name to value extractor
        timezone: zone the calendar day is taken in

    Returns:
        DataFrame with columns date, label and one column per series, one
        row per day present in the input, ascending by date. Records
        without a usable timestamp are left out.
    """
    columns = list(series)
    rows = []
    unusable = 0
    for record in records:
        timestamp = parse_timestamp(timestamp_of(record))
        if timestamp is None:
            unusable += 1
            continue
        row = {'timestamp': timestamp}
        for name, value_of in series.items():
            row[name] = value_of(record)
        rows.append(row)

    if not rows:
        logger.info("No timestamped records to bucket")
        return pd.DataFrame(columns=['date', 'label', *columns])

    if unusable:
        logger.debug(f"Dropping {unusable} records with unusable timestamps")

    df = pd.DataFrame(rows, columns=['timestamp', *columns])
    df['timestamp'] = pd.to_datetime(df['timestamp'], utc=True)
    df['date'] = df['timestamp'].dt.tz_convert(timezone).dt.date
    buckets = df.groupby('date', sort=True)[columns].sum().reset_index()
    buckets.insert(1, 'label', buckets['date'].map(format_day_label))

    logger.info(f"Bucketed {len(rows)} records into {len(buckets)} days")
    return buckets


def accumulate(records, key_of, value_of=None):
    """
    Total a value per key, keeping keys in first-seen order.

    Each record counts as 1 when no value extractor is given. Records whose
    key is None are skipped.
    """
    totals = {}
    for record in records:
        key = key_of(record)
        if key is None:
            continue
        value = 1 if value_of is None else value_of(record)
        totals[key] = totals.get(key, 0) + value
    return totals
