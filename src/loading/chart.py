"""
Reshaping report results into chart rows.

These functions only reshape; row order is whatever the upstream
calculation produced.
"""
from transformation.leaderboard import is_podium


def to_time_series(buckets):
    """Daily buckets to `[{"date": label, <series>: total, ...}]`."""
    series = [column for column in buckets.columns if column not in ('date', 'label')]
    return [
        {'date': row['label'], **{name: row[name] for name in series}}
        for row in buckets.to_dict(orient='records')
    ]


def to_table_rows(df):
    """Any result frame to a list of row dicts, in frame order."""
    return df.to_dict(orient='records')


def to_leaderboard_rows(entries):
    return [
        {
            'rank': entry.rank,
            'subject': entry.subject_id,
            'name': entry.display_name,
            'value': entry.value,
            'podium': is_podium(entry.rank),
        }
        for entry in entries
    ]


def to_pair_rows(entries):
    return [
        {'rank': entry.rank, 'pair': entry.subject_id, 'count': entry.value}
        for entry in entries
    ]
