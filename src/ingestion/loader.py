"""
Seeding document collections from exported files.
"""
import os
import json
import logging
import traceback
import pandas as pd

logger = logging.getLogger(__name__)

COLLECTIONS = (
    'orders', 'interactions', 'videos', 'users', 'dishes',
    'restaurants', 'applications', 'reports'
)

# Columns a CSV export keeps as JSON text
_JSON_COLUMNS = ('items', 'roles', 'address', 'photoURLs', 'additionalFileURLs',
                 'businessHours', 'deliveryAreas')


def _read_records(file_path):
    if file_path.endswith('.json'):
        with open(file_path, encoding='utf-8') as handle:
            payload = json.load(handle)
        # Either a list of documents or an {id: document} map
        if isinstance(payload, dict):
            return [{'id': doc_id, **body} for doc_id, body in payload.items()]
        return payload

    df = pd.read_csv(file_path, dtype={'id': 'str'})
    df = df.astype(object).where(pd.notnull(df), None)
    records = df.to_dict(orient='records')
    for record in records:
        for column in _JSON_COLUMNS:
            if isinstance(record.get(column), str):
                record[column] = json.loads(record[column])
    return records


def load_collection_file(file_path, store, collection):
    """
    Load a JSON or CSV export into a collection.

    Returns the number of documents written.
    """
    try:
        logger.info(f"Loading data from {file_path} to '{collection}'")

        if not os.path.exists(file_path):
            raise FileNotFoundError(file_path)

        records = _read_records(file_path)
        logger.info(f"Loaded {len(records)} rows from {file_path}")

        # Keep only the first occurrence of each id
        seen = set()
        written = 0
        for record in records:
            record = {k: v for k, v in record.items() if v is not None}
            doc_id = record.pop('id', None)
            if doc_id is not None:
                doc_id = str(doc_id)
                if doc_id in seen:
                    logger.warning(f"Skipping duplicate id {doc_id} in {file_path}")
                    continue
                seen.add(doc_id)

            store.add(collection, record, doc_id=doc_id)
            written += 1

        logger.info(f"Successfully loaded {written} documents to '{collection}'")
        return written
    except Exception as e:
        logger.error(f"Failed to load {file_path} to '{collection}': {str(e)}")
        logger.error(traceback.format_exc())
        raise


def load_seed_directory(config, store):
    """
    Load every `<collection>.json` or `<collection>.csv` found in the input directory.

    Returns a dict of collection name to documents written.
    """
    loaded = {}
    for collection in COLLECTIONS:
        for extension in ('json', 'csv'):
            file_path = config.get_input_path(f"{collection}.{extension}")
            if os.path.exists(file_path):
                loaded[collection] = load_collection_file(file_path, store, collection)
                break

    if not loaded:
        logger.warning(f"No seed files found in {config.get_input_path()}")
    return loaded
