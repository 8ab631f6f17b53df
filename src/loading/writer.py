"""
Exporting chart-ready report results.
"""
import os
import json
import logging
import traceback
import pandas as pd

logger = logging.getLogger(__name__)


def _ensure_dir(output_dir):
    if not os.path.exists(output_dir):
        os.makedirs(output_dir)


def export_results_to_csv(results, output_dir):
    """
    Export each result set (a list of row dicts) to `<name>.csv`.

    Empty result sets are skipped. Returns a dict of name to file path.
    """
    try:
        _ensure_dir(output_dir)

        exported_files = {}
        for name, rows in results.items():
            if not rows:
                logger.warning(f"No rows to export for {name}")
                continue
            file_path = os.path.join(output_dir, f"{name}.csv")
            pd.DataFrame(rows).to_csv(file_path, index=False)
            exported_files[name] = file_path
            logger.info(f"Exported {len(rows)} rows to {file_path}")

        return exported_files
    except Exception as e:
        logger.error(f"Error exporting results to CSV: {str(e)}")
        logger.error(traceback.format_exc())
        raise


def export_results_to_json(results, output_dir):
    """
    Export each result set to `<name>.json`, empty ones included.
    """
    try:
        _ensure_dir(output_dir)

        exported_files = {}
        for name, rows in results.items():
            file_path = os.path.join(output_dir, f"{name}.json")
            with open(file_path, 'w', encoding='utf-8') as handle:
                json.dump(rows, handle, indent=2, default=str)
            exported_files[name] = file_path
            logger.info(f"Exported {len(rows)} rows to {file_path}")

        return exported_files
    except Exception as e:
        logger.error(f"Error exporting results to JSON: {str(e)}")
        logger.error(traceback.format_exc())
        raise
