"""
Command line runner for the restaurant dashboard reports.
"""
import asyncio
import logging
import argparse
import time
import traceback
from datetime import datetime, timedelta
from config import Config
from auth import load_session
from db.engine import create_db_engine, init_db
from db.models import Base
from db.store import DocumentStore
from ingestion.fetcher import RecordFetcher
from ingestion.loader import load_seed_directory
from loading.writer import export_results_to_csv, export_results_to_json
from reports import REPORTS, ReportWindow
from storage.client import ObjectStorage
from transformation.quality import parse_timestamp

logger = logging.getLogger(__name__)

WINDOWED_REPORTS = ('sales', 'engagement')


def _parse_bound(value, name):
    if value is None:
        return None
    parsed = parse_timestamp(value)
    if parsed is None:
        raise ValueError(f"Invalid {name} timestamp: {value}")
    # A bare end date covers that whole day
    if name == 'end' and len(value.strip()) == 10:
        parsed = parsed + timedelta(days=1) - timedelta(microseconds=1)
    return parsed


def run_report(config_file='config.ini', report='sales', uid=None, start=None, end=None,
               load_seed=False, export_csv=False, export_json=False):
    start_time = time.time()
    statistics = {
        'start_time': datetime.now().strftime('%Y-%m-%d %H:%M:%S'),
        'report': report,
        'status': 'failed',
        'stages': {},
    }

    try:
        logger.info(f"Running '{report}' report")

        if report not in REPORTS:
            raise ValueError(f"Unknown report: {report}")

        config = Config(config_file)
        settings = config.get_report_settings()

        engine = create_db_engine(config)
        init_db(engine, Base)
        store = DocumentStore(engine, membership_limit=settings.membership_batch_size)

        # Seed collections from exported files
        if load_seed:
            stage_start = time.time()
            loaded = load_seed_directory(config, store)
            statistics['stages']['seed'] = {
                'duration': time.time() - stage_start,
                'documents_loaded': loaded
            }

        # Report computation
        stage_start = time.time()
        session = load_session(store, uid)
        fetcher = RecordFetcher(store, batch_size=settings.membership_batch_size)

        kwargs = {}
        if report in WINDOWED_REPORTS:
            kwargs['window'] = ReportWindow(
                start=_parse_bound(start, 'start'),
                end=_parse_bound(end, 'end')
            )
        if report == 'dishes':
            storage_config = config.get_storage_config()
            if storage_config['url']:
                kwargs['storage'] = ObjectStorage(storage_config['url'], storage_config['api_key'])

        results = asyncio.run(REPORTS[report](fetcher, session, settings, **kwargs))

        statistics['stages']['report'] = {
            'duration': time.time() - stage_start,
            'rows_generated': {name: len(rows) for name, rows in results.items()}
        }
        statistics['results'] = results

        # Export results if requested
        if export_csv or export_json:
            exported_files = {}
            if export_csv:
                exported_files.update({
                    f"{name}.csv": path for name, path in
                    export_results_to_csv(results, config.get_output_path()).items()
                })
            if export_json:
                exported_files.update({
                    f"{name}.json": path for name, path in
                    export_results_to_json(results, config.get_output_path()).items()
                })
            statistics['stages']['export'] = {
                'files_exported': len(exported_files),
                'file_paths': exported_files
            }

        statistics['status'] = 'success'
        logger.info(f"Report '{report}' completed successfully")

    except Exception as e:
        logger.error(f"Report execution failed: {str(e)}")
        logger.error(traceback.format_exc())
        statistics['status'] = 'failed'
        statistics['error'] = str(e)

    # Calculate total duration
    statistics['duration'] = time.time() - start_time

    return statistics


def main():
    """Command line entry point."""
    parser = argparse.ArgumentParser(description='Restaurant Dashboard Reports')
    parser.add_argument('--config', default='config.ini', help='Path to configuration file')
    parser.add_argument('--report', default='sales', choices=sorted(REPORTS), help='Report to run')
    parser.add_argument('--uid', required=True, help='Signed-in user id')
    parser.add_argument('--start', help='Window start (ISO date or timestamp)')
    parser.add_argument('--end', help='Window end (ISO date or timestamp)')
    parser.add_argument('--load-seed', action='store_true', help='Load exported collections from the input directory first')
    parser.add_argument('--export-csv', action='store_true', help='Export results to CSV files')
    parser.add_argument('--export-json', action='store_true', help='Export results to JSON files')

    args = parser.parse_args()

    results = run_report(
        config_file=args.config,
        report=args.report,
        uid=args.uid,
        start=args.start,
        end=args.end,
        load_seed=args.load_seed,
        export_csv=args.export_csv,
        export_json=args.export_json
    )

    # Print summary
    print("\nReport Execution Summary:")
    print(f"Report: {results['report']}")
    print(f"Status: {results['status']}")
    print(f"Duration: {results['duration']:.2f} seconds")

    if results['status'] == 'failed' and 'error' in results:
        print(f"Error: {results['error']}")

    for stage, stats in results.get('stages', {}).items():
        print(f"\n{stage.capitalize()} stage:")
        for key, value in stats.items():
            if key != 'file_paths':
                print(f"  {key}: {value}")

    for name, rows in results.get('results', {}).items():
        print(f"\n{name}:")
        for row in rows[:10]:
            print(f"  {row}")


if __name__ == "__main__":
    main()
