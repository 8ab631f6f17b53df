"""
Configuration handling for the restaurant dashboard reports.
"""
import os
import logging
import configparser
from dataclasses import dataclass
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()
# Load environment variables
DB_TYPE = os.getenv("DASHBOARD_DB_TYPE", "sqlite")
DB_NAME = os.getenv("DASHBOARD_DB_NAME", "data/dashboard.db")
DB_HOST = os.getenv("DASHBOARD_DB_HOST", "")
DB_PORT = os.getenv("DASHBOARD_DB_PORT", "")
DB_USER = os.getenv("DASHBOARD_DB_USER", "")
DB_PASSWORD = os.getenv("DASHBOARD_DB_PASSWORD", "")
STORAGE_URL = os.getenv("STORAGE_URL", "")
STORAGE_API_KEY = os.getenv("STORAGE_API_KEY", "")


@dataclass(frozen=True)
class ReportSettings:
    """Tunables shared by every report computation."""
    membership_batch_size: int = 10
    top_n: int = 5
    timezone: str = 'UTC'
    credit_likes_to_owner: bool = True
    completed_status: str = 'completed'


class Config:
    """Configuration manager for the dashboard reports."""

    def __init__(self, config_file='config.ini'):
        """
        Initialize configuration from config file.
        """
        self.config = configparser.ConfigParser(interpolation=None)

        # Set default values
        self._set_defaults()

        # Try to read from config file
        config_path = Path(config_file)
        if config_path.exists():
            self.config.read(config_path)
            self._setup_logging()
        else:
            logging.getLogger(__name__).warning(
                f"Config file {config_file} not found. Using defaults."
            )

    def _set_defaults(self):
        """Set default configuration values."""
        self.config['DATABASE'] = {
            'type': DB_TYPE,
            'name': DB_NAME,
            'host': DB_HOST,
            'port': DB_PORT,
            'user': DB_USER,
            'password': DB_PASSWORD
        }

        self.config['LOGGING'] = {
            'level': 'INFO',
            'file': 'logs/dashboard.log'
        }

        self.config['PATHS'] = {
            'input_dir': 'data/input',
            'output_dir': 'data/output'
        }

        self.config['STORAGE'] = {
            'url': STORAGE_URL,
            'api_key': STORAGE_API_KEY
        }

        self.config['REPORTS'] = {
            'membership_batch_size': '10',
            'top_n': '5',
            'timezone': 'UTC',
            'credit_likes_to_owner': 'true',
            'completed_status': 'completed'
        }

    def _setup_logging(self):
        """Configure logging based on settings."""
        log_config = self.config['LOGGING']
        log_level = getattr(logging, log_config.get('level', 'INFO').upper())
        log_file = log_config.get('file', 'logs/dashboard.log')

        # Create directory for log file if it doesn't exist
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)

        logging.basicConfig(
            level=log_level,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            handlers=[
                logging.FileHandler(log_file),
                logging.StreamHandler()
            ]
        )

    def get_database_config(self):
        """
        Get database configuration.
        """
        return {
            'type': self.config['DATABASE'].get('type'),
            'name': self.config['DATABASE'].get('name'),
            'host': self.config['DATABASE'].get('host'),
            'port': self.config['DATABASE'].get('port'),
            'user': self.config['DATABASE'].get('user'),
            'password': self.config['DATABASE'].get('password')
        }

    def get_storage_config(self):
        return {
            'url': self.config['STORAGE'].get('url', ''),
            'api_key': self.config['STORAGE'].get('api_key', '')
        }

    def get_report_settings(self):
        """
        Build report settings from the REPORTS section.

        Raises ValueError when the membership batch size or top_n is not a
        positive integer.
        """
        section = self.config['REPORTS']
        settings = ReportSettings(
            membership_batch_size=section.getint('membership_batch_size', 10),
            top_n=section.getint('top_n', 5),
            timezone=section.get('timezone', 'UTC'),
            credit_likes_to_owner=section.getboolean('credit_likes_to_owner', True),
            completed_status=section.get('completed_status', 'completed')
        )
        if settings.membership_batch_size < 1:
            raise ValueError("membership_batch_size must be at least 1")
        if settings.top_n < 1:
            raise ValueError("top_n must be at least 1")
        return settings

    def get_input_path(self, filename=None):
        """
        Get input directory or file path.
        """
        input_dir = self.config['PATHS'].get('input_dir', 'data/input')

        if filename:
            return os.path.join(input_dir, filename)
        return input_dir

    def get_output_path(self, filename=None):
        """
        Get output directory or file path.
        """
        output_dir = self.config['PATHS'].get('output_dir', 'data/output')

        # Create directory if it doesn't exist
        if not os.path.exists(output_dir):
            os.makedirs(output_dir)

        if filename:
            return os.path.join(output_dir, filename)
        return output_dir
