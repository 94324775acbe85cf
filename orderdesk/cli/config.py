"""
Configuration management for the orderdesk CLI.
Handles loading and validating configuration from environment variables and files.
"""

import os
from dataclasses import dataclass
from typing import Optional
from pathlib import Path
from dotenv import load_dotenv

VALID_TRANSPORTS = ('log', 'smtp')


@dataclass
class Config:
    """Configuration settings for orderdesk."""

    # Database settings
    database_url: str
    pool_size: int = 20
    pool_recycle: int = 30
    pool_timeout: Optional[float] = None

    # Notification settings
    notify_max_workers: int = 8
    address_template: str = 'user{user_id}@example.com'
    transport: str = 'log'
    smtp_host: str = 'localhost'
    smtp_port: int = 25
    sender: str = 'orders@example.com'

    # Logging settings
    log_level: str = 'INFO'

    @classmethod
    def from_env(cls, env_file: Optional[Path] = None) -> 'Config':
        """Create configuration from environment variables.

        Args:
            env_file: Optional path to .env file

        Returns:
            Config: Configuration instance

        Raises:
            ValueError: If required environment variables are missing
        """
        if env_file:
            load_dotenv(env_file)
        else:
            load_dotenv()

        database_url = os.getenv('DATABASE_URL')
        if not database_url:
            raise ValueError("DATABASE_URL environment variable is required")

        pool_timeout = os.getenv('POOL_TIMEOUT')

        return cls(
            database_url=database_url,
            pool_size=int(os.getenv('POOL_SIZE', '20')),
            pool_recycle=int(os.getenv('POOL_RECYCLE', '30')),
            pool_timeout=float(pool_timeout) if pool_timeout else None,
            notify_max_workers=int(os.getenv('NOTIFY_MAX_WORKERS', '8')),
            address_template=os.getenv('NOTIFY_ADDRESS_TEMPLATE', 'user{user_id}@example.com'),
            transport=os.getenv('NOTIFY_TRANSPORT', 'log').lower(),
            smtp_host=os.getenv('SMTP_HOST', 'localhost'),
            smtp_port=int(os.getenv('SMTP_PORT', '25')),
            sender=os.getenv('NOTIFY_SENDER', 'orders@example.com'),
            log_level=os.getenv('LOG_LEVEL', 'INFO')
        )

    def validate(self) -> bool:
        """Validate configuration settings.

        Returns:
            bool: True if configuration is valid
        """
        # Validate numeric values are positive
        if self.pool_size <= 0:
            raise ValueError("pool_size must be positive")
        if self.pool_recycle <= 0:
            raise ValueError("pool_recycle must be positive")
        if self.pool_timeout is not None and self.pool_timeout <= 0:
            raise ValueError("pool_timeout must be positive when set")
        if self.notify_max_workers <= 0:
            raise ValueError("notify_max_workers must be positive")

        if self.transport not in VALID_TRANSPORTS:
            raise ValueError(f"transport must be one of: {', '.join(VALID_TRANSPORTS)}")
        if '{user_id}' not in self.address_template:
            raise ValueError("address_template must contain {user_id}")

        return True
