"""Tests for environment-based configuration."""

import pytest

from ..cli.config import Config

ENV_VARS = [
    'DATABASE_URL', 'POOL_SIZE', 'POOL_RECYCLE', 'POOL_TIMEOUT', 'NOTIFY_MAX_WORKERS',
    'NOTIFY_ADDRESS_TEMPLATE', 'NOTIFY_TRANSPORT', 'SMTP_HOST', 'SMTP_PORT', 'NOTIFY_SENDER', 'LOG_LEVEL',
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Isolate from the developer's environment and any .env in the cwd."""
    for name in ENV_VARS:
        # recorded for restore even if load_dotenv sets it later
        monkeypatch.setenv(name, '')
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)


def test_defaults(monkeypatch):
    monkeypatch.setenv('DATABASE_URL', 'sqlite:///orders.db')

    config = Config.from_env()

    assert config.database_url == 'sqlite:///orders.db'
    assert config.pool_size == 20
    assert config.pool_recycle == 30
    assert config.pool_timeout is None
    assert config.notify_max_workers == 8
    assert config.transport == 'log'
    assert config.validate() is True


def test_missing_database_url():
    with pytest.raises(ValueError, match='DATABASE_URL'):
        Config.from_env()


def test_env_file(tmp_path):
    env_file = tmp_path / 'orders.env'
    env_file.write_text(
        'DATABASE_URL=sqlite:///other.db\n'
        'POOL_SIZE=5\n'
        'POOL_TIMEOUT=2.5\n'
        'NOTIFY_TRANSPORT=SMTP\n'
        'SMTP_PORT=2525\n'
    )

    config = Config.from_env(env_file)

    assert config.database_url == 'sqlite:///other.db'
    assert config.pool_size == 5
    assert config.pool_timeout == 2.5
    assert config.transport == 'smtp'
    assert config.smtp_port == 2525


@pytest.mark.parametrize('changes', [
    {'pool_size': 0},
    {'pool_recycle': -1},
    {'pool_timeout': 0},
    {'notify_max_workers': 0},
    {'transport': 'carrier-pigeon'},
    {'address_template': 'static@example.com'},
])
def test_validate_rejects_bad_values(changes):
    config = Config(database_url='sqlite:///orders.db', **changes)
    with pytest.raises(ValueError):
        config.validate()
