import os
from dotenv import load_dotenv
from sqlalchemy.pool import NullPool


# Resolve database configuration dynamically so hosted PostgreSQL works
_base_dir = os.path.abspath(os.path.dirname(__file__))
load_dotenv(os.path.join(_base_dir, '.env'))

_instance_dir = os.path.join(_base_dir, 'instance')
_default_sqlite_path = os.getenv('LOCAL_SQLITE_PATH') or os.path.join(_instance_dir, 'bookkeep.db')


def _resolve_database_url():
    url = os.getenv('DATABASE_URL')
    if not url:
        os.makedirs(_instance_dir, exist_ok=True)
        return f"sqlite:///{_default_sqlite_path}"
    # Hosted providers hand out postgres://, but SQLAlchemy needs postgresql://
    if url.startswith('postgres://'):
        url = url.replace('postgres://', 'postgresql://', 1)
    return url


def _env_flag(name: str, default: str = '0') -> bool:
    return os.getenv(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


def engine_options_for(db_uri: str):
    """Return SQLAlchemy engine options suited for the current backend."""
    if db_uri.startswith('sqlite'):
        return {
            "poolclass": NullPool,  # Avoid connection pooling issues on SQLite
            "connect_args": {"check_same_thread": False},
            "echo": False,
        }
    return {
        "pool_pre_ping": True,
        "pool_recycle": int(os.getenv('DB_POOL_RECYCLE', '280')),
        "pool_size": int(os.getenv('DB_POOL_SIZE', '5')),
        "max_overflow": int(os.getenv('DB_MAX_OVERFLOW', '10')),
    }


class Config:
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SECRET_KEY = os.getenv("SECRET_KEY", "dev_secret_key")

    # CSRF Protection settings
    WTF_CSRF_TIME_LIMIT = None
    WTF_CSRF_SSL_STRICT = False

    # Cookie/session settings
    SESSION_COOKIE_SAMESITE = os.getenv('SESSION_COOKIE_SAMESITE', 'Lax')
    SESSION_COOKIE_SECURE = _env_flag('SESSION_COOKIE_SECURE')
    REMEMBER_COOKIE_SAMESITE = SESSION_COOKIE_SAMESITE
    REMEMBER_COOKIE_SECURE = SESSION_COOKIE_SECURE
    PREFERRED_URL_SCHEME = 'https' if SESSION_COOKIE_SECURE else 'http'

    # Company header used on documents until the settings row is filled in
    COMPANY_NAME = os.getenv('COMPANY_NAME', 'BookKeep Inc.')
    COMPANY_ADDRESS = os.getenv('COMPANY_ADDRESS', '123 Accounting St, Finance City, FC 12345')
    COMPANY_PHONE = os.getenv('COMPANY_PHONE', '(555) 123-4567')
    COMPANY_EMAIL = os.getenv('COMPANY_EMAIL', 'admin@bookkeep.com')
    COMPANY_BANK = os.getenv('COMPANY_BANK', '')
    COMPANY_BANK_ACCOUNT = os.getenv('COMPANY_BANK_ACCOUNT', '')

    # Money and language
    CURRENCY = os.getenv('CURRENCY', 'IDR')
    CURRENCY_LOCALE = os.getenv('CURRENCY_LOCALE', 'id_ID')
    BABEL_DEFAULT_LOCALE = os.getenv('BABEL_DEFAULT_LOCALE', 'en')
    DEFAULT_TAX_PERCENTAGE = float(os.getenv('DEFAULT_TAX_PERCENTAGE', '0'))
    INVOICE_DUE_DAYS = int(os.getenv('INVOICE_DUE_DAYS', '15'))

    PER_PAGE = int(os.getenv('PER_PAGE', '50'))

    LOG_DIR = os.getenv('LOG_DIR', os.path.join(_base_dir, 'logs'))
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()

    SQLALCHEMY_DATABASE_URI = _resolve_database_url()
    SQLALCHEMY_ENGINE_OPTIONS = engine_options_for(SQLALCHEMY_DATABASE_URI)
