"""Money and date formatting shared by templates and exports."""
from __future__ import annotations

from datetime import date, datetime

from babel.numbers import format_currency
from flask import current_app, g, has_app_context, has_request_context

from models import Settings, to_decimal

DEFAULT_CURRENCY = 'IDR'
DEFAULT_LOCALE = 'id_ID'


def _currency_settings():
    if not has_app_context():
        return DEFAULT_CURRENCY, DEFAULT_LOCALE
    cfg = current_app.config
    currency = cfg.get('CURRENCY', DEFAULT_CURRENCY)
    locale = cfg.get('CURRENCY_LOCALE', DEFAULT_LOCALE)
    if has_request_context():
        # the settings row may override the configured currency; read it once per request
        if 'currency' not in g:
            s = Settings.current()
            g.currency = ((s.currency or '').strip().upper() if s else '') or currency
        currency = g.currency
    return currency, locale


def money(value, currency: str = None, locale: str = None) -> str:
    cfg_currency, cfg_locale = _currency_settings()
    return format_currency(to_decimal(value), currency or cfg_currency, locale=locale or cfg_locale)


def fmt_date(value, fmt: str = '%d/%m/%Y') -> str:
    if not value:
        return ''
    if isinstance(value, (date, datetime)):
        return value.strftime(fmt)
    return str(value)


def truncate(text, length: int = 40) -> str:
    text = text or ''
    if len(text) <= length:
        return text
    return text[:length]


def register_filters(app) -> None:
    app.jinja_env.filters['money'] = money
    app.jinja_env.filters['fmt_date'] = fmt_date
    app.jinja_env.filters['truncate_desc'] = truncate
