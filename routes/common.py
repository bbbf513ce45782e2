# Shared helpers for the blueprints. No route handlers.
from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from flask import request, send_file
from sqlalchemy import or_

from models import Settings, get_now


def register_context(app):
    from services.pdf_export import company_profile

    @app.context_processor
    def inject_globals():
        s = Settings.current()
        return {
            'company': company_profile(),
            'current_year': get_now().year,
            'settings_dark': bool(s and s.dark_mode),
        }


def parse_date(value: Optional[str]) -> Optional[date]:
    value = (value or '').strip()
    if not value:
        return None
    try:
        return datetime.strptime(value[:10], '%Y-%m-%d').date()
    except ValueError:
        return None


def date_range_args():
    """(start, end) from ``?start_date=...&end_date=...``; unparseable values are ignored."""
    return parse_date(request.args.get('start_date')), parse_date(request.args.get('end_date'))


def search(query, q: str, *columns):
    q = (q or '').strip()
    if not q:
        return query
    like = f'%{q}%'
    return query.filter(or_(*[col.ilike(like) for col in columns]))


def item_rows(field_list) -> list:
    """Line-item dicts from a FieldList(FormField(LineItemForm))."""
    return [dict(entry.data) for entry in field_list.entries]


def pdf_response(buf, filename: str):
    return send_file(buf, as_attachment=True, download_name=filename, mimetype='application/pdf')
