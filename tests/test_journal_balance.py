from decimal import Decimal

import pytest

from services.journal import (
    JournalBalanceError,
    auto_balance,
    clean_lines,
    is_balanced,
    line_totals,
    validate_entry,
)
from models import parse_amount, quantize, to_decimal


def _line(account='Cash', description='x', debit=0, credit=0):
    return {'account': account, 'description': description, 'debit': debit, 'credit': credit}


def test_auto_balance_debit_mirrors_to_credit_on_other_line():
    lines = [_line('Cash'), _line('Sales Revenue')]
    out = auto_balance(lines, 0, 'debit', '150')
    assert out[0]['debit'] == Decimal('150.00')
    assert out[0]['credit'] == Decimal('0.00')
    assert out[1]['credit'] == Decimal('150.00')
    assert out[1]['debit'] == Decimal('0.00')
    assert is_balanced(out)


def test_auto_balance_credit_on_second_line_mirrors_back():
    lines = [_line('Rent Expense', debit=10), _line('Cash', credit=10)]
    out = auto_balance(lines, 1, 'credit', 75.5)
    assert out[1]['credit'] == Decimal('75.50')
    assert out[0]['debit'] == Decimal('75.50')
    assert out[0]['credit'] == Decimal('0.00')


def test_auto_balance_is_symmetric_for_either_line():
    for index, field in ((0, 'debit'), (0, 'credit'), (1, 'debit'), (1, 'credit')):
        out = auto_balance([_line(), _line()], index, field, 42)
        other = 1 - index
        opposite = 'credit' if field == 'debit' else 'debit'
        assert out[index][field] == Decimal('42.00')
        assert out[other][opposite] == Decimal('42.00')
        assert line_totals(out) == (Decimal('42.00'), Decimal('42.00'))


def test_auto_balance_zero_only_updates_edited_cell():
    lines = [_line(debit=20), _line(credit=20)]
    out = auto_balance(lines, 0, 'debit', 0)
    assert out[0]['debit'] == Decimal('0.00')
    assert out[1]['credit'] == Decimal('20.00')


def test_auto_balance_leaves_input_untouched():
    lines = [_line(), _line()]
    auto_balance(lines, 0, 'debit', 5)
    assert lines[0]['debit'] == 0
    assert lines[1]['credit'] == 0


def test_auto_balance_rejects_other_line_counts():
    with pytest.raises(ValueError):
        auto_balance([_line(), _line(), _line()], 0, 'debit', 1)
    with pytest.raises(IndexError):
        auto_balance([_line(), _line()], 2, 'debit', 1)
    with pytest.raises(ValueError):
        auto_balance([_line(), _line()], 0, 'amount', 1)


def test_line_totals_treats_blanks_as_zero():
    assert line_totals([_line(debit='', credit=None), _line(debit='12.345')]) == (
        Decimal('12.35'), Decimal('0.00'))


def test_clean_lines_drops_empty_rows():
    rows = [_line(), {'account': '', 'description': '', 'debit': None, 'credit': None}]
    assert clean_lines(rows) == [rows[0]]


def test_validate_entry_accepts_balanced_two_line_entry():
    ok, err = validate_entry('Office rent', [_line('Rent Expense', debit=500), _line('Cash', credit=500)])
    assert ok and err == ''


def test_validate_entry_accepts_balanced_multi_line_entry():
    lines = [_line('Cash', debit=110), _line('Sales Revenue', credit=100), _line('Sales Tax Payable', credit=10)]
    ok, _ = validate_entry('Sale with tax', lines)
    assert ok


@pytest.mark.parametrize('description, lines, message', [
    ('', [_line(debit=1), _line(credit=1)], 'description'),
    ('d', [_line(debit=1), _line(account='', credit=1)], 'line item details'),
    ('d', [_line(debit=1), _line(description='', credit=1)], 'line item details'),
    ('d', [_line(debit=1, credit=1), _line(credit=0)], 'both a debit and a credit'),
    ('d', [_line(debit=-5), _line(credit=-5)], 'negative'),
    ('d', [_line(debit=5)], 'at least two lines'),
    ('d', [_line(debit=100), _line(credit=90)], 'must be balanced'),
    ('d', [_line(), _line()], 'greater than zero'),
])
def test_validate_entry_rejections(description, lines, message):
    ok, err = validate_entry(description, lines)
    assert not ok
    assert message in err


def test_validate_entry_two_line_restriction():
    lines = [_line(debit=10), _line(credit=5), _line(credit=5)]
    ok, err = validate_entry('split', lines, require_two_lines=True)
    assert not ok
    assert 'exactly two lines' in err
    assert validate_entry('split', lines)[0]


def test_unbalanced_message_reports_both_totals():
    ok, err = validate_entry('d', [_line(debit='100.00'), _line(credit='99.00')])
    assert not ok
    assert '100.00' in err and '99.00' in err


def test_balance_error_is_a_value_error():
    assert issubclass(JournalBalanceError, ValueError)


@pytest.mark.parametrize('raw', ['NaN', 'Infinity', '-Infinity', 'sNaN', Decimal('NaN'), 'abc', None, ''])
def test_to_decimal_falls_back_for_non_numbers(raw):
    assert to_decimal(raw) == Decimal('0')
    assert quantize(raw) == Decimal('0.00')


@pytest.mark.parametrize('raw', ['NaN', 'Infinity', 'abc', True, '1e13', [1]])
def test_parse_amount_rejects_non_amounts(raw):
    with pytest.raises(ValueError):
        parse_amount(raw)


def test_parse_amount_accepts_blanks_and_numbers():
    assert parse_amount('') == Decimal('0')
    assert parse_amount('1,250.50') == Decimal('1250.50')
    assert parse_amount(7.5) == Decimal('7.5')


def test_validate_entry_reports_non_finite_amounts_as_errors():
    ok, err = validate_entry('d', [_line(debit='NaN'), _line(credit='Infinity')])
    assert not ok
    assert 'greater than zero' in err
    ok, err = validate_entry('d', [_line(debit='NaN'), _line(credit='100')])
    assert not ok
    assert 'must be balanced' in err
