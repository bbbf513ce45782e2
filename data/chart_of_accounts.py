# -*- coding: utf-8 -*-
"""
Default chart of accounts for a small business.

Each entry: code, name, type, normal balance. The posting roles below map
what the automatic sale / purchase postings need onto account codes.
"""

DEFAULT_ACCOUNTS = [
    # Assets
    {"code": "1000", "name": "Cash", "type": "Asset", "normal_balance": "Debit"},
    {"code": "1010", "name": "Bank", "type": "Asset", "normal_balance": "Debit"},
    {"code": "1100", "name": "Accounts Receivable", "type": "Asset", "normal_balance": "Debit"},
    {"code": "1200", "name": "Inventory", "type": "Asset", "normal_balance": "Debit"},
    # Liabilities
    {"code": "2000", "name": "Accounts Payable", "type": "Liability", "normal_balance": "Credit"},
    {"code": "2100", "name": "Sales Tax Payable", "type": "Liability", "normal_balance": "Credit"},
    # Equity
    {"code": "3000", "name": "Owner's Equity", "type": "Equity", "normal_balance": "Credit"},
    {"code": "3100", "name": "Retained Earnings", "type": "Equity", "normal_balance": "Credit"},
    # Revenue
    {"code": "4000", "name": "Sales Revenue", "type": "Revenue", "normal_balance": "Credit"},
    {"code": "4100", "name": "Other Income", "type": "Revenue", "normal_balance": "Credit"},
    # Expenses
    {"code": "5000", "name": "Purchases", "type": "Expense", "normal_balance": "Debit"},
    {"code": "5100", "name": "Rent Expense", "type": "Expense", "normal_balance": "Debit"},
    {"code": "5200", "name": "Utilities Expense", "type": "Expense", "normal_balance": "Debit"},
    {"code": "5300", "name": "Salaries Expense", "type": "Expense", "normal_balance": "Debit"},
    {"code": "5900", "name": "Miscellaneous Expense", "type": "Expense", "normal_balance": "Debit"},
]

POSTING_ACCOUNTS = {
    "cash": "1000",
    "receivable": "1100",
    "payable": "2000",
    "sales_tax": "2100",
    "revenue": "4000",
    "purchases": "5000",
}


def account_by_code(code: str):
    for acc in DEFAULT_ACCOUNTS:
        if acc["code"] == code:
            return acc
    return None
