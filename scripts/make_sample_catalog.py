#!/usr/bin/env python
from __future__ import annotations

import argparse
import json
from pathlib import Path


SOURCES = [
    {"type": "Assets", "group": "Current Assets", "number": 1000.0, "name": "Cash"},
    {"type": "Assets", "group": "Current Assets", "number": 1100.0, "name": "Accounts Receivable"},
    {"type": "Assets", "group": "Fixed Assets", "number": 1500.0, "name": "Equipment"},
    {"type": "Liabilities", "group": "Current Liabilities", "number": 2000.0, "name": "Accounts Payable"},
    {"type": "Expense", "group": "Operating Expenses", "number": 6000.0, "name": "Rent"},
    {"type": "Other Rev & Exp", "group": "Other", "number": 8000.0, "name": "Interest Income"},
]

DESTINATIONS = [
    {"type": "Bank", "group": "Checking", "number": 10100, "name": "Operating Account"},
    {"type": "Accounts Receivable", "group": "Trade", "number": 11000, "name": "Customer Invoices"},
    {"type": "Fixed Asset", "group": "Equipment", "number": 15000, "name": "Computers"},
    {"type": "Accounts Payable", "group": "Trade", "number": 20000, "name": "Vendor Bills"},
    {"type": "Expense", "group": "Facilities", "number": 60100, "name": "Office Rent"},
    {"type": "Other Income", "group": "Finance", "number": 80100, "name": "Bank Interest"},
]


def main() -> None:
    parser = argparse.ArgumentParser(description="Write a sample catalog payload for PUT /api/catalog")
    parser.add_argument("--output", required=True, help="output file path (.json)")
    args = parser.parse_args()

    output = Path(args.output)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(json.dumps({"sources": SOURCES, "destinations": DESTINATIONS}, indent=2), encoding="utf-8")

    print(f"sample catalog written: {output}")


if __name__ == "__main__":
    main()
