import pytest

from account_mapper.core.classifier import Classifier, classify
from account_mapper.domain import MasterCategory


@pytest.mark.parametrize(
    "raw_type",
    ["Other Assets", "  other ASSETS ", "OTHER REVENUE", "Other Operating Expense", "other\tincome"],
)
def test_other_token_beats_every_rule(raw_type):
    assert classify(raw_type, "") is MasterCategory.OTHER


def test_other_in_group_also_wins():
    assert classify("Expense", "Other") is MasterCategory.OTHER


def test_other_must_be_a_whole_word():
    assert classify("Brothers Inventory", "") is MasterCategory.ASSETS


@pytest.mark.parametrize(
    ("raw_type", "expected"),
    [
        ("Assets", MasterCategory.ASSETS),
        ("liability", MasterCategory.LIABILITIES),
        ("Equity", MasterCategory.EQUITY),
        ("Revenue", MasterCategory.REVENUE),
        ("Cost of Goods Sold", MasterCategory.COST_OF_GOODS),
        ("expenses", MasterCategory.EXPENSE),
    ],
)
def test_exact_names(raw_type, expected):
    assert classify(raw_type) is expected


@pytest.mark.parametrize(
    ("raw_type", "expected"),
    [
        ("Accounts Receivable", MasterCategory.ASSETS),
        ("Prepaid Expenses", MasterCategory.ASSETS),
        ("Current Liabilities", MasterCategory.LIABILITIES),
        ("Deferred Revenue", MasterCategory.LIABILITIES),
        ("Retained Earnings", MasterCategory.EQUITY),
        ("Cost of Product", MasterCategory.COST_OF_GOODS),
        ("Direct Costs", MasterCategory.COST_OF_GOODS),
        ("Income Tax Expense", MasterCategory.EXPENSE),
        ("Professional Fees", MasterCategory.EXPENSE),
        ("Labor", MasterCategory.EXPENSE),
        ("Service Revenue", MasterCategory.REVENUE),
        ("Product Sales", MasterCategory.REVENUE),
    ],
)
def test_keyword_families(raw_type, expected):
    assert classify(raw_type, "") is expected


def test_group_is_used_when_type_says_nothing():
    assert classify("", "Accounts Receivable") is MasterCategory.ASSETS
    assert classify("Misc", "Payroll") is MasterCategory.EXPENSE


def test_type_is_checked_before_group():
    assert classify("Revenue", "Accounts Receivable") is MasterCategory.REVENUE


@pytest.mark.parametrize("raw_type", ["", None, "   ", "Suspense"])
def test_unmatched_input_defaults_to_other(raw_type):
    assert classify(raw_type, None) is MasterCategory.OTHER


def test_classifier_accepts_injected_rules():
    classifier = Classifier(
        {
            "exact": {"banking": "Assets"},
            "keywords": [{"category": "Equity", "all": ["owner", "draw"]}],
        }
    )

    assert classifier.classify("Banking") is MasterCategory.ASSETS
    assert classifier.classify("Owner Draws") is MasterCategory.EQUITY
    assert classifier.classify("Owner") is MasterCategory.OTHER
    assert classifier.classify("Other Banking") is MasterCategory.OTHER


def test_master_category_parse():
    assert MasterCategory.parse("cogs") is MasterCategory.COST_OF_GOODS
    assert MasterCategory.parse("COST_OF_GOODS") is MasterCategory.COST_OF_GOODS
    assert MasterCategory.parse("other rev & exp") is MasterCategory.OTHER
    with pytest.raises(ValueError):
        MasterCategory.parse("Nope")
