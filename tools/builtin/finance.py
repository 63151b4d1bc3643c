"""
Finance Tools
-------------
tax and interest are computed locally; currency and stock need a market
data provider and are stubs.
"""

from typing import Any, Dict, List

from infra.config import ToolSettings

from ..arguments import Arguments
from ..context import ExecutionContext
from ..registry import Category, Tool, stub_tool
from ..result import Result
from ..schema import enum_param, number_param, object_schema, string_param

TAX_TYPES = ["sales", "vat", "income", "tip"]
INTEREST_TYPES = ["simple", "compound", "loan", "mortgage"]

_TAX_LABELS = {
    "sales": "Sales tax of {rate:.2f}% on {amount:.2f}",
    "vat": "VAT of {rate:.2f}% on {amount:.2f}",
    "income": "Income tax of {rate:.2f}% on {amount:.2f}",
    "tip": "{rate:.2f}% tip on {amount:.2f}",
}


def _money(value: float) -> float:
    return round(value, 2)


def _exec_tax(context: ExecutionContext, raw: Dict[str, Any]) -> Result:
    args = Arguments(raw)
    tax_type = args.get_choice("type", TAX_TYPES)
    amount = args.get_float("amount")
    rate = args.get_float("rate")

    if amount <= 0:
        return Result.from_error("amount must be positive")
    if not 0 <= rate <= 100:
        return Result.from_error("rate must be between 0 and 100")

    tax = amount * rate / 100
    return Result.ok_with_meta(
        {
            "type": tax_type,
            "amount": amount,
            "rate": rate,
            "tax_amount": _money(tax),
            "total": _money(amount + tax),
            "description": _TAX_LABELS[tax_type].format(rate=rate, amount=amount),
        },
        {"type": tax_type},
    )


def monthly_payment(principal: float, annual_rate: float, years: float) -> float:
    """Amortized payment: P * r(1+r)^n / ((1+r)^n - 1)."""
    months = years * 12
    r = annual_rate / 12
    if r == 0:
        return principal / months
    growth = (1 + r) ** months
    return principal * r * growth / (growth - 1)


def _exec_interest(context: ExecutionContext, raw: Dict[str, Any]) -> Result:
    args = Arguments(raw)
    calc_type = args.get_choice("type", INTEREST_TYPES)
    principal = args.get_float("principal")
    rate = args.get_float("rate")
    years = args.get_float("time")
    compounds = args.get_float("compounds", 12.0)

    if principal <= 0:
        return Result.from_error("principal must be positive")
    if rate < 0:
        return Result.from_error("rate must be non-negative")
    if years <= 0:
        return Result.from_error("time must be positive")
    if compounds <= 0:
        return Result.from_error("compounds must be positive")

    r = rate / 100
    data: Dict[str, Any] = {"type": calc_type, "principal": principal, "rate": rate, "time": years}

    if calc_type == "simple":
        interest = principal * r * years
        data.update(interest=_money(interest), total=_money(principal + interest))
    elif calc_type == "compound":
        total = principal * (1 + r / compounds) ** (compounds * years)
        data.update(
            compounds_yearly=compounds,
            interest=_money(total - principal),
            total=_money(total),
        )
    else:
        payment = monthly_payment(principal, r, years)
        total_payment = payment * years * 12
        data.update(
            monthly_payment=_money(payment),
            total_payment=_money(total_payment),
            total_interest=_money(total_payment - principal),
        )

    return Result.ok(data)


def build_tools(settings: ToolSettings) -> List[Tool]:
    return [
        Tool(
            name="tax",
            description="Calculate sales tax, VAT, income tax or a tip",
            category=Category.FINANCE,
            parameters=object_schema({
                "type": enum_param("Type of tax calculation", TAX_TYPES),
                "amount": number_param("Amount to calculate tax on"),
                "rate": number_param("Tax rate as percentage (e.g., 8.25 for 8.25%)", minimum=0, maximum=100),
            }, required=["type", "amount", "rate"]),
            executor=_exec_tax,
        ),
        Tool(
            name="interest",
            description="Calculate simple, compound, and loan interest",
            category=Category.FINANCE,
            parameters=object_schema({
                "type": enum_param("Type of interest calculation", INTEREST_TYPES),
                "principal": number_param("Principal amount"),
                "rate": number_param("Annual interest rate as percentage", minimum=0),
                "time": number_param("Time period in years"),
                "compounds": number_param("Compounds per year (for compound interest)", default=12),
            }, required=["type", "principal", "rate", "time"]),
            executor=_exec_interest,
        ),
        stub_tool(
            name="currency",
            description="Convert between currencies at current exchange rates",
            category=Category.FINANCE,
            parameters=object_schema({
                "amount": number_param("Amount to convert"),
                "from": string_param("Source currency code (e.g., 'USD')"),
                "to": string_param("Target currency code (e.g., 'EUR')"),
            }, required=["amount", "from", "to"]),
            message="Currency conversion requires an exchange rate API to be configured",
            requires_auth=True,
        ),
        stub_tool(
            name="stock",
            description="Get stock quotes, history or company info",
            category=Category.FINANCE,
            parameters=object_schema({
                "symbol": string_param("Stock symbol (e.g., 'AAPL')"),
                "action": enum_param("Action to perform", ["quote", "history", "info"]),
            }, required=["symbol"]),
            message="Stock data requires a market data API to be configured",
            requires_auth=True,
        ),
    ]
