"""
Per-province sales tax breakdown.

Rates are fractions of the subtotal. HST provinces report the federal
GST line alongside the harmonized line, matching how receipts in those
provinces itemize them.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from ..errors import CheckoutValidationError
from .money import quantize_money

logger = logging.getLogger(__name__)

DEFAULT_PROVINCE = "BC"


@dataclass(frozen=True)
class ProvinceTaxRates:
    """Tax rates for one jurisdiction"""
    gst: float
    pst: float = 0.0
    hst: float = 0.0


PROVINCE_TAX_RATES: dict[str, ProvinceTaxRates] = {
    "AB": ProvinceTaxRates(gst=0.05),
    "BC": ProvinceTaxRates(gst=0.05, pst=0.07),
    "MB": ProvinceTaxRates(gst=0.05, pst=0.07),
    "NB": ProvinceTaxRates(gst=0.05, hst=0.15),
    "NL": ProvinceTaxRates(gst=0.05, hst=0.15),
    "NS": ProvinceTaxRates(gst=0.05, hst=0.14),
    "NT": ProvinceTaxRates(gst=0.05),
    "NU": ProvinceTaxRates(gst=0.05),
    "ON": ProvinceTaxRates(gst=0.05, hst=0.13),
    "PE": ProvinceTaxRates(gst=0.05, hst=0.15),
    "QC": ProvinceTaxRates(gst=0.05, pst=0.09975),
    "SK": ProvinceTaxRates(gst=0.05, pst=0.06),
    "YT": ProvinceTaxRates(gst=0.05),
}


@dataclass
class TaxBreakdown:
    """Tax breakdown with GST, PST and HST components."""

    gst: float
    pst: float
    hst: float
    total: float


def get_province_rates(province: Optional[str], strict: bool = False) -> ProvinceTaxRates:
    """
    Look up the rates for a province code.

    Unknown or empty codes fall back to DEFAULT_PROVINCE; with strict=True
    they raise CheckoutValidationError instead.
    """
    code = (province or DEFAULT_PROVINCE).strip().upper()
    rates = PROVINCE_TAX_RATES.get(code)
    if rates is None:
        if strict:
            raise CheckoutValidationError({"province": f"Unknown province code: {province}"})
        logger.warning(f"Unknown province '{province}', using {DEFAULT_PROVINCE} tax rates")
        rates = PROVINCE_TAX_RATES[DEFAULT_PROVINCE]
    return rates


def calculate_tax_breakdown(
    subtotal: float,
    province: Optional[str] = DEFAULT_PROVINCE,
    strict: bool = False,
) -> TaxBreakdown:
    """
    Calculate taxes for a subtotal in a province.

    Args:
        subtotal: Amount before tax
        province: Two-letter province code (defaults to BC)
        strict: Raise on unknown province instead of falling back

    Returns:
        TaxBreakdown; each component rounded to the cent, total is their sum
    """
    rates = get_province_rates(province, strict=strict)

    gst = quantize_money(subtotal * rates.gst)
    pst = quantize_money(subtotal * rates.pst)
    hst = quantize_money(subtotal * rates.hst)

    return TaxBreakdown(
        gst=float(gst),
        pst=float(pst),
        hst=float(hst),
        total=float(gst + pst + hst),
    )
