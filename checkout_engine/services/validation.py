"""Checkout form validation"""

import re

from ..errors import CheckoutValidationError
from ..models.order import CheckoutFormData, CustomerInfo, DeliveryAddress

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^[1-9]\d{0,15}$")

REQUIRED = "This field is required"


def validate_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email))


def validate_phone(phone: str) -> bool:
    """Digits only after stripping punctuation; no leading zero"""
    return bool(PHONE_PATTERN.match(re.sub(r"\D", "", phone)))


def validate_customer_info(info: CustomerInfo) -> dict[str, str]:
    """Field -> message for every problem in the contact step"""
    errors = {}

    if not info.name.strip():
        errors["customer_info.name"] = REQUIRED

    if not info.email.strip():
        errors["customer_info.email"] = REQUIRED
    elif not validate_email(info.email):
        errors["customer_info.email"] = "Please enter a valid email address"

    if not info.phone.strip():
        errors["customer_info.phone"] = REQUIRED
    elif not validate_phone(info.phone):
        errors["customer_info.phone"] = "Please enter a valid phone number"

    return errors


def validate_delivery_address(address: DeliveryAddress) -> dict[str, str]:
    errors = {}
    for field in ("street", "city", "province", "postal_code"):
        if not getattr(address, field).strip():
            errors[f"delivery_address.{field}"] = REQUIRED
    return errors


def validate_checkout_form(form: CheckoutFormData) -> None:
    """
    Validate the whole checkout form.

    Raises:
        CheckoutValidationError: With every field problem at once
    """
    errors = validate_customer_info(form.customer_info)
    if form.is_delivery:
        errors.update(validate_delivery_address(form.delivery_address))
    if errors:
        raise CheckoutValidationError(errors)
