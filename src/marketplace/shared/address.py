"""Address and phone value objects shared by vendors and suppliers."""

import re

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import String

from marketplace.domain import marketplace

_PHONE_PATTERN = re.compile(r"^\+?[\d\s\-()]+$")


def validate_phone(number):
    """Raise ValidationError unless `number` looks like a dialable phone number."""
    if not number or not re.search(r"\d", number) or not _PHONE_PATTERN.match(number):
        raise ValidationError({"phone": [f"Invalid phone number: {number!r}"]})


@marketplace.value_object
class Address:
    """Street address of a vendor's cart or a supplier's pickup point."""

    street: String(max_length=255)
    city: String(max_length=100)
    state: String(max_length=100)
    pincode: String(max_length=10)

    @invariant.post
    def pincode_must_be_numeric(self):
        if self.pincode and not self.pincode.isdigit():
            raise ValidationError({"pincode": ["Pincode must contain only digits"]})
