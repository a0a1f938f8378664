"""Supplier onboarding — command and handler."""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.shared.address import Address
from marketplace.supplier.supplier import Supplier

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Supplier")
class RegisterSupplier:
    """Onboard a supplier business."""

    name: String(required=True, max_length=100)
    phone: String(required=True, max_length=20)
    business_name: String(required=True, max_length=150)
    business_type: String(max_length=20)
    street: String(max_length=255)
    city: String(max_length=100)
    state: String(max_length=100)
    pincode: String(max_length=10)


@marketplace.command_handler(part_of=Supplier)
class RegisterSupplierHandler:
    @handle(RegisterSupplier)
    def register_supplier(self, command):
        repo = current_domain.repository_for(Supplier)
        if repo._dao.query.filter(phone=command.phone).all().items:
            raise ValidationError({"phone": ["A supplier with this phone number is already registered"]})

        address = None
        if command.street or command.city:
            address = Address(
                street=command.street,
                city=command.city,
                state=command.state,
                pincode=command.pincode,
            )

        supplier = Supplier.register(
            name=command.name,
            phone=command.phone,
            business_name=command.business_name,
            business_type=command.business_type,
            address=address,
        )
        repo.add(supplier)
        logger.info("Supplier registered", supplier_id=str(supplier.id), business_type=supplier.business_type)
        return str(supplier.id)
