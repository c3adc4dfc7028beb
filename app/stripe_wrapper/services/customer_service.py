"""
Customer service over Stripe Customers and PaymentMethods.

Usage:
    from stripe_wrapper.services import CustomerService
    from stripe_wrapper.types import Customer

    customer = CustomerService.create_customer(
        Customer(email="ada@example.com", name="Ada Lovelace")
    )
    CustomerService.attach_payment_method(customer.id, "pm_card_visa", set_as_default=True)

Errors:
    CustomerNotFoundError: The customer does not exist or was deleted
    StripeApiError: Any other Stripe failure
    ValueError: Blank ids or missing customer
"""

from __future__ import annotations

import stripe

from core.helpers import get_field
from stripe_wrapper.exceptions import CustomerNotFoundError
from stripe_wrapper.services.base import StripeService
from stripe_wrapper.services.mappers import customer_params, list_data, map_customer
from stripe_wrapper.types import Customer


class CustomerService(StripeService):
    """Manage customers and their saved payment methods."""

    resource = "customer"

    @classmethod
    def create_customer(cls, customer: Customer) -> Customer:
        if customer is None:
            raise ValueError("customer is required")

        with cls.stripe_call("create_customer", email=customer.email) as log_context:
            created = stripe.Customer.create(**customer_params(customer))
            log_context["customer_id"] = created.id

        return map_customer(created)

    @classmethod
    def update_customer(cls, customer_id: str, customer: Customer) -> Customer:
        """Update the fields set on `customer`; unset fields are left unchanged."""
        cls.require(customer_id=customer_id)
        if customer is None:
            raise ValueError("customer is required")

        with cls.stripe_call(
            "update_customer",
            resource_id=customer_id,
            customer_id=customer_id,
        ):
            updated = stripe.Customer.modify(customer_id, **customer_params(customer))

        return map_customer(updated)

    @classmethod
    def get_customer(cls, customer_id: str) -> Customer:
        """
        Retrieve a customer.

        Raises:
            CustomerNotFoundError: Unknown id, or the customer was deleted
                (Stripe still returns a stub for deleted customers)
        """
        cls.require(customer_id=customer_id)

        with cls.stripe_call("get_customer", resource_id=customer_id, customer_id=customer_id):
            customer = stripe.Customer.retrieve(customer_id)
            if get_field(customer, "deleted"):
                raise CustomerNotFoundError(customer_id)

        return map_customer(customer)

    @classmethod
    def delete_customer(cls, customer_id: str) -> bool:
        """Delete a customer. Returns whether Stripe reports it deleted."""
        cls.require(customer_id=customer_id)

        with cls.stripe_call(
            "delete_customer",
            resource_id=customer_id,
            customer_id=customer_id,
        ):
            result = stripe.Customer.delete(customer_id)

        return bool(get_field(result, "deleted", False))

    @classmethod
    def attach_payment_method(
        cls,
        customer_id: str,
        payment_method_id: str,
        set_as_default: bool = False,
    ) -> str:
        """
        Attach a payment method to a customer.

        With set_as_default, it also becomes the customer's
        invoice_settings.default_payment_method.

        Returns:
            The payment method id
        """
        cls.require(customer_id=customer_id, payment_method_id=payment_method_id)

        with cls.stripe_call(
            "attach_payment_method",
            resource_id=customer_id,
            customer_id=customer_id,
            payment_method_id=payment_method_id,
            set_as_default=set_as_default,
        ):
            payment_method = stripe.PaymentMethod.attach(
                payment_method_id,
                customer=customer_id,
            )

            if set_as_default:
                stripe.Customer.modify(
                    customer_id,
                    invoice_settings={"default_payment_method": payment_method_id},
                )

        return payment_method.id

    @classmethod
    def detach_payment_method(cls, payment_method_id: str) -> bool:
        """Detach a payment method. Returns True once it has no customer."""
        cls.require(payment_method_id=payment_method_id)

        with cls.stripe_call(
            "detach_payment_method",
            payment_method_id=payment_method_id,
        ):
            payment_method = stripe.PaymentMethod.detach(payment_method_id)

        return get_field(payment_method, "customer") is None

    @classmethod
    def list_payment_methods(cls, customer_id: str, type: str = "card") -> list[str]:
        """Ids of the customer's payment methods of the given type."""
        cls.require(customer_id=customer_id, type=type)

        with cls.stripe_call(
            "list_payment_methods",
            resource_id=customer_id,
            customer_id=customer_id,
            payment_method_type=type,
        ) as log_context:
            payment_methods = stripe.PaymentMethod.list(customer=customer_id, type=type)
            ids = [get_field(pm, "id") for pm in list_data(payment_methods)]
            log_context["count"] = len(ids)

        return ids
