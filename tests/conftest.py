from datetime import datetime, timezone as dt_timezone
from decimal import Decimal

import pytest

from accounts.models import User
from bookings.models import BookedSeat, Booking, BookingConcession
from core.clock import FixedClock
from organizations.models import Organization, OrganizationMember


@pytest.fixture
def admin_user(db):
    return User.objects.create_user(
        email="admin@test.com",
        password="testpass123",
        first_name="Admin",
        last_name="User",
        role=User.Role.ADMIN,
    )


@pytest.fixture
def manager_user(db):
    return User.objects.create_user(
        email="manager@test.com",
        password="testpass123",
        first_name="Manager",
        last_name="User",
        role=User.Role.MANAGER,
    )


@pytest.fixture
def cashier_user(db):
    return User.objects.create_user(
        email="cashier@test.com",
        password="testpass123",
        first_name="Cashier",
        last_name="User",
        role=User.Role.CASHIER,
    )


@pytest.fixture
def second_cashier(db):
    return User.objects.create_user(
        email="bob@test.com",
        password="testpass123",
        first_name="Bob",
        last_name="Martin",
        role=User.Role.CASHIER,
    )


@pytest.fixture
def staff_user(db):
    return User.objects.create_user(
        email="staff@test.com",
        password="testpass123",
        first_name="Staff",
        last_name="User",
        role=User.Role.STAFF,
    )


@pytest.fixture
def organization(db):
    return Organization.objects.create(
        name="Cinema Test",
        slug="cinema-test",
        currency="USD",
    )


@pytest.fixture
def other_organization(db):
    return Organization.objects.create(
        name="Cinema Voisin",
        slug="cinema-voisin",
        currency="USD",
    )


@pytest.fixture
def members(organization, admin_user, manager_user, cashier_user, second_cashier):
    for user in (admin_user, manager_user, cashier_user, second_cashier):
        OrganizationMember.objects.create(organization=organization, user=user, is_default=True)
    return organization


@pytest.fixture
def clock():
    return FixedClock(datetime(2026, 3, 10, 14, 0, tzinfo=dt_timezone.utc))


@pytest.fixture
def make_booking(organization):
    """Create a booking attached to *shift* (or unattached) with line items."""

    def _make(
        shift=None,
        amount="10.00",
        status=Booking.Status.PAID,
        payment_method=None,
        seats=0,
        concessions=(),
    ):
        booking = Booking.objects.create(
            organization=shift.organization if shift else organization,
            shift=shift,
            total_amount=Decimal(amount),
            status=status,
            payment_method=payment_method,
        )
        for index in range(seats):
            BookedSeat.objects.create(booking=booking, seat_label=f"A{index + 1}")
        for name, quantity in concessions:
            BookingConcession.objects.create(
                booking=booking,
                name=name,
                quantity=quantity,
                unit_price=Decimal("5.00"),
            )
        return booking

    return _make
