import pytest

from accounts.models import User


@pytest.mark.django_db
@pytest.mark.parametrize(
    "user_fixture, is_admin, is_manager, is_cashier, can_supervise, can_operate_register",
    [
        ("admin_user", True, False, False, True, True),
        ("manager_user", False, True, False, True, True),
        ("cashier_user", False, False, True, False, True),
        ("staff_user", False, False, False, False, False),
    ],
)
def test_role_helpers(
    request, user_fixture, is_admin, is_manager, is_cashier, can_supervise, can_operate_register
):
    user = request.getfixturevalue(user_fixture)

    assert user.is_admin is is_admin
    assert user.is_manager is is_manager
    assert user.is_cashier is is_cashier
    assert user.can_supervise is can_supervise
    assert user.can_operate_register is can_operate_register


@pytest.mark.django_db
def test_superuser_operates_register_whatever_the_role():
    root = User.objects.create_superuser(email="root@test.com", password="testpass123", role=User.Role.STAFF)

    assert root.is_cashier is False
    assert root.can_operate_register is True
