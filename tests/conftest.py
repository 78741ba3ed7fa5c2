"""Shared test fixtures."""

import pytest

from src.dl_common.enums import AccountType, Role
from src.dl_session.domain.models import Actor
from tests.factories import RecordingSink, make_actor


@pytest.fixture
def admin() -> Actor:
    return make_actor("admin-1", Role.ADMIN)


@pytest.fixture
def sub_admin() -> Actor:
    return make_actor("subadmin-1", Role.SUB_ADMIN)


@pytest.fixture
def manager() -> Actor:
    return make_actor("mgr-1", Role.DONATION_MANAGER)


@pytest.fixture
def donor() -> Actor:
    return make_actor("donor-1", Role.USER, account_type=AccountType.COMMON)


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()
