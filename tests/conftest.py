from decimal import Decimal

import pytest

from rest_framework.test import APIClient

from modules.branches.models import Branch
from modules.core.actors import Actor, Role
from modules.inventory.models import InventoryRecord
from modules.orders.services import build_order_service
from modules.retailers.models import Retailer


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


# ---------------------------------------------------------------------------
# Reference data
# ---------------------------------------------------------------------------


@pytest.fixture()
def branch():
    return Branch.objects.create(
        code="BLR01", name="Bangalore Central", company_id="C001", company_name="Southern Motors"
    )


@pytest.fixture()
def sister_branch():
    """Same company as ``branch``."""
    return Branch.objects.create(
        code="MYS01", name="Mysore Road", company_id="C001", company_name="Southern Motors"
    )


@pytest.fixture()
def other_company_branch():
    return Branch.objects.create(
        code="PUN01", name="Pune Hadapsar", company_id="C002", company_name="Western Spares"
    )


@pytest.fixture()
def retailer():
    return Retailer.objects.create(
        name="Sri Ganesh Auto",
        contact_person="Ravi Kumar",
        email="ravi@example.com",
        mobile="9800000001",
    )


@pytest.fixture()
def other_retailer():
    return Retailer.objects.create(name="Speedway Spares", contact_person="Anita Rao")


@pytest.fixture()
def make_record(branch):
    def _make(part_number="BP-1001", bucket_a=0, bucket_b=0, bucket_c=0, max_stock=100, **kwargs):
        kwargs.setdefault("branch", branch)
        return InventoryRecord.objects.create(
            part_number=part_number,
            part_name=kwargs.pop("part_name", f"Part {part_number}"),
            bucket_a=bucket_a,
            bucket_b=bucket_b,
            bucket_c=bucket_c,
            max_stock=max_stock,
            **kwargs,
        )

    return _make


# ---------------------------------------------------------------------------
# Actors
# ---------------------------------------------------------------------------


@pytest.fixture()
def super_admin():
    return Actor(id="u-root", name="Root Admin", role=Role.SUPER_ADMIN)


@pytest.fixture()
def company_admin():
    return Actor(id="u-admin", name="Company Admin", role=Role.ADMIN, company_id="C001")


@pytest.fixture()
def branch_manager(branch):
    return Actor(
        id="u-manager",
        name="Branch Manager",
        role=Role.MANAGER,
        company_id="C001",
        branch_code=branch.code,
    )


@pytest.fixture()
def storeman(branch):
    return Actor(
        id="u-store",
        name="Store Keeper",
        role=Role.STOREMAN,
        company_id="C001",
        branch_code=branch.code,
    )


@pytest.fixture()
def foreign_manager(other_company_branch):
    return Actor(
        id="u-foreign",
        name="Foreign Manager",
        role=Role.MANAGER,
        company_id="C002",
        branch_code=other_company_branch.code,
    )


@pytest.fixture()
def retailer_actor(retailer):
    return Actor(
        id="u-retailer",
        name="Ravi Kumar",
        role=Role.RETAILER,
        retailer_id=str(retailer.id),
    )


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


@pytest.fixture()
def order_service():
    return build_order_service()


@pytest.fixture()
def order_payload(retailer, branch):
    return {
        "retailer_id": str(retailer.id),
        "branch": branch.code,
        "po_number": "PO-7781",
        "remark": "Deliver before noon",
        "items": [
            {
                "part_number": "BP-1001",
                "part_name": "Brake Pad Set",
                "quantity": 10,
                "mrp": Decimal("1299"),
                "basic_discount": Decimal("5"),
                "scheme_discount": Decimal("3"),
                "additional_discount": Decimal("2"),
            },
            {
                "part_number": "OF-2002",
                "part_name": "Oil Filter",
                "quantity": 4,
                "mrp": Decimal("250"),
            },
        ],
    }


@pytest.fixture()
def new_order(order_service, order_payload, branch_manager):
    """An order in New status placed by the branch manager."""
    return order_service.create_order(order_payload, branch_manager)


@pytest.fixture()
def actor_client():
    """Return an APIClient force-authenticated as the given ``Actor``."""

    def _client(actor):
        client = APIClient()
        client.force_authenticate(user=actor)
        return client

    return _client
