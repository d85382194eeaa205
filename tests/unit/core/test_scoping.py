import pytest

from modules.branches.models import Branch
from modules.core.actors import Actor, Role
from modules.core.exceptions import AccessDenied
from modules.core.scoping import (
    BranchScope,
    CompanyScope,
    RetailerScope,
    Unrestricted,
    resolve_scope,
    scope_allows,
    scope_allows_branch,
    scope_filter,
)

pytestmark = pytest.mark.unit


class TestResolveScope:
    def test_super_admin_is_unrestricted(self):
        actor = Actor(id="1", name="Root", role=Role.SUPER_ADMIN, branch_code="BLR01")
        assert resolve_scope(actor) == Unrestricted()

    def test_branch_assignment_wins_over_company(self):
        actor = Actor(id="2", name="M", role=Role.MANAGER, company_id="C1", branch_code="BLR01")
        assert resolve_scope(actor) == BranchScope(branch_code="BLR01")

    def test_company_only_actor(self):
        actor = Actor(id="3", name="A", role=Role.ADMIN, company_id="C1")
        assert resolve_scope(actor) == CompanyScope(company_id="C1")

    def test_retailer_actor(self):
        actor = Actor(id="4", name="R", role=Role.RETAILER, retailer_id="r-1")
        assert resolve_scope(actor) == RetailerScope(retailer_id="r-1")

    def test_retailer_without_link_is_denied(self):
        actor = Actor(id="5", name="R", role=Role.RETAILER)
        with pytest.raises(AccessDenied):
            resolve_scope(actor)

    def test_unassigned_staff_fails_closed(self):
        actor = Actor(id="6", name="S", role=Role.SALESMAN)
        with pytest.raises(AccessDenied):
            resolve_scope(actor)


class TestScopeFilter:
    def test_unrestricted_is_empty_predicate(self):
        assert scope_filter(Unrestricted()).children == []

    def test_company_scope_joins_through_branch(self):
        predicate = scope_filter(CompanyScope("C1"), branch_field="order__branch")
        assert predicate.children == [("order__branch__company_id", "C1")]

    def test_branch_scope_uses_foreign_key_column(self):
        predicate = scope_filter(BranchScope("BLR01"))
        assert predicate.children == [("branch_id", "BLR01")]

    def test_retailer_scope_needs_retailer_field(self):
        predicate = scope_filter(RetailerScope("r-1"), retailer_field="retailer")
        assert predicate.children == [("retailer_id", "r-1")]

    def test_retailer_scope_denied_where_retailers_have_no_access(self):
        with pytest.raises(AccessDenied):
            scope_filter(RetailerScope("r-1"))


class TestScopeAllows:
    @pytest.fixture()
    def blr(self):
        return Branch(code="BLR01", company_id="C1")

    def test_branch_checks(self, blr):
        assert scope_allows_branch(Unrestricted(), blr)
        assert scope_allows_branch(CompanyScope("C1"), blr)
        assert not scope_allows_branch(CompanyScope("C2"), blr)
        assert scope_allows_branch(BranchScope("BLR01"), blr)
        assert not scope_allows_branch(BranchScope("MYS01"), blr)
        assert not scope_allows_branch(RetailerScope("r-1"), blr)

    def test_retailer_owns_row(self, blr):
        assert scope_allows(RetailerScope("r-1"), branch=blr, retailer_id="r-1")
        assert not scope_allows(RetailerScope("r-1"), branch=blr, retailer_id="r-2")
        assert not scope_allows(RetailerScope("r-1"), branch=blr, retailer_id=None)
