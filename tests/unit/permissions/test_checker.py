"""Unit tests for the access decision engine.

These tests verify:
- Ownership supremacy and non-member denial
- Matrix fidelity for every role
- View overrides (view-only, no leak to clients/team)
- explain() wording and PermissionChecker memoisation
"""

import itertools
from unittest.mock import patch

import pytest

from juris.core.permissions import checker
from juris.core.permissions.checker import (
    AccessDecision,
    DecisionReason,
    PermissionChecker,
    allowed_actions,
    can,
    decide,
    explain,
    role_allows,
)
from juris.core.permissions.models import Action, Resource, Role, matrix_actions
from juris.modules.offices.schemas import MemberPermissions, OfficeSnapshot
from tests.factories import ActorFactory, MembershipFactory, OfficeSnapshotFactory


pytestmark = pytest.mark.unit

ALL_PAIRS = list(itertools.product(Resource, Action))


def _office_with(owner_id: str, *members) -> OfficeSnapshot:
    return OfficeSnapshotFactory.build(owner_id=owner_id, members=tuple(members))


class TestMissingContext:
    """Tests for unauthenticated and office-less decisions."""

    def test_no_actor_denies(self):
        office = OfficeSnapshotFactory.build()
        decision = decide(None, office, Resource.CASES, Action.VIEW)

        assert decision.allowed is False
        assert decision.reason is DecisionReason.UNAUTHENTICATED

    def test_no_office_denies(self):
        actor = ActorFactory.build()
        decision = decide(actor, None, Resource.CASES, Action.VIEW)

        assert decision.allowed is False
        assert decision.reason is DecisionReason.NO_OFFICE

    def test_no_office_denies_even_for_admin_elsewhere(self):
        """No fallback office: without a real office there are no permissions."""
        actor = ActorFactory.build()
        assert allowed_actions(actor, None, Resource.FINANCIAL) == frozenset()


class TestOwnership:
    """Tests for the owner shortcut."""

    def test_owner_without_membership_may_do_everything(self):
        actor = ActorFactory.build()
        office = _office_with(actor.id)

        for resource, action in ALL_PAIRS:
            assert can(actor, office, resource, action) is True

    def test_owner_bypasses_restrictive_role(self):
        """An owner listed as Intern still has every permission."""
        actor = ActorFactory.build()
        office = _office_with(actor.id, MembershipFactory.build(user_id=actor.id, role=Role.INTERN))

        for resource, action in ALL_PAIRS:
            decision = decide(actor, office, resource, action)
            assert decision.allowed is True
            assert decision.reason is DecisionReason.OWNER

    def test_owner_gets_actions_no_role_has(self):
        """settings:delete is granted to no role, yet the owner has it."""
        actor = ActorFactory.build()
        office = _office_with(actor.id)

        assert all(Action.DELETE not in matrix_actions(r, Resource.SETTINGS) for r in Role)
        assert can(actor, office, Resource.SETTINGS, Action.DELETE) is True


class TestNonMembers:
    """Tests for actors outside the office."""

    def test_stranger_is_denied_everything(self):
        stranger = ActorFactory.build()
        office = _office_with(
            "someone-else",
            MembershipFactory.build(role=Role.ADMIN, permissions=MemberPermissions.all_granted()),
        )

        for resource, action in ALL_PAIRS:
            decision = decide(stranger, office, resource, action)
            assert decision.allowed is False
            assert decision.reason is DecisionReason.NOT_A_MEMBER


class TestMatrixFidelity:
    """A member gets exactly the table's answer for non-view actions."""

    @pytest.mark.parametrize("role", list(Role))
    @pytest.mark.parametrize(
        "permissions",
        [MemberPermissions(), MemberPermissions.all_granted()],
        ids=["no-overrides", "all-overrides"],
    )
    def test_non_view_actions_follow_matrix(self, role: Role, permissions: MemberPermissions):
        actor = ActorFactory.build()
        office = _office_with(
            "owner", MembershipFactory.build(user_id=actor.id, role=role, permissions=permissions)
        )

        for resource, action in ALL_PAIRS:
            if action is Action.VIEW:
                continue
            expected = action in matrix_actions(role, resource)
            assert can(actor, office, resource, action) is expected, (role, resource, action)

    @pytest.mark.parametrize("role", list(Role))
    def test_view_without_overrides_follows_matrix(self, role: Role):
        actor = ActorFactory.build()
        office = _office_with("owner", MembershipFactory.build(user_id=actor.id, role=role))

        for resource in Resource:
            expected = Action.VIEW in matrix_actions(role, resource)
            assert can(actor, office, resource, Action.VIEW) is expected


class TestViewOverrides:
    """Tests for the per-member view override flags."""

    def test_override_is_view_only(self):
        """Finance with the cases override may view cases but not change them."""
        actor = ActorFactory.build()
        office = _office_with(
            "owner",
            MembershipFactory.build(
                user_id=actor.id, role=Role.FINANCE, permissions=MemberPermissions(cases=True)
            ),
        )

        assert can(actor, office, Resource.CASES, Action.VIEW) is True
        for action in (Action.CREATE, Action.EDIT, Action.DELETE, Action.EXPORT):
            assert can(actor, office, Resource.CASES, action) is False

    def test_override_grants_view_the_role_lacks(self):
        actor = ActorFactory.build()
        office = _office_with(
            "owner",
            MembershipFactory.build(
                user_id=actor.id, role=Role.INTERN, permissions=MemberPermissions(financial=True)
            ),
        )

        decision = decide(actor, office, Resource.FINANCIAL, Action.VIEW)
        assert decision.allowed is True
        assert decision.reason is DecisionReason.VIEW_OVERRIDE
        assert can(actor, office, Resource.FINANCIAL, Action.EXPORT) is False

    def test_redundant_override_reports_role(self):
        """When the role already grants view, the role rule wins."""
        actor = ActorFactory.build()
        office = _office_with(
            "owner",
            MembershipFactory.build(
                user_id=actor.id, role=Role.LAWYER, permissions=MemberPermissions(financial=True)
            ),
        )

        assert decide(actor, office, Resource.FINANCIAL, Action.VIEW).reason is DecisionReason.ROLE

    @pytest.mark.parametrize("resource", [Resource.CLIENTS, Resource.TEAM])
    def test_no_override_for_clients_or_team(self, resource: Resource):
        """All flags set change nothing for resources without a flag."""
        for role in Role:
            with_flags = role_allows(role, resource, Action.VIEW, MemberPermissions.all_granted())
            without = role_allows(role, resource, Action.VIEW, MemberPermissions())
            assert with_flags == without

    def test_intern_with_all_flags_still_cannot_view_team(self):
        actor = ActorFactory.build()
        office = _office_with(
            "owner",
            MembershipFactory.build(
                user_id=actor.id, role=Role.INTERN, permissions=MemberPermissions.all_granted()
            ),
        )

        assert can(actor, office, Resource.TEAM, Action.VIEW) is False
        assert can(actor, office, Resource.SETTINGS, Action.VIEW) is True
        assert can(actor, office, Resource.SETTINGS, Action.EDIT) is False


class TestExampleScenario:
    """Office T1 owned by u_owner with u_lawyer as a plain Lawyer."""

    @pytest.fixture
    def people(self):
        owner = ActorFactory.build(id="u_owner")
        lawyer = ActorFactory.build(id="u_lawyer")
        stranger = ActorFactory.build(id="u_stranger")
        office = OfficeSnapshotFactory.build(
            id="T1",
            owner_id="u_owner",
            members=(MembershipFactory.build(user_id="u_lawyer", role=Role.LAWYER),),
        )
        return owner, lawyer, stranger, office

    def test_scenario(self, people):
        owner, lawyer, stranger, office = people

        assert can(lawyer, office, Resource.FINANCIAL, Action.VIEW) is True
        assert can(lawyer, office, Resource.FINANCIAL, Action.DELETE) is False
        assert can(owner, office, Resource.FINANCIAL, Action.DELETE) is True
        assert can(stranger, office, Resource.CASES, Action.VIEW) is False


class TestExplain:
    """Tests for explain() wording, which follows the same precedence."""

    def test_reasons(self):
        lawyer = ActorFactory.build()
        intern = ActorFactory.build()
        owner = ActorFactory.build()
        office = _office_with(
            owner.id,
            MembershipFactory.build(user_id=lawyer.id, role=Role.LAWYER),
            MembershipFactory.build(
                user_id=intern.id, role=Role.INTERN, permissions=MemberPermissions(documents=True)
            ),
        )

        assert explain(None, office, Resource.CASES, Action.VIEW) == "Denied: not authenticated."
        assert explain(lawyer, None, Resource.CASES, Action.VIEW) == (
            "Denied: no active office context."
        )
        assert explain(owner, office, Resource.TEAM, Action.DELETE) == "Allowed: office owner."
        assert explain(ActorFactory.build(), office, Resource.CASES, Action.VIEW) == (
            "Denied: not a member of this office."
        )
        assert explain(lawyer, office, Resource.CASES, Action.EDIT) == (
            "Allowed by the Lawyer role."
        )
        assert explain(lawyer, office, Resource.SETTINGS, Action.VIEW) == (
            "Denied: the Lawyer role lacks 'view' on 'settings'."
        )
        assert explain(intern, office, Resource.FINANCIAL, Action.VIEW) == (
            "Denied: the Intern role lacks 'view' on 'financial'."
        )

    def test_explain_agrees_with_can(self):
        lawyer = ActorFactory.build()
        office = _office_with("owner", MembershipFactory.build(user_id=lawyer.id, role=Role.LAWYER))

        for resource, action in ALL_PAIRS:
            allowed = can(lawyer, office, resource, action)
            assert explain(lawyer, office, resource, action).startswith(
                "Allowed" if allowed else "Denied"
            )


class TestPurity:
    """Decisions are repeatable and side-effect free."""

    def test_repeated_calls_return_same_result(self):
        actor = ActorFactory.build()
        office = _office_with("owner", MembershipFactory.build(user_id=actor.id, role=Role.INTERN))
        before = office.model_dump()

        results = {can(actor, office, Resource.CASES, Action.DELETE) for _ in range(5)}

        assert results == {False}
        assert office.model_dump() == before

    def test_decision_is_immutable(self):
        decision = decide(None, None, Resource.CASES, Action.VIEW)
        with pytest.raises(AttributeError):
            decision.allowed = True  # type: ignore[misc]


class TestPermissionChecker:
    """Tests for the per-request memoising checker."""

    def test_memoises_per_resource_action(self):
        actor = ActorFactory.build()
        office = _office_with("owner", MembershipFactory.build(user_id=actor.id, role=Role.LAWYER))
        perms = PermissionChecker(actor, office)

        with patch.object(checker, "decide", wraps=checker.decide) as spy:
            assert perms.can(Resource.CASES, Action.EDIT) is True
            assert perms.can(Resource.CASES, Action.EDIT) is True
            assert perms.can(Resource.CASES, Action.DELETE) is False

        assert spy.call_count == 2

    def test_has_any_and_has_all(self):
        actor = ActorFactory.build()
        office = _office_with("owner", MembershipFactory.build(user_id=actor.id, role=Role.INTERN))
        perms = PermissionChecker(actor, office)

        wanted = [(Resource.CASES, Action.VIEW), (Resource.CASES, Action.DELETE)]
        assert perms.has_any(wanted) is True
        assert perms.has_all(wanted) is False

    def test_decide_returns_access_decision(self):
        perms = PermissionChecker(None, None)
        decision = perms.decide(Resource.TEAM, Action.VIEW)

        assert isinstance(decision, AccessDecision)
        assert perms.explain(Resource.TEAM, Action.VIEW) == "Denied: not authenticated."
