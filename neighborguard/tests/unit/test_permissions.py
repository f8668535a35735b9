"""Property-based tests for the event permission rules.

These cover the pure predicates and view flags without a database:
- can_edit_event is exactly is_mine
- can_change_resolution holds iff the caller owns the circle or created the event
"""

from __future__ import annotations

from hypothesis import given
from hypothesis import strategies as st

from neighborguard.models import MemberRole
from neighborguard.services.event_service import UNKNOWN_ROLE, EventView, can_modify
from neighborguard.tests.factories import EventFactory
from neighborguard.tests.strategies import optional_roles, roles, user_ids


class TestCanModify:
    @given(role=optional_roles, caller_id=user_ids, creator_id=user_ids)
    def test_owner_or_creator(self, role, caller_id, creator_id):
        event = EventFactory(created_by_id=creator_id)

        expected = role == MemberRole.OWNER or caller_id == creator_id
        assert can_modify(role, caller_id, event) is expected

    @given(role=roles, caller_id=user_ids)
    def test_creator_always_allowed(self, role, caller_id):
        event = EventFactory(created_by_id=caller_id)

        assert can_modify(role, caller_id, event) is True

    @given(role=optional_roles)
    def test_missing_creator_only_owner(self, role):
        event = EventFactory(created_by_id=None)

        assert can_modify(role, "caller", event) is (role == MemberRole.OWNER)

    def test_missing_caller_is_never_creator(self):
        event = EventFactory(created_by_id=None)

        assert can_modify(MemberRole.NEIGHBOR, None, event) is False


class TestViewFlags:
    @given(
        my_role=roles,
        creator_role=optional_roles,
        caller_id=user_ids,
        creator_id=st.one_of(st.none(), user_ids),
    )
    def test_flags_are_consistent(self, my_role, creator_role, caller_id, creator_id):
        event = EventFactory(created_by_id=creator_id)

        view = EventView.build(
            event, caller_id=caller_id, my_role=my_role, creator_role=creator_role
        )

        assert view.is_mine is (creator_id == caller_id)
        assert view.can_edit_event is view.is_mine
        assert view.can_change_resolution is (my_role == MemberRole.OWNER or view.is_mine)
        assert view.my_role_in_circle == my_role.value

    @given(my_role=roles)
    def test_unknown_creator_role(self, my_role):
        event = EventFactory()

        view = EventView.build(event, caller_id="caller", my_role=my_role, creator_role=None)

        assert view.created_by_role == UNKNOWN_ROLE
        assert view.created_by_name is None
        assert view.circle_name is None
