import pytest

from fitbook.errors import Forbidden, InvalidState
from fitbook.services import lifecycle
from fitbook.services.lifecycle import can_transition, check_transition, is_terminal

ALLOWED = [
    ('pending', 'accepted', 'trainer'),
    ('pending', 'rejected', 'trainer'),
    ('accepted', 'completed', 'trainer'),
    ('pending', 'cancelled', 'client'),
    ('accepted', 'cancelled', 'client'),
]


@pytest.mark.lifecycle
class TestTransitionTable:

    @pytest.mark.parametrize('current, target, actor', ALLOWED)
    def test_allowed_edges(self, current, target, actor):
        assert can_transition(current, target)
        check_transition(current, target, actor)

    def test_only_listed_edges_exist(self):
        statuses = ('pending', 'accepted', 'rejected', 'completed', 'cancelled')
        edges = {(c, t) for c in statuses for t in statuses if can_transition(c, t)}

        assert edges == {(c, t) for c, t, _ in ALLOWED}

    @pytest.mark.parametrize('status', ['rejected', 'completed', 'cancelled'])
    def test_terminal_states(self, status):
        assert is_terminal(status)
        assert not lifecycle.TRANSITIONS[status]

    @pytest.mark.parametrize('status', ['pending', 'accepted'])
    def test_open_states(self, status):
        assert not is_terminal(status)

    def test_nothing_returns_to_pending(self):
        assert not any(can_transition(s, 'pending') for s in lifecycle.TRANSITIONS)


@pytest.mark.lifecycle
class TestCheckTransition:

    @pytest.mark.parametrize(
        'current, target',
        [('pending', 'accepted'), ('pending', 'rejected'), ('accepted', 'completed')]
    )
    def test_client_cannot_take_trainer_steps(self, current, target):
        with pytest.raises(Forbidden):
            check_transition(current, target, 'client')

    def test_trainer_cannot_cancel(self):
        with pytest.raises(Forbidden):
            check_transition('pending', 'cancelled', 'trainer')

    @pytest.mark.parametrize(
        'current, target, actor',
        [
            ('completed', 'accepted', 'client'),
            ('completed', 'cancelled', 'trainer'),
            ('rejected', 'cancelled', 'trainer'),
            ('pending', 'completed', 'client'),
        ]
    )
    def test_missing_edge_checked_before_actor(self, current, target, actor):
        """A request with no edge from the current status is an invalid state for either party."""
        with pytest.raises(InvalidState):
            check_transition(current, target, actor)

    def test_skip_acceptance(self):
        with pytest.raises(InvalidState):
            check_transition('pending', 'completed', 'trainer')

    @pytest.mark.parametrize('current', ['rejected', 'completed', 'cancelled'])
    def test_terminal_state_refuses_cancel(self, current):
        with pytest.raises(InvalidState):
            check_transition(current, 'cancelled', 'client')

    @pytest.mark.parametrize('actor', ['trainer', 'client'])
    def test_back_to_pending(self, actor):
        with pytest.raises(InvalidState):
            check_transition('accepted', 'pending', actor)
