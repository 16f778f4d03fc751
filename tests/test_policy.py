"""Tests for the PolicyStore."""
import math

from relearn import Action, PolicyStore, State


def make_store() -> PolicyStore:
    store = PolicyStore()
    store.update(State("s1"), Action("a1"), 0.2)
    store.update(State("s1"), Action("a2"), 0.7)
    store.update(State("s1"), Action("a3"), -0.4)
    store.update(State("s2"), Action("a1"), 1.0)
    return store


class TestValueAndUpdate:
    """Tests for value/update/actions."""

    def test_update_then_value(self):
        """A stored value reads back unchanged."""
        store = PolicyStore()
        store.update(State("s"), Action("a"), 0.375)
        assert store.value(State("s"), Action("a")) == 0.375

    def test_update_overwrites(self):
        """Updating again replaces the value."""
        store = PolicyStore()
        store.update(State("s"), Action("a"), 1.0)
        store.update(State("s"), Action("a"), -2.0)
        assert store.value(State("s"), Action("a")) == -2.0
        assert len(store) == 1

    def test_unknown_value_is_zero(self):
        """Pairs never updated read as 0."""
        store = PolicyStore()
        assert store.value(State("s"), Action("a")) == 0.0

    def test_value_read_creates_no_entries(self):
        """Reading does not add ghost entries."""
        store = make_store()
        store.value(State("s1"), Action("unknown"))
        store.value(State("unknown"), Action("a1"))

        assert Action("unknown") not in store.actions(State("s1"))
        assert store.actions(State("unknown")) == {}
        assert State("unknown") not in store
        assert len(store) == 4

    def test_actions_snapshot(self):
        """actions() returns a copy of the recorded values."""
        store = make_store()
        actions = store.actions(State("s1"))
        assert actions == {Action("a1"): 0.2, Action("a2"): 0.7, Action("a3"): -0.4}

        actions[Action("a1")] = 99.0
        assert store.value(State("s1"), Action("a1")) == 0.2

    def test_reward_does_not_split_entries(self):
        """States differing only in reward share entries."""
        store = PolicyStore()
        store.update(State("s", reward=1.0), Action("a"), 0.5)
        assert store.value(State("s", reward=0.0), Action("a")) == 0.5


class TestBestQueries:
    """Tests for best/best_value/best_action."""

    def test_best_action_and_value(self):
        """The highest valued action is returned."""
        store = make_store()
        assert store.best_action(State("s1")) == Action("a2")
        assert store.best_value(State("s1")) == 0.7
        assert store.best(State("s1")) == (Action("a2"), 0.7)

    def test_best_consistency(self):
        """best_value is the value of best_action and bounds the rest."""
        store = make_store()
        for state in store.states():
            best = store.best_action(state)
            assert store.best_value(state) == store.value(state, best)
            for action, value in store.actions(state).items():
                assert store.best_value(state) >= value

    def test_no_knowledge(self):
        """Unknown states report None / NaN."""
        store = make_store()
        assert store.best_action(State("never")) is None
        assert math.isnan(store.best_value(State("never")))
        action, value = store.best(State("never"))
        assert action is None
        assert math.isnan(value)

    def test_zero_valued_best_is_knowledge(self):
        """A best value of 0 is distinct from no knowledge."""
        store = PolicyStore()
        store.update(State("s"), Action("a"), 0.0)
        assert store.best_action(State("s")) == Action("a")
        assert store.best_value(State("s")) == 0.0

    def test_negative_values_only(self):
        """The best of all-negative values is still returned."""
        store = PolicyStore()
        store.update(State("s"), Action("a"), -3.0)
        store.update(State("s"), Action("b"), -1.0)
        assert store.best(State("s")) == (Action("b"), -1.0)

    def test_tie_break_first_inserted(self):
        """On ties the first inserted action wins."""
        store = PolicyStore()
        store.update(State("s"), Action("z"), 1.0)
        store.update(State("s"), Action("a"), 1.0)
        store.update(State("s"), Action("m"), 1.0)
        assert store.best_action(State("s")) == Action("z")

    def test_tie_break_survives_reupdate(self):
        """Re-updating a pair keeps its insertion position."""
        store = PolicyStore()
        store.update(State("s"), Action("first"), 0.0)
        store.update(State("s"), Action("second"), 1.0)
        store.update(State("s"), Action("first"), 1.0)
        assert store.best_action(State("s")) == Action("first")


class TestMerge:
    """Tests for merging stores."""

    def test_other_wins_on_conflict(self):
        """Merged values overwrite existing ones."""
        left = make_store()
        right = PolicyStore()
        right.update(State("s1"), Action("a1"), 5.0)

        left.merge(right)
        assert left.value(State("s1"), Action("a1")) == 5.0

    def test_unique_entries_preserved(self):
        """Entries only in this store survive a merge."""
        left = make_store()
        right = PolicyStore()
        right.update(State("s3"), Action("a9"), 0.1)

        left.merge(right)
        assert left.value(State("s1"), Action("a2")) == 0.7
        assert left.value(State("s2"), Action("a1")) == 1.0
        assert left.value(State("s3"), Action("a9")) == 0.1
        assert len(left) == 5

    def test_merge_leaves_other_untouched(self):
        """The merged-in store is not modified."""
        left = make_store()
        right = PolicyStore()
        right.update(State("s1"), Action("a1"), 5.0)
        left.merge(right)
        left.update(State("s1"), Action("a1"), -1.0)
        assert right.value(State("s1"), Action("a1")) == 5.0
        assert len(right) == 1

    def test_inplace_operator(self):
        """store += other merges."""
        left = PolicyStore()
        right = make_store()
        left += right
        assert len(left) == len(right)
        assert left.best(State("s1")) == right.best(State("s1"))


class TestIntrospection:
    """Tests for states/items/len/to_dict."""

    def test_items_in_insertion_order(self):
        """Triples come out in the order they were first inserted."""
        store = make_store()
        triples = [(s.trait, a.trait, v) for s, a, v in store.items()]
        assert triples == [
            ("s1", "a1", 0.2),
            ("s1", "a2", 0.7),
            ("s1", "a3", -0.4),
            ("s2", "a1", 1.0),
        ]

    def test_len_and_contains(self):
        """len counts pairs, `in` tests states."""
        store = make_store()
        assert len(store) == 4
        assert State("s2") in store
        assert State("s9") not in store

    def test_to_dict(self):
        """Debug snapshot reports counts and entries."""
        data = make_store().to_dict()
        assert data["states"] == 2
        assert data["entries"] == 4
        assert {"state": "s2", "action": "a1", "value": 1.0} in data["policies"]

    def test_clear(self):
        """clear() forgets everything."""
        store = make_store()
        store.clear()
        assert len(store) == 0
        assert store.best_action(State("s1")) is None
