"""Tests for State, Action, Link and Episode."""
import pytest

from relearn import Action, Episode, Link, State


class TestState:
    """Tests for the State wrapper."""

    def test_default_reward_is_zero(self):
        """A state built without a reward has reward 0."""
        assert State("s").reward == 0.0

    def test_equality_ignores_reward(self):
        """Equal descriptors make equal states whatever the reward."""
        assert State((1, 2), reward=1.0) == State((1, 2), reward=-1.0)
        assert State((1, 2)) != State((2, 1))

    def test_hash_follows_descriptor(self):
        """Hash is the descriptor's hash."""
        assert hash(State("abc", reward=5.0)) == hash("abc")

    def test_same_dictionary_key(self):
        """States with equal descriptors find the same entry."""
        table = {State("s", reward=1.0): "value"}
        assert table[State("s")] == "value"

    def test_set_reward(self):
        """Reward can be assigned after construction."""
        state = State("terminal")
        state.set_reward(1.0)
        assert state.reward == 1.0

    def test_descriptor_cannot_be_reassigned(self):
        """A state used as a key cannot change its descriptor."""
        state = State("s")
        with pytest.raises(AttributeError):
            state.trait = "t"
        with pytest.raises(AttributeError):
            state.reward = 1.0
        assert state.trait == "s"
        assert state.reward == 0.0

    def test_unhashable_descriptor_rejected(self):
        """Unhashable descriptors fail at construction."""
        with pytest.raises(TypeError):
            State([1, 2])

    def test_ordering_uses_descriptor(self):
        """States sort by descriptor."""
        assert sorted([State(3), State(1), State(2)]) == [State(1), State(2), State(3)]

    def test_state_is_not_an_action(self):
        """A state never equals an action with the same descriptor."""
        assert State("x") != Action("x")


class TestAction:
    """Tests for the Action wrapper."""

    def test_equality_and_hash(self):
        """Actions compare and hash by descriptor."""
        assert Action(1) == Action(1)
        assert hash(Action(1)) == hash(1)
        assert Action(1) != Action(2)

    def test_immutable(self):
        """Actions cannot be modified."""
        action = Action("left")
        with pytest.raises(AttributeError):
            action.trait = "right"

    def test_unhashable_descriptor_rejected(self):
        """Unhashable descriptors fail at construction."""
        with pytest.raises(TypeError):
            Action({"dir": 1})


class TestEpisode:
    """Tests for Episode."""

    def test_append_and_index(self):
        """Links keep their order."""
        episode = Episode()
        first = episode.append(State("s1"), Action("a1"))
        episode.append(State("s2"), Action("a2"))

        assert len(episode) == 2
        assert episode[0] is first
        assert episode[1] == Link(State("s2"), Action("a2"))
        assert [link.action.trait for link in episode] == ["a1", "a2"]

    def test_empty_episode(self):
        """An empty episode has no terminal link and zero reward."""
        episode = Episode()
        assert not episode
        assert episode.terminal is None
        assert episode.reward == 0.0

    def test_terminal_reward(self):
        """The outcome is the terminal state's reward."""
        episode = Episode()
        episode.append(State("s1"), Action("a1"))
        episode.append(State("s2"), Action("stop"))
        episode.set_terminal_reward(-1.0)

        assert episode.terminal.state.reward == -1.0
        assert episode.reward == -1.0

    def test_terminal_reward_on_empty_episode(self):
        """Setting the outcome of an empty episode is an error."""
        with pytest.raises(ValueError):
            Episode().set_terminal_reward(1.0)

    def test_from_links(self):
        """Episodes can be built from existing links."""
        links = [Link(State(i), Action(i)) for i in range(3)]
        episode = Episode(links)
        links.append(Link(State(9), Action(9)))
        assert len(episode) == 3
