"""
fairdice - Protocol Phase Tests

TurnDecider, DiceSelector and FairRoll driven through a scripted console.
"""

import pytest

from fairdice.core.commitment import FairCommitment, verify_reveal
from fairdice.core.config import GameConfig
from fairdice.core.dice import DiceSet
from fairdice.core.protocol import (
    ChoiceKind,
    DiceSelector,
    FairRoll,
    GameExited,
    Side,
    TurnDecider,
    combine_index,
)
from tests.conftest import FixedSecureRandom, ScriptedIO


def _decider(values, answers, dice_sets, config=None):
    io = ScriptedIO(answers)
    return TurnDecider(FairCommitment(FixedSecureRandom(values)), io, dice_sets, config), io


def _roller(values, answers, dice_sets, config=None):
    io = ScriptedIO(answers)
    return FairRoll(FairCommitment(FixedSecureRandom(values)), io, dice_sets, config), io


# === Index Composition ===


class TestCombineIndex:

    def test_all_small_cases_in_range(self):
        for n in range(1, 9):
            for committed in range(n):
                for offset in range(n):
                    index = combine_index(committed, offset, n)
                    assert index == (committed + offset) % n
                    assert 0 <= index < n

    def test_every_offset_reaches_every_face(self):
        """For a fixed committed index, offsets permute the faces."""
        assert sorted(combine_index(2, offset, 6) for offset in range(6)) == list(range(6))

    def test_rejects_zero_faces(self):
        with pytest.raises(ValueError):
            combine_index(0, 0, 0)


# === TurnDecider ===


class TestTurnDecider:

    def test_correct_guess_gives_human_first_move(self, dice_sets):
        decider, _ = _decider([1], ["1"], dice_sets)
        decision = decider.decide()
        assert decision.winner is Side.HUMAN
        assert decision.guess == 1
        assert decision.reveal.value == 1

    def test_wrong_guess_gives_opponent_first_move(self, dice_sets):
        decider, _ = _decider([0], ["1"], dice_sets)
        assert decider.decide().winner is Side.OPPONENT

    def test_tag_shown_before_prompt_and_reveal_after(self, dice_sets):
        decider, io = _decider([0], ["0"], dice_sets)
        decision = decider.decide()
        assert io.kinds() == ["commitment", "prompt", "reveal"]
        commitment = io.of("commitment")[0]
        assert commitment.upper == 2
        assert verify_reveal(commitment, decision.reveal)

    def test_invalid_input_reprompts(self, dice_sets):
        decider, io = _decider([0], ["2", "yes", "", "0"], dice_sets)
        assert decider.decide().winner is Side.HUMAN
        assert len(io.of("notify")) == 3
        assert all("Invalid selection" in message for message in io.of("notify"))

    def test_help_shows_table_then_reprompts(self, dice_sets):
        decider, io = _decider([1], ["?", "0"], dice_sets)
        assert decider.decide().winner is Side.OPPONENT
        (rows,) = io.of("help")
        assert [row.percent for row in rows] == ["100.00%", "56.00%", "78.00%"]
        assert io.kinds() == ["commitment", "prompt", "help", "prompt", "reveal"]

    @pytest.mark.parametrize("token", ["X", "x", " X "])
    def test_exit(self, dice_sets, token):
        decider, io = _decider([1], [token], dice_sets)
        with pytest.raises(GameExited) as excinfo:
            decider.decide()
        assert excinfo.value.phase is ChoiceKind.FIRST_PLAYER
        assert io.of("reveal") == []

    def test_menu_lists_configured_tokens(self, dice_sets):
        config = GameConfig(exit_token="Q", help_token="h")
        decider, io = _decider([1], ["X", "h", "Q"], dice_sets, config)
        with pytest.raises(GameExited):
            decider.decide()
        tokens = [token for token, _ in io.requests[0].options]
        assert tokens == ["0", "1", "Q", "h"]
        assert len(io.of("help")) == 1


# === DiceSelector ===


class TestDiceSelector:

    def test_returns_index(self, dice_sets):
        io = ScriptedIO(["1"])
        assert DiceSelector(io, dice_sets).select() == 1

    def test_lists_all_but_excluded(self, dice_sets):
        io = ScriptedIO(["0"])
        DiceSelector(io, dice_sets).select(excluded=1)
        assert [token for token, _ in io.requests[0].options] == ["0", "2"]
        assert io.requests[0].options[0][1] == "2, 2, 4, 4, 9, 9"

    def test_rejects_bad_input_then_accepts(self, dice_sets):
        io = ScriptedIO(["abc", "-1", "3", "1", "2"])
        assert DiceSelector(io, dice_sets).select(excluded=1) == 2
        assert len(io.of("notify")) == 4

    def test_never_returns_excluded(self, dice_sets):
        for excluded in range(len(dice_sets)):
            answers = [str(excluded)] + [str(i) for i in range(len(dice_sets)) if i != excluded]
            io = ScriptedIO(answers)
            assert DiceSelector(io, dice_sets).select(excluded=excluded) != excluded

    def test_exit_token_is_not_special(self, dice_sets):
        io = ScriptedIO(["X", "0"])
        assert DiceSelector(io, dice_sets).select() == 0


# === FairRoll ===


class TestFairRoll:

    def test_combines_committed_index_and_offset(self, dice_sets):
        roller, _ = _roller([2], ["3"], dice_sets)
        result = roller.roll(dice_sets[1], Side.OPPONENT)
        assert result.committed_index == 2
        assert result.offset == 3
        assert result.final_index == 5
        assert result.face == 5
        assert result.side is Side.OPPONENT

    def test_offset_reduced_modulo_face_count(self, dice_sets):
        roller, _ = _roller([0], ["10"], dice_sets)
        result = roller.roll(dice_sets[0], Side.HUMAN)
        assert result.offset == 4
        assert result.face == 9

    def test_tag_shown_before_offset_and_reveal_after(self, dice_sets):
        roller, io = _roller([5], ["1"], dice_sets)
        result = roller.roll(dice_sets[2], Side.HUMAN)
        kinds = [kind for kind in io.kinds() if kind != "notify"]
        assert kinds == ["commitment", "prompt", "reveal"]
        assert verify_reveal(io.of("commitment")[0], result.reveal)
        assert result.reveal.value == 5
        assert "(5 + 1) % 6 = 0" in io.of("notify")

    def test_menu_lists_faces_exit_and_help(self, dice_sets):
        roller, io = _roller([0], ["0"], dice_sets)
        roller.roll(dice_sets[0], Side.HUMAN)
        tokens = [token for token, _ in io.requests[0].options]
        assert tokens == ["0", "1", "2", "3", "4", "5", "X", "?"]
        assert io.requests[0].kind is ChoiceKind.OFFSET

    def test_invalid_input_reprompts(self, dice_sets):
        roller, io = _roller([1], ["one", "?", "2"], dice_sets)
        result = roller.roll(dice_sets[0], Side.HUMAN)
        assert result.final_index == 3
        assert len(io.of("help")) == 1
        assert any("Invalid selection" in message for message in io.of("notify"))

    @pytest.mark.parametrize("token", ["X", "x"])
    def test_exit_aborts_roll_without_reveal(self, dice_sets, token):
        roller, io = _roller([1], [token], dice_sets)
        with pytest.raises(GameExited) as excinfo:
            roller.roll(dice_sets[0], Side.HUMAN)
        assert excinfo.value.phase is ChoiceKind.OFFSET
        assert io.of("reveal") == []

    def test_each_roll_uses_fresh_commitment(self, dice_sets):
        roller, io = _roller([0, 0], ["0", "0"], dice_sets)
        first = roller.roll(dice_sets[0], Side.OPPONENT)
        second = roller.roll(dice_sets[0], Side.HUMAN)
        assert first.reveal.key != second.reveal.key
        assert first.reveal.tag != second.reveal.tag

    def test_final_index_uniform_for_fixed_offset(self):
        """Whatever offset the human picks, each committed index maps to a distinct face."""
        dice = DiceSet(faces=(10, 11, 12, 13, 14, 15))
        faces = []
        for committed in range(6):
            roller, _ = _roller([committed], ["4"], [dice])
            faces.append(roller.roll(dice, Side.HUMAN).face)
        assert sorted(faces) == list(dice.faces)
