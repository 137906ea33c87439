import random

import pytest

from pokebattle.battle.actions import AttemptFlee, SwitchOut, UseMove
from pokebattle.battle.models import Move
from pokebattle.battle.state import BattleOutcome, BattlePhase, BattleState, Side
from pokebattle.core.errors import PreconditionError, ValidationError

SWIFT = Move("Swift", "normal", "special", power=60, accuracy=None, max_pp=20)
TACKLE = Move("Tackle", "normal", "physical", power=40, accuracy=100, max_pp=35)
GROWL = Move("Growl", "normal", "status", accuracy=None, max_pp=40)
WILD_SWING = Move("Wild Swing", "fighting", "physical", power=80, accuracy=50, max_pp=5)


class StubRng:
    """random() is fixed; randint returns a fixed value clamped into range."""

    def __init__(self, value=0.5, roll=0):
        self.value = value
        self.roll = roll

    def random(self):
        return self.value

    def randint(self, a, b):
        return max(a, min(b, self.roll))


def _move(state, side, move=SWIFT):
    me = state.active_combatant(side)
    state.submit_action(side, UseMove(me, state.active_combatant(side.other), move))


def _play_round(state, player_move=SWIFT, opponent_move=SWIFT):
    _move(state, Side.PLAYER, player_move)
    _move(state, Side.OPPONENT, opponent_move)
    state.order_actions()
    return state.run_queue()


# -- construction ----------------------------------------------------------

def test_wild_intro_narration_and_flags(make_combatant):
    state = BattleState([make_combatant("pika")], [make_combatant("pidgey")])
    assert state.phase is BattlePhase.AWAITING_ACTIONS
    assert state.outcome is BattleOutcome.ONGOING
    assert state.round == 1
    assert state.peek_flags().empty_log
    assert state.consume_narration() == ["A wild Pidgey appeared!", "Go! Pika!"]
    assert not state.peek_flags().empty_log
    assert state.consume_narration() == []


def test_trainer_intro_narration(make_combatant):
    state = BattleState([make_combatant("pika")], [make_combatant("onix")], trainer_name="Brock")
    assert state.is_trainer_battle
    assert state.consume_narration() == [
        "Brock challenged you to a battle!", "Brock sent out Onix!", "Go! Pika!",
    ]


def test_active_is_first_conscious_member(make_combatant):
    down = make_combatant("down", hp=0)
    up = make_combatant("up")
    state = BattleState([down, up], [make_combatant("foe")])
    assert state.active_index(Side.PLAYER) == 1
    assert state.active_combatant(Side.PLAYER) is up


@pytest.mark.parametrize("player_count", [0, 7])
def test_roster_size_is_checked(make_combatant, player_count):
    player = [make_combatant(f"p{i}") for i in range(player_count)]
    with pytest.raises(ValidationError):
        BattleState(player, [make_combatant("foe")])


def test_roster_rejects_all_fainted_and_shared_members(make_combatant):
    shared = make_combatant("shared")
    with pytest.raises(ValidationError):
        BattleState([shared], [shared])
    with pytest.raises(ValidationError):
        BattleState([make_combatant("a", hp=0)], [make_combatant("b")])
    with pytest.raises(ValidationError):
        BattleState([shared, shared], [make_combatant("b")])


def test_unknown_tie_policy_rejected(make_combatant):
    with pytest.raises(ValidationError):
        BattleState([make_combatant("a")], [make_combatant("b")], tie_policy="alphabetical")


# -- submission preconditions ----------------------------------------------

def test_duplicate_submission_rules(make_combatant):
    a, b = make_combatant("a", moves=(SWIFT, TACKLE)), make_combatant("b")
    state = BattleState([a], [b])
    state.submit_action(Side.PLAYER, UseMove(a, b, SWIFT))
    state.submit_action(Side.PLAYER, UseMove(a, b, SWIFT))
    with pytest.raises(PreconditionError) as exc:
        state.submit_action(Side.PLAYER, UseMove(a, b, TACKLE))
    assert exc.value.reason == "duplicate-submission"
    assert state.pending_action(Side.PLAYER).move == SWIFT
    state.submit_action(Side.PLAYER, UseMove(a, b, TACKLE), replace=True)
    assert state.pending_action(Side.PLAYER).move == TACKLE


def test_unknown_and_exhausted_moves_rejected(make_combatant):
    a, b = make_combatant("a"), make_combatant("b")
    state = BattleState([a], [b])
    with pytest.raises(PreconditionError) as exc:
        state.submit_action(Side.PLAYER, UseMove(a, b, TACKLE))
    assert exc.value.reason == "unknown-move"
    a.moves[0].uses.set_current(0)
    with pytest.raises(PreconditionError) as exc:
        state.submit_action(Side.PLAYER, UseMove(a, b, SWIFT))
    assert exc.value.reason == "exhausted-move"
    assert state.pending_action(Side.PLAYER) is None


def test_target_must_be_on_the_other_side(make_combatant):
    a, bench, b = make_combatant("a"), make_combatant("bench"), make_combatant("b")
    state = BattleState([a, bench], [b])
    with pytest.raises(PreconditionError) as exc:
        state.submit_action(Side.PLAYER, UseMove(a, bench, SWIFT))
    assert exc.value.reason == "invalid-target"


def test_actor_must_be_active(make_combatant):
    a, bench, b = make_combatant("a"), make_combatant("bench"), make_combatant("b")
    state = BattleState([a, bench], [b])
    with pytest.raises(PreconditionError) as exc:
        state.submit_action(Side.PLAYER, UseMove(bench, b, SWIFT))
    assert exc.value.reason == "not-active"


def test_switch_to_fainted_member_rejected_without_side_effects(make_combatant):
    a, down, b = make_combatant("a"), make_combatant("down", hp=0), make_combatant("b")
    state = BattleState([a, down], [b])
    state.consume_narration()
    with pytest.raises(PreconditionError) as exc:
        state.submit_action(Side.PLAYER, SwitchOut(a, 1))
    assert exc.value.reason == "fainted-switch-target"
    assert state.active_index(Side.PLAYER) == 0
    assert state.pending_action(Side.PLAYER) is None
    assert state.phase is BattlePhase.AWAITING_ACTIONS
    assert state.consume_narration() == []


@pytest.mark.parametrize("index,reason", [(0, "already-active"), (5, "invalid-switch-index"), (-1, "invalid-switch-index")])
def test_bad_switch_indices(make_combatant, index, reason):
    a, bench, b = make_combatant("a"), make_combatant("bench"), make_combatant("b")
    state = BattleState([a, bench], [b])
    with pytest.raises(PreconditionError) as exc:
        state.submit_action(Side.PLAYER, SwitchOut(a, index))
    assert exc.value.reason == reason


def test_order_requires_both_sides(make_combatant):
    a, b = make_combatant("a"), make_combatant("b")
    state = BattleState([a], [b])
    state.submit_action(Side.PLAYER, UseMove(a, b, SWIFT))
    with pytest.raises(PreconditionError) as exc:
        state.order_actions()
    assert exc.value.reason == "incomplete-round"


def test_phase_preconditions(make_combatant):
    a, b = make_combatant("a"), make_combatant("b")
    state = BattleState([a], [b])
    with pytest.raises(PreconditionError) as exc:
        state.execute_next()
    assert exc.value.reason == "nothing-to-execute"
    _move(state, Side.PLAYER)
    _move(state, Side.OPPONENT)
    state.order_actions()
    assert state.phase is BattlePhase.EXECUTING
    with pytest.raises(PreconditionError) as exc:
        state.submit_action(Side.PLAYER, UseMove(a, b, SWIFT))
    assert exc.value.reason == "round-in-progress"
    with pytest.raises(PreconditionError):
        state.order_actions()


# -- execution ---------------------------------------------------------------

def test_plain_round_trades_damage_and_spends_pp(make_combatant):
    a, b = make_combatant("a", speed=60), make_combatant("b")
    state = BattleState([a], [b], rng=random.Random(3))
    state.consume_narration()
    results = _play_round(state)
    assert [r.damage for r in results] == [42, 42]
    assert a.health.current == b.health.current == 68
    assert a.moves[0].uses.current == 19
    assert state.consume_narration() == [
        "A used Swift!", "B took 42 damage!", "B used Swift!", "A took 42 damage!",
    ]
    for r in results:
        assert any(str(r.damage) in line for line in r.narration)
    assert state.phase is BattlePhase.AWAITING_ACTIONS
    assert state.round == 2


def test_knockout_finishes_battle(make_combatant):
    hero = make_combatant("hero", speed=80)
    foe = make_combatant("foe", hp=1)
    state = BattleState([hero], [foe], rng=random.Random(0))
    state.consume_narration()
    _move(state, Side.PLAYER)
    _move(state, Side.OPPONENT)
    state.order_actions()
    first = state.execute_next()

    assert foe.fainted and foe.health.current == 0
    assert first.fainted == [foe]
    assert "battle_finished" in first.flags_changed
    assert state.phase is BattlePhase.FINISHED
    assert state.outcome is BattleOutcome.PLAYER_WIN
    assert state.peek_flags().battle_finished
    assert state.queued_actions() == ()
    assert first.narration[:3] == ["Hero used Swift!", "Foe took 1 damage!", "Foe fainted!"]
    assert "Hero earned 457 XP!" in first.narration
    assert hero.exp == 457 and hero.level == 50

    with pytest.raises(PreconditionError) as exc:
        state.execute_next()
    assert exc.value.reason == "battle-finished"
    with pytest.raises(PreconditionError) as exc:
        state.submit_action(Side.PLAYER, UseMove(hero, foe, SWIFT))
    assert exc.value.reason == "battle-finished"


def test_player_loss_and_no_experience_for_opponent(make_combatant):
    hero = make_combatant("hero", hp=1)
    foe = make_combatant("foe", speed=80)
    state = BattleState([hero], [foe], rng=random.Random(0))
    _play_round(state)
    assert state.outcome is BattleOutcome.PLAYER_LOSS
    assert foe.exp == 0
    assert hero.moves[0].uses.current == 20


def test_knockout_can_level_up(make_combatant):
    hero = make_combatant("hero", level=5)
    foe = make_combatant("foe", speed=1, hp=1)
    state = BattleState([hero], [foe], rng=random.Random(0))
    hp_before = hero.health.maximum
    results = _play_round(state)
    grew = [line for line in results[0].narration if "grew to" in line]
    assert grew == ["Hero grew to Lv. 6!", "Hero grew to Lv. 7!", "Hero grew to Lv. 8!"]
    assert hero.level == 8
    assert hero.health.maximum > hp_before
    assert hero.health.current == hero.health.maximum


def test_forced_player_switch(make_combatant):
    lead = make_combatant("lead", hp=1)
    bench = make_combatant("bench")
    foe = make_combatant("foe", speed=80)
    state = BattleState([lead, bench], [foe], rng=random.Random(0))
    state.consume_narration()
    results = _play_round(state)

    assert len(results) == 1
    assert lead.fainted
    assert state.phase is BattlePhase.AWAITING_SWITCH
    assert state.switch_required == {Side.PLAYER}
    assert state.peek_flags().open_switch_menu
    assert "open_switch_menu" in results[0].flags_changed

    with pytest.raises(PreconditionError) as exc:
        state.submit_action(Side.PLAYER, UseMove(lead, foe, SWIFT))
    assert exc.value.reason == "switch-required"
    with pytest.raises(PreconditionError) as exc:
        state.submit_action(Side.OPPONENT, UseMove(foe, lead, SWIFT))
    assert exc.value.reason == "switch-required"

    state.consume_narration()
    state.submit_action(Side.PLAYER, SwitchOut(lead, 1))
    assert state.active_combatant(Side.PLAYER) is bench
    assert state.phase is BattlePhase.AWAITING_ACTIONS
    assert state.round == 2
    assert not state.peek_flags().open_switch_menu
    assert state.consume_narration() == ["Go! Bench!"]


def test_forced_trainer_switch(make_combatant):
    hero = make_combatant("hero", speed=80)
    first = make_combatant("geodude", hp=1)
    second = make_combatant("onix")
    state = BattleState([hero], [first, second], trainer_name="Brock", rng=random.Random(0))
    _play_round(state)
    assert state.phase is BattlePhase.AWAITING_SWITCH
    assert state.switch_required == {Side.OPPONENT}
    assert not state.peek_flags().open_switch_menu
    state.consume_narration()
    state.submit_action(Side.OPPONENT, SwitchOut(first, 1))
    assert state.consume_narration() == ["Brock sent out Onix!"]
    assert state.outcome is BattleOutcome.ONGOING


def test_manual_switch_redirects_incoming_attack(make_combatant):
    lead = make_combatant("lead", speed=10)
    bench = make_combatant("bench")
    foe = make_combatant("foe", speed=80)
    lead.stages.shift("attack", 2)
    state = BattleState([lead, bench], [foe], rng=random.Random(0))
    state.request_switch_menu()
    assert state.peek_flags().open_switch_menu
    state.consume_narration()

    state.submit_action(Side.PLAYER, SwitchOut(lead, 1))
    state.submit_action(Side.OPPONENT, UseMove(foe, lead, SWIFT))
    order = state.order_actions()
    assert isinstance(order[0], SwitchOut)
    state.run_queue()

    assert lead.health.full
    assert bench.health.current == 68
    assert lead.stages.attack == 0
    assert not state.peek_flags().open_switch_menu
    assert state.consume_narration() == [
        "Come back, Lead!", "Go! Bench!", "Foe used Swift!", "Bench took 42 damage!",
    ]


def test_miss_still_spends_pp(make_combatant):
    hero = make_combatant("hero", speed=80, moves=(WILD_SWING,))
    foe = make_combatant("foe", moves=(GROWL,))
    state = BattleState([hero], [foe], rng=StubRng(roll=99))
    state.consume_narration()
    results = _play_round(state, WILD_SWING, GROWL)
    assert results[0].narration == ["Hero used Wild Swing!", "Hero's attack missed!"]
    assert hero.moves[0].uses.current == 4
    assert foe.health.full
    assert results[1].narration == ["Foe used Growl!", "But nothing happened."]


def test_effectiveness_is_narrated(make_combatant):
    hero = make_combatant("hero", speed=80, moves=(WILD_SWING,))
    foe = make_combatant("foe", types=("rock",))
    state = BattleState([hero], [foe], rng=StubRng(roll=0))
    results = _play_round(state, WILD_SWING, SWIFT)
    assert "It's super effective!" in results[0].narration


def test_export_roster_reflects_battle(make_combatant):
    hero = make_combatant("hero", speed=80)
    foe = make_combatant("foe", hp=1)
    state = BattleState([hero], [foe], rng=random.Random(0))
    _play_round(state)
    exported = state.export_roster(Side.OPPONENT)
    assert exported[0].current_hp == 0
    assert exported[0].fainted
    mine = state.export_roster(Side.PLAYER)[0]
    assert mine.exp == 457
    assert mine.moves[0][1] == 19


def test_open_switch_menu_only_accepts_a_switch(make_combatant):
    lead, bench, foe = make_combatant("lead"), make_combatant("bench"), make_combatant("foe")
    state = BattleState([lead, bench], [foe], rng=random.Random(0))
    state.submit_action(Side.PLAYER, UseMove(lead, foe, SWIFT))
    state.request_switch_menu()
    assert state.pending_action(Side.PLAYER) is None

    with pytest.raises(PreconditionError) as exc:
        state.submit_action(Side.PLAYER, UseMove(lead, foe, SWIFT))
    assert exc.value.reason == "switch-required"
    with pytest.raises(PreconditionError) as exc:
        state.submit_action(Side.PLAYER, AttemptFlee(lead, foe))
    assert exc.value.reason == "switch-required"
    assert state.peek_flags().open_switch_menu

    _move(state, Side.OPPONENT)
    state.submit_action(Side.PLAYER, SwitchOut(lead, 1))
    state.order_actions()
    state.run_queue()
    assert state.phase is BattlePhase.AWAITING_ACTIONS
    assert not state.peek_flags().open_switch_menu
    _move(state, Side.PLAYER)
    assert state.pending_action(Side.PLAYER).actor is bench


def test_immune_hit_reports_no_effect_without_damage(make_combatant):
    hero = make_combatant("hero", speed=80)
    ghost = make_combatant("ghost", types=("ghost",), moves=(GROWL,))
    state = BattleState([hero], [ghost], rng=random.Random(0))
    results = _play_round(state, SWIFT, GROWL)
    assert results[0].damage == 0
    assert results[0].narration == ["Hero used Swift!", "It had no effect!"]
    assert ghost.health.full
