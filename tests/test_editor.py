import random

from calc_app import (
    Editor,
    Fraction,
    Func,
    Num,
    Op,
    Paren,
    Placeholder,
    Power,
    Sqrt,
    make_token,
)


def test_insert_places_token_before_cursor_and_advances():
    ed = Editor()
    ed.insert(Num("1"))
    ed.insert(Num("2"))
    ed.move_left()
    ed.insert(Op("+"))

    assert ed.tokens == [Num("1"), Op("+"), Num("2")]
    assert ed.cursor == 2


def test_delete_before_cursor_is_noop_at_start():
    ed = Editor()
    ed.delete_before_cursor()
    assert ed.tokens == []
    assert ed.cursor == 0

    ed.insert(Num("5"))
    ed.move_left()
    ed.delete_before_cursor()
    assert ed.tokens == [Num("5")]
    assert ed.cursor == 0


def test_delete_removes_composite_with_its_subtree():
    ed = Editor()
    ed.insert(Num("3"))
    ed.insert(Fraction([Num("1")], [Sqrt([Num("4")])]))
    ed.delete_before_cursor()

    assert ed.tokens == [Num("3")]
    assert ed.cursor == 1


def test_insert_then_delete_restores_previous_state():
    ed = Editor()
    for key in "12+3":
        ed.insert(make_token(key))
    ed.move_left()
    ed.move_left()
    before = list(ed.tokens)
    p = ed.cursor

    for tk in (Num("7"), Op("×"), Func("sin"), Paren(")"), Power(), Fraction(), Sqrt()):
        ed.insert(tk)
        ed.delete_before_cursor()
        assert ed.tokens == before
        assert len(ed.tokens) == len(before)
        assert ed.cursor == p


def test_cursor_stays_in_bounds_under_random_edits():
    rng = random.Random(1234)
    ed = Editor()
    for _ in range(500):
        action = rng.choice(["insert", "delete", "left", "right"])
        if action == "insert":
            ed.insert(Num(rng.choice("0123456789")))
        elif action == "delete":
            ed.delete_before_cursor()
        elif action == "left":
            ed.move_left()
        else:
            ed.move_right()
        assert 0 <= ed.cursor <= len(ed.tokens)


def test_move_right_stops_at_end():
    ed = Editor()
    ed.insert(Num("1"))
    ed.move_right()
    assert ed.cursor == 1


def test_reset_and_replace_with_single_number():
    ed = Editor()
    for key in "9×9":
        ed.insert(make_token(key))
    ed.reset()
    assert ed.tokens == [] and ed.cursor == 0

    ed.replace_with_single_number("8")
    assert ed.tokens == [Num("8")]
    assert ed.cursor == 1


def test_make_token_covers_every_key_kind():
    assert make_token("7") == Num("7")
    assert make_token(".") == Num(".")
    assert make_token("÷") == Op("÷")
    assert make_token("^") == Op("^")
    assert make_token("log") == Func("log")
    assert make_token("(") == Paren("(")
    assert make_token("√") == Sqrt([])
    assert make_token("frac") == Fraction([], [])
    assert make_token("pow") == Power([Placeholder()], [Placeholder()])
    assert make_token("12") is None
    assert make_token("") is None
    assert make_token("AC") is None


def test_power_slots_are_not_shared_between_instances():
    a, b = Power(), Power()
    a.base.append(Num("2"))
    assert b.base == [Placeholder()]


def test_func_text_carries_open_paren():
    assert Func("sin").value == "sin("
