from conftest import make_record
from filters import apply_filter, matches
from models import FilterState

PIKACHU = make_record(25, "pikachu", ["electric"])


def test_search_is_case_insensitive_substring():
    assert matches(PIKACHU, FilterState("pika"))
    assert matches(PIKACHU, FilterState("KaCh"))
    assert not matches(PIKACHU, FilterState("char"))


def test_empty_filter_matches_everything():
    assert matches(PIKACHU, FilterState())


def test_category_filter():
    assert matches(PIKACHU, FilterState("", frozenset({"electric"})))
    assert not matches(PIKACHU, FilterState("", frozenset({"fire"})))


def test_any_shared_category_is_enough():
    charizard = make_record(6, "charizard", ["fire", "flying"])
    assert matches(charizard, FilterState("", frozenset({"flying", "water"})))


def test_search_and_categories_must_both_hold():
    assert matches(PIKACHU, FilterState("pika", frozenset({"electric"})))
    assert not matches(PIKACHU, FilterState("pika", frozenset({"fire"})))
    assert not matches(PIKACHU, FilterState("char", frozenset({"electric"})))


def test_apply_filter_keeps_order_and_input():
    records = [
        make_record(4, "charmander", ["fire"]),
        PIKACHU,
        make_record(5, "charmeleon", ["fire"]),
    ]
    result = apply_filter(records, FilterState("char"))

    assert [r.id for r in result] == [4, 5]
    assert len(records) == 3
