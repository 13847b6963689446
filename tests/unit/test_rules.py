"""Tests for the shared validation rules and the supermove formula."""

import pytest

from solitaire.cards.schema import Card
from solitaire.simulation.rules import (
    EmptyColumnPolicy,
    can_stack_descending,
    can_stack_on_foundation,
    descending_pair,
    foundation_pair,
    has_alternating_colors,
    has_same_suit,
    is_valid_sequence,
    is_valid_tableau_sequence,
    longest_valid_run,
)
from solitaire.simulation.supermove import max_movable


def cards(*ids: str) -> tuple[Card, ...]:
    return tuple(Card.from_id(card_id) for card_id in ids)


class TestColorAndSuit:
    def test_alternating_colors(self) -> None:
        assert has_alternating_colors(*cards("8S", "7H"))
        assert has_alternating_colors(*cards("8D", "7C"))
        assert not has_alternating_colors(*cards("8S", "7C"))
        assert not has_alternating_colors(*cards("8H", "7D"))

    def test_same_suit(self) -> None:
        assert has_same_suit(*cards("AS", "2S"))
        assert not has_same_suit(*cards("AS", "2C"))


class TestCanStackDescending:
    def test_one_lower_opposite_color(self) -> None:
        seven, eight = cards("7H", "8S")
        assert can_stack_descending(seven, eight)

    def test_same_color_rejected(self) -> None:
        seven, eight = cards("7C", "8S")
        assert not can_stack_descending(seven, eight)

    def test_same_color_allowed_when_not_required(self) -> None:
        seven, eight = cards("7C", "8S")
        assert can_stack_descending(seven, eight, require_alternating_colors=False)

    def test_rank_gap_rejected(self) -> None:
        six, eight = cards("6H", "8S")
        assert not can_stack_descending(six, eight)

    def test_ascending_rejected(self) -> None:
        nine, eight = cards("9H", "8S")
        assert not can_stack_descending(nine, eight)

    def test_empty_target(self) -> None:
        (card,) = cards("5D")
        assert can_stack_descending(card, None)
        assert not can_stack_descending(card, None, allow_empty_target=False)


class TestCanStackOnFoundation:
    def test_ace_starts_empty_pile(self) -> None:
        assert can_stack_on_foundation(Card.from_id("AH"), ())
        assert not can_stack_on_foundation(Card.from_id("2H"), ())

    def test_next_rank_same_suit(self) -> None:
        pile = cards("AH", "2H")
        assert can_stack_on_foundation(Card.from_id("3H"), pile)
        assert not can_stack_on_foundation(Card.from_id("3D"), pile)
        assert not can_stack_on_foundation(Card.from_id("4H"), pile)
        assert not can_stack_on_foundation(Card.from_id("2H"), pile)

    def test_suit_not_required(self) -> None:
        assert can_stack_on_foundation(Card.from_id("3D"), cards("AH", "2H"), require_same_suit=False)


class TestSequences:
    def test_empty_and_single_are_valid(self) -> None:
        assert is_valid_sequence((), descending_pair())
        assert is_valid_sequence(cards("KS"), descending_pair())

    def test_descending_alternating_run(self) -> None:
        assert is_valid_tableau_sequence(cards("KS", "QH", "JC", "10D", "9S"))

    def test_single_break_invalidates_run(self) -> None:
        assert not is_valid_tableau_sequence(cards("KS", "QH", "JD", "10C"))
        assert not is_valid_tableau_sequence(cards("KS", "QH", "10C", "9D"))

    def test_foundation_direction(self) -> None:
        assert is_valid_sequence(cards("AS", "2S", "3S"), foundation_pair())
        assert not is_valid_sequence(cards("AS", "2H"), foundation_pair())

    def test_longest_valid_run(self) -> None:
        pair = descending_pair()

        assert longest_valid_run((), pair) == 0
        assert longest_valid_run(cards("2C"), pair) == 1
        assert longest_valid_run(cards("3S", "KS", "QH", "JC"), pair) == 3
        assert longest_valid_run(cards("KS", "QH", "JC"), pair) == 3


class TestEmptyColumnPolicy:
    def test_any_card(self) -> None:
        assert EmptyColumnPolicy.ANY_CARD.allows(Card.from_id("2C"))

    def test_kings_only(self) -> None:
        assert EmptyColumnPolicy.KINGS_ONLY.allows(Card.from_id("KC"))
        assert not EmptyColumnPolicy.KINGS_ONLY.allows(Card.from_id("QC"))


class TestMaxMovable:
    @pytest.mark.parametrize(
        "cells,columns,expected",
        [(0, 0, 1), (4, 4, 80), (1, 2, 8), (4, 0, 5), (0, 3, 8)],
    )
    def test_formula(self, cells: int, columns: int, expected: int) -> None:
        assert max_movable(cells, columns) == expected

    def test_negative_counts_rejected(self) -> None:
        with pytest.raises(ValueError):
            max_movable(-1, 0)
        with pytest.raises(ValueError):
            max_movable(0, -1)
