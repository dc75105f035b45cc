"""Tests for exclusive selection."""

from engine.selection import ExclusiveSelection


def test_toggle_opens_and_closes():
    selection = ExclusiveSelection()

    assert selection.toggle('a') == 'a'
    assert selection.is_open('a')
    assert selection.toggle('a') is None
    assert not selection.is_open('a')


def test_opening_another_closes_previous():
    selection = ExclusiveSelection()
    selection.toggle('a')

    selection.toggle('b')

    assert selection.open_id == 'b'
    assert not selection.is_open('a')

    selection.close()
    assert selection.open_id is None
