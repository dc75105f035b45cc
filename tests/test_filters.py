"""Tests for filter canonicalization and redisplay."""

import pytest

from engine.errors import InvalidFilterError
from engine.filters import (
    EMPTY_FILTER,
    Filter,
    FilterInput,
    bytes_to_size,
    canonicalize,
    size_to_bytes,
    to_display,
)


def test_size_to_bytes_units():
    """Each unit multiplies by its 1024-based factor."""
    assert size_to_bytes('10', 'Bytes') == 10
    assert size_to_bytes('1', 'KB') == 1024
    assert size_to_bytes('2', 'MB') == 2 * 1024 ** 2
    assert size_to_bytes('1', 'GB') == 1024 ** 3


def test_size_to_bytes_rounds_half_up():
    """Fractional results round half up to whole bytes."""
    assert size_to_bytes('1.5', 'MB') == 1572864
    assert size_to_bytes('0.5', 'Bytes') == 1
    assert size_to_bytes('0.0005', 'KB') == 1


def test_size_to_bytes_empty_is_absent():
    """An empty value means no bound, while 0 is a real bound."""
    assert size_to_bytes('', 'KB') is None
    assert size_to_bytes('   ', 'MB') is None
    assert size_to_bytes('0', 'KB') == 0


@pytest.mark.parametrize('value', ['abc', '1,5', 'NaN', 'Infinity'])
def test_size_to_bytes_rejects_non_numbers(value):
    """Non-numeric sizes raise instead of becoming NaN."""
    with pytest.raises(InvalidFilterError):
        size_to_bytes(value, 'KB')


def test_size_to_bytes_rejects_unknown_unit():
    with pytest.raises(InvalidFilterError):
        size_to_bytes('1', 'TB')


def test_invalid_filter_error_is_value_error():
    with pytest.raises(ValueError):
        size_to_bytes('x', 'KB')


def test_canonicalize_full_input():
    """All fields are converted to server-ready values."""
    filter_ = canonicalize(FilterInput(
        min_size_value='1.5',
        min_size_unit='MB',
        max_size_value='2',
        max_size_unit='GB',
        mime_type='application/pdf',
        start_date='2024-01-01',
        end_date='2024-02-01',
    ))

    assert filter_ == Filter(
        min_size=1572864,
        max_size=2 * 1024 ** 3,
        mime_type='application/pdf',
        start_date='2024-01-01',
        end_date='2024-02-01',
    )


def test_canonicalize_empty_input():
    """Empty form state yields the empty filter."""
    filter_ = canonicalize(FilterInput())
    assert filter_ == EMPTY_FILTER
    assert filter_.is_empty()


def test_canonicalize_all_mime_type_is_absent():
    """The 'All' choice is no MIME filter at all."""
    assert canonicalize(FilterInput(mime_type='All')).mime_type is None


def test_canonicalize_rejects_bad_date():
    with pytest.raises(InvalidFilterError):
        canonicalize(FilterInput(start_date='01/02/2024'))


def test_canonicalize_accepts_datetime():
    filter_ = canonicalize(FilterInput(end_date='2024-02-01T12:30:00Z'))
    assert filter_.end_date == '2024-02-01T12:30:00Z'


def test_bytes_to_size_picks_largest_unit():
    """Redisplay uses the largest unit reached, without a trailing .00."""
    assert bytes_to_size(1024 ** 3) == ('1', 'GB')
    assert bytes_to_size(1572864) == ('1.50', 'MB')
    assert bytes_to_size(2048) == ('2', 'KB')
    assert bytes_to_size(1536) == ('1.50', 'KB')


def test_bytes_to_size_small_and_absent():
    assert bytes_to_size(512) == ('512', 'Bytes')
    assert bytes_to_size(None) == ('', 'KB')
    assert bytes_to_size(0) == ('', 'KB')


def test_to_display_inverts_canonicalize():
    """A canonical filter redisplays in its largest unit."""
    shown = to_display(canonicalize(FilterInput(
        min_size_value='1024',
        min_size_unit='KB',
        mime_type='image/png',
        start_date='2024-01-01',
    )))

    assert shown.min_size_value == '1'
    assert shown.min_size_unit == 'MB'
    assert shown.max_size_value == ''
    assert shown.mime_type == 'image/png'
    assert shown.start_date == '2024-01-01'
    assert shown.end_date == ''
