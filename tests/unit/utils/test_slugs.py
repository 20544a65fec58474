"""Unit tests for slug validation and generation in slugs.py.

Test coverage includes:

1. is_valid_custom_slug()
   - Length, charset, hyphen placement and reserved words.

2. generate_slug()
   - Readable two-word lowercase format.

3. generate_unique_slug()
   - Returns the first free candidate.
   - Falls back to a numeric suffix after exhausting attempts.
"""

import re
from unittest.mock import MagicMock

import pytest

from slugshortener.constants import Slug
from slugshortener.dao.base import URLRecordBaseDAO
from slugshortener.utils import slugs
from slugshortener.utils.slugs import is_valid_custom_slug, generate_slug, generate_unique_slug


# -------------------------------
# 1. is_valid_custom_slug()
# -------------------------------


@pytest.mark.parametrize('slug', ['abc', 'my-launch-post', 'launch-2025', 'a1b', 'x' * 50])
def test_valid_custom_slugs(slug):
    assert is_valid_custom_slug(slug)


@pytest.mark.parametrize(
    'slug',
    [
        'ab',
        'x' * 51,
        'Has-Caps',
        'under_score',
        'with space',
        'dots.dots',
        '-leading',
        'trailing-',
        'double--hyphen',
        'admin',
        'api',
        'health',
        'status',
        'backup',
        '',
        None,
        123,
    ],
)
def test_invalid_custom_slugs(slug):
    assert not is_valid_custom_slug(slug)


# -------------------------------
# 2. generate_slug()
# -------------------------------


def test_generate_slug_format():
    for _ in range(50):
        slug = generate_slug()
        first, second = slug.split('-')
        assert first in slugs.ADJECTIVES + slugs.COLORS
        assert second in slugs.ANIMALS
        assert is_valid_custom_slug(slug)


def test_word_lists_do_not_overlap():
    """Ensure no word can appear twice in one slug, e.g. 'salmon-salmon'."""
    assert set(slugs.ADJECTIVES + slugs.COLORS).isdisjoint(slugs.ANIMALS)
    assert len(set(slugs.ANIMALS)) == len(slugs.ANIMALS)


# -------------------------------
# 3. generate_unique_slug()
# -------------------------------


def test_generate_unique_slug_skips_taken_candidates(monkeypatch):
    """Ensure taken candidates are skipped until a free one is found."""
    candidates = iter(['brave-otter', 'teal-heron', 'calm-yak'])
    monkeypatch.setattr(slugs, 'generate_slug', lambda: next(candidates))
    dao = MagicMock(spec=URLRecordBaseDAO)
    dao.exists.side_effect = [True, True, False]

    assert generate_unique_slug(dao) == 'calm-yak'
    assert dao.exists.call_count == 3


def test_generate_unique_slug_falls_back_to_suffix(monkeypatch):
    """Ensure a numeric suffix is appended when every attempt collides."""
    monkeypatch.setattr(slugs, 'generate_slug', lambda: 'brave-otter')
    dao = MagicMock(spec=URLRecordBaseDAO)
    dao.exists.return_value = True

    slug = generate_unique_slug(dao)

    assert re.fullmatch(r'brave-otter-\d{1,3}', slug)
    assert 0 <= int(slug.rsplit('-', 1)[1]) <= Slug.RANDOM_SUFFIX_MAX
    assert dao.exists.call_count == Slug.MAX_GENERATION_ATTEMPTS
