"""Slug validation and readable slug generation

Slugs are the short path segments which identify a URL record. Custom slugs are
chosen by the owner and must pass is_valid_custom_slug(); generated slugs are
two-word phrases like 'brave-otter' or 'amber-heron'.

Functions:
    is_valid_custom_slug(slug) -> bool
        Check format, hyphen placement and the reserved-word list.
    generate_slug() -> str
        Produce a random two-word, hyphen-joined lowercase phrase.
    generate_unique_slug(dao) -> str
        Generate a slug which no stored record uses yet (with bounded retries).

Example:
    >>> is_valid_custom_slug('my-launch-post')
    True
    >>> is_valid_custom_slug('admin')
    False
"""

import re
import random
import logging

from slugshortener.constants import Slug
from slugshortener.dao.base import URLRecordBaseDAO


logger = logging.getLogger(__name__)

SLUG_RE = re.compile(rf'^[a-z0-9-]{{{Slug.MIN_LENGTH},{Slug.MAX_LENGTH}}}$')

# fmt: off
ADJECTIVES = (
    'able', 'agile', 'amused', 'ancient', 'bold', 'brave', 'breezy', 'bright', 'brisk', 'calm',
    'careful', 'cheerful', 'clever', 'cosmic', 'cozy', 'crisp', 'curious', 'daring', 'dapper', 'eager',
    'early', 'electric', 'elegant', 'epic', 'fair', 'fancy', 'fearless', 'festive', 'fluffy', 'fond',
    'friendly', 'gentle', 'giant', 'glad', 'gleeful', 'golden', 'graceful', 'grand', 'happy', 'hardy',
    'honest', 'humble', 'jolly', 'joyful', 'keen', 'kind', 'lively', 'lucky', 'merry', 'mighty',
    'modest', 'nimble', 'noble', 'patient', 'peaceful', 'plucky', 'polite', 'proud', 'quick', 'quiet',
    'rapid', 'rare', 'ready', 'regal', 'rustic', 'serene', 'sharp', 'shiny', 'silent', 'sleepy',
    'smooth', 'snappy', 'solid', 'sunny', 'swift', 'tidy', 'tiny', 'tough', 'vivid', 'warm',
    'wild', 'wise', 'witty', 'young', 'zesty',
)

COLORS = (
    'amber', 'apricot', 'azure', 'beige', 'black', 'blue', 'bronze', 'brown', 'coral', 'crimson',
    'cyan', 'emerald', 'fuchsia', 'gold', 'gray', 'green', 'indigo', 'ivory', 'jade', 'lavender',
    'lemon', 'lilac', 'lime', 'magenta', 'maroon', 'mint', 'navy', 'olive', 'orange', 'peach',
    'pink', 'plum', 'purple', 'red', 'rose', 'ruby', 'salmon', 'sapphire', 'scarlet', 'silver',
    'tan', 'teal', 'turquoise', 'violet', 'white', 'yellow',
)

ANIMALS = (
    'alpaca', 'badger', 'beaver', 'bison', 'bobcat', 'camel', 'cheetah', 'condor', 'coyote', 'crane',
    'dingo', 'dolphin', 'eagle', 'falcon', 'ferret', 'finch', 'gazelle', 'gecko', 'gopher', 'heron',
    'hippo', 'ibis', 'iguana', 'jackal', 'jaguar', 'koala', 'lemur', 'leopard', 'llama', 'lynx',
    'marmot', 'meerkat', 'moose', 'narwhal', 'ocelot', 'octopus', 'otter', 'owl', 'panda', 'parrot',
    'pelican', 'penguin', 'puffin', 'quail', 'rabbit', 'raccoon', 'raven', 'seal', 'sloth',
    'sparrow', 'squid', 'swan', 'tapir', 'tiger', 'toucan', 'turtle', 'walrus', 'weasel', 'whale',
    'wombat', 'yak', 'zebra',
)
# fmt: on


def is_valid_custom_slug(slug: str) -> bool:
    """Return True if `slug` may be used as a custom slug

    Rules:
        - 3-50 characters of [a-z0-9-];
        - no leading or trailing hyphen;
        - no consecutive hyphens;
        - not a reserved word (admin, api, health, status, backup).
    """
    if not isinstance(slug, str):
        return False
    if slug.startswith('-') or slug.endswith('-') or '--' in slug:
        return False
    if slug in Slug.RESERVED:
        return False
    return SLUG_RE.match(slug) is not None


def generate_slug() -> str:
    """Return a random readable slug, e.g. 'brave-otter' or 'teal-heron'."""
    first = random.choice(ADJECTIVES + COLORS)  # noqa: S311
    second = random.choice(ANIMALS)  # noqa: S311
    return f'{first}-{second}'


def generate_unique_slug(dao: URLRecordBaseDAO) -> str:
    """Generate a slug which is not yet taken

    Up to Slug.MAX_GENERATION_ATTEMPTS candidates are checked against the store.
    If all of them collide, a random 0-999 suffix is appended to the last
    candidate and returned without a further check.

    NOTE: The fallback slug may still collide with an existing record. Insertion
          goes through URLRecordBaseDAO.insert(), which refuses to overwrite it.

    Args:
        dao (URLRecordBaseDAO):
            Store used to check candidates for collisions.

    Returns:
        str: generated slug.
    """
    candidate = ''
    for _ in range(Slug.MAX_GENERATION_ATTEMPTS):
        candidate = generate_slug()
        if not dao.exists(candidate):
            return candidate

    logger.warning(
        'Exhausted slug generation attempts. Falling back to a numeric suffix.',
        extra={'attempts': Slug.MAX_GENERATION_ATTEMPTS},
    )
    return f'{candidate}-{random.randint(0, Slug.RANDOM_SUFFIX_MAX)}'  # noqa: S311
