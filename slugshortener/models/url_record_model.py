"""Data models persisted in, or derived from, the key-value store.

Classes:
    PageMetadata:
        Best-effort summary (title, description, image) of a destination page.

    URLRecordModel:
        Mapping from a slug to its destination URL, with timestamps and metadata.

    RateLimitInfo:
        Snapshot of a fixed-window rate limit counter after a hit.

Example:
    >>> record = URLRecordModel(
    ...     url='https://example.com/test',
    ...     slug='brave-otter',
    ...     created='2025-10-15T00:00:00.000Z',
    ...     updated='2025-10-15T00:00:00.000Z',
    ... )
    >>> URLRecordModel.from_json(record.to_json()) == record
    True
"""

import json
from dataclasses import dataclass, field, replace
from datetime import datetime, UTC
from typing import Any


def utc_now_iso() -> str:
    """Return the current UTC time as an ISO-8601 string with millisecond precision."""
    # fmt: off
    return datetime.now(UTC) \
                   .isoformat(timespec='milliseconds') \
                   .replace('+00:00', 'Z')
    # fmt: on


@dataclass(frozen=True)
class PageMetadata:
    title: str | None = None
    description: str | None = None
    image: str | None = None

    def is_empty(self) -> bool:
        return not (self.title or self.description or self.image)

    def to_dict(self) -> dict[str, str]:
        return {k: v for k, v in (('title', self.title), ('description', self.description), ('image', self.image)) if v}

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> 'PageMetadata':
        """Build metadata from its stored representation.

        Raises:
            ValueError: if `data` isn't a mapping or a field isn't a string.
        """
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ValueError(f'Metadata must be an object, got {type(data).__name__}')

        fields = {name: data.get(name) for name in ('title', 'description', 'image')}
        for name, value in fields.items():
            if value is not None and not isinstance(value, str):
                raise ValueError(f"Metadata field '{name}' must be a string")
        return cls(**fields)


@dataclass(frozen=True)
class URLRecordModel:
    """Represent a slug to destination URL mapping.

    Attributes:
        url (str):
            Normalized absolute destination URL (http or https).
        slug (str):
            Unique lowercase identifier. Immutable after creation.
        created (str):
            ISO-8601 timestamp fixed at insertion.
        updated (str):
            ISO-8601 timestamp refreshed on every mutation.
        metadata (PageMetadata):
            Best-effort destination page summary. May be empty or partial.
    """

    url: str
    slug: str
    created: str
    updated: str
    metadata: PageMetadata = field(default_factory=PageMetadata)

    @classmethod
    def new(cls, url: str, slug: str, metadata: PageMetadata | None = None) -> 'URLRecordModel':
        now = utc_now_iso()
        return cls(url=url, slug=slug, created=now, updated=now, metadata=metadata or PageMetadata())

    def with_changes(self, **changes: Any) -> 'URLRecordModel':
        """Return a copy with `changes` merged in, keeping slug/created and bumping updated."""
        changes.pop('slug', None)
        changes.pop('created', None)
        changes['updated'] = utc_now_iso()
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        data = {
            'url': self.url,
            'slug': self.slug,
            'created': self.created,
            'updated': self.updated,
        }
        if not self.metadata.is_empty():
            data['metadata'] = self.metadata.to_dict()
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'URLRecordModel':
        """Build a record from its stored representation.

        Raises:
            KeyError: if a required field is missing.
            TypeError: if `data` isn't a mapping.
            ValueError: if a field has the wrong type.
        """
        for name in ('url', 'slug', 'created', 'updated'):
            if not isinstance(data[name], str):
                raise ValueError(f"Field '{name}' must be a string")

        return cls(
            url=data['url'],
            slug=data['slug'],
            created=data['created'],
            updated=data['updated'],
            metadata=PageMetadata.from_dict(data.get('metadata')),
        )

    @classmethod
    def from_json(cls, raw: str) -> 'URLRecordModel':
        """Deserialize a stored record.

        Raises:
            ValueError: if `raw` is not valid JSON, lacks required fields or has mistyped ones.
        """
        try:
            return cls.from_dict(json.loads(raw))
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f'Malformed URL record: {raw!r}') from e


# fmt: off
@dataclass(frozen=True)
class RateLimitInfo:
    count: int       # Hits recorded in the current window (including this one)
    limit: int       # Maximum hits allowed per window
    reset_time: int  # Epoch milliseconds at which the window resets

    @property
    def allowed(self) -> bool:
        return self.count <= self.limit

    def retry_after(self, now_ms: int) -> int:
        """Seconds until the window resets, rounded up and never negative."""
        return max(0, -(-(self.reset_time - now_ms) // 1000))
# fmt: on
