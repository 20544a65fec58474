"""Social media crawler detection and link preview rendering

Platforms fetch shared links with their own crawlers to build previews. Those
crawlers get an HTML page with Open Graph and Twitter Card tags (and a delayed
redirect for crawlers that run JavaScript); everyone else gets a plain 301.
"""

from slugshortener.models import URLRecordModel
from slugshortener.utils.rendering import render


# fmt: off
SOCIAL_CRAWLERS = (
    'facebookexternalhit',
    'facebookcatalog',
    'twitterbot',
    'linkedinbot',
    'whatsapp',
    'telegram',
    'slackbot',
    'discord',
    'pinterest',
    'tumblr',
    'redditbot',
)
# fmt: on

# Seconds before crawlers that follow refreshes move on to the destination
PREVIEW_REDIRECT_DELAY = 3


def is_social_crawler(user_agent: str | None) -> bool:
    """Return True if `user_agent` belongs to a known link preview crawler."""
    if not user_agent:
        return False
    ua = user_agent.lower()
    return any(crawler in ua for crawler in SOCIAL_CRAWLERS)


def render_preview(record: URLRecordModel) -> str:
    """Render the Open Graph preview page for `record`

    Missing metadata falls back to the destination URL as title and a generic
    "Redirect to ..." description.
    """
    metadata = record.metadata
    return render(
        'og_preview.html',
        url=record.url,
        title=metadata.title or record.url,
        description=metadata.description or f'Redirect to {record.url}',
        image=metadata.image or '',
        delay=PREVIEW_REDIRECT_DELAY,
    )
