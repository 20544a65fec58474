"""URL normalization and safety screening

Functions:
    normalize_url(raw_url) -> str
        Trim, default the scheme to https and canonicalize a destination URL.
    is_valid_url(url) -> bool
        True if the URL parses, uses http(s) and names a plausible host.
    is_dangerous_url(url) -> bool
        True if the URL uses a blocked protocol or points at a local/private host.

Example:
    >>> normalize_url('  Example.COM/path ')
    'https://example.com/path'
    >>> is_dangerous_url('http://192.168.1.10/admin')
    True
    >>> is_dangerous_url('https://example.com')
    False
"""

import re
import ipaddress
from urllib.parse import urlsplit, urlunsplit, SplitResult


ALLOWED_SCHEMES = frozenset({'http', 'https'})
DANGEROUS_SCHEMES = frozenset({'javascript', 'data', 'vbscript', 'file'})
LOCAL_HOSTNAMES = frozenset({'localhost', '127.0.0.1', '::1'})

# fmt: off
PRIVATE_NETWORKS = tuple(ipaddress.ip_network(net) for net in (
    '10.0.0.0/8',
    '172.16.0.0/12',
    '192.168.0.0/16',
    '169.254.0.0/16',  # link-local
    '127.0.0.0/8',     # loopback
    '0.0.0.0/8',       # "this host", reaches loopback on Linux
    'fc00::/7',        # unique local
    'fe80::/10',       # link-local
))
# fmt: on

DEFAULT_PORTS = {'http': 80, 'https': 443}

# A scheme followed by something other than a port number, e.g. "javascript:" but not "example.com:8080"
_SCHEME_RE = re.compile(r'^[a-z][a-z0-9+.\-]*:(?!\d)', re.IGNORECASE)
_HOST_LABEL_RE = re.compile(r'^[\w-]+$')
_IPV4_PART_RE = re.compile(r'^(0x[0-9a-f]*|[0-9]+)$', re.IGNORECASE)


def _split(url: str) -> SplitResult:
    """Split a URL, forcing port parsing so malformed ports raise ValueError."""
    parts = urlsplit(url)
    parts.port  # noqa: B018
    return parts


def _ends_in_number(hostname: str) -> bool:
    return bool(_IPV4_PART_RE.match(hostname.rstrip('.').rpartition('.')[2]))


def _parse_ipv4(hostname: str) -> ipaddress.IPv4Address | None:
    """Read a numeric host the way browsers and inet_aton() do

    Besides dotted quads this accepts shorthand ('127.1', '10.1'), single
    numbers ('2130706433'), hex ('0x7f.0.0.1') and octal ('0177.0.0.1') parts.

    Returns:
        IPv4Address | None: the address, or None if `hostname` is not a valid numeric host.
    """
    parts = hostname.rstrip('.').split('.')
    if len(parts) > 4 or not all(_IPV4_PART_RE.match(part) for part in parts):
        return None

    numbers = []
    for part in parts:
        if part[:2].lower() == '0x':
            numbers.append(int(part[2:] or '0', 16))
        elif len(part) > 1 and part.startswith('0'):
            try:
                numbers.append(int(part, 8))
            except ValueError:
                return None
        else:
            numbers.append(int(part))

    # The last part fills every byte the leading parts left over
    *leading, last = numbers
    if any(number > 255 for number in leading) or last >= 256 ** (4 - len(leading)):
        return None

    value = last
    for index, number in enumerate(leading):
        value += number << (8 * (3 - index))
    return ipaddress.IPv4Address(value)


def normalize_url(raw_url: str) -> str:
    """Normalize a user-supplied destination URL

    - Trims surrounding whitespace.
    - Prefixes `https://` when no scheme is present.
    - Lowercases scheme and host, drops default ports and adds a `/` path
      to bare hosts.
    - Rewrites numeric IPv4 hosts ('127.1', '0x7f.0.0.1') as dotted quads.

    Unparsable input is returned trimmed (and scheme-prefixed) but otherwise
    unchanged; callers must still run is_valid_url().
    """
    url = raw_url.strip()
    if not _SCHEME_RE.match(url):
        url = f'https://{url}'

    try:
        parts = _split(url)
    except ValueError:
        return url

    scheme = parts.scheme.lower()
    if scheme not in ALLOWED_SCHEMES or not parts.hostname:
        return url

    host = parts.hostname  # already lowercased by urlsplit
    if _ends_in_number(host) and _parse_ipv4(host) is not None:
        host = str(_parse_ipv4(host))
    if ':' in host:
        host = f'[{host}]'
    if parts.port is not None and parts.port != DEFAULT_PORTS[scheme]:
        host = f'{host}:{parts.port}'
    userinfo = parts.netloc.rpartition('@')[0]
    netloc = f'{userinfo}@{host}' if userinfo else host

    return urlunsplit((scheme, netloc, parts.path or '/', parts.query, parts.fragment))


def _is_plausible_host(hostname: str) -> bool:
    if hostname == 'localhost':
        return True
    try:
        ipaddress.ip_address(hostname)
    except ValueError:
        if _ends_in_number(hostname):
            return _parse_ipv4(hostname) is not None
        labels = hostname.rstrip('.').split('.')
        return len(labels) > 1 and all(_HOST_LABEL_RE.match(label) for label in labels)
    else:
        return True


def is_valid_url(url: str) -> bool:
    """Return True if `url` parses, uses http/https and names a plausible host."""
    try:
        parts = _split(url)
    except ValueError:
        return False
    return parts.scheme.lower() in ALLOWED_SCHEMES and bool(parts.hostname) and _is_plausible_host(parts.hostname)


def _is_private_ip(hostname: str) -> bool:
    try:
        ip = ipaddress.ip_address(hostname)
    except ValueError:
        ip = _parse_ipv4(hostname)
        if ip is None:
            return False

    if isinstance(ip, ipaddress.IPv6Address) and ip.ipv4_mapped is not None:
        ip = ip.ipv4_mapped
    return any(ip in network for network in PRIVATE_NETWORKS if network.version == ip.version)


def is_dangerous_url(url: str) -> bool:
    """Return True if `url` must never be used as a redirect destination

    Blocked:
        - javascript:, data:, vbscript: and file: URLs;
        - localhost, 127.0.0.1 and ::1;
        - private, loopback and link-local IPv4/IPv6 addresses, including
          numeric shorthands such as 127.1 or 0x7f.0.0.1.

    Fails closed: anything that cannot be parsed is considered dangerous.
    """
    try:
        parts = _split(url.strip())
    except (ValueError, AttributeError):
        return True

    if parts.scheme.lower() in DANGEROUS_SCHEMES:
        return True

    hostname = (parts.hostname or '').rstrip('.')
    if hostname in LOCAL_HOSTNAMES:
        return True

    return _is_private_ip(hostname)
