"""
URL helpers for saved items.

Generates the deterministic slug used as the storage key for a saved URL.
A slug is built from the host and the most informative path segment,
transliterated to ASCII and followed by a short hash of the cleaned URL:

    https://www.npr.org/2005/08/08/4785079/always-go-to-the-funeral
    -> npr-org-always-go-to-the-funeral-3f1a9c
"""
import hashlib
import re
from typing import List
from urllib.parse import SplitResult, quote, unquote, urlsplit

from slugify import slugify

# Pseudo-host used for items ingested from email newsletters:
# https://curio-newsletter/{sender-domain}/{subject-slug}
FALLBACK_HOSTNAME = "curio-newsletter"

MAX_SLUG_WORDS = 7
URL_HASH_LENGTH = 6
FALLBACK_HASH_LENGTH = 8

_DEFAULT_PORTS = {"http": 80, "https": 443}
_EXTENSION_PATTERN = re.compile(r"\.[a-zA-Z0-9]+$")
_MULTIPLE_HYPHENS = re.compile(r"-+")
_MULTI_LABEL_TLDS = (".co.uk", ".com.au", ".co.jp")
# Printable ASCII left as-is in a cleaned path; everything else is percent-encoded
_PATH_SAFE_CHARS = "/:@!$&'()*+,;=~%-._[]|^\\"


def _sha256(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8", errors="surrogatepass")).hexdigest()


def _parse_url(url: str) -> SplitResult:
    """
    Parse an absolute URL.

    Raises:
        ValueError: If the string is not an absolute URL with a host
    """
    parsed = urlsplit(url)
    if not parsed.scheme or not parsed.netloc or not parsed.hostname:
        raise ValueError(f"Not an absolute URL: {url!r}")
    # Accessing port validates it
    _ = parsed.port
    return parsed


def _clean_parsed(parsed: SplitResult) -> str:
    scheme = parsed.scheme.lower()
    host = parsed.hostname
    if not host.isascii():
        host = host.encode("idna").decode("ascii")
    if ":" in host:
        host = f"[{host}]"
    port = parsed.port
    if port is not None and _DEFAULT_PORTS.get(scheme) != port:
        host = f"{host}:{port}"
    path = quote(parsed.path, safe=_PATH_SAFE_CHARS)
    return f"{scheme}://{host}{path}".rstrip("/")


def clean_url(url: str) -> str:
    """
    Remove the query string, fragment and trailing slashes from a URL.

    The host is lowercased and punycode-encoded and non-ASCII path
    characters are percent-encoded, so a URL and its encoded form clean
    to the same string.

    Args:
        url: URL to clean

    Returns:
        Cleaned URL, or the original string if it is not a valid absolute URL
    """
    try:
        return _clean_parsed(_parse_url(url))
    except ValueError:
        return url


def _truncate_words(text: str, max_words: int = MAX_SLUG_WORDS, separator: str = "-") -> str:
    return separator.join(text.split(separator)[:max_words])


def _get_longest_path_component(path: str) -> str:
    """
    Get the longest segment of a path with periods turned into hyphens.

    A file extension is only removed when the longest segment is also the
    last one, so /file.html/section keeps "file-html".
    """
    components = [p for p in path.split("/") if p]
    if not components:
        return ""

    longest = max(components, key=len)
    if components[-1] == longest:
        longest = _EXTENSION_PATTERN.sub("", longest)

    return longest.replace(".", "-")


def _to_ascii(part: str) -> str:
    """Transliterate one slug token, punycode-encoding it when nothing survives."""
    ascii_part = slugify(part)
    if ascii_part:
        return ascii_part
    return part.encode("punycode").decode("ascii")


def generate_slug(url: str) -> str:
    """
    Generate a deterministic slug from a URL.

    1. Clean the URL (drop query string, fragment and trailing slash)
    2. Take the host without "www." (or, for newsletter items, the sender
       domain from the first path segment) and the longest path segment
    3. Keep the first 7 words of each and join them with hyphens
    4. Transliterate each word to ASCII
    5. Append a 6-character hash of the cleaned URL

    Strings that are not absolute URLs map to "item-" plus 8 characters of
    the hash of the raw input.

    Args:
        url: Any string, usually a URL

    Returns:
        Slug string
    """
    try:
        return _derive_slug(url)
    except ValueError:
        return f"item-{_sha256(url)[:FALLBACK_HASH_LENGTH]}"


def _derive_slug(url: str) -> str:
    parsed = _parse_url(url)
    url_hash = _sha256(_clean_parsed(parsed))[:URL_HASH_LENGTH]
    hostname = parsed.hostname
    pathname = unquote(parsed.path)

    if hostname == FALLBACK_HOSTNAME:
        segments = pathname.split("/")
        domain = segments[1] if len(segments) > 1 else ""
    else:
        domain = re.sub(r"^www\.", "", hostname)

    domain_words = _truncate_words("-".join(re.split(r"[.-]", domain)))
    path_words = _truncate_words(_get_longest_path_component(pathname))

    slug = _MULTIPLE_HYPHENS.sub("-", f"{domain_words}-{path_words}".lower()).strip("-")
    ascii_slug = "-".join(_to_ascii(part) for part in slug.split("-") if part)
    ascii_slug = _MULTIPLE_HYPHENS.sub("-", ascii_slug).strip("-")

    if not ascii_slug:
        return f"item-{url_hash}"
    return f"{ascii_slug}-{url_hash}"


def slugify_string(text: str) -> str:
    """
    Generate a slug from free text such as a newsletter subject.

    Args:
        text: Text to slugify

    Returns:
        Up to 7 ASCII words joined by hyphens, followed by a 6-character hash
        of the original text
    """
    cleaned = re.sub(r"[^a-z0-9\s\u00C0-\u017F]", " ", text.lower())
    words: List[str] = cleaned.split()
    slug = _truncate_words(slugify(" ".join(words)))
    text_hash = _sha256(text)[:URL_HASH_LENGTH]
    if not slug:
        return f"item-{text_hash}"
    return f"{slug}-{text_hash}"


def get_root_domain(hostname: str) -> str:
    """
    Extract the registrable root domain from a hostname.

    e.g. "blog.example.co.uk" -> "example.co.uk"

    Args:
        hostname: Hostname to reduce

    Returns:
        Root domain (the hostname itself for one- and two-label names)
    """
    for tld in _MULTI_LABEL_TLDS:
        if hostname.endswith(tld):
            parts = hostname[:-len(tld)].split(".")
            return f"{parts[-1]}{tld}"

    parts = hostname.split(".")
    return ".".join(parts[-2:]) if len(parts) > 2 else hostname
