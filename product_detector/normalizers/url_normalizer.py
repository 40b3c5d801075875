# product_detector/normalizers/url_normalizer.py

"""URL helpers for image and link attributes."""

from urllib.parse import urljoin, urlparse


def absolute_url(src: str | None, base: str) -> str | None:
    """Resolve *src* against *base* into an absolute, scheme-qualified URL.

    Handles protocol-relative (``//cdn...``), root-relative and
    relative forms.  ``data:`` URIs and empty values yield ``None``.
    """
    if not src:
        return None
    src = src.strip()
    if not src or src.startswith("data:"):
        return None
    if src.startswith("//"):
        scheme = urlparse(base).scheme or "https"
        return f"{scheme}:{src}"
    resolved = urljoin(base, src)
    if not urlparse(resolved).scheme:
        return None
    return resolved


def largest_srcset_candidate(srcset: str | None) -> str | None:
    """Return the URL of the widest candidate in a ``srcset`` value.

    Candidates without a width descriptor rank by position; the last
    one is usually the largest.
    """
    if not srcset:
        return None
    best_url: str | None = None
    best_width = -1.0
    for position, part in enumerate(srcset.split(",")):
        pieces = part.strip().split()
        if not pieces:
            continue
        width = float(position)
        if len(pieces) > 1 and pieces[1][:-1].replace(".", "", 1).isdigit():
            width = float(pieces[1][:-1]) * 1000
        if width >= best_width:
            best_width = width
            best_url = pieces[0]
    return best_url
