# SPDX-FileCopyrightText: 2025 Science Live Platform contributors
#
# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations

import re
import urllib.parse

PLATFORM_URL = "https://platform.sciencelive4all.org"
PLATFORM_NANOPUB_URI = "https://w3id.org/sciencelive/np/"
NANOPUB_BASE_URI = "https://w3id.org/np/"
REGISTRY_URL = "https://registry.knowledgepixels.com/np/"

# see: https://github.com/trustyuri/trustyuri-spec
_p_nanopub_hash = re.compile(r"/(RA|RB|FA)([A-Za-z0-9_-]{43})(?=[/#]|$)")
_p_nanopub_suffix = re.compile(r"/(RA|RB|FA)[A-Za-z0-9_-]{43}[/#]([^/#?]+)")
_p_doi = re.compile(r"(?:10\.1002/[^\s]*[A-Z0-9]|10\.\d{4,9}/[-._;()/:A-Z0-9]*[A-Z0-9])", re.IGNORECASE)
_p_wikidata_entity = re.compile(r"^https?://www\.wikidata\.org/entity/")
_p_wikidata_entity_id = re.compile(r"^https?://www\.wikidata\.org/entity/(Q\d+)$")
_p_orcid_prefix = re.compile(r"https?://orcid\.org/")
_p_orcid_id = re.compile(r"(\d{4}-\d{4}-\d{4}-\d{3}[0-9Xx])")


def parse_uri(uri: str | None) -> str:
    """Returns a full URI for an input in any format,
    including just the trusty hash part of a nanopublication URI.

    Args:
        uri (str | None): A full URI or a bare nanopublication hash.
    """
    if not uri:
        return ""
    if uri.startswith("http"):
        return uri
    return NANOPUB_BASE_URI + uri


def get_uri_fragment(uri: str) -> str:
    """Returns the part after the first '#', or an empty string."""
    if not uri or not isinstance(uri, str):
        return ""
    index = uri.find("#")
    if index < 0 or index == len(uri) - 1:
        return ""
    return uri[index + 1:]


def get_uri_end(uri: str) -> str | None:
    """Returns the last element of a URI.

    In order of precedence: the fragment, the last path segment,
    the previous path segment (if the path ends with '/').

    Examples:
        get_uri_end("http://example.com/page#section") -> "section"
        get_uri_end("https://doi.org/10.1016/j.joclim.2025.100573") -> "j.joclim.2025.100573"
        get_uri_end("https://w3id.org/np/RA123/") -> "RA123"
    """
    parsed = urllib.parse.urlparse(uri)
    if parsed.fragment:
        return parsed.fragment
    segments = parsed.path.split("/")
    if segments[-1]:
        return segments[-1]
    if len(segments) > 1 and segments[-2]:
        return segments[-2]
    return None


def get_nanopub_hash(uri: str, include_module_prefix: bool = True) -> str | None:
    """Returns the trusty hash of a nanopublication URI, e.g. 'RAabcd...e23fg'.

    Args:
        uri (str): Nanopublication URI, with or without a suffix.
        include_module_prefix (bool): Include the two character module code. Defaults to True.
    """
    if not isinstance(uri, str):
        return None
    match = _p_nanopub_hash.search(uri)
    if not match:
        return None
    if include_module_prefix:
        return match.group(1) + match.group(2)
    return match.group(2)


def is_nanopub_uri(uri: str) -> bool:
    return get_nanopub_hash(uri) is not None


def get_nanopub_suffix(uri: str) -> str | None:
    """Returns the suffix after the trusty hash (separated by '#' or '/'), if any."""
    if not isinstance(uri, str):
        return None
    match = _p_nanopub_suffix.search(uri)
    return match.group(2) if match else None


def to_registry_download_url(source_uri: str, format: str | None = None) -> str | None:
    """Returns a link to the raw content of a nanopublication in the registry.

    Args:
        source_uri (str): Nanopublication URI.
        format (str, optional): One of 'trig', 'jsonld', 'nq' or 'xml'.
            Without it, the file extension is omitted.
    """
    hash_ = get_nanopub_hash(source_uri)
    if not hash_:
        return None
    return f"{REGISTRY_URL}{hash_}{'.' + format if format else ''}"


def to_platform_uri(source_uri: str, relative: bool = True) -> str:
    """Returns the URI as a link displaying the nanopublication on the platform.

    URIs already pointing to the platform and URIs that are no nanopublications
    are returned unchanged.
    """
    if source_uri.startswith(PLATFORM_URL) or source_uri.startswith(PLATFORM_NANOPUB_URI):
        return source_uri
    if not is_nanopub_uri(source_uri):
        return source_uri
    base = "" if relative else PLATFORM_URL
    return f"{base}/np/?uri={urllib.parse.quote(source_uri, safe='')}"


def is_doi_uri(uri: str) -> bool:
    return uri.startswith("https://doi.org/10.")


def extract_dois_from_text(text: str) -> list[str]:
    """Returns all DOIs occurring in the text."""
    return _p_doi.findall(text)


def is_wikidata_entity_uri(uri: str) -> bool:
    return _p_wikidata_entity.match(uri) is not None


def extract_wikidata_entity_id(uri: str) -> str | None:
    """Returns the QID of a Wikidata entity,
    e.g. 'http://www.wikidata.org/entity/Q12345' -> 'Q12345'.
    """
    match = _p_wikidata_entity_id.match(uri)
    return match.group(1) if match else None


def is_orcid_uri(uri: str) -> bool:
    return _p_orcid_prefix.match(uri) is not None


def clean_orcid_uri(uri: str) -> str:
    """Normalizes an ORCID (URI or bare ID) into an 'https://orcid.org/' URI."""
    if uri.startswith("https://orcid.org/"):
        return uri
    return "https://orcid.org/" + _p_orcid_prefix.sub("", uri)


def extract_orcid_id(href: str) -> str | None:
    """Returns just the ORCID iD found in a string, with an upper-case checksum."""
    match = _p_orcid_id.search(href)
    if not match:
        return None
    orcid = match.group(1)
    return orcid[:-1] + orcid[-1].upper()


def is_http_uri(value: str) -> bool:
    return isinstance(value, str) and (value.startswith("http://") or value.startswith("https://"))
