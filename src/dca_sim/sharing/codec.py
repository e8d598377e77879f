"""
Share-link encoding for portfolio configurations.

A configuration is serialized to compact JSON and then to URL-safe base64
without padding, so it can travel in a URL fragment. Decoding tolerates
missing fields by falling back to the documented defaults, and the lenient
decoders never raise on malformed input.
"""

import base64
import binascii
import json
import logging
from typing import Optional
from urllib.parse import parse_qs, urlsplit

from dca_sim.config import create_default_config, portfolio_from_dict, portfolio_to_dict
from dca_sim.models import ConfigurationError, PortfolioConfig


logger = logging.getLogger(__name__)

FRAGMENT_KEY = "config"


class ShareLinkError(Exception):
    """Raised when a share token cannot be decoded."""
    pass


def encode_portfolios(portfolios: list[PortfolioConfig]) -> str:
    """
    Encode one or more portfolios into a URL-safe token.

    Args:
        portfolios: Portfolios to encode, in display order

    Returns:
        URL-safe base64 token without padding
    """
    payload = {"portfolios": [portfolio_to_dict(p) for p in portfolios]}
    raw = json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def encode_config(config: PortfolioConfig) -> str:
    """Encode a single portfolio into a URL-safe token."""
    return encode_portfolios([config])


def decode_portfolios_strict(token: str) -> list[PortfolioConfig]:
    """
    Decode a token produced by encode_portfolios.

    A bare portfolio mapping (without the `portfolios` list) is accepted
    as a single portfolio.

    Args:
        token: URL-safe base64 token, with or without padding

    Returns:
        List of at least one PortfolioConfig

    Raises:
        ShareLinkError: If the token is not valid base64 JSON or holds an
            invalid configuration
    """
    token = (token or "").strip()
    if not token:
        raise ShareLinkError("Share token is empty")

    padded = token + "=" * (-len(token) % 4)
    try:
        raw = base64.urlsafe_b64decode(padded.encode("ascii"))
        payload = json.loads(raw.decode("utf-8"))
    except (binascii.Error, UnicodeError, ValueError) as e:
        raise ShareLinkError(f"Malformed share token: {e}")

    if isinstance(payload, dict) and "portfolios" in payload:
        entries = payload["portfolios"]
    else:
        entries = [payload]

    if not isinstance(entries, list) or not entries:
        raise ShareLinkError("Share token holds no portfolios")

    portfolios = []
    for index, entry in enumerate(entries, start=1):
        if not isinstance(entry, dict):
            raise ShareLinkError(f"Portfolio entry {index} is not a mapping")
        entry = dict(entry)
        entry.setdefault("portfolio_id", f"Portfolio {index}")
        try:
            portfolios.append(portfolio_from_dict(entry))
        except ConfigurationError as e:
            raise ShareLinkError(f"Invalid portfolio in share token: {e}")

    return portfolios


def decode_config_strict(token: str) -> PortfolioConfig:
    """Decode the first portfolio of a token, raising ShareLinkError on failure."""
    return decode_portfolios_strict(token)[0]


def decode_portfolios(
    token: str,
    fallback: Optional[list[PortfolioConfig]] = None,
) -> list[PortfolioConfig]:
    """
    Decode a token, recovering from malformed input.

    Args:
        token: URL-safe base64 token
        fallback: Portfolios to return if decoding fails (defaults to a
            single default portfolio)

    Returns:
        Decoded portfolios, or the fallback
    """
    try:
        return decode_portfolios_strict(token)
    except ShareLinkError as e:
        logger.warning(f"Ignoring share link: {e}")
        if fallback:
            return fallback
        return [create_default_config()]


def decode_config(
    token: str,
    fallback: Optional[PortfolioConfig] = None,
) -> PortfolioConfig:
    """
    Decode the first portfolio of a token, recovering from malformed input.

    Args:
        token: URL-safe base64 token
        fallback: Configuration to return if decoding fails (defaults to
            the default portfolio)

    Returns:
        Decoded PortfolioConfig, or the fallback
    """
    return decode_portfolios(token, [fallback] if fallback else None)[0]


def build_share_url(base_url: str, portfolios: list[PortfolioConfig]) -> str:
    """
    Build a share URL carrying the portfolios in its fragment.

    Args:
        base_url: Page URL; any existing fragment is replaced
        portfolios: Portfolios to share

    Returns:
        URL of the form <base_url>#config=<token>
    """
    base = base_url.split("#", 1)[0]
    return f"{base}#{FRAGMENT_KEY}={encode_portfolios(portfolios)}"


def token_from_url(url: str) -> Optional[str]:
    """
    Extract the share token from a URL fragment.

    Args:
        url: URL possibly containing #config=<token>

    Returns:
        The token, or None if the fragment carries none
    """
    fragment = urlsplit(url).fragment
    values = parse_qs(fragment).get(FRAGMENT_KEY)
    return values[0] if values else None
