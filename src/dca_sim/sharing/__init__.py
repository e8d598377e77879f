"""
Share-link module for the DCA projection simulator.

Encodes portfolio configurations into URL-safe tokens and back.
"""

from dca_sim.sharing.codec import (
    ShareLinkError,
    build_share_url,
    decode_config,
    decode_portfolios,
    encode_config,
    encode_portfolios,
    token_from_url,
)

__all__ = [
    "ShareLinkError",
    "build_share_url",
    "decode_config",
    "decode_portfolios",
    "encode_config",
    "encode_portfolios",
    "token_from_url",
]
