"""App-proxy signature verification.

The storefront proxy signs every forwarded request: all query parameters
except `signature` (or `hmac`) are sorted by key, joined as `key=value`
with no separator, and signed with HMAC-SHA256 using the app's shared
secret. The hex digest travels in the `signature` parameter.

Verification is a pure function of the parameters and the secret.
"""

import hashlib
import hmac
import logging
from typing import Mapping, NamedTuple, Optional

from ..errors import AuthenticationError

logger = logging.getLogger(__name__)

SIGNATURE_KEYS = ("signature", "hmac")


class SignatureCheck(NamedTuple):
    ok: bool
    reason: Optional[str] = None


def canonical_message(params: Mapping[str, str]) -> str:
    """Build the signed message, leaving out the signature keys."""
    unsigned = {k: v for k, v in params.items() if k not in SIGNATURE_KEYS}
    return "".join(f"{key}={unsigned[key]}" for key in sorted(unsigned))


def sign_params(params: Mapping[str, str], secret: str) -> str:
    """Return the lowercase hex HMAC-SHA256 digest for `params`."""
    message = canonical_message(params)
    return hmac.new(secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha256).hexdigest()


def verify_proxy_signature(params: Mapping[str, str], secret: str) -> SignatureCheck:
    """Check the provided `signature` (or `hmac`) against the expected digest."""
    provided = params.get("signature") or params.get("hmac")
    if not provided:
        return SignatureCheck(False, "missing signature")

    digest = sign_params(params, secret)
    # compare_digest rejects non-ASCII str input, so compare bytes instead
    if hmac.compare_digest(digest.encode("utf-8"), provided.encode("utf-8")):
        return SignatureCheck(True)
    return SignatureCheck(False, "invalid signature")


def require_valid_signature(params: Mapping[str, str], secret: Optional[str]) -> None:
    """Raise AuthenticationError unless the request is signed with `secret`.

    With no secret configured this is a no-op.
    """
    if not secret:
        return

    check = verify_proxy_signature(params, secret)
    if not check.ok:
        logger.warning("Rejected proxy request: %s", check.reason)
        raise AuthenticationError(reason=check.reason)
