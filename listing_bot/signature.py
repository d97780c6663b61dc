"""Discord request signature verification (Ed25519)."""
from typing import Optional

from nacl.signing import VerifyKey
from nacl.exceptions import BadSignatureError, CryptoError

from .observability import get_logger

logger = get_logger('signature')


class SignatureVerifier:
    """Checks ``X-Signature-Ed25519`` over ``timestamp + raw body``."""

    def __init__(self, public_key: Optional[str]):
        self._verify_key = None
        if not public_key:
            logger.warning("DISCORD_PUBLIC_KEY not configured, all requests will be rejected")
            return
        try:
            self._verify_key = VerifyKey(bytes.fromhex(public_key))
        except (ValueError, TypeError, CryptoError) as e:
            logger.warning("DISCORD_PUBLIC_KEY is malformed, all requests will be rejected", error=str(e))

    def verify(self, signature: Optional[str], timestamp: Optional[str], body: bytes) -> bool:
        """Verify a Discord request signature.

        Args:
            signature: Hex-encoded value of the X-Signature-Ed25519 header
            timestamp: Value of the X-Signature-Timestamp header
            body: Raw request body, exactly as received

        Returns:
            True only if the signature is valid for this public key
        """
        if self._verify_key is None or not signature or not timestamp:
            return False

        try:
            self._verify_key.verify(timestamp.encode() + body, bytes.fromhex(signature))
            return True
        except (BadSignatureError, ValueError, TypeError, CryptoError) as e:
            logger.warning("Signature verification failed", error=type(e).__name__)
            return False
