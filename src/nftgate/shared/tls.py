from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from cryptography import x509
from cryptography.hazmat.primitives import serialization

from nftgate.shared.logger import Logger

logger = Logger(__name__).get_logger()

_PUBLIC_FORMAT = (
    serialization.Encoding.DER,
    serialization.PublicFormat.SubjectPublicKeyInfo,
)


class TLSConfigError(Exception):
    pass


@dataclass(frozen=True)
class TLSMaterials:
    cert_path: Path
    key_path: Path
    certificate: x509.Certificate


def load_tls_materials(cert_path, key_path) -> TLSMaterials:
    """
    Loads the PEM certificate and private key served over HTTPS.
    Raises TLSConfigError if either cannot be parsed, if the key does not
    belong to the certificate, or if the certificate is outside its validity window.
    """
    cert_path, key_path = Path(cert_path), Path(key_path)
    logger.debug("Loading TLS materials from %s and %s", cert_path, key_path)

    try:
        certificate = x509.load_pem_x509_certificate(cert_path.read_bytes())
        private_key = serialization.load_pem_private_key(
            key_path.read_bytes(), password=None
        )
    except (OSError, ValueError, TypeError) as e:
        logger.error("Failed to load TLS materials: %s", e)
        raise TLSConfigError(f"Unable to load TLS materials: {e}") from e

    if private_key.public_key().public_bytes(
        *_PUBLIC_FORMAT
    ) != certificate.public_key().public_bytes(*_PUBLIC_FORMAT):
        raise TLSConfigError("TLS private key does not match the certificate")

    now = datetime.now(timezone.utc)
    if not certificate.not_valid_before_utc <= now <= certificate.not_valid_after_utc:
        raise TLSConfigError(
            f"TLS certificate is not valid now (valid {certificate.not_valid_before_utc}"
            f" to {certificate.not_valid_after_utc})"
        )

    logger.info("TLS certificate for %s loaded", certificate.subject.rfc4514_string())
    return TLSMaterials(cert_path=cert_path, key_path=key_path, certificate=certificate)
