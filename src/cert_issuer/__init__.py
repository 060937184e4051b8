"""
cert_issuer — X.509 certificate issuance with pluggable signature transcoding.

Builds TBS certificates with asn1crypto, signs them through an injected
Signer (cryptography by default), converts raw platform signatures to the
X.509 form through an ordered signature formatter registry, and exposes
the result as DER, hex, base64, base64url or PEM.
"""

__version__ = "0.1.0"
