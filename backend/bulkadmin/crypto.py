"""
Password encryption for the credential exchange.

The login endpoint expects the password RSA-OAEP encrypted with the
server's published public key (SHA-1 digest and MGF1) and base64 encoded.
"""

import base64

from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa


def encrypt_password(public_key_pem: str, password: str) -> str:
    """
    Encrypt a password with the server's RSA public key.

    Args:
        public_key_pem: PEM-encoded RSA public key
        password: Plaintext password

    Returns:
        Base64-encoded ciphertext

    Raises:
        ValueError: if the PEM is not an RSA public key
    """
    public_key = serialization.load_pem_public_key(public_key_pem.encode("utf-8"))
    if not isinstance(public_key, rsa.RSAPublicKey):
        raise ValueError("Server public key is not an RSA key")

    ciphertext = public_key.encrypt(
        password.encode("utf-8"),
        padding.OAEP(
            mgf=padding.MGF1(algorithm=hashes.SHA1()),
            algorithm=hashes.SHA1(),
            label=None,
        ),
    )
    return base64.b64encode(ciphertext).decode("ascii")
