"""RSA key generation + PEM encoding helpers (use library)."""
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives import serialization
from cryptography import x509

PUBLIC_EXPONENT = 65537

def generateKey(keyBits: int):
    return rsa.generate_private_key(public_exponent=PUBLIC_EXPONENT, key_size=keyBits)

def encodePrivateKeyPem(key) -> bytes:
    # PKCS#1, "RSA PRIVATE KEY"
    return key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.TraditionalOpenSSL,
        serialization.NoEncryption(),
    )

def encodeCertificatePem(cert: x509.Certificate) -> bytes:
    return cert.public_bytes(serialization.Encoding.PEM)
