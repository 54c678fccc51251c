"""Chain positions, SAN normalization and unsigned certificate templates."""
import enum
import ipaddress
from typing import List, NamedTuple, Optional, Tuple

from cryptography import x509
from cryptography.x509.oid import NameOID, ExtendedKeyUsageOID

ORGANIZATION = "Dummycert"

class Position(enum.Enum):
    ROOTCA = "rootca"
    MIDDLE = "middle"
    SERVER = "server"
    CLIENT = "client"

class Profile(NamedTuple):
    parent: Position
    isCa: bool
    pathLength: Optional[int]
    keyCertSign: bool
    digitalSignature: bool
    keyEncipherment: bool
    extKeyUsage: Tuple[x509.ObjectIdentifier, ...]

PROFILES = {
    Position.ROOTCA: Profile(Position.ROOTCA, True, 2, True, False, False, ()),
    Position.MIDDLE: Profile(Position.ROOTCA, True, 1, True, False, False, ()),
    Position.SERVER: Profile(Position.MIDDLE, False, None, False, True, True,
                             (ExtendedKeyUsageOID.SERVER_AUTH,)),
    Position.CLIENT: Profile(Position.MIDDLE, False, None, False, True, True,
                             (ExtendedKeyUsageOID.CLIENT_AUTH,)),
}

# signing order, every parent before its children
CHAIN_ORDER = (Position.ROOTCA, Position.MIDDLE, Position.SERVER, Position.CLIENT)
LEAVES = (Position.SERVER, Position.CLIENT)

def normalizeDnsNames(names) -> List[str]:
    return [n.strip() for n in names if n.strip()]

def normalizeIpAddresses(addresses) -> list:
    out = []
    for raw in addresses:
        try:
            out.append(ipaddress.ip_address(raw.strip()))
        except ValueError:
            continue
    return out

def subjectName(commonName: str) -> x509.Name:
    return x509.Name([
        x509.NameAttribute(NameOID.COMMON_NAME, commonName),
        x509.NameAttribute(NameOID.ORGANIZATION_NAME, ORGANIZATION),
    ])

def keyUsage(profile: Profile) -> x509.KeyUsage:
    return x509.KeyUsage(
        digital_signature=profile.digitalSignature,
        content_commitment=False,
        key_encipherment=profile.keyEncipherment,
        data_encipherment=False,
        key_agreement=False,
        key_cert_sign=profile.keyCertSign,
        crl_sign=False,
        encipher_only=False,
        decipher_only=False,
    )

def subjectAltNames(spec) -> List[x509.GeneralName]:
    names = [x509.DNSName(n) for n in normalizeDnsNames(spec.dnsNames)]
    names += [x509.IPAddress(ip) for ip in normalizeIpAddresses(spec.ipAddresses)]
    return names

def buildTemplate(position: Position, spec, publicKey) -> x509.CertificateBuilder:
    """
    Build the unsigned template for one position.

    Issuer name and authority key identifier are left for the signer, since
    both come from the issuer's signed certificate.
    """
    profile = PROFILES[position]

    template = (
        x509.CertificateBuilder()
        .subject_name(subjectName(spec.commonName))
        .public_key(publicKey)
        .serial_number(spec.serialNumber)
        .not_valid_before(spec.notBefore)
        .not_valid_after(spec.notAfter)
        .add_extension(
            x509.BasicConstraints(ca=profile.isCa, path_length=profile.pathLength),
            critical=True,
        )
        .add_extension(keyUsage(profile), critical=True)
        .add_extension(x509.SubjectKeyIdentifier.from_public_key(publicKey), critical=False)
    )

    if profile.extKeyUsage:
        template = template.add_extension(
            x509.ExtendedKeyUsage(list(profile.extKeyUsage)),
            critical=False,
        )

    # CA certificates carry no SAN
    if not profile.isCa:
        names = subjectAltNames(spec)
        if names:
            template = template.add_extension(x509.SubjectAlternativeName(names), critical=False)

    return template
