"""Build the rootca -> middle -> {server, client} chain and write it to disk."""
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from cryptography import x509

from dummycert.common.errors import KeyGenerationError, SigningError, ReparseError
from dummycert.common.options import ChainConfiguration
from dummycert.crypto.keys import generateKey, encodePrivateKeyPem, encodeCertificatePem
from dummycert.crypto.signer import signTemplate, reparseCertificate
from dummycert.crypto.templates import (
    Position, PROFILES, CHAIN_ORDER, LEAVES, buildTemplate, subjectName,
)
from dummycert.storage.artifacts import write_key_pair, write_full_chain

@dataclass
class KeyPair:
    position: Position
    privateKey: object = None
    privateKeyPem: bytes = b""
    template: Optional[x509.CertificateBuilder] = None
    certificate: Optional[x509.Certificate] = None
    certificateDer: bytes = b""
    certificatePem: bytes = b""

def generateKeyPairs(keyBits: int) -> Dict[Position, KeyPair]:
    pairs = {}
    for position in CHAIN_ORDER:
        try:
            key = generateKey(keyBits)
        except Exception as e:
            raise KeyGenerationError(position, e) from e
        pairs[position] = KeyPair(position=position, privateKey=key, privateKeyPem=encodePrivateKeyPem(key))
    return pairs

def signPosition(pairs: Dict[Position, KeyPair], position: Position, spec) -> None:
    pair = pairs[position]
    parent = pairs[PROFILES[position].parent]

    try:
        pair.template = buildTemplate(position, spec, pair.privateKey.public_key())
        if parent is pair:
            pair.certificateDer = signTemplate(pair.template, pair.privateKey, selfName=subjectName(spec.commonName))
        else:
            pair.certificateDer = signTemplate(pair.template, parent.privateKey, issuerCert=parent.certificate)
    except Exception as e:
        raise SigningError(position, e) from e

    # issuers must come from the encoded certificate, not the template
    try:
        pair.certificate = reparseCertificate(pair.certificateDer)
    except Exception as e:
        raise ReparseError(position, e) from e
    pair.certificatePem = encodeCertificatePem(pair.certificate)

def createChain(config: ChainConfiguration) -> List[Path]:
    """
    Generate keys, sign all four certificates and write the ten PEM files
    into `config.directory`.

    Raises a ChainError subclass on the first failure. Files written before
    a failure are left in place.
    """
    pairs = generateKeyPairs(config.keyBits)

    for position in CHAIN_ORDER:
        signPosition(pairs, position, config.specFor(position))

    written = []
    for position in CHAIN_ORDER:
        written += write_key_pair(config.directory, pairs[position])
    for position in LEAVES:
        written.append(write_full_chain(
            config.directory,
            pairs[position],
            pairs[Position.MIDDLE],
            pairs[Position.ROOTCA],
        ))
    return written
