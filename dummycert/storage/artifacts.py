import os
from pathlib import Path
from typing import List

from dummycert.common.errors import PersistenceError

FILE_MODE = 0o600


def key_file(position) -> str:
    return f"{position.value}.key.pem"


def cert_file(position) -> str:
    return f"{position.value}.crt.pem"


def full_chain_file(position) -> str:
    return f"{position.value}.full-crt.pem"


def write_artifact(directory, name: str, data: bytes) -> Path:
    p = Path(directory) / name
    fd = os.open(p, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, FILE_MODE)
    with os.fdopen(fd, "wb") as f:
        # an existing file keeps its old mode through O_CREAT
        os.fchmod(f.fileno(), FILE_MODE)
        f.write(data)
    return p


def full_chain_pem(leaf_pem: bytes, middle_pem: bytes, root_pem: bytes) -> bytes:
    return b"\n".join(pem.strip() for pem in (leaf_pem, middle_pem, root_pem))


def write_key_pair(directory, key_pair) -> List[Path]:
    written = []
    for name, data in (
        (key_file(key_pair.position), key_pair.privateKeyPem),
        (cert_file(key_pair.position), key_pair.certificatePem),
    ):
        try:
            written.append(write_artifact(directory, name, data))
        except OSError as e:
            raise PersistenceError(key_pair.position, f"{name}: {e}") from e
    return written


def write_full_chain(directory, leaf, middle, root) -> Path:
    name = full_chain_file(leaf.position)
    data = full_chain_pem(leaf.certificatePem, middle.certificatePem, root.certificatePem)
    try:
        return write_artifact(directory, name, data)
    except OSError as e:
        raise PersistenceError(leaf.position, f"{name}: {e}") from e
