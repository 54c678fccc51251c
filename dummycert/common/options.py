"""Pydantic models: per-certificate spec and whole-chain configuration."""
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List
from pathlib import Path
import datetime

MAX_SERIAL = 2 ** 64

class CertificateSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    commonName: str
    serialNumber: int = Field(gt=0, lt=MAX_SERIAL)
    notBefore: datetime.datetime
    notAfter: datetime.datetime
    dnsNames: List[str] = []
    ipAddresses: List[str] = []

    @field_validator("notBefore", "notAfter")
    @classmethod
    def assumeUtc(cls, value: datetime.datetime):
        # naive timestamps are UTC, as in the certificate itself
        if value.tzinfo is None:
            return value.replace(tzinfo=datetime.timezone.utc)
        return value

class ChainConfiguration(BaseModel):
    model_config = ConfigDict(frozen=True)

    directory: Path
    keyBits: int = Field(gt=0)
    rootca: CertificateSpec
    middle: CertificateSpec
    server: CertificateSpec
    client: CertificateSpec

    def specFor(self, position) -> CertificateSpec:
        return getattr(self, position.value)

def nowUtc():
    return datetime.datetime.now(datetime.timezone.utc)

def defaultSerial(timeBase: datetime.datetime, index: int):
    """Clock-derived serial: microseconds since the epoch plus the position index."""
    return int(timeBase.timestamp() * 1_000_000) + index
