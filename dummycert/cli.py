#!/usr/bin/env python3

"""Create a full cert chain for debug purpose (root CA, middle CA, server leaf, client leaf)."""
import argparse
import datetime
import sys
from pathlib import Path

from pydantic import ValidationError

from dummycert import config
from dummycert.chain import createChain
from dummycert.common.errors import ChainError
from dummycert.common.options import CertificateSpec, ChainConfiguration, defaultSerial, nowUtc
from dummycert.crypto.pki import verifyChainDir
from dummycert.crypto.templates import CHAIN_ORDER, LEAVES

def parseTimestamp(value: str) -> datetime.datetime:
    try:
        parsed = datetime.datetime.strptime(value, config.TIME_LAYOUT)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected '{config.TIME_LAYOUT}', got {value!r}")
    return parsed.replace(tzinfo=datetime.timezone.utc)

def buildParser():
    parser = argparse.ArgumentParser(prog="dummycert", description=__doc__)
    sub = parser.add_subparsers(dest="command", required=True)

    create = sub.add_parser("create-chain", help="create a certificate chain")
    create.add_argument("--dir", default=config.OUTPUT_DIR, help="output directory (default: current directory)")
    create.add_argument("--bits", type=int, default=config.KEY_BITS,
                        help="bit size of private key, one of 1024, 2048, 4096 for RSA")

    for position in CHAIN_ORDER:
        name = position.value
        group = create.add_argument_group(name)
        group.add_argument(f"--{name}-common-name", default=f"Dummycert - {config.DISPLAY_NAMES[name]}",
                           help=f"common name for {name}")
        group.add_argument(f"--{name}-serial", type=int, default=None,
                           help=f"serial number for {name} (default: derived from the clock)")
        group.add_argument(f"--{name}-not-before", type=parseTimestamp, default=None,
                           help=f"not before for {name}, UTC (default: now)")
        group.add_argument(f"--{name}-not-after", type=parseTimestamp, default=None,
                           help=f"not after for {name}, UTC (default: {config.VALIDITY_DAYS} days later)")
        if position in LEAVES:
            group.add_argument(f"--{name}-dns-name", action="append", default=[],
                               help=f"dns name for {name}, repeatable")
            group.add_argument(f"--{name}-ip-address", action="append", default=[],
                               help=f"ip address for {name}, repeatable")

    verify = sub.add_parser("verify-chain", help="check a chain written by create-chain")
    verify.add_argument("--dir", default=config.OUTPUT_DIR, help="directory holding the chain")

    return parser

def buildConfiguration(args, timeBase: datetime.datetime) -> ChainConfiguration:
    # one time base shared by every default of this invocation
    opt = vars(args)
    specs = {}
    for index, position in enumerate(CHAIN_ORDER):
        name = position.value
        serial = opt[f"{name}_serial"]
        notBefore = opt[f"{name}_not_before"]
        notAfter = opt[f"{name}_not_after"]
        specs[name] = CertificateSpec(
            commonName=opt[f"{name}_common_name"],
            serialNumber=defaultSerial(timeBase, index) if serial is None else serial,
            notBefore=timeBase if notBefore is None else notBefore,
            notAfter=timeBase + datetime.timedelta(days=config.VALIDITY_DAYS) if notAfter is None else notAfter,
            dnsNames=opt.get(f"{name}_dns_name", []),
            ipAddresses=opt.get(f"{name}_ip_address", []),
        )
    return ChainConfiguration(directory=Path(args.dir), keyBits=args.bits, **specs)

def runCreate(args):
    opts = buildConfiguration(args, nowUtc())
    opts.directory.mkdir(parents=True, exist_ok=True)

    written = createChain(opts)

    print("Created certificate chain:")
    for p in written:
        print(f"    {p}")

def runVerify(args):
    results = verifyChainDir(args.dir)
    failed = False
    for name, ok, reason in results:
        if ok:
            print(f"[+] {name}")
        else:
            failed = True
            print(f"[FAIL] {name}: {reason}")
    if failed:
        print("RESULT: FAIL")
        sys.exit(1)
    print("RESULT: PASS")

def main(argv=None):
    args = buildParser().parse_args(argv)
    try:
        if args.command == "create-chain":
            runCreate(args)
        else:
            runVerify(args)
    except (ChainError, ValidationError, OSError) as e:
        print("exited with error:", e)
        sys.exit(1)

if __name__ == "__main__":
    main()
