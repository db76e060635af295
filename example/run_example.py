#!/usr/bin/env python3
"""
Simple example demonstrating the schedule tools.
Builds a three step tumble, writes it as CSV and explains it.
"""

import io
import sys
import os

# Add parent directory to path so we can import tumbler
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from tumbler import ExplainConfig, encode_schedule, explain_schedule, validate_step


def main():
    # Half of mixdepth 0 into mixdepth 1, sweep mixdepth 1 into mixdepth 2,
    # then sweep mixdepth 2 to an address asked for at execution time
    steps = [
        validate_step(mixdepth=0, portion=0.5, counterparties=6, wait=30),
        validate_step(mixdepth=1, portion=0, counterparties=5, wait=45, rounding=3),
        validate_step(mixdepth=2, portion=0, counterparties=7, address='addrask', wait=60),
    ]

    csv_text = encode_schedule(steps)
    print("Schedule file:")
    print(csv_text)

    config = ExplainConfig(amtmixdepths=5, block_interval=10)

    print("Explanation:")
    explain_schedule(io.StringIO(csv_text), sys.stdout, config=config)

    print("\nAs JSON:")
    explain_schedule(io.StringIO(csv_text), sys.stdout, as_json=True, config=config)


if __name__ == '__main__':
    main()
