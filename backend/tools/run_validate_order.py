"""Validate a saved model output file from the command line.

Usage:
    python tools/run_validate_order.py PATH [--raw-json]

Prints the validation result as JSON. Exits 0 when valid, 2 when invalid,
1 when the file cannot be found.
"""
import argparse
import json
import os
import sys
# Ensure backend package dir is on path
ROOT = os.path.normpath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, ROOT)
from validation_service import ValidationService


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Validate structured model output")
    parser.add_argument("path", help="File containing the raw model output")
    parser.add_argument("--raw-json", action="store_true",
                        help="Audit as schema-less JSON instead of an order")
    args = parser.parse_args(argv)

    if not os.path.exists(args.path):
        print('Input file not found at', args.path)
        return 1

    with open(args.path, 'r', encoding='utf-8') as fh:
        raw = fh.read()

    service = ValidationService()
    if args.raw_json:
        result = service.validate_raw_json(raw)
    else:
        result = service.validate_order_output(raw)

    print('--- Validation Result ---')
    print(json.dumps(result.to_response(), indent=2, ensure_ascii=False))
    print('\nValidation:', 'OK' if result.valid else 'FAILED')

    # Exit with code 0 on success, 2 on failure
    return 0 if result.valid else 2


if __name__ == '__main__':
    sys.exit(main())
