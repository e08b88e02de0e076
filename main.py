#!/usr/bin/env python3
"""
EDI 835 Generator Command Line Tool

Generates an X12 835 (Health Care Claim Payment/Advice) file from a JSON
remittance record.

Usage:
    python main.py                                   # Use sample-835-data.json
    python main.py remit.json                        # Generate remit.edi
    python main.py remit.json output.edi             # Generate to specific output file
    python main.py remit.json output.edi --test      # Mark interchange as test data
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Try importing from installed package first, fallback to src path
try:
    from remittance_generator import Remittance835Generator
    from remittance_models import PaymentAdvice
    from generator_settings import GeneratorSettings, Delimiters, ControlNumbers
    from x12_defs import Remittance835Error
except ImportError:
    # Add src to path for imports when not installed
    sys.path.insert(0, str(Path(__file__).parent / "src"))
    from remittance_generator import Remittance835Generator
    from remittance_models import PaymentAdvice
    from generator_settings import GeneratorSettings, Delimiters, ControlNumbers
    from x12_defs import Remittance835Error

from pydantic import ValidationError


def load_advice(input_file: str) -> PaymentAdvice:
    """Load a payment advice from a JSON file."""
    with open(input_file, 'r') as f:
        return PaymentAdvice.model_validate(json.load(f))


def generate_edi_file(input_file: str, output_file: str, settings: GeneratorSettings, control_number: int = 1) -> int:
    """Generate an 835 from a JSON file and save it."""

    print(f"EDI 835 Generator - Processing {input_file}")
    print("=" * 50)

    try:
        advice = load_advice(input_file)
        print(f"Loaded {len(advice.claims)} claims")

        generator = Remittance835Generator(settings)
        control_numbers = ControlNumbers(interchange=control_number, group=control_number, transaction=control_number)
        edi_content = generator.generate(advice, control_numbers=control_numbers)

        print("\nGenerated EDI 835:")
        print("=" * 50)
        print(edi_content)

        with open(output_file, 'w') as f:
            f.write(edi_content)

        print(f"\nEDI 835 saved to: {output_file}")
        print(f"Output size: {len(edi_content):,} characters")
        return 0

    except FileNotFoundError as e:
        print(f"Error: File not found: {e}")
        return 1
    except (json.JSONDecodeError, ValidationError) as e:
        print(f"Error: Invalid input data: {e}")
        return 1
    except Remittance835Error as e:
        print(f"Error generating EDI 835: {e}")
        return 1


def main(argv=None):
    """Main entry point with command line argument parsing."""

    parser = argparse.ArgumentParser(
        description="Generate an X12 835 file from JSON remittance data",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py                                   # Use sample-835-data.json
  python main.py remit.json                        # remit.json -> remit.edi
  python main.py remit.json out.edi --line-breaks  # One segment per line
        """
    )

    parser.add_argument('input_file', nargs='?', default='sample-835-data.json',
                       help='Input JSON file (default: sample-835-data.json)')
    parser.add_argument('output_file', nargs='?',
                       help='Output EDI file (default: input_file.edi)')
    parser.add_argument('--test', action='store_true',
                       help='Set the ISA usage indicator to T (test data)')
    parser.add_argument('--line-breaks', action='store_true',
                       help='Write a newline after each segment terminator')
    parser.add_argument('--strict-delimiters', action='store_true',
                       help='Reject data values that contain separator characters')
    parser.add_argument('--control-number', type=int, default=1,
                       help='Interchange, group and transaction control number (default: 1)')
    parser.add_argument('--log-level', default='WARNING', type=str.upper,
                       choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                       help='Logging level (default: WARNING)')

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=args.log_level,
        format="[%(asctime)s] [%(levelname)s] [%(name)s:%(lineno)d] - %(message)s",
    )

    # Set default output file if not provided
    if not args.output_file:
        input_path = Path(args.input_file)
        args.output_file = str(input_path.with_suffix('.edi'))

    # Check if input file exists
    if not Path(args.input_file).exists():
        print(f"Error: Input file not found: {args.input_file}")
        return 1

    settings = GeneratorSettings(
        delimiters=Delimiters(line_ending="\n" if args.line_breaks else ""),
        usage_indicator="T" if args.test else "P",
        reject_delimiter_collisions=args.strict_delimiters,
    )
    return generate_edi_file(args.input_file, args.output_file, settings, args.control_number)


if __name__ == "__main__":
    exit(main())
