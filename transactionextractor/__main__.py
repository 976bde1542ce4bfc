import sys
import json
import logging
import argparse

import pandas as pd

from .config import DEFAULT_CONFIG, load_config
from .parser import TransactionParser
from .pdf_source import GLYPH_SOURCES
from .statement import parse_bank_statement

logger = logging.getLogger(__name__)


def _write_frame(frame, output):
  if output.lower().endswith(('.xlsx', '.xls')):
    frame.to_excel(output, index=False, engine='openpyxl')
  else:
    frame.to_csv(output, index=False)


def run_statement(args, config):
  frames = []
  failed = 0
  for path in args.pdfs:
    result = parse_bank_statement(path, backend=args.backend, config=config)
    if not result.success:
      failed += 1
      logger.error(f"{path}: {result.error}")
      continue
    frame = result.to_dataframe()
    frame.insert(0, 'source_file', path)
    frames.append(frame)
    logger.info(f"{path}: {len(result.transactions)} transactions ({result.bank_name or 'unknown bank'})")

  combined = pd.concat(frames, ignore_index=True) if frames else pd.DataFrame()
  _write_frame(combined, args.output)
  print(f"Wrote {len(combined)} transactions to {args.output}")
  return 1 if failed == len(args.pdfs) else 0


def run_text(args, config):
  text = args.text
  if text is None or text == '-':
    text = sys.stdin.read()

  parser = TransactionParser(config)
  if args.quick or args.voice:
    txn = parser.parse_quick_transaction(text) if args.quick else parser.parse_voice_input(text)
    payload = txn.to_dict() if txn else None
  else:
    payload = parser.parse_transactions(text).to_dict()

  print(json.dumps(payload, indent=2, ensure_ascii=False))
  return 0 if payload else 1


def main(argv=None):
  parser = argparse.ArgumentParser(description='Extract transactions from bank statements and free text')
  parser.add_argument('--config', help='JSON file with category/keyword overrides')
  parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')
  sub = parser.add_subparsers(dest='command', required=True)

  statement = sub.add_parser('statement', help='Parse PDF bank statements')
  statement.add_argument('pdfs', nargs='+', help='Input PDF files')
  statement.add_argument('--output', required=True, help='Output CSV or XLSX file')
  statement.add_argument('--backend', choices=sorted(GLYPH_SOURCES), default='pdfplumber',
                         help='PDF text backend')

  text = sub.add_parser('text', help='Parse pasted SMS, receipt or expense-list text')
  text.add_argument('text', nargs='?', help="Text to parse ('-' or omitted reads stdin)")
  mode = text.add_mutually_exclusive_group()
  mode.add_argument('--quick', action='store_true', help='Quick "description amount" input')
  mode.add_argument('--voice', action='store_true', help='Voice transcript input')

  args = parser.parse_args(argv)
  logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                      format='%(levelname)s | %(message)s')

  config = load_config(args.config) if args.config else DEFAULT_CONFIG
  if args.command == 'statement':
    return run_statement(args, config)
  return run_text(args, config)


if __name__ == '__main__':
  sys.exit(main())
