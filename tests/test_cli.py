import contextlib
import io
import json
import os
import tempfile
import unittest

import pandas as pd

from pdf_fixtures import create_statement_pdf
from transactionextractor.__main__ import main


class CliTest(unittest.TestCase):
  def setUp(self):
    self.tmp = tempfile.TemporaryDirectory()

  def tearDown(self):
    self.tmp.cleanup()

  def _run(self, argv):
    out = io.StringIO()
    with contextlib.redirect_stdout(out):
      code = main(argv)
    return code, out.getvalue()

  def test_quick_text(self):
    code, out = self._run(['text', 'uber 50', '--quick'])
    self.assertEqual(code, 0)
    self.assertEqual(json.loads(out)['amount'], 50)

  def test_quick_text_without_amount(self):
    code, out = self._run(['text', 'lunch', '--quick'])
    self.assertEqual(code, 1)
    self.assertIsNone(json.loads(out))

  def test_list_text(self):
    code, out = self._run(['text', 'Food 60k, Fuel 40k'])
    self.assertEqual(code, 0)
    self.assertEqual(len(json.loads(out)['items']), 2)

  def test_statement_to_csv_and_excel(self):
    pdf_path = os.path.join(self.tmp.name, 'statement.pdf')
    create_statement_pdf(pdf_path)

    csv_path = os.path.join(self.tmp.name, 'out.csv')
    code, _ = self._run(['statement', pdf_path, '--output', csv_path])
    self.assertEqual(code, 0)
    frame = pd.read_csv(csv_path)
    self.assertEqual(len(frame), 3)
    self.assertEqual(frame['source_file'].iloc[0], pdf_path)

    xlsx_path = os.path.join(self.tmp.name, 'out.xlsx')
    code, _ = self._run(['statement', pdf_path, '--output', xlsx_path, '--backend', 'pymupdf'])
    self.assertEqual(code, 0)
    self.assertEqual(len(pd.read_excel(xlsx_path)), 3)

  def test_all_files_failing(self):
    csv_path = os.path.join(self.tmp.name, 'out.csv')
    code, _ = self._run(['statement', os.path.join(self.tmp.name, 'missing.pdf'), '--output', csv_path])
    self.assertEqual(code, 1)


if __name__ == '__main__':
  unittest.main()
