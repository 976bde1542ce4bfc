import unittest

from transactionextractor.amounts import (
  best_receipt_amount, extract_amount, find_amounts, is_account_number, is_amount_token, is_phone_number,
  is_reference_number, parse_amount, score_amounts)


class ParseAmountTest(unittest.TestCase):
  def test_suffixes(self):
    self.assertEqual(parse_amount('60k'), 60000)
    self.assertEqual(parse_amount('60K'), 60000)
    self.assertEqual(parse_amount('1.5m'), 1500000)
    self.assertEqual(parse_amount('2b'), 2000000000)

  def test_currency_and_separators(self):
    self.assertEqual(parse_amount('₦1,500.00'), 1500)
    self.assertEqual(parse_amount('NGN 2,000'), 2000)
    self.assertEqual(parse_amount('$12.50'), 12.5)
    self.assertEqual(parse_amount('N500'), 500)

  def test_rejects_invalid(self):
    for text in ('0', '0.00', '-5', 'abc', '', None, '12a'):
      self.assertIsNone(parse_amount(text), text)


class ExtractAmountTest(unittest.TestCase):
  def test_currency_marker_first(self):
    self.assertEqual(extract_amount('Acct debited NGN 5,000.00 at Uber'), 5000)
    self.assertEqual(extract_amount('You paid ₦585.00 to Mama Put'), 585)

  def test_labels(self):
    self.assertEqual(extract_amount('Amount: 2,500'), 2500)
    self.assertEqual(extract_amount('Txn: 750.25 ref 998877'), 750.25)
    self.assertEqual(extract_amount('paid $45.50 for lunch'), 45.5)
    self.assertEqual(extract_amount('Grand total 3,200'), 3200)

  def test_generic_patterns_are_bounded(self):
    self.assertIsNone(extract_amount('total 999999999'))
    self.assertIsNone(extract_amount('nothing to see'))


class ReceiptAmountTest(unittest.TestCase):
  def test_total_outranks_subtotal_and_fees(self):
    text = 'SHOPRITE\nTel: 08031234567\nSession ID 000012345678\nSubtotal 2,300\nVAT 200\nTotal ₦2,500'
    candidates = score_amounts(text)
    self.assertEqual([(c.value, c.kind) for c in candidates], [(2500, 'total'), (2300, 'subtotal'), (200, 'fee')])
    self.assertEqual(best_receipt_amount(text).value, 2500)

  def test_labelled_numbers_are_dropped(self):
    self.assertEqual(score_amounts('Tel: 08031234567'), [])
    self.assertEqual([c.value for c in score_amounts('SPAR LEKKI Order No 4521\nTotal 3,000')], [3000])
    self.assertEqual([c.value for c in score_amounts('Debit card **** 6789\nTotal 1,200')], [1200])

  def test_best_without_total(self):
    self.assertEqual(best_receipt_amount('Rider 08031234567\n₦1,500').value, 1500)
    self.assertIsNone(best_receipt_amount('thank you'))

  def test_phone_numbers(self):
    self.assertTrue(is_phone_number('08031234567'))
    self.assertTrue(is_phone_number('2348031234567'))
    self.assertTrue(is_phone_number('4521', 'Call: '))
    self.assertFalse(is_phone_number('08031234567', 'Amount ₦'))
    self.assertFalse(is_phone_number('5000'))

  def test_reference_numbers(self):
    self.assertTrue(is_reference_number('000012345678', 'Session ID '))
    self.assertTrue(is_reference_number('998877', 'Txn Ref: '))
    self.assertFalse(is_reference_number('5,000', 'Total '))

  def test_account_numbers(self):
    self.assertTrue(is_account_number('0123456789', 'Acct: '))
    self.assertFalse(is_account_number('0123456789'))
    self.assertFalse(is_account_number('5000', 'Acct: '))
    self.assertTrue(is_account_number('1234', 'Acct ****'))


class StatementAmountTest(unittest.TestCase):
  def test_find_amounts_in_row(self):
    self.assertEqual(find_amounts('01/03/2023\tPOS PURCHASE\t15,000.00\t250,000.00'), [15000.0, 250000.0])
    self.assertEqual(find_amounts('₦1,000.00 1,000.00 CR'), [1000.0])

  def test_dotted_dates_are_not_amounts(self):
    self.assertEqual(find_amounts('01.02.2023 transfer 1,500.00'), [1500.0])

  def test_amount_token(self):
    self.assertTrue(is_amount_token('₦15,000.00'))
    self.assertTrue(is_amount_token('15,000.00 CR'))
    self.assertFalse(is_amount_token('POS 15,000.00'))
    self.assertFalse(is_amount_token('15000'))


if __name__ == '__main__':
  unittest.main()
