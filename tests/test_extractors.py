import unittest
from datetime import date

from transactionextractor.config import RECEIPT_PROVIDERS, ExtractorConfig
from transactionextractor.extractors import (
  ExtractionContext, build_registry, detect_transaction_type, extract_bank_sms, extract_itemized_receipt,
  extract_list, extract_merchant, extract_named_receipt, extractors_for)
from transactionextractor.models import EXPENSE, INCOME, SourceType

TODAY = date(2024, 3, 15)

OPAY, MONIEPOINT, GTBANK = RECEIPT_PROVIDERS


class ListExtractorTest(unittest.TestCase):
  def setUp(self):
    self.ctx = ExtractionContext.create(today=TODAY)

  def test_description_amount(self):
    items = extract_list('Food 60k, Fuel 40k', self.ctx)
    self.assertEqual([(t.description, t.amount) for t in items], [('Food', 60000), ('Fuel', 40000)])
    self.assertEqual([t.category for t in items], ['Food & Dining', 'Transportation'])
    self.assertTrue(all(t.confidence == 75 and t.date == '2024-03-15' for t in items))

  def test_other_shapes(self):
    self.assertEqual(extract_list('Food - 5k', self.ctx)[0].amount, 5000)
    lunch = extract_list('5k for lunch', self.ctx)[0]
    self.assertEqual((lunch.description, lunch.amount), ('lunch', 5000))
    bread = extract_list('₦2,000 bread', self.ctx)[0]
    self.assertEqual((bread.description, bread.amount, bread.category), ('bread', 2000, 'Groceries'))

  def test_summary_segments_are_skipped(self):
    items = extract_list('Total 100k, Food 5k', self.ctx)
    self.assertEqual([t.description for t in items], ['Food'])

  def test_segments_without_words_are_skipped(self):
    self.assertEqual(extract_list('500 600, 700', self.ctx), [])


class NamedReceiptTest(unittest.TestCase):
  def setUp(self):
    self.ctx = ExtractionContext.create(today=TODAY)

  def test_opay_receipt(self):
    text = 'OPay\nTransfer Successful\n₦585.00\nTo: MAMA PUT RESTAURANT\n12/03/2024'
    txn, = extract_named_receipt(OPAY, text, self.ctx)
    self.assertEqual(txn.amount, 585)
    self.assertEqual(txn.merchant, 'MAMA PUT RESTAURANT')
    self.assertEqual(txn.category, 'Food & Dining')
    self.assertEqual(txn.date, '2024-03-12')
    self.assertEqual(txn.confidence, 85)
    self.assertEqual(txn.type, EXPENSE)

  def test_gtbank_credit_alert(self):
    text = ('GTBank Credit Alert\nAcct: 0123****89\nAmt: NGN 50,000.00\n'
            'Desc: Transfer from JOHN DOE\nDate: 05/03/2024')
    txn, = extract_named_receipt(GTBANK, text, self.ctx)
    self.assertEqual(txn.amount, 50000)
    self.assertEqual(txn.type, INCOME)
    self.assertEqual(txn.description, 'Transfer from JOHN DOE')
    self.assertEqual(txn.category, 'Transfer In')
    self.assertEqual(txn.date, '2024-03-05')

  def test_gtbank_reversal_is_income(self):
    text = 'GTBank Alert\nAmt: NGN 2,000.00\nDesc: POS reversal\nDate: 05/03/2024'
    txn, = extract_named_receipt(GTBANK, text, self.ctx)
    self.assertEqual(txn.type, INCOME)
    self.assertEqual(txn.category, 'Refund')

  def test_total_beats_fee(self):
    text = 'OPay\nRider Tel: 08031234567\nFee ₦10.00\nTotal ₦2,510.00'
    txn, = extract_named_receipt(OPAY, text, self.ctx)
    self.assertEqual(txn.amount, 2510)

  def test_other_provider_text_is_ignored(self):
    self.assertEqual(extract_named_receipt(MONIEPOINT, 'OPay ₦500.00', self.ctx), [])

  def test_receipt_without_amount(self):
    self.assertEqual(extract_named_receipt(OPAY, 'OPay transfer pending', self.ctx), [])


class BankSmsTest(unittest.TestCase):
  def setUp(self):
    self.ctx = ExtractionContext.create(today=TODAY)

  def test_debit_alert(self):
    text = 'Your acct 0123***789 has been debited with NGN 5,000.00 at UBER TRIP on 12/03/2024'
    txn, = extract_bank_sms(text, self.ctx)
    self.assertEqual(txn.amount, 5000)
    self.assertEqual(txn.description, 'UBER TRIP')
    self.assertEqual(txn.category, 'Transportation')
    self.assertEqual(txn.date, '2024-03-12')
    self.assertEqual(txn.confidence, 80)
    self.assertEqual(txn.type, EXPENSE)

  def test_credit_alert(self):
    text = 'Your account has been credited with NGN 20,000.00 from ADA OKAFOR on 01/03/2024'
    txn, = extract_bank_sms(text, self.ctx)
    self.assertEqual(txn.amount, 20000)
    self.assertEqual(txn.type, INCOME)
    self.assertEqual(txn.category, 'Transfer In')
    self.assertEqual(txn.date, '2024-03-01')

  def test_gate(self):
    self.assertEqual(extract_bank_sms('lunch 2500', self.ctx), [])


class ItemizedReceiptTest(unittest.TestCase):
  def setUp(self):
    self.ctx = ExtractionContext.create(today=TODAY)

  def test_line_items(self):
    text = 'SHOPRITE\nBread    1,200.00\nMilk......800.00\nRice 2 x 1500 = 3000\nTotal: 5,000.00'
    items = extract_itemized_receipt(text, self.ctx)
    self.assertEqual([(t.description, t.amount) for t in items], [('Bread', 1200), ('Milk', 800), ('Rice', 3000)])
    self.assertTrue(all(t.merchant == 'Shoprite' and t.confidence == 75 for t in items))
    self.assertTrue(all(t.category == 'Groceries' for t in items))

  def test_unmatched_items_default_to_groceries(self):
    config = ExtractorConfig(expense_keywords=(), expense_fallback_rules=())
    ctx = ExtractionContext.create(config, TODAY)
    item, = extract_itemized_receipt('SHOPRITE\nWidget    500', ctx)
    self.assertEqual(item.category, 'Groceries')

  def test_total_fallback(self):
    txn, = extract_itemized_receipt('Total: 2,500.00', self.ctx)
    self.assertEqual(txn.amount, 2500)
    self.assertEqual(txn.description, 'Supermarket Purchase')
    self.assertEqual(txn.category, 'Groceries')
    self.assertEqual(txn.confidence, 70)

  def test_gate(self):
    self.assertEqual(extract_itemized_receipt('lunch 2500', self.ctx), [])
    self.assertEqual(extract_itemized_receipt('sparkling water    500', self.ctx), [])
    self.assertEqual(extract_itemized_receipt('Uber ride total 3500', self.ctx), [])

  def test_reference_lines_are_not_items(self):
    text = 'SHOPRITE\nSession ID    1234\nBread    1,200.00\nTotal: 1,200.00'
    items = extract_itemized_receipt(text, self.ctx)
    self.assertEqual([(t.description, t.amount) for t in items], [('Bread', 1200)])

  def test_total_fallback_skips_phone_numbers(self):
    txn, = extract_itemized_receipt('Receipt\nTel: 08031234567\nSubtotal 2,300\nTotal ₦2,500', self.ctx)
    self.assertEqual(txn.amount, 2500)


class HelperTest(unittest.TestCase):
  def test_extract_merchant(self):
    self.assertEqual(extract_merchant('Paid at KFC Lekki on Monday'), 'KFC Lekki')
    self.assertEqual(extract_merchant('merchant: Hubmart'), 'Hubmart')
    self.assertIsNone(extract_merchant('nothing here'))

  def test_detect_transaction_type(self):
    self.assertEqual(detect_transaction_type('Salary payment'), INCOME)
    self.assertEqual(detect_transaction_type('Acct 0123 5,000.00 CR'), INCOME)
    self.assertEqual(detect_transaction_type('Transfer reversal'), INCOME)
    self.assertEqual(detect_transaction_type('Cashback on card'), INCOME)
    self.assertEqual(detect_transaction_type('Uber ride'), EXPENSE)

  def test_registry_order(self):
    registry = build_registry()
    self.assertEqual(
      [entry.name for entry in registry],
      ['OPay', 'Moniepoint', 'GTBank', 'bank_sms', 'list', 'itemized_receipt'],
    )
    self.assertEqual([e.name for e in extractors_for(registry, SourceType.LIST)], ['list'])


if __name__ == '__main__':
  unittest.main()
