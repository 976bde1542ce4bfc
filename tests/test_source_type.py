import unittest

from transactionextractor.classifier import classify_source, split_segments
from transactionextractor.models import SourceType


class ClassifySourceTest(unittest.TestCase):
  def test_empty_is_unknown(self):
    self.assertEqual(classify_source(''), SourceType.UNKNOWN)
    self.assertEqual(classify_source('   \n '), SourceType.UNKNOWN)

  def test_named_receipt(self):
    self.assertEqual(classify_source('OPay Transfer ₦585.00'), SourceType.NAMED_RECEIPT)

  def test_named_receipt_beats_bank_sms(self):
    text = 'GTBank: Acct 0123 debited NGN 2,000.00'
    self.assertEqual(classify_source(text), SourceType.NAMED_RECEIPT)

  def test_itemized_receipt(self):
    self.assertEqual(classify_source('SHOPRITE\nBread   500'), SourceType.ITEMIZED_RECEIPT)
    self.assertEqual(classify_source('Receipt\nTotal: 500'), SourceType.ITEMIZED_RECEIPT)

  def test_retail_names_need_word_boundaries(self):
    self.assertEqual(classify_source('spare parts 500, tyres 200'), SourceType.LIST)

  def test_bank_sms(self):
    self.assertEqual(classify_source('Acct 123 debited NGN 5,000.00'), SourceType.BANK_SMS)

  def test_list(self):
    self.assertEqual(classify_source('Food 60k, Fuel 40k'), SourceType.LIST)
    self.assertEqual(classify_source('rice 2000\nbeans 1500'), SourceType.LIST)

  def test_single(self):
    self.assertEqual(classify_source('lunch 2500'), SourceType.SINGLE)


class SplitSegmentsTest(unittest.TestCase):
  def test_thousands_commas_do_not_split(self):
    self.assertEqual(
      split_segments('Rice 1,500, Beans 2,000; Oil 900\nSalt 100'),
      ['Rice 1,500', 'Beans 2,000', 'Oil 900', 'Salt 100'],
    )

  def test_blank_segments_are_dropped(self):
    self.assertEqual(split_segments('a,,\n\n;b'), ['a', 'b'])
    self.assertEqual(split_segments(None), [])


if __name__ == '__main__':
  unittest.main()
