import unittest

from transactionextractor.dedup import deduplicate
from transactionextractor.models import ParsedTransaction


def _txn(amount, description, day='2023-03-01', confidence=80):
  return ParsedTransaction(amount, description, 'Other', day, confidence)


class DeduplicateTest(unittest.TestCase):
  def test_amounts_within_a_cent_collapse(self):
    kept = deduplicate([_txn(100.00, 'UBER TRIP'), _txn(100.005, 'UBER TRIP')])
    self.assertEqual(len(kept), 1)

  def test_description_prefix_decides(self):
    kept = deduplicate([
      _txn(500, 'POS PURCHASE SHOPRITE IKEJA'),
      _txn(500, 'POS PURCHASE SHOPRITE LEKKI'),
      _txn(500, 'ATM WITHDRAWAL'),
    ])
    self.assertEqual([t.description for t in kept], ['POS PURCHASE SHOPRITE IKEJA', 'ATM WITHDRAWAL'])

  def test_different_dates_are_kept(self):
    kept = deduplicate([_txn(500, 'UBER'), _txn(500, 'UBER', day='2023-03-02')])
    self.assertEqual(len(kept), 2)

  def test_keeps_first_and_is_idempotent(self):
    txns = [_txn(100, 'UBER', confidence=60), _txn(100, 'UBER', confidence=90), _txn(200, 'BOLT')]
    once = deduplicate(txns)
    self.assertEqual(once[0].confidence, 60)
    self.assertEqual(deduplicate(once), once)


if __name__ == '__main__':
  unittest.main()
