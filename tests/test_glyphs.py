import unittest

from transactionextractor.glyphs import Glyph, group_rows, reconstruct_rows


class GroupRowsTest(unittest.TestCase):
  def test_rows_are_ordered_top_down_and_left_right(self):
    glyphs = [
      Glyph('2,500.00', 300, 680, 1),
      Glyph('UBER', 120, 680, 1),
      Glyph('01/03/2023', 10, 700, 1),
      Glyph('SHOPRITE', 120, 700, 1),
    ]
    self.assertEqual(reconstruct_rows(glyphs), ['01/03/2023\tSHOPRITE', 'UBER\t2,500.00'])

  def test_tolerance_boundary(self):
    same = [Glyph('a', 10, 700, 1), Glyph('b', 20, 695, 1)]
    split = [Glyph('a', 10, 700, 1), Glyph('b', 20, 694, 1)]
    self.assertEqual(len(group_rows(same)), 1)
    self.assertEqual(len(group_rows(split)), 2)

  def test_row_is_anchored_on_its_first_glyph(self):
    glyphs = [Glyph('a', 10, 700, 1), Glyph('b', 20, 696, 1), Glyph('c', 30, 692, 1)]
    rows = group_rows(glyphs)
    self.assertEqual([[g.text for g in row] for row in rows], [['a', 'b'], ['c']])

  def test_pages_never_share_a_row(self):
    glyphs = [Glyph('second', 10, 700, 2), Glyph('first', 10, 700, 1)]
    self.assertEqual(reconstruct_rows(glyphs), ['first', 'second'])

  def test_blank_glyphs_are_dropped(self):
    glyphs = [Glyph('  ', 10, 700, 1), Glyph('', 20, 700, 1), Glyph('x', 30, 700, 1)]
    self.assertEqual(reconstruct_rows(glyphs), ['x'])
    self.assertEqual(reconstruct_rows([]), [])

  def test_custom_separator(self):
    glyphs = [Glyph('a', 10, 700, 1), Glyph('b', 20, 700, 1)]
    self.assertEqual(reconstruct_rows(glyphs, separator=' | '), ['a | b'])


if __name__ == '__main__':
  unittest.main()
