import unittest

from telerun.interfaces.telegram.commands import (
    ADD_USAGE,
    MAX_SQL_INTEGER,
    parse_add,
    parse_delete,
    parse_edit,
    parse_list,
)


class CommandParsingTests(unittest.TestCase):
    def test_parse_add(self):
        self.assertEqual(parse_add("/add 5.2"), 5.2)
        self.assertEqual(parse_add("/add@telerun_bot 10"), 10.0)

    def test_parse_add_rejects_bad_input(self):
        for text in ("/add", "/add five", "/add -3", "/add nan", "/add 1 2"):
            with self.subTest(text=text):
                with self.assertRaises(ValueError):
                    parse_add(text)

    def test_parse_add_usage_message(self):
        with self.assertRaises(ValueError) as cm:
            parse_add("/add")
        self.assertEqual(str(cm.exception), ADD_USAGE)

    def test_parse_edit(self):
        self.assertEqual(parse_edit("/edit 12 3.5"), (12, 3.5))
        with self.assertRaises(ValueError):
            parse_edit("/edit 12")
        with self.assertRaises(ValueError):
            parse_edit("/edit abc 3")

    def test_parse_delete(self):
        self.assertEqual(parse_delete("/delete 4"), 4)
        with self.assertRaises(ValueError):
            parse_delete("/delete 0")

    def test_ids_and_limits_beyond_64_bits_are_rejected(self):
        huge = "99999999999999999999"
        for parse, text in (
            (parse_delete, f"/delete {huge}"),
            (parse_edit, f"/edit {huge} 5"),
            (parse_list, f"/list {huge}"),
        ):
            with self.subTest(text=text):
                with self.assertRaises(ValueError):
                    parse(text)

    def test_largest_sql_integer_is_accepted(self):
        self.assertEqual(parse_delete(f"/delete {MAX_SQL_INTEGER}"), MAX_SQL_INTEGER)
        self.assertEqual(parse_list(f"/list {MAX_SQL_INTEGER}"), MAX_SQL_INTEGER)

    def test_parse_list(self):
        self.assertEqual(parse_list("/list 5"), 5)
        with self.assertRaises(ValueError):
            parse_list("/list -1")
        with self.assertRaises(ValueError):
            parse_list("/list")


if __name__ == "__main__":
    unittest.main()
