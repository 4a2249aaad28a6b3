import unittest
from unittest.mock import Mock, patch

from vc_history_reader.process.charset import decode_output, detect_charset
from vc_history_reader.process.config import DEFAULT_CONFIG


RUSSIAN_TEXT = (
    "Исправлена ошибка при чтении истории изменений. "
    "Добавлена поддержка переименованных файлов и новых авторов.\n"
) * 20


class TestCharset(unittest.TestCase):
    def test_detects_utf8_when_default_differs(self) -> None:
        data = RUSSIAN_TEXT.encode("utf-8")
        config = DEFAULT_CONFIG.with_output_charset("latin-1").with_charset_auto_detect(True)
        config = config.with_max_charset_sample_size(len(data))

        decoded = decode_output(data, config)

        self.assertEqual(decoded, RUSSIAN_TEXT)
        self.assertNotIn("�", decoded)

    def test_without_auto_detect_uses_configured_charset(self) -> None:
        data = "café".encode("latin-1")
        config = DEFAULT_CONFIG.with_output_charset("latin-1")

        self.assertEqual(decode_output(data, config), "café")

    def test_empty_bytes_fall_back_to_default(self) -> None:
        config = DEFAULT_CONFIG.with_charset_auto_detect(True)

        self.assertIsNone(detect_charset(b"", 100))
        self.assertEqual(decode_output(b"", config), "")

    def test_inconclusive_detection_falls_back_to_default(self) -> None:
        matches = Mock()
        matches.best.return_value = None
        config = DEFAULT_CONFIG.with_output_charset("latin-1").with_charset_auto_detect(True)

        with patch("vc_history_reader.process.charset.from_bytes", return_value=matches):
            decoded = decode_output("naïve".encode("latin-1"), config)

        self.assertEqual(decoded, "naïve")

    def test_detection_only_sees_the_sample(self) -> None:
        seen = []

        def fake_from_bytes(sample):
            seen.append(sample)
            return Mock(best=Mock(return_value=None))

        with patch("vc_history_reader.process.charset.from_bytes", side_effect=fake_from_bytes):
            detect_charset(b"x" * 100, 10)

        self.assertEqual(seen, [b"x" * 10])

    def test_undecodable_bytes_are_replaced(self) -> None:
        decoded = decode_output(b"ok \xff\xfe", DEFAULT_CONFIG)
        self.assertTrue(decoded.startswith("ok "))


if __name__ == "__main__":
    unittest.main()
