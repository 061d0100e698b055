from app.pdf.sizing import BYTES_PER_MB, exceeds, format_mb, size_mb


class TestSizeMb:
    def test_empty_buffer_is_zero(self) -> None:
        assert size_mb(b"") == 0.0

    def test_one_megabyte(self) -> None:
        assert size_mb(b"x" * BYTES_PER_MB) == 1.0

    def test_fractional_size(self) -> None:
        assert size_mb(b"x" * (BYTES_PER_MB // 2)) == 0.5


class TestExceeds:
    def test_equal_to_limit_does_not_exceed(self) -> None:
        assert exceeds(b"x" * BYTES_PER_MB, 1.0) is False

    def test_one_byte_over_limit_exceeds(self) -> None:
        assert exceeds(b"x" * (BYTES_PER_MB + 1), 1.0) is True


class TestFormatMb:
    def test_two_decimal_precision(self) -> None:
        assert format_mb(45) == "45.00 MB"
        assert format_mb(60.004) == "60.00 MB"
