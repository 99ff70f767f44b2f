import unittest

from bl808svd.errors import ModelInvalid
from bl808svd.svd.model import (
    AccessMode,
    BitRange,
    Device,
    Dimension,
    Field,
    Peripheral,
    PeripheralArray,
    Register,
    ValidateLevel,
)


class TestBitRange(unittest.TestCase):
    def test_width_and_offset(self):
        b = BitRange.from_msb_lsb(7, 4)
        self.assertEqual(b.width, 4)
        self.assertEqual(b.offset, 4)
        self.assertEqual(str(b), "[7:4]")

    def test_single_bit(self):
        b = BitRange.from_msb_lsb(0, 0)
        self.assertEqual((b.width, b.offset), (1, 0))

    def test_overlaps(self):
        self.assertTrue(BitRange(7, 4).overlaps(BitRange(4, 0)))
        self.assertFalse(BitRange(7, 4).overlaps(BitRange(3, 0)))


class TestValidation(unittest.TestCase):
    def test_weak_keeps_inverted_range(self):
        f = Field("x", BitRange(msb=0, lsb=3)).validate(ValidateLevel.WEAK)
        self.assertEqual((f.bits.msb, f.bits.lsb), (0, 3))

    def test_strict_rejects_inverted_range(self):
        with self.assertRaises(ModelInvalid):
            Field("x", BitRange(msb=0, lsb=3)).validate(ValidateLevel.STRICT)

    def test_strict_rejects_unnamed_field(self):
        with self.assertRaises(ModelInvalid):
            Field("", BitRange(1, 0)).validate(ValidateLevel.STRICT)

    def test_strict_register_checks_fields(self):
        r = Register("r", 0, fields=(Field("x", BitRange(msb=0, lsb=3)),))
        r.validate(ValidateLevel.WEAK)
        with self.assertRaises(ModelInvalid):
            r.validate(ValidateLevel.STRICT)

    def test_strict_peripheral_name(self):
        Peripheral("", 0).validate(ValidateLevel.WEAK)
        with self.assertRaises(ModelInvalid):
            Peripheral("", 0).validate(ValidateLevel.STRICT)
        with self.assertRaises(ModelInvalid):
            Peripheral("bad name", 0).validate(ValidateLevel.STRICT)
        Peripheral("pSRAM", 0).validate(ValidateLevel.STRICT)

    def test_strict_device(self):
        dev = Device(name="BL808", peripherals=[Peripheral("", 0)])
        with self.assertRaises(ModelInvalid):
            dev.validate(ValidateLevel.STRICT)

    def test_strict_array_dim(self):
        arr = PeripheralArray(Peripheral("DMA", 0), Dimension(dim=0, dim_increment=0x1000))
        with self.assertRaises(ModelInvalid):
            arr.validate(ValidateLevel.STRICT)


class TestOverlaps(unittest.TestCase):
    def test_overlapping_fields_detected(self):
        a = Field("a", BitRange(7, 0), AccessMode.READ_WRITE)
        b = Field("b", BitRange(4, 4), AccessMode.READ_ONLY)
        c = Field("c", BitRange(15, 8))
        r = Register("r", 0, fields=(a, b, c))
        self.assertEqual(r.overlapping_fields(), [(a, b)])

    def test_no_overlap(self):
        r = Register("r", 0, fields=(Field("a", BitRange(3, 0)), Field("b", BitRange(7, 4))))
        self.assertEqual(r.overlapping_fields(), [])


class TestAccessMode(unittest.TestCase):
    def test_svd_names(self):
        self.assertEqual(AccessMode.READ_ONLY.svd_name, "read-only")
        self.assertEqual(AccessMode.WRITE_ONCE.svd_name, "writeOnce")
        self.assertIsNone(AccessMode.UNSPECIFIED.svd_name)


if __name__ == "__main__":
    unittest.main()
