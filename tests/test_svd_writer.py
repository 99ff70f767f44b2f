import tempfile
import unittest
import xml.etree.ElementTree as ET
from pathlib import Path

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
)
from bl808svd.svd.svd_writer import encode_device, write_svd


def _device():
    ctrl = Register(
        "CTRL",
        0x10,
        fields=(
            Field("EN", BitRange(0, 0), AccessMode.READ_WRITE, "enable"),
            Field("reserved_1_31", BitRange(31, 1)),
        ),
    )
    uart = Peripheral("UART0", 0x2000A000, [Register("STAT", 0x0), ctrl])
    dma = PeripheralArray(Peripheral("DMA", 0x2000C000), Dimension(dim=2, dim_increment=0x1000, dim_index="0,1"))
    return Device(name="BL808", version="0.1", description="Bouffalo Labs BL808", peripherals=[uart, dma])


class TestSvdWriter(unittest.TestCase):
    def setUp(self):
        self.root = ET.fromstring(encode_device(_device()))

    def test_device_metadata(self):
        self.assertEqual(self.root.tag, "device")
        self.assertEqual(self.root.get("schemaVersion"), "1.3")
        self.assertEqual(self.root.findtext("name"), "BL808")
        self.assertEqual(self.root.findtext("addressUnitBits"), "8")
        self.assertEqual(self.root.findtext("width"), "32")

    def test_peripheral(self):
        p = self.root.find("peripherals/peripheral")
        self.assertEqual(p.findtext("name"), "UART0")
        self.assertEqual(p.findtext("baseAddress"), "0x2000A000")
        self.assertEqual(p.findtext("addressBlock/size"), "0x14")
        self.assertEqual([r.findtext("name") for r in p.findall("registers/register")], ["STAT", "CTRL"])

    def test_fields(self):
        reg = self.root.findall("peripherals/peripheral/registers/register")[1]
        self.assertEqual(reg.findtext("addressOffset"), "0x10")
        en, rsvd = reg.findall("fields/field")
        self.assertEqual(en.findtext("name"), "EN")
        self.assertEqual(en.findtext("description"), "enable")
        self.assertEqual((en.findtext("bitOffset"), en.findtext("bitWidth")), ("0", "1"))
        self.assertEqual(en.findtext("access"), "read-write")
        self.assertEqual((rsvd.findtext("bitOffset"), rsvd.findtext("bitWidth")), ("1", "31"))
        self.assertIsNone(rsvd.find("access"))

    def test_array_peripheral(self):
        dma = self.root.findall("peripherals/peripheral")[1]
        self.assertEqual(dma.findtext("dim"), "2")
        self.assertEqual(dma.findtext("dimIncrement"), "0x1000")
        self.assertEqual(dma.findtext("dimIndex"), "0,1")
        self.assertIsNone(dma.find("registers"))

    def test_strict_validation(self):
        with self.assertRaises(ModelInvalid):
            encode_device(Device(name="BL808", peripherals=[Peripheral("no good", 0)]))

    def test_write_file(self):
        with tempfile.TemporaryDirectory() as d:
            out = Path(d) / "out.svd"
            write_svd(_device(), out)
            text = out.read_text(encoding="utf-8")
        self.assertTrue(text.startswith("<?xml"))
        self.assertEqual(ET.fromstring(text.split("\n", 1)[1]).findtext("name"), "BL808")


if __name__ == "__main__":
    unittest.main()
