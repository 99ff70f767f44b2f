import unittest

from bl808svd.core.catalog import default_catalog, load_catalog_text
from bl808svd.errors import CatalogError

SAMPLE = """
device:
  name: TESTCHIP
  version: "1.2"
header_folders:
  - sdk/regs/
doc_trees:
  en: docs/en
peripherals:
  - name: GLB
    base_address: 0x20000000
    sources:
      - header: glb_reg.h
  - name: UART0
    base_address: "0x2000A000"
    sources:
      - doc: uart_register.rst
  - name: IR
    sources:
      - {doc: ir_register.rst, lang: zh_CN}
"""


class TestCatalog(unittest.TestCase):
    def test_load(self):
        cat = load_catalog_text(SAMPLE)
        self.assertEqual(cat.device.name, "TESTCHIP")
        self.assertEqual(cat.device.version, "1.2")
        self.assertEqual(cat.device.width, 32)
        self.assertEqual(cat.header_folders, ("sdk/regs/",))
        self.assertEqual(cat.doc_trees, {"en": "docs/en"})
        self.assertEqual([e.name for e in cat.peripherals], ["GLB", "UART0", "IR"])

    def test_entries(self):
        glb, uart, ir = load_catalog_text(SAMPLE).peripherals
        self.assertEqual(glb.base_address, 0x20000000)
        self.assertEqual(glb.sources[0].kind, "header")
        self.assertEqual(uart.base_address, 0x2000A000)
        self.assertIsNone(ir.base_address)
        self.assertEqual((ir.sources[0].kind, ir.sources[0].lang), ("doc", "zh_CN"))
        self.assertEqual(uart.sources[0].lang, "en")

    def test_header_needs_base(self):
        with self.assertRaises(CatalogError):
            load_catalog_text("peripherals:\n  - name: X\n    sources: [{header: x_reg.h}]\n")

    def test_source_needs_one_kind(self):
        with self.assertRaises(CatalogError):
            load_catalog_text("peripherals:\n  - name: X\n    sources: [{header: a.h, doc: b.rst}]\n")

    def test_entry_needs_sources(self):
        with self.assertRaises(CatalogError):
            load_catalog_text("peripherals:\n  - name: X\n    base_address: 0x0\n")

    def test_duplicate_names(self):
        text = "peripherals:\n" + "  - name: X\n    sources: [{doc: x.rst}]\n" * 2
        with self.assertRaises(CatalogError):
            load_catalog_text(text)

    def test_bad_yaml(self):
        with self.assertRaises(CatalogError):
            load_catalog_text("peripherals: [\n", filename="broken.yaml")

    def test_not_a_mapping(self):
        with self.assertRaises(CatalogError):
            load_catalog_text("- just\n- a list\n")

    def test_builtin_catalog(self):
        cat = default_catalog()
        self.assertEqual(cat.device.name, "BL808")
        names = [e.name for e in cat.peripherals]
        self.assertIn("GLB", names)
        dsp2 = next(e for e in cat.peripherals if e.name == "DSP2")
        self.assertEqual(dsp2.base_address, 0x30011000)
        self.assertEqual(dsp2.sources[0].filename, "dsp2_tg_reg.h")
        self.assertGreater(len(dsp2.sources), 1)


if __name__ == "__main__":
    unittest.main()
