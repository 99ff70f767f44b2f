import io
import shutil
import tempfile
import unittest
import xml.etree.ElementTree as ET
from contextlib import redirect_stdout
from pathlib import Path

from bl808svd.app import run_app

DATA = Path(__file__).parent / "data"

CATALOG = """
device: {name: BL808, description: test run}
header_folders: [regs/]
doc_trees: {en: rst}
peripherals:
  - name: GLB
    base_address: 0x20000000
    sources: [{header: glb_reg.h}]
  - name: UART0
    sources: [{doc: uart_register.rst}]
  - name: GONE
    sources: [{doc: gone_register.rst}]
"""


class TestApp(unittest.TestCase):
    def test_run_app_writes_svd_and_report(self):
        with tempfile.TemporaryDirectory() as d:
            root = Path(d)
            (root / "regs").mkdir()
            (root / "rst").mkdir()
            shutil.copy(DATA / "glb_reg.h", root / "regs")
            shutil.copy(DATA / "uart_register.rst", root / "rst")
            catalog = root / "catalog.yaml"
            catalog.write_text(CATALOG)
            out = root / "out.svd"

            buf = io.StringIO()
            with redirect_stdout(buf):
                result = run_app(
                    catalog_path=catalog,
                    root=root,
                    output=out,
                    jobs=2,
                    log_level="ERROR",
                    quiet=True,
                )

            tree = ET.parse(out)

        self.assertEqual(len(result.failures), 1)
        self.assertEqual(
            buf.getvalue().splitlines(),
            [f"GLB,{0x20000000},{0x200002FC}", f"UART0,{0x2000A000},{0x2000A030}"],
        )
        names = [p.findtext("name") for p in tree.getroot().findall("peripherals/peripheral")]
        self.assertEqual(names, ["GLB", "UART0"])


if __name__ == "__main__":
    unittest.main()
