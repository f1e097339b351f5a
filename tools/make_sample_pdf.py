from __future__ import annotations

import logging
import sys
from pathlib import Path

# Ensure project root is on sys.path when running this script directly
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from invoicepdf.pdf.invoice_generator import Invoice

# Generates the two-item sample invoice for README/demo purposes.

SAMPLE = {
    "title": "Invoice No. 1",
    "beforeInfo": [
        "<b>Date:</b>",
        "June 10, 2021",
    ],
    "afterInfo": [
        "All prices in EUR.",
        "",
        "This invoice is due on <b>June 20, 2021</b>.",
    ],
    "clientAddress": [
        "Jane Doe",
        "Example Street 42",
        "1337 Demo City",
    ],
    "entries": [
        {"description": "Hot air", "quantity": 11, "price": 8},
        {"description": "Something cool", "quantity": 5, "price": 20},
    ],
}


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    out_dir = ROOT / "samples"
    language = sys.argv[1] if len(sys.argv) > 1 else "en"

    invoice = Invoice(SAMPLE)
    invoice.set_language(language)
    template = ROOT / "assets" / "template.pdf"
    if template.exists():
        invoice.set_template(template)
    out_pdf = out_dir / f"sample-{language}.pdf"
    invoice.generate(out_pdf)
    print(f"Sample invoice generated: {out_pdf}")


if __name__ == "__main__":
    main()
