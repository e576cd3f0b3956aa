"""Command-line runner for Clinical Chart Audit.

Audits a chart PDF (or an already-extracted text file) and prints a
summary of the findings and the communications they produce.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from pypdf.errors import PdfReadError

from .config import config
from .models import AuditInputError, AuditResult
from .pdf_text import extract_pdf_text
from .service import AuditService

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def read_document(path: Path) -> str:
    """Text of a .pdf or plain-text chart."""
    if path.suffix.lower() == ".pdf":
        return extract_pdf_text(path)
    return path.read_text(encoding="utf-8")


def print_summary(result: AuditResult, audit_id: str | None = None) -> None:
    """Print a human-readable audit summary."""
    patient = result.patient
    print(f"\nArchivo: {result.file_name}")
    if audit_id:
        print(f"Auditoría: {audit_id}")
    print(f"Paciente: {patient.name or '-'} (DNI {patient.national_id or '-'})")
    print(f"Obra social: {patient.insurer or '-'}  Habitación: {patient.room or '-'}")
    discharge = result.period.discharge.isoformat() if result.period.discharge else "internado"
    print(f"Ingreso: {result.period.admission.isoformat()}  Alta: {discharge}")
    print(f"Días de hospitalización: {result.period.day_count}")
    print(f"Estado: {result.status.value} ({result.total_errors} error(es))")

    for detail in result.error_details():
        print(f"  [{detail['tipo']}] {detail['descripcion']}")

    if result.communications:
        print("\nComunicaciones:")
        for i, comm in enumerate(result.communications):
            print(f"  {i}. [{comm.urgency.value}] {comm.sector} - {comm.motive} ({comm.responsible})")


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Audit a medical-record PDF and route the findings."
    )
    parser.add_argument(
        "document",
        type=Path,
        help="Chart to audit (.pdf or extracted .txt)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the full audit result as JSON",
    )
    parser.add_argument(
        "--save",
        action="store_true",
        help=f"Persist the result to the audit store ({config.AUDIT_DB_PATH})",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args()
    setup_logging(args.verbose)

    if not args.document.exists():
        logger.error(f"File not found: {args.document}")
        return 1

    try:
        text = read_document(args.document)
    except (PdfReadError, UnicodeDecodeError) as e:
        logger.error(f"Cannot read {args.document.name}: {e}")
        return 2

    try:
        processed = AuditService().process(text, args.document.name, save=args.save)
    except AuditInputError as e:
        logger.error(f"Cannot audit {args.document.name}: {e}")
        return 2

    if args.json:
        print(json.dumps(processed.to_dict(), ensure_ascii=False, indent=2))
    else:
        print_summary(processed.result, processed.audit_id)

    return 0


if __name__ == "__main__":
    sys.exit(main())
