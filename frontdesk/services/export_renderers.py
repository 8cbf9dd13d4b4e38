"""
Compliance document renderers: tabular PDF, guest register PDF, CSV and the
ID image archive. All functions are synchronous and work on records that have
already been validated and fetched.
"""
import csv
import io
import logging
import re
from datetime import date, datetime
from typing import Dict, List, Optional, Tuple

import pyzipper
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.lib.utils import ImageReader
from reportlab.platypus import Image, KeepTogether, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from frontdesk.config.settings import settings
from frontdesk.models.compliance import GuestRecord
from frontdesk.utils.helpers import to_local

logger = logging.getLogger(__name__)

IMAGE_UNAVAILABLE = "(image unavailable)"

ImagePair = Tuple[Optional[bytes], Optional[bytes]]

BROWN = colors.Color(139 / 255, 69 / 255, 19 / 255)
BEIGE = colors.Color(245 / 255, 245 / 255, 220 / 255)

HEADER_STYLE = TableStyle([
    ("BACKGROUND", (0, 0), (-1, 0), BROWN),
    ("TEXTCOLOR",  (0, 0), (-1, 0), colors.white),
    ("FONTNAME",   (0, 0), (-1, 0), "Helvetica-Bold"),
    ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, BEIGE]),
    ("GRID",       (0, 0), (-1, -1), 0.5, colors.grey),
    ("FONTSIZE",   (0, 0), (-1, -1), 8),
])

def _fmt(value: datetime, pattern: str) -> str:
    return to_local(value).strftime(pattern)

def _period(start: date, end: date) -> str:
    return f"{start.strftime('%b %d, %Y')} - {end.strftime('%b %d, %Y')}"

def _footer(label: str):
    def draw(canvas, doc):
        canvas.saveState()
        canvas.setFont("Helvetica", 8)
        canvas.setFillColor(colors.grey)
        canvas.drawCentredString(
            A4[0] / 2, 1 * cm, f"Page {doc.page} | {label} | {settings.LODGE_NAME.title()} - Confidential"
        )
        canvas.restoreState()
    return draw

def _heading(title: str, period: str, generated_at: datetime) -> list:
    styles = getSampleStyleSheet()
    return [
        Paragraph(f"<b>{settings.LODGE_NAME}</b>", styles["Title"]),
        Paragraph(settings.LODGE_ADDRESS, styles["Normal"]),
        Spacer(1, 0.3 * cm),
        Paragraph(f"<b>{title}</b>", styles["Heading2"]),
        Paragraph(f"Report Period: {period}", styles["Normal"]),
        Paragraph(f"Generated on: {_fmt(generated_at, '%b %d, %Y %I:%M %p')}", styles["Normal"]),
        Spacer(1, 0.5 * cm),
    ]

def render_tabular_pdf(records: List[GuestRecord], start: date, end: date, generated_at: datetime) -> bytes:
    """One row per guest; no ID images"""
    stream = io.BytesIO()
    doc = SimpleDocTemplate(stream, pagesize=A4, title="Police Verification Report")
    styles = getSampleStyleSheet()
    elems = _heading("POLICE VERIFICATION REPORT", _period(start, end), generated_at)
    elems.append(Paragraph(f"Total Guests: {len(records)}", styles["Normal"]))
    elems.append(Spacer(1, 0.3 * cm))

    headers = ["#", "Room", "Guest Name", "Phone", "ID Type", "ID Number", "Check-in", "Check-out"]
    table_data = [headers] + [
        [
            str(index), r.room_number, r.guest_name, r.phone, r.id_type, r.id_number,
            _fmt(r.check_in, "%d/%m/%y %H:%M"), _fmt(r.check_out, "%d/%m/%y %H:%M"),
        ]
        for index, r in enumerate(records, start=1)
    ]
    t = Table(table_data, repeatRows=1)
    t.setStyle(HEADER_STYLE)
    elems.append(t)

    footer = _footer(f"Generated: {_fmt(generated_at, '%b %d, %Y')}")
    doc.build(elems, onFirstPage=footer, onLaterPages=footer)
    return stream.getvalue()

def _image_flowable(data: Optional[bytes], max_width: float = 7.5 * cm):
    """Scaled image, or the placeholder text when the bytes cannot be decoded"""
    styles = getSampleStyleSheet()
    if not data:
        return Paragraph(f"<i>{IMAGE_UNAVAILABLE}</i>", styles["Normal"])
    try:
        width, height = ImageReader(io.BytesIO(data)).getSize()
    except Exception as e:
        logger.warning("Could not decode ID image: %s", e)
        return Paragraph(f"<i>{IMAGE_UNAVAILABLE}</i>", styles["Normal"])
    scale = min(1.0, max_width / float(width))
    return Image(io.BytesIO(data), width=width * scale, height=height * scale)

def render_detailed_pdf(
    records: List[GuestRecord],
    start: date,
    end: date,
    generated_at: datetime,
    images: Optional[Dict[str, ImagePair]] = None,
) -> bytes:
    """Guest register: one block per guest, with ID images when ``images`` is given"""
    stream = io.BytesIO()
    doc = SimpleDocTemplate(stream, pagesize=A4, title="Detailed Guest Register")
    styles = getSampleStyleSheet()
    elems = _heading("DETAILED GUEST REGISTER", _period(start, end), generated_at)

    for index, record in enumerate(records, start=1):
        banner = Table(
            [[f"Guest #{index}: {record.guest_name}", f"Room: {record.room_number}"]],
            colWidths=[12 * cm, 5 * cm],
        )
        banner.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, -1), BROWN),
            ("TEXTCOLOR",  (0, 0), (-1, -1), colors.white),
            ("FONTNAME",   (0, 0), (-1, -1), "Helvetica-Bold"),
            ("ALIGN",      (1, 0), (1, 0), "RIGHT"),
        ]))

        details = [
            ["Phone:", record.phone],
            ["ID Type:", record.id_type],
            ["ID Number:", record.id_number],
            ["Check-in:", _fmt(record.check_in, "%b %d, %Y %I:%M %p")],
            ["Check-out:", _fmt(record.check_out, "%b %d, %Y %I:%M %p")],
        ]
        if record.address:
            details.append(["Address:", record.address])
        if record.additional_guests:
            details.append(["Accompanying:", str(record.additional_guests)])
        detail_table = Table(details, colWidths=[3 * cm, 14 * cm])
        detail_table.setStyle(TableStyle([
            ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
            ("FONTSIZE", (0, 0), (-1, -1), 9),
        ]))

        block = [banner, Spacer(1, 0.2 * cm), detail_table]
        if images is not None:
            front, back = images.get(record.booking_id, (None, None))
            image_table = Table(
                [["ID Front:", "ID Back:"], [_image_flowable(front), _image_flowable(back)]],
                colWidths=[8.5 * cm, 8.5 * cm],
            )
            image_table.setStyle(TableStyle([
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("VALIGN",   (0, 1), (-1, 1), "TOP"),
            ]))
            block += [Spacer(1, 0.2 * cm), image_table]
        elems.append(KeepTogether(block))
        elems.append(Spacer(1, 0.6 * cm))

    footer = _footer(f"Generated: {_fmt(generated_at, '%b %d, %Y %I:%M %p')}")
    doc.build(elems, onFirstPage=footer, onLaterPages=footer)
    return stream.getvalue()

CSV_HEADERS = [
    "S.No",
    "Room Number",
    "Guest Name",
    "Phone",
    "ID Type",
    "ID Number",
    "Address",
    "Check-in Date",
    "Check-in Time",
    "Check-out Date",
    "Check-out Time",
    "Additional Guests",
]

def render_csv(records: List[GuestRecord]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for index, r in enumerate(records, start=1):
        writer.writerow([
            index,
            r.room_number,
            r.guest_name,
            r.phone,
            r.id_type,
            r.id_number,
            r.address or "",
            _fmt(r.check_in, "%d/%m/%Y"),
            _fmt(r.check_in, "%H:%M"),
            _fmt(r.check_out, "%d/%m/%Y"),
            _fmt(r.check_out, "%H:%M"),
            r.additional_guests,
        ])
    return buffer.getvalue()

def _safe_name(value: str) -> str:
    return re.sub(r"[^A-Za-z0-9]+", "_", value).strip("_") or "guest"

def _extension(reference: Optional[str], data: bytes) -> str:
    if data.startswith(b"\x89PNG"):
        return "png"
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "webp"
    if reference and not reference.startswith("data:") and "." in reference.rsplit("/", 1)[-1]:
        return reference.rsplit(".", 1)[-1].lower()
    return "jpg"

def render_archive(records: List[GuestRecord], images: Dict[str, ImagePair], password: Optional[str] = None) -> bytes:
    """ZIP with one folder per room and both ID images of each selected guest.

    When ``password`` is set the entries are AES encrypted.
    """
    stream = io.BytesIO()
    options = {"encryption": pyzipper.WZ_AES} if password else {}
    with pyzipper.AESZipFile(stream, "w", compression=pyzipper.ZIP_DEFLATED, **options) as archive:
        if password:
            archive.setpassword(password.encode("utf-8"))
        for record in records:
            folder = f"Room_{_safe_name(record.room_number)}"
            stem = f"{_safe_name(record.guest_name)}_{record.booking_id[-6:]}"
            front, back = images.get(record.booking_id, (None, None))
            for side, data, reference in (
                ("front", front, record.id_front_image),
                ("back", back, record.id_back_image),
            ):
                if data:
                    archive.writestr(f"{folder}/{stem}_{side}.{_extension(reference, data)}", data)
                else:
                    archive.writestr(f"{folder}/{stem}_{side}_unavailable.txt", IMAGE_UNAVAILABLE)
    return stream.getvalue()
